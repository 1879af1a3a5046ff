import threading
from typing import Optional

from loguru import logger

from tasktracker.errors import AuthFailure, ValidationError
from tasktracker.store import USERS
from tasktracker.utils.auth import burn_verify, hash_password, verify_password


def _scrub(user: dict) -> dict:
    return {k: v for k, v in user.items() if k != "passwordHash"}


class UserRegistry:
    """Owns the user collection: registration and credential checks."""

    def __init__(self, store, counters):
        self._store = store
        self._counters = counters
        self._lock = threading.Lock()
        self._users = store.load(USERS, [])

    def register(self, name: str, email: str, raw_password: str) -> dict:
        # hashing has no shared state; a failure raises before anything is stored
        password_hash = hash_password(raw_password)

        with self._lock:
            if self._find_by_email(email) is not None:
                raise ValidationError("Email already exists")
            user = {
                "id": self._counters.next_user_id(),
                "name": name,
                "email": email,
                "passwordHash": password_hash,
            }
            self._users.append(user)
            self._store.save(USERS, self._users)

        logger.info(f"registered user id={user['id']}")
        return _scrub(user)

    def verify(self, email: str, raw_password: str) -> dict:
        with self._lock:
            user = self._find_by_email(email)
            user = dict(user) if user is not None else None

        if user is None:
            matched = burn_verify(raw_password)
        else:
            matched = verify_password(raw_password, user.get("passwordHash"))
        if not matched:
            logger.warning("login rejected: invalid credentials")
            raise AuthFailure()
        return _scrub(user)

    def get(self, user_id: int) -> Optional[dict]:
        with self._lock:
            for user in self._users:
                if user["id"] == user_id:
                    return _scrub(user)
        return None

    def _find_by_email(self, email: str) -> Optional[dict]:
        key = email.strip().lower()
        for user in self._users:
            if str(user.get("email", "")).lower() == key:
                return user
        return None
