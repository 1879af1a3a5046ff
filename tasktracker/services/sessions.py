import threading
from datetime import datetime, timedelta, timezone

from loguru import logger

import tasktracker.config as _cfg
from tasktracker.errors import Unauthenticated
from tasktracker.store import SESSIONS
from tasktracker.utils.auth import create_token


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _created_at(session: dict) -> datetime:
    created = datetime.fromisoformat(session["createdAt"])
    if created.tzinfo is None:
        created = created.replace(tzinfo=timezone.utc)
    return created


class SessionManager:
    """Issues and validates opaque bearer tokens.

    Expired sessions are evicted lazily on every ``validate`` call; swap
    ``prune_expired`` onto a timer to sweep in the background instead.
    """

    def __init__(self, store, users, ttl=None, clock=utcnow):
        self._store = store
        self._users = users
        self._lock = threading.Lock()
        self._sessions = store.load(SESSIONS, [])
        if ttl is None:
            ttl = timedelta(hours=_cfg.SESSION_TTL_HOURS)
        self.ttl = ttl
        self.clock = clock

    def login(self, email: str, raw_password: str) -> dict:
        user = self._users.verify(email, raw_password)
        session = {
            "userId": user["id"],
            "token": create_token(),
            "createdAt": self.clock().isoformat(),
            "displayName": user["name"],
        }
        with self._lock:
            self._sessions.append(session)
            self._store.save(SESSIONS, self._sessions)

        logger.info(f"session opened for user id={user['id']}")
        return dict(session)

    def validate(self, token: str) -> dict:
        with self._lock:
            self._prune_locked()
            for session in self._sessions:
                if session.get("token") == token:
                    return dict(session)
        raise Unauthenticated("Invalid or expired session")

    def prune_expired(self) -> int:
        with self._lock:
            return self._prune_locked()

    def _prune_locked(self) -> int:
        now = self.clock()
        alive = [s for s in self._sessions if self._is_alive(s, now)]
        evicted = len(self._sessions) - len(alive)
        if evicted:
            self._sessions = alive
            self._store.save(SESSIONS, self._sessions)
            logger.info(f"evicted {evicted} expired session(s)")
        return evicted

    def _is_alive(self, session: dict, now: datetime) -> bool:
        if not isinstance(session, dict):
            logger.warning("dropping unreadable session record")
            return False
        try:
            return now - _created_at(session) < self.ttl
        except (KeyError, TypeError, ValueError):
            # unreadable timestamp: treat as expired
            logger.warning(f"dropping session of user id={session.get('userId')} with bad createdAt")
            return False
