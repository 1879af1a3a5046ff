import secrets
from functools import lru_cache
from typing import Optional

from passlib.context import CryptContext

from tasktracker.errors import HashingError

# Argon2id with argon2-cffi's RFC 9106 low-memory profile
pwd_context = CryptContext(
    schemes=["argon2"],
    deprecated="auto",
    argon2__memory_cost=65536,
    argon2__time_cost=3,
    argon2__parallelism=4,
)

BEARER_PREFIX = "Bearer "

TOKEN_BYTES = 64


def hash_password(password: str) -> str:
    """Hash a password with Argon2id.

    Raises HashingError if the backend fails so callers can abort without
    storing anything.
    """
    try:
        return pwd_context.hash(password)
    except Exception as e:
        raise HashingError() from e


def verify_password(plain, hashed):
    """Verify a plaintext password against a hash.

    Malformed or missing hashes count as a mismatch rather than an error.
    """
    if not hashed:
        return False
    try:
        return pwd_context.verify(plain, hashed)
    except (ValueError, TypeError):
        return False


@lru_cache(maxsize=1)
def _dummy_hash() -> str:
    return pwd_context.hash(secrets.token_hex(16))


def burn_verify(plain) -> bool:
    """Run a full hash check that always fails, so an unknown account costs the same as a wrong password."""
    pwd_context.verify(plain, _dummy_hash())
    return False


def create_token() -> str:
    return secrets.token_hex(TOKEN_BYTES)


def extract_token(authorization: Optional[str]) -> Optional[str]:
    """Return the token from an ``Authorization: Bearer <token>`` header."""
    if not authorization or len(authorization) <= len(BEARER_PREFIX):
        return None
    if authorization[: len(BEARER_PREFIX)].lower() != BEARER_PREFIX.lower():
        return None
    return authorization[len(BEARER_PREFIX):].strip() or None
