import logging
from datetime import datetime, timedelta, timezone
from functools import lru_cache

import bcrypt
import jwt

from .config import BCRYPT_ROUNDS, JWT_ALGORITHM, JWT_SECRET, SESSION_TTL_DAYS
from .errors import Unauthenticated

logger = logging.getLogger("life_kanban.security")

SESSION_TTL = timedelta(days=SESSION_TTL_DAYS)


# ---------------- PASSWORD HASHING ----------------

def _password_bytes(password: str) -> bytes:
    # bcrypt only looks at the first 72 bytes
    return password.encode("utf-8")[:72]


def hash_password(password: str, rounds: int = BCRYPT_ROUNDS) -> str:
    """Hash a password using bcrypt with a fresh salt."""
    salt = bcrypt.gensalt(rounds=rounds)
    return bcrypt.hashpw(_password_bytes(password), salt).decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against a bcrypt hash."""
    try:
        return bcrypt.checkpw(_password_bytes(plain_password), hashed_password.encode("utf-8"))
    except ValueError:
        logger.warning("Stored password hash is malformed")
        return False


@lru_cache(maxsize=1)
def dummy_hash() -> str:
    """Hash compared against when the email is unknown, so both login failures cost one bcrypt check."""
    return hash_password("not-a-real-password")


# ---------------- SESSION TOKENS ----------------

def issue_token(user_id: str, *, now: datetime | None = None, secret: str = JWT_SECRET) -> str:
    """Create a signed session token for ``user_id`` valid for SESSION_TTL."""
    issued = now or datetime.now(timezone.utc)
    payload = {"sub": str(user_id), "iat": issued, "exp": issued + SESSION_TTL}
    return jwt.encode(payload, secret, algorithm=JWT_ALGORITHM)


def verify_token(token: str | None, *, secret: str = JWT_SECRET) -> str:
    """Return the user id carried by ``token`` or raise Unauthenticated.

    The payload is signed, not encrypted, so it only ever carries the user id.
    """
    if not token:
        raise Unauthenticated()
    try:
        payload = jwt.decode(
            token,
            secret,
            algorithms=[JWT_ALGORITHM],
            options={"require": ["sub", "exp"]},
        )
    except jwt.InvalidTokenError as exc:
        logger.info("Rejected session token: %s", exc.__class__.__name__)
        raise Unauthenticated("Invalid token") from exc
    user_id = payload["sub"]
    if not isinstance(user_id, str) or not user_id:
        raise Unauthenticated("Invalid token")
    return user_id
