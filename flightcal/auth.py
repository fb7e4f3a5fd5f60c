import logging
import secrets
import string
from datetime import timedelta

import bcrypt
from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.orm import Session as DBSession

from flightcal.clock import utcnow
from flightcal.config import BCRYPT_ROUNDS, SESSION_COOKIE_NAME, SESSION_EXPIRY_DAYS
from flightcal.database import get_db
from flightcal.models.session import Session
from flightcal.models.user import User

logger = logging.getLogger(__name__)

TOKEN_ALPHABET = string.ascii_letters + string.digits
PASSWORD_ALPHABET = string.ascii_letters + string.digits + "!@#$%"
TOKEN_LENGTH = 64
BCRYPT_MAX_BYTES = 72


def _secret_bytes(password: str) -> bytes:
    # bcrypt only looks at the first 72 bytes and newer releases refuse longer input
    return password.encode("utf-8")[:BCRYPT_MAX_BYTES]


def hash_password(password: str) -> str:
    salt = bcrypt.gensalt(rounds=BCRYPT_ROUNDS)
    return bcrypt.hashpw(_secret_bytes(password), salt).decode("ascii")


def verify_password(password: str, password_hash: str) -> bool:
    """False for a wrong password and for a hash bcrypt cannot parse."""
    try:
        return bcrypt.checkpw(_secret_bytes(password), password_hash.encode("ascii"))
    except (ValueError, TypeError):
        logger.warning("Stored password hash is not a valid bcrypt hash")
        return False


def generate_session_token() -> str:
    """64 random alphanumeric characters. Uniqueness is left to the sessions table."""
    return "".join(secrets.choice(TOKEN_ALPHABET) for _ in range(TOKEN_LENGTH))


def generate_password(length: int = 12) -> str:
    return "".join(secrets.choice(PASSWORD_ALPHABET) for _ in range(length))


def create_session(db: DBSession, user: User) -> Session:
    """Persist a new session for the user, valid for SESSION_EXPIRY_DAYS."""
    session = Session(
        user_id=user.id,
        token=generate_session_token(),
        expires_at=utcnow() + timedelta(days=SESSION_EXPIRY_DAYS),
    )
    db.add(session)
    db.commit()
    db.refresh(session)
    return session


def delete_user_sessions(db: DBSession, user_id: int) -> int:
    count = db.query(Session).filter(Session.user_id == user_id).delete(synchronize_session=False)
    db.commit()
    return count


def validate_session(db: DBSession, token: str) -> User | None:
    """Return the owner of a matching, unexpired session, or None."""
    if not token:
        return None
    try:
        return (
            db.query(User)
            .join(Session, Session.user_id == User.id)
            .filter(Session.token == token, Session.expires_at > utcnow())
            .first()
        )
    except Exception:
        logger.exception("Session lookup failed")
        db.rollback()
        return None


def parse_cookie_header(cookie_header: str | None) -> dict:
    """Split a raw Cookie header into a name -> value dict."""
    cookies = {}
    if not cookie_header:
        return cookies
    for part in cookie_header.split(";"):
        name, sep, value = part.strip().partition("=")
        if sep:
            cookies[name] = value
    return cookies


def get_current_user(db: DBSession, cookie_header: str | None) -> User | None:
    token = parse_cookie_header(cookie_header).get(SESSION_COOKIE_NAME)
    if not token:
        return None
    return validate_session(db, token)


# ── FastAPI dependencies ──────────────────────────────────────────
async def get_optional_user(request: Request, db: DBSession = Depends(get_db)) -> User | None:
    """The session's user, or None for anonymous (local storage mode) access."""
    return get_current_user(db, request.headers.get("cookie"))


async def require_user(user: User | None = Depends(get_optional_user)) -> User:
    if user is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not logged in")
    return user


async def require_admin(user: User | None = Depends(get_optional_user)) -> User:
    if user is None or not user.is_admin:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Permission denied")
    return user
