# ---------- routes/auth_routes.py ----------
"""
Auth routes: cookie sessions backed by the sessions table.
"""
import logging
from datetime import timezone
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from sqlalchemy.orm import Session

from flightcal.auth import (
    create_session, delete_user_sessions, get_optional_user, verify_password,
)
from flightcal.config import COOKIE_SECURE, SESSION_COOKIE_NAME
from flightcal.database import get_db
from flightcal.models.user import User

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["Auth"])


# ── Pydantic schemas ──────────────────────────────────────────────
class AuthRequest(BaseModel):
    username: Optional[str] = None
    password: Optional[str] = None


# ── Routes ────────────────────────────────────────────────────────
@router.post("")
async def login(body: AuthRequest, request: Request, db: Session = Depends(get_db)):
    """Authenticate with username + password and set the session cookie."""
    client_ip = request.client.host if request.client else "unknown"

    if not body.username or not body.password:
        raise HTTPException(status_code=400, detail="Username and password are required")

    try:
        user = db.query(User).filter(User.username == body.username).first()
        if not user or not verify_password(body.password, user.password_hash):
            logger.warning(f"Failed login for '{body.username}' from {client_ip}")
            raise HTTPException(status_code=401, detail="Invalid username or password")

        session = create_session(db, user)
        logger.info(f"User {user.id} logged in from {client_ip}")

        response = JSONResponse({"success": True, "user": user.to_public()})
        response.set_cookie(
            key=SESSION_COOKIE_NAME,
            value=session.token,
            httponly=True,
            secure=COOKIE_SECURE,
            samesite="lax",
            expires=session.expires_at.replace(tzinfo=timezone.utc),
            path="/",
        )
        return response
    except HTTPException:
        raise
    except Exception:
        db.rollback()
        logger.exception("Login failed")
        raise HTTPException(status_code=500, detail="Login failed")


@router.delete("")
async def logout(user: User | None = Depends(get_optional_user), db: Session = Depends(get_db)):
    """Log out everywhere: every session of the user is removed."""
    try:
        if user is not None:
            removed = delete_user_sessions(db, user.id)
            logger.info(f"User {user.id} logged out, {removed} sessions removed")
        response = JSONResponse({"success": True})
        response.delete_cookie(SESSION_COOKIE_NAME, path="/")
        return response
    except Exception:
        db.rollback()
        logger.exception("Logout failed")
        raise HTTPException(status_code=500, detail="Logout failed")


@router.get("")
async def me(user: User | None = Depends(get_optional_user)):
    """Return the current user, or 401 with authenticated=false."""
    if user is None:
        return JSONResponse({"authenticated": False}, status_code=401)
    return {"authenticated": True, "user": user.to_public()}
