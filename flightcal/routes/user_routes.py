# ---------- routes/user_routes.py ----------
import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from sqlalchemy.orm import Session

from flightcal.auth import require_admin, require_user
from flightcal.database import get_db
from flightcal.models.user import User
from flightcal.services.user_service import UserService, UserValidationError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/users", tags=["Users"])


# ── Pydantic schemas ──────────────────────────────────────────────
class CreateUserRequest(BaseModel):
    username: Optional[str] = None
    password: Optional[str] = None
    is_admin: bool = False


class ChangePasswordRequest(BaseModel):
    userId: Optional[int] = None
    newPassword: Optional[str] = None


# ── Routes ────────────────────────────────────────────────────────
@router.get("")
async def list_users(admin: User = Depends(require_admin), db: Session = Depends(get_db)):
    try:
        return {"users": UserService.list_users(db)}
    except Exception:
        logger.exception("Failed to list users")
        raise HTTPException(status_code=500, detail="Failed to list users")


@router.post("")
async def create_user(body: CreateUserRequest, admin: User = Depends(require_admin), db: Session = Depends(get_db)):
    """Admin only: create a new account."""
    try:
        user = UserService.create(db, body.username, body.password, body.is_admin)
        return {
            "success": True,
            "user": {
                **user.to_public(),
                "created_at": user.created_at.isoformat() if user.created_at else None,
            },
        }
    except UserValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception:
        db.rollback()
        logger.exception("Failed to create user")
        raise HTTPException(status_code=500, detail="Failed to create user")


@router.delete("")
async def delete_user(id: Optional[int] = None, admin: User = Depends(require_admin), db: Session = Depends(get_db)):
    """Admin only: delete a user by ?id=. Admins cannot delete themselves."""
    if id is None:
        raise HTTPException(status_code=400, detail="User id is required")
    try:
        UserService.delete(db, admin, id)
        return {"success": True}
    except UserValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception:
        db.rollback()
        logger.exception(f"Failed to delete user {id}")
        raise HTTPException(status_code=500, detail="Failed to delete user")


@router.put("")
async def change_password(body: ChangePasswordRequest, user: User = Depends(require_user), db: Session = Depends(get_db)):
    """Admins may change anyone's password; other users only their own."""
    target_id = body.userId if body.userId is not None else user.id
    if not user.is_admin and target_id != user.id:
        raise HTTPException(status_code=403, detail="Permission denied")
    try:
        if not UserService.change_password(db, target_id, body.newPassword):
            raise HTTPException(status_code=400, detail="User not found")
        return {"success": True}
    except HTTPException:
        raise
    except UserValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception:
        db.rollback()
        logger.exception(f"Failed to change password for user {target_id}")
        raise HTTPException(status_code=500, detail="Failed to change password")
