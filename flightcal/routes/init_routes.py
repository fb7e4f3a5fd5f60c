# ---------- routes/init_routes.py ----------
"""
First-run bootstrap: create the schema and a default admin account.
The generated admin password is returned once, in the response that created it.
"""
import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy import inspect
from sqlalchemy.orm import Session

from flightcal.auth import generate_password, hash_password
from flightcal.config import DEFAULT_ADMIN_USERNAME
from flightcal.database import get_db, init_db
from flightcal.models.user import User

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/init", tags=["Init"])

ADMIN_PASSWORD_LENGTH = 16


@router.get("")
async def init_status(db: Session = Depends(get_db)):
    """Report whether the schema or the first user still has to be created."""
    try:
        if not inspect(db.get_bind()).has_table(User.__tablename__):
            return {"needsInit": True, "message": "Database needs to be initialized"}
        if db.query(User.id).count() == 0:
            return {"needsInit": True, "message": "An admin user needs to be created"}
        return {"needsInit": False, "message": "Database is initialized"}
    except Exception:
        logger.exception("Init status check failed")
        return {"needsInit": True, "message": "Database needs to be initialized"}


@router.post("")
async def initialize(db: Session = Depends(get_db)):
    logs: list[str] = []
    admin_password = None
    try:
        init_db()
        logs.append("[OK] Tables created or already present")

        existing = db.query(User).filter(User.username == DEFAULT_ADMIN_USERNAME).first()
        if existing is None:
            admin_password = generate_password(ADMIN_PASSWORD_LENGTH)
            db.add(User(username=DEFAULT_ADMIN_USERNAME, password_hash=hash_password(admin_password), is_admin=True))
            db.commit()
            logs.append(f"[OK] Admin user {DEFAULT_ADMIN_USERNAME} created")
            logs.append("[IMPORTANT] Change the initial password right after logging in!")
            logger.info(f"Bootstrap created admin user {DEFAULT_ADMIN_USERNAME}")
        else:
            logs.append(f"[INFO] Admin user {DEFAULT_ADMIN_USERNAME} already exists, skipping")

        # adminPassword is only ever non-null on the call that created the account
        return {"success": True, "logs": logs, "adminPassword": admin_password}
    except Exception as e:
        db.rollback()
        logger.exception("Initialization failed")
        logs.append(f"[ERROR] {e}")
        return JSONResponse(
            {"success": False, "logs": logs, "error": "Initialization failed"},
            status_code=500,
        )
