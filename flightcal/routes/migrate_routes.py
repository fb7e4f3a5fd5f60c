import logging

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from flightcal.auth import require_user
from flightcal.database import get_db
from flightcal.models.user import User
from flightcal.services.migration_service import MigrationService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/migrate", tags=["Migrate"])


@router.get("")
async def migration_status(user: User = Depends(require_user), db: Session = Depends(get_db)):
    try:
        return MigrationService.status(db)
    except Exception:
        logger.exception("Migration status check failed")
        raise HTTPException(status_code=500, detail="Check failed")


@router.post("")
async def migrate(user: User = Depends(require_user), db: Session = Depends(get_db)):
    """Admin only, one-time: move the legacy shared table to per-user records."""
    if not user.is_admin:
        raise HTTPException(status_code=403, detail="Only administrators can run the migration")
    try:
        return MigrationService.migrate(db)
    except Exception as e:
        db.rollback()
        logger.exception("Migration failed")
        return JSONResponse(
            {"success": False, "logs": [f"[ERROR] {e}"], "error": "Migration failed"},
            status_code=500,
        )
