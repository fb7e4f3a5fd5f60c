# ---------- routes/data_routes.py ----------
import logging
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from sqlalchemy.orm import Session

from flightcal.auth import get_optional_user
from flightcal.clock import utc_today
from flightcal.database import get_db
from flightcal.models.user import User
from flightcal.services.day_record_service import DayRecordService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Data"])


# ── Pydantic schemas ──────────────────────────────────────────────
class DayWrite(BaseModel):
    date: Optional[str] = None
    status: Optional[int] = None
    isDelete: bool = False


def parse_date_key(value: str | None):
    """Accept only canonical YYYY-MM-DD keys."""
    try:
        parsed = datetime.strptime(value or "", "%Y-%m-%d").date()
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid date, expected YYYY-MM-DD")
    if parsed.isoformat() != value:
        raise HTTPException(status_code=400, detail="Invalid date, expected YYYY-MM-DD")
    return parsed


# ── Routes ────────────────────────────────────────────────────────
@router.get("")
async def get_days(user: User | None = Depends(get_optional_user), db: Session = Depends(get_db)):
    """The caller's full date -> status map, or a local-storage-mode signal when anonymous."""
    if user is None:
        return {
            "data": {},
            "authenticated": False,
            "message": "Not logged in, using local storage mode",
        }
    try:
        # Always scoped by the session's user id, never one supplied by the client
        return {"data": DayRecordService.get_map(db, user.id), "authenticated": True}
    except Exception:
        logger.exception("Failed to load day records")
        raise HTTPException(status_code=500, detail="Failed to load data")


@router.post("")
async def write_day(body: DayWrite, user: User | None = Depends(get_optional_user), db: Session = Depends(get_db)):
    """Upsert or delete one calendar cell. Future dates may only be deleted."""
    if user is None:
        return {
            "success": True,
            "localOnly": True,
            "message": "Not logged in, data is only saved locally",
        }

    day = parse_date_key(body.date)
    if day > utc_today() and not body.isDelete:
        raise HTTPException(status_code=400, detail="Future dates cannot be filled in ahead of time")

    try:
        if body.isDelete:
            DayRecordService.delete(db, user.id, body.date)
        else:
            if body.status is None or body.status < 0:
                raise HTTPException(status_code=400, detail="Status must be a non-negative integer")
            DayRecordService.upsert(db, user.id, body.date, body.status)
        return {"success": True}
    except HTTPException:
        raise
    except Exception:
        db.rollback()
        logger.exception(f"Failed to write day {body.date} for user {user.id}")
        raise HTTPException(status_code=500, detail="Operation failed")
