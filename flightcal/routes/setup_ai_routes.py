import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy import inspect
from sqlalchemy.orm import Session

from flightcal.auth import require_admin
from flightcal.database import Base, get_db
from flightcal.models.ai_config import AIConfigEntry
from flightcal.models.report_viewed import ReportViewed
from flightcal.models.user import User

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/setup-ai", tags=["AI Config"])

AI_TABLES = (AIConfigEntry.__table__, ReportViewed.__table__)


@router.get("")
async def ai_tables_status(db: Session = Depends(get_db)):
    inspector = inspect(db.get_bind())
    present = {table.name: inspector.has_table(table.name) for table in AI_TABLES}
    return {
        **present,
        "message": "All tables exist" if all(present.values()) else "Tables need to be created",
    }


@router.post("")
async def create_ai_tables(admin: User = Depends(require_admin), db: Session = Depends(get_db)):
    """Admin only: add the report tables to a database bootstrapped before they existed."""
    logs: list[str] = []
    try:
        Base.metadata.create_all(bind=db.get_bind(), tables=list(AI_TABLES))
        for table in AI_TABLES:
            logs.append(f"[OK] {table.name} table created")
        return {"success": True, "logs": logs}
    except Exception as e:
        logger.exception("Creating AI tables failed")
        logs.append(f"[ERROR] {e}")
        return JSONResponse({"success": False, "logs": logs, "error": "Failed to create tables"}, status_code=500)
