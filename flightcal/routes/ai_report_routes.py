# ---------- routes/ai_report_routes.py ----------
import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from sqlalchemy.orm import Session

from flightcal.auth import require_user
from flightcal.clock import utc_today
from flightcal.database import get_db
from flightcal.models.user import User
from flightcal.services.ai_config_service import AIConfigService
from flightcal.services.report_service import REPORT_TYPES, ReportError, ReportService, build_provider

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/ai-report", tags=["AI Report"])


# ── Pydantic schemas ──────────────────────────────────────────────
class ReportRequest(BaseModel):
    type: Optional[str] = None
    markViewed: bool = False
    periodOffset: int = 0


def get_provider_factory():
    """Dependency hook so the chat endpoint can be swapped out."""
    return build_provider


# ── Routes ────────────────────────────────────────────────────────
@router.get("")
async def pending_reports(user: User = Depends(require_user), db: Session = Depends(get_db)):
    """Previous periods the user has not opened yet, plus whether AI is set up."""
    try:
        return {
            "pendingReports": ReportService.pending_reports(db, user.id, utc_today()),
            "aiConfigured": AIConfigService.load(db).configured,
        }
    except Exception:
        logger.exception("Failed to check report status")
        raise HTTPException(status_code=500, detail="Failed to check report status")


@router.post("")
async def generate_report(
    body: ReportRequest,
    user: User = Depends(require_user),
    db: Session = Depends(get_db),
    provider_factory=Depends(get_provider_factory),
):
    if body.type not in REPORT_TYPES:
        raise HTTPException(status_code=400, detail="Invalid report type")
    try:
        return await ReportService.generate(
            db,
            user.id,
            body.type,
            config=AIConfigService.load(db),
            period_offset=body.periodOffset,
            mark_viewed=body.markViewed,
            today=utc_today(),
            provider_factory=provider_factory,
        )
    except ReportError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
    except Exception:
        db.rollback()
        logger.exception(f"Report generation failed for user {user.id}")
        raise HTTPException(status_code=500, detail="Report generation failed")
