import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from sqlalchemy.orm import Session

from flightcal.auth import require_admin, require_user
from flightcal.database import get_db
from flightcal.models.user import User
from flightcal.services.ai_config_service import AIConfigService, parse_api_key_update

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/ai-config", tags=["AI Config"])


# ── Pydantic schemas ──────────────────────────────────────────────
class AIConfigUpdate(BaseModel):
    ai_endpoint: Optional[str] = None
    ai_api_key: Optional[str] = None
    ai_model: Optional[str] = None


# ── Routes ────────────────────────────────────────────────────────
@router.get("")
async def get_ai_config(user: User = Depends(require_user), db: Session = Depends(get_db)):
    """Admins see the (masked) configuration; everyone else only whether it is set up."""
    try:
        if not user.is_admin:
            config = AIConfigService.load(db)
            return {"configured": config.configured, "model": config.model}
        return {"config": AIConfigService.admin_view(db)}
    except Exception:
        logger.exception("Failed to load AI config")
        raise HTTPException(status_code=500, detail="Failed to load configuration")


@router.post("")
async def update_ai_config(body: AIConfigUpdate, admin: User = Depends(require_admin), db: Session = Depends(get_db)):
    if not body.ai_endpoint:
        raise HTTPException(status_code=400, detail="AI endpoint is required")
    try:
        AIConfigService.save(
            db,
            user_id=admin.id,
            endpoint=body.ai_endpoint,
            model=body.ai_model,
            api_key=parse_api_key_update(body.ai_api_key),
        )
        return {"success": True, "message": "AI configuration saved"}
    except Exception:
        db.rollback()
        logger.exception("Failed to save AI config")
        raise HTTPException(status_code=500, detail="Failed to save configuration")
