from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey
from flightcal.database import Base
from flightcal.clock import utcnow


class AIConfigEntry(Base):
    """
    Key/value rows for the report endpoint: ai_endpoint, ai_api_key, ai_model.
    The API key is stored as an encrypted blob.
    """
    __tablename__ = "ai_config"

    id = Column(Integer, primary_key=True, autoincrement=True)
    config_key = Column(String(100), unique=True, nullable=False)
    config_value = Column(Text, nullable=False)
    updated_by = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    updated_at = Column(DateTime, default=utcnow)
