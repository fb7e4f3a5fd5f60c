# Import all models so they register with SQLAlchemy Base.metadata
# This ensures Base.metadata.create_all() creates all tables

from flightcal.models.user import User
from flightcal.models.session import Session
from flightcal.models.day_record import DayRecord
from flightcal.models.ai_config import AIConfigEntry
from flightcal.models.report_viewed import ReportViewed

__all__ = [
    "User",
    "Session",
    "DayRecord",
    "AIConfigEntry",
    "ReportViewed",
]
