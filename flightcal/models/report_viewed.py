from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, UniqueConstraint
from flightcal.database import Base
from flightcal.clock import utcnow


class ReportViewed(Base):
    __tablename__ = "report_viewed"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    report_type = Column(String(20), nullable=False)  # week/month/quarter/year
    period_key = Column(String(20), nullable=False)  # e.g. 2026-W01, 2026-M03
    viewed_at = Column(DateTime, default=utcnow)

    __table_args__ = (
        UniqueConstraint("user_id", "report_type", "period_key", name="uq_report_viewed"),
    )
