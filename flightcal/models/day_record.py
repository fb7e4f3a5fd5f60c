from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, UniqueConstraint
from flightcal.database import Base
from flightcal.clock import utcnow


class DayRecord(Base):
    __tablename__ = "day_records"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    date_key = Column(String(10), nullable=False, index=True)  # YYYY-MM-DD
    status = Column(Integer, nullable=False)  # 0 = none, 1-5 = times done
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow)

    __table_args__ = (
        UniqueConstraint("user_id", "date_key", name="uq_day_records_user_date"),
    )
