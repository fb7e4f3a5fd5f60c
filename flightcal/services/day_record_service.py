"""
day_record_service.py — Per-user calendar cells
Sparse date_key -> status map; writes are native upserts keyed on (user_id, date_key).
"""

from datetime import date

from sqlalchemy.orm import Session
from sqlalchemy.dialects import postgresql, sqlite

from flightcal.clock import utcnow
from flightcal.models.day_record import DayRecord

_DIALECT_INSERTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


class DayRecordService:
    @staticmethod
    def get_map(db: Session, user_id: int) -> dict[str, int]:
        rows = db.query(DayRecord.date_key, DayRecord.status).filter(DayRecord.user_id == user_id).all()
        return {row.date_key: row.status for row in rows}

    @staticmethod
    def get_range(db: Session, user_id: int, start: date, end: date) -> list[DayRecord]:
        """Records with start <= date_key <= end, oldest first."""
        return (
            db.query(DayRecord)
            .filter(
                DayRecord.user_id == user_id,
                DayRecord.date_key >= start.isoformat(),
                DayRecord.date_key <= end.isoformat(),
            )
            .order_by(DayRecord.date_key)
            .all()
        )

    @staticmethod
    def upsert(db: Session, user_id: int, date_key: str, status: int) -> None:
        """Insert or overwrite the cell; concurrent writers resolve last-write-wins."""
        now = utcnow()
        dialect = db.get_bind().dialect.name
        insert = _DIALECT_INSERTS.get(dialect)
        if insert is None:
            DayRecordService._upsert_fallback(db, user_id, date_key, status, now)
            return

        stmt = insert(DayRecord).values(
            user_id=user_id, date_key=date_key, status=status, created_at=now, updated_at=now,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=["user_id", "date_key"],
            set_={"status": status, "updated_at": now},
        )
        db.execute(stmt)
        db.commit()

    @staticmethod
    def _upsert_fallback(db: Session, user_id: int, date_key: str, status: int, now) -> None:
        record = db.query(DayRecord).filter_by(user_id=user_id, date_key=date_key).first()
        if record:
            record.status = status
            record.updated_at = now
        else:
            db.add(DayRecord(user_id=user_id, date_key=date_key, status=status, created_at=now, updated_at=now))
        db.commit()

    @staticmethod
    def delete(db: Session, user_id: int, date_key: str) -> bool:
        count = (
            db.query(DayRecord)
            .filter(DayRecord.user_id == user_id, DayRecord.date_key == date_key)
            .delete(synchronize_session=False)
        )
        db.commit()
        return count > 0
