from sqlalchemy import Column, Integer, String, DateTime, Boolean
from flightcal.database import Base
from flightcal.clock import utcnow


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(String(50), unique=True, nullable=False)
    password_hash = Column(String(255), nullable=False)
    is_admin = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, default=utcnow)

    def to_public(self) -> dict:
        return {"id": self.id, "username": self.username, "is_admin": bool(self.is_admin)}
