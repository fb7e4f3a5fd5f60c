"""
queue_store.py — Durable local queue of data writes that could not reach the server.
Lives in its own SQLite file on the client side, separate from the server schema.
"""

import json
import os
import time

from sqlalchemy import Column, Float, Integer, String, Text, create_engine
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from flightcal.config import OFFLINE_QUEUE_URL

QueueBase = declarative_base()


class PendingRequest(QueueBase):
    __tablename__ = "pending_requests"

    id = Column(Integer, primary_key=True, autoincrement=True)
    url = Column(Text, nullable=False)
    method = Column(String(10), nullable=False)
    headers = Column(Text, nullable=False, default="{}")  # JSON object
    body = Column(Text, nullable=True)
    timestamp = Column(Float, nullable=False)  # epoch seconds at queue time

    def header_dict(self) -> dict:
        return json.loads(self.headers or "{}")


class PendingRequestStore:
    def __init__(self, url: str = OFFLINE_QUEUE_URL):
        engine_args = {"connect_args": {"check_same_thread": False}}
        if url in ("sqlite://", "sqlite:///:memory:"):
            engine_args["poolclass"] = StaticPool
        elif url.startswith("sqlite:///./"):
            os.makedirs(os.path.dirname(url[len("sqlite:///"):]) or ".", exist_ok=True)
        self.engine = create_engine(url, **engine_args)
        self._session = sessionmaker(bind=self.engine, expire_on_commit=False)
        QueueBase.metadata.create_all(bind=self.engine)

    def add(self, url: str, method: str, headers: dict, body: str | None, timestamp: float | None = None) -> int:
        with self._session() as db:
            item = PendingRequest(
                url=url,
                method=method,
                headers=json.dumps(headers),
                body=body,
                timestamp=time.time() if timestamp is None else timestamp,
            )
            db.add(item)
            db.commit()
            return item.id

    def all(self) -> list[PendingRequest]:
        """Queued requests, oldest first."""
        with self._session() as db:
            return db.query(PendingRequest).order_by(PendingRequest.timestamp, PendingRequest.id).all()

    def delete(self, item_id: int) -> None:
        with self._session() as db:
            db.query(PendingRequest).filter(PendingRequest.id == item_id).delete()
            db.commit()

    def clear(self) -> None:
        with self._session() as db:
            db.query(PendingRequest).delete()
            db.commit()

    def count(self) -> int:
        with self._session() as db:
            return db.query(PendingRequest).count()
