"""
database.py — Engine, session factory and declarative base.
The URL decides the pool: one shared connection for in-memory SQLite,
a sized pool for Postgres.
"""
import os
import logging

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base
from sqlalchemy.pool import StaticPool

from flightcal.config import DATABASE_URL

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

IN_MEMORY_SQLITE = ("sqlite://", "sqlite:///:memory:")
POSTGRES_POOL = {"pool_size": 5, "max_overflow": 10, "pool_timeout": 30, "pool_recycle": 1800}


def engine_options(url: str) -> dict:
    if not url.startswith("sqlite"):
        return dict(POSTGRES_POOL)
    options = {"connect_args": {"check_same_thread": False}}
    if url in IN_MEMORY_SQLITE:
        # every checkout must see the same in-memory database
        options["poolclass"] = StaticPool
    return options


engine = create_engine(DATABASE_URL, **engine_options(DATABASE_URL))
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db():
    with SessionLocal() as db:
        yield db


def init_db():
    """Create every table registered on Base. Used by the bootstrap endpoint."""
    if DATABASE_URL.startswith("sqlite:///./"):
        os.makedirs(os.path.dirname(DATABASE_URL[len("sqlite:///"):]), exist_ok=True)

    # registers the tables on Base.metadata
    import flightcal.models  # noqa: F401

    Base.metadata.create_all(bind=engine)
    logger.info("Database initialized successfully.")
