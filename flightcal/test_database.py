from sqlalchemy.pool import StaticPool

from flightcal.database import engine_options


def test_in_memory_sqlite_shares_one_connection():
    options = engine_options("sqlite://")
    assert options["poolclass"] is StaticPool
    assert options["connect_args"] == {"check_same_thread": False}


def test_file_sqlite_uses_default_pool():
    options = engine_options("sqlite:///./data/flightcal.db")
    assert "poolclass" not in options
    assert options["connect_args"] == {"check_same_thread": False}


def test_postgres_gets_a_sized_pool():
    options = engine_options("postgresql+psycopg://u:p@db/flightcal")
    assert options["pool_size"] == 5
    assert "connect_args" not in options
