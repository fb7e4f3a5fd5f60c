import os

# Must be set before flightcal.config is imported
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["OFFLINE_QUEUE_URL"] = "sqlite://"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["ENVIRONMENT"] = "test"

import pytest
from fastapi.testclient import TestClient

from flightcal.auth import hash_password
from flightcal.database import Base, SessionLocal, engine
from flightcal.main import app
from flightcal.models.user import User


@pytest.fixture(autouse=True)
def tables():
    import flightcal.models  # noqa: F401
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)
    app.dependency_overrides.clear()


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def make_user(db):
    def _make(username="pilot", password="secret123", is_admin=False) -> User:
        user = User(username=username, password_hash=hash_password(password), is_admin=is_admin)
        db.add(user)
        db.commit()
        db.refresh(user)
        return user
    return _make


@pytest.fixture
def client():
    with TestClient(app) as c:
        yield c


def login(client: TestClient, username: str, password: str):
    resp = client.post("/api/auth", json={"username": username, "password": password})
    assert resp.status_code == 200, resp.text
    return resp


@pytest.fixture
def user_client(client, make_user):
    user = make_user("pilot", "secret123")
    login(client, "pilot", "secret123")
    client.user = user
    return client


@pytest.fixture
def admin_client(make_user):
    admin = make_user("captain", "admin123", is_admin=True)
    with TestClient(app) as c:
        login(c, "captain", "admin123")
        c.user = admin
        yield c
