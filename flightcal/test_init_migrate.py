import pytest
from sqlalchemy import text

from flightcal.conftest import login
from flightcal.models.day_record import DayRecord
from flightcal.models.user import User
from flightcal.services.migration_service import BACKUP_TABLE, LEGACY_TABLE


@pytest.fixture
def legacy_table(db):
    db.execute(text(f"CREATE TABLE {LEGACY_TABLE} (date_key VARCHAR(10) PRIMARY KEY, status INTEGER NOT NULL)"))
    db.execute(text(f"INSERT INTO {LEGACY_TABLE} (date_key, status) VALUES ('2025-06-01', 2), ('2025-06-02', 0)"))
    db.commit()
    yield
    # raw tables are outside the ORM metadata, so drop_all leaves them behind
    db.rollback()
    db.execute(text(f"DROP TABLE IF EXISTS {LEGACY_TABLE}"))
    db.execute(text(f"DROP TABLE IF EXISTS {BACKUP_TABLE}"))
    db.commit()


# ── Init ──────────────────────────────────────────────────────────
def test_init_status_without_users(client):
    assert client.get("/api/init").json() == {
        "needsInit": True,
        "message": "An admin user needs to be created",
    }


def test_init_creates_admin_once(client, db):
    first = client.post("/api/init").json()
    assert first["success"] is True
    password = first["adminPassword"]
    assert password and len(password) == 16

    admin = db.query(User).filter_by(username="admin").one()
    assert admin.is_admin is True
    assert login(client, "admin", password).json()["user"]["is_admin"] is True

    second = client.post("/api/init").json()
    assert second["success"] is True
    assert second["adminPassword"] is None
    assert db.query(User).count() == 1

    assert client.get("/api/init").json()["needsInit"] is False


# ── AI tables ─────────────────────────────────────────────────────
def test_ai_table_status(admin_client):
    body = admin_client.get("/api/setup-ai").json()
    assert body["ai_config"] is True
    assert body["report_viewed"] is True
    assert body["message"] == "All tables exist"


def test_ai_table_status_needs_a_session(client):
    resp = client.get("/api/setup-ai", follow_redirects=False)
    assert resp.status_code == 307
    assert resp.headers["location"] == "/login"


def test_ai_table_setup_is_admin_only(user_client, admin_client):
    assert user_client.post("/api/setup-ai").status_code == 403
    resp = admin_client.post("/api/setup-ai")
    assert resp.status_code == 200
    assert resp.json()["success"] is True


# ── Migration ─────────────────────────────────────────────────────
def test_status_without_legacy_table(user_client):
    body = user_client.get("/api/migrate").json()
    assert body["isMigrated"] is True
    assert body["hasBackup"] is False


def test_migrate_copies_rows_to_every_user(admin_client, make_user, db, legacy_table):
    pilot = make_user("pilot", "secret123")
    # an existing record wins over the legacy value
    db.add(DayRecord(user_id=pilot.id, date_key="2025-06-01", status=5))
    db.commit()
    assert admin_client.get("/api/migrate").json()["isMigrated"] is False

    resp = admin_client.post("/api/migrate")
    assert resp.status_code == 200
    assert resp.json()["success"] is True

    captain_rows = dict(
        db.query(DayRecord.date_key, DayRecord.status).filter_by(user_id=admin_client.user.id).all()
    )
    pilot_rows = dict(db.query(DayRecord.date_key, DayRecord.status).filter_by(user_id=pilot.id).all())
    assert captain_rows == {"2025-06-01": 2, "2025-06-02": 0}
    assert pilot_rows == {"2025-06-01": 5, "2025-06-02": 0}

    status = admin_client.get("/api/migrate").json()
    assert status["isMigrated"] is True
    assert status["hasBackup"] is True

    again = admin_client.post("/api/migrate").json()
    assert again["success"] is False


def test_migrate_is_admin_only(user_client, legacy_table):
    resp = user_client.post("/api/migrate")
    assert resp.status_code == 403
    assert resp.json() == {"error": "Only administrators can run the migration"}
