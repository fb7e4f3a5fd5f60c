from datetime import timedelta

from flightcal.clock import utc_today
from flightcal.conftest import login
from flightcal.models.day_record import DayRecord


def test_anonymous_get_signals_local_mode(client):
    resp = client.get("/api")
    assert resp.status_code == 200
    body = resp.json()
    assert body["authenticated"] is False
    assert body["data"] == {}


def test_anonymous_post_is_acknowledged_local_only(client, db):
    resp = client.post("/api", json={"date": "2026-01-02", "status": 1})
    assert resp.json()["success"] is True
    assert resp.json()["localOnly"] is True
    assert db.query(DayRecord).count() == 0


def test_write_and_read_back(user_client):
    assert user_client.post("/api", json={"date": "2026-01-02", "status": 3}).json() == {"success": True}
    assert user_client.post("/api", json={"date": "2026-01-03", "status": 0}).json() == {"success": True}
    body = user_client.get("/api").json()
    assert body == {"data": {"2026-01-02": 3, "2026-01-03": 0}, "authenticated": True}


def test_future_date_rejected_unless_delete(user_client):
    tomorrow = (utc_today() + timedelta(days=1)).isoformat()
    resp = user_client.post("/api", json={"date": tomorrow, "status": 1})
    assert resp.status_code == 400
    assert "error" in resp.json()

    resp = user_client.post("/api", json={"date": tomorrow, "status": 0, "isDelete": True})
    assert resp.status_code == 200
    assert resp.json() == {"success": True}


def test_today_is_writable(user_client):
    today = utc_today().isoformat()
    assert user_client.post("/api", json={"date": today, "status": 2}).status_code == 200


def test_upsert_keeps_one_row_with_latest_status(user_client, db):
    user_client.post("/api", json={"date": "2026-02-10", "status": 1})
    user_client.post("/api", json={"date": "2026-02-10", "status": 1})
    user_client.post("/api", json={"date": "2026-02-10", "status": 4})
    rows = db.query(DayRecord).filter_by(date_key="2026-02-10").all()
    assert len(rows) == 1
    assert rows[0].status == 4


def test_delete_removes_row(user_client):
    user_client.post("/api", json={"date": "2026-02-10", "status": 2})
    user_client.post("/api", json={"date": "2026-02-10", "isDelete": True})
    assert user_client.get("/api").json()["data"] == {}


def test_bad_input_is_a_validation_error(user_client):
    assert user_client.post("/api", json={"date": "2026-2-1", "status": 1}).status_code == 400
    assert user_client.post("/api", json={"date": "not a date", "status": 1}).status_code == 400
    assert user_client.post("/api", json={"date": "2026-02-01", "status": -1}).status_code == 400
    assert user_client.post("/api", json={"date": "2026-02-01"}).status_code == 400


def test_records_are_scoped_to_the_session_user(client, make_user):
    make_user("alice", "secret123")
    make_user("bob", "secret123")

    login(client, "alice", "secret123")
    client.post("/api", json={"date": "2026-01-05", "status": 5})

    login(client, "bob", "secret123")
    assert client.get("/api").json()["data"] == {}
    client.post("/api", json={"date": "2026-01-05", "status": 1})

    login(client, "alice", "secret123")
    assert client.get("/api").json()["data"] == {"2026-01-05": 5}
