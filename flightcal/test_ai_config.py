from flightcal.models.ai_config import AIConfigEntry
from flightcal.services.ai_config_service import (
    AIConfigService, KeepExisting, Replace, parse_api_key_update,
)


def _save(client, **fields):
    payload = {"ai_endpoint": "https://llm.example.com/v1", "ai_model": "gpt-4o-mini", **fields}
    return client.post("/api/ai-config", json=payload)


def test_parse_api_key_update():
    assert parse_api_key_update(None) == KeepExisting()
    assert parse_api_key_update("******") == KeepExisting()
    assert parse_api_key_update("") == Replace("")
    assert parse_api_key_update("sk-live") == Replace("sk-live")


def test_admin_saves_and_sees_masked_key(admin_client):
    resp = _save(admin_client, ai_api_key="sk-first")
    assert resp.json()["success"] is True

    config = admin_client.get("/api/ai-config").json()["config"]
    assert config == {
        "ai_endpoint": "https://llm.example.com/v1",
        "ai_api_key": "******",
        "ai_model": "gpt-4o-mini",
        "has_api_key": True,
    }


def test_key_is_encrypted_at_rest(admin_client, db):
    _save(admin_client, ai_api_key="sk-first")
    stored = db.query(AIConfigEntry).filter_by(config_key="ai_api_key").one().config_value
    assert stored != "sk-first"
    assert AIConfigService.decrypt_key(stored) == "sk-first"


def test_masked_or_missing_key_keeps_stored_key(admin_client, db):
    _save(admin_client, ai_api_key="sk-first")
    _save(admin_client, ai_api_key="******", ai_model="other-model")
    _save(admin_client)
    config = AIConfigService.load(db)
    assert config.api_key == "sk-first"
    assert config.model == "gpt-4o-mini"


def test_new_key_replaces_and_empty_key_clears(admin_client, db):
    _save(admin_client, ai_api_key="sk-first")
    _save(admin_client, ai_api_key="sk-second")
    assert AIConfigService.load(db).api_key == "sk-second"

    _save(admin_client, ai_api_key="")
    config = AIConfigService.load(db)
    assert config.api_key == ""
    assert config.configured is False


def test_model_defaults_when_blank(admin_client, db):
    _save(admin_client, ai_api_key="sk-first", ai_model="")
    assert AIConfigService.load(db).model == "gpt-3.5-turbo"


def test_regular_user_sees_only_status(admin_client, user_client):
    assert user_client.get("/api/ai-config").json() == {"configured": False, "model": "gpt-3.5-turbo"}
    _save(admin_client, ai_api_key="sk-first")
    assert user_client.get("/api/ai-config").json() == {"configured": True, "model": "gpt-4o-mini"}


def test_regular_user_cannot_save(user_client):
    assert _save(user_client, ai_api_key="sk-first").status_code == 403


def test_endpoint_is_required(admin_client):
    resp = admin_client.post("/api/ai-config", json={"ai_api_key": "sk-first"})
    assert resp.status_code == 400
    assert resp.json() == {"error": "AI endpoint is required"}


def test_anonymous_get_is_rejected(client):
    assert client.get("/api/ai-config", follow_redirects=False).status_code == 307
