"""
ai_config_service.py — Report endpoint configuration
Loads the ai_config rows into an immutable AIConfig handed to the report
generator, and applies admin updates. The API key is Fernet-encrypted at rest.
"""

import base64
import logging
from dataclasses import dataclass
from typing import Union

from cryptography.fernet import Fernet, InvalidToken
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC
from sqlalchemy.orm import Session

from flightcal.clock import utcnow
from flightcal.config import DEFAULT_AI_MODEL, SECRET_KEY
from flightcal.models.ai_config import AIConfigEntry

logger = logging.getLogger(__name__)

ENDPOINT_KEY = "ai_endpoint"
API_KEY_KEY = "ai_api_key"
MODEL_KEY = "ai_model"

# What the admin form sends back when the stored key was left untouched
MASKED_API_KEY = "******"


@dataclass(frozen=True)
class AIConfig:
    endpoint: str = ""
    api_key: str = ""
    model: str = DEFAULT_AI_MODEL

    @property
    def configured(self) -> bool:
        return bool(self.endpoint and self.api_key)


@dataclass(frozen=True)
class KeepExisting:
    """Leave the stored API key as it is."""


@dataclass(frozen=True)
class Replace:
    value: str


ApiKeyUpdate = Union[KeepExisting, Replace]


def parse_api_key_update(raw: str | None) -> ApiKeyUpdate:
    """Map the wire value onto a key update: absent or masked means keep."""
    if raw is None or raw == MASKED_API_KEY:
        return KeepExisting()
    return Replace(raw)


def _build_fernet(secret: str) -> Fernet:
    salt = b"flightcal_ai_config_salt"
    kdf = PBKDF2HMAC(
        algorithm=hashes.SHA256(),
        length=32,
        salt=salt,
        iterations=100000,
    )
    return Fernet(base64.urlsafe_b64encode(kdf.derive(secret.encode())))


class AIConfigService:
    _fernet: Fernet | None = None

    @classmethod
    def fernet(cls) -> Fernet:
        if cls._fernet is None:
            cls._fernet = _build_fernet(SECRET_KEY)
        return cls._fernet

    @classmethod
    def encrypt_key(cls, plain_text_key: str) -> str:
        return cls.fernet().encrypt(plain_text_key.encode()).decode()

    @classmethod
    def decrypt_key(cls, encrypted_key: str) -> str:
        return cls.fernet().decrypt(encrypted_key.encode()).decode()

    @staticmethod
    def _raw(db: Session) -> dict[str, str]:
        rows = db.query(AIConfigEntry).all()
        return {row.config_key: row.config_value for row in rows}

    @classmethod
    def load(cls, db: Session) -> AIConfig:
        raw = cls._raw(db)
        api_key = ""
        if raw.get(API_KEY_KEY):
            try:
                api_key = cls.decrypt_key(raw[API_KEY_KEY])
            except InvalidToken:
                # SECRET_KEY rotated since the key was saved; admin must re-enter it
                logger.warning("Stored AI API key could not be decrypted; treating as unset")
        return AIConfig(
            endpoint=raw.get(ENDPOINT_KEY, ""),
            api_key=api_key,
            model=raw.get(MODEL_KEY) or DEFAULT_AI_MODEL,
        )

    @staticmethod
    def _put(db: Session, key: str, value: str, user_id: int) -> None:
        entry = db.query(AIConfigEntry).filter_by(config_key=key).first()
        if entry:
            entry.config_value = value
            entry.updated_by = user_id
            entry.updated_at = utcnow()
        else:
            db.add(AIConfigEntry(config_key=key, config_value=value, updated_by=user_id))

    @classmethod
    def save(cls, db: Session, user_id: int, endpoint: str, model: str | None, api_key: ApiKeyUpdate) -> None:
        cls._put(db, ENDPOINT_KEY, endpoint, user_id)
        cls._put(db, MODEL_KEY, model or DEFAULT_AI_MODEL, user_id)
        if isinstance(api_key, Replace):
            stored = cls.encrypt_key(api_key.value) if api_key.value else ""
            cls._put(db, API_KEY_KEY, stored, user_id)
        db.commit()
        logger.info(f"AI config updated by user {user_id} (api key {'replaced' if isinstance(api_key, Replace) else 'kept'})")

    @classmethod
    def admin_view(cls, db: Session) -> dict:
        config = cls.load(db)
        return {
            "ai_endpoint": config.endpoint,
            "ai_api_key": MASKED_API_KEY if config.api_key else "",
            "ai_model": config.model,
            "has_api_key": bool(config.api_key),
        }
