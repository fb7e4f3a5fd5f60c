"""
migration_service.py — One-time move from the single-tenant log table.
The legacy `day_logs(date_key, status)` table is copied into `day_records` for
every user, then renamed to `day_logs_backup` so it can be inspected before
being dropped by hand.
"""

import logging

from sqlalchemy import inspect, text
from sqlalchemy.orm import Session

logger = logging.getLogger(__name__)

LEGACY_TABLE = "day_logs"
BACKUP_TABLE = f"{LEGACY_TABLE}_backup"


class MigrationService:
    @staticmethod
    def _inspector(db: Session):
        return inspect(db.get_bind())

    @staticmethod
    def needs_migration(db: Session) -> bool:
        """True when a legacy table without a user_id column is still in place."""
        inspector = MigrationService._inspector(db)
        if not inspector.has_table(LEGACY_TABLE):
            return False
        columns = {col["name"] for col in inspector.get_columns(LEGACY_TABLE)}
        return "user_id" not in columns

    @staticmethod
    def status(db: Session) -> dict:
        is_migrated = not MigrationService.needs_migration(db)
        has_backup = MigrationService._inspector(db).has_table(BACKUP_TABLE)
        return {
            "isMigrated": is_migrated,
            "hasBackup": has_backup,
            "message": (
                "Data is stored per user"
                if is_migrated
                else "Not migrated yet; the legacy shared table is still in use"
            ),
        }

    @staticmethod
    def migrate(db: Session) -> dict:
        logs: list[str] = []
        if not MigrationService.needs_migration(db):
            logs.append(f"[INFO] No legacy {LEGACY_TABLE} table to migrate, skipping")
            return {"success": False, "message": "Already on the per-user schema", "logs": logs}

        # WHERE 1=1 lets SQLite parse ON CONFLICT after INSERT ... SELECT
        result = db.execute(text(
            f"INSERT INTO day_records (user_id, date_key, status, created_at, updated_at) "
            f"SELECT u.id, t.date_key, t.status, CURRENT_TIMESTAMP, CURRENT_TIMESTAMP "
            f"FROM users u CROSS JOIN {LEGACY_TABLE} t WHERE 1=1 "
            f"ON CONFLICT (user_id, date_key) DO NOTHING"
        ))
        logs.append(f"[OK] Copied legacy records for every user, {result.rowcount} rows")

        db.execute(text(f"ALTER TABLE {LEGACY_TABLE} RENAME TO {BACKUP_TABLE}"))
        logs.append(f"[OK] Legacy table kept as {BACKUP_TABLE}")
        db.commit()

        logger.info(f"Migrated {result.rowcount} legacy rows into day_records")
        return {
            "success": True,
            "message": f"Migration complete. {BACKUP_TABLE} is kept for inspection; drop it by hand once verified",
            "logs": logs,
        }
