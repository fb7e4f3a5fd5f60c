from datetime import date, datetime, timezone


def utcnow() -> datetime:
    """Naive UTC timestamp; stored columns carry no tzinfo on SQLite or Postgres."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def utc_today() -> date:
    return datetime.now(timezone.utc).date()
