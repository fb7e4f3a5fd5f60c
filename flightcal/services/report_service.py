"""
report_service.py — Periodic AI flight reports
Resolves calendar-aligned periods (ISO weeks, months, quarters, years), computes
aggregate statistics over the day records and asks the configured chat endpoint
to turn them into a report. Nothing is stored except the "viewed" markers.
"""

import calendar
import logging
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Callable

from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.orm import Session

from flightcal.clock import utc_today
from flightcal.config import AI_REQUEST_TIMEOUT
from flightcal.models.report_viewed import ReportViewed
from flightcal.providers.base import BaseProvider
from flightcal.providers.openai_compatible_provider import OpenAICompatibleProvider
from flightcal.services.ai_config_service import AIConfig
from flightcal.services.day_record_service import DayRecordService
from flightcal.services.report_prompts import REPORT_SYSTEM_PROMPT, build_user_prompt, empty_report

logger = logging.getLogger(__name__)

REPORT_TYPES = ("week", "month", "quarter", "year")
TREND_PERIODS = 3

ProviderFactory = Callable[[AIConfig], BaseProvider]


class ReportError(Exception):
    status_code = 500


class AINotConfiguredError(ReportError):
    status_code = 400

    def __init__(self):
        super().__init__("AI is not configured, please contact the administrator")


class UpstreamError(ReportError):
    """The chat endpoint answered with a non-2xx status."""


class ReportGenerationError(ReportError):
    def __init__(self, message: str = "Report generation failed"):
        super().__init__(message)


@dataclass(frozen=True)
class Period:
    type: str
    start: date
    end: date
    label: str
    period_key: str


@dataclass
class PeriodStats:
    total_days: int
    recorded_days: int = 0
    total_count: int = 0
    success_days: int = 0
    zero_days: int = 0
    avg_per_day: float = 0.0
    max_count: int = 0
    max_count_date: str = ""
    streak_days: int = 0
    day_of_week_stats: dict = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "totalDays": self.total_days,
            "recordedDays": self.recorded_days,
            "totalCount": self.total_count,
            "successDays": self.success_days,
            "zeroDays": self.zero_days,
            "avgPerDay": self.avg_per_day,
            "maxCount": self.max_count,
            "maxCountDate": self.max_count_date,
            "streakDays": self.streak_days,
            "dayOfWeekStats": self.day_of_week_stats,
        }


# ── Period arithmetic ─────────────────────────────────────────────
def _last_day_of_month(year: int, month: int) -> date:
    return date(year, month, calendar.monthrange(year, month)[1])


def iso_week(day: date) -> tuple[int, int]:
    """(ISO year, ISO week); week 1 holds the year's first Thursday."""
    iso = day.isocalendar()
    return iso[0], iso[1]


def resolve_period(report_type: str, offset: int = 0, today: date | None = None) -> Period:
    """The period of `report_type` that lies `offset` periods from the one containing today."""
    today = today or utc_today()

    if report_type == "week":
        anchor = today + timedelta(days=7 * offset)
        monday = anchor - timedelta(days=anchor.weekday())
        sunday = monday + timedelta(days=6)
        year, week = iso_week(monday)
        return Period("week", monday, sunday, f"{year} Week {week}", f"{year}-W{week:02d}")

    if report_type == "month":
        year, month_index = divmod(today.year * 12 + today.month - 1 + offset, 12)
        month = month_index + 1
        return Period(
            "month", date(year, month, 1), _last_day_of_month(year, month),
            f"{calendar.month_name[month]} {year}", f"{year}-M{month:02d}",
        )

    if report_type == "quarter":
        year, quarter = divmod(today.year * 4 + (today.month - 1) // 3 + offset, 4)
        first_month = quarter * 3 + 1
        return Period(
            "quarter", date(year, first_month, 1), _last_day_of_month(year, first_month + 2),
            f"{year} Q{quarter + 1}", f"{year}-Q{quarter + 1}",
        )

    if report_type == "year":
        year = today.year + offset
        return Period("year", date(year, 1, 1), date(year, 12, 31), f"{year}", f"{year}")

    raise ValueError(f"Unknown report type: {report_type}")


# ── Statistics ────────────────────────────────────────────────────
def _weekday_key(day: date) -> str:
    # "0" = Sunday ... "6" = Saturday
    return str(day.isoweekday() % 7)


def calculate_stats(records, start: date, end: date) -> PeriodStats:
    """
    Aggregate (date_key, status) records falling inside [start, end].

    Records may be ORM rows or any objects with date_key/status attributes,
    or (date_key, status) tuples.
    """
    pairs = []
    for rec in records:
        date_key, status = (rec if isinstance(rec, tuple) else (rec.date_key, rec.status))
        if start.isoformat() <= date_key <= end.isoformat():
            pairs.append((date_key, int(status)))
    pairs.sort()

    stats = PeriodStats(
        total_days=(end - start).days + 1,
        day_of_week_stats={str(i): {"count": 0, "days": 0} for i in range(7)},
    )
    stats.recorded_days = len(pairs)

    for date_key, status in pairs:
        if status > 0:
            stats.success_days += 1
            stats.total_count += status
            bucket = stats.day_of_week_stats[_weekday_key(date.fromisoformat(date_key))]
            bucket["count"] += status
            bucket["days"] += 1
        elif status == 0:
            stats.zero_days += 1
        if status > stats.max_count:
            stats.max_count = status
            stats.max_count_date = date_key

    if stats.recorded_days:
        stats.avg_per_day = stats.total_count / stats.recorded_days

    stats.streak_days = trailing_streak(pairs)
    return stats


def trailing_streak(pairs) -> int:
    """Consecutive positive days counted back from the most recent record."""
    streak = 0
    expected = None
    for date_key, status in sorted(pairs, reverse=True):
        day = date.fromisoformat(date_key)
        if status <= 0 or (expected is not None and day != expected):
            break
        streak += 1
        expected = day - timedelta(days=1)
    return streak


# ── Generation ────────────────────────────────────────────────────
def build_provider(config: AIConfig) -> BaseProvider:
    return OpenAICompatibleProvider(
        endpoint=config.endpoint,
        api_key=config.api_key,
        default_model=config.model,
        timeout=AI_REQUEST_TIMEOUT,
    )


class ReportService:
    @staticmethod
    def mark_viewed(db: Session, user_id: int, report_type: str, period_key: str) -> None:
        """Idempotent: an existing marker for the same period is left alone."""
        values = {"user_id": user_id, "report_type": report_type, "period_key": period_key}
        dialect = db.get_bind().dialect.name
        if dialect == "postgresql":
            db.execute(postgresql.insert(ReportViewed).values(**values).on_conflict_do_nothing())
        elif dialect == "sqlite":
            db.execute(sqlite.insert(ReportViewed).values(**values).on_conflict_do_nothing())
        elif not db.query(ReportViewed.id).filter_by(**values).first():
            db.add(ReportViewed(**values))
        db.commit()

    @staticmethod
    def pending_reports(db: Session, user_id: int, today: date) -> list[dict]:
        """Previous periods (one per type) the user has not opened yet."""
        pending = []
        for report_type in REPORT_TYPES:
            period = resolve_period(report_type, -1, today)
            seen = (
                db.query(ReportViewed.id)
                .filter_by(user_id=user_id, report_type=report_type, period_key=period.period_key)
                .first()
            )
            if not seen:
                pending.append({"type": report_type, "periodKey": period.period_key, "label": period.label})
        return pending

    @staticmethod
    def period_stats(db: Session, user_id: int, period: Period) -> PeriodStats:
        records = DayRecordService.get_range(db, user_id, period.start, period.end)
        return calculate_stats(records, period.start, period.end)

    @staticmethod
    async def generate(
        db: Session,
        user_id: int,
        report_type: str,
        config: AIConfig,
        period_offset: int = 0,
        mark_viewed: bool = False,
        today: date | None = None,
        provider_factory: ProviderFactory = build_provider,
    ) -> dict:
        """Build the report for one period. Returns {report, period, stats}."""
        period = resolve_period(report_type, period_offset, today)

        if not config.configured:
            raise AINotConfiguredError()

        previous = []
        for i in range(1, TREND_PERIODS + 1):
            prev_period = resolve_period(report_type, period_offset - i, today)
            previous.append((prev_period.label, ReportService.period_stats(db, user_id, prev_period)))

        stats = ReportService.period_stats(db, user_id, period)

        if stats.recorded_days == 0:
            report = empty_report(period.label)
        else:
            user_prompt = build_user_prompt(report_type, period.label, stats, previous)
            provider = provider_factory(config)
            logger.info(f"Requesting {report_type} report {period.period_key} for user {user_id}")
            result = await provider.chat(
                [
                    {"role": "system", "content": REPORT_SYSTEM_PROMPT},
                    {"role": "user", "content": user_prompt},
                ],
                config.model,
                temperature=0.7,
                max_tokens=1000,
            )
            if result.get("status") != "success":
                status_code = result.get("status_code")
                if status_code and not 200 <= status_code < 300:
                    raise UpstreamError(result.get("error") or "AI service request failed")
                raise ReportGenerationError()
            report = result.get("text") or "Report generation failed"

        if mark_viewed:
            ReportService.mark_viewed(db, user_id, report_type, period.period_key)

        return {"report": report, "period": period.label, "stats": stats.to_dict()}
