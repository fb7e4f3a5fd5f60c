"""
report_prompts.py — Fixed prompt text for the periodic flight report.
"""

REPORT_SYSTEM_PROMPT = """You are a witty, warm personal wellness advisor who analyses the user's "flight" log.

## Background
- The user keeps a private habit calendar called Flight Calendar and logs one habit per day.
- In the data, 0 means "no flight that day" and 1-5 is the number of flights that day.

## Your task
Write a short, friendly but informed report based on the statistics provided.

## Style
1. Tone: an old friend who gets it; humorous without being crude, caring without lecturing.
2. Attitude: treat the habit as a normal part of life and make no moral judgement.
3. Structure: concise, with the key points up front.

## Report outline
1. **Overview**: sum up the key numbers in a playful way.
2. **Patterns**: point out interesting regularities (busiest weekday, streaks, changes over time).
3. **Advice**: one or two practical, data-driven suggestions.
4. **Sign-off**: end on an encouraging note.

## Output format
- Markdown
- Under 300 words
- A few emoji are welcome"""

PERIOD_NAMES = {
    "week": "Weekly",
    "month": "Monthly",
    "quarter": "Quarterly",
    "year": "Yearly",
}

# Keyed like day_of_week_stats: "0" is Sunday
DAY_NAMES = ["Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday"]


def empty_report(period_label: str) -> str:
    return (
        f"## {period_label} Flight Report\n\n"
        "There are no records for this period yet.\n\n"
        "Start logging your flights to get a meaningful report!"
    )


def most_active_day(day_of_week_stats: dict) -> tuple[str, int]:
    name, best = "", 0
    for day, bucket in sorted(day_of_week_stats.items(), key=lambda item: int(item[0])):
        if bucket["count"] > best:
            best = bucket["count"]
            name = DAY_NAMES[int(day)]
    return name, best


def build_user_prompt(period_type: str, period_label: str, stats, previous_periods=None) -> str:
    """Render the statistics of one period, plus up to three earlier ones, into the user prompt."""
    period_name = PERIOD_NAMES[period_type]
    busiest_day, busiest_count = most_active_day(stats.day_of_week_stats)

    lines = [
        f"## {period_name} report - {period_label}",
        "",
        "### Statistics",
        f"- Days in period: {stats.total_days}",
        f"- Days with a record: {stats.recorded_days}",
        f"- Total flights: {stats.total_count}",
        f"- Days with at least one flight: {stats.success_days}",
        f"- Zero days: {stats.zero_days}",
        f"- Average per recorded day: {stats.avg_per_day:.2f}",
        f"- Single-day maximum: {stats.max_count} ({stats.max_count_date})",
        f"- Current streak: {stats.streak_days} days",
        f"- Most active weekday: {busiest_day} ({busiest_count} flights)",
        "",
        "### By weekday",
    ]
    for day in sorted(stats.day_of_week_stats, key=int):
        bucket = stats.day_of_week_stats[day]
        lines.append(f"- {DAY_NAMES[int(day)]}: {bucket['count']} flights on {bucket['days']} days")

    if previous_periods:
        lines += ["", "### History (for trend comparison)"]
        for label, prev in previous_periods:
            lines += [
                "",
                f"**{label}**",
                f"- Total flights: {prev.total_count}",
                f"- Average per recorded day: {prev.avg_per_day:.2f}",
                f"- Days with at least one flight: {prev.success_days}",
                f"- Zero days: {prev.zero_days}",
            ]
        lines += [
            "",
            "Use the history to describe the trend (rising, falling or steady) and tailor the advice to it.",
        ]

    lines += ["", f"Please write the {period_name.lower()} flight report from the data above."]
    return "\n".join(lines)
