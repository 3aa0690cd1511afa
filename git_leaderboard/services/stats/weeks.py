"""Sunday-aligned week arithmetic shared by every part of the pipeline."""

import math
from datetime import UTC, datetime, timedelta

from git_leaderboard.services.github.helpers import parse_iso

# Weekly series length when no time window is selected
DEFAULT_WINDOW_WEEKS = 52

WEEK = timedelta(days=7)


def week_start_of(value: datetime | int | float | str) -> datetime:
    """
    Return the start (Sunday 00:00 UTC) of the week containing ``value``.

    Accepts an aware datetime, Unix seconds (the contributor-stats ``w`` field)
    or an ISO 8601 string. Naive datetimes are taken as UTC.

    Raises:
        ValueError: If a string cannot be parsed
    """
    if isinstance(value, str):
        parsed = parse_iso(value)
        if parsed is None:
            raise ValueError(f"Invalid timestamp: {value!r}")
        moment = parsed
    elif isinstance(value, datetime):
        moment = value if value.tzinfo else value.replace(tzinfo=UTC)
    else:
        moment = datetime.fromtimestamp(value, tz=UTC)

    moment = moment.astimezone(UTC)
    days_since_sunday = (moment.weekday() + 1) % 7
    start = moment - timedelta(days=days_since_sunday)
    return start.replace(hour=0, minute=0, second=0, microsecond=0)


def window_size(window_days: int | None) -> int:
    """Number of weekly buckets for a time window (52 when there is none)."""
    if not window_days:
        return DEFAULT_WINDOW_WEEKS
    return max(1, math.ceil(window_days / 7))


def week_series(latest_week: datetime, size: int) -> list[datetime]:
    """Contiguous week starts, oldest first, ending at ``latest_week``."""
    latest = week_start_of(latest_week)
    return [latest - WEEK * (size - 1 - i) for i in range(size)]
