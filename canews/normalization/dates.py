import re
from datetime import date, datetime, timezone
from typing import Any, Optional

from dateutil import parser as dtparser
from loguru import logger

# "2026-01-16", "2026-01-16 to 01-18", "2026-01-16T18:00:00Z"
ISO_DATE_PREFIX = re.compile(r"^(\d{4})-(\d{2})-(\d{2})")
# "02-14", "02-14 to 02-16"; not "02-14-2026"
MONTH_DAY_PREFIX = re.compile(r"^(\d{2})-(\d{2})(?![-/]?\d)")

DEFAULT_WINDOW_DAYS = 30
SECONDS_PER_DAY = 60 * 60 * 24


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def to_iso(dt: datetime) -> str:
    """Formats as 'YYYY-MM-DDTHH:MM:SS.mmmZ' in UTC."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    dt = dt.astimezone(timezone.utc)
    return dt.strftime("%Y-%m-%dT%H:%M:%S.") + f"{dt.microsecond // 1000:03d}Z"


def _midnight(year: int, month: int, day: int) -> Optional[datetime]:
    try:
        return datetime(year, month, day, tzinfo=timezone.utc)
    except ValueError:
        return None


def _as_utc(dt: datetime) -> datetime:
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def resolve_month_day(
    month: int, day: int, now: datetime, window_days: int = DEFAULT_WINDOW_DAYS
) -> Optional[datetime]:
    """Picks a year for a bare month/day.

    The current year is assumed first. A result more than ``window_days`` in
    the past rolls over to next year, so "02-14" seen in August means next
    February. Month/day pairs invalid in the current year (02-29) also try the
    next year.
    """
    assumed = _midnight(now.year, month, day)
    if assumed is None:
        return _midnight(now.year + 1, month, day)

    days_diff = (assumed - _as_utc(now)).total_seconds() / SECONDS_PER_DAY
    if days_diff < -window_days:
        return _midnight(now.year + 1, month, day) or assumed
    return assumed


def _parse_iso_prefixed(text: str, match: "re.Match[str]") -> Optional[datetime]:
    # Full timestamps keep their time of day, ranges keep only the start date
    try:
        return _as_utc(datetime.fromisoformat(text.replace("Z", "+00:00")))
    except ValueError:
        year, month, day = (int(part) for part in match.groups())
        return _midnight(year, month, day)


def _parse_generic(text: str, now: datetime) -> Optional[datetime]:
    # Missing components are filled from today's date so results stay deterministic
    default = datetime(now.year, now.month, now.day)
    try:
        return _as_utc(dtparser.parse(text, default=default))
    except (ValueError, OverflowError, TypeError):
        return None


def parse_date(
    value: Any, now: datetime, window_days: int = DEFAULT_WINDOW_DAYS
) -> Optional[datetime]:
    """Parses a date or date-range value, returning None when nothing fits."""
    if isinstance(value, datetime):
        return _as_utc(value)
    if isinstance(value, date):
        return _midnight(value.year, value.month, value.day)
    if not isinstance(value, str) or not value.strip():
        return None

    text = value.strip()

    match = ISO_DATE_PREFIX.match(text)
    if match:
        parsed = _parse_iso_prefixed(text, match)
        if parsed:
            return parsed
    else:
        match = MONTH_DAY_PREFIX.match(text)
        if match:
            month, day = (int(part) for part in match.groups())
            parsed = resolve_month_day(month, day, now, window_days)
            if parsed:
                return parsed

    return _parse_generic(text, now)


def normalize_date(
    value: Any, now: datetime, window_days: int = DEFAULT_WINDOW_DAYS
) -> str:
    """Best-effort ISO timestamp for ``value``; never raises.

    Unparseable values degrade to ``now``. That fallback is lossy on purpose and
    only logged, not surfaced in the output.
    """
    parsed = parse_date(value, now, window_days)
    if parsed is not None:
        return to_iso(parsed)
    if value is not None and value != "":
        logger.warning(f"Could not parse date '{value}', using current time")
    return to_iso(now)
