from datetime import datetime, timezone
from typing import List, Optional, Sequence, Tuple, TypeVar

from loguru import logger

from canews.normalization.dates import DEFAULT_WINDOW_DAYS, parse_date

R = TypeVar("R")

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def _record_date(
    record, now: datetime, window_days: int
) -> Optional[datetime]:
    return parse_date(getattr(record, "date", None), now, window_days)


def _sort_key(
    parsed: Optional[datetime], descending: bool
) -> Tuple[int, float]:
    # Unparseable dates always go last
    if parsed is None:
        return (1, 0.0)
    seconds = (parsed - _EPOCH).total_seconds()
    return (0, -seconds if descending else seconds)


def sort_by_date(
    records: Sequence[R],
    now: datetime,
    descending: bool = False,
    window_days: int = DEFAULT_WINDOW_DAYS,
) -> List[R]:
    """Stable sort of records on their ``date`` attribute."""
    keyed = [
        (_sort_key(_record_date(record, now, window_days), descending), record)
        for record in records
    ]
    keyed.sort(key=lambda pair: pair[0])
    return [record for _, record in keyed]


def filter_upcoming(
    records: Sequence[R], now: datetime, window_days: int = DEFAULT_WINDOW_DAYS
) -> List[R]:
    """Keeps records dated today (UTC) or later; unparseable dates are dropped."""
    today = now.astimezone(timezone.utc).date() if now.tzinfo else now.date()
    upcoming: List[R] = []
    for record in records:
        parsed = _record_date(record, now, window_days)
        if parsed is None:
            logger.warning(
                f"Dropping record {getattr(record, 'id', '?')} with unparseable date "
                f"'{getattr(record, 'date', None)}'"
            )
            continue
        if parsed.date() >= today:
            upcoming.append(record)
    logger.debug(f"Filtered {len(records)} records down to {len(upcoming)} upcoming")
    return upcoming
