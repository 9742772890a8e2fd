from __future__ import annotations

from datetime import datetime, timezone

import pytest

from canews.normalization.dates import (
    normalize_date,
    parse_date,
    resolve_month_day,
    to_iso,
)


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("2026-01-16 to 01-18", "2026-01-16T00:00:00.000Z"),
        ("2026-01-16 to 2026-01-18", "2026-01-16T00:00:00.000Z"),
        ("2025-12-18", "2025-12-18T00:00:00.000Z"),
        ("2026-01-16T18:30:00Z", "2026-01-16T18:30:00.000Z"),
        ("December 18, 2025", "2025-12-18T00:00:00.000Z"),
        ("Dec 1, 2025", "2025-12-01T00:00:00.000Z"),
        ("02-14-2026", "2026-02-14T00:00:00.000Z"),
    ],
)
def test_known_shapes(raw: str, expected: str, now: datetime) -> None:
    assert normalize_date(raw, now) == expected


def test_month_day_more_than_window_in_past_rolls_to_next_year(now: datetime) -> None:
    # Feb 14 2025 is months before Aug 1 2025, so it means next February
    assert normalize_date("02-14 to 02-16", now) == "2026-02-14T00:00:00.000Z"
    assert normalize_date("06-15", now) == "2026-06-15T00:00:00.000Z"


def test_month_day_within_window_keeps_current_year(now: datetime) -> None:
    assert normalize_date("07-10", now) == "2025-07-10T00:00:00.000Z"
    assert normalize_date("08-15 to 08-17", now) == "2025-08-15T00:00:00.000Z"


def test_window_is_configurable(now: datetime) -> None:
    assert normalize_date("07-10", now, window_days=7) == "2026-07-10T00:00:00.000Z"


def test_leap_day_tries_next_year() -> None:
    assert resolve_month_day(2, 29, datetime(2027, 8, 1, tzinfo=timezone.utc)) == datetime(
        2028, 2, 29, tzinfo=timezone.utc
    )


@pytest.mark.parametrize("raw", ["TBD", "", None, "TBA", {"nested": True}])
def test_unparseable_falls_back_to_now(raw, now: datetime) -> None:
    assert normalize_date(raw, now) == to_iso(now)


def test_strict_parse_reports_failure(now: datetime) -> None:
    assert parse_date("TBD", now) is None
    assert parse_date(None, now) is None
    assert parse_date("2025-12-18", now) == datetime(2025, 12, 18, tzinfo=timezone.utc)


def test_to_iso_formats_milliseconds_in_utc() -> None:
    dt = datetime(2025, 1, 2, 3, 4, 5, 678900, tzinfo=timezone.utc)
    assert to_iso(dt) == "2025-01-02T03:04:05.678Z"
    assert to_iso(datetime(2025, 1, 2)) == "2025-01-02T00:00:00.000Z"
