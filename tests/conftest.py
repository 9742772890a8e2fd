from __future__ import annotations

from datetime import datetime, timezone

import pytest

from canews.models.enums import SportsDatePolicy
from canews.normalization.normalizer import Normalizer

FIXED_NOW = datetime(2025, 8, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture()
def now() -> datetime:
    return FIXED_NOW


@pytest.fixture()
def normalizer() -> Normalizer:
    """Keeps every sports event so ordering can be asserted on its own."""
    return Normalizer(sports_policy=SportsDatePolicy.ALL, clock=lambda: FIXED_NOW)


@pytest.fixture()
def upcoming_normalizer() -> Normalizer:
    return Normalizer(sports_policy=SportsDatePolicy.UPCOMING, clock=lambda: FIXED_NOW)
