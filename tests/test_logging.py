from __future__ import annotations

import pytest

from canews.config.settings import settings
from canews.logging.setup import sensitive_data_filter


def test_filter_masks_configured_key_and_secret_extras(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(settings, "supabase_key", "super-secret-anon-key")
    record = {
        "message": "Connecting with super-secret-anon-key",
        "extra": {"api_token": "abc", "table": "sports", "nested": {"password": "pw"}},
    }

    assert sensitive_data_filter(record) is True
    assert record["message"] == "Connecting with ********"
    assert record["extra"] == {
        "api_token": "********",
        "table": "sports",
        "nested": {"password": "********"},
    }
