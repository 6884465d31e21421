from __future__ import annotations

from pathlib import Path

import pytest

from campaign_metrics.config import get_settings

ENV_VARS = (
    "MONGO_URI",
    "MONGO_DB",
    "STORE_MAX_RETRIES",
    "STORE_BACKOFF_SECONDS",
    "LINKEDIN_RATE_THRESHOLD",
    "EMAIL_OPEN_THRESHOLD",
    "WEBINAR_RSVP_THRESHOLD",
    "REPORT_DIR",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def test_defaults() -> None:
    s = get_settings()
    assert s.mongo_db == "campaigns"
    assert s.store_max_retries == 3
    assert (s.linkedin_rate_threshold, s.email_open_threshold, s.webinar_rsvp_threshold) == (20.0, 25.0, 15.0)
    assert s.report_dir == Path("reports")


def test_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("MONGO_DB", "marketing")
    monkeypatch.setenv("EMAIL_OPEN_THRESHOLD", "30")
    monkeypatch.setenv("STORE_MAX_RETRIES", "5")
    s = get_settings()
    assert s.mongo_db == "marketing"
    assert s.email_open_threshold == 30.0
    assert s.store_max_retries == 5


def test_non_numeric_threshold_is_rejected(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("WEBINAR_RSVP_THRESHOLD", "low")
    with pytest.raises(RuntimeError):
        get_settings()


def test_zero_retries_is_rejected(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("STORE_MAX_RETRIES", "0")
    with pytest.raises(RuntimeError):
        get_settings()
