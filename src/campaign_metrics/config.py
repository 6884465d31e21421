"""Runtime settings for the metrics CLI and the Mongo record store.

Values come from the process environment, seeded from an optional `.env`
at the repository root. Report thresholds and the store retry policy are
tunable here without code changes; see `.env.example`.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
import os

from dotenv import load_dotenv

# src/campaign_metrics/config.py -> repository root
REPO_ROOT = Path(__file__).resolve().parents[2]
load_dotenv(REPO_ROOT / ".env", override=False)

@dataclass(frozen=True)
class Settings:
    """Container for configuration read from the environment.

    Attributes:
        mongo_uri: MongoDB connection URI.
        mongo_db: Database holding the contact and dataset collections.
        store_max_retries: Attempts per store query before giving up.
        store_backoff_seconds: Base delay for exponential backoff.
        linkedin_rate_threshold: Acceptance rate (%) below which a
            personalization recommendation is made.
        email_open_threshold: Open rate (%) below which subject-line
            testing is recommended.
        webinar_rsvp_threshold: RSVP rate (%) below which topic/incentive
            changes are recommended.
        report_dir: Directory where exported reports are written.
    """
    mongo_uri: str
    mongo_db: str
    store_max_retries: int = 3
    store_backoff_seconds: float = 0.5
    linkedin_rate_threshold: float = 20.0
    email_open_threshold: float = 25.0
    webinar_rsvp_threshold: float = 15.0
    report_dir: Path = Path("reports")


def _env_number(name: str, default: float) -> float:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        raise RuntimeError(f"{name} must be numeric, got {raw!r}") from None


def get_settings() -> Settings:
    """Read environment variables and return a frozen `Settings` object.

    Raises:
        RuntimeError: if a numeric setting cannot be parsed or the retry
            count is below 1.
    """
    mongo_uri = os.getenv("MONGO_URI", "mongodb://localhost:27017")
    mongo_db = os.getenv("MONGO_DB", "campaigns")

    max_retries = int(_env_number("STORE_MAX_RETRIES", 3))
    if max_retries < 1:
        raise RuntimeError("STORE_MAX_RETRIES must be at least 1.")

    return Settings(
        mongo_uri=mongo_uri,
        mongo_db=mongo_db,
        store_max_retries=max_retries,
        store_backoff_seconds=_env_number("STORE_BACKOFF_SECONDS", 0.5),
        linkedin_rate_threshold=_env_number("LINKEDIN_RATE_THRESHOLD", 20.0),
        email_open_threshold=_env_number("EMAIL_OPEN_THRESHOLD", 25.0),
        webinar_rsvp_threshold=_env_number("WEBINAR_RSVP_THRESHOLD", 15.0),
        report_dir=Path(os.getenv("REPORT_DIR", "reports")),
    )
