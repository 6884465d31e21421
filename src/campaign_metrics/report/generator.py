"""Performance report built from the three channel metrics.

`generate_report` is a pure function: it reads `ChannelMetrics` and
returns a `Report` without raising.
"""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Iterable

from campaign_metrics.channels import CHANNELS
from campaign_metrics.config import Settings
from campaign_metrics.models import ChannelMetrics, Dataset, Report

LINKEDIN_ADVICE = (
    "LinkedIn acceptance rate is below average. "
    "Consider personalizing connection requests more."
)
EMAIL_ADVICE = "Email open rates could be improved. Try A/B testing subject lines."
WEBINAR_ADVICE = (
    "Webinar RSVP rates are low. "
    "Consider offering more compelling topics or incentives."
)
ALL_GOOD = "All channels are performing well! Continue current strategies."


def overall_performance(
    linkedin: ChannelMetrics,
    email: ChannelMetrics,
    webinar: ChannelMetrics,
) -> float:
    """Average of the three primary rates, at full precision."""
    return (linkedin.primary_rate + email.primary_rate + webinar.primary_rate) / 3


def top_channel(metrics: Iterable[ChannelMetrics]) -> str:
    """Return the channel with the highest primary rate.

    A later channel replaces the leader only with a strictly greater rate,
    so ties go to the earlier channel in `CHANNELS` order.
    """
    by_name = {m.channel: m for m in metrics}
    best = None
    for config in CHANNELS:
        m = by_name.get(config.name)
        if m is None:
            continue
        if best is None or m.primary_rate > best.primary_rate:
            best = m
    if best is None:
        return CHANNELS[0].name
    return best.channel


def recommendations(
    linkedin: ChannelMetrics,
    email: ChannelMetrics,
    webinar: ChannelMetrics,
    settings: Settings | None = None,
) -> list[str]:
    """Return every threshold recommendation that applies.

    Rules are independent; when none fires a single positive message is
    returned instead.
    """
    linkedin_min = settings.linkedin_rate_threshold if settings else 20.0
    email_min = settings.email_open_threshold if settings else 25.0
    webinar_min = settings.webinar_rsvp_threshold if settings else 15.0

    out: list[str] = []
    if linkedin.primary_rate < linkedin_min:
        out.append(LINKEDIN_ADVICE)
    if email.primary_rate < email_min:
        out.append(EMAIL_ADVICE)
    if webinar.primary_rate < webinar_min:
        out.append(WEBINAR_ADVICE)

    if not out:
        out.append(ALL_GOOD)
    return out


def generate_report(
    linkedin: ChannelMetrics,
    email: ChannelMetrics,
    webinar: ChannelMetrics,
    generated_at: datetime | None = None,
    datasets: Iterable[Dataset] = (),
    settings: Settings | None = None,
) -> Report:
    """Combine channel metrics into a `Report`.

    Args:
        linkedin: LinkedIn metrics (primary rate: acceptance).
        email: Email metrics (primary rate: open).
        webinar: Webinar metrics (primary rate: RSVP).
        generated_at: Timestamp to stamp on the report; defaults to now (UTC).
        datasets: Datasets whose campaign summaries are attached for display.
        settings: Source of recommendation thresholds; defaults apply when
            omitted.
    """
    return Report(
        total_contacts=linkedin.total + email.total + webinar.total,
        overall_performance=overall_performance(linkedin, email, webinar),
        top_channel=top_channel([linkedin, email, webinar]),
        recommendations=recommendations(linkedin, email, webinar, settings),
        generated_at=generated_at or datetime.now(timezone.utc),
        campaign_summaries=[d.campaign_summary for d in datasets if d.campaign_summary],
    )
