"""Weekly trend series.

The trailing span is split into fixed 7-day buckets. For bucket `i` of
`n`, `start = today - (n-1-i)*7 days` and `end = start + 6 days`; both
ends are inclusive, so consecutive buckets meet without overlap at
calendar-day granularity. Every bucket is emitted even when empty.
"""
from __future__ import annotations

import logging
from datetime import date, timedelta
from typing import Any, Mapping, NamedTuple, Sequence

import pandas as pd

from campaign_metrics.aggregate.dashboard import fetch_all_channels
from campaign_metrics.aggregate.metrics import rate
from campaign_metrics.channels import CHANNELS, ChannelConfig
from campaign_metrics.models import TrendPoint, to_calendar_day
from campaign_metrics.store.base import RecordFilters, RecordStore

log = logging.getLogger(__name__)

TREND_WEEKS = 4
DAYS_PER_BUCKET = 7


class WeekBucket(NamedTuple):
    label: str
    start: date
    end: date


def week_buckets(today: date, weeks: int = TREND_WEEKS) -> list[WeekBucket]:
    """Return `weeks` consecutive 7-day buckets, oldest first."""
    buckets = []
    for i in range(weeks):
        start = today - timedelta(days=(weeks - 1 - i) * DAYS_PER_BUCKET)
        end = start + timedelta(days=DAYS_PER_BUCKET - 1)
        buckets.append(WeekBucket(f"Week {i + 1}", start, end))
    return buckets


def trend_span(today: date, weeks: int = TREND_WEEKS) -> tuple[date, date]:
    """Return the inclusive `(first_day, last_day)` covered by the buckets."""
    buckets = week_buckets(today, weeks)
    return buckets[0].start, buckets[-1].end


def _channel_frame(records: Sequence[dict[str, Any]], config: ChannelConfig) -> pd.DataFrame:
    """Return a frame with a normalized `day` column; undated rows dropped."""
    pdf = pd.DataFrame.from_records(list(records))
    if pdf.empty or config.date_field not in pdf.columns:
        return pd.DataFrame(columns=["day"])
    days = pdf[config.date_field].map(to_calendar_day)
    pdf["day"] = pd.to_datetime(days, errors="coerce")
    return pdf.dropna(subset=["day"])


def _hits(pdf: pd.DataFrame, field: str, positive_values: Sequence[object]) -> int:
    if field not in pdf.columns:
        return 0
    return int(pdf[field].isin(list(positive_values)).sum())


def _bucket_rates(pdf: pd.DataFrame, config: ChannelConfig) -> tuple[dict[str, float], int]:
    total = len(pdf)
    rates = {
        f"{config.name}_{config.rate_name}": rate(
            _hits(pdf, config.status_field, config.positive_values), total
        )
    }
    for extra in config.extra_rates:
        rates[f"{config.name}_{extra.name}"] = rate(
            _hits(pdf, extra.field, extra.positive_values), total
        )
    return rates, total


def build_trend(
    records_by_channel: Mapping[str, Sequence[dict[str, Any]]],
    today: date,
    weeks: int = TREND_WEEKS,
) -> list[TrendPoint]:
    """Bucket each channel's records by week and compute per-bucket rates.

    Args:
        records_by_channel: Records keyed by channel name. Missing channels
            are treated as having no records.
        today: Day the most recent bucket starts on.
        weeks: Number of buckets to emit.

    Returns:
        Exactly `weeks` trend points ordered oldest to newest. Rate keys
        are `<channel>_<rate_name>`, e.g. `linkedin_acceptance_rate`.
    """
    frames = {
        config.name: _channel_frame(records_by_channel.get(config.name, []), config)
        for config in CHANNELS
    }

    points: list[TrendPoint] = []
    for bucket in week_buckets(today, weeks):
        lo = pd.Timestamp(bucket.start)
        hi = pd.Timestamp(bucket.end)
        rates: dict[str, float] = {}
        counts: dict[str, int] = {}
        for config in CHANNELS:
            pdf = frames[config.name]
            in_bucket = pdf[(pdf["day"] >= lo) & (pdf["day"] <= hi)]
            channel_rates, counts[config.name] = _bucket_rates(in_bucket, config)
            rates.update(channel_rates)
        points.append(
            TrendPoint(label=bucket.label, start=bucket.start, end=bucket.end, rates=rates, counts=counts)
        )
    return points


def fetch_weekly_trend(
    store: RecordStore,
    today: date | None = None,
    weeks: int = TREND_WEEKS,
) -> list[TrendPoint]:
    """Query the trailing span for every channel and build the trend.

    Channels whose query fails contribute no records, so their rates are 0
    in every bucket.
    """
    today = today or date.today()
    filters = RecordFilters(date_range=trend_span(today, weeks))
    fetched = fetch_all_channels(store, filters)

    records = {name: result.records for name, result in fetched.items()}
    log.info(
        "Trend span %s..%s: %s",
        filters.date_range[0],
        filters.date_range[1],
        ", ".join(f"{name}={len(r)}" for name, r in records.items()),
    )
    return build_trend(records, today, weeks)
