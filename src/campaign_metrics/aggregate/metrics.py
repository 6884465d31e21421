"""Channel KPI computation.

`compute_channel_metrics` is a pure function of a record list and its
`ChannelConfig`; it never touches the store.
"""
from __future__ import annotations

import logging
from typing import Any, Iterable, Sequence

import pandas as pd
from pydantic import ValidationError

from campaign_metrics.channels import ChannelConfig
from campaign_metrics.models import ChannelMetrics

log = logging.getLogger(__name__)

RECENT_ACTIVITY_SIZE = 5


def rate(hits: int, total: int) -> float:
    """Return `hits / total * 100`, or 0.0 when `total` is 0."""
    if total == 0:
        return 0.0
    return hits / total * 100.0


def normalize_records(
    records: Iterable[dict[str, Any]],
    config: ChannelConfig,
) -> tuple[list[dict[str, Any]], int]:
    """Coerce raw store documents through the channel's record model.

    Every input document is returned, in order, so counts always match the
    store. A document that still fails validation is passed through as-is.

    Args:
        records: Documents as returned by the store.
        config: Channel the documents belong to.

    Returns:
        A tuple of (list_of_records, unparsed_count).
    """
    out: list[dict[str, Any]] = []
    unparsed = 0
    for doc in records:
        try:
            parsed = config.record_model.model_validate(doc).model_dump(mode="python")
            out.append({**doc, **parsed})
        except ValidationError:
            out.append(dict(doc))
            unparsed += 1
    if unparsed:
        log.warning("Kept %d unparsed %s records as stored", unparsed, config.name)
    return out, unparsed


def _hits(series: pd.Series, positive_values: Sequence[object]) -> int:
    return int(series.isin(list(positive_values)).sum())


def compute_channel_metrics(
    records: Sequence[dict[str, Any]],
    config: ChannelConfig,
) -> ChannelMetrics:
    """Compute totals, status counts, rates and facets for one channel.

    Args:
        records: Channel records in store order (newest first).
        config: Channel configuration describing the record fields.

    Returns:
        `ChannelMetrics` for the record set. An empty set yields zero
        counts and zero rates.
    """
    total = len(records)
    if total == 0:
        return empty_metrics(config)

    pdf = pd.DataFrame.from_records(list(records))

    def column(name: str) -> pd.Series:
        if name in pdf.columns:
            return pdf[name]
        return pd.Series([None] * total, dtype=object)

    status = column(config.status_field)
    status_counts: dict[str, int] = {}
    if config.status_values:
        for value in config.status_values:
            status_counts[value] = int((status == value).sum())
    else:
        status_counts[config.status_field] = _hits(status, config.positive_values)

    rates = {config.rate_name: rate(_hits(status, config.positive_values), total)}
    for extra in config.extra_rates:
        hits = _hits(column(extra.field), extra.positive_values)
        status_counts.setdefault(extra.field, hits)
        rates[extra.name] = rate(hits, total)

    # pd.unique keeps first-seen order
    facets = [str(v) for v in pd.unique(column(config.facet_field).dropna())]

    return ChannelMetrics(
        channel=config.name,
        total=total,
        status_counts=status_counts,
        rates=rates,
        primary_rate_name=config.rate_name,
        facets=facets,
        recent_activity=list(records[:RECENT_ACTIVITY_SIZE]),
    )


def empty_metrics(config: ChannelConfig) -> ChannelMetrics:
    """Return zeroed metrics for a channel with no (or unreadable) records."""
    counts = {v: 0 for v in config.status_values} or {config.status_field: 0}
    for extra in config.extra_rates:
        counts.setdefault(extra.field, 0)
    return ChannelMetrics(
        channel=config.name,
        total=0,
        status_counts=counts,
        rates={name: 0.0 for name in config.rate_names},
        primary_rate_name=config.rate_name,
    )
