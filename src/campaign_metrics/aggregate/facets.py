"""Facet distributions (company, campaign, industry).

Counts are taken from the records themselves; values appear in first-seen
order so the distribution lines up with `ChannelMetrics.facets`.
"""
from __future__ import annotations

from typing import Any, Sequence

import pandas as pd

from campaign_metrics.channels import ChannelConfig
from campaign_metrics.models import FacetShare


def facet_distribution(
    records: Sequence[dict[str, Any]],
    config: ChannelConfig,
) -> list[FacetShare]:
    """Return the record count and share for each distinct facet value.

    Records without a facet value are excluded from both the counts and
    the share denominator.
    """
    if not records:
        return []
    pdf = pd.DataFrame.from_records(list(records))
    if config.facet_field not in pdf.columns:
        return []

    values = pdf[config.facet_field].dropna().astype(str)
    counts = values.value_counts(sort=False)
    total = int(counts.sum())

    return [
        FacetShare(name=name, count=int(counts[name]), share_pct=int(counts[name]) / total * 100.0)
        for name in pd.unique(values)
    ]
