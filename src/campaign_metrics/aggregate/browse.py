"""Paged access to a single dataset's records and dataset search."""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Any, Iterable

from campaign_metrics.channels import get_channel
from campaign_metrics.models import Dataset
from campaign_metrics.store.base import DEFAULT_ORDER, Pagination, RecordFilters, RecordStore

log = logging.getLogger(__name__)

PAGE_SIZE = 50
HIDDEN_COLUMNS = ("id", "dataset_id", "created_at")


@dataclass(frozen=True)
class DatasetPage:
    """One page of a dataset's records.

    Attributes:
        page: 1-based page number.
        total_count: Records in the dataset.
        total_pages: `ceil(total_count / page_size)`, at least 1 so an
            empty dataset reads as page 1 of 1.
        records: Rows on this page, newest first.
        headers: Columns to display (internal columns removed).
    """
    page: int
    page_size: int
    total_count: int
    total_pages: int
    records: list[dict[str, Any]] = field(default_factory=list)
    headers: list[str] = field(default_factory=list)


def visible_columns(records: list[dict[str, Any]]) -> list[str]:
    """Return the first record's keys minus internal bookkeeping columns."""
    if not records:
        return []
    return [k for k in records[0] if k not in HIDDEN_COLUMNS]


def fetch_dataset_page(
    store: RecordStore,
    dataset: Dataset,
    page: int = 1,
    page_size: int = PAGE_SIZE,
) -> DatasetPage:
    """Fetch one page of records belonging to `dataset`.

    Raises:
        ValueError: if `page` is below 1.
        StoreUnavailable: if the store cannot be read.
    """
    if page < 1:
        raise ValueError(f"page must be >= 1, got {page}")

    config = get_channel(dataset.type)
    filters = RecordFilters(dataset_id=dataset.id)
    total = store.count_records(config, filters)
    records = store.query_records(
        config,
        filters=filters,
        pagination=Pagination(offset=(page - 1) * page_size, limit=page_size),
        order_by=DEFAULT_ORDER,
    )
    log.info("Dataset %s page %d: %d of %d rows", dataset.id, page, len(records), total)

    return DatasetPage(
        page=page,
        page_size=page_size,
        total_count=total,
        total_pages=max(1, math.ceil(total / page_size)),
        records=records,
        headers=visible_columns(records),
    )


def fetch_dataset_records(store: RecordStore, dataset: Dataset) -> list[dict[str, Any]]:
    """Return every record of `dataset` (newest first) for export."""
    config = get_channel(dataset.type)
    return store.query_records(
        config,
        filters=RecordFilters(dataset_id=dataset.id),
        order_by=DEFAULT_ORDER,
    )


def filter_datasets(datasets: Iterable[Dataset], term: str) -> list[Dataset]:
    """Case-insensitive match of `term` against name, type or any tag."""
    needle = term.lower()
    return [
        d
        for d in datasets
        if needle in d.name.lower()
        or needle in d.type.lower()
        or any(needle in tag.lower() for tag in d.tags)
    ]
