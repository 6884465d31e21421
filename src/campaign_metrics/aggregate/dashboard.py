"""Dashboard-level aggregation over every channel.

Module notes:
- Channel queries are independent and run as Dask delayed tasks on the
  threaded scheduler.
- A failed query degrades its channel to zeroed metrics; the caller always
  receives a complete `DashboardMetrics`.
- `MetricsRefresher` publishes only the result of the newest refresh.
"""
from __future__ import annotations

import logging
import threading
from typing import Any, Callable, NamedTuple
from typing import cast, Any as TypingAny

from dask import delayed, compute  # type: ignore[attr-defined]
from pydantic import ValidationError

from campaign_metrics.channels import CHANNELS, ChannelConfig
from campaign_metrics.errors import StoreUnavailable
from campaign_metrics.models import ChannelMetrics, DashboardMetrics, Dataset
from campaign_metrics.aggregate.metrics import (
    compute_channel_metrics,
    empty_metrics,
    normalize_records,
)
from campaign_metrics.store.base import DEFAULT_ORDER, RecordFilters, RecordStore

log = logging.getLogger(__name__)


class ChannelFetch(NamedTuple):
    """Outcome of one channel query: records, or the failure notice."""
    channel: str
    records: list[dict[str, Any]]
    error: str | None


def fetch_channel_records(
    store: RecordStore,
    config: ChannelConfig,
    filters: RecordFilters | None = None,
) -> ChannelFetch:
    """Query and validate one channel's records without raising.

    Runs inside a worker thread when scheduled by Dask.
    """
    try:
        raw = store.query_records(config, filters=filters, order_by=DEFAULT_ORDER)
    except StoreUnavailable as e:
        log.warning("Could not load %s records: %s", config.name, e)
        return ChannelFetch(config.name, [], f"{config.label} data is temporarily unavailable.")

    records, _ = normalize_records(raw, config)
    return ChannelFetch(config.name, records, None)


def fetch_all_channels(
    store: RecordStore,
    filters: RecordFilters | None = None,
) -> dict[str, ChannelFetch]:
    """Fetch every channel in parallel, keyed by channel name."""
    tasks = [delayed(fetch_channel_records)(store, config, filters) for config in CHANNELS]
    # `compute` is untyped in our environment; cast to Any before calling
    results = cast(TypingAny, compute)(*tasks, scheduler="threads")
    return {r.channel: r for r in results}


def fetch_datasets(store: RecordStore) -> tuple[list[Dataset], str | None]:
    """Return datasets newest first, or an empty list and a notice on failure."""
    try:
        docs = store.query_datasets(DEFAULT_ORDER)
    except StoreUnavailable as e:
        log.warning("Could not load datasets: %s", e)
        return [], "Dataset list is temporarily unavailable."

    datasets: list[Dataset] = []
    for doc in docs:
        try:
            datasets.append(Dataset.model_validate(doc))
        except ValidationError as e:
            log.warning("Skipping malformed dataset %s: %s", doc.get("id"), e)
    return datasets, None


def fetch_dashboard_metrics(store: RecordStore) -> DashboardMetrics:
    """Compute metrics for every channel plus the dataset list.

    Never raises for store failures: unreadable channels report zeroed
    metrics and the result is flagged `degraded`.
    """
    fetched = fetch_all_channels(store)
    datasets, dataset_error = fetch_datasets(store)

    metrics: dict[str, ChannelMetrics] = {}
    errors: list[str] = []
    for config in CHANNELS:
        result = fetched[config.name]
        if result.error is not None:
            errors.append(result.error)
            metrics[config.name] = empty_metrics(config)
        else:
            metrics[config.name] = compute_channel_metrics(result.records, config)

    if dataset_error is not None:
        errors.append(dataset_error)

    log.info(
        "Dashboard metrics: %s",
        ", ".join(f"{name}={m.total}" for name, m in metrics.items()),
    )

    return DashboardMetrics(
        linkedin=metrics["linkedin"],
        email=metrics["email"],
        webinar=metrics["webinar"],
        datasets=datasets,
        degraded=bool(errors),
        errors=errors,
    )


class MetricsRefresher:
    """Holds the latest dashboard metrics across overlapping refreshes.

    Every `refresh` takes a new generation number. A result is published
    only if no newer refresh has started since, so a slow stale fetch can
    never overwrite a fresher one.
    """

    def __init__(
        self,
        store: RecordStore,
        fetch: Callable[[RecordStore], DashboardMetrics] = fetch_dashboard_metrics,
    ) -> None:
        self._store = store
        self._fetch = fetch
        self._lock = threading.Lock()
        self._generation = 0
        self._latest: DashboardMetrics | None = None

    @property
    def latest(self) -> DashboardMetrics | None:
        with self._lock:
            return self._latest

    def begin(self) -> int:
        with self._lock:
            self._generation += 1
            return self._generation

    def publish(self, generation: int, metrics: DashboardMetrics) -> bool:
        """Store `metrics` if `generation` is still the newest; return whether it was."""
        with self._lock:
            if generation != self._generation:
                log.info("Discarding stale metrics (generation %d < %d)", generation, self._generation)
                return False
            self._latest = metrics
            return True

    def refresh(self) -> DashboardMetrics | None:
        """Fetch fresh metrics and return whatever is newest afterwards."""
        generation = self.begin()
        self.publish(generation, self._fetch(self._store))
        return self.latest
