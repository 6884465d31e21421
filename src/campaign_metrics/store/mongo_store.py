"""MongoDB implementation of the `RecordStore` contract.

Each channel maps to one collection (see `ChannelConfig.collection`).
Date fields may be stored as ISO `YYYY-MM-DD` strings (as the upload
service writes them) or as BSON datetimes. MongoDB only compares values of
the same BSON type, so day ranges match either representation.
"""

from __future__ import annotations

import logging
import time
from datetime import datetime, timedelta
from typing import Any, Callable, TypeVar

from pymongo import ASCENDING, DESCENDING
from pymongo.database import Database
from pymongo.errors import PyMongoError

from campaign_metrics.channels import DATASETS_COLLECTION, ChannelConfig
from campaign_metrics.config import Settings
from campaign_metrics.db import get_client, get_db
from campaign_metrics.errors import StoreUnavailable
from campaign_metrics.store.base import DEFAULT_ORDER, OrderBy, Pagination, RecordFilters

log = logging.getLogger(__name__)

T = TypeVar("T")

PROJECTION = {"_id": False}


def build_query(channel: ChannelConfig, filters: RecordFilters | None) -> dict[str, Any]:
    """Translate `RecordFilters` into a Mongo filter document."""
    query: dict[str, Any] = {}
    if filters is None:
        return query

    if filters.dataset_id is not None:
        query["dataset_id"] = filters.dataset_id

    if filters.date_range is not None:
        start, end = filters.date_range
        field = channel.date_field
        query["$or"] = [
            # ISO strings: "YYYY-MM-DD" or a longer timestamp on the same day
            {field: {"$gte": start.isoformat(), "$lt": (end + timedelta(days=1)).isoformat()}},
            {
                field: {
                    "$gte": datetime.combine(start, datetime.min.time()),
                    "$lte": datetime.combine(end, datetime.max.time()),
                }
            },
        ]
    return query


class MongoRecordStore:
    """Read-only record store backed by a Mongo database.

    Transient `PyMongoError`s are retried with exponential backoff; once
    attempts are exhausted the error surfaces as `StoreUnavailable`.
    """

    def __init__(
        self,
        db: Database[dict[str, Any]],
        max_retries: int = 3,
        backoff_seconds: float = 0.5,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._db = db
        self._max_retries = max(1, max_retries)
        self._backoff_seconds = backoff_seconds
        self._sleep = sleep

    @classmethod
    def from_settings(cls, settings: Settings) -> "MongoRecordStore":
        client = get_client(settings.mongo_uri)
        return cls(
            get_db(client, settings.mongo_db),
            max_retries=settings.store_max_retries,
            backoff_seconds=settings.store_backoff_seconds,
        )

    def _with_retry(self, collection: str, op: Callable[[], T]) -> T:
        last_err: PyMongoError | None = None
        for attempt in range(self._max_retries):
            try:
                return op()
            except PyMongoError as e:
                last_err = e
                if attempt + 1 < self._max_retries:
                    delay = min(8.0, self._backoff_seconds * (2**attempt))
                    log.warning(
                        "Query on %s failed (attempt %d/%d), retrying in %.2fs: %s",
                        collection,
                        attempt + 1,
                        self._max_retries,
                        delay,
                        e,
                    )
                    self._sleep(delay)
        raise StoreUnavailable(collection, str(last_err))

    def query_records(
        self,
        channel: ChannelConfig,
        filters: RecordFilters | None = None,
        pagination: Pagination | None = None,
        order_by: OrderBy | None = None,
    ) -> list[dict[str, Any]]:
        order = order_by or DEFAULT_ORDER
        query = build_query(channel, filters)

        def run() -> list[dict[str, Any]]:
            cursor = self._db[channel.collection].find(query, PROJECTION)
            cursor = cursor.sort(order.field, DESCENDING if order.descending else ASCENDING)
            if pagination is not None:
                cursor = cursor.skip(pagination.offset).limit(pagination.limit)
            return list(cursor)

        return self._with_retry(channel.collection, run)

    def count_records(
        self,
        channel: ChannelConfig,
        filters: RecordFilters | None = None,
    ) -> int:
        query = build_query(channel, filters)
        return self._with_retry(
            channel.collection,
            lambda: self._db[channel.collection].count_documents(query),
        )

    def query_datasets(self, order_by: OrderBy = DEFAULT_ORDER) -> list[dict[str, Any]]:
        def run() -> list[dict[str, Any]]:
            cursor = self._db[DATASETS_COLLECTION].find({}, PROJECTION)
            return list(
                cursor.sort(order_by.field, DESCENDING if order_by.descending else ASCENDING)
            )

        return self._with_retry(DATASETS_COLLECTION, run)
