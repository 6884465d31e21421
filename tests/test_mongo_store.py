from __future__ import annotations

from datetime import date, datetime
from typing import Any

import pytest
from pymongo import DESCENDING
from pymongo.errors import AutoReconnect

from campaign_metrics.channels import LINKEDIN, WEBINAR
from campaign_metrics.errors import StoreUnavailable
from campaign_metrics.store.base import Pagination, RecordFilters
from campaign_metrics.store.mongo_store import MongoRecordStore, build_query


class FakeCursor:
    def __init__(self, docs: list[dict[str, Any]]) -> None:
        self.docs = docs
        self.ops: list[tuple[str, Any]] = []

    def sort(self, field: str, direction: int) -> "FakeCursor":
        self.ops.append(("sort", (field, direction)))
        return self

    def skip(self, n: int) -> "FakeCursor":
        self.ops.append(("skip", n))
        return self

    def limit(self, n: int) -> "FakeCursor":
        self.ops.append(("limit", n))
        return self

    def __iter__(self):  # type: ignore[no-untyped-def]
        return iter(self.docs)


class FlakyCollection:
    def __init__(self, failures: int, docs: list[dict[str, Any]] | None = None) -> None:
        self.failures = failures
        self.calls = 0
        self.docs = docs or []
        self.last_cursor: FakeCursor | None = None
        self.last_find: tuple[dict[str, Any], dict[str, Any]] | None = None

    def _tick(self) -> None:
        self.calls += 1
        if self.calls <= self.failures:
            raise AutoReconnect("primary stepped down")

    def find(self, query: dict[str, Any], projection: dict[str, Any]) -> FakeCursor:
        self._tick()
        self.last_find = (query, projection)
        self.last_cursor = FakeCursor(self.docs)
        return self.last_cursor

    def count_documents(self, query: dict[str, Any]) -> int:
        self._tick()
        return 7


def test_build_query_matches_string_and_datetime_dates() -> None:
    q = build_query(
        WEBINAR,
        RecordFilters(date_range=(date(2024, 5, 7), date(2024, 6, 3)), dataset_id="ds-1"),
    )
    assert q["dataset_id"] == "ds-1"
    as_string, as_datetime = q["$or"]
    assert as_string == {"invited_date": {"$gte": "2024-05-07", "$lt": "2024-06-04"}}
    assert as_datetime["invited_date"]["$gte"] == datetime(2024, 5, 7)
    assert as_datetime["invited_date"]["$lte"].date() == date(2024, 6, 3)
    assert as_datetime["invited_date"]["$lte"].hour == 23
    assert build_query(LINKEDIN, None) == {}


def test_string_range_covers_timestamps_on_the_last_day() -> None:
    q = build_query(LINKEDIN, RecordFilters(date_range=(date(2024, 5, 7), date(2024, 6, 3))))
    bounds = q["$or"][0]["date_sent"]
    for stored in ("2024-05-07", "2024-06-03", "2024-06-03T18:45:00Z"):
        assert bounds["$gte"] <= stored < bounds["$lt"]
    for stored in ("2024-05-06", "2024-06-04"):
        assert not (bounds["$gte"] <= stored < bounds["$lt"])


def test_query_records_applies_order_and_pagination() -> None:
    coll = FlakyCollection(0, [{"id": "a"}])
    store = MongoRecordStore({"linkedin_contacts": coll}, sleep=lambda s: None)  # type: ignore[arg-type]

    out = store.query_records(LINKEDIN, RecordFilters(dataset_id="ds"), Pagination(offset=50, limit=50))

    assert out == [{"id": "a"}]
    assert coll.last_find == ({"dataset_id": "ds"}, {"_id": False})
    assert coll.last_cursor is not None
    assert coll.last_cursor.ops == [("sort", ("created_at", DESCENDING)), ("skip", 50), ("limit", 50)]


def test_transient_errors_are_retried_with_backoff() -> None:
    sleeps: list[float] = []
    coll = FlakyCollection(2)
    store = MongoRecordStore(
        {"linkedin_contacts": coll},  # type: ignore[arg-type]
        max_retries=3,
        backoff_seconds=0.1,
        sleep=sleeps.append,
    )
    assert store.count_records(LINKEDIN) == 7
    assert sleeps == [0.1, 0.2]


def test_exhausted_retries_raise_store_unavailable() -> None:
    sleeps: list[float] = []
    store = MongoRecordStore(
        {"linkedin_contacts": FlakyCollection(5)},  # type: ignore[arg-type]
        max_retries=3,
        backoff_seconds=0.1,
        sleep=sleeps.append,
    )
    with pytest.raises(StoreUnavailable) as exc:
        store.query_records(LINKEDIN)
    assert exc.value.collection == "linkedin_contacts"
    assert len(sleeps) == 2


def test_pagination_rejects_negative_offset() -> None:
    with pytest.raises(ValueError):
        Pagination(offset=-1, limit=10)


def test_from_settings_builds_lazy_client() -> None:
    from campaign_metrics.config import Settings

    store = MongoRecordStore.from_settings(
        Settings(mongo_uri="mongodb://localhost:27017", mongo_db="campaigns_test", store_max_retries=2)
    )
    assert store._db.name == "campaigns_test"
    assert store._max_retries == 2
