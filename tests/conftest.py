from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Any

import pytest

from campaign_metrics.channels import ChannelConfig
from campaign_metrics.errors import StoreUnavailable
from campaign_metrics.store.base import DEFAULT_ORDER, OrderBy, Pagination, RecordFilters


def _day(value: Any) -> date | None:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        return date.fromisoformat(value[:10])
    return None


class FakeStore:
    """In-memory RecordStore keyed by collection name."""

    def __init__(
        self,
        collections: dict[str, list[dict[str, Any]]] | None = None,
        failing: set[str] | None = None,
    ) -> None:
        self.collections = collections or {}
        self.failing = failing or set()
        self.calls: list[tuple[str, RecordFilters | None]] = []

    def _check(self, collection: str) -> None:
        if collection in self.failing:
            raise StoreUnavailable(collection, "connection refused")

    def _filtered(self, channel: ChannelConfig, filters: RecordFilters | None) -> list[dict[str, Any]]:
        rows = list(self.collections.get(channel.collection, []))
        if filters is None:
            return rows
        if filters.dataset_id is not None:
            rows = [r for r in rows if r.get("dataset_id") == filters.dataset_id]
        if filters.date_range is not None:
            start, end = filters.date_range
            rows = [
                r for r in rows
                if (d := _day(r.get(channel.date_field))) is not None and start <= d <= end
            ]
        return rows

    def query_records(
        self,
        channel: ChannelConfig,
        filters: RecordFilters | None = None,
        pagination: Pagination | None = None,
        order_by: OrderBy | None = None,
    ) -> list[dict[str, Any]]:
        self.calls.append((channel.collection, filters))
        self._check(channel.collection)
        order = order_by or DEFAULT_ORDER
        rows = sorted(
            self._filtered(channel, filters),
            key=lambda r: r.get(order.field) or datetime.min,
            reverse=order.descending,
        )
        if pagination is not None:
            rows = rows[pagination.offset : pagination.offset + pagination.limit]
        return rows

    def count_records(self, channel: ChannelConfig, filters: RecordFilters | None = None) -> int:
        self._check(channel.collection)
        return len(self._filtered(channel, filters))

    def query_datasets(self, order_by: OrderBy = DEFAULT_ORDER) -> list[dict[str, Any]]:
        self._check("datasets")
        return sorted(
            self.collections.get("datasets", []),
            key=lambda r: r.get(order_by.field) or datetime.min,
            reverse=order_by.descending,
        )


BASE_TS = datetime(2024, 5, 1, 12, 0, 0)


def linkedin(i: int, status: str, company: str = "Acme", day: date | None = None, dataset: str = "ds-li") -> dict[str, Any]:
    return {
        "id": f"li-{i}",
        "dataset_id": dataset,
        "name": f"Contact {i}",
        "company": company,
        "status": status,
        "date_sent": (day or date(2024, 5, 1)).isoformat(),
        "created_at": BASE_TS + timedelta(minutes=i),
    }


def email(i: int, opened: bool, replied: bool = False, campaign: str = "Spring", day: date | None = None) -> dict[str, Any]:
    return {
        "id": f"em-{i}",
        "dataset_id": "ds-em",
        "email": f"user{i}@example.com",
        "campaign_name": campaign,
        "opened": opened,
        "replied": replied,
        "date_sent": (day or date(2024, 5, 1)).isoformat(),
        "created_at": BASE_TS + timedelta(minutes=i),
    }


def webinar(i: int, rsvp: str, industry: str = "SaaS", day: date | None = None) -> dict[str, Any]:
    return {
        "id": f"wb-{i}",
        "dataset_id": "ds-wb",
        "name": f"Guest {i}",
        "industry": industry,
        "rsvp_status": rsvp,
        "invited_date": (day or date(2024, 5, 1)).isoformat(),
        "created_at": BASE_TS + timedelta(minutes=i),
    }


@pytest.fixture
def populated_store() -> FakeStore:
    return FakeStore(
        {
            "linkedin_contacts": [
                linkedin(1, "accepted", "Acme"),
                linkedin(2, "pending", "Globex"),
                linkedin(3, "declined", "Acme"),
                linkedin(4, "accepted", "Initech"),
            ],
            "email_contacts": [
                email(1, True, True, "Spring"),
                email(2, False, False, "Spring"),
                email(3, True, False, "Summer"),
            ],
            "webinar_attendees": [
                webinar(1, "confirmed", "SaaS"),
                webinar(2, "declined", "Fintech"),
            ],
            "datasets": [
                {
                    "id": "ds-li",
                    "name": "linkedin_may.xlsx",
                    "type": "linkedin",
                    "row_count": 4,
                    "tags": ["Q2", "outbound"],
                    "created_at": datetime(2024, 5, 2),
                    "campaign_summary": {
                        "title": "May outreach",
                        "description": "Founders in EMEA",
                        "targetAudience": "Founders",
                    },
                },
                {
                    "id": "ds-em",
                    "name": "spring_emails.csv",
                    "type": "email",
                    "row_count": 3,
                    "tags": [],
                    "created_at": datetime(2024, 5, 3),
                },
            ],
        }
    )
