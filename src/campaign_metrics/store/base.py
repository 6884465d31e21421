"""Query contract between the aggregation core and the record store.

Stores return plain documents (dicts). Failures to reach the backend are
raised as `StoreUnavailable`; everything else is a programming error.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Any, Protocol

from campaign_metrics.channels import ChannelConfig


@dataclass(frozen=True)
class RecordFilters:
    """Optional restrictions applied to a record query.

    Attributes:
        date_range: Inclusive `(start, end)` days matched against the
            channel's date field.
        dataset_id: Only return records from this dataset.
    """
    date_range: tuple[date, date] | None = None
    dataset_id: str | None = None


@dataclass(frozen=True)
class Pagination:
    offset: int = 0
    limit: int = 50

    def __post_init__(self) -> None:
        if self.offset < 0 or self.limit < 1:
            raise ValueError(f"Invalid pagination: offset={self.offset} limit={self.limit}")


@dataclass(frozen=True)
class OrderBy:
    field: str = "created_at"
    descending: bool = True


DEFAULT_ORDER = OrderBy()


class RecordStore(Protocol):
    """Read operations the core needs from the record store."""

    def query_records(
        self,
        channel: ChannelConfig,
        filters: RecordFilters | None = None,
        pagination: Pagination | None = None,
        order_by: OrderBy | None = None,
    ) -> list[dict[str, Any]]:
        ...

    def count_records(
        self,
        channel: ChannelConfig,
        filters: RecordFilters | None = None,
    ) -> int:
        ...

    def query_datasets(self, order_by: OrderBy = DEFAULT_ORDER) -> list[dict[str, Any]]:
        ...
