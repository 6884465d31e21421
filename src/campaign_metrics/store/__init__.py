"""Record-store boundary.

The core only reads from the store. `base` defines the query contract and
`mongo_store` implements it on top of MongoDB collections.
"""

from campaign_metrics.store.base import OrderBy, Pagination, RecordFilters, RecordStore

__all__ = ["OrderBy", "Pagination", "RecordFilters", "RecordStore"]
