"""Exception types raised at the record-store boundary."""

from __future__ import annotations


class CampaignMetricsError(Exception):
    """Base class for errors raised by this package."""


class StoreUnavailable(CampaignMetricsError):
    """The record store could not be reached or refused a query.

    Attributes:
        collection: Collection (or channel) the failed query targeted.
    """

    def __init__(self, collection: str, message: str) -> None:
        super().__init__(f"{collection}: {message}")
        self.collection = collection
