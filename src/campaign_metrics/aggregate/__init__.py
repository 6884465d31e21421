"""Aggregation routines.

Pure functions here turn channel record sets into metrics, trend points
and facet distributions; the `fetch_*` wrappers pull the records from a
`RecordStore` and degrade to empty results when the store is unavailable.
"""
