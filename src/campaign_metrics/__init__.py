"""campaign_metrics package.

Aggregation and reporting core for a marketing-analytics dashboard that
tracks LinkedIn outreach, email campaigns and webinar invites.

Architecture:
- Contact records live in MongoDB collections (one per channel)
- Channel behaviour is data-driven via `ChannelConfig` records
- pandas computes rates and facets, Dask runs channel queries in parallel
- Pydantic models describe records, metrics, trends and reports
"""

__all__ = ["__version__"]
__version__ = "0.1.0"
