from __future__ import annotations

from campaign_metrics.aggregate.facets import facet_distribution
from campaign_metrics.channels import LINKEDIN, WEBINAR
from conftest import linkedin, webinar


def test_industry_distribution_uses_real_counts() -> None:
    records = [
        webinar(1, "confirmed", "SaaS"),
        webinar(2, "pending", "Fintech"),
        webinar(3, "declined", "SaaS"),
        webinar(4, "pending", "SaaS"),
    ]
    shares = facet_distribution(records, WEBINAR)
    assert [(s.name, s.count) for s in shares] == [("SaaS", 3), ("Fintech", 1)]
    assert shares[0].share_pct == 75.0
    assert sum(s.share_pct for s in shares) == 100.0


def test_distribution_is_stable_across_calls() -> None:
    records = [linkedin(i, "pending", company) for i, company in enumerate(["B", "A", "B"])]
    assert facet_distribution(records, LINKEDIN) == facet_distribution(records, LINKEDIN)


def test_records_without_facet_are_ignored() -> None:
    records = [webinar(1, "confirmed", "SaaS"), {**webinar(2, "pending"), "industry": None}]
    shares = facet_distribution(records, WEBINAR)
    assert [(s.name, s.count, s.share_pct) for s in shares] == [("SaaS", 1, 100.0)]


def test_no_records_no_distribution() -> None:
    assert facet_distribution([], WEBINAR) == []
