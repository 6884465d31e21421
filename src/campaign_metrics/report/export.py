"""Serialize reports and dataset records to downloadable files.

Reports become JSON documents with `summary`, `recommendations` and
`generatedAt`; dataset records become CSV files written with pandas.
"""
from __future__ import annotations

import json
import logging
import re
from pathlib import Path
from typing import Any, Sequence

import pandas as pd

from campaign_metrics.aggregate.browse import HIDDEN_COLUMNS
from campaign_metrics.channels import get_channel
from campaign_metrics.models import Dataset, Report

log = logging.getLogger(__name__)


def report_to_document(report: Report) -> dict[str, Any]:
    """Return the export layout of a report."""
    summary: dict[str, Any] = {
        "totalContacts": report.total_contacts,
        "overallPerformance": report.overall_performance_display,
        "topPerformingChannel": get_channel(report.top_channel).label,
    }
    if report.campaign_summaries:
        summary["campaigns"] = [
            s.model_dump(mode="json", exclude_none=True) for s in report.campaign_summaries
        ]
    return {
        "summary": summary,
        "recommendations": list(report.recommendations),
        "generatedAt": report.generated_at.isoformat(),
    }


def report_filename(report: Report) -> str:
    return f"performance-report-{report.generated_at.date().isoformat()}.json"


def write_report(report: Report, out_dir: Path) -> Path:
    """Write the report document as pretty-printed JSON and return its path."""
    out_dir.mkdir(parents=True, exist_ok=True)
    out_path = out_dir / report_filename(report)
    out_path.write_text(json.dumps(report_to_document(report), indent=2), encoding="utf-8")
    log.info("Saved report: %s", out_path)
    return out_path


def export_filename(dataset: Dataset) -> str:
    """`leads.xlsx` -> `leads_export.csv`."""
    stem = re.sub(r"\.[^/.]+$", "", dataset.name)
    return f"{stem}_export.csv"


def records_to_csv(records: Sequence[dict[str, Any]], out_path: Path) -> int:
    """Write records to CSV without internal columns; return rows written.

    Column order follows the first record. Nothing is written for an empty
    record list.
    """
    if not records:
        log.warning("No rows to export for %s", out_path)
        return 0

    pdf = pd.DataFrame.from_records(list(records))
    columns = [c for c in records[0] if c not in HIDDEN_COLUMNS]
    out_path.parent.mkdir(parents=True, exist_ok=True)
    pdf.to_csv(out_path, columns=columns, index=False)
    log.info("Exported %d rows to %s", len(pdf), out_path)
    return len(pdf)
