"""Command-line interface for the metrics and reporting pipeline.

Provides subcommands: `metrics`, `trend`, `report`, `datasets`, `browse`
and `export`. Each command is implemented as a `cmd_*` function that
accepts an argparse namespace and a `RecordStore`.
"""
from __future__ import annotations

import argparse
import json
import logging
from datetime import date
from pathlib import Path
from typing import Any

from campaign_metrics.config import get_settings
from campaign_metrics.logging_config import configure_logging
from campaign_metrics.store.base import RecordStore
from campaign_metrics.store.mongo_store import MongoRecordStore

from campaign_metrics.aggregate.browse import (
    fetch_dataset_page,
    fetch_dataset_records,
    filter_datasets,
)
from campaign_metrics.aggregate.dashboard import (
    fetch_channel_records,
    fetch_dashboard_metrics,
    fetch_datasets,
)
from campaign_metrics.aggregate.facets import facet_distribution
from campaign_metrics.aggregate.trends import fetch_weekly_trend
from campaign_metrics.channels import get_channel
from campaign_metrics.models import Dataset
from campaign_metrics.report.export import (
    export_filename,
    records_to_csv,
    report_to_document,
    write_report,
)
from campaign_metrics.report.generator import generate_report

log = logging.getLogger(__name__)


# --------------------------------------------------
# Helpers
# --------------------------------------------------
def _emit(payload: Any) -> None:
    print(json.dumps(payload, indent=2, default=str))


def _find_dataset(store: RecordStore, dataset_id: str) -> Dataset:
    datasets, error = fetch_datasets(store)
    if error is not None:
        raise SystemExit(error)
    for d in datasets:
        if d.id == dataset_id:
            return d
    raise SystemExit(f"Dataset not found: {dataset_id}")


# --------------------------------------------------
# METRICS / TREND
# --------------------------------------------------
def cmd_metrics(args: argparse.Namespace, store: RecordStore) -> None:
    """Print per-channel KPIs, optionally with the webinar industry mix."""
    metrics = fetch_dashboard_metrics(store)
    payload = metrics.model_dump(mode="json", exclude={"datasets"})
    payload["datasets"] = [d.name for d in metrics.datasets[: args.recent]]
    if args.industries:
        webinar = get_channel("webinar")
        records = fetch_channel_records(store, webinar).records
        payload["industries"] = [
            s.model_dump(mode="json") for s in facet_distribution(records, webinar)
        ]
    _emit(payload)


def cmd_trend(args: argparse.Namespace, store: RecordStore) -> None:
    """Print the four weekly trend points ending with the current week."""
    today = date.fromisoformat(args.today) if args.today else None
    points = fetch_weekly_trend(store, today)
    _emit([p.model_dump(mode="json") for p in points])


# --------------------------------------------------
# REPORT
# --------------------------------------------------
def cmd_report(args: argparse.Namespace, store: RecordStore) -> None:
    """Generate the performance report and write it as JSON."""
    settings = get_settings()
    metrics = fetch_dashboard_metrics(store)
    if metrics.degraded:
        log.warning("Report built from partial data: %s", "; ".join(metrics.errors))

    report = generate_report(
        metrics.linkedin,
        metrics.email,
        metrics.webinar,
        datasets=metrics.datasets,
        settings=settings,
    )
    out_dir = Path(args.out_dir) if args.out_dir else settings.report_dir
    path = write_report(report, out_dir)
    _emit({"path": str(path), **report_to_document(report)})


# --------------------------------------------------
# DATASETS
# --------------------------------------------------
def cmd_datasets(args: argparse.Namespace, store: RecordStore) -> None:
    """List datasets newest first, optionally filtered by a search term."""
    datasets, error = fetch_datasets(store)
    if error is not None:
        raise SystemExit(error)
    if args.search:
        datasets = filter_datasets(datasets, args.search)
    _emit([d.model_dump(mode="json", exclude={"campaign_summary"}) for d in datasets])


def cmd_browse(args: argparse.Namespace, store: RecordStore) -> None:
    """Print one page of a dataset's records."""
    dataset = _find_dataset(store, args.dataset_id)
    page = fetch_dataset_page(store, dataset, page=args.page, page_size=args.page_size)
    _emit(
        {
            "dataset": dataset.name,
            "page": page.page,
            "total_pages": page.total_pages,
            "total_count": page.total_count,
            "headers": page.headers,
            "rows": [{h: r.get(h) for h in page.headers} for r in page.records],
        }
    )


def cmd_export(args: argparse.Namespace, store: RecordStore) -> None:
    """Export every record of a dataset to CSV."""
    dataset = _find_dataset(store, args.dataset_id)
    records = fetch_dataset_records(store, dataset)
    out_path = Path(args.out_dir) / export_filename(dataset)
    rows = records_to_csv(records, out_path)
    _emit({"path": str(out_path), "rows": rows})


# --------------------------------------------------
# CLI
# --------------------------------------------------
def build_parser() -> argparse.ArgumentParser:
    """Build and return the top-level argument parser for the CLI.

    Returns:
        Configured argparse.ArgumentParser instance.
    """
    p = argparse.ArgumentParser(prog="campaign-metrics")
    p.add_argument("--log-file", default=None)
    p.add_argument("--log-level", default="INFO")
    sub = p.add_subparsers(dest="cmd", required=True)

    p_metrics = sub.add_parser("metrics")
    p_metrics.add_argument("--recent", type=int, default=5)
    p_metrics.add_argument("--industries", action="store_true")

    p_trend = sub.add_parser("trend")
    p_trend.add_argument("--today", default=None, help="YYYY-MM-DD")

    p_report = sub.add_parser("report")
    p_report.add_argument("--out-dir", default=None)

    p_datasets = sub.add_parser("datasets")
    p_datasets.add_argument("--search", default=None)

    p_browse = sub.add_parser("browse")
    p_browse.add_argument("--dataset-id", required=True)
    p_browse.add_argument("--page", type=int, default=1)
    p_browse.add_argument("--page-size", type=int, default=50)

    p_export = sub.add_parser("export")
    p_export.add_argument("--dataset-id", required=True)
    p_export.add_argument("--out-dir", default="exports")

    return p


COMMANDS = {
    "metrics": cmd_metrics,
    "trend": cmd_trend,
    "report": cmd_report,
    "datasets": cmd_datasets,
    "browse": cmd_browse,
    "export": cmd_export,
}


def main(argv: list[str] | None = None) -> None:
    """CLI entry point: parse args, configure logging and dispatch commands."""
    args = build_parser().parse_args(argv)
    configure_logging(Path(args.log_file) if args.log_file else None, args.log_level)

    store = MongoRecordStore.from_settings(get_settings())
    COMMANDS[args.cmd](args, store)


if __name__ == "__main__":
    main()
