"""
Samarth — command-line entry point for the ingestion pipeline.

Runs the same handlers the upload and schedule triggers run, against the
configured store and bucket, and prints what happened.

Usage:
    python main.py upload <report.csv|report.xlsx> [--month YYYY-MM]
    python main.py insights
    python main.py monthly [--today YYYY-MM-DD]
    python main.py seed [--out PATH]
"""

import argparse
import logging
import sys
from datetime import date
from pathlib import Path
from typing import Sequence

from samarth_dashboard.bucket import ReportBucket, upload_name
from samarth_dashboard.config import BUCKET_DIR, DATABASE_URL, LOG_LEVEL
from samarth_dashboard.dashboard import get_leaderboard
from samarth_dashboard.pipeline import (
    IngestOutcome,
    handle_upload,
    run_daily_insights,
    run_monthly_aggregation,
)
from samarth_dashboard.simulator import generate_district_report, write_report
from samarth_dashboard.store import DocumentStore

# ---------------------------------------------------------------------------
# Logging setup
# ---------------------------------------------------------------------------
logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s | %(name)s | %(levelname)s | %(message)s",
    datefmt="%H:%M:%S",
)
logger = logging.getLogger(__name__)


def _print_insights(result: dict | None) -> None:
    if result is None:
        print("  No district data yet — nothing generated.")
        return
    summary = result["summary"]
    insights = result["insights"]
    print(f"  Statewide conviction ratio : {summary['statewideConvictionRatio']}%")
    print(f"  Total drug seizure         : {summary['totalDrugSeizureVolume_kg']} kg")
    print(f"  Total NBWs executed        : {summary['totalNbwsExecuted']}")
    print(f"  Value recovered (INR)      : {summary['totalValueRecovered_INR']:,}")
    print(f"  Top performers             : {', '.join(insights['top_performers'])}")
    print(f"  Risk districts             : {', '.join(insights['risk_districts'])}")
    print(f"\n  {insights['naturalLanguageSummary']}")
    print(f"  {insights['predictiveAlert']}")


def cmd_upload(store: DocumentStore, bucket: ReportBucket, args: argparse.Namespace) -> int:
    source = Path(args.file)
    path = upload_name(source.name)
    bucket.write_bytes(path, source.read_bytes())
    print(f"Uploaded {source} as {path}")

    result = handle_upload(store, bucket, path, month=args.month)
    print(f"\nOutcome: {result.outcome.value}")
    print(f"  Rows parsed      : {result.rows_parsed}")
    print(f"  Rows rejected    : {result.rows_rejected}")
    print(f"  Districts written: {result.districts_written}")
    if result.historical:
        print(f"  Historical point : {result.historical}")

    if result.outcome is IngestOutcome.PROCESSED:
        print()
        _print_insights({"summary": result.summary, "insights": result.insights})
        print("\nLeaderboard:")
        print(get_leaderboard(store).to_string(index=False))

    return 1 if result.outcome is IngestOutcome.ERROR else 0


def cmd_insights(store: DocumentStore, args: argparse.Namespace) -> int:
    _print_insights(run_daily_insights(store))
    return 0


def cmd_monthly(store: DocumentStore, args: argparse.Namespace) -> int:
    today = date.fromisoformat(args.today) if args.today else None
    point = run_monthly_aggregation(store, today=today)
    if point is None:
        print("No districts ingested during the previous month — nothing recorded.")
    else:
        print(f"Recorded {point['id']}: {point}")
    return 0


def cmd_seed(args: argparse.Namespace) -> int:
    df = generate_district_report(seed=args.seed)
    path = write_report(df, args.out)
    print(f"Wrote {len(df)} simulated district rows to {path}")
    return 0


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments and return an argparse.Namespace."""
    parser = argparse.ArgumentParser(description="Samarth report ingestion pipeline")
    sub = parser.add_subparsers(dest="command", required=True)

    upload = sub.add_parser("upload", help="Ingest a CSV/XLSX district report")
    upload.add_argument("file", help="Path to the report file")
    upload.add_argument("--month", help="Also record the historical point for YYYY-MM")

    sub.add_parser("insights", help="Regenerate the summary and insight report")

    monthly = sub.add_parser("monthly", help="Record last month's historical point")
    monthly.add_argument("--today", help="Pretend today is YYYY-MM-DD")

    seed = sub.add_parser("seed", help="Write a simulated district report")
    seed.add_argument("--out", default="sample_reports/districts.csv")
    seed.add_argument("--seed", type=int, default=42)

    return parser.parse_args(argv)


def main(argv: Sequence[str] | None = None) -> int:
    args = parse_args(argv)

    if args.command == "seed":
        return cmd_seed(args)

    store = DocumentStore.from_url(DATABASE_URL)
    bucket = ReportBucket(BUCKET_DIR)

    if args.command == "upload":
        return cmd_upload(store, bucket, args)
    if args.command == "insights":
        return cmd_insights(store, args)
    return cmd_monthly(store, args)


if __name__ == "__main__":
    sys.exit(main())
