#!/usr/bin/env python3
"""
Trucking Analytics CLI — console summary, Excel export, and API server.

USAGE:
  python -m trucking_analytics.cli summary                        # Default date range
  python -m trucking_analytics.cli summary --preset 0             # First preset window
  python -m trucking_analytics.cli summary --start 2024-01-01 --end 2024-03-31
  python -m trucking_analytics.cli summary --all                  # Every load

  python -m trucking_analytics.cli export                         # Dashboard workbook
  python -m trucking_analytics.cli export --output report.xlsx
  python -m trucking_analytics.cli export --json                  # Dashboard payload as JSON

  python -m trucking_analytics.cli serve                          # Start API server
  python -m trucking_analytics.cli serve --port 8000
"""
from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from datetime import datetime
from pathlib import Path

from trucking_analytics.analytics.dashboard import dashboard, preset
from trucking_analytics.config import INBOX_FOLDER, REPORTS_FOLDER
from trucking_analytics.data.schemas import DateRange
from trucking_analytics.data.store import DataStore


def _build_date_range(args) -> DateRange | None:
    """Build a DateRange from CLI args; --all means no filter."""
    if args.all:
        return None
    if args.start or args.end:
        if not (args.start and args.end):
            sys.exit("--start and --end must be given together")
        try:
            return DateRange.from_iso(f"{args.start} to {args.end}", args.start, args.end)
        except ValueError:
            sys.exit(f"Invalid date: {args.start} / {args.end} (expected YYYY-MM-DD)")
    try:
        return preset(args.preset)
    except IndexError as exc:
        sys.exit(str(exc))


def _load_store(inbox: Path) -> DataStore:
    try:
        return DataStore().load(inbox)
    except FileNotFoundError as exc:
        sys.exit(f"  {exc}")


def _add_range_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--preset", type=int, help="Date range preset index")
    parser.add_argument("--start", help="Start date YYYY-MM-DD")
    parser.add_argument("--end", help="End date YYYY-MM-DD")
    parser.add_argument("--all", action="store_true", help="Use every load")
    parser.add_argument("--inbox", type=Path, default=INBOX_FOLDER, help="Input folder")


def cmd_summary(args):
    """Print top-line KPIs for one window."""
    print("\n" + "=" * 70)
    print("  TRUCKING ANALYTICS — SUMMARY")
    print("=" * 70)

    store = _load_store(args.inbox)
    date_range = _build_date_range(args)
    data = dashboard(store, date_range)

    otr, local = data["otr_metrics"], data["local_drayage_metrics"]
    pl = data["pnl"]["overall_pl"]
    yard = data["yard_storage_metrics"]

    print(f"\n  Window: {data['date_range']['label']}")
    print(f"  Loads:  {data['total_loads']:,} ({otr['total_loads']:,} OTR / {local['total_loads']:,} local)")
    print(f"  Revenue: ${data['total_revenue']:>14,.2f}   Profit: ${data['total_profit']:>12,.2f}"
          f"   Margin: {data['average_margin']:.1f}%")
    print(f"  OTR:     ${otr['total_revenue']:>14,.2f}   Local:  ${local['total_revenue']:>12,.2f}")

    print(f"\n  Statements ({len(data['pnl']['quarters'])} quarters)")
    print(f"    Income:   ${pl['total_income']:>14,.2f}")
    print(f"    Expenses: ${pl['total_expenses']:>14,.2f}")
    print(f"    Net:      ${pl['net_profit']:>14,.2f}")
    print(f"    Yard storage net: ${yard['net_profit']:,.2f}")

    print("\n  Top customers:")
    for i, c in enumerate(data["customer_breakdown"][:10], 1):
        print(f"  {i:<4}{c['key'][:40]:<42}${c['revenue']:>12,.2f}  {c['margin']:>6.1f}%")

    print("\n  Managers:")
    for m in data["manager_metrics"]:
        status = f"bonus ${m['bonus_amount']:,.2f}" if m["bonus_eligible"] else "below threshold"
        print(f"    {m['name']:<20}{m['business_line']:<16}${m['business_profit']:>12,.2f}  {status}")
    print("=" * 70 + "\n")


def cmd_export(args):
    """Write the dashboard workbook (or JSON payload)."""
    print("\n" + "=" * 70)
    print("  TRUCKING ANALYTICS — DASHBOARD EXPORT")
    print("=" * 70)
    print(f"  Started: {datetime.now():%Y-%m-%d %H:%M:%S}")

    store = _load_store(args.inbox)
    date_range = _build_date_range(args)

    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    suffix = "json" if args.json else "xlsx"
    out = Path(args.output) if args.output else REPORTS_FOLDER / f"Dashboard_{timestamp}.{suffix}"

    if args.json:
        out.parent.mkdir(parents=True, exist_ok=True)
        with open(out, "w") as f:
            json.dump(dashboard(store, date_range), f, indent=2, default=str)
    else:
        from trucking_analytics.reports.dashboard_report import generate_excel
        generate_excel(store, out, date_range)

    print(f"\n  Saved: {out}")
    print("=" * 70 + "\n")


def cmd_serve(args):
    """Start the API server."""
    import uvicorn
    print(f"\nStarting Trucking Analytics API on port {args.port}...")
    uvicorn.run("trucking_analytics.main:app", host="0.0.0.0", port=args.port, reload=args.reload,
                timeout_keep_alive=65)


def main():
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    parser = argparse.ArgumentParser(
        description="Trucking Analytics — drayage and OTR profitability engine",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    subparsers = parser.add_subparsers(dest="command", help="Command")

    summary_parser = subparsers.add_parser("summary", help="Print KPIs for a date range")
    _add_range_args(summary_parser)
    summary_parser.set_defaults(func=cmd_summary)

    export_parser = subparsers.add_parser("export", help="Export dashboard workbook")
    _add_range_args(export_parser)
    export_parser.add_argument("--output", help="Output file path")
    export_parser.add_argument("--json", action="store_true", help="Write JSON instead of Excel")
    export_parser.set_defaults(func=cmd_export)

    serve_parser = subparsers.add_parser("serve", help="Start API server")
    serve_parser.add_argument("--port", type=int, default=int(os.environ.get("PORT", "8000")), help="Port (default 8000)")
    serve_parser.add_argument("--reload", action="store_true", help="Enable auto-reload")
    serve_parser.set_defaults(func=cmd_serve)

    args = parser.parse_args()
    if not args.command:
        parser.print_help()
        return

    args.func(args)


if __name__ == "__main__":
    main()
