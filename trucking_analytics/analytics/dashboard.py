"""
Dashboard analytics — the complete payload for one reporting window.

Load metrics and statement metrics are computed independently over the same
date range and merged here. Wide per-year rows are flattened only at this
boundary.
"""
from __future__ import annotations

from typing import Optional

from trucking_analytics.analytics.common import sanitize_for_json
from trucking_analytics.analytics.loads import (
    customer_breakdown,
    driver_performance,
    load_totals,
    monthly_breakdown,
    monthly_revenue_comparison,
    service_type_breakdown,
)
from trucking_analytics.analytics.pnl import manager_metrics, pl_summary, quarterly_comparison
from trucking_analytics.config import DATE_RANGE_PRESETS, DEFAULT_DATE_RANGE_INDEX
from trucking_analytics.data.schemas import DateRange
from trucking_analytics.data.store import DataStore


def date_range_presets() -> list[DateRange]:
    return [DateRange.from_iso(*preset) for preset in DATE_RANGE_PRESETS]


def preset(index: Optional[int] = None) -> DateRange:
    """Preset window by index; IndexError for an unknown index."""
    presets = date_range_presets()
    if index is None:
        index = DEFAULT_DATE_RANGE_INDEX
    if not 0 <= index < len(presets):
        raise IndexError(f"No date range preset {index}")
    return presets[index]


def _pnl_json(summary: dict) -> dict:
    return {
        "quarters": [q.to_dict() for q in summary["quarters"]],
        "quarterly_metrics": summary["quarterly_metrics"],
        "quarterly_comparison": [row.flatten() for row in summary["quarterly_comparison"]],
        "yard_storage": summary["yard_storage"],
        "overall_pl": summary["overall_pl"],
    }


def pnl_report(store: DataStore, date_range: Optional[DateRange] = None) -> dict:
    """Statement-side summary, JSON-ready."""
    return sanitize_for_json(_pnl_json(pl_summary(store.quarters, date_range)))


def dashboard(store: DataStore, date_range: Optional[DateRange] = None) -> dict:
    """Load KPIs, breakdowns, P&L and manager metrics for one window.

    The month-of-year and quarter comparisons always span every year loaded.
    """
    records = store.get_records(date_range)
    pnl = pl_summary(store.quarters, date_range)

    payload = {
        "date_range": {
            "label": date_range.label if date_range else "All Time",
            "start": date_range.start if date_range else None,
            "end": date_range.end if date_range else None,
        },
        "sources": store.sources,
        **load_totals(records),
        "yard_storage_metrics": pnl["yard_storage"],
        "manager_metrics": manager_metrics(records),
        "service_type_breakdown": service_type_breakdown(records),
        "customer_breakdown": customer_breakdown(records),
        "monthly_breakdown": monthly_breakdown(records),
        "driver_performance": driver_performance(records),
        "monthly_revenue_comparison": [row.flatten() for row in monthly_revenue_comparison(store.records)],
        "pnl": _pnl_json(pnl),
    }
    payload["pnl"]["quarterly_comparison"] = [row.flatten() for row in quarterly_comparison(store.quarters)]
    return sanitize_for_json(payload)
