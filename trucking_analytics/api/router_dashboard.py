"""
Dashboard endpoints — full dashboard, statement P&L, OTR reconciliation.
"""
from __future__ import annotations

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from trucking_analytics.analytics.common import sanitize_for_json
from trucking_analytics.analytics.dashboard import dashboard, pnl_report
from trucking_analytics.analytics.registry import otr_export_rows, unmatched_registry_runs
from trucking_analytics.api.dependencies import get_store, parse_date_range
from trucking_analytics.data.schemas import DateRange
from trucking_analytics.data.store import DataStore

router = APIRouter(prefix="/api", tags=["dashboard"])


def _safe_json(data) -> JSONResponse:
    return JSONResponse(content=sanitize_for_json(data))


@router.get("/dashboard")
def full_dashboard(
    store: DataStore = Depends(get_store),
    date_range: DateRange | None = Depends(parse_date_range),
):
    """Load KPIs, breakdowns, yard storage, manager bonuses and P&L."""
    return _safe_json(dashboard(store, date_range))


@router.get("/pnl")
def pnl(
    store: DataStore = Depends(get_store),
    date_range: DateRange | None = Depends(parse_date_range),
):
    """Statement-side P&L for quarters overlapping the window."""
    return _safe_json(pnl_report(store, date_range))


@router.get("/otr/unmatched")
def otr_unmatched(store: DataStore = Depends(get_store)):
    """Registry runs with no matching load in the profitability export."""
    df = unmatched_registry_runs(store.registry_df, store.records)
    return _safe_json({"count": len(df), "runs": df.to_dict("records")})


@router.get("/otr/loads")
def otr_loads(
    store: DataStore = Depends(get_store),
    date_range: DateRange | None = Depends(parse_date_range),
):
    """OTR loads in export shape with base price shown as linehaul."""
    rows = otr_export_rows(store.get_records(date_range))
    return _safe_json({"count": len(rows), "loads": rows})
