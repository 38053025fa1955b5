"""
Meta endpoints: health, date range presets, reload.
"""
from __future__ import annotations

import logging

from fastapi import APIRouter, Depends

from trucking_analytics import config
from trucking_analytics.analytics.dashboard import date_range_presets
from trucking_analytics.api.dependencies import get_store_or_empty, set_store
from trucking_analytics.api.response_models import (
    DateRangeOption, DateRangesResponse, HealthResponse, ReloadResponse,
)
from trucking_analytics.data.store import DataStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["meta"])


@router.get("/health", response_model=HealthResponse)
def health(store: DataStore = Depends(get_store_or_empty)):
    return HealthResponse(
        status="ok" if store.is_loaded else "loading",
        loads=store.row_count(),
        otr_loads=store.otr_count(),
        quarters=len(store.quarters),
        date_span=store.date_span(),
    )


@router.get("/date-ranges", response_model=DateRangesResponse)
def list_date_ranges():
    return DateRangesResponse(date_ranges=[
        DateRangeOption(
            index=i,
            label=r.label,
            start=r.start.isoformat(),
            end=r.end.isoformat(),
            default=i == config.DEFAULT_DATE_RANGE_INDEX,
        )
        for i, r in enumerate(date_range_presets())
    ])


@router.post("/reload", response_model=ReloadResponse)
def reload_data(store: DataStore = Depends(get_store_or_empty)):
    """Re-scan the inbox into a fresh store; the old store keeps serving on failure."""
    fresh = DataStore()
    try:
        fresh.load(config.INBOX_FOLDER)
    except FileNotFoundError as exc:
        logger.warning("Reload failed: %s", exc)
        return ReloadResponse(
            status="unchanged",
            message="No input files found; keeping current data.",
            loads=store.row_count(),
            quarters=len(store.quarters),
            error=str(exc),
        )
    set_store(fresh)
    return ReloadResponse(
        status="reloaded",
        message="Data reloaded from inbox.",
        loads=fresh.row_count(),
        quarters=len(fresh.quarters),
    )
