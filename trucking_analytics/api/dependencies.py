"""
FastAPI dependencies — DataStore singleton, date range parsing.
"""
from __future__ import annotations

from typing import Optional

from fastapi import HTTPException, Query

from trucking_analytics.analytics.dashboard import preset
from trucking_analytics.data.schemas import DateRange
from trucking_analytics.data.store import DataStore

# ---------------------------------------------------------------------------
# Global store singleton (set during startup)
# ---------------------------------------------------------------------------
_store: DataStore | None = None


def set_store(store: DataStore) -> None:
    global _store
    _store = store


def get_store() -> DataStore:
    if _store is None or not _store.is_loaded:
        raise HTTPException(503, "Data not loaded yet")
    return _store


def get_store_or_empty() -> DataStore:
    """Return the store even if it has no data (for health/reload endpoints)."""
    if _store is None:
        raise HTTPException(503, "Server not initialized yet")
    return _store


# ---------------------------------------------------------------------------
# Date range parsing from query params
# ---------------------------------------------------------------------------

def parse_date_range(
    preset_index: Optional[int] = Query(None, alias="preset", description="Index into /api/date-ranges"),
    start_date: Optional[str] = Query(None, description="YYYY-MM-DD"),
    end_date: Optional[str] = Query(None, description="YYYY-MM-DD"),
    all_time: bool = Query(False, description="Ignore presets and use every load"),
) -> DateRange | None:
    """Explicit start/end wins, then a preset, then the default preset."""
    if all_time:
        return None

    if start_date or end_date:
        if not (start_date and end_date):
            raise HTTPException(400, "start_date and end_date must be given together")
        try:
            return DateRange.from_iso(f"{start_date} to {end_date}", start_date, end_date)
        except ValueError:
            raise HTTPException(400, f"Invalid date: {start_date} / {end_date}")

    try:
        return preset(preset_index)
    except IndexError:
        raise HTTPException(400, f"Invalid preset: {preset_index}")
