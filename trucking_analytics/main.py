"""
Trucking Analytics — FastAPI app factory with startup data loading.
"""
from __future__ import annotations

import os
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from trucking_analytics import __version__
from trucking_analytics.api.dependencies import set_store
from trucking_analytics.api.router_dashboard import router as dashboard_router
from trucking_analytics.api.router_meta import router as meta_router
from trucking_analytics.data.store import DataStore


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Load all data at startup."""
    from trucking_analytics.config import INBOX_FOLDER, REPORTS_FOLDER
    for d in [INBOX_FOLDER, REPORTS_FOLDER]:
        d.mkdir(parents=True, exist_ok=True)

    print(f"  TRUCKING_DATA_DIR = {os.environ.get('TRUCKING_DATA_DIR', '(not set)')}")
    print(f"  INBOX_FOLDER = {INBOX_FOLDER}")

    store = DataStore()
    try:
        store.load(INBOX_FOLDER)
    except FileNotFoundError as exc:
        print(f"  {exc}")
        store.mark_loaded()
    set_store(store)

    if store.row_count() > 0 or store.quarters:
        print(f"\nTrucking Analytics ready — {store.row_count():,} loads "
              f"({store.otr_count():,} OTR), {len(store.quarters)} statements\n")
    else:
        print("\nTrucking Analytics ready — no data yet. Drop exports into the inbox and POST /api/reload.\n")
    yield


def create_app() -> FastAPI:
    app = FastAPI(
        title="Trucking Analytics API",
        description="Drayage and OTR load profitability, statement P&L, manager bonuses",
        version=__version__,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(meta_router)
    app.include_router(dashboard_router)
    return app


app = create_app()
