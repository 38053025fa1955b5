"""
OTR registry reconciliation — registry runs missing from the profitability
export, and the OTR-only export view.
"""
from __future__ import annotations

import pandas as pd

from trucking_analytics.config import BASE_PRICE_LABEL, OTR_KEY_COLUMN, OTR_LINEHAUL_LABEL
from trucking_analytics.data.loader import resolve_column
from trucking_analytics.data.normalize import clean_text_series, extract_load_id
from trucking_analytics.data.schemas import LoadRecord

REGISTRY_EXPORT_COLUMNS = {
    "DELIVERY LOCATION": "delivery_location",
    "CONTAINER": "container",
    "ETA": "eta",
    "VESSEL": "vessel",
    "DELIVERY DATE": "delivery_date",
    "CUSTOMER": "customer",
    "DRIVER": "driver",
    "Margin": "margin",
}


def unmatched_registry_runs(registry_df: pd.DataFrame, records: list[LoadRecord]) -> pd.DataFrame:
    """Registry rows whose reference number matches no load, sorted by reference."""
    columns = ["reference_number"] + list(REGISTRY_EXPORT_COLUMNS.values())
    key_col = resolve_column(registry_df, OTR_KEY_COLUMN) if not registry_df.empty else None
    if key_col is None:
        return pd.DataFrame(columns=columns)

    known = {extract_load_id(r.load_number) for r in records} - {""}

    out = pd.DataFrame({"reference_number": clean_text_series(registry_df[key_col])})
    for raw, name in REGISTRY_EXPORT_COLUMNS.items():
        col = resolve_column(registry_df, raw)
        out[name] = clean_text_series(registry_df[col]) if col is not None else ""

    out = out[(out["reference_number"] != "") & ~out["reference_number"].isin(known)]
    return out.sort_values("reference_number", kind="stable").reset_index(drop=True)


def otr_charges(charges: tuple[str, ...]) -> tuple[str, ...]:
    """OTR loads bill the base price as linehaul."""
    relabelled = tuple(OTR_LINEHAUL_LABEL if c == BASE_PRICE_LABEL else c for c in charges)
    return relabelled or (OTR_LINEHAUL_LABEL,)


def otr_export_rows(records: list[LoadRecord]) -> list[dict]:
    """OTR loads in profitability-export shape, base price shown as linehaul."""
    return [
        {
            "Load #": r.load_number,
            "Container #": r.container_number,
            "Customer": r.customer,
            "Date": r.date,
            "Driver": r.driver,
            "Charges Type": ", ".join(otr_charges(r.charges_type)),
            "Total Charges": r.total_charges,
            "Driver Pay Total": r.driver_pay_total,
            "Expense Total": r.expense_total,
            "Profit": r.profit,
            "Profit Margin": r.profit_margin,
        }
        for r in records if r.is_otr
    ]
