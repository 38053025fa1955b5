"""
Load analytics — date filtering, dimensional breakdowns, business-line splits.

Every breakdown is a single groupby over a frame built from LoadRecords.
Groups keep first-seen order (sort=False) and the final sort is stable, so
revenue ties stay in input order.
"""
from __future__ import annotations

import calendar
import datetime as dt
import logging
from typing import Callable, Optional

import pandas as pd

from trucking_analytics.analytics.common import margin_series, profit_margin, safe_divide
from trucking_analytics.config import SERVICE_TYPE_EXCLUSIONS
from trucking_analytics.data.schemas import (
    BusinessLineMetric,
    DimensionalMetric,
    DriverMetric,
    LoadRecord,
    MonthComparisonRow,
    MonthlyMetric,
)

logger = logging.getLogger(__name__)

_FRAME_COLUMNS = [
    "load_number", "customer", "driver", "date_obj", "charges_type",
    "total_charges", "driver_pay_total", "expense_total", "profit", "is_otr",
]


def records_to_frame(records: list[LoadRecord]) -> pd.DataFrame:
    """One row per record, input order preserved."""
    if not records:
        return pd.DataFrame(columns=_FRAME_COLUMNS)
    return pd.DataFrame([{c: getattr(r, c) for c in _FRAME_COLUMNS} for r in records])


# ---------------------------------------------------------------------------
# Filtering
# ---------------------------------------------------------------------------

def filter_by_date_range(records: list[LoadRecord], start: dt.date, end: dt.date) -> list[LoadRecord]:
    """Records dated within [start, end]; undated records are dropped with a warning."""
    kept = []
    for r in records:
        if r.date_obj is None:
            logger.warning("Dropping load %s from date filter: unparsable date %r", r.load_number, r.date)
            continue
        if start <= r.date_obj <= end:
            kept.append(r)
    return kept


# ---------------------------------------------------------------------------
# Dimensional breakdowns
# ---------------------------------------------------------------------------

def _grouped_metrics(df: pd.DataFrame, extra: dict | None = None) -> pd.DataFrame:
    """Sum revenue/profit/loads per 'key', margin afterwards, stable sort by revenue desc."""
    aggs = {
        "revenue": ("revenue", "sum"),
        "profit": ("profit", "sum"),
        "loads": ("revenue", "size"),
    }
    aggs.update(extra or {})
    g = df.groupby("key", sort=False).agg(**aggs).reset_index()
    g["margin"] = margin_series(g["profit"], g["revenue"])
    return g.sort_values("revenue", ascending=False, kind="stable")


def _to_metrics(g: pd.DataFrame, cls=DimensionalMetric) -> list:
    out = []
    for row in g.to_dict("records"):
        row["key"] = str(row["key"])
        row["loads"] = int(row["loads"])
        out.append(cls(**row))
    return out


def dimensional_breakdown(
    records: list[LoadRecord],
    key_fn: Callable[[LoadRecord], Optional[str]],
) -> list[DimensionalMetric]:
    """Revenue/profit/loads per key_fn(record). A None key skips the record."""
    rows = [
        {"key": key, "revenue": r.total_charges, "profit": r.profit}
        for r in records
        if (key := key_fn(r)) is not None
    ]
    if not rows:
        return []
    return _to_metrics(_grouped_metrics(pd.DataFrame(rows)))


def customer_breakdown(records: list[LoadRecord]) -> list[DimensionalMetric]:
    return dimensional_breakdown(records, lambda r: r.customer)


def driver_performance(records: list[LoadRecord]) -> list[DriverMetric]:
    """Per-driver metrics plus total driver pay; loads with no driver are skipped."""
    rows = [
        {"key": r.driver, "revenue": r.total_charges, "profit": r.profit, "pay": r.driver_pay_total}
        for r in records if r.driver
    ]
    if not rows:
        return []
    g = _grouped_metrics(pd.DataFrame(rows), {"total_pay": ("pay", "sum")})
    return _to_metrics(g, DriverMetric)


def service_type_breakdown(
    records: list[LoadRecord],
    exclusions: list[str] = SERVICE_TYPE_EXCLUSIONS,
) -> list[DimensionalMetric]:
    """Per charge-category metrics.

    A load's revenue and profit are split evenly over its whole charge list;
    excluded (pass-through) categories take their share with them and are not
    reported.
    """
    df = records_to_frame([r for r in records if r.charges_type])
    if df.empty:
        return []
    n = df["charges_type"].map(len)
    df["revenue"] = df["total_charges"] / n
    df["profit"] = df["profit"] / n
    df = df[["charges_type", "revenue", "profit"]].explode("charges_type").rename(columns={"charges_type": "key"})
    df = df[~df["key"].isin(set(exclusions))]
    if df.empty:
        return []
    return _to_metrics(_grouped_metrics(df))


# ---------------------------------------------------------------------------
# Monthly views
# ---------------------------------------------------------------------------

def _dated_frame(records: list[LoadRecord]) -> pd.DataFrame:
    dated = []
    for r in records:
        if r.date_obj is None:
            logger.warning("Skipping load %s in monthly views: unparsable date %r", r.load_number, r.date)
            continue
        dated.append(r)
    return records_to_frame(dated)


def monthly_breakdown(records: list[LoadRecord]) -> list[MonthlyMetric]:
    """Per 'Mon YYYY' metrics with OTR/local splits, chronological."""
    df = _dated_frame(records)
    if df.empty:
        return []
    df["month"] = df["date_obj"].map(lambda d: d.strftime("%b %Y"))
    df["otr_revenue"] = df["total_charges"].where(df["is_otr"], 0.0)
    df["local_revenue"] = df["total_charges"].where(~df["is_otr"], 0.0)
    df["otr_profit"] = df["profit"].where(df["is_otr"], 0.0)
    df["local_profit"] = df["profit"].where(~df["is_otr"], 0.0)

    g = df.groupby("month", sort=False).agg(
        revenue=("total_charges", "sum"),
        otr_revenue=("otr_revenue", "sum"),
        local_revenue=("local_revenue", "sum"),
        profit=("profit", "sum"),
        otr_profit=("otr_profit", "sum"),
        local_profit=("local_profit", "sum"),
        loads=("total_charges", "size"),
        driver_pay=("driver_pay_total", "sum"),
        expenses=("expense_total", "sum"),
    ).reset_index()
    g["margin"] = margin_series(g["profit"], g["revenue"])
    g["_when"] = pd.to_datetime(g["month"], format="%b %Y")
    g = g.sort_values("_when", kind="stable").drop(columns="_when")

    out = []
    for row in g.to_dict("records"):
        row["loads"] = int(row["loads"])
        out.append(MonthlyMetric(**row))
    return out


def monthly_revenue_comparison(records: list[LoadRecord]) -> list[MonthComparisonRow]:
    """Twelve rows (Jan..Dec), each holding {year: (otr revenue, local revenue)}."""
    rows = [MonthComparisonRow(month=calendar.month_abbr[m]) for m in range(1, 13)]
    df = _dated_frame(records)
    if df.empty:
        return rows
    df["year"] = df["date_obj"].map(lambda d: d.year)
    df["month_num"] = df["date_obj"].map(lambda d: d.month)
    df["otr"] = df["total_charges"].where(df["is_otr"], 0.0)
    df["local"] = df["total_charges"].where(~df["is_otr"], 0.0)
    g = df.groupby(["month_num", "year"])[["otr", "local"]].sum()

    years = sorted(df["year"].unique())
    for row_idx, row in enumerate(rows, start=1):
        for year in years:
            if (row_idx, year) in g.index:
                otr, local = g.loc[(row_idx, year)]
                row.by_year[int(year)] = (float(otr), float(local))
            else:
                row.by_year[int(year)] = (0.0, 0.0)
    return rows


# ---------------------------------------------------------------------------
# Top-line metrics
# ---------------------------------------------------------------------------

def business_line_metrics(records: list[LoadRecord]) -> BusinessLineMetric:
    revenue = sum(r.total_charges for r in records)
    profit = sum(r.profit for r in records)
    return BusinessLineMetric(
        total_revenue=revenue,
        total_profit=profit,
        total_loads=len(records),
        average_margin=profit_margin(profit, revenue),
        total_driver_pay=sum(r.driver_pay_total for r in records),
        total_expenses=sum(r.expense_total for r in records),
    )


def load_totals(records: list[LoadRecord]) -> dict:
    """Company-wide load KPIs with the OTR / local drayage split."""
    overall = business_line_metrics(records)
    loads = overall.total_loads
    return {
        "total_revenue": overall.total_revenue,
        "total_profit": overall.total_profit,
        "total_loads": loads,
        "average_revenue_per_load": safe_divide(overall.total_revenue, loads),
        "average_profit_per_load": safe_divide(overall.total_profit, loads),
        "average_margin": overall.average_margin,
        "total_driver_pay": overall.total_driver_pay,
        "total_expenses": overall.total_expenses,
        "otr_metrics": business_line_metrics([r for r in records if r.is_otr]),
        "local_drayage_metrics": business_line_metrics([r for r in records if not r.is_otr]),
    }
