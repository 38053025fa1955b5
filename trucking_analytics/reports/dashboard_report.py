"""
Fleet Dashboard Report — load KPIs, breakdowns and statement P&L in one workbook.
"""
from __future__ import annotations

from pathlib import Path
from typing import Optional

import pandas as pd

from trucking_analytics.analytics.dashboard import dashboard
from trucking_analytics.analytics.registry import otr_export_rows, unmatched_registry_runs
from trucking_analytics.data.schemas import DateRange
from trucking_analytics.data.store import DataStore
from trucking_analytics.excel.writer import ExcelWriter


BREAKDOWN_COLS = [
    ("key", "text", "Name"),
    ("revenue", "currency", "Revenue"),
    ("profit", "currency", "Profit"),
    ("loads", "number", "Loads"),
    ("margin", "percent", "Margin"),
]

DRIVER_COLS = BREAKDOWN_COLS + [("total_pay", "currency", "Driver Pay")]

MONTHLY_COLS = [
    ("month", "text", "Month"),
    ("revenue", "currency", "Revenue"),
    ("otr_revenue", "currency", "OTR Revenue"),
    ("local_revenue", "currency", "Local Revenue"),
    ("profit", "currency", "Profit"),
    ("loads", "number", "Loads"),
    ("margin", "percent", "Margin"),
    ("driver_pay", "currency", "Driver Pay"),
    ("expenses", "currency", "Expenses"),
]

QUARTER_COLS = [
    ("period", "text", "Quarter"),
    ("date_range", "text", "Statement Period"),
    ("total_income", "currency", "Total Income"),
    ("total_expenses", "currency", "Total Expenses"),
    ("net", "currency", "Net"),
    ("yard_storage_income", "currency", "Yard Storage Income"),
]

MANAGER_COLS = [
    ("name", "text", "Manager"),
    ("business_line", "text", "Business Line"),
    ("business_profit", "currency", "Line Profit"),
    ("bonus_threshold", "currency", "Threshold"),
    ("bonus_percentage", "percent", "Bonus %"),
    ("bonus_amount", "currency", "Bonus"),
]

OTR_LOAD_COLS = [
    ("Load #", "text", "Load #"),
    ("Customer", "text", "Customer"),
    ("Date", "text", "Date"),
    ("Driver", "text", "Driver"),
    ("Charges Type", "text", "Charges Type"),
    ("Total Charges", "currency", "Total Charges"),
    ("Profit", "currency", "Profit"),
]

UNMATCHED_COLS = [
    ("reference_number", "text", "Reference #"),
    ("container", "text", "Container"),
    ("customer", "text", "Customer"),
    ("driver", "text", "Driver"),
    ("delivery_date", "text", "Delivery Date"),
    ("delivery_location", "text", "Delivery Location"),
]


def _label(name: str) -> str:
    return name.replace("_", " ").title()


def generate_json(store: DataStore, date_range: Optional[DateRange] = None) -> dict:
    return dashboard(store, date_range)


def generate_excel(
    store: DataStore,
    output_path: str | Path,
    date_range: Optional[DateRange] = None,
) -> Path:
    data = generate_json(store, date_range)
    pnl = data["pnl"]
    ew = ExcelWriter()

    # Summary
    ws = ew.add_sheet("Summary")
    ew.write_title(ws, "FLEET PERFORMANCE",
                   f"Dashboard Report  |  {data['date_range']['label']}  |  Generated {pd.Timestamp.now():%B %d, %Y}")

    row = ew.write_section(ws, 5, "LOAD OVERVIEW")
    row = ew.write_kpi_row(ws, row, [
        (data["total_revenue"], "TOTAL REVENUE", "currency"),
        (data["total_profit"], "TOTAL PROFIT", "currency"),
        (data["total_loads"], "TOTAL LOADS", "number"),
        (data["average_margin"], "AVERAGE MARGIN", "percent"),
    ])

    otr, local = data["otr_metrics"], data["local_drayage_metrics"]
    row = ew.write_section(ws, row, "BUSINESS LINES")
    row = ew.write_kpi_row(ws, row, [
        (otr["total_revenue"], "OTR REVENUE", "currency"),
        (otr["total_loads"], "OTR LOADS", "number"),
        (local["total_revenue"], "LOCAL REVENUE", "currency"),
        (local["total_loads"], "LOCAL LOADS", "number"),
    ])
    row = ew.write_kpi_row(ws, row, [
        (otr["total_driver_pay"], "OTR DRIVER PAY", "currency"),
        (otr["total_expenses"], "OTR EXPENSES", "currency"),
        (local["total_driver_pay"], "LOCAL DRIVER PAY", "currency"),
        (local["total_expenses"], "LOCAL EXPENSES", "currency"),
    ])

    overall = pnl["overall_pl"]
    row = ew.write_section(ws, row, "PROFIT & LOSS")
    row = ew.write_kpi_row(ws, row, [
        (overall["total_income"], "STATEMENT INCOME", "currency"),
        (overall["total_expenses"], "STATEMENT EXPENSES", "currency"),
        (overall["net_profit"], "NET PROFIT", "currency"),
        (overall["operating_profit"], "OPERATING PROFIT", "currency"),
    ])

    yard = data["yard_storage_metrics"]
    row = ew.write_section(ws, row, "YARD STORAGE")
    row = ew.write_kpi_row(ws, row, [
        (yard["total_income"], "YARD INCOME", "currency"),
        (yard["total_expenses"], "RENT + UTILITIES", "currency"),
        (yard["startup_costs"], "STARTUP COSTS", "currency"),
        (yard["net_profit"], "YARD NET", "currency"),
    ])
    ew.write_insight(ws, row, "Yard storage",
                     f"Operating since {yard['start_date']}. Startup costs are amortized repairs and equipment rental.")

    # Breakdowns
    ws = ew.add_sheet("Service Types")
    ew.write_table(ws, 1, BREAKDOWN_COLS, data["service_type_breakdown"], show_total=True)

    ws = ew.add_sheet("Customers")
    ew.write_table(ws, 1, BREAKDOWN_COLS, data["customer_breakdown"], show_total=True)

    ws = ew.add_sheet("Monthly")
    ew.write_table(ws, 1, MONTHLY_COLS, data["monthly_breakdown"], show_total=True)

    ws = ew.add_sheet("Drivers")
    ew.write_table(ws, 1, DRIVER_COLS, data["driver_performance"], show_total=True)

    ws = ew.add_sheet("Managers")
    ew.write_table(ws, 1, MANAGER_COLS, data["manager_metrics"],
                   highlight_fn=lambda _, r: "green" if r["bonus_eligible"] else None)

    # Statements
    ws = ew.add_sheet("P&L Quarters")
    quarters = [{**q, "net": q["total_income"] - q["total_expenses"]} for q in pnl["quarters"]]
    ew.write_table(ws, 1, QUARTER_COLS, quarters, show_total=True,
                   highlight_fn=lambda _, r: "warning" if r["net"] < 0 else None)

    ws = ew.add_sheet("Quarter Comparison")
    comparison = pnl["quarterly_comparison"]
    year_keys = sorted({k for r in comparison for k in r if k != "quarter"}, key=lambda k: (k[-4:], k))
    ew.write_table(ws, 1, [("quarter", "text", "Quarter")] + [(k, "currency", _label(k)) for k in year_keys],
                   comparison)

    ws = ew.add_sheet("Expense Breakdown")
    breakdown = [
        {"category": _label(name), "amount": amount}
        for name, amount in overall["expense_breakdown"].items()
    ]
    ew.write_table(ws, 1, [("category", "text", "Category"), ("amount", "currency", "Amount")],
                   breakdown, show_total=True)

    # OTR reconciliation
    records = store.get_records(date_range)
    ws = ew.add_sheet("OTR Loads")
    ew.write_table(ws, 1, OTR_LOAD_COLS, otr_export_rows(records), show_total=True,
                   highlight_fn=lambda *_: "otr")

    ws = ew.add_sheet("Unmatched OTR")
    ew.write_table(ws, 1, UNMATCHED_COLS, unmatched_registry_runs(store.registry_df, store.records))

    return ew.save(output_path)
