"""
Statement analytics — overall P&L, yard storage, quarterly views, manager bonuses.
"""
from __future__ import annotations

from functools import reduce
from typing import Optional

from trucking_analytics.config import (
    LOCAL_LINE, MANAGERS, OTR_LINE, QUARTERS, STARTUP_COST_SCHEDULE, YARD_STORAGE_START_DATE,
)
from trucking_analytics.data.schemas import (
    DateRange,
    ExpenseBreakdown,
    LoadRecord,
    ManagerMetric,
    OverallPL,
    QuarterComparisonRow,
    QuarterlyMetric,
    QuarterSummary,
    StartupCostRule,
    YardStorageSummary,
)
from trucking_analytics.data.statements import quarter_in_range


def filter_quarters(quarters: list[QuarterSummary], date_range: Optional[DateRange]) -> list[QuarterSummary]:
    """Quarters overlapping date_range (all of them when no range is given)."""
    if date_range is None:
        return list(quarters)
    return [q for q in quarters if quarter_in_range(q, date_range)]


def sort_quarters(quarters: list[QuarterSummary]) -> list[QuarterSummary]:
    return sorted(quarters, key=lambda q: q.sort_key)


# ---------------------------------------------------------------------------
# Overall P&L
# ---------------------------------------------------------------------------

def overall_pl(quarters: list[QuarterSummary]) -> OverallPL:
    """Sum statements into one P&L.

    Operating profit is income less driver pay, fuel and pass-through; overhead
    is every other expense category.
    """
    income = sum(q.total_income for q in quarters)
    expenses = sum(q.total_expenses for q in quarters)
    breakdown = reduce(lambda acc, q: acc + q.expenses, quarters, ExpenseBreakdown())
    return OverallPL(
        total_income=income,
        total_expenses=expenses,
        net_profit=income - expenses,
        operating_profit=income - breakdown.operating_total,
        overhead_expenses=breakdown.overhead_total,
        expense_breakdown=breakdown,
    )


# ---------------------------------------------------------------------------
# Yard storage
# ---------------------------------------------------------------------------

def startup_costs_for(quarter: QuarterSummary, schedule: list[StartupCostRule]) -> float:
    total = 0.0
    for rule in schedule:
        if rule.year == quarter.year and rule.quarter == quarter.quarter:
            total += quarter.repairs_and_maintenance * rule.repairs_fraction
            if rule.include_equipment_rental:
                total += quarter.equipment_rental
    return total


def yard_storage_summary(
    quarters: list[QuarterSummary],
    schedule: Optional[list[StartupCostRule]] = None,
) -> YardStorageSummary:
    """Yard income against rent + utilities, less amortized startup costs."""
    if schedule is None:
        schedule = [StartupCostRule(*rule) for rule in STARTUP_COST_SCHEDULE]
    income = sum(q.yard_storage_income for q in quarters)
    expenses = sum(q.rent_expense + q.utilities for q in quarters)
    startup = sum(startup_costs_for(q, schedule) for q in quarters)
    return YardStorageSummary(
        total_income=income,
        total_expenses=expenses,
        startup_costs=startup,
        net_profit=income - expenses - startup,
        start_date=YARD_STORAGE_START_DATE,
    )


# ---------------------------------------------------------------------------
# Quarterly views
# ---------------------------------------------------------------------------

def quarterly_metrics(quarters: list[QuarterSummary]) -> list[QuarterlyMetric]:
    return [
        QuarterlyMetric(period=q.period, total_revenue=q.total_income, total_expenses=q.total_expenses)
        for q in sort_quarters(quarters)
    ]


def quarterly_comparison(quarters: list[QuarterSummary]) -> list[QuarterComparisonRow]:
    """Exactly four rows, Q1..Q4, each mapping year -> (income, expenses)."""
    rows = {name: QuarterComparisonRow(quarter=name) for name in QUARTERS}
    for q in sort_quarters(quarters):
        if q.quarter in rows:
            rows[q.quarter].by_year[q.year] = (q.total_income, q.total_expenses)
    return [rows[name] for name in QUARTERS]


# ---------------------------------------------------------------------------
# Manager bonuses
# ---------------------------------------------------------------------------

def manager_metrics(records: list[LoadRecord], managers: Optional[list[dict]] = None) -> list[ManagerMetric]:
    """Bonus = percentage of the line's load profit above its threshold."""
    if managers is None:
        managers = MANAGERS
    line_profit = {
        OTR_LINE: sum(r.profit for r in records if r.is_otr),
        LOCAL_LINE: sum(r.profit for r in records if not r.is_otr),
    }
    out = []
    for m in managers:
        profit = line_profit.get(m["business_line"], 0.0)
        eligible = profit > m["bonus_threshold"]
        out.append(ManagerMetric(
            name=m["name"],
            business_line=m["business_line"],
            annual_overhead=m["annual_overhead"],
            bonus_threshold=m["bonus_threshold"],
            bonus_percentage=m["bonus_percentage"],
            business_profit=profit,
            bonus_eligible=eligible,
            bonus_amount=(profit - m["bonus_threshold"]) * m["bonus_percentage"] / 100 if eligible else 0.0,
        ))
    return out


# ---------------------------------------------------------------------------
# Full statement summary
# ---------------------------------------------------------------------------

def pl_summary(quarters: list[QuarterSummary], date_range: Optional[DateRange] = None) -> dict:
    """Everything the P&L views need for one date range."""
    selected = sort_quarters(filter_quarters(quarters, date_range))
    return {
        "quarters": selected,
        "quarterly_metrics": quarterly_metrics(selected),
        "quarterly_comparison": quarterly_comparison(selected),
        "yard_storage": yard_storage_summary(selected),
        "overall_pl": overall_pl(selected),
    }
