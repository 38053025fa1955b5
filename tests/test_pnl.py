import datetime as dt

import pytest

from trucking_analytics.analytics.pnl import (
    manager_metrics,
    overall_pl,
    pl_summary,
    quarterly_comparison,
    quarterly_metrics,
    yard_storage_summary,
)
from trucking_analytics.data.schemas import DateRange, QuarterSummary, StartupCostRule
from trucking_analytics.data.statements import parse_statement

from conftest import STATEMENT_CSV, make_record


@pytest.fixture
def q1_2025():
    return parse_statement(STATEMENT_CSV, quarter="Q1", year=2025)


def test_overall_pl(q1_2025):
    pl = overall_pl([q1_2025])
    assert pl.total_income == 10000.0
    assert pl.total_expenses == 7000.0
    assert pl.net_profit == 3000.0
    # driver pay + fuel + pass-through = 4650
    assert pl.operating_profit == 5350.0
    assert pl.overhead_expenses == pytest.approx(2050.0)
    assert pl.expense_breakdown.fuel == 500.0


def test_overall_pl_sums_quarters(q1_2025):
    pl = overall_pl([q1_2025, q1_2025])
    assert pl.total_income == 20000.0
    assert pl.expense_breakdown.driver_pay == 8000.0


def test_yard_storage_full_quarter(q1_2025):
    yard = yard_storage_summary([q1_2025])
    assert yard.total_income == 1000.0
    assert yard.total_expenses == 400.0
    # all repairs plus equipment rental
    assert yard.startup_costs == 1150.0
    assert yard.net_profit == -550.0
    assert yard.start_date == "December 2024"


def test_yard_storage_partial_quarter():
    q = QuarterSummary(quarter="Q4", year=2024, yard_storage_income=500.0,
                       repairs_and_maintenance=900.0, equipment_rental=250.0)
    assert yard_storage_summary([q]).startup_costs == pytest.approx(300.0)


def test_yard_storage_custom_schedule():
    q = QuarterSummary(quarter="Q3", year=2023, repairs_and_maintenance=100.0, equipment_rental=40.0)
    assert yard_storage_summary([q]).startup_costs == 0.0
    schedule = [StartupCostRule(2023, "Q3", 0.5, True)]
    assert yard_storage_summary([q], schedule).startup_costs == 90.0


def test_quarterly_comparison_always_four_rows():
    assert [r.quarter for r in quarterly_comparison([])] == ["Q1", "Q2", "Q3", "Q4"]

    quarters = [
        QuarterSummary(quarter="Q1", year=2024, total_income=10.0, total_expenses=4.0),
        QuarterSummary(quarter="Q1", year=2023, total_income=8.0, total_expenses=3.0),
        QuarterSummary(quarter="Q3", year=2025, total_income=1.0, total_expenses=1.0),
    ]
    rows = quarterly_comparison(quarters)
    assert len(rows) == 4
    assert rows[0].by_year == {2023: (8.0, 3.0), 2024: (10.0, 4.0)}
    assert rows[0].flatten() == {
        "quarter": "Q1",
        "revenue2023": 8.0, "expenses2023": 3.0,
        "revenue2024": 10.0, "expenses2024": 4.0,
    }
    assert rows[1].by_year == {}


def test_quarterly_metrics_sorted():
    quarters = [QuarterSummary(quarter="Q2", year=2024), QuarterSummary(quarter="Q4", year=2023)]
    assert [m.period for m in quarterly_metrics(quarters)] == ["Q4 2023", "Q2 2024"]


def test_pl_summary_filters_by_overlap(q1_2025):
    older = QuarterSummary(quarter="Q1", year=2023, date_range="January 1-March 31, 2023", total_income=5.0)
    window = DateRange(dt.date(2025, 2, 1), dt.date(2025, 2, 28))
    summary = pl_summary([older, q1_2025], window)
    assert summary["quarters"] == [q1_2025]
    assert summary["overall_pl"].total_income == 10000.0


def test_manager_bonus():
    records = [
        make_record("AIM_M1", profit=150_000.0, is_otr=True),
        make_record("AIM_L1", profit=90_000.0, is_otr=False),
    ]
    otr, local = manager_metrics(records)
    assert otr.business_profit == 150_000.0
    assert otr.bonus_eligible
    assert otr.bonus_amount == 1500.0
    assert not local.bonus_eligible
    assert local.bonus_amount == 0.0


def test_manager_bonus_custom_config():
    managers = [{"name": "Ops", "business_line": "OTR", "annual_overhead": 0.0,
                 "bonus_threshold": 0.0, "bonus_percentage": 10.0}]
    [m] = manager_metrics([make_record(profit=200.0, is_otr=True)], managers)
    assert m.bonus_amount == 20.0
