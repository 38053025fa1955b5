import datetime as dt
import math

import pytest

from trucking_analytics.analytics.loads import (
    customer_breakdown,
    dimensional_breakdown,
    driver_performance,
    filter_by_date_range,
    load_totals,
    monthly_breakdown,
    monthly_revenue_comparison,
    service_type_breakdown,
)

from conftest import make_record


def test_end_to_end_totals(two_loads):
    totals = load_totals(two_loads)
    assert totals["total_revenue"] == 1500.0
    assert totals["total_profit"] == 300.0
    assert totals["total_loads"] == 2
    assert round(totals["average_margin"], 2) == 20.00
    assert totals["average_revenue_per_load"] == 750.0
    assert totals["otr_metrics"].total_revenue == 1000.0
    assert totals["local_drayage_metrics"].total_loads == 1


def test_end_to_end_months(two_loads):
    months = monthly_breakdown(two_loads)
    assert [m.month for m in months] == ["Jan 2024", "Feb 2024"]
    assert months[0].otr_revenue == 1000.0
    assert months[0].local_revenue == 0.0
    assert months[1].local_profit == 100.0
    assert months[1].driver_pay == 300.0


def test_january_filter_keeps_first(two_loads):
    kept = filter_by_date_range(two_loads, dt.date(2024, 1, 1), dt.date(2024, 1, 31))
    assert [r.load_number for r in kept] == ["AIM_M1"]


def test_undated_records_dropped_from_date_views():
    records = [make_record("AIM_M1"), make_record("AIM_M2", date="??", date_obj=None, total_charges=5.0)]
    assert len(filter_by_date_range(records, dt.date(2000, 1, 1), dt.date(2100, 1, 1))) == 1
    assert sum(m.loads for m in monthly_breakdown(records)) == 1


def test_service_type_even_split():
    rows = service_type_breakdown([make_record(charges_type=("A", "B"), total_charges=100.0, profit=40.0)])
    by_key = {m.key: m for m in rows}
    assert by_key["A"].revenue == 50.0
    assert by_key["A"].profit == 20.0
    assert by_key["A"].loads == 1


def test_service_type_exclusions_keep_divisor():
    rows = service_type_breakdown(
        [make_record(charges_type=("Base Price", "transload"), total_charges=100.0)],
        exclusions=["transload"],
    )
    assert [m.key for m in rows] == ["Base Price"]
    assert rows[0].revenue == 50.0


def test_zero_revenue_margin_is_zero():
    rows = customer_breakdown([make_record(customer="Freebie", total_charges=0.0, profit=10.0)])
    assert rows[0].margin == 0.0
    assert not math.isnan(rows[0].margin)


def test_ties_keep_input_order():
    records = [
        make_record("AIM_M1", customer="Zeta", total_charges=100.0),
        make_record("AIM_M2", customer="Alpha", total_charges=100.0),
        make_record("AIM_M3", customer="Mid", total_charges=300.0),
    ]
    assert [m.key for m in customer_breakdown(records)] == ["Mid", "Zeta", "Alpha"]


def test_none_key_skips_record():
    records = [make_record(customer="Acme", total_charges=10.0), make_record(customer="", total_charges=5.0)]
    rows = dimensional_breakdown(records, lambda r: r.customer or None)
    assert [m.key for m in rows] == ["Acme"]


def test_driver_performance_skips_blank_driver():
    records = [
        make_record(driver="Dan", total_charges=100.0, profit=20.0, driver_pay_total=60.0),
        make_record(driver="Dan", total_charges=50.0, profit=5.0, driver_pay_total=30.0),
        make_record(driver="", total_charges=999.0),
    ]
    rows = driver_performance(records)
    assert len(rows) == 1
    assert rows[0].loads == 2
    assert rows[0].total_pay == 90.0
    assert rows[0].margin == pytest.approx(25.0 / 150.0 * 100)


def test_monthly_revenue_comparison(two_loads):
    rows = monthly_revenue_comparison(two_loads)
    assert len(rows) == 12
    assert rows[0].by_year == {2024: (1000.0, 0.0)}
    assert rows[1].by_year == {2024: (0.0, 500.0)}
    assert rows[2].flatten() == {"month": "Mar", "otrRevenue2024": 0.0, "localRevenue2024": 0.0}


def test_empty_inputs():
    assert customer_breakdown([]) == []
    assert service_type_breakdown([]) == []
    assert monthly_breakdown([]) == []
    assert len(monthly_revenue_comparison([])) == 12
    assert load_totals([])["average_margin"] == 0.0


def test_business_lines_carry_driver_pay_and_expenses():
    records = [
        make_record("AIM_M1", total_charges=1000.0, driver_pay_total=600.0, expense_total=150.0, is_otr=True),
        make_record("AIM_M2", total_charges=400.0, driver_pay_total=250.0, expense_total=50.0, is_otr=True),
        make_record("AIM_L1", total_charges=500.0, driver_pay_total=300.0, expense_total=75.0, is_otr=False),
    ]
    totals = load_totals(records)
    otr, local = totals["otr_metrics"], totals["local_drayage_metrics"]
    assert otr.total_driver_pay == 850.0
    assert otr.total_expenses == 200.0
    assert local.total_driver_pay == 300.0
    assert local.total_expenses == 75.0
    assert totals["total_driver_pay"] == 1150.0
    assert totals["total_expenses"] == 275.0
