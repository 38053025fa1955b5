import datetime as dt
from dataclasses import fields

import pytest

from trucking_analytics.config import PASS_THROUGH_INCOME_LABELS, YARD_STORAGE_INCOME_LABELS
from trucking_analytics.data.schemas import DateRange, ExpenseBreakdown, QuarterSummary
from trucking_analytics.data.statements import (
    EXPENSE_RULES,
    Mode,
    classify_expense,
    parse_statement,
    quarter_in_range,
    resolve_date_range,
)

from conftest import STATEMENT_CSV


def _statement(*expense_rows, income_rows=(), tail=("Total for Expenses", "$0.00")):
    lines = ["Profit and Loss", "AIM Trucking LLC", '"October 1-December 31, 2024"', ",Total", "Income"]
    lines += [f'{label},"{value}"' for label, value in income_rows]
    lines += ['Total for Income,"$0.00"', "Expenses"]
    lines += [f'{label},"{value}"' for label, value in expense_rows]
    if tail:
        lines.append(f'{tail[0]},"{tail[1]}"')
    return "\n".join(lines) + "\n"


def test_parse_full_statement():
    q = parse_statement(STATEMENT_CSV, quarter="Q1", year=2025)
    assert q.period == "Q1 2025"
    assert q.date_range == "January 1-March 31, 2025"
    assert q.total_income == 10000.0
    assert q.total_expenses == 7000.0
    assert q.yard_storage_income == 1000.0

    e = q.expenses
    assert e.driver_pay == 4000.0
    assert e.fuel == 500.0
    assert e.pass_through == 150.0
    assert e.commercial_insurance == 450.0
    assert e.rent_expense == 300.0
    assert e.other_expenses == 50.0

    assert q.rent_expense == 300.0
    assert q.utilities == 100.0
    assert q.repairs_and_maintenance == 900.0
    assert q.equipment_rental == 250.0
    assert q.pass_through_income.palletization == 200.0
    assert q.pass_through_expenses.palletization == 150.0


def test_insurance_subtotal_replaces_items():
    q = parse_statement(_statement(("Insurance - Commercial", "$500"), ("Total for Insurance", "$450")))
    assert q.expenses.commercial_insurance == 450.0


def test_subtotal_wins_even_before_items():
    q = parse_statement(_statement(("Total for Insurance", "$450"), ("Insurance - Commercial", "$500")))
    assert q.expenses.commercial_insurance == 450.0


def test_health_and_chassis_subtotals():
    q = parse_statement(_statement(
        ("HRA Employee Benefit", "$120"),
        ("Total for Health Insurance", "$100"),
        ("Chassis Rental", "$300"),
        ("Repairs - Chassis", "$50"),
    ))
    assert q.expenses.health_insurance == 100.0
    assert q.expenses.chassis_rental == 350.0


@pytest.mark.parametrize("rows", [
    [("Chassis Rental", "$80"), ("Repairs - Chassis", "$40"), ("Total for Chassis Rental", "$100")],
    [("Total for Chassis Rental", "$100"), ("Chassis Rental", "$80"), ("Repairs - Chassis", "$40")],
])
def test_chassis_subtotal_replaces_items_in_any_order(rows):
    q = parse_statement(_statement(*rows))
    assert q.expenses.chassis_rental == 100.0


@pytest.mark.parametrize("label,field", sorted(PASS_THROUGH_INCOME_LABELS.items()))
def test_pass_through_income_labels(label, field):
    q = parse_statement(_statement(income_rows=[(label, "$125"), (label, "$25")]))
    assert getattr(q.pass_through_income, field) == 150.0
    assert q.pass_through_income.total == 150.0
    assert q.yard_storage_income == 0.0


@pytest.mark.parametrize("label", sorted(YARD_STORAGE_INCOME_LABELS))
def test_yard_storage_income_labels(label):
    q = parse_statement(_statement(income_rows=[(label, "$1,000"), ("Drayage Income", "$9,000")]))
    assert q.yard_storage_income == 1000.0
    assert q.pass_through_income.total == 0.0


def test_items_accumulate():
    q = parse_statement(_statement(("Base Price", "$100"), ("Drayage", "$50"), ("DRAYAGE -CA EXPENSE", "$25")))
    assert q.expenses.driver_pay == 175.0


def test_side_ledger_is_independent():
    q = parse_statement(_statement(
        ("SSL DETENTION", "$80"),
        ("UNLOADING EXPENSE", "$40"),
        ("Transloading", "$60"),
    ))
    assert q.pass_through_expenses.ssl_detention == 80.0
    assert q.pass_through_expenses.unloading == 40.0
    assert q.pass_through_expenses.transload == 60.0
    # Only Transloading is a pass-through row in the main breakdown
    assert q.expenses.pass_through == 60.0
    assert q.expenses.other_expenses == 120.0


def test_missing_expense_total_still_parses():
    q = parse_statement(_statement(("Fuel", "$75"), tail=None))
    assert q.total_expenses == 0.0
    assert q.expenses.fuel == 75.0


def test_net_operating_income_exits_income_section():
    text = (
        "Profit and Loss\nAIM\n\"January 1-March 31, 2024\"\nIncome\n"
        "AIM YARD STORAGE 1,$100\n"
        "Net Operating Income,$100\n"
        "YARD STORAGE 1,$999\n"
    )
    q = parse_statement(text)
    assert q.yard_storage_income == 100.0


def test_unreadable_content_never_raises():
    q = parse_statement("garbage\n,,,\nIncome,not money\n")
    assert isinstance(q, QuarterSummary)
    assert q.total_income == 0.0
    assert parse_statement("").date_range == ""


def test_classification_precedence():
    assert classify_expense("Total for Insurance", 1.0).mode is Mode.REPLACE
    assert classify_expense("Fuel", 1.0).category == "fuel"
    assert classify_expense("Total for Office", 9.0) is None
    assert classify_expense("Mystery", 0.0) is None
    assert EXPENSE_RULES[-1].category == "other_expenses"


def test_resolve_date_range():
    r = resolve_date_range("January 1-March 31, 2023")
    assert (r.start, r.end) == (dt.date(2023, 1, 1), dt.date(2023, 3, 31))

    r = resolve_date_range("October 5 - December 2, 2024")
    assert (r.start, r.end) == (dt.date(2024, 10, 1), dt.date(2024, 12, 31))

    assert resolve_date_range("Q1 2023") is None
    assert resolve_date_range("Smarch 1-March 31, 2023") is None


@pytest.mark.parametrize("start,end,expected", [
    (dt.date(2023, 3, 31), dt.date(2023, 6, 30), True),
    (dt.date(2022, 1, 1), dt.date(2023, 1, 1), True),
    (dt.date(2023, 4, 1), dt.date(2023, 12, 31), False),
    (dt.date(2022, 1, 1), dt.date(2022, 12, 31), False),
])
def test_quarter_overlap(start, end, expected):
    q = QuarterSummary(quarter="Q1", year=2023, date_range="January 1-March 31, 2023")
    assert quarter_in_range(q, DateRange(start, end)) is expected


def test_unresolvable_quarter_always_included():
    q = QuarterSummary(quarter="Q1", year=2023, date_range="All Dates")
    assert quarter_in_range(q, DateRange(dt.date(1999, 1, 1), dt.date(1999, 1, 2)))


def test_rule_table_targets_real_fields():
    breakdown_fields = {f.name for f in fields(ExpenseBreakdown)}
    summary_fields = {f.name for f in fields(QuarterSummary)}
    for rule in EXPENSE_RULES:
        assert isinstance(rule.mode, Mode)
        assert rule.category in breakdown_fields
        assert rule.capture is None or rule.capture in summary_fields
    assert Mode("replace") is Mode.REPLACE
    with pytest.raises(ValueError):
        Mode("replcae")
