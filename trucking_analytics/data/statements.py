"""
Accounting statement (Profit and Loss export) parsing.

A statement is a two-column label/value report. Rows are walked with a small
section state machine (outside / income / expenses); expense rows are routed
through EXPENSE_RULES, an ordered (predicate, category, mode) table where the
first matching rule wins.

Modes:
  accumulate — add the row amount into the category's itemized sum.
  replace    — the row is the statement's own subtotal for the category. When
               a subtotal is present anywhere in the statement it is the final
               value, whatever order the itemized rows appear in.
"""
from __future__ import annotations

import calendar
import csv
import datetime as dt
import io
import logging
import re
from enum import Enum
from typing import Callable, NamedTuple, Optional

from trucking_analytics.config import (
    PASS_THROUGH_EXPENSE_LABELS,
    PASS_THROUGH_INCOME_LABELS,
    YARD_STORAGE_INCOME_LABELS,
)
from trucking_analytics.data.normalize import parse_amount
from trucking_analytics.data.schemas import (
    DateRange,
    ExpenseBreakdown,
    PassThroughBreakdown,
    QuarterSummary,
)

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Classification table
# ---------------------------------------------------------------------------

class Mode(str, Enum):
    ACCUMULATE = "accumulate"
    REPLACE = "replace"


Predicate = Callable[[str, float], bool]


class ExpenseRule(NamedTuple):
    predicate: Predicate
    category: str              # ExpenseBreakdown field
    mode: Mode = Mode.ACCUMULATE
    capture: Optional[str] = None  # QuarterSummary field that keeps the latest raw value


def exact(*labels: str) -> Predicate:
    wanted = frozenset(labels)
    return lambda label, amount: label in wanted


def prefix(text: str) -> Predicate:
    return lambda label, amount: label.startswith(text)


def _unclassified(label: str, amount: float) -> bool:
    return amount != 0 and not label.startswith("Total for")


EXPENSE_RULES: list[ExpenseRule] = [
    # Driver and operations
    ExpenseRule(exact("Base Price", "Drayage", "DRAYAGE -CA EXPENSE"), "driver_pay"),
    ExpenseRule(exact("Fuel"), "fuel"),
    ExpenseRule(exact("Transloading", "WAREHOUSE STORAGE", "A-B PALLET", "Shrink Wrap", "PALLETIZATION"),
                "pass_through"),
    # Payroll & benefits
    ExpenseRule(exact("Payroll Expenses"), "payroll_expenses"),
    ExpenseRule(exact("HRA Employee Benefit"), "health_insurance"),
    ExpenseRule(prefix("Total for Health Insurance"), "health_insurance", Mode.REPLACE),
    # Insurance
    ExpenseRule(prefix("Total for Insurance"), "commercial_insurance", Mode.REPLACE),
    ExpenseRule(exact("Insurance - Commercial", "Driver Insurance Deduction"), "commercial_insurance"),
    # Facility & equipment
    ExpenseRule(exact("Rent Expense"), "rent_expense", capture="rent_expense"),
    ExpenseRule(exact("Utilities"), "utilities", capture="utilities"),
    ExpenseRule(exact("Repairs and Maintenance"), "repairs_and_maintenance", capture="repairs_and_maintenance"),
    ExpenseRule(prefix("Total for Chassis Rental"), "chassis_rental", Mode.REPLACE),
    ExpenseRule(exact("Chassis Rental", "Repairs - Chassis"), "chassis_rental"),
    ExpenseRule(exact("Equipment Rental Expense"), "equipment_rental", capture="equipment_rental"),
    # Administrative
    ExpenseRule(exact("ACCOUNTING SERVICES EXPENSE", "CPA Services"), "accounting_services"),
    ExpenseRule(exact("Computer and Internet Expenses"), "computer_and_internet"),
    ExpenseRule(exact("Bank Service Charges"), "bank_charges"),
    ExpenseRule(exact("Business Licenses and Permits"), "business_licenses"),
    ExpenseRule(exact("Advertising"), "advertising"),
    # Catch-all
    ExpenseRule(_unclassified, "other_expenses"),
]


def classify_expense(label: str, amount: float, rules: list[ExpenseRule] = EXPENSE_RULES) -> Optional[ExpenseRule]:
    """First rule whose predicate accepts the row, or None."""
    for rule in rules:
        if rule.predicate(label, amount):
            return rule
    return None


# ---------------------------------------------------------------------------
# Section state machine
# ---------------------------------------------------------------------------

class Section(str, Enum):
    OUTSIDE = "outside"
    INCOME = "income"
    EXPENSE = "expense"


class _ExpenseLedger:
    """Itemized sums and subtotals per category for one statement."""

    def __init__(self) -> None:
        self.itemized: dict[str, float] = {}
        self.subtotals: dict[str, float] = {}

    def post(self, rule: ExpenseRule, amount: float) -> None:
        if rule.mode is Mode.REPLACE:
            self.subtotals[rule.category] = amount
        else:
            self.itemized[rule.category] = self.itemized.get(rule.category, 0.0) + amount

    def resolve(self) -> ExpenseBreakdown:
        values = dict(self.itemized)
        values.update(self.subtotals)
        return ExpenseBreakdown(**values)


def read_statement_rows(text: str) -> list[tuple[str, str]]:
    """(label, value) pairs, trimmed; short rows padded with ''."""
    rows = []
    for row in csv.reader(io.StringIO(text or "")):
        label = row[0].strip() if len(row) > 0 else ""
        value = row[1].strip() if len(row) > 1 else ""
        rows.append((label, value))
    return rows


def _find_date_range_label(rows: list[tuple[str, str]]) -> str:
    """The report header's period line ('January 1-March 31, 2023')."""
    for label, _ in rows[:6]:
        if _DATE_RANGE_RE.search(label):
            return label
    return rows[2][0] if len(rows) > 2 else ""


def parse_statement(text: str, quarter: str = "Q1", year: int = 0) -> QuarterSummary:
    """Parse one statement export into a QuarterSummary. Never raises on content."""
    rows = read_statement_rows(text)

    section = Section.OUTSIDE
    total_income = 0.0
    total_expenses = 0.0
    yard_storage_income = 0.0
    pt_income: dict[str, float] = {}
    pt_expenses: dict[str, float] = {}
    captured: dict[str, float] = {}
    ledger = _ExpenseLedger()

    for label, value in rows:
        if label == "Income":
            section = Section.INCOME
            continue
        if label == "Expenses":
            section = Section.EXPENSE
            continue
        if label.startswith("Total for Income"):
            total_income = parse_amount(value)
            section = Section.OUTSIDE
            continue
        if label.startswith("Total for Expenses"):
            total_expenses = parse_amount(value)
            section = Section.OUTSIDE
            continue
        if label.startswith("Net Operating Income") and section == Section.INCOME:
            section = Section.OUTSIDE

        if section == Section.INCOME:
            if label in YARD_STORAGE_INCOME_LABELS:
                yard_storage_income += parse_amount(value)
            key = PASS_THROUGH_INCOME_LABELS.get(label)
            if key:
                pt_income[key] = pt_income.get(key, 0.0) + parse_amount(value)

        elif section == Section.EXPENSE:
            amount = parse_amount(value)
            rule = classify_expense(label, amount)
            if rule is not None:
                ledger.post(rule, amount)
                if rule.capture:
                    captured[rule.capture] = amount

            # Side ledger, independent of the main classification
            key = PASS_THROUGH_EXPENSE_LABELS.get(label)
            if key:
                pt_expenses[key] = pt_expenses.get(key, 0.0) + amount

    return QuarterSummary(
        quarter=quarter,
        year=year,
        date_range=_find_date_range_label(rows),
        total_income=total_income,
        total_expenses=total_expenses,
        expenses=ledger.resolve(),
        yard_storage_income=yard_storage_income,
        pass_through_income=PassThroughBreakdown(**pt_income),
        pass_through_expenses=PassThroughBreakdown(**pt_expenses),
        **captured,
    )


# ---------------------------------------------------------------------------
# Date-range label → quarter boundaries
# ---------------------------------------------------------------------------

_DATE_RANGE_RE = re.compile(r"([A-Za-z]+)\s+(\d+)\s*-\s*([A-Za-z]+)\s+(\d+),\s*(\d{4})")
_MONTHS = {name: i for i, name in enumerate(calendar.month_name) if name}


def resolve_date_range(label: str) -> Optional[DateRange]:
    """'January 1-March 31, 2023' -> 2023-01-01..2023-03-31.

    Start snaps to the first of the start month and end to the last day of the
    end month. Returns None when the label doesn't fit the pattern.
    """
    m = _DATE_RANGE_RE.search(label or "")
    if not m:
        return None
    start_month = _MONTHS.get(m.group(1).capitalize())
    end_month = _MONTHS.get(m.group(3).capitalize())
    if start_month is None or end_month is None:
        return None
    year = int(m.group(5))
    last_day = calendar.monthrange(year, end_month)[1]
    return DateRange(dt.date(year, start_month, 1), dt.date(year, end_month, last_day), label)


def quarter_in_range(summary: QuarterSummary, date_range: DateRange) -> bool:
    """Overlap test; a statement whose label can't be resolved is always kept."""
    bounds = resolve_date_range(summary.date_range)
    if bounds is None:
        return True
    return date_range.overlaps(bounds.start, bounds.end)
