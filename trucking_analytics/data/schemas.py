"""
Record and metric schemas shared by the loaders, parsers, and analytics.
"""
from __future__ import annotations

import datetime as dt
from dataclasses import asdict, dataclass, field, fields
from typing import Optional


# ---------------------------------------------------------------------------
# Load-level records
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class LoadRecord:
    """One trucking job from the profitability export.

    ``profit`` and ``profit_margin`` are the export's own figures and are never
    re-derived; ``recomputed_profit``/``recomputed_margin`` sit alongside them.
    """
    load_number: str
    container_number: str = ""
    customer: str = ""
    date: str = ""
    date_obj: Optional[dt.date] = None
    driver: str = ""
    charges_type: tuple[str, ...] = ()
    total_charges: float = 0.0
    driver_pay_total: float = 0.0
    expense_total: float = 0.0
    profit: float = 0.0
    profit_margin: float = 0.0
    is_otr: bool = False

    @property
    def recomputed_profit(self) -> float:
        return self.total_charges - self.driver_pay_total - self.expense_total

    @property
    def recomputed_margin(self) -> float:
        if not self.total_charges > 0:
            return 0.0
        return self.recomputed_profit / self.total_charges * 100


@dataclass(frozen=True)
class DateRange:
    """Inclusive start/end calendar dates."""
    start: dt.date
    end: dt.date
    label: str = ""

    def overlaps(self, start: dt.date, end: dt.date) -> bool:
        """True unless [start, end] ends before this range or begins after it."""
        return not (end < self.start or start > self.end)

    @classmethod
    def from_iso(cls, label: str, start: str, end: str) -> "DateRange":
        return cls(dt.date.fromisoformat(start), dt.date.fromisoformat(end), label)


# ---------------------------------------------------------------------------
# Statement (quarter) summaries
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ExpenseBreakdown:
    # Driver and operations
    driver_pay: float = 0.0
    fuel: float = 0.0
    pass_through: float = 0.0
    # Payroll & benefits
    payroll_expenses: float = 0.0
    health_insurance: float = 0.0
    # Insurance
    commercial_insurance: float = 0.0
    # Facility & equipment
    rent_expense: float = 0.0
    utilities: float = 0.0
    repairs_and_maintenance: float = 0.0
    chassis_rental: float = 0.0
    equipment_rental: float = 0.0
    # Administrative
    accounting_services: float = 0.0
    computer_and_internet: float = 0.0
    bank_charges: float = 0.0
    business_licenses: float = 0.0
    advertising: float = 0.0
    other_expenses: float = 0.0

    OPERATING_FIELDS = ("driver_pay", "fuel", "pass_through")

    @property
    def operating_total(self) -> float:
        return sum(getattr(self, name) for name in self.OPERATING_FIELDS)

    @property
    def overhead_total(self) -> float:
        """Sum of every category outside driver pay, fuel and pass-through."""
        return sum(
            getattr(self, f.name) for f in fields(self)
            if f.name not in self.OPERATING_FIELDS
        )

    def __add__(self, other: "ExpenseBreakdown") -> "ExpenseBreakdown":
        return ExpenseBreakdown(**{
            f.name: getattr(self, f.name) + getattr(other, f.name) for f in fields(self)
        })


@dataclass(frozen=True)
class PassThroughBreakdown:
    palletization: float = 0.0
    ssl_detention: float = 0.0
    unloading: float = 0.0
    transload: float = 0.0
    warehouse_storage: float = 0.0

    @property
    def total(self) -> float:
        return sum(getattr(self, f.name) for f in fields(self))


_QUARTER_ORDER = {"Q1": 1, "Q2": 2, "Q3": 3, "Q4": 4}


@dataclass(frozen=True)
class QuarterSummary:
    """One parsed accounting statement.

    ``total_expenses`` is the statement's declared total; the itemized
    ``expenses`` need not add up to it. ``rent_expense``, ``utilities``,
    ``repairs_and_maintenance`` and ``equipment_rental`` hold the last value
    seen for that label and feed only the yard-storage rollup.
    """
    quarter: str
    year: int
    date_range: str = ""
    total_income: float = 0.0
    total_expenses: float = 0.0
    expenses: ExpenseBreakdown = field(default_factory=ExpenseBreakdown)
    yard_storage_income: float = 0.0
    rent_expense: float = 0.0
    utilities: float = 0.0
    repairs_and_maintenance: float = 0.0
    equipment_rental: float = 0.0
    pass_through_income: PassThroughBreakdown = field(default_factory=PassThroughBreakdown)
    pass_through_expenses: PassThroughBreakdown = field(default_factory=PassThroughBreakdown)

    @property
    def period(self) -> str:
        return f"{self.quarter} {self.year}"

    @property
    def sort_key(self) -> tuple[int, int]:
        return self.year, _QUARTER_ORDER.get(self.quarter, 0)

    def to_dict(self) -> dict:
        data = asdict(self)
        data["period"] = self.period
        return data


# ---------------------------------------------------------------------------
# Dimensional metrics
# ---------------------------------------------------------------------------

@dataclass
class DimensionalMetric:
    """Revenue/profit/load count accumulated under one category key."""
    key: str
    revenue: float = 0.0
    profit: float = 0.0
    loads: int = 0
    margin: float = 0.0

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class DriverMetric(DimensionalMetric):
    total_pay: float = 0.0


@dataclass
class MonthlyMetric:
    month: str  # "Jan 2024"
    revenue: float = 0.0
    otr_revenue: float = 0.0
    local_revenue: float = 0.0
    profit: float = 0.0
    otr_profit: float = 0.0
    local_profit: float = 0.0
    loads: int = 0
    margin: float = 0.0
    driver_pay: float = 0.0
    expenses: float = 0.0

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class BusinessLineMetric:
    total_revenue: float = 0.0
    total_profit: float = 0.0
    total_loads: int = 0
    average_margin: float = 0.0
    total_driver_pay: float = 0.0
    total_expenses: float = 0.0


# ---------------------------------------------------------------------------
# Cross-year comparisons
# Kept as {year: (a, b)} internally; flatten() produces the wide row shape
# the charts plot one series per year-field from.
# ---------------------------------------------------------------------------

@dataclass
class QuarterComparisonRow:
    quarter: str
    by_year: dict[int, tuple[float, float]] = field(default_factory=dict)  # year -> (revenue, expenses)

    def flatten(self) -> dict:
        row: dict = {"quarter": self.quarter}
        for year in sorted(self.by_year):
            revenue, expenses = self.by_year[year]
            row[f"revenue{year}"] = revenue
            row[f"expenses{year}"] = expenses
        return row


@dataclass
class MonthComparisonRow:
    month: str  # "Jan"
    by_year: dict[int, tuple[float, float]] = field(default_factory=dict)  # year -> (otr, local)

    def flatten(self) -> dict:
        row: dict = {"month": self.month}
        for year in sorted(self.by_year):
            otr, local = self.by_year[year]
            row[f"otrRevenue{year}"] = otr
            row[f"localRevenue{year}"] = local
        return row


# ---------------------------------------------------------------------------
# P&L rollups
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class StartupCostRule:
    """Share of one quarter's repairs (plus optionally its equipment rental)
    counted as yard-storage startup cost."""
    year: int
    quarter: str
    repairs_fraction: float = 0.0
    include_equipment_rental: bool = False


@dataclass
class YardStorageSummary:
    total_income: float = 0.0
    total_expenses: float = 0.0
    startup_costs: float = 0.0
    net_profit: float = 0.0
    start_date: str = ""


@dataclass
class QuarterlyMetric:
    period: str
    total_revenue: float = 0.0
    total_expenses: float = 0.0


@dataclass
class OverallPL:
    total_income: float = 0.0
    total_expenses: float = 0.0
    net_profit: float = 0.0
    operating_profit: float = 0.0
    overhead_expenses: float = 0.0
    expense_breakdown: ExpenseBreakdown = field(default_factory=ExpenseBreakdown)


@dataclass
class ManagerMetric:
    name: str
    business_line: str
    annual_overhead: float
    bonus_threshold: float
    bonus_percentage: float
    business_profit: float = 0.0
    bonus_eligible: bool = False
    bonus_amount: float = 0.0
