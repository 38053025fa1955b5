"""
Trucking Analytics — Configuration: paths, column names, label tables, schedules.
"""
import os
from pathlib import Path

# ---------------------------------------------------------------------------
# Paths: override with TRUCKING_DATA_DIR env var for cloud deployment
# ---------------------------------------------------------------------------
_data_dir = Path(os.environ.get("TRUCKING_DATA_DIR", str(Path.home() / "Desktop" / "Trucking Analytics")))
BASE_FOLDER = _data_dir
INBOX_FOLDER = _data_dir / "inbox"
REPORTS_FOLDER = _data_dir / "reports"

# ---------------------------------------------------------------------------
# File-discovery patterns (globs matched inside the inbox)
# ---------------------------------------------------------------------------
PROFITABILITY_GLOB = "*profitability*.csv"
OTR_REGISTRY_GLOB = "*OTR*COMPLETED*.csv"
STATEMENT_GLOB = "*Profit and Loss*.csv"

# ---------------------------------------------------------------------------
# Profitability export columns
# ---------------------------------------------------------------------------
COL_LOAD_NUMBER = "Load #"
COL_CONTAINER = "Container #"
COL_CUSTOMER = "Customer"
COL_DATE = "Date"
COL_DRIVER = "Driver"
COL_CHARGES_TYPE = "Charges Type"
COL_TOTAL_CHARGES = "Total Charges"
COL_DRIVER_PAY = "Driver Pay Total"
COL_EXPENSE_TOTAL = "Expense Total"
COL_PROFIT = "Profit"
COL_PROFIT_MARGIN = "Profit Margin"

# The registry export really does spell it this way, trailing space included
OTR_KEY_COLUMN = "AIM REFENCE NUMBER "

# "AIM_M103161" -> "M103161"
LOAD_ID_PATTERN = r"AIM_([A-Z]\d+)"

LOAD_DATE_FORMATS = ("%m/%d/%y", "%m/%d/%Y")

# ---------------------------------------------------------------------------
# Service-type breakdown exclusions
# Load-level "Charges Type" labels that are pass-through (offset by an equal
# cost). Not the same label set as the statement pass-through expenses below.
# ---------------------------------------------------------------------------
SERVICE_TYPE_EXCLUSIONS = ["transload", "Unloading", "unloading"]

OTR_LINEHAUL_LABEL = "OTR LINEHAUL"
BASE_PRICE_LABEL = "Base Price"

# ---------------------------------------------------------------------------
# Statement files: "(N).csv" suffix → calendar quarter
# ---------------------------------------------------------------------------
STATEMENT_FILE_NUMBER_PATTERN = r"\((\d+)\)\.csv$"

FILE_QUARTER_MAP = {
    "10": (2023, "Q1"),
    "9": (2023, "Q2"),
    "8": (2023, "Q3"),
    "7": (2023, "Q4"),
    "6": (2024, "Q1"),
    "5": (2024, "Q2"),
    "3": (2024, "Q3"),
    "4": (2024, "Q4"),
    "14": (2025, "Q1"),
    "15": (2025, "Q2"),
    "16": (2025, "Q3"),
}

QUARTERS = ["Q1", "Q2", "Q3", "Q4"]

# ---------------------------------------------------------------------------
# Statement income-section labels (exact match)
# ---------------------------------------------------------------------------
YARD_STORAGE_INCOME_LABELS = {"AIM YARD STORAGE 1", "YARD STORAGE 1"}

PASS_THROUGH_INCOME_LABELS = {
    "PALLETIZATION": "palletization",
    "SSL DETENTION": "ssl_detention",
    "UNLOADING 1": "unloading",
    "Transload": "transload",
    "WAREHOUSE STORAGE INCOME": "warehouse_storage",
}

# Side ledger: expense rows that are also tracked per pass-through charge
PASS_THROUGH_EXPENSE_LABELS = {
    "A-B PALLET": "palletization",
    "SSL DETENTION": "ssl_detention",
    "SSL Detention": "ssl_detention",
    "UNLOADING EXPENSE": "unloading",
    "Transloading": "transload",
    "WAREHOUSE STORAGE": "warehouse_storage",
}

# ---------------------------------------------------------------------------
# Yard storage startup-cost amortization
# The yard opened in December 2024; build-out repairs ran through May 2025.
# Fractions approximate the months of each quarter that fell in that window.
# ---------------------------------------------------------------------------
YARD_STORAGE_START_DATE = "December 2024"

STARTUP_COST_SCHEDULE = [
    # (year, quarter, fraction of repairs, include equipment rental)
    (2024, "Q4", 1 / 3, False),  # Dec only
    (2025, "Q1", 1.0, True),     # Jan-Mar
    (2025, "Q2", 2 / 3, False),  # Apr-May
]

# ---------------------------------------------------------------------------
# Dashboard date-range presets: (label, start, end)
# ---------------------------------------------------------------------------
DATE_RANGE_PRESETS = [
    ("2023 Q1-Q3 (Jan - Sep 2023)", "2023-01-01", "2023-09-30"),
    ("2023 Q4 - 2024 Q3 (Oct 2023 - Sep 2024)", "2023-10-01", "2024-09-30"),
    ("2024 Q4 - 2025 Q3 (Oct 2024 - Sep 2025)", "2024-10-01", "2025-09-30"),
]
DEFAULT_DATE_RANGE_INDEX = 2

# ---------------------------------------------------------------------------
# Manager bonus settings (threshold = the line's annual overhead)
# ---------------------------------------------------------------------------
OTR_LINE = "OTR"
LOCAL_LINE = "Local Drayage"

MANAGERS = [
    {"name": "OTR Manager", "business_line": OTR_LINE,
     "annual_overhead": 120_000.0, "bonus_threshold": 120_000.0, "bonus_percentage": 5.0},
    {"name": "Local Drayage Manager", "business_line": LOCAL_LINE,
     "annual_overhead": 120_000.0, "bonus_threshold": 120_000.0, "bonus_percentage": 5.0},
]
