"""
CSV text loading: OTR registry join index, load records, statement discovery.
"""
from __future__ import annotations

import io
import logging
import re
from pathlib import Path

import pandas as pd

from trucking_analytics.config import (
    COL_CHARGES_TYPE, COL_CONTAINER, COL_CUSTOMER, COL_DATE, COL_DRIVER,
    COL_DRIVER_PAY, COL_EXPENSE_TOTAL, COL_LOAD_NUMBER, COL_PROFIT,
    COL_PROFIT_MARGIN, COL_TOTAL_CHARGES, FILE_QUARTER_MAP, OTR_KEY_COLUMN,
    STATEMENT_FILE_NUMBER_PATTERN, STATEMENT_GLOB,
)
from trucking_analytics.data.normalize import (
    amount_series, clean_text_series, extract_load_id, parse_load_date,
    percent_series, split_charges,
)
from trucking_analytics.data.schemas import LoadRecord

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Raw CSV text → DataFrame
# ---------------------------------------------------------------------------

def read_csv_text(text: str) -> pd.DataFrame:
    """Read header-row CSV text with every cell as a string.

    Rows with more cells than the header are truncated rather than rejected.
    """
    if not text or not text.strip():
        return pd.DataFrame()
    width = len(pd.read_csv(io.StringIO(text), nrows=0).columns)
    return pd.read_csv(
        io.StringIO(text),
        dtype=str,
        keep_default_na=False,
        skip_blank_lines=True,
        engine="python",
        on_bad_lines=lambda bad: bad[:width],
    )


def resolve_column(df: pd.DataFrame, name: str) -> str | None:
    """Find a column by exact name, falling back to a whitespace-trimmed match."""
    if name in df.columns:
        return name
    wanted = name.strip()
    for col in df.columns:
        if str(col).strip() == wanted:
            return col
    return None


def _text_column(df: pd.DataFrame, name: str) -> pd.Series:
    col = resolve_column(df, name)
    if col is None:
        return pd.Series("", index=df.index)
    return clean_text_series(df[col])


# ---------------------------------------------------------------------------
# Join index
# ---------------------------------------------------------------------------

def build_join_index(rows: pd.DataFrame, key_column: str = OTR_KEY_COLUMN) -> set[str]:
    """Trimmed, non-blank values of one registry column."""
    if rows.empty:
        return set()
    col = resolve_column(rows, key_column)
    if col is None:
        logger.warning("Registry has no %r column; join index is empty", key_column.strip())
        return set()
    keys = clean_text_series(rows[col])
    return set(keys[keys != ""])


def is_member(index: set[str], key: str) -> bool:
    """Membership after trimming; an empty key never matches."""
    key = (key or "").strip()
    return bool(key) and key in index


def load_join_index(text: str, key_column: str = OTR_KEY_COLUMN) -> set[str]:
    return build_join_index(read_csv_text(text), key_column)


# ---------------------------------------------------------------------------
# Load records
# ---------------------------------------------------------------------------

def ingest_load_records(text: str, join_index: set[str] | None = None) -> list[LoadRecord]:
    """Parse profitability export text into LoadRecords, in input row order.

    Rows with a blank load number are dropped; every other malformed cell
    falls back to zero/empty and the row is kept.
    """
    df = read_csv_text(text)
    if df.empty:
        return []
    if resolve_column(df, COL_LOAD_NUMBER) is None:
        logger.warning("Profitability export has no %r column", COL_LOAD_NUMBER)
        return []

    join_index = join_index or set()

    load_numbers = _text_column(df, COL_LOAD_NUMBER)
    df = df[load_numbers != ""]
    load_numbers = load_numbers[load_numbers != ""]
    if df.empty:
        return []

    def amounts(name: str) -> pd.Series:
        col = resolve_column(df, name)
        return amount_series(df[col]) if col is not None else pd.Series(0.0, index=df.index)

    margin_col = resolve_column(df, COL_PROFIT_MARGIN)
    margins = percent_series(df[margin_col]) if margin_col is not None else pd.Series(0.0, index=df.index)

    dates = _text_column(df, COL_DATE)
    charges = _text_column(df, COL_CHARGES_TYPE).map(split_charges)

    frame = pd.DataFrame({
        "load_number": load_numbers,
        "container_number": _text_column(df, COL_CONTAINER),
        "customer": _text_column(df, COL_CUSTOMER),
        "date": dates,
        "date_obj": dates.map(parse_load_date),
        "driver": _text_column(df, COL_DRIVER),
        "charges_type": charges,
        "total_charges": amounts(COL_TOTAL_CHARGES),
        "driver_pay_total": amounts(COL_DRIVER_PAY),
        "expense_total": amounts(COL_EXPENSE_TOTAL),
        "profit": amounts(COL_PROFIT),
        "profit_margin": margins,
    })
    frame["is_otr"] = frame["load_number"].map(lambda n: is_member(join_index, extract_load_id(n)))

    records = [LoadRecord(**row) for row in frame.to_dict("records")]
    otr_count = sum(r.is_otr for r in records)
    logger.info("Ingested %d load records (%d OTR)", len(records), otr_count)
    return records


# ---------------------------------------------------------------------------
# Statement files
# ---------------------------------------------------------------------------

_FILE_NUMBER_RE = re.compile(STATEMENT_FILE_NUMBER_PATTERN)


def statement_file_number(filename: str) -> str:
    m = _FILE_NUMBER_RE.search(filename)
    return m.group(1) if m else ""


def quarter_for_filename(filename: str) -> tuple[int, str]:
    """Map 'Profit and Loss (10).csv' to (2023, 'Q1') via FILE_QUARTER_MAP."""
    number = statement_file_number(filename)
    if number not in FILE_QUARTER_MAP:
        logger.warning("No quarter mapping for statement file %s", filename)
        return 0, "Q1"
    return FILE_QUARTER_MAP[number]


def read_export_text(path: Path) -> str:
    """File text as UTF-8, falling back to cp1252 for spreadsheet-saved exports.

    Bytes neither encoding maps become U+FFFD; a stray byte never aborts a load.
    """
    raw = path.read_bytes()
    try:
        return raw.decode("utf-8-sig")
    except UnicodeDecodeError:
        logger.warning("%s is not UTF-8; reading as cp1252", path.name)
        return raw.decode("cp1252", errors="replace")


def discover_statements(inbox: Path) -> list[Path]:
    """Statement exports in the inbox, oldest quarter first."""
    if not inbox.exists():
        return []
    files = list(inbox.rglob(STATEMENT_GLOB))

    def _sort_key(p: Path) -> tuple[int, str, str]:
        year, quarter = FILE_QUARTER_MAP.get(statement_file_number(p.name), (0, "Q1"))
        return year, quarter, p.name

    files.sort(key=_sort_key)
    return files


def find_latest(inbox: Path, pattern: str) -> Path | None:
    """Most recently modified file matching a glob, or None."""
    if not inbox.exists():
        return None
    matches = sorted(inbox.rglob(pattern), key=lambda p: p.stat().st_mtime, reverse=True)
    return matches[0] if matches else None
