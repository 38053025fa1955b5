"""
Amount/percent/date normalization and load identifier extraction.

Spreadsheet exports are hand-edited; every helper here degrades a bad cell to
zero/empty instead of raising.
"""
from __future__ import annotations

import datetime as dt
import math
import re
from typing import Optional

import numpy as np
import pandas as pd

from trucking_analytics.config import LOAD_DATE_FORMATS, LOAD_ID_PATTERN

_AMOUNT_STRIP_RE = re.compile(r'["$,]')
_LOAD_ID_RE = re.compile(LOAD_ID_PATTERN)


# ---------------------------------------------------------------------------
# Scalar parsing
# ---------------------------------------------------------------------------

def _to_finite(text: str) -> float:
    try:
        value = float(text)
    except ValueError:
        return 0.0
    return value if math.isfinite(value) else 0.0


def parse_amount(text) -> float:
    """'$1,234.50' -> 1234.5, '-$20' -> -20.0, junk/empty -> 0.0."""
    if text is None:
        return 0.0
    if isinstance(text, (int, float)) and not isinstance(text, bool):
        return float(text) if math.isfinite(text) else 0.0
    cleaned = _AMOUNT_STRIP_RE.sub("", str(text)).strip()
    if not cleaned:
        return 0.0
    return _to_finite(cleaned)


def parse_percent(text) -> float:
    """'12.5%' -> 12.5, junk/empty -> 0.0."""
    if text is None:
        return 0.0
    if isinstance(text, (int, float)) and not isinstance(text, bool):
        return float(text) if math.isfinite(text) else 0.0
    cleaned = str(text).replace("%", "").strip()
    if not cleaned:
        return 0.0
    return _to_finite(cleaned)


def parse_load_date(text: str) -> Optional[dt.date]:
    """Parse an export date like '1/15/24'. Returns None when unparsable."""
    text = (text or "").strip()
    if not text:
        return None
    for fmt in LOAD_DATE_FORMATS:
        try:
            return dt.datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    return None


def extract_load_id(load_number) -> str:
    """'AIM_M103161' -> 'M103161'. Empty string means unjoinable."""
    if not isinstance(load_number, str):
        return ""
    m = _LOAD_ID_RE.search(load_number)
    return m.group(1) if m else ""


def split_charges(text) -> tuple[str, ...]:
    """Comma-split a 'Charges Type' cell, trimming and dropping empties."""
    if not isinstance(text, str):
        return ()
    return tuple(c.strip() for c in text.split(",") if c.strip())


# ---------------------------------------------------------------------------
# Column parsing
# ---------------------------------------------------------------------------

def amount_series(s: pd.Series) -> pd.Series:
    """Vectorized parse_amount for a whole column."""
    cleaned = s.fillna("").astype(str).str.replace(r'["$,]', "", regex=True).str.strip()
    out = pd.to_numeric(cleaned, errors="coerce")
    return out.replace([np.inf, -np.inf], np.nan).fillna(0.0).astype(float)


def percent_series(s: pd.Series) -> pd.Series:
    """Vectorized parse_percent for a whole column."""
    cleaned = s.fillna("").astype(str).str.replace("%", "", regex=False).str.strip()
    out = pd.to_numeric(cleaned, errors="coerce")
    return out.replace([np.inf, -np.inf], np.nan).fillna(0.0).astype(float)


def clean_text_series(s: pd.Series) -> pd.Series:
    return s.fillna("").astype(str).str.strip()
