"""
Safe math helpers used across all analytics modules.
"""
from __future__ import annotations

import dataclasses
import datetime as dt
import math

import numpy as np
import pandas as pd


def safe_divide(numerator: float, denominator: float, default: float = 0.0) -> float:
    """Divide safely, returning default if denominator is zero or NaN."""
    if denominator == 0 or pd.isna(denominator):
        return default
    result = numerator / denominator
    return default if pd.isna(result) else result


def profit_margin(profit: float, revenue: float) -> float:
    """profit / revenue * 100; 0.0 unless revenue is positive."""
    if not revenue > 0:
        return 0.0
    return safe_divide(profit, revenue) * 100


def margin_series(profit: pd.Series, revenue: pd.Series) -> pd.Series:
    """Element-wise profit_margin for pandas Series."""
    return (profit / revenue.where(revenue > 0, np.nan) * 100).fillna(0.0)


def sanitize_for_json(obj):
    """Recursively convert dataclasses, dates and numpy/pandas types to plain JSON values."""
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return sanitize_for_json(dataclasses.asdict(obj))
    if isinstance(obj, dict):
        return {str(k): sanitize_for_json(v) for k, v in obj.items() if k is not None}
    if isinstance(obj, (list, tuple, set)):
        return [sanitize_for_json(v) for v in obj]
    if isinstance(obj, (dt.date, dt.datetime)):
        return obj.isoformat()
    if isinstance(obj, np.integer):
        return int(obj)
    if isinstance(obj, np.floating):
        v = float(obj)
        return 0.0 if (math.isnan(v) or math.isinf(v)) else v
    if isinstance(obj, np.bool_):
        return bool(obj)
    if isinstance(obj, float):
        return 0.0 if (math.isnan(obj) or math.isinf(obj)) else obj
    if pd.api.types.is_scalar(obj) and pd.isna(obj):
        return None
    return obj
