"""
Pydantic response schemas for the API.
"""
from __future__ import annotations

from typing import Optional

from pydantic import BaseModel


class HealthResponse(BaseModel):
    status: str
    loads: int
    otr_loads: int
    quarters: int
    date_span: str


class DateRangeOption(BaseModel):
    index: int
    label: str
    start: str
    end: str
    default: bool = False


class DateRangesResponse(BaseModel):
    date_ranges: list[DateRangeOption]


class ReloadResponse(BaseModel):
    status: str
    message: str
    loads: int = 0
    quarters: int = 0
    error: Optional[str] = None
