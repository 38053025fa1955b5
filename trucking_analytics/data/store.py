"""
DataStore — in-memory load records and quarter summaries.

Loaded once at startup, queried on every request.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import pandas as pd

from trucking_analytics.config import INBOX_FOLDER, OTR_REGISTRY_GLOB, PROFITABILITY_GLOB
from trucking_analytics.data.loader import (
    build_join_index,
    discover_statements,
    find_latest,
    ingest_load_records,
    quarter_for_filename,
    read_csv_text,
    read_export_text,
)
from trucking_analytics.data.schemas import DateRange, LoadRecord, QuarterSummary
from trucking_analytics.data.statements import parse_statement, quarter_in_range

logger = logging.getLogger(__name__)


def load_statements(paths: list[Path]) -> list[QuarterSummary]:
    """Parse each statement file; an unreadable file is logged and skipped."""
    quarters: list[QuarterSummary] = []
    for path in paths:
        try:
            year, quarter = quarter_for_filename(path.name)
            text = read_export_text(path)
            quarters.append(parse_statement(text, quarter=quarter, year=year))
        except Exception as exc:
            logger.warning("Skipping statement %s: %s", path.name, exc)
    return quarters


class DataStore:
    """Load records, OTR registry and parsed statements for one report run."""

    def __init__(self) -> None:
        self.records: list[LoadRecord] = []
        self.quarters: list[QuarterSummary] = []
        self.registry_df: pd.DataFrame = pd.DataFrame()
        self.otr_load_ids: set[str] = set()
        self.sources: dict[str, list[str]] = {"profitability": [], "registry": [], "statements": []}
        self._loaded = False

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def load(self, inbox: Path = INBOX_FOLDER) -> "DataStore":
        """Read the newest profitability export and registry, and every statement."""
        logger.info("Loading data from %s", inbox)

        registry_path = find_latest(inbox, OTR_REGISTRY_GLOB)
        profit_path = find_latest(inbox, PROFITABILITY_GLOB)
        statement_paths = discover_statements(inbox)

        if profit_path is None and not statement_paths:
            raise FileNotFoundError(f"No profitability export or statements found in {inbox}")

        self.load_registry_text("")
        if registry_path is not None:
            try:
                self.load_registry_text(read_export_text(registry_path))
                self.sources["registry"] = [registry_path.name]
                logger.info("  OTR registry: %s (%d ids)", registry_path.name, len(self.otr_load_ids))
            except Exception as exc:
                logger.warning("Skipping OTR registry %s: %s", registry_path.name, exc)
                self.load_registry_text("")

        self.records = []
        if profit_path is not None:
            try:
                self.load_profitability_text(read_export_text(profit_path))
                self.sources["profitability"] = [profit_path.name]
                logger.info("  Profitability: %s (%d loads)", profit_path.name, len(self.records))
            except Exception as exc:
                logger.warning("Skipping profitability export %s: %s", profit_path.name, exc)
                self.records = []

        self.quarters = load_statements(statement_paths)
        self.sources["statements"] = [p.name for p in statement_paths]
        logger.info("  Statements: %d of %d parsed", len(self.quarters), len(statement_paths))

        self._loaded = True
        return self

    def load_registry_text(self, text: str) -> None:
        self.registry_df = read_csv_text(text)
        self.otr_load_ids = build_join_index(self.registry_df)

    def load_profitability_text(self, text: str) -> None:
        """Ingest profitability text against the current registry."""
        self.records = ingest_load_records(text, self.otr_load_ids)

    def add_statement_text(self, text: str, quarter: str, year: int) -> QuarterSummary:
        summary = parse_statement(text, quarter=quarter, year=year)
        self.quarters.append(summary)
        return summary

    def mark_loaded(self) -> "DataStore":
        self._loaded = True
        return self

    @property
    def is_loaded(self) -> bool:
        return self._loaded

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_records(self, date_range: Optional[DateRange] = None) -> list[LoadRecord]:
        if date_range is None:
            return list(self.records)
        from trucking_analytics.analytics.loads import filter_by_date_range
        return filter_by_date_range(self.records, date_range.start, date_range.end)

    def get_quarters(self, date_range: Optional[DateRange] = None) -> list[QuarterSummary]:
        if date_range is None:
            return list(self.quarters)
        return [q for q in self.quarters if quarter_in_range(q, date_range)]

    def row_count(self) -> int:
        return len(self.records)

    def otr_count(self) -> int:
        return sum(1 for r in self.records if r.is_otr)

    def date_span(self) -> str:
        """Human-readable first-to-last load date."""
        dates = [r.date_obj for r in self.records if r.date_obj is not None]
        if not dates:
            return "N/A"
        return f"{min(dates)} to {max(dates)}"
