"""
ExcelWriter — builds the styled dashboard workbook one sheet at a time.

Every write_* method takes the row to start on and returns the next free row,
so sheet layouts read top to bottom.
"""
from __future__ import annotations

from pathlib import Path

import pandas as pd
from openpyxl import Workbook
from openpyxl.styles import Font
from openpyxl.utils import get_column_letter
from openpyxl.worksheet.worksheet import Worksheet

from trucking_analytics.excel.styles import (
    TITLE_FONT, SUBTITLE_FONT, SECTION_FONT,
    INSIGHT_TITLE_FONT, INSIGHT_BODY_FONT,
)
from trucking_analytics.excel.formatters import (
    NUMBER_FORMATS,
    format_header_row,
    format_data_cell,
    auto_column_width,
    add_kpi_card,
)


ColSpec = tuple[str, str, str]  # (key, col_type, label)
KpiSpec = tuple[object, str, str]  # (value, label, format_type)

SUMMED_TYPES = ("currency", "number")


def _blank_for(col_type: str):
    return 0 if col_type in NUMBER_FORMATS else ""


class ExcelWriter:
    """Workbook builder; the first add_sheet() call renames the default sheet."""

    def __init__(self) -> None:
        self.wb = Workbook()
        self._sheets_added = 0

    # ------------------------------------------------------------------
    # Sheets
    # ------------------------------------------------------------------

    def add_sheet(self, title: str) -> Worksheet:
        if self._sheets_added == 0:
            ws = self.wb.active
            ws.title = title
        else:
            ws = self.wb.create_sheet(title=title)
        self._sheets_added += 1
        return ws

    # ------------------------------------------------------------------
    # Headings and notes
    # ------------------------------------------------------------------

    def _merged_line(self, ws: Worksheet, row: int, text: str, font: Font, width: int) -> None:
        cell = ws.cell(row=row, column=1, value=text)
        cell.font = font
        ws.merge_cells(start_row=row, start_column=1, end_row=row, end_column=width)

    def write_title(self, ws: Worksheet, title: str, subtitle: str, merge_cols: int = 8) -> int:
        """Title on row 1, subtitle on row 2, even column widths. Returns 4."""
        self._merged_line(ws, 1, title, TITLE_FONT, merge_cols)
        self._merged_line(ws, 2, subtitle, SUBTITLE_FONT, merge_cols)
        for col in range(1, merge_cols + 1):
            ws.column_dimensions[get_column_letter(col)].width = 18
        return 4

    def write_section(self, ws: Worksheet, row: int, title: str) -> int:
        ws.cell(row=row, column=1, value=title).font = SECTION_FONT
        return row + 2

    def write_insight(self, ws: Worksheet, row: int, title: str, body: str, merge_cols: int = 8) -> int:
        """Bold title with an italic body line beneath it."""
        ws.cell(row=row, column=1, value=title).font = INSIGHT_TITLE_FONT
        self._merged_line(ws, row + 1, body, INSIGHT_BODY_FONT, merge_cols)
        return row + 3

    # ------------------------------------------------------------------
    # KPI cards
    # ------------------------------------------------------------------

    def write_kpi_row(self, ws: Worksheet, row: int, kpis: list[KpiSpec], col_spacing: int = 2) -> int:
        """Cards every col_spacing columns: value on row, label beneath."""
        for i, (value, label, fmt) in enumerate(kpis):
            add_kpi_card(ws, row, 1 + i * col_spacing, value, label, fmt)
        return row + 3

    # ------------------------------------------------------------------
    # Tables
    # ------------------------------------------------------------------

    def write_table(
        self,
        ws: Worksheet,
        start_row: int,
        columns: list[ColSpec],
        data: list[dict] | pd.DataFrame,
        highlight_fn=None,
        freeze: bool = True,
        show_total: bool = False,
        total_label: str = "TOTAL",
    ) -> int:
        """Header row, one row per record, optional total row.

        highlight_fn(row_idx, row_data) -> a HIGHLIGHT_FILLS key or None.
        Missing and NaN values are written as 0 (numeric) or '' (text).
        """
        for col_num, (_, _, label) in enumerate(columns, 1):
            ws.cell(row=start_row, column=col_num, value=label)
        format_header_row(ws, start_row, len(columns))

        records = data.to_dict("records") if isinstance(data, pd.DataFrame) else list(data)

        row = start_row + 1
        for idx, record in enumerate(records):
            fill = highlight_fn(idx, record) if highlight_fn else None
            for col_num, (key, col_type, _) in enumerate(columns, 1):
                value = record.get(key)
                if value is None or (isinstance(value, float) and pd.isna(value)):
                    value = _blank_for(col_type)
                format_data_cell(ws, row, col_num, value, col_type, highlight=fill)
            row += 1

        if show_total and records:
            row = self._write_total_row(ws, row, columns, records, total_label)

        auto_column_width(ws)
        if freeze:
            ws.freeze_panes = f"A{start_row + 1}"
        return row

    def _write_total_row(self, ws: Worksheet, row: int, columns: list[ColSpec], records: list[dict], label: str) -> int:
        """Sums currency/number columns; the first column holds the label."""
        format_data_cell(ws, row, 1, label, "text", is_total=True)
        for col_num, (key, col_type, _) in enumerate(columns[1:], 2):
            if col_type in SUMMED_TYPES:
                total = float(sum(r.get(key) or 0 for r in records))
                format_data_cell(ws, row, col_num, total, col_type, is_total=True)
            else:
                format_data_cell(ws, row, col_num, "", "text", is_total=True)
        return row + 1

    # ------------------------------------------------------------------
    # Save
    # ------------------------------------------------------------------

    def save(self, path: str | Path) -> Path:
        """Write the workbook, creating parent folders."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        self.wb.save(path)
        return path
