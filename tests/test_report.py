from openpyxl import load_workbook

from trucking_analytics.data.store import DataStore
from trucking_analytics.reports.dashboard_report import generate_excel, generate_json


def test_generate_excel(inbox, tmp_path):
    store = DataStore().load(inbox)
    out = generate_excel(store, tmp_path / "out" / "dashboard.xlsx")
    assert out.exists()

    wb = load_workbook(out)
    assert wb.sheetnames == [
        "Summary", "Service Types", "Customers", "Monthly", "Drivers", "Managers",
        "P&L Quarters", "Quarter Comparison", "Expense Breakdown", "OTR Loads", "Unmatched OTR",
    ]
    assert wb["Summary"]["A1"].value == "FLEET PERFORMANCE"

    unmatched = wb["Unmatched OTR"]
    assert unmatched["A1"].value == "Reference #"
    assert unmatched["A2"].value == "X900001"


def test_generate_excel_all_time_totals(inbox, tmp_path):
    store = DataStore().load(inbox)
    out = generate_excel(store, tmp_path / "all.xlsx", date_range=None)
    ws = load_workbook(out)["Customers"]
    rows = list(ws.iter_rows(min_row=2, values_only=True))
    assert rows[0][:2] == ("Acme Foods", 1000.0)
    assert rows[-1][0] == "TOTAL"
    assert rows[-1][1] == 1500.0


def test_generate_json_matches_dashboard(inbox):
    store = DataStore().load(inbox)
    data = generate_json(store)
    assert data["total_loads"] == 2
    assert len(data["pnl"]["quarterly_comparison"]) == 4


def test_writer_table_total_and_blanks():
    from trucking_analytics.excel.writer import ExcelWriter

    ew = ExcelWriter()
    ws = ew.add_sheet("T")
    cols = [("name", "text", "Name"), ("amount", "currency", "Amount"), ("note", "text", "Note")]
    next_row = ew.write_table(ws, 1, cols, [{"name": "a", "amount": 2.5}, {"name": "b", "amount": None}],
                              show_total=True)
    assert next_row == 5
    assert ws["B3"].value == 0
    assert ws["C2"].value == ""
    assert (ws["A4"].value, ws["B4"].value) == ("TOTAL", 2.5)
    assert ew.add_sheet("U").title == "U"
    assert ew.wb.sheetnames == ["T", "U"]
