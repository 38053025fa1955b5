from trucking_analytics.analytics.registry import otr_charges, otr_export_rows, unmatched_registry_runs
from trucking_analytics.data.loader import ingest_load_records, load_join_index, read_csv_text

from conftest import PROFITABILITY_CSV, REGISTRY_CSV, make_record


def test_unmatched_registry_runs():
    records = ingest_load_records(PROFITABILITY_CSV, load_join_index(REGISTRY_CSV))
    df = unmatched_registry_runs(read_csv_text(REGISTRY_CSV), records)
    assert df["reference_number"].tolist() == ["X900001"]
    assert df.iloc[0]["customer"] == "Gamma Co"
    assert df.iloc[0]["delivery_location"] == "Phoenix AZ"


def test_unmatched_without_registry():
    df = unmatched_registry_runs(read_csv_text(""), [])
    assert df.empty
    assert "reference_number" in df.columns


def test_otr_charges_relabel_base_price():
    assert otr_charges(("Base Price", "Fuel Surcharge")) == ("OTR LINEHAUL", "Fuel Surcharge")
    assert otr_charges(()) == ("OTR LINEHAUL",)


def test_otr_export_rows_only_otr():
    records = [
        make_record("AIM_M1", charges_type=("Base Price",), total_charges=10.0, is_otr=True),
        make_record("AIM_L1", charges_type=("Base Price",), is_otr=False),
    ]
    rows = otr_export_rows(records)
    assert [r["Load #"] for r in rows] == ["AIM_M1"]
    assert rows[0]["Charges Type"] == "OTR LINEHAUL"
