import datetime as dt

import pytest

from trucking_analytics.data.schemas import LoadRecord

PROFITABILITY_CSV = """Load #,Container #,Customer,Date,Driver,Charges Type,Total Charges,Driver Pay Total,Expense Total,Profit,Profit Margin
AIM_M103161,MSCU1234567,Acme Foods,1/15/24,Dan Ortiz,"Base Price, Fuel Surcharge","$1,000.00",$600.00,$200.00,$200.00,20%
AIM_L200410,TGHU7654321,Bayside Imports,2/1/24,Eve Chen,Base Price,$500.00,$300.00,$100.00,$100.00,20%
"""

REGISTRY_CSV = """AIM REFENCE NUMBER ,CONTAINER,ETA,VESSEL,DELIVERY DATE,CUSTOMER,DRIVER,DELIVERY LOCATION,Margin
M103161 ,MSCU1234567,1/10/24,EVER GIVEN,1/16/24,Acme Foods,Dan Ortiz,Reno NV,18%
X900001,CMAU0000001,3/01/24,MAERSK ALABAMA,3/04/24,Gamma Co,Dan Ortiz,Phoenix AZ,22%
,,,,,,,,
"""

STATEMENT_CSV = """Profit and Loss
AIM Trucking LLC
"January 1-March 31, 2025"
,Total
Income
AIM YARD STORAGE 1,"$1,000.00"
PALLETIZATION,$200.00
Drayage Income,"$8,800.00"
Total for Income,"$10,000.00"
Expenses
Base Price,"$4,000.00"
Fuel,$500.00
A-B PALLET,$150.00
Insurance - Commercial,$500.00
Total for Insurance,$450.00
Rent Expense,$300.00
Utilities,$100.00
Repairs and Maintenance,$900.00
Equipment Rental Expense,$250.00
Office Supplies,$50.00
Total for Expenses,"$7,000.00"
Net Operating Income,"$3,000.00"
"""


def make_record(load_number="AIM_M1", **kw) -> LoadRecord:
    kw.setdefault("date", "1/15/24")
    kw.setdefault("date_obj", dt.date(2024, 1, 15))
    return LoadRecord(load_number=load_number, **kw)


@pytest.fixture
def two_loads():
    """1000/200 OTR in January, 500/100 local in February."""
    return [
        make_record("AIM_M1", customer="Acme", driver="Dan", charges_type=("Base Price",),
                    total_charges=1000.0, profit=200.0, driver_pay_total=600.0, is_otr=True),
        make_record("AIM_L2", customer="Bayside", driver="Eve", charges_type=("Base Price",),
                    date="2/1/24", date_obj=dt.date(2024, 2, 1),
                    total_charges=500.0, profit=100.0, driver_pay_total=300.0, is_otr=False),
    ]


@pytest.fixture
def inbox(tmp_path):
    """An inbox holding one export of each kind plus two statements."""
    (tmp_path / "Load profitability export.csv").write_text(PROFITABILITY_CSV)
    (tmp_path / "OTR LOADS COMPLETED.csv").write_text(REGISTRY_CSV)
    (tmp_path / "AIM Trucking_Profit and Loss (14).csv").write_text(STATEMENT_CSV)
    (tmp_path / "AIM Trucking_Profit and Loss (6).csv").write_text(
        STATEMENT_CSV.replace("January 1-March 31, 2025", "January 1-March 31, 2024")
    )
    return tmp_path
