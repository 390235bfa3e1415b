import os
import sys

import pytest

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))


def make_production(date, lantabur, taqwa, record_id=None):
    """Production record from (total, inhouse, subContract, colorGroups) tuples."""
    record = {"id": record_id or f"p-{date}", "date": date, "createdAt": "2026-01-01T00:00:00Z"}
    for brand, (total, inhouse, sub, groups) in (("lantabur", lantabur), ("taqwa", taqwa)):
        record[brand] = {
            "name": brand.capitalize(),
            "total": total,
            "inhouse": inhouse,
            "subContract": sub,
            "colorGroups": groups,
        }
    record["totalProduction"] = lantabur[0] + taqwa[0]
    return record


def make_entry(shift, qty, group="Dark", dyeing_type="B/D CARD", ok=True, remarks=""):
    return {
        "mc": "M-01",
        "batchNo": "100200",
        "buyer": "H&M",
        "order": "ORD-1",
        "colour": "NAVY",
        "colorGroup": group,
        "fType": "S/J",
        "fQty": qty,
        "loadCapPercent": 90,
        "shadeOk": ok,
        "shadeNotOk": not ok,
        "dyeingType": dyeing_type,
        "shiftUnload": shift,
        "remarks": remarks,
    }


@pytest.fixture
def production_records():
    return [
        make_production(
            "01 Mar 2026",
            (20000, 16000, 4000, [{"groupName": "Black", "weight": 5000},
                                  {"groupName": "DOUBLE PART -BLACK", "weight": 1000}]),
            (10000, 9000, 1000, [{"groupName": "Normal Wash", "weight": 2000}]),
        ),
        make_production(
            "03 Mar 2026",
            (22000, 20000, 2000, [{"groupName": "Light", "weight": 7000}]),
            (8000, 8000, 0, [{"groupName": "N/WASH", "weight": 500}]),
        ),
        make_production(
            "05 Mar 2026",
            (18000, 15000, 3000, [{"groupName": "Double Part-Black", "weight": 500},
                                  {"groupName": "Black", "weight": 3000}]),
            (12000, 10000, 2000, [{"groupName": "White", "weight": 4000}]),
        ),
        make_production(
            "27 Feb 2026",
            (15000, 15000, 0, [{"groupName": "Dark", "weight": 6000}]),
            (5000, 5000, 0, []),
        ),
    ]


@pytest.fixture
def rft_record():
    return {
        "id": "r-1",
        "date": "03/03/2026",
        "unit": "Unit-02",
        "companyName": "Lantabur Apparels Ltd.",
        "entries": [
            make_entry("YOUSUF DAY", 6000),
            make_entry("yousuf", 6250, group="WHITE"),
            make_entry("HUMAYUN NIGHT", 5000, ok=False, remarks="RE MATCH"),
            make_entry("HUMAYUN NIGHT", 40, dyeing_type="LAB"),
        ],
        "manualNotOk": {"yousuf": 250},
        "manualDayCount": {"yousuf": 1},
    }
