import io

import openpyxl
import pytest

from dyeing_dashboard.exports import (
    RFT_HEADERS,
    TOTALS_LABEL,
    production_csv,
    production_filename,
    production_headers,
    read_production_csv,
    rft_csv,
    rft_filename,
    shift_csv,
    shift_filename,
    shift_headers,
    write_shift_xlsx,
)
from dyeing_dashboard.production import search_production_records
from dyeing_dashboard.shifts import shift_month_report


@pytest.fixture
def march(production_records):
    return search_production_records(production_records, 3, 2026)


def test_history_csv_layout(march):
    lines = production_csv(march).split("\n")
    assert lines[0] == "Date,Lantabur Total,Taqwa Total,Daily Total,Inhouse Total,Subcon Total"
    assert lines[-1] == "01 Mar 2026,20000,10000,30000,25000,5000"
    assert len(lines) == 4


def test_history_csv_reads_back_to_same_totals(march):
    df = read_production_csv(production_csv(march))
    assert list(df["Date"]) == ["05 Mar 2026", "03 Mar 2026", "01 Mar 2026"]
    assert df["Daily Total"].sum() == 90000
    assert df["Inhouse Total"].sum() == 78000
    assert df["Subcon Total"].sum() == 12000


def test_read_production_csv_coerces_bad_cells():
    df = read_production_csv("Date,Lantabur Total\n01 Mar 2026,abc\n02 Mar 2026,12.5\n")
    assert list(df["Lantabur Total"]) == [0.0, 12.5]


def test_brand_csv_has_category_columns(march):
    headers = production_headers("taqwa")
    assert headers[:4] == ["Date", "Taqwa Total", "Inhouse", "Subcon"]
    assert len(headers) == 15

    df = read_production_csv(production_csv(march, "taqwa"))
    assert list(df.columns) == headers
    assert df["N/wash"].sum() == 2500
    assert df["White"].sum() == 4000


def test_rft_csv_rows_and_flags(rft_record):
    rft_record["entries"][0]["remarks"] = "late, re-dyed"
    lines = rft_csv([rft_record]).split("\n")
    assert lines[0] == ",".join(RFT_HEADERS)
    assert len(lines) == 5
    assert lines[1].startswith("03/03/2026,M-01,100200,H&M,ORD-1,NAVY,Dark,S/J,6000,90,YES,NO,B/D CARD,YOUSUF DAY,")
    assert lines[1].endswith('"late, re-dyed"')
    assert ",NO,YES," in lines[3]


def test_shift_csv_columns_and_totals(rft_record):
    report = shift_month_report([rft_record], 3, 2026)
    headers = shift_headers()
    assert len(headers) == 22
    assert "Yousuf Eff%" in headers and "Humayun Note" in headers

    lines = shift_csv(report).split("\n")
    assert lines[0] == ",".join(headers)
    assert len(lines) == 1 + 31 + 1
    assert lines[3].startswith("3-MAR,NO,12250,6000,6250,0,0,250,1,12000,97.96%,,5040,40,")
    assert lines[-1].startswith(f"{TOTALS_LABEL},,12250,")
    assert "97.96%" in lines[-1]


def test_filenames():
    assert production_filename("history", 3, 2026) == "History Production Table (March 2026).csv"
    assert production_filename("lantabur", 12, 2025) == "Lantabur Production Table (December 2025).csv"
    assert rft_filename("thisMonth", "2026-03-05") == "RFT_THISMONTH_Report_2026-03-05.csv"
    assert shift_filename(3, 2026) == "Shift_Performance_March_2026.csv"
    assert shift_filename(3, 2026, "xlsx") == "Shift_Performance_March_2026.xlsx"


def test_shift_workbook(rft_record):
    friday = {**rft_record, "id": "r-2", "date": "06/03/2026", "manualDayCount": {"yousuf": 0.25}}
    report = shift_month_report([rft_record, friday], 3, 2026)

    buffer = io.BytesIO()
    write_shift_xlsx(report, buffer)
    buffer.seek(0)

    workbook = openpyxl.load_workbook(buffer)
    assert workbook.sheetnames == ["Shift Performance", "Friday Log"]

    register = workbook["Shift Performance"]
    assert register["A1"].value == "Date"
    assert register.max_row == 33
    assert register.cell(row=33, column=1).value == TOTALS_LABEL

    fridays = workbook["Friday Log"]
    rows = list(fridays.iter_rows(min_row=2, values_only=True))
    assert ("YOUSUF", "6-MAR", "08:00 AM", "02:00 PM", 6, 0.25) in rows
    assert ("HUMAYUN", "6-MAR", "08:00 AM", "08:00 AM", 24, 1) in rows
