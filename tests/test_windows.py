import pandas as pd
import pytest

from dyeing_dashboard.loaders.utils import format_report_date, parse_report_date
from dyeing_dashboard.windows import (
    filter_date_range,
    filter_month,
    filter_records,
    sort_by_date,
    start_of_week,
)


def _records(*dates):
    return [{"id": str(i), "date": d} for i, d in enumerate(dates)]


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("05 Jan 2026", "2026-01-05"),
        ("5-Jan-26", "2026-01-05"),
        ("05-Jan-2026", "2026-01-05"),
        ("01/02/2026", "2026-02-01"),
        ("2026-02-01", "2026-02-01"),
        ("12 Sept 2025", "2025-09-12"),
        ("2026-03-05T10:15:00Z", "2026-03-05"),
    ],
)
def test_parse_report_date_formats(raw, expected):
    assert parse_report_date(raw) == pd.Timestamp(expected)


def test_unparseable_dates_return_none_and_format_falls_back():
    assert parse_report_date("not a date") is None
    assert parse_report_date("") is None
    assert format_report_date("not a date") == "not a date"
    assert format_report_date("5-Jan-26") == "05 Jan 2026"
    assert format_report_date("5-Jan-26", upper=True) == "05 JAN 2026"


def test_week_starts_on_sunday():
    # 2026-03-05 is a Thursday
    assert start_of_week("2026-03-05") == pd.Timestamp("2026-03-01")
    assert start_of_week("2026-03-01") == pd.Timestamp("2026-03-01")
    assert start_of_week("2026-03-07") == pd.Timestamp("2026-03-01")


def test_month_window_returns_same_month_and_year_only():
    records = _records("01 Mar 2026", "31 Mar 2026", "28 Feb 2026", "15 Mar 2025", "garbage")
    result = filter_records(records, "month", "2026-03-15")
    assert [r["date"] for r in result] == ["01 Mar 2026", "31 Mar 2026"]


def test_empty_input_gives_empty_output():
    for window in ("today", "week", "month", "year", "total"):
        assert filter_records([], window, "2026-03-15") == []


def test_week_window_is_inclusive_of_sunday_and_reference():
    records = _records("28 Feb 2026", "01 Mar 2026", "05 Mar 2026", "06 Mar 2026")
    result = filter_records(records, "week", "2026-03-05")
    assert [r["date"] for r in result] == ["01 Mar 2026", "05 Mar 2026"]


def test_today_and_year_windows():
    records = _records("05 Mar 2026", "5-Mar-26", "06 Mar 2026", "01 Jan 2025")
    assert len(filter_records(records, "today", "05/03/2026")) == 2
    assert len(filter_records(records, "year", "05/03/2026")) == 3


def test_total_window_keeps_undated_records():
    records = _records("05 Mar 2026", "garbage")
    assert filter_records(records, "total", "2026-03-05") == records
    assert filter_records(records, "all", "2026-03-05") == records


def test_unknown_window_raises():
    with pytest.raises(ValueError):
        filter_records(_records("05 Mar 2026"), "fortnight", "2026-03-05")


def test_date_range_includes_whole_end_day():
    records = _records("01 Mar 2026", "05 Mar 2026", "06 Mar 2026")
    result = filter_date_range(records, "2026-03-01", "2026-03-05")
    assert [r["date"] for r in result] == ["01 Mar 2026", "05 Mar 2026"]
    assert filter_date_range(records) == records
    assert len(filter_date_range(records, start="2026-03-05")) == 2


def test_filter_month_is_one_based():
    records = _records("01 Mar 2026", "01 Feb 2026")
    assert [r["date"] for r in filter_month(records, 3, 2026)] == ["01 Mar 2026"]


def test_sort_puts_undated_records_last():
    records = _records("garbage", "01 Mar 2026", "05 Mar 2026")
    assert [r["date"] for r in sort_by_date(records)] == ["05 Mar 2026", "01 Mar 2026", "garbage"]
    assert [r["date"] for r in sort_by_date(records, descending=False)] == [
        "01 Mar 2026", "05 Mar 2026", "garbage",
    ]
