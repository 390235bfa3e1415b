import pandas as pd
import pytest

from conftest import make_entry
from dyeing_dashboard.shifts import (
    apply_manual_overrides,
    daily_shift_register,
    friday_log,
    friday_window,
    shift_buckets,
    shift_efficiency,
    shift_month_report,
    stored_shift_totals,
)


def test_buckets():
    entries = [
        make_entry("YOUSUF", 100, group="White"),
        make_entry("YOUSUF", 50, group="Light", dyeing_type="WASH"),
        make_entry("YOUSUF", 25, group="N/WASH"),
        make_entry("YOUSUF", 30, group="Dark", remarks="re match"),
        make_entry("YOUSUF", 20, group="Dark"),
    ]
    stats = shift_buckets(entries)
    assert stats == {
        "color": 20,
        "white": 100,
        "wash": 75,
        "re_matching": 30,
        "total_prod": 225,
        "batch_count": 5,
    }


def test_off_white_is_not_white_bucket():
    stats = shift_buckets([make_entry("YOUSUF", 10, group="OFF WHITE")])
    assert stats["white"] == 0
    assert stats["color"] == 10


def test_efficiency_against_shift_target():
    assert shift_efficiency(12250, 250, 1) == pytest.approx(97.959, abs=1e-3)
    assert shift_efficiency(12250, 0, 0.5) == pytest.approx(200)
    assert shift_efficiency(12250, 250, 0) == 0


def test_month_report_efficiency_for_stored_record(rft_record):
    report = shift_month_report([rft_record], 3, 2026)
    assert len(report["rows"]) == 31
    row = report["rows"][2]
    assert row["day"] == "3-MAR"
    assert row["record_id"] == "r-1"

    yousuf = row["shifts"]["yousuf"]
    assert yousuf["total_prod"] == 12250
    assert yousuf["not_ok"] == 250
    assert yousuf["actual"] == 12000
    assert yousuf["day_count"] == 1
    assert yousuf["eff"] == pytest.approx(97.959, abs=1e-3)


def test_stored_record_defaults_ignore_computed_rematching(rft_record):
    report = shift_month_report([rft_record], 3, 2026)
    humayun = report["rows"][2]["shifts"]["humayun"]
    assert humayun["not_ok"] == 0
    assert humayun["re_matching"] == 0
    assert humayun["day_count"] == 1
    assert humayun["total_prod"] == 5040


def test_days_without_a_record_have_zero_day_count(rft_record):
    report = shift_month_report([rft_record], 3, 2026)
    empty_day = report["rows"][0]["shifts"]["yousuf"]
    assert empty_day["day_count"] == 0
    assert empty_day["eff"] == 0
    assert empty_day["not_ok_formula"] == "0"


def test_month_totals_and_summary(rft_record):
    other_month = {**rft_record, "id": "r-0", "date": "10/02/2026"}
    report = shift_month_report([rft_record, other_month], 3, 2026, today="03/03/2026")

    totals = report["totals"]["yousuf"]
    assert totals["total_prod"] == 12250
    assert totals["day_count"] == 1
    assert report["avg_monthly_eff"]["yousuf"] == pytest.approx(12000 / 12250 * 100)
    assert report["record_count"] == 1
    assert report["summary"] == {
        "today": 17290,
        "month": 17290,
        "year": 34580,
        "total": 34580,
    }


def test_formula_overrides_drive_the_report(rft_record):
    record = apply_manual_overrides(rft_record, "yousuf", not_ok="=200+50", day_count="=0.5", note="boiler down")
    assert record["manualNotOk"]["yousuf"] == 250
    assert record["manualNotOkFormula"]["yousuf"] == "=200+50"
    assert record["manualDayCountFormula"]["yousuf"] == "=0.5"
    assert record["manualNote"] == {"yousuf": "boiler down"}
    # original record untouched
    assert "manualNotOkFormula" not in rft_record

    yousuf = shift_month_report([record], 3, 2026)["rows"][2]["shifts"]["yousuf"]
    assert yousuf["day_count"] == 0.5
    assert yousuf["not_ok_formula"] == "=200+50"
    assert yousuf["eff"] == pytest.approx(12000 / (12250 * 0.5) * 100)
    assert yousuf["note"] == "boiler down"


def test_overrides_keep_other_shift_values(rft_record):
    record = {**rft_record, "manualNotOk": {"yousuf": 250, "humayun": 40}}
    updated = apply_manual_overrides(record, "yousuf", not_ok="100")
    assert updated["manualNotOk"] == {"yousuf": 100, "humayun": 40}
    assert updated["manualNotOkFormula"] == {"yousuf": "100"}


@pytest.mark.parametrize(
    "count, expected",
    [
        (0.25, ("08:00 AM", "02:00 PM")),
        (0.75, ("02:00 PM", "08:00 AM")),
        (1, ("08:00 AM", "08:00 AM")),
        (0.5, ("--:--", "--:--")),
    ],
)
def test_friday_window_lookup(count, expected):
    assert friday_window(count) == expected


def test_friday_log(rft_record):
    # 6 March 2026 is a Friday
    friday = {**rft_record, "id": "r-2", "date": "06/03/2026", "manualDayCount": {"yousuf": 0.25}}
    report = shift_month_report([rft_record, friday], 3, 2026)

    assert report["rows"][5]["is_friday"]
    log = friday_log(report["rows"], "yousuf")
    assert log["entries"] == [
        {"day": "6-MAR", "from": "08:00 AM", "to": "02:00 PM", "hours": 6, "value": 0.25},
    ]
    assert log["total_hours"] == 6
    assert report["totals"]["yousuf"]["friday_count"] == 1
    assert report["totals"]["yousuf"]["friday_hours"] == 6
    # humayun worked the full Friday with the default day count
    assert friday_log(report["rows"], "humayun")["entries"][0]["to"] == "08:00 AM"


def test_stored_totals_and_register(rft_record):
    record = {**rft_record, "shiftPerformance": {"yousuf": 12250}, "shiftCount": {"yousuf": 2}}
    stats = stored_shift_totals([record], "YOUSUF")
    assert stats["actual"] == 12000
    assert stats["batches"] == 2
    assert stats["white"] == 6250
    assert stats["color"] == 6000

    rows = daily_shift_register([record])
    assert rows[0]["date"] == "03/03/2026"
    assert rows[0]["shifts"]["yousuf"]["eff"] == pytest.approx(12000 / 12250 * 100)
    assert rows[0]["shifts"]["humayun"]["color"] == 5040


def test_report_rows_carry_timestamps():
    report = shift_month_report([], 2, 2026)
    assert len(report["rows"]) == 28
    assert report["rows"][0]["date"] == pd.Timestamp("2026-02-01")
    assert report["avg_monthly_eff"] == {"yousuf": 0, "humayun": 0}
