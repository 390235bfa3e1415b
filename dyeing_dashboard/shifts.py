"""
Shift performance: per-supervisor throughput, manual overrides and efficiency
against the fixed shift-day quota.

Efficiency
----------
    actual      = total_prod - not_ok
    efficiency% = 100 * actual / (SHIFT_TARGET * day_count)    (0 if day_count == 0)

day_count is a fractional number of shift-days (0.25 for a short Friday
shift) entered by hand or as a formula.
"""

import calendar
import logging
from typing import Any, Iterable

import pandas as pd

from .config import (
    DEFAULT_SUPERVISORS,
    FRIDAY_SHIFT_WINDOWS,
    FRIDAY_UNKNOWN_WINDOW,
    MONTH_NAMES,
    SHIFT_TARGET,
)
from .formula import ManualValue
from .kpis import average, ratio_pct
from .loaders.utils import parse_report_date, record_date
from .rft import coerce_quantity, entries_for_shift, shift_key
from .windows import filter_month, filter_year

logger = logging.getLogger(__name__)

_SUM_FIELDS = (
    "color", "white", "wash", "re_matching", "total_prod",
    "batch_count", "not_ok", "actual", "day_count",
)


def shift_bucket(entry: dict) -> str:
    """Colour bucket of one batch: white, wash, re_matching or color."""
    group = str(entry.get("colorGroup") or "").upper()
    if group == "WHITE":
        return "white"
    if "WASH" in group or "WASH" in str(entry.get("dyeingType") or "").upper():
        return "wash"
    if "RE" in str(entry.get("remarks") or "").upper():
        return "re_matching"
    return "color"


def shift_buckets(entries: Iterable[dict]) -> dict:
    """Quantity per bucket plus total quantity and batch count."""
    stats = {"color": 0.0, "white": 0.0, "wash": 0.0, "re_matching": 0.0,
             "total_prod": 0.0, "batch_count": 0}
    for entry in entries:
        qty = coerce_quantity(entry.get("fQty"))
        stats[shift_bucket(entry)] += qty
        stats["total_prod"] += qty
        stats["batch_count"] += 1
    return stats


def shift_efficiency(total_prod: float, not_ok: float, day_count: float) -> float:
    """Efficiency % against SHIFT_TARGET per shift-day."""
    if day_count <= 0:
        return 0.0
    return ratio_pct(total_prod - not_ok, SHIFT_TARGET * day_count)


def _shift_row(record: dict | None, entries: list[dict], key: str) -> dict:
    stats = shift_buckets(entries)

    if record is not None:
        not_ok = ManualValue.from_record(record, "manualNotOk", key, "0")
        re_matching = ManualValue.from_record(record, "manualReMatching", key, "0")
        day_count = ManualValue.from_record(record, "manualDayCount", key, "1")
        note = (record.get("manualNote") or {}).get(key) or ""
    else:
        not_ok = ManualValue.literal(0)
        re_matching = ManualValue.literal(stats["re_matching"])
        day_count = ManualValue.literal(1 if stats["total_prod"] > 0 else 0)
        note = ""

    actual = stats["total_prod"] - not_ok.value
    return {
        **stats,
        "re_matching": re_matching.value,
        "re_matching_formula": re_matching.text,
        "not_ok": not_ok.value,
        "not_ok_formula": not_ok.text,
        "day_count": day_count.value,
        "day_count_formula": day_count.text,
        "actual": actual,
        "eff": shift_efficiency(stats["total_prod"], not_ok.value, day_count.value),
        "note": note,
    }


def shift_month_report(
    records: Iterable[dict],
    month: int,
    year: int,
    supervisors: Iterable[str] = DEFAULT_SUPERVISORS,
    today: Any = None,
) -> dict:
    """Day-by-day shift register for a calendar month.

    Parameters
    ----------
    records : RFT report records (all history; filtered here).
    month : 1-based month.
    year : Calendar year.
    supervisors : Supervisor names matched against entry shift labels.
    today : Date used for the "today" production figure. Defaults to now.

    Returns
    -------
    {
        "rows": [{"day": "5-MAR", "date", "is_friday", "record_id",
                  "shifts": {"yousuf": {...}, ...}}, ...],
        "totals": {"yousuf": {... sums, friday_count, friday_hours}, ...},
        "avg_monthly_eff": {"yousuf": pct, ...},
        "summary": {"today", "month", "year", "total"},
        "record_count", "days_in_month", "month_name",
    }
    """
    records = list(records)
    supervisors = list(supervisors)
    keys = [shift_key(s) for s in supervisors]
    monthly = filter_month(records, month, year)
    days_in_month = calendar.monthrange(year, month)[1]
    month_abbr = MONTH_NAMES[month - 1][:3].upper()

    by_day: dict[int, list[dict]] = {}
    for record in monthly:
        by_day.setdefault(record_date(record).day, []).append(record)

    rows = []
    for day in range(1, days_in_month + 1):
        date = pd.Timestamp(year=year, month=month, day=day)
        matching = by_day.get(day, [])
        daily_entries = [e for r in matching for e in (r.get("entries") or [])]
        record = matching[0] if matching else None

        shifts = {}
        for supervisor, key in zip(supervisors, keys):
            shifts[key] = _shift_row(record, entries_for_shift(daily_entries, supervisor), key)

        rows.append({
            "day": f"{day}-{month_abbr}",
            "date": date,
            "is_friday": date.dayofweek == 4,
            "record_id": record.get("id") if record else None,
            "shifts": shifts,
        })

    totals = {}
    avg_eff = {}
    for key in keys:
        total = {field: 0.0 for field in _SUM_FIELDS}
        total.update({"friday_count": 0, "friday_hours": 0.0})
        for row in rows:
            shift = row["shifts"][key]
            for field in _SUM_FIELDS:
                total[field] += shift[field] or 0
            if row["is_friday"] and shift["day_count"] > 0:
                total["friday_count"] += 1
                total["friday_hours"] += shift["day_count"] * 24
        totals[key] = total
        avg_eff[key] = shift_efficiency(total["total_prod"], total["not_ok"], total["day_count"])

    today_ts = parse_report_date(today) if today is not None else pd.Timestamp.today().normalize()
    today_prod = sum(
        sum(shift["total_prod"] for shift in row["shifts"].values())
        for row in rows
        if row["date"] == today_ts
    )

    logger.info("Built shift register for %s %d with %d records", MONTH_NAMES[month - 1], year, len(monthly))
    return {
        "rows": rows,
        "totals": totals,
        "avg_monthly_eff": avg_eff,
        "summary": {
            "today": today_prod,
            "month": sum(totals[key]["total_prod"] for key in keys),
            "year": _entries_qty(filter_year(records, year)),
            "total": _entries_qty(records),
        },
        "record_count": len(monthly),
        "days_in_month": days_in_month,
        "month_name": MONTH_NAMES[month - 1],
    }


def _entries_qty(records: Iterable[dict]) -> float:
    return sum(
        coerce_quantity(e.get("fQty"))
        for r in records
        for e in (r.get("entries") or [])
    )


def friday_window(day_count: float) -> tuple[str, str]:
    """Clock-in / clock-out labels for a Friday day-count (lookup, no arithmetic)."""
    return FRIDAY_SHIFT_WINDOWS.get(float(day_count), FRIDAY_UNKNOWN_WINDOW)


def friday_log(rows: Iterable[dict], key: str) -> dict:
    """Friday rows worked by one shift, with clock labels and hour totals."""
    entries = []
    for row in rows:
        count = row["shifts"][key]["day_count"]
        if not row["is_friday"] or count <= 0:
            continue
        clock_in, clock_out = friday_window(count)
        entries.append({
            "day": row["day"],
            "from": clock_in,
            "to": clock_out,
            "hours": count * 24,
            "value": count,
        })
    return {
        "entries": entries,
        "total_hours": sum(e["hours"] for e in entries),
        "avg_value": average(sum(e["value"] for e in entries), len(entries)),
    }


def apply_manual_overrides(
    record: dict,
    key: str,
    not_ok: str | float | None = None,
    re_matching: str | float | None = None,
    day_count: str | float | None = None,
    note: str | None = None,
) -> dict:
    """Copy of an RFT record with manual override inputs stored for one shift.

    Each numeric input is stored as its evaluated value plus the raw
    formula/text, so reloading shows exactly what was typed.
    """
    updated = dict(record)
    for field, raw in (
        ("manualNotOk", not_ok),
        ("manualReMatching", re_matching),
        ("manualDayCount", day_count),
    ):
        if raw is None:
            continue
        value, text = ManualValue.parse(raw).to_store()
        updated[field] = {**(record.get(field) or {}), key: value}
        updated[f"{field}Formula"] = {**(record.get(f"{field}Formula") or {}), key: text}
    if note is not None:
        updated["manualNote"] = {**(record.get("manualNote") or {}), key: note}
    return updated


def stored_shift_totals(records: Iterable[dict], supervisor: str) -> dict:
    """Monthly shift totals from stored summary fields (management report).

    Uses the cached shiftPerformance/shiftCount/manual values rather than
    re-deriving from entries; colour split is by substring (WHITE, WASH).
    """
    key = shift_key(supervisor)
    stats = {"actual": 0.0, "batches": 0, "color": 0.0, "white": 0.0,
             "wash": 0.0, "re": 0.0, "not_ok": 0.0}
    for record in records:
        not_ok = (record.get("manualNotOk") or {}).get(key) or 0
        stats["actual"] += ((record.get("shiftPerformance") or {}).get(key) or 0) - not_ok
        stats["batches"] += (record.get("shiftCount") or {}).get(key) or 0
        stats["not_ok"] += not_ok
        stats["re"] += (record.get("manualReMatching") or {}).get(key) or 0
        for entry in entries_for_shift(record.get("entries") or [], supervisor):
            group = str(entry.get("colorGroup") or "").upper()
            qty = coerce_quantity(entry.get("fQty"))
            if "WHITE" in group:
                stats["white"] += qty
            elif "WASH" in group:
                stats["wash"] += qty
            else:
                stats["color"] += qty
    return stats


def daily_shift_register(
    records: Iterable[dict],
    supervisors: Iterable[str] = DEFAULT_SUPERVISORS,
) -> list[dict]:
    """One row per stored RFT record with per-shift figures.

    Efficiency here is against a single shift-day (no day count), as printed
    in the monthly management report.
    """
    supervisors = list(supervisors)
    rows = []
    for record in records:
        shifts = {}
        for supervisor in supervisors:
            key = shift_key(supervisor)
            entries = entries_for_shift(record.get("entries") or [], supervisor)
            total = sum(coerce_quantity(e.get("fQty")) for e in entries)
            white = sum(coerce_quantity(e.get("fQty")) for e in entries
                        if "WHITE" in str(e.get("colorGroup") or "").upper())
            wash = sum(coerce_quantity(e.get("fQty")) for e in entries
                       if "WASH" in str(e.get("colorGroup") or "").upper())
            not_ok = (record.get("manualNotOk") or {}).get(key) or 0
            actual = total - not_ok
            shifts[key] = {
                "total": total,
                "color": total - white - wash,
                "white": white,
                "wash": wash,
                "re": (record.get("manualReMatching") or {}).get(key) or 0,
                "not_ok": not_ok,
                "actual": actual,
                "eff": actual / SHIFT_TARGET * 100,
                "note": (record.get("manualNote") or {}).get(key) or "",
            }
        rows.append({"date": str(record.get("date") or "").split("-")[0], "shifts": shifts})
    return rows
