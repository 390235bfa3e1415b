"""
Right-First-Time (RFT) quality metrics for daily dyeing batch reports.

Batches are split by dyeing type into bulk runs (B/D CARD, or no type given)
and lab trials (LAB). RFT is the share of shade-OK batches in each partition.
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Iterable

import pandas as pd

from .config import (
    BULK_DYEING_MARKER,
    DEFAULT_COMPANY,
    DEFAULT_RFT_ENTRY,
    DEFAULT_SUPERVISORS,
    DEFAULT_UNIT,
    LAB_DYEING_MARKER,
)
from .errors import ExtractionError
from .formula import parse_leading_float
from .kpis import average, ratio_pct
from .loaders.utils import format_report_date, parse_report_date, safe_float
from .windows import filter_month, filter_year, sort_by_date

logger = logging.getLogger(__name__)


def shift_key(supervisor: str) -> str:
    """Store key for a supervisor ("YOUSUF" -> "yousuf")."""
    return str(supervisor).strip().lower()


def coerce_quantity(val: Any) -> float:
    """Numeric prefix of a quantity cell; 0 when there is none."""
    if val is None or isinstance(val, bool):
        return 0.0
    if isinstance(val, (int, float)):
        return float(val) if safe_float(val) is not None else 0.0
    return parse_leading_float(str(val))


def is_bulk(entry: dict) -> bool:
    dyeing_type = entry.get("dyeingType")
    return not dyeing_type or BULK_DYEING_MARKER in str(dyeing_type).upper()


def is_lab(entry: dict) -> bool:
    return LAB_DYEING_MARKER in str(entry.get("dyeingType") or "").upper()


def entries_for_shift(entries: Iterable[dict], supervisor: str) -> list[dict]:
    """Entries whose shift-unload label contains the supervisor's name.

    Case-insensitive substring match; the single place where free-text
    shift labels are attributed to supervisors.
    """
    needle = str(supervisor).strip().upper()
    return [e for e in entries if needle in str(e.get("shiftUnload") or "").upper()]


def rft_percent(entries: list[dict]) -> float:
    """Share of shade-OK entries, 0 for an empty list."""
    ok = sum(1 for e in entries if e.get("shadeOk"))
    return ratio_pct(ok, len(entries))


def compute_daily_performance(
    entries: Iterable[dict] | None,
    supervisors: Iterable[str] = DEFAULT_SUPERVISORS,
) -> dict:
    """Bulk/lab RFT and per-supervisor throughput for one day's batches.

    Returns
    -------
    {
        "bulk_rft": float, "lab_rft": float,
        "bulk_total": int, "lab_total": int,
        "shift_performance": {"yousuf": qty, ...},
        "shift_count": {"yousuf": batches, ...},
    }
    """
    entries = list(entries or [])
    bulk = [e for e in entries if is_bulk(e)]
    lab = [e for e in entries if is_lab(e)]

    shift_performance = {}
    shift_count = {}
    for supervisor in supervisors:
        shift_entries = entries_for_shift(entries, supervisor)
        key = shift_key(supervisor)
        shift_performance[key] = sum(coerce_quantity(e.get("fQty")) for e in shift_entries)
        shift_count[key] = len(shift_entries)

    return {
        "bulk_rft": rft_percent(bulk),
        "lab_rft": rft_percent(lab),
        "bulk_total": len(bulk),
        "lab_total": len(lab),
        "shift_performance": shift_performance,
        "shift_count": shift_count,
    }


def refresh_performance(
    record: dict,
    supervisors: Iterable[str] = DEFAULT_SUPERVISORS,
) -> dict:
    """Copy of an RFT record with its summary fields recomputed from entries."""
    performance = compute_daily_performance(record.get("entries"), supervisors)
    return {
        **record,
        "bulkRftPercent": round(performance["bulk_rft"], 2),
        "labRftPercent": round(performance["lab_rft"], 2),
        "shiftPerformance": performance["shift_performance"],
        "shiftCount": performance["shift_count"],
    }


def set_shade_status(entry: dict, field: str, value: Any) -> dict:
    """Update one entry field, keeping shadeOk / shadeNotOk exclusive."""
    if field == "shadeOk" and value is True:
        return {**entry, "shadeOk": True, "shadeNotOk": False}
    if field == "shadeNotOk" and value is True:
        return {**entry, "shadeOk": False, "shadeNotOk": True}
    return {**entry, field: value}


def blank_entry() -> dict:
    return dict(DEFAULT_RFT_ENTRY)


def new_rft_record(today: Any = None) -> dict:
    """Empty draft record with one blank entry, dated dd/mm/YYYY."""
    date = parse_report_date(today) if today is not None else pd.Timestamp.today().normalize()
    return {
        "id": str(uuid.uuid4()),
        "date": date.strftime("%d/%m/%Y"),
        "unit": DEFAULT_UNIT,
        "companyName": DEFAULT_COMPANY,
        "entries": [blank_entry()],
        "bulkRftPercent": 0,
        "labRftPercent": 0,
        "shiftPerformance": {shift_key(s): 0 for s in DEFAULT_SUPERVISORS},
        "shiftCount": {shift_key(s): 0 for s in DEFAULT_SUPERVISORS},
        "createdAt": datetime.now(timezone.utc).isoformat(),
    }


def sanitize_entries(entries: Iterable[dict]) -> list[dict]:
    """Coerce extracted quantity / load-cap cells to floats."""
    return [
        {
            **entry,
            "fQty": coerce_quantity(entry.get("fQty")),
            "loadCapPercent": coerce_quantity(entry.get("loadCapPercent")),
        }
        for entry in entries
    ]


def merge_extracted_rft(
    extracted: dict | None,
    base: dict | None = None,
    supervisors: Iterable[str] = DEFAULT_SUPERVISORS,
) -> dict:
    """Merge an extraction response into a draft RFT record.

    RFT percentages reported by the extractor win unless they are 0/missing;
    shift figures are always recomputed locally.

    Raises
    ------
    ExtractionError
        Empty response, explicit isSuccess=False, or no batch entries.
    """
    if not extracted:
        raise ExtractionError("AI service returned an empty response.")
    if extracted.get("isSuccess") is False:
        reason = extracted.get("errorMessage") or "Unknown header mismatch"
        raise ExtractionError(f"AI Extraction Failed: {reason}")
    if not extracted.get("entries"):
        raise ExtractionError("AI failed to extract any batch entries from the report.")

    base = base or new_rft_record()
    entries = sanitize_entries(extracted["entries"])
    performance = compute_daily_performance(entries, supervisors)

    merged = {**base, **extracted}
    merged.pop("isSuccess", None)
    merged.pop("errorMessage", None)
    merged.update({
        "entries": entries,
        "bulkRftPercent": extracted.get("bulkRftPercent") or performance["bulk_rft"],
        "labRftPercent": extracted.get("labRftPercent") or performance["lab_rft"],
        "shiftPerformance": performance["shift_performance"],
        "shiftCount": performance["shift_count"],
        "id": base.get("id") or str(uuid.uuid4()),
        "createdAt": base.get("createdAt") or datetime.now(timezone.utc).isoformat(),
    })
    logger.info("Merged %d extracted RFT entries", len(entries))
    return merged


def record_totals(record: dict) -> dict:
    """Footer totals of one RFT report."""
    entries = record.get("entries") or []
    total_qty = sum(coerce_quantity(e.get("fQty")) for e in entries)
    load = sum(coerce_quantity(e.get("loadCapPercent")) for e in entries)
    return {
        "total_qty": total_qty,
        "avg_load": average(load, len(entries)),
        "ok_count": sum(1 for e in entries if e.get("shadeOk")),
        "not_ok_count": sum(1 for e in entries if e.get("shadeNotOk")),
    }


def _period_aggregate(records: list[dict]) -> dict:
    if not records:
        return {"bulk": 0.0, "lab": 0.0, "batches": 0, "days": 0, "records": []}
    return {
        "bulk": average(sum(r.get("bulkRftPercent") or 0 for r in records), len(records)),
        "lab": average(sum(r.get("labRftPercent") or 0 for r in records), len(records)),
        "batches": sum(len(r.get("entries") or []) for r in records),
        "days": len(records),
        "records": records,
    }


def rft_period_stats(records: Iterable[dict], reference: Any = None) -> dict | None:
    """Average RFT for the latest report, the reference month/year and all time.

    Returns None when there are no records.
    """
    records = list(records)
    if not records:
        return None
    ref = parse_report_date(reference) if reference is not None else pd.Timestamp.today().normalize()
    latest = sort_by_date(records)[0]

    return {
        "today": {
            "bulk": latest.get("bulkRftPercent") or 0,
            "lab": latest.get("labRftPercent") or 0,
            "batches": len(latest.get("entries") or []),
            "days": 1,
            "date": latest.get("date"),
            "records": [latest],
        },
        "thisMonth": _period_aggregate(filter_month(records, ref.month, ref.year)),
        "thisYear": _period_aggregate(filter_year(records, ref.year)),
        "total": _period_aggregate(records),
    }


def search_rft_records(
    records: Iterable[dict],
    month: int,
    year: int,
    query: str = "",
) -> list[dict]:
    """RFT browse list: month/year match plus raw or formatted date search."""
    needle = query.lower()
    matches = [
        r for r in filter_month(records, month, year)
        if query in str(r.get("date") or "")
        or needle in format_report_date(r.get("date"), upper=True).lower()
    ]
    return sort_by_date(matches)
