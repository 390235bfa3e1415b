"""
Dyeing program registry: planned dyeing orders per brand and plan date.
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Iterable

import pandas as pd

from .config import BRAND_REGISTRY, DEFAULT_UNIT
from .loaders.utils import parse_report_date, to_number
from .windows import filter_month, sort_by_date

logger = logging.getLogger(__name__)

EMPTY_PROGRAM_ENTRY: dict = {
    "sl": "", "buyer": "", "priority": "", "positionOfFabrics": "", "orderNo": "",
    "styleName": "", "colour": "", "ldNo": "", "labPosition": "", "yarnLot": "",
    "fType": "", "gsm": "", "dyeingCloss": "", "unitNo": "",
    "inhouse": 0, "subcontact": 0, "totalQty": 0,
    "anticrease": "", "enzyme": "", "softner": "", "matching": "",
    "noOfShipment": "", "shipmentDate": "", "remarks": "",
}


def filter_programs(
    records: Iterable[dict],
    industry: str,
    month: int,
    year: int,
    query: str = "",
) -> list[dict]:
    """Programs for one brand and month, newest first.

    query matches the raw plan date (as typed) or the unit, case-insensitively
    for the unit.
    """
    matches = [
        r for r in filter_month(records, month, year)
        if r.get("industry") == industry
        and (query in str(r.get("date") or "") or query.lower() in str(r.get("unit") or "").lower())
    ]
    return sort_by_date(matches)


def recalculate_program_totals(record: dict) -> dict:
    """Copy of a program with entry totals and record totals re-derived.

    An entry without a totalQty gets inhouse + subcontact; record totals are
    always the sums over entries.
    """
    entries = []
    for entry in record.get("entries") or []:
        inhouse = to_number(entry.get("inhouse"))
        subcontact = to_number(entry.get("subcontact"))
        total_qty = to_number(entry.get("totalQty")) or inhouse + subcontact
        entries.append({**entry, "inhouse": inhouse, "subcontact": subcontact, "totalQty": total_qty})

    return {
        **record,
        "entries": entries,
        "inhouseTotal": sum(e["inhouse"] for e in entries),
        "subcontTotal": sum(e["subcontact"] for e in entries),
        "grandTotal": sum(e["totalQty"] for e in entries),
    }


def new_program_record(industry: str, today: Any = None) -> dict:
    """Blank program dated like "05-Mar-26" with one numbered entry."""
    if industry not in BRAND_REGISTRY:
        raise ValueError(f"Unknown industry: {industry!r}")
    date = parse_report_date(today) if today is not None else pd.Timestamp.today().normalize()
    return {
        "id": str(uuid.uuid4()),
        "industry": industry,
        "date": date.strftime("%d-%b-%y"),
        "unit": DEFAULT_UNIT,
        "inhouseTotal": 0,
        "subcontTotal": 0,
        "grandTotal": 0,
        "entries": [{**EMPTY_PROGRAM_ENTRY, "sl": "1"}],
        "createdAt": datetime.now(timezone.utc).isoformat(),
    }


def program_from_extraction(extracted: dict, default_industry: str) -> dict:
    """Stamp an extracted program with an id, timestamp and brand.

    The extracted industry wins; default_industry (the active tab) fills in
    when the document did not name one.
    """
    industry = extracted.get("industry") or default_industry
    record = {
        "unit": DEFAULT_UNIT,
        **extracted,
        "id": str(uuid.uuid4()),
        "industry": industry,
        "createdAt": datetime.now(timezone.utc).isoformat(),
    }
    return recalculate_program_totals(record)


def registry_summary(records: Iterable[dict]) -> dict:
    """Plan count, entry count and summed totals for a list of programs."""
    records = list(records)
    return {
        "programs": len(records),
        "entries": sum(len(r.get("entries") or []) for r in records),
        "inhouse_total": sum(to_number(r.get("inhouseTotal")) for r in records),
        "subcont_total": sum(to_number(r.get("subcontTotal")) for r in records),
        "grand_total": sum(to_number(r.get("grandTotal")) for r in records),
    }
