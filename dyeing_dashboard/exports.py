"""
CSV / XLSX report exports and CSV re-parsing.

Column order is fixed per report. Numbers are written raw (no thousands
separators); whole floats are written without a trailing ".0".
"""

import io
import logging
from typing import Any, Iterable

import pandas as pd

from .categories import group_total
from .config import BRAND_REGISTRY, BRANDS, COLOR_GROUP_NAMES, DEFAULT_SUPERVISORS, MONTH_NAMES
from .loaders.utils import to_number
from .production import industry_total
from .rft import shift_key
from .shifts import friday_log

logger = logging.getLogger(__name__)

PRODUCTION_HISTORY_HEADERS = [
    "Date", "Lantabur Total", "Taqwa Total", "Daily Total", "Inhouse Total", "Subcon Total",
]

RFT_HEADERS = [
    "Date", "MC", "Batch No", "Buyer", "Order", "Colour", "Color Group",
    "F/Type", "F.Qty", "Load Cap%", "Shade OK", "Shade RE", "Dyeing Type",
    "Shift Unload", "Remarks",
]

_SHIFT_COLUMNS = [
    ("Total", "total_prod"),
    ("Color", "color"),
    ("White", "white"),
    ("N.Wash", "wash"),
    ("RE-MATCHING", "re_matching"),
    ("NOT OK", "not_ok"),
    ("Day Count", "day_count"),
    ("Actual", "actual"),
]

TOTALS_LABEL = "MONTHLY TOTALS"


def _raw_number(val: Any) -> Any:
    if isinstance(val, float) and val.is_integer():
        return int(val)
    return val


def _to_csv(df: pd.DataFrame) -> str:
    return df.map(_raw_number).to_csv(index=False, lineterminator="\n").rstrip("\n")


# ---------------------------------------------------------------------------
# Production tables
# ---------------------------------------------------------------------------
def production_headers(view: str = "history") -> list[str]:
    if view == "history":
        return list(PRODUCTION_HISTORY_HEADERS)
    label = BRAND_REGISTRY[view]["label"]
    return ["Date", f"{label} Total", "Inhouse", "Subcon", *COLOR_GROUP_NAMES]


def production_frame(records: Iterable[dict], view: str = "history") -> pd.DataFrame:
    """Production table rows in export column order."""
    rows = []
    for record in records:
        if view == "history":
            totals = [industry_total(record, brand) for brand in BRANDS]
            rows.append([
                record.get("date"),
                *totals,
                sum(totals),
                sum(to_number((record.get(b) or {}).get("inhouse")) for b in BRANDS),
                sum(to_number((record.get(b) or {}).get("subContract")) for b in BRANDS),
            ])
        else:
            data = record.get(view) or {}
            rows.append([
                record.get("date"),
                industry_total(record, view),
                to_number(data.get("inhouse")),
                to_number(data.get("subContract")),
                *(group_total(data.get("colorGroups"), name) for name in COLOR_GROUP_NAMES),
            ])
    return pd.DataFrame(rows, columns=production_headers(view))


def production_csv(records: Iterable[dict], view: str = "history") -> str:
    df = production_frame(records, view)
    logger.info("Exported %d production rows (%s)", len(df), view)
    return _to_csv(df)


def production_filename(view: str, month: int, year: int) -> str:
    return f"{view.capitalize()} Production Table ({MONTH_NAMES[month - 1]} {year}).csv"


def read_production_csv(text: str) -> pd.DataFrame:
    """Parse an exported production table; every non-Date column becomes numeric."""
    df = pd.read_csv(io.StringIO(text), dtype={"Date": str})
    for col in df.columns:
        if col != "Date":
            df[col] = pd.to_numeric(df[col], errors="coerce").fillna(0.0)
    return df


# ---------------------------------------------------------------------------
# RFT batches
# ---------------------------------------------------------------------------
def rft_frame(records: Iterable[dict]) -> pd.DataFrame:
    rows = []
    for record in records:
        for entry in record.get("entries") or []:
            rows.append([
                record.get("date"),
                entry.get("mc"),
                entry.get("batchNo"),
                entry.get("buyer"),
                entry.get("order"),
                entry.get("colour"),
                entry.get("colorGroup"),
                entry.get("fType"),
                entry.get("fQty"),
                entry.get("loadCapPercent"),
                "YES" if entry.get("shadeOk") else "NO",
                "YES" if entry.get("shadeNotOk") else "NO",
                entry.get("dyeingType"),
                entry.get("shiftUnload"),
                entry.get("remarks"),
            ])
    return pd.DataFrame(rows, columns=RFT_HEADERS)


def rft_csv(records: Iterable[dict]) -> str:
    df = rft_frame(records)
    logger.info("Exported %d RFT batch rows", len(df))
    return _to_csv(df)


def rft_filename(period: str, today: Any = None) -> str:
    day = pd.Timestamp(today) if today is not None else pd.Timestamp.today()
    return f"RFT_{period.upper()}_Report_{day.strftime('%Y-%m-%d')}.csv"


# ---------------------------------------------------------------------------
# Shift performance
# ---------------------------------------------------------------------------
def shift_headers(supervisors: Iterable[str] = DEFAULT_SUPERVISORS) -> list[str]:
    headers = ["Date", "Is Friday"]
    for supervisor in supervisors:
        label = supervisor.capitalize()
        headers += [f"{label} {name}" for name, _ in _SHIFT_COLUMNS]
        headers += [f"{label} Eff%", f"{label} Note"]
    return headers


def shift_frame(report: dict, supervisors: Iterable[str] = DEFAULT_SUPERVISORS) -> pd.DataFrame:
    """Daily shift rows plus a MONTHLY TOTALS row, in export column order."""
    supervisors = list(supervisors)
    keys = [shift_key(s) for s in supervisors]

    rows = []
    for row in report["rows"]:
        line = [row["day"], "YES" if row["is_friday"] else "NO"]
        for key in keys:
            stats = row["shifts"][key]
            line += [stats[field] for _, field in _SHIFT_COLUMNS]
            line += [f"{stats['eff']:.2f}%", stats["note"] or ""]
        rows.append(line)

    totals = [TOTALS_LABEL, ""]
    for key in keys:
        shift_totals = report["totals"][key]
        totals += [shift_totals[field] for _, field in _SHIFT_COLUMNS]
        totals += [f"{report['avg_monthly_eff'][key]:.2f}%", ""]
    rows.append(totals)

    return pd.DataFrame(rows, columns=shift_headers(supervisors))


def shift_csv(report: dict, supervisors: Iterable[str] = DEFAULT_SUPERVISORS) -> str:
    return _to_csv(shift_frame(report, supervisors))


def shift_filename(month: int, year: int, extension: str = "csv") -> str:
    return f"Shift_Performance_{MONTH_NAMES[month - 1]}_{year}.{extension}"


def friday_frame(report: dict, supervisors: Iterable[str] = DEFAULT_SUPERVISORS) -> pd.DataFrame:
    rows = []
    for supervisor in supervisors:
        log = friday_log(report["rows"], shift_key(supervisor))
        for entry in log["entries"]:
            rows.append({"Shift": supervisor, "Date": entry["day"], "From": entry["from"],
                         "To": entry["to"], "Hours": entry["hours"], "Value": entry["value"]})
    return pd.DataFrame(rows, columns=["Shift", "Date", "From", "To", "Hours", "Value"])


def write_shift_xlsx(
    report: dict,
    target: Any,
    supervisors: Iterable[str] = DEFAULT_SUPERVISORS,
) -> None:
    """Write the shift register and Friday log to an .xlsx path or buffer."""
    supervisors = list(supervisors)
    with pd.ExcelWriter(target, engine="openpyxl") as writer:
        shift_frame(report, supervisors).to_excel(writer, sheet_name="Shift Performance", index=False)
        friday_frame(report, supervisors).to_excel(writer, sheet_name="Friday Log", index=False)
    logger.info("Wrote shift workbook for %s", report.get("month_name"))
