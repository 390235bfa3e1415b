"""
Data transforms: flatten nested store records into long-format fact tables
for charting and export.
"""

import logging
from typing import Iterable

import pandas as pd

from .categories import category_table
from .config import BRANDS
from .loaders.utils import record_date, to_number
from .rft import coerce_quantity, is_bulk, is_lab

logger = logging.getLogger(__name__)


def build_fact_daily_production(records: Iterable[dict]) -> pd.DataFrame:
    """One row per record and brand.

    Returns
    -------
    fact_daily_production DataFrame with columns:
        date, record_id, brand, reported_total, inhouse, sub_contract, table_total
    """
    schema_cols = [
        "date", "record_id", "brand",
        "reported_total", "inhouse", "sub_contract", "table_total",
    ]
    rows = []
    for record in records:
        date = record_date(record)
        if date is None:
            continue
        for brand in BRANDS:
            data = record.get(brand) or {}
            inhouse = to_number(data.get("inhouse"))
            sub_contract = to_number(data.get("subContract"))
            rows.append({
                "date": date,
                "record_id": record.get("id"),
                "brand": brand,
                "reported_total": to_number(data.get("total")),
                "inhouse": inhouse,
                "sub_contract": sub_contract,
                "table_total": inhouse + sub_contract,
            })

    if not rows:
        logger.warning("No dated production records. Returning empty fact_daily_production.")
        return pd.DataFrame(columns=schema_cols)

    df = pd.DataFrame(rows, columns=schema_cols).sort_values(["date", "brand"]).reset_index(drop=True)
    logger.info("Built fact_daily_production with %d rows", len(df))
    return df


def build_fact_color_groups(records: Iterable[dict]) -> pd.DataFrame:
    """Category weights per record and brand (strict alias matching, zero weights dropped).

    Returns
    -------
    fact_color_groups DataFrame with columns: date, record_id, brand, category, weight
    """
    schema_cols = ["date", "record_id", "brand", "category", "weight"]
    rows = []
    for record in records:
        date = record_date(record)
        if date is None:
            continue
        for brand in BRANDS:
            table = category_table((record.get(brand) or {}).get("colorGroups"))
            for category, weight in table.items():
                if weight > 0:
                    rows.append({
                        "date": date,
                        "record_id": record.get("id"),
                        "brand": brand,
                        "category": category,
                        "weight": weight,
                    })

    df = pd.DataFrame(rows, columns=schema_cols)
    logger.info("Built fact_color_groups with %d rows", len(df))
    return df


def build_fact_rft_batches(records: Iterable[dict]) -> pd.DataFrame:
    """One row per dyeing batch across RFT reports.

    Returns
    -------
    fact_rft_batches DataFrame with columns:
        date, record_id, mc, batch_no, buyer, colour, color_group, dyeing_type,
        shift_unload, f_qty, load_cap_pct, shade_ok, is_bulk, is_lab
    """
    schema_cols = [
        "date", "record_id", "mc", "batch_no", "buyer", "colour", "color_group",
        "dyeing_type", "shift_unload", "f_qty", "load_cap_pct",
        "shade_ok", "is_bulk", "is_lab",
    ]
    rows = []
    for record in records:
        date = record_date(record)
        for entry in record.get("entries") or []:
            rows.append({
                "date": date,
                "record_id": record.get("id"),
                "mc": entry.get("mc"),
                "batch_no": entry.get("batchNo"),
                "buyer": entry.get("buyer"),
                "colour": entry.get("colour"),
                "color_group": entry.get("colorGroup"),
                "dyeing_type": entry.get("dyeingType"),
                "shift_unload": entry.get("shiftUnload"),
                "f_qty": coerce_quantity(entry.get("fQty")),
                "load_cap_pct": coerce_quantity(entry.get("loadCapPercent")),
                "shade_ok": bool(entry.get("shadeOk")),
                "is_bulk": is_bulk(entry),
                "is_lab": is_lab(entry),
            })

    df = pd.DataFrame(rows, columns=schema_cols)
    logger.info("Built fact_rft_batches with %d rows", len(df))
    return df


def build_fact_shift_daily(shift_report: dict) -> pd.DataFrame:
    """Flatten a shift_month_report() payload to one row per day and shift.

    Returns
    -------
    fact_shift_daily DataFrame with columns:
        date, day, shift, is_friday, color, white, wash, re_matching,
        total_prod, batch_count, not_ok, actual, day_count, eff, note
    """
    schema_cols = [
        "date", "day", "shift", "is_friday", "color", "white", "wash",
        "re_matching", "total_prod", "batch_count", "not_ok", "actual",
        "day_count", "eff", "note",
    ]
    rows = []
    for row in shift_report.get("rows", []):
        for shift, stats in row["shifts"].items():
            rows.append({
                "date": row["date"],
                "day": row["day"],
                "shift": shift,
                "is_friday": row["is_friday"],
                **{col: stats[col] for col in schema_cols[4:]},
            })

    df = pd.DataFrame(rows, columns=schema_cols)
    logger.info("Built fact_shift_daily with %d rows", len(df))
    return df


def production_trend(fact_daily: pd.DataFrame, freq: str = "D") -> pd.DataFrame:
    """Brand totals resampled to a period grain, one column per brand.

    Parameters
    ----------
    fact_daily : From build_fact_daily_production().
    freq : "D" (daily), "W" (weekly) or "M" (monthly).

    Returns
    -------
    DataFrame indexed by period start with columns <brand>..., total.
    """
    if fact_daily.empty:
        return pd.DataFrame(columns=[*BRANDS, "total"])

    pivot = fact_daily.pivot_table(
        index="date", columns="brand", values="reported_total", aggfunc="sum", fill_value=0.0
    )
    pivot = pivot.reindex(columns=list(BRANDS), fill_value=0.0)
    period = pivot.index.to_period(freq)
    trend = pivot.groupby(period).sum()
    trend.index = trend.index.to_timestamp()
    trend["total"] = trend[list(BRANDS)].sum(axis=1)
    trend.index.name = "period"
    trend.columns.name = None
    return trend


def rft_trend(fact_batches: pd.DataFrame) -> pd.DataFrame:
    """Daily bulk/lab RFT % and batch counts from batch rows."""
    cols = ["date", "bulk_rft", "lab_rft", "bulk_batches", "lab_batches"]
    if fact_batches.empty:
        return pd.DataFrame(columns=cols)

    rows = []
    for date, group in fact_batches.dropna(subset=["date"]).groupby("date"):
        bulk = group[group["is_bulk"]]
        lab = group[group["is_lab"]]
        rows.append({
            "date": date,
            "bulk_rft": bulk["shade_ok"].mean() * 100 if len(bulk) else 0.0,
            "lab_rft": lab["shade_ok"].mean() * 100 if len(lab) else 0.0,
            "bulk_batches": len(bulk),
            "lab_batches": len(lab),
        })
    return pd.DataFrame(rows, columns=cols)
