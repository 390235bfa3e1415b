"""
Dashboard-ready output functions.

These are the entry points a front end calls for each view. Each function
takes raw store records and returns plain dicts or DataFrames suitable for
rendering cards, charts and tables.
"""

import logging
from typing import Any, Iterable

import pandas as pd

from .categories import segment_distribution
from .config import BRANDS, DEFAULT_SUPERVISORS, MONTH_NAMES, REPORT_SECTIONS
from .dyeing_program import filter_programs, registry_summary
from .loaders.utils import record_date, to_number
from .production import (
    production_overview,
    production_table_totals,
    reported_total,
    row_display,
    search_production_records,
)
from .rft import rft_period_stats, search_rft_records, shift_key
from .shifts import daily_shift_register, friday_log, shift_month_report, stored_shift_totals
from .transforms import build_fact_daily_production, build_fact_rft_batches, production_trend, rft_trend
from .windows import filter_month, filter_year, sort_by_date

logger = logging.getLogger(__name__)


def get_operations_overview(
    records: Iterable[dict],
    month: int,
    year: int,
    timeframe: str = "month",
) -> dict | None:
    """Overview cards, colour portfolio, daily trend and target gauge."""
    records = list(records)
    overview = production_overview(records, month, year, timeframe)
    if overview is None:
        logger.warning("No production records for the overview")
        return None
    overview["trend"] = production_trend(build_fact_daily_production(filter_month(records, month, year)))
    return overview


def get_production_table(
    records: Iterable[dict],
    view: str,
    month: int,
    year: int,
    query: str = "",
    start: Any = None,
    end: Any = None,
) -> dict:
    """Filtered production rows with per-row display values and footer totals.

    Returns
    -------
    {"rows": [{"id", "date", "total", "inhouse", "sub_contract", "color_groups"}],
     "totals": production_table_totals(...)}
    """
    matches = search_production_records(records, month, year, query, start, end)
    rows = [{"id": r.get("id"), "date": r.get("date"), **row_display(r, view)} for r in matches]
    return {"rows": rows, "totals": production_table_totals(matches, view)}


def get_rft_overview(
    records: Iterable[dict],
    month: int,
    year: int,
    query: str = "",
    reference: Any = None,
) -> dict:
    """Period RFT cards, the browse list and the daily RFT trend."""
    records = list(records)
    return {
        "stats": rft_period_stats(records, reference),
        "records": search_rft_records(records, month, year, query),
        "trend": rft_trend(build_fact_rft_batches(filter_month(records, month, year))),
    }


def get_shift_performance(
    records: Iterable[dict],
    month: int,
    year: int,
    supervisors: Iterable[str] = DEFAULT_SUPERVISORS,
    today: Any = None,
) -> dict:
    """Shift register plus one Friday log per supervisor."""
    supervisors = list(supervisors)
    report = shift_month_report(records, month, year, supervisors, today)
    report["friday_logs"] = {
        shift_key(s): friday_log(report["rows"], shift_key(s)) for s in supervisors
    }
    return report


def get_dyeing_programs(
    records: Iterable[dict],
    industry: str,
    month: int,
    year: int,
    query: str = "",
) -> dict:
    programs = filter_programs(records, industry, month, year, query)
    return {"records": programs, "summary": registry_summary(programs)}


def _brand_report_stats(month_records: list[dict], year_records: list[dict], brand: str) -> dict:
    month_total = sum(reported_total(r, brand) for r in month_records)
    return {
        "today": reported_total(month_records[-1], brand) if month_records else 0.0,
        "month": month_total,
        "avg": month_total / (len(month_records) or 1),
        "year": sum(reported_total(r, brand) for r in year_records),
        "inhouse": sum(to_number((r.get(brand) or {}).get("inhouse")) for r in month_records),
        "subcon": sum(to_number((r.get(brand) or {}).get("subContract")) for r in month_records),
    }


def monthly_report(
    production: Iterable[dict],
    rft: Iterable[dict],
    month: int,
    year: int,
    supervisors: Iterable[str] = DEFAULT_SUPERVISORS,
) -> dict | None:
    """Data behind the monthly management report, one entry per section.

    Section order and orientation come from REPORT_SECTIONS. Returns None
    when there are no production records at all.
    """
    production = list(production)
    if not production:
        logger.warning("No production records; monthly report skipped")
        return None
    supervisors = list(supervisors)

    month_production = sort_by_date(filter_month(production, month, year), descending=False)
    year_production = filter_year(production, year)
    month_rft = sort_by_date(filter_month(rft, month, year), descending=False)

    def total(records):
        return sum(to_number(r.get("totalProduction")) for r in records)

    data = {
        "cover": {
            "month_name": MONTH_NAMES[month - 1],
            "year": year,
            "month_total": total(month_production),
            "year_total": total(year_production),
            "all_time_total": total(production),
        },
        "brands": {
            brand: _brand_report_stats(month_production, year_production, brand) for brand in BRANDS
        },
        "unit_comparison": [
            {
                "date": str(r.get("date") or "").split(" ")[0],
                **{brand: reported_total(r, brand) for brand in BRANDS},
            }
            for r in month_production[-15:]
        ],
        "segments": {brand: segment_distribution(month_production, brand) for brand in BRANDS},
        "shifts": {shift_key(s): stored_shift_totals(month_rft, s) for s in supervisors},
        "shift_table": daily_shift_register(month_rft, supervisors),
    }

    sections = [{**section, "data": data[section["key"]]} for section in REPORT_SECTIONS]
    logger.info(
        "Built monthly report for %s %d: %d production, %d RFT records",
        MONTH_NAMES[month - 1], year, len(month_production), len(month_rft),
    )
    return {
        "title": f"Monthly Management Report: {MONTH_NAMES[month - 1]} {year}",
        "generated_at": pd.Timestamp.now(),
        "sections": sections,
    }


def get_available_months(records: Iterable[dict]) -> list[tuple[int, int]]:
    """Sorted (year, month) pairs present in the records, for UI dropdowns."""
    months = set()
    for record in records:
        date = record_date(record)
        if date is not None:
            months.add((date.year, date.month))
    return sorted(months)
