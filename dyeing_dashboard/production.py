"""
Brand production aggregation: overview cards, table totals, in-place edits
and the copyable daily summary.

Two industry totals are in use and deliberately not reconciled:

- overview figures read IndustryData.total (as extracted from the report);
- table views, exports and summaries use inhouse + subContract.
"""

import logging
from typing import Any, Iterable

from .categories import build_color_portfolio, category_table
from .config import BRAND_REGISTRY, BRANDS, COLOR_GROUP_NAMES, DAILY_PRODUCTION_TARGET, MONTH_NAMES
from .kpis import average, environmental_footprint, percent_change, revenue, share_pct, target_progress
from .loaders.utils import format_report_date, record_date, to_number
from .windows import filter_date_range, filter_month, in_window, sort_by_date

logger = logging.getLogger(__name__)

PORTFOLIO_TIMEFRAMES = ("today", "month", "year", "total")
TABLE_VIEWS = ("history",) + BRANDS


def industry(record: dict, brand: str) -> dict:
    return record.get(brand) or {}


def industry_total(record: dict, brand: str) -> float:
    """inhouse + subContract for one brand of a record."""
    data = industry(record, brand)
    return to_number(data.get("inhouse")) + to_number(data.get("subContract"))


def reported_total(record: dict, brand: str) -> float:
    """The brand's extracted `total` field."""
    return to_number(industry(record, brand).get("total"))


def recompute_total_production(record: dict) -> float:
    return sum(industry_total(record, brand) for brand in BRANDS)


def search_production_records(
    records: Iterable[dict],
    month: int,
    year: int,
    query: str = "",
    start: Any = None,
    end: Any = None,
) -> list[dict]:
    """Production table rows: month/year, raw-date search and optional range, newest first."""
    needle = query.lower()
    matches = [
        r for r in filter_month(records, month, year)
        if needle in str(r.get("date") or "").lower()
    ]
    return sort_by_date(filter_date_range(matches, start, end))


def _brand_totals(record: dict) -> dict[str, float]:
    return {brand: reported_total(record, brand) for brand in BRANDS}


def production_overview(
    records: Iterable[dict],
    month: int,
    year: int,
    timeframe: str = "month",
) -> dict | None:
    """Headline figures for the operations overview.

    Parameters
    ----------
    records : All production records.
    month : Selected 1-based month.
    year : Selected year.
    timeframe : Colour-portfolio window, one of today/month/year/total.

    Returns
    -------
    None when there are no records, otherwise a dict with the latest record,
    per-brand today/week/month/year/all-time figures (inhouse and
    sub_contract over the selected month), growth against the previous
    record, revenue, environmental footprint, the colour portfolio and the
    daily-target gauge.
    """
    if timeframe not in PORTFOLIO_TIMEFRAMES:
        raise ValueError(f"Unknown portfolio timeframe: {timeframe!r}")
    records = list(records)
    if not records:
        return None

    ordered = sort_by_date(records)
    month_records = filter_month(records, month, year)
    latest = sort_by_date(month_records)[0] if month_records else ordered[0]
    ref_date = record_date(latest)

    brand_stats = {
        brand: {"today": reported_total(latest, brand), "week": 0.0, "month": 0.0,
                "year": 0.0, "total": 0.0, "inhouse": 0.0, "sub_contract": 0.0,
                "avg_day": 0.0, "month_count": 0}
        for brand in BRANDS
    }
    total_weight = month_weight = year_weight = 0.0
    portfolio_records = []

    for record in records:
        date = record_date(record)
        same_month = date is not None and date.month == month and date.year == year
        same_year = date is not None and date.year == year
        in_week = ref_date is not None and in_window(date, "week", ref_date)
        weight = to_number(record.get("totalProduction"))
        totals = _brand_totals(record)

        total_weight += weight
        for brand in BRANDS:
            stats = brand_stats[brand]
            stats["total"] += totals[brand]
            if in_week:
                stats["week"] += totals[brand]
            if same_month:
                data = industry(record, brand)
                stats["month"] += totals[brand]
                stats["inhouse"] += to_number(data.get("inhouse"))
                stats["sub_contract"] += to_number(data.get("subContract"))
                stats["month_count"] += 1
            if same_year:
                stats["year"] += totals[brand]
        if same_month:
            month_weight += weight
        if same_year:
            year_weight += weight

        if (
            timeframe == "total"
            or (timeframe == "today" and date is not None and date == ref_date)
            or (timeframe == "month" and same_month)
            or (timeframe == "year" and same_year)
        ):
            portfolio_records.append(record)

    for stats in brand_stats.values():
        stats["avg_day"] = average(stats["month"], stats["month_count"])

    latest_revenue = revenue(_brand_totals(latest))
    previous = next(
        (r for r in ordered if ref_date is not None and record_date(r) is not None and record_date(r) < ref_date),
        None,
    )
    if previous is not None:
        growth_weight = percent_change(
            to_number(latest.get("totalProduction")), to_number(previous.get("totalProduction"))
        )
        growth_revenue = percent_change(latest_revenue, revenue(_brand_totals(previous)))
    else:
        growth_weight = growth_revenue = 0.0

    footprint = environmental_footprint(total_weight)
    latest_total = to_number(latest.get("totalProduction"))

    logger.info(
        "Built production overview for %s %d from %d records (%d in month)",
        MONTH_NAMES[month - 1], year, len(records), len(month_records),
    )
    return {
        "latest": latest,
        "latest_revenue": latest_revenue,
        "total_weight": total_weight,
        "month_weight": month_weight,
        "year_weight": year_weight,
        "growth_weight": growth_weight,
        "growth_revenue": growth_revenue,
        "brand_stats": brand_stats,
        "total_water": footprint["water_litres"],
        "total_co2": footprint["co2_kg"],
        "month_name": MONTH_NAMES[month - 1],
        "year": year,
        "portfolio": build_color_portfolio(portfolio_records),
        "portfolio_totals": {
            brand: sum(reported_total(r, brand) for r in portfolio_records) for brand in BRANDS
        },
        "chart_label": _chart_label(timeframe, latest, month, year),
        "target": {
            **target_progress(latest_total, DAILY_PRODUCTION_TARGET),
            "shares": {
                brand: share_pct(reported_total(latest, brand), latest_total) for brand in BRANDS
            },
        },
    }


def _chart_label(timeframe: str, latest: dict, month: int, year: int) -> str:
    if timeframe == "today":
        return f"{format_report_date(latest.get('date'), upper=True)} Production Comparison"
    if timeframe == "month":
        return f"{MONTH_NAMES[month - 1].upper()} {year} Production Comparison"
    if timeframe == "year":
        return f"Year {year} Production Comparison"
    return "Total Production Comparison"


def production_table_totals(records: Iterable[dict], view: str = "history") -> dict:
    """Footer totals and category analytics for a production table view.

    Parameters
    ----------
    records : Already-filtered production records.
    view : "history" (both brands) or a brand key.

    Returns
    -------
    {
        "lantabur_total", "taqwa_total", "combined_total", "industry_total",
        "inhouse", "sub_contract",
        "color_groups", "lantabur_colors", "taqwa_colors",   # category -> kg
        "total_weight", "chart_data": [{"name", "weight", "share_pct"}],
    }
    """
    if view not in TABLE_VIEWS:
        raise ValueError(f"Unknown production view: {view!r}")

    stats = {
        "lantabur_total": 0.0,
        "taqwa_total": 0.0,
        "combined_total": 0.0,
        "industry_total": 0.0,
        "inhouse": 0.0,
        "sub_contract": 0.0,
        "color_groups": {name: 0.0 for name in COLOR_GROUP_NAMES},
        "lantabur_colors": {name: 0.0 for name in COLOR_GROUP_NAMES},
        "taqwa_colors": {name: 0.0 for name in COLOR_GROUP_NAMES},
    }

    for record in records:
        for brand in BRANDS:
            brand_total = industry_total(record, brand)
            stats[f"{brand}_total"] += brand_total
            stats["combined_total"] += brand_total
            table = category_table(industry(record, brand).get("colorGroups"))
            for name, weight in table.items():
                stats[f"{brand}_colors"][name] += weight
                stats["color_groups"][name] += weight

        brands = BRANDS if view == "history" else (view,)
        for brand in brands:
            data = industry(record, brand)
            stats["inhouse"] += to_number(data.get("inhouse"))
            stats["sub_contract"] += to_number(data.get("subContract"))
            if view != "history":
                stats["industry_total"] += industry_total(record, brand)

    source = stats["color_groups"] if view == "history" else stats[f"{view}_colors"]
    total_weight = stats["combined_total"] if view == "history" else stats["industry_total"]
    chart_data = sorted(
        (
            {"name": name, "weight": weight, "share_pct": share_pct(weight, total_weight)}
            for name, weight in source.items()
            if weight > 0
        ),
        key=lambda row: row["weight"],
        reverse=True,
    )
    stats["total_weight"] = total_weight
    stats["chart_data"] = chart_data
    return stats


def row_display(record: dict, view: str = "history") -> dict:
    """One table row: total/inhouse/subContract and the category split."""
    if view == "history":
        return {
            "total": recompute_total_production(record),
            "inhouse": sum(to_number(industry(record, b).get("inhouse")) for b in BRANDS),
            "sub_contract": sum(to_number(industry(record, b).get("subContract")) for b in BRANDS),
            "color_groups": {
                name: sum(category_table(industry(record, b).get("colorGroups"), [name])[name] for b in BRANDS)
                for name in COLOR_GROUP_NAMES
            },
        }
    data = industry(record, view)
    return {
        "total": industry_total(record, view),
        "inhouse": to_number(data.get("inhouse")),
        "sub_contract": to_number(data.get("subContract")),
        "color_groups": category_table(data.get("colorGroups")),
    }


def apply_industry_edit(record: dict, brand: str, field: str, value: float) -> dict:
    """Copy of a record with one industry cell edited and totals re-derived.

    total       -> inhouse = max(0, total - subContract)
    inhouse     -> total = inhouse + subContract
    subContract -> total = inhouse + subContract
    """
    if brand not in BRAND_REGISTRY:
        raise ValueError(f"Unknown brand: {brand!r}")
    value = to_number(value)
    data = dict(industry(record, brand))
    sub_contract = to_number(data.get("subContract"))

    if field == "total":
        data["total"] = value
        data["inhouse"] = max(0.0, value - sub_contract)
    elif field == "inhouse":
        data["inhouse"] = value
        data["total"] = value + sub_contract
    elif field == "subContract":
        data["subContract"] = value
        data["total"] = to_number(data.get("inhouse")) + value
    else:
        raise ValueError(f"Field {field!r} is not editable")

    updated = {**record, brand: data}
    updated["totalProduction"] = recompute_total_production(updated)
    return updated


def _fmt_kg(value: float, max_decimals: int = 3) -> str:
    if float(value).is_integer():
        return f"{int(value):,}"
    return f"{value:,.{max_decimals}f}".rstrip("0").rstrip(".")


def _industry_block(record: dict, brand: str, records: list[dict]) -> str:
    data = industry(record, brand)
    actual_total = industry_total(record, brand)
    inhouse = to_number(data.get("inhouse"))
    sub_contract = to_number(data.get("subContract"))

    def pct(val):
        return f"{share_pct(val, actual_total):.2f}"

    lines = [
        f"╰─> {brand.capitalize()} Data:",
        f"Total = {_fmt_kg(actual_total)} kg",
    ]
    for name, weight in category_table(data.get("colorGroups")).items():
        if weight > 0:
            lines.append(f"{name}: {_fmt_kg(weight)} kg ({pct(weight)}%)")

    date = record_date(record)
    month_records = filter_month(records, date.month, date.year) if date is not None else []
    month_total = sum(industry_total(r, brand) for r in month_records)
    month_avg = month_total / (len(month_records) or 1)

    lines += [
        "",
        f"Inhouse: {_fmt_kg(inhouse)} kg ({pct(inhouse)}%)",
        f"Sub Contract: {_fmt_kg(sub_contract)} kg ({pct(sub_contract)}%)",
        "",
        "LAB RFT:",
        f"Total this month: {_fmt_kg(month_total)} kg",
        f"Avg/day: {_fmt_kg(month_avg, 1)} kg",
    ]
    return "\n".join(lines)


def record_summary_text(record: dict, records: Iterable[dict], kind: str = "combined") -> str:
    """Plain-text daily summary for pasting into chat.

    kind is "combined" for both brands or a single brand key.
    """
    records = list(records)
    header = f"Date: {format_report_date(record.get('date'))}\n----------------------------\n"
    if kind == "combined":
        return header + "\n\n".join(_industry_block(record, b, records) for b in BRANDS)
    if kind not in BRAND_REGISTRY:
        raise ValueError(f"Unknown summary kind: {kind!r}")
    return header + _industry_block(record, kind, records)
