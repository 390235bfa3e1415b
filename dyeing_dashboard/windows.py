"""
Time-window selection over store records.

Records whose date cannot be parsed are excluded from every window except
"total"/"all".
"""

import logging
from typing import Any, Iterable

import pandas as pd

from .loaders.utils import parse_report_date, record_date

logger = logging.getLogger(__name__)

WINDOWS = ("today", "week", "month", "year", "total", "all")


def start_of_week(reference: Any) -> pd.Timestamp:
    """Most recent Sunday (or the day itself when Sunday), at midnight."""
    ref = _as_timestamp(reference)
    # pandas: Monday == 0 ... Sunday == 6
    days_since_sunday = (ref.dayofweek + 1) % 7
    return ref - pd.Timedelta(days=days_since_sunday)


def in_window(date: pd.Timestamp | None, window: str, reference: Any) -> bool:
    """True when a parsed record date falls inside the named window."""
    if window in ("total", "all"):
        return True
    if window not in WINDOWS:
        raise ValueError(f"Unknown time window: {window!r}")
    if date is None:
        return False

    ref = _as_timestamp(reference)
    if window == "today":
        return date == ref
    if window == "week":
        return start_of_week(ref) <= date <= ref
    if window == "month":
        return date.month == ref.month and date.year == ref.year
    return date.year == ref.year


def filter_records(records: Iterable[dict], window: str, reference: Any) -> list[dict]:
    """Records inside a today/week/month/year/total window around reference."""
    if window in ("total", "all"):
        return list(records)
    ref = _as_timestamp(reference)
    return [r for r in records if in_window(record_date(r), window, ref)]


def filter_date_range(
    records: Iterable[dict],
    start: Any = None,
    end: Any = None,
) -> list[dict]:
    """Records dated within [start 00:00:00, end 23:59:59.999].

    Either bound may be omitted; with neither, every record passes
    (including those with unparseable dates).
    """
    records = list(records)
    start_ts = parse_report_date(start) if start else None
    end_ts = parse_report_date(end) if end else None
    if start_ts is None and end_ts is None:
        return records
    if end_ts is not None:
        end_ts = end_ts + pd.Timedelta(days=1) - pd.Timedelta(milliseconds=1)

    result = []
    for record in records:
        date = record_date(record)
        if date is None:
            continue
        if start_ts is not None and date < start_ts:
            continue
        if end_ts is not None and date > end_ts:
            continue
        result.append(record)
    return result


def filter_month(records: Iterable[dict], month: int, year: int) -> list[dict]:
    """Records in a calendar month (1-based month)."""
    result = []
    for record in records:
        date = record_date(record)
        if date is not None and date.month == month and date.year == year:
            result.append(record)
    return result


def filter_year(records: Iterable[dict], year: int) -> list[dict]:
    """Records in a calendar year."""
    result = []
    for record in records:
        date = record_date(record)
        if date is not None and date.year == year:
            result.append(record)
    return result


def sort_by_date(records: Iterable[dict], descending: bool = True) -> list[dict]:
    """Records ordered by parsed date; unparseable dates always sort last."""
    dated = []
    undated = []
    for record in records:
        date = record_date(record)
        if date is None:
            undated.append(record)
        else:
            dated.append((date, record))
    dated.sort(key=lambda pair: pair[0], reverse=descending)
    return [record for _, record in dated] + undated


def _as_timestamp(reference: Any) -> pd.Timestamp:
    ref = parse_report_date(reference)
    if ref is None:
        raise ValueError(f"Invalid reference date: {reference!r}")
    return ref
