"""
Shared utilities for record ingestion: report-date parsing, numeric coercion.
"""

import logging
import math
import re
from datetime import date, datetime
from typing import Any

import pandas as pd

logger = logging.getLogger(__name__)

# Report dates arrive in whatever format the source document used:
# "05 Jan 2026" (form entry), "1-Feb-26" (RFT sheet header), "01/02/2026"
# (day first) or ISO.
_DATE_FORMATS = (
    "%d %b %Y",
    "%d %B %Y",
    "%d %b %y",
    "%d-%b-%y",
    "%d-%b-%Y",
    "%d/%m/%Y",
    "%d/%m/%y",
    "%d.%m.%Y",
    "%Y-%m-%d",
)

_SEPT = re.compile(r"\bSept\b", re.IGNORECASE)


def parse_report_date(val: Any) -> pd.Timestamp | None:
    """Convert a report date to a midnight pd.Timestamp.

    Returns None for empty or unparseable values so callers can skip the
    record instead of aborting an aggregation loop.
    """
    if val is None:
        return None
    if isinstance(val, pd.Timestamp):
        return None if pd.isna(val) else val.normalize()
    if isinstance(val, (datetime, date)):
        return pd.Timestamp(val).normalize()

    text = _SEPT.sub("Sep", str(val).strip())
    if not text:
        return None

    for fmt in _DATE_FORMATS:
        try:
            return pd.Timestamp(datetime.strptime(text, fmt))
        except ValueError:
            continue

    # createdAt-style ISO timestamps
    try:
        parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        logger.warning("Could not parse report date: %r", val)
        return None
    return pd.Timestamp(parsed.replace(tzinfo=None)).normalize()


def record_date(record: dict) -> pd.Timestamp | None:
    """Parsed date of a store record, or None."""
    return parse_report_date((record or {}).get("date"))


def format_report_date(val: Any, upper: bool = False) -> str:
    """Format as "05 Jan 2026" ("05 JAN 2026" when upper).

    Falls back to the raw input when it cannot be parsed.
    """
    ts = parse_report_date(val)
    if ts is None:
        return "" if val is None else str(val)
    text = ts.strftime("%d %b %Y")
    return text.upper() if upper else text


def safe_float(val: Any) -> float | None:
    """Coerce a value to float, returning None for non-numeric values."""
    if val is None or isinstance(val, bool):
        return None
    if isinstance(val, str):
        val = val.strip().replace(",", "")
        if not val:
            return None
        if val.endswith("%"):
            val = val[:-1]
    try:
        number = float(val)
    except (ValueError, TypeError):
        return None
    if math.isnan(number) or math.isinf(number):
        return None
    return number


def to_number(val: Any, default: float = 0.0) -> float:
    """safe_float with a default for missing/non-numeric input."""
    number = safe_float(val)
    return default if number is None else number
