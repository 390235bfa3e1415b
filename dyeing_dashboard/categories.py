"""
Colour-group category normalisation.

Two grouping paths exist and deliberately differ:

- Strict category lookup (group_total / category_table): fixed category list,
  alias sets for DOUBLE PART and N/WASH, exact match otherwise. Unknown labels
  never reach a category.
- Loose portfolio grouping (portfolio_key / build_color_portfolio): upper-case
  and trim only, collapsing anything containing "DOUBLE PART". N/WASH
  variants stay separate buckets here.
"""

import logging
from typing import Iterable

from .config import (
    BRANDS,
    CATEGORY_ALIASES,
    COLOR_GROUP_NAMES,
    PORTFOLIO_COLLAPSE_MARKER,
    PORTFOLIO_FALLBACK_GROUP,
)
from .loaders.utils import to_number

logger = logging.getLogger(__name__)


def normalise_label(label) -> str:
    """Trimmed, upper-cased label ("" for None)."""
    return str(label or "").strip().upper()


def category_aliases(canonical_name: str) -> frozenset[str]:
    """Upper-cased labels that count towards a canonical category."""
    key = normalise_label(canonical_name)
    return CATEGORY_ALIASES.get(key, frozenset({key}))


def group_total(groups: Iterable[dict] | None, canonical_name: str) -> float:
    """Sum the weight of every colour group that maps to canonical_name.

    Non-numeric or missing weights count as zero.
    """
    if not groups:
        return 0.0
    aliases = category_aliases(canonical_name)
    total = 0.0
    for group in groups:
        if normalise_label(group.get("groupName")) in aliases:
            total += to_number(group.get("weight"))
    return total


def category_table(
    groups: Iterable[dict] | None,
    names: list[str] | None = None,
) -> dict[str, float]:
    """Weight per fixed category, in display order."""
    groups = list(groups or [])
    return {name: group_total(groups, name) for name in (names or COLOR_GROUP_NAMES)}


def portfolio_key(label) -> str:
    """Bucket name used by the portfolio-wide colour aggregation.

    Only a missing or empty label falls back to MISC; a whitespace-only label
    trims to its own empty bucket.
    """
    key = normalise_label(label or PORTFOLIO_FALLBACK_GROUP)
    if PORTFOLIO_COLLAPSE_MARKER in key:
        return PORTFOLIO_COLLAPSE_MARKER
    return key


def build_color_portfolio(records: Iterable[dict]) -> list[dict]:
    """Aggregate colour-group weight per portfolio bucket and brand.

    Returns
    -------
    List of {"group", "lantabur", "taqwa", "total"} rows with total > 0,
    heaviest first.
    """
    buckets: dict[str, dict[str, float]] = {}
    for record in records:
        for brand in BRANDS:
            industry = record.get(brand) or {}
            for group in industry.get("colorGroups") or []:
                key = portfolio_key(group.get("groupName"))
                bucket = buckets.setdefault(key, {b: 0.0 for b in BRANDS})
                bucket[brand] += to_number(group.get("weight"))

    rows = []
    for key, weights in buckets.items():
        total = sum(weights.values())
        if total > 0:
            rows.append({"group": key, **weights, "total": total})
    rows.sort(key=lambda row: row["total"], reverse=True)
    return rows


def segment_distribution(records: Iterable[dict], brand: str) -> list[dict]:
    """Upper-cased label -> summed weight for one brand, heaviest first.

    Used by the monthly management report; no alias handling at all.
    """
    groups: dict[str, float] = {}
    for record in records:
        for group in (record.get(brand) or {}).get("colorGroups") or []:
            name = str(group.get("groupName") or "").upper()
            groups[name] = groups.get(name, 0.0) + to_number(group.get("weight"))
    return sorted(
        ({"name": name, "weight": weight} for name, weight in groups.items()),
        key=lambda row: row["weight"],
        reverse=True,
    )
