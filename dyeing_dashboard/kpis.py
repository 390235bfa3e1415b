"""
KPI computation functions: pure, with no side effects.

Every ratio computed from user-entered or extracted counts goes through one
of these helpers so the zero-denominator guard is applied consistently.
"""

import logging

from .config import BRAND_REGISTRY, CO2_KG_PER_KG, WATER_LITRES_PER_KG

logger = logging.getLogger(__name__)


def percent_change(current: float, previous: float) -> float:
    """Return (current - previous) / max(1, previous) * 100.

    The floor on the baseline prevents a divide-by-zero and a sign flip when
    the previous value is zero or negative.
    """
    return (current - previous) / max(1, previous) * 100


def share_pct(part: float, whole: float) -> float:
    """part as a percentage of whole, with the whole floored at 1."""
    return part / max(1, whole) * 100


def ratio_pct(numerator: float, denominator: float) -> float:
    """100 * numerator / denominator, or 0 when the denominator is 0."""
    if not denominator:
        return 0.0
    return numerator / denominator * 100


def average(total: float, count: int | float) -> float:
    """total / count, or 0 when count is 0."""
    if not count:
        return 0.0
    return total / count


def revenue(weights: dict[str, float]) -> float:
    """Brand weights (kg) converted to revenue with the per-brand rate."""
    total = 0.0
    for brand, weight in weights.items():
        rate = BRAND_REGISTRY.get(brand, {}).get("revenue_rate", 0.0)
        total += (weight or 0) * rate
    return total


def environmental_footprint(weight_kg: float) -> dict:
    """Water (litres) and CO2 (kg) attributed to a processed weight."""
    return {
        "water_litres": weight_kg * WATER_LITRES_PER_KG,
        "co2_kg": weight_kg * CO2_KG_PER_KG,
    }


def target_progress(actual: float, target: float) -> dict:
    """Progress against a daily quota.

    Returns
    -------
    {"progress_pct": capped at 100, "shortfall": never negative, "target": target}
    """
    progress = min(100.0, ratio_pct(actual, target))
    return {
        "progress_pct": progress,
        "shortfall": max(0.0, target - actual),
        "target": target,
    }
