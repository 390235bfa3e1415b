"""
Simulated data generator for the dyeing dashboard.

Generates production, RFT and dyeing-program records in the store's own
record format, so every aggregation path can run without a live store.
All values are synthetic.
"""

import uuid

import numpy as np
import pandas as pd

from .config import BRAND_REGISTRY, DEFAULT_SUPERVISORS

# ---------------------------------------------------------------------------
# Typical mill parameters (kg per day)
# ---------------------------------------------------------------------------
_BRAND_PARAMS = {
    "lantabur": {"mean": 32_000, "std": 3_500, "subcon_share": 0.18},
    "taqwa": {"mean": 24_000, "std": 3_000, "subcon_share": 0.12},
}

# Relative weight of each colour category in a typical day
_CATEGORY_MIX = {
    "100% Polyester": 0.04,
    "Average": 0.16,
    "Black": 0.12,
    "Dark": 0.14,
    "Extra Dark": 0.06,
    "DOUBLE PART": 0.05,
    "Light": 0.15,
    "Medium": 0.13,
    "N/wash": 0.04,
    "Royal": 0.03,
    "White": 0.08,
}

# Raw labels as they appear on scanned reports, per category
_LABEL_VARIANTS = {
    "DOUBLE PART": ["DOUBLE PART", "Double Part-Black", "DOUBLE PART - BLACK"],
    "N/wash": ["N/wash", "Normal Wash", "N-WASH"],
}

_BUYERS = ["H&M", "PRIMARK", "C&A", "KIABI", "LPP", "TESCO"]
_FABRICS = ["S/J", "RIB", "PIQUE", "FLEECE", "INTERLOCK"]
_COLOURS = ["NAVY", "BLACK", "RED", "OPTIC WHITE", "GREY MEL", "ROYAL BLUE", "OLIVE"]
_COLOR_GROUPS = ["Dark", "Medium", "Light", "Black", "WHITE", "Average", "N/WASH", "Royal"]


def _rng(seed: int | None) -> np.random.Generator:
    return np.random.default_rng(42 if seed is None else seed)


def _color_groups(rng: np.random.Generator, total: float) -> list[dict]:
    names = list(_CATEGORY_MIX)
    shares = rng.dirichlet(np.array(list(_CATEGORY_MIX.values())) * 40)
    groups = []
    for name, share in zip(names, shares):
        weight = round(float(total * share))
        if weight <= 0:
            continue
        label = rng.choice(_LABEL_VARIANTS[name]) if name in _LABEL_VARIANTS else name
        groups.append({"groupName": str(label), "weight": weight})
    return groups


def generate_production_records(
    start: str = "2026-01-01",
    n_days: int = 60,
    seed: int | None = None,
) -> list[dict]:
    """Daily production records for both brands, dated "05 Jan 2026"."""
    rng = _rng(seed)
    records = []
    for day in pd.date_range(start, periods=n_days, freq="D"):
        record = {
            "id": str(uuid.UUID(int=int(rng.integers(0, 2**62)))),
            "date": day.strftime("%d %b %Y"),
            "createdAt": day.isoformat(),
        }
        total_production = 0.0
        for brand, params in _BRAND_PARAMS.items():
            # Friday is a short day
            scale = 0.35 if day.dayofweek == 4 else 1.0
            total = max(0.0, round(float(rng.normal(params["mean"], params["std"]) * scale)))
            sub_contract = round(total * params["subcon_share"])
            record[brand] = {
                "name": BRAND_REGISTRY[brand]["label"],
                "total": total,
                "inhouse": total - sub_contract,
                "subContract": sub_contract,
                "colorGroups": _color_groups(rng, total),
            }
            total_production += total
        record["totalProduction"] = total_production
        records.append(record)
    return records


def _batch(rng: np.random.Generator, shift: str, lab: bool) -> dict:
    group = str(rng.choice(_COLOR_GROUPS))
    ok = bool(rng.random() < (0.78 if lab else 0.9))
    return {
        "mc": f"M-{int(rng.integers(1, 40)):02d}",
        "batchNo": str(int(rng.integers(100_000, 999_999))),
        "buyer": str(rng.choice(_BUYERS)),
        "order": f"ORD-{int(rng.integers(1000, 9999))}",
        "colour": str(rng.choice(_COLOURS)),
        "colorGroup": group,
        "fType": str(rng.choice(_FABRICS)),
        "fQty": round(float(rng.uniform(20, 60) if lab else rng.uniform(300, 1400)), 1),
        "loadCapPercent": round(float(rng.uniform(70, 100)), 1),
        "shadeOk": ok,
        "shadeNotOk": not ok,
        "dyeingType": "LAB" if lab else "B/D CARD",
        "shiftUnload": f"{shift} {'DAY' if shift == DEFAULT_SUPERVISORS[0] else 'NIGHT'}",
        "remarks": "" if ok else str(rng.choice(["RE-DYE", "RE MATCH", "SHADE OUT"])),
    }


def generate_rft_records(
    start: str = "2026-01-01",
    n_days: int = 60,
    seed: int | None = None,
) -> list[dict]:
    """Daily RFT reports dated "01/01/2026" with both supervisors' batches."""
    rng = _rng(seed)
    records = []
    for day in pd.date_range(start, periods=n_days, freq="D"):
        entries = []
        for shift in DEFAULT_SUPERVISORS:
            entries += [_batch(rng, shift, lab=False) for _ in range(int(rng.integers(6, 14)))]
            entries += [_batch(rng, shift, lab=True) for _ in range(int(rng.integers(1, 4)))]
        records.append({
            "id": str(uuid.UUID(int=int(rng.integers(0, 2**62)))),
            "date": day.strftime("%d/%m/%Y"),
            "unit": "Unit-02",
            "companyName": "Lantabur Apparels Ltd.",
            "entries": entries,
            "createdAt": day.isoformat(),
        })
    return records


def generate_dyeing_programs(
    start: str = "2026-01-01",
    n_days: int = 30,
    seed: int | None = None,
) -> list[dict]:
    """One dyeing program per brand and day, dated "05-Jan-26"."""
    rng = _rng(seed)
    records = []
    for day in pd.date_range(start, periods=n_days, freq="D"):
        for brand in BRAND_REGISTRY:
            entries = []
            for sl in range(1, int(rng.integers(3, 9)) + 1):
                inhouse = round(float(rng.uniform(200, 1500)))
                subcontact = round(float(rng.uniform(0, 400))) if rng.random() < 0.3 else 0
                entries.append({
                    "sl": str(sl),
                    "buyer": str(rng.choice(_BUYERS)),
                    "orderNo": f"ORD-{int(rng.integers(1000, 9999))}",
                    "colour": str(rng.choice(_COLOURS)),
                    "fType": str(rng.choice(_FABRICS)),
                    "gsm": str(int(rng.integers(140, 280))),
                    "inhouse": inhouse,
                    "subcontact": subcontact,
                    "totalQty": inhouse + subcontact,
                })
            records.append({
                "id": str(uuid.UUID(int=int(rng.integers(0, 2**62)))),
                "industry": brand,
                "date": day.strftime("%d-%b-%y"),
                "unit": "Unit-02",
                "inhouseTotal": sum(e["inhouse"] for e in entries),
                "subcontTotal": sum(e["subcontact"] for e in entries),
                "grandTotal": sum(e["totalQty"] for e in entries),
                "entries": entries,
                "createdAt": day.isoformat(),
            })
    return records
