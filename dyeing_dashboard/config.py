"""
Configuration: brand registry, colour-group categories, targets, store paths.

Environment-backed settings (store URL, extraction endpoint, admin passkey)
are read once at import time from the process environment or a local .env
file.
"""

import os

from dotenv import load_dotenv

load_dotenv()

# ---------------------------------------------------------------------------
# Environment settings
# ---------------------------------------------------------------------------
STORE_URL = os.getenv("DASHBOARD_STORE_URL", "")
STORE_TOKEN = os.getenv("DASHBOARD_STORE_TOKEN", "")
EXTRACTION_URL = os.getenv("DASHBOARD_EXTRACTION_URL", "http://localhost:8888")
ADMIN_PASSKEY = os.getenv("ADMIN_PASSKEY", "")
HTTP_TIMEOUT = float(os.getenv("DASHBOARD_HTTP_TIMEOUT", "60"))

# ---------------------------------------------------------------------------
# Store collection paths
# ---------------------------------------------------------------------------
PRODUCTION_PATH = "production_records"
RFT_PATH = "rft_records"
DYEING_PROGRAM_PATH = "dyeing_programs"
SUPERVISOR_SETTINGS_PATH = "app_settings/supervisors"

# ---------------------------------------------------------------------------
# Brand registry
# ---------------------------------------------------------------------------
# revenue_rate: USD per kg used by the revenue view
BRAND_REGISTRY: dict[str, dict] = {
    "lantabur": {
        "label": "Lantabur",
        "display_name": "Lantabur Group",
        "revenue_rate": 1.25,
    },
    "taqwa": {
        "label": "Taqwa",
        "display_name": "Taqwa Textiles",
        "revenue_rate": 1.18,
    },
}
BRANDS = tuple(BRAND_REGISTRY)

WATER_LITRES_PER_KG = 45
CO2_KG_PER_KG = 2.3

DAILY_PRODUCTION_TARGET = 60_000

# ---------------------------------------------------------------------------
# Colour-group categories
# ---------------------------------------------------------------------------
# Fixed display/export order for category tables
COLOR_GROUP_NAMES = [
    "100% Polyester",
    "Average",
    "Black",
    "Dark",
    "Extra Dark",
    "DOUBLE PART",
    "Light",
    "Medium",
    "N/wash",
    "Royal",
    "White",
]

# Canonical (upper-cased) category -> accepted upper-cased labels.
# Categories not listed here match on their own name only.
CATEGORY_ALIASES: dict[str, frozenset[str]] = {
    "DOUBLE PART": frozenset({
        "DOUBLE PART",
        "DOUBLE PART -BLACK",
        "DOUBLE PART-BLACK",
        "DOUBLE PART -BLAC",
        "DOUBLE PART-BLAC",
        "DOUBLE PART - BLACK",
    }),
    "N/WASH": frozenset({"N/WASH", "NORMAL WASH", "N-WASH"}),
}

# Loose portfolio grouping collapses anything containing this marker
PORTFOLIO_COLLAPSE_MARKER = "DOUBLE PART"
PORTFOLIO_FALLBACK_GROUP = "MISC"

# ---------------------------------------------------------------------------
# RFT / shift performance
# ---------------------------------------------------------------------------
BULK_DYEING_MARKER = "B/D CARD"
LAB_DYEING_MARKER = "LAB"

SHIFT_TARGET = 12_250

DEFAULT_SUPERVISOR_SETTINGS: dict = {
    "supervisorA": "YOUSUF",
    "supervisorB": "HUMAYUN",
    "totalShifts": 2,
    "dailyTarget": DAILY_PRODUCTION_TARGET,
}
DEFAULT_SUPERVISORS = ("YOUSUF", "HUMAYUN")

# Friday day-count -> (clock in, clock out)
FRIDAY_SHIFT_WINDOWS: dict[float, tuple[str, str]] = {
    0.25: ("08:00 AM", "02:00 PM"),
    0.75: ("02:00 PM", "08:00 AM"),
    1.0: ("08:00 AM", "08:00 AM"),
}
FRIDAY_UNKNOWN_WINDOW = ("--:--", "--:--")

DEFAULT_RFT_ENTRY: dict = {
    "mc": "",
    "batchNo": "",
    "buyer": "",
    "order": "",
    "colour": "",
    "colorGroup": "",
    "fType": "",
    "fQty": 0,
    "loadCapPercent": 0,
    "shadeOk": True,
    "shadeNotOk": False,
    "dyeingType": BULK_DYEING_MARKER,
    "shiftUnload": "DAY",
    "remarks": "",
}
DEFAULT_UNIT = "Unit-02"
DEFAULT_COMPANY = "Lantabur Apparels Ltd."

# ---------------------------------------------------------------------------
# Monthly management report (PDF sections, in page order)
# ---------------------------------------------------------------------------
REPORT_SECTIONS = [
    {"key": "cover", "title": "Executive Production Summary", "orientation": "portrait"},
    {"key": "brands", "title": "Brand Performance", "orientation": "portrait"},
    {"key": "unit_comparison", "title": "Unit Comparison", "orientation": "landscape"},
    {"key": "segments", "title": "Colour Segment Distribution", "orientation": "portrait"},
    {"key": "shifts", "title": "Shift Performance", "orientation": "portrait"},
    {"key": "shift_table", "title": "Daily Shift Register", "orientation": "landscape"},
]

# ---------------------------------------------------------------------------
# Calendar constants
# ---------------------------------------------------------------------------
MONTH_NAMES = [
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
]
