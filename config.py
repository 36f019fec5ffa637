"""
PPC Metrics – config (from .env in this folder).
"""

import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

# Load .env from this project folder
_ROOT = Path(__file__).resolve().parent
_ENV_FILE = _ROOT / ".env"
if _ENV_FILE.exists():
    load_dotenv(_ENV_FILE)

LOG_LEVEL = (os.getenv("LOG_LEVEL", "INFO") or "INFO").upper()
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

# GAQL: channel filter applied to campaign queries (empty string disables it)
CAMPAIGN_CHANNEL_TYPE = os.getenv("CAMPAIGN_CHANNEL_TYPE", "PERFORMANCE_MAX")
DEFAULT_METRICS_DAYS = int(os.getenv("DEFAULT_METRICS_DAYS", "30"))

# Budget pacing: rolling window for average daily spend, month length for projections
PACING_WINDOW_DAYS = int(os.getenv("PACING_WINDOW_DAYS", "7"))
DAYS_PER_MONTH = int(os.getenv("DAYS_PER_MONTH", "30"))
# Pacing ratio (avg daily spend / daily budget) below this is UNDERSPENDING, above the other OVERSPENDING
PACING_UNDERSPEND_THRESHOLD = float(os.getenv("PACING_UNDERSPEND_THRESHOLD", "0.5"))
PACING_OVERSPEND_THRESHOLD = float(os.getenv("PACING_OVERSPEND_THRESHOLD", "1.0"))

MICROS_PER_UNIT = 1_000_000


def normalize_campaign_id(campaign_id: Optional[object]) -> str:
    """Normalize a Google Ads id for use in GAQL (no dashes, no whitespace)."""
    if campaign_id is None:
        return ""
    return str(campaign_id).replace("-", "").strip()
