"""Configuration management for the household budget package.

Storage locations can be overridden through ``HOUSEHOLD_BUDGET_*``
environment variables; the domain constants below are fixed.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional

# Base project root - assumes this file is in household_budget/
_PROJECT_ROOT = Path(__file__).parent.parent.resolve()

# Data directories
DATA_DIR = Path(os.getenv("HOUSEHOLD_BUDGET_DATA_DIR", _PROJECT_ROOT / "data"))

# Database
DB_PATH = Path(
    os.getenv("HOUSEHOLD_BUDGET_DB_PATH", DATA_DIR / "household.db")
).resolve()

# Last auto-registration check markers, one entry per user/browser context
MARKER_PATH = Path(
    os.getenv("HOUSEHOLD_BUDGET_MARKER_PATH", DATA_DIR / "auto_register_marker.json")
).resolve()

LOG_LEVEL = os.getenv("HOUSEHOLD_BUDGET_LOG_LEVEL", "INFO")

# Domain constants
SAVINGS_CATEGORY_ID = "savings"
OTHER_CATEGORY_NAME = "Other"
DEFAULT_TREND_MONTHS = 6
REPRESENTATIVE_DAY = 15
AUTO_REGISTER_MEMO_PREFIX = "[Auto]"
LAST_CHECK_KEY = "lastAutoRegisterCheck"


def ensure_data_directories() -> None:
    """Create all required data directories if they don't exist."""
    for directory in [DATA_DIR, DB_PATH.parent, MARKER_PATH.parent]:
        directory.mkdir(parents=True, exist_ok=True)


def configure_logging(level: Optional[str] = None) -> None:
    """Configure root logging for scripts and interactive use."""
    logging.basicConfig(
        level=(level or LOG_LEVEL).upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def get_db_path() -> str:
    """Get the database path as a string."""
    return str(DB_PATH)
