"""Configuration management for budget analytics.

This module centralizes all configuration values including paths,
defaults, and environment variable overrides.
"""

from __future__ import annotations

import os
from pathlib import Path

# Base project root - assumes this file is in budget_analytics/
_PROJECT_ROOT = Path(__file__).parent.parent.resolve()

# Data directories
DATA_DIR = Path(os.getenv("BUDGET_DATA_DIR", _PROJECT_ROOT / "data"))
EXPORTS_DIR = Path(os.getenv("BUDGET_EXPORTS_DIR", DATA_DIR / "exports"))

# Database
DB_PATH = Path(
    os.getenv("BUDGET_DB_PATH", DATA_DIR / "budget.db")
).resolve()

LOG_LEVEL_ENV = "BUDGET_LOG_LEVEL"

# Display / analytics defaults
DEFAULT_PAGE_SIZE = 20
CURRENCY = "CHF"
SIGNIFICANT_CHANGE_THRESHOLD = 10.0


def ensure_data_directories() -> None:
    """Create all required data directories if they don't exist."""
    for directory in [DATA_DIR, EXPORTS_DIR, DB_PATH.parent]:
        directory.mkdir(parents=True, exist_ok=True)
