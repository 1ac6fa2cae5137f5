"""Configuration management for BudgetEase.

This module centralizes all configuration values including paths,
external service endpoints, and environment variable overrides.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Optional

# Base project root - assumes this file is in budgetease/
_PROJECT_ROOT = Path(__file__).parent.parent.resolve()

# Data directories
DATA_DIR = Path(os.getenv("BUDGETEASE_DATA_DIR", _PROJECT_ROOT / "data"))

# Database
DB_PATH = Path(
    os.getenv("BUDGETEASE_DB_PATH", DATA_DIR / "budgetease.db")
).resolve()

# External services
SCHEDULE_WEBHOOK_URL: Optional[str] = os.getenv("BUDGETEASE_SCHEDULE_WEBHOOK_URL")
COMPLETION_API_URL = os.getenv(
    "BUDGETEASE_COMPLETION_API_URL",
    "https://generativelanguage.googleapis.com/v1beta/models/gemini-1.5-flash-latest:generateContent",
)
COMPLETION_API_KEY: Optional[str] = os.getenv("BUDGETEASE_COMPLETION_API_KEY")

# Seconds; requests waits forever without one
REQUEST_TIMEOUT = float(os.getenv("BUDGETEASE_REQUEST_TIMEOUT", "30"))

# Logging
LOG_LEVEL = os.getenv("BUDGETEASE_LOG_LEVEL", "INFO").upper()
LOG_DIR: Optional[str] = os.getenv("BUDGETEASE_LOG_DIR")


def ensure_data_directories() -> None:
    """Create all required data directories if they don't exist."""
    DATA_DIR.mkdir(parents=True, exist_ok=True)


def get_db_path() -> str:
    """Get the database path as a string."""
    return str(DB_PATH)
