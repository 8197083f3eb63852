"""Environment-driven defaults shared by the console and HTTP front-ends."""

from __future__ import annotations

import os
from pathlib import Path

DATA_DIR_ENV = "EXPENSE_TRACKER_DATA_DIR"
DEFAULT_DATA_DIR = "data"


def default_data_dir() -> Path:
    """Directory holding the JSON blobs, overridable through the environment."""
    return Path(os.getenv(DATA_DIR_ENV) or DEFAULT_DATA_DIR)
