"""Path utilities for locating the life-sim data directory."""

from __future__ import annotations

import os
from pathlib import Path

STORE_DIR = ".life-sim"

HOME_ENV = "LIFE_SIM_HOME"


def find_data_root(start: Path | None = None) -> Path | None:
    """Return $LIFE_SIM_HOME, or walk up from start to a directory containing .life-sim/."""
    override = os.environ.get(HOME_ENV)
    if override:
        return Path(override).expanduser().resolve()
    current = (start or Path.cwd()).resolve()
    for parent in [current, *current.parents]:
        if (parent / STORE_DIR).is_dir():
            return parent
    return None
