"""Global configuration and environment lookups."""

from __future__ import annotations

import json
import os
from pathlib import Path

DEFAULT_MODEL = "gpt-4o-mini"


def global_config_dir() -> Path:
    config = Path.home() / ".config" / "life-sim"
    config.mkdir(parents=True, exist_ok=True)
    return config


def load_global_config() -> dict:
    path = global_config_dir() / "config.json"
    if path.exists():
        return json.loads(path.read_text())
    return {}


def save_global_config(config: dict) -> None:
    path = global_config_dir() / "config.json"
    path.write_text(json.dumps(config, indent=2))


def get_api_key() -> str | None:
    return os.environ.get("OPENAI_API_KEY") or None


def get_base_url() -> str | None:
    return os.environ.get("OPENAI_BASE_URL") or None


def get_model() -> str:
    """LIFE_SIM_MODEL, then the ``model`` config key, then the default."""
    return os.environ.get("LIFE_SIM_MODEL") or load_global_config().get("model") or DEFAULT_MODEL
