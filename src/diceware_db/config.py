"""Configuration: default store location, YAML config file and CLI overrides."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Mapping

import yaml

logger = logging.getLogger(__name__)

DB_FILENAME = ".diceware.db"
CONFIG_FILENAME = ".diceware.yaml"

DEFAULTS = {
    "db_path": None,
    "words": 4,
    "strict": False,
    "busy_timeout": 0.0,
    "max_busy_retries": None,
}


def _home(environ: Mapping[str, str] | None = None) -> str:
    env = os.environ if environ is None else environ
    return env.get("HOME") or "."


def default_db_path(environ: Mapping[str, str] | None = None) -> str:
    """Return $HOME/.diceware.db, or ./.diceware.db when HOME is unset."""
    return os.path.join(_home(environ), DB_FILENAME)


def default_config_path(environ: Mapping[str, str] | None = None) -> Path:
    return Path(_home(environ)) / CONFIG_FILENAME


def load_config(path: str | Path | None = None, environ: Mapping[str, str] | None = None) -> dict:
    """Load settings from a YAML file on top of DEFAULTS.

    An explicit path must exist (FileNotFoundError otherwise); the default
    $HOME/.diceware.yaml is optional. Unknown keys are ignored with a warning.
    Raises ValueError if the file is not a YAML mapping.
    """
    config = dict(DEFAULTS)
    if path is None:
        path = default_config_path(environ)
        if not path.exists():
            return config
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Config file '{path}' not found.")
    with open(path) as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Config file '{path}' must contain a mapping, got {type(data).__name__}.")
    for key, value in data.items():
        if key not in DEFAULTS:
            logger.warning("ignoring unknown config key '%s' in %s", key, path)
            continue
        config[key] = value
    return config


def merge_config(config: dict, overrides: dict) -> dict:
    """Merge config with CLI overrides. None values in overrides are ignored."""
    result = dict(config)
    for key, value in overrides.items():
        if value is not None:
            result[key] = value
    return result
