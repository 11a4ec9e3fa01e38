"""Shared configuration utilities."""

import os
from pathlib import Path

import yaml


def load_yaml(path: Path) -> dict:
    """Load a YAML (or JSON) file and return a dict.

    Empty documents load as an empty dict.
    """
    with open(path, encoding="utf-8") as f:
        data = yaml.safe_load(f)
    return data if data is not None else {}


def env_path(env_var: str, default: str | Path) -> Path:
    """Path from an environment variable, or the given default."""
    value = os.environ.get(env_var)
    return Path(value) if value else Path(default)
