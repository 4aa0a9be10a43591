"""
Configuration loading for the gridsql CLI.

Loads a YAML/JSON file and returns a typed config object.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

CONFIG_ENV_VAR = "GRIDSQL_CONFIG"
DEFAULT_STORE_PATH = Path.home() / ".config" / "gridsql" / "servers.yaml"


@dataclass(frozen=True)
class GridConfig:
    """Loaded CLI configuration."""

    store_path: Path = DEFAULT_STORE_PATH
    log_level: str = "WARNING"
    default_driver: Optional[str] = None  # overrides the store's setting when set

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> GridConfig:
        store = d.get("store_path")
        level = str(d.get("log_level") or "WARNING").upper()
        return cls(
            store_path=Path(store).expanduser() if store else DEFAULT_STORE_PATH,
            log_level=level,
            default_driver=str(d["default_driver"]) if d.get("default_driver") else None,
        )


def load_config(path: str) -> GridConfig:
    """
    Load configuration from a YAML or JSON file.

    The file must contain a mapping; every key is optional.
    """
    p = Path(path)
    text = p.read_text(encoding="utf-8")
    obj = yaml.safe_load(text)
    if obj is None:
        return GridConfig()
    if not isinstance(obj, dict):
        raise ValueError(f"Config file must be a YAML/JSON object, got {type(obj).__name__}")
    return GridConfig.from_dict(obj)


def resolve_config(path: Optional[str] = None) -> GridConfig:
    """Explicit path first, then $GRIDSQL_CONFIG, then defaults."""
    path = path or os.environ.get(CONFIG_ENV_VAR)
    if not path:
        return GridConfig()
    return load_config(path)
