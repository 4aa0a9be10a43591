from __future__ import annotations

import importlib.util
from typing import Dict, List, Optional

from ..sql import dialects
from .base import Driver, DriverConnection

_DRIVERS: Dict[str, Driver] = {}

# Open handles keyed by connection name (one per Session instance).
_CONNECTIONS: Dict[str, DriverConnection] = {}


def register_driver(driver: Driver) -> None:
    name = getattr(driver, "name", None)
    if not name or not isinstance(name, str):
        raise ValueError("Driver must define a non-empty .name")
    _DRIVERS[name.lower()] = driver


def unregister_driver(name: str) -> None:
    _DRIVERS.pop((name or "").lower(), None)


def get_driver(name: str) -> Driver:
    k = (name or "").lower()
    if k not in _DRIVERS:
        # accept dialect aliases such as "QMYSQL" or "postgresql"
        try:
            k = dialects.get(name).name
        except KeyError:
            pass
    if k not in _DRIVERS:
        available = ", ".join(sorted(_DRIVERS.keys()))
        raise KeyError(f"Unknown driver '{name}'. Available: {available}")
    return _DRIVERS[k]


def _importable(module: str) -> bool:
    try:
        return importlib.util.find_spec(module) is not None
    except (ImportError, ValueError):
        return False


def available_drivers() -> List[str]:
    """Registered drivers whose backing module can be imported here."""
    return [name for name in sorted(_DRIVERS) if _importable(_DRIVERS[name].module)]


def mysql_postgres_drivers(names: Optional[List[str]] = None) -> List[str]:
    """Presentation filter used by connection dialogs."""
    names = available_drivers() if names is None else names
    return [n for n in names if "mysql" in n.lower() or "psql" in n.lower() or "postgres" in n.lower()]


def add_connection(name: str, conn: DriverConnection) -> None:
    if name in _CONNECTIONS:
        raise ValueError(f"connection '{name}' is already registered")
    _CONNECTIONS[name] = conn


def remove_connection(name: str) -> Optional[DriverConnection]:
    return _CONNECTIONS.pop(name, None)


def contains(name: str) -> bool:
    return name in _CONNECTIONS


def connection_names() -> List[str]:
    return sorted(_CONNECTIONS)
