from __future__ import annotations

from typing import Dict, Optional
from .base import QuotingDialect, SQLDialect

_REGISTRY: Dict[str, SQLDialect] = {}
_ALIASES: Dict[str, str] = {}

# Unrecognized drivers quote with backticks and have no database listing.
FALLBACK: SQLDialect = QuotingDialect()


def register(dialect: SQLDialect) -> None:
    name = getattr(dialect, "name", None)
    if not name or not isinstance(name, str):
        raise ValueError("Dialect must define a non-empty .name")
    key = name.lower()
    _REGISTRY[key] = dialect
    _ALIASES[key] = key
    for alias in getattr(dialect, "aliases", ()) or ():
        _ALIASES[alias.lower()] = key


def get(name: str) -> SQLDialect:
    k = _ALIASES.get((name or "").lower())
    if k is None:
        available = ", ".join(sorted(_REGISTRY.keys()))
        raise KeyError(f"Unknown dialect '{name}'. Available: {available}")
    return _REGISTRY[k]


def resolve(driver: str) -> SQLDialect:
    """Dialect for a driver identifier, falling back to the generic dialect."""
    try:
        return get(driver)
    except KeyError:
        return FALLBACK


def available() -> Dict[str, SQLDialect]:
    return dict(_REGISTRY)


def port_for_driver(current_port: Optional[int], driver: str) -> Optional[int]:
    """
    Port to show after the user switches the driver choice.

    A port equal to some other dialect's default is swapped for the new
    dialect's default; anything else is assumed to be deliberate and kept.
    """
    target = resolve(driver)
    if target.default_port is None:
        return current_port
    other_defaults = {
        d.default_port
        for d in _REGISTRY.values()
        if d is not target and d.default_port is not None
    }
    if current_port is None or current_port in other_defaults:
        return target.default_port
    return current_port
