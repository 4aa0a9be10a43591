"""Dialect policy: quoting, default ports, introspection queries and host rules per driver family."""

from . import mysql, postgres  # noqa: F401  (registers the built-in dialects)
from .base import QuotingDialect, SQLDialect
from .registry import FALLBACK, available, get, port_for_driver, register, resolve

__all__ = [
    "FALLBACK",
    "QuotingDialect",
    "SQLDialect",
    "available",
    "get",
    "port_for_driver",
    "register",
    "resolve",
]
