from __future__ import annotations

from typing import Optional, Protocol, Tuple


class SQLDialect(Protocol):
    name: str
    aliases: Tuple[str, ...]   # driver identifiers that resolve to this dialect
    quote_char: str
    default_port: Optional[int]
    connect_timeout: Optional[int]  # seconds, None = driver default
    database_listing_sql: Optional[str]

    def quote_ident(self, ident: str) -> str: ...
    def normalize_host(self, host: str) -> str: ...


class QuotingDialect:
    """Shared behavior; concrete dialects only fill in the class attributes."""

    name = "generic"
    aliases: Tuple[str, ...] = ()
    quote_char = "`"
    default_port: Optional[int] = None
    connect_timeout: Optional[int] = None
    database_listing_sql: Optional[str] = None

    def quote_ident(self, ident: str) -> str:
        # embedded quote characters are not escaped
        return f"{self.quote_char}{ident}{self.quote_char}"

    def normalize_host(self, host: str) -> str:
        return host

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name}>"
