"""
YAML-backed store of saved servers and application settings.

File layout:

    servers:
      <server name>:
        driver: mysql
        host: db.example.com
        port: 3306
        database: shop
        user: app
        password: secret   # stored as given, no encryption
    settings:
      default_driver: mysql
"""

from __future__ import annotations

import os
from dataclasses import asdict
from pathlib import Path
from typing import Any, Dict, List

import yaml

from .errors import ExitCode, GridSQLException, config_problem
from .types import ConnectionParams

DEFAULT_DRIVER = "mysql"


class ConnectionStore:
    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    # ------------------------------------------------------------------ file IO
    def _read(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            obj = yaml.safe_load(self.path.read_text(encoding="utf-8"))
        except yaml.YAMLError as e:
            raise GridSQLException(
                config_problem(
                    "GRIDSQL_STORE_PARSE_ERROR",
                    f"Failed to parse server store: {self.path}",
                    path=str(self.path),
                    error=repr(e),
                ),
                ExitCode.CONFIG_INVALID,
                cause=e,
            )
        if obj is None:
            return {}
        if not isinstance(obj, dict):
            raise GridSQLException(
                config_problem(
                    "GRIDSQL_STORE_TOPLEVEL_NOT_MAPPING",
                    f"Server store must be a mapping at top-level: {self.path}",
                    path=str(self.path),
                    type=type(obj).__name__,
                ),
                ExitCode.CONFIG_INVALID,
            )
        return obj

    def _write(self, data: Dict[str, Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_name(self.path.name + ".tmp")
        tmp.write_text(yaml.safe_dump(data, sort_keys=True, allow_unicode=True), encoding="utf-8")
        os.replace(tmp, self.path)

    def _servers(self, data: Dict[str, Any]) -> Dict[str, Any]:
        servers = data.get("servers")
        return servers if isinstance(servers, dict) else {}

    # ------------------------------------------------------------------ servers
    def save(self, server_name: str, params: ConnectionParams) -> None:
        if not server_name:
            raise ValueError("server name must be non-empty")
        data = self._read()
        servers = self._servers(data)
        servers[server_name] = asdict(params)
        data["servers"] = servers
        self._write(data)

    def load(self, server_name: str) -> ConnectionParams:
        entry = self._servers(self._read()).get(server_name)
        if not isinstance(entry, dict):
            raise GridSQLException(
                config_problem(
                    "GRIDSQL_SERVER_NOT_FOUND",
                    f"No saved server named '{server_name}'",
                    server=server_name,
                    path=str(self.path),
                ),
                ExitCode.CONFIG_INVALID,
            )
        try:
            port = int(entry.get("port") or 0)
        except (TypeError, ValueError):
            port = 0
        return ConnectionParams(
            driver=str(entry.get("driver") or ""),
            host=str(entry.get("host") or ""),
            port=port,
            database=str(entry.get("database") or ""),
            user=str(entry.get("user") or ""),
            password=str(entry.get("password") or ""),
        )

    def list(self) -> List[str]:
        return sorted(str(name) for name in self._servers(self._read()))

    def remove(self, server_name: str) -> None:
        data = self._read()
        servers = self._servers(data)
        if servers.pop(server_name, None) is not None:
            data["servers"] = servers
            self._write(data)

    def rename(self, old_name: str, new_name: str, params: ConnectionParams) -> None:
        """Save under new_name, dropping old_name when the name changed."""
        if old_name != new_name:
            self.remove(old_name)
        self.save(new_name, params)

    # ------------------------------------------------------------------ settings
    @property
    def default_driver(self) -> str:
        settings = self._read().get("settings") or {}
        value = settings.get("default_driver") if isinstance(settings, dict) else None
        return str(value) if value else DEFAULT_DRIVER

    @default_driver.setter
    def default_driver(self, driver: str) -> None:
        data = self._read()
        settings = data.get("settings")
        if not isinstance(settings, dict):
            settings = {}
        settings["default_driver"] = driver
        data["settings"] = settings
        self._write(data)
