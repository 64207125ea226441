"""
DuckDB catalog connection via ibis.
"""

import re
from pathlib import Path
from typing import Any

import ibis

from docmirror.connections.base import BaseConnection
from docmirror.exceptions import CatalogError
from docmirror.utils.logging import get_logger

logger = get_logger("docmirror.connections.duckdb")


class DuckDBConnection(BaseConnection):
    """DuckDB connection wrapper using ibis."""

    def __init__(self, name: str, config: dict[str, Any]):
        super().__init__(name, config)

    @property
    def path(self) -> str:
        return self.config.get("path") or ":memory:"

    @property
    def connection(self) -> ibis.BaseBackend:
        """
        Get DuckDB connection via ibis (lazy initialization).

        Raises:
            CatalogError: If the database file cannot be opened (e.g. locked)
        """
        if self._connection is None:
            path = self.path
            if path == ":memory:":
                self._connection = ibis.duckdb.connect()
                return self._connection

            # Ensure directory exists for file-based databases
            Path(path).parent.mkdir(parents=True, exist_ok=True)
            try:
                self._connection = ibis.duckdb.connect(path)
            except Exception as e:
                error_str = str(e)
                if "lock" in error_str.lower() or "conflicting" in error_str.lower():
                    pid_match = re.search(r"PID\s+(\d+)", error_str)
                    pid_info = f" (PID: {pid_match.group(1)})" if pid_match else ""
                    raise CatalogError(
                        f"Cannot open catalog '{path}': file is locked by another process{pid_info}. "
                        f"Is another sync run still in progress?",
                        cause=e,
                    ) from e
                raise CatalogError(f"Cannot open catalog '{path}': {error_str}", cause=e) from e
            logger.debug(f"Opened DuckDB catalog at {path}")
        return self._connection
