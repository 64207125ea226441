"""
Postgres catalog connection via ibis.

The sync job is a single sequential writer, so one connection is enough.
"""

from typing import Any

import ibis

from docmirror.connections.base import BaseConnection
from docmirror.exceptions import CatalogError, ConfigurationError
from docmirror.utils.logging import get_logger

logger = get_logger("docmirror.connections.postgres")


class PostgresConnection(BaseConnection):
    """
    Postgres connection wrapper using ibis.

    Config example::

        catalog:
          type: postgres
          config:
            host: db.internal
            port: 5432
            user: mirror
            password: ${CATALOG_PASSWORD}
            database: manuals
    """

    def __init__(self, name: str, config: dict[str, Any]):
        super().__init__(name, config)
        cfg = self._cfg
        missing = [key for key in ("host", "database") if not cfg.get(key)]
        if missing:
            raise ConfigurationError(
                f"Postgres catalog '{name}' missing required fields: {missing}",
                details={"connection": name, "missing": missing},
            )

    @property
    def _cfg(self) -> dict[str, Any]:
        return self.config.get("config", {}) or {}

    @property
    def connection(self) -> ibis.BaseBackend:
        """Get Postgres connection via ibis (lazy initialization)."""
        if self._connection is None:
            cfg = self._cfg
            try:
                self._connection = ibis.postgres.connect(
                    host=cfg.get("host"),
                    port=int(cfg.get("port", 5432)),
                    user=cfg.get("user"),
                    password=cfg.get("password"),
                    database=cfg.get("database"),
                )
            except Exception as e:
                raise CatalogError(f"Cannot connect to Postgres catalog at {cfg.get('host')}: {e}", cause=e) from e
            logger.debug(f"Connected to Postgres catalog {cfg.get('host')}/{cfg.get('database')}")
        return self._connection
