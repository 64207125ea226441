"""
Connection manager.

Builds the three collaborators of a sync run (remote source, object store,
catalog database) from configuration. Construction validates configuration
but performs no I/O; clients connect lazily on first use.
"""

from typing import Any

from docmirror.config.loader import Config
from docmirror.connections.base import BaseConnection
from docmirror.connections.drive import GoogleDriveConnection
from docmirror.connections.duckdb import DuckDBConnection
from docmirror.connections.filesystem import FilesystemConnection
from docmirror.connections.postgres import PostgresConnection
from docmirror.connections.s3 import S3Connection
from docmirror.connections.storage import BaseStorageConnection
from docmirror.exceptions import ConfigurationError
from docmirror.utils.logging import get_logger

logger = get_logger("docmirror.connections.manager")

SOURCE_TYPES = {"google_drive": GoogleDriveConnection}
STORAGE_TYPES = {"s3": S3Connection, "filesystem": FilesystemConnection}
CATALOG_TYPES = {"duckdb": DuckDBConnection, "postgres": PostgresConnection}


class ConnectionManager:
    """
    Owns the connections for one sync run.

    Usage::

        with ConnectionManager(config) as connections:
            connections.source.list_children(...)
    """

    def __init__(self, config: Config):
        self.config = config
        self.source: GoogleDriveConnection = _build("source", config.source, SOURCE_TYPES)
        self.storage: BaseStorageConnection = _build("storage", config.storage, STORAGE_TYPES)
        self.catalog: BaseConnection = _build("catalog", config.catalog, CATALOG_TYPES)

    def close(self) -> None:
        """Close every connection, logging (not raising) individual failures."""
        for conn in (self.source, self.storage, self.catalog):
            try:
                conn.close()
            except Exception as e:
                logger.warning(f"Error closing {conn!r}: {e}")

    def __enter__(self) -> "ConnectionManager":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()


def _build(section: str, section_config: dict[str, Any], registry: dict[str, type]) -> Any:
    conn_type = section_config.get("type")
    factory = registry.get(conn_type)
    if factory is None:
        raise ConfigurationError(
            f"Unknown {section} type '{conn_type}'. Supported: {', '.join(sorted(registry))}",
            details={"section": section, "type": conn_type},
        )
    return factory(section, section_config)
