"""
Connections to the remote source, object store and catalog database.
"""

from docmirror.connections.drive import GoogleDriveConnection
from docmirror.connections.duckdb import DuckDBConnection
from docmirror.connections.filesystem import FilesystemConnection
from docmirror.connections.manager import ConnectionManager
from docmirror.connections.postgres import PostgresConnection
from docmirror.connections.s3 import S3Connection

__all__ = [
    "ConnectionManager",
    "GoogleDriveConnection",
    "S3Connection",
    "FilesystemConnection",
    "DuckDBConnection",
    "PostgresConnection",
]
