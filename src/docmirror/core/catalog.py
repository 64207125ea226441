"""
Metadata catalog on an ibis backend (DuckDB or Postgres).

Creates the ``docmirror`` schema and its two tables on first use:

- ``documents``: one row per remote file, upserted by ``remote_id``
- ``sync_runs``: append-only, one row per sync run

Unlike best-effort bookkeeping, every failure here is raised: a lost write
must surface as a failed file or a failed run.
"""

from __future__ import annotations

import json
import uuid
from datetime import datetime, timezone
from typing import Any

import ibis

from docmirror.core.sql import escape_sql_string, execute_statement, fetch_records, sql_value
from docmirror.exceptions import CatalogError, RunLedgerError
from docmirror.sync.types import ExistingDocument, MirroredDocument, RunRecord
from docmirror.utils.logging import get_logger

logger = get_logger("docmirror.catalog")

SCHEMA_NAME = "docmirror"

# Columns rewritten on every upsert; catalog_id and inserted_at are kept
_UPSERT_COLUMNS = (
    "mirrored_path",
    "category",
    "brand",
    "title",
    "mime_type",
    "checksum",
    "storage_path",
    "source_provider",
    "tags",
    "parsed_ok",
    "page_count",
    "extracted_text",
    "descriptor",
    "updated_at",
)


def utcnow() -> datetime:
    """Naive UTC timestamp, matching the TIMESTAMP columns."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class CatalogStore:
    """Catalog reads and writes for mirrored documents and sync runs."""

    def __init__(self, connection: ibis.BaseBackend, schema_name: str = SCHEMA_NAME):
        self.connection = connection
        self.schema_name = schema_name
        self._initialized = False

    @property
    def documents_table(self) -> str:
        return f"{self.schema_name}.documents"

    @property
    def runs_table(self) -> str:
        return f"{self.schema_name}.sync_runs"

    def initialize(self) -> None:
        """Create schema and tables if they don't exist."""
        if self._initialized:
            return
        try:
            execute_statement(self.connection, f"CREATE SCHEMA IF NOT EXISTS {self.schema_name}")
            execute_statement(
                self.connection,
                f"""
                CREATE TABLE IF NOT EXISTS {self.documents_table} (
                    catalog_id VARCHAR PRIMARY KEY,
                    remote_id VARCHAR NOT NULL UNIQUE,
                    mirrored_path VARCHAR NOT NULL,
                    category VARCHAR,
                    brand VARCHAR,
                    title VARCHAR,
                    mime_type VARCHAR,
                    checksum VARCHAR NOT NULL,
                    storage_path VARCHAR NOT NULL,
                    source_provider VARCHAR,
                    tags TEXT,              -- JSON list
                    parsed_ok BOOLEAN DEFAULT FALSE,
                    page_count INTEGER,
                    extracted_text TEXT,
                    descriptor TEXT,        -- JSON document descriptor
                    inserted_at TIMESTAMP,
                    updated_at TIMESTAMP
                )
                """,
            )
            execute_statement(
                self.connection,
                f"""
                CREATE TABLE IF NOT EXISTS {self.runs_table} (
                    run_id VARCHAR PRIMARY KEY,
                    started_at TIMESTAMP,
                    finished_at TIMESTAMP,
                    files_scanned INTEGER,
                    files_changed INTEGER,
                    files_skipped INTEGER,
                    files_failed INTEGER,
                    notes TEXT
                )
                """,
            )
        except Exception as e:
            raise CatalogError(f"Could not initialize catalog schema '{self.schema_name}': {e}", cause=e) from e
        self._initialized = True
        logger.debug(f"Catalog initialized with schema '{self.schema_name}'")

    # ------------------------------------------------------------------
    # Documents
    # ------------------------------------------------------------------

    def lookup(self, remote_id: str) -> ExistingDocument | None:
        """
        Point lookup used by change detection.

        Returns:
            The row's id, checksum and mirrored path, or ``None`` for a new file

        Raises:
            CatalogError: If the query fails
        """
        self.initialize()
        try:
            rows = fetch_records(
                self.connection,
                f"SELECT catalog_id, checksum, mirrored_path FROM {self.documents_table} "
                f"WHERE remote_id = '{escape_sql_string(remote_id)}'",
            )
        except Exception as e:
            raise CatalogError(f"Catalog lookup failed: {e}", remote_id=remote_id, cause=e) from e
        if not rows:
            return None
        row = rows[0]
        return ExistingDocument(
            catalog_id=row["catalog_id"],
            checksum=row["checksum"],
            mirrored_path=row["mirrored_path"],
        )

    def upsert_document(self, document: MirroredDocument) -> str:
        """
        Insert or update the row for ``document.remote_id``.

        Re-applying the same document leaves one row with the same catalog id.

        Returns:
            The row's catalog id

        Raises:
            CatalogError: If the write fails
        """
        self.initialize()
        now = utcnow()
        row: dict[str, Any] = {
            "catalog_id": document.catalog_id or str(uuid.uuid4()),
            "remote_id": document.remote_id,
            "mirrored_path": document.mirrored_path,
            "category": document.category,
            "brand": document.brand,
            "title": document.title,
            "mime_type": document.mime_type,
            "checksum": document.checksum,
            "storage_path": document.storage_path,
            "source_provider": document.source_provider,
            "tags": list(document.tags),
            "parsed_ok": document.parsed_ok,
            "page_count": document.page_count,
            "extracted_text": document.extracted_text,
            "descriptor": document.descriptor,
            "inserted_at": now,
            "updated_at": now,
        }
        columns = ", ".join(row)
        values = ", ".join(sql_value(v) for v in row.values())
        updates = ", ".join(f"{col} = excluded.{col}" for col in _UPSERT_COLUMNS)
        try:
            execute_statement(
                self.connection,
                f"INSERT INTO {self.documents_table} ({columns}) VALUES ({values}) "
                f"ON CONFLICT (remote_id) DO UPDATE SET {updates}",
            )
        except Exception as e:
            raise CatalogError(f"Catalog upsert failed: {e}", remote_id=document.remote_id, cause=e) from e

        existing = self.lookup(document.remote_id)
        if existing is None:
            raise CatalogError("Catalog upsert did not persist a row", remote_id=document.remote_id)
        return existing.catalog_id

    def get_document(self, remote_id: str) -> MirroredDocument | None:
        """Fetch the full row for one remote file."""
        self.initialize()
        try:
            rows = fetch_records(
                self.connection,
                f"SELECT * FROM {self.documents_table} WHERE remote_id = '{escape_sql_string(remote_id)}'",
            )
        except Exception as e:
            raise CatalogError(f"Catalog read failed: {e}", remote_id=remote_id, cause=e) from e
        return _document_from_row(rows[0]) if rows else None

    def list_documents(
        self,
        *,
        limit: int = 50,
        offset: int = 0,
        category: str | None = None,
        brand: str | None = None,
    ) -> list[MirroredDocument]:
        """
        Read-only, paginated listing for the frontend collaborator.

        Rows are ordered by category, brand, title and remote id so pages are stable.
        """
        self.initialize()
        filters = []
        if category is not None:
            filters.append(f"category = '{escape_sql_string(category)}'")
        if brand is not None:
            filters.append(f"brand = '{escape_sql_string(brand)}'")
        where = f"WHERE {' AND '.join(filters)} " if filters else ""
        query = (
            f"SELECT * FROM {self.documents_table} {where}"
            f"ORDER BY category, brand, title, remote_id "
            f"LIMIT {max(int(limit), 0)} OFFSET {max(int(offset), 0)}"
        )
        try:
            rows = fetch_records(self.connection, query)
        except Exception as e:
            raise CatalogError(f"Catalog listing failed: {e}", cause=e) from e
        return [_document_from_row(row) for row in rows]

    def count_documents(self) -> int:
        self.initialize()
        rows = fetch_records(self.connection, f"SELECT COUNT(*) AS n FROM {self.documents_table}")
        return int(rows[0]["n"]) if rows else 0

    # ------------------------------------------------------------------
    # Sync runs
    # ------------------------------------------------------------------

    def append_run(self, record: RunRecord) -> None:
        """
        Append one run record.

        Raises:
            RunLedgerError: If the insert fails
        """
        row = {
            "run_id": record.run_id,
            "started_at": record.started_at,
            "finished_at": record.finished_at,
            "files_scanned": record.files_scanned,
            "files_changed": record.files_changed,
            "files_skipped": record.files_skipped,
            "files_failed": record.files_failed,
            "notes": record.notes,
        }
        try:
            self.initialize()
            execute_statement(
                self.connection,
                f"INSERT INTO {self.runs_table} ({', '.join(row)}) "
                f"VALUES ({', '.join(sql_value(v) for v in row.values())})",
            )
        except Exception as e:
            raise RunLedgerError(f"Could not record sync run {record.run_id}: {e}", details={"run_id": record.run_id}) from e

    def list_runs(self, limit: int = 20) -> list[RunRecord]:
        """Most recent runs first."""
        self.initialize()
        rows = fetch_records(
            self.connection,
            f"SELECT * FROM {self.runs_table} ORDER BY finished_at DESC LIMIT {max(int(limit), 0)}",
        )
        return [
            RunRecord(
                run_id=row["run_id"],
                started_at=row["started_at"],
                finished_at=row["finished_at"],
                files_scanned=row["files_scanned"] or 0,
                files_changed=row["files_changed"] or 0,
                files_skipped=row["files_skipped"] or 0,
                files_failed=row["files_failed"] or 0,
                notes=row["notes"] or "",
            )
            for row in rows
        ]


def _document_from_row(row: dict[str, Any]) -> MirroredDocument:
    return MirroredDocument(
        catalog_id=row["catalog_id"],
        remote_id=row["remote_id"],
        mirrored_path=row["mirrored_path"],
        category=row["category"],
        brand=row["brand"],
        title=row["title"],
        mime_type=row["mime_type"],
        checksum=row["checksum"],
        storage_path=row["storage_path"],
        source_provider=row["source_provider"],
        tags=json.loads(row["tags"]) if row.get("tags") else [],
        parsed_ok=bool(row["parsed_ok"]),
        page_count=int(row["page_count"]) if row.get("page_count") is not None else None,
        extracted_text=row.get("extracted_text"),
        descriptor=json.loads(row["descriptor"]) if row.get("descriptor") else {},
        inserted_at=row.get("inserted_at"),
        updated_at=row.get("updated_at"),
    )
