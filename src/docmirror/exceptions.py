"""
DocMirror exception hierarchy.

All domain-specific exceptions inherit from DocMirrorError, so a caller can
catch any mirror failure with a single base class while the orchestrator
still distinguishes fatal from per-file errors.

Hierarchy::

    DocMirrorError
    ├── ConfigurationError      - config loading, parsing, validation (fatal, before I/O)
    ├── ListingError            - remote "list children" failure during the walk (fatal)
    ├── FileSyncError           - single-file failure (recovered by the orchestrator)
    │   ├── DownloadError       - fetching bytes from the remote source
    │   ├── UploadError         - writing bytes to the object store
    │   └── CatalogError        - catalog lookup / upsert
    ├── EnrichmentError         - content extraction (recorded as parsed_ok=false)
    └── RunLedgerError          - final run record could not be written (fatal)
"""

from __future__ import annotations


class DocMirrorError(Exception):
    """Base exception for all DocMirror errors."""

    def __init__(self, message: str, *, details: dict | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}


# --- Configuration -----------------------------------------------------------


class ConfigurationError(DocMirrorError):
    """Raised when configuration loading, parsing, or validation fails."""


# --- Walking -----------------------------------------------------------------


class ListingError(DocMirrorError):
    """Raised when a folder listing cannot be completed.

    A partial tree would silently drop catalog coverage for the files that
    were never listed, so this is always fatal to the run.
    """

    def __init__(self, folder_id: str, message: str, *, cause: Exception | None = None) -> None:
        super().__init__(f"Listing folder '{folder_id}' failed: {message}", details={"folder_id": folder_id})
        self.folder_id = folder_id
        if cause is not None:
            self.__cause__ = cause


# --- Per-file ----------------------------------------------------------------


class FileSyncError(DocMirrorError):
    """Raised when a single file cannot be mirrored."""

    def __init__(self, message: str, *, remote_id: str | None = None, cause: Exception | None = None) -> None:
        super().__init__(message, details={"remote_id": remote_id})
        self.remote_id = remote_id
        if cause is not None:
            self.__cause__ = cause


class DownloadError(FileSyncError):
    """Raised when file bytes cannot be downloaded from the remote source."""


class UploadError(FileSyncError):
    """Raised when file bytes cannot be written to the object store."""


class CatalogError(FileSyncError):
    """Raised when a catalog read or write fails."""


# --- Enrichment --------------------------------------------------------------


class EnrichmentError(DocMirrorError):
    """Raised by an enrichment processor that cannot parse a document."""

    def __init__(self, processor: str, message: str) -> None:
        super().__init__(f"Processor '{processor}': {message}", details={"processor": processor})
        self.processor = processor


# --- Run ledger --------------------------------------------------------------


class RunLedgerError(DocMirrorError):
    """Raised when the run record for a sync run cannot be persisted."""
