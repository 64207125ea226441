"""
DocMirror - mirror a remote document tree into object storage and a metadata catalog.
"""

__version__ = "0.1.0"

from docmirror.config import Config, SyncSettings, load_config
from docmirror.core.catalog import CatalogStore
from docmirror.exceptions import (
    CatalogError,
    ConfigurationError,
    DocMirrorError,
    DownloadError,
    EnrichmentError,
    FileSyncError,
    ListingError,
    RunLedgerError,
    UploadError,
)
from docmirror.sync.orchestrator import SyncOrchestrator, run_sync
from docmirror.sync.types import SyncSummary

__all__ = [
    "__version__",
    "Config",
    "SyncSettings",
    "load_config",
    "CatalogStore",
    "SyncOrchestrator",
    "SyncSummary",
    "run_sync",
    "DocMirrorError",
    "ConfigurationError",
    "ListingError",
    "FileSyncError",
    "DownloadError",
    "UploadError",
    "CatalogError",
    "EnrichmentError",
    "RunLedgerError",
]
