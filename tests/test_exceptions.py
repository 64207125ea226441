"""
Tests for the exception hierarchy.
"""

import pytest

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


class TestHierarchy:
    @pytest.mark.parametrize(
        "exc_class",
        [ConfigurationError, ListingError, FileSyncError, EnrichmentError, RunLedgerError],
    )
    def test_inherits_from_base(self, exc_class):
        assert issubclass(exc_class, DocMirrorError)

    @pytest.mark.parametrize("exc_class", [DownloadError, UploadError, CatalogError])
    def test_per_file_errors(self, exc_class):
        assert issubclass(exc_class, FileSyncError)

    def test_listing_is_not_per_file(self):
        assert not issubclass(ListingError, FileSyncError)


class TestAttributes:
    def test_details(self):
        error = ConfigurationError("bad", details={"key": "sync"})
        assert error.message == "bad"
        assert error.details == {"key": "sync"}
        assert str(error) == "bad"

    def test_listing_error(self):
        cause = RuntimeError("HTTP 500")
        error = ListingError("folder1", "HTTP 500", cause=cause)
        assert error.folder_id == "folder1"
        assert error.__cause__ is cause
        assert "folder1" in str(error)

    def test_file_sync_error(self):
        error = UploadError("put failed", remote_id="f1")
        assert error.remote_id == "f1"
        assert error.details == {"remote_id": "f1"}

    def test_enrichment_error(self):
        error = EnrichmentError("pdf_text", "encrypted")
        assert error.processor == "pdf_text"
        assert "encrypted" in str(error)
