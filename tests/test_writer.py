"""
Tests for the mirror writer: write order, derived fields, enrichment isolation.
"""

from unittest.mock import Mock

import pytest

from docmirror.config.settings import DEFAULT_CATEGORY_ALIASES
from docmirror.exceptions import EnrichmentError, UploadError
from docmirror.sync.types import EnrichmentResult, RemoteFile
from docmirror.sync.writer import MirrorWriter
from docmirror.testing import InMemoryObjectStore


def _file(path="POWERSPORTS/Kawasaki/manual.pdf", mime_type="application/pdf"):
    return RemoteFile(remote_id="f1", name=path.rsplit("/", 1)[-1], mime_type=mime_type, mirrored_path=path)


class _Processor:
    name = "fake"

    def __init__(self, result=None, error=None):
        self.result = result
        self.error = error
        self.seen = []

    def supports(self, file):
        return file.name.endswith(".pdf")

    def enrich(self, content, *, file):
        self.seen.append(content)
        if self.error:
            raise self.error
        return self.result


class TestMirror:
    def test_uploads_then_upserts(self):
        store = InMemoryObjectStore()
        catalog = Mock()
        writer = MirrorWriter(store, catalog, category_aliases=DEFAULT_CATEGORY_ALIASES)

        storage_path = writer.mirror(_file(), b"bytes", "abc")

        assert storage_path == "POWERSPORTS/Kawasaki/manual.pdf"
        assert store.objects[storage_path] == b"bytes"
        assert store.content_types[storage_path] == "application/pdf"
        document = catalog.upsert_document.call_args.args[0]
        assert document.category == "Powersports"
        assert document.brand == "Kawasaki"
        assert document.title == "manual"
        assert document.checksum == "abc"
        assert document.storage_path == storage_path

    def test_upload_failure_leaves_catalog_untouched(self):
        store = InMemoryObjectStore()
        store.failing_paths.add("POWERSPORTS/Kawasaki/manual.pdf")
        catalog = Mock()

        with pytest.raises(UploadError):
            MirrorWriter(store, catalog).mirror(_file(), b"bytes", "abc")
        catalog.upsert_document.assert_not_called()

    def test_store_errors_are_wrapped(self):
        store = Mock()
        store.upload.side_effect = ConnectionResetError("reset")

        with pytest.raises(UploadError) as exc_info:
            MirrorWriter(store, Mock()).mirror(_file(), b"bytes", "abc")
        assert exc_info.value.remote_id == "f1"

    def test_missing_mime_type_guessed(self):
        store = InMemoryObjectStore()
        MirrorWriter(store, Mock()).mirror(_file(mime_type=""), b"bytes", "abc")
        assert store.content_types["POWERSPORTS/Kawasaki/manual.pdf"] == "application/pdf"


class TestBuildDocument:
    def test_descriptor(self):
        writer = MirrorWriter(InMemoryObjectStore(), Mock(), category_aliases=DEFAULT_CATEGORY_ALIASES)

        document = writer.build_document(_file(), "abc", "POWERSPORTS/Kawasaki/manual.pdf",
                                         EnrichmentResult(parsed_ok=True, page_count=3))

        assert document.source_provider == "google_drive"
        assert document.tags == []
        assert document.descriptor == {
            "category": "Powersports",
            "brand": "Kawasaki",
            "title": "manual",
            "source": {"provider": "google_drive", "fileId": "f1", "path": "POWERSPORTS/Kawasaki/manual.pdf"},
            "tags": [],
            "mimeType": "application/pdf",
            "pages": 3,
            "content": {"parsedOk": True},
        }


class TestEnrich:
    def test_no_processors(self):
        result = MirrorWriter(InMemoryObjectStore(), Mock()).enrich(_file(), b"bytes")
        assert result == EnrichmentResult(parsed_ok=False)

    def test_processor_receives_exact_bytes(self):
        processor = _Processor(EnrichmentResult(parsed_ok=True, page_count=2, extracted_text="hello"))
        writer = MirrorWriter(InMemoryObjectStore(), Mock(), enrichers=[processor])

        result = writer.enrich(_file(), b"%PDF-bytes")

        assert processor.seen == [b"%PDF-bytes"]
        assert result.parsed_ok is True
        assert result.page_count == 2
        assert result.extracted_text == "hello"

    def test_unsupported_file_skipped(self):
        processor = _Processor(EnrichmentResult(parsed_ok=True))
        writer = MirrorWriter(InMemoryObjectStore(), Mock(), enrichers=[processor])

        writer.enrich(_file("A/B/photo.jpg", "image/jpeg"), b"jpeg")

        assert processor.seen == []

    def test_failure_marks_not_parsed_and_still_mirrors(self):
        processor = _Processor(error=EnrichmentError("fake", "corrupt"))
        store = InMemoryObjectStore()
        catalog = Mock()
        writer = MirrorWriter(store, catalog, enrichers=[processor])

        writer.mirror(_file(), b"bytes", "abc")

        assert "POWERSPORTS/Kawasaki/manual.pdf" in store.objects
        assert catalog.upsert_document.call_args.args[0].parsed_ok is False
