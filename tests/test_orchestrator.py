"""
End-to-end tests of a sync run over in-memory collaborators and DuckDB.
"""

from unittest.mock import patch

import pytest

from docmirror.config.settings import SyncSettings
from docmirror.exceptions import ListingError
from docmirror.sync.orchestrator import RunState, SyncOrchestrator
from docmirror.sync.types import OutcomeStatus, SkipReason
from docmirror.testing import InMemoryObjectStore, InMemoryRemoteSource
from docmirror.utils.hashing import calculate_content_hash

MB = 1024 * 1024


def _run(source, store, catalog, settings, enrichers=None):
    orchestrator = SyncOrchestrator(source=source, store=store, catalog=catalog, settings=settings, enrichers=enrichers)
    return orchestrator, orchestrator.run()


@pytest.fixture
def manuals(source):
    source.add_folder("root", "ps", "Powersports")
    source.add_folder("ps", "kaw", "Kawasaki")
    source.add_folder("ps", "yam", "Yamaha")
    source.add_file("kaw", "f1", "manual.pdf", b"kawasaki manual")
    source.add_file("yam", "f2", "manual2.pdf", b"yamaha manual")
    return source


class TestEndToEnd:
    def test_size_limit_scenario(self, source, store, catalog):
        source.add_folder("root", "ps", "Powersports")
        source.add_folder("ps", "kaw", "Kawasaki")
        source.add_folder("ps", "yam", "Yamaha")
        source.add_file("kaw", "f1", "manual.pdf", b"k" * (2 * MB))
        source.add_file("yam", "f2", "manual2.pdf", b"y" * (60 * MB))
        settings = SyncSettings(root_folder_id="root", max_upload_bytes=50 * MB)

        orchestrator, summary = _run(source, store, catalog, settings)

        assert summary.files_scanned == 2
        assert summary.files_changed == 1
        assert summary.skipped_too_large == 1
        row = catalog.get_document("f1")
        assert (row.category, row.brand, row.title) == ("Powersports", "Kawasaki", "manual")
        assert row.storage_path == "Powersports/Kawasaki/manual.pdf"
        assert catalog.get_document("f2") is None
        # Reported size was over the limit, so the bytes were never fetched
        assert "f2" not in source.download_calls
        assert orchestrator.state is RunState.DONE

    def test_run_record_written(self, manuals, store, catalog, settings):
        _run(manuals, store, catalog, settings)

        (record,) = catalog.list_runs()
        assert record.files_scanned == 2
        assert record.files_changed == 2
        assert record.notes == "ok: scanned=2 changed=2 skipped=0 failed=0"


class TestIdempotence:
    def test_second_run_writes_nothing(self, manuals, store, catalog, settings):
        _run(manuals, store, catalog, settings)
        uploads_after_first = list(store.uploads)

        with patch.object(catalog, "upsert_document", wraps=catalog.upsert_document) as upsert:
            _, summary = _run(manuals, store, catalog, settings)

        assert summary.files_changed == 0
        assert summary.files_skipped == 2
        assert store.uploads == uploads_after_first
        upsert.assert_not_called()

    def test_changed_bytes_are_mirrored_again(self, manuals, store, catalog, settings):
        _run(manuals, store, catalog, settings)
        manuals.set_content("f1", b"kawasaki manual rev B")

        _, summary = _run(manuals, store, catalog, settings)

        assert summary.files_changed == 1
        assert store.objects["Powersports/Kawasaki/manual.pdf"] == b"kawasaki manual rev B"
        assert catalog.lookup("f1").checksum == calculate_content_hash(b"kawasaki manual rev B")


class TestRenameDrift:
    def test_moved_file_updates_path_keeps_checksum(self, manuals, store, catalog, settings):
        _run(manuals, store, catalog, settings)
        before = catalog.get_document("f1")

        manuals.move("f1", "kaw", "yam")
        orchestrator, summary = _run(manuals, store, catalog, settings)

        after = catalog.get_document("f1")
        assert after.mirrored_path == "Powersports/Yamaha/manual.pdf"
        assert after.storage_path == "Powersports/Yamaha/manual.pdf"
        assert after.brand == "Yamaha"
        assert after.checksum == before.checksum
        assert after.catalog_id == before.catalog_id
        assert store.objects["Powersports/Yamaha/manual.pdf"] == b"kawasaki manual"
        assert summary.files_changed == 1
        assert summary.files_relocated == 1

    def test_rename_keeps_single_row(self, manuals, store, catalog, settings):
        _run(manuals, store, catalog, settings)

        manuals.rename("f1", "service-manual.pdf")
        _run(manuals, store, catalog, settings)

        assert catalog.count_documents() == 2
        row = catalog.get_document("f1")
        assert row.title == "service-manual"
        assert row.mirrored_path == "Powersports/Kawasaki/service-manual.pdf"


class TestSizeGate:
    def test_under_reported_size_is_caught_after_download(self, source, store, catalog, settings):
        source.add_file("root", "liar", "big.pdf", b"x" * 2048, size_bytes=10)

        _, summary = _run(source, store, catalog, settings)

        assert summary.files_skipped == 1
        assert summary.skipped_too_large == 1
        assert store.uploads == []
        assert catalog.get_document("liar") is None


class TestPerFileIsolation:
    def test_upload_failure_on_third_of_five(self, source, store, catalog, settings):
        for i in range(1, 6):
            source.add_file("root", f"f{i}", f"doc{i}.pdf", f"content {i}".encode())
        store.failing_paths.add("doc3.pdf")

        orchestrator, summary = _run(source, store, catalog, settings)

        assert summary.files_scanned == 5
        assert summary.files_changed == 4
        assert summary.files_failed == 1
        for i in (1, 2, 4, 5):
            assert catalog.get_document(f"f{i}") is not None
        assert catalog.get_document("f3") is None
        failed = [o for o in orchestrator.outcomes if o.status is OutcomeStatus.FAILED]
        assert [o.file.remote_id for o in failed] == ["f3"]
        assert orchestrator.state is RunState.DONE
        (record,) = catalog.list_runs()
        assert record.files_failed == 1

    def test_download_failure_is_isolated(self, manuals, store, catalog, settings):
        manuals.failing_downloads.add("f1")

        _, summary = _run(manuals, store, catalog, settings)

        assert summary.files_failed == 1
        assert summary.files_changed == 1

    def test_failed_upload_retried_next_run(self, manuals, store, catalog, settings):
        store.failing_paths.add("Powersports/Kawasaki/manual.pdf")
        _run(manuals, store, catalog, settings)
        store.failing_paths.clear()

        _, summary = _run(manuals, store, catalog, settings)

        assert summary.files_changed == 1
        assert catalog.get_document("f1") is not None


class TestSkips:
    def test_native_and_empty_files(self, source, store, catalog, settings):
        source.add_file("root", "doc", "Notes", b"", mime_type="application/vnd.google-apps.document",
                        size_bytes=None, is_native=True)
        source.add_file("root", "empty", "blank.pdf", b"")

        orchestrator, summary = _run(source, store, catalog, settings)

        reasons = {o.file.remote_id: o.reason for o in orchestrator.outcomes}
        assert reasons == {"doc": SkipReason.NATIVE_DOCUMENT, "empty": SkipReason.EMPTY}
        assert summary.files_scanned == 2
        assert summary.files_skipped == 2
        assert catalog.count_documents() == 0


class TestFatalListing:
    def test_listing_failure_records_error_and_raises(self, manuals, store, catalog, settings):
        manuals.failing_folders.add("yam")
        orchestrator = SyncOrchestrator(source=manuals, store=store, catalog=catalog, settings=settings)

        with pytest.raises(ListingError):
            orchestrator.run()

        assert orchestrator.state is RunState.FAILED
        (record,) = catalog.list_runs()
        assert record.notes.startswith("error: ")
        assert "simulated listing failure" in record.notes
        assert store.uploads == []

    def test_failed_record_write_does_not_mask_listing_error(self, manuals, store, catalog, settings):
        manuals.failing_folders.add("root")
        orchestrator = SyncOrchestrator(source=manuals, store=store, catalog=catalog, settings=settings)

        with patch.object(catalog, "append_run", side_effect=RuntimeError("catalog gone")):
            with pytest.raises(ListingError):
                orchestrator.run()


class TestMultipleParents:
    def test_rerun_is_idempotent(self, source, store, catalog, settings):
        source.add_folder("root", "a", "A")
        source.add_folder("root", "b", "B")
        source.add_file("a", "f1", "manual.pdf", b"shared manual")
        source.nodes["b"].children.append("f1")

        _, first = _run(source, store, catalog, settings)
        uploads_after_first = list(store.uploads)
        with patch.object(catalog, "upsert_document", wraps=catalog.upsert_document) as upsert:
            _, second = _run(source, store, catalog, settings)

        assert first.files_scanned == 1
        assert first.files_changed == 1
        assert second.files_changed == 0
        assert store.uploads == uploads_after_first == ["A/manual.pdf"]
        upsert.assert_not_called()
        assert catalog.get_document("f1").mirrored_path == "A/manual.pdf"
