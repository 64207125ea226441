"""
Sync orchestrator.

Sequences a run: Init -> Walking -> per file (Detecting -> Skipped |
Uploading -> Upserting) -> Finalizing -> Done. Only the walk (and the final
ledger write) can move the run to Failed; per-file errors become Failed
outcomes and the loop continues.

Files are processed one at a time, so two writes for the same remote id can
never overlap.
"""

from __future__ import annotations

from enum import Enum

from docmirror.config.loader import Config
from docmirror.config.settings import SyncSettings
from docmirror.connections.manager import ConnectionManager
from docmirror.core.catalog import CatalogStore
from docmirror.processors.registry import build_default_processor_registry, resolve_processors
from docmirror.sync.detector import Action, ChangeDetector
from docmirror.sync.ledger import RunLedger
from docmirror.sync.types import (
    Enricher,
    FileOutcome,
    ObjectStore,
    OutcomeStatus,
    RemoteFile,
    RemoteSource,
    SyncSummary,
    summarize,
)
from docmirror.sync.walker import walk_tree
from docmirror.sync.writer import MirrorWriter
from docmirror.utils.logging import get_logger

logger = get_logger("docmirror.sync.orchestrator")


class RunState(str, Enum):
    INIT = "init"
    WALKING = "walking"
    SYNCING = "syncing"
    FINALIZING = "finalizing"
    DONE = "done"
    FAILED = "failed"


class SyncOrchestrator:
    """
    Runs one sync over explicit collaborators.

    The source, store and catalog are passed in rather than looked up, so
    tests can substitute in-memory fakes.
    """

    def __init__(
        self,
        *,
        source: RemoteSource,
        store: ObjectStore,
        catalog: CatalogStore,
        settings: SyncSettings,
        enrichers: list[Enricher] | None = None,
    ):
        self.source = source
        self.catalog = catalog
        self.settings = settings
        self.detector = ChangeDetector(
            source,
            catalog,
            max_upload_bytes=settings.max_upload_bytes,
            checksum_algorithm=settings.checksum_algorithm,
        )
        self.writer = MirrorWriter(
            store,
            catalog,
            source_provider=settings.source_provider,
            category_aliases=settings.category_aliases,
            enrichers=enrichers,
        )
        self.ledger = RunLedger(catalog)
        self.state = RunState.INIT
        self.outcomes: list[FileOutcome] = []

    def run(self) -> SyncSummary:
        """
        Execute the run and write its record.

        Returns:
            Final counters

        Raises:
            ListingError: If the tree walk fails (a failure record is attempted first)
            RunLedgerError: If the final record cannot be written
        """
        self.ledger.begin()
        self.outcomes = []
        try:
            self.catalog.initialize()

            self.state = RunState.WALKING
            logger.info(f"Listing remote files under root: {self.settings.root_folder_id}")
            files = walk_tree(self.source, self.settings.root_folder_id)

            self.state = RunState.SYNCING
            changed = 0
            for file in files:
                outcome = self.process_file(file)
                self.outcomes.append(outcome)
                if outcome.status is OutcomeStatus.CHANGED:
                    changed += 1
                    if changed % self.settings.progress_every == 0:
                        logger.info(f"Progress: {changed} updated so far ({len(self.outcomes)}/{len(files)} scanned)")

            summary = summarize(self.outcomes)
            self.state = RunState.FINALIZING
            self.ledger.finalize(summary)
        except Exception as e:
            self.state = RunState.FAILED
            logger.error(f"Sync run failed: {e}")
            self.ledger.record_failure(e, summarize(self.outcomes))
            raise

        self.state = RunState.DONE
        logger.info(
            f"Done. Scanned {summary.files_scanned}, updated {summary.files_changed}, "
            f"skipped {summary.files_skipped} ({summary.skipped_too_large} too large), failed {summary.files_failed}"
        )
        for failure in summary.failures:
            logger.warning(f"Failed: {failure}")
        return summary

    def process_file(self, file: RemoteFile) -> FileOutcome:
        """Detect and, if needed, mirror one file. Never raises."""
        try:
            detection = self.detector.detect(file)
            if detection.action is Action.SKIP:
                return FileOutcome.skipped(file, detection.reason)
            self.writer.mirror(file, detection.content, detection.checksum)
        except Exception as e:
            logger.error(f"Failed to sync {file.name} ({file.remote_id}): {e}")
            return FileOutcome.failed(file, e)
        logger.debug(f"Mirrored {file.mirrored_path}")
        return FileOutcome.changed(file, relocated=detection.action is Action.RELOCATE)


def run_sync(config: Config) -> SyncSummary:
    """
    Run one sync from configuration.

    Settings, connections and processors are all validated before any
    remote, storage or catalog I/O.

    Raises:
        ConfigurationError: On invalid configuration (nothing has run)
        DocMirrorError: On a fatal run failure
    """
    settings = SyncSettings.from_config(config)
    registry = build_default_processor_registry(max_extracted_chars=settings.max_extracted_chars)
    enrichers = resolve_processors(settings.enrichment, registry=registry)

    with ConnectionManager(config) as connections:
        catalog = CatalogStore(connections.catalog.connection)
        orchestrator = SyncOrchestrator(
            source=connections.source,
            store=connections.storage,
            catalog=catalog,
            settings=settings,
            enrichers=enrichers,
        )
        return orchestrator.run()
