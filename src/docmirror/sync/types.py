"""
Type definitions for the sync engine.

RemoteFile descriptors are rebuilt on every run from a full tree walk and are
never persisted. MirroredDocument and RunRecord mirror the catalog tables.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Iterable, Protocol


@dataclass(frozen=True)
class RemoteEntry:
    """One child returned by a remote "list children" call."""

    remote_id: str
    name: str
    mime_type: str = ""
    size_bytes: int | None = None
    is_folder: bool = False
    # Provider-native documents (e.g. Google Docs) have no raw bytes to mirror
    is_native: bool = False


@dataclass(frozen=True)
class ListPage:
    entries: list[RemoteEntry]
    next_page_token: str | None = None


@dataclass(frozen=True)
class RemoteFile:
    """A non-folder file found by the walker, with its synthesized mirrored path."""

    remote_id: str
    name: str
    mime_type: str
    mirrored_path: str
    # Provider-reported, untrusted
    size_bytes: int | None = None
    is_native: bool = False


class RemoteSource(Protocol):
    """Hierarchical file-tree provider (consumed, read-only)."""

    provider: str

    def list_children(self, folder_id: str, page_token: str | None = None) -> ListPage: ...

    def download_bytes(self, remote_id: str) -> bytes: ...


class ObjectStore(Protocol):
    """Content store keyed by path, overwrite-if-exists."""

    def upload(self, path: str, content: bytes, content_type: str) -> str: ...


@dataclass(frozen=True)
class EnrichmentResult:
    """Fields owned by the enrichment collaborator."""

    parsed_ok: bool = False
    page_count: int | None = None
    extracted_text: str | None = None


class Enricher(Protocol):
    """
    Content-extraction processor protocol.

    Processors receive the exact mirrored bytes and must not mutate them.
    """

    name: str

    def supports(self, file: RemoteFile) -> bool: ...

    def enrich(self, content: bytes, *, file: RemoteFile) -> EnrichmentResult: ...


@dataclass(frozen=True)
class ExistingDocument:
    """Point-lookup projection of a catalog row used by change detection."""

    catalog_id: str
    checksum: str
    mirrored_path: str


@dataclass(frozen=True)
class MirroredDocument:
    """One catalog row; exactly one per remote_id."""

    remote_id: str
    mirrored_path: str
    category: str
    brand: str
    title: str
    mime_type: str
    checksum: str
    storage_path: str
    source_provider: str = "google_drive"
    tags: list[str] = field(default_factory=list)
    parsed_ok: bool = False
    page_count: int | None = None
    extracted_text: str | None = None
    descriptor: dict[str, Any] = field(default_factory=dict)
    catalog_id: str | None = None
    inserted_at: datetime | None = None
    updated_at: datetime | None = None


@dataclass(frozen=True)
class RunRecord:
    """One append-only row per sync run."""

    run_id: str
    started_at: datetime
    finished_at: datetime
    files_scanned: int = 0
    files_changed: int = 0
    files_skipped: int = 0
    files_failed: int = 0
    notes: str = ""


class OutcomeStatus(str, Enum):
    CHANGED = "changed"
    SKIPPED = "skipped"
    FAILED = "failed"


class SkipReason(str, Enum):
    UNCHANGED = "unchanged"
    TOO_LARGE = "too_large"
    NATIVE_DOCUMENT = "native_document"
    EMPTY = "empty"


@dataclass(frozen=True)
class FileOutcome:
    """Tagged result of the per-file pipeline: Changed | Skipped(reason) | Failed(error)."""

    file: RemoteFile
    status: OutcomeStatus
    reason: SkipReason | None = None
    error: str | None = None
    # Same bytes, new path
    relocated: bool = False

    @classmethod
    def changed(cls, file: RemoteFile, *, relocated: bool = False) -> FileOutcome:
        return cls(file=file, status=OutcomeStatus.CHANGED, relocated=relocated)

    @classmethod
    def skipped(cls, file: RemoteFile, reason: SkipReason) -> FileOutcome:
        return cls(file=file, status=OutcomeStatus.SKIPPED, reason=reason)

    @classmethod
    def failed(cls, file: RemoteFile, error: BaseException | str) -> FileOutcome:
        return cls(file=file, status=OutcomeStatus.FAILED, error=str(error))


@dataclass(frozen=True)
class SyncSummary:
    """Counters for one run, produced by folding file outcomes."""

    files_scanned: int = 0
    files_changed: int = 0
    files_relocated: int = 0
    files_skipped: int = 0
    skipped_too_large: int = 0
    files_failed: int = 0
    failures: tuple[str, ...] = ()

    def add(self, outcome: FileOutcome) -> SyncSummary:
        """Return a new summary with ``outcome`` counted."""
        changed = outcome.status is OutcomeStatus.CHANGED
        skipped = outcome.status is OutcomeStatus.SKIPPED
        failed = outcome.status is OutcomeStatus.FAILED
        failures = self.failures
        if failed:
            failures = failures + (f"{outcome.file.mirrored_path} ({outcome.file.remote_id}): {outcome.error}",)
        return SyncSummary(
            files_scanned=self.files_scanned + 1,
            files_changed=self.files_changed + int(changed),
            files_relocated=self.files_relocated + int(changed and outcome.relocated),
            files_skipped=self.files_skipped + int(skipped),
            skipped_too_large=self.skipped_too_large + int(skipped and outcome.reason is SkipReason.TOO_LARGE),
            files_failed=self.files_failed + int(failed),
            failures=failures,
        )

    @property
    def note(self) -> str:
        text = (
            f"ok: scanned={self.files_scanned} changed={self.files_changed} "
            f"skipped={self.files_skipped} failed={self.files_failed}"
        )
        if self.skipped_too_large:
            text += f" too_large={self.skipped_too_large}"
        return text


def summarize(outcomes: Iterable[FileOutcome]) -> SyncSummary:
    """Fold per-file outcomes into run counters."""
    summary = SyncSummary()
    for outcome in outcomes:
        summary = summary.add(outcome)
    return summary
