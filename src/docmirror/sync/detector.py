"""
Change detector: decide per file whether the mirror must be written.

The fingerprint is computed over the downloaded bytes; provider metadata
(size, modified time) is never trusted for the decision. A rerun over an
unchanged tree therefore performs no writes.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from docmirror.core.catalog import CatalogStore
from docmirror.exceptions import DownloadError
from docmirror.sync.types import ExistingDocument, RemoteFile, RemoteSource, SkipReason
from docmirror.utils.hashing import calculate_content_hash
from docmirror.utils.logging import get_logger

logger = get_logger("docmirror.sync.detector")


class Action(str, Enum):
    SKIP = "skip"
    # New file or new bytes
    UPLOAD = "upload"
    # Same bytes under a new path
    RELOCATE = "relocate"


@dataclass(frozen=True)
class Detection:
    action: Action
    reason: SkipReason | None = None
    content: bytes | None = None
    checksum: str | None = None
    existing: ExistingDocument | None = None

    @property
    def needs_sync(self) -> bool:
        return self.action is not Action.SKIP


class ChangeDetector:
    """Size gate, download, fingerprint and compare against the catalog."""

    def __init__(
        self,
        source: RemoteSource,
        catalog: CatalogStore,
        *,
        max_upload_bytes: int,
        checksum_algorithm: str = "sha256",
    ):
        self.source = source
        self.catalog = catalog
        self.max_upload_bytes = max_upload_bytes
        self.checksum_algorithm = checksum_algorithm

    def needs_sync(self, file: RemoteFile) -> bool:
        return self.detect(file).needs_sync

    def detect(self, file: RemoteFile) -> Detection:
        """
        Classify one file.

        Raises:
            DownloadError: If the bytes cannot be fetched
            CatalogError: If the existing row cannot be read
        """
        if file.is_native:
            logger.warning(f"Skipping provider-native document: {file.mirrored_path} ({file.mime_type})")
            return Detection(Action.SKIP, reason=SkipReason.NATIVE_DOCUMENT)

        if file.size_bytes is not None and file.size_bytes > self.max_upload_bytes:
            logger.warning(
                f"Skipping too-large file (reported {file.size_bytes} bytes > {self.max_upload_bytes}): "
                f"{file.mirrored_path}"
            )
            return Detection(Action.SKIP, reason=SkipReason.TOO_LARGE)

        try:
            content = self.source.download_bytes(file.remote_id)
        except DownloadError:
            raise
        except Exception as e:
            raise DownloadError(f"Download failed: {e}", remote_id=file.remote_id, cause=e) from e

        # Reported size may be missing or wrong; the real length decides
        if len(content) > self.max_upload_bytes:
            logger.warning(
                f"Skipping too-large file (downloaded {len(content)} bytes > {self.max_upload_bytes}): "
                f"{file.mirrored_path}"
            )
            return Detection(Action.SKIP, reason=SkipReason.TOO_LARGE)

        if not content:
            logger.warning(f"Skipping file with no bytes: {file.mirrored_path}")
            return Detection(Action.SKIP, reason=SkipReason.EMPTY)

        checksum = calculate_content_hash(content, self.checksum_algorithm)
        existing = self.catalog.lookup(file.remote_id)

        if existing is None or existing.checksum != checksum:
            return Detection(Action.UPLOAD, content=content, checksum=checksum, existing=existing)

        if existing.mirrored_path != file.mirrored_path:
            logger.info(f"Path changed for {file.remote_id}: '{existing.mirrored_path}' -> '{file.mirrored_path}'")
            return Detection(Action.RELOCATE, content=content, checksum=checksum, existing=existing)

        logger.debug(f"Unchanged: {file.mirrored_path}")
        return Detection(Action.SKIP, reason=SkipReason.UNCHANGED, checksum=checksum, existing=existing)
