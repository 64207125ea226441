"""
Mirror writer: object-store write followed by the catalog upsert.

Bytes are written before the row. If the upsert fails after the write, the
next run computes the same checksum, finds the row stale or missing and
repeats both steps; the path-keyed write is idempotent, so no cross-store
transaction is needed.
"""

from __future__ import annotations

from docmirror.core.catalog import CatalogStore
from docmirror.exceptions import UploadError
from docmirror.sync.paths import brand_from_path, category_from_path, resolve_content_type, title_from_name
from docmirror.sync.types import EnrichmentResult, Enricher, MirroredDocument, ObjectStore, RemoteFile
from docmirror.utils.logging import get_logger

logger = get_logger("docmirror.sync.writer")


class MirrorWriter:
    """Sole writer of catalog document rows."""

    def __init__(
        self,
        store: ObjectStore,
        catalog: CatalogStore,
        *,
        source_provider: str = "google_drive",
        category_aliases: dict[str, str] | None = None,
        enrichers: list[Enricher] | None = None,
    ):
        self.store = store
        self.catalog = catalog
        self.source_provider = source_provider
        self.category_aliases = category_aliases or {}
        self.enrichers = enrichers or []

    def mirror(self, file: RemoteFile, content: bytes, checksum: str) -> str:
        """
        Write ``content`` at the file's mirrored path and upsert its row.

        Returns:
            The storage path recorded in the catalog

        Raises:
            UploadError: If the object write fails (the row is left untouched)
            CatalogError: If the upsert fails
        """
        content_type = resolve_content_type(file.mime_type, file.name)
        try:
            storage_path = self.store.upload(file.mirrored_path, content, content_type)
        except UploadError:
            raise
        except Exception as e:
            raise UploadError(f"Upload failed: {e}", remote_id=file.remote_id, cause=e) from e

        enrichment = self.enrich(file, content)
        document = self.build_document(file, checksum, storage_path, enrichment)
        self.catalog.upsert_document(document)
        return storage_path

    def enrich(self, file: RemoteFile, content: bytes) -> EnrichmentResult:
        """
        Run every processor that supports the file.

        A processor failure is logged and recorded as ``parsed_ok=False``;
        it never fails the file.
        """
        result = EnrichmentResult()
        applicable = [p for p in self.enrichers if p.supports(file)]
        if not applicable:
            return result
        for processor in applicable:
            try:
                produced = processor.enrich(content, file=file)
            except Exception as e:
                logger.warning(f"Enrichment '{processor.name}' failed for {file.mirrored_path}: {e}")
                return EnrichmentResult(parsed_ok=False)
            result = EnrichmentResult(
                parsed_ok=produced.parsed_ok,
                page_count=produced.page_count if produced.page_count is not None else result.page_count,
                extracted_text=produced.extracted_text if produced.extracted_text is not None else result.extracted_text,
            )
        return result

    def build_document(
        self,
        file: RemoteFile,
        checksum: str,
        storage_path: str,
        enrichment: EnrichmentResult | None = None,
    ) -> MirroredDocument:
        """Derive every catalog field from the current path and name."""
        enrichment = enrichment or EnrichmentResult()
        category = category_from_path(file.mirrored_path, self.category_aliases)
        brand = brand_from_path(file.mirrored_path)
        title = title_from_name(file.name)
        descriptor = {
            "category": category,
            "brand": brand,
            "title": title,
            "source": {"provider": self.source_provider, "fileId": file.remote_id, "path": file.mirrored_path},
            "tags": [],
            "mimeType": file.mime_type,
            "pages": enrichment.page_count,
            "content": {"parsedOk": enrichment.parsed_ok},
        }
        return MirroredDocument(
            remote_id=file.remote_id,
            mirrored_path=file.mirrored_path,
            category=category,
            brand=brand,
            title=title,
            mime_type=file.mime_type,
            checksum=checksum,
            storage_path=storage_path,
            source_provider=self.source_provider,
            tags=[],
            parsed_ok=enrichment.parsed_ok,
            page_count=enrichment.page_count,
            extracted_text=enrichment.extracted_text,
            descriptor=descriptor,
        )
