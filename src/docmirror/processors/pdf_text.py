"""
PDF text extraction using pypdfium2.

Fills page_count and extracted_text on the catalog row. Runs on the exact
bytes that were mirrored and never alters them.
"""

from __future__ import annotations

from docmirror.exceptions import EnrichmentError
from docmirror.sync.paths import split_extension
from docmirror.sync.types import EnrichmentResult, RemoteFile
from docmirror.utils.logging import get_logger

logger = get_logger("docmirror.processors.pdf_text")

PDF_MIME_TYPE = "application/pdf"


class PdfTextProcessor:
    """
    Extract page count and plain text from a PDF.

    Text beyond ``max_chars`` is truncated so a single huge document cannot
    bloat the catalog row.
    """

    name = "pdf_text"

    def __init__(self, max_chars: int = 200_000):
        self.max_chars = max_chars

    def supports(self, file: RemoteFile) -> bool:
        if file.mime_type == PDF_MIME_TYPE:
            return True
        return split_extension(file.name)[1].lower() == ".pdf"

    def enrich(self, content: bytes, *, file: RemoteFile) -> EnrichmentResult:
        # Import lazily so installs without the pdf extra can still mirror
        import pypdfium2 as pdfium

        try:
            document = pdfium.PdfDocument(content)
        except Exception as e:
            raise EnrichmentError(self.name, f"cannot open {file.name}: {e}") from e

        chunks: list[str] = []
        try:
            page_count = len(document)
            for page_index in range(page_count):
                page = document.get_page(page_index)
                text_page = page.get_textpage()
                try:
                    chunks.append(text_page.get_text_range() or "")
                finally:
                    text_page.close()
                    page.close()
        except Exception as e:
            raise EnrichmentError(self.name, f"cannot read {file.name}: {e}") from e
        finally:
            document.close()

        text = "\n".join(chunks).strip()
        if len(text) > self.max_chars:
            logger.debug(f"Truncating extracted text of {file.name} to {self.max_chars} chars")
            text = text[: self.max_chars]
        return EnrichmentResult(parsed_ok=True, page_count=page_count, extracted_text=text or None)
