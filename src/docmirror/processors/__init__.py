"""
Enrichment processors (content extraction) for mirrored documents.

Enrichment is optional: a failing processor marks the row parsed_ok=false and
never blocks mirroring of the raw bytes.
"""

from docmirror.processors.pdf_text import PdfTextProcessor
from docmirror.processors.registry import build_default_processor_registry, resolve_processors

__all__ = [
    "PdfTextProcessor",
    "build_default_processor_registry",
    "resolve_processors",
]
