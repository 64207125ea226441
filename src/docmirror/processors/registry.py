"""
Enrichment processor registry.

Resolves the ``sync.enrichment: [name, ...]`` list into processor instances.
"""

from __future__ import annotations

from collections.abc import Callable

from docmirror.exceptions import ConfigurationError
from docmirror.processors.pdf_text import PdfTextProcessor
from docmirror.sync.types import Enricher
from docmirror.utils.logging import get_logger

logger = get_logger("docmirror.processors.registry")


def build_default_processor_registry(max_extracted_chars: int = 200_000) -> dict[str, Callable[[], Enricher]]:
    """
    Build registry of built-in processor factories, keyed by name.
    """
    return {
        PdfTextProcessor.name: lambda: PdfTextProcessor(max_chars=max_extracted_chars),
    }


def resolve_processors(
    names: tuple[str, ...] | list[str],
    *,
    registry: dict[str, Callable[[], Enricher]],
) -> list[Enricher]:
    """
    Instantiate the named processors in order.

    Raises:
        ConfigurationError: If a name is not registered
    """
    processors: list[Enricher] = []
    for name in names:
        factory = registry.get(name)
        if factory is None:
            raise ConfigurationError(
                f"Unknown enrichment processor '{name}'. Available: {sorted(registry)}",
                details={"processor": name},
            )
        processors.append(factory())
    if processors:
        logger.debug(f"Enrichment processors: {[p.name for p in processors]}")
    return processors
