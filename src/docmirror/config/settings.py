"""
Typed sync settings derived from the ``source`` and ``sync`` sections.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from docmirror.config.loader import Config
from docmirror.exceptions import ConfigurationError
from docmirror.utils.hashing import SUPPORTED_ALGORITHMS

DEFAULT_MAX_UPLOAD_BYTES = 50 * 1024 * 1024

DEFAULT_CATEGORY_ALIASES: dict[str, str] = {
    r"powersports": "Powersports",
    r"small engines?": "Small Engines",
}


@dataclass(frozen=True)
class SyncSettings:
    """Settings consumed by the sync engine."""

    root_folder_id: str
    max_upload_bytes: int = DEFAULT_MAX_UPLOAD_BYTES
    checksum_algorithm: str = "sha256"
    source_provider: str = "google_drive"
    category_aliases: dict[str, str] = field(default_factory=lambda: dict(DEFAULT_CATEGORY_ALIASES))
    enrichment: tuple[str, ...] = ()
    progress_every: int = 10
    max_extracted_chars: int = 200_000

    @classmethod
    def from_config(cls, config: Config) -> SyncSettings:
        """
        Build settings from configuration, collecting every problem.

        Raises:
            ConfigurationError: If any required value is missing or invalid
        """
        errors: list[str] = []
        source: dict[str, Any] = config.source
        sync: dict[str, Any] = config.sync

        root_folder_id = str(source.get("root_folder_id") or "").strip()
        if not root_folder_id:
            errors.append("source.root_folder_id is missing (set DRIVE_ROOT_FOLDER_ID)")

        max_upload_bytes = _positive_int(sync.get("max_upload_bytes", DEFAULT_MAX_UPLOAD_BYTES), "sync.max_upload_bytes", errors)
        progress_every = _positive_int(sync.get("progress_every", 10), "sync.progress_every", errors)
        max_extracted_chars = _positive_int(
            sync.get("max_extracted_chars", 200_000), "sync.max_extracted_chars", errors
        )

        algorithm = str(sync.get("checksum_algorithm") or "sha256").lower()
        if algorithm not in SUPPORTED_ALGORITHMS:
            errors.append(
                f"sync.checksum_algorithm '{algorithm}' is not supported. Supported: {', '.join(SUPPORTED_ALGORITHMS)}"
            )

        aliases = sync.get("category_aliases")
        if aliases is None:
            aliases = dict(DEFAULT_CATEGORY_ALIASES)
        elif not isinstance(aliases, dict):
            errors.append("sync.category_aliases must be a mapping of pattern -> category")
            aliases = {}

        enrichment = sync.get("enrichment") or []
        if isinstance(enrichment, str):
            enrichment = [name.strip() for name in enrichment.split(",") if name.strip()]
        if not isinstance(enrichment, list):
            errors.append("sync.enrichment must be a list of processor names")
            enrichment = []

        if errors:
            raise ConfigurationError(
                "Invalid configuration:\n" + "\n".join(f"  - {e}" for e in errors),
                details={"errors": errors},
            )

        return cls(
            root_folder_id=root_folder_id,
            max_upload_bytes=max_upload_bytes,
            checksum_algorithm=algorithm,
            source_provider=str(source.get("type") or "google_drive"),
            category_aliases={str(k): str(v) for k, v in aliases.items()},
            enrichment=tuple(str(name) for name in enrichment),
            progress_every=progress_every,
            max_extracted_chars=max_extracted_chars,
        )


def _positive_int(value: Any, key: str, errors: list[str]) -> int:
    try:
        number = int(value)
    except (TypeError, ValueError):
        errors.append(f"{key} must be an integer, got {value!r}")
        return 0
    if number <= 0:
        errors.append(f"{key} must be positive, got {number}")
    return number
