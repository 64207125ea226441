"""
Pure derivations from mirrored paths and file names.

Recomputed on every sync so catalog fields follow renames.
"""

from __future__ import annotations

import mimetypes
import re

UNKNOWN_BRAND = "Unknown"
UNCATEGORIZED = "Uncategorized"
DEFAULT_CONTENT_TYPE = "application/octet-stream"


def join_path(prefix: str, name: str) -> str:
    """Append ``name`` to a mirrored path; the root prefix is empty."""
    return f"{prefix}/{name}" if prefix else name


def path_segments(path: str) -> list[str]:
    return [part for part in path.split("/") if part]


def category_from_path(path: str, aliases: dict[str, str] | None = None) -> str:
    """
    Category is segment 0, normalized through case-insensitive alias patterns.

    >>> category_from_path("POWERSPORTS/Kawasaki/manual.pdf", {"powersports": "Powersports"})
    'Powersports'
    """
    segments = path_segments(path)
    first = segments[0] if segments else ""
    for pattern, label in (aliases or {}).items():
        if first and re.search(pattern, first, flags=re.IGNORECASE):
            return label
    return first or UNCATEGORIZED


def brand_from_path(path: str) -> str:
    """Brand/owner tag is segment 1, ``Unknown`` when the path is too shallow."""
    segments = path_segments(path)
    return segments[1] if len(segments) >= 2 else UNKNOWN_BRAND


def split_extension(name: str) -> tuple[str, str]:
    """Split a trailing extension; dotfiles and extensionless names keep their full name."""
    stem, dot, ext = name.rpartition(".")
    if not dot or not stem:
        return name, ""
    return stem, f".{ext}"


def title_from_name(name: str) -> str:
    return split_extension(name)[0]


def suffix_with_id(path: str, remote_id: str) -> str:
    """Disambiguate a colliding path: ``a/b/manual.pdf`` -> ``a/b/manual__<id>.pdf``."""
    head, slash, last = path.rpartition("/")
    stem, ext = split_extension(last)
    return f"{head}{slash}{stem}__{remote_id}{ext}"


def resolve_content_type(mime_type: str | None, name: str) -> str:
    """Provider type, else a guess from the extension, else generic binary."""
    if mime_type:
        return mime_type
    guessed, _ = mimetypes.guess_type(name)
    return guessed or DEFAULT_CONTENT_TYPE
