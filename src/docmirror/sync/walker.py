"""
Tree walker: enumerate every file reachable from the root folder.

Folders are visited depth-first from an explicit stack. Each folder's listing
follows continuation tokens until exhausted before its children are used.
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import replace

from docmirror.exceptions import ListingError
from docmirror.sync.paths import join_path, suffix_with_id
from docmirror.sync.types import RemoteEntry, RemoteFile, RemoteSource
from docmirror.utils.logging import get_logger

logger = get_logger("docmirror.sync.walker")


def list_folder(source: RemoteSource, folder_id: str) -> list[RemoteEntry]:
    """
    Return the complete listing of one folder, following every page.

    Raises:
        ListingError: If any page cannot be fetched
    """
    entries: list[RemoteEntry] = []
    page_token: str | None = None
    seen_tokens: set[str] = set()
    while True:
        try:
            page = source.list_children(folder_id, page_token)
        except ListingError:
            raise
        except Exception as e:
            raise ListingError(folder_id, str(e), cause=e) from e
        entries.extend(page.entries)
        page_token = page.next_page_token
        if not page_token:
            return entries
        if page_token in seen_tokens:
            raise ListingError(folder_id, f"provider repeated page token {page_token!r}")
        seen_tokens.add(page_token)


def walk_tree(source: RemoteSource, root_folder_id: str) -> list[RemoteFile]:
    """
    Walk the remote tree and return every non-folder file.

    Mirrored paths are ``/``-joined folder names below the root (the root's own
    name is not included). Colliding paths are disambiguated afterwards.

    Raises:
        ListingError: If any folder listing fails; the walk is not resumable
    """
    files: list[RemoteFile] = []
    stack: list[tuple[str, str]] = [(root_folder_id, "")]
    folders_visited = 0

    while stack:
        folder_id, prefix = stack.pop()
        folders_visited += 1
        subfolders: list[tuple[str, str]] = []
        for entry in list_folder(source, folder_id):
            path = join_path(prefix, entry.name)
            if entry.is_folder:
                subfolders.append((entry.remote_id, path))
                continue
            files.append(
                RemoteFile(
                    remote_id=entry.remote_id,
                    name=entry.name,
                    mime_type=entry.mime_type,
                    mirrored_path=path,
                    size_bytes=entry.size_bytes,
                    is_native=entry.is_native,
                )
            )
        # Reverse so the first-listed subfolder is walked first
        stack.extend(reversed(subfolders))

    logger.info(f"Walked {folders_visited} folder(s), found {len(files)} file(s)")
    return resolve_collisions(drop_aliases(files))


def drop_aliases(files: list[RemoteFile]) -> list[RemoteFile]:
    """
    Keep one entry per remote id.

    A file placed under several parents is listed once per parent. The entry
    with the lexicographically smallest path is kept, independent of walk order.
    """
    kept: dict[str, RemoteFile] = {}
    for f in files:
        current = kept.get(f.remote_id)
        if current is None or f.mirrored_path < current.mirrored_path:
            kept[f.remote_id] = f

    if len(kept) == len(files):
        return files
    for f in files:
        chosen = kept[f.remote_id]
        if f is not chosen and f.mirrored_path != chosen.mirrored_path:
            logger.warning(f"{f.remote_id} is also listed at '{f.mirrored_path}'; mirroring '{chosen.mirrored_path}' only")
    return [f for f in files if kept[f.remote_id] is f]


def resolve_collisions(files: list[RemoteFile]) -> list[RemoteFile]:
    """
    Give every file a unique mirrored path.

    Files sharing a path are ordered by remote id; the smallest keeps the path
    and each other one gets ``__<remote_id>`` before its extension (then
    ``__<remote_id>_2`` and so on while that is also taken). Listing order is
    otherwise preserved. Expects one entry per remote id.
    """
    by_path: dict[str, list[str]] = defaultdict(list)
    for f in files:
        by_path[f.mirrored_path].append(f.remote_id)

    taken = set(by_path)
    renamed: dict[str, str] = {}
    for path in sorted(by_path):
        ids = sorted(by_path[path])
        if len(ids) < 2:
            continue
        logger.warning(f"{len(ids)} files share path '{path}'; keeping {ids[0]} unsuffixed")
        for remote_id in ids[1:]:
            candidate = suffix_with_id(path, remote_id)
            attempt = 2
            while candidate in taken:
                candidate = suffix_with_id(path, f"{remote_id}_{attempt}")
                attempt += 1
            taken.add(candidate)
            renamed[remote_id] = candidate

    if not renamed:
        return files
    return [replace(f, mirrored_path=renamed[f.remote_id]) if f.remote_id in renamed else f for f in files]
