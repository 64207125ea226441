"""
In-memory collaborators for exercising the sync engine without network access.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from docmirror.exceptions import DownloadError, ListingError, UploadError
from docmirror.sync.types import ListPage, RemoteEntry

FOLDER_MIME_TYPE = "application/vnd.google-apps.folder"


@dataclass
class _Node:
    entry: RemoteEntry
    content: bytes = b""
    children: list[str] = field(default_factory=list)


class InMemoryRemoteSource:
    """
    A folder tree held in memory, listed in pages of ``page_size``.

    >>> source = InMemoryRemoteSource()
    >>> source.add_folder("root", "f1", "Powersports")
    >>> source.add_file("f1", "a", "manual.pdf", b"%PDF")
    """

    provider = "memory"

    def __init__(self, root_id: str = "root", *, page_size: int = 100):
        self.root_id = root_id
        self.page_size = page_size
        self.nodes: dict[str, _Node] = {root_id: _Node(RemoteEntry(root_id, root_id, FOLDER_MIME_TYPE, is_folder=True))}
        self.failing_folders: set[str] = set()
        self.failing_downloads: set[str] = set()
        self.download_calls: list[str] = []
        self.list_calls: list[tuple[str, str | None]] = []

    def add_folder(self, parent_id: str, folder_id: str, name: str) -> None:
        self.nodes[folder_id] = _Node(RemoteEntry(folder_id, name, FOLDER_MIME_TYPE, is_folder=True))
        self.nodes[parent_id].children.append(folder_id)

    def add_file(
        self,
        parent_id: str,
        file_id: str,
        name: str,
        content: bytes,
        *,
        mime_type: str = "application/pdf",
        size_bytes: int | None = -1,
        is_native: bool = False,
    ) -> None:
        """Add a file; ``size_bytes=-1`` reports the true length, ``None`` reports nothing."""
        reported = len(content) if size_bytes == -1 else size_bytes
        entry = RemoteEntry(file_id, name, mime_type, size_bytes=reported, is_native=is_native)
        self.nodes[file_id] = _Node(entry, content)
        self.nodes[parent_id].children.append(file_id)

    def set_content(self, file_id: str, content: bytes) -> None:
        node = self.nodes[file_id]
        node.content = content
        node.entry = RemoteEntry(
            node.entry.remote_id,
            node.entry.name,
            node.entry.mime_type,
            size_bytes=len(content),
            is_native=node.entry.is_native,
        )

    def move(self, item_id: str, old_parent_id: str, new_parent_id: str) -> None:
        self.nodes[old_parent_id].children.remove(item_id)
        self.nodes[new_parent_id].children.append(item_id)

    def rename(self, item_id: str, name: str) -> None:
        node = self.nodes[item_id]
        e = node.entry
        node.entry = RemoteEntry(e.remote_id, name, e.mime_type, e.size_bytes, e.is_folder, e.is_native)

    def list_children(self, folder_id: str, page_token: str | None = None) -> ListPage:
        self.list_calls.append((folder_id, page_token))
        if folder_id in self.failing_folders:
            raise ListingError(folder_id, "simulated listing failure")
        children = self.nodes[folder_id].children
        start = int(page_token) if page_token else 0
        end = start + self.page_size
        entries = [self.nodes[child].entry for child in children[start:end]]
        return ListPage(entries, str(end) if end < len(children) else None)

    def download_bytes(self, remote_id: str) -> bytes:
        self.download_calls.append(remote_id)
        if remote_id in self.failing_downloads:
            raise DownloadError("simulated download failure", remote_id=remote_id)
        return self.nodes[remote_id].content


class InMemoryObjectStore:
    """Path-keyed object store that records every upload."""

    def __init__(self):
        self.objects: dict[str, bytes] = {}
        self.content_types: dict[str, str] = {}
        self.uploads: list[str] = []
        self.failing_paths: set[str] = set()

    def upload(self, path: str, content: bytes, content_type: str) -> str:
        if path in self.failing_paths:
            raise UploadError(f"simulated upload failure for {path}")
        self.uploads.append(path)
        self.objects[path] = bytes(content)
        self.content_types[path] = content_type
        return path
