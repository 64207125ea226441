"""
Local filesystem object store.

Useful for self-hosted mirrors and for development without a bucket.
"""

import os
from pathlib import Path
from typing import Any

from docmirror.connections.storage import BaseStorageConnection
from docmirror.exceptions import UploadError


class FilesystemConnection(BaseStorageConnection):
    """
    Local filesystem object store.

    Objects are written atomically through a ``.part`` file and ``os.replace``.
    Content types are not persisted; readers infer them from the extension.
    """

    def __init__(self, name: str, config: dict[str, Any]):
        super().__init__(name, config)

    @property
    def root_path(self) -> Path:
        """Root directory for this store."""
        root = (self.config.get("config", {}) or {}).get("root_path", "data/mirror")
        return Path(root)

    def resolve(self, path: str) -> Path:
        """
        Map a mirrored path to a file under root_path/base_path.

        Raises:
            UploadError: If the path escapes the store root
        """
        root = (self.root_path / self.base_path).resolve() if self.base_path else self.root_path.resolve()
        target = (root / path.lstrip("/")).resolve()
        try:
            target.relative_to(root)
        except ValueError as e:
            raise UploadError(f"Path traversal detected: '{path}' escapes '{root}'") from e
        return target

    def upload(self, path: str, content: bytes, content_type: str) -> str:
        target = self.resolve(path)
        tmp = target.with_name(target.name + ".part")
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            tmp.write_bytes(content)
            os.replace(tmp, target)
        except OSError as e:
            if tmp.exists():
                tmp.unlink()
            raise UploadError(f"Write to {target} failed: {e}", cause=e) from e
        return path

    def __repr__(self) -> str:
        """String representation."""
        return f"{self.__class__.__name__}(name='{self.name}', root_path='{self.root_path}')"
