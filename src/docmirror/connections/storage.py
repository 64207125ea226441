"""
Storage connection base class.

Object stores are written by path with overwrite-if-exists semantics, which
makes a repeated upload of the same bytes idempotent.
"""

from abc import ABC, abstractmethod
from typing import Any


class BaseStorageConnection(ABC):
    """
    Base class for object-store connections.

    Different storage backends have different addressing:
    - S3 (and S3-compatible stores): bucket + base_path
    - Local filesystem: root_path/base_path
    """

    def __init__(self, name: str, config: dict[str, Any]):
        """
        Initialize storage connection.

        Args:
            name: Connection name (from config)
            config: Connection configuration dictionary
        """
        self.name = name
        self.config = config

    @property
    def base_path(self) -> str:
        """Prefix inside the bucket/root under which all keys are written."""
        cfg = self.config.get("config", {}) or {}
        return cfg.get("base_path") or (cfg.get("storage") or {}).get("base_path") or ""

    @abstractmethod
    def upload(self, path: str, content: bytes, content_type: str) -> str:
        """Write ``content`` at ``path``, replacing any existing object. Returns the stored path."""

    def close(self) -> None:
        """Release client resources."""

    def __repr__(self) -> str:
        """String representation."""
        return f"{self.__class__.__name__}(name='{self.name}')"
