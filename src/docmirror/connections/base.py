"""
Catalog database connections.

The catalog only needs an ibis backend; subclasses decide how to open one.
"""

from abc import ABC, abstractmethod
from typing import Any

import ibis

from docmirror.utils.logging import get_logger

logger = get_logger("docmirror.connections.base")


class BaseConnection(ABC):
    """
    Lazily opened ibis backend for the metadata catalog.

    Args:
        name: Config section the connection was built from
        config: That section's mapping
    """

    def __init__(self, name: str, config: dict[str, Any]):
        self.name = name
        self.config = config
        self._connection: ibis.BaseBackend | None = None

    @property
    @abstractmethod
    def connection(self) -> ibis.BaseBackend:
        """The open backend, connecting on first access."""

    def close(self) -> None:
        """Disconnect if open. Safe to call more than once."""
        if self._connection is None:
            return
        try:
            self._connection.disconnect()
        except Exception as e:
            logger.debug(f"Error disconnecting catalog '{self.name}': {e}")
        self._connection = None

    def __enter__(self) -> "BaseConnection":
        return self

    def __exit__(self, exc_type: type[BaseException] | None, exc_val: BaseException | None, exc_tb: Any) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(name='{self.name}')"
