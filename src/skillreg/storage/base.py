"""Base classes for storage backends."""

from abc import ABC, abstractmethod


class StorageError(Exception):
    """Raised when a storage backend fails to complete an operation."""

    def __init__(self, message: str, key: str | None = None):
        """Initialize error.

        Args:
            message: Error message
            key: Key being accessed when the failure happened
        """
        super().__init__(message)
        self.key = key


class StorageBackend(ABC):
    """Key-value store the registry persists into.

    Keys are slash-delimited strings such as
    ``skills/{namespace}/{name}/metadata.json``. Values are text.

    Implementations must make ``put_if_absent`` atomic: when several
    callers race on the same key exactly one of them observes True.
    """

    @abstractmethod
    async def get(self, key: str) -> str | None:
        """Return the value at ``key``, or None if absent."""

    @abstractmethod
    async def put(self, key: str, value: str) -> None:
        """Store ``value`` at ``key``, overwriting any existing value."""

    @abstractmethod
    async def delete(self, key: str) -> bool:
        """Delete ``key``. Returns True if it existed."""

    @abstractmethod
    async def list(self, prefix: str) -> list[str]:
        """Return every key starting with ``prefix``."""

    @abstractmethod
    async def put_if_absent(self, key: str, value: str) -> bool:
        """Store ``value`` only if ``key`` is absent. Returns True if stored."""
