"""In-memory storage backend, for tests and ephemeral registries."""

from skillreg.storage.base import StorageBackend


class MemoryStorage(StorageBackend):
    """Dict-backed store. Data is lost when the process exits.

    None of the methods await between reading and writing, so each call
    is atomic with respect to other coroutines on the same event loop.
    """

    def __init__(self) -> None:
        self._data: dict[str, str] = {}

    async def get(self, key: str) -> str | None:
        return self._data.get(key)

    async def put(self, key: str, value: str) -> None:
        self._data[key] = value

    async def delete(self, key: str) -> bool:
        return self._data.pop(key, None) is not None

    async def list(self, prefix: str) -> list[str]:
        return [key for key in self._data if key.startswith(prefix)]

    async def put_if_absent(self, key: str, value: str) -> bool:
        if key in self._data:
            return False
        self._data[key] = value
        return True

    def clear(self) -> None:
        """Remove all data."""
        self._data.clear()

    def __len__(self) -> int:
        return len(self._data)
