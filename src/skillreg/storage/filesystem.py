"""
Filesystem storage for skillreg.

Stores each key as a file below a base directory, for local development
and self-hosted registries.
"""

import asyncio
import logging
import os
import tempfile
from pathlib import Path

from skillreg.storage.base import StorageBackend, StorageError
from skillreg.storage.paths import get_data_dir

logger = logging.getLogger(__name__)

_TEMP_PREFIX = ".tmp-"


class FileSystemStorage(StorageBackend):
    """File-based key-value store.

    Blocking file I/O runs in worker threads so the event loop is never
    held up. Values are always written to a temp file first. ``put`` then
    renames it over the key; ``put_if_absent`` hard-links it to the key,
    which the operating system refuses atomically when the key exists.
    """

    def __init__(self, base_path: Path | str | None = None):
        """Initialize the storage.

        Args:
            base_path: Root directory for stored keys. Defaults to ~/.skillreg/data.
        """
        if base_path is None:
            self.base_path = get_data_dir()
        else:
            self.base_path = Path(base_path).expanduser().resolve()

        self.base_path.mkdir(parents=True, exist_ok=True)

    def _key_to_path(self, key: str) -> Path:
        """Map a key to a file path, refusing keys that escape the base."""
        parts = key.split("/")
        if not key or any(part in ("", ".", "..") for part in parts) or "\\" in key:
            raise StorageError(f"Invalid storage key: {key!r}", key)
        if parts[-1].startswith(_TEMP_PREFIX):
            raise StorageError(f"Reserved storage key: {key!r}", key)
        return self.base_path.joinpath(*parts)

    # =========================================================================
    # Blocking implementations
    # =========================================================================

    def _get(self, key: str) -> str | None:
        path = self._key_to_path(key)
        try:
            with open(path, encoding="utf-8", newline="") as f:
                return f.read()
        except FileNotFoundError:
            return None
        except OSError as e:
            raise StorageError(f"Cannot read {key}: {e}", key) from e

    def _write_temp(self, path: Path, value: str) -> str:
        """Write ``value`` to a fresh temp file beside ``path`` and return its name."""
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=_TEMP_PREFIX)
        try:
            with os.fdopen(fd, "w", encoding="utf-8", newline="") as f:
                f.write(value)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
        return tmp_name

    def _put(self, key: str, value: str) -> None:
        path = self._key_to_path(key)
        try:
            tmp_name = self._write_temp(path, value)
            try:
                os.replace(tmp_name, path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as e:
            raise StorageError(f"Cannot write {key}: {e}", key) from e

    def _delete(self, key: str) -> bool:
        path = self._key_to_path(key)
        try:
            path.unlink()
            return True
        except FileNotFoundError:
            return False
        except OSError as e:
            raise StorageError(f"Cannot delete {key}: {e}", key) from e

    def _list(self, prefix: str) -> list[str]:
        # Walk only the deepest directory the prefix names
        directory = prefix.rsplit("/", 1)[0] if "/" in prefix else ""
        search_root = self.base_path.joinpath(*directory.split("/")) if directory else self.base_path

        if not search_root.is_dir():
            return []

        keys: list[str] = []
        try:
            for root, dirs, files in os.walk(search_root):
                dirs.sort()
                for filename in sorted(files):
                    if filename.startswith(_TEMP_PREFIX):
                        continue
                    key = (Path(root) / filename).relative_to(self.base_path).as_posix()
                    if key.startswith(prefix):
                        keys.append(key)
        except OSError as e:
            raise StorageError(f"Cannot list {prefix}: {e}", prefix) from e

        return keys

    def _put_if_absent(self, key: str, value: str) -> bool:
        path = self._key_to_path(key)
        try:
            tmp_name = self._write_temp(path, value)
            try:
                # link() fails if the target exists, so only a complete file is published
                os.link(tmp_name, path)
            finally:
                Path(tmp_name).unlink(missing_ok=True)
            return True
        except FileExistsError:
            return False
        except OSError as e:
            raise StorageError(f"Cannot create {key}: {e}", key) from e

    # =========================================================================
    # StorageBackend
    # =========================================================================

    async def get(self, key: str) -> str | None:
        return await asyncio.to_thread(self._get, key)

    async def put(self, key: str, value: str) -> None:
        logger.debug(f"put {key} ({len(value)} chars)")
        await asyncio.to_thread(self._put, key, value)

    async def delete(self, key: str) -> bool:
        return await asyncio.to_thread(self._delete, key)

    async def list(self, prefix: str) -> list[str]:
        return await asyncio.to_thread(self._list, prefix)

    async def put_if_absent(self, key: str, value: str) -> bool:
        created = await asyncio.to_thread(self._put_if_absent, key, value)
        logger.debug(f"put_if_absent {key}: {'created' if created else 'exists'}")
        return created
