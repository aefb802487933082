"""
Unit tests for storage backends.
"""

import asyncio
import errno
import os
from pathlib import Path

import pytest

from skillreg.storage import FileSystemStorage, MemoryStorage, StorageError
from skillreg.storage.paths import expand_path, get_data_dir, get_global_config_path, get_skillreg_home


@pytest.fixture(params=["memory", "filesystem"])
def storage(request, temp_dir):
    """Provide each backend in turn."""
    if request.param == "memory":
        return MemoryStorage()
    return FileSystemStorage(temp_dir / "data")


# =============================================================================
# Backend Contract
# =============================================================================


class TestStorageContract:
    """Behaviour every backend must share."""

    @pytest.mark.asyncio
    async def test_get_missing(self, storage):
        assert await storage.get("skills/acme/x/metadata.json") is None

    @pytest.mark.asyncio
    async def test_put_and_get(self, storage):
        await storage.put("skills/acme/x/metadata.json", '{"a": 1}')
        assert await storage.get("skills/acme/x/metadata.json") == '{"a": 1}'

    @pytest.mark.asyncio
    async def test_put_overwrites(self, storage):
        await storage.put("k/v", "one")
        await storage.put("k/v", "two")
        assert await storage.get("k/v") == "two"

    @pytest.mark.asyncio
    async def test_text_round_trip(self, storage):
        """Test non-ASCII text and line endings survive unchanged."""
        value = "---\r\nname: x\r\n---\nhéllo ✓\n"
        await storage.put("k/v", value)
        assert await storage.get("k/v") == value

    @pytest.mark.asyncio
    async def test_delete(self, storage):
        await storage.put("k/v", "value")
        assert await storage.delete("k/v") is True
        assert await storage.get("k/v") is None
        assert await storage.delete("k/v") is False

    @pytest.mark.asyncio
    async def test_put_if_absent(self, storage):
        """Test only the first conditional write lands."""
        assert await storage.put_if_absent("k/v", "first") is True
        assert await storage.put_if_absent("k/v", "second") is False
        assert await storage.get("k/v") == "first"

    @pytest.mark.asyncio
    async def test_put_if_absent_race(self, storage):
        """Test exactly one of many concurrent conditional writes wins."""
        results = await asyncio.gather(*(storage.put_if_absent("k/v", str(i)) for i in range(20)))
        assert results.count(True) == 1
        winner = results.index(True)
        assert await storage.get("k/v") == str(winner)

    @pytest.mark.asyncio
    async def test_list_prefix(self, storage):
        keys = [
            "skills/acme/x/metadata.json",
            "skills/acme/x/versions/1.0.0.md",
            "skills/acme/user.json",
            "skills/acme-labs/y/metadata.json",
            "other/key",
        ]
        for key in keys:
            await storage.put(key, "v")

        assert sorted(await storage.list("skills/acme/")) == [
            "skills/acme/user.json",
            "skills/acme/x/metadata.json",
            "skills/acme/x/versions/1.0.0.md",
        ]
        assert len(await storage.list("skills/")) == 4

    @pytest.mark.asyncio
    async def test_list_partial_segment(self, storage):
        """Test prefixes that end mid-segment still match."""
        await storage.put("skills/acme/x/metadata.json", "v")
        await storage.put("skills/acme-labs/y/metadata.json", "v")
        assert len(await storage.list("skills/acme")) == 2

    @pytest.mark.asyncio
    async def test_list_empty(self, storage):
        assert await storage.list("skills/") == []


# =============================================================================
# MemoryStorage
# =============================================================================


class TestMemoryStorage:
    """Tests specific to MemoryStorage."""

    @pytest.mark.asyncio
    async def test_len_and_clear(self):
        storage = MemoryStorage()
        await storage.put("a", "1")
        await storage.put("b", "2")
        assert len(storage) == 2

        storage.clear()
        assert len(storage) == 0


# =============================================================================
# FileSystemStorage
# =============================================================================


class TestFileSystemStorage:
    """Tests specific to FileSystemStorage."""

    def test_creates_base_path(self, temp_dir):
        base = temp_dir / "nested" / "data"
        FileSystemStorage(base)
        assert base.is_dir()

    def test_default_base_path(self, mock_skillreg_home):
        """Test the default root lives under SKILLREG_HOME."""
        storage = FileSystemStorage()
        assert storage.base_path == mock_skillreg_home.resolve() / "data"
        assert storage.base_path.is_dir()

    @pytest.mark.asyncio
    async def test_keys_map_to_files(self, temp_dir):
        storage = FileSystemStorage(temp_dir)
        await storage.put("skills/acme/x/versions/1.0.0.md", "content")
        path = temp_dir / "skills" / "acme" / "x" / "versions" / "1.0.0.md"
        assert path.read_text(encoding="utf-8") == "content"

    @pytest.mark.asyncio
    async def test_persists_across_instances(self, temp_dir):
        await FileSystemStorage(temp_dir).put("k/v", "value")
        assert await FileSystemStorage(temp_dir).get("k/v") == "value"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("key", ["", "../escape", "a/../b", "a//b", "/abs", "a\\b", "a/./b"])
    async def test_rejects_unsafe_keys(self, temp_dir, key):
        """Test keys cannot address files outside the base directory."""
        storage = FileSystemStorage(temp_dir)
        with pytest.raises(StorageError) as exc_info:
            await storage.put(key, "value")
        assert exc_info.value.key == key

    @pytest.mark.asyncio
    async def test_rejects_reserved_names(self, temp_dir):
        storage = FileSystemStorage(temp_dir)
        with pytest.raises(StorageError):
            await storage.get("k/.tmp-abc")

    @pytest.mark.asyncio
    async def test_no_temp_files_left(self, temp_dir):
        """Test overwrites leave only the final file behind."""
        storage = FileSystemStorage(temp_dir)
        await storage.put("k/v", "one")
        await storage.put("k/v", "two")
        assert sorted(p.name for p in (temp_dir / "k").iterdir()) == ["v"]

    @pytest.mark.asyncio
    async def test_failed_conditional_write_leaves_key_absent(self, temp_dir, monkeypatch):
        """Test a write that dies partway never occupies the key."""
        storage = FileSystemStorage(temp_dir)
        real_fdopen = os.fdopen
        failures = [OSError(errno.ENOSPC, "No space left on device")]

        class PartialFile:
            def __init__(self, f):
                self._f = f

            def __enter__(self):
                return self

            def __exit__(self, *exc_info):
                self._f.close()
                return False

            def write(self, value):
                self._f.write(value[:5])
                self._f.flush()
                raise failures.pop()

        def flaky_fdopen(*args, **kwargs):
            f = real_fdopen(*args, **kwargs)
            return PartialFile(f) if failures else f

        monkeypatch.setattr(os, "fdopen", flaky_fdopen)

        with pytest.raises(StorageError):
            await storage.put_if_absent("k/v", "full content")

        assert await storage.get("k/v") is None
        assert list((temp_dir / "k").iterdir()) == []

        assert await storage.put_if_absent("k/v", "full content") is True
        assert await storage.get("k/v") == "full content"

    @pytest.mark.asyncio
    async def test_conditional_write_leaves_no_temp_files(self, temp_dir):
        storage = FileSystemStorage(temp_dir)
        assert await storage.put_if_absent("k/v", "one") is True
        assert await storage.put_if_absent("k/v", "two") is False
        assert sorted(p.name for p in (temp_dir / "k").iterdir()) == ["v"]

    @pytest.mark.asyncio
    async def test_list_skips_temp_files(self, temp_dir):
        storage = FileSystemStorage(temp_dir)
        await storage.put("k/v", "value")
        (temp_dir / "k" / ".tmp-leftover").write_text("partial")
        assert await storage.list("k/") == ["k/v"]


# =============================================================================
# Paths
# =============================================================================


class TestPaths:
    """Tests for path helpers."""

    def test_home_from_env(self, mock_skillreg_home):
        assert get_skillreg_home() == mock_skillreg_home.resolve()
        assert get_global_config_path() == mock_skillreg_home.resolve() / "config.yaml"
        assert get_data_dir() == mock_skillreg_home.resolve() / "data"

    def test_default_home(self, monkeypatch):
        monkeypatch.delenv("SKILLREG_HOME", raising=False)
        assert get_skillreg_home() == Path.home() / ".skillreg"

    def test_expand_user(self):
        assert expand_path("~/x") == (Path.home() / "x").resolve()

    def test_expand_env_var(self, monkeypatch, temp_dir):
        monkeypatch.setenv("SKILLREG_TEST_DIR", str(temp_dir))
        assert expand_path("$SKILLREG_TEST_DIR/data") == (temp_dir / "data").resolve()
