"""Storage backends and path utilities for skillreg."""

from skillreg.storage.base import StorageBackend, StorageError
from skillreg.storage.filesystem import FileSystemStorage
from skillreg.storage.memory import MemoryStorage
from skillreg.storage.paths import (
    expand_path,
    get_data_dir,
    get_global_config_path,
    get_skillreg_home,
)

__all__ = [
    "FileSystemStorage",
    "MemoryStorage",
    "StorageBackend",
    "StorageError",
    "expand_path",
    "get_data_dir",
    "get_global_config_path",
    "get_skillreg_home",
]
