"""
Registry factory - builds a storage backend and registry from config.
"""

import logging

from skillreg.config import Config, StorageConfig, get_config
from skillreg.skills.registry import SkillRegistry
from skillreg.storage import FileSystemStorage, MemoryStorage, StorageBackend, expand_path

logger = logging.getLogger(__name__)


def create_storage(config: StorageConfig | None = None) -> StorageBackend:
    """Create the storage backend named by ``config``.

    Args:
        config: Storage configuration. Defaults to StorageConfig().

    Returns:
        StorageBackend instance

    Raises:
        ValueError: If the backend name is unknown
    """
    config = config or StorageConfig()

    if config.backend == "memory":
        logger.debug("Using in-memory storage")
        return MemoryStorage()

    if config.backend == "filesystem":
        storage = FileSystemStorage(expand_path(config.path) if config.path else None)
        logger.debug(f"Using filesystem storage at {storage.base_path}")
        return storage

    raise ValueError(f"Unknown storage backend: {config.backend}")


def create_registry(config: Config | None = None) -> SkillRegistry:
    """Create a SkillRegistry from configuration.

    Args:
        config: Configuration to use. Loads the global config when omitted.

    Returns:
        SkillRegistry instance
    """
    config = config or get_config()
    return SkillRegistry(
        create_storage(config.storage),
        max_skill_bytes=config.limits.max_skill_bytes,
    )
