"""
Path utilities for skillreg.

Provides consistent path resolution for configuration and stored data.
"""

import os
from pathlib import Path


def get_skillreg_home() -> Path:
    """
    Get the skillreg home directory.

    Resolution order:
    1. SKILLREG_HOME environment variable
    2. Default: ~/.skillreg

    Returns:
        Path to the skillreg home directory.
    """
    env_home = os.environ.get("SKILLREG_HOME")
    if env_home:
        return Path(env_home).expanduser().resolve()
    return Path.home() / ".skillreg"


def get_global_config_path() -> Path:
    """
    Get the path to the global configuration file.

    Returns:
        Path to ~/.skillreg/config.yaml
    """
    return get_skillreg_home() / "config.yaml"


def get_data_dir() -> Path:
    """
    Get the default directory for filesystem storage.

    Returns:
        Path to ~/.skillreg/data/
    """
    return get_skillreg_home() / "data"


def expand_path(path: str | Path) -> Path:
    """
    Expand a path string, handling ~ and environment variables.

    Args:
        path: Path string or Path object.

    Returns:
        Expanded and resolved Path.
    """
    if isinstance(path, str):
        # Expand environment variables
        path = os.path.expandvars(path)
        # Expand user home
        path = os.path.expanduser(path)
    return Path(path).resolve()
