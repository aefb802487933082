"""
Configuration loader for skillreg.

Loads and merges configuration from multiple sources:
1. Default values
2. Global config (~/.skillreg/config.yaml)
3. An explicit config file
4. Environment variables (SKILLREG_*)
"""

import logging
import os
import re
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from skillreg.config.merger import deep_merge, set_nested_value
from skillreg.config.schema import Config
from skillreg.storage.paths import get_global_config_path

logger = logging.getLogger(__name__)

ENV_PREFIX = "SKILLREG_"

# Environment variables that are not config overrides
_ENV_RESERVED = {"SKILLREG_HOME"}


class ConfigurationError(Exception):
    """Raised when configuration loading or validation fails."""

    pass


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a YAML configuration file.

    Args:
        path: Path to the YAML file.

    Returns:
        Parsed configuration dictionary (empty if the file is missing).

    Raises:
        ConfigurationError: If the file cannot be read or parsed.
    """
    try:
        with open(path, encoding="utf-8") as f:
            content = yaml.safe_load(f)
    except FileNotFoundError:
        return {}
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in {path}: {e}") from e
    except OSError as e:
        raise ConfigurationError(f"Cannot read {path}: {e}") from e

    if content is None:
        return {}
    if not isinstance(content, dict):
        raise ConfigurationError(f"Config file {path} must contain a YAML mapping")
    return content


def save_yaml_file(path: Path, config: dict[str, Any]) -> None:
    """
    Save a configuration dictionary to a YAML file.

    Args:
        path: Path to the YAML file.
        config: Configuration dictionary to save.

    Raises:
        ConfigurationError: If the file cannot be written.
    """
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            yaml.dump(config, f, default_flow_style=False, sort_keys=False, allow_unicode=True)
    except OSError as e:
        raise ConfigurationError(f"Cannot write {path}: {e}") from e


def apply_env_overrides(config: dict[str, Any], environ: dict[str, str] | None = None) -> dict[str, Any]:
    """
    Apply environment variable overrides to configuration.

    Environment variables follow the pattern
    SKILLREG_<SECTION>__<KEY>=<value>; a double underscore separates
    nesting levels so keys may contain single underscores.

    Args:
        config: Configuration dictionary to modify.
        environ: Environment to read. Defaults to os.environ.

    Returns:
        Configuration with environment overrides applied.

    Examples:
        SKILLREG_STORAGE__BACKEND=memory -> storage.backend = "memory"
        SKILLREG_LIMITS__MAX_SKILL_BYTES=1024 -> limits.max_skill_bytes = 1024
    """
    environ = os.environ if environ is None else environ

    for key, value in environ.items():
        if not key.startswith(ENV_PREFIX) or key in _ENV_RESERVED:
            continue

        config_key = key[len(ENV_PREFIX) :].lower().replace("__", ".")
        if not config_key:
            continue

        logger.debug(f"Config override from {key}")
        config = set_nested_value(config, config_key, _parse_env_value(value))

    return config


def _parse_env_value(value: str) -> Any:
    """
    Parse an environment variable value to the appropriate type.

    Args:
        value: String value from environment.

    Returns:
        Parsed value (bool, int, float, or string).
    """
    # Boolean
    if value.lower() in ("true", "yes", "on"):
        return True
    if value.lower() in ("false", "no", "off"):
        return False

    # Integer
    if re.match(r"^-?\d+$", value):
        return int(value)

    # Float
    if re.match(r"^-?\d+\.\d+$", value):
        return float(value)

    # String
    return value


def load_config(
    config_path: Path | None = None,
    skip_global: bool = False,
    skip_env: bool = False,
) -> Config:
    """
    Load and merge configuration from all sources.

    Loading order (later overrides earlier):
    1. Default values from Config model
    2. Global config (~/.skillreg/config.yaml)
    3. ``config_path`` if given
    4. Environment variables (SKILLREG_*)

    Args:
        config_path: Extra YAML file to merge on top of the global config.
        skip_global: Skip loading the global configuration file.
        skip_env: Skip environment variable overrides.

    Returns:
        Merged and validated Config object.

    Raises:
        ConfigurationError: If configuration is invalid.
    """
    # 1. Start with defaults
    config_dict = Config().model_dump()

    # 2. Load global config
    if not skip_global:
        global_path = get_global_config_path()
        if global_path.exists():
            logger.debug(f"Loading global config from {global_path}")
            config_dict = deep_merge(config_dict, load_yaml_file(global_path))

    # 3. Load explicit config
    if config_path is not None:
        if not Path(config_path).exists():
            raise ConfigurationError(f"Config file not found: {config_path}")
        logger.debug(f"Loading config from {config_path}")
        config_dict = deep_merge(config_dict, load_yaml_file(Path(config_path)))

    # 4. Apply environment variables
    if not skip_env:
        config_dict = apply_env_overrides(config_dict)

    # 5. Validate and return
    try:
        return Config.model_validate(config_dict)
    except ValidationError as e:
        raise ConfigurationError(f"Configuration validation failed: {e}") from e


# Singleton for cached config
_cached_config: Config | None = None


def get_config(reload: bool = False) -> Config:
    """
    Get the global configuration instance.

    Uses a cached instance for performance. Use reload=True to force refresh.

    Args:
        reload: Force reload configuration from disk.

    Returns:
        Config instance.
    """
    global _cached_config

    if _cached_config is None or reload:
        _cached_config = load_config()

    return _cached_config


def clear_config_cache() -> None:
    """Clear the cached configuration."""
    global _cached_config
    _cached_config = None
