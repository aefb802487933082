"""Configuration system for skillreg."""

from skillreg.config.loader import (
    ConfigurationError,
    apply_env_overrides,
    clear_config_cache,
    get_config,
    load_config,
    load_yaml_file,
    save_yaml_file,
)
from skillreg.config.merger import deep_merge, get_nested_value, set_nested_value
from skillreg.config.schema import Config, LimitsConfig, StorageConfig

__all__ = [
    "Config",
    "ConfigurationError",
    "LimitsConfig",
    "StorageConfig",
    "apply_env_overrides",
    "clear_config_cache",
    "deep_merge",
    "get_config",
    "get_nested_value",
    "load_config",
    "load_yaml_file",
    "save_yaml_file",
    "set_nested_value",
]
