"""
Configuration merger for skillreg.

Implements deep merge of configuration dictionaries.
"""

from typing import Any


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """
    Deep merge two dictionaries.

    Merge rules:
    - Scalar values and lists: override replaces base
    - Dicts: recursive deep merge
    - null/None value: remove key from result

    Args:
        base: Base configuration dictionary.
        override: Override configuration dictionary.

    Returns:
        Merged configuration dictionary.

    Examples:
        >>> deep_merge({"storage": {"backend": "memory", "path": "/a"}}, {"storage": {"path": "/b"}})
        {'storage': {'backend': 'memory', 'path': '/b'}}
    """
    result = base.copy()

    for key, value in override.items():
        # Handle null (remove key)
        if value is None:
            result.pop(key, None)

        # Handle nested dict (recursive merge)
        elif isinstance(value, dict) and key in result and isinstance(result[key], dict):
            result[key] = deep_merge(result[key], value)

        # Default: replace
        else:
            result[key] = value

    return result


def get_nested_value(config: dict[str, Any], key_path: str) -> Any:
    """
    Get a nested value from a configuration dictionary.

    Args:
        config: Configuration dictionary.
        key_path: Dot-separated key path (e.g., "storage.backend").

    Returns:
        The value at the key path, or None if not found.
    """
    keys = key_path.split(".")
    current = config

    for key in keys:
        if isinstance(current, dict) and key in current:
            current = current[key]
        else:
            return None

    return current


def set_nested_value(config: dict[str, Any], key_path: str, value: Any) -> dict[str, Any]:
    """
    Set a nested value in a configuration dictionary.

    Creates intermediate dictionaries as needed.

    Args:
        config: Configuration dictionary.
        key_path: Dot-separated key path (e.g., "limits.max_skill_bytes").
        value: Value to set.

    Returns:
        Modified configuration dictionary.

    Examples:
        >>> set_nested_value({}, "storage.backend", "memory")
        {'storage': {'backend': 'memory'}}
    """
    keys = key_path.split(".")
    current = config

    for key in keys[:-1]:
        if key not in current or not isinstance(current[key], dict):
            current[key] = {}
        current = current[key]

    current[keys[-1]] = value
    return config
