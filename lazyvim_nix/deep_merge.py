"""Logic for deep merging settings dictionaries."""

from typing import Any

ADDITIVE_KEYS = frozenset({"extra_plugins"})


def deep_merge(base: dict[str, Any], update: dict[str, Any]) -> dict[str, Any]:
    """Deep merge two dictionaries.

    - Mappings are merged recursively.
    - Lists in 'update' replace 'base' lists, except for ADDITIVE_KEYS,
      which are concatenated without duplicates.
    """
    result = base.copy()
    for key, value in update.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = deep_merge(result[key], value)
        elif (
            key in ADDITIVE_KEYS
            and isinstance(value, list)
            and isinstance(result.get(key), list)
        ):
            result[key] = list(dict.fromkeys([*result[key], *value]))
        else:
            result[key] = value
    return result
