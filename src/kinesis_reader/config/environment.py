"""Environment variable overrides for reader configuration.

A variable named ``KINESIS_READER_<SECTION>__<KEY>`` overrides ``key`` inside
table ``section``; a single-level name such as ``KINESIS_READER_LOG_LEVEL``
overrides a top-level key. Names are matched case-insensitively.
"""

import os
from typing import Any

ENV_PREFIX = "KINESIS_READER_"


def apply_environment_overrides(
    config: dict[str, Any], prefix: str = ENV_PREFIX, separator: str = "__"
) -> dict[str, Any]:
    """Apply environment variable overrides to a configuration dictionary.

    Args:
        config: The configuration dictionary to apply overrides to
        prefix: Prefix for environment variables to consider
        separator: Separator used to indicate nested keys

    Returns:
        A new configuration dictionary with overrides applied. Nested tables
        touched by an override are copied, never modified in place.
    """
    result = dict(config)

    for env_name, env_value in sorted(os.environ.items()):
        if not env_name.startswith(prefix):
            continue
        path = env_name[len(prefix) :]
        if not path:
            continue

        keys = [key.lower() for key in path.split(separator)]
        _set_nested_value(result, keys, convert_value(env_value))

    return result


def convert_value(value: str) -> Any:
    """Convert an environment string to bool, int, float, or leave it a string.

    Only ``true``/``false``/``yes``/``no`` become booleans, so numeric strings
    such as ``"1"`` stay numbers.
    """
    lowered = value.lower()
    if lowered in ("true", "yes"):
        return True
    if lowered in ("false", "no"):
        return False

    for convert in (int, float):
        try:
            return convert(value)
        except ValueError:
            continue
    return value


def _set_nested_value(config: dict[str, Any], keys: list[str], value: Any) -> None:
    head, *rest = keys
    if not rest:
        config[head] = value
        return

    child = config.get(head)
    child = dict(child) if isinstance(child, dict) else {}
    config[head] = child
    _set_nested_value(child, rest, value)
