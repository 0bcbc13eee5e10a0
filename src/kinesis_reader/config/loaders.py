"""TOML configuration loading and saving utilities.

Reader configuration files are TOML. A file may pull shared settings from
other files through a top-level ``include`` list (paths relative to the
including file); the including file wins on conflicts.
"""

import tomllib
from pathlib import Path
from typing import Any, Union

import tomli_w


def load_toml(config_path: Union[str, Path]) -> dict[str, Any]:
    """Load a TOML configuration file.

    Args:
        config_path: Path to the TOML configuration file

    Returns:
        Dictionary containing the parsed TOML configuration

    Raises:
        FileNotFoundError: If the configuration file does not exist
        tomllib.TOMLDecodeError: If the configuration file is invalid TOML
    """
    config_path = Path(config_path)

    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    with config_path.open("rb") as f:
        return tomllib.load(f)


def save_toml(config: dict[str, Any], config_path: Union[str, Path]) -> None:
    """Save a configuration dictionary to a TOML file.

    None values are dropped since TOML has no null.

    Raises:
        OSError: If the file cannot be written
    """
    config_path = Path(config_path)
    config_path.parent.mkdir(parents=True, exist_ok=True)

    with config_path.open("wb") as f:
        tomli_w.dump(_drop_none(config), f)


def _drop_none(config: dict[str, Any]) -> dict[str, Any]:
    return {
        key: _drop_none(value) if isinstance(value, dict) else value
        for key, value in config.items()
        if value is not None
    }


def deep_merge_dict(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge two dictionaries, ``override`` taking precedence.

    Neither argument is modified.
    """
    result = dict(base)

    for key, override_value in override.items():
        base_value = result.get(key)
        if isinstance(base_value, dict) and isinstance(override_value, dict):
            result[key] = deep_merge_dict(base_value, override_value)
        else:
            result[key] = override_value

    return result


def load_config_with_includes(
    config_path: Union[str, Path],
    include_key: str = "include",
    _seen: frozenset[Path] = frozenset(),
) -> dict[str, Any]:
    """Load a TOML file and merge the files it includes beneath it.

    Args:
        config_path: Path to the TOML configuration file
        include_key: Top-level key listing included files

    Returns:
        The merged configuration, without the include key

    Raises:
        FileNotFoundError: If any configuration file does not exist
        RecursionError: If files include each other in a cycle
    """
    config_path = Path(config_path).resolve()
    if config_path in _seen:
        raise RecursionError(f"Circular include detected: {config_path}")

    config = load_toml(config_path)
    includes = config.pop(include_key, [])
    if isinstance(includes, str):
        includes = [includes]

    merged: dict[str, Any] = {}
    for include in includes:
        included = load_config_with_includes(
            config_path.parent / include, include_key, _seen | {config_path}
        )
        merged = deep_merge_dict(merged, included)

    return deep_merge_dict(merged, config)
