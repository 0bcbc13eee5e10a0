"""Configuration for kinesis_reader.

Reader settings live in TOML files (``[reader]`` table) and can be
overridden through ``KINESIS_READER_*`` environment variables.
"""

from kinesis_reader.config.environment import apply_environment_overrides, convert_value
from kinesis_reader.config.loaders import (
    deep_merge_dict,
    load_config_with_includes,
    load_toml,
    save_toml,
)
from kinesis_reader.config.settings import ReaderConfig, load_reader_config

__all__ = [
    "ReaderConfig",
    "load_reader_config",
    "load_toml",
    "save_toml",
    "deep_merge_dict",
    "load_config_with_includes",
    "apply_environment_overrides",
    "convert_value",
]
