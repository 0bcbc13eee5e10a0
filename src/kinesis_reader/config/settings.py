"""Typed reader configuration.

A reader configuration file keeps its settings in a ``[reader]`` table:

```toml
[reader]
stream_name = "clickstream"
shard_id = "shardId-000000000000"
region_name = "eu-west-1"
initial_position = "TRIM_HORIZON"
limit = 500
poll_interval = 0.5
```

Environment variables ``KINESIS_READER_<KEY>`` override keys of that table,
e.g. ``KINESIS_READER_STREAM_NAME`` or ``KINESIS_READER_LOG_LEVEL``.
"""

import dataclasses
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Union

from kinesis_reader.config.environment import ENV_PREFIX, apply_environment_overrides
from kinesis_reader.config.loaders import load_config_with_includes
from kinesis_reader.core.checkpoint import ShardCheckpoint
from kinesis_reader.core.errors import ConfigurationError
from kinesis_reader.core.starting_point import InitialPosition, StartingPoint

# GetRecords accepts at most this many records per call.
MAX_RECORDS_LIMIT = 10_000

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass
class ReaderConfig:
    """Configuration for reading one shard.

    Attributes:
        stream_name: Name of the stream to read.
        shard_id: Shard to read. None means the first shard the stream lists.
        region_name: AWS region; None uses the boto3 default chain.
        endpoint_url: Alternative endpoint, e.g. a local Kinesis emulator.
        initial_position: LATEST, TRIM_HORIZON or AT_TIMESTAMP.
        initial_timestamp: Start time for AT_TIMESTAMP, ISO-8601 string or datetime.
        limit: Maximum records per GetRecords call.
        poll_interval: Seconds to wait after a fetch that returned nothing.
        log_level: Logging level name used by the command line.

    Validation Rules:
        - stream_name must be non-empty
        - initial_timestamp is required for AT_TIMESTAMP and forbidden otherwise
        - 1 <= limit <= 10000, poll_interval >= 0
    """

    stream_name: str = ""
    shard_id: str | None = None
    region_name: str | None = None
    endpoint_url: str | None = None
    initial_position: str = InitialPosition.LATEST.value
    initial_timestamp: str | datetime | None = None
    limit: int = 1000
    poll_interval: float = 1.0
    log_level: str = "INFO"

    def __post_init__(self):
        """Validate configuration after initialization.

        Raises:
            ConfigurationError: If configuration is invalid.
        """
        if not self.stream_name:
            raise ConfigurationError("stream_name is required")

        self.initial_position = str(self.initial_position).upper()
        try:
            position = InitialPosition(self.initial_position)
        except ValueError:
            choices = ", ".join(p.value for p in InitialPosition)
            raise ConfigurationError(
                f"initial_position must be one of {choices}, got {self.initial_position!r}"
            ) from None

        if position is InitialPosition.AT_TIMESTAMP and self.initial_timestamp is None:
            raise ConfigurationError("initial_timestamp is required for AT_TIMESTAMP")
        if position is not InitialPosition.AT_TIMESTAMP and self.initial_timestamp is not None:
            raise ConfigurationError(
                f"initial_timestamp is only valid with AT_TIMESTAMP, not {position.value}"
            )
        if self.initial_timestamp is not None:
            self._parsed_timestamp()

        if isinstance(self.limit, bool) or not isinstance(self.limit, int):
            raise ConfigurationError(f"limit must be an integer, got {self.limit!r}")
        if not 1 <= self.limit <= MAX_RECORDS_LIMIT:
            raise ConfigurationError(f"limit must be between 1 and {MAX_RECORDS_LIMIT}")
        if self.poll_interval < 0:
            raise ConfigurationError("poll_interval must be >= 0")

        self.log_level = str(self.log_level).upper()
        if self.log_level not in _LOG_LEVELS:
            raise ConfigurationError(f"log_level must be one of {', '.join(_LOG_LEVELS)}")

    def _parsed_timestamp(self) -> datetime:
        value = self.initial_timestamp
        if isinstance(value, str):
            try:
                value = datetime.fromisoformat(value)
            except ValueError as e:
                raise ConfigurationError(f"initial_timestamp is not ISO-8601: {value!r}") from e
        if not isinstance(value, datetime):
            raise ConfigurationError(f"initial_timestamp must be a datetime, got {value!r}")
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value

    @property
    def level(self) -> int:
        return logging.getLevelName(self.log_level)

    def starting_point(self) -> StartingPoint:
        """Starting point described by ``initial_position`` and ``initial_timestamp``."""
        position = InitialPosition(self.initial_position)
        if position is InitialPosition.AT_TIMESTAMP:
            return StartingPoint.at_timestamp(self._parsed_timestamp())
        return StartingPoint(position)

    def initial_checkpoint(self, shard_id: str) -> ShardCheckpoint:
        return ShardCheckpoint.from_starting_point(
            self.stream_name, shard_id, self.starting_point()
        )

    @classmethod
    def from_dict(cls, values: dict[str, Any]) -> "ReaderConfig":
        """Build a configuration from the ``[reader]`` table.

        Raises:
            ConfigurationError: On unknown keys or invalid values.
        """
        known = {f.name for f in dataclasses.fields(cls)}
        unknown = sorted(set(values) - known)
        if unknown:
            raise ConfigurationError(f"Unknown reader settings: {', '.join(unknown)}")

        values = dict(values)
        # Environment overrides may turn numeric-looking ids into numbers.
        for key in ("stream_name", "shard_id"):
            if values.get(key) is not None:
                values[key] = str(values[key])
        if "poll_interval" in values and isinstance(values["poll_interval"], int):
            values["poll_interval"] = float(values["poll_interval"])
        return cls(**values)

    def to_dict(self) -> dict[str, Any]:
        values = dataclasses.asdict(self)
        if isinstance(self.initial_timestamp, datetime):
            values["initial_timestamp"] = self.initial_timestamp.isoformat()
        return values


def load_reader_config(
    config_path: Union[str, Path], env_prefix: str = ENV_PREFIX
) -> ReaderConfig:
    """Load a ReaderConfig from a TOML file, applying environment overrides.

    Args:
        config_path: Path to the TOML file.
        env_prefix: Prefix of overriding environment variables.

    Returns:
        The validated configuration.

    Raises:
        FileNotFoundError: If the file (or an included file) does not exist.
        ConfigurationError: If the ``[reader]`` table is missing or invalid.
    """
    config = load_config_with_includes(config_path)
    table = config.get("reader")
    if not isinstance(table, dict):
        raise ConfigurationError(f"{config_path}: missing [reader] section")
    return ReaderConfig.from_dict(apply_environment_overrides(table, prefix=env_prefix))
