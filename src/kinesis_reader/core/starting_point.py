"""Where a reader starts when no checkpoint exists yet."""

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum


class ShardIteratorType(str, Enum):
    """Iterator types understood by ``GetShardIterator``."""

    AT_SEQUENCE_NUMBER = "AT_SEQUENCE_NUMBER"
    AFTER_SEQUENCE_NUMBER = "AFTER_SEQUENCE_NUMBER"
    TRIM_HORIZON = "TRIM_HORIZON"
    LATEST = "LATEST"
    AT_TIMESTAMP = "AT_TIMESTAMP"


class InitialPosition(str, Enum):
    """Initial position in a shard for a reader without a checkpoint."""

    LATEST = "LATEST"
    TRIM_HORIZON = "TRIM_HORIZON"
    AT_TIMESTAMP = "AT_TIMESTAMP"


@dataclass(frozen=True)
class StartingPoint:
    """Initial position plus, for AT_TIMESTAMP, the timestamp to start at.

    Examples:
        ```python
        StartingPoint(InitialPosition.TRIM_HORIZON)
        StartingPoint.at_timestamp(datetime(2024, 1, 1, tzinfo=timezone.utc))
        ```
    """

    position: InitialPosition = InitialPosition.LATEST
    timestamp: datetime | None = None

    def __post_init__(self):
        """Validate that a timestamp is given exactly when it is used.

        A naive timestamp is taken to be UTC.

        Raises:
            ValueError: If the position and timestamp do not agree.
        """
        if self.position is InitialPosition.AT_TIMESTAMP and self.timestamp is None:
            raise ValueError("AT_TIMESTAMP starting point requires a timestamp")
        if self.position is not InitialPosition.AT_TIMESTAMP and self.timestamp is not None:
            raise ValueError(f"{self.position.value} starting point does not take a timestamp")
        if self.timestamp is not None and self.timestamp.tzinfo is None:
            # Arrival timestamps from the service are UTC-aware.
            object.__setattr__(self, "timestamp", self.timestamp.replace(tzinfo=timezone.utc))

    @classmethod
    def at_timestamp(cls, timestamp: datetime) -> "StartingPoint":
        return cls(InitialPosition.AT_TIMESTAMP, timestamp)

    @property
    def iterator_type(self) -> ShardIteratorType:
        return ShardIteratorType(self.position.value)
