"""Shard checkpoints.

A ShardCheckpoint is an immutable position within one shard. It can derive a
fresh service iterator at any time, which is what lets the reader survive
iterators that expire server-side: the iterator is disposable, the checkpoint
is not.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

from kinesis_reader.core.record import KinesisRecord
from kinesis_reader.core.starting_point import ShardIteratorType, StartingPoint
from kinesis_reader.typing import ShardRecordsClient


_SEQUENCE_TYPES = (ShardIteratorType.AT_SEQUENCE_NUMBER, ShardIteratorType.AFTER_SEQUENCE_NUMBER)


@dataclass(frozen=True)
class ShardCheckpoint:
    """Position within a single shard.

    Attributes:
        stream_name: Name of the stream.
        shard_id: Id of the shard within the stream.
        iterator_type: How the position is expressed.
        sequence_number: Sequence number for AT/AFTER_SEQUENCE_NUMBER positions.
        sub_sequence_number: Position inside an aggregated record, for
            AT/AFTER_SEQUENCE_NUMBER positions.
        timestamp: Arrival timestamp for AT_TIMESTAMP positions.

    Validation Rules:
        - AT/AFTER_SEQUENCE_NUMBER require a sequence number, other types forbid it
        - AT_TIMESTAMP requires a timestamp, other types forbid it
        - sub_sequence_number is only allowed with a sequence number
        - a naive timestamp is taken to be UTC
    """

    stream_name: str
    shard_id: str
    iterator_type: ShardIteratorType
    sequence_number: str | None = None
    sub_sequence_number: int | None = None
    timestamp: datetime | None = None

    def __post_init__(self):
        """Validate the position.

        Raises:
            ValueError: If the fields do not describe a valid position.
        """
        if self.iterator_type in _SEQUENCE_TYPES:
            if self.sequence_number is None:
                raise ValueError(f"{self.iterator_type.value} checkpoint requires a sequence number")
        else:
            if self.sequence_number is not None or self.sub_sequence_number is not None:
                raise ValueError(
                    f"{self.iterator_type.value} checkpoint does not take a sequence number"
                )

        if self.iterator_type is ShardIteratorType.AT_TIMESTAMP:
            if self.timestamp is None:
                raise ValueError("AT_TIMESTAMP checkpoint requires a timestamp")
        elif self.timestamp is not None:
            raise ValueError(f"{self.iterator_type.value} checkpoint does not take a timestamp")

        if self.timestamp is not None and self.timestamp.tzinfo is None:
            object.__setattr__(self, "timestamp", self.timestamp.replace(tzinfo=timezone.utc))

    @classmethod
    def from_starting_point(
        cls, stream_name: str, shard_id: str, starting_point: StartingPoint
    ) -> "ShardCheckpoint":
        """Create the checkpoint a fresh reader starts from.

        Args:
            stream_name: Name of the stream.
            shard_id: Id of the shard.
            starting_point: Initial position in the shard.

        Returns:
            A checkpoint at the starting point.
        """
        return cls(
            stream_name=stream_name,
            shard_id=shard_id,
            iterator_type=starting_point.iterator_type,
            timestamp=starting_point.timestamp,
        )

    def get_shard_iterator(self, client: ShardRecordsClient) -> str:
        """Ask the service for an iterator positioned at this checkpoint.

        A checkpoint taken after a record may sit inside an aggregated record,
        so it asks for an iterator AT the record's sequence number and leaves
        the already consumed part to RecordFilter.

        Args:
            client: Client used to call the service.

        Returns:
            A fresh shard iterator.

        Raises:
            TransientKinesisError: If the service call fails transiently.
        """
        if self._is_inside_user_record():
            return client.get_shard_iterator(
                self.stream_name,
                self.shard_id,
                ShardIteratorType.AT_SEQUENCE_NUMBER,
                starting_sequence_number=self.sequence_number,
            )
        return client.get_shard_iterator(
            self.stream_name,
            self.shard_id,
            self.iterator_type,
            starting_sequence_number=self.sequence_number,
            timestamp=self.timestamp,
        )

    def move_after(self, record: KinesisRecord) -> "ShardCheckpoint":
        """Return the checkpoint positioned just after ``record``."""
        return ShardCheckpoint(
            stream_name=self.stream_name,
            shard_id=self.shard_id,
            iterator_type=ShardIteratorType.AFTER_SEQUENCE_NUMBER,
            sequence_number=record.sequence_number,
            sub_sequence_number=record.sub_sequence_number,
        )

    def is_before_or_at(self, record: KinesisRecord) -> bool:
        """Check whether ``record`` has not been consumed yet from this position.

        Args:
            record: Record read from the same shard.

        Returns:
            True if a reader at this checkpoint should still deliver ``record``.
        """
        if self.iterator_type is ShardIteratorType.AT_TIMESTAMP:
            arrival = record.approximate_arrival_timestamp
            return arrival is None or self.timestamp <= arrival
        if self.sequence_number is None:
            # TRIM_HORIZON and LATEST precede every record that can be read.
            return True

        position = (int(self.sequence_number), self.sub_sequence_number or 0)
        other = record.extended_sequence_number
        if position == other:
            return self.iterator_type is ShardIteratorType.AT_SEQUENCE_NUMBER
        return position < other

    def _is_inside_user_record(self) -> bool:
        return (
            self.iterator_type is ShardIteratorType.AFTER_SEQUENCE_NUMBER
            and self.sub_sequence_number is not None
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a plain dictionary suitable for JSON or TOML."""
        state: dict[str, Any] = {
            "stream_name": self.stream_name,
            "shard_id": self.shard_id,
            "iterator_type": self.iterator_type.value,
        }
        if self.sequence_number is not None:
            state["sequence_number"] = self.sequence_number
        if self.sub_sequence_number is not None:
            state["sub_sequence_number"] = self.sub_sequence_number
        if self.timestamp is not None:
            state["timestamp"] = self.timestamp.isoformat()
        return state

    @classmethod
    def from_dict(cls, state: dict[str, Any]) -> "ShardCheckpoint":
        """Rebuild a checkpoint produced by ``to_dict``.

        Raises:
            KeyError: If a required key is missing.
            ValueError: If the stored position is invalid.
        """
        timestamp = state.get("timestamp")
        if isinstance(timestamp, str):
            timestamp = datetime.fromisoformat(timestamp)
        return cls(
            stream_name=state["stream_name"],
            shard_id=state["shard_id"],
            iterator_type=ShardIteratorType(state["iterator_type"]),
            sequence_number=state.get("sequence_number"),
            sub_sequence_number=state.get("sub_sequence_number"),
            timestamp=timestamp,
        )

    def __str__(self) -> str:
        position = self.sequence_number or (self.timestamp and self.timestamp.isoformat()) or ""
        return f"{self.stream_name}/{self.shard_id} {self.iterator_type.value} {position}".rstrip()
