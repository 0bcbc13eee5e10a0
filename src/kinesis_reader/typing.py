"""Type definitions for kinesis_reader.

Provides the protocols the shard reader depends on. ShardRecordsIterator only
talks to its collaborators through these, so tests and alternative backends
can supply their own checkpoint, client, or filter implementations.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime
from typing import TYPE_CHECKING, Any, Protocol, TypeAlias, runtime_checkable

if TYPE_CHECKING:
    from kinesis_reader.core.record import GetKinesisRecordsResult, KinesisRecord
    from kinesis_reader.core.starting_point import ShardIteratorType


StateDict: TypeAlias = dict[str, Any]


@runtime_checkable
class ShardRecordsClient(Protocol):
    """Protocol for the service client a reader fetches through.

    Implementations must raise ExpiredIteratorError for an expired iterator
    and TransientKinesisError for other recoverable service failures.
    """

    def get_shard_iterator(
        self,
        stream_name: str,
        shard_id: str,
        iterator_type: ShardIteratorType,
        starting_sequence_number: str | None = None,
        timestamp: datetime | None = None,
    ) -> str: ...

    def get_records(
        self, shard_iterator: str, stream_name: str, shard_id: str
    ) -> GetKinesisRecordsResult: ...


@runtime_checkable
class CheckpointLike(Protocol):
    """Protocol for immutable shard positions.

    ``to_dict`` must produce what ``ShardCheckpoint.from_dict`` accepts, since
    reader state is restored as a ShardCheckpoint.
    """

    @property
    def stream_name(self) -> str: ...

    @property
    def shard_id(self) -> str: ...

    def get_shard_iterator(self, client: ShardRecordsClient) -> str: ...

    def move_after(self, record: KinesisRecord) -> CheckpointLike: ...

    def to_dict(self) -> StateDict: ...


@runtime_checkable
class RecordFilterLike(Protocol):
    """Protocol for the step that drops already consumed records from a page."""

    def apply(
        self, records: Sequence[KinesisRecord], checkpoint: CheckpointLike
    ) -> list[KinesisRecord]: ...


@runtime_checkable
class Checkpointable(Protocol):
    """Protocol for objects that can be checkpointed via state dictionaries."""

    def get_state(self) -> StateDict:
        """Get object state for checkpointing."""
        ...

    def set_state(self, state: StateDict) -> None:
        """Restore object state from a checkpoint."""
        ...


__all__ = [
    "StateDict",
    "ShardRecordsClient",
    "CheckpointLike",
    "RecordFilterLike",
    "Checkpointable",
]
