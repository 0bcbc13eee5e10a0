"""Record value objects returned by the Kinesis client.

This module provides the immutable types the reader passes around:
- KinesisRecord: one record read from a shard
- GetKinesisRecordsResult: one page of records plus the iterator for the next page
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any


@dataclass(frozen=True)
class KinesisRecord:
    """A single record read from a shard.

    Attributes:
        data: Raw record payload.
        sequence_number: Service-assigned sequence number (decimal string,
            up to 128 bits, unique within the shard).
        partition_key: Partition key the producer used.
        stream_name: Stream the record was read from.
        shard_id: Shard the record was read from.
        sub_sequence_number: Position of a user record inside an aggregated
            record. Plain records use 0.
        approximate_arrival_timestamp: When the service accepted the record.
    """

    data: bytes
    sequence_number: str
    partition_key: str
    stream_name: str
    shard_id: str
    sub_sequence_number: int = 0
    approximate_arrival_timestamp: datetime | None = None

    @property
    def extended_sequence_number(self) -> tuple[int, int]:
        """Sort key ordering records within a shard."""
        return int(self.sequence_number), self.sub_sequence_number

    @classmethod
    def from_boto(cls, raw: dict[str, Any], stream_name: str, shard_id: str) -> "KinesisRecord":
        """Build a record from one entry of a boto3 ``get_records`` response.

        Args:
            raw: Entry of the ``Records`` list.
            stream_name: Stream the record was read from.
            shard_id: Shard the record was read from.

        Returns:
            The corresponding KinesisRecord.
        """
        return cls(
            data=raw["Data"],
            sequence_number=raw["SequenceNumber"],
            partition_key=raw["PartitionKey"],
            stream_name=stream_name,
            shard_id=shard_id,
            approximate_arrival_timestamp=raw.get("ApproximateArrivalTimestamp"),
        )

    def __len__(self) -> int:
        return len(self.data)


@dataclass(frozen=True)
class GetKinesisRecordsResult:
    """One page of records fetched from a shard.

    Attributes:
        records: Records in shard order, possibly empty.
        next_shard_iterator: Iterator to use for the following fetch. The
            service returns one even for an empty page; None means the shard
            has been closed and fully read.
        millis_behind_latest: How far the page is behind the tip of the shard.
    """

    records: list[KinesisRecord] = field(default_factory=list)
    next_shard_iterator: str | None = None
    millis_behind_latest: int = 0
