"""Value types shared by the reader, the client, and the filter."""

from kinesis_reader.core.checkpoint import ShardCheckpoint
from kinesis_reader.core.errors import (
    ConfigurationError,
    ExpiredIteratorError,
    KinesisClientError,
    KinesisReaderError,
    TransientKinesisError,
)
from kinesis_reader.core.filters import RecordFilter
from kinesis_reader.core.record import GetKinesisRecordsResult, KinesisRecord
from kinesis_reader.core.starting_point import InitialPosition, ShardIteratorType, StartingPoint

__all__ = [
    "ShardCheckpoint",
    "RecordFilter",
    "KinesisRecord",
    "GetKinesisRecordsResult",
    "InitialPosition",
    "ShardIteratorType",
    "StartingPoint",
    "KinesisReaderError",
    "TransientKinesisError",
    "ExpiredIteratorError",
    "KinesisClientError",
    "ConfigurationError",
]
