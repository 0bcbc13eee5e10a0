"""kinesis_reader: checkpointed sequential reading of Kinesis shards.

The center of the package is ShardRecordsIterator, which reads one shard in
order, drops records its checkpoint already covers, survives expired shard
iterators, and exposes the checkpoint after every record it hands out.
"""

# Core types
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

# Reader
from kinesis_reader.sources.shard_records_iterator import ShardRecordsIterator

# Client
from kinesis_reader.client.kinesis_client import SimplifiedKinesisClient

# Configuration
from kinesis_reader.config.settings import ReaderConfig, load_reader_config

# Monitoring
from kinesis_reader.monitoring.metrics import MetricsCollector

__version__ = "0.1.0"

__all__ = [
    # Core types
    "ShardCheckpoint",
    "RecordFilter",
    "KinesisRecord",
    "GetKinesisRecordsResult",
    "InitialPosition",
    "ShardIteratorType",
    "StartingPoint",
    # Errors
    "KinesisReaderError",
    "TransientKinesisError",
    "ExpiredIteratorError",
    "KinesisClientError",
    "ConfigurationError",
    # Reader
    "ShardRecordsIterator",
    # Client
    "SimplifiedKinesisClient",
    # Configuration
    "ReaderConfig",
    "load_reader_config",
    # Monitoring
    "MetricsCollector",
]
