"""Record sources for kinesis_reader."""

from kinesis_reader.sources.shard_records_iterator import ShardRecordsIterator

__all__ = [
    "ShardRecordsIterator",
]
