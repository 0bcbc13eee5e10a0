"""Kinesis service client."""

from kinesis_reader.client.kinesis_client import SimplifiedKinesisClient, translate_errors

__all__ = [
    "SimplifiedKinesisClient",
    "translate_errors",
]
