"""Test configuration for kinesis_reader."""

import os
import sys
from datetime import datetime, timezone

import pytest

# Add the src directory to the Python path so tests can import modules
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "src")))

from kinesis_reader.core.checkpoint import ShardCheckpoint  # noqa: E402
from kinesis_reader.core.record import KinesisRecord  # noqa: E402
from kinesis_reader.core.starting_point import ShardIteratorType  # noqa: E402

STREAM_NAME = "STREAM_NAME"
SHARD_ID = "SHARD_ID"

# Endpoint of a Kinesis-compatible service (e.g. LocalStack) for integration tests
INTEGRATION_ENDPOINT_ENV = "KINESIS_TEST_ENDPOINT_URL"


def pytest_configure(config):
    """Register custom markers for pytest."""
    config.addinivalue_line(
        "markers", "integration: mark test as needing a Kinesis-compatible endpoint"
    )


def pytest_addoption(parser):
    """Add command-line options to pytest."""
    parser.addoption(
        "--integration",
        action="store_true",
        default=False,
        help=f"run integration tests against ${INTEGRATION_ENDPOINT_ENV}",
    )


def pytest_collection_modifyitems(config, items):
    """Skip integration tests unless requested and an endpoint is configured."""
    if config.getoption("--integration") and os.environ.get(INTEGRATION_ENDPOINT_ENV):
        return

    skip_int = pytest.mark.skip(
        reason=f"integration test not selected (--integration and ${INTEGRATION_ENDPOINT_ENV})"
    )
    for item in items:
        if "integration" in item.keywords:
            item.add_marker(skip_int)


def make_record(
    sequence_number: int | str,
    data: bytes = b"payload",
    sub_sequence_number: int = 0,
    arrival: datetime | None = None,
    partition_key: str = "pk",
) -> KinesisRecord:
    """Build a record of the test shard."""
    return KinesisRecord(
        data=data,
        sequence_number=str(sequence_number),
        partition_key=partition_key,
        stream_name=STREAM_NAME,
        shard_id=SHARD_ID,
        sub_sequence_number=sub_sequence_number,
        approximate_arrival_timestamp=arrival or datetime(2024, 1, 1, tzinfo=timezone.utc),
    )


@pytest.fixture
def record_factory():
    """Factory fixture building records of the test shard."""
    return make_record


@pytest.fixture
def trim_horizon_checkpoint() -> ShardCheckpoint:
    """Checkpoint at the oldest record of the test shard."""
    return ShardCheckpoint(STREAM_NAME, SHARD_ID, ShardIteratorType.TRIM_HORIZON)


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Remove configuration overrides leaking in from the surrounding environment."""
    for name in list(os.environ):
        if name.startswith("KINESIS_READER_"):
            monkeypatch.delenv(name)
