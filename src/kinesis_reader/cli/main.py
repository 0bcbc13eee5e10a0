"""kinesis-reader CLI main module.

This module provides the main entry point for the kinesis-reader command-line
interface: reading a shard to stdout, validating configuration files, and
listing shards.
"""

import argparse
import json
import logging
import sys
import time
from pathlib import Path

from kinesis_reader import __version__
from kinesis_reader.client.kinesis_client import SimplifiedKinesisClient
from kinesis_reader.config.environment import convert_value
from kinesis_reader.config.loaders import save_toml
from kinesis_reader.config.settings import ReaderConfig, load_reader_config
from kinesis_reader.core.errors import KinesisReaderError, TransientKinesisError
from kinesis_reader.monitoring.metrics import MetricsCollector
from kinesis_reader.sources.shard_records_iterator import ShardRecordsIterator


logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

# Raw metric records kept while reading; the summary printed at exit covers all of them.
METRICS_HISTORY = 1000


def parse_overrides(overrides: list[str] | None) -> dict[str, str]:
    """Parse ``key=value`` override arguments.

    Raises:
        ValueError: If an override has no ``=``.
    """
    parsed = {}
    for override in overrides or []:
        key, sep, value = override.partition("=")
        if not sep or not key:
            raise ValueError(f"Invalid override format: {override!r} (expected key=value)")
        parsed[key.strip()] = value
    return parsed


def load_config(config_path: str, overrides: dict[str, str] | None = None) -> ReaderConfig:
    """Load reader configuration and apply command-line overrides on top."""
    config = load_reader_config(config_path)
    if not overrides:
        return config

    values = config.to_dict()
    for key, value in overrides.items():
        values[key] = convert_value(value)
    return ReaderConfig.from_dict(values)


def resolve_shard_id(config: ReaderConfig, client: SimplifiedKinesisClient) -> str:
    if config.shard_id:
        return config.shard_id
    shard_ids = client.list_shards(config.stream_name)
    if not shard_ids:
        raise KinesisReaderError(f"No shards found in stream: {config.stream_name}")
    return shard_ids[0]


def read_shard(
    config_path: str,
    overrides: dict[str, str] | None = None,
    max_records: int | None = None,
    exit_when_idle: bool = False,
) -> int:
    """Read one shard and print a line per record.

    At exit prints the final checkpoint and a summary of the fetch metrics
    as one JSON line.

    Args:
        config_path: Path to the reader configuration file.
        overrides: Optional configuration overrides.
        max_records: Stop after this many records.
        exit_when_idle: Stop at the first fetch that returns nothing instead
            of polling.

    Returns:
        Exit code (0 for success).
    """
    try:
        config = load_config(config_path, overrides)
    except (FileNotFoundError, KinesisReaderError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    logging.basicConfig(level=config.level, format=LOG_FORMAT)

    reader = None
    count = 0
    metrics = MetricsCollector(max_records=METRICS_HISTORY)
    try:
        client = SimplifiedKinesisClient.from_config(config)
        shard_id = resolve_shard_id(config, client)
        reader = ShardRecordsIterator(
            config.initial_checkpoint(shard_id), client, metrics=metrics
        )
        print(f"Consuming stream={config.stream_name}, shard={shard_id}")

        while max_records is None or count < max_records:
            try:
                record = reader.next()
            except TransientKinesisError as e:
                logger.warning("Transient failure reading %s: %s", shard_id, e)
                time.sleep(config.poll_interval)
                continue

            if record is None:
                if reader.is_closed or exit_when_idle:
                    break
                time.sleep(config.poll_interval)
                continue

            count += 1
            print(
                f"SequenceNumber={record.sequence_number} "
                f"PartitionKey={record.partition_key} Bytes={len(record.data)}"
            )
    except KeyboardInterrupt:
        pass
    except KinesisReaderError as e:
        print(f"Error reading shard: {e}", file=sys.stderr)
        return 1

    print(f"Read {count} records")
    if reader is not None:
        print(
            json.dumps(
                {
                    "checkpoint": reader.get_checkpoint().to_dict(),
                    "metrics": metrics.summary(),
                }
            )
        )
    return 0


def validate_config(config_path: str) -> bool:
    """Validate a reader configuration file.

    Returns:
        True if valid, False otherwise.
    """
    try:
        load_reader_config(config_path)
    except (FileNotFoundError, KinesisReaderError, ValueError) as e:
        print(f"Error validating config: {e}", file=sys.stderr)
        return False
    return True


def list_shards(config_path: str) -> int:
    """Print the shard ids of the configured stream."""
    try:
        config = load_reader_config(config_path)
        shard_ids = SimplifiedKinesisClient.from_config(config).list_shards(config.stream_name)
    except (FileNotFoundError, KinesisReaderError, ValueError) as e:
        print(f"Error listing shards: {e}", file=sys.stderr)
        return 1

    for shard_id in shard_ids:
        print(shard_id)
    return 0


def create_config_template(output_path: str, stream_name: str = "my-stream") -> bool:
    """Write a reader configuration template.

    Returns:
        True if successful.
    """
    template = {"reader": ReaderConfig(stream_name=stream_name).to_dict()}
    try:
        save_toml(template, output_path)
    except OSError as e:
        print(f"Error creating template: {e}", file=sys.stderr)
        return False
    print(f"Created reader configuration at {output_path}")
    return True


def main(argv: list[str] | None = None) -> int:
    """Execute the kinesis-reader CLI program.

    Args:
        argv: List of command-line arguments. If None, sys.argv is used.

    Returns:
        An exit code (0 for success, non-zero for error).
    """
    parser = argparse.ArgumentParser(
        prog="kinesis-reader",
        description="kinesis-reader: checkpointed sequential reader for Kinesis shards.",
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    # Command: read
    read_parser = subparsers.add_parser("read", help="Read records from one shard")
    read_parser.add_argument(
        "--config-path", "-c", required=True, help="Path to the configuration file"
    )
    read_parser.add_argument(
        "--override",
        "-o",
        action="append",
        help="Override a reader setting (format: key=value)",
    )
    read_parser.add_argument(
        "--max-records", "-n", type=int, default=None, help="Stop after this many records"
    )
    read_parser.add_argument(
        "--exit-when-idle",
        action="store_true",
        help="Exit when a fetch returns no records instead of polling",
    )

    # Command: validate
    validate_parser = subparsers.add_parser("validate", help="Validate a reader configuration")
    validate_parser.add_argument(
        "--config-path", "-c", required=True, help="Path to the configuration file"
    )

    # Command: shards
    shards_parser = subparsers.add_parser("shards", help="List the shards of the stream")
    shards_parser.add_argument(
        "--config-path", "-c", required=True, help="Path to the configuration file"
    )

    # Command: init
    init_parser = subparsers.add_parser("init", help="Create a configuration template")
    init_parser.add_argument("--output", "-o", required=True, help="Output path")
    init_parser.add_argument("--stream-name", default="my-stream", help="Stream name to use")

    # Command: version
    subparsers.add_parser("version", help="Show version information")

    args = parser.parse_args(argv)

    if args.command == "read":
        if not Path(args.config_path).exists():
            print(f"Error: Config file not found: {args.config_path}", file=sys.stderr)
            return 1
        try:
            overrides = parse_overrides(args.override)
        except ValueError as e:
            print(f"Error: {e}", file=sys.stderr)
            return 1
        return read_shard(
            args.config_path,
            overrides=overrides,
            max_records=args.max_records,
            exit_when_idle=args.exit_when_idle,
        )

    elif args.command == "validate":
        if validate_config(args.config_path):
            print(f"Configuration is valid: {args.config_path}")
            return 0
        return 1

    elif args.command == "shards":
        return list_shards(args.config_path)

    elif args.command == "init":
        return 0 if create_config_template(args.output, args.stream_name) else 1

    elif args.command == "version":
        print(f"kinesis-reader version {__version__}")
        return 0

    parser.print_help()
    return 0


if __name__ == "__main__":
    sys.exit(main())
