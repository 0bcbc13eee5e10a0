"""Exception hierarchy for kinesis_reader.

Everything the package raises derives from KinesisReaderError so callers can
tell reader failures apart from their own bugs. The split that matters for a
caller is between TransientKinesisError (back off and call again) and the
other kinds (fix the input or the deployment).
"""


class KinesisReaderError(Exception):
    """Base class for all errors raised by kinesis_reader."""

    pass


class TransientKinesisError(KinesisReaderError):
    """Raised when the service or the network failed in a way that may go away.

    Covers throttling, 5xx responses, connection failures and timeouts, and an
    iterator that expired twice in a row within one read. The reader never
    retries these itself; backoff policy belongs to the caller.
    """

    pass


class ExpiredIteratorError(KinesisReaderError):
    """Raised by the client when a shard iterator is no longer valid.

    ShardRecordsIterator recovers from this once per read by deriving a fresh
    iterator from its current checkpoint.
    """

    pass


class KinesisClientError(KinesisReaderError):
    """Raised for non-retryable failures such as bad arguments or missing streams."""

    pass


class ConfigurationError(KinesisReaderError, ValueError):
    """Raised when reader configuration is invalid."""

    pass
