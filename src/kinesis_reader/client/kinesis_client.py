"""boto3-backed Kinesis client used by shard readers.

This module wraps the handful of Kinesis calls a shard reader needs and maps
botocore failures onto the kinesis_reader error taxonomy:

- ExpiredIteratorException -> ExpiredIteratorError
- throttling, HTTP 5xx, connection failures, timeouts -> TransientKinesisError
- any other service error -> KinesisClientError
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime
from typing import TYPE_CHECKING, Any

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from kinesis_reader.core.errors import (
    ExpiredIteratorError,
    KinesisClientError,
    TransientKinesisError,
)
from kinesis_reader.core.record import GetKinesisRecordsResult, KinesisRecord
from kinesis_reader.core.starting_point import ShardIteratorType

if TYPE_CHECKING:
    from kinesis_reader.config.settings import ReaderConfig


logger = logging.getLogger(__name__)

_THROTTLING_CODES = frozenset(
    {
        "ProvisionedThroughputExceededException",
        "LimitExceededException",
        "KMSThrottlingException",
        "ThrottlingException",
    }
)
_EXPIRED_ITERATOR_CODE = "ExpiredIteratorException"


@contextmanager
def translate_errors(operation: str) -> Iterator[None]:
    """Re-raise botocore failures of ``operation`` as kinesis_reader errors.

    Args:
        operation: Name of the Kinesis call, used in error messages.

    Raises:
        ExpiredIteratorError: The shard iterator has expired.
        TransientKinesisError: The call was throttled, the service failed, or
            the network did.
        KinesisClientError: Any other service error.
    """
    try:
        yield
    except ClientError as e:
        error = e.response.get("Error", {})
        code = error.get("Code", "")
        status = e.response.get("ResponseMetadata", {}).get("HTTPStatusCode", 0)
        message = error.get("Message", str(e))

        if code == _EXPIRED_ITERATOR_CODE:
            raise ExpiredIteratorError(f"{operation}: {message}") from e
        if code in _THROTTLING_CODES:
            raise TransientKinesisError(f"{operation}: too many requests ({code})") from e
        if status >= 500:
            raise TransientKinesisError(f"{operation}: Kinesis backend failed ({code})") from e
        raise KinesisClientError(f"{operation}: {code}: {message}") from e
    except BotoCoreError as e:
        raise TransientKinesisError(f"{operation}: {e}") from e


class SimplifiedKinesisClient:
    """The subset of the Kinesis API a shard reader uses.

    Examples:
        ```python
        client = SimplifiedKinesisClient.create(region_name="eu-west-1")
        for shard_id in client.list_shards("clickstream"):
            print(shard_id)
        ```
    """

    def __init__(self, kinesis: Any, limit: int | None = None):
        """Wrap an existing boto3 Kinesis client.

        Args:
            kinesis: A ``boto3.client("kinesis")`` instance.
            limit: Default maximum number of records per ``get_records`` call.
                None lets the service decide.
        """
        self._kinesis = kinesis
        self.limit = limit

    @classmethod
    def create(
        cls,
        region_name: str | None = None,
        endpoint_url: str | None = None,
        limit: int | None = None,
    ) -> SimplifiedKinesisClient:
        """Create a client backed by a new boto3 Kinesis client."""
        kinesis = boto3.client("kinesis", region_name=region_name, endpoint_url=endpoint_url)
        return cls(kinesis, limit=limit)

    @classmethod
    def from_config(cls, config: ReaderConfig) -> SimplifiedKinesisClient:
        return cls.create(
            region_name=config.region_name,
            endpoint_url=config.endpoint_url,
            limit=config.limit,
        )

    def list_shards(self, stream_name: str) -> list[str]:
        """List the ids of every shard of a stream, following pagination.

        Args:
            stream_name: Name of the stream.

        Returns:
            Shard ids in the order the service lists them.
        """
        shard_ids: list[str] = []
        kwargs: dict[str, Any] = {"StreamName": stream_name}
        while True:
            with translate_errors("ListShards"):
                response = self._kinesis.list_shards(**kwargs)
            shard_ids.extend(shard["ShardId"] for shard in response.get("Shards", []))
            next_token = response.get("NextToken")
            if not next_token:
                break
            # The API rejects StreamName together with NextToken.
            kwargs = {"NextToken": next_token}
        logger.debug("Stream %s has %d shards", stream_name, len(shard_ids))
        return shard_ids

    def get_shard_iterator(
        self,
        stream_name: str,
        shard_id: str,
        iterator_type: ShardIteratorType,
        starting_sequence_number: str | None = None,
        timestamp: datetime | None = None,
    ) -> str:
        """Request a shard iterator.

        Args:
            stream_name: Name of the stream.
            shard_id: Id of the shard.
            iterator_type: Where the iterator should be positioned.
            starting_sequence_number: Sequence number for AT/AFTER_SEQUENCE_NUMBER.
            timestamp: Timestamp for AT_TIMESTAMP.

        Returns:
            The shard iterator.
        """
        kwargs: dict[str, Any] = {
            "StreamName": stream_name,
            "ShardId": shard_id,
            "ShardIteratorType": ShardIteratorType(iterator_type).value,
        }
        if starting_sequence_number is not None:
            kwargs["StartingSequenceNumber"] = starting_sequence_number
        if timestamp is not None:
            kwargs["Timestamp"] = timestamp

        with translate_errors("GetShardIterator"):
            response = self._kinesis.get_shard_iterator(**kwargs)
        logger.debug(
            "Got %s iterator for %s/%s", kwargs["ShardIteratorType"], stream_name, shard_id
        )
        return response["ShardIterator"]

    def get_records(
        self,
        shard_iterator: str,
        stream_name: str,
        shard_id: str,
        limit: int | None = None,
    ) -> GetKinesisRecordsResult:
        """Fetch the page of records at ``shard_iterator``.

        Args:
            shard_iterator: Iterator returned by a previous call.
            stream_name: Stream the iterator belongs to.
            shard_id: Shard the iterator belongs to.
            limit: Maximum number of records; defaults to the client's limit.

        Returns:
            The records and the iterator for the following page.

        Raises:
            ExpiredIteratorError: If ``shard_iterator`` has expired.
        """
        kwargs: dict[str, Any] = {"ShardIterator": shard_iterator}
        limit = limit if limit is not None else self.limit
        if limit is not None:
            kwargs["Limit"] = limit

        with translate_errors("GetRecords"):
            response = self._kinesis.get_records(**kwargs)

        records = [
            KinesisRecord.from_boto(raw, stream_name, shard_id)
            for raw in response.get("Records", [])
        ]
        result = GetKinesisRecordsResult(
            records=records,
            next_shard_iterator=response.get("NextShardIterator"),
            millis_behind_latest=response.get("MillisBehindLatest", 0),
        )
        logger.debug(
            "GetRecords %s/%s returned %d records, %d ms behind",
            stream_name,
            shard_id,
            len(records),
            result.millis_behind_latest,
        )
        return result
