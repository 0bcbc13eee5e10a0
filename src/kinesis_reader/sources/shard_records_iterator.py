"""Sequential reader for a single shard.

ShardRecordsIterator pulls pages of records from one shard, filters out what
its checkpoint has already consumed, and hands records out one at a time,
advancing the checkpoint after each one. It is pull-based and synchronous:
``next()`` performs at most one fetch (plus one retry after an expired
iterator) and returns None instead of waiting when the shard is idle.

Instances are not thread-safe. Read several shards by running one instance
per shard, each on its own thread or task.
"""

import logging
from collections import deque

from kinesis_reader.core.checkpoint import ShardCheckpoint
from kinesis_reader.core.errors import ExpiredIteratorError, TransientKinesisError
from kinesis_reader.core.filters import RecordFilter
from kinesis_reader.core.record import GetKinesisRecordsResult, KinesisRecord
from kinesis_reader.monitoring.metrics import MetricsCollector
from kinesis_reader.typing import (
    CheckpointLike,
    RecordFilterLike,
    ShardRecordsClient,
    StateDict,
)


logger = logging.getLogger(__name__)

# First attempt with the held iterator, second with one re-derived from the checkpoint.
_MAX_FETCH_ATTEMPTS = 2


class ShardRecordsIterator:
    """Reads records of one shard in order while tracking a checkpoint.

    Attributes:
        is_closed: True once the service reported the shard as closed and
            every fetched record has been delivered.

    Examples:
        ```python
        checkpoint = ShardCheckpoint.from_starting_point(
            "clickstream", "shardId-000000000000", StartingPoint(InitialPosition.TRIM_HORIZON)
        )
        reader = ShardRecordsIterator(checkpoint, SimplifiedKinesisClient.create())
        while (record := reader.next()) is not None:
            handle(record)
            store(reader.get_checkpoint())
        ```
    """

    def __init__(
        self,
        initial_checkpoint: CheckpointLike,
        client: ShardRecordsClient,
        record_filter: RecordFilterLike | None = None,
        *,
        metrics: MetricsCollector | None = None,
    ):
        """Initialize the reader.

        No service call is made until the first ``next()``.

        Args:
            initial_checkpoint: Position to start reading from.
            client: Client used for iterator derivation and fetches.
            record_filter: Filter applied to every fetched page. Defaults to
                RecordFilter.
            metrics: Optional collector for fetch metrics.
        """
        self._checkpoint = initial_checkpoint
        self._client = client
        self._filter = record_filter if record_filter is not None else RecordFilter()
        self._metrics = metrics

        self._shard_iterator: str | None = None
        self._pending: deque[KinesisRecord] = deque()
        self._shard_closed = False

    @property
    def stream_name(self) -> str:
        return self._checkpoint.stream_name

    @property
    def shard_id(self) -> str:
        return self._checkpoint.shard_id

    @property
    def is_closed(self) -> bool:
        return self._shard_closed and not self._pending

    def next(self) -> KinesisRecord | None:
        """Return the next record of the shard, or None if none is available now.

        Serves from the pending page when possible; otherwise fetches one
        page. The checkpoint advances past every record returned, and only
        past records that are returned.

        Returns:
            The next record, or None when the shard currently has no new data.

        Raises:
            TransientKinesisError: If a service call failed, including an
                iterator that expired again right after being refreshed.
            KinesisReaderError: For any other failure of the client.
        """
        if not self._pending:
            self._read_more_records()
            if not self._pending:
                return None

        record = self._pending.popleft()
        self._checkpoint = self._checkpoint.move_after(record)
        return record

    def get_checkpoint(self) -> CheckpointLike:
        """Position immediately after the last record returned by ``next()``."""
        return self._checkpoint

    def _read_more_records(self) -> None:
        if self._shard_closed:
            return

        # Errors from the initial derivation are not retried here.
        if self._shard_iterator is None:
            self._shard_iterator = self._checkpoint.get_shard_iterator(self._client)

        result = self._fetch_records()
        # A failing filter leaves the iterator unrotated so the page is fetched again.
        filtered = self._filter.apply(result.records, self._checkpoint)

        # Rotate even when the page is empty, or the same position is read forever.
        self._shard_iterator = result.next_shard_iterator
        if result.next_shard_iterator is None:
            logger.info("Shard %s/%s is closed", self.stream_name, self.shard_id)
            self._shard_closed = True

        self._pending.extend(filtered)

        logger.debug(
            "Fetched %d records from %s/%s, %d left after filtering",
            len(result.records),
            self.stream_name,
            self.shard_id,
            len(filtered),
        )
        self._record_page_metrics(result, len(filtered))

    def _fetch_records(self) -> GetKinesisRecordsResult:
        for attempt in range(1, _MAX_FETCH_ATTEMPTS + 1):
            try:
                return self._timed_get_records()
            except ExpiredIteratorError as e:
                self._shard_iterator = None
                if attempt == _MAX_FETCH_ATTEMPTS:
                    logger.warning(
                        "Refreshed iterator for %s/%s expired again", self.stream_name, self.shard_id
                    )
                    raise TransientKinesisError(
                        f"Shard iterator for {self.stream_name}/{self.shard_id} "
                        f"expired again after refresh"
                    ) from e

                logger.info(
                    "Shard iterator for %s/%s expired, refreshing from %s",
                    self.stream_name,
                    self.shard_id,
                    self._checkpoint,
                )
                if self._metrics is not None:
                    self._metrics.record_metric("iterator_refreshes", 1, self._component)
                self._shard_iterator = self._checkpoint.get_shard_iterator(self._client)

        raise AssertionError("unreachable")

    def _timed_get_records(self) -> GetKinesisRecordsResult:
        if self._metrics is None:
            return self._client.get_records(self._shard_iterator, self.stream_name, self.shard_id)

        self._metrics.start_timer("get_records", self._component)
        try:
            return self._client.get_records(self._shard_iterator, self.stream_name, self.shard_id)
        finally:
            self._metrics.stop_timer("get_records", self._component)

    def _record_page_metrics(self, result: GetKinesisRecordsResult, kept: int) -> None:
        if self._metrics is None:
            return
        self._metrics.record_metric("records_fetched", len(result.records), self._component)
        self._metrics.record_metric(
            "records_filtered_out", len(result.records) - kept, self._component
        )
        self._metrics.record_metric(
            "millis_behind_latest", result.millis_behind_latest, self._component
        )

    @property
    def _component(self) -> str:
        return f"{self.stream_name}/{self.shard_id}"

    def get_state(self) -> StateDict:
        """Get reader state for checkpointing.

        Returns:
            ``{"checkpoint": ...}`` holding the current checkpoint as a dict.
        """
        return {"checkpoint": self._checkpoint.to_dict()}

    def set_state(self, state: StateDict) -> None:
        """Restore reader state produced by ``get_state``.

        Pending records and the held iterator are discarded; the next fetch
        starts from the restored checkpoint, which is always rebuilt as a
        ShardCheckpoint.

        Args:
            state: Dictionary containing state to restore.
        """
        self._checkpoint = ShardCheckpoint.from_dict(state["checkpoint"])
        self._shard_iterator = None
        self._pending.clear()
        self._shard_closed = False

    def __repr__(self) -> str:
        return (
            f"ShardRecordsIterator(checkpoint={self._checkpoint}, "
            f"pending={len(self._pending)}, closed={self._shard_closed})"
        )
