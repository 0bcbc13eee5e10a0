"""Filtering of freshly fetched pages against the reader's checkpoint."""

from collections.abc import Sequence

from kinesis_reader.core.checkpoint import ShardCheckpoint
from kinesis_reader.core.record import KinesisRecord


class RecordFilter:
    """Drops records a reader at a given checkpoint has already consumed.

    Iterators re-derived from an AFTER_SEQUENCE_NUMBER checkpoint start AT
    that sequence number, so the first page after a refresh can repeat the
    last delivered record. Order of the surviving records is preserved.
    """

    def apply(
        self, records: Sequence[KinesisRecord], checkpoint: ShardCheckpoint
    ) -> list[KinesisRecord]:
        """Return the records of ``records`` that come at or after ``checkpoint``.

        Args:
            records: Page of records in shard order.
            checkpoint: Current position of the reader.

        Returns:
            The records still to be delivered, in their original order.
        """
        return [record for record in records if checkpoint.is_before_or_at(record)]
