from fantasy_football_manager.domain.player_data import UpsertCounts
from fantasy_football_manager.exceptions import FfmException


class BulkUpsertError(FfmException):
    """A bulk upsert stopped part-way through a batch.

    ``counts`` describes the records written before ``record`` failed; those
    writes are not undone. Re-running the whole batch is safe.
    """

    def __init__(self, table: str, counts: UpsertCounts, record: object, cause: Exception) -> None:
        self.table = table
        self.counts = counts
        self.record = record
        self.cause = cause
        super().__init__(
            f"Bulk upsert into {table} failed after {counts.inserted} inserted, "
            f"{counts.updated} updated: {cause}"
        )
