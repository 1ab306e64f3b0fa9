import logging
import sqlite3
import time
from collections.abc import Callable, Iterable
from dataclasses import replace
from datetime import datetime, timezone
from typing import Any

from fantasy_football_manager.domain.errors import IngestError
from fantasy_football_manager.domain.load_log import LoadLog
from fantasy_football_manager.domain.player_data import UpsertCounts
from fantasy_football_manager.domain.result import Err, Ok, Result
from fantasy_football_manager.ingest.protocols import DataSource
from fantasy_football_manager.repos.errors import BulkUpsertError
from fantasy_football_manager.repos.protocols import BulkUpsertRepo, LoadLogRepo

logger = logging.getLogger(__name__)


class BatchLoader:
    """Runs one bulk upsert and records it in the load log.

    On a failed record the rows written before it are committed and the
    returned ``IngestError`` carries their counts; re-running the same batch
    completes the load.
    """

    def __init__(
        self,
        repo: BulkUpsertRepo,
        load_log_repo: LoadLogRepo,
        target_table: str,
        *,
        conn: sqlite3.Connection,
    ) -> None:
        self._repo = repo
        self._load_log_repo = load_log_repo
        self._target_table = target_table
        self._conn = conn

    def load(
        self,
        records: Iterable[Any],
        *,
        source_type: str = "batch",
        source_detail: str = "in-memory",
    ) -> Result[LoadLog, IngestError]:
        started_at = datetime.now(timezone.utc).isoformat()
        t0 = time.perf_counter()
        logger.info("Loading %s from %s", self._target_table, source_detail)

        try:
            counts = self._repo.bulk_upsert(records)
        except BulkUpsertError as exc:
            self._conn.commit()
            return self._fail(str(exc), source_type, source_detail, started_at, exc.counts)

        self._conn.commit()
        log = self._write_log(
            LoadLog(
                source_type=source_type,
                source_detail=source_detail,
                target_table=self._target_table,
                rows_loaded=counts.total,
                inserted=counts.inserted,
                updated=counts.updated,
                started_at=started_at,
                finished_at=datetime.now(timezone.utc).isoformat(),
                status="success",
            )
        )
        logger.info(
            "Loaded %d rows into %s (%d inserted, %d updated) in %.1fs",
            counts.total,
            self._target_table,
            counts.inserted,
            counts.updated,
            time.perf_counter() - t0,
        )
        return Ok(log)

    def load_source(
        self,
        source: DataSource,
        row_mapper: Callable[[dict[str, Any]], Any | None],
        **fetch_params: Any,
    ) -> Result[LoadLog, IngestError]:
        """Fetch rows from ``source``, map them and load the non-None results."""
        started_at = datetime.now(timezone.utc).isoformat()
        try:
            rows = source.fetch(**fetch_params)
            mapped = [record for record in (row_mapper(row) for row in rows) if record is not None]
        except (OSError, ValueError, TypeError, KeyError) as exc:
            logger.error("Fetch failed for %s: %s", self._target_table, exc)
            return self._fail(str(exc), source.source_type, source.source_detail, started_at, UpsertCounts())

        skipped = len(rows) - len(mapped)
        if skipped:
            logger.debug("Skipped %d unmappable rows from %s", skipped, source.source_detail)
        return self.load(mapped, source_type=source.source_type, source_detail=source.source_detail)

    def _fail(
        self,
        message: str,
        source_type: str,
        source_detail: str,
        started_at: str,
        counts: UpsertCounts,
    ) -> Err[IngestError]:
        logger.error("Loading %s failed: %s", self._target_table, message)
        self._write_log(
            LoadLog(
                source_type=source_type,
                source_detail=source_detail,
                target_table=self._target_table,
                rows_loaded=counts.total,
                inserted=counts.inserted,
                updated=counts.updated,
                started_at=started_at,
                finished_at=datetime.now(timezone.utc).isoformat(),
                status="error",
                error_message=message,
            )
        )
        return Err(
            IngestError(
                message=message,
                source_type=source_type,
                source_detail=source_detail,
                target_table=self._target_table,
                inserted=counts.inserted,
                updated=counts.updated,
            )
        )

    def _write_log(self, log: LoadLog) -> LoadLog:
        log_id = self._load_log_repo.insert(log)
        self._conn.commit()
        return replace(log, id=log_id)
