import logging
import sqlite3
from collections.abc import Callable, Hashable, Iterable, Sequence
from datetime import datetime, timezone
from typing import Any, TypeVar

from fantasy_football_manager.domain.player_data import UpsertCounts
from fantasy_football_manager.repos.errors import BulkUpsertError

logger = logging.getLogger(__name__)

T = TypeVar("T")


def utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


def upsert_by_key(
    conn: sqlite3.Connection,
    table: str,
    key: dict[str, Any],
    values: dict[str, Any],
) -> bool:
    """Insert or overwrite one row identified by ``key``. Returns True on insert.

    ``updated_at`` only moves when a value actually changed, so writing the
    same record twice leaves the stored row identical.
    """
    where = " AND ".join(f"{col} = ?" for col in key)
    columns = list(values)
    existing = conn.execute(
        f"SELECT id, {', '.join(columns)} FROM {table} WHERE {where}",
        tuple(key.values()),
    ).fetchone()

    now = utc_now()
    if existing is None:
        all_columns = [*key, *columns, "created_at", "updated_at"]
        placeholders = ", ".join("?" for _ in all_columns)
        conn.execute(
            f"INSERT INTO {table} ({', '.join(all_columns)}) VALUES ({placeholders})",
            (*key.values(), *values.values(), now, now),
        )
        return True

    if any(existing[col] != values[col] for col in columns):
        assignments = ", ".join(f"{col} = ?" for col in columns)
        conn.execute(
            f"UPDATE {table} SET {assignments}, updated_at = ? WHERE id = ?",
            (*values.values(), now, existing["id"]),
        )
    return False


def bulk_upsert(
    table: str,
    records: Iterable[T],
    upsert: Callable[[T], bool],
    identity: Callable[[T], Hashable],
) -> UpsertCounts:
    """Upsert each record, raising ``BulkUpsertError`` with the counts so far on failure.

    Records sharing an identity key collapse to the last one seen, so every
    row is written at most once per batch.
    """
    batch: dict[Hashable, T] = {}
    received = 0
    for record in records:
        batch[identity(record)] = record
        received += 1
    if received > len(batch):
        logger.debug("Collapsed %d duplicate records for %s", received - len(batch), table)

    inserted = 0
    updated = 0
    for record in batch.values():
        try:
            if upsert(record):
                inserted += 1
            else:
                updated += 1
        except (sqlite3.Error, ValueError, TypeError) as exc:
            logger.error("Upsert into %s failed after %d inserted, %d updated: %s", table, inserted, updated, exc)
            raise BulkUpsertError(table, UpsertCounts(inserted=inserted, updated=updated), record, exc) from exc
    logger.debug("Upserted into %s: %d inserted, %d updated", table, inserted, updated)
    return UpsertCounts(inserted=inserted, updated=updated)


def scopes(conn: sqlite3.Connection, table: str) -> list[tuple[str, int]]:
    rows = conn.execute(f"SELECT DISTINCT sport, season FROM {table} ORDER BY sport, season").fetchall()
    return [(row["sport"], row["season"]) for row in rows]


def delete_ids(conn: sqlite3.Connection, table: str, row_ids: Sequence[int]) -> int:
    deleted = 0
    for start in range(0, len(row_ids), 500):
        chunk = row_ids[start : start + 500]
        placeholders = ",".join("?" * len(chunk))
        cursor = conn.execute(f"DELETE FROM {table} WHERE id IN ({placeholders})", tuple(chunk))
        deleted += cursor.rowcount
    return deleted
