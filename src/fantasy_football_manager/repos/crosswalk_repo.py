import logging
import sqlite3
from enum import StrEnum

from fantasy_football_manager.domain.crosswalk import CrosswalkEntry, MatchStatus
from fantasy_football_manager.repos._catalog import utc_now

logger = logging.getLogger(__name__)


class WriteOutcome(StrEnum):
    CREATED = "created"
    UPDATED = "updated"
    UNCHANGED = "unchanged"
    PROTECTED = "protected"


_MUTABLE_COLUMNS = (
    "espn_player_id",
    "fp_player_id",
    "match_confidence",
    "match_status",
    "manual_override",
    "needs_review",
    "notes",
)


class SqliteCrosswalkRepo:
    def __init__(self, conn: sqlite3.Connection) -> None:
        self._conn = conn

    def write(self, entry: CrosswalkEntry) -> WriteOutcome:
        """Create or update the entry for ``entry.canonical_key``.

        An existing manual override is only replaced by another manual override.
        """
        existing = self.get(entry.sport, entry.season, entry.canonical_key)
        values = self._mutable_values(entry)
        now = utc_now()

        if existing is None:
            self._conn.execute(
                "INSERT INTO player_crosswalk"
                "    (canonical_key, sport, season, espn_player_id, fp_player_id, match_confidence,"
                "     match_status, manual_override, needs_review, notes, created_at, updated_at)"
                " VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)",
                (entry.canonical_key, entry.sport, entry.season, *values, now, now),
            )
            return WriteOutcome.CREATED

        if existing.manual_override and not entry.manual_override:
            logger.debug("Keeping manual override for %s", entry.canonical_key)
            return WriteOutcome.PROTECTED

        if self._mutable_values(existing) == values:
            return WriteOutcome.UNCHANGED

        assignments = ", ".join(f"{col} = ?" for col in _MUTABLE_COLUMNS)
        self._conn.execute(
            f"UPDATE player_crosswalk SET {assignments}, updated_at = ? WHERE id = ?",
            (*values, now, existing.id),
        )
        return WriteOutcome.UPDATED

    def get(self, sport: str, season: int, canonical_key: str) -> CrosswalkEntry | None:
        row = self._conn.execute(
            "SELECT * FROM player_crosswalk WHERE sport = ? AND season = ? AND canonical_key = ?",
            (sport, season, canonical_key),
        ).fetchone()
        return self._row_to_entry(row) if row else None

    def get_by_season(self, sport: str, season: int) -> list[CrosswalkEntry]:
        rows = self._conn.execute(
            "SELECT * FROM player_crosswalk WHERE sport = ? AND season = ? ORDER BY canonical_key",
            (sport, season),
        ).fetchall()
        return [self._row_to_entry(row) for row in rows]

    def get_by_espn_id(self, sport: str, season: int, espn_player_id: int) -> list[CrosswalkEntry]:
        rows = self._conn.execute(
            "SELECT * FROM player_crosswalk WHERE sport = ? AND season = ? AND espn_player_id = ?",
            (sport, season, espn_player_id),
        ).fetchall()
        return [self._row_to_entry(row) for row in rows]

    def get_by_fp_id(self, sport: str, season: int, fp_player_id: str) -> list[CrosswalkEntry]:
        rows = self._conn.execute(
            "SELECT * FROM player_crosswalk WHERE sport = ? AND season = ? AND fp_player_id = ?",
            (sport, season, fp_player_id),
        ).fetchall()
        return [self._row_to_entry(row) for row in rows]

    def get_manual_overrides(self, sport: str | None = None, season: int | None = None) -> list[CrosswalkEntry]:
        if sport is not None and season is not None:
            rows = self._conn.execute(
                "SELECT * FROM player_crosswalk WHERE manual_override = 1 AND sport = ? AND season = ?",
                (sport, season),
            ).fetchall()
        else:
            rows = self._conn.execute("SELECT * FROM player_crosswalk WHERE manual_override = 1").fetchall()
        return [self._row_to_entry(row) for row in rows]

    def get_needs_review(self, sport: str, season: int) -> list[CrosswalkEntry]:
        rows = self._conn.execute(
            "SELECT * FROM player_crosswalk WHERE sport = ? AND season = ? AND needs_review = 1"
            " ORDER BY canonical_key",
            (sport, season),
        ).fetchall()
        return [self._row_to_entry(row) for row in rows]

    def all(self) -> list[CrosswalkEntry]:
        rows = self._conn.execute("SELECT * FROM player_crosswalk ORDER BY id").fetchall()
        return [self._row_to_entry(row) for row in rows]

    def purge(self, sport: str, season: int) -> int:
        cursor = self._conn.execute(
            "DELETE FROM player_crosswalk WHERE sport = ? AND season = ?",
            (sport, season),
        )
        return cursor.rowcount

    @staticmethod
    def _mutable_values(entry: CrosswalkEntry) -> tuple[object, ...]:
        return (
            entry.espn_player_id,
            entry.fp_player_id,
            float(entry.match_confidence),
            str(entry.match_status),
            int(entry.manual_override),
            int(entry.needs_review),
            entry.notes,
        )

    @staticmethod
    def _row_to_entry(row: sqlite3.Row) -> CrosswalkEntry:
        return CrosswalkEntry(
            id=row["id"],
            canonical_key=row["canonical_key"],
            sport=row["sport"],
            season=row["season"],
            espn_player_id=row["espn_player_id"],
            fp_player_id=row["fp_player_id"],
            match_confidence=row["match_confidence"],
            match_status=MatchStatus(row["match_status"]),
            manual_override=bool(row["manual_override"]),
            needs_review=bool(row["needs_review"]),
            notes=row["notes"],
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )
