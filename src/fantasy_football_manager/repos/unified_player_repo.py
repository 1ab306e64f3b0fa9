import json
import sqlite3
from collections.abc import Iterable
from dataclasses import fields

from fantasy_football_manager.domain.unified_player import UnifiedPlayer

_BOOL_COLUMNS = frozenset({"manual_override", "is_home"})
_COLUMNS = tuple(f.name if f.name != "projection_stats" else "projection_stats_json" for f in fields(UnifiedPlayer))


class SqliteUnifiedPlayerRepo:
    def __init__(self, conn: sqlite3.Connection) -> None:
        self._conn = conn

    def replace_all(self, players: Iterable[UnifiedPlayer]) -> int:
        """Rewrite the whole table. The caller owns the transaction."""
        self._conn.execute("DELETE FROM unified_player")
        placeholders = ", ".join("?" for _ in _COLUMNS)
        sql = f"INSERT INTO unified_player ({', '.join(_COLUMNS)}) VALUES ({placeholders})"
        count = 0
        for player in players:
            self._conn.execute(sql, self._to_params(player))
            count += 1
        return count

    def delete_all(self) -> int:
        return self._conn.execute("DELETE FROM unified_player").rowcount

    def count(self) -> int:
        row = self._conn.execute("SELECT COUNT(*) AS n FROM unified_player").fetchone()
        return row["n"]

    def get_by_crosswalk_id(self, crosswalk_id: int) -> UnifiedPlayer | None:
        row = self._conn.execute(
            "SELECT * FROM unified_player WHERE crosswalk_id = ?",
            (crosswalk_id,),
        ).fetchone()
        return self._row_to_player(row) if row else None

    def query(
        self,
        sport: str,
        season: int,
        team: str | None = None,
        position: str | None = None,
    ) -> list[UnifiedPlayer]:
        clauses = ["sport = ?", "season = ?"]
        params: list[object] = [sport, season]
        if team is not None:
            clauses.append("team = ?")
            params.append(team)
        if position is not None:
            clauses.append("position = ?")
            params.append(position)
        rows = self._conn.execute(
            f"SELECT * FROM unified_player WHERE {' AND '.join(clauses)} ORDER BY full_name, crosswalk_id",
            params,
        ).fetchall()
        return [self._row_to_player(row) for row in rows]

    @staticmethod
    def _to_params(player: UnifiedPlayer) -> tuple[object, ...]:
        params: list[object] = []
        for column in _COLUMNS:
            if column == "projection_stats_json":
                params.append(json.dumps(player.projection_stats, sort_keys=True))
                continue
            value = getattr(player, column)
            if column in _BOOL_COLUMNS and value is not None:
                value = int(value)
            params.append(value)
        return tuple(params)

    @staticmethod
    def _row_to_player(row: sqlite3.Row) -> UnifiedPlayer:
        values: dict[str, object] = {}
        for column in _COLUMNS:
            if column == "projection_stats_json":
                values["projection_stats"] = json.loads(row[column])
            elif column in _BOOL_COLUMNS and row[column] is not None:
                values[column] = bool(row[column])
            else:
                values[column] = row[column]
        return UnifiedPlayer(**values)  # type: ignore[arg-type]
