import sqlite3
from collections.abc import Iterable

from fantasy_football_manager.domain.defense import TeamDefenseStat
from fantasy_football_manager.domain.player_data import UpsertCounts
from fantasy_football_manager.repos import _catalog


class SqliteTeamDefenseStatRepo:
    def __init__(self, conn: sqlite3.Connection) -> None:
        self._conn = conn

    def upsert(self, stat: TeamDefenseStat) -> bool:
        existing = self._conn.execute(
            "SELECT id FROM team_defense_stat WHERE season = ? AND week IS ? AND team_abbreviation = ?",
            (stat.season, stat.week, stat.team_abbreviation),
        ).fetchone()
        if existing:
            self._conn.execute(
                "UPDATE team_defense_stat SET team_name = ?, games_played = ?, points_allowed = ? WHERE id = ?",
                (stat.team_name, stat.games_played, stat.points_allowed, existing["id"]),
            )
            return False
        self._conn.execute(
            "INSERT INTO team_defense_stat"
            "    (season, week, team_abbreviation, team_name, games_played, points_allowed)"
            " VALUES (?, ?, ?, ?, ?, ?)",
            (stat.season, stat.week, stat.team_abbreviation, stat.team_name, stat.games_played, stat.points_allowed),
        )
        return True

    def bulk_upsert(self, stats: Iterable[TeamDefenseStat]) -> UpsertCounts:
        return _catalog.bulk_upsert(
            "team_defense_stat", stats, self.upsert, lambda s: (s.season, s.week, s.team_abbreviation)
        )

    def get_by_scope(self, season: int, week: int | None = None) -> list[TeamDefenseStat]:
        """Rows for one week, or the season-to-date rows when ``week`` is None."""
        rows = self._conn.execute(
            "SELECT * FROM team_defense_stat WHERE season = ? AND week IS ? ORDER BY id",
            (season, week),
        ).fetchall()
        return [self._row_to_stat(row) for row in rows]

    def get_weeks(self, season: int) -> list[int]:
        rows = self._conn.execute(
            "SELECT DISTINCT week FROM team_defense_stat WHERE season = ? AND week IS NOT NULL ORDER BY week",
            (season,),
        ).fetchall()
        return [row["week"] for row in rows]

    def has_season_totals(self, season: int) -> bool:
        row = self._conn.execute(
            "SELECT 1 FROM team_defense_stat WHERE season = ? AND week IS NULL LIMIT 1",
            (season,),
        ).fetchone()
        return row is not None

    def delete_scope(self, season: int, week: int | None = None) -> int:
        cursor = self._conn.execute(
            "DELETE FROM team_defense_stat WHERE season = ? AND week IS ?",
            (season, week),
        )
        return cursor.rowcount

    @staticmethod
    def _row_to_stat(row: sqlite3.Row) -> TeamDefenseStat:
        return TeamDefenseStat(
            id=row["id"],
            season=row["season"],
            week=row["week"],
            team_abbreviation=row["team_abbreviation"],
            team_name=row["team_name"],
            games_played=row["games_played"],
            points_allowed=row["points_allowed"],
        )
