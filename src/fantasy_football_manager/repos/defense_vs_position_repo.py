import sqlite3

from fantasy_football_manager.domain.defense import DefenseVsPositionStat


class SqliteDefenseVsPositionRepo:
    def __init__(self, conn: sqlite3.Connection) -> None:
        self._conn = conn

    def upsert(self, stat: DefenseVsPositionStat) -> int:
        existing = self._conn.execute(
            "SELECT id FROM defense_vs_position_stats"
            " WHERE sport = ? AND season = ? AND week IS ? AND defense_team = ? AND position = ?"
            "   AND scoring_type IS ?",
            (stat.sport, stat.season, stat.week, stat.defense_team, stat.position, stat.scoring_type),
        ).fetchone()
        if existing:
            self._conn.execute(
                "UPDATE defense_vs_position_stats SET"
                "    rank = ?, avg_points_allowed = ?, games_played = ?, total_points_allowed = ?"
                " WHERE id = ?",
                (stat.rank, stat.avg_points_allowed, stat.games_played, stat.total_points_allowed, existing["id"]),
            )
            return existing["id"]
        cursor = self._conn.execute(
            "INSERT INTO defense_vs_position_stats"
            "    (sport, season, week, defense_team, position, games_played,"
            "     total_points_allowed, avg_points_allowed, rank, scoring_type)"
            " VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)",
            (
                stat.sport,
                stat.season,
                stat.week,
                stat.defense_team,
                stat.position,
                stat.games_played,
                stat.total_points_allowed,
                stat.avg_points_allowed,
                stat.rank,
                stat.scoring_type,
            ),
        )
        return cursor.lastrowid  # type: ignore[return-value]

    def get_by_season(self, sport: str, season: int, position: str | None = None) -> list[DefenseVsPositionStat]:
        if position is not None:
            rows = self._conn.execute(
                "SELECT * FROM defense_vs_position_stats WHERE sport = ? AND season = ? AND position = ?"
                " ORDER BY position, scoring_type, week, rank",
                (sport, season, position),
            ).fetchall()
        else:
            rows = self._conn.execute(
                "SELECT * FROM defense_vs_position_stats WHERE sport = ? AND season = ?"
                " ORDER BY position, scoring_type, week, rank",
                (sport, season),
            ).fetchall()
        return [self._row_to_stat(row) for row in rows]

    def all(self) -> list[DefenseVsPositionStat]:
        rows = self._conn.execute("SELECT * FROM defense_vs_position_stats ORDER BY id").fetchall()
        return [self._row_to_stat(row) for row in rows]

    def delete_scope(self, sport: str, season: int, week: int | None, scoring_type: str | None) -> int:
        cursor = self._conn.execute(
            "DELETE FROM defense_vs_position_stats"
            " WHERE sport = ? AND season = ? AND week IS ? AND scoring_type IS ?",
            (sport, season, week, scoring_type),
        )
        return cursor.rowcount

    def delete_all(self) -> int:
        return self._conn.execute("DELETE FROM defense_vs_position_stats").rowcount

    @staticmethod
    def _row_to_stat(row: sqlite3.Row) -> DefenseVsPositionStat:
        return DefenseVsPositionStat(
            id=row["id"],
            sport=row["sport"],
            season=row["season"],
            week=row["week"],
            defense_team=row["defense_team"],
            position=row["position"],
            games_played=row["games_played"],
            total_points_allowed=row["total_points_allowed"],
            avg_points_allowed=row["avg_points_allowed"],
            rank=row["rank"],
            scoring_type=row["scoring_type"],
        )
