import sqlite3
from collections.abc import Iterable

from fantasy_football_manager.domain.matchup import NflMatchup


class SqliteMatchupRepo:
    def __init__(self, conn: sqlite3.Connection) -> None:
        self._conn = conn

    def upsert(self, matchup: NflMatchup) -> int:
        cursor = self._conn.execute(
            """INSERT INTO nfl_matchup
                   (season, week, team_abbr, opponent_abbr, game_time_utc,
                    is_home, venue, game_day, bookmaker_source)
               VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
               ON CONFLICT(season, week, team_abbr) DO UPDATE SET
                   opponent_abbr=excluded.opponent_abbr,
                   game_time_utc=excluded.game_time_utc,
                   is_home=excluded.is_home,
                   venue=excluded.venue,
                   game_day=excluded.game_day,
                   bookmaker_source=excluded.bookmaker_source""",
            (
                matchup.season,
                matchup.week,
                matchup.team_abbr,
                matchup.opponent_abbr,
                matchup.game_time_utc,
                None if matchup.is_home is None else int(matchup.is_home),
                matchup.venue,
                matchup.game_day,
                matchup.bookmaker_source,
            ),
        )
        return cursor.lastrowid  # type: ignore[return-value]

    def replace_week(self, season: int, week: int, matchups: Iterable[NflMatchup]) -> int:
        """Swap out every row for one week. The caller owns the transaction."""
        self._conn.execute("DELETE FROM nfl_matchup WHERE season = ? AND week = ?", (season, week))
        written = 0
        for matchup in matchups:
            self.upsert(matchup)
            written += 1
        return written

    def get_by_week(self, season: int, week: int) -> list[NflMatchup]:
        rows = self._conn.execute(
            "SELECT * FROM nfl_matchup WHERE season = ? AND week = ? ORDER BY team_abbr",
            (season, week),
        ).fetchall()
        return [self._row_to_matchup(row) for row in rows]

    def get_by_season(self, season: int) -> list[NflMatchup]:
        rows = self._conn.execute(
            "SELECT * FROM nfl_matchup WHERE season = ? ORDER BY week, team_abbr",
            (season,),
        ).fetchall()
        return [self._row_to_matchup(row) for row in rows]

    @staticmethod
    def _row_to_matchup(row: sqlite3.Row) -> NflMatchup:
        return NflMatchup(
            id=row["id"],
            season=row["season"],
            week=row["week"],
            team_abbr=row["team_abbr"],
            opponent_abbr=row["opponent_abbr"],
            game_time_utc=row["game_time_utc"],
            is_home=None if row["is_home"] is None else bool(row["is_home"]),
            venue=row["venue"],
            game_day=row["game_day"],
            bookmaker_source=row["bookmaker_source"],
        )
