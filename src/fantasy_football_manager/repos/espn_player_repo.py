import sqlite3
from collections.abc import Iterable, Sequence

from fantasy_football_manager.domain.player_data import EspnPlayerData, UpsertCounts
from fantasy_football_manager.repos import _catalog


class SqliteEspnPlayerRepo:
    def __init__(self, conn: sqlite3.Connection) -> None:
        self._conn = conn

    def upsert(self, record: EspnPlayerData) -> bool:
        return _catalog.upsert_by_key(
            self._conn,
            "espn_player_data",
            {"sport": record.sport, "season": record.season, "espn_player_id": record.espn_player_id},
            {
                "first_name": record.first_name,
                "last_name": record.last_name,
                "full_name": record.full_name,
                "team": record.team,
                "position": record.position,
                "jersey_number": record.jersey_number,
                "injury_status": record.injury_status,
                "percent_owned": record.percent_owned,
                "percent_started": record.percent_started,
                "average_points": record.average_points,
                "total_points": record.total_points,
                "last_fetched_at": record.last_fetched_at,
                "latest_outlook": record.latest_outlook,
                "outlook_week": record.outlook_week,
                "news_date": record.news_date,
            },
        )

    def bulk_upsert(self, records: Iterable[EspnPlayerData]) -> UpsertCounts:
        return _catalog.bulk_upsert(
            "espn_player_data", records, self.upsert, lambda r: (r.sport, r.season, r.espn_player_id)
        )

    def get(self, sport: str, season: int, espn_player_id: int) -> EspnPlayerData | None:
        row = self._conn.execute(
            "SELECT * FROM espn_player_data WHERE sport = ? AND season = ? AND espn_player_id = ?",
            (sport, season, espn_player_id),
        ).fetchone()
        return self._row_to_record(row) if row else None

    def get_by_season(self, sport: str, season: int) -> list[EspnPlayerData]:
        rows = self._conn.execute(
            "SELECT * FROM espn_player_data WHERE sport = ? AND season = ? ORDER BY espn_player_id",
            (sport, season),
        ).fetchall()
        return [self._row_to_record(row) for row in rows]

    def all(self) -> list[EspnPlayerData]:
        rows = self._conn.execute("SELECT * FROM espn_player_data ORDER BY id").fetchall()
        return [self._row_to_record(row) for row in rows]

    def scopes(self) -> list[tuple[str, int]]:
        return _catalog.scopes(self._conn, "espn_player_data")

    def delete_all(self, sport: str, season: int) -> int:
        cursor = self._conn.execute(
            "DELETE FROM espn_player_data WHERE sport = ? AND season = ?",
            (sport, season),
        )
        return cursor.rowcount

    def delete_by_ids(self, row_ids: Sequence[int]) -> int:
        return _catalog.delete_ids(self._conn, "espn_player_data", row_ids)

    @staticmethod
    def _row_to_record(row: sqlite3.Row) -> EspnPlayerData:
        return EspnPlayerData(
            id=row["id"],
            espn_player_id=row["espn_player_id"],
            sport=row["sport"],
            season=row["season"],
            first_name=row["first_name"],
            last_name=row["last_name"],
            full_name=row["full_name"],
            team=row["team"],
            position=row["position"],
            jersey_number=row["jersey_number"],
            injury_status=row["injury_status"],
            percent_owned=row["percent_owned"],
            percent_started=row["percent_started"],
            average_points=row["average_points"],
            total_points=row["total_points"],
            last_fetched_at=row["last_fetched_at"],
            latest_outlook=row["latest_outlook"],
            outlook_week=row["outlook_week"],
            news_date=row["news_date"],
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )
