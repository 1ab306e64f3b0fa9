import sqlite3
from collections.abc import Iterable, Sequence

from fantasy_football_manager.domain.player_data import FpPlayerData, UpsertCounts
from fantasy_football_manager.repos import _catalog


class SqliteFpPlayerRepo:
    def __init__(self, conn: sqlite3.Connection) -> None:
        self._conn = conn

    def upsert(self, record: FpPlayerData) -> bool:
        return _catalog.upsert_by_key(
            self._conn,
            "fp_player_data",
            {"sport": record.sport, "season": record.season, "fp_player_id": record.fp_player_id},
            {
                "first_name": record.first_name,
                "last_name": record.last_name,
                "full_name": record.full_name,
                "team": record.team,
                "position": record.position,
                "jersey_number": record.jersey_number,
                "latest_headline": record.latest_headline,
                "latest_analysis": record.latest_analysis,
                "news_date": record.news_date,
            },
        )

    def bulk_upsert(self, records: Iterable[FpPlayerData]) -> UpsertCounts:
        return _catalog.bulk_upsert(
            "fp_player_data", records, self.upsert, lambda r: (r.sport, r.season, r.fp_player_id)
        )

    def get(self, sport: str, season: int, fp_player_id: str) -> FpPlayerData | None:
        row = self._conn.execute(
            "SELECT * FROM fp_player_data WHERE sport = ? AND season = ? AND fp_player_id = ?",
            (sport, season, fp_player_id),
        ).fetchone()
        return self._row_to_record(row) if row else None

    def get_by_season(self, sport: str, season: int) -> list[FpPlayerData]:
        rows = self._conn.execute(
            "SELECT * FROM fp_player_data WHERE sport = ? AND season = ? ORDER BY fp_player_id",
            (sport, season),
        ).fetchall()
        return [self._row_to_record(row) for row in rows]

    def all(self) -> list[FpPlayerData]:
        rows = self._conn.execute("SELECT * FROM fp_player_data ORDER BY id").fetchall()
        return [self._row_to_record(row) for row in rows]

    def scopes(self) -> list[tuple[str, int]]:
        return _catalog.scopes(self._conn, "fp_player_data")

    def delete_all(self, sport: str, season: int) -> int:
        cursor = self._conn.execute(
            "DELETE FROM fp_player_data WHERE sport = ? AND season = ?",
            (sport, season),
        )
        return cursor.rowcount

    def delete_by_ids(self, row_ids: Sequence[int]) -> int:
        return _catalog.delete_ids(self._conn, "fp_player_data", row_ids)

    @staticmethod
    def _row_to_record(row: sqlite3.Row) -> FpPlayerData:
        return FpPlayerData(
            id=row["id"],
            fp_player_id=row["fp_player_id"],
            sport=row["sport"],
            season=row["season"],
            first_name=row["first_name"],
            last_name=row["last_name"],
            full_name=row["full_name"],
            team=row["team"],
            position=row["position"],
            jersey_number=row["jersey_number"],
            latest_headline=row["latest_headline"],
            latest_analysis=row["latest_analysis"],
            news_date=row["news_date"],
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )
