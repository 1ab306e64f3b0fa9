import json
import sqlite3
from collections.abc import Iterable

from fantasy_football_manager.domain.fantasy_pros import FpProjection, FpRanking
from fantasy_football_manager.domain.player_data import UpsertCounts
from fantasy_football_manager.repos import _catalog


class SqliteFpRankingRepo:
    def __init__(self, conn: sqlite3.Connection) -> None:
        self._conn = conn

    def upsert(self, ranking: FpRanking) -> bool:
        existing = self._conn.execute(
            "SELECT id FROM fp_ranking"
            " WHERE sport = ? AND season = ? AND week IS ? AND fp_player_id = ? AND rank_type = ?"
            "   AND scoring_type IS ?",
            (
                ranking.sport,
                ranking.season,
                ranking.week,
                ranking.fp_player_id,
                ranking.rank_type,
                ranking.scoring_type,
            ),
        ).fetchone()
        values = (
            ranking.player_name,
            ranking.team,
            ranking.position,
            ranking.rank,
            ranking.tier,
            ranking.best_rank,
            ranking.worst_rank,
            ranking.avg_rank,
        )
        if existing:
            self._conn.execute(
                "UPDATE fp_ranking SET player_name = ?, team = ?, position = ?, rank = ?, tier = ?,"
                "    best_rank = ?, worst_rank = ?, avg_rank = ?"
                " WHERE id = ?",
                (*values, existing["id"]),
            )
            return False
        self._conn.execute(
            "INSERT INTO fp_ranking"
            "    (sport, season, week, fp_player_id, rank_type, scoring_type,"
            "     player_name, team, position, rank, tier, best_rank, worst_rank, avg_rank)"
            " VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)",
            (
                ranking.sport,
                ranking.season,
                ranking.week,
                ranking.fp_player_id,
                ranking.rank_type,
                ranking.scoring_type,
                *values,
            ),
        )
        return True

    def bulk_upsert(self, rankings: Iterable[FpRanking]) -> UpsertCounts:
        return _catalog.bulk_upsert(
            "fp_ranking",
            rankings,
            self.upsert,
            lambda r: (r.sport, r.season, r.week, r.fp_player_id, r.rank_type, r.scoring_type),
        )

    def get_by_season(self, sport: str, season: int) -> list[FpRanking]:
        rows = self._conn.execute(
            "SELECT * FROM fp_ranking WHERE sport = ? AND season = ? ORDER BY fp_player_id, week, rank_type",
            (sport, season),
        ).fetchall()
        return [self._row_to_ranking(row) for row in rows]

    def get_by_player(self, sport: str, season: int, fp_player_id: str) -> list[FpRanking]:
        rows = self._conn.execute(
            "SELECT * FROM fp_ranking WHERE sport = ? AND season = ? AND fp_player_id = ? ORDER BY week, rank_type",
            (sport, season, fp_player_id),
        ).fetchall()
        return [self._row_to_ranking(row) for row in rows]

    @staticmethod
    def _row_to_ranking(row: sqlite3.Row) -> FpRanking:
        return FpRanking(
            id=row["id"],
            sport=row["sport"],
            season=row["season"],
            week=row["week"],
            fp_player_id=row["fp_player_id"],
            player_name=row["player_name"],
            team=row["team"],
            position=row["position"],
            rank_type=row["rank_type"],
            scoring_type=row["scoring_type"],
            rank=row["rank"],
            tier=row["tier"],
            best_rank=row["best_rank"],
            worst_rank=row["worst_rank"],
            avg_rank=row["avg_rank"],
        )


class SqliteFpProjectionRepo:
    def __init__(self, conn: sqlite3.Connection) -> None:
        self._conn = conn

    def upsert(self, projection: FpProjection) -> bool:
        existing = self._conn.execute(
            "SELECT id FROM fp_projection"
            " WHERE sport = ? AND season = ? AND week IS ? AND fp_player_id = ? AND scoring_type IS ?",
            (projection.sport, projection.season, projection.week, projection.fp_player_id, projection.scoring_type),
        ).fetchone()
        values = (
            projection.player_name,
            projection.team,
            projection.position,
            projection.opponent,
            projection.projected_points,
            json.dumps(projection.stats, sort_keys=True),
        )
        if existing:
            self._conn.execute(
                "UPDATE fp_projection SET player_name = ?, team = ?, position = ?, opponent = ?,"
                "    projected_points = ?, stats_json = ?"
                " WHERE id = ?",
                (*values, existing["id"]),
            )
            return False
        self._conn.execute(
            "INSERT INTO fp_projection"
            "    (sport, season, week, fp_player_id, scoring_type,"
            "     player_name, team, position, opponent, projected_points, stats_json)"
            " VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)",
            (
                projection.sport,
                projection.season,
                projection.week,
                projection.fp_player_id,
                projection.scoring_type,
                *values,
            ),
        )
        return True

    def bulk_upsert(self, projections: Iterable[FpProjection]) -> UpsertCounts:
        return _catalog.bulk_upsert(
            "fp_projection",
            projections,
            self.upsert,
            lambda p: (p.sport, p.season, p.week, p.fp_player_id, p.scoring_type),
        )

    def get_by_season(
        self,
        sport: str,
        season: int,
        scoring_type: str | None = None,
    ) -> list[FpProjection]:
        if scoring_type is not None:
            rows = self._conn.execute(
                "SELECT * FROM fp_projection WHERE sport = ? AND season = ? AND scoring_type = ?"
                " ORDER BY fp_player_id, week",
                (sport, season, scoring_type),
            ).fetchall()
        else:
            rows = self._conn.execute(
                "SELECT * FROM fp_projection WHERE sport = ? AND season = ? ORDER BY fp_player_id, week",
                (sport, season),
            ).fetchall()
        return [self._row_to_projection(row) for row in rows]

    def get_by_player(self, sport: str, season: int, fp_player_id: str) -> list[FpProjection]:
        rows = self._conn.execute(
            "SELECT * FROM fp_projection WHERE sport = ? AND season = ? AND fp_player_id = ? ORDER BY week",
            (sport, season, fp_player_id),
        ).fetchall()
        return [self._row_to_projection(row) for row in rows]

    @staticmethod
    def _row_to_projection(row: sqlite3.Row) -> FpProjection:
        return FpProjection(
            id=row["id"],
            sport=row["sport"],
            season=row["season"],
            week=row["week"],
            fp_player_id=row["fp_player_id"],
            player_name=row["player_name"],
            team=row["team"],
            position=row["position"],
            opponent=row["opponent"],
            scoring_type=row["scoring_type"],
            projected_points=row["projected_points"],
            stats=json.loads(row["stats_json"]),
        )
