"""Defense-vs-position (OPRK) ranks derived from weekly projections.

Every projection names the defense the player faces. Summing projected points
by (defense, position) and ranking the per-game average gives how generous
each defense is expected to be to each position; rank 1 allows the fewest.
"""

import logging
import re
import sqlite3
import time
from collections import defaultdict

from fantasy_football_manager.domain.defense import DefenseRefreshResult, DefenseVsPositionStat
from fantasy_football_manager.domain.errors import RefreshError
from fantasy_football_manager.domain.result import Err, Ok, Result
from fantasy_football_manager.identity.normalizer import Normalizer, default_normalizer
from fantasy_football_manager.repos.protocols import DefenseVsPositionRepo, FpProjectionRepo

logger = logging.getLogger(__name__)

OPRK_POSITIONS = ("QB", "RB", "WR", "TE")

_OPPONENT_MARKER_RE = re.compile(r"^(?:@|vs\.?)\s*", re.IGNORECASE)


def opponent_team(opponent: str | None, normalizer: Normalizer | None = None) -> str | None:
    """Canonical abbreviation from opponent text such as ``@KC`` or ``vs BUF``."""
    if not opponent:
        return None
    normalizer = normalizer or default_normalizer()
    return normalizer.normalize_team(_OPPONENT_MARKER_RE.sub("", opponent.strip()))


class DefenseVsPositionBuilder:
    def __init__(
        self,
        projection_repo: FpProjectionRepo,
        dvp_repo: DefenseVsPositionRepo,
        conn: sqlite3.Connection,
        normalizer: Normalizer | None = None,
    ) -> None:
        self._projection_repo = projection_repo
        self._dvp_repo = dvp_repo
        self._conn = conn
        self._normalizer = normalizer or default_normalizer()

    def build(self, sport: str, season: int, scoring_type: str) -> tuple[list[DefenseVsPositionStat], int]:
        """Season-level rows for every (defense, position) with projections, plus the projections used."""
        totals: dict[tuple[str, str], float] = defaultdict(float)
        games: dict[tuple[str, str], int] = defaultdict(int)
        used = 0
        for projection in self._projection_repo.get_by_season(sport, season, scoring_type):
            position = self._normalizer.normalize_position(projection.position)
            if position not in OPRK_POSITIONS:
                continue
            defense = opponent_team(projection.opponent, self._normalizer)
            if defense is None:
                continue
            totals[(defense, position)] += projection.projected_points or 0.0
            games[(defense, position)] += 1
            used += 1

        stats: list[DefenseVsPositionStat] = []
        for position in OPRK_POSITIONS:
            averages = sorted(
                ((team, totals[(team, pos)] / games[(team, pos)]) for team, pos in games if pos == position),
                key=lambda item: (item[1], item[0]),
            )
            for rank, (team, average) in enumerate(averages, start=1):
                stats.append(
                    DefenseVsPositionStat(
                        sport=sport,
                        season=season,
                        week=None,
                        defense_team=team,
                        position=position,
                        rank=rank,
                        avg_points_allowed=average,
                        scoring_type=scoring_type,
                        games_played=games[(team, position)],
                        total_points_allowed=totals[(team, position)],
                    )
                )
        return stats, used

    def refresh(
        self,
        sport: str,
        season: int,
        scoring_type: str = "PPR",
    ) -> Result[DefenseRefreshResult, RefreshError]:
        t0 = time.perf_counter()
        logger.info("Building defense vs position stats for %s %d (%s)", sport, season, scoring_type)
        stats, used = self.build(sport, season, scoring_type)
        if not stats:
            message = (
                f"No {scoring_type} projections with an opponent found for {sport} {season}; "
                "load projections first"
            )
            logger.warning("%s", message)
            return Err(RefreshError(message=message, job="defense_vs_position", sport=sport, season=season))

        try:
            self._dvp_repo.delete_scope(sport, season, None, scoring_type)
            for stat in stats:
                self._dvp_repo.upsert(stat)
            self._conn.commit()
        except sqlite3.Error as exc:
            self._conn.rollback()
            logger.error("Defense vs position refresh failed for %s %d: %s", sport, season, exc)
            return Err(RefreshError(message=str(exc), job="defense_vs_position", sport=sport, season=season))

        logger.info(
            "Wrote %d defense vs position rows from %d projections in %.1fs",
            len(stats),
            used,
            time.perf_counter() - t0,
        )
        return Ok(
            DefenseRefreshResult(
                sport=sport,
                season=season,
                scoring_type=scoring_type,
                rows_written=len(stats),
                projections_used=used,
            )
        )
