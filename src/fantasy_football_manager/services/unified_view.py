"""The unified player table: one row per crosswalk entry.

Each row joins the entry's two catalog records with the freshest ranking,
projection, schedule and defense rows for the player. The table is rebuilt
wholesale by ``refresh_unified_view`` inside one transaction, so readers see
either the previous build or the new one.

Coalescing rules:
    identity, ownership and injury fields prefer the roster provider (ESPN);
    news, rankings and projections come from the rankings provider (FP);
    a value missing on the preferred side falls back to the other side.
"""

import logging
import sqlite3
import time
from collections import defaultdict
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Protocol, TypeVar

from fantasy_football_manager.domain.crosswalk import CrosswalkEntry
from fantasy_football_manager.domain.defense import DefenseVsPositionStat, DefensiveRanking
from fantasy_football_manager.domain.fantasy_pros import FpProjection, FpRanking
from fantasy_football_manager.domain.matchup import NflMatchup
from fantasy_football_manager.domain.player_data import EspnPlayerData, FpPlayerData
from fantasy_football_manager.domain.unified_player import RefreshResult, UnifiedPlayer
from fantasy_football_manager.identity.normalizer import Normalizer, default_normalizer
from fantasy_football_manager.repos.protocols import (
    DefenseVsPositionRepo,
    EspnPlayerRepo,
    FpPlayerRepo,
    FpProjectionRepo,
    FpRankingRepo,
    MatchupRepo,
    UnifiedPlayerRepo,
)
from fantasy_football_manager.services.defense_vs_position import opponent_team
from fantasy_football_manager.services.defensive_rankings import DefensiveRankingService

logger = logging.getLogger(__name__)

DEFAULT_SCORING_PRIORITY = ("PPR", "HALF", "STD")
RANK_TYPE_PRIORITY = ("weekly", "ros", "draft")


class _WeeklyRow(Protocol):
    @property
    def week(self) -> int | None: ...

    @property
    def scoring_type(self) -> str | None: ...


class _CrosswalkSource(Protocol):
    def all(self) -> list[CrosswalkEntry]: ...


R = TypeVar("R", bound=_WeeklyRow)
V = TypeVar("V")


def _priority(value: str | None, order: Sequence[str]) -> int:
    if value is not None:
        upper = value.upper()
        for index, candidate in enumerate(order):
            if candidate.upper() == upper:
                return index
    return len(order)


def latest_rows(rows: Sequence[R]) -> list[R]:
    """Rows of the highest week, or the season-level rows when no week is set."""
    weekly = [r for r in rows if r.week is not None]
    if weekly:
        latest = max(r.week for r in weekly)  # type: ignore[type-var]
        return [r for r in weekly if r.week == latest]
    return [r for r in rows if r.week is None]


def pick_ranking(rankings: Sequence[FpRanking], scoring_priority: Sequence[str]) -> FpRanking | None:
    candidates = latest_rows(rankings)
    if not candidates:
        return None
    return min(
        candidates,
        key=lambda r: (
            _priority(r.scoring_type, scoring_priority),
            _priority(r.rank_type, RANK_TYPE_PRIORITY),
            r.scoring_type or "",
            r.rank_type,
            r.rank,
        ),
    )


def pick_projection(projections: Sequence[FpProjection], scoring_priority: Sequence[str]) -> FpProjection | None:
    candidates = latest_rows(projections)
    if not candidates:
        return None
    return min(candidates, key=lambda p: (_priority(p.scoring_type, scoring_priority), p.scoring_type or ""))


def pick_defense_vs_position(
    stats: Sequence[DefenseVsPositionStat],
    scoring_priority: Sequence[str],
) -> DefenseVsPositionStat | None:
    """Preferred scoring type first, then the most recent week, season-level rows last."""
    if not stats:
        return None
    return min(
        stats,
        key=lambda s: (
            _priority(s.scoring_type, scoring_priority),
            s.week is None,
            -(s.week or 0),
            s.scoring_type or "",
        ),
    )


def _coalesce(*values: V | None) -> V | None:
    for value in values:
        if value is not None:
            return value
    return None


@dataclass
class _ScopeData:
    """Everything one (sport, season) needs, loaded once per refresh."""

    espn: dict[int, EspnPlayerData]
    fp: dict[str, FpPlayerData]
    rankings: dict[str, list[FpRanking]]
    projections: dict[str, list[FpProjection]]
    matchups: dict[str, NflMatchup]
    dvp: dict[tuple[str, str], list[DefenseVsPositionStat]]
    defense: DefensiveRanking


class UnifiedViewService:
    def __init__(
        self,
        conn: sqlite3.Connection,
        crosswalk_repo: _CrosswalkSource,
        espn_repo: EspnPlayerRepo,
        fp_repo: FpPlayerRepo,
        ranking_repo: FpRankingRepo,
        projection_repo: FpProjectionRepo,
        matchup_repo: MatchupRepo,
        dvp_repo: DefenseVsPositionRepo,
        defensive_rankings: DefensiveRankingService,
        unified_repo: UnifiedPlayerRepo,
        *,
        scoring_priority: Sequence[str] = DEFAULT_SCORING_PRIORITY,
        normalizer: Normalizer | None = None,
    ) -> None:
        self._conn = conn
        self._crosswalk_repo = crosswalk_repo
        self._espn_repo = espn_repo
        self._fp_repo = fp_repo
        self._ranking_repo = ranking_repo
        self._projection_repo = projection_repo
        self._matchup_repo = matchup_repo
        self._dvp_repo = dvp_repo
        self._defensive_rankings = defensive_rankings
        self._unified_repo = unified_repo
        self._scoring_priority = tuple(scoring_priority)
        self._normalizer = normalizer or default_normalizer()

    def refresh_unified_view(self) -> RefreshResult:
        """Rebuild the whole table. On failure the previous contents are kept."""
        t0 = time.perf_counter()
        logger.info("Refreshing unified player view")
        try:
            players = self.build()
            row_count = self._unified_repo.replace_all(players)
            self._conn.commit()
        except (sqlite3.Error, ValueError, TypeError) as exc:
            self._conn.rollback()
            logger.error("Unified view refresh failed, previous contents kept: %s", exc)
            return RefreshResult(success=False, row_count=0, error=str(exc))
        except Exception:
            self._conn.rollback()
            logger.exception("Unified view refresh aborted, previous contents kept")
            raise
        logger.info("Unified view refreshed with %d rows in %.1fs", row_count, time.perf_counter() - t0)
        return RefreshResult(success=True, row_count=row_count)

    def build(self) -> list[UnifiedPlayer]:
        scopes: dict[tuple[str, int], _ScopeData] = {}
        players: list[UnifiedPlayer] = []
        skipped = 0
        for entry in self._crosswalk_repo.all():
            scope = scopes.get((entry.sport, entry.season))
            if scope is None:
                scope = self._load_scope(entry.sport, entry.season)
                scopes[(entry.sport, entry.season)] = scope
            player = self._build_player(entry, scope)
            if player is None:
                skipped += 1
                continue
            players.append(player)
        if skipped:
            logger.debug("Skipped %d crosswalk entries with no catalog record", skipped)
        return players

    def _load_scope(self, sport: str, season: int) -> _ScopeData:
        rankings: dict[str, list[FpRanking]] = defaultdict(list)
        for ranking in self._ranking_repo.get_by_season(sport, season):
            rankings[ranking.fp_player_id].append(ranking)

        projections: dict[str, list[FpProjection]] = defaultdict(list)
        for projection in self._projection_repo.get_by_season(sport, season):
            projections[projection.fp_player_id].append(projection)

        matchups: dict[str, NflMatchup] = {}
        for matchup in self._matchup_repo.get_by_season(season):
            current = matchups.get(matchup.team_abbr)
            if current is None or matchup.week > current.week:
                matchups[matchup.team_abbr] = matchup

        dvp: dict[tuple[str, str], list[DefenseVsPositionStat]] = defaultdict(list)
        for stat in self._dvp_repo.get_by_season(sport, season):
            team = self._normalizer.normalize_team(stat.defense_team) or stat.defense_team
            dvp[(team, stat.position)].append(stat)

        return _ScopeData(
            espn={p.espn_player_id: p for p in self._espn_repo.get_by_season(sport, season)},
            fp={p.fp_player_id: p for p in self._fp_repo.get_by_season(sport, season)},
            rankings=rankings,
            projections=projections,
            matchups=matchups,
            dvp=dvp,
            defense=self._defensive_rankings.latest_rankings(season),
        )

    def _build_player(self, entry: CrosswalkEntry, scope: _ScopeData) -> UnifiedPlayer | None:
        espn = scope.espn.get(entry.espn_player_id) if entry.espn_player_id is not None else None
        fp = scope.fp.get(entry.fp_player_id) if entry.fp_player_id is not None else None
        if espn is None and fp is None:
            return None
        assert entry.id is not None

        raw_team = _coalesce(espn.team if espn else None, fp.team if fp else None)
        raw_position = _coalesce(espn.position if espn else None, fp.position if fp else None)
        team = self._normalizer.normalize_team(raw_team) or raw_team
        position = self._normalizer.normalize_position(raw_position)

        ranking = pick_ranking(scope.rankings.get(entry.fp_player_id or "", []), self._scoring_priority)
        projection = pick_projection(scope.projections.get(entry.fp_player_id or "", []), self._scoring_priority)
        matchup = scope.matchups.get(team) if team else None

        opponent = matchup.opponent_abbr if matchup else None
        if opponent is None and projection is not None:
            opponent = opponent_team(projection.opponent, self._normalizer)
        oprk = None
        if opponent is not None and position is not None:
            oprk = pick_defense_vs_position(scope.dvp.get((opponent, position), []), self._scoring_priority)

        return UnifiedPlayer(
            crosswalk_id=entry.id,
            canonical_key=entry.canonical_key,
            sport=entry.sport,
            season=entry.season,
            match_confidence=entry.match_confidence,
            match_status=str(entry.match_status),
            manual_override=entry.manual_override,
            espn_player_id=entry.espn_player_id,
            fp_player_id=entry.fp_player_id,
            full_name=espn.full_name if espn else fp.full_name,  # type: ignore[union-attr]
            first_name=_coalesce(espn.first_name if espn else None, fp.first_name if fp else None),
            last_name=_coalesce(espn.last_name if espn else None, fp.last_name if fp else None),
            team=team,
            position=position,
            jersey_number=_coalesce(espn.jersey_number if espn else None, fp.jersey_number if fp else None),
            injury_status=espn.injury_status if espn else None,
            percent_owned=espn.percent_owned if espn else None,
            percent_started=espn.percent_started if espn else None,
            average_points=espn.average_points if espn else None,
            total_points=espn.total_points if espn else None,
            espn_last_fetched=espn.last_fetched_at if espn else None,
            espn_outlook=espn.latest_outlook if espn else None,
            espn_outlook_week=espn.outlook_week if espn else None,
            espn_news_date=espn.news_date if espn else None,
            fp_headline=fp.latest_headline if fp else None,
            fp_analysis=fp.latest_analysis if fp else None,
            fp_news_date=fp.news_date if fp else None,
            fp_rank=ranking.rank if ranking else None,
            fp_tier=ranking.tier if ranking else None,
            rank_type=ranking.rank_type if ranking else None,
            ranking_scoring_type=ranking.scoring_type if ranking else None,
            ranking_week=ranking.week if ranking else None,
            projected_points=projection.projected_points if projection else None,
            projection_opponent=projection.opponent if projection else None,
            projection_stats=dict(projection.stats) if projection else {},
            projection_week=projection.week if projection else None,
            projection_scoring_type=projection.scoring_type if projection else None,
            opponent_abbr=opponent,
            game_time_utc=matchup.game_time_utc if matchup else None,
            is_home=matchup.is_home if matchup else None,
            venue=matchup.venue if matchup else None,
            game_day=matchup.game_day if matchup else None,
            matchup_week=matchup.week if matchup else None,
            opponent_rank=oprk.rank if oprk else None,
            opponent_avg_allowed=oprk.avg_points_allowed if oprk else None,
            oprk_scoring_type=oprk.scoring_type if oprk else None,
            opponent_defense_rank=scope.defense.ranks.get(opponent) if opponent else None,
        )

    def get_unified_view(
        self,
        sport: str,
        season: int,
        team: str | None = None,
        position: str | None = None,
    ) -> list[UnifiedPlayer]:
        """Rows for one scope ordered by full name. Filters accept any team or position spelling."""
        team_filter = None
        if team is not None:
            team_filter = self._normalizer.normalize_team(team)
            if team_filter is None:
                logger.debug("Unrecognized team filter %r", team)
                return []
        position_filter = self._normalizer.normalize_position(position) if position is not None else None
        return self._unified_repo.query(sport, season, team=team_filter, position=position_filter)
