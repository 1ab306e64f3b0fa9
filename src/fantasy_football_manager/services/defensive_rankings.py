"""Ordinal defensive ranks from raw team points-allowed totals.

Rank 1 is the toughest defense (fewest points allowed per game). Ranks are
published under the canonical abbreviation and every known variant so callers
holding either spelling find the team.
"""

import logging
from collections.abc import Iterable

from fantasy_football_manager.domain.defense import DefensiveRanking, TeamDefenseStat
from fantasy_football_manager.identity.normalizer import Normalizer, default_normalizer
from fantasy_football_manager.repos.protocols import TeamDefenseStatRepo

logger = logging.getLogger(__name__)


def compute_defensive_rankings(
    stats: Iterable[TeamDefenseStat],
    *,
    season: int,
    week: int | None = None,
    normalizer: Normalizer | None = None,
) -> DefensiveRanking:
    normalizer = normalizer or default_normalizer()
    allowed_per_game: dict[str, float] = {}
    skipped = 0

    for stat in stats:
        if stat.points_allowed is None:
            logger.debug("No points allowed for %s, skipping", stat.team_abbreviation)
            skipped += 1
            continue
        team = normalizer.normalize_team(stat.team_abbreviation)
        if team is None:
            logger.debug("Unrecognized team %r, skipping", stat.team_abbreviation)
            skipped += 1
            continue
        if stat.games_played:
            allowed_per_game[team] = stat.points_allowed / stat.games_played
        else:
            logger.debug("No games played for %s, ranking on raw points allowed", team)
            allowed_per_game[team] = stat.points_allowed

    ordered = sorted(allowed_per_game.items(), key=lambda item: (item[1], item[0]))
    ranks: dict[str, int] = {}
    for position, (team, _) in enumerate(ordered, start=1):
        for variant in normalizer.team_variants(team):
            ranks[variant] = position

    return DefensiveRanking(season=season, week=week, ranks=ranks, skipped=skipped)


class DefensiveRankingService:
    def __init__(self, repo: TeamDefenseStatRepo, normalizer: Normalizer | None = None) -> None:
        self._repo = repo
        self._normalizer = normalizer or default_normalizer()

    def get_defensive_rankings(self, season: int, week: int | None = None) -> dict[str, int]:
        """Team abbreviation to rank for one week, or season-to-date when ``week`` is None.

        An empty scope yields an empty mapping.
        """
        return self.rank_scope(season, week).ranks

    def rank_scope(self, season: int, week: int | None = None) -> DefensiveRanking:
        stats = self._repo.get_by_scope(season, week)
        ranking = compute_defensive_rankings(stats, season=season, week=week, normalizer=self._normalizer)
        if ranking.skipped:
            logger.info("Skipped %d team defense rows for season %d week %s", ranking.skipped, season, week)
        return ranking

    def latest_rankings(self, season: int) -> DefensiveRanking:
        """Season-to-date ranks when available, otherwise the most recent week's."""
        if self._repo.has_season_totals(season):
            return self.rank_scope(season, None)
        weeks = self._repo.get_weeks(season)
        if not weeks:
            return DefensiveRanking(season=season, week=None, ranks={})
        return self.rank_scope(season, max(weeks))
