import logging
import sqlite3
from collections.abc import Iterable
from datetime import datetime, timezone

from fantasy_football_manager.domain.errors import RefreshError
from fantasy_football_manager.domain.matchup import MatchupBuildResult, NflMatchup, OddsRecord
from fantasy_football_manager.domain.result import Err, Ok, Result
from fantasy_football_manager.identity.normalizer import Normalizer, default_normalizer
from fantasy_football_manager.repos.protocols import MatchupRepo

logger = logging.getLogger(__name__)

_WEEKDAYS = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")


def _utc_weekday(commence_time: str) -> str | None:
    try:
        kickoff = datetime.fromisoformat(commence_time)
    except ValueError:
        return None
    if kickoff.tzinfo is None:
        kickoff = kickoff.replace(tzinfo=timezone.utc)
    return _WEEKDAYS[kickoff.astimezone(timezone.utc).weekday()]


def build_matchups(
    odds_records: Iterable[OddsRecord],
    season: int,
    week: int,
    normalizer: Normalizer | None = None,
) -> MatchupBuildResult:
    """One home and one away row per game in the week.

    Odds feeds list each game once per bookmaker; the first line seen for a
    game is the one kept.
    """
    normalizer = normalizer or default_normalizer()
    games: dict[str, OddsRecord] = {}
    for record in odds_records:
        if record.season != season or record.week != week:
            continue
        games.setdefault(record.game_id, record)

    matchups: list[NflMatchup] = []
    skipped = 0
    for game in games.values():
        if not game.commence_time:
            logger.debug("Game %s has no kickoff time, skipping", game.game_id)
            skipped += 1
            continue
        home = normalizer.normalize_team(game.home_team)
        away = normalizer.normalize_team(game.away_team)
        game_day = _utc_weekday(game.commence_time)
        if home is None or away is None or game_day is None:
            logger.warning("Skipping game %s: %s at %s", game.game_id, game.away_team, game.home_team)
            skipped += 1
            continue
        for team, opponent, is_home in ((home, away, True), (away, home, False)):
            matchups.append(
                NflMatchup(
                    season=season,
                    week=week,
                    team_abbr=team,
                    opponent_abbr=opponent,
                    game_time_utc=game.commence_time,
                    is_home=is_home,
                    game_day=game_day,
                    bookmaker_source=game.bookmaker,
                )
            )
    return MatchupBuildResult(matchups=matchups, games=len(games), skipped=skipped)


class MatchupService:
    def __init__(self, repo: MatchupRepo, conn: sqlite3.Connection, normalizer: Normalizer | None = None) -> None:
        self._repo = repo
        self._conn = conn
        self._normalizer = normalizer or default_normalizer()

    def refresh_week(
        self,
        odds_records: Iterable[OddsRecord],
        season: int,
        week: int,
    ) -> Result[MatchupBuildResult, RefreshError]:
        """Replace the stored schedule for one week with rows built from ``odds_records``."""
        result = build_matchups(odds_records, season, week, self._normalizer)
        if result.games == 0:
            message = f"No odds found for season {season} week {week}; load odds first"
            logger.warning("%s", message)
            return Err(RefreshError(message=message, job="matchups", season=season))

        try:
            self._repo.replace_week(season, week, result.matchups)
            self._conn.commit()
        except sqlite3.Error as exc:
            self._conn.rollback()
            logger.error("Matchup refresh failed for season %d week %d: %s", season, week, exc)
            return Err(RefreshError(message=str(exc), job="matchups", season=season))

        logger.info(
            "Wrote %d matchup rows for season %d week %d (%d games, %d skipped)",
            len(result.matchups),
            season,
            week,
            result.games,
            result.skipped,
        )
        return Ok(result)
