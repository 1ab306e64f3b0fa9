import math
from collections.abc import Callable
from datetime import datetime, timezone
from typing import Any

from fantasy_football_manager.domain.defense import TeamDefenseStat
from fantasy_football_manager.domain.fantasy_pros import FpProjection, FpRanking
from fantasy_football_manager.domain.matchup import OddsRecord
from fantasy_football_manager.domain.player_data import EspnPlayerData, FpPlayerData
from fantasy_football_manager.identity.normalizer import normalize_team
from fantasy_football_manager.identity.teams import ESPN_POSITION_IDS, ESPN_PRO_TEAM_IDS


def _to_optional_int(value: Any) -> int | None:
    if value is None:
        return None
    if isinstance(value, float) and math.isnan(value):
        return None
    if isinstance(value, str):
        value = value.strip()
        if value == "":
            return None
        return int(float(value))
    return int(value)


def _to_optional_float(value: Any) -> float | None:
    if value is None:
        return None
    if isinstance(value, float) and math.isnan(value):
        return None
    if isinstance(value, str):
        value = value.strip().rstrip("%")
        if value == "":
            return None
    return float(value)


def _to_optional_str(value: Any) -> str | None:
    if value is None:
        return None
    if isinstance(value, float) and math.isnan(value):
        return None
    s = str(value).strip()
    if s == "":
        return None
    return s


def _first(row: dict[str, Any], *keys: str) -> Any:
    for key in keys:
        value = row.get(key)
        if value is not None and value != "":
            return value
    return None


def _split_name(full_name: str) -> tuple[str | None, str | None]:
    parts = full_name.split(" ")
    first = parts[0] or None
    last = " ".join(parts[1:]) or None
    return first, last


def _epoch_ms_to_iso(value: Any) -> str | None:
    millis = _to_optional_int(value)
    if millis is None:
        return None
    return datetime.fromtimestamp(millis / 1000, tz=timezone.utc).isoformat()


def _latest_outlook(player: dict[str, Any]) -> tuple[str | None, int | None]:
    by_week = (player.get("outlooks") or {}).get("outlooksByWeek") or {}
    weeks = [w for w in by_week if str(w).isdigit()]
    if not weeks:
        return None, None
    latest = max(weeks, key=int)
    return _to_optional_str(by_week[latest]), int(latest)


def espn_entry_to_player_data(
    entry: dict[str, Any],
    sport: str,
    season: int,
    *,
    fetched_at: str | None = None,
) -> EspnPlayerData | None:
    """Translate one roster-provider player pool entry.

    Entries wrap the player either under ``player`` or not at all. Returns None
    for entries without an id or name and for free agents (no NFL team).
    """
    player = entry.get("player") or entry
    ownership = player.get("ownership") or entry.get("ownership") or {}

    espn_player_id = _to_optional_int(player.get("id"))
    if espn_player_id is None:
        return None

    full_name = _to_optional_str(player.get("fullName")) or _to_optional_str(
        f"{player.get('firstName') or ''} {player.get('lastName') or ''}"
    )
    if full_name is None:
        return None

    team_id = _to_optional_int(_first(player, "proTeamId", "teamId"))
    team = ESPN_PRO_TEAM_IDS.get(team_id) if team_id is not None else None
    if team is None:
        return None

    position_id = _to_optional_int(player.get("defaultPositionId"))
    position = ESPN_POSITION_IDS.get(position_id) if position_id is not None else None

    injury_status = _to_optional_str(player.get("injuryStatus"))
    if player.get("injured") and injury_status is None:
        injury_status = "INJURED"

    current_stats: dict[str, Any] = next(
        (s for s in player.get("stats") or [] if s.get("statSourceId") == 0 and s.get("statSplitTypeId") == 1),
        {},
    )
    outlook, outlook_week = _latest_outlook(player)

    return EspnPlayerData(
        espn_player_id=espn_player_id,
        sport=sport,
        season=season,
        full_name=full_name,
        first_name=_to_optional_str(player.get("firstName")),
        last_name=_to_optional_str(player.get("lastName")),
        team=team,
        position=position,
        jersey_number=_to_optional_int(player.get("jersey")),
        injury_status=injury_status,
        percent_owned=_to_optional_float(ownership.get("percentOwned")),
        percent_started=_to_optional_float(ownership.get("percentStarted")),
        average_points=_to_optional_float(current_stats.get("appliedAverage")),
        total_points=_to_optional_float(current_stats.get("appliedTotal")),
        last_fetched_at=fetched_at,
        latest_outlook=outlook,
        outlook_week=outlook_week,
        news_date=_epoch_ms_to_iso(player.get("lastNewsDate")),
    )


def fp_row_to_player_data(row: dict[str, Any], sport: str, season: int) -> FpPlayerData | None:
    """Translate one rankings-provider player row.

    Players whose team is not one of the 32 NFL teams are free agents and are
    skipped.
    """
    fp_player_id = _to_optional_str(_first(row, "fp_player_id", "player_id", "playerId"))
    full_name = _to_optional_str(_first(row, "full_name", "name", "player_name"))
    if fp_player_id is None or full_name is None:
        return None

    team = normalize_team(_to_optional_str(row.get("team")))
    if team is None:
        return None

    first_name, last_name = _split_name(full_name)
    position = _to_optional_str(row.get("position"))
    return FpPlayerData(
        fp_player_id=fp_player_id,
        sport=sport,
        season=season,
        full_name=full_name,
        first_name=_to_optional_str(row.get("first_name")) or first_name,
        last_name=_to_optional_str(row.get("last_name")) or last_name,
        team=team,
        position=position.upper() if position else None,
        jersey_number=_to_optional_int(_first(row, "jersey_number", "jerseyNumber")),
        latest_headline=_to_optional_str(_first(row, "latest_headline", "headline")),
        latest_analysis=_to_optional_str(_first(row, "latest_analysis", "analysis")),
        news_date=_to_optional_str(row.get("news_date")),
    )


def make_espn_player_mapper(
    sport: str,
    season: int,
    *,
    fetched_at: str | None = None,
) -> Callable[[dict[str, Any]], EspnPlayerData | None]:
    def mapper(entry: dict[str, Any]) -> EspnPlayerData | None:
        return espn_entry_to_player_data(entry, sport, season, fetched_at=fetched_at)

    return mapper


def make_fp_player_mapper(sport: str, season: int) -> Callable[[dict[str, Any]], FpPlayerData | None]:
    def mapper(row: dict[str, Any]) -> FpPlayerData | None:
        return fp_row_to_player_data(row, sport, season)

    return mapper


def make_team_defense_mapper(
    season: int,
    week: int | None = None,
) -> Callable[[dict[str, Any]], TeamDefenseStat | None]:
    """Rows keep the provider's team spelling; the ranking calculator normalizes it."""

    def mapper(row: dict[str, Any]) -> TeamDefenseStat | None:
        team = _to_optional_str(_first(row, "team_abbreviation", "team", "abbreviation"))
        if team is None:
            return None
        row_week = _to_optional_int(row.get("week"))
        return TeamDefenseStat(
            season=season,
            week=row_week if row_week is not None else week,
            team_abbreviation=team.upper(),
            team_name=_to_optional_str(row.get("team_name")),
            games_played=_to_optional_int(row.get("games_played")),
            points_allowed=_to_optional_float(row.get("points_allowed")),
        )

    return mapper


def make_fp_ranking_mapper(
    sport: str,
    season: int,
    *,
    rank_type: str,
    scoring_type: str | None = None,
    week: int | None = None,
) -> Callable[[dict[str, Any]], FpRanking | None]:
    def mapper(row: dict[str, Any]) -> FpRanking | None:
        fp_player_id = _to_optional_str(_first(row, "fp_player_id", "player_id"))
        player_name = _to_optional_str(_first(row, "player_name", "name"))
        position = _to_optional_str(row.get("position"))
        rank = _to_optional_int(_first(row, "rank", "rank_ecr"))
        if fp_player_id is None or player_name is None or position is None or rank is None:
            return None
        row_week = _to_optional_int(row.get("week"))
        return FpRanking(
            sport=sport,
            season=season,
            fp_player_id=fp_player_id,
            player_name=player_name,
            position=position.upper(),
            rank_type=(_to_optional_str(row.get("rank_type")) or rank_type).lower(),
            rank=rank,
            week=row_week if row_week is not None else week,
            scoring_type=_to_optional_str(row.get("scoring_type")) or scoring_type,
            team=_to_optional_str(row.get("team")),
            tier=_to_optional_int(row.get("tier")),
            best_rank=_to_optional_int(row.get("best_rank")),
            worst_rank=_to_optional_int(row.get("worst_rank")),
            avg_rank=_to_optional_float(row.get("avg_rank")),
        )

    return mapper


_PROJECTION_COLUMNS = frozenset(
    {
        "fp_player_id",
        "player_id",
        "player_name",
        "name",
        "position",
        "team",
        "opponent",
        "projected_points",
        "points",
        "week",
        "scoring_type",
        "stats",
    }
)


def _projection_stats(row: dict[str, Any]) -> dict[str, float]:
    nested = row.get("stats")
    source = nested if isinstance(nested, dict) else row
    stats: dict[str, float] = {}
    for key, value in source.items():
        if source is row and key in _PROJECTION_COLUMNS:
            continue
        try:
            number = _to_optional_float(value)
        except (TypeError, ValueError):
            continue
        if number is not None:
            stats[key] = number
    return stats


def make_fp_projection_mapper(
    sport: str,
    season: int,
    *,
    scoring_type: str | None = None,
    week: int | None = None,
) -> Callable[[dict[str, Any]], FpProjection | None]:
    def mapper(row: dict[str, Any]) -> FpProjection | None:
        fp_player_id = _to_optional_str(_first(row, "fp_player_id", "player_id"))
        player_name = _to_optional_str(_first(row, "player_name", "name"))
        position = _to_optional_str(row.get("position"))
        if fp_player_id is None or player_name is None or position is None:
            return None
        row_week = _to_optional_int(row.get("week"))
        return FpProjection(
            sport=sport,
            season=season,
            fp_player_id=fp_player_id,
            player_name=player_name,
            position=position.upper(),
            week=row_week if row_week is not None else week,
            scoring_type=_to_optional_str(row.get("scoring_type")) or scoring_type,
            team=_to_optional_str(row.get("team")),
            opponent=_to_optional_str(row.get("opponent")),
            projected_points=_to_optional_float(_first(row, "projected_points", "points")),
            stats=_projection_stats(row),
        )

    return mapper


def make_odds_mapper(season: int, week: int) -> Callable[[dict[str, Any]], OddsRecord | None]:
    """Map one game from a saved odds feed. The first listed bookmaker is the source."""

    def mapper(row: dict[str, Any]) -> OddsRecord | None:
        game_id = _to_optional_str(_first(row, "game_id", "id"))
        home_team = _to_optional_str(row.get("home_team"))
        away_team = _to_optional_str(row.get("away_team"))
        if game_id is None or home_team is None or away_team is None:
            return None
        bookmaker = _to_optional_str(row.get("bookmaker"))
        if bookmaker is None:
            bookmakers = row.get("bookmakers") or []
            if bookmakers and isinstance(bookmakers[0], dict):
                bookmaker = _to_optional_str(_first(bookmakers[0], "title", "key"))
        return OddsRecord(
            game_id=game_id,
            season=season,
            week=week,
            home_team=home_team,
            away_team=away_team,
            commence_time=_to_optional_str(row.get("commence_time")),
            bookmaker=bookmaker,
        )

    return mapper
