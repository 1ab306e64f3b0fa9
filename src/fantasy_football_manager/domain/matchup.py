from dataclasses import dataclass


@dataclass(frozen=True)
class OddsRecord:
    game_id: str
    season: int
    week: int
    home_team: str
    away_team: str
    commence_time: str | None = None
    bookmaker: str | None = None


@dataclass(frozen=True)
class NflMatchup:
    season: int
    week: int
    team_abbr: str
    opponent_abbr: str
    game_time_utc: str | None = None
    is_home: bool | None = None
    venue: str | None = None
    game_day: str | None = None
    bookmaker_source: str | None = None
    id: int | None = None


@dataclass(frozen=True)
class MatchupBuildResult:
    matchups: list[NflMatchup]
    games: int
    skipped: int
