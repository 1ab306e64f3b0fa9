from dataclasses import dataclass


@dataclass(frozen=True)
class TeamDefenseStat:
    season: int
    team_abbreviation: str
    week: int | None = None
    team_name: str | None = None
    games_played: int | None = None
    points_allowed: float | None = None
    id: int | None = None


@dataclass(frozen=True)
class DefenseVsPositionStat:
    sport: str
    season: int
    defense_team: str
    position: str
    rank: int
    avg_points_allowed: float
    week: int | None = None
    scoring_type: str | None = None
    games_played: int | None = None
    total_points_allowed: float | None = None
    id: int | None = None


@dataclass(frozen=True)
class DefensiveRanking:
    """Ranks for one (season, week) scope, keyed by every known team spelling."""

    season: int
    week: int | None
    ranks: dict[str, int]
    skipped: int = 0


@dataclass(frozen=True)
class DefenseRefreshResult:
    sport: str
    season: int
    scoring_type: str
    rows_written: int
    projections_used: int
