from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class UnifiedPlayer:
    crosswalk_id: int
    canonical_key: str
    sport: str
    season: int
    match_confidence: float
    match_status: str
    manual_override: bool
    full_name: str
    espn_player_id: int | None = None
    fp_player_id: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    team: str | None = None
    position: str | None = None
    jersey_number: int | None = None
    # Roster provider
    injury_status: str | None = None
    percent_owned: float | None = None
    percent_started: float | None = None
    average_points: float | None = None
    total_points: float | None = None
    espn_last_fetched: str | None = None
    espn_outlook: str | None = None
    espn_outlook_week: int | None = None
    espn_news_date: str | None = None
    # Rankings provider
    fp_headline: str | None = None
    fp_analysis: str | None = None
    fp_news_date: str | None = None
    fp_rank: int | None = None
    fp_tier: int | None = None
    rank_type: str | None = None
    ranking_scoring_type: str | None = None
    ranking_week: int | None = None
    projected_points: float | None = None
    projection_opponent: str | None = None
    projection_stats: dict[str, Any] = field(default_factory=dict)
    projection_week: int | None = None
    projection_scoring_type: str | None = None
    # Schedule
    opponent_abbr: str | None = None
    game_time_utc: str | None = None
    is_home: bool | None = None
    venue: str | None = None
    game_day: str | None = None
    matchup_week: int | None = None
    # OPRK
    opponent_rank: int | None = None
    opponent_avg_allowed: float | None = None
    oprk_scoring_type: str | None = None
    opponent_defense_rank: int | None = None


@dataclass(frozen=True)
class RefreshResult:
    success: bool
    row_count: int
    error: str | None = None
