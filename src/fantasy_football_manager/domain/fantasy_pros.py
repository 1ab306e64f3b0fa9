from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class FpRanking:
    sport: str
    season: int
    fp_player_id: str
    player_name: str
    position: str
    rank_type: str
    rank: int
    week: int | None = None
    scoring_type: str | None = None
    team: str | None = None
    tier: int | None = None
    best_rank: int | None = None
    worst_rank: int | None = None
    avg_rank: float | None = None
    id: int | None = None


@dataclass(frozen=True)
class FpProjection:
    sport: str
    season: int
    fp_player_id: str
    player_name: str
    position: str
    week: int | None = None
    scoring_type: str | None = None
    team: str | None = None
    opponent: str | None = None
    projected_points: float | None = None
    stats: dict[str, Any] = field(default_factory=dict)
    id: int | None = None
