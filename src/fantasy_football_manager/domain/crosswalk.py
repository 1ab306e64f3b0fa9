from dataclasses import dataclass, field
from enum import StrEnum


class MatchStatus(StrEnum):
    EXACT = "exact"
    UNMATCHED = "unmatched"
    AMBIGUOUS = "ambiguous"
    MANUAL = "manual"


@dataclass(frozen=True)
class CrosswalkEntry:
    canonical_key: str
    sport: str
    season: int
    match_confidence: float
    match_status: MatchStatus
    espn_player_id: int | None = None
    fp_player_id: str | None = None
    manual_override: bool = False
    needs_review: bool = False
    notes: str | None = None
    id: int | None = None
    created_at: str | None = None
    updated_at: str | None = None

    @property
    def is_partial(self) -> bool:
        return self.espn_player_id is None or self.fp_player_id is None


@dataclass(frozen=True)
class AmbiguousMatch:
    """A match key that resolved to more than one record on at least one side."""

    match_key: str
    espn_player_ids: tuple[int, ...]
    fp_player_ids: tuple[str, ...]


@dataclass(frozen=True)
class CrosswalkResult:
    sport: str
    season: int
    created: int = 0
    updated: int = 0
    unchanged: int = 0
    matched: int = 0
    unresolved: int = 0
    ambiguous: int = 0
    protected: int = 0
    skipped: int = 0
    retired: int = 0
    review_queue: tuple[AmbiguousMatch, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class ReclaimResult:
    deleted: int
    scopes: tuple[tuple[str, int], ...] = ()
