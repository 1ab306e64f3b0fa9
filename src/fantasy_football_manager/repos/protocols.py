from collections.abc import Iterable, Sequence
from typing import Protocol

from fantasy_football_manager.domain.crosswalk import CrosswalkEntry
from fantasy_football_manager.domain.defense import DefenseVsPositionStat, TeamDefenseStat
from fantasy_football_manager.domain.fantasy_pros import FpProjection, FpRanking
from fantasy_football_manager.domain.load_log import LoadLog
from fantasy_football_manager.domain.matchup import NflMatchup
from fantasy_football_manager.domain.player_data import EspnPlayerData, FpPlayerData, UpsertCounts
from fantasy_football_manager.domain.unified_player import UnifiedPlayer


class LoadLogRepo(Protocol):
    def insert(self, log: LoadLog) -> int: ...

    def get_recent(self, limit: int = 20) -> list[LoadLog]: ...


class BulkUpsertRepo(Protocol):
    def bulk_upsert(self, records: Iterable) -> UpsertCounts: ...


class EspnPlayerRepo(Protocol):
    def bulk_upsert(self, records: Iterable[EspnPlayerData]) -> UpsertCounts: ...

    def get_by_season(self, sport: str, season: int) -> list[EspnPlayerData]: ...

    def get(self, sport: str, season: int, espn_player_id: int) -> EspnPlayerData | None: ...

    def scopes(self) -> list[tuple[str, int]]: ...

    def delete_all(self, sport: str, season: int) -> int: ...


class FpPlayerRepo(Protocol):
    def bulk_upsert(self, records: Iterable[FpPlayerData]) -> UpsertCounts: ...

    def get_by_season(self, sport: str, season: int) -> list[FpPlayerData]: ...

    def get(self, sport: str, season: int, fp_player_id: str) -> FpPlayerData | None: ...

    def scopes(self) -> list[tuple[str, int]]: ...

    def delete_all(self, sport: str, season: int) -> int: ...

    def delete_by_ids(self, row_ids: Sequence[int]) -> int: ...


class CrosswalkRepo(Protocol):
    def get_by_season(self, sport: str, season: int) -> list[CrosswalkEntry]: ...

    def get_manual_overrides(self, sport: str | None = None, season: int | None = None) -> list[CrosswalkEntry]: ...


class TeamDefenseStatRepo(Protocol):
    def get_by_scope(self, season: int, week: int | None = None) -> list[TeamDefenseStat]: ...

    def get_weeks(self, season: int) -> list[int]: ...

    def has_season_totals(self, season: int) -> bool: ...


class DefenseVsPositionRepo(Protocol):
    def upsert(self, stat: DefenseVsPositionStat) -> int: ...

    def delete_scope(self, sport: str, season: int, week: int | None, scoring_type: str | None) -> int: ...

    def get_by_season(self, sport: str, season: int, position: str | None = None) -> list[DefenseVsPositionStat]: ...


class FpRankingRepo(Protocol):
    def get_by_season(self, sport: str, season: int) -> list[FpRanking]: ...


class FpProjectionRepo(Protocol):
    def get_by_season(self, sport: str, season: int, scoring_type: str | None = None) -> list[FpProjection]: ...


class MatchupRepo(Protocol):
    def get_by_season(self, season: int) -> list[NflMatchup]: ...

    def replace_week(self, season: int, week: int, matchups: Iterable[NflMatchup]) -> int: ...


class UnifiedPlayerRepo(Protocol):
    def replace_all(self, players: Iterable[UnifiedPlayer]) -> int: ...

    def query(
        self,
        sport: str,
        season: int,
        team: str | None = None,
        position: str | None = None,
    ) -> list[UnifiedPlayer]: ...
