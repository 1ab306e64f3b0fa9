import sqlite3
from collections.abc import Iterator
from contextlib import contextmanager
from functools import cached_property

from fantasy_football_manager.config import AppSettings
from fantasy_football_manager.db.connection import create_connection
from fantasy_football_manager.ingest.loader import BatchLoader
from fantasy_football_manager.repos.crosswalk_repo import SqliteCrosswalkRepo
from fantasy_football_manager.repos.defense_vs_position_repo import SqliteDefenseVsPositionRepo
from fantasy_football_manager.repos.espn_player_repo import SqliteEspnPlayerRepo
from fantasy_football_manager.repos.fantasy_pros_repo import SqliteFpProjectionRepo, SqliteFpRankingRepo
from fantasy_football_manager.repos.fp_player_repo import SqliteFpPlayerRepo
from fantasy_football_manager.repos.load_log_repo import SqliteLoadLogRepo
from fantasy_football_manager.repos.matchup_repo import SqliteMatchupRepo
from fantasy_football_manager.repos.team_defense_stat_repo import SqliteTeamDefenseStatRepo
from fantasy_football_manager.repos.unified_player_repo import SqliteUnifiedPlayerRepo
from fantasy_football_manager.services.crosswalk_resolver import CrosswalkResolver
from fantasy_football_manager.services.defense_vs_position import DefenseVsPositionBuilder
from fantasy_football_manager.services.defensive_rankings import DefensiveRankingService
from fantasy_football_manager.services.matchup_builder import MatchupService
from fantasy_football_manager.services.orphan_reclaimer import OrphanReclaimer
from fantasy_football_manager.services.pipeline import UnifiedPlayerPipeline
from fantasy_football_manager.services.unified_view import UnifiedViewService


class AppContainer:
    """Repos and services over one connection, built on first use."""

    def __init__(self, conn: sqlite3.Connection, settings: AppSettings) -> None:
        self._conn = conn
        self._settings = settings

    @property
    def conn(self) -> sqlite3.Connection:
        return self._conn

    @property
    def settings(self) -> AppSettings:
        return self._settings

    @cached_property
    def espn_repo(self) -> SqliteEspnPlayerRepo:
        return SqliteEspnPlayerRepo(self._conn)

    @cached_property
    def fp_repo(self) -> SqliteFpPlayerRepo:
        return SqliteFpPlayerRepo(self._conn)

    @cached_property
    def crosswalk_repo(self) -> SqliteCrosswalkRepo:
        return SqliteCrosswalkRepo(self._conn)

    @cached_property
    def ranking_repo(self) -> SqliteFpRankingRepo:
        return SqliteFpRankingRepo(self._conn)

    @cached_property
    def projection_repo(self) -> SqliteFpProjectionRepo:
        return SqliteFpProjectionRepo(self._conn)

    @cached_property
    def matchup_repo(self) -> SqliteMatchupRepo:
        return SqliteMatchupRepo(self._conn)

    @cached_property
    def team_defense_repo(self) -> SqliteTeamDefenseStatRepo:
        return SqliteTeamDefenseStatRepo(self._conn)

    @cached_property
    def dvp_repo(self) -> SqliteDefenseVsPositionRepo:
        return SqliteDefenseVsPositionRepo(self._conn)

    @cached_property
    def unified_repo(self) -> SqliteUnifiedPlayerRepo:
        return SqliteUnifiedPlayerRepo(self._conn)

    @cached_property
    def log_repo(self) -> SqliteLoadLogRepo:
        return SqliteLoadLogRepo(self._conn)

    def loader(self, target_table: str) -> BatchLoader:
        repos = {
            "espn_player_data": self.espn_repo,
            "fp_player_data": self.fp_repo,
            "fp_ranking": self.ranking_repo,
            "fp_projection": self.projection_repo,
            "team_defense_stat": self.team_defense_repo,
        }
        return BatchLoader(repos[target_table], self.log_repo, target_table, conn=self._conn)

    @cached_property
    def resolver(self) -> CrosswalkResolver:
        return CrosswalkResolver(self.espn_repo, self.fp_repo, self.crosswalk_repo, self._conn)

    @cached_property
    def reclaimer(self) -> OrphanReclaimer:
        return OrphanReclaimer(self.espn_repo, self.fp_repo, self.crosswalk_repo, self._conn)

    @cached_property
    def defensive_rankings(self) -> DefensiveRankingService:
        return DefensiveRankingService(self.team_defense_repo)

    @cached_property
    def dvp_builder(self) -> DefenseVsPositionBuilder:
        return DefenseVsPositionBuilder(self.projection_repo, self.dvp_repo, self._conn)

    @cached_property
    def matchup_service(self) -> MatchupService:
        return MatchupService(self.matchup_repo, self._conn)

    @cached_property
    def view_service(self) -> UnifiedViewService:
        return UnifiedViewService(
            self._conn,
            self.crosswalk_repo,
            self.espn_repo,
            self.fp_repo,
            self.ranking_repo,
            self.projection_repo,
            self.matchup_repo,
            self.dvp_repo,
            self.defensive_rankings,
            self.unified_repo,
            scoring_priority=self._settings.scoring_priority,
        )

    @cached_property
    def pipeline(self) -> UnifiedPlayerPipeline:
        return UnifiedPlayerPipeline(
            self._conn,
            self.loader("espn_player_data"),
            self.loader("fp_player_data"),
            self.dvp_builder,
            self.resolver,
            self.reclaimer,
            self.view_service,
        )


@contextmanager
def build_app_container(settings: AppSettings) -> Iterator[AppContainer]:
    """Composition root: opens the database, yields the container, closes the database."""
    conn = create_connection(settings.db_path)
    try:
        yield AppContainer(conn, settings)
    finally:
        conn.close()
