from pathlib import Path
from sqlite3 import ProgrammingError

import pytest

from fantasy_football_manager.cli.factory import AppContainer, build_app_container
from fantasy_football_manager.config import AppSettings
from fantasy_football_manager.repos.espn_player_repo import SqliteEspnPlayerRepo
from fantasy_football_manager.repos.fp_player_repo import SqliteFpPlayerRepo


def _settings(db_path: str) -> AppSettings:
    return AppSettings(
        db_path=db_path,
        sport="NFL",
        season=2024,
        scoring_priority=("HALF", "PPR"),
        dvp_scoring_type="PPR",
    )


class TestBuildAppContainer:
    def test_yields_container(self, tmp_path: Path) -> None:
        with build_app_container(_settings(str(tmp_path / "ffm.db"))) as container:
            assert isinstance(container, AppContainer)
            assert isinstance(container.espn_repo, SqliteEspnPlayerRepo)
            assert container.settings.season == 2024

    def test_creates_database_file(self, tmp_path: Path) -> None:
        db_path = tmp_path / "nested" / "ffm.db"
        with build_app_container(_settings(str(db_path))):
            pass
        assert db_path.exists()

    def test_closes_connection(self, tmp_path: Path) -> None:
        with build_app_container(_settings(str(tmp_path / "ffm.db"))) as container:
            conn = container.conn
        with pytest.raises(ProgrammingError):
            conn.execute("SELECT 1")


class TestAppContainer:
    def test_services_are_cached(self, tmp_path: Path) -> None:
        with build_app_container(_settings(str(tmp_path / "ffm.db"))) as container:
            assert container.resolver is container.resolver
            assert container.pipeline is container.pipeline
            assert container.fp_repo is container.fp_repo

    def test_loader_targets(self, tmp_path: Path) -> None:
        with build_app_container(_settings(str(tmp_path / "ffm.db"))) as container:
            for table in ("espn_player_data", "fp_player_data", "fp_ranking", "fp_projection", "team_defense_stat"):
                container.loader(table)
            with pytest.raises(KeyError):
                container.loader("unified_player")

    def test_view_uses_configured_priority(self, tmp_path: Path) -> None:
        with build_app_container(_settings(str(tmp_path / "ffm.db"))) as container:
            assert container.view_service._scoring_priority == ("HALF", "PPR")
            assert isinstance(container.reclaimer._fp_repo, SqliteFpPlayerRepo)
