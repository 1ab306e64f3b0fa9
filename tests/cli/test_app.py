import json
import logging
from collections.abc import Iterator
from pathlib import Path

import pytest
from typer.testing import CliRunner

from fantasy_football_manager.cli.app import app
from fantasy_football_manager.db.connection import create_connection

runner = CliRunner()

_ESPN_PAYLOAD = {
    "players": [
        {
            "player": {
                "id": 4262921,
                "fullName": "Justin Jefferson",
                "firstName": "Justin",
                "lastName": "Jefferson",
                "proTeamId": 16,
                "defaultPositionId": 3,
                "ownership": {"percentOwned": 99.9},
            }
        },
        {
            "player": {
                "id": 3915416,
                "fullName": "Garrett Wilson",
                "proTeamId": 20,
                "defaultPositionId": 3,
            }
        },
    ]
}


_FP_CSV = (
    "fp_player_id,full_name,team,position\n"
    "16393,Justin Jefferson,MIN,WR\n"
    "22902,Garrett Wilson,NYJ,WR\n"
    "555,Practice Squad,KC,WR\n"
)


@pytest.fixture(autouse=True)
def _restore_logging() -> Iterator[None]:
    """The app callback reconfigures the root logger against the runner's streams."""
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture
def db(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> str:
    monkeypatch.chdir(tmp_path)
    return str(tmp_path / "ffm.db")


@pytest.fixture
def espn_file(tmp_path: Path) -> Path:
    path = tmp_path / "espn.json"
    path.write_text(json.dumps(_ESPN_PAYLOAD))
    return path


@pytest.fixture
def fp_file(tmp_path: Path) -> Path:
    path = tmp_path / "fp.csv"
    path.write_text(_FP_CSV)
    return path


class TestHelp:
    def test_help_lists_sub_apps(self) -> None:
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        for name in ("ingest", "crosswalk", "view", "pipeline"):
            assert name in result.output

    def test_no_command(self) -> None:
        result = runner.invoke(app, [])
        assert result.exit_code == 0


class TestIngest:
    def test_ingest_fp_csv(self, db: str, fp_file: Path) -> None:
        result = runner.invoke(app, ["-q", "ingest", "fp", str(fp_file), "--db", db])
        assert result.exit_code == 0, result.output
        assert "3 rows loaded into fp_player_data" in result.output
        assert "(3 inserted, 0 updated)" in result.output

    def test_ingest_twice_inserts_nothing(self, db: str, fp_file: Path) -> None:
        runner.invoke(app, ["-q", "ingest", "fp", str(fp_file), "--db", db])
        result = runner.invoke(app, ["-q", "ingest", "fp", str(fp_file), "--db", db])
        assert result.exit_code == 0
        assert "(0 inserted, 3 updated)" in result.output

    def test_ingest_espn_json(self, db: str, espn_file: Path) -> None:
        result = runner.invoke(app, ["-q", "ingest", "espn", str(espn_file), "--db", db, "--season", "2024"])
        assert result.exit_code == 0, result.output
        assert "2 rows loaded into espn_player_data" in result.output

    def test_missing_file_fails(self, db: str, tmp_path: Path) -> None:
        result = runner.invoke(app, ["-q", "ingest", "fp", str(tmp_path / "nope.csv"), "--db", db])
        assert result.exit_code == 1
        assert "Error:" in result.output


class TestCrosswalk:
    def test_resolve_and_review(self, db: str, espn_file: Path, fp_file: Path) -> None:
        runner.invoke(app, ["-q", "ingest", "espn", str(espn_file), "--db", db])
        runner.invoke(app, ["-q", "ingest", "fp", str(fp_file), "--db", db])

        result = runner.invoke(app, ["-q", "crosswalk", "resolve", "--db", db])
        assert result.exit_code == 0, result.output
        assert "Crosswalk resolved for NFL 2024" in result.output
        assert "Matched: 2" in result.output

        review = runner.invoke(app, ["-q", "crosswalk", "review", "--db", db])
        assert review.exit_code == 0
        assert "Nothing to review." in review.output

    def test_override(self, db: str, espn_file: Path, fp_file: Path) -> None:
        runner.invoke(app, ["-q", "ingest", "espn", str(espn_file), "--db", db])
        runner.invoke(app, ["-q", "ingest", "fp", str(fp_file), "--db", db])

        result = runner.invoke(
            app, ["-q", "crosswalk", "override", "--espn-id", "4262921", "--fp-id", "16393", "--db", db]
        )
        assert result.exit_code == 0, result.output
        assert "Override saved: justin_jefferson:min:wr" in result.output

    def test_override_without_ids_fails(self, db: str) -> None:
        result = runner.invoke(app, ["-q", "crosswalk", "override", "--db", db])
        assert result.exit_code == 1
        assert "Error:" in result.output

    def test_purge_requires_confirmation(self, db: str) -> None:
        result = runner.invoke(app, ["-q", "crosswalk", "purge", "--db", db], input="n\n")
        assert result.exit_code == 1

    def test_purge_with_yes(self, db: str) -> None:
        result = runner.invoke(app, ["-q", "crosswalk", "purge", "--db", db, "--yes"])
        assert result.exit_code == 0
        assert "player_crosswalk: 0" in result.output


class TestViewAndPipeline:
    def test_pipeline_then_view(self, db: str, espn_file: Path, fp_file: Path) -> None:
        result = runner.invoke(
            app,
            ["-q", "pipeline", "run", "--espn-file", str(espn_file), "--fp-file", str(fp_file), "--db", db],
        )
        assert result.exit_code == 0, result.output
        assert "Pipeline complete for NFL 2024" in result.output

        shown = runner.invoke(app, ["-q", "view", "show", "--db", db, "--json"])
        assert shown.exit_code == 0
        rows = json.loads(shown.stdout)
        assert [row["full_name"] for row in rows] == ["Garrett Wilson", "Justin Jefferson"]
        assert rows[1]["percent_owned"] == 99.9

        filtered = runner.invoke(app, ["-q", "view", "show", "--db", db, "--team", "NY Jets", "--json"])
        assert [row["fp_player_id"] for row in json.loads(filtered.stdout)] == ["22902"]

        conn = create_connection(db)
        try:
            assert conn.execute("SELECT COUNT(*) FROM fp_player_data").fetchone()[0] == 2
        finally:
            conn.close()

    def test_view_refresh_empty(self, db: str) -> None:
        result = runner.invoke(app, ["-q", "view", "refresh", "--db", db])
        assert result.exit_code == 0
        assert "Unified view refreshed: 0 rows" in result.output

    def test_view_show_empty(self, db: str) -> None:
        result = runner.invoke(app, ["-q", "view", "show", "--db", db])
        assert result.exit_code == 0
        assert "No players found." in result.output

    def test_pipeline_with_empty_espn_file_fails(self, db: str, tmp_path: Path) -> None:
        empty = tmp_path / "empty.json"
        empty.write_text(json.dumps({"players": []}))
        result = runner.invoke(app, ["-q", "pipeline", "run", "--espn-file", str(empty), "--db", db])
        assert result.exit_code == 1
        assert "No ESPN players in payload" in result.output

    def test_pipeline_clear(self, db: str, espn_file: Path) -> None:
        runner.invoke(app, ["-q", "pipeline", "run", "--espn-file", str(espn_file), "--db", db])
        result = runner.invoke(app, ["-q", "pipeline", "clear", "--db", db, "-y"])
        assert result.exit_code == 0
        assert "espn_player_data: 2" in result.output


class TestConfigErrors:
    def test_bad_season_env(self, db: str, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("FFM__DEFAULTS__SEASON", "later")
        result = runner.invoke(app, ["-q", "view", "refresh", "--db", db])
        assert result.exit_code == 1
        assert "defaults.season" in result.output
