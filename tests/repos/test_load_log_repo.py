import sqlite3

from fantasy_football_manager.domain.load_log import LoadLog
from fantasy_football_manager.repos.load_log_repo import SqliteLoadLogRepo


def _log(target_table: str = "espn_player_data", **overrides: object) -> LoadLog:
    defaults: dict[str, object] = {
        "source_type": "json",
        "source_detail": "players.json",
        "target_table": target_table,
        "rows_loaded": 3,
        "inserted": 2,
        "updated": 1,
        "started_at": "2024-09-01T00:00:00+00:00",
        "finished_at": "2024-09-01T00:00:01+00:00",
        "status": "success",
    }
    defaults.update(overrides)
    return LoadLog(**defaults)  # type: ignore[arg-type]


class TestSqliteLoadLogRepo:
    def test_insert_and_get_recent(self, conn: sqlite3.Connection) -> None:
        repo = SqliteLoadLogRepo(conn)
        log_id = repo.insert(_log())
        recent = repo.get_recent()
        assert len(recent) == 1
        assert recent[0].id == log_id
        assert recent[0].inserted == 2
        assert recent[0].updated == 1

    def test_recent_newest_first(self, conn: sqlite3.Connection) -> None:
        repo = SqliteLoadLogRepo(conn)
        repo.insert(_log("fp_player_data"))
        repo.insert(_log("fp_ranking"))
        assert [log.target_table for log in repo.get_recent(limit=1)] == ["fp_ranking"]

    def test_error_entries(self, conn: sqlite3.Connection) -> None:
        repo = SqliteLoadLogRepo(conn)
        repo.insert(_log(status="error", error_message="boom"))
        repo.insert(_log("fp_player_data"))
        logs = repo.get_by_target_table("espn_player_data")
        assert len(logs) == 1
        assert logs[0].status == "error"
        assert logs[0].error_message == "boom"
