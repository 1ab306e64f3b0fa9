import sqlite3
from dataclasses import replace

import pytest

from fantasy_football_manager.repos.errors import BulkUpsertError
from fantasy_football_manager.repos.espn_player_repo import SqliteEspnPlayerRepo
from fantasy_football_manager.repos.fp_player_repo import SqliteFpPlayerRepo
from tests.helpers import make_espn, make_fp, table_rows


class TestSqliteEspnPlayerRepo:
    def test_upsert_and_get(self, conn: sqlite3.Connection) -> None:
        repo = SqliteEspnPlayerRepo(conn)
        assert repo.upsert(make_espn(4262921, "Justin Jefferson", "MIN", "WR", percent_owned=99.9)) is True
        stored = repo.get("NFL", 2024, 4262921)
        assert stored is not None
        assert stored.full_name == "Justin Jefferson"
        assert stored.team == "MIN"
        assert stored.percent_owned == 99.9
        assert stored.id is not None
        assert stored.created_at == stored.updated_at

    def test_upsert_updates_existing(self, conn: sqlite3.Connection) -> None:
        repo = SqliteEspnPlayerRepo(conn)
        repo.upsert(make_espn(1, "Saquon Barkley", "NYG", "RB"))
        assert repo.upsert(make_espn(1, "Saquon Barkley", "PHI", "RB")) is False
        players = repo.get_by_season("NFL", 2024)
        assert len(players) == 1
        assert players[0].team == "PHI"

    def test_identical_upsert_leaves_row_unchanged(self, conn: sqlite3.Connection) -> None:
        repo = SqliteEspnPlayerRepo(conn)
        record = make_espn(1, "Justin Jefferson", "MIN", "WR", injury_status="ACTIVE")
        repo.upsert(record)
        before = table_rows(conn, "espn_player_data")
        repo.upsert(record)
        assert table_rows(conn, "espn_player_data") == before

    def test_same_id_in_other_season_is_separate(self, conn: sqlite3.Connection) -> None:
        repo = SqliteEspnPlayerRepo(conn)
        repo.upsert(make_espn(1, "Justin Jefferson", "MIN", "WR"))
        repo.upsert(make_espn(1, "Justin Jefferson", "MIN", "WR", season=2025))
        assert len(repo.all()) == 2
        assert repo.scopes() == [("NFL", 2024), ("NFL", 2025)]

    def test_get_missing(self, conn: sqlite3.Connection) -> None:
        assert SqliteEspnPlayerRepo(conn).get("NFL", 2024, 99) is None

    def test_bulk_upsert_counts(self, conn: sqlite3.Connection) -> None:
        repo = SqliteEspnPlayerRepo(conn)
        repo.upsert(make_espn(1, "Justin Jefferson", "MIN", "WR"))
        counts = repo.bulk_upsert(
            [make_espn(1, "Justin Jefferson", "MIN", "WR"), make_espn(2, "Ja'Marr Chase", "CIN", "WR")]
        )
        assert counts.inserted == 1
        assert counts.updated == 1
        assert counts.total == 2

    def test_duplicate_keys_in_batch_are_idempotent(self, conn: sqlite3.Connection) -> None:
        repo = SqliteEspnPlayerRepo(conn)
        batch = [
            make_espn(1, "Justin Jefferson", "MIN", "WR", injury_status="OUT"),
            make_espn(1, "Justin Jefferson", "MIN", "WR", injury_status=None),
        ]
        counts = repo.bulk_upsert(batch)
        assert counts.inserted == 1
        assert counts.updated == 0
        before = table_rows(conn, "espn_player_data")

        repo.bulk_upsert(batch)

        assert table_rows(conn, "espn_player_data") == before
        stored = repo.get("NFL", 2024, 1)
        assert stored is not None
        assert stored.injury_status is None

    def test_bulk_upsert_partial_failure_keeps_prefix(self, conn: sqlite3.Connection) -> None:
        repo = SqliteEspnPlayerRepo(conn)
        bad = replace(make_espn(3, "Broken", "MIN", "WR"), full_name=None)  # type: ignore[arg-type]
        records = [make_espn(1, "Justin Jefferson", "MIN", "WR"), make_espn(2, "Ja'Marr Chase", "CIN", "WR"), bad]
        with pytest.raises(BulkUpsertError) as exc_info:
            repo.bulk_upsert(records)
        assert exc_info.value.counts.inserted == 2
        assert exc_info.value.record is bad
        assert exc_info.value.table == "espn_player_data"
        assert {p.espn_player_id for p in repo.get_by_season("NFL", 2024)} == {1, 2}

    def test_delete_all_and_by_ids(self, conn: sqlite3.Connection) -> None:
        repo = SqliteEspnPlayerRepo(conn)
        repo.bulk_upsert([make_espn(i, f"Player {i}", "MIN", "WR") for i in range(1, 4)])
        first = repo.get("NFL", 2024, 1)
        assert first is not None and first.id is not None
        assert repo.delete_by_ids([first.id]) == 1
        assert repo.delete_all("NFL", 2024) == 2
        assert repo.all() == []


class TestSqliteFpPlayerRepo:
    def test_upsert_and_get(self, conn: sqlite3.Connection) -> None:
        repo = SqliteFpPlayerRepo(conn)
        repo.upsert(make_fp("16393", "Justin Jefferson", "MIN", "WR", latest_headline="Big week"))
        stored = repo.get("NFL", 2024, "16393")
        assert stored is not None
        assert stored.latest_headline == "Big week"

    def test_upsert_returns_insert_flag(self, conn: sqlite3.Connection) -> None:
        repo = SqliteFpPlayerRepo(conn)
        assert repo.upsert(make_fp("1", "Justin Jefferson", "MIN", "WR")) is True
        assert repo.upsert(make_fp("1", "Justin Jefferson", "MIN", "WR", jersey_number=18)) is False
        stored = repo.get("NFL", 2024, "1")
        assert stored is not None
        assert stored.jersey_number == 18

    def test_identical_bulk_upsert_is_idempotent(self, conn: sqlite3.Connection) -> None:
        repo = SqliteFpPlayerRepo(conn)
        batch = [make_fp("1", "Justin Jefferson", "MIN", "WR"), make_fp("2", "Ja'Marr Chase", "CIN", "WR")]
        repo.bulk_upsert(batch)
        before = table_rows(conn, "fp_player_data")
        counts = repo.bulk_upsert(batch)
        assert counts.inserted == 0
        assert counts.updated == 2
        assert table_rows(conn, "fp_player_data") == before

    def test_get_by_season_scoped(self, conn: sqlite3.Connection) -> None:
        repo = SqliteFpPlayerRepo(conn)
        repo.upsert(make_fp("1", "Justin Jefferson", "MIN", "WR"))
        repo.upsert(make_fp("1", "Justin Jefferson", "MIN", "WR", season=2023))
        assert [p.season for p in repo.get_by_season("NFL", 2024)] == [2024]

    def test_delete_by_ids_empty(self, conn: sqlite3.Connection) -> None:
        assert SqliteFpPlayerRepo(conn).delete_by_ids([]) == 0
