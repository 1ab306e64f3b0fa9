import sqlite3

import pytest

from fantasy_football_manager.repos.crosswalk_repo import SqliteCrosswalkRepo
from fantasy_football_manager.repos.espn_player_repo import SqliteEspnPlayerRepo
from fantasy_football_manager.repos.fp_player_repo import SqliteFpPlayerRepo
from fantasy_football_manager.services.crosswalk_resolver import CrosswalkResolver
from fantasy_football_manager.services.orphan_reclaimer import OrphanReclaimer
from tests.helpers import make_espn, make_fp, seed_espn, seed_fp


@pytest.fixture
def reclaimer(conn: sqlite3.Connection) -> OrphanReclaimer:
    return OrphanReclaimer(SqliteEspnPlayerRepo(conn), SqliteFpPlayerRepo(conn), SqliteCrosswalkRepo(conn), conn)


class TestOrphanReclaimer:
    def test_deletes_unmatched_fp_players(self, conn: sqlite3.Connection, reclaimer: OrphanReclaimer) -> None:
        seed_espn(conn, make_espn(4262921, "Justin Jefferson", "MIN", "WR"))
        seed_fp(
            conn,
            make_fp("16393", "Justin Jefferson", "MIN", "WR"),
            make_fp("555", "Practice Squad", "MIN", "WR"),
        )
        result = reclaimer.delete_fp_players_without_espn_match()
        assert result.deleted == 1
        assert result.scopes == (("NFL", 2024),)
        assert [p.fp_player_id for p in SqliteFpPlayerRepo(conn).get_by_season("NFL", 2024)] == ["16393"]

    def test_second_run_deletes_nothing(self, conn: sqlite3.Connection, reclaimer: OrphanReclaimer) -> None:
        seed_espn(conn, make_espn(1, "Justin Jefferson", "MIN", "WR"))
        seed_fp(conn, make_fp("16393", "Justin Jefferson", "MIN", "WR"), make_fp("555", "Nobody", "MIN", "WR"))
        reclaimer.delete_fp_players_without_espn_match()
        assert reclaimer.delete_fp_players_without_espn_match().deleted == 0

    def test_matches_through_normalization(self, conn: sqlite3.Connection, reclaimer: OrphanReclaimer) -> None:
        seed_espn(conn, make_espn(1, "Odell Beckham Jr.", "BAL", "WR"), make_espn(2, "Jaguars D/ST", "JAX", "DEF"))
        seed_fp(conn, make_fp("a", "Odell Beckham", "BAL", "WR"), make_fp("b", "Jaguars D/ST", "JAC", "DST"))
        assert reclaimer.delete_fp_players_without_espn_match().deleted == 0

    def test_keeps_manually_pinned_players(self, conn: sqlite3.Connection, reclaimer: OrphanReclaimer) -> None:
        seed_espn(conn, make_espn(1, "Justin Jefferson", "MIN", "WR"))
        seed_fp(conn, make_fp("99", "J. Jefferson", "MIN", "WR"))
        resolver = CrosswalkResolver(
            SqliteEspnPlayerRepo(conn), SqliteFpPlayerRepo(conn), SqliteCrosswalkRepo(conn), conn
        )
        resolver.set_manual_override("NFL", 2024, espn_player_id=1, fp_player_id="99")
        assert reclaimer.delete_fp_players_without_espn_match().deleted == 0

    def test_scope_without_espn_players_untouched(
        self, conn: sqlite3.Connection, reclaimer: OrphanReclaimer
    ) -> None:
        seed_espn(conn, make_espn(1, "Justin Jefferson", "MIN", "WR"))
        seed_fp(conn, make_fp("1", "Someone", "KC", "QB", season=2023))
        result = reclaimer.delete_fp_players_without_espn_match()
        assert result.deleted == 0
        assert len(SqliteFpPlayerRepo(conn).get_by_season("NFL", 2023)) == 1

    def test_changes_are_committed(self, conn: sqlite3.Connection, reclaimer: OrphanReclaimer) -> None:
        seed_espn(conn, make_espn(1, "Justin Jefferson", "MIN", "WR"))
        seed_fp(conn, make_fp("555", "Nobody", "MIN", "WR"))
        reclaimer.delete_fp_players_without_espn_match()
        conn.rollback()
        assert SqliteFpPlayerRepo(conn).all() == []
