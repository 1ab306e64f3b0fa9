import sqlite3

from fantasy_football_manager.domain.player_data import EspnPlayerData, FpPlayerData
from fantasy_football_manager.repos.espn_player_repo import SqliteEspnPlayerRepo
from fantasy_football_manager.repos.fp_player_repo import SqliteFpPlayerRepo


def make_espn(espn_player_id: int, full_name: str, team: str, position: str, **overrides: object) -> EspnPlayerData:
    first, _, last = full_name.partition(" ")
    defaults: dict[str, object] = {
        "espn_player_id": espn_player_id,
        "sport": "NFL",
        "season": 2024,
        "full_name": full_name,
        "first_name": first,
        "last_name": last or None,
        "team": team,
        "position": position,
    }
    defaults.update(overrides)
    return EspnPlayerData(**defaults)  # type: ignore[arg-type]


def make_fp(fp_player_id: str, full_name: str, team: str, position: str, **overrides: object) -> FpPlayerData:
    first, _, last = full_name.partition(" ")
    defaults: dict[str, object] = {
        "fp_player_id": fp_player_id,
        "sport": "NFL",
        "season": 2024,
        "full_name": full_name,
        "first_name": first,
        "last_name": last or None,
        "team": team,
        "position": position,
    }
    defaults.update(overrides)
    return FpPlayerData(**defaults)  # type: ignore[arg-type]


def seed_espn(conn: sqlite3.Connection, *records: EspnPlayerData) -> None:
    """Upsert roster-provider records and commit."""
    SqliteEspnPlayerRepo(conn).bulk_upsert(records)
    conn.commit()


def seed_fp(conn: sqlite3.Connection, *records: FpPlayerData) -> None:
    """Upsert rankings-provider records and commit."""
    SqliteFpPlayerRepo(conn).bulk_upsert(records)
    conn.commit()


def table_rows(conn: sqlite3.Connection, table: str) -> list[tuple[object, ...]]:
    """Every row of ``table`` as plain tuples, in id order."""
    order = "crosswalk_id" if table == "unified_player" else "id"
    return [tuple(row) for row in conn.execute(f"SELECT * FROM {table} ORDER BY {order}").fetchall()]
