from fantasy_football_manager.ingest.column_maps import (
    espn_entry_to_player_data,
    fp_row_to_player_data,
    make_fp_projection_mapper,
    make_fp_ranking_mapper,
    make_odds_mapper,
    make_team_defense_mapper,
)


def _espn_entry(**player_overrides: object) -> dict[str, object]:
    player: dict[str, object] = {
        "id": 4262921,
        "fullName": "Justin Jefferson",
        "firstName": "Justin",
        "lastName": "Jefferson",
        "proTeamId": 16,
        "defaultPositionId": 3,
        "jersey": "18",
        "injured": False,
        "injuryStatus": "ACTIVE",
        "lastNewsDate": 1725148800000,
        "ownership": {"percentOwned": 99.93, "percentStarted": 98.1},
        "stats": [
            {"statSourceId": 1, "statSplitTypeId": 1, "appliedTotal": 300.0, "appliedAverage": 17.6},
            {"statSourceId": 0, "statSplitTypeId": 1, "appliedTotal": 120.5, "appliedAverage": 20.1},
        ],
        "outlooks": {"outlooksByWeek": {"4": "Old news", "5": "Smash spot"}},
    }
    player.update(player_overrides)
    return {"player": player, "onTeamId": 0}


class TestEspnEntryToPlayerData:
    def test_maps_entry(self) -> None:
        record = espn_entry_to_player_data(_espn_entry(), "NFL", 2024, fetched_at="2024-10-01T00:00:00+00:00")
        assert record is not None
        assert record.espn_player_id == 4262921
        assert record.team == "MIN"
        assert record.position == "WR"
        assert record.jersey_number == 18
        assert record.percent_owned == 99.93
        assert record.total_points == 120.5
        assert record.average_points == 20.1
        assert record.latest_outlook == "Smash spot"
        assert record.outlook_week == 5
        assert record.news_date == "2024-09-01T00:00:00+00:00"
        assert record.last_fetched_at == "2024-10-01T00:00:00+00:00"

    def test_unwrapped_entry(self) -> None:
        entry = _espn_entry()["player"]
        record = espn_entry_to_player_data(entry, "NFL", 2024)  # type: ignore[arg-type]
        assert record is not None
        assert record.full_name == "Justin Jefferson"

    def test_defense_position(self) -> None:
        record = espn_entry_to_player_data(
            _espn_entry(id=-16030, fullName="Jaguars D/ST", proTeamId=30, defaultPositionId=16), "NFL", 2024
        )
        assert record is not None
        assert record.team == "JAX"
        assert record.position == "DEF"

    def test_free_agent_skipped(self) -> None:
        assert espn_entry_to_player_data(_espn_entry(proTeamId=0), "NFL", 2024) is None

    def test_missing_id_skipped(self) -> None:
        assert espn_entry_to_player_data(_espn_entry(id=None), "NFL", 2024) is None

    def test_injured_without_status(self) -> None:
        record = espn_entry_to_player_data(_espn_entry(injured=True, injuryStatus=None), "NFL", 2024)
        assert record is not None
        assert record.injury_status == "INJURED"

    def test_name_from_parts(self) -> None:
        record = espn_entry_to_player_data(_espn_entry(fullName=None), "NFL", 2024)
        assert record is not None
        assert record.full_name == "Justin Jefferson"

    def test_no_current_stats(self) -> None:
        record = espn_entry_to_player_data(_espn_entry(stats=[], outlooks=None), "NFL", 2024)
        assert record is not None
        assert record.total_points is None
        assert record.latest_outlook is None


class TestFpRowToPlayerData:
    def test_maps_row(self) -> None:
        record = fp_row_to_player_data(
            {"player_id": "16393", "name": "Justin Jefferson", "team": "MIN", "position": "wr", "headline": "Up"},
            "NFL",
            2024,
        )
        assert record is not None
        assert record.fp_player_id == "16393"
        assert record.first_name == "Justin"
        assert record.last_name == "Jefferson"
        assert record.position == "WR"
        assert record.latest_headline == "Up"

    def test_team_normalized(self) -> None:
        record = fp_row_to_player_data(
            {"fp_player_id": "1", "full_name": "Trevor Lawrence", "team": "JAC", "position": "QB"}, "NFL", 2024
        )
        assert record is not None
        assert record.team == "JAX"

    def test_free_agent_skipped(self) -> None:
        row = {"fp_player_id": "1", "full_name": "Someone", "team": "FA", "position": "WR"}
        assert fp_row_to_player_data(row, "NFL", 2024) is None

    def test_missing_id_skipped(self) -> None:
        assert fp_row_to_player_data({"full_name": "Someone", "team": "MIN"}, "NFL", 2024) is None

    def test_suffix_kept_in_last_name(self) -> None:
        record = fp_row_to_player_data(
            {"fp_player_id": "2", "full_name": "Odell Beckham Jr.", "team": "MIA", "position": "WR"}, "NFL", 2024
        )
        assert record is not None
        assert record.last_name == "Beckham Jr."


class TestSideTableMappers:
    def test_team_defense(self) -> None:
        mapper = make_team_defense_mapper(2024, week=5)
        stat = mapper({"team": "jac", "games_played": "5", "points_allowed": "110"})
        assert stat is not None
        assert stat.team_abbreviation == "JAC"
        assert stat.week == 5
        assert stat.points_allowed == 110.0
        assert mapper({"points_allowed": "1"}) is None

    def test_team_defense_row_week_wins(self) -> None:
        stat = make_team_defense_mapper(2024)({"team": "KC", "week": "3", "points_allowed": "17"})
        assert stat is not None
        assert stat.week == 3

    def test_ranking(self) -> None:
        mapper = make_fp_ranking_mapper("NFL", 2024, rank_type="WEEKLY", scoring_type="PPR", week=5)
        ranking = mapper({"player_id": "16393", "name": "Justin Jefferson", "position": "wr", "rank_ecr": "3"})
        assert ranking is not None
        assert ranking.rank == 3
        assert ranking.rank_type == "weekly"
        assert ranking.position == "WR"
        assert ranking.week == 5
        assert mapper({"player_id": "1", "name": "No Rank", "position": "WR"}) is None

    def test_projection_flat_columns(self) -> None:
        mapper = make_fp_projection_mapper("NFL", 2024, scoring_type="PPR", week=5)
        projection = mapper(
            {
                "player_id": "16393",
                "name": "Justin Jefferson",
                "position": "WR",
                "team": "MIN",
                "opponent": "@NYJ",
                "points": "18.4",
                "rec": "7.1",
                "rec_yds": "96",
                "note": "questionable",
            }
        )
        assert projection is not None
        assert projection.projected_points == 18.4
        assert projection.opponent == "@NYJ"
        assert projection.stats == {"rec": 7.1, "rec_yds": 96.0}

    def test_projection_nested_stats(self) -> None:
        mapper = make_fp_projection_mapper("NFL", 2024)
        projection = mapper(
            {"fp_player_id": "1", "player_name": "A", "position": "QB", "stats": {"pass_yds": 250, "int": None}}
        )
        assert projection is not None
        assert projection.stats == {"pass_yds": 250.0}

    def test_odds(self) -> None:
        mapper = make_odds_mapper(2024, 5)
        record = mapper(
            {
                "id": "abc",
                "home_team": "New York Jets",
                "away_team": "Minnesota Vikings",
                "commence_time": "2024-10-06T13:30:00Z",
                "bookmakers": [{"key": "draftkings", "title": "DraftKings"}],
            }
        )
        assert record is not None
        assert record.game_id == "abc"
        assert record.bookmaker == "DraftKings"
        assert record.week == 5
        assert mapper({"id": "x", "home_team": "NYJ"}) is None
