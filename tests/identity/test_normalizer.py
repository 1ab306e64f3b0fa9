import pytest

from fantasy_football_manager.identity.normalizer import (
    MatchKey,
    Normalizer,
    canonical_key,
    normalize_name,
    normalize_position,
    normalize_team,
)


class TestNormalizeName:
    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("Justin Jefferson", "JUSTIN JEFFERSON"),
            ("  justin   jefferson ", "JUSTIN JEFFERSON"),
            ("Odell Beckham Jr.", "ODELL BECKHAM"),
            ("Odell Beckham Jr", "ODELL BECKHAM"),
            ("Odell Beckham, Jr.", "ODELL BECKHAM"),
            ("Michael Pittman Jr.", "MICHAEL PITTMAN"),
            ("Marvin Harrison III", "MARVIN HARRISON"),
            ("Kenneth Walker II", "KENNETH WALKER"),
        ],
    )
    def test_normalizes(self, raw: str, expected: str) -> None:
        assert normalize_name(raw) == expected

    def test_empty_and_none(self) -> None:
        assert normalize_name("") == ""
        assert normalize_name(None) == ""

    def test_single_token_suffix_is_kept(self) -> None:
        assert normalize_name("Jr.") == "JR."

    def test_only_one_suffix_removed(self) -> None:
        assert normalize_name("Someone Jr. III") == "SOMEONE JR."

    def test_punctuation_inside_name_kept(self) -> None:
        assert normalize_name("Ja'Marr Chase") == "JA'MARR CHASE"
        assert normalize_name("D.K. Metcalf") != normalize_name("DK Metcalf")

    def test_suffix_equivalence(self) -> None:
        assert normalize_name("Odell Beckham Jr.") == normalize_name("Odell Beckham")


class TestNormalizeTeam:
    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("JAX", "JAX"),
            ("JAC", "JAX"),
            ("jac", "JAX"),
            ("WSH", "WAS"),
            ("LA", "LAR"),
            ("LA Rams", "LAR"),
            ("Los Angeles Rams", "LAR"),
            ("St. Louis Rams", "LAR"),
            ("OAK", "LV"),
            ("Las Vegas Raiders", "LV"),
            ("Kansas City Chiefs", "KC"),
            ("GBP", "GB"),
        ],
    )
    def test_variants(self, raw: str, expected: str) -> None:
        assert normalize_team(raw) == expected

    def test_unknown_team(self) -> None:
        assert normalize_team("Springfield Atoms") is None
        assert normalize_team("FA") is None

    def test_empty(self) -> None:
        assert normalize_team(None) is None
        assert normalize_team("") is None


class TestNormalizePosition:
    def test_defense_aliases(self) -> None:
        assert normalize_position("DEF") == "DST"
        assert normalize_position("D/ST") == "DST"
        assert normalize_position("dst") == "DST"

    def test_plain_positions_uppercased(self) -> None:
        assert normalize_position(" wr ") == "WR"

    def test_kicker_alias(self) -> None:
        assert normalize_position("PK") == "K"

    def test_blank(self) -> None:
        assert normalize_position(None) is None
        assert normalize_position("  ") is None


class TestNormalizer:
    def test_team_variants_canonical_first(self) -> None:
        n = Normalizer()
        assert n.team_variants("JAC") == ("JAX", "JAC")
        assert n.team_variants("Nowhere") == ()

    def test_same_team(self) -> None:
        n = Normalizer()
        assert n.same_team("JAC", "Jacksonville Jaguars")
        assert not n.same_team("JAX", "KC")
        assert not n.same_team(None, None)

    def test_same_position(self) -> None:
        n = Normalizer()
        assert n.same_position("DEF", "DST")
        assert not n.same_position(None, None)

    def test_canonical_teams(self) -> None:
        teams = Normalizer().canonical_teams()
        assert len(teams) == 32
        assert "JAX" in teams
        assert "JAC" not in teams

    def test_custom_tables(self) -> None:
        n = Normalizer(team_variants={"AAA": ("AAA", "AA")}, team_names={}, suffixes=(), position_aliases={})
        assert n.normalize_team("aa") == "AAA"
        assert n.normalize_team("KC") is None
        assert n.normalize_name("Someone Jr.") == "SOMEONE JR."

    def test_match_key(self) -> None:
        key = Normalizer().match_key("Odell Beckham Jr.", "Baltimore Ravens", "wr")
        assert key == MatchKey("ODELL BECKHAM", "BAL", "WR")

    def test_match_key_defense_equivalence(self) -> None:
        n = Normalizer()
        assert n.match_key("Jaguars D/ST", "JAC", "DEF") == n.match_key("Jaguars D/ST", "JAX", "DST")

    def test_match_key_missing_parts(self) -> None:
        n = Normalizer()
        assert n.match_key(None, "MIN", "WR") is None
        assert n.match_key("Justin Jefferson", "FA", "WR") is None
        assert n.match_key("Justin Jefferson", "MIN", None) is None


class TestCanonicalKey:
    def test_format(self) -> None:
        assert canonical_key(MatchKey("JUSTIN JEFFERSON", "MIN", "WR")) == "justin_jefferson:min:wr"

    def test_deterministic(self) -> None:
        n = Normalizer()
        a = n.match_key("Justin Jefferson", "MIN", "WR")
        b = n.match_key("justin  jefferson", "Minnesota Vikings", "wr")
        assert a is not None and b is not None
        assert canonical_key(a) == canonical_key(b)
