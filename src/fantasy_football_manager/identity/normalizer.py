"""Canonical forms for player names, team names and positions.

The two player catalogs spell the same things differently: "Odell Beckham Jr."
vs "Odell Beckham", "JAC" vs "JAX", "DEF" vs "DST". Everything that compares
records across providers goes through a ``Normalizer`` so both sides agree on
one spelling.

Usage:
    normalizer = Normalizer()
    normalizer.normalize_name("Odell Beckham Jr.")   # "ODELL BECKHAM"
    normalizer.normalize_team("LA Rams")             # "LAR"
    normalizer.normalize_team("Springfield Atoms")   # None
"""

from collections.abc import Iterable, Mapping
from types import MappingProxyType
from typing import NamedTuple

from fantasy_football_manager.identity.teams import (
    GENERATIONAL_SUFFIXES,
    NFL_TEAM_NAMES,
    NFL_TEAM_VARIANTS,
    POSITION_ALIASES,
)


class MatchKey(NamedTuple):
    name: str
    team: str
    position: str


def _team_lookup_key(raw: str) -> str:
    return " ".join(raw.replace(".", "").split()).upper()


class Normalizer:
    def __init__(
        self,
        *,
        team_variants: Mapping[str, Iterable[str]] = NFL_TEAM_VARIANTS,
        team_names: Mapping[str, Iterable[str]] = NFL_TEAM_NAMES,
        suffixes: Iterable[str] = GENERATIONAL_SUFFIXES,
        position_aliases: Mapping[str, str] = POSITION_ALIASES,
    ) -> None:
        variants: dict[str, tuple[str, ...]] = {}
        lookup: dict[str, str] = {}
        for canonical, abbreviations in team_variants.items():
            ordered = (canonical, *(a for a in abbreviations if a != canonical))
            variants[canonical] = ordered
            for abbreviation in ordered:
                lookup[_team_lookup_key(abbreviation)] = canonical
        for canonical, names in team_names.items():
            for name in names:
                lookup.setdefault(_team_lookup_key(name), canonical)

        self._team_variants = MappingProxyType(variants)
        self._team_lookup = MappingProxyType(lookup)
        self._suffixes = frozenset(s.upper() for s in suffixes)
        self._position_aliases = MappingProxyType({k.upper(): v.upper() for k, v in position_aliases.items()})

    def normalize_name(self, raw: str | None) -> str:
        """Upper-case, whitespace-collapsed name with one trailing generational suffix removed."""
        if not raw:
            return ""
        tokens = raw.upper().split()
        if len(tokens) > 1 and tokens[-1] in self._suffixes:
            tokens = tokens[:-1]
            # "Beckham, Jr." leaves a dangling comma on the surname
            tokens[-1] = tokens[-1].rstrip(",")
        return " ".join(tokens)

    def normalize_team(self, raw: str | None) -> str | None:
        if not raw:
            return None
        return self._team_lookup.get(_team_lookup_key(raw))

    def normalize_position(self, raw: str | None) -> str | None:
        if not raw or not raw.strip():
            return None
        position = raw.strip().upper()
        return self._position_aliases.get(position, position)

    def team_variants(self, raw: str | None) -> tuple[str, ...]:
        """Every abbreviation that refers to the same team, canonical first."""
        canonical = self.normalize_team(raw)
        if canonical is None:
            return ()
        return self._team_variants.get(canonical, (canonical,))

    def same_team(self, a: str | None, b: str | None) -> bool:
        canonical = self.normalize_team(a)
        return canonical is not None and canonical == self.normalize_team(b)

    def same_position(self, a: str | None, b: str | None) -> bool:
        position = self.normalize_position(a)
        return position is not None and position == self.normalize_position(b)

    def canonical_teams(self) -> tuple[str, ...]:
        return tuple(self._team_variants)

    def match_key(self, name: str | None, team: str | None, position: str | None) -> MatchKey | None:
        """The (name, team, position) triple two records must share to be candidates.

        Returns None when any part is missing or the team is not recognized.
        """
        normalized_name = self.normalize_name(name)
        canonical_team = self.normalize_team(team)
        canonical_position = self.normalize_position(position)
        if not normalized_name or canonical_team is None or canonical_position is None:
            return None
        return MatchKey(normalized_name, canonical_team, canonical_position)


def canonical_key(key: MatchKey) -> str:
    """Stable crosswalk key, e.g. ``justin_jefferson:min:wr``.

    Punctuation inside the name is kept, so two names that do not match never
    share a key.
    """
    return f"{key.name.lower().replace(' ', '_')}:{key.team.lower()}:{key.position.lower()}"


_default = Normalizer()


def default_normalizer() -> Normalizer:
    return _default


def normalize_name(raw: str | None) -> str:
    return _default.normalize_name(raw)


def normalize_team(raw: str | None) -> str | None:
    return _default.normalize_team(raw)


def normalize_position(raw: str | None) -> str | None:
    return _default.normalize_position(raw)
