"""Links the roster provider's and the rankings provider's player records.

Two records are candidates when their normalized name, canonical team and
position all agree (the match key). A key held by exactly one record on each
side is an exact match. Keys held by several records on either side are never
guessed at: every record involved gets its own entry flagged for review.

Entries written by a person (``manual_override``) are left alone, and the
provider ids they claim are withheld from automated matching.
"""

import logging
import sqlite3
import time
from collections import defaultdict
from collections.abc import Callable, Iterable
from dataclasses import replace
from typing import TypeVar

from fantasy_football_manager.domain.crosswalk import AmbiguousMatch, CrosswalkEntry, CrosswalkResult, MatchStatus
from fantasy_football_manager.domain.player_data import EspnPlayerData, FpPlayerData
from fantasy_football_manager.identity.normalizer import MatchKey, Normalizer, canonical_key, default_normalizer
from fantasy_football_manager.repos.crosswalk_repo import SqliteCrosswalkRepo, WriteOutcome
from fantasy_football_manager.repos.protocols import EspnPlayerRepo, FpPlayerRepo

logger = logging.getLogger(__name__)

AMBIGUOUS_SEPARATOR = "~"

T = TypeVar("T")


def _group_by_key(
    records: Iterable[T],
    key_of: Callable[[T], MatchKey | None],
    is_claimed: Callable[[T], bool],
) -> tuple[dict[MatchKey, list[T]], int, int]:
    groups: dict[MatchKey, list[T]] = defaultdict(list)
    skipped = 0
    protected = 0
    for record in records:
        if is_claimed(record):
            protected += 1
            continue
        key = key_of(record)
        if key is None:
            logger.debug("No match key for %r, skipping", record)
            skipped += 1
            continue
        groups[key].append(record)
    return groups, skipped, protected


def base_key(key: str) -> str:
    """The canonical key an ambiguous entry was derived from."""
    return key.split(AMBIGUOUS_SEPARATOR, 1)[0]


class CrosswalkResolver:
    def __init__(
        self,
        espn_repo: EspnPlayerRepo,
        fp_repo: FpPlayerRepo,
        crosswalk_repo: SqliteCrosswalkRepo,
        conn: sqlite3.Connection,
        normalizer: Normalizer | None = None,
    ) -> None:
        self._espn_repo = espn_repo
        self._fp_repo = fp_repo
        self._crosswalk_repo = crosswalk_repo
        self._conn = conn
        self._normalizer = normalizer or default_normalizer()

    def _espn_key(self, record: EspnPlayerData) -> MatchKey | None:
        return self._normalizer.match_key(record.full_name, record.team, record.position)

    def _fp_key(self, record: FpPlayerData) -> MatchKey | None:
        return self._normalizer.match_key(record.full_name, record.team, record.position)

    def resolve(self, sport: str, season: int) -> CrosswalkResult:
        t0 = time.perf_counter()
        logger.info("Resolving crosswalk for %s %d", sport, season)

        overrides = self._crosswalk_repo.get_manual_overrides(sport, season)
        claimed_espn = {e.espn_player_id for e in overrides if e.espn_player_id is not None}
        claimed_fp = {e.fp_player_id for e in overrides if e.fp_player_id is not None}
        override_keys = {e.canonical_key for e in overrides}

        espn_groups, espn_skipped, espn_protected = _group_by_key(
            self._espn_repo.get_by_season(sport, season),
            self._espn_key,
            lambda r: r.espn_player_id in claimed_espn,
        )
        fp_groups, fp_skipped, fp_protected = _group_by_key(
            self._fp_repo.get_by_season(sport, season),
            self._fp_key,
            lambda r: r.fp_player_id in claimed_fp,
        )

        entries: list[CrosswalkEntry] = []
        review_queue: list[AmbiguousMatch] = []
        matched = 0
        unresolved = 0
        for key in sorted(espn_groups.keys() | fp_groups.keys()):
            espn_records = espn_groups.get(key, [])
            fp_records = fp_groups.get(key, [])
            if len(espn_records) > 1 or len(fp_records) > 1:
                entries.extend(
                    e
                    for e in self._ambiguous_entries(sport, season, key, espn_records, fp_records)
                    if e.canonical_key not in override_keys
                )
                review_queue.append(
                    AmbiguousMatch(
                        match_key=canonical_key(key),
                        espn_player_ids=tuple(r.espn_player_id for r in espn_records),
                        fp_player_ids=tuple(r.fp_player_id for r in fp_records),
                    )
                )
                continue
            espn = espn_records[0] if espn_records else None
            fp = fp_records[0] if fp_records else None
            entry = self._single_entry(sport, season, key, espn, fp)
            if entry.canonical_key in override_keys:
                split = self._split_around_override(entry)
                entries.extend(split)
                unresolved += len(split)
            elif entry.is_partial:
                entries.append(entry)
                unresolved += 1
            else:
                entries.append(entry)
                matched += 1

        existing = {e.canonical_key: e for e in self._crosswalk_repo.get_by_season(sport, season)}
        produced = {e.canonical_key for e in entries}
        retiring = [
            self._retired(e)
            for key, e in existing.items()
            if key not in produced and not e.manual_override and not self._is_retired(e)
        ]

        outcomes: dict[WriteOutcome, int] = defaultdict(int)
        try:
            for entry in entries:
                self._warn_on_reassignment(existing.get(entry.canonical_key), entry)
                outcomes[self._crosswalk_repo.write(entry)] += 1
            for entry in retiring:
                self._crosswalk_repo.write(entry)
            self._conn.commit()
        except sqlite3.Error:
            self._conn.rollback()
            logger.exception("Crosswalk resolution failed for %s %d", sport, season)
            raise

        result = CrosswalkResult(
            sport=sport,
            season=season,
            created=outcomes[WriteOutcome.CREATED],
            updated=outcomes[WriteOutcome.UPDATED],
            unchanged=outcomes[WriteOutcome.UNCHANGED],
            matched=matched,
            unresolved=unresolved,
            ambiguous=len(review_queue),
            protected=espn_protected + fp_protected + outcomes[WriteOutcome.PROTECTED],
            skipped=espn_skipped + fp_skipped,
            retired=len(retiring),
            review_queue=tuple(review_queue),
        )
        logger.info(
            "Crosswalk for %s %d: %d matched, %d unresolved, %d ambiguous, %d skipped in %.1fs",
            sport,
            season,
            result.matched,
            result.unresolved,
            result.ambiguous,
            result.skipped,
            time.perf_counter() - t0,
        )
        return result

    def _single_entry(
        self,
        sport: str,
        season: int,
        key: MatchKey,
        espn: EspnPlayerData | None,
        fp: FpPlayerData | None,
    ) -> CrosswalkEntry:
        if espn is not None and fp is not None:
            return CrosswalkEntry(
                canonical_key=canonical_key(key),
                sport=sport,
                season=season,
                espn_player_id=espn.espn_player_id,
                fp_player_id=fp.fp_player_id,
                match_confidence=1.0,
                match_status=MatchStatus.EXACT,
            )
        if espn is not None:
            note = f"No FP match found for {espn.full_name} ({espn.team} {espn.position})"
        elif fp is not None:
            note = f"No ESPN match found for {fp.full_name} ({fp.team} {fp.position})"
        else:
            raise ValueError(f"No records for match key {key}")
        return CrosswalkEntry(
            canonical_key=canonical_key(key),
            sport=sport,
            season=season,
            espn_player_id=espn.espn_player_id if espn else None,
            fp_player_id=fp.fp_player_id if fp else None,
            match_confidence=0.0,
            match_status=MatchStatus.UNMATCHED,
            notes=note,
        )

    def _ambiguous_entries(
        self,
        sport: str,
        season: int,
        key: MatchKey,
        espn_records: list[EspnPlayerData],
        fp_records: list[FpPlayerData],
    ) -> list[CrosswalkEntry]:
        base = canonical_key(key)
        note = (
            f"{len(espn_records)} ESPN and {len(fp_records)} FP players share "
            f"{key.name} ({key.team} {key.position})"
        )
        entries = [
            CrosswalkEntry(
                canonical_key=base,
                sport=sport,
                season=season,
                match_confidence=0.0,
                match_status=MatchStatus.AMBIGUOUS,
                needs_review=True,
                notes=note,
            )
        ]
        for espn in espn_records:
            entries.append(
                CrosswalkEntry(
                    canonical_key=f"{base}{AMBIGUOUS_SEPARATOR}espn:{espn.espn_player_id}",
                    sport=sport,
                    season=season,
                    espn_player_id=espn.espn_player_id,
                    match_confidence=0.0,
                    match_status=MatchStatus.AMBIGUOUS,
                    needs_review=True,
                    notes=note,
                )
            )
        for fp in fp_records:
            entries.append(
                CrosswalkEntry(
                    canonical_key=f"{base}{AMBIGUOUS_SEPARATOR}fp:{fp.fp_player_id}",
                    sport=sport,
                    season=season,
                    fp_player_id=fp.fp_player_id,
                    match_confidence=0.0,
                    match_status=MatchStatus.AMBIGUOUS,
                    needs_review=True,
                    notes=note,
                )
            )
        return entries

    @staticmethod
    def _split_around_override(entry: CrosswalkEntry) -> list[CrosswalkEntry]:
        """Per-record partial entries for records whose key a manual override already holds."""
        note = f"Canonical key {entry.canonical_key} is held by a manual override"
        split: list[CrosswalkEntry] = []
        if entry.espn_player_id is not None:
            split.append(
                replace(
                    entry,
                    canonical_key=f"{entry.canonical_key}{AMBIGUOUS_SEPARATOR}espn:{entry.espn_player_id}",
                    fp_player_id=None,
                    match_confidence=0.0,
                    match_status=MatchStatus.UNMATCHED,
                    notes=note,
                )
            )
        if entry.fp_player_id is not None:
            split.append(
                replace(
                    entry,
                    canonical_key=f"{entry.canonical_key}{AMBIGUOUS_SEPARATOR}fp:{entry.fp_player_id}",
                    espn_player_id=None,
                    match_confidence=0.0,
                    match_status=MatchStatus.UNMATCHED,
                    notes=note,
                )
            )
        return split

    @staticmethod
    def _retired(entry: CrosswalkEntry) -> CrosswalkEntry:
        return replace(
            entry,
            espn_player_id=None,
            fp_player_id=None,
            match_confidence=0.0,
            match_status=MatchStatus.UNMATCHED,
            needs_review=False,
            notes="No longer observed in either catalog",
        )

    @staticmethod
    def _is_retired(entry: CrosswalkEntry) -> bool:
        return entry.espn_player_id is None and entry.fp_player_id is None and not entry.needs_review

    @staticmethod
    def _warn_on_reassignment(existing: CrosswalkEntry | None, entry: CrosswalkEntry) -> None:
        if existing is None or existing.manual_override:
            return
        if existing.espn_player_id is not None and entry.espn_player_id not in (None, existing.espn_player_id):
            logger.warning(
                "ESPN id for %s changed from %s to %s",
                entry.canonical_key,
                existing.espn_player_id,
                entry.espn_player_id,
            )
        if existing.fp_player_id is not None and entry.fp_player_id not in (None, existing.fp_player_id):
            logger.warning(
                "FP id for %s changed from %s to %s",
                entry.canonical_key,
                existing.fp_player_id,
                entry.fp_player_id,
            )

    def set_manual_override(
        self,
        sport: str,
        season: int,
        *,
        espn_player_id: int | None = None,
        fp_player_id: str | None = None,
        canonical_key_override: str | None = None,
        notes: str | None = None,
    ) -> CrosswalkEntry:
        """Pin a link by hand. Automated runs never replace it.

        Without an explicit key, the key is derived from the ESPN record (or
        the FP record when no ESPN id is given). Automated entries holding
        either id give it up.
        """
        if espn_player_id is None and fp_player_id is None:
            raise ValueError("A manual override needs an ESPN id, an FP id, or both")

        key = canonical_key_override or self._derive_key(sport, season, espn_player_id, fp_player_id)
        entry = CrosswalkEntry(
            canonical_key=key,
            sport=sport,
            season=season,
            espn_player_id=espn_player_id,
            fp_player_id=fp_player_id,
            match_confidence=1.0,
            match_status=MatchStatus.MANUAL,
            manual_override=True,
            notes=notes,
        )

        try:
            self._release_ids(sport, season, key, espn_player_id, fp_player_id)
            self._crosswalk_repo.write(entry)
            self._conn.commit()
        except sqlite3.Error:
            self._conn.rollback()
            raise

        logger.info("Manual override for %s: espn=%s fp=%s", key, espn_player_id, fp_player_id)
        stored = self._crosswalk_repo.get(sport, season, key)
        return stored if stored is not None else entry

    def _derive_key(self, sport: str, season: int, espn_player_id: int | None, fp_player_id: str | None) -> str:
        match_key: MatchKey | None = None
        if espn_player_id is not None:
            espn = self._espn_repo.get(sport, season, espn_player_id)
            if espn is None:
                raise ValueError(f"No ESPN player {espn_player_id} in {sport} {season}")
            match_key = self._espn_key(espn)
        else:
            assert fp_player_id is not None
            fp = self._fp_repo.get(sport, season, fp_player_id)
            if fp is None:
                raise ValueError(f"No FP player {fp_player_id} in {sport} {season}")
            match_key = self._fp_key(fp)
        if match_key is None:
            raise ValueError("Cannot derive a canonical key for this player; pass one explicitly")
        return canonical_key(match_key)

    def _release_ids(
        self,
        sport: str,
        season: int,
        key: str,
        espn_player_id: int | None,
        fp_player_id: str | None,
    ) -> None:
        holders: list[CrosswalkEntry] = []
        if espn_player_id is not None:
            holders.extend(self._crosswalk_repo.get_by_espn_id(sport, season, espn_player_id))
        if fp_player_id is not None:
            holders.extend(self._crosswalk_repo.get_by_fp_id(sport, season, fp_player_id))
        for holder in holders:
            if holder.canonical_key == key or holder.manual_override:
                continue
            # Re-read: the same entry may hold both ids
            current = self._crosswalk_repo.get(sport, season, holder.canonical_key)
            if current is None:
                continue
            released = replace(
                current,
                espn_player_id=None if current.espn_player_id == espn_player_id else current.espn_player_id,
                fp_player_id=None if current.fp_player_id == fp_player_id else current.fp_player_id,
                match_confidence=0.0,
                match_status=MatchStatus.UNMATCHED,
                notes=f"Released to manual override {key}",
            )
            self._crosswalk_repo.write(released)

    def get_review_queue(self, sport: str, season: int) -> list[AmbiguousMatch]:
        """Match keys still flagged for review, with the ids involved."""
        espn_ids: dict[str, list[int]] = defaultdict(list)
        fp_ids: dict[str, list[str]] = defaultdict(list)
        for entry in self._crosswalk_repo.get_needs_review(sport, season):
            key = base_key(entry.canonical_key)
            espn_ids.setdefault(key, [])
            fp_ids.setdefault(key, [])
            if entry.espn_player_id is not None:
                espn_ids[key].append(entry.espn_player_id)
            if entry.fp_player_id is not None:
                fp_ids[key].append(entry.fp_player_id)
        return [
            AmbiguousMatch(match_key=key, espn_player_ids=tuple(espn_ids[key]), fp_player_ids=tuple(fp_ids[key]))
            for key in sorted(espn_ids)
        ]

    def purge(self, sport: str, season: int) -> int:
        """Delete every entry for the scope, manual overrides included."""
        deleted = self._crosswalk_repo.purge(sport, season)
        self._conn.commit()
        logger.info("Purged %d crosswalk entries for %s %d", deleted, sport, season)
        return deleted
