import logging
import sqlite3
import time

from fantasy_football_manager.domain.crosswalk import ReclaimResult
from fantasy_football_manager.identity.normalizer import Normalizer, default_normalizer
from fantasy_football_manager.repos.protocols import CrosswalkRepo, EspnPlayerRepo, FpPlayerRepo

logger = logging.getLogger(__name__)


class OrphanReclaimer:
    """Deletes rankings-provider players no roster-provider player could ever match.

    Runs after the crosswalk resolver. FP players pinned to an ESPN player by a
    manual override are kept whatever their match key.
    """

    def __init__(
        self,
        espn_repo: EspnPlayerRepo,
        fp_repo: FpPlayerRepo,
        crosswalk_repo: CrosswalkRepo,
        conn: sqlite3.Connection,
        normalizer: Normalizer | None = None,
    ) -> None:
        self._espn_repo = espn_repo
        self._fp_repo = fp_repo
        self._crosswalk_repo = crosswalk_repo
        self._conn = conn
        self._normalizer = normalizer or default_normalizer()

    def delete_fp_players_without_espn_match(self) -> ReclaimResult:
        t0 = time.perf_counter()
        scopes = tuple(self._fp_repo.scopes())
        deleted = 0
        try:
            for sport, season in scopes:
                deleted += self._reclaim_scope(sport, season)
            self._conn.commit()
        except sqlite3.Error:
            self._conn.rollback()
            logger.exception("Orphan reclaim failed")
            raise
        logger.info(
            "Deleted %d orphaned FP players across %d scopes in %.1fs",
            deleted,
            len(scopes),
            time.perf_counter() - t0,
        )
        return ReclaimResult(deleted=deleted, scopes=scopes)

    def _reclaim_scope(self, sport: str, season: int) -> int:
        espn_players = self._espn_repo.get_by_season(sport, season)
        if not espn_players:
            logger.warning("No ESPN players for %s %d; leaving FP players in place", sport, season)
            return 0
        espn_keys = {self._normalizer.match_key(p.full_name, p.team, p.position) for p in espn_players}
        espn_keys.discard(None)
        pinned = {
            e.fp_player_id
            for e in self._crosswalk_repo.get_manual_overrides(sport, season)
            if e.espn_player_id is not None and e.fp_player_id is not None
        }

        orphan_ids: list[int] = []
        for fp in self._fp_repo.get_by_season(sport, season):
            if fp.fp_player_id in pinned:
                continue
            if self._normalizer.match_key(fp.full_name, fp.team, fp.position) in espn_keys:
                continue
            logger.debug("Orphaned FP player %s (%s %s %s)", fp.fp_player_id, fp.full_name, fp.team, fp.position)
            if fp.id is not None:
                orphan_ids.append(fp.id)

        deleted = self._fp_repo.delete_by_ids(orphan_ids) if orphan_ids else 0
        if deleted:
            logger.info("Deleted %d orphaned FP players for %s %d", deleted, sport, season)
        return deleted
