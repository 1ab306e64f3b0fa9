"""Runs the unified player jobs for one (sport, season) in dependency order.

    1. ESPN catalog ingest      (failure stops the run)
    2. FP catalog ingest
    3. defense-vs-position ranks
    4. crosswalk resolution
    5. orphan reclaim           (only after a successful resolution)
    6. unified view refresh

Callers must not run two jobs against the same (sport, season) at once: the
jobs share one connection's transactions and nothing here takes a lock.
"""

import logging
import sqlite3
import time
from collections.abc import Iterable
from typing import Any

from fantasy_football_manager.domain.pipeline import PipelineResult, PipelineStep
from fantasy_football_manager.domain.result import Err, Ok
from fantasy_football_manager.exceptions import FfmException
from fantasy_football_manager.ingest.column_maps import make_espn_player_mapper, make_fp_player_mapper
from fantasy_football_manager.ingest.loader import BatchLoader
from fantasy_football_manager.services.crosswalk_resolver import CrosswalkResolver
from fantasy_football_manager.services.defense_vs_position import DefenseVsPositionBuilder
from fantasy_football_manager.services.orphan_reclaimer import OrphanReclaimer
from fantasy_football_manager.services.unified_view import UnifiedViewService

logger = logging.getLogger(__name__)

_UNIFIED_TABLES = (
    "unified_player",
    "player_crosswalk",
    "defense_vs_position_stats",
    "fp_player_data",
    "espn_player_data",
)


class UnifiedPlayerPipeline:
    def __init__(
        self,
        conn: sqlite3.Connection,
        espn_loader: BatchLoader,
        fp_loader: BatchLoader,
        dvp_builder: DefenseVsPositionBuilder,
        resolver: CrosswalkResolver,
        reclaimer: OrphanReclaimer,
        view_service: UnifiedViewService,
    ) -> None:
        self._conn = conn
        self._espn_loader = espn_loader
        self._fp_loader = fp_loader
        self._dvp_builder = dvp_builder
        self._resolver = resolver
        self._reclaimer = reclaimer
        self._view_service = view_service

    def run_all(
        self,
        sport: str,
        season: int,
        *,
        espn_entries: Iterable[dict[str, Any]] | None = None,
        fp_rows: Iterable[dict[str, Any]] | None = None,
        scoring_type: str = "PPR",
    ) -> PipelineResult:
        """Run every job. Raw payload rows are ingested first when given."""
        t0 = time.perf_counter()
        logger.info("Running unified player jobs for %s %d", sport, season)
        steps: list[PipelineStep] = []

        if espn_entries is not None:
            mapper = make_espn_player_mapper(sport, season)
            records = [r for r in (mapper(e) for e in espn_entries) if r is not None]
            if not records:
                return self._abort(sport, season, steps, "espn_ingest", "No ESPN players in payload")
            loaded = self._espn_loader.load(records, source_type="payload", source_detail="espn")
            if isinstance(loaded, Err):
                return self._abort(sport, season, steps, "espn_ingest", loaded.error.message)
            steps.append(PipelineStep("espn_ingest", True, f"{loaded.value.rows_loaded} players"))

        if fp_rows is not None:
            fp_mapper = make_fp_player_mapper(sport, season)
            fp_records = [r for r in (fp_mapper(row) for row in fp_rows) if r is not None]
            fp_loaded = self._fp_loader.load(fp_records, source_type="payload", source_detail="fp")
            if isinstance(fp_loaded, Ok):
                steps.append(PipelineStep("fp_ingest", True, f"{fp_loaded.value.rows_loaded} players"))
            else:
                logger.warning("FP ingest failed: %s", fp_loaded.error.message)
                steps.append(PipelineStep("fp_ingest", False, fp_loaded.error.message))

        dvp = self._dvp_builder.refresh(sport, season, scoring_type)
        if isinstance(dvp, Ok):
            steps.append(PipelineStep("defense_vs_position", True, f"{dvp.value.rows_written} rows"))
        else:
            logger.warning("Defense vs position refresh skipped: %s", dvp.error.message)
            steps.append(PipelineStep("defense_vs_position", False, dvp.error.message))

        try:
            crosswalk = self._resolver.resolve(sport, season)
        except (sqlite3.Error, FfmException) as exc:
            logger.warning("Crosswalk resolution failed, skipping orphan reclaim: %s", exc)
            steps.append(PipelineStep("crosswalk", False, str(exc)))
        else:
            steps.append(
                PipelineStep(
                    "crosswalk",
                    True,
                    f"{crosswalk.matched} matched, {crosswalk.unresolved} unresolved, {crosswalk.ambiguous} ambiguous",
                )
            )
            try:
                reclaimed = self._reclaimer.delete_fp_players_without_espn_match()
            except sqlite3.Error as exc:
                logger.warning("Orphan reclaim failed: %s", exc)
                steps.append(PipelineStep("orphan_reclaim", False, str(exc)))
            else:
                steps.append(PipelineStep("orphan_reclaim", True, f"{reclaimed.deleted} deleted"))

        view = self._view_service.refresh_unified_view()
        steps.append(PipelineStep("unified_view", view.success, view.error or f"{view.row_count} rows"))

        success = all(step.success for step in steps if step.name in ("espn_ingest", "unified_view"))
        logger.info(
            "Unified player jobs for %s %d finished in %.1fs (%s)",
            sport,
            season,
            time.perf_counter() - t0,
            "ok" if success else "with errors",
        )
        return PipelineResult(sport=sport, season=season, success=success, steps=tuple(steps))

    @staticmethod
    def _abort(
        sport: str,
        season: int,
        steps: list[PipelineStep],
        name: str,
        message: str,
    ) -> PipelineResult:
        logger.error("%s failed, stopping: %s", name, message)
        steps.append(PipelineStep(name, False, message))
        return PipelineResult(sport=sport, season=season, success=False, steps=tuple(steps), error=message)


def clear_unified_data(conn: sqlite3.Connection) -> dict[str, int]:
    """Empty the catalogs, the crosswalk, the DvP stats and the unified view in one transaction."""
    deleted: dict[str, int] = {}
    try:
        for table in _UNIFIED_TABLES:
            deleted[table] = conn.execute(f"DELETE FROM {table}").rowcount
        conn.commit()
    except sqlite3.Error:
        conn.rollback()
        logger.exception("Clearing unified player data failed")
        raise
    logger.info("Cleared unified player data: %s", deleted)
    return deleted
