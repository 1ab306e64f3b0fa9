import json
from dataclasses import asdict
from pathlib import Path
from typing import Annotated, Any

import typer

from fantasy_football_manager.cli._logging import configure_logging
from fantasy_football_manager.cli._output import (
    print_cleared,
    print_crosswalk_entry,
    print_crosswalk_result,
    print_defensive_ranking,
    print_dvp_result,
    print_error,
    print_ingest_result,
    print_matchup_result,
    print_pipeline_result,
    print_reclaim_result,
    print_refresh_result,
    print_review_queue,
    print_unified_view,
)
from fantasy_football_manager.cli.factory import AppContainer, build_app_container
from fantasy_football_manager.config import AppSettings, create_config, parse_settings
from fantasy_football_manager.domain.result import Err, Ok
from fantasy_football_manager.identity.normalizer import default_normalizer
from fantasy_football_manager.ingest.column_maps import (
    make_espn_player_mapper,
    make_fp_player_mapper,
    make_fp_projection_mapper,
    make_fp_ranking_mapper,
    make_odds_mapper,
    make_team_defense_mapper,
)
from fantasy_football_manager.ingest.csv_source import CsvSource
from fantasy_football_manager.ingest.json_source import JsonSource
from fantasy_football_manager.ingest.protocols import DataSource
from fantasy_football_manager.services.pipeline import clear_unified_data

app = typer.Typer(name="ffm", help="Fantasy Football Manager: player identity and unified player data")


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Enable DEBUG logging")] = False,
    quiet: Annotated[bool, typer.Option("--quiet", "-q", help="Only log warnings and errors")] = False,
) -> None:
    """Fantasy Football Manager: player identity and unified player data."""
    configure_logging(verbose=verbose, quiet=quiet)
    if ctx.invoked_subcommand is None:
        raise typer.Exit()


ingest_app = typer.Typer(name="ingest", help="Load provider files into the catalogs")
app.add_typer(ingest_app, name="ingest")
crosswalk_app = typer.Typer(name="crosswalk", help="Player identity crosswalk commands")
app.add_typer(crosswalk_app, name="crosswalk")
orphans_app = typer.Typer(name="orphans", help="Catalog cleanup commands")
app.add_typer(orphans_app, name="orphans")
view_app = typer.Typer(name="view", help="Unified player view commands")
app.add_typer(view_app, name="view")
defense_app = typer.Typer(name="defense", help="Defensive rank commands")
app.add_typer(defense_app, name="defense")
matchups_app = typer.Typer(name="matchups", help="Weekly schedule commands")
app.add_typer(matchups_app, name="matchups")
pipeline_app = typer.Typer(name="pipeline", help="Run or reset the unified player jobs")
app.add_typer(pipeline_app, name="pipeline")

_FileArg = Annotated[Path, typer.Argument(help="Path to a saved CSV or JSON file")]
_DbOpt = Annotated[str | None, typer.Option("--db", help="SQLite database path")]
_SportOpt = Annotated[str | None, typer.Option("--sport", help="Sport code (default from config)")]
_SeasonOpt = Annotated[int | None, typer.Option("--season", help="Season year (default from config)")]
_WeekOpt = Annotated[int | None, typer.Option("--week", help="Week number; omit for season totals")]
_ScoringOpt = Annotated[str | None, typer.Option("--scoring-type", help="Scoring type: PPR, HALF or STD")]


def _settings(db: str | None, season: int | None) -> AppSettings:
    match parse_settings(create_config(db_path=db, season=season)):
        case Ok(settings):
            return settings
        case Err(e):
            print_error(e.message)
            raise typer.Exit(code=1)


def _sport(settings: AppSettings, sport: str | None) -> str:
    return sport.upper() if sport else settings.sport


def _file_source(path: Path, records_key: str | None = None) -> DataSource:
    if path.suffix.lower() == ".json":
        return JsonSource(path, records_key=records_key)
    return CsvSource(path)


def _run_ingest(
    container: AppContainer,
    target_table: str,
    source: DataSource,
    row_mapper: Any,
) -> None:
    match container.loader(target_table).load_source(source, row_mapper):
        case Ok(log):
            print_ingest_result(log)
        case Err(e):
            print_error(e.message)
            if e.inserted or e.updated:
                print_error(f"{e.inserted} inserted and {e.updated} updated before the failure were kept")
            raise typer.Exit(code=1)


@ingest_app.command("espn")
def ingest_espn(path: _FileArg, sport: _SportOpt = None, season: _SeasonOpt = None, db: _DbOpt = None) -> None:
    """Load a saved roster-provider player pool (JSON, players under "players")."""
    settings = _settings(db, season)
    with build_app_container(settings) as container:
        mapper = make_espn_player_mapper(_sport(settings, sport), settings.season)
        _run_ingest(container, "espn_player_data", JsonSource(path, records_key="players"), mapper)


@ingest_app.command("fp")
def ingest_fp(path: _FileArg, sport: _SportOpt = None, season: _SeasonOpt = None, db: _DbOpt = None) -> None:
    """Load a rankings-provider player list (CSV or JSON)."""
    settings = _settings(db, season)
    with build_app_container(settings) as container:
        mapper = make_fp_player_mapper(_sport(settings, sport), settings.season)
        _run_ingest(container, "fp_player_data", _file_source(path, "players"), mapper)


@ingest_app.command("team-defense")
def ingest_team_defense(path: _FileArg, week: _WeekOpt = None, season: _SeasonOpt = None, db: _DbOpt = None) -> None:
    """Load team points-allowed stats (CSV or JSON)."""
    settings = _settings(db, season)
    with build_app_container(settings) as container:
        mapper = make_team_defense_mapper(settings.season, week)
        _run_ingest(container, "team_defense_stat", _file_source(path, "teams"), mapper)


@ingest_app.command("rankings")
def ingest_rankings(
    path: _FileArg,
    rank_type: Annotated[str, typer.Option("--rank-type", help="Ranking type: weekly, ros or draft")] = "weekly",
    scoring_type: _ScoringOpt = None,
    week: _WeekOpt = None,
    sport: _SportOpt = None,
    season: _SeasonOpt = None,
    db: _DbOpt = None,
) -> None:
    """Load expert consensus rankings (CSV or JSON)."""
    settings = _settings(db, season)
    with build_app_container(settings) as container:
        mapper = make_fp_ranking_mapper(
            _sport(settings, sport),
            settings.season,
            rank_type=rank_type,
            scoring_type=scoring_type.upper() if scoring_type else None,
            week=week,
        )
        _run_ingest(container, "fp_ranking", _file_source(path, "players"), mapper)


@ingest_app.command("projections")
def ingest_projections(
    path: _FileArg,
    scoring_type: _ScoringOpt = None,
    week: _WeekOpt = None,
    sport: _SportOpt = None,
    season: _SeasonOpt = None,
    db: _DbOpt = None,
) -> None:
    """Load player projections (CSV or JSON)."""
    settings = _settings(db, season)
    with build_app_container(settings) as container:
        mapper = make_fp_projection_mapper(
            _sport(settings, sport),
            settings.season,
            scoring_type=scoring_type.upper() if scoring_type else None,
            week=week,
        )
        _run_ingest(container, "fp_projection", _file_source(path, "players"), mapper)


@crosswalk_app.command("resolve")
def crosswalk_resolve(sport: _SportOpt = None, season: _SeasonOpt = None, db: _DbOpt = None) -> None:
    """Match the roster and rankings catalogs into the crosswalk."""
    settings = _settings(db, season)
    with build_app_container(settings) as container:
        print_crosswalk_result(container.resolver.resolve(_sport(settings, sport), settings.season))


@crosswalk_app.command("review")
def crosswalk_review(sport: _SportOpt = None, season: _SeasonOpt = None, db: _DbOpt = None) -> None:
    """List match keys flagged for manual review."""
    settings = _settings(db, season)
    with build_app_container(settings) as container:
        print_review_queue(container.resolver.get_review_queue(_sport(settings, sport), settings.season))


@crosswalk_app.command("override")
def crosswalk_override(
    espn_id: Annotated[int | None, typer.Option("--espn-id", help="Roster-provider player id")] = None,
    fp_id: Annotated[str | None, typer.Option("--fp-id", help="Rankings-provider player id")] = None,
    key: Annotated[str | None, typer.Option("--key", help="Canonical key to pin (derived when omitted)")] = None,
    notes: Annotated[str | None, typer.Option("--notes", help="Free-text note")] = None,
    sport: _SportOpt = None,
    season: _SeasonOpt = None,
    db: _DbOpt = None,
) -> None:
    """Pin a crosswalk link by hand."""
    settings = _settings(db, season)
    with build_app_container(settings) as container:
        try:
            entry = container.resolver.set_manual_override(
                _sport(settings, sport),
                settings.season,
                espn_player_id=espn_id,
                fp_player_id=fp_id,
                canonical_key_override=key,
                notes=notes,
            )
        except ValueError as exc:
            print_error(str(exc))
            raise typer.Exit(code=1) from exc
        print_crosswalk_entry(entry)


@crosswalk_app.command("purge")
def crosswalk_purge(
    sport: _SportOpt = None,
    season: _SeasonOpt = None,
    db: _DbOpt = None,
    yes: Annotated[bool, typer.Option("--yes", "-y", help="Skip the confirmation prompt")] = False,
) -> None:
    """Delete every crosswalk entry for a season, manual overrides included."""
    settings = _settings(db, season)
    scope_sport = _sport(settings, sport)
    if not yes:
        typer.confirm(f"Delete all crosswalk entries for {scope_sport} {settings.season}?", abort=True)
    with build_app_container(settings) as container:
        deleted = container.resolver.purge(scope_sport, settings.season)
        print_cleared({"player_crosswalk": deleted})


@orphans_app.command("reclaim")
def orphans_reclaim(db: _DbOpt = None) -> None:
    """Delete rankings-provider players that no roster-provider player matches."""
    settings = _settings(db, None)
    with build_app_container(settings) as container:
        print_reclaim_result(container.reclaimer.delete_fp_players_without_espn_match())


@view_app.command("refresh")
def view_refresh(db: _DbOpt = None) -> None:
    """Rebuild the unified player view from the crosswalk and every source."""
    settings = _settings(db, None)
    with build_app_container(settings) as container:
        result = container.view_service.refresh_unified_view()
        print_refresh_result(result)
        if not result.success:
            raise typer.Exit(code=1)


@view_app.command("show")
def view_show(
    team: Annotated[str | None, typer.Option("--team", help="Filter by team (any spelling)")] = None,
    position: Annotated[str | None, typer.Option("--position", help="Filter by position")] = None,
    as_json: Annotated[bool, typer.Option("--json", help="Print rows as JSON")] = False,
    sport: _SportOpt = None,
    season: _SeasonOpt = None,
    db: _DbOpt = None,
) -> None:
    """Show unified player rows."""
    settings = _settings(db, season)
    with build_app_container(settings) as container:
        players = container.view_service.get_unified_view(
            _sport(settings, sport), settings.season, team=team, position=position
        )
        if as_json:
            typer.echo(json.dumps([asdict(p) for p in players], indent=2, default=str))
        else:
            print_unified_view(players)


@defense_app.command("ranks")
def defense_ranks(week: _WeekOpt = None, season: _SeasonOpt = None, db: _DbOpt = None) -> None:
    """Rank defenses by points allowed per game."""
    settings = _settings(db, season)
    with build_app_container(settings) as container:
        ranking = container.defensive_rankings.rank_scope(settings.season, week)
        teams = [t for t in default_normalizer().canonical_teams() if t in ranking.ranks]
        print_defensive_ranking(ranking, teams)


@defense_app.command("refresh-dvp")
def defense_refresh_dvp(
    scoring_type: _ScoringOpt = None,
    sport: _SportOpt = None,
    season: _SeasonOpt = None,
    db: _DbOpt = None,
) -> None:
    """Rebuild defense-vs-position ranks from projections."""
    settings = _settings(db, season)
    scoring = scoring_type.upper() if scoring_type else settings.dvp_scoring_type
    with build_app_container(settings) as container:
        match container.dvp_builder.refresh(_sport(settings, sport), settings.season, scoring):
            case Ok(result):
                print_dvp_result(result)
            case Err(e):
                print_error(e.message)
                raise typer.Exit(code=1)


@matchups_app.command("build")
def matchups_build(
    path: Annotated[Path, typer.Argument(help="Path to a saved odds feed (JSON)")],
    week: Annotated[int, typer.Option("--week", help="Week the feed covers")],
    season: _SeasonOpt = None,
    db: _DbOpt = None,
) -> None:
    """Replace one week's schedule from a saved odds feed."""
    settings = _settings(db, season)
    try:
        rows = JsonSource(path, records_key="games").fetch()
    except (OSError, ValueError) as exc:
        print_error(str(exc))
        raise typer.Exit(code=1) from exc
    mapper = make_odds_mapper(settings.season, week)
    odds = [r for r in (mapper(row) for row in rows) if r is not None]
    with build_app_container(settings) as container:
        match container.matchup_service.refresh_week(odds, settings.season, week):
            case Ok(result):
                print_matchup_result(result, settings.season, week)
            case Err(e):
                print_error(e.message)
                raise typer.Exit(code=1)


@pipeline_app.command("run")
def pipeline_run(
    espn_file: Annotated[Path | None, typer.Option("--espn-file", help="Roster-provider player pool (JSON)")] = None,
    fp_file: Annotated[Path | None, typer.Option("--fp-file", help="Rankings-provider player list")] = None,
    scoring_type: _ScoringOpt = None,
    sport: _SportOpt = None,
    season: _SeasonOpt = None,
    db: _DbOpt = None,
) -> None:
    """Run every unified player job for one season in order."""
    settings = _settings(db, season)
    try:
        espn_entries = JsonSource(espn_file, records_key="players").fetch() if espn_file else None
        fp_rows = _file_source(fp_file, "players").fetch() if fp_file else None
    except (OSError, ValueError) as exc:
        print_error(str(exc))
        raise typer.Exit(code=1) from exc
    scoring = scoring_type.upper() if scoring_type else settings.dvp_scoring_type
    with build_app_container(settings) as container:
        result = container.pipeline.run_all(
            _sport(settings, sport),
            settings.season,
            espn_entries=espn_entries,
            fp_rows=fp_rows,
            scoring_type=scoring,
        )
        print_pipeline_result(result)
        if not result.success:
            raise typer.Exit(code=1)


@pipeline_app.command("clear")
def pipeline_clear(
    db: _DbOpt = None,
    yes: Annotated[bool, typer.Option("--yes", "-y", help="Skip the confirmation prompt")] = False,
) -> None:
    """Empty the catalogs, the crosswalk, the DvP ranks and the unified view."""
    settings = _settings(db, None)
    if not yes:
        typer.confirm("Delete all unified player data?", abort=True)
    with build_app_container(settings) as container:
        print_cleared(clear_unified_data(container.conn))
