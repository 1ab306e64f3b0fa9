from rich.console import Console
from rich.table import Table

from fantasy_football_manager.domain.crosswalk import AmbiguousMatch, CrosswalkEntry, CrosswalkResult, ReclaimResult
from fantasy_football_manager.domain.defense import DefenseRefreshResult, DefensiveRanking
from fantasy_football_manager.domain.load_log import LoadLog
from fantasy_football_manager.domain.matchup import MatchupBuildResult
from fantasy_football_manager.domain.pipeline import PipelineResult
from fantasy_football_manager.domain.unified_player import RefreshResult, UnifiedPlayer

console = Console(highlight=False)
err_console = Console(stderr=True, highlight=False)


def print_error(message: str) -> None:
    err_console.print(f"[red bold]Error:[/red bold] {message}")


def _fmt(value: object, spec: str = "") -> str:
    if value is None:
        return ""
    return format(value, spec)


def print_ingest_result(log: LoadLog) -> None:
    console.print(
        f"[bold green]Ingest complete:[/bold green] {log.rows_loaded} rows loaded into {log.target_table}"
        f" ({log.inserted} inserted, {log.updated} updated)"
    )
    console.print(f"  Source: {log.source_detail}")
    console.print(f"  Status: {log.status}")


def print_crosswalk_result(result: CrosswalkResult) -> None:
    console.print(f"[bold green]Crosswalk resolved[/bold green] for {result.sport} {result.season}")
    console.print(f"  Created: {result.created}  Updated: {result.updated}  Unchanged: {result.unchanged}")
    console.print(
        f"  Matched: {result.matched}  Unresolved: {result.unresolved}  Ambiguous: {result.ambiguous}"
        f"  Protected: {result.protected}  Retired: {result.retired}"
    )
    if result.skipped:
        console.print(f"  [yellow]Skipped {result.skipped} records without a usable team[/yellow]")
    if result.review_queue:
        console.print(f"  [yellow]{len(result.review_queue)} keys need review[/yellow]")


def print_review_queue(matches: list[AmbiguousMatch]) -> None:
    if not matches:
        console.print("Nothing to review.")
        return
    table = Table(show_edge=False, pad_edge=False)
    table.add_column("Match key")
    table.add_column("ESPN ids")
    table.add_column("FP ids")
    for match in matches:
        table.add_row(
            match.match_key,
            ", ".join(str(i) for i in match.espn_player_ids),
            ", ".join(match.fp_player_ids),
        )
    console.print(table)


def print_crosswalk_entry(entry: CrosswalkEntry) -> None:
    console.print(f"[bold green]Override saved:[/bold green] {entry.canonical_key}")
    console.print(f"  ESPN id: {_fmt(entry.espn_player_id) or '-'}")
    console.print(f"  FP id: {entry.fp_player_id or '-'}")


def print_reclaim_result(result: ReclaimResult) -> None:
    console.print(
        f"[bold green]Orphan reclaim complete:[/bold green] {result.deleted} FP players deleted"
        f" across {len(result.scopes)} scopes"
    )


def print_refresh_result(result: RefreshResult) -> None:
    if result.success:
        console.print(f"[bold green]Unified view refreshed:[/bold green] {result.row_count} rows")
    else:
        print_error(f"unified view refresh failed: {result.error}")


def print_unified_view(players: list[UnifiedPlayer]) -> None:
    if not players:
        console.print("No players found.")
        return
    table = Table(show_edge=False, pad_edge=False)
    table.add_column("Player")
    table.add_column("Tm")
    table.add_column("Pos")
    table.add_column("Status")
    table.add_column("Rank", justify="right")
    table.add_column("Proj", justify="right")
    table.add_column("Opp")
    table.add_column("OPRK", justify="right")
    table.add_column("Own%", justify="right")
    for p in players:
        opponent = ""
        if p.opponent_abbr is not None:
            opponent = p.opponent_abbr if p.is_home is not False else f"@{p.opponent_abbr}"
        table.add_row(
            p.full_name,
            p.team or "",
            p.position or "",
            p.match_status,
            _fmt(p.fp_rank),
            _fmt(p.projected_points, ".1f"),
            opponent,
            _fmt(p.opponent_rank),
            _fmt(p.percent_owned, ".1f"),
        )
    console.print(table)


def print_defensive_ranking(ranking: DefensiveRanking, teams: list[str]) -> None:
    scope = f"week {ranking.week}" if ranking.week is not None else "season"
    if not teams:
        console.print(f"No defensive stats for {ranking.season} {scope}.")
        return
    console.print(f"[bold]Points allowed ranks, {ranking.season} {scope}[/bold] (1 = fewest allowed)")
    table = Table(show_edge=False, pad_edge=False)
    table.add_column("Rank", justify="right")
    table.add_column("Team")
    for team in sorted(teams, key=lambda t: (ranking.ranks[t], t)):
        table.add_row(str(ranking.ranks[team]), team)
    console.print(table)
    if ranking.skipped:
        console.print(f"  [yellow]Skipped {ranking.skipped} rows[/yellow]")


def print_dvp_result(result: DefenseRefreshResult) -> None:
    console.print(
        f"[bold green]Defense vs position refreshed:[/bold green] {result.rows_written} rows"
        f" for {result.sport} {result.season} {result.scoring_type}"
        f" from {result.projections_used} projections"
    )


def print_matchup_result(result: MatchupBuildResult, season: int, week: int) -> None:
    console.print(
        f"[bold green]Matchups built:[/bold green] {len(result.matchups)} rows"
        f" from {result.games} games for {season} week {week}"
    )
    if result.skipped:
        console.print(f"  [yellow]Skipped {result.skipped} games[/yellow]")


def print_pipeline_result(result: PipelineResult) -> None:
    table = Table(show_edge=False, pad_edge=False)
    table.add_column("Step")
    table.add_column("Result")
    table.add_column("Detail")
    for step in result.steps:
        table.add_row(step.name, "[green]ok[/green]" if step.success else "[red]failed[/red]", step.detail)
    console.print(table)
    if result.success:
        console.print(f"[bold green]Pipeline complete[/bold green] for {result.sport} {result.season}")
    else:
        print_error(f"pipeline for {result.sport} {result.season} failed: {result.error or 'see steps above'}")


def print_cleared(deleted: dict[str, int]) -> None:
    console.print("[bold green]Cleared unified player data[/bold green]")
    for table, count in deleted.items():
        console.print(f"  {table}: {count}")
