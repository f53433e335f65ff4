"""Typer CLI application for running a bracket pool from a local data directory."""

from __future__ import annotations

import datetime
from pathlib import Path

import typer
from pandera.errors import SchemaError
from pydantic import ValidationError
from rich.console import Console
from rich.table import Table

from bracket_pool.bracket.errors import BracketPoolError
from bracket_pool.bracket.topology import REGION_ORDER, ROUND_DISPLAY_NAMES, Region
from bracket_pool.cli import pool
from bracket_pool.evaluation.scoring import ScoringNotFoundError, list_scorings
from bracket_pool.ingest.repository import ParquetRepository
from bracket_pool.utils.logger import configure_logging

app = typer.Typer(help="Bracket pool CLI")
console = Console()

DataDir = typer.Option(Path("data/"), "--data-dir", help="Local pool data directory")
AdminId = typer.Option(pool.DEFAULT_ADMIN_ID, "--admin-id", help="Administrator recorded in the audit trail")


@app.callback()
def _callback(
    log_level: str | None = typer.Option(
        None,
        "--log-level",
        help="QUIET | NORMAL | VERBOSE | DEBUG (default: $BRACKET_POOL_LOG_LEVEL or NORMAL)",
    ),
) -> None:
    """Bracket pool: picks, results and leaderboard."""
    try:
        configure_logging(log_level)
    except ValueError as exc:
        console.print(f"[red]Error: {exc}[/red]")
        raise typer.Exit(code=1)


def _fail(exc: Exception) -> typer.Exit:
    console.print(f"[red]Error: {exc}[/red]")
    return typer.Exit(code=1)


def _parse_lock(value: str | None) -> datetime.datetime | None:
    if value is None:
        return None
    try:
        parsed = datetime.datetime.fromisoformat(value)
    except ValueError:
        console.print(f"[red]Error: --lock must be an ISO-8601 datetime, got {value!r}[/red]")
        raise typer.Exit(code=1)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=datetime.timezone.utc)
    return parsed


def _parse_regions(values: list[str]) -> dict[Region, str]:
    names: dict[Region, str] = {}
    for value in values:
        code, sep, name = value.partition("=")
        region = next((r for r in REGION_ORDER if r == code.strip().upper()), None)
        if not sep or region is None or not name.strip():
            console.print(f"[red]Error: --region must look like W=East, got {value!r}[/red]")
            raise typer.Exit(code=1)
        names[region] = name.strip()
    return names


@app.command()
def init(
    entrants: Path = typer.Option(..., "--entrants", help="CSV with entrant_id, display_name, region, seed"),
    data_dir: Path = DataDir,
    lock: str | None = typer.Option(None, "--lock", help="Pick lock deadline (ISO-8601, UTC if naive)"),
    scoring: str | None = typer.Option(None, "--scoring", help="Scoring preset name"),
    region: list[str] = typer.Option([], "--region", help="Region display name as CODE=NAME (repeatable)"),
) -> None:
    """Create the field and all matches, resetting brackets and picks."""
    if not entrants.exists():
        console.print(f"[red]Error: Entrants file not found: {entrants}[/red]")
        raise typer.Exit(code=1)
    lock_datetime = _parse_lock(lock)
    region_names = _parse_regions(region)
    try:
        matches = pool.init_pool(
            ParquetRepository(base_path=data_dir),
            entrants,
            lock_datetime=lock_datetime,
            scoring_name=scoring,
            region_names=region_names,
        )
    except ScoringNotFoundError:
        console.print(f"[red]Error: Unknown scoring {scoring!r}[/red]")
        console.print(f"Available scorings: {', '.join(list_scorings())}")
        raise typer.Exit(code=1)
    except (BracketPoolError, SchemaError, ValidationError) as exc:
        raise _fail(exc) from exc
    console.print(f"Pool initialised with [bold]{len(matches)}[/bold] matches in {data_dir}")


@app.command()
def pick(
    bracket: str = typer.Option(..., "--bracket", help="Bracket id"),
    match: str = typer.Option(..., "--match", help="Match id, e.g. R64-W-1"),
    entrant: str = typer.Option(..., "--entrant", help="Picked entrant id"),
    participant: str | None = typer.Option(None, "--participant", help="Owner for a new bracket"),
    admin: bool = typer.Option(False, "--admin", help="Edit as administrator (ignores lock)"),
    admin_id: str = AdminId,
    data_dir: Path = DataDir,
) -> None:
    """Pick the winner of one match in a bracket."""
    repo = ParquetRepository(base_path=data_dir)
    try:
        plan = pool.make_pick(
            repo, bracket, match, entrant, participant_id=participant, is_admin=admin, admin_id=admin_id
        )
    except BracketPoolError as exc:
        raise _fail(exc) from exc
    console.print(f"Picked [bold]{entrant}[/bold] in {match}")
    if plan.deletions:
        console.print(f"[yellow]Removed {len(plan.deletions)} downstream pick(s):[/yellow]")
        for pick_id in sorted(plan.deletions):
            console.print(f"  {pick_id}")


@app.command()
def submit(
    bracket: str = typer.Option(..., "--bracket", help="Bracket id"),
    data_dir: Path = DataDir,
) -> None:
    """Submit a completed bracket."""
    repo = ParquetRepository(base_path=data_dir)
    try:
        submitted = pool.submit(repo, bracket)
    except KeyError as exc:
        console.print(f"[red]Error: {exc.args[0]}[/red]")
        raise typer.Exit(code=1)
    except BracketPoolError as exc:
        raise _fail(exc) from exc
    console.print(f"Bracket [bold]{submitted.bracket_id}[/bold] submitted")


@app.command()
def result(
    match: str = typer.Option(..., "--match", help="Match id"),
    winner: str = typer.Option(..., "--winner", help="Winning entrant id"),
    admin_id: str = AdminId,
    data_dir: Path = DataDir,
) -> None:
    """Record the actual winner of a match and advance it."""
    repo = ParquetRepository(base_path=data_dir)
    try:
        advancement = pool.record_result(repo, match, winner, admin_id=admin_id)
    except KeyError:
        console.print(f"[red]Error: Unknown match {match!r}[/red]")
        raise typer.Exit(code=1)
    except BracketPoolError as exc:
        raise _fail(exc) from exc

    if advancement.slot_write is None:
        console.print(f"[green]{winner} wins the championship[/green]")
    else:
        write = advancement.slot_write
        console.print(f"{winner} advances to {write.match_id} ({write.side})")
    if advancement.is_correction:
        console.print(
            f"[yellow]Corrected from {advancement.superseded_entrant_id}; "
            f"cleared {len(advancement.clears)} slot(s), "
            f"{len(advancement.cleared_winners)} result(s)[/yellow]"
        )


@app.command()
def show(
    bracket: str = typer.Option(..., "--bracket", help="Bracket id"),
    data_dir: Path = DataDir,
) -> None:
    """Show the matchups a bracket's picks project into every match."""
    repo = ParquetRepository(base_path=data_dir)
    matches = {m.match_id: m for m in repo.get_matches()}
    picks = {p.match_id: p.picked_entrant_id for p in repo.get_picks(bracket)}
    pairs = pool.virtual_bracket(repo, bracket)
    settings = repo.get_settings()

    table = Table(title=f"Bracket {bracket}")
    table.add_column("Match", style="cyan")
    table.add_column("Round")
    table.add_column("Region")
    table.add_column("Left")
    table.add_column("Right")
    table.add_column("Pick", style="green")
    table.add_column("Actual", style="magenta")
    for match_id, pair in pairs.items():
        m = matches[match_id]
        table.add_row(
            match_id,
            ROUND_DISPLAY_NAMES[m.round],
            settings.region_name(m.region) if m.region else "",
            pair.left.display_name if pair.left else "TBD",
            pair.right.display_name if pair.right else "TBD",
            picks.get(match_id, ""),
            m.winner_entrant_id or "",
        )
    console.print(table)

    score = pool.bracket_score(repo, bracket)
    console.print(
        f"Score: [bold]{score.total_points}[/bold]  "
        f"remaining: {score.possible_remaining_points}  "
        f"perfect: {'yes' if score.is_perfect else 'no'}"
    )


@app.command()
def leaderboard(
    data_dir: Path = DataDir,
    csv: Path | None = typer.Option(None, "--csv", help="Also write the leaderboard to this CSV"),
) -> None:
    """Rank every bracket by points, then by remaining upside."""
    board = pool.leaderboard(ParquetRepository(base_path=data_dir))

    table = Table(title="Leaderboard")
    table.add_column("Rank", justify="right")
    table.add_column("Participant", style="cyan")
    table.add_column("Points", justify="right", style="green")
    table.add_column("Remaining", justify="right")
    table.add_column("Perfect")
    for entry in board.entries:
        table.add_row(
            str(entry.rank),
            entry.participant_id,
            str(entry.total_points),
            str(entry.possible_remaining_points),
            "✓" if entry.is_perfect else "",
        )
    console.print(table)
    console.print(f"Perfect brackets: {board.perfect_brackets}/{len(board)}")
    if board.skipped:
        console.print(f"[yellow]Skipped unscorable bracket(s): {', '.join(board.skipped)}[/yellow]")

    if csv is not None:
        board.to_frame().to_csv(csv, index=False)
        console.print(f"Wrote {csv}")


@app.command()
def audit(data_dir: Path = DataDir) -> None:
    """List administrator actions, oldest first."""
    actions = ParquetRepository(base_path=data_dir).get_admin_actions()
    table = Table(title="Admin actions")
    table.add_column("When", style="cyan")
    table.add_column("Admin")
    table.add_column("Action", style="magenta")
    table.add_column("Details")
    for action in actions:
        table.add_row(
            f"{action.created_at:%Y-%m-%d %H:%M:%S %Z}",
            action.admin_id,
            action.action_type,
            ", ".join(f"{k}={v}" for k, v in action.payload.items() if v is not None),
        )
    console.print(table)
    console.print(f"{len(actions)} action(s)")
