"""CLI for Profile Arena."""

from __future__ import annotations

import asyncio
import logging
import random
from collections.abc import Awaitable, Callable
from pathlib import Path
from typing import Annotated, Literal, TypeVar

import structlog
import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from profile_arena import __version__
from profile_arena.core.config import ArenaConfig, load_config
from profile_arena.core.errors import ArenaError, ConfigurationError, InsufficientPoolError
from profile_arena.core.progress import ArenaProgress
from profile_arena.models import Profile
from profile_arena.ranking import calculate_expected_win_chance
from profile_arena.services.reporting import render_leaderboard_markdown
from profile_arena.services.storage import ArenaStore, load_profile_records
from profile_arena.services.voting import VoteResult, VotingService

T = TypeVar("T")

# Configure structlog
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.dev.ConsoleRenderer(),
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)

app = typer.Typer(
    name="profile-arena",
    help="Profile Arena - compare profiles pairwise and rank them with Elo",
    add_completion=False,
)
console = Console()

ConfigOption = Annotated[
    Path | None, typer.Option("--config", "-c", help="Path to config YAML file")
]
VerboseOption = Annotated[bool, typer.Option("--verbose", "-V", help="Verbose output")]

# Chance that a simulated voter calls a draw
SIMULATED_DRAW_RATE = 0.05


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"profile-arena v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        bool | None,
        typer.Option("--version", "-v", callback=version_callback, is_eager=True),
    ] = None,
) -> None:
    """Profile Arena CLI."""


def _configure_logging(verbose: bool) -> None:
    log_level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=log_level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True)],
    )


def _run_with_store(
    config_path: Path | None,
    verbose: bool,
    action: Callable[[ArenaConfig, ArenaStore, VotingService], Awaitable[T]],
) -> T:
    """Load config, open the store and run an async action with error reporting."""
    _configure_logging(verbose)
    try:
        config = load_config(config_path)

        async def _run() -> T:
            store = ArenaStore(config)
            try:
                service = VotingService(config, store.profiles, store.votes)
                return await action(config, store, service)
            finally:
                await store.close()

        return asyncio.run(_run())

    except FileNotFoundError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1) from e
    except ConfigurationError as e:
        console.print(f"[red]{e}")
        raise typer.Exit(1) from e
    except InsufficientPoolError as e:
        console.print(f"[yellow]{e}[/yellow]")
        console.print("Import more profiles with: profile-arena import-profiles FILE")
        raise typer.Exit(1) from e
    except ArenaError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1) from e


def _profile_table(left: Profile, right: Profile) -> Table:
    table = Table(show_header=True, header_style="bold")
    table.add_column("")
    table.add_column("[L] Left", style="cyan")
    table.add_column("[R] Right", style="magenta")
    for label, attr in (
        ("Name", "full_name"),
        ("Title", "title"),
        ("Company", "company"),
        ("Major", "major"),
        ("Graduation", "graduation_year"),
        ("Location", "location"),
    ):
        table.add_row(label, str(getattr(left, attr) or ""), str(getattr(right, attr) or ""))
    return table


def _print_vote_result(result: VoteResult) -> None:
    r = result.recorded
    console.print(
        f"  Left {r.rating_left_before} -> {r.rating_left_after} ({r.left_delta:+d}), "
        f"Right {r.rating_right_before} -> {r.rating_right_after} ({r.right_delta:+d})"
    )
    if result.prediction_correct is True:
        console.print("  [green]You sided with the favourite.[/green]")
    elif result.prediction_correct is False:
        console.print("  [yellow]Upset! You picked the underdog.[/yellow]")


@app.command()
def init(config_path: ConfigOption = None, verbose: VerboseOption = False) -> None:
    """Create the database and tables."""

    async def _init(config: ArenaConfig, store: ArenaStore, _service: VotingService) -> None:
        count = await store.profiles.count()
        console.print(f"[green]Database ready:[/green] {config.database_path} ({count} profiles)")

    _run_with_store(config_path, verbose, _init)


@app.command("import-profiles")
def import_profiles(
    profiles_path: Annotated[Path, typer.Argument(help="YAML, JSON or CSV file of profiles")],
    config_path: ConfigOption = None,
    verbose: VerboseOption = False,
) -> None:
    """Import profiles into the rating pool at the initial rating."""

    async def _import(config: ArenaConfig, store: ArenaStore, _service: VotingService) -> None:
        records = load_profile_records(profiles_path)
        profiles = await store.profiles.import_profiles(records)
        console.print(
            f"[green]Imported {len(profiles)} profiles[/green] "
            f"at rating {config.ranking.initial_rating}"
        )

    _run_with_store(config_path, verbose, _import)


@app.command()
def play(
    session_id: Annotated[
        str | None, typer.Option("--session", "-s", help="Resume an existing session")
    ] = None,
    config_path: ConfigOption = None,
    verbose: VerboseOption = False,
) -> None:
    """Vote interactively on sampled pairs until you quit."""

    async def _play(_config: ArenaConfig, _store: ArenaStore, service: VotingService) -> int:
        session = await service.start_session(session_id)
        console.print(f"[bold]Session:[/bold] {session.session_id}")
        votes_cast = 0

        while True:
            left, right = await service.next_pair(session)
            console.print(_profile_table(left, right))
            choice = typer.prompt("Vote [l]eft, [r]ight, [d]raw, [s]kip or [q]uit").strip().lower()

            if choice.startswith("q"):
                return votes_cast
            if choice.startswith("s"):
                continue
            winners = {"l": left.id, "r": right.id, "d": None}
            if choice[:1] not in winners:
                console.print("[yellow]Unrecognized choice, showing a new pair.[/yellow]")
                continue

            result = await service.cast_vote(session, left.id, right.id, winners[choice[:1]])
            votes_cast += 1
            _print_vote_result(result)

    votes_cast = _run_with_store(config_path, verbose, _play)
    console.print(f"[bold green]Thanks for voting![/bold green] {votes_cast} votes cast.")


@app.command()
def vote(
    left_id: Annotated[str, typer.Argument(help="Left profile id")],
    right_id: Annotated[str, typer.Argument(help="Right profile id")],
    winner_id: Annotated[
        str | None, typer.Option("--winner", "-w", help="Id of the stronger profile")
    ] = None,
    draw: Annotated[bool, typer.Option("--draw", help="Record the comparison as a draw")] = False,
    session_id: Annotated[
        str | None, typer.Option("--session", "-s", help="Voter session id")
    ] = None,
    config_path: ConfigOption = None,
    verbose: VerboseOption = False,
) -> None:
    """Record a single vote between two profiles."""
    if (winner_id is None) == (not draw):
        console.print("[red]Error:[/red] pass exactly one of --winner or --draw")
        raise typer.Exit(1)

    async def _vote(_config: ArenaConfig, _store: ArenaStore, service: VotingService) -> None:
        session = await service.start_session(session_id)
        session.show_pair(left_id, right_id)
        result = await service.cast_vote(session, left_id, right_id, winner_id)
        console.print(f"[green]Vote recorded[/green] ({result.outcome.value})")
        _print_vote_result(result)

    _run_with_store(config_path, verbose, _vote)


@app.command()
def simulate(
    votes: Annotated[int, typer.Option("--votes", "-n", help="Number of votes to cast")] = 100,
    seed: Annotated[int | None, typer.Option("--seed", help="Random seed")] = None,
    config_path: ConfigOption = None,
    verbose: VerboseOption = False,
) -> None:
    """Cast synthetic votes that favour the higher rated profile."""
    if votes <= 0:
        console.print("[red]Error:[/red] --votes must be greater than 0")
        raise typer.Exit(1)

    async def _simulate(config: ArenaConfig, store: ArenaStore, _service: VotingService) -> None:
        rng = random.Random(seed if seed is not None else config.seed)  # noqa: S311
        service = VotingService(config, store.profiles, store.votes, rng=rng)
        session = await service.start_session()

        async def _one_vote(_round: int) -> VoteResult:
            left, right = await service.next_pair(session)
            roll = rng.random()
            if roll < SIMULATED_DRAW_RATE:
                winner = None
            else:
                p_left = calculate_expected_win_chance(left.elo_rating, right.elo_rating)
                winner = left.id if rng.random() < p_left else right.id
            return await service.cast_vote(session, left.id, right.id, winner)

        upsets = 0
        async for _, result in ArenaProgress(console).track_rounds(
            votes, _one_vote, description="Simulating votes"
        ):
            if result.prediction_correct is False:
                upsets += 1

        console.print(f"[bold green]Simulation complete![/bold green] Session {session.session_id}")
        console.print(f"  Votes: {votes}, upsets: {upsets}")

    _run_with_store(config_path, verbose, _simulate)


@app.command()
def leaderboard(
    query: Annotated[str, typer.Option("--query", "-q", help="Search text")] = "",
    filter_by: Annotated[
        str, typer.Option("--filter", help="all, students, alumni, or a major")
    ] = "all",
    sort: Annotated[
        Literal["elo", "name", "graduation"] | None,
        typer.Option("--sort", help="Sort order (elo/name/graduation)"),
    ] = None,
    page: Annotated[int, typer.Option("--page", min=1, help="Page number")] = 1,
    limit: Annotated[int, typer.Option("--limit", min=1, help="Profiles per page")] = 10,
    export: Annotated[
        bool, typer.Option("--export", help="Write Markdown, CSV and JSON to export_dir")
    ] = False,
    config_path: ConfigOption = None,
    verbose: VerboseOption = False,
) -> None:
    """Show profiles ranked by rating."""

    async def _leaderboard(
        _config: ArenaConfig, store: ArenaStore, service: VotingService
    ) -> None:
        rows, profile_page = await service.leaderboard(
            query=query, filter_by=filter_by, sort=sort, page=page, limit=limit
        )

        table = Table(title=f"Leaderboard (page {page}/{max(profile_page.total_pages, 1)})")
        for header in ("Rank", "Name", "Company", "Rating", "W", "L", "D"):
            table.add_column(header)
        for r in rows:
            table.add_row(
                str(r.rank),
                r.name,
                r.company or "",
                str(r.rating),
                str(r.wins),
                str(r.losses),
                str(r.draws),
            )
        console.print(table)
        console.print(f"{profile_page.total} profiles match")

        if export:
            markdown = render_leaderboard_markdown(rows)
            paths = await store.export_leaderboard(rows, markdown)
            for path in paths:
                console.print(f"  Saved {path}")

    _run_with_store(config_path, verbose, _leaderboard)


@app.command()
def history(
    session_id: Annotated[str, typer.Argument(help="Voter session id")],
    limit: Annotated[int | None, typer.Option("--limit", min=1, help="Number of votes")] = None,
    config_path: ConfigOption = None,
    verbose: VerboseOption = False,
) -> None:
    """Show a session's recent votes."""

    async def _history(_config: ArenaConfig, _store: ArenaStore, service: VotingService) -> None:
        entries = await service.history(session_id, limit)
        if not entries:
            console.print("No votes recorded for this session.")
            return
        for entry in entries:
            result = f"[green]{entry.winner_name}[/green]" if entry.winner_name else "draw"
            console.print(
                f"{entry.vote.created_at:%Y-%m-%d %H:%M}  "
                f"{entry.left_name} vs {entry.right_name}: {result}"
            )

    _run_with_store(config_path, verbose, _history)


@app.command()
def validate(
    config_path: Annotated[Path, typer.Argument(help="Path to config YAML file")],
) -> None:
    """Validate a configuration file without running."""
    try:
        config = load_config(config_path)
        console.print("[green]Configuration is valid![/green]")
        console.print(f"  Database: {config.database_path}")
        console.print(f"  Initial rating: {config.ranking.initial_rating}")
        console.print(f"  K-factor: {config.ranking.k_factor}")
        console.print(f"  Top fraction: {config.sampling.top_fraction}")
        console.print(f"  Top pick probability: {config.sampling.top_pick_probability}")
        console.print(f"  Exclusion window: {config.sampling.exclusion_window}")

    except FileNotFoundError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1) from e
    except ConfigurationError as e:
        console.print(f"[red]{e}")
        raise typer.Exit(1) from e


@app.command()
def info() -> None:
    """Show tool information and example commands."""
    console.print("[bold]Profile Arena[/bold]")
    console.print(f"Version: {__version__}\n")

    console.print("[bold]Example Commands:[/bold]")
    console.print("  # Load profiles")
    console.print("  profile-arena import-profiles profiles.yaml\n")

    console.print("  # Vote interactively")
    console.print("  profile-arena play\n")

    console.print("  # Fill the leaderboard with synthetic votes")
    console.print("  profile-arena simulate --votes 500 --seed 7\n")

    console.print("  # Top students, exported to Markdown/CSV/JSON")
    console.print("  profile-arena leaderboard --filter students --export\n")

    console.print("  # Validate config")
    console.print("  profile-arena validate config.yaml")


if __name__ == "__main__":
    app()
