"""Progress tracking utilities for long-running arena operations."""

from __future__ import annotations

from collections.abc import AsyncIterator, Awaitable, Callable
from typing import Any

from rich.console import Console
from rich.progress import (
    BarColumn,
    Progress,
    SpinnerColumn,
    TaskProgressColumn,
    TextColumn,
)


class ArenaProgress:
    """Progress tracking for batch operations.

    Used for simulated voting rounds.
    """

    def __init__(self, console: Console | None = None) -> None:
        """Initialize progress tracker.

        Args:
            console: Optional console instance. If None, creates a new one.
        """
        self.console = console or Console()

    async def track_rounds(
        self,
        rounds: int,
        round_func: Callable[[int], Awaitable[Any]],
        description: str = "Running rounds",
    ) -> AsyncIterator[tuple[int, Any]]:
        """Track progress for multiple rounds.

        Args:
            rounds: Number of rounds to process.
            round_func: Async function to call for each round.
            description: Description of the operation.

        Yields:
            Tuples of (round number, result) as each completes.
        """
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            TaskProgressColumn(),
            console=self.console,
        ) as progress:
            task = progress.add_task(f"[green]{description}...", total=rounds)

            for round_num in range(1, rounds + 1):
                result = await round_func(round_num)
                desc = f"[green]{description}: {round_num}/{rounds}"
                progress.update(task, advance=1, description=desc)
                yield round_num, result
