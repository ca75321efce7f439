"""Report generation services for Profile Arena."""

from __future__ import annotations

from collections.abc import Mapping, Sequence

from pydantic import BaseModel
from tabulate import tabulate

from profile_arena.models import Profile, ProfileStats


class LeaderboardRow(BaseModel):
    """One ranked profile with its comparison record."""

    rank: int
    profile_id: str
    name: str
    rating: int
    matches: int = 0
    wins: int = 0
    losses: int = 0
    draws: int = 0
    title: str | None = None
    company: str | None = None


def build_leaderboard_rows(
    profiles: Sequence[Profile],
    stats: Mapping[str, ProfileStats],
    start_rank: int = 1,
) -> list[LeaderboardRow]:
    """Convert ranked profiles and their vote counts to leaderboard rows.

    Args:
        profiles: Profiles in display order.
        stats: Vote counts keyed by profile id; missing ids count as unplayed.
        start_rank: Rank of the first profile (for paginated listings).

    Returns:
        List of LeaderboardRow objects.
    """
    rows = []
    for rank, profile in enumerate(profiles, start_rank):
        s = stats.get(profile.id, ProfileStats())
        rows.append(
            LeaderboardRow(
                rank=rank,
                profile_id=profile.id,
                name=profile.full_name,
                rating=profile.elo_rating,
                matches=s.matches,
                wins=s.wins,
                losses=s.losses,
                draws=s.draws,
                title=profile.title,
                company=profile.company,
            )
        )
    return rows


def render_leaderboard_markdown(
    rows: Sequence[LeaderboardRow],
    title: str = "Leaderboard",
    description: str | None = None,
) -> str:
    """Render leaderboard rows as a Markdown report.

    Args:
        rows: Leaderboard rows in rank order.
        title: Report title (markdown heading).
        description: Optional description line below title.

    Returns:
        Markdown report content.
    """
    table = [
        (
            r.rank,
            r.name,
            r.title or "",
            r.company or "",
            r.rating,
            r.matches,
            r.wins,
            r.losses,
            r.draws,
        )
        for r in rows
    ]
    headers = ("Rank", "Name", "Title", "Company", "Rating", "Matches", "Wins", "Losses", "Draws")

    lines = [f"# {title}", ""]
    if description:
        lines.extend([description, ""])
    lines.append(tabulate(table, headers=headers, tablefmt="github"))

    return "\n".join(lines)
