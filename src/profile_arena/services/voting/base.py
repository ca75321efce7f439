"""Storage protocols the voting service depends on."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import Protocol, runtime_checkable

from profile_arena.models import Profile, ProfilePage, ProfileStats, RecordedVote, Vote
from profile_arena.ranking import Outcome

from .sampler import Candidate


@runtime_checkable
class ProfileSource(Protocol):
    """Read access to profiles and the rating pool."""

    async def get_pool(self) -> list[Candidate]:
        """Get every profile as an (id, rating) candidate."""
        ...

    async def random_sample(self, exclude_ids: Iterable[str] = (), n: int = 2) -> list[Profile]:
        """Get up to n random profiles whose ids are not in exclude_ids."""
        ...

    async def get_many(self, profile_ids: Sequence[str]) -> dict[str, Profile]:
        """Get several profiles keyed by id."""
        ...

    async def list_profiles(
        self,
        query: str = "",
        filter_by: str = "all",
        sort: str = "elo",
        page: int = 1,
        limit: int = 10,
    ) -> ProfilePage:
        """List profiles with search, filter, sorting and pagination."""
        ...


@runtime_checkable
class VoteLog(Protocol):
    """Append-only vote history that also owns rating persistence.

    record_vote must read the current ratings and write the new ones
    atomically with respect to other votes touching the same profiles.
    """

    async def record_vote(
        self,
        left_id: str,
        right_id: str,
        outcome: Outcome,
        session_id: str,
        k_factor: float = ...,
    ) -> RecordedVote:
        """Insert a vote and apply its rating update."""
        ...

    async def recent_for_session(self, session_id: str, limit: int = 5) -> list[Vote]:
        """Get a session's most recent votes, newest first."""
        ...

    async def get_profile_stats(self) -> dict[str, ProfileStats]:
        """Get win/loss/draw counts per profile."""
        ...
