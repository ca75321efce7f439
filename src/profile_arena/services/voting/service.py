"""Voting service: sample a pair, accept a vote, update ratings, repeat."""

from __future__ import annotations

import random
import uuid
from collections.abc import Sequence
from dataclasses import dataclass

import structlog

from profile_arena.core.config import ArenaConfig
from profile_arena.core.errors import ProfileNotFoundError, SessionStateError
from profile_arena.models import Profile, ProfilePage, RecordedVote, Vote
from profile_arena.ranking import Outcome, score_prediction_accuracy
from profile_arena.services.reporting import LeaderboardRow, build_leaderboard_rows

from .base import ProfileSource, VoteLog
from .sampler import MIN_PAIR_SIZE, Candidate, sample_pair
from .session import ExclusionWindow, SessionState, VotingSession

logger = structlog.get_logger()


@dataclass(frozen=True)
class VoteResult:
    """Outcome of a cast vote.

    Attributes:
        recorded: Persisted vote with ratings before and after.
        outcome: Outcome that was applied.
        prediction_correct: Whether the voter sided with the higher prior
            rating (None for a draw). Display only, never stored.
    """

    recorded: RecordedVote
    outcome: Outcome
    prediction_correct: bool | None


@dataclass(frozen=True)
class HistoryEntry:
    """A past vote with the profile names resolved for display."""

    vote: Vote
    left_name: str
    right_name: str
    winner_name: str | None


class VotingService:
    """Orchestrates pair sampling, vote validation, rating updates and history.

    Storage is injected; the service keeps no state beyond its random source.
    """

    def __init__(
        self,
        config: ArenaConfig,
        profiles: ProfileSource,
        votes: VoteLog,
        rng: random.Random | None = None,
    ) -> None:
        """Initialize voting service.

        Args:
            config: Arena configuration.
            profiles: Profile storage.
            votes: Vote storage, also responsible for persisting ratings.
            rng: Random source for sampling (seeded from config if None).
        """
        self.config = config
        self.profiles = profiles
        self.votes = votes
        self.rng = rng or random.Random(config.seed)  # noqa: S311

    async def start_session(self, session_id: str | None = None) -> VotingSession:
        """Open a voting session, rebuilding its exclusion window from history.

        Args:
            session_id: Existing session id, or None to start a new one.

        Returns:
            A VotingSession in the idle state.
        """
        if session_id is None:
            session_id = str(uuid.uuid4())
            window = ExclusionWindow(self.config.sampling.exclusion_window)
        else:
            recent = await self.votes.recent_for_session(
                session_id, limit=max(self.config.sampling.exclusion_window, 1)
            )
            window = ExclusionWindow.from_votes(recent, self.config.sampling.exclusion_window)

        logger.info("session_started", session=session_id, excluded=len(window.ids))
        return VotingSession(session_id=session_id, window=window)

    async def _load_pool(self, exclude_ids: Sequence[str]) -> list[Candidate]:
        """Get the candidates to sample from.

        With a pool limit, a random subset of profiles outside exclude_ids is
        used. It is topped up with excluded profiles only when fewer than two
        others exist.
        """
        limit = self.config.sampling.pool_limit
        if limit is None:
            return await self.profiles.get_pool()
        sampled = await self.profiles.random_sample(exclude_ids, limit)
        if len(sampled) < MIN_PAIR_SIZE:
            taken = [p.id for p in sampled]
            sampled += await self.profiles.random_sample(taken, limit - len(sampled))
        return [Candidate(id=p.id, rating=p.elo_rating) for p in sampled]

    async def next_pair(self, session: VotingSession) -> tuple[Profile, Profile]:
        """Sample and show the next pair for a session.

        Raises:
            SessionStateError: If the session is mid-vote.
            InsufficientPoolError: If fewer than two profiles exist.
        """
        if session.state not in (SessionState.IDLE, SessionState.PAIR_SHOWN):
            raise SessionStateError("show a new pair", session.state.value)

        excluded = session.window.ids
        pool = await self._load_pool(excluded)
        left, right = sample_pair(pool, excluded, self.config.sampling, self.rng)

        found = await self.profiles.get_many([left.id, right.id])
        for candidate in (left, right):
            if candidate.id not in found:
                raise ProfileNotFoundError(candidate.id)

        session.show_pair(left.id, right.id)
        logger.info(
            "pair_shown",
            session=session.session_id,
            left=left.id,
            right=right.id,
            pool_size=len(pool),
        )
        return found[left.id], found[right.id]

    async def cast_vote(
        self,
        session: VotingSession,
        left_id: str,
        right_id: str,
        winner_id: str | None,
    ) -> VoteResult:
        """Apply a vote for the pair currently shown to the session.

        The vote is stored in the order the pair was shown, whichever order
        left_id and right_id arrive in.

        Args:
            session: Session the pair was shown in.
            left_id: Left profile id.
            right_id: Right profile id.
            winner_id: Chosen profile id, or None for a draw.

        Returns:
            VoteResult with the stored vote, rating changes and prediction flag.

        Raises:
            PairMismatchError: If the vote does not match the shown pair.
            SessionStateError: If no pair is awaiting a vote.
        """
        outcome = session.resolve_vote(left_id, right_id, winner_id)
        shown_left, shown_right = session.current_pair
        try:
            recorded = await self.votes.record_vote(
                shown_left,
                shown_right,
                outcome,
                session.session_id,
                k_factor=self.config.ranking.k_factor,
            )
        except Exception:
            session.cancel_vote()
            raise
        session.mark_ratings_updated()

        prediction_correct = score_prediction_accuracy(
            recorded.rating_left_before, recorded.rating_right_before, outcome
        )
        session.advance()

        logger.debug(
            "vote_applied",
            session=session.session_id,
            outcome=outcome.value,
            prediction_correct=prediction_correct,
        )
        return VoteResult(
            recorded=recorded, outcome=outcome, prediction_correct=prediction_correct
        )

    async def leaderboard(
        self,
        query: str = "",
        filter_by: str = "all",
        sort: str | None = None,
        page: int = 1,
        limit: int = 10,
    ) -> tuple[list[LeaderboardRow], ProfilePage]:
        """Get a page of ranked profiles with their vote records.

        Returns:
            Tuple of (rows, page) where page carries the total count.
        """
        profile_page = await self.profiles.list_profiles(
            query=query,
            filter_by=filter_by,
            sort=sort or self.config.default_sort,
            page=page,
            limit=limit,
        )
        stats = await self.votes.get_profile_stats()
        rows = build_leaderboard_rows(
            profile_page.profiles, stats, start_rank=(page - 1) * limit + 1
        )
        return rows, profile_page

    async def history(self, session_id: str, limit: int | None = None) -> list[HistoryEntry]:
        """Get a session's recent votes with profile names attached."""
        votes = await self.votes.recent_for_session(
            session_id, limit=limit or self.config.history_limit
        )
        ids = sorted({pid for v in votes for pid in (v.left_profile_id, v.right_profile_id)})
        names = {pid: p.full_name for pid, p in (await self.profiles.get_many(ids)).items()}

        entries = []
        for v in votes:
            entries.append(
                HistoryEntry(
                    vote=v,
                    left_name=names.get(v.left_profile_id, "Unknown"),
                    right_name=names.get(v.right_profile_id, "Unknown"),
                    winner_name=names.get(v.winner_id, "Unknown") if v.winner_id else None,
                )
            )
        return entries
