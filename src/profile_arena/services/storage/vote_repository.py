"""Database persistence for vote records and the rating updates they cause."""

from __future__ import annotations

import asyncio
import json
import threading
from collections import defaultdict
from datetime import UTC, datetime
from typing import TYPE_CHECKING

import structlog
from sqlmodel import Session, col, select

from profile_arena.core.config import DEFAULT_K_FACTOR
from profile_arena.core.errors import InvalidPairError, ProfileNotFoundError
from profile_arena.models import Profile, ProfileStats, RecordedVote, Vote
from profile_arena.ranking import Outcome, apply_vote_outcome

from .paths import StoragePaths
from .repository import AsyncRepository

if TYPE_CHECKING:
    from sqlalchemy import Engine

logger = structlog.get_logger()


class VoteRepository(AsyncRepository):
    """Persist votes and apply their rating updates atomically."""

    def __init__(self, engine: Engine, paths: StoragePaths) -> None:
        super().__init__(engine)
        self._paths = paths
        # Serializes read-modify-write of ratings within this process
        self._write_lock = threading.Lock()

    async def record_vote(
        self,
        left_id: str,
        right_id: str,
        outcome: Outcome,
        session_id: str,
        k_factor: float = DEFAULT_K_FACTOR,
    ) -> RecordedVote:
        """Insert a vote and update both profiles' ratings in one transaction.

        The current ratings are read inside the same transaction that writes
        the new ones, so concurrent votes on the same profile cannot lose an
        update.

        Args:
            left_id: Left profile id.
            right_id: Right profile id.
            outcome: Outcome of the comparison.
            session_id: Voter session identifier.
            k_factor: Maximum adjustment per comparison.

        Returns:
            RecordedVote with the stored vote and ratings before and after.

        Raises:
            InvalidPairError: If both ids are the same.
            ProfileNotFoundError: If either profile does not exist.
        """
        if left_id == right_id:
            raise InvalidPairError(left_id)

        winner_id = {
            Outcome.LEFT_WINS: left_id,
            Outcome.RIGHT_WINS: right_id,
            Outcome.DRAW: None,
        }[outcome]

        def _save(session: Session) -> RecordedVote:
            left = session.get(Profile, left_id)
            if left is None:
                raise ProfileNotFoundError(left_id)
            right = session.get(Profile, right_id)
            if right is None:
                raise ProfileNotFoundError(right_id)

            left_before, right_before = left.elo_rating, right.elo_rating
            update = apply_vote_outcome(left_before, right_before, outcome, k_factor)

            now = datetime.now(UTC)
            vote = Vote(
                left_profile_id=left_id,
                right_profile_id=right_id,
                winner_id=winner_id,
                outcome=outcome.value,
                voter_session_id=session_id,
                created_at=now,
            )
            left.elo_rating = update.new_rating_left
            left.updated_at = now
            right.elo_rating = update.new_rating_right
            right.updated_at = now

            session.add_all([vote, left, right])

            return RecordedVote(
                vote=vote,
                rating_left_before=left_before,
                rating_right_before=right_before,
                rating_left_after=update.new_rating_left,
                rating_right_after=update.new_rating_right,
            )

        recorded = await self._run_transaction(_save, lock=self._write_lock)

        def _save_jsonl() -> None:
            data = recorded.vote.model_dump()
            data["rating_left_after"] = recorded.rating_left_after
            data["rating_right_after"] = recorded.rating_right_after
            with self._paths.votes_log_path().open("a", encoding="utf-8") as f:
                f.write(json.dumps(data, default=str) + "\n")

        await asyncio.to_thread(_save_jsonl)

        logger.info(
            "vote_recorded",
            left=left_id,
            right=right_id,
            outcome=outcome.value,
            left_delta=recorded.left_delta,
            right_delta=recorded.right_delta,
        )
        return recorded

    async def recent_for_session(self, session_id: str, limit: int = 5) -> list[Vote]:
        """Get a session's most recent votes, newest first."""

        def _get(session: Session) -> list[Vote]:
            statement = (
                select(Vote)
                .where(Vote.voter_session_id == session_id)
                .order_by(col(Vote.created_at).desc())
                .limit(limit)
            )
            return list(session.exec(statement).all())

        return await self._run_session(_get)

    async def recent(self, limit: int = 10) -> list[Vote]:
        """Get the most recent votes across all sessions, newest first."""

        def _get(session: Session) -> list[Vote]:
            statement = select(Vote).order_by(col(Vote.created_at).desc()).limit(limit)
            return list(session.exec(statement).all())

        return await self._run_session(_get)

    async def get_profile_stats(self) -> dict[str, ProfileStats]:
        """Get win/loss/draw counts for every profile that has been compared."""

        def _get(session: Session) -> dict[str, ProfileStats]:
            stats: dict[str, ProfileStats] = defaultdict(ProfileStats)
            for vote in session.exec(select(Vote)).all():
                left = stats[vote.left_profile_id]
                right = stats[vote.right_profile_id]
                if vote.outcome == Outcome.LEFT_WINS.value:
                    left.wins += 1
                    right.losses += 1
                elif vote.outcome == Outcome.RIGHT_WINS.value:
                    left.losses += 1
                    right.wins += 1
                else:
                    left.draws += 1
                    right.draws += 1
            return dict(stats)

        return await self._run_session(_get)
