"""Per-voter session state for the compare-and-vote loop."""

from __future__ import annotations

from collections import deque
from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum

from profile_arena.core.errors import InvalidPairError, PairMismatchError, SessionStateError
from profile_arena.models import Vote
from profile_arena.ranking import Outcome, outcome_from_winner

DEFAULT_WINDOW_SIZE = 3


class SessionState(str, Enum):
    """Lifecycle of one comparison within a session."""

    IDLE = "idle"
    PAIR_SHOWN = "pair_shown"
    VOTE_SUBMITTED = "vote_submitted"
    RATINGS_UPDATED = "ratings_updated"


class ExclusionWindow:
    """Profiles from the most recent comparisons, avoided when sampling."""

    def __init__(self, size: int = DEFAULT_WINDOW_SIZE) -> None:
        self.size = size
        self._pairs: deque[tuple[str, str]] = deque(maxlen=size)

    @classmethod
    def from_votes(cls, votes: Iterable[Vote], size: int = DEFAULT_WINDOW_SIZE) -> ExclusionWindow:
        """Rebuild a window from stored votes ordered newest first."""
        window = cls(size)
        recent = list(votes)[:size]
        for vote in reversed(recent):
            window.push(vote.left_profile_id, vote.right_profile_id)
        return window

    def push(self, left_id: str, right_id: str) -> None:
        """Record a completed comparison, evicting the oldest beyond size."""
        if self.size > 0:
            self._pairs.appendleft((left_id, right_id))

    @property
    def pairs(self) -> list[tuple[str, str]]:
        """Recorded pairs, most recent first."""
        return list(self._pairs)

    @property
    def ids(self) -> list[str]:
        """Profile ids in the window, most recent first, without duplicates."""
        ordered: list[str] = []
        for left_id, right_id in self._pairs:
            for profile_id in (left_id, right_id):
                if profile_id not in ordered:
                    ordered.append(profile_id)
        return ordered

    def __len__(self) -> int:
        return len(self._pairs)


@dataclass
class VotingSession:
    """State machine for a single voter.

    idle -> pair_shown -> vote_submitted -> ratings_updated -> idle.
    A shown pair may be replaced by a new one before voting (skip).

    Attributes:
        session_id: Opaque voter session identifier.
        window: Recently compared profiles for this voter.
        state: Current lifecycle state.
        current_pair: (left_id, right_id) shown to the voter, if any.
        pending_outcome: Outcome of the submitted vote awaiting rating update.
    """

    session_id: str
    window: ExclusionWindow = field(default_factory=ExclusionWindow)
    state: SessionState = SessionState.IDLE
    current_pair: tuple[str, str] | None = None
    pending_outcome: Outcome | None = None

    def show_pair(self, left_id: str, right_id: str) -> None:
        """Present a new pair to the voter."""
        if self.state not in (SessionState.IDLE, SessionState.PAIR_SHOWN):
            raise SessionStateError("show a new pair", self.state.value)
        if left_id == right_id:
            raise InvalidPairError(left_id)
        self.current_pair = (left_id, right_id)
        self.state = SessionState.PAIR_SHOWN

    def resolve_vote(self, left_id: str, right_id: str, winner_id: str | None) -> Outcome:
        """Validate a vote against the shown pair and record its outcome.

        Left and right are presentational: the submitted ids may come in
        either order. The outcome is always relative to the shown pair.

        Args:
            left_id: Left profile id as submitted by the voter.
            right_id: Right profile id as submitted by the voter.
            winner_id: Chosen profile id, or None for a draw.

        Returns:
            The Outcome of the vote for ``current_pair``.

        Raises:
            SessionStateError: If no pair is awaiting a vote.
            PairMismatchError: If the vote does not reference the shown pair.
        """
        if self.state is not SessionState.PAIR_SHOWN or self.current_pair is None:
            raise SessionStateError("submit a vote", self.state.value)
        if {left_id, right_id} != set(self.current_pair):
            raise PairMismatchError((left_id, right_id, winner_id), self.current_pair)

        outcome = outcome_from_winner(*self.current_pair, winner_id)
        self.pending_outcome = outcome
        self.state = SessionState.VOTE_SUBMITTED
        return outcome

    def cancel_vote(self) -> None:
        """Return a submitted vote that could not be applied to pair_shown."""
        if self.state is not SessionState.VOTE_SUBMITTED:
            raise SessionStateError("cancel a vote", self.state.value)
        self.pending_outcome = None
        self.state = SessionState.PAIR_SHOWN

    def mark_ratings_updated(self) -> None:
        """Note that the submitted vote has been applied to the ratings."""
        if self.state is not SessionState.VOTE_SUBMITTED:
            raise SessionStateError("apply ratings", self.state.value)
        self.state = SessionState.RATINGS_UPDATED

    def advance(self) -> None:
        """Move the finished pair into the exclusion window and return to idle."""
        if self.state is not SessionState.RATINGS_UPDATED or self.current_pair is None:
            raise SessionStateError("advance", self.state.value)
        self.window.push(*self.current_pair)
        self.current_pair = None
        self.pending_outcome = None
        self.state = SessionState.IDLE
