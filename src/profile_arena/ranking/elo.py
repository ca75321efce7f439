"""Elo rating calculations for Profile Arena.

Pure functions only: no I/O and no shared state. Callers fetch the current
ratings, call into this module, and persist the result themselves.
"""

from __future__ import annotations

import math
from enum import Enum
from typing import NamedTuple

from profile_arena.core.config import DEFAULT_K_FACTOR, DEFAULT_RATING
from profile_arena.core.errors import InvalidOutcomeError, PairMismatchError

VALID_SCORES = frozenset({0.0, 0.5, 1.0})

# 10 ** 308 is the largest power of ten a float can hold
MAX_EXPONENT = 308.0


class Outcome(str, Enum):
    """Result of a single comparison, from the left profile's point of view."""

    LEFT_WINS = "left_wins"
    RIGHT_WINS = "right_wins"
    DRAW = "draw"

    @property
    def score_for_left(self) -> float:
        """Numeric score of the left profile (1 win, 0.5 draw, 0 loss)."""
        if self is Outcome.LEFT_WINS:
            return 1.0
        if self is Outcome.RIGHT_WINS:
            return 0.0
        return 0.5

    @classmethod
    def parse(cls, value: Outcome | str) -> Outcome:
        """Coerce a string value into an Outcome.

        Raises:
            InvalidOutcomeError: If the value is not a recognized outcome.
        """
        if isinstance(value, Outcome):
            return value
        try:
            return cls(value)
        except ValueError as e:
            raise InvalidOutcomeError(value) from e


class RatingUpdate(NamedTuple):
    """New ratings for both sides of a comparison."""

    new_rating_left: int
    new_rating_right: int


def initial_rating() -> int:
    """Default starting rating for a profile entering the pool."""
    return DEFAULT_RATING


def calculate_expected_win_chance(rating_a: float, rating_b: float) -> float:
    """Calculate expected win probability for player A against player B.

    Uses the standard Elo formula:
    E_A = 1 / (1 + 10^((R_B - R_A) / 400))

    Args:
        rating_a: Rating of player A.
        rating_b: Rating of player B.

    Returns:
        Probability that A wins (0.0 to 1.0). Rating gaps too large for a
        float saturate at 0.0 or 1.0 instead of overflowing.
    """
    exponent = min(max((rating_b - rating_a) / 400, -MAX_EXPONENT), MAX_EXPONENT)
    return 1.0 / (1.0 + 10**exponent)


def _round_half_up(value: float) -> int:
    # round() is banker's rounding; ratings round .5 upward
    return math.floor(value + 0.5)


def update_ratings(
    rating_a: float,
    rating_b: float,
    outcome_for_a: float,
    k_factor: float = DEFAULT_K_FACTOR,
) -> tuple[int, int]:
    """Update Elo ratings after a comparison.

    Each side is rounded independently, so the update is zero-sum only up to
    rounding drift of at most one point.

    Args:
        rating_a: Current rating of A.
        rating_b: Current rating of B.
        outcome_for_a: 1 if A won, 0 if A lost, 0.5 for a draw.
        k_factor: Maximum adjustment per comparison.

    Returns:
        Tuple of (new_rating_a, new_rating_b).

    Raises:
        InvalidOutcomeError: If outcome_for_a is not 0, 0.5 or 1.
    """
    if outcome_for_a not in VALID_SCORES:
        raise InvalidOutcomeError(outcome_for_a)

    expected_a = calculate_expected_win_chance(rating_a, rating_b)
    expected_b = calculate_expected_win_chance(rating_b, rating_a)

    new_rating_a = _round_half_up(rating_a + k_factor * (outcome_for_a - expected_a))
    new_rating_b = _round_half_up(rating_b + k_factor * ((1 - outcome_for_a) - expected_b))

    return new_rating_a, new_rating_b


def apply_vote_outcome(
    rating_left: float,
    rating_right: float,
    outcome: Outcome | str,
    k_factor: float = DEFAULT_K_FACTOR,
) -> RatingUpdate:
    """Compute the persisted rating update for a vote.

    The voter's literal choice is the outcome, regardless of which side had
    the higher prior rating.

    Args:
        rating_left: Current rating of the left profile.
        rating_right: Current rating of the right profile.
        outcome: Outcome of the vote.
        k_factor: Maximum adjustment per comparison.

    Returns:
        RatingUpdate with the new left and right ratings.

    Raises:
        InvalidOutcomeError: If outcome is not a recognized Outcome.
    """
    parsed = Outcome.parse(outcome)
    new_left, new_right = update_ratings(
        rating_left, rating_right, parsed.score_for_left, k_factor=k_factor
    )
    return RatingUpdate(new_left, new_right)


def score_prediction_accuracy(
    rating_left: float,
    rating_right: float,
    outcome: Outcome | str,
) -> bool | None:
    """Whether the voter picked the side with the higher prior rating.

    Feedback for the voter only; it never feeds into the stored ratings.

    Returns:
        True if the chosen side's prior rating was strictly higher, False if
        it was not, None for a draw.

    Raises:
        InvalidOutcomeError: If outcome is not a recognized Outcome.
    """
    parsed = Outcome.parse(outcome)
    if parsed is Outcome.DRAW:
        return None
    if parsed is Outcome.LEFT_WINS:
        return rating_left > rating_right
    return rating_right > rating_left


def outcome_from_winner(left_id: str, right_id: str, winner_id: str | None) -> Outcome:
    """Convert a nullable winner id into an Outcome.

    Args:
        left_id: Id of the left profile.
        right_id: Id of the right profile.
        winner_id: Id of the chosen profile, or None for a draw.

    Returns:
        The corresponding Outcome.

    Raises:
        PairMismatchError: If winner_id is neither side of the pair.
    """
    if winner_id is None:
        return Outcome.DRAW
    if winner_id == left_id:
        return Outcome.LEFT_WINS
    if winner_id == right_id:
        return Outcome.RIGHT_WINS
    raise PairMismatchError((left_id, right_id, winner_id), (left_id, right_id))
