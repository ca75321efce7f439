"""Ranking module for Profile Arena.

Provides the pure Elo update rule and the tagged comparison outcome.
"""

from profile_arena.ranking.elo import (
    Outcome,
    RatingUpdate,
    apply_vote_outcome,
    calculate_expected_win_chance,
    initial_rating,
    outcome_from_winner,
    score_prediction_accuracy,
    update_ratings,
)

__all__ = [
    "Outcome",
    "RatingUpdate",
    "apply_vote_outcome",
    "calculate_expected_win_chance",
    "initial_rating",
    "outcome_from_winner",
    "score_prediction_accuracy",
    "update_ratings",
]
