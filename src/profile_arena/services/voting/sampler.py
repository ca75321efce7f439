"""Stratified pair sampling for Profile Arena."""

from __future__ import annotations

import random
from collections.abc import Iterable, Sequence
from dataclasses import dataclass

import structlog

from profile_arena.core.config import DEFAULT_RATING, SamplingConfig, calculate_top_size
from profile_arena.core.errors import InsufficientPoolError

logger = structlog.get_logger()

MIN_PAIR_SIZE = 2


@dataclass(frozen=True)
class Candidate:
    """A profile eligible for sampling.

    Attributes:
        id: Profile identifier.
        rating: Current Elo rating.
    """

    id: str
    rating: float = DEFAULT_RATING


def _dedupe(pool: Iterable[Candidate]) -> list[Candidate]:
    seen: set[str] = set()
    unique: list[Candidate] = []
    for candidate in pool:
        if candidate.id not in seen:
            seen.add(candidate.id)
            unique.append(candidate)
    return unique


def partition_pool(
    pool: Sequence[Candidate], top_fraction: float
) -> tuple[list[Candidate], list[Candidate]]:
    """Split a pool into the top stratum and the remainder.

    The top stratum is the first ceil(top_fraction * len(pool)) candidates by
    descending rating. Ties keep their pool order.

    Args:
        pool: Candidates with distinct ids.
        top_fraction: Fraction of the pool that forms the top stratum.

    Returns:
        Tuple of (top_stratum, remainder).
    """
    ranked = sorted(pool, key=lambda c: c.rating, reverse=True)
    top_size = calculate_top_size(len(ranked), top_fraction)
    return ranked[:top_size], ranked[top_size:]


def sample_pair(
    pool: Sequence[Candidate],
    exclude_ids: Iterable[str] = (),
    config: SamplingConfig | None = None,
    rng: random.Random | None = None,
) -> tuple[Candidate, Candidate]:
    """Select two distinct candidates for the next comparison.

    Each slot draws from the top stratum with probability
    ``config.top_pick_probability`` and from the remainder otherwise, which
    shows highly rated profiles more often than uniform sampling would.

    Exclusion is best-effort. For each draw the candidate lists are tried in
    this order, skipping any that are empty:

    1. preferred stratum without excluded ids
    2. other stratum without excluded ids
    3. preferred stratum including excluded ids
    4. other stratum including excluded ids

    The first drawn candidate is never eligible for the second draw.

    Args:
        pool: All candidates with their current ratings.
        exclude_ids: Ids to avoid when other choices exist.
        config: Sampling configuration (defaults apply if None).
        rng: Random source, for reproducible draws.

    Returns:
        Tuple of (candidate_a, candidate_b) with distinct ids.

    Raises:
        InsufficientPoolError: If the pool holds fewer than two distinct ids.
    """
    config = config or SamplingConfig()
    rng = rng or random.Random()  # noqa: S311

    unique_pool = _dedupe(pool)
    if len(unique_pool) < MIN_PAIR_SIZE:
        raise InsufficientPoolError(len(unique_pool))

    excluded = set(exclude_ids)
    top, remainder = partition_pool(unique_pool, config.top_fraction)

    first = _draw(top, remainder, excluded, set(), config.top_pick_probability, rng)
    second = (
        _draw(top, remainder, excluded, {first.id}, config.top_pick_probability, rng)
        if first is not None
        else None
    )

    if first is None or second is None:
        logger.warning("sampling_uniform_fallback", pool_size=len(unique_pool))
        first, second = rng.sample(unique_pool, MIN_PAIR_SIZE)

    if first.id in excluded or second.id in excluded:
        logger.warning(
            "exclusion_window_ignored",
            pool_size=len(unique_pool),
            excluded=len(excluded),
        )

    return first, second


def _draw(
    top: list[Candidate],
    remainder: list[Candidate],
    excluded: set[str],
    taken: set[str],
    top_pick_probability: float,
    rng: random.Random,
) -> Candidate | None:
    """Draw one candidate, preferring a stratum and honoring exclusions if possible."""
    use_top = rng.random() < top_pick_probability
    preferred, other = (top, remainder) if use_top else (remainder, top)

    blocked = excluded | taken
    tiers = (
        [c for c in preferred if c.id not in blocked],
        [c for c in other if c.id not in blocked],
        [c for c in preferred if c.id not in taken],
        [c for c in other if c.id not in taken],
    )
    for tier, candidates in enumerate(tiers):
        if candidates:
            choice = rng.choice(candidates)
            logger.debug(
                "sampled_candidate",
                id=choice.id,
                stratum="top" if (tier % 2 == 0) == use_top else "remainder",
                tier=tier,
            )
            return choice
    return None
