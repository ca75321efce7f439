"""Plain result records passed between storage and services."""

from __future__ import annotations

import math
from dataclasses import dataclass, field

from .profile import Profile
from .vote import Vote


@dataclass(frozen=True)
class RecordedVote:
    """A persisted vote with the ratings before and after it was applied."""

    vote: Vote
    rating_left_before: int
    rating_right_before: int
    rating_left_after: int
    rating_right_after: int

    @property
    def left_delta(self) -> int:
        return self.rating_left_after - self.rating_left_before

    @property
    def right_delta(self) -> int:
        return self.rating_right_after - self.rating_right_before


@dataclass
class ProfileStats:
    """Comparison counts for one profile."""

    wins: int = 0
    losses: int = 0
    draws: int = 0

    @property
    def matches(self) -> int:
        return self.wins + self.losses + self.draws


@dataclass
class ProfilePage:
    """One page of a filtered, sorted profile listing."""

    profiles: list[Profile] = field(default_factory=list)
    total: int = 0
    page: int = 1
    limit: int = 10

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.limit) if self.limit else 0
