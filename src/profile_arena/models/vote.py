"""Vote table: append-only log of pairwise judgments."""

import uuid
from datetime import UTC, datetime

from sqlmodel import Field, SQLModel


class Vote(SQLModel, table=True):
    """A single pairwise judgment between two profiles."""

    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)
    left_profile_id: str = Field(index=True)
    right_profile_id: str = Field(index=True)
    winner_id: str | None = None  # None for a draw
    outcome: str  # "left_wins", "right_wins" or "draw"
    voter_session_id: str = Field(index=True)
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC), index=True)
