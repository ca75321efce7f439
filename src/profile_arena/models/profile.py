"""Profile table: the entity being rated."""

import uuid
from datetime import UTC, datetime

from sqlmodel import Field, SQLModel

from profile_arena.core.config import DEFAULT_RATING


class Profile(SQLModel, table=True):
    """A person profile that takes part in pairwise comparisons."""

    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)
    full_name: str = Field(index=True)
    headline: str | None = None
    title: str | None = None
    company: str | None = None
    major: str | None = None
    graduation_year: int | None = None
    is_student: bool = False
    location: str | None = None
    linkedin_url: str | None = None
    elo_rating: int = DEFAULT_RATING
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
