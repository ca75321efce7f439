"""Database persistence for profile records."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import TYPE_CHECKING, Any, Literal

import structlog
from sqlalchemy import func, or_
from sqlmodel import Session, col, select

from profile_arena.core.config import DEFAULT_RATING
from profile_arena.models import Profile, ProfilePage
from profile_arena.services.voting.sampler import Candidate

from .repository import AsyncRepository

if TYPE_CHECKING:
    from sqlalchemy import Engine
    from sqlalchemy.sql.elements import ColumnElement

logger = structlog.get_logger()

SortKey = Literal["elo", "name", "graduation"]

PROFILE_FIELDS = (
    "full_name",
    "headline",
    "title",
    "company",
    "major",
    "graduation_year",
    "is_student",
    "location",
    "linkedin_url",
)


def _profile_conditions(query: str, filter_by: str) -> list[ColumnElement[bool]]:
    """Build WHERE conditions for a search query and category filter.

    filter_by is "all", "students", "alumni", or a major to match.
    """
    conditions: list[ColumnElement[bool]] = []
    if query:
        pattern = f"%{query}%"
        conditions.append(
            or_(
                col(Profile.full_name).ilike(pattern),
                col(Profile.title).ilike(pattern),
                col(Profile.company).ilike(pattern),
                col(Profile.major).ilike(pattern),
            )
        )
    if filter_by == "students":
        conditions.append(col(Profile.is_student).is_(True))
    elif filter_by == "alumni":
        conditions.append(col(Profile.is_student).is_(False))
    elif filter_by != "all":
        conditions.append(col(Profile.major).ilike(f"%{filter_by}%"))
    return conditions


def _sort_columns(sort: SortKey) -> list[Any]:
    if sort == "name":
        return [col(Profile.full_name).asc(), col(Profile.id).asc()]
    if sort == "graduation":
        return [col(Profile.graduation_year).asc(), col(Profile.id).asc()]
    return [col(Profile.elo_rating).desc(), col(Profile.full_name).asc(), col(Profile.id).asc()]


class ProfileRepository(AsyncRepository):
    """Persist and query profile records."""

    def __init__(self, engine: Engine, initial_rating: int = DEFAULT_RATING) -> None:
        super().__init__(engine)
        self.initial_rating = initial_rating

    async def get(self, profile_id: str) -> Profile | None:
        """Get a profile by id."""

        def _get(session: Session) -> Profile | None:
            return session.get(Profile, profile_id)

        return await self._run_session(_get)

    async def get_many(self, profile_ids: Sequence[str]) -> dict[str, Profile]:
        """Get several profiles keyed by id. Missing ids are omitted."""
        if not profile_ids:
            return {}

        def _get(session: Session) -> dict[str, Profile]:
            statement = select(Profile).where(col(Profile.id).in_(list(profile_ids)))
            return {p.id: p for p in session.exec(statement).all()}

        return await self._run_session(_get)

    async def create_profile(self, profile_data: dict[str, Any]) -> Profile:
        """Create a profile, admitting it to the pool at the initial rating."""
        profiles = await self.import_profiles([profile_data])
        return profiles[0]

    async def import_profiles(self, records: Iterable[dict[str, Any]]) -> list[Profile]:
        """Insert profiles from raw records.

        Unknown keys are ignored. Every new profile starts at the initial
        rating; a supplied rating is not accepted.
        """
        rows = [
            {key: value for key, value in record.items() if key in PROFILE_FIELDS}
            | ({"id": str(record["id"])} if record.get("id") else {})
            for record in records
        ]

        def _save(session: Session) -> list[Profile]:
            profiles = [
                Profile.model_validate({**row, "elo_rating": self.initial_rating})
                for row in rows
            ]
            session.add_all(profiles)
            return profiles

        profiles = await self._run_transaction(_save)
        logger.info("profiles_imported", count=len(profiles))
        return profiles

    async def list_profiles(
        self,
        query: str = "",
        filter_by: str = "all",
        sort: SortKey = "elo",
        page: int = 1,
        limit: int = 10,
    ) -> ProfilePage:
        """List profiles with search, category filter, sorting and pagination.

        Args:
            query: Case-insensitive substring matched against name, title,
                company and major.
            filter_by: "all", "students", "alumni", or a major.
            sort: "elo" (highest first), "name" or "graduation".
            page: 1-based page number.
            limit: Page size.

        Returns:
            ProfilePage with the matching profiles and the total count.
        """
        if page < 1 or limit < 1:
            msg = "page and limit must be positive"
            raise ValueError(msg)

        conditions = _profile_conditions(query, filter_by)

        def _list(session: Session) -> ProfilePage:
            count_statement = select(func.count()).select_from(Profile)
            statement = select(Profile)
            if conditions:
                count_statement = count_statement.where(*conditions)
                statement = statement.where(*conditions)
            total = session.exec(count_statement).one()

            statement = (
                statement.order_by(*_sort_columns(sort))
                .offset((page - 1) * limit)
                .limit(limit)
            )
            profiles = list(session.exec(statement).all())
            return ProfilePage(profiles=profiles, total=total, page=page, limit=limit)

        return await self._run_session(_list)

    async def get_pool(self) -> list[Candidate]:
        """Get every profile as an (id, rating) candidate."""

        def _get(session: Session) -> list[Candidate]:
            statement = select(Profile.id, Profile.elo_rating)
            return [Candidate(id=pid, rating=rating) for pid, rating in session.exec(statement)]

        return await self._run_session(_get)

    async def random_sample(self, exclude_ids: Iterable[str] = (), n: int = 2) -> list[Profile]:
        """Get up to n random profiles whose ids are not in exclude_ids."""
        excluded = list(exclude_ids)

        def _get(session: Session) -> list[Profile]:
            statement = select(Profile)
            if excluded:
                statement = statement.where(col(Profile.id).not_in(excluded))
            statement = statement.order_by(func.random()).limit(n)
            return list(session.exec(statement).all())

        return await self._run_session(_get)

    async def count(self) -> int:
        """Count all profiles."""

        def _count(session: Session) -> int:
            return session.exec(select(func.count()).select_from(Profile)).one()

        return await self._run_session(_count)
