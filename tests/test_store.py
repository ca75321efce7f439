"""Tests for DuckDB-backed profile and vote storage."""

import asyncio
import json

import pytest

from profile_arena.core.config import ArenaConfig
from profile_arena.core.errors import InvalidPairError, ProfileNotFoundError
from profile_arena.ranking import Outcome, update_ratings
from profile_arena.services.reporting import build_leaderboard_rows, render_leaderboard_markdown
from profile_arena.services.storage import ArenaStore

PROFILES = [
    {
        "id": "ada",
        "full_name": "Ada Park",
        "title": "Software Engineer",
        "company": "Stripe",
        "major": "Computer Science",
        "graduation_year": 2022,
    },
    {
        "id": "marcus",
        "full_name": "Marcus Lee",
        "title": "Product Manager",
        "company": "Notion",
        "major": "Economics",
        "graduation_year": 2021,
    },
    {
        "id": "priya",
        "full_name": "Priya Raman",
        "major": "Biology",
        "graduation_year": 2026,
        "is_student": True,
    },
    {
        "id": "sofia",
        "full_name": "Sofia Alvarez",
        "major": "Mechanical Engineering",
        "graduation_year": 2025,
        "is_student": True,
    },
]


@pytest.fixture
async def store(tmp_path):
    config = ArenaConfig(
        database_path=str(tmp_path / "arena.duckdb"),
        export_dir=str(tmp_path / "exports"),
    )
    arena_store = ArenaStore(config)
    await arena_store.profiles.import_profiles(PROFILES)
    yield arena_store
    await arena_store.close()


class TestProfileRepository:
    """Tests for ProfileRepository."""

    async def test_import_uses_initial_rating(self, tmp_path):
        """Test imported profiles start at the configured rating, ignoring supplied ones."""
        config = ArenaConfig.model_validate(
            {
                "database_path": str(tmp_path / "arena.duckdb"),
                "export_dir": str(tmp_path / "exports"),
                "ranking": {"initial_rating": 1200},
            }
        )
        arena_store = ArenaStore(config)
        try:
            profiles = await arena_store.profiles.import_profiles(
                [{"full_name": "New Person", "elo_rating": 2400, "unknown": "ignored"}]
            )
            assert profiles[0].elo_rating == 1200
            assert profiles[0].id
        finally:
            await arena_store.close()

    async def test_supplied_ids_kept(self, store):
        """Test supplied ids are used as primary keys."""
        profile = await store.profiles.get("ada")
        assert profile is not None
        assert profile.full_name == "Ada Park"
        assert profile.elo_rating == 1500

    async def test_get_many_omits_missing(self, store):
        """Test unknown ids are left out of get_many."""
        found = await store.profiles.get_many(["ada", "nobody"])
        assert set(found) == {"ada"}

    async def test_count_and_pool(self, store):
        """Test the pool lists every profile with its rating."""
        assert await store.profiles.count() == 4
        pool = await store.profiles.get_pool()
        assert {c.id for c in pool} == {"ada", "marcus", "priya", "sofia"}
        assert all(c.rating == 1500 for c in pool)

    async def test_random_sample_excludes(self, store):
        """Test random_sample never returns excluded ids."""
        sample = await store.profiles.random_sample(["ada", "marcus"], n=5)
        assert {p.id for p in sample} == {"priya", "sofia"}

    async def test_filter_students(self, store):
        """Test the students and alumni filters."""
        students = await store.profiles.list_profiles(filter_by="students", sort="name")
        assert [p.id for p in students.profiles] == ["priya", "sofia"]
        alumni = await store.profiles.list_profiles(filter_by="alumni", sort="name")
        assert [p.id for p in alumni.profiles] == ["ada", "marcus"]

    async def test_filter_by_major(self, store):
        """Test any other filter matches the major."""
        page = await store.profiles.list_profiles(filter_by="economics")
        assert [p.id for p in page.profiles] == ["marcus"]

    async def test_search_is_case_insensitive(self, store):
        """Test the query matches name, title, company and major."""
        page = await store.profiles.list_profiles(query="stripe")
        assert [p.id for p in page.profiles] == ["ada"]
        page = await store.profiles.list_profiles(query="ENGINEER")
        assert {p.id for p in page.profiles} == {"ada", "sofia"}

    async def test_sort_by_graduation(self, store):
        """Test graduation sort is oldest class first."""
        page = await store.profiles.list_profiles(sort="graduation")
        assert [p.id for p in page.profiles] == ["marcus", "ada", "sofia", "priya"]

    async def test_pagination(self, store):
        """Test pages are sliced and the total reflects all matches."""
        page = await store.profiles.list_profiles(sort="name", page=2, limit=3)
        assert page.total == 4
        assert page.total_pages == 2
        assert [p.id for p in page.profiles] == ["sofia"]

    async def test_invalid_page(self, store):
        """Test non-positive pages are rejected."""
        with pytest.raises(ValueError, match="positive"):
            await store.profiles.list_profiles(page=0)


class TestVoteRepository:
    """Tests for VoteRepository."""

    async def test_record_vote_updates_ratings(self, store):
        """Test a left win between equals moves ratings to 1516 and 1484."""
        recorded = await store.votes.record_vote("ada", "marcus", Outcome.LEFT_WINS, "s1")

        assert recorded.rating_left_before == 1500
        assert recorded.rating_left_after == 1516
        assert recorded.rating_right_after == 1484
        assert recorded.left_delta == 16
        assert recorded.vote.winner_id == "ada"

        ada = await store.profiles.get("ada")
        marcus = await store.profiles.get("marcus")
        assert ada.elo_rating == 1516
        assert marcus.elo_rating == 1484

    async def test_draw_stores_null_winner(self, store):
        """Test a draw is stored without a winner."""
        recorded = await store.votes.record_vote("ada", "marcus", Outcome.DRAW, "s1")
        assert recorded.vote.winner_id is None
        assert recorded.vote.outcome == "draw"

    async def test_missing_profile_stores_nothing(self, store):
        """Test a vote on an unknown profile raises and leaves no trace."""
        with pytest.raises(ProfileNotFoundError):
            await store.votes.record_vote("ada", "ghost", Outcome.LEFT_WINS, "s1")

        assert await store.votes.recent(10) == []
        ada = await store.profiles.get("ada")
        assert ada.elo_rating == 1500

    async def test_same_profile_rejected(self, store):
        """Test a profile cannot be compared with itself."""
        with pytest.raises(InvalidPairError):
            await store.votes.record_vote("ada", "ada", Outcome.DRAW, "s1")

    async def test_jsonl_backup(self, store):
        """Test each vote is appended to the JSONL backup."""
        await store.votes.record_vote("ada", "marcus", Outcome.LEFT_WINS, "s1")
        await store.votes.record_vote("priya", "sofia", Outcome.RIGHT_WINS, "s1")

        lines = store.paths.votes_log_path().read_text().splitlines()
        assert len(lines) == 2
        first = json.loads(lines[0])
        assert first["left_profile_id"] == "ada"
        assert first["rating_left_after"] == 1516

    async def test_concurrent_votes_do_not_lose_updates(self, store):
        """Test concurrent votes on the same profiles are all applied."""
        await asyncio.gather(
            *(
                store.votes.record_vote("ada", "marcus", Outcome.LEFT_WINS, f"s{i}")
                for i in range(5)
            )
        )

        expected_a, expected_b = 1500, 1500
        for _ in range(5):
            expected_a, expected_b = update_ratings(expected_a, expected_b, 1)

        ada = await store.profiles.get("ada")
        marcus = await store.profiles.get("marcus")
        assert (ada.elo_rating, marcus.elo_rating) == (expected_a, expected_b)
        assert len(await store.votes.recent(10)) == 5

    async def test_recent_for_session(self, store):
        """Test session history is newest first and scoped to the session."""
        await store.votes.record_vote("ada", "marcus", Outcome.LEFT_WINS, "s1")
        await store.votes.record_vote("priya", "sofia", Outcome.DRAW, "s2")
        await store.votes.record_vote("ada", "priya", Outcome.RIGHT_WINS, "s1")

        votes = await store.votes.recent_for_session("s1", limit=5)
        assert [(v.left_profile_id, v.right_profile_id) for v in votes] == [
            ("ada", "priya"),
            ("ada", "marcus"),
        ]

    async def test_profile_stats(self, store):
        """Test win, loss and draw counts per profile."""
        await store.votes.record_vote("ada", "marcus", Outcome.LEFT_WINS, "s1")
        await store.votes.record_vote("ada", "priya", Outcome.DRAW, "s1")
        await store.votes.record_vote("sofia", "ada", Outcome.LEFT_WINS, "s1")

        stats = await store.votes.get_profile_stats()
        assert (stats["ada"].wins, stats["ada"].losses, stats["ada"].draws) == (1, 1, 1)
        assert stats["ada"].matches == 3
        assert stats["marcus"].losses == 1
        assert stats["sofia"].wins == 1
        assert "nobody" not in stats


class TestExport:
    """Tests for leaderboard export."""

    async def test_export_writes_all_formats(self, store):
        """Test Markdown, CSV and JSON files are written."""
        await store.votes.record_vote("ada", "marcus", Outcome.LEFT_WINS, "s1")
        page = await store.profiles.list_profiles()
        rows = build_leaderboard_rows(page.profiles, await store.votes.get_profile_stats())

        paths = await store.export_leaderboard(rows, render_leaderboard_markdown(rows))

        assert [p.suffix for p in paths] == [".md", ".csv", ".json"]
        assert all(p.exists() for p in paths)
        data = json.loads(paths[2].read_text())
        assert data[0]["profile_id"] == "ada"
        assert data[0]["rating"] == 1516
        assert paths[1].read_text().splitlines()[0].startswith("rank,profile_id,name")
