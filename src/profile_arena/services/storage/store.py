"""Unified arena storage layer with database access and leaderboard exports."""

from __future__ import annotations

import asyncio
import csv
import json
from pathlib import Path
from typing import TYPE_CHECKING

import structlog
from sqlalchemy.pool import NullPool
from sqlmodel import SQLModel, create_engine

from profile_arena.core.config import ArenaConfig

from .paths import StoragePaths
from .profile_repository import ProfileRepository
from .vote_repository import VoteRepository

if TYPE_CHECKING:
    from profile_arena.services.reporting import LeaderboardRow

logger = structlog.get_logger()


class ArenaStore:
    """Persistence layer for profiles, votes and exported reports.

    Handles:
    - SQLModel-based storage for profiles and votes (DuckDB)
    - JSONL backup of every vote
    - Leaderboard export (Markdown, CSV, JSON)
    """

    def __init__(self, config: ArenaConfig) -> None:
        """Initialize arena store.

        Args:
            config: Arena configuration.
        """
        self.config = config
        self._db_path = Path(config.database_path)
        self.paths = StoragePaths(Path(config.export_dir))
        self._engine = None
        self._init_db()
        self.profiles = ProfileRepository(self._engine, config.ranking.initial_rating)
        self.votes = VoteRepository(self._engine, self.paths)

    def _init_db(self) -> None:
        """Initialize DuckDB database and create tables."""
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        db_url = f"duckdb:///{self._db_path}"
        # Use NullPool to avoid connection pooling issues on Windows
        self._engine = create_engine(db_url, poolclass=NullPool)
        SQLModel.metadata.create_all(self._engine)
        logger.info("store_init", path=str(self._db_path))

    async def export_leaderboard(
        self, rows: list[LeaderboardRow], markdown: str, stem: str = "leaderboard"
    ) -> list[Path]:
        """Save leaderboard rows as Markdown, CSV and JSON files.

        Args:
            rows: Leaderboard rows in rank order.
            markdown: Pre-rendered Markdown report.
            stem: Base filename for the exported files.

        Returns:
            Paths of the written files.
        """

        def _save() -> list[Path]:
            md_path = self.paths.export_path(f"{stem}.md")
            md_path.write_text(markdown, encoding="utf-8")

            csv_path = self.paths.export_path(f"{stem}.csv")
            with csv_path.open("w", encoding="utf-8", newline="") as f:
                writer = csv.writer(f)
                writer.writerow(
                    ["rank", "profile_id", "name", "rating", "matches", "wins", "losses", "draws"]
                )
                for r in rows:
                    writer.writerow(
                        [
                            r.rank,
                            r.profile_id,
                            r.name,
                            r.rating,
                            r.matches,
                            r.wins,
                            r.losses,
                            r.draws,
                        ]
                    )

            json_path = self.paths.export_path(f"{stem}.json")
            with json_path.open("w", encoding="utf-8") as f:
                json.dump([r.model_dump() for r in rows], f, indent=2, default=str)

            logger.debug("saved_leaderboard", path=str(self.paths.base_dir))
            return [md_path, csv_path, json_path]

        return await asyncio.to_thread(_save)

    # ==================== Lifecycle ====================

    async def close(self) -> None:
        """Dispose of the database engine."""
        if self._engine:
            self._engine.dispose()
