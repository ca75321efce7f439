"""Path utilities for arena storage artifacts."""

from __future__ import annotations

from pathlib import Path


class StoragePaths:
    """Build and create filesystem paths used by storage services."""

    def __init__(self, base_dir: Path) -> None:
        self.base_dir = base_dir

    def export_dir(self) -> Path:
        """Get or create the export directory."""
        self.base_dir.mkdir(parents=True, exist_ok=True)
        return self.base_dir

    def export_path(self, filename: str) -> Path:
        """Build path to an exported artifact file."""
        return self.export_dir() / filename

    def votes_log_path(self) -> Path:
        """Build path to the append-only JSONL vote backup."""
        return self.export_path("votes.jsonl")
