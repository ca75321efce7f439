"""Load raw profile records from YAML, JSON or CSV files."""

from __future__ import annotations

import csv
import json
from pathlib import Path
from typing import Any

import yaml

from profile_arena.core.errors import ConfigurationError

_TRUE_VALUES = {"1", "true", "yes", "y", "t"}


def _coerce_csv_row(row: dict[str, str]) -> dict[str, Any]:
    """Convert CSV strings to the types a Profile expects."""
    record: dict[str, Any] = {key: (value.strip() or None) for key, value in row.items() if key}
    if record.get("graduation_year") is not None:
        record["graduation_year"] = int(record["graduation_year"])
    if "is_student" in record:
        record["is_student"] = str(record["is_student"] or "").lower() in _TRUE_VALUES
    return record


def load_profile_records(path: str | Path) -> list[dict[str, Any]]:
    """Read profile records from a file.

    YAML and JSON files may hold a list of mappings or a mapping with a
    ``profiles`` list. CSV files use the header row as field names.

    Args:
        path: Path to a .yaml, .yml, .json or .csv file.

    Returns:
        List of raw profile dicts.

    Raises:
        FileNotFoundError: If the file doesn't exist.
        ConfigurationError: If the format is unsupported or the content is
            not a list of mappings.
    """
    file_path = Path(path)
    if not file_path.exists():
        msg = f"Profile file not found: {file_path}"
        raise FileNotFoundError(msg)

    suffix = file_path.suffix.lower()
    if suffix == ".csv":
        with file_path.open(encoding="utf-8", newline="") as f:
            return [_coerce_csv_row(row) for row in csv.DictReader(f)]

    with file_path.open(encoding="utf-8") as f:
        if suffix in (".yaml", ".yml"):
            data = yaml.safe_load(f)
        elif suffix == ".json":
            data = json.load(f)
        else:
            raise ConfigurationError(
                f"Unsupported profile file format: {suffix or '<none>'}",
                "Use a .yaml, .json or .csv file.",
            )

    if isinstance(data, dict):
        data = data.get("profiles")
    if not isinstance(data, list) or not all(isinstance(item, dict) for item in data):
        raise ConfigurationError(
            f"{file_path} must contain a list of profile mappings",
            "Provide a top-level list, or a 'profiles:' key holding one.",
        )
    return data
