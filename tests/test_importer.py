"""Tests for loading profile records from files."""

import json
import tempfile
from pathlib import Path

import pytest

from profile_arena.core.errors import ConfigurationError
from profile_arena.services.storage import load_profile_records


class TestLoadProfileRecords:
    """Tests for load_profile_records."""

    def test_yaml_with_profiles_key(self):
        """Test a YAML mapping with a profiles list."""
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "profiles.yaml"
            path.write_text("profiles:\n  - full_name: Ada Park\n    graduation_year: 2022\n")
            records = load_profile_records(path)
        assert records == [{"full_name": "Ada Park", "graduation_year": 2022}]

    def test_json_list(self):
        """Test a JSON top-level list."""
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "profiles.json"
            path.write_text(json.dumps([{"full_name": "A"}, {"full_name": "B"}]))
            records = load_profile_records(path)
        assert [r["full_name"] for r in records] == ["A", "B"]

    def test_csv_types_coerced(self):
        """Test CSV strings become ints, bools and None."""
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "profiles.csv"
            path.write_text(
                "full_name,graduation_year,is_student,company\n"
                "Priya Raman,2026,yes,\n"
                "Marcus Lee,2021,false,Notion\n"
            )
            records = load_profile_records(path)

        assert records[0] == {
            "full_name": "Priya Raman",
            "graduation_year": 2026,
            "is_student": True,
            "company": None,
        }
        assert records[1]["is_student"] is False
        assert records[1]["company"] == "Notion"

    def test_missing_file(self):
        """Test a missing file raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            load_profile_records("/nonexistent/profiles.yaml")

    def test_unsupported_format(self):
        """Test unknown extensions are rejected."""
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "profiles.txt"
            path.write_text("Ada Park")
            with pytest.raises(ConfigurationError, match="Unsupported"):
                load_profile_records(path)

    def test_wrong_shape(self):
        """Test content that is not a list of mappings is rejected."""
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "profiles.yaml"
            path.write_text("- Ada Park\n- Marcus Lee\n")
            with pytest.raises(ConfigurationError, match="list of profile mappings"):
                load_profile_records(path)

    def test_example_file(self):
        """Test the shipped example profiles load."""
        example = Path(__file__).resolve().parent.parent / "profiles.example.yaml"
        records = load_profile_records(example)
        assert len(records) == 6
        assert all("full_name" in r for r in records)
