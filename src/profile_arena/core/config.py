"""Configuration schemas and loading for Profile Arena."""

from __future__ import annotations

import math
from pathlib import Path
from typing import Literal

import pydantic
import yaml
from pydantic import BaseModel, Field, field_validator

from profile_arena.core.errors import ConfigurationError, ValidationError

DEFAULT_RATING = 1500
DEFAULT_K_FACTOR = 32.0


class RankingConfig(BaseModel):
    """Rating update configuration.

    Attributes:
        initial_rating: Rating assigned when a profile first enters the pool.
        k_factor: Maximum rating adjustment for a single comparison.
    """

    initial_rating: int = DEFAULT_RATING
    k_factor: float = Field(default=DEFAULT_K_FACTOR, gt=0)


class SamplingConfig(BaseModel):
    """Pair sampling configuration.

    Attributes:
        top_fraction: Fraction of the pool (by descending rating) that forms
            the top stratum.
        top_pick_probability: Per-slot probability of drawing from the top
            stratum instead of the remainder.
        exclusion_window: Number of recent comparisons whose profiles are
            avoided when other choices exist.
        pool_limit: If set, sample from a random subset of this many profiles
            instead of the full pool.
    """

    top_fraction: float = Field(default=0.15, ge=0.0, le=1.0)
    top_pick_probability: float = Field(default=0.30, ge=0.0, le=1.0)
    exclusion_window: int = Field(default=3, ge=0)
    pool_limit: int | None = Field(default=None, ge=2)


class ArenaConfig(BaseModel):
    """Complete application configuration."""

    ranking: RankingConfig = Field(default_factory=RankingConfig)
    sampling: SamplingConfig = Field(default_factory=SamplingConfig)
    database_path: str = "./arena.duckdb"
    export_dir: str = "./exports"
    seed: int | None = None
    history_limit: int = Field(default=10, ge=1)
    default_sort: Literal["elo", "name", "graduation"] = "elo"

    @field_validator("database_path", "export_dir")
    @classmethod
    def validate_path_not_empty(cls, v: str) -> str:
        """Ensure paths are non-empty strings."""
        if not v or not v.strip():
            msg = "Paths cannot be empty"
            raise ValueError(msg)
        return v


def load_config(path: str | Path | None = None) -> ArenaConfig:
    """Load and validate configuration from YAML file.

    Args:
        path: Path to YAML configuration file. If None, defaults are used.

    Returns:
        Validated ArenaConfig instance.

    Raises:
        FileNotFoundError: If config file doesn't exist.
        ConfigurationError: If the file does not contain a mapping.
        ValidationError: If config values are invalid.
    """
    if path is None:
        return ArenaConfig()

    config_path = Path(path)
    if not config_path.exists():
        msg = f"Configuration file not found: {config_path}"
        raise FileNotFoundError(msg)

    with config_path.open() as f:
        data = yaml.safe_load(f)

    if data is None:
        return ArenaConfig()
    if not isinstance(data, dict):
        raise ConfigurationError(
            f"Configuration root in {config_path} must be a mapping",
            "Use 'key: value' pairs at the top level (see config.example.yaml).",
        )

    try:
        return ArenaConfig.model_validate(data)
    except pydantic.ValidationError as e:
        first = e.errors()[0]
        field = ".".join(str(part) for part in first["loc"]) or "<root>"
        raise ValidationError(field, first["msg"]) from e


def calculate_top_size(pool_size: int, top_fraction: float) -> int:
    """Number of profiles in the top stratum for a pool of the given size.

    Args:
        pool_size: Number of distinct profiles in the pool.
        top_fraction: Fraction of the pool that counts as top stratum.

    Returns:
        ceil(top_fraction * pool_size), clamped to [0, pool_size].
    """
    if pool_size <= 0:
        return 0
    # 0.15 * 100 == 15.000000000000002 in binary floating point
    top_size = math.ceil(round(top_fraction * pool_size, 9))
    return min(pool_size, max(0, top_size))
