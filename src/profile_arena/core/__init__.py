"""Core configuration and utilities for Profile Arena."""

from profile_arena.core.config import (
    DEFAULT_K_FACTOR,
    DEFAULT_RATING,
    ArenaConfig,
    RankingConfig,
    SamplingConfig,
    calculate_top_size,
    load_config,
)
from profile_arena.core.errors import (
    ArenaError,
    ConfigurationError,
    InsufficientPoolError,
    InvalidOutcomeError,
    InvalidPairError,
    PairMismatchError,
    ProfileNotFoundError,
    SessionStateError,
    ValidationError,
)
from profile_arena.core.progress import ArenaProgress

__all__ = [
    "DEFAULT_K_FACTOR",
    "DEFAULT_RATING",
    "ArenaConfig",
    "ArenaProgress",
    "RankingConfig",
    "SamplingConfig",
    "calculate_top_size",
    "load_config",
    "ArenaError",
    "ConfigurationError",
    "InsufficientPoolError",
    "InvalidOutcomeError",
    "InvalidPairError",
    "PairMismatchError",
    "ProfileNotFoundError",
    "SessionStateError",
    "ValidationError",
]
