"""Custom exceptions for configuration errors and rating-core failures."""

from __future__ import annotations

from collections.abc import Sequence


class ConfigurationError(Exception):
    """Base exception for configuration errors with optional suggestions."""

    def __init__(self, message: str, suggestion: str | None = None) -> None:
        self.message = message
        self.suggestion = suggestion
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        msg = f"[Configuration Error] {self.message}"
        if self.suggestion:
            msg += f"\n[Suggestion] {self.suggestion}"
        return msg


class ValidationError(ConfigurationError):
    """Error when configuration validation fails."""

    def __init__(self, field: str, reason: str) -> None:
        super().__init__(
            f"Invalid value for '{field}'",
            f"{reason}",
        )


class ArenaError(Exception):
    """Base exception for failures raised by the rating core."""


class InsufficientPoolError(ArenaError):
    """Fewer than two distinct candidates are available to sample a pair."""

    def __init__(self, pool_size: int) -> None:
        self.pool_size = pool_size
        super().__init__(
            f"Not enough profiles to compare: need at least 2, have {pool_size}"
        )


class InvalidOutcomeError(ArenaError):
    """An outcome value outside the recognized set was supplied."""

    def __init__(self, value: object) -> None:
        self.value = value
        super().__init__(
            f"Invalid outcome {value!r}: expected left_wins, right_wins, draw "
            "(or a numeric score of 0, 0.5 or 1)"
        )


class PairMismatchError(ArenaError):
    """A vote references profiles that are not the pair currently shown."""

    def __init__(self, submitted: Sequence[str | None], shown: Sequence[str] | None) -> None:
        self.submitted = tuple(submitted)
        self.shown = tuple(shown) if shown is not None else None
        super().__init__(
            f"Vote for {self.submitted} does not match the pair shown {self.shown}"
        )


class InvalidPairError(ArenaError):
    """A pair names the same profile on both sides."""

    def __init__(self, profile_id: str) -> None:
        self.profile_id = profile_id
        super().__init__(f"A pair must contain two different profiles, got {profile_id!r} twice")


class SessionStateError(ArenaError):
    """An operation was attempted from a session state that does not allow it."""

    def __init__(self, action: str, state: str) -> None:
        self.action = action
        self.state = state
        super().__init__(f"Cannot {action} while session is '{state}'")


class ProfileNotFoundError(ArenaError):
    """A profile id does not exist in the store."""

    def __init__(self, profile_id: str) -> None:
        self.profile_id = profile_id
        super().__init__(f"Profile not found: {profile_id}")
