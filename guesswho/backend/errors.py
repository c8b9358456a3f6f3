"""Typed failures raised by the game core."""

from __future__ import annotations


class GameError(Exception):
    """Base class for failures surfaced to the presentation layer."""


class PreconditionError(GameError):
    """An operation was requested in a state that does not allow it."""


class ContentExhaustedError(GameError):
    """The content provider had no messages for the eligible players."""


class ProviderError(GameError):
    """A roster or content provider raised while serving the core."""

    def __init__(self, provider: str, cause: BaseException) -> None:
        super().__init__(f"{provider} provider failed: {cause}")
        self.provider = provider
        self.cause = cause
