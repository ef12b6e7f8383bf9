"""Exceptions raised by the multimodal live client."""
from __future__ import annotations


class MultimodalLiveError(Exception):
    """Base class for errors raised by this package."""


class ConnectError(MultimodalLiveError):
    """Opening a live session failed."""

    def __init__(self, cause: str) -> None:
        super().__init__(f"Could not connect: {cause}")
        self.cause = cause


class NotConnectedError(MultimodalLiveError, RuntimeError):
    """An outbound operation was attempted without an open session."""

    def __init__(self, message: str = "Session is not connected") -> None:
        super().__init__(message)


class AlreadyConnectedError(MultimodalLiveError):
    """connect() was called while a session is open or opening."""

    def __init__(self, message: str = "Already connected, use disconnect() first") -> None:
        super().__init__(message)


class ConfigError(MultimodalLiveError, ValueError):
    """A configuration mapping or raw request failed validation."""
