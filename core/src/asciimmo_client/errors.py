from __future__ import annotations


class ClientError(Exception):
    """Base class for failures surfaced to the user as a status message."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(ClientError):
    """A required field was empty; raised before any network call."""


class AuthError(ClientError):
    """The Auth Service answered but rejected the request."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class TransportError(ClientError):
    """The HTTP exchange did not complete or returned an unreadable body."""


class FetchError(ClientError):
    """A world map could not be fetched or loaded."""
