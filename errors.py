"""Exceptions raised by the gateway outside of the Gitea client."""

from __future__ import annotations

__all__ = [
    "AuthenticationError",
    "ConfigurationError",
    "RequestValidationError",
    "ServiceNotReadyError",
]


class ConfigurationError(RuntimeError):
    """Raised when required settings are missing or malformed."""


class AuthenticationError(RuntimeError):
    """Raised when the gateway cannot resolve the authenticated Gitea user."""


class RequestValidationError(ValueError):
    """Raised for malformed client requests.

    ``status_code`` is 400 for structural problems (missing path parameters,
    unparsable JSON) and 422 for semantically invalid payloads.
    """

    def __init__(self, message: str, *, status_code: int = 400) -> None:
        super().__init__(message)
        self.status_code = status_code


class ServiceNotReadyError(RuntimeError):
    """Raised when a request needs the authenticated identity before it is known."""
