"""Exception hierarchy for bitmark-registry.

All exceptions inherit from RegistryClientError (single catch point).
Every failure is raised to the caller; the client never retries or
swallows errors.
"""

from __future__ import annotations


class RegistryClientError(Exception):
    """Base exception for all bitmark-registry errors."""


class ConfigError(RegistryClientError, ValueError):
    """Invalid base URI, client configuration, or endpoint/version mismatch."""


class TransportError(RegistryClientError):
    """Network-level failure: DNS, connect, TLS, timeout, connection reset."""


class BodyReadError(RegistryClientError):
    """The response body could not be read to completion."""


class ParseError(RegistryClientError, ValueError):
    """The response body is not a valid registry envelope.

    The raw body is kept on ``body`` so callers can inspect exactly what
    the server sent.
    """

    def __init__(self, body: bytes, reason: str = "") -> None:
        self.body = body
        self.reason = reason
        text = body.decode("utf-8", errors="replace")
        detail = f" ({reason})" if reason else ""
        super().__init__(f"error when parsing response body{detail}: {text}")


class ServerError(RegistryClientError):
    """The registry answered with a non-200 status.

    ``str(error)`` is the server-supplied message; status codes are not
    split into subclasses.
    """

    def __init__(self, status_code: int, message: str) -> None:
        self.status_code = status_code
        self.message = message
        super().__init__(message)


class EmptyResultError(RegistryClientError, LookupError):
    """A collection that must hold at least one element came back empty."""
