"""Errors raised by registry adapters."""
from typing import Optional


class RegistryError(Exception):
    """Base class for failures talking to the registry."""
    pass


class AuthError(RegistryError):
    """Raised when a bearer token could not be obtained."""
    pass


class TransportError(RegistryError):
    """Raised on connection failures, timeouts and non-2xx responses."""

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.status = status


class DecodeError(RegistryError):
    """Raised when a response body is not the expected JSON shape."""
    pass
