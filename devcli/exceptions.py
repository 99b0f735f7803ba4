"""Custom exceptions raised by devcli."""

from __future__ import annotations

from typing import Any, Optional


class DevCLIError(Exception):
    """Base exception for all devcli specific failures."""


class AuthenticationError(DevCLIError):
    """Raised when an access token is missing or rejected by the server."""


class APIError(DevCLIError):
    """Raised when a remote API returns a non-successful response."""

    def __init__(self, message: str, status_code: int, response: Optional[Any] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.response = response

    def __str__(self) -> str:  # pragma: no cover - repr helper
        return f"{self.status_code}: {self.message}"


class ConfigError(DevCLIError):
    """Raised when the accounts config cannot be read, parsed or updated."""


class PortManagerError(DevCLIError):
    """Base exception for the port manager service."""


class PortManagerInUseError(PortManagerError):
    """Raised when the coordination port is already bound by another process."""

    def __init__(self, port: int):
        super().__init__(
            f"Port {port} is already in use. Another instance of the port manager is probably running."
        )
        self.port = port


class DuplicateInstanceError(PortManagerError):
    """Raised when a port manager server is started twice."""
