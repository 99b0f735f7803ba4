"""devcli - API clients, accounts config and a local port manager for developer tooling."""

from importlib.metadata import PackageNotFoundError, version

from .accounts import CLIConfiguration
from .client import DevClient
from .exceptions import (
    APIError,
    AuthenticationError,
    ConfigError,
    DevCLIError,
    DuplicateInstanceError,
    PortManagerError,
    PortManagerInUseError,
)
from .ports import PortManagerClient, PortManagerServer, PortRegistry

__all__ = [
    "DevClient",
    "CLIConfiguration",
    "PortManagerClient",
    "PortManagerServer",
    "PortRegistry",
    "DevCLIError",
    "AuthenticationError",
    "APIError",
    "ConfigError",
    "PortManagerError",
    "PortManagerInUseError",
    "DuplicateInstanceError",
]

try:
    __version__ = version("devcli")
except PackageNotFoundError:
    __version__ = "0.1.0"
