"""Accounts configuration for devcli."""

from .config_utils import (
    generate_config,
    load_config_from_environment,
    ordered_account,
    ordered_config,
)
from .configuration import CLIConfiguration, find_config, parse_config

__all__ = [
    "CLIConfiguration",
    "find_config",
    "generate_config",
    "load_config_from_environment",
    "ordered_account",
    "ordered_config",
    "parse_config",
]
