"""Port manager: hands out local dev server ports across CLI processes."""

from .client import PortManagerClient
from .constants import MAX_PORT_NUMBER, MIN_PORT_NUMBER, PORT_MANAGER_SERVER_PORT
from .detect import detect_port, is_port_free
from .registry import AssignmentOutcome, PortRegistry
from .server import PortManagerServer

__all__ = [
    "AssignmentOutcome",
    "MAX_PORT_NUMBER",
    "MIN_PORT_NUMBER",
    "PORT_MANAGER_SERVER_PORT",
    "PortManagerClient",
    "PortManagerServer",
    "PortRegistry",
    "detect_port",
    "is_port_free",
]
