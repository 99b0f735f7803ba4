"""Local TCP port availability checks.

A port reported as free is only free at the instant of the check: nothing
keeps it reserved afterwards, so another process may still bind it before
the caller does.
"""

from __future__ import annotations

import socket
from typing import Collection

from .constants import MAX_PORT_NUMBER, MIN_PORT_NUMBER, PORT_MANAGER_HOST


def is_port_free(port: int, host: str = PORT_MANAGER_HOST) -> bool:
    """Return True when ``port`` can be bound on ``host`` right now."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        try:
            sock.bind((host, port))
        except OSError:
            return False
    return True


def _any_free_port(host: str) -> int:
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind((host, 0))
        return sock.getsockname()[1]


def detect_port(
    port: int | None = None,
    exclude: Collection[int] = (),
    host: str = PORT_MANAGER_HOST,
) -> int:
    """Find a free local port.

    Args:
        port: Preferred port. If it is taken, the following ports are tried
            in order up to MAX_PORT_NUMBER.
        exclude: Ports that must not be returned even if free.
        host: Interface to probe.

    Returns:
        A port number that was free when checked. Falls back to an OS chosen
        port when no preference is given or the walk finds nothing.
    """
    if port is not None:
        if port < MIN_PORT_NUMBER or port > MAX_PORT_NUMBER:
            raise ValueError(f"Port must be between {MIN_PORT_NUMBER} and {MAX_PORT_NUMBER}, got {port}")
        for candidate in range(port, MAX_PORT_NUMBER + 1):
            if candidate not in exclude and is_port_free(candidate, host):
                return candidate

    while True:
        candidate = _any_free_port(host)
        if candidate not in exclude and candidate >= MIN_PORT_NUMBER:
            return candidate
