"""Constants for the port manager service."""

from __future__ import annotations

import os

MIN_PORT_NUMBER = 1024
MAX_PORT_NUMBER = 65535

# Bind to 127.0.0.1 rather than localhost to avoid an IPv4/IPv6 mismatch
# between the server and its clients.
PORT_MANAGER_HOST = "127.0.0.1"
PORT_MANAGER_SERVER_PORT = int(os.environ.get("DEVCLI_PORT_MANAGER_PORT", "8080"))

PORT_MANAGER_CLIENT_TIMEOUT_SECONDS = 5.0


def port_manager_url(port: int = PORT_MANAGER_SERVER_PORT) -> str:
    return f"http://{PORT_MANAGER_HOST}:{port}"
