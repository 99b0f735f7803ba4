"""Client used by CLI processes to talk to the port manager server."""

from __future__ import annotations

import logging
from typing import Any
from urllib.parse import quote

import httpx

from .._http import handle_response
from ..config import sanitize_base_url
from ..exceptions import APIError
from .constants import PORT_MANAGER_CLIENT_TIMEOUT_SECONDS, PORT_MANAGER_SERVER_PORT, port_manager_url
from .server import PortManagerServer

logger = logging.getLogger(__name__)


def _encode(instance_id: str) -> str:
    return quote(instance_id, safe="")


def _handle_response(response: httpx.Response) -> Any:
    """Like handle_response, but reads the server's JSON error message."""
    if response.status_code >= 400:
        message = response.text
        try:
            message = response.json().get("message") or message
        except ValueError:
            pass
        raise APIError(message=message, status_code=response.status_code, response=response)
    return handle_response(response)


class PortManagerClient:
    """Synchronous client for the port manager control plane.

    Example:
        >>> with PortManagerClient() as ports:
        ...     ports.start_server()
        ...     print(ports.request_ports(["my-app"]))
    """

    def __init__(
        self,
        base_url: str | None = None,
        *,
        port: int = PORT_MANAGER_SERVER_PORT,
        timeout: float = PORT_MANAGER_CLIENT_TIMEOUT_SECONDS,
    ) -> None:
        self._port = port
        self._base_url = sanitize_base_url(base_url or port_manager_url(port))
        self._client = httpx.Client(timeout=timeout)

    def is_running(self) -> bool:
        """Check whether a port manager server answers on the coordination port."""
        try:
            response = self._client.get(f"{self._base_url}/servers")
        except httpx.TransportError:
            return False
        return response.status_code == 200

    def start_server(self) -> PortManagerServer | None:
        """Start a server in this process unless one is already running.

        Returns:
            The started server, or None if another process already runs one.
        """
        if self.is_running():
            logger.debug("Port manager server is already running")
            return None
        server = PortManagerServer(port=self._port)
        server.start()
        return server

    def list_servers(self) -> dict[str, Any]:
        """Get every assignment.

        Returns:
            Dictionary with ``servers`` (instance id -> port) and ``count``.
        """
        response = self._client.get(f"{self._base_url}/servers")
        return _handle_response(response)

    def has_active_servers(self) -> bool:
        return self.list_servers().get("count", 0) > 0

    def get_port(self, instance_id: str) -> int:
        """Get the port assigned to ``instance_id``.

        Raises:
            APIError: With status 404 if the instance has no port.
        """
        response = self._client.get(f"{self._base_url}/servers/{_encode(instance_id)}")
        return _handle_response(response)["port"]

    def request_ports(self, instance_ids: list[str], port: int | None = None) -> dict[str, int]:
        """Request a port for each instance.

        Args:
            instance_ids: Instances that need a port.
            port: Preferred port, used when free.

        Returns:
            Mapping of instance id to assigned port.

        Raises:
            APIError: 409 if an instance already has a port, 400 if ``port`` is
                out of range. Other instances of the batch may still have been
                assigned; ``error.response.json()["results"]`` lists them.
        """
        payload: dict[str, Any] = {"instanceIds": instance_ids}
        if port is not None:
            payload["port"] = port

        response = self._client.post(f"{self._base_url}/servers", json=payload)
        data = _handle_response(response)
        return dict(zip(instance_ids, data["ports"]))

    def release(self, instance_id: str) -> None:
        response = self._client.delete(f"{self._base_url}/servers/{_encode(instance_id)}")
        _handle_response(response)

    def stop_server(self) -> None:
        """Ask the running server to shut down."""
        response = self._client.post(f"{self._base_url}/close")
        _handle_response(response)

    def close(self) -> None:
        """Release the underlying HTTP client resources."""
        self._client.close()

    def __enter__(self) -> PortManagerClient:
        return self

    def __exit__(self, exc_type: type | None, exc: BaseException | None, traceback: Any) -> None:
        self.close()
