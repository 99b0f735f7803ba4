"""HTTP control plane shared by every CLI process that needs a dev server port.

Routes:
    GET    /servers              every assignment and their count
    GET    /servers/<instanceId> the port of one instance
    POST   /servers              assign ports to ``instanceIds``
    DELETE /servers/<instanceId> release the port of one instance
    POST   /close                stop the server
"""

from __future__ import annotations

import errno
import json
import logging
import threading
from http.server import BaseHTTPRequestHandler, HTTPServer
from typing import Any
from urllib.parse import unquote, urlparse

from ..exceptions import DuplicateInstanceError, PortManagerInUseError
from .constants import PORT_MANAGER_HOST, PORT_MANAGER_SERVER_PORT
from .registry import BAD_REQUEST, CONFLICT, AssignmentOutcome, PortRegistry

logger = logging.getLogger(__name__)

_ADDRESS_IN_USE = {errno.EADDRINUSE, getattr(errno, "WSAEADDRINUSE", errno.EADDRINUSE)}

_OUTCOME_STATUS = {CONFLICT: 409, BAD_REQUEST: 400}


def batch_status(outcomes: list[AssignmentOutcome]) -> int:
    """HTTP status for a batch: 200 if all succeeded, else that of the first failure."""
    for outcome in outcomes:
        if not outcome.ok:
            return _OUTCOME_STATUS.get(outcome.status, 500)
    return 200


class _BadRequest(Exception):
    pass


class PortManagerRequestHandler(BaseHTTPRequestHandler):
    """HTTP request handler for the port manager routes."""

    server: _PortManagerHTTPServer

    def log_message(self, format: str, *args: Any) -> None:
        logger.debug("%s %s", self.address_string(), format % args)

    @property
    def registry(self) -> PortRegistry:
        return self.server.manager.registry

    def _route(self) -> tuple[str, str | None]:
        path = urlparse(self.path).path.rstrip("/")
        if path.startswith("/servers/"):
            return "/servers/:id", unquote(path[len("/servers/") :])
        return path, None

    def do_GET(self) -> None:
        route, instance_id = self._route()
        if route == "/servers":
            servers = self.registry.servers()
            self._send_json(200, {"servers": servers, "count": len(servers)})
        elif route == "/servers/:id" and instance_id:
            port = self.registry.get(instance_id)
            if port is None:
                self._send_not_found(instance_id)
            else:
                self._send_json(200, {"port": port})
        else:
            self._send_json(404, {"message": "Not Found"})

    def do_POST(self) -> None:
        route, _ = self._route()
        if route == "/servers":
            self._assign_ports()
        elif route == "/close":
            logger.debug("Closing the port manager server")
            self._send_json(200, None)
            self.server.manager.request_close()
        else:
            self._send_json(404, {"message": "Not Found"})

    def do_DELETE(self) -> None:
        route, instance_id = self._route()
        if route != "/servers/:id" or not instance_id:
            self._send_json(404, {"message": "Not Found"})
        elif self.registry.release(instance_id):
            self._send_json(200, None)
        else:
            self._send_not_found(instance_id)

    def do_OPTIONS(self) -> None:
        self.send_response(204)
        self._send_cors_headers()
        self.send_header("Access-Control-Allow-Methods", "GET, POST, DELETE, OPTIONS")
        self.send_header("Access-Control-Allow-Headers", "Content-Type")
        self.end_headers()

    def _assign_ports(self) -> None:
        try:
            instance_ids, port = self._read_assign_body()
        except _BadRequest as e:
            self._send_json(400, {"message": str(e)})
            return

        outcomes = self.registry.assign(instance_ids, port)
        status = batch_status(outcomes)
        body: dict[str, Any] = {
            "ports": [outcome.port if outcome.ok else None for outcome in outcomes],
            "results": [outcome.to_dict() for outcome in outcomes],
        }
        if status != 200:
            body["message"] = next(outcome.message for outcome in outcomes if not outcome.ok)
        self._send_json(status, body)

    def _read_assign_body(self) -> tuple[list[str], int | None]:
        try:
            length = int(self.headers.get("Content-Length") or 0)
        except ValueError:
            raise _BadRequest("Content-Length must be an integer") from None
        if length < 0:
            raise _BadRequest("Content-Length must not be negative")
        raw = self.rfile.read(length) if length else b""
        try:
            body = json.loads(raw or b"{}")
        except json.JSONDecodeError:
            raise _BadRequest("Request body must be JSON") from None

        if not isinstance(body, dict):
            raise _BadRequest("Request body must be a JSON object")

        instance_ids = body.get("instanceIds")
        if not isinstance(instance_ids, list) or not all(isinstance(i, str) and i for i in instance_ids):
            raise _BadRequest("instanceIds must be a list of non-empty strings")

        port = body.get("port")
        if port is not None and (isinstance(port, bool) or not isinstance(port, int)):
            raise _BadRequest("port must be an integer")

        return instance_ids, port

    def _send_not_found(self, instance_id: str) -> None:
        self._send_json(404, {"message": f"Could not find a server with instanceId {instance_id}"})

    def _send_cors_headers(self) -> None:
        self.send_header("Access-Control-Allow-Origin", "*")

    def _send_json(self, code: int, body: Any) -> None:
        payload = json.dumps(body).encode() if body is not None else b""
        self.send_response(code)
        self._send_cors_headers()
        if body is not None:
            self.send_header("Content-Type", "application/json")
        self.send_header("Content-Length", str(len(payload)))
        self.end_headers()
        self.wfile.write(payload)


class _PortManagerHTTPServer(HTTPServer):
    def __init__(self, address: tuple[str, int], manager: PortManagerServer) -> None:
        self.manager = manager
        super().__init__(address, PortManagerRequestHandler)


class PortManagerServer:
    """Owns a PortRegistry and serves it over HTTP from a background thread.

    Example:
        >>> server = PortManagerServer()
        >>> server.start()
        >>> server.wait()  # until POST /close or server.close()
    """

    def __init__(
        self,
        registry: PortRegistry | None = None,
        *,
        host: str = PORT_MANAGER_HOST,
        port: int = PORT_MANAGER_SERVER_PORT,
    ) -> None:
        self.registry = registry if registry is not None else PortRegistry()
        self.host = host
        self._requested_port = port
        self._httpd: _PortManagerHTTPServer | None = None
        self._thread: threading.Thread | None = None
        self._closed = threading.Event()
        self._close_lock = threading.Lock()

    @property
    def port(self) -> int:
        """The bound coordination port (the requested one until started)."""
        if self._httpd is None:
            return self._requested_port
        return self._httpd.server_address[1]

    @property
    def url(self) -> str:
        return f"http://{self.host}:{self.port}"

    @property
    def is_running(self) -> bool:
        return self._httpd is not None and not self._closed.is_set()

    def start(self) -> None:
        """Bind the coordination port and start serving.

        Raises:
            DuplicateInstanceError: If this server was already started.
            PortManagerInUseError: If the coordination port is already bound.
        """
        if self._httpd is not None:
            raise DuplicateInstanceError("The port manager server has already been started")

        try:
            httpd = _PortManagerHTTPServer((self.host, self._requested_port), self)
        except OSError as e:
            if e.errno in _ADDRESS_IN_USE:
                raise PortManagerInUseError(self._requested_port) from e
            raise

        self._httpd = httpd
        self._thread = threading.Thread(target=httpd.serve_forever, name="port-manager", daemon=True)
        self._thread.start()
        logger.debug("Port manager server started on port %s", self.port)

    def wait(self, timeout: float | None = None) -> bool:
        """Block until the server is closed. Returns False on timeout."""
        return self._closed.wait(timeout)

    def request_close(self) -> None:
        """Close from a request handler without blocking its serve loop."""
        threading.Thread(target=self.close, name="port-manager-close", daemon=True).start()

    def close(self) -> None:
        """Stop accepting connections and release the coordination port."""
        with self._close_lock:
            if self._httpd is None or self._closed.is_set():
                return
            self._httpd.shutdown()
            self._httpd.server_close()
            if self._thread is not None and self._thread is not threading.current_thread():
                self._thread.join(timeout=2)
            self._closed.set()
            logger.debug("Port manager server closed")

    def __enter__(self) -> PortManagerServer:
        self.start()
        return self

    def __exit__(self, exc_type: type | None, exc: BaseException | None, traceback: Any) -> None:
        self.close()
