"""Test configuration for devcli tests."""

import threading

import pytest

from devcli import DevClient, PortManagerServer, PortRegistry


class FakeDetector:
    """Stands in for detect_port: hands out sequential ports, honouring preference and exclusions."""

    def __init__(self, start: int = 4000):
        self.next_port = start
        self.calls = []
        self._lock = threading.Lock()

    def __call__(self, port=None, exclude=()):
        with self._lock:
            self.calls.append((port, frozenset(exclude)))
            candidate = port if port is not None else self.next_port
            while candidate in exclude:
                candidate += 1
            if port is None:
                self.next_port = candidate + 1
            return candidate


@pytest.fixture
def client():
    """Shared DevClient fixture for API tests."""
    client = DevClient(123456, access_token="test-token")
    yield client
    client.close()


@pytest.fixture
def detector():
    return FakeDetector()


@pytest.fixture
def registry(detector):
    return PortRegistry(detector=detector)


@pytest.fixture
def port_manager(registry):
    """A running port manager bound to an OS chosen port."""
    server = PortManagerServer(registry, port=0)
    server.start()
    yield server
    server.close()
