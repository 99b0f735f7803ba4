"""Tests for the port manager HTTP server and its client."""

import socket

import httpx
import pytest

from devcli import APIError, DuplicateInstanceError, PortManagerClient, PortManagerInUseError, PortManagerServer


@pytest.fixture
def http(port_manager):
    with httpx.Client(base_url=port_manager.url, timeout=5) as client:
        yield client


class TestRoutes:
    def test_list_empty(self, http):
        response = http.get("/servers")
        assert response.status_code == 200
        assert response.json() == {"servers": {}, "count": 0}

    def test_get_unknown_instance_is_404(self, http):
        response = http.get("/servers/never-assigned")
        assert response.status_code == 404
        assert "never-assigned" in response.json()["message"]

    def test_assign_then_get(self, http):
        response = http.post("/servers", json={"instanceIds": ["app"]})
        assert response.status_code == 200
        port = response.json()["ports"][0]

        response = http.get("/servers/app")
        assert response.status_code == 200
        assert response.json() == {"port": port}

    def test_assign_batch(self, http):
        response = http.post("/servers", json={"instanceIds": ["a", "b", "c"]})
        ports = response.json()["ports"]
        assert len(ports) == 3

        for instance_id, port in zip(["a", "b", "c"], ports):
            assert http.get(f"/servers/{instance_id}").json()["port"] == port

        listing = http.get("/servers").json()
        assert listing["count"] == 3
        assert listing["servers"] == dict(zip(["a", "b", "c"], ports))

    def test_reassign_is_409_and_keeps_port(self, http):
        http.post("/servers", json={"instanceIds": ["app"], "port": 3000})

        response = http.post("/servers", json={"instanceIds": ["app"], "port": 5000})

        assert response.status_code == 409
        assert "3000" in response.json()["message"]
        assert http.get("/servers/app").json()["port"] == 3000

    def test_out_of_range_port_is_400(self, http):
        response = http.post("/servers", json={"instanceIds": ["app"], "port": 70000})

        assert response.status_code == 400
        assert http.get("/servers").json()["count"] == 0

    def test_mixed_batch(self, http):
        http.post("/servers", json={"instanceIds": ["b"], "port": 4000})

        response = http.post("/servers", json={"instanceIds": ["a", "b"], "port": 3000})

        assert response.status_code == 409
        body = response.json()
        assert "4000" in body["message"]
        assert body["ports"] == [3000, None]
        assert [r["status"] for r in body["results"]] == ["assigned", "conflict"]
        assert http.get("/servers/a").json()["port"] == 3000
        assert http.get("/servers/b").json()["port"] == 4000

    def test_delete(self, http):
        http.post("/servers", json={"instanceIds": ["app"]})

        response = http.delete("/servers/app")
        assert response.status_code == 200
        assert http.get("/servers/app").status_code == 404

    def test_delete_unknown_instance_is_404(self, http):
        assert http.delete("/servers/missing").status_code == 404

    @pytest.mark.parametrize(
        "body",
        [
            b"not json",
            b"[]",
            b'{"port": 3000}',
            b'{"instanceIds": "app"}',
            b'{"instanceIds": ["app"], "port": "3000"}',
        ],
    )
    def test_malformed_assign_body_is_400(self, http, body):
        response = http.post("/servers", content=body, headers={"Content-Type": "application/json"})
        assert response.status_code == 400

    @pytest.mark.parametrize("content_length", [b"-1", b"abc"])
    def test_bad_content_length_is_400(self, port_manager, http, content_length):
        request = b"POST /servers HTTP/1.1\r\nHost: localhost\r\nContent-Length: " + content_length + b"\r\n\r\n"
        with socket.create_connection((port_manager.host, port_manager.port), timeout=5) as sock:
            sock.sendall(request)
            response = b""
            while True:
                chunk = sock.recv(4096)
                if not chunk:
                    break
                response += chunk

        assert response.split(b"\r\n", 1)[0].split()[1] == b"400"
        assert http.get("/servers").status_code == 200

    def test_unknown_path_is_404(self, http):
        assert http.get("/nope").status_code == 404
        assert http.post("/nope").status_code == 404

    def test_close(self, port_manager, http):
        response = http.post("/close")

        assert response.status_code == 200
        assert port_manager.wait(timeout=5)
        assert not port_manager.is_running


class TestLifecycle:
    def test_duplicate_start_is_rejected(self, port_manager):
        with pytest.raises(DuplicateInstanceError):
            port_manager.start()

    def test_coordination_port_in_use(self, port_manager):
        second = PortManagerServer(port=port_manager.port)

        with pytest.raises(PortManagerInUseError) as exc_info:
            second.start()
        assert exc_info.value.port == port_manager.port

    def test_close_is_idempotent(self, registry):
        server = PortManagerServer(registry, port=0)
        server.start()
        server.close()
        server.close()
        assert not server.is_running

    def test_context_manager(self, registry):
        with PortManagerServer(registry, port=0) as server:
            assert server.is_running
        assert not server.is_running


class TestPortManagerClient:
    @pytest.fixture
    def ports(self, port_manager):
        with PortManagerClient(port=port_manager.port) as client:
            yield client

    def test_is_running(self, ports):
        assert ports.is_running() is True

    def test_is_running_false_when_stopped(self, registry):
        server = PortManagerServer(registry, port=0)
        server.start()
        port = server.port
        server.close()

        with PortManagerClient(port=port) as client:
            assert client.is_running() is False

    def test_start_server_when_already_running(self, ports):
        assert ports.start_server() is None

    def test_request_get_release(self, ports):
        assigned = ports.request_ports(["a", "b"])

        assert set(assigned) == {"a", "b"}
        assert ports.get_port("a") == assigned["a"]
        assert ports.has_active_servers() is True

        ports.release("a")
        ports.release("b")
        assert ports.has_active_servers() is False

    @pytest.mark.parametrize("instance_id", ["a?b", "a#b", "%41", "a/b", "a b"])
    def test_round_trip_with_reserved_characters(self, ports, port_manager, instance_id):
        assigned = ports.request_ports([instance_id])

        assert ports.get_port(instance_id) == assigned[instance_id]

        ports.release(instance_id)
        assert instance_id not in port_manager.registry

    def test_request_conflict_raises(self, ports):
        ports.request_ports(["a"], port=3000)

        with pytest.raises(APIError) as exc_info:
            ports.request_ports(["a"])
        assert exc_info.value.status_code == 409
        assert "3000" in exc_info.value.message

    def test_get_unknown_raises_404(self, ports):
        with pytest.raises(APIError) as exc_info:
            ports.get_port("missing")
        assert exc_info.value.status_code == 404

    def test_list_servers(self, ports):
        ports.request_ports(["a"], port=3000)
        assert ports.list_servers() == {"servers": {"a": 3000}, "count": 1}

    def test_stop_server(self, port_manager, ports):
        ports.stop_server()
        assert port_manager.wait(timeout=5)
