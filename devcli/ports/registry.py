"""In-memory record of which port each dev server instance was given."""

from __future__ import annotations

import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, Callable, Collection, Iterable

from .constants import MAX_PORT_NUMBER, MIN_PORT_NUMBER
from .detect import detect_port

logger = logging.getLogger(__name__)

ASSIGNED = "assigned"
CONFLICT = "conflict"
BAD_REQUEST = "bad_request"
ERROR = "error"

Detector = Callable[..., int]

MAX_DETECT_WORKERS = 32


@dataclass
class AssignmentOutcome:
    """Result of assigning a port to one instance of a batch."""

    instance_id: str
    status: str
    port: int | None = None
    message: str | None = None

    @property
    def ok(self) -> bool:
        return self.status == ASSIGNED

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"instanceId": self.instance_id, "status": self.status, "port": self.port}
        if self.message:
            data["message"] = self.message
        return data


class PortRegistry:
    """Maps instance ids to the ports handed out to them.

    At most one port is recorded per instance id. Ports are found with
    ``detector`` (``detect_port`` by default), which is called with the
    preferred port and an ``exclude`` collection of ports already handed out.
    """

    def __init__(
        self,
        *,
        min_port: int = MIN_PORT_NUMBER,
        max_port: int = MAX_PORT_NUMBER,
        detector: Detector = detect_port,
    ) -> None:
        self.min_port = min_port
        self.max_port = max_port
        self._detector = detector
        self._ports: dict[str, int] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._ports)

    def __contains__(self, instance_id: object) -> bool:
        with self._lock:
            return instance_id in self._ports

    def servers(self) -> dict[str, int]:
        """Return a snapshot of every assignment."""
        with self._lock:
            return dict(self._ports)

    def get(self, instance_id: str) -> int | None:
        with self._lock:
            return self._ports.get(instance_id)

    def is_valid_port(self, port: int) -> bool:
        return self.min_port <= port <= self.max_port

    def release(self, instance_id: str) -> bool:
        """Forget the port of ``instance_id``.

        Returns:
            True if the instance had a port, False otherwise.
        """
        with self._lock:
            port = self._ports.pop(instance_id, None)
        if port is None:
            return False
        logger.debug("Deleted port %s for instance %s", port, instance_id)
        return True

    def clear(self) -> None:
        with self._lock:
            self._ports.clear()

    def assign(self, instance_ids: Iterable[str], port: int | None = None) -> list[AssignmentOutcome]:
        """Assign ports to a batch of instances.

        Every instance is handled on its own: an instance that already has a
        port, appears twice in the batch, or asks for an out of range port
        gets a failed outcome while the rest of the batch is still assigned.
        Port detection for the remaining instances runs concurrently and all
        detections finish before anything is recorded.

        Args:
            instance_ids: Instances that need a port.
            port: Preferred port for every instance in the batch.

        Returns:
            One AssignmentOutcome per instance id, in input order.
        """
        instance_ids = list(instance_ids)
        outcomes: list[AssignmentOutcome | None] = []
        seen: set[str] = set()

        for instance_id in instance_ids:
            existing = self.get(instance_id)
            if existing is not None:
                outcomes.append(_conflict(instance_id, existing))
            elif instance_id in seen:
                outcomes.append(
                    AssignmentOutcome(
                        instance_id,
                        CONFLICT,
                        message=f"Instance {instance_id} is listed more than once in the request",
                    )
                )
            elif port is not None and not self.is_valid_port(port):
                outcomes.append(
                    AssignmentOutcome(
                        instance_id,
                        BAD_REQUEST,
                        message=f"Port must be between {self.min_port} and {self.max_port}",
                    )
                )
            else:
                seen.add(instance_id)
                outcomes.append(None)

        pending = [index for index, outcome in enumerate(outcomes) if outcome is None]
        if pending:
            detected = self._detect_all(len(pending), port, exclude=set(self.servers().values()))
            self._record(instance_ids, pending, detected, port, outcomes)

        return [outcome for outcome in outcomes if outcome is not None]

    def _detect_all(self, count: int, port: int | None, exclude: Collection[int]) -> list[int | BaseException]:
        with ThreadPoolExecutor(max_workers=min(count, MAX_DETECT_WORKERS), thread_name_prefix="detect-port") as pool:
            futures = [pool.submit(self._detector, port, exclude=exclude) for _ in range(count)]

        results: list[int | BaseException] = []
        for future in futures:
            exc = future.exception()
            results.append(exc if exc is not None else future.result())
        return results

    def _record(
        self,
        instance_ids: list[str],
        pending: list[int],
        detected: list[int | BaseException],
        port: int | None,
        outcomes: list[AssignmentOutcome | None],
    ) -> None:
        with self._lock:
            taken = set(self._ports.values())
            for index, result in zip(pending, detected):
                instance_id = instance_ids[index]

                if isinstance(result, BaseException):
                    logger.error("Port detection failed for instance %s: %s", instance_id, result)
                    outcomes[index] = AssignmentOutcome(instance_id, ERROR, message=str(result))
                    continue

                existing = self._ports.get(instance_id)
                if existing is not None:
                    outcomes[index] = _conflict(instance_id, existing)
                    continue

                # Probes do not hold the port, so concurrent detections can agree on one.
                if result in taken:
                    try:
                        result = self._detector(port, exclude=taken)
                    except Exception as e:
                        logger.error("Port detection failed for instance %s: %s", instance_id, e)
                        outcomes[index] = AssignmentOutcome(instance_id, ERROR, message=str(e))
                        continue

                self._ports[instance_id] = result
                taken.add(result)
                logger.debug("Set port %s for instance %s", result, instance_id)
                outcomes[index] = AssignmentOutcome(instance_id, ASSIGNED, port=result)


def _conflict(instance_id: str, port: int) -> AssignmentOutcome:
    return AssignmentOutcome(
        instance_id,
        CONFLICT,
        port=port,
        message=f"Instance {instance_id} already has port {port} assigned",
    )
