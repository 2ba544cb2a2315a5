"""Async HTTP client for the telemetry broker.

The broker stores what the node agents observe and answers identity
lookups:

- ``GET /svc/ip/{ip}``          service owning a virtual IP
- ``GET /pod/ip/{ip}``          pod owning an endpoint IP
- ``GET /pod/name/{name}``      pod details (labels) by name
- ``GET /pod/traffic/{name}``   traffic samples for a pod
- ``GET /pod/syscalls/{name}``  syscall samples for a pod

Lookups return ``None`` for any non-OK answer; transport failures
(connection refused, timeouts) propagate as :class:`httpx.HTTPError` so the
caller can tell "not found" apart from "broker unreachable". Feed fetches
are required inputs and raise :class:`BrokerError` instead.
"""

from __future__ import annotations

import logging
from types import TracebackType
from typing import Any

import httpx

from podguard.errors import BrokerError
from podguard.identity import PodInfo, ServiceInfo
from podguard.observe.models import SyscallRecord, TrafficRecord

logger = logging.getLogger(__name__)


class BrokerClient:
    """Thin async wrapper over the broker REST API."""

    def __init__(
        self,
        base_url: str,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout,
            transport=transport,
        )

    async def __aenter__(self) -> BrokerClient:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    # -- identity lookups ---------------------------------------------------

    async def lookup_service(self, ip: str) -> ServiceInfo | None:
        data = await self._lookup(f"/svc/ip/{ip}")
        if not isinstance(data, dict) or not data.get("svc_name"):
            return None
        return ServiceInfo.from_broker(data)

    async def lookup_pod(self, ip: str) -> PodInfo | None:
        data = await self._lookup(f"/pod/ip/{ip}")
        if not isinstance(data, dict) or not data.get("pod_name"):
            return None
        return PodInfo.from_broker(data)

    async def lookup_pod_by_name(self, name: str) -> PodInfo | None:
        data = await self._lookup(f"/pod/name/{name}")
        if not isinstance(data, dict) or not data.get("pod_name"):
            return None
        return PodInfo.from_broker(data)

    async def lookup_workload_labels(self, name: str) -> dict[str, str] | None:
        """Selector labels for the workload behind *name*, if the broker knows it."""
        pod = await self.lookup_pod_by_name(name)
        if pod is None:
            return None
        return pod.selector_labels or None

    async def _lookup(self, path: str) -> Any:
        response = await self._client.get(path)
        if response.status_code != httpx.codes.OK:
            logger.debug("Lookup %s returned HTTP %d", path, response.status_code)
            return None
        try:
            return response.json()
        except ValueError:
            logger.debug("Lookup %s returned a non-JSON body", path)
            return None

    # -- observation feed ---------------------------------------------------

    async def get_pod_traffic(self, pod_name: str) -> list[TrafficRecord]:
        rows = await self._fetch_list(f"/pod/traffic/{pod_name}")
        return [TrafficRecord.from_broker(row) for row in rows]

    async def get_pod_syscalls(self, pod_name: str) -> list[SyscallRecord]:
        rows = await self._fetch_list(f"/pod/syscalls/{pod_name}")
        return [SyscallRecord.from_broker(row) for row in rows]

    async def _fetch_list(self, path: str) -> list[dict[str, Any]]:
        url = f"{self.base_url}{path}"
        try:
            response = await self._client.get(path)
        except httpx.HTTPError as exc:
            raise BrokerError(url, str(exc) or type(exc).__name__) from exc

        # No samples recorded yet; a baseline document is still useful.
        if response.status_code == httpx.codes.NOT_FOUND:
            logger.info("No data recorded at %s", url)
            return []
        if response.status_code != httpx.codes.OK:
            raise BrokerError(url, f"HTTP {response.status_code}")

        try:
            data = response.json()
        except ValueError as exc:
            raise BrokerError(url, "response is not JSON") from exc
        if data is None:
            return []
        if isinstance(data, dict):
            data = [data]
        if not isinstance(data, list):
            raise BrokerError(url, "expected a JSON list")
        return [row for row in data if isinstance(row, dict)]
