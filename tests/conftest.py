"""Shared test fixtures."""

from __future__ import annotations

import asyncio
import json
from pathlib import Path

import httpx
import pytest

from podguard.identity import PodInfo, ServiceInfo, WorkloadIdentity


class FakeBroker:
    """In-memory stand-in for BrokerClient's lookup methods."""

    base_url = "http://broker.test"

    def __init__(
        self,
        services: dict[str, ServiceInfo] | None = None,
        pods: dict[str, PodInfo] | None = None,
        labels: dict[str, dict[str, str]] | None = None,
        error: Exception | None = None,
        delay: float = 0.0,
        timeout: float = 1.0,
    ) -> None:
        self.services = services or {}
        self.pods = pods or {}
        self.labels = labels or {}
        self.error = error
        self.delay = delay
        self.timeout = timeout
        self.calls: list[tuple[str, str]] = []

    async def _answer(self, kind: str, key: str, table: dict):
        self.calls.append((kind, key))
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return table.get(key)

    async def lookup_service(self, ip: str):
        return await self._answer("service", ip, self.services)

    async def lookup_pod(self, ip: str):
        return await self._answer("pod", ip, self.pods)

    async def lookup_workload_labels(self, name: str):
        return await self._answer("labels", name, self.labels)


@pytest.fixture
def fake_broker_cls() -> type[FakeBroker]:
    return FakeBroker


@pytest.fixture
def workload() -> WorkloadIdentity:
    return WorkloadIdentity(name="api", namespace="default")


@pytest.fixture
def payments_service() -> ServiceInfo:
    return ServiceInfo(name="payments", namespace="billing", ip="10.0.0.5")


@pytest.fixture
def web_pod() -> PodInfo:
    return PodInfo(
        name="web-7d9f",
        namespace="default",
        ip="10.1.0.7",
        labels=(("app", "web"), ("pod-template-hash", "7d9f")),
        workload_selector_labels=(("app", "web"),),
    )


@pytest.fixture
def snapshot_data() -> dict:
    return {
        "pods": [
            {
                "pod_name": "api-5c8b",
                "pod_namespace": "default",
                "pod_ip": "10.1.0.2",
                "pod_obj": {"metadata": {"labels": {"app": "api", "tier": "backend"}}},
                "workload_selector_labels": {"app": "api"},
            },
            {
                "pod_name": "web-7d9f",
                "pod_namespace": "default",
                "pod_ip": "10.1.0.7",
                "pod_obj": {"metadata": {"labels": {"app": "web"}}},
            },
        ],
        "services": [
            {
                "svc_name": "payments",
                "svc_namespace": "billing",
                "svc_ip": "10.0.0.5",
                "service_spec": {"spec": {"selector": {"app": "payments"}}},
            }
        ],
    }


@pytest.fixture
def traffic_data() -> list[dict]:
    return [
        {
            "traffic_in_out_ip": "10.0.0.5",
            "traffic_in_out_port": "443",
            "pod_port": "51000",
            "ip_protocol": "TCP",
            "traffic_type": "EGRESS",
            "decision": "ALLOW",
            "time_stamp": "2026-10-01T12:00:00Z",
        },
        {
            "traffic_in_out_ip": "10.1.0.7",
            "traffic_in_out_port": "39000",
            "pod_port": "8080",
            "ip_protocol": "TCP",
            "traffic_type": "INGRESS",
            "decision": "ALLOW",
            "time_stamp": "2026-10-01T12:00:01Z",
        },
        {
            "traffic_in_out_ip": "93.184.216.34",
            "traffic_in_out_port": "443",
            "pod_port": "51001",
            "ip_protocol": "TCP",
            "traffic_type": "EGRESS",
            "decision": "ALLOW",
            "time_stamp": "2026-10-01T12:00:02Z",
        },
    ]


@pytest.fixture
def write_json(tmp_path: Path):
    def _write(name: str, data: object) -> Path:
        path = tmp_path / name
        path.write_text(json.dumps(data), encoding="utf-8")
        return path

    return _write


@pytest.fixture
def mock_transport_factory():
    """Build an httpx.MockTransport from a path → (status, json) table."""

    def _factory(routes: dict[str, tuple[int, object]]) -> httpx.MockTransport:
        def handler(request: httpx.Request) -> httpx.Response:
            status, body = routes.get(request.url.path, (404, {"detail": "not found"}))
            return httpx.Response(status, json=body)

        return httpx.MockTransport(handler)

    return _factory
