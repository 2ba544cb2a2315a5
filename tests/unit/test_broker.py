"""Tests for the broker HTTP client."""

from __future__ import annotations

import asyncio

import httpx
import pytest

from podguard.broker import BrokerClient
from podguard.errors import BrokerError
from podguard.observe.models import Direction

run_async = asyncio.run

BASE = "http://broker.test"


def _refusing_transport() -> httpx.MockTransport:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    return httpx.MockTransport(handler)


def _call(transport: httpx.MockTransport, method: str, *args):
    async def _run():
        async with BrokerClient(BASE, timeout=1.0, transport=transport) as client:
            return await getattr(client, method)(*args)

    return run_async(_run())


class TestLookups:
    def test_service(self, mock_transport_factory):
        transport = mock_transport_factory(
            {
                "/svc/ip/10.0.0.5": (
                    200,
                    {
                        "svc_name": "payments",
                        "svc_namespace": "billing",
                        "svc_ip": "10.0.0.5",
                        "service_spec": {"spec": {"selector": {"app": "payments"}}},
                    },
                )
            }
        )
        svc = _call(transport, "lookup_service", "10.0.0.5")
        assert svc.name == "payments"
        assert svc.namespace == "billing"
        assert svc.selector == (("app", "payments"),)

    def test_pod(self, mock_transport_factory):
        transport = mock_transport_factory(
            {"/pod/ip/10.1.0.7": (200, {"pod_name": "web", "pod_namespace": "default"})}
        )
        pod = _call(transport, "lookup_pod", "10.1.0.7")
        assert pod.name == "web"

    def test_not_found_is_none(self, mock_transport_factory):
        transport = mock_transport_factory({})
        assert _call(transport, "lookup_service", "10.9.9.9") is None
        assert _call(transport, "lookup_pod", "10.9.9.9") is None

    def test_empty_answer_is_none(self, mock_transport_factory):
        transport = mock_transport_factory({"/svc/ip/10.0.0.5": (200, {})})
        assert _call(transport, "lookup_service", "10.0.0.5") is None

    def test_server_error_is_none(self, mock_transport_factory):
        transport = mock_transport_factory({"/pod/ip/10.1.0.7": (500, {"detail": "boom"})})
        assert _call(transport, "lookup_pod", "10.1.0.7") is None

    def test_workload_labels(self, mock_transport_factory):
        transport = mock_transport_factory(
            {
                "/pod/name/web": (
                    200,
                    {
                        "pod_name": "web",
                        "pod_obj": {"metadata": {"labels": {"app": "web", "h": "1"}}},
                        "workload_selector_labels": {"app": "web"},
                    },
                )
            }
        )
        assert _call(transport, "lookup_workload_labels", "web") == {"app": "web"}
        assert _call(transport, "lookup_workload_labels", "missing") is None

    def test_transport_error_propagates(self):
        with pytest.raises(httpx.ConnectError):
            _call(_refusing_transport(), "lookup_service", "10.0.0.5")


class TestFeeds:
    def test_traffic(self, mock_transport_factory, traffic_data):
        transport = mock_transport_factory({"/pod/traffic/api": (200, traffic_data)})
        records = _call(transport, "get_pod_traffic", "api")
        assert len(records) == 3
        assert records[1].direction is Direction.INGRESS
        assert records[1].rule_port == "8080"

    def test_syscalls(self, mock_transport_factory):
        transport = mock_transport_factory(
            {"/pod/syscalls/api": (200, [{"syscalls": "read,write", "arch": "x86_64"}])}
        )
        (record,) = _call(transport, "get_pod_syscalls", "api")
        assert record.syscall_names == "read,write"
        assert record.architecture == "x86_64"

    def test_single_object_wrapped(self, mock_transport_factory):
        transport = mock_transport_factory(
            {"/pod/syscalls/api": (200, {"syscalls": "read", "arch": "x86_64"})}
        )
        assert len(_call(transport, "get_pod_syscalls", "api")) == 1

    def test_not_found_is_empty(self, mock_transport_factory):
        assert _call(mock_transport_factory({}), "get_pod_traffic", "api") == []

    def test_server_error_raises(self, mock_transport_factory):
        transport = mock_transport_factory({"/pod/traffic/api": (503, {})})
        with pytest.raises(BrokerError, match="HTTP 503"):
            _call(transport, "get_pod_traffic", "api")

    def test_wrong_shape_raises(self, mock_transport_factory):
        transport = mock_transport_factory({"/pod/traffic/api": (200, "nope")})
        with pytest.raises(BrokerError, match="expected a JSON list"):
            _call(transport, "get_pod_traffic", "api")

    def test_unreachable_raises_broker_error(self):
        with pytest.raises(BrokerError) as excinfo:
            _call(_refusing_transport(), "get_pod_traffic", "api")
        assert excinfo.value.url == f"{BASE}/pod/traffic/api"
