"""Tests for end-to-end synthesis runs."""

from __future__ import annotations

import asyncio

import httpx

from podguard.broker import BrokerClient
from podguard.identity import PodInfo, ServiceInfo
from podguard.observe.models import Direction, SyscallRecord, TrafficRecord
from podguard.resolve import SnapshotResolver
from podguard.synth import (
    SynthesisStatus,
    synthesize_policy,
    synthesize_policy_via_broker,
    synthesize_profile,
)

run_async = asyncio.run


def _egress(ip: str, port: str = "443") -> TrafficRecord:
    return TrafficRecord(peer_ip=ip, peer_port=port, direction=Direction.EGRESS)


class TestSnapshotRun:
    def test_scenario(self, workload, payments_service):
        resolver = SnapshotResolver.from_snapshot(pods=[], services=[payments_service])
        result = synthesize_policy(workload, [_egress("10.0.0.5")] * 3, resolver)
        assert result.status is SynthesisStatus.OK
        assert result.warnings == ()
        assert result.policy.spec.policy_types == ("Egress",)
        assert len(result.aggregation.egress) == 1
        assert result.aggregation.egress[0].count == 3


class TestBrokerRun:
    def test_resolves_through_broker(self, fake_broker_cls, workload, web_pod):
        broker = fake_broker_cls(
            services={"10.0.0.5": ServiceInfo("payments", "billing", "10.0.0.5")},
            pods={"10.1.0.7": web_pod},
            labels={"payments": {"app": "payments"}},
        )
        records = [_egress("10.0.0.5"), _egress("10.1.0.7", "8080"), _egress("1.1.1.1")]
        result = run_async(synthesize_policy_via_broker(workload, records, broker))

        assert result.status is SynthesisStatus.OK
        peers = [rule.peers[0] for rule in result.policy.spec.egress]
        assert len(peers) == 3
        assert peers[0].pod_selector.match_labels == (("app", "payments"),)
        assert peers[0].namespace_selector is not None
        assert peers[1].pod_selector.match_labels == (("app", "web"),)
        assert peers[1].namespace_selector is None
        assert peers[2].ip_block.cidr == "1.1.1.1/32"

    def test_misses_are_not_failures(self, fake_broker_cls, workload):
        broker = fake_broker_cls(pods={"10.1.0.7": PodInfo("web", "default", "10.1.0.7")})
        result = run_async(
            synthesize_policy_via_broker(workload, [_egress("10.1.0.7")], broker)
        )
        assert result.status is SynthesisStatus.OK

    def test_unreachable_broker_degrades(self, fake_broker_cls, workload):
        broker = fake_broker_cls(error=httpx.ConnectError("connection refused"))
        records = [_egress("10.0.0.5"), _egress("8.8.8.8")]
        result = run_async(
            synthesize_policy_via_broker(workload, records, broker, timeout=1.0)
        )

        assert result.status is SynthesisStatus.DEGRADED
        assert len(result.warnings) == 1
        assert "All 4 identity lookup(s)" in result.warnings[0]
        assert broker.base_url in result.warnings[0]
        # Still a usable policy: every peer became an IP block.
        cidrs = [rule.peers[0].ip_block.cidr for rule in result.policy.spec.egress]
        assert cidrs == ["10.0.0.5/32", "8.8.8.8/32"]

    def test_no_records_not_degraded(self, fake_broker_cls, workload):
        broker = fake_broker_cls(error=httpx.ConnectError("connection refused"))
        result = run_async(synthesize_policy_via_broker(workload, [], broker))
        assert result.status is SynthesisStatus.OK
        assert result.policy.spec.policy_types == ()


class TestMalformedBrokerReplies:
    def test_bad_service_spec_still_yields_policy(self, workload, mock_transport_factory):
        transport = mock_transport_factory(
            {
                "/svc/ip/10.0.0.5": (
                    200,
                    {
                        "svc_name": "payments",
                        "svc_namespace": "billing",
                        "service_spec": {"spec": "oops"},
                    },
                ),
                "/pod/ip/10.1.0.7": (
                    200,
                    {"pod_name": "web", "pod_obj": {"metadata": "oops"}},
                ),
            }
        )

        async def _run():
            async with BrokerClient("http://broker.test", transport=transport) as client:
                records = [_egress("10.0.0.5"), _egress("10.1.0.7", "8080")]
                return await synthesize_policy_via_broker(workload, records, client)

        result = run_async(_run())
        assert result.status is SynthesisStatus.OK
        payments, web = (rule.peers[0] for rule in result.policy.spec.egress)
        assert payments.pod_selector.match_labels == (("app", "payments"),)
        assert payments.namespace_selector is not None
        assert web.pod_selector.match_labels == (("app", "web"),)


class TestProfileRun:
    def test_reports_invalid_names(self):
        result = synthesize_profile(
            [SyscallRecord("read,INVALID_X", "x86_64"), SyscallRecord("write")]
        )
        assert result.invalid == ("INVALID_X",)
        assert result.profile.syscalls[0].names == ("read", "write")

    def test_explicit_architectures_win(self):
        result = synthesize_profile(
            [SyscallRecord("read", "x86_64")], architectures=["SCMP_ARCH_ARM"]
        )
        assert result.profile.architectures == ("SCMP_ARCH_ARM",)
