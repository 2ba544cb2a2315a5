"""REST API for NetworkPolicy synthesis (snapshot mode)."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter
from pydantic import BaseModel, Field

from podguard.identity import DEFAULT_NAMESPACE, PodInfo, ServiceInfo, WorkloadIdentity
from podguard.observe.models import TrafficRecord
from podguard.policy.serialize import network_policy_to_dict, network_policy_to_yaml
from podguard.resolve import SnapshotResolver
from podguard.synth import synthesize_policy

router = APIRouter(tags=["networkpolicy"])


class Workload(BaseModel):
    name: str
    namespace: str = DEFAULT_NAMESPACE
    labels: dict[str, str] = Field(default_factory=dict)
    workload_selector_labels: dict[str, str] = Field(default_factory=dict)
    identity: str = ""


class NetworkPolicyRequest(BaseModel):
    workload: Workload
    traffic: list[dict[str, Any]] = Field(default_factory=list)
    pods: list[dict[str, Any]] = Field(default_factory=list)
    services: list[dict[str, Any]] = Field(default_factory=list)


@router.post("/networkpolicy")
async def create_network_policy(body: NetworkPolicyRequest):
    workload = WorkloadIdentity(
        name=body.workload.name,
        namespace=body.workload.namespace or DEFAULT_NAMESPACE,
        labels=tuple(body.workload.labels.items()),
        workload_selector_labels=tuple(body.workload.workload_selector_labels.items()),
        identity=body.workload.identity,
    )
    resolver = SnapshotResolver.from_snapshot(
        pods=[PodInfo.from_broker(p) for p in body.pods],
        services=[ServiceInfo.from_broker(s) for s in body.services],
    )
    records = [TrafficRecord.from_broker(t) for t in body.traffic]

    result = synthesize_policy(workload, records, resolver)
    return {
        "status": result.status.value,
        "policy": network_policy_to_dict(result.policy),
        "yaml": network_policy_to_yaml(result.policy),
    }
