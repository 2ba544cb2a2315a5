"""NetworkPolicy synthesis — turn aggregated peers into ingress/egress rules."""

from __future__ import annotations

import ipaddress
from collections.abc import Iterable

from podguard.identity import WorkloadIdentity, freeze_labels
from podguard.policy.aggregator import AggregatedRule
from podguard.policy.models import (
    NAMESPACE_NAME_LABEL,
    IPBlock,
    LabelSelector,
    NetworkPolicy,
    NetworkPolicySpec,
    ObjectMeta,
    Peer,
    PortSpec,
    Rule,
)


def synthesize_network_policy(
    workload: WorkloadIdentity,
    ingress: Iterable[AggregatedRule] = (),
    egress: Iterable[AggregatedRule] = (),
) -> NetworkPolicy:
    """Build a NetworkPolicy allowing exactly the aggregated peers and ports."""
    namespace = workload.namespace
    return NetworkPolicy(
        metadata=ObjectMeta(
            name=f"{workload.resource_name}-policy",
            namespace=namespace,
        ),
        spec=NetworkPolicySpec(
            pod_selector=LabelSelector(freeze_labels(workload.match_labels)),
            ingress=tuple(_build_rule(r, namespace) for r in ingress),
            egress=tuple(_build_rule(r, namespace) for r in egress),
        ),
    )


def _build_rule(candidate: AggregatedRule, own_namespace: str) -> Rule:
    return Rule(
        peers=(_build_peer(candidate, own_namespace),),
        ports=tuple(_port_spec(proto, port) for proto, port in candidate.ports),
    )


def _build_peer(candidate: AggregatedRule, own_namespace: str) -> Peer:
    identity = candidate.identity
    if identity.is_external:
        return Peer(ip_block=IPBlock(cidr=host_cidr(candidate.peer_ip)))

    labels = identity.labels or (("app", identity.name),)
    namespace_selector = None
    if identity.namespace and identity.namespace != own_namespace:
        namespace_selector = LabelSelector(
            ((NAMESPACE_NAME_LABEL, identity.namespace),)
        )
    return Peer(
        pod_selector=LabelSelector(labels),
        namespace_selector=namespace_selector,
    )


def host_cidr(ip: str) -> str:
    """Single-host CIDR for *ip*: ``/32`` for IPv4, ``/128`` for IPv6."""
    try:
        addr = ipaddress.ip_address(ip)
    except ValueError:
        return f"{ip}/32"
    return f"{addr}/{addr.max_prefixlen}"


def _port_spec(protocol: str, port: str) -> PortSpec:
    # Only plain ASCII digits become numbers; "4_43", "-1" and "https" stay as-is.
    value: int | str = int(port) if port.isascii() and port.isdigit() else port
    return PortSpec(protocol=protocol.upper(), port=value)
