"""Render policy documents to Kubernetes manifests (YAML) and seccomp JSON.

Maps keep the insertion order of the document objects, so serializing an
unchanged document twice yields byte-identical text.
"""

from __future__ import annotations

import json
from typing import Any

import yaml

from podguard.policy.models import (
    SECCOMP_PROFILE_API_VERSION,
    LabelSelector,
    NetworkPolicy,
    Peer,
    PortSpec,
    Rule,
    SeccompProfile,
)


def _dump_yaml(data: dict[str, Any]) -> str:
    result: str = yaml.dump(
        data,
        default_flow_style=False,
        sort_keys=False,
        allow_unicode=True,
    )
    return result


# ---------------------------------------------------------------------------
# NetworkPolicy
# ---------------------------------------------------------------------------


def network_policy_to_dict(policy: NetworkPolicy) -> dict[str, Any]:
    """The plain manifest mapping for a NetworkPolicy."""
    spec: dict[str, Any] = {
        "podSelector": _selector(policy.spec.pod_selector),
        "policyTypes": list(policy.spec.policy_types),
    }
    if policy.spec.ingress:
        spec["ingress"] = [_rule(r, "from") for r in policy.spec.ingress]
    if policy.spec.egress:
        spec["egress"] = [_rule(r, "to") for r in policy.spec.egress]

    return {
        "apiVersion": policy.api_version,
        "kind": policy.kind,
        "metadata": {
            "name": policy.metadata.name,
            "namespace": policy.metadata.namespace,
        },
        "spec": spec,
    }


def network_policy_to_yaml(policy: NetworkPolicy) -> str:
    return _dump_yaml(network_policy_to_dict(policy))


def _selector(selector: LabelSelector) -> dict[str, Any]:
    return {"matchLabels": dict(selector.match_labels)}


def _rule(rule: Rule, peers_field: str) -> dict[str, Any]:
    data: dict[str, Any] = {}
    if rule.peers:
        data[peers_field] = [_peer(p) for p in rule.peers]
    if rule.ports:
        data["ports"] = [_port(p) for p in rule.ports]
    return data


def _peer(peer: Peer) -> dict[str, Any]:
    data: dict[str, Any] = {}
    if peer.ip_block is not None:
        block: dict[str, Any] = {"cidr": peer.ip_block.cidr}
        if peer.ip_block.except_:
            block["except"] = list(peer.ip_block.except_)
        data["ipBlock"] = block
    if peer.pod_selector is not None:
        data["podSelector"] = _selector(peer.pod_selector)
    if peer.namespace_selector is not None:
        data["namespaceSelector"] = _selector(peer.namespace_selector)
    return data


def _port(port: PortSpec) -> dict[str, Any]:
    return {"protocol": port.protocol, "port": port.port}


# ---------------------------------------------------------------------------
# SeccompProfile
# ---------------------------------------------------------------------------


def seccomp_profile_to_dict(profile: SeccompProfile) -> dict[str, Any]:
    """The raw seccomp profile mapping, as the container runtime reads it."""
    return {
        "defaultAction": profile.default_action.value,
        "architectures": list(profile.architectures),
        "syscalls": [
            {"names": list(rule.names), "action": rule.action.value}
            for rule in profile.syscalls
        ],
    }


def seccomp_profile_to_json(profile: SeccompProfile) -> str:
    return json.dumps(seccomp_profile_to_dict(profile), indent=2)


def seccomp_profile_to_yaml(
    profile: SeccompProfile,
    resource_name: str,
    namespace: str,
) -> str:
    """Wrap the profile in a ``SeccompProfile`` custom resource."""
    spec: dict[str, Any] = {"defaultAction": profile.default_action.value}
    if profile.architectures:
        spec["architectures"] = list(profile.architectures)
    if profile.syscalls:
        spec["syscalls"] = [
            {"names": list(rule.names), "action": rule.action.value}
            for rule in profile.syscalls
        ]

    data = {
        "apiVersion": SECCOMP_PROFILE_API_VERSION,
        "kind": "SeccompProfile",
        "metadata": {
            "name": f"{resource_name}-seccomp",
            "namespace": namespace,
        },
        "spec": spec,
    }
    return _dump_yaml(data)
