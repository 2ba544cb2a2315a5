"""Peer and workload identities — what an observed IP address turns out to be."""

from __future__ import annotations

import enum
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

DEFAULT_NAMESPACE = "default"

# Hubble-style identity labels, highest priority first.
_IDENTITY_LABELS = (
    "app.kubernetes.io/name",
    "app",
    "k8s-app",
    "app.kubernetes.io/component",
    "gateway.networking.k8s.io/gateway-name",
)

Labels = tuple[tuple[str, str], ...]


def freeze_labels(labels: Mapping[str, Any] | None) -> Labels:
    """Turn a label mapping into a hashable tuple, keeping insertion order."""
    if not labels:
        return ()
    return tuple((str(k), str(v)) for k, v in labels.items())


class PeerKind(enum.Enum):
    """Which variant of :class:`PeerIdentity` holds."""

    POD = "pod"
    SERVICE = "service"
    EXTERNAL = "external"


@dataclass(frozen=True)
class PeerIdentity:
    """The resolved identity of the remote side of a connection.

    Exactly one variant holds, selected by ``kind``. External identities have
    no name or namespace. ``labels`` are the target's selector labels when
    known; they never take part in grouping.
    """

    kind: PeerKind
    name: str = ""
    namespace: str = ""
    labels: Labels = field(default=(), compare=False)

    @classmethod
    def pod(
        cls,
        name: str,
        namespace: str | None = None,
        labels: Mapping[str, Any] | None = None,
    ) -> PeerIdentity:
        return cls(PeerKind.POD, name, namespace or "", freeze_labels(labels))

    @classmethod
    def service(
        cls,
        name: str,
        namespace: str | None = None,
        labels: Mapping[str, Any] | None = None,
    ) -> PeerIdentity:
        return cls(PeerKind.SERVICE, name, namespace or "", freeze_labels(labels))

    @classmethod
    def external(cls) -> PeerIdentity:
        return cls(PeerKind.EXTERNAL)

    @property
    def is_external(self) -> bool:
        return self.kind is PeerKind.EXTERNAL

    @property
    def match_labels(self) -> dict[str, str]:
        return dict(self.labels)


EXTERNAL = PeerIdentity.external()


def derive_identity_name(
    name: str,
    namespace: str | None = None,
    labels: Mapping[str, str] | None = None,
) -> str:
    """Derive a ``namespace/app`` identity following Cilium Hubble conventions.

    Checks well-known app labels in priority order and falls back to the pod
    name when none is set.
    """
    ns = namespace or DEFAULT_NAMESPACE
    for key in _IDENTITY_LABELS:
        value = (labels or {}).get(key)
        if value:
            return f"{ns}/{value}"
    return f"{ns}/{name}"


def _mapping(value: Any) -> dict[str, Any]:
    """*value* if the broker sent a JSON object there, else an empty dict."""
    return value if isinstance(value, dict) else {}


def _pod_labels(pod_obj: Any) -> dict[str, str]:
    labels = _mapping(_mapping(_mapping(pod_obj).get("metadata")).get("labels"))
    return {str(k): str(v) for k, v in labels.items()}


@dataclass(frozen=True)
class PodInfo:
    """A known pod, as reported by the broker's ``/pod/*`` endpoints."""

    name: str
    namespace: str = ""
    ip: str = ""
    labels: Labels = ()
    workload_selector_labels: Labels = ()
    identity: str = ""

    @classmethod
    def from_broker(cls, data: dict[str, Any]) -> PodInfo:
        return cls(
            name=str(data.get("pod_name") or ""),
            namespace=str(data.get("pod_namespace") or ""),
            ip=str(data.get("pod_ip") or ""),
            labels=freeze_labels(_pod_labels(data.get("pod_obj"))),
            workload_selector_labels=freeze_labels(
                _mapping(data.get("workload_selector_labels"))
            ),
            identity=str(data.get("pod_identity") or ""),
        )

    @property
    def selector_labels(self) -> dict[str, str]:
        """Workload selector labels, falling back to the pod's own labels."""
        return dict(self.workload_selector_labels or self.labels)


@dataclass(frozen=True)
class ServiceInfo:
    """A known service, as reported by the broker's ``/svc/ip`` endpoint."""

    name: str
    namespace: str = ""
    ip: str = ""
    selector: Labels = ()

    @classmethod
    def from_broker(cls, data: dict[str, Any]) -> ServiceInfo:
        spec = _mapping(_mapping(data.get("service_spec")).get("spec"))
        selector = _mapping(spec.get("selector"))
        return cls(
            name=str(data.get("svc_name") or ""),
            namespace=str(data.get("svc_namespace") or ""),
            ip=str(data.get("svc_ip") or ""),
            selector=freeze_labels(selector),
        )


@dataclass(frozen=True)
class WorkloadIdentity:
    """The workload a policy is synthesized for."""

    name: str
    namespace: str = DEFAULT_NAMESPACE
    labels: Labels = ()
    workload_selector_labels: Labels = ()
    identity: str = ""

    @classmethod
    def from_pod(
        cls, pod: PodInfo, namespace: str = DEFAULT_NAMESPACE
    ) -> WorkloadIdentity:
        ns = pod.namespace or namespace
        identity = pod.identity or derive_identity_name(
            pod.name, ns, dict(pod.labels)
        )
        return cls(
            name=pod.name,
            namespace=ns,
            labels=pod.labels,
            workload_selector_labels=pod.workload_selector_labels,
            identity=identity,
        )

    @property
    def resource_name(self) -> str:
        """Base name for generated resources.

        Identities look like ``namespace/app``; only the app part is usable
        in a resource name.
        """
        if self.identity:
            return self.identity.rsplit("/", 1)[-1]
        return self.name

    @property
    def match_labels(self) -> dict[str, str]:
        """Labels that select this workload's pods."""
        if self.workload_selector_labels:
            return dict(self.workload_selector_labels)
        if self.labels:
            return dict(self.labels)
        return {"app": self.name}
