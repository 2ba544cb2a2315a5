"""Observation records — raw traffic and syscall samples for one workload."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Any

# Ports that carry no rule information on their own (unset or ephemeral).
_UNSET_PORTS = frozenset({"", "0"})

DEFAULT_PORT = "80"
DEFAULT_PROTOCOL = "TCP"


class Direction(enum.Enum):
    """Direction of a flow relative to the observed workload."""

    INGRESS = "ingress"
    EGRESS = "egress"


class Decision(enum.Enum):
    """Verdict the datapath applied to a flow."""

    ALLOW = "ALLOW"
    DROP = "DROP"


def _str_or_none(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _parse_direction(value: Any) -> Direction | None:
    text = _str_or_none(value)
    if text is None:
        return None
    try:
        return Direction(text.lower())
    except ValueError:
        return None


def _parse_decision(value: Any) -> Decision | None:
    text = _str_or_none(value)
    if text is None:
        return None
    try:
        return Decision(text.upper())
    except ValueError:
        return None


@dataclass(frozen=True)
class TrafficRecord:
    """A single observed flow sample.

    ``peer_*`` fields describe the remote side of the connection,
    ``workload_port`` the port on the observed pod. Many records may describe
    the same logical flow.
    """

    peer_ip: str | None = None
    peer_port: str | None = None
    workload_port: str | None = None
    protocol: str = DEFAULT_PROTOCOL
    direction: Direction | None = None
    decision: Decision | None = None
    timestamp: str = ""

    @classmethod
    def from_broker(cls, data: dict[str, Any]) -> TrafficRecord:
        """Build a record from the broker's ``pod_traffic`` JSON shape."""
        return cls(
            peer_ip=_str_or_none(data.get("traffic_in_out_ip")),
            peer_port=_str_or_none(data.get("traffic_in_out_port")),
            workload_port=_str_or_none(data.get("pod_port")),
            protocol=_str_or_none(data.get("ip_protocol")) or DEFAULT_PROTOCOL,
            direction=_parse_direction(data.get("traffic_type")),
            decision=_parse_decision(data.get("decision")),
            timestamp=str(data.get("time_stamp") or ""),
        )

    @property
    def rule_port(self) -> str:
        """The destination port this flow needs a rule for.

        Ingress flows target the workload's own port, egress flows the
        peer's. Unset and ``"0"`` ports fall back to port 80.
        """
        if self.direction is Direction.INGRESS:
            port = self.workload_port
        else:
            port = self.peer_port
        if port is None or port in _UNSET_PORTS:
            return DEFAULT_PORT
        return port


@dataclass(frozen=True)
class SyscallRecord:
    """A syscall telemetry sample listing one or more syscall names."""

    syscall_names: str = ""
    architecture: str = ""
    timestamp: str = ""

    @classmethod
    def from_broker(cls, data: dict[str, Any]) -> SyscallRecord:
        """Build a record from the broker's ``pod_syscalls`` JSON shape."""
        return cls(
            syscall_names=str(data.get("syscalls") or ""),
            architecture=str(data.get("arch") or ""),
            timestamp=str(data.get("time_stamp") or ""),
        )


def display_port(port: str | None) -> str:
    """Render a port for display, hiding unset and ephemeral values."""
    if port is None or port.strip() in _UNSET_PORTS:
        return "-"
    return port.strip()
