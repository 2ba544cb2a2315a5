"""Observation feed — traffic and syscall records for a single workload."""

from podguard.observe.models import (
    Decision,
    Direction,
    SyscallRecord,
    TrafficRecord,
    display_port,
)

__all__ = [
    "Decision",
    "Direction",
    "SyscallRecord",
    "TrafficRecord",
    "display_port",
]
