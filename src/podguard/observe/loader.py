"""Load observation feeds and cluster snapshots from JSON or YAML files.

Files use the broker's JSON shapes, either as a bare list or wrapped in a
mapping (``{"traffic": [...]}``, ``{"syscalls": [...]}``,
``{"pods": [...], "services": [...]}``). YAML is a superset of JSON, so a
single parser handles both.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml

from podguard.identity import PodInfo, ServiceInfo
from podguard.observe.models import SyscallRecord, TrafficRecord


def _read(path: str | Path) -> Any:
    text = Path(path).read_text(encoding="utf-8")
    return yaml.safe_load(text)


def _rows(data: Any, key: str) -> list[dict[str, Any]]:
    if data is None:
        return []
    if isinstance(data, dict):
        data = data.get(key, [])
    if not isinstance(data, list):
        raise ValueError(f"Expected a list of {key} records")
    return [row for row in data if isinstance(row, dict)]


def load_traffic(path: str | Path) -> list[TrafficRecord]:
    """Load traffic records from a file."""
    return [TrafficRecord.from_broker(row) for row in _rows(_read(path), "traffic")]


def load_syscalls(path: str | Path) -> list[SyscallRecord]:
    """Load syscall records from a file."""
    return [SyscallRecord.from_broker(row) for row in _rows(_read(path), "syscalls")]


def load_snapshot(path: str | Path) -> tuple[list[PodInfo], list[ServiceInfo]]:
    """Load known pods and services from a snapshot file."""
    data = _read(path)
    if not isinstance(data, dict):
        raise ValueError("Snapshot must be a mapping with 'pods' and 'services'")
    pods = [PodInfo.from_broker(row) for row in _rows(data, "pods")]
    services = [ServiceInfo.from_broker(row) for row in _rows(data, "services")]
    return pods, services
