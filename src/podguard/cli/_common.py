"""Helpers shared by the synthesis commands."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path

import click
import httpx
from rich.console import Console

from podguard.broker import BrokerClient
from podguard.identity import PodInfo, WorkloadIdentity

logger = logging.getLogger(__name__)

console = Console(stderr=True)


def workload_from_snapshot(
    name: str, namespace: str, pods: Iterable[PodInfo]
) -> WorkloadIdentity | None:
    for pod in pods:
        if pod.name == name and (pod.namespace or namespace) == namespace:
            return WorkloadIdentity.from_pod(pod, namespace)
    return None


async def workload_from_broker(
    client: BrokerClient, name: str, namespace: str
) -> WorkloadIdentity:
    """Look the workload up for its labels; fall back to a bare identity."""
    try:
        pod = await client.lookup_pod_by_name(name)
    except httpx.HTTPError as exc:
        logger.debug("Workload lookup for %s failed: %s", name, exc)
        pod = None
    if pod is None:
        return WorkloadIdentity(name=name, namespace=namespace)
    return WorkloadIdentity.from_pod(pod, namespace)


def emit(text: str, output: str | None, what: str) -> None:
    """Write *text* to *output*, or to stdout when no path is given."""
    if output:
        Path(output).write_text(text, encoding="utf-8")
        console.print(f"[green]{what} written to {output}[/green]")
    else:
        click.echo(text, nl=False)
