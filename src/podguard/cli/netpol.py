"""CLI command: podguard netpol — synthesize a NetworkPolicy for a pod."""

from __future__ import annotations

import asyncio

import click

from podguard.broker import BrokerClient
from podguard.cli._common import console, emit, workload_from_broker, workload_from_snapshot
from podguard.config import PodguardConfig
from podguard.errors import BrokerError
from podguard.identity import DEFAULT_NAMESPACE, WorkloadIdentity
from podguard.observe.loader import load_snapshot, load_traffic
from podguard.policy.serialize import network_policy_to_yaml
from podguard.resolve import SnapshotResolver
from podguard.synth import (
    PolicySynthesis,
    SynthesisStatus,
    synthesize_policy,
    synthesize_policy_via_broker,
)


@click.command()
@click.argument("pod")
@click.option("--namespace", "-n", default=DEFAULT_NAMESPACE, help="Pod namespace.")
@click.option(
    "--input",
    "-i",
    "input_path",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help="Traffic records file (JSON/YAML). Defaults to fetching from the broker.",
)
@click.option(
    "--snapshot",
    "-s",
    "snapshot_path",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help="Known pods/services file. Resolves peers locally instead of via the broker.",
)
@click.option(
    "--output",
    "-o",
    type=click.Path(),
    default=None,
    help="Output YAML file path.",
)
@click.pass_context
def netpol(
    ctx: click.Context,
    pod: str,
    namespace: str,
    input_path: str | None,
    snapshot_path: str | None,
    output: str | None,
) -> None:
    """Synthesize a NetworkPolicy allowing the traffic observed for POD."""
    config: PodguardConfig = ctx.obj["config"]

    try:
        result = asyncio.run(
            _synthesize(config, pod, namespace, input_path, snapshot_path)
        )
    except (BrokerError, ValueError) as exc:
        console.print(f"[red]Error:[/red] {exc}")
        raise SystemExit(1)

    if result.status is SynthesisStatus.DEGRADED:
        for warning in result.warnings:
            console.print(f"[yellow]Warning:[/yellow] {warning}")

    agg = result.aggregation
    console.print(
        f"[bold]podguard[/bold] {result.policy.metadata.name}: "
        f"{len(agg.ingress)} ingress, {len(agg.egress)} egress rule(s)"
    )
    emit(network_policy_to_yaml(result.policy), output, "NetworkPolicy")


async def _synthesize(
    config: PodguardConfig,
    pod: str,
    namespace: str,
    input_path: str | None,
    snapshot_path: str | None,
) -> PolicySynthesis:
    if snapshot_path and input_path:
        # Fully offline: no broker needed.
        pods, services = load_snapshot(snapshot_path)
        workload = workload_from_snapshot(pod, namespace, pods) or WorkloadIdentity(
            name=pod, namespace=namespace
        )
        resolver = SnapshotResolver.from_snapshot(pods, services)
        return synthesize_policy(workload, load_traffic(input_path), resolver)

    async with BrokerClient(config.broker_url, timeout=config.lookup_timeout) as client:
        if input_path:
            records = load_traffic(input_path)
        else:
            records = await client.get_pod_traffic(pod)

        if snapshot_path:
            pods, services = load_snapshot(snapshot_path)
            workload = workload_from_snapshot(pod, namespace, pods) or (
                await workload_from_broker(client, pod, namespace)
            )
            resolver = SnapshotResolver.from_snapshot(pods, services)
            return synthesize_policy(workload, records, resolver)

        workload = await workload_from_broker(client, pod, namespace)
        return await synthesize_policy_via_broker(
            workload, records, client, timeout=config.lookup_timeout
        )
