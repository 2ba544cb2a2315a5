"""CLI command: podguard peers — show how observed traffic groups into peers."""

from __future__ import annotations

import click
from rich.table import Table

from podguard.cli._common import console
from podguard.identity import PeerKind
from podguard.observe.loader import load_snapshot, load_traffic
from podguard.observe.models import TrafficRecord, display_port
from podguard.policy.aggregator import AggregatedRule, aggregate
from podguard.resolve import SnapshotResolver

_KIND_COLORS = {
    PeerKind.POD: "cyan",
    PeerKind.SERVICE: "magenta",
    PeerKind.EXTERNAL: "yellow",
}


@click.command()
@click.option(
    "--input",
    "-i",
    "input_path",
    type=click.Path(exists=True, dir_okay=False),
    required=True,
    help="Traffic records file (JSON/YAML).",
)
@click.option(
    "--snapshot",
    "-s",
    "snapshot_path",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help="Known pods/services file used to resolve peer IPs.",
)
@click.option("--raw", is_flag=True, help="List the raw records instead.")
def peers(input_path: str, snapshot_path: str | None, raw: bool) -> None:
    """Show the peers a traffic file aggregates into, one row per rule."""
    try:
        records = load_traffic(input_path)
        pods, services = load_snapshot(snapshot_path) if snapshot_path else ([], [])
    except ValueError as exc:
        console.print(f"[red]Error:[/red] {exc}")
        raise SystemExit(1)

    if raw:
        console.print(_records_table(records))
        return

    resolver = SnapshotResolver.from_snapshot(pods, services)
    result = aggregate(records, resolver)

    if not result.ingress and not result.egress:
        console.print("[yellow]No actionable traffic records.[/yellow]")
        return

    rule_count = len(result.ingress) + len(result.egress)
    table = Table(title=f"{len(records)} record(s) → {rule_count} rule(s)")
    table.add_column("Direction")
    table.add_column("Kind")
    table.add_column("Peer")
    table.add_column("Namespace")
    table.add_column("Ports")
    table.add_column("Samples", justify="right")

    for rule in result.ingress + result.egress:
        _add_rule_row(table, rule)
    console.print(table)


def _add_rule_row(table: Table, rule: AggregatedRule) -> None:
    identity = rule.identity
    color = _KIND_COLORS[identity.kind]
    peer = rule.peer_ip if identity.is_external else identity.name
    ports = ", ".join(f"{port}/{proto}" for proto, port in rule.ports)
    table.add_row(
        rule.key.direction.value,
        f"[{color}]{identity.kind.value}[/{color}]",
        peer,
        rule.key.namespace or "-",
        ports,
        str(rule.count),
    )


def _records_table(records: list[TrafficRecord]) -> Table:
    table = Table(title=f"{len(records)} record(s)")
    table.add_column("Direction")
    table.add_column("Peer IP")
    table.add_column("Peer port")
    table.add_column("Pod port")
    table.add_column("Protocol")
    table.add_column("Decision")
    for r in records:
        table.add_row(
            r.direction.value if r.direction else "-",
            r.peer_ip or "-",
            display_port(r.peer_port),
            display_port(r.workload_port),
            r.protocol,
            r.decision.value if r.decision else "-",
        )
    return table
