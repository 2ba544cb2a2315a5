"""CLI command: podguard seccomp — synthesize a seccomp profile for a pod."""

from __future__ import annotations

import asyncio

import click

from podguard.broker import BrokerClient
from podguard.cli._common import console, emit
from podguard.config import PodguardConfig
from podguard.errors import BrokerError
from podguard.identity import DEFAULT_NAMESPACE
from podguard.observe.loader import load_syscalls
from podguard.observe.models import SyscallRecord
from podguard.policy.models import ARCHITECTURES
from podguard.policy.serialize import seccomp_profile_to_json, seccomp_profile_to_yaml
from podguard.synth import synthesize_profile


@click.command()
@click.argument("pod")
@click.option("--namespace", "-n", default=DEFAULT_NAMESPACE, help="Pod namespace.")
@click.option(
    "--input",
    "-i",
    "input_path",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help="Syscall records file (JSON/YAML). Defaults to fetching from the broker.",
)
@click.option(
    "--format",
    "-f",
    "fmt",
    type=click.Choice(["yaml", "json"]),
    default="yaml",
    help="yaml: SeccompProfile resource. json: raw profile for the runtime.",
)
@click.option(
    "--arch",
    "architectures",
    multiple=True,
    type=click.Choice(ARCHITECTURES),
    help="SCMP_ARCH_* value to list (repeatable). Defaults to the observed arch.",
)
@click.option(
    "--output",
    "-o",
    type=click.Path(),
    default=None,
    help="Output file path.",
)
@click.pass_context
def seccomp(
    ctx: click.Context,
    pod: str,
    namespace: str,
    input_path: str | None,
    fmt: str,
    architectures: tuple[str, ...],
    output: str | None,
) -> None:
    """Synthesize a seccomp profile allowing the syscalls observed for POD."""
    config: PodguardConfig = ctx.obj["config"]

    try:
        if input_path:
            records = load_syscalls(input_path)
        else:
            records = asyncio.run(_fetch(config, pod))
    except (BrokerError, ValueError) as exc:
        console.print(f"[red]Error:[/red] {exc}")
        raise SystemExit(1)

    result = synthesize_profile(records, architectures or None)

    if result.invalid:
        console.print(
            f"[yellow]Ignored {len(result.invalid)} unknown syscall(s):[/yellow] "
            + ", ".join(result.invalid)
        )
    allowed = sum(len(rule.names) for rule in result.profile.syscalls)
    default = result.profile.default_action
    console.print(
        f"[bold]podguard[/bold] {pod}: {allowed} syscall(s) allowed, "
        f"default {default.value} ({default.description.lower()})"
    )

    if fmt == "json":
        text = seccomp_profile_to_json(result.profile) + "\n"
    else:
        text = seccomp_profile_to_yaml(result.profile, pod, namespace)
    emit(text, output, "Seccomp profile")


async def _fetch(config: PodguardConfig, pod: str) -> list[SyscallRecord]:
    async with BrokerClient(config.broker_url, timeout=config.lookup_timeout) as client:
        return await client.get_pod_syscalls(pod)
