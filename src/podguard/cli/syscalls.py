"""CLI commands: podguard syscalls check|suggest — query the syscall registry."""

from __future__ import annotations

import click

from podguard import syscalls as registry
from podguard.cli._common import console


@click.group()
def syscalls() -> None:
    """Validate and look up Linux syscall names."""


@syscalls.command()
@click.argument("names")
def check(names: str) -> None:
    """Validate a comma-separated list of syscall NAMES."""
    parsed = registry.parse(names)
    for name in parsed.valid:
        click.echo(name)
    if parsed.invalid:
        console.print(
            f"[red]{len(parsed.invalid)} unknown syscall(s):[/red] "
            + ", ".join(parsed.invalid)
        )
        raise SystemExit(1)


@syscalls.command()
@click.argument("partial")
@click.option("--limit", "-l", type=int, default=10, help="Maximum suggestions.")
def suggest(partial: str, limit: int) -> None:
    """Suggest syscall names matching PARTIAL."""
    for name in registry.suggest(partial, limit):
        click.echo(name)
