"""CLI entry point — Click group with global options."""

from __future__ import annotations

import logging

import click

from podguard import __version__
from podguard.config import PodguardConfig


@click.group()
@click.version_option(version=__version__, prog_name="podguard")
@click.option(
    "--broker-url",
    envvar="PODGUARD_BROKER_URL",
    default=None,
    help="Base URL of the telemetry broker.",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
@click.pass_context
def main(ctx: click.Context, broker_url: str | None, verbose: bool) -> None:
    """podguard — synthesize NetworkPolicies and seccomp profiles from observed pods."""
    config = PodguardConfig.load()
    if broker_url:
        config.broker_url = broker_url.rstrip("/")
    config.verbose = verbose

    ctx.ensure_object(dict)
    ctx.obj["config"] = config

    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


def _register_commands() -> None:
    from podguard.cli.netpol import netpol  # noqa: F811
    from podguard.cli.peers import peers  # noqa: F811
    from podguard.cli.seccomp import seccomp  # noqa: F811
    from podguard.cli.server import server  # noqa: F811
    from podguard.cli.syscalls import syscalls  # noqa: F811

    main.add_command(netpol)
    main.add_command(seccomp)
    main.add_command(peers)
    main.add_command(syscalls)
    main.add_command(server)


_register_commands()
