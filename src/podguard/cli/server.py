"""CLI command: podguard server — serve the synthesis API."""

from __future__ import annotations

import click

from podguard.cli._common import console
from podguard.config import PodguardConfig


@click.command()
@click.option(
    "--port",
    type=int,
    default=None,
    help="Port to listen on (default: 8471).",
)
@click.pass_context
def server(ctx: click.Context, port: int | None) -> None:
    """Start the podguard synthesis API."""
    try:
        import uvicorn
    except ImportError:
        console.print(
            "[red]Web dependencies not installed.[/red]\n"
            "Install with: pip install podguard[web]"
        )
        raise SystemExit(1)

    config: PodguardConfig = ctx.obj["config"]
    if port is not None:
        config.web_port = port

    console.print(
        f"[bold]podguard[/bold] API starting on "
        f"[cyan]http://{config.web_host}:{config.web_port}[/cyan]"
    )
    console.print("  [dim]Bound to 127.0.0.1 only[/dim]\n")

    from podguard.web.app import create_app

    uvicorn.run(
        create_app(config),
        host=config.web_host,
        port=config.web_port,
        log_level="info",
    )
