"""
CLI: ``wp-export categories`` - run category discovery only.
"""

from __future__ import annotations

import typer

from wpexport.cli.utils import build_settings, console, output_json, print_table
from wpexport.core.settings import ChannelKind
from wpexport.execution.channels import create_channel
from wpexport.export.discovery import CategoryDiscovery


def list_categories(
    channel: ChannelKind | None = typer.Option(None, "--channel", "-c"),
    host: str | None = typer.Option(None, "--host", "-H"),
    wp_path: str | None = typer.Option(None, "--path", "-p"),
    category: list[str] | None = typer.Option(None, "--category", "-t"),
    skip_discovery: bool | None = typer.Option(None, "--skip-discovery/--discover"),
    log_level: str | None = typer.Option(None, "--log-level"),
    json_out: bool = typer.Option(False, "--json"),
) -> None:
    """Discover exportable post types and show which strategy found them."""
    settings = build_settings(
        channel=channel,
        ssh_host=host,
        wp_path=wp_path,
        extra_categories=category or None,
        skip_discovery=skip_discovery,
        log_level=log_level,
    )
    discovery = CategoryDiscovery(
        extra_categories=settings.extra_categories,
        skip_discovery=settings.skip_discovery,
    )
    result = discovery.discover(create_channel(settings))

    attempts = [
        {"strategy": a.strategy, "ok": a.succeeded, "detail": a.error.message if a.error else len(a.categories)}
        for a in result.attempts
    ]
    if json_out:
        output_json(
            {
                "categories": list(result.categories),
                "strategy": result.strategy,
                "used_baseline": result.used_baseline,
                "attempts": attempts,
            }
        )
        return

    print_table(attempts, title="Discovery attempts")
    console.print(f"[bold]Strategy[/bold]: {result.strategy}")
    console.print(f"[bold]Categories[/bold]: {', '.join(result.categories)}")
