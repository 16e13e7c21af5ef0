"""
CLI utility helpers - settings resolution and output formatting.
"""

from __future__ import annotations

import json
from collections.abc import Sequence
from typing import Any

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.table import Table

from wpexport.core.errors import ConfigError
from wpexport.core.settings import ChannelKind, ExportSettings, get_settings
from wpexport.core.ssh_config import suggest_wp_path
from wpexport.framework.logging import configure_logging

console = Console()
err_console = Console(stderr=True)


# ── Settings helper ──────────────────────────────────────────────────────


def build_settings(**overrides: Any) -> ExportSettings:
    """Resolve settings from env + CLI options and configure logging.

    A host given without an explicit channel implies the remote channel, and
    a remote run without a WordPress path uses the one suggested for the host.
    Configuration problems exit with code 1.
    """
    if overrides.get("ssh_host") and overrides.get("channel") is None:
        overrides["channel"] = ChannelKind.REMOTE
    try:
        settings = get_settings(**overrides)
    except ConfigError as exc:
        err_console.print(f"[bold red]Configuration error[/bold red]: {exc.message}")
        raise typer.Exit(code=1) from exc
    except ValidationError as exc:
        err_console.print(f"[bold red]Configuration error[/bold red]: {exc}")
        raise typer.Exit(code=1) from exc

    if settings.is_remote and not settings.wp_path and settings.ssh_host:
        suggested = suggest_wp_path(settings.ssh_host)
        settings = settings.model_copy(update={"wp_path": suggested})
        err_console.print(f"[dim]No --path given; using {suggested} on {settings.ssh_host}[/dim]")

    configure_logging(level=settings.log_level, format=settings.log_format, force=True)
    return settings


# ── Output helpers ───────────────────────────────────────────────────────


def output_json(payload: Any) -> None:
    console.print_json(json.dumps(payload, default=str))


def print_table(rows: Sequence[dict[str, Any]], *, title: str = "") -> None:
    """Render a list of dicts as a Rich table."""
    if not rows:
        console.print("[dim]No items.[/dim]")
        return
    table = Table(title=title or None, show_lines=False, pad_edge=False)
    for col in rows[0]:
        table.add_column(col, overflow="fold")
    for row in rows:
        table.add_row(*(str(v) for v in row.values()))
    console.print(table)


def print_dict(data: dict[str, Any], *, title: str = "") -> None:
    """Render a single dict as key-value pairs."""
    if title:
        console.print(f"[bold]{title}[/bold]")
    for k, v in data.items():
        console.print(f"  [cyan]{k}[/cyan]: {v}")
