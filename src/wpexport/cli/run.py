"""
CLI: ``wp-export run`` - full export.
"""

from __future__ import annotations

from pathlib import Path

import typer

from wpexport.cli.utils import build_settings, console, err_console, output_json, print_dict
from wpexport.core.context import new_run_context
from wpexport.core.settings import ChannelKind
from wpexport.execution.channels import create_channel
from wpexport.export import ExportPipeline, RunSummary


def run_export(
    channel: ChannelKind | None = typer.Option(None, "--channel", "-c", help="local or remote."),
    host: str | None = typer.Option(None, "--host", "-H", help="SSH alias or user@host (implies remote)."),
    wp_path: str | None = typer.Option(None, "--path", "-p", help="WordPress root on the target."),
    wp_binary: str | None = typer.Option(None, "--wp-binary", help="wp-cli executable."),
    allow_root: bool | None = typer.Option(None, "--allow-root/--no-allow-root"),
    domain: str | None = typer.Option(None, "--domain", "-d", help="Base domain for workbook links."),
    category: list[str] | None = typer.Option(None, "--category", "-t", help="Extra post type (repeatable)."),
    skip_discovery: bool | None = typer.Option(None, "--skip-discovery/--discover"),
    users: bool | None = typer.Option(None, "--users/--no-users", help="Export authors."),
    remote_author_counts: bool | None = typer.Option(None, "--remote-author-counts/--no-remote-author-counts"),
    xlsx: bool | None = typer.Option(None, "--xlsx/--no-xlsx"),
    keep_intermediate: bool | None = typer.Option(None, "--keep-intermediate/--no-keep-intermediate"),
    output_dir: Path | None = typer.Option(None, "--output-dir", "-o"),
    connect_timeout: int | None = typer.Option(None, "--connect-timeout"),
    command_timeout: float | None = typer.Option(None, "--command-timeout"),
    log_level: str | None = typer.Option(None, "--log-level"),
    log_format: str | None = typer.Option(None, "--log-format"),
    json_out: bool = typer.Option(False, "--json"),
) -> None:
    """Export posts, custom permalinks and (optionally) authors."""
    settings = build_settings(
        channel=channel,
        ssh_host=host,
        wp_path=wp_path,
        wp_binary=wp_binary,
        allow_root=allow_root,
        base_domain=domain,
        extra_categories=category or None,
        skip_discovery=skip_discovery,
        export_users=users,
        remote_author_counts=remote_author_counts,
        write_xlsx=xlsx,
        keep_intermediate=keep_intermediate,
        output_dir=output_dir,
        connect_timeout=connect_timeout,
        command_timeout=command_timeout,
        log_level=log_level,
        log_format=log_format,
    )
    context = new_run_context(settings, create_channel(settings))
    summary = ExportPipeline(context).run()

    if json_out:
        output_json(summary.to_dict())
    else:
        print_summary(summary)
    raise typer.Exit(code=int(summary.exit_code))


def print_summary(summary: RunSummary) -> None:
    """Human-readable run summary."""
    data = {
        "run_id": summary.run_id,
        "channel": summary.channel + (" (degraded)" if summary.degraded else ""),
        "categories": ", ".join(summary.categories) or "-",
        "discovery": summary.discovery_strategy or "-",
        "primary records": summary.primary_records,
        "override entries": summary.override_entries,
        "rows merged": summary.rows_merged,
        "rows written": summary.rows_emitted,
        "rows dropped": summary.rows_dropped,
        "duplicates": summary.duplicates,
    }
    if summary.users_exported:
        data["authors"] = summary.authors_exported
        data["author counts"] = "available" if summary.author_counts_available else "N/A"
    if summary.output_dir:
        data["output"] = str(summary.output_dir)
    print_dict(data, title="Export summary")

    if summary.rejects_by_reason:
        console.print("[bold]Rejects[/bold]")
        for reason, count in summary.rejects_by_reason.items():
            console.print(f"  [cyan]{reason}[/cyan]: {count}")
    for warning in summary.warnings:
        err_console.print(f"[yellow]warning[/yellow]: {warning}")

    if summary.ok:
        console.print("[bold green]Export complete[/bold green]")
    else:
        err_console.print(f"[bold red]Export failed[/bold red] (exit {int(summary.exit_code)}): {summary.fatal_cause}")
