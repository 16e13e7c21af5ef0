"""
CLI: ``wp-export hosts`` - list SSH hosts from ``~/.ssh/config``.
"""

from __future__ import annotations

from pathlib import Path

import typer

from wpexport.cli.utils import output_json, print_table
from wpexport.core.ssh_config import list_hosts


def list_ssh_hosts(
    config: Path | None = typer.Option(None, "--config", "-F", help="SSH config file (default ~/.ssh/config)."),
    json_out: bool = typer.Option(False, "--json"),
) -> None:
    """Show SSH host aliases with a suggested WordPress path for each."""
    hosts = [{"host": h.alias, "suggested_path": h.suggested_path} for h in list_hosts(config)]
    if json_out:
        output_json(hosts)
        return
    print_table(hosts, title="SSH hosts")
