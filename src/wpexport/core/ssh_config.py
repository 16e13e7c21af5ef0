"""
SSH host discovery from ``~/.ssh/config``.

Lists the concrete ``Host`` aliases an operator can export from and guesses
where WordPress lives on each, based on the managed-hosting provider the
alias names.

Examples:
    >>> suggest_wp_path("client.pressable")
    '/htdocs'
    >>> suggest_wp_path("acme.wpengine")
    '/home/wpe-user/sites/acme'

Tags:
    ssh, config, hosts, wp-export
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path

DEFAULT_SSH_CONFIG = Path("~/.ssh/config")

_HOST_LINE = re.compile(r"^\s*Host\s+(.+?)\s*$", re.IGNORECASE)


@dataclass(frozen=True)
class SshHost:
    alias: str
    suggested_path: str


def parse_ssh_config(path: Path | str | None = None) -> list[str]:
    """Return concrete host aliases, in file order.

    Wildcard patterns (``*``, ``?``), negations and GitHub entries are
    skipped.  A missing file yields an empty list.
    """
    config_path = Path(path or DEFAULT_SSH_CONFIG).expanduser()
    if not config_path.is_file():
        return []

    hosts: list[str] = []
    for line in config_path.read_text(encoding="utf-8", errors="replace").splitlines():
        match = _HOST_LINE.match(line)
        if not match:
            continue
        for alias in match.group(1).split():
            if any(ch in alias for ch in "*?!"):
                continue
            if "github" in alias.lower():
                continue
            if alias not in hosts:
                hosts.append(alias)
    return hosts


def suggest_wp_path(host: str) -> str:
    """Guess the WordPress root for a host alias."""
    lowered = host.lower()
    if "pressable" in lowered:
        return "/htdocs"
    if "wpengine" in lowered:
        name = host.split("@")[-1].split(".")[0]
        return f"/home/wpe-user/sites/{name}"
    return "~/public_html"


def list_hosts(path: Path | str | None = None) -> list[SshHost]:
    """Aliases from the SSH config, each with a suggested WordPress path."""
    return [SshHost(alias=alias, suggested_path=suggest_wp_path(alias)) for alias in parse_ssh_config(path)]
