"""Remote channel: runs wp-cli over a non-interactive SSH session.

Managed WordPress hosts (Pressable, WP Engine) give shell access through
an SSH gateway that idles out long sessions, limits output and sometimes
drops mid-stream.  Each command therefore runs in its own short session
with connection and keepalive bounds, and a drop is reported as a soft
failure with whatever stdout arrived first.

.. code-block:: text

    ssh -T -o BatchMode=yes
        -o ConnectTimeout=<connect_timeout>
        -o ServerAliveInterval=<keepalive_interval>
        -o ServerAliveCountMax=<keepalive_count_max>
        <host> "cd <wp_path> && wp <args>"

    exit 0                          → succeeded
    exit 255                        → session_closed, channel degraded
    termination marker in stderr    → session_closed, channel degraded
    TimeoutExpired                  → timed_out, channel degraded
    other non-zero exit             → failed (wp-cli error), not degraded

Tags:
    execution, channels, remote, ssh, wp-export
"""

from __future__ import annotations

import subprocess

from wpexport.core.errors import MissingConfigError
from wpexport.core.settings import ExportSettings
from wpexport.execution.channels._base import BaseChannel
from wpexport.execution.channels._types import (
    SSH_CONNECTION_FAILED,
    ChannelCapabilities,
    ChannelResult,
    has_termination_marker,
)
from wpexport.execution.commands import WpCommand


class RemoteChannel(BaseChannel):
    """Run wp-cli on a remote host through ssh."""

    kind = "remote"

    def __init__(
        self,
        host: str,
        *,
        wp_path: str | None = None,
        binary: str = "wp",
        allow_root: bool = False,
        connect_timeout: int = 30,
        keepalive_interval: int = 5,
        keepalive_count_max: int = 3,
        command_timeout: float | None = 300.0,
        author_counts: bool = False,
        ssh_binary: str = "ssh",
    ) -> None:
        if not host:
            raise MissingConfigError("ssh_host", "Remote channel requires an SSH host")
        super().__init__(command_timeout=command_timeout)
        self.host = host
        self.wp_path = wp_path
        self.binary = binary
        self.allow_root = allow_root
        self.connect_timeout = connect_timeout
        self.keepalive_interval = keepalive_interval
        self.keepalive_count_max = keepalive_count_max
        self.author_counts = author_counts
        self.ssh_binary = ssh_binary

    @classmethod
    def from_settings(cls, settings: ExportSettings) -> RemoteChannel:
        return cls(
            settings.ssh_host or "",
            wp_path=settings.wp_path,
            binary=settings.wp_binary,
            allow_root=settings.allow_root,
            connect_timeout=settings.connect_timeout,
            keepalive_interval=settings.keepalive_interval,
            keepalive_count_max=settings.keepalive_count_max,
            command_timeout=settings.command_timeout,
            author_counts=settings.remote_author_counts,
        )

    @property
    def capabilities(self) -> ChannelCapabilities:
        return ChannelCapabilities(supports_per_author_queries=self.author_counts)

    def build_argv(self, command: WpCommand) -> list[str]:
        remote_line = command.to_remote_line(self.binary, wp_path=self.wp_path, allow_root=self.allow_root)
        return [
            self.ssh_binary,
            "-T",
            "-o", "BatchMode=yes",
            "-o", f"ConnectTimeout={self.connect_timeout}",
            "-o", f"ServerAliveInterval={self.keepalive_interval}",
            "-o", f"ServerAliveCountMax={self.keepalive_count_max}",
            self.host,
            remote_line,
        ]

    def describe(self) -> str:
        return f"remote ({self.host}:{self.wp_path or '~'})"

    def _do_run(self, command: WpCommand, timeout: float | None) -> ChannelResult:
        argv = self.build_argv(command)
        try:
            proc = subprocess.run(
                argv,
                capture_output=True,
                stdin=subprocess.DEVNULL,
                timeout=timeout,
                check=False,
            )
        except subprocess.TimeoutExpired as exc:
            return ChannelResult(
                output=exc.stdout or b"",
                succeeded=False,
                exit_code=None,
                stderr=f"ssh session timed out after {timeout}s",
                timed_out=True,
            )

        stderr = (proc.stderr or b"").decode("utf-8", errors="replace")
        session_closed = proc.returncode == SSH_CONNECTION_FAILED or has_termination_marker(stderr)
        return ChannelResult(
            output=proc.stdout or b"",
            succeeded=proc.returncode == 0 and not session_closed,
            exit_code=proc.returncode,
            stderr=stderr,
            session_closed=session_closed,
        )
