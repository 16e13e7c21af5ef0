"""Local channel: runs wp-cli as a subprocess on this machine.

.. code-block:: text

    LocalChannel.run(command)
      ├── argv = [wp, *args, --path=<wp_path>, (--allow-root)]
      ├── subprocess.run(argv, capture_output=True, timeout=command_timeout)
      ├── returncode == 0        → succeeded
      ├── returncode != 0        → failed (stdout kept)
      └── TimeoutExpired         → failed, timed_out=True (partial stdout kept)

Use cases:
    - Running on the web host itself (cron, a shell inside the container)
    - Development against a local WordPress install

Tags:
    execution, channels, local, subprocess, wp-export
"""

from __future__ import annotations

import subprocess

from wpexport.core.settings import ExportSettings
from wpexport.execution.channels._base import BaseChannel
from wpexport.execution.channels._types import ChannelCapabilities, ChannelResult
from wpexport.execution.commands import WpCommand


class LocalChannel(BaseChannel):
    """Run wp-cli on the local machine."""

    kind = "local"

    def __init__(
        self,
        *,
        wp_path: str | None = None,
        binary: str = "wp",
        allow_root: bool = False,
        command_timeout: float | None = 300.0,
    ) -> None:
        super().__init__(command_timeout=command_timeout)
        self.wp_path = wp_path
        self.binary = binary
        self.allow_root = allow_root

    @classmethod
    def from_settings(cls, settings: ExportSettings) -> LocalChannel:
        return cls(
            wp_path=settings.wp_path,
            binary=settings.wp_binary,
            allow_root=settings.allow_root,
            command_timeout=settings.command_timeout,
        )

    @property
    def capabilities(self) -> ChannelCapabilities:
        return ChannelCapabilities(supports_per_author_queries=True)

    def build_argv(self, command: WpCommand) -> list[str]:
        return command.to_argv(self.binary, wp_path=self.wp_path, allow_root=self.allow_root)

    def describe(self) -> str:
        return f"local ({self.wp_path or 'cwd'})"

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
                stderr=f"timed out after {timeout}s",
                timed_out=True,
            )
        return ChannelResult(
            output=proc.stdout or b"",
            succeeded=proc.returncode == 0,
            exit_code=proc.returncode,
            stderr=(proc.stderr or b"").decode("utf-8", errors="replace"),
        )
