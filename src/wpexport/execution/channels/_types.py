"""
Types shared by execution channels.

A channel runs one wp-cli command and returns a :class:`ChannelResult`.
Transport trouble is reported in the result, never raised: a timed-out or
dropped SSH session yields ``succeeded=False`` with whatever stdout arrived
before the drop.

.. code-block:: text

    Channel Protocol
    ┌──────────────────────────────────────────────────────────┐
    │  kind                      "local" | "remote" | "stub"   │
    │  capabilities              ChannelCapabilities           │
    │  degraded                  session dropped at least once │
    │  calls                     commands issued so far        │
    │  run(command) → result     never raises on transport     │
    └──────────────────────────────────────────────────────────┘

Tags:
    execution, channels, types, wp-export

Doc-Types:
    api-reference
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from wpexport.core.errors import ChannelError, ChannelTimeout, SessionClosedError

if TYPE_CHECKING:
    from wpexport.execution.commands import WpCommand

# stderr/stdout text that means the SSH session ended under the command.
SESSION_TERMINATION_MARKERS: tuple[str, ...] = (
    "Connection closed",
    "closed by remote host",
    "Connection reset",
    "Broken pipe",
)

# ssh(1) exits with 255 when the connection itself failed.
SSH_CONNECTION_FAILED = 255


def has_termination_marker(text: str) -> bool:
    return any(marker in text for marker in SESSION_TERMINATION_MARKERS)


@dataclass(frozen=True)
class ChannelCapabilities:
    """Feature flags for a channel.

    ``supports_per_author_queries`` gates the one-query-per-author count
    loop, which is too chatty for line-limited remote sessions unless the
    operator opts in.
    """

    supports_per_author_queries: bool = True


@dataclass(frozen=True)
class ChannelResult:
    """Outcome of one command."""

    output: bytes
    succeeded: bool
    exit_code: int | None = None
    stderr: str = ""
    duration_ms: float = 0.0
    timed_out: bool = False
    session_closed: bool = False

    @property
    def text(self) -> str:
        """stdout decoded as UTF-8, undecodable bytes replaced."""
        return self.output.decode("utf-8", errors="replace")

    @property
    def transport_failed(self) -> bool:
        return self.timed_out or self.session_closed

    def error(self, command: str | None = None) -> ChannelError | None:
        """The transport error this result stands for, or None when it succeeded."""
        if self.succeeded:
            return None
        if self.timed_out:
            error: ChannelError = ChannelTimeout("timed out")
        elif self.session_closed:
            error = SessionClosedError("session closed")
        else:
            error = ChannelError(f"command failed (exit={self.exit_code})")
        return error.with_context(command=command, exit_code=self.exit_code, partial_bytes=len(self.output))


@runtime_checkable
class Channel(Protocol):
    """Protocol every execution channel satisfies."""

    @property
    def kind(self) -> str: ...

    @property
    def capabilities(self) -> ChannelCapabilities: ...

    @property
    def degraded(self) -> bool: ...

    @property
    def calls(self) -> int: ...

    def run(self, command: WpCommand, *, timeout: float | None = None) -> ChannelResult: ...
