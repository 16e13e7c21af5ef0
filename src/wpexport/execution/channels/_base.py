"""Base channel with shared call accounting, plus a scripted stub for tests.

All channels inherit from :class:`BaseChannel`, which counts calls, times
them, logs them and turns an unexpected ``OSError`` (missing binary,
permission denied) into a failed result.  Subclasses implement
``_do_run`` only.

.. code-block:: text

    run(command)
      ├── calls += 1
      ├── log: channel.command.start (debug)
      ├── _do_run(command, timeout)   ← subclass implements
      ├── on OSError: failed result, exit_code=None
      ├── on timeout/session drop: degraded = True, log warning
      └── log: channel.command.end (debug) or channel.command.failed (warning)

Tags:
    execution, channels, base, stub, wp-export

Doc-Types:
    api-reference
"""

from __future__ import annotations

import time
from dataclasses import replace
from typing import Any

from wpexport.execution.channels._types import ChannelCapabilities, ChannelResult
from wpexport.execution.commands import WpCommand
from wpexport.framework.logging import get_logger

logger = get_logger(__name__)

_STDERR_LOG_LIMIT = 300


# ---------------------------------------------------------------------------
# Base channel
# ---------------------------------------------------------------------------

class BaseChannel:
    """Base class for execution channels.

    Subclasses MUST implement ``_do_run`` and set ``kind``.
    Subclasses MAY override ``capabilities``.
    """

    kind: str = "base"

    def __init__(self, *, command_timeout: float | None = None) -> None:
        self.command_timeout = command_timeout
        self._calls = 0
        self._degraded = False

    @property
    def capabilities(self) -> ChannelCapabilities:
        return ChannelCapabilities()

    @property
    def degraded(self) -> bool:
        """True once any command lost its session or timed out."""
        return self._degraded

    @property
    def calls(self) -> int:
        return self._calls

    def mark_degraded(self, reason: str) -> None:
        if not self._degraded:
            logger.warning("channel.degraded", channel=self.kind, reason=reason)
        self._degraded = True

    def run(self, command: WpCommand, *, timeout: float | None = None) -> ChannelResult:
        """Run a command; transport failures come back as a failed result."""
        self._calls += 1
        effective_timeout = timeout if timeout is not None else self.command_timeout
        logger.debug("channel.command.start", channel=self.kind, command=command.label)

        start = time.perf_counter()
        try:
            result = self._do_run(command, effective_timeout)
        except OSError as exc:
            result = ChannelResult(output=b"", succeeded=False, exit_code=None, stderr=str(exc))
        result = replace(result, duration_ms=round((time.perf_counter() - start) * 1000, 2))

        if result.transport_failed:
            self.mark_degraded("timeout" if result.timed_out else "session closed")

        if result.succeeded:
            logger.debug(
                "channel.command.end",
                channel=self.kind,
                command=command.label,
                bytes=len(result.output),
                duration_ms=result.duration_ms,
            )
        else:
            logger.warning(
                "channel.command.failed",
                channel=self.kind,
                command=command.label,
                exit_code=result.exit_code,
                timed_out=result.timed_out,
                session_closed=result.session_closed,
                partial_bytes=len(result.output),
                stderr=result.stderr.strip()[:_STDERR_LOG_LIMIT],
            )
        return result

    def describe(self) -> str:
        """One-line description for summaries."""
        return self.kind

    def _do_run(self, command: WpCommand, timeout: float | None) -> ChannelResult:
        """Implement in subclass."""
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(calls={self._calls}, degraded={self._degraded})"


# ---------------------------------------------------------------------------
# Stub channel for testing
# ---------------------------------------------------------------------------

class StubChannel(BaseChannel):
    """Scripted in-memory channel for unit tests.

    Responses are keyed by a fragment of the command line (``str(command)``);
    the longest matching key wins, so ``"post-type list --field=name
    --public=true"`` and ``"post-type list --field=name"`` can be scripted
    side by side.

    .. code-block:: text

        Response values:
          bytes | str        → succeeded, exit_code=0
          ChannelResult      → returned as-is
          list[...]          → one per call, the last one repeats
          (no match)         → failed, exit_code=1

        Inject behaviour:
          stub.supports_per_author_queries = False
          stub.degrade_after = 3      → 4th and later calls lose the session

        Inspect usage:
          stub.calls           → number of run() calls
          stub.history         → WpCommand objects in call order

    Example:
        >>> stub = StubChannel({"post-type list": "name\\npost\\npage\\n"})
        >>> stub.run(commands.post_type_list()).text
        'name\\npost\\npage\\n'
    """

    kind = "stub"

    def __init__(
        self,
        responses: dict[str, Any] | None = None,
        *,
        supports_per_author_queries: bool = True,
        degrade_after: int | None = None,
    ) -> None:
        super().__init__()
        self.responses: dict[str, Any] = dict(responses or {})
        self.supports_per_author_queries = supports_per_author_queries
        self.degrade_after = degrade_after
        self.history: list[WpCommand] = []
        self._cursor: dict[str, int] = {}

    @property
    def capabilities(self) -> ChannelCapabilities:
        return ChannelCapabilities(supports_per_author_queries=self.supports_per_author_queries)

    def on(self, fragment: str, response: Any) -> StubChannel:
        """Script a response (fluent)."""
        self.responses[fragment] = response
        return self

    @staticmethod
    def failure(
        stderr: str = "Error: stubbed failure",
        *,
        exit_code: int | None = 1,
        output: bytes | str = b"",
        session_closed: bool = False,
        timed_out: bool = False,
    ) -> ChannelResult:
        """Build a failed result for scripting."""
        if isinstance(output, str):
            output = output.encode("utf-8")
        return ChannelResult(
            output=output,
            succeeded=False,
            exit_code=exit_code,
            stderr=stderr,
            session_closed=session_closed,
            timed_out=timed_out,
        )

    def count_for(self, fragment: str) -> int:
        """Number of calls whose command line contains ``fragment``."""
        return sum(1 for cmd in self.history if fragment in str(cmd))

    def _do_run(self, command: WpCommand, timeout: float | None) -> ChannelResult:
        self.history.append(command)

        if self.degrade_after is not None and len(self.history) > self.degrade_after:
            return self.failure("Connection closed by remote host", exit_code=255, session_closed=True)

        line = str(command)
        matches = [key for key in self.responses if key in line]
        if not matches:
            return self.failure(f"no scripted response for: {line}")

        key = max(matches, key=len)
        response = self.responses[key]
        if isinstance(response, list):
            index = self._cursor.get(key, 0)
            self._cursor[key] = index + 1
            response = response[min(index, len(response) - 1)]

        if isinstance(response, ChannelResult):
            return response
        if isinstance(response, str):
            response = response.encode("utf-8")
        return ChannelResult(output=response, succeeded=True, exit_code=0)
