"""Run summary reported at the end of every export."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from wpexport.core.errors import ExitCode
from wpexport.framework.pipelines import PipelineResult, PipelineStatus


@dataclass
class RunSummary(PipelineResult):
    """Everything an operator needs to judge one export run.

    Dropped and rejected rows are reported as counts only.
    """

    run_id: str = ""
    channel: str = ""
    degraded: bool = False

    categories: tuple[str, ...] = ()
    discovery_strategy: str | None = None
    failed_categories: list[str] = field(default_factory=list)

    primary_records: int = 0
    override_entries: int = 0
    rows_merged: int = 0
    rows_emitted: int = 0
    rows_dropped: int = 0
    duplicates: int = 0
    rejects_by_reason: dict[str, int] = field(default_factory=dict)

    users_exported: bool = False
    authors_exported: int = 0
    author_counts_available: bool = False

    warnings: list[str] = field(default_factory=list)
    fatal_cause: str | None = None
    exit_code: ExitCode = ExitCode.OK
    output_dir: Path | None = None
    outputs: dict[str, Path] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.exit_code == ExitCode.OK

    def warn(self, message: str) -> None:
        self.warnings.append(message)

    def fail(self, cause: str, exit_code: ExitCode) -> None:
        self.status = PipelineStatus.FAILED
        self.fatal_cause = cause
        self.error = cause
        self.exit_code = exit_code

    def to_dict(self) -> dict[str, Any]:
        return {
            "run_id": self.run_id,
            "status": self.status.value,
            "exit_code": int(self.exit_code),
            "channel": self.channel,
            "degraded": self.degraded,
            "started_at": self.started_at.isoformat(),
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
            "duration_seconds": self.duration_seconds,
            "categories": list(self.categories),
            "discovery_strategy": self.discovery_strategy,
            "failed_categories": list(self.failed_categories),
            "primary_records": self.primary_records,
            "override_entries": self.override_entries,
            "rows_merged": self.rows_merged,
            "rows_emitted": self.rows_emitted,
            "rows_dropped": self.rows_dropped,
            "duplicates": self.duplicates,
            "rejects_by_reason": dict(self.rejects_by_reason),
            "users_exported": self.users_exported,
            "authors_exported": self.authors_exported if self.users_exported else None,
            "author_counts_available": self.author_counts_available,
            "warnings": list(self.warnings),
            "fatal_cause": self.fatal_cause,
            "output_dir": str(self.output_dir) if self.output_dir else None,
            "outputs": {name: str(path) for name, path in self.outputs.items()},
            "metrics": dict(self.metrics),
        }
