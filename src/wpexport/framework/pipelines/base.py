"""Base pipeline interface."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from wpexport.core.context import RunContext


class PipelineStatus(str, Enum):
    """Pipeline execution status."""

    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"


@dataclass
class PipelineResult:
    """Result of a pipeline execution."""

    status: PipelineStatus
    started_at: datetime
    completed_at: datetime | None = None
    error: str | None = None
    metrics: dict[str, Any] = field(default_factory=dict)

    @property
    def duration_seconds(self) -> float | None:
        """Duration in seconds if completed."""
        if self.completed_at is None:
            return None
        return (self.completed_at - self.started_at).total_seconds()


class Pipeline(ABC):
    """Base class for pipelines that run against a :class:`RunContext`."""

    name: str = ""
    description: str = ""

    def __init__(self, context: RunContext) -> None:
        self.context = context

    @abstractmethod
    def run(self) -> PipelineResult:
        """Execute the pipeline. Must be implemented by subclasses."""
        ...

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(run_id={self.context.run_id})"
