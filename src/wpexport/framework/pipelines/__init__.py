"""Pipeline base classes."""

from wpexport.framework.pipelines.base import Pipeline, PipelineResult, PipelineStatus

__all__ = ["Pipeline", "PipelineResult", "PipelineStatus"]
