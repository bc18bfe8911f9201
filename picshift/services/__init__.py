"""Service interfaces shared between the pipeline and its host."""

from picshift.services.protocols import ConfigSource, HostContext, PipelineLogger

__all__ = ["ConfigSource", "HostContext", "PipelineLogger"]
