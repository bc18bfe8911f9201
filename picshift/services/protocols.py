"""Protocol definitions for the collaborators the pipeline consumes.

The pipeline only needs a handful of capabilities from whatever embeds it:
a leveled logger taking one formatted string per call, configuration
objects looked up by name, and (for plugin hosts) the input/output lists.
"""

from collections.abc import Mapping
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class PipelineLogger(Protocol):
    """Leveled logger supplied by the host."""

    def info(self, message: str) -> Any: ...

    def success(self, message: str) -> Any: ...

    def warn(self, message: str) -> Any: ...

    def error(self, message: str) -> Any: ...


class ConfigSource(Protocol):
    """Read access to configuration objects keyed by name."""

    def get_config(self, name: str) -> Mapping[str, Any] | None:
        """Return the configuration stored under ``name``, or None if absent."""
        ...


class HostContext(ConfigSource, Protocol):
    """Context handed to a transformer by an image-upload host.

    Attributes:
        input: Item references (local paths or http(s) URLs) to transform
        output: Collection the host uploads from; records are appended as mappings
        log: Host logger
    """

    input: list[str]
    output: list[Any]
    log: PipelineLogger
