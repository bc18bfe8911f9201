"""Configuration schema presented to the user by an upload host."""

from collections.abc import Mapping
from dataclasses import asdict, dataclass, field
from typing import Any

from picshift.config.constants import (
    LEGACY_PLUGIN_NAME,
    OUTPUT_TYPE_LABEL,
    PLUGIN_NAME,
    SCHEMA_DEFAULT_OUTPUT_FORMAT,
)
from picshift.exceptions import ConfigurationError
from picshift.image.formats import OutputFormat
from picshift.services.protocols import ConfigSource


@dataclass
class ConfigField:
    """A single configurable field."""

    name: str
    type: str
    alias: str
    default: Any = None
    choices: list[str] = field(default_factory=list)
    required: bool = False

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def read_plugin_config(source: ConfigSource) -> Mapping[str, Any] | None:
    """Read the plugin namespace, falling back to the pre-rename key.

    Hosts that stored ``outputType`` under ``picgo-plugin-sharp`` keep working
    until the value is saved again under the new name.
    """
    plugin_config = source.get_config(PLUGIN_NAME)
    if plugin_config is None:
        plugin_config = source.get_config(LEGACY_PLUGIN_NAME)
    return plugin_config


def config_schema(plugin_config: Mapping[str, Any] | None) -> list[ConfigField]:
    """Build the schema, defaulting to the stored output type when there is one.

    A stored value outside the supported formats is ignored.

    Args:
        plugin_config: Stored plugin namespace, or None

    Returns:
        List with the single ``outputType`` selection field
    """
    default = SCHEMA_DEFAULT_OUTPUT_FORMAT
    stored = (plugin_config or {}).get("outputType")
    if stored:
        try:
            default = OutputFormat.parse(stored).value
        except ConfigurationError:
            pass

    return [
        ConfigField(
            name="outputType",
            type="list",
            alias=OUTPUT_TYPE_LABEL,
            choices=OutputFormat.choices(),
            default=default,
            required=True,
        )
    ]
