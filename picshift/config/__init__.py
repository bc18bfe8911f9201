"""Configuration module for Picshift."""

from picshift.config.schema import ConfigField, config_schema, read_plugin_config
from picshift.config.settings import (
    CodecConfig,
    HttpConfig,
    PicshiftSettings,
    PluginConfig,
    get_settings,
    reload_settings,
    write_config_values,
)

__all__ = [
    "CodecConfig",
    "ConfigField",
    "HttpConfig",
    "PicshiftSettings",
    "PluginConfig",
    "config_schema",
    "read_plugin_config",
    "get_settings",
    "reload_settings",
    "write_config_values",
]
