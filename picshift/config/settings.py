"""Configuration settings using pydantic-settings."""

from collections.abc import Mapping
from functools import lru_cache
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel
from pydantic_settings import BaseSettings, SettingsConfigDict, YamlConfigSettingsSource

from picshift.config.constants import (
    APP_NAME,
    CODEC_CONFIG_NAME,
    DEFAULT_CONFIG_FILE,
    DEFAULT_HTTP_TIMEOUT,
    DEFAULT_LOG_DIR,
    DEFAULT_OUTPUT_DIR,
    DEFAULT_USER_AGENT,
    PLUGIN_NAME,
)
from picshift.image.formats import OutputFormat
from picshift.image.options import DecodeOptions, OutputOptionsByFormat


class PluginConfig(BaseModel):
    """Plugin namespace: which format the batch is converted to."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    output_type: OutputFormat | None = None

    @field_validator("output_type", mode="before")
    @classmethod
    def _normalize_output_type(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.strip().lower()
        return v


class CodecConfig(BaseModel):
    """Codec namespace: encoder and decoder option bags keyed by output format."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    output_options: OutputOptionsByFormat = Field(default_factory=OutputOptionsByFormat)
    input_options: dict[OutputFormat, DecodeOptions] = Field(default_factory=dict)


class HttpConfig(BaseModel):
    """HTTP client configuration for remote items."""

    timeout: float = Field(default=DEFAULT_HTTP_TIMEOUT, gt=0)
    follow_redirects: bool = True
    user_agent: str = DEFAULT_USER_AGENT


class PicshiftSettings(BaseSettings):
    """Main configuration class for Picshift."""

    model_config = SettingsConfigDict(
        env_prefix="PICSHIFT_",
        env_nested_delimiter="__",
        extra="ignore",
    )

    @classmethod
    def settings_customise_sources(
        cls, settings_cls, init_settings, env_settings, dotenv_settings, file_secret_settings
    ):
        """Customize settings sources to include YAML files (user, then project)."""
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            YamlConfigSettingsSource(
                settings_cls,
                yaml_file=[
                    Path.home() / ".config" / APP_NAME / "config.yaml",
                    DEFAULT_CONFIG_FILE,
                ],
            ),
            file_secret_settings,
        )

    # Namespaces
    plugin: PluginConfig = Field(default_factory=PluginConfig)
    codec: CodecConfig = Field(default_factory=CodecConfig)

    http: HttpConfig = Field(default_factory=HttpConfig)

    # Emit the original bytes when conversion makes the file larger
    size_guard: bool = True

    # Global settings
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    log_format: Literal["console", "json"] = "console"
    log_dir: str = DEFAULT_LOG_DIR
    output_dir: str = DEFAULT_OUTPUT_DIR

    def get_config(self, name: str) -> dict[str, Any] | None:
        """Return a namespace as a host would store it (camelCase keys).

        Args:
            name: ``PLUGIN_NAME`` or ``CODEC_CONFIG_NAME``

        Returns:
            The namespace mapping, or None for unknown names
        """
        if name == PLUGIN_NAME:
            return self.plugin.model_dump(mode="json", by_alias=True, exclude_none=True)
        if name == CODEC_CONFIG_NAME:
            return self.codec.model_dump(mode="json", by_alias=True, exclude_none=True)
        return None


@lru_cache
def get_settings() -> PicshiftSettings:
    """Get cached settings instance."""
    return PicshiftSettings()


def reload_settings() -> PicshiftSettings:
    """Force reload settings (clear cache)."""
    get_settings.cache_clear()
    return get_settings()


def write_config_values(config_path: Path, values: Mapping[str, Any]) -> dict[str, Any]:
    """Merge dotted-key values into a YAML config file.

    ``{"plugin.output_type": "avif"}`` sets ``output_type`` under ``plugin``.
    Missing files and sections are created.

    Returns:
        The full document that was written
    """
    document: dict[str, Any] = {}
    if config_path.exists():
        document = yaml.safe_load(config_path.read_text(encoding="utf-8")) or {}

    for dotted_key, value in values.items():
        *parents, leaf = dotted_key.split(".")
        section = document
        for part in parents:
            section = section.setdefault(part, {})
        section[leaf] = value

    config_path.parent.mkdir(parents=True, exist_ok=True)
    config_path.write_text(
        yaml.safe_dump(document, allow_unicode=True, sort_keys=False), encoding="utf-8"
    )
    return document
