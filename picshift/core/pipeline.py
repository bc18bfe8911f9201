"""Batch orchestration: run every item through resolve, encode and select.

Items are processed concurrently on one event loop. Each item runs in its
own task and any failure is caught at that task's boundary, so a bad item
only removes itself from the output.
"""

from __future__ import annotations

import asyncio
import json
from collections.abc import Iterator, Mapping, Sequence
from dataclasses import dataclass
from typing import Any

import anyio
from pydantic import ValidationError

from picshift.config.constants import CODEC_CONFIG_NAME, DEFAULT_OUTPUT_FORMAT
from picshift.config.schema import read_plugin_config
from picshift.config.settings import CodecConfig, PicshiftSettings, PluginConfig
from picshift.core.selector import OutputRecord, select_output
from picshift.core.source import SourceResolver
from picshift.exceptions import ConfigurationError, PicshiftError
from picshift.image.encoder import dispatch
from picshift.image.engine import encode
from picshift.image.formats import OutputFormat
from picshift.image.options import DecodeOptions, EncoderOptions
from picshift.services.protocols import ConfigSource, PipelineLogger
from picshift.utils.logging import StructlogPipelineLogger


@dataclass(frozen=True)
class RunConfig:
    """Configuration resolved once per batch."""

    output_format: OutputFormat
    output_options: EncoderOptions | None = None
    input_options: DecodeOptions | None = None
    size_guard: bool = True

    @classmethod
    def from_sources(
        cls,
        plugin_config: Mapping[str, Any] | None,
        codec_config: Mapping[str, Any] | None,
        size_guard: bool = True,
    ) -> RunConfig:
        """Build the run configuration from the two raw namespaces.

        Raises:
            ConfigurationError: if either namespace holds invalid values
        """
        try:
            plugin = PluginConfig.model_validate(plugin_config or {})
            codec = CodecConfig.model_validate(codec_config or {})
        except ValidationError as e:
            raise ConfigurationError(f"Invalid configuration: {e}") from e

        output_format = plugin.output_type or OutputFormat(DEFAULT_OUTPUT_FORMAT)
        return cls(
            output_format=output_format,
            output_options=codec.output_options.for_format(output_format),
            input_options=codec.input_options.get(output_format),
            size_guard=size_guard,
        )

    @classmethod
    def load(cls, source: ConfigSource, size_guard: bool = True) -> RunConfig:
        """Read both namespaces by name from ``source``."""
        return cls.from_sources(
            read_plugin_config(source),
            source.get_config(CODEC_CONFIG_NAME),
            size_guard=size_guard,
        )

    @classmethod
    def from_settings(cls, settings: PicshiftSettings) -> RunConfig:
        return cls.load(settings, size_guard=settings.size_guard)

    def log_to(self, logger: PipelineLogger) -> None:
        """Log the effective configuration at batch start."""
        logger.info(f"use outputType: {self.output_format.value}")
        logger.info(f"use inputOptions: {_dump_options(self.input_options)}")
        logger.info(f"use outputOptions: {_dump_options(self.output_options)}")
        if self.output_options is not None:
            ignored = self.output_options.unrecognized_keys()
            if ignored:
                logger.warn(
                    f"outputOptions not supported by the {self.output_format.value} encoder, "
                    f"ignored: {', '.join(ignored)}"
                )


def _dump_options(options: EncoderOptions | DecodeOptions | None) -> str:
    if options is None:
        return json.dumps(None)
    return json.dumps(options.model_dump(by_alias=True, exclude_none=True))


@dataclass(frozen=True)
class ItemFailure:
    """An item that contributed nothing to the output."""

    item: str
    kind: str
    message: str


class OutputCollector:
    """Append-only output of one batch run.

    Appends happen on the event loop thread only, so no locking is needed.
    """

    def __init__(self) -> None:
        self._records: list[OutputRecord] = []
        self._failures: list[ItemFailure] = []

    def append(self, record: OutputRecord) -> None:
        self._records.append(record)

    def record_failure(self, item: str, kind: str, message: str) -> None:
        self._failures.append(ItemFailure(item=item, kind=kind, message=message))

    @property
    def records(self) -> tuple[OutputRecord, ...]:
        return tuple(self._records)

    @property
    def failures(self) -> tuple[ItemFailure, ...]:
        return tuple(self._failures)

    def to_host(self) -> list[dict[str, Any]]:
        return [record.to_host() for record in self._records]

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[OutputRecord]:
        return iter(list(self._records))


class TransformPipeline:
    """Convert a batch of items into a single output format."""

    def __init__(
        self,
        config: RunConfig,
        resolver: SourceResolver | None = None,
        logger: PipelineLogger | None = None,
    ) -> None:
        """Initialize the pipeline.

        Args:
            config: Batch configuration
            resolver: Source resolver to share across items; when omitted one
                is created (and closed) per run
            logger: Pipeline logger, structlog-backed by default
        """
        self.config = config
        self.logger = logger or StructlogPipelineLogger(__name__)
        self._resolver = resolver
        self._encode_fn = dispatch(config.output_format)

    async def run(self, items: Sequence[str]) -> OutputCollector:
        """Process every item concurrently and collect the successful ones.

        Never raises for per-item failures.
        """
        collector = OutputCollector()
        self.config.log_to(self.logger)

        if self._resolver is not None:
            await self._run_all(self._resolver, items, collector)
        else:
            async with SourceResolver(logger=self.logger) as resolver:
                await self._run_all(resolver, items, collector)

        return collector

    def run_sync(self, items: Sequence[str]) -> OutputCollector:
        """Blocking wrapper around ``run`` for synchronous callers."""
        return anyio.run(self.run, items)

    async def _run_all(
        self, resolver: SourceResolver, items: Sequence[str], collector: OutputCollector
    ) -> None:
        await asyncio.gather(*(self._run_item(resolver, item, collector) for item in items))

    async def _run_item(
        self, resolver: SourceResolver, item: str, collector: OutputCollector
    ) -> None:
        try:
            record = await self.process(item, resolver)
        except Exception as e:
            kind = e.kind if isinstance(e, PicshiftError) else "unexpected"
            self.logger.error(f"[{kind}] {e}")
            collector.record_failure(item, kind, str(e))
            return
        collector.append(record)

    async def process(self, item: str, resolver: SourceResolver) -> OutputRecord:
        """Run one item through every stage, in order.

        Raises:
            FetchError, NotAnImageError, EncodeError: stage failures
        """
        raw = await resolver.resolve(item)
        transformed = await encode(
            item,
            raw,
            self._encode_fn,
            self.config.output_format,
            self.config.output_options,
            self.config.input_options,
            self.logger,
        )
        return select_output(
            item,
            raw,
            transformed,
            self.config.output_format,
            self.logger,
            size_guard=self.config.size_guard,
        )
