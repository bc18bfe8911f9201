"""Transformer entry points for an image-upload host.

The host hands over a context carrying the input items, an output list, a
logger and named configuration. ``register`` wires ``handle`` and ``config``
into the host's transformer registry.
"""

from typing import Any

from picshift.config.constants import TRANSFORMER_NAME
from picshift.config.schema import config_schema, read_plugin_config
from picshift.core.pipeline import RunConfig, TransformPipeline
from picshift.exceptions import ConfigurationError
from picshift.services.protocols import ConfigSource, HostContext


async def handle(ctx: HostContext) -> None:
    """Convert ``ctx.input`` and append the results to ``ctx.output``.

    Raises:
        ConfigurationError: if the stored configuration is invalid
    """
    try:
        run_config = RunConfig.load(ctx)
    except ConfigurationError as e:
        ctx.log.error(str(e))
        raise

    pipeline = TransformPipeline(run_config, logger=ctx.log)
    collector = await pipeline.run(list(ctx.input))
    ctx.output.extend(collector.to_host())


def config(ctx: ConfigSource) -> list[dict[str, Any]]:
    """Return the configuration schema for the host's settings UI."""
    return [field.to_dict() for field in config_schema(read_plugin_config(ctx))]


def register(ctx: Any) -> dict[str, Any]:
    """Describe this transformer to the host.

    Returns:
        Mapping with a ``register`` hook, the transformer name and ``config``
    """

    def _register() -> None:
        ctx.helper.transformer.register(TRANSFORMER_NAME, {"handle": handle, "config": config})

    return {
        "register": _register,
        "transformer": TRANSFORMER_NAME,
        "config": config,
    }
