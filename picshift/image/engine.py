"""Conversion engine: one guarded encode call per item."""

from collections.abc import Mapping
from typing import Any

from picshift.exceptions import EncodeError
from picshift.image.encoder import EncodeFn
from picshift.image.formats import OutputFormat
from picshift.image.options import DecodeOptions, EncoderOptions
from picshift.services.protocols import PipelineLogger


async def encode(
    item: str,
    raw: bytes,
    encode_fn: EncodeFn,
    output_format: OutputFormat,
    output_options: EncoderOptions | Mapping[str, Any] | None,
    input_options: DecodeOptions | None,
    logger: PipelineLogger,
) -> bytes:
    """Run ``encode_fn`` on ``raw`` and return the transformed buffer.

    Raises:
        EncodeError: wrapping whatever the codec raised, so callers can tell a
            conversion failure apart from a fetch failure
    """
    try:
        transformed = await encode_fn(raw, output_options, input_options)
    except Exception as e:
        logger.error(f"can't convert file {item}")
        raise EncodeError(item, e) from e

    logger.success(f"{item} convert to {output_format.value} successful")
    return transformed
