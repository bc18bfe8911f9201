"""Output selection: pick the emitted buffer, name it and measure it."""

from __future__ import annotations

import io
import ntpath
import posixpath
from dataclasses import dataclass
from typing import Any

from PIL import Image

from picshift.image.formats import OutputFormat
from picshift.services.protocols import PipelineLogger


@dataclass(frozen=True)
class OutputRecord:
    """One converted image, ready for upload."""

    buffer: bytes
    file_name: str
    width: int
    height: int
    extname: str

    def to_host(self) -> dict[str, Any]:
        """Return the record in the shape upload hosts consume."""
        return {
            "buffer": self.buffer,
            "fileName": self.file_name,
            "width": self.width,
            "height": self.height,
            "extname": self.extname,
        }


def real_base_name(item: str) -> str:
    """Derive the bare file name of an item reference.

    The query string is dropped, then everything up to the last path
    separator (``/`` or ``\\``), then the extension.

    Example:
        >>> real_base_name("https://site/a/photo.JPG?x=1")
        'photo'
    """
    name = ntpath.basename(item.split("?")[0])
    root, _ = posixpath.splitext(name)
    return root


def measure_dimensions(buffer: bytes) -> tuple[int, int]:
    """Read width and height from the image header without decoding pixels."""
    with Image.open(io.BytesIO(buffer)) as img:
        return img.size


def select_output(
    item: str,
    raw: bytes,
    transformed: bytes,
    output_format: OutputFormat,
    logger: PipelineLogger,
    size_guard: bool = True,
) -> OutputRecord:
    """Build the record for one item.

    With ``size_guard`` on, the original bytes are emitted when the
    transformed buffer is larger. The name and extension still follow the
    output format in that case. Dimensions always come from ``raw``.
    """
    name = real_base_name(item)
    extname = output_format.extname
    width, height = measure_dimensions(raw)

    buffer = transformed
    if size_guard and len(raw) < len(transformed):
        logger.warn("it seems that the transformed pic is larger than the original pic.")
        buffer = raw

    return OutputRecord(
        buffer=buffer,
        file_name=name + extname,
        width=width,
        height=height,
        extname=extname,
    )
