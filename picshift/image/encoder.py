"""Format dispatch and the Pillow-backed encoders.

Every supported output format gets its own async encode function, built once
at import time. Decoding and encoding are blocking Pillow calls, so they run
in a worker thread and the event loop stays free for other items.
"""

from __future__ import annotations

import io
import threading
from collections.abc import Awaitable, Callable, Mapping
from contextlib import contextmanager
from types import MappingProxyType
from typing import Any

import anyio.to_thread
import pillow_heif
from PIL import Image, ImageFile, ImageOps

from picshift.image.formats import OutputFormat
from picshift.image.options import DecodeOptions, EncoderOptions

pillow_heif.register_heif_opener()

EncodeFn = Callable[
    [bytes, "EncoderOptions | Mapping[str, Any] | None", "DecodeOptions | None"],
    Awaitable[bytes],
]

# Modes each encoder accepts as-is; anything else is converted first.
# None means Pillow's own conversion on save is good enough.
_ACCEPTED_MODES: dict[OutputFormat, frozenset[str] | None] = {
    OutputFormat.JPEG: frozenset({"RGB", "L", "CMYK"}),
    OutputFormat.PNG: frozenset({"1", "L", "LA", "P", "RGB", "RGBA", "I", "I;16"}),
    OutputFormat.GIF: None,
    OutputFormat.WEBP: frozenset({"RGB", "RGBA"}),
    OutputFormat.AVIF: frozenset({"RGB", "RGBA"}),
    OutputFormat.HEIF: frozenset({"RGB", "RGBA"}),
}

# ImageFile.LOAD_TRUNCATED_IMAGES is process-global
_truncated_lock = threading.Lock()


@contextmanager
def _tolerate_truncated(enabled: bool):
    if not enabled:
        yield
        return
    with _truncated_lock:
        previous = ImageFile.LOAD_TRUNCATED_IMAGES
        ImageFile.LOAD_TRUNCATED_IMAGES = True
        try:
            yield
        finally:
            ImageFile.LOAD_TRUNCATED_IMAGES = previous


def _has_alpha(img: Image.Image) -> bool:
    return img.mode in ("RGBA", "LA", "PA") or (img.mode == "P" and "transparency" in img.info)


def _prepare_mode(img: Image.Image, output_format: OutputFormat) -> Image.Image:
    """Convert ``img`` into a mode the target encoder can write."""
    accepted = _ACCEPTED_MODES[output_format]
    if accepted is None or img.mode in accepted:
        return img

    if output_format is OutputFormat.JPEG:
        if _has_alpha(img):
            rgba = img.convert("RGBA")
            background = Image.new("RGB", rgba.size, (255, 255, 255))
            background.paste(rgba, mask=rgba.split()[3])
            return background
        return img.convert("RGB")

    return img.convert("RGBA" if _has_alpha(img) else "RGB")


def _save_kwargs(options: EncoderOptions | Mapping[str, Any] | None) -> dict[str, Any]:
    if options is None:
        return {}
    if isinstance(options, Mapping):
        return dict(options)
    return options.to_save_kwargs()


def _encode_sync(
    buffer: bytes,
    output_format: OutputFormat,
    output_options: EncoderOptions | Mapping[str, Any] | None,
    input_options: DecodeOptions | None,
) -> bytes:
    decode = input_options or DecodeOptions()
    save_kwargs = _save_kwargs(output_options)
    tolerant = decode.tolerates_truncated

    with Image.open(io.BytesIO(buffer)) as img:
        if decode.limit_input_pixels and img.width * img.height > decode.limit_input_pixels:
            raise ValueError(
                f"Input image exceeds pixel limit: {img.width}x{img.height} "
                f"> {decode.limit_input_pixels}"
            )

        if decode.page is not None:
            img.seek(decode.page)

        save_all = (
            decode.animated
            and decode.page is None
            and output_format.supports_animation
            and getattr(img, "n_frames", 1) > 1
        )

        out = io.BytesIO()
        if save_all:
            # Frames are decoded lazily while saving
            with _tolerate_truncated(tolerant):
                img.save(out, format=output_format.pillow_format, save_all=True, **save_kwargs)
            return out.getvalue()

        with _tolerate_truncated(tolerant):
            img.load()
        frame: Image.Image = img
        if decode.auto_orient:
            frame = ImageOps.exif_transpose(frame)
        frame = _prepare_mode(frame, output_format)
        frame.save(out, format=output_format.pillow_format, **save_kwargs)
        return out.getvalue()


def create_encode_fn(output_format: OutputFormat) -> EncodeFn:
    """Build the async encode function for one output format."""

    async def encode_fn(
        buffer: bytes,
        output_options: EncoderOptions | Mapping[str, Any] | None = None,
        input_options: DecodeOptions | None = None,
    ) -> bytes:
        return await anyio.to_thread.run_sync(
            _encode_sync, buffer, output_format, output_options, input_options
        )

    encode_fn.__name__ = f"encode_{output_format.value}"
    encode_fn.__qualname__ = encode_fn.__name__
    return encode_fn


ENCODERS: Mapping[OutputFormat, EncodeFn] = MappingProxyType(
    {fmt: create_encode_fn(fmt) for fmt in OutputFormat}
)


def dispatch(output_format: OutputFormat | str) -> EncodeFn:
    """Return the encode function for ``output_format``.

    Raises:
        ConfigurationError: if the format is not supported
    """
    return ENCODERS[OutputFormat.parse(output_format)]


def check_codec_support() -> dict[str, bool]:
    """Report which output formats the installed Pillow build can write.

    Returns:
        Mapping of format value to availability
    """
    Image.init()
    return {fmt.value: fmt.pillow_format in Image.SAVE for fmt in OutputFormat}
