"""Image format dispatch and encoding for Picshift."""

from picshift.image.encoder import (
    ENCODERS,
    EncodeFn,
    check_codec_support,
    create_encode_fn,
    dispatch,
)
from picshift.image.engine import encode
from picshift.image.formats import OutputFormat
from picshift.image.options import (
    AvifOptions,
    DecodeOptions,
    EncoderOptions,
    GifOptions,
    HeifOptions,
    JpegOptions,
    OutputOptionsByFormat,
    PngOptions,
    WebpOptions,
)

__all__ = [
    "ENCODERS",
    "EncodeFn",
    "OutputFormat",
    "check_codec_support",
    "create_encode_fn",
    "dispatch",
    "encode",
    "AvifOptions",
    "DecodeOptions",
    "EncoderOptions",
    "GifOptions",
    "HeifOptions",
    "JpegOptions",
    "OutputOptionsByFormat",
    "PngOptions",
    "WebpOptions",
]
