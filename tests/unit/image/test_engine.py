"""Tests for the guarded encode call."""

from unittest.mock import AsyncMock

import pytest

from picshift.exceptions import EncodeError
from picshift.image.engine import encode
from picshift.image.formats import OutputFormat
from picshift.image.options import DecodeOptions, WebpOptions


class TestEncode:
    @pytest.mark.asyncio
    async def test_success_logs_and_returns_buffer(self, recording_logger):
        encode_fn = AsyncMock(return_value=b"converted")
        options = WebpOptions(quality=70)
        decode = DecodeOptions(auto_orient=True)

        result = await encode(
            "a.png", b"raw", encode_fn, OutputFormat.WEBP, options, decode, recording_logger
        )

        assert result == b"converted"
        encode_fn.assert_awaited_once_with(b"raw", options, decode)
        assert recording_logger.of("success") == ["a.png convert to webp successful"]
        assert recording_logger.of("error") == []

    @pytest.mark.asyncio
    async def test_failure_is_wrapped(self, recording_logger):
        cause = OSError("cannot identify image file")
        encode_fn = AsyncMock(side_effect=cause)

        with pytest.raises(EncodeError) as exc_info:
            await encode(
                "broken.png", b"raw", encode_fn, OutputFormat.AVIF, None, None, recording_logger
            )

        assert exc_info.value.item == "broken.png"
        assert exc_info.value.__cause__ is cause
        assert "Can't convert file broken.png" in str(exc_info.value)
        assert recording_logger.of("error") == ["can't convert file broken.png"]
        assert recording_logger.of("success") == []

    @pytest.mark.asyncio
    async def test_real_encoder_failure(self, recording_logger):
        from picshift.image.encoder import dispatch

        with pytest.raises(EncodeError):
            await encode(
                "junk.bin",
                b"not an image",
                dispatch("png"),
                OutputFormat.PNG,
                None,
                None,
                recording_logger,
            )
