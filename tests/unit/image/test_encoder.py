"""Tests for format dispatch and the Pillow encoders."""

import io

import pytest
from PIL import Image, ImageFile

from picshift.exceptions import ConfigurationError
from picshift.image.encoder import ENCODERS, check_codec_support, dispatch
from picshift.image.formats import OutputFormat
from picshift.image.options import DecodeOptions, JpegOptions, PngOptions, WebpOptions


def _open(data: bytes) -> Image.Image:
    img = Image.open(io.BytesIO(data))
    img.load()
    return img


class TestDispatch:
    def test_every_format_has_an_encoder(self):
        assert set(ENCODERS) == set(OutputFormat)

    def test_encoders_are_distinct(self):
        assert len({id(fn) for fn in ENCODERS.values()}) == len(OutputFormat)

    def test_dispatch_by_string(self):
        assert dispatch("webp") is ENCODERS[OutputFormat.WEBP]

    def test_dispatch_unsupported(self):
        with pytest.raises(ConfigurationError):
            dispatch("bmp")

    def test_encoder_names(self):
        assert ENCODERS[OutputFormat.AVIF].__name__ == "encode_avif"


class TestCodecSupport:
    def test_reports_all_formats(self):
        support = check_codec_support()

        assert set(support) == set(OutputFormat.choices())
        assert support["png"] is True
        assert support["heif"] is True


class TestEncodeDefaults:
    @pytest.mark.asyncio
    @pytest.mark.parametrize("fmt", list(OutputFormat))
    async def test_encode_with_default_options(self, fmt, png_bytes):
        """Every encoder works with no option bags at all."""
        result = await dispatch(fmt)(png_bytes, None, None)

        img = _open(result)
        assert img.format == fmt.pillow_format
        assert img.size == (64, 48)

    @pytest.mark.asyncio
    async def test_encode_from_jpeg_source(self, image_factory):
        source = image_factory("JPEG", (32, 32))

        result = await dispatch(OutputFormat.PNG)(source)

        assert _open(result).format == "PNG"


class TestEncodeOptions:
    @pytest.mark.asyncio
    async def test_output_options_are_applied(self):
        noisy = Image.effect_noise((128, 128), 64).convert("RGB")
        buffer = io.BytesIO()
        noisy.save(buffer, format="PNG")
        source = buffer.getvalue()
        encode_fn = dispatch(OutputFormat.JPEG)

        low = await encode_fn(source, JpegOptions(quality=5), None)
        high = await encode_fn(source, JpegOptions(quality=95), None)

        assert len(low) < len(high)

    @pytest.mark.asyncio
    async def test_png_compression_level_alias(self):
        noisy = Image.effect_noise((128, 128), 64).convert("RGB")
        buffer = io.BytesIO()
        noisy.save(buffer, format="PNG")
        encode_fn = dispatch(OutputFormat.PNG)

        source = buffer.getvalue()

        stored = await encode_fn(source, PngOptions.model_validate({"compressionLevel": 0}))
        packed = await encode_fn(source, PngOptions.model_validate({"compressionLevel": 9}))

        assert len(packed) < len(stored)

    @pytest.mark.asyncio
    async def test_mapping_output_options(self, png_bytes):
        result = await dispatch(OutputFormat.WEBP)(png_bytes, {"lossless": True})

        assert _open(result).format == "WEBP"

    @pytest.mark.asyncio
    async def test_jpeg_flattens_alpha(self, image_factory):
        source = image_factory("PNG", (16, 16), mode="RGBA", color=(0, 0, 0, 0))

        result = await dispatch(OutputFormat.JPEG)(source)

        img = _open(result)
        assert img.mode == "RGB"
        # Fully transparent pixels become the white background
        assert img.getpixel((8, 8))[0] > 240

    @pytest.mark.asyncio
    async def test_webp_keeps_alpha(self, image_factory):
        source = image_factory("PNG", (16, 16), mode="RGBA", color=(255, 0, 0, 128))

        result = await dispatch(OutputFormat.WEBP)(source, WebpOptions(lossless=True))

        assert _open(result).mode == "RGBA"

    @pytest.mark.asyncio
    async def test_palette_to_avif(self, image_factory):
        source = image_factory("GIF", (16, 16), mode="P", color=3)

        result = await dispatch(OutputFormat.AVIF)(source)

        assert _open(result).format == "AVIF"


class TestDecodeOptions:
    @pytest.mark.asyncio
    async def test_limit_input_pixels(self, png_bytes):
        with pytest.raises(ValueError, match="pixel limit"):
            await dispatch(OutputFormat.PNG)(
                png_bytes, None, DecodeOptions(limit_input_pixels=100)
            )

    @pytest.mark.asyncio
    async def test_limit_zero_disables_check(self, png_bytes):
        result = await dispatch(OutputFormat.PNG)(
            png_bytes, None, DecodeOptions(limit_input_pixels=0)
        )

        assert _open(result).size == (64, 48)

    @pytest.mark.asyncio
    async def test_auto_orient(self):
        img = Image.new("RGB", (40, 20), "blue")
        exif = img.getexif()
        exif[0x0112] = 6  # Rotate 90 CW
        buffer = io.BytesIO()
        img.save(buffer, format="JPEG", exif=exif)

        oriented = await dispatch(OutputFormat.PNG)(
            buffer.getvalue(), None, DecodeOptions(auto_orient=True)
        )
        untouched = await dispatch(OutputFormat.PNG)(buffer.getvalue())

        assert _open(oriented).size == (20, 40)
        assert _open(untouched).size == (40, 20)

    @staticmethod
    def _animated_gif() -> bytes:
        frames = [Image.new("RGB", (16, 16), c) for c in ("red", "green", "blue")]
        buffer = io.BytesIO()
        frames[0].save(buffer, format="GIF", save_all=True, append_images=frames[1:], duration=50)
        return buffer.getvalue()

    @pytest.mark.asyncio
    async def test_animated_keeps_frames(self):
        result = await dispatch(OutputFormat.WEBP)(
            self._animated_gif(), None, DecodeOptions(animated=True)
        )

        assert getattr(_open(result), "n_frames", 1) == 3

    @pytest.mark.asyncio
    async def test_first_frame_by_default(self):
        result = await dispatch(OutputFormat.WEBP)(self._animated_gif())

        assert getattr(_open(result), "n_frames", 1) == 1

    @pytest.mark.asyncio
    async def test_page_selects_frame(self):
        result = await dispatch(OutputFormat.PNG)(self._animated_gif(), None, DecodeOptions(page=2))

        r, g, b = _open(result).convert("RGB").getpixel((0, 0))
        assert b > r and b > g

    @pytest.mark.asyncio
    async def test_truncated_input_rejected_by_default(self, image_factory):
        source = image_factory("PNG", (256, 256), color=(1, 2, 3))
        truncated = source[: len(source) // 2]

        with pytest.raises((OSError, SyntaxError, ValueError)):
            await dispatch(OutputFormat.WEBP)(truncated)

    @staticmethod
    def _truncated_png() -> bytes:
        noisy = Image.effect_noise((64, 64), 64).convert("RGB")
        buffer = io.BytesIO()
        noisy.save(buffer, format="PNG")
        source = buffer.getvalue()
        return source[: len(source) // 2]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("fail_on", ["none", "truncated"])
    async def test_truncated_input_decoded_when_tolerated(self, fail_on):
        result = await dispatch(OutputFormat.WEBP)(
            self._truncated_png(), None, DecodeOptions(fail_on=fail_on)
        )

        img = _open(result)
        assert img.format == "WEBP"
        assert img.size == (64, 64)
        assert ImageFile.LOAD_TRUNCATED_IMAGES is False

    @pytest.mark.asyncio
    @pytest.mark.parametrize("fail_on", ["warning", "error"])
    async def test_truncated_input_rejected_when_strict(self, fail_on):
        with pytest.raises((OSError, SyntaxError, ValueError)):
            await dispatch(OutputFormat.WEBP)(
                self._truncated_png(), None, DecodeOptions(fail_on=fail_on)
            )


class TestEncodeFailures:
    @pytest.mark.asyncio
    async def test_garbage_input(self):
        with pytest.raises(Exception):
            await dispatch(OutputFormat.WEBP)(b"definitely not an image")
