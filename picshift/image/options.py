"""Per-format encoder and decoder option bags.

Output options map onto the keyword arguments of ``PIL.Image.Image.save`` for
the target format. The sharp spellings of the common knobs (``effort``,
``compressionLevel``, ``chromaSubsampling``...) are accepted as well. Keys that
are not declared here are still passed through, converted to snake_case, so
any encoder parameter Pillow (or pillow-heif) understands can be configured
without a code change.
"""

from typing import Any, ClassVar, Literal

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel, to_snake

from picshift.image.formats import OutputFormat

# save() parameters every Pillow writer shares
_COMMON_SAVE_PARAMS = frozenset({"exif", "icc_profile", "xmp", "dpi"})


class _OptionBag(BaseModel):
    """Base for option models: camelCase or snake_case keys, extras allowed."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
        frozen=True,
    )

    # Undeclared save() parameters the target writer understands
    save_params: ClassVar[frozenset[str]] = frozenset()

    def _extra_kwargs(self) -> dict[str, Any]:
        return {to_snake(key): value for key, value in (self.model_extra or {}).items()}

    def to_save_kwargs(self) -> dict[str, Any]:
        """Return only the values that were set, so encoder defaults apply otherwise."""
        kwargs = {
            name: getattr(self, name)
            for name in type(self).model_fields
            if getattr(self, name) is not None
        }
        kwargs.update(self._extra_kwargs())
        return kwargs

    def unrecognized_keys(self) -> list[str]:
        """Extra keys the target writer will ignore."""
        known = _COMMON_SAVE_PARAMS | self.save_params
        return sorted(key for key in self._extra_kwargs() if key not in known)


class JpegOptions(_OptionBag):
    save_params = frozenset(
        {"keep_rgb", "qtables", "restart_marker_blocks", "restart_marker_rows", "comment"}
    )

    quality: int | None = Field(default=None, ge=1, le=100)
    progressive: bool | None = None
    optimize: bool | None = Field(
        default=None, validation_alias=AliasChoices("optimize", "optimiseCoding", "optimizeCoding")
    )
    subsampling: int | str | None = Field(
        default=None, validation_alias=AliasChoices("subsampling", "chromaSubsampling")
    )


class PngOptions(_OptionBag):
    save_params = frozenset({"transparency", "bits", "dictionary", "pnginfo"})

    compress_level: int | None = Field(
        default=None,
        ge=0,
        le=9,
        validation_alias=AliasChoices("compress_level", "compressLevel", "compressionLevel"),
    )
    optimize: bool | None = None


class GifOptions(_OptionBag):
    save_params = frozenset(
        {"disposal", "transparency", "comment", "palette", "interlace", "background"}
    )

    optimize: bool | None = None
    loop: int | None = Field(default=None, ge=0)
    duration: int | list[int] | None = Field(
        default=None, validation_alias=AliasChoices("duration", "delay")
    )


class WebpOptions(_OptionBag):
    save_params = frozenset(
        {
            "alpha_quality",
            "minimize_size",
            "kmin",
            "kmax",
            "allow_mixed",
            "background",
            "loop",
            "duration",
        }
    )

    quality: int | None = Field(default=None, ge=0, le=100)
    lossless: bool | None = None
    method: int | None = Field(
        default=None, ge=0, le=6, validation_alias=AliasChoices("method", "effort")
    )
    exact: bool | None = None


class AvifOptions(_OptionBag):
    save_params = frozenset(
        {
            "codec",
            "range",
            "max_threads",
            "tile_rows",
            "tile_cols",
            "autotiling",
            "alpha_premultiplied",
            "advanced",
            "duration",
            "loop",
        }
    )

    quality: int | None = Field(default=None, ge=0, le=100)
    speed: int | None = Field(default=None, ge=0, le=10)
    subsampling: str | None = Field(
        default=None, validation_alias=AliasChoices("subsampling", "chromaSubsampling")
    )

    @model_validator(mode="before")
    @classmethod
    def _effort_to_speed(cls, data: Any) -> Any:
        # effort runs 0 (fastest) to 9, speed runs 10 (fastest) to 0
        if isinstance(data, dict) and "effort" in data and "speed" not in data:
            data = dict(data)
            data["speed"] = max(0, 10 - int(data.pop("effort")))
        return data


class HeifOptions(_OptionBag):
    save_params = frozenset(
        {"save_to_12bit", "enc_params", "matrix_coefficients", "primary_index", "subsampling"}
    )

    quality: int | None = Field(default=None, ge=-1, le=100)
    chroma: int | None = Field(
        default=None, validation_alias=AliasChoices("chroma", "chromaSubsampling")
    )

    @field_validator("chroma", mode="before")
    @classmethod
    def _chroma_from_ratio(cls, v: Any) -> Any:
        if isinstance(v, str):
            return int(v.replace(":", ""))
        return v


EncoderOptions = JpegOptions | PngOptions | GifOptions | WebpOptions | AvifOptions | HeifOptions


class OutputOptionsByFormat(BaseModel):
    """Encoder options keyed by output format, one typed bag per format."""

    model_config = ConfigDict(frozen=True)

    jpeg: JpegOptions | None = None
    png: PngOptions | None = None
    gif: GifOptions | None = None
    webp: WebpOptions | None = None
    avif: AvifOptions | None = None
    heif: HeifOptions | None = None

    def for_format(self, output_format: OutputFormat) -> EncoderOptions | None:
        return getattr(self, output_format.value)


class DecodeOptions(_OptionBag):
    """Decode-time behavior applied before encoding.

    Attributes:
        auto_orient: Rotate/flip according to the EXIF orientation tag
        page: Frame index to decode from multi-frame input
        animated: Keep every frame when the target format supports animation
        limit_input_pixels: Reject input whose width * height exceeds this; 0 disables
        fail_on: ``"none"`` and ``"truncated"`` decode truncated input as far
                 as it goes; ``"warning"`` (default) and ``"error"`` reject it
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="forbid",
        frozen=True,
    )

    auto_orient: bool = False
    page: int | None = Field(default=None, ge=0)
    animated: bool = False
    limit_input_pixels: int | None = Field(default=None, ge=0)
    fail_on: Literal["none", "truncated", "warning", "error"] = "warning"

    @property
    def tolerates_truncated(self) -> bool:
        return self.fail_on in ("none", "truncated")
