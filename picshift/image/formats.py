"""Supported output formats."""

from enum import Enum

from picshift.exceptions import ConfigurationError


class OutputFormat(str, Enum):
    """Target encoding for a batch run.

    Member order is the order offered to the user in the configuration schema.
    """

    JPEG = "jpeg"
    PNG = "png"
    GIF = "gif"
    WEBP = "webp"
    AVIF = "avif"
    HEIF = "heif"

    @property
    def extname(self) -> str:
        """File extension including the leading dot."""
        return "." + self.value

    @property
    def pillow_format(self) -> str:
        """Format name understood by ``PIL.Image.Image.save``."""
        return self.value.upper()

    @property
    def supports_animation(self) -> bool:
        return self in _ANIMATED_FORMATS

    @classmethod
    def parse(cls, value: "OutputFormat | str") -> "OutputFormat":
        """Parse a format identifier, case-insensitively.

        Raises:
            ConfigurationError: if ``value`` is not one of the supported formats
        """
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError as e:
            choices = ", ".join(f.value for f in cls)
            raise ConfigurationError(
                f"Unsupported output format '{value}'. Options: {choices}"
            ) from e

    @classmethod
    def choices(cls) -> list[str]:
        return [f.value for f in cls]


_ANIMATED_FORMATS = frozenset({OutputFormat.GIF, OutputFormat.WEBP, OutputFormat.PNG})
