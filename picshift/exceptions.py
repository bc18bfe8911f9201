"""Custom exceptions for Picshift."""


class PicshiftError(Exception):
    """Base exception class for Picshift."""

    kind = "unexpected"


class FetchError(PicshiftError):
    """Network, HTTP status or filesystem failure while obtaining raw bytes."""

    kind = "fetch"

    def __init__(self, item: str, message: str, cause: Exception | None = None) -> None:
        self.item = item
        self.cause = cause
        super().__init__(f"Failed to fetch {item}: {message}")


class NotAnImageError(PicshiftError):
    """Remote response does not declare an image payload."""

    kind = "not-an-image"

    def __init__(self, item: str, content_type: str | None) -> None:
        self.item = item
        self.content_type = content_type
        super().__init__(f"{item} isn't a image, resp contentType header: {content_type}")


class EncodeError(PicshiftError):
    """The codec rejected or failed to process a buffer."""

    kind = "conversion"

    def __init__(self, item: str, cause: Exception | None = None) -> None:
        self.item = item
        self.cause = cause
        detail = f": {cause}" if cause is not None else ""
        super().__init__(f"Can't convert file {item}{detail}")


class ConfigurationError(PicshiftError):
    """Configuration error."""

    kind = "configuration"
