"""Tests for exceptions module."""


class TestExceptions:
    """Tests for custom exceptions."""

    def test_picshift_error(self):
        """Test base PicshiftError."""
        from picshift.exceptions import PicshiftError

        error = PicshiftError("Test error")
        assert str(error) == "Test error"
        assert error.kind == "unexpected"

    def test_fetch_error(self):
        """Test FetchError keeps the item and cause."""
        from picshift.exceptions import FetchError

        cause = OSError("No such file")
        error = FetchError("/tmp/missing.png", "No such file", cause=cause)

        assert "/tmp/missing.png" in str(error)
        assert error.item == "/tmp/missing.png"
        assert error.cause is cause
        assert error.kind == "fetch"

    def test_not_an_image_error(self):
        """Test NotAnImageError reports the content type."""
        from picshift.exceptions import FetchError, NotAnImageError

        error = NotAnImageError("https://example.com/page", "text/html; charset=utf-8")

        assert "text/html" in str(error)
        assert error.content_type == "text/html; charset=utf-8"
        assert error.kind == "not-an-image"
        assert not isinstance(error, FetchError)

    def test_not_an_image_error_missing_header(self):
        """Test NotAnImageError with no content type at all."""
        from picshift.exceptions import NotAnImageError

        error = NotAnImageError("https://example.com/x", None)
        assert error.content_type is None
        assert "None" in str(error)

    def test_encode_error(self):
        """Test EncodeError wraps the codec failure."""
        from picshift.exceptions import EncodeError

        cause = ValueError("cannot identify image file")
        error = EncodeError("broken.png", cause)

        assert "broken.png" in str(error)
        assert "cannot identify image file" in str(error)
        assert error.cause is cause
        assert error.kind == "conversion"

    def test_encode_error_without_cause(self):
        from picshift.exceptions import EncodeError

        assert str(EncodeError("a.png")) == "Can't convert file a.png"

    def test_configuration_error(self):
        """Test ConfigurationError."""
        from picshift.exceptions import ConfigurationError, PicshiftError

        error = ConfigurationError("bad format")
        assert isinstance(error, PicshiftError)
        assert error.kind == "configuration"
