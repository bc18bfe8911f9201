"""Pytest configuration and fixtures."""

import io
import tempfile
from collections.abc import Callable
from pathlib import Path

import pytest
from PIL import Image


class RecordingLogger:
    """Pipeline logger that keeps every message for assertions."""

    def __init__(self) -> None:
        self.messages: list[tuple[str, str]] = []

    def info(self, message: str) -> None:
        self.messages.append(("info", message))

    def success(self, message: str) -> None:
        self.messages.append(("success", message))

    def warn(self, message: str) -> None:
        self.messages.append(("warn", message))

    def error(self, message: str) -> None:
        self.messages.append(("error", message))

    def of(self, level: str) -> list[str]:
        return [message for lvl, message in self.messages if lvl == level]


@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def recording_logger() -> RecordingLogger:
    return RecordingLogger()


@pytest.fixture
def image_factory() -> Callable[..., bytes]:
    """Return a function that renders a small test image to bytes."""

    def _make(
        format_name: str = "PNG",
        size: tuple[int, int] = (64, 48),
        mode: str = "RGB",
        color: tuple[int, ...] | str = "red",
    ) -> bytes:
        img = Image.new(mode, size, color=color)
        buffer = io.BytesIO()
        img.save(buffer, format=format_name)
        return buffer.getvalue()

    return _make


@pytest.fixture
def png_bytes(image_factory) -> bytes:
    return image_factory("PNG", (64, 48))


@pytest.fixture
def png_file(temp_dir: Path, png_bytes: bytes) -> Path:
    """Write a 64x48 PNG to disk."""
    file_path = temp_dir / "sample.png"
    file_path.write_bytes(png_bytes)
    return file_path


@pytest.fixture
def isolated_settings(tmp_path, monkeypatch):
    """Run settings code in a directory without picshift.yaml or user config."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("HOME", str(tmp_path))
    for key in (
        "PICSHIFT_PLUGIN__OUTPUT_TYPE",
        "PICSHIFT_SIZE_GUARD",
        "PICSHIFT_LOG_LEVEL",
        "PICSHIFT_LOG_FORMAT",
    ):
        monkeypatch.delenv(key, raising=False)

    from picshift.config.settings import get_settings

    get_settings.cache_clear()
    yield tmp_path
    get_settings.cache_clear()
