"""File system helpers for writing converted images to disk."""

import os
import tempfile
from pathlib import Path

from picshift.utils.logging import get_logger

log = get_logger(__name__)

_FILENAME_REPLACEMENTS = {
    "/": "_",
    "\\": "_",
    ":": "_",
    "*": "_",
    "?": "_",
    '"': "_",
    "<": "_",
    ">": "_",
    "|": "_",
    "\0": "",
}


def ensure_directory(path: Path) -> Path:
    """Ensure a directory exists, creating it if necessary."""
    path.mkdir(parents=True, exist_ok=True)
    return path


def safe_filename(filename: str, max_length: int = 255) -> str:
    """Create a safe filename by replacing path and shell-hostile characters.

    Args:
        filename: Original filename
        max_length: Maximum filename length (the extension is preserved)

    Returns:
        Safe filename
    """
    result = filename
    for old, new in _FILENAME_REPLACEMENTS.items():
        result = result.replace(old, new)

    result = result.strip(". ")

    if len(result) > max_length:
        stem = Path(result).stem
        suffix = Path(result).suffix
        result = stem[: max_length - len(suffix)] + suffix

    return result


def get_unique_path(path: Path) -> Path:
    """Return ``path`` or the first ``stem_N.suffix`` sibling that does not exist."""
    if not path.exists():
        return path

    counter = 1
    while True:
        new_path = path.parent / f"{path.stem}_{counter}{path.suffix}"
        if not new_path.exists():
            return new_path
        counter += 1


def atomic_write_bytes(file_path: Path, data: bytes) -> Path:
    """Write bytes through a temp file in the same directory, then rename.

    Returns:
        The written path
    """
    file_path.parent.mkdir(parents=True, exist_ok=True)

    temp_fd, temp_name = tempfile.mkstemp(dir=file_path.parent, prefix=f".{file_path.name}.")
    temp_path = Path(temp_name)
    try:
        with os.fdopen(temp_fd, "wb") as f:
            f.write(data)
        temp_path.replace(file_path)
    except Exception:
        temp_path.unlink(missing_ok=True)
        raise

    log.debug("File written", path=str(file_path), size=len(data))
    return file_path


def format_size(size: int | float) -> str:
    """Format byte size as human-readable string."""
    size_f = float(size)
    for unit in ["B", "KB", "MB", "GB", "TB"]:
        if size_f < 1024:
            return f"{size_f:.1f} {unit}"
        size_f /= 1024
    return f"{size_f:.1f} PB"
