"""Utility module for Picshift."""

from picshift.utils.fs import (
    atomic_write_bytes,
    ensure_directory,
    format_size,
    get_unique_path,
    safe_filename,
)

__all__ = [
    "atomic_write_bytes",
    "ensure_directory",
    "format_size",
    "get_unique_path",
    "safe_filename",
]
