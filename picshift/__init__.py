"""Picshift - fetch images and re-encode them into a single target format."""

__version__ = "0.1.0"
