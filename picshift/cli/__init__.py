"""Command line interface for Picshift."""
