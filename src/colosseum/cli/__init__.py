"""Command line interface and plain-text rendering."""

from colosseum.cli.app import build_parser, main

__all__ = [
    "build_parser",
    "main",
]
