"""Application services driven by the command line."""

from colosseum.services.arena import Arena, SourceFactory

__all__ = [
    "Arena",
    "SourceFactory",
]
