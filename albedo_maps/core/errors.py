"""Exception types raised by the map generation pipeline."""
from __future__ import annotations


class MapGenerationError(Exception):
    """Base class for every error raised by :mod:`albedo_maps`."""


class InvalidInput(MapGenerationError, ValueError):
    """The source grid cannot be processed (empty or malformed samples)."""


class OutOfRangeWrite(MapGenerationError, IndexError):
    """A filter tried to write a coordinate outside the output grid."""

    def __init__(self, x: int, y: int, width: int, height: int) -> None:
        super().__init__(f"Write at ({x}, {y}) outside {width}x{height} grid")
        self.x = x
        self.y = y


class SourceError(MapGenerationError):
    """The source image could not be fetched, decoded or read."""
