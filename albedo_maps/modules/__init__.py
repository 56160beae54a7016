"""Texture map generation from a single albedo image."""
from __future__ import annotations

from .map_pipeline import GeneratedMapSet, MapOutcome, MapStatus, generate
from .sources import SourceImage, load_source

__all__ = [
    "generate",
    "GeneratedMapSet",
    "MapOutcome",
    "MapStatus",
    "load_source",
    "SourceImage",
]
