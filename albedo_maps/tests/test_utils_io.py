"""Tests for map persistence helpers."""
from __future__ import annotations

from pathlib import Path

import numpy as np
from PIL import Image

from albedo_maps.core.pixel_grid import PixelGrid
from albedo_maps.core.utils_io import atomic_save, map_output_path, save_generated_maps, write_source_bytes


def _gray(value: float, size: int = 2) -> PixelGrid:
    samples = np.empty((size, size, 4), dtype=np.float32)
    samples[...] = (value, value, value, 1.0)
    return PixelGrid(samples).freeze()


def test_map_output_path_appends_suffix_before_extension() -> None:
    assert map_output_path(Path("assets/DownloadedImage.png"), "_NormalMap") == Path("assets/DownloadedImage_NormalMap.png")
    assert map_output_path("wall.jpg", "_AOMap") == Path("wall_AOMap.png")


def test_atomic_save_writes_png_without_leftover_lock(tmp_path: Path) -> None:
    destination = atomic_save(_gray(1.0), tmp_path / "nested" / "map.png")
    assert destination.exists()
    assert not destination.with_suffix(".png.lock").exists()
    with Image.open(destination) as image:
        assert image.mode == "RGBA"
        assert image.getpixel((1, 1)) == (255, 255, 255, 255)


def test_save_generated_maps_uses_suffix_convention(tmp_path: Path) -> None:
    source = tmp_path / "DownloadedImage.png"
    written = save_generated_maps({"normal": _gray(0.5), "ao": _gray(0.0)}, source)
    assert written == {
        "normal": tmp_path / "DownloadedImage_NormalMap.png",
        "ao": tmp_path / "DownloadedImage_AOMap.png",
    }
    assert not (tmp_path / "DownloadedImage_HeightMap.png").exists()
    with Image.open(written["ao"]) as image:
        assert image.getpixel((0, 0)) == (0, 0, 0, 255)


def test_write_source_bytes_creates_directory(tmp_path: Path) -> None:
    destination = write_source_bytes(b"raw image", tmp_path / "downloads" / "source.png")
    assert destination.read_bytes() == b"raw image"
