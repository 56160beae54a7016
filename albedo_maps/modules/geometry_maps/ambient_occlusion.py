"""Approximate ambient occlusion by stochastic disc sampling of luminance."""
from __future__ import annotations

import logging
from typing import Optional

import numpy as np

from ...core.pixel_grid import PixelGrid
from ...core.utils_color import luminance

LOGGER = logging.getLogger("albedo_maps.geometry.ambient_occlusion")


def sample_disc(rng: np.random.Generator, shape: tuple[int, ...], radius: float) -> tuple[np.ndarray, np.ndarray]:
    """Draw points uniformly distributed over a disc of *radius* at the origin."""

    distance = radius * np.sqrt(rng.random(shape))
    angle = 2.0 * np.pi * rng.random(shape)
    return distance * np.cos(angle), distance * np.sin(angle)


def _to_pixel_offset(offset: np.ndarray, mode: str) -> np.ndarray:
    if mode == "round":
        return np.rint(offset).astype(np.intp)
    return np.trunc(offset).astype(np.intp)


def generate(
    grid: PixelGrid,
    sample_radius: float,
    bias: float,
    sample_count: int,
    *,
    rng: Optional[np.random.Generator] = None,
    offset_mode: str = "truncate",
) -> Optional[PixelGrid]:
    """Create an ambient occlusion map, or ``None`` when *bias* is zero.

    Every pixel averages the luminance of ``sample_count`` neighbours picked
    at random inside a disc of ``sample_radius``, adds ``bias`` and clamps the
    result to ``[0, 1]``. Continuous offsets become pixel offsets by
    truncation toward zero unless ``offset_mode`` is ``"round"``. Pass a
    seeded *rng* for reproducible output.
    """

    if bias == 0:
        return None
    if sample_count < 1:
        raise ValueError(f"sample_count must be >= 1, got {sample_count}")
    if rng is None:
        rng = np.random.default_rng()

    shape = (grid.height, grid.width)
    xs = np.arange(grid.width)[np.newaxis, :]
    ys = np.arange(grid.height)[:, np.newaxis]

    occlusion = np.zeros(shape, dtype=np.float64)
    for _ in range(sample_count):
        offset_x, offset_y = sample_disc(rng, shape, sample_radius)
        neighbours = grid.gather(xs + _to_pixel_offset(offset_x, offset_mode), ys + _to_pixel_offset(offset_y, offset_mode))
        occlusion += luminance(neighbours)

    ao = np.clip(occlusion / sample_count + bias, 0.0, 1.0).astype(np.float32)
    LOGGER.debug("AO map %sx%s: %s samples, mean %.4f", grid.width, grid.height, sample_count, float(ao.mean()))

    output = PixelGrid.blank(grid.width, grid.height)
    output.fill(np.stack([ao, ao, ao, np.ones_like(ao)], axis=-1))
    return output.freeze()


if __name__ == "__main__":  # pragma: no cover
    from PIL import Image

    sample = Image.new("RGBA", (16, 16), (40, 80, 120, 255))
    generate(PixelGrid.from_image(sample), 1.0, 0.5, 64).to_image().show()
