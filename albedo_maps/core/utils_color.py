"""Color utility helpers shared by the map filters."""
from __future__ import annotations

from typing import Sequence, Tuple, Union

import numpy as np

ColorTuple = Tuple[float, float, float, float]
ColorLike = Union[Sequence[float], np.ndarray]

# Rec. 601 weights, matching the grayscale value game engines expose on colors.
LUMA_WEIGHTS = np.array([0.299, 0.587, 0.114], dtype=np.float32)


def clamp(value: float, min_value: float, max_value: float) -> float:
    """Clamp *value* between *min_value* and *max_value*."""

    return max(min_value, min(max_value, value))


def clamp01(value: float) -> float:
    return clamp(value, 0.0, 1.0)


def luminance(color: ColorLike) -> float | np.ndarray:
    """Return the perceptual grayscale value of *color*.

    *color* may be a single RGB(A) tuple or an array whose last axis holds the
    channels; alpha is ignored. Arrays produce an array with the last axis
    reduced, single colors produce a float.
    """

    rgb = np.asarray(color, dtype=np.float32)[..., :3]
    value = rgb @ LUMA_WEIGHTS
    if np.ndim(value) == 0:
        return float(value)
    return value


def gray(value: float) -> ColorTuple:
    """Return an opaque gray RGBA color with every channel set to *value*."""

    return (value, value, value, 1.0)


def to_rgba(color: ColorLike) -> ColorTuple:
    """Normalise an RGB or RGBA sequence to an RGBA tuple of floats."""

    channels = [float(channel) for channel in color]
    if len(channels) == 3:
        channels.append(1.0)
    if len(channels) != 4:
        raise ValueError(f"Expected an RGB or RGBA color, got {len(channels)} channels")
    return tuple(channels)  # type: ignore[return-value]
