"""Edge-clamped 2D grid of RGBA samples used as filter input and output."""
from __future__ import annotations

from typing import Tuple

import numpy as np
from PIL import Image

from .errors import InvalidInput, OutOfRangeWrite
from .utils_color import ColorLike, ColorTuple, luminance, to_rgba


class PixelGrid:
    """Row-major RGBA samples in ``[0, 1]`` with clamped coordinate reads.

    Samples live in a ``float32`` array of shape ``(height, width, 4)``. Every
    read path (:meth:`sample`, :meth:`shifted`, :meth:`gather`) clamps the
    requested coordinates to the grid, so border pixels replicate outward and
    no read ever fails. Writes go through :meth:`write` and must be in range.
    """

    def __init__(self, samples: np.ndarray) -> None:
        array = np.array(samples, dtype=np.float32)
        if array.ndim != 3 or array.shape[2] != 4:
            raise InvalidInput(f"Expected samples shaped (height, width, 4), got {array.shape}")
        self._samples = array

    @classmethod
    def blank(cls, width: int, height: int) -> "PixelGrid":
        """Create a transparent black grid to be filled by a filter."""

        if width <= 0 or height <= 0:
            raise InvalidInput(f"Grid dimensions must be positive, got {width}x{height}")
        return cls(np.zeros((height, width, 4), dtype=np.float32))

    @classmethod
    def from_image(cls, image: Image.Image) -> "PixelGrid":
        """Build a frozen grid from a decoded Pillow image of any mode."""

        rgba = np.asarray(image.convert("RGBA"), dtype=np.float32) / 255.0
        return cls(rgba).freeze()

    @property
    def width(self) -> int:
        return int(self._samples.shape[1])

    @property
    def height(self) -> int:
        return int(self._samples.shape[0])

    @property
    def size(self) -> Tuple[int, int]:
        return self.width, self.height

    @property
    def samples(self) -> np.ndarray:
        """Read-only view of the underlying ``(height, width, 4)`` array."""

        view = self._samples.view()
        view.flags.writeable = False
        return view

    @property
    def frozen(self) -> bool:
        return not self._samples.flags.writeable

    def freeze(self) -> "PixelGrid":
        """Mark the grid read-only and return it."""

        self._samples.flags.writeable = False
        return self

    def copy(self) -> "PixelGrid":
        """Return a writable copy."""

        return PixelGrid(self._samples.copy())

    def _clamp_x(self, x):
        return np.clip(x, 0, self.width - 1)

    def _clamp_y(self, y):
        return np.clip(y, 0, self.height - 1)

    def sample(self, x: int, y: int) -> ColorTuple:
        """Return the color at ``(x, y)`` after clamping to the grid."""

        cx = int(self._clamp_x(x))
        cy = int(self._clamp_y(y))
        return tuple(float(channel) for channel in self._samples[cy, cx])  # type: ignore[return-value]

    def luminance_at(self, x: int, y: int) -> float:
        return float(luminance(self.sample(x, y)))

    def gather(self, xs: np.ndarray, ys: np.ndarray) -> np.ndarray:
        """Read the samples at integer coordinate arrays *xs*, *ys* with clamping.

        The result has the broadcast shape of the coordinates plus a trailing
        channel axis.
        """

        cx = self._clamp_x(np.asarray(xs, dtype=np.intp))
        cy = self._clamp_y(np.asarray(ys, dtype=np.intp))
        return self._samples[cy, cx]

    def shifted(self, dx: int, dy: int) -> np.ndarray:
        """Return the whole grid as read at ``(x + dx, y + dy)`` for every pixel."""

        xs = np.arange(self.width)[np.newaxis, :] + dx
        ys = np.arange(self.height)[:, np.newaxis] + dy
        return self.gather(xs, ys)

    def write(self, x: int, y: int, color: ColorLike) -> None:
        """Store *color* (RGB or RGBA) at ``(x, y)``."""

        if not (0 <= x < self.width and 0 <= y < self.height):
            raise OutOfRangeWrite(x, y, self.width, self.height)
        self._samples[y, x] = to_rgba(color)

    def fill(self, values: np.ndarray) -> None:
        """Store a full ``(height, width, 4)`` block, writing every coordinate once."""

        block = np.asarray(values, dtype=np.float32)
        if block.ndim != 3 or block.shape[2] != 4:
            raise ValueError(f"Expected a (height, width, 4) block, got {block.shape}")
        rows, cols = block.shape[:2]
        if rows > self.height or cols > self.width:
            raise OutOfRangeWrite(cols - 1, rows - 1, self.width, self.height)
        if (rows, cols) != (self.height, self.width):
            raise ValueError(f"Block of {cols}x{rows} does not cover the {self.width}x{self.height} grid")
        self._samples[...] = block

    def to_image(self) -> Image.Image:
        """Encode the grid as an 8-bit RGBA Pillow image."""

        clipped = np.clip(self._samples, 0.0, 1.0)
        return Image.fromarray(np.round(clipped * 255.0).astype(np.uint8))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PixelGrid):
            return NotImplemented
        return self._samples.shape == other._samples.shape and bool(np.array_equal(self._samples, other._samples))

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        state = "frozen" if self.frozen else "writable"
        return f"PixelGrid({self.width}x{self.height}, {state})"
