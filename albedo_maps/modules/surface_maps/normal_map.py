"""Generate tangent-space normal maps from Sobel gradients of the red channel."""
from __future__ import annotations

from typing import Optional

import numpy as np

from ...core.pixel_grid import PixelGrid


def generate(grid: PixelGrid, strength: float) -> Optional[PixelGrid]:
    """Create a tangent-space normal map, or ``None`` when *strength* is zero.

    The red channel acts as the height proxy. Each neighbour of the 3x3 window
    is read through the grid's clamped access, so border pixels need no
    special casing. The gradient vector ``(dx * strength, dy * strength, 1)``
    is normalised and remapped from ``[-1, 1]`` to ``[0, 1]``.
    """

    if strength == 0:
        return None

    def red(dx: int, dy: int) -> np.ndarray:
        return grid.shifted(dx, dy)[..., 0]

    top_left, top, top_right = red(-1, -1), red(0, -1), red(1, -1)
    left, right = red(-1, 0), red(1, 0)
    bottom_left, bottom, bottom_right = red(-1, 1), red(0, 1), red(1, 1)

    grad_x = (top_right + 2.0 * right + bottom_right) - (top_left + 2.0 * left + bottom_left)
    grad_y = (bottom_left + 2.0 * bottom + bottom_right) - (top_left + 2.0 * top + top_right)

    # compute tangent-space normal
    nx = grad_x * strength
    ny = grad_y * strength
    nz = np.ones_like(nx)

    # normalize vectors
    length = np.sqrt(nx ** 2 + ny ** 2 + nz ** 2)
    normal = np.stack([nx, ny, nz], axis=-1) / length[..., np.newaxis]

    # remap from [-1,1] → [0,1]
    rgb = normal * 0.5 + 0.5
    alpha = np.ones(rgb.shape[:2] + (1,), dtype=np.float32)

    output = PixelGrid.blank(grid.width, grid.height)
    output.fill(np.concatenate([rgb, alpha], axis=-1))
    return output.freeze()


if __name__ == "__main__":  # pragma: no cover - manual smoke test
    from PIL import Image

    sample = Image.new("RGBA", (16, 16), (120, 100, 90, 255))
    generate(PixelGrid.from_image(sample), 1.0).to_image().show()
