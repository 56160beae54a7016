"""Generate height maps from albedo luminance."""
from __future__ import annotations

from typing import Optional

import numpy as np

from ...core.pixel_grid import PixelGrid
from ...core.utils_color import luminance


def generate(grid: PixelGrid, strength: float) -> Optional[PixelGrid]:
    """Convert luminance scaled by *strength* to a gray height map.

    Returns ``None`` when *strength* is zero.
    """

    if strength == 0:
        return None

    height = luminance(grid.samples) * strength
    alpha = np.ones_like(height)

    output = PixelGrid.blank(grid.width, grid.height)
    output.fill(np.stack([height, height, height, alpha], axis=-1))
    return output.freeze()


if __name__ == "__main__":  # pragma: no cover
    from PIL import Image

    sample = Image.new("RGBA", (16, 16), (40, 80, 120, 255))
    generate(PixelGrid.from_image(sample), 1.0).to_image().show()
