"""
Side-by-side Image Layout

Places N images in a single row in world space:
- Each image is capped to a maximum display dimension (aspect preserved)
- Images are separated by a fixed gap
- The whole row is centered at world x = 0

World units equal display pixels, so an image W pixels wide spans W units.
"""

from dataclasses import dataclass
from typing import List, Sequence, Tuple
import math


@dataclass
class ImageLayout:
    """
    Placement of one image in the shared world row.

    Attributes:
        width: Display width in pixels after downscaling
        height: Display height in pixels after downscaling
        x_offset: World x coordinate of the image center
    """

    width: int
    height: int
    x_offset: float = 0.0

    @property
    def center(self) -> Tuple[float, float]:
        """Image-space center (cx, cy) in pixels."""
        return (self.width / 2.0, self.height / 2.0)

    @property
    def left(self) -> float:
        """World x of the image's left edge."""
        return self.x_offset - self.width / 2.0

    @property
    def right(self) -> float:
        """World x of the image's right edge."""
        return self.x_offset + self.width / 2.0


def display_size(
    width: int,
    height: int,
    max_dimension: int = 600
) -> Tuple[int, int]:
    """
    Compute the size an image is resampled to before sampling.

    If either side exceeds max_dimension, both are scaled uniformly so the
    longer side equals max_dimension, then floored. The result is never
    smaller than 1x1.

    Args:
        width, height: Original image size in pixels
        max_dimension: Cap for the longer side

    Returns:
        (display_width, display_height)
    """
    w, h = width, height

    if w > max_dimension or h > max_dimension:
        ratio = min(max_dimension / w, max_dimension / h)
        w = math.floor(w * ratio)
        h = math.floor(h * ratio)

    return (max(1, int(w)), max(1, int(h)))


def compute_layout(
    sizes: Sequence[Tuple[int, int]],
    max_dimension: int = 600,
    gap: float = 60.0
) -> Tuple[List[ImageLayout], float, float]:
    """
    Lay images out left to right, centered on x = 0.

    Args:
        sizes: Original (width, height) of each image, in source order
        max_dimension: Downscale cap applied to each image
        gap: Spacing between neighbouring images

    Returns:
        (layouts, total_width, max_height)
    """
    layouts = []
    total_width = 0.0
    max_height = 0.0

    for width, height in sizes:
        w, h = display_size(width, height, max_dimension)
        layouts.append(ImageLayout(width=w, height=h))
        total_width += w
        max_height = max(max_height, h)

    if len(layouts) > 1:
        total_width += (len(layouts) - 1) * gap

    # Walk a cursor from the left edge of the row
    cursor = -total_width / 2.0
    for layout in layouts:
        layout.x_offset = cursor + layout.width / 2.0
        cursor += layout.width + gap

    return layouts, total_width, max_height


def max_point_count(layouts: Sequence[ImageLayout], step: int) -> int:
    """
    Upper bound on the samples a layout can produce at a given stride.

    Alpha filtering can only lower the actual count.
    """
    return sum(
        math.ceil(layout.width / step) * math.ceil(layout.height / step)
        for layout in layouts
    )
