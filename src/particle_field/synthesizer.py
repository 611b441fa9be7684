"""
Particle Synthesizer

This is the primary interface for the image -> point cloud pipeline.
It orchestrates:
1. Concurrent image loading (fail-fast)
2. Downscaling and side-by-side layout
3. Strided per-pixel sampling with alpha cutoff
4. Luminance depth with random jitter
5. Saturation boost

Example Usage:
    synthesizer = ParticleSynthesizer(SamplingConfig(step=3, depth_multiplier=150))
    cloud = synthesizer.synthesize(["photo.jpg", "logo.png"])
    PLYExporter().export(cloud, "field.ply")
"""

import logging
from typing import Any, Optional, Sequence, Tuple, Union
import numpy as np

from .cloud import PointCloud
from .color import boost_saturation, luminance
from .config import SamplingConfig
from .errors import EmptyInputError
from .ingestion import load_images, resample
from .layout import ImageLayout, compute_layout, max_point_count

logger = logging.getLogger(__name__)

RandomSource = Union[None, int, np.random.Generator]


def sample_pixels(
    rgba: np.ndarray,
    layout: ImageLayout,
    config: SamplingConfig,
    rng: np.random.Generator
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Turn one resampled image into particles.

    Visits rows 0, step, 2*step, ... and within each row the same columns,
    in row-major order. Pixels with alpha below the threshold are skipped.

    Args:
        rgba: uint8 array of shape (height, width, 4) at display size
        layout: Placement of this image in the world row
        config: Sampling configuration
        rng: Random generator for depth jitter

    Returns:
        (positions, colors) float32 arrays of shape (N, 3)
    """
    step = config.step
    grid = rgba[::step, ::step]

    # Pixel coordinates of every visited sample
    ys = np.arange(0, rgba.shape[0], step, dtype=np.float64)
    xs = np.arange(0, rgba.shape[1], step, dtype=np.float64)
    py, px = np.meshgrid(ys, xs, indexing="ij")

    keep = grid[:, :, 3] >= config.alpha_threshold
    px = px[keep]
    py = py[keep]
    rgb = grid[:, :, :3][keep].astype(np.float64) / 255.0

    count = len(rgb)
    if count == 0:
        empty = np.zeros((0, 3), dtype=np.float32)
        return empty, empty.copy()

    lum = luminance(rgb)
    cx, cy = layout.center

    positions = np.empty((count, 3), dtype=np.float32)
    positions[:, 0] = (px - cx) + layout.x_offset
    # Image y grows downward, world y grows upward
    positions[:, 1] = cy - py

    jitter = rng.uniform(-config.depth_jitter, config.depth_jitter, size=count)
    positions[:, 2] = (lum - 0.5) * config.depth_multiplier + jitter

    colors = boost_saturation(rgb, lum, config.saturation)

    return positions, colors


class ParticleSynthesizer:
    """
    High-level interface for converting images into a particle field.

    Each call to synthesize() is independent: layout records and pixel
    buffers are created inside the call and dropped when it returns.

    Attributes:
        config: Sampling configuration
        max_workers: Thread pool size for image loading
    """

    def __init__(
        self,
        config: Optional[SamplingConfig] = None,
        rng: RandomSource = None,
        max_workers: Optional[int] = None
    ):
        """
        Initialize the synthesizer.

        Args:
            config: Sampling configuration (defaults to SamplingConfig())
            rng: numpy Generator or integer seed for depth jitter
            max_workers: Thread pool size for loading (default: per source, max 8)
        """
        self.config = config or SamplingConfig()
        self.max_workers = max_workers
        self._rng = np.random.default_rng(rng)

    def synthesize(self, sources: Sequence[Any]) -> PointCloud:
        """
        Convert image sources into one point cloud.

        Images are laid out left to right in source order and the row is
        centered at x = 0.

        Args:
            sources: Image sources (paths, URLs, data URIs, bytes, PIL images,
                numpy arrays)

        Returns:
            PointCloud with width = total row width, height = tallest image

        Raises:
            EmptyInputError: if no sources are given
            ImageLoadError: if any source fails to load
        """
        sources = list(sources)
        if not sources:
            raise EmptyInputError()

        images = load_images(sources, self.max_workers)
        layouts, total_width, max_height = compute_layout(
            [img.size for img in images],
            max_dimension=self.config.max_dimension,
            gap=self.config.gap
        )

        parts = []
        for index, (img, layout) in enumerate(zip(images, layouts)):
            rgba = resample(img, (layout.width, layout.height))
            positions, colors = sample_pixels(rgba, layout, self.config, self._rng)
            logger.debug(
                f"Image {index}: {img.size[0]}x{img.size[1]} -> "
                f"{layout.width}x{layout.height} at x={layout.x_offset:.1f}, "
                f"{len(positions)} points"
            )
            parts.append((positions, colors))

        cloud = PointCloud.concatenate(parts, total_width, max_height)
        logger.info(
            f"Synthesized {len(cloud)} points from {len(images)} image(s), "
            f"footprint {total_width:.0f}x{max_height:.0f}"
        )
        return cloud

    def preview(self, sources: Sequence[Any]) -> dict:
        """
        Load sources and report the layout without sampling any pixels.

        Args:
            sources: Image sources

        Returns:
            Dictionary with per-image sizes/offsets and the expected
            upper bound on the point count
        """
        sources = list(sources)
        if not sources:
            raise EmptyInputError()

        images = load_images(sources, self.max_workers)
        layouts, total_width, max_height = compute_layout(
            [img.size for img in images],
            max_dimension=self.config.max_dimension,
            gap=self.config.gap
        )

        return {
            "image_count": len(images),
            "original_sizes": [img.size for img in images],
            "display_sizes": [(l.width, l.height) for l in layouts],
            "x_offsets": [l.x_offset for l in layouts],
            "width": total_width,
            "height": max_height,
            "max_points": max_point_count(layouts, self.config.step),
        }


def synthesize(
    sources: Sequence[Any],
    config: Optional[SamplingConfig] = None,
    rng: RandomSource = None
) -> PointCloud:
    """
    Convert image sources into a point cloud.

    Shortcut for ParticleSynthesizer(config, rng).synthesize(sources).
    """
    return ParticleSynthesizer(config, rng).synthesize(sources)
