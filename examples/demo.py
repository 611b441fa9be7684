#!/usr/bin/env python3
"""
Particle Field Demo Script

This script demonstrates the full particle pipeline by:
1. Creating synthetic test images (no external images needed)
2. Synthesizing a side-by-side particle field
3. Exporting a PLY point cloud and SVG views from several cameras
4. Printing statistics

Run with: python examples/demo.py
"""

import sys
from pathlib import Path
import numpy as np
import time

# Add src to path for development
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from particle_field import (
    ParticleSynthesizer,
    PerspectiveCamera,
    PLYExporter,
    ProjectionContext,
    SamplingConfig,
    SVGExporter,
)


def create_radial_gradient(size: int = 256) -> np.ndarray:
    """
    Create a disc whose brightness falls off from the center.

    Pixels outside the disc are transparent, so they produce no particles.
    """
    ys, xs = np.mgrid[0:size, 0:size]
    center = (size - 1) / 2.0
    dist = np.sqrt((xs - center) ** 2 + (ys - center) ** 2) / center

    rgba = np.zeros((size, size, 4), dtype=np.uint8)
    inside = dist < 1.0
    brightness = np.clip(1.0 - dist, 0.0, 1.0)

    rgba[..., 0] = (80 + 175 * brightness).astype(np.uint8)
    rgba[..., 1] = (120 * brightness).astype(np.uint8)
    rgba[..., 2] = (200 * (1 - brightness)).astype(np.uint8)
    rgba[..., 3] = np.where(inside, 255, 0)
    return rgba


def create_color_bars(width: int = 320, height: int = 180) -> np.ndarray:
    """Create opaque vertical color bars with a vertical brightness ramp."""
    bars = np.array([
        [255, 255, 255], [255, 255, 0], [0, 255, 255], [0, 255, 0],
        [255, 0, 255], [255, 0, 0], [0, 0, 255], [0, 0, 0],
    ], dtype=np.float64)

    columns = (np.arange(width) * len(bars) // width)
    ramp = np.linspace(1.0, 0.4, height)[:, np.newaxis, np.newaxis]

    rgba = np.full((height, width, 4), 255, dtype=np.uint8)
    rgba[..., :3] = (bars[columns][np.newaxis, :, :] * ramp).astype(np.uint8)
    return rgba


def create_checkerboard(size: int = 900, tile: int = 60) -> np.ndarray:
    """Create a large checkerboard; it is downscaled to the size cap."""
    ys, xs = np.mgrid[0:size, 0:size]
    light = ((xs // tile + ys // tile) % 2) == 0

    rgba = np.full((size, size, 4), 255, dtype=np.uint8)
    rgba[..., :3] = np.where(light[..., np.newaxis], 230, 30)
    return rgba


def run_demo():
    """Run the demonstration."""
    print("=" * 60)
    print("Particle Field - Demo")
    print("=" * 60)

    output_dir = Path(__file__).parent / "output"
    output_dir.mkdir(exist_ok=True)

    images = [create_radial_gradient(), create_color_bars(), create_checkerboard()]
    config = SamplingConfig.viewer_defaults()

    synthesizer = ParticleSynthesizer(config, rng=2024)

    print("\nLayout:")
    info = synthesizer.preview(images)
    for size, display, offset in zip(
        info["original_sizes"], info["display_sizes"], info["x_offsets"]
    ):
        print(f"  {size[0]}x{size[1]} -> {display[0]}x{display[1]} at x={offset:.1f}")
    print(f"  Footprint: {info['width']:.0f} x {info['height']:.0f}")
    print(f"  Max points: {info['max_points']:,}")

    start = time.time()
    cloud = synthesizer.synthesize(images)
    elapsed = time.time() - start

    low, high = cloud.bounds()
    print(f"\nSynthesized {len(cloud):,} points in {elapsed:.2f}s")
    print(f"  z range: {low[2]:.1f} .. {high[2]:.1f}")

    ply_path = output_dir / "demo_field.ply"
    PLYExporter().export(cloud, ply_path)
    print(f"\nExported: {ply_path}")

    # Pull back far enough to see the whole row
    distance = max(cloud.width, 600.0) * 1.2
    exporter = SVGExporter()

    for view in ("front", "side", "top"):
        camera = PerspectiveCamera.preset(view, distance=distance, far=distance * 4)
        context = ProjectionContext.for_size(1280, 720, camera)
        svg_path = output_dir / f"demo_{view}.svg"
        exporter.export(cloud, context, svg_path)
        print(f"Exported: {svg_path}")

    camera = PerspectiveCamera.orbit(distance=distance, yaw=35, pitch=20, far=distance * 4)
    context = ProjectionContext.for_size(1280, 720, camera)
    svg_path = output_dir / "demo_orbit.svg"
    exporter.export(cloud, context, svg_path)
    print(f"Exported: {svg_path}")


if __name__ == "__main__":
    run_demo()
