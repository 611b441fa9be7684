"""
Command-Line Interface for Particle Field

Usage:
    particle-field photo.jpg -o field.ply
    particle-field a.png b.png --density 2 --depth 200 -o field.ply
    particle-field photo.jpg -o field.ply --svg view.svg --yaw 30 --pitch 15

"""

import argparse
import logging
import sys
import time
from pathlib import Path
from typing import List, Optional

from . import __version__
from .config import SamplingConfig, VIEWER_DEFAULTS
from .errors import ParticleFieldError
from .exporters import PLYExporter, SVGExporter
from .projection import PerspectiveCamera, ProjectionContext, VIEW_PRESETS
from .synthesizer import ParticleSynthesizer

logger = logging.getLogger(__name__)


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="particle-field",
        description="Particle Field - Convert images to a colored 3D point cloud",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  particle-field photo.jpg -o field.ply
      Convert photo.jpg to an ASCII PLY point cloud

  particle-field a.png b.png --density 2 --depth 200 -o field.ply
      Two images side by side, denser sampling, stronger relief

  particle-field photo.jpg -o field.ply --svg view.svg --yaw 30 --pitch 15
      Also render an SVG seen from an orbiting camera

  particle-field https://example.com/image.png --svg view.svg --view side
      Load from a URL, render only the side view

Image sources may be file paths, http(s) URLs or data: URIs.
        """
    )

    # Input
    parser.add_argument(
        "inputs",
        nargs="+",
        help="Input images (paths, URLs or data URIs), laid out left to right"
    )

    # Output
    parser.add_argument(
        "-o", "--output",
        help="Output .ply file path"
    )

    parser.add_argument(
        "--svg",
        help="Output .svg file path (projected view)"
    )

    # Sampling settings
    parser.add_argument(
        "--density",
        type=int,
        default=VIEWER_DEFAULTS["density"],
        help=f"Pixel stride, smaller is denser (default: {VIEWER_DEFAULTS['density']})"
    )

    parser.add_argument(
        "--depth",
        type=float,
        default=VIEWER_DEFAULTS["depth"],
        help=f"Brightness to Z displacement scale (default: {VIEWER_DEFAULTS['depth']:g})"
    )

    parser.add_argument(
        "--saturation",
        type=float,
        default=VIEWER_DEFAULTS["saturation"],
        help=f"Color saturation boost (default: {VIEWER_DEFAULTS['saturation']:g})"
    )

    parser.add_argument(
        "--threshold",
        type=int,
        default=VIEWER_DEFAULTS["threshold"],
        help=f"Alpha cutoff 0-255 (default: {VIEWER_DEFAULTS['threshold']})"
    )

    parser.add_argument(
        "--max-dimension",
        type=int,
        default=600,
        help="Downscale images whose longer side exceeds this (default: 600)"
    )

    parser.add_argument(
        "--gap",
        type=float,
        default=60.0,
        help="Spacing between images (default: 60)"
    )

    parser.add_argument(
        "--jitter",
        type=float,
        default=2.5,
        help="Half-range of random depth noise (default: 2.5)"
    )

    parser.add_argument(
        "--seed",
        type=int,
        help="Random seed for reproducible depth noise"
    )

    # Camera settings
    parser.add_argument(
        "--view",
        choices=sorted(VIEW_PRESETS),
        help="Named camera view (overrides --yaw/--pitch)"
    )

    parser.add_argument(
        "--distance",
        type=float,
        default=600.0,
        help="Camera distance from the origin (default: 600)"
    )

    parser.add_argument(
        "--yaw",
        type=float,
        default=0.0,
        help="Camera rotation about Y in degrees (default: 0)"
    )

    parser.add_argument(
        "--pitch",
        type=float,
        default=0.0,
        help="Camera elevation in degrees (default: 0)"
    )

    parser.add_argument(
        "--fov",
        type=float,
        default=50.0,
        help="Vertical field of view in degrees (default: 50)"
    )

    parser.add_argument(
        "--width",
        type=int,
        default=1920,
        help="SVG width in pixels (default: 1920)"
    )

    parser.add_argument(
        "--height",
        type=int,
        default=1080,
        help="SVG height in pixels (default: 1080)"
    )

    parser.add_argument(
        "--radius",
        type=float,
        default=3.0,
        help="Base circle radius for the nearest points (default: 3)"
    )

    # Misc
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Verbose output with timing"
    )

    parser.add_argument(
        "--stats",
        action="store_true",
        help="Print point cloud statistics"
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}"
    )

    return parser


def build_camera(args) -> PerspectiveCamera:
    """Create the export camera from parsed arguments."""
    if args.view:
        return PerspectiveCamera.preset(args.view, distance=args.distance, fov=args.fov)
    return PerspectiveCamera.orbit(
        distance=args.distance,
        yaw=args.yaw,
        pitch=args.pitch,
        fov=args.fov
    )


def print_stats(cloud, config: SamplingConfig):
    """Print point cloud statistics."""
    low, high = cloud.bounds()
    print("\nPoint Cloud Statistics:")
    print(f"  Points: {len(cloud):,}")
    print(f"  Footprint: {cloud.width:.0f} x {cloud.height:.0f}")
    print(f"  Bounds min: ({low[0]:.1f}, {low[1]:.1f}, {low[2]:.1f})")
    print(f"  Bounds max: ({high[0]:.1f}, {high[1]:.1f}, {high[2]:.1f})")
    print(f"  Step: {config.step}, depth: {config.depth_multiplier:g}, "
          f"saturation: {config.saturation:g}")


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s"
    )

    if not args.output and not args.svg:
        print("Error: specify -o/--output and/or --svg", file=sys.stderr)
        return 1

    start_time = time.time()

    try:
        config = SamplingConfig.from_options({
            "density": args.density,
            "depth": args.depth,
            "saturation": args.saturation,
            "threshold": args.threshold,
            "max_dimension": args.max_dimension,
            "gap": args.gap,
            "jitter": args.jitter,
        })

        context = None
        if args.svg:
            context = ProjectionContext.for_size(
                args.width, args.height, build_camera(args)
            )

        synthesizer = ParticleSynthesizer(config, rng=args.seed)
        cloud = synthesizer.synthesize(args.inputs)

        if args.stats or args.verbose:
            print_stats(cloud, config)

        if args.output:
            PLYExporter().export(cloud, Path(args.output))

        if context is not None:
            SVGExporter(base_radius=args.radius).export(cloud, context, Path(args.svg))

        elapsed = time.time() - start_time
        logger.info(f"Completed in {elapsed:.2f}s")

        return 0

    except (ParticleFieldError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        if args.verbose:
            import traceback
            traceback.print_exc()
        return 1


if __name__ == "__main__":
    sys.exit(main())
