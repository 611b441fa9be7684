"""
Particle Field
==============

Turn raster images into a colored 3D point cloud, and project it back to 2D.

This package converts one or more images into a single "particle field":
every sampled pixel becomes a 3D point whose depth follows its brightness,
with images laid out side by side and centered at the origin.

Key Features:
- Concurrent, fail-fast loading from paths, URLs, data URIs, bytes or arrays
- Strided sampling with alpha cutoff and automatic downscaling
- Luminance-driven depth with injectable random jitter
- Saturation boost around BT.601 luminance (Numba JIT kernel)
- Export to ASCII PLY and camera-projected SVG

Example Usage:
    from particle_field import ParticleSynthesizer, SamplingConfig, PLYExporter

    synthesizer = ParticleSynthesizer(SamplingConfig(step=3, depth_multiplier=150))
    cloud = synthesizer.synthesize(["photo.jpg"])
    PLYExporter().export(cloud, "field.ply")
"""

__version__ = "1.0.0"
__author__ = "Particle Field Team"

from .cloud import PointCloud
from .config import SamplingConfig
from .errors import (
    ParticleFieldError,
    ConfigError,
    EmptyInputError,
    ImageLoadError,
    MalformedCloudError,
)
from .synthesizer import ParticleSynthesizer, synthesize
from .projection import (
    PerspectiveCamera,
    MatrixCamera,
    ProjectionContext,
    ScreenCircle,
    project_to_vector,
)
from .exporters import PLYExporter, SVGExporter, export_points

__all__ = [
    "PointCloud",
    "SamplingConfig",
    "ParticleFieldError",
    "ConfigError",
    "EmptyInputError",
    "ImageLoadError",
    "MalformedCloudError",
    "ParticleSynthesizer",
    "synthesize",
    "PerspectiveCamera",
    "MatrixCamera",
    "ProjectionContext",
    "ScreenCircle",
    "project_to_vector",
    "PLYExporter",
    "SVGExporter",
    "export_points",
]
