"""
Export modules for particle fields.

Supported formats:
- ASCII PLY (.ply) - Portable point cloud for Blender, MeshLab, CloudCompare
- SVG (.svg) - Flat vector rendering from a camera viewpoint
"""

from .ply_exporter import PLYExporter, export_points
from .svg_exporter import SVGExporter

__all__ = ["PLYExporter", "SVGExporter", "export_points"]
