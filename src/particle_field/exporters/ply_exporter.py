"""
ASCII PLY Point Exporter

PLY (Stanford Polygon File Format) carries per-vertex colors natively and is
read by Blender, MeshLab and CloudCompare. Points are written with no faces:

    ply
    format ascii 1.0
    element vertex <N>
    property float x
    property float y
    property float z
    property uchar red
    property uchar green
    property uchar blue
    end_header
    <x> <y> <z> <r> <g> <b>

Coordinates use 3 decimal places, colors floor(c * 255). Downstream tools
parse this byte for byte, so header lines and field order are fixed.
"""

import logging
from pathlib import Path
from typing import Any, Union
import numpy as np

from ..cloud import as_point_cloud
from ..color import to_uint8

logger = logging.getLogger(__name__)


def _round_ties_away(values: np.ndarray) -> np.ndarray:
    """
    Nudge exact 3-decimal ties one ulp away from zero.

    Python's :.3f rounds a tie such as 0.0625 to even ("0.062"); the viewer
    rounds it away from zero ("0.063"). Positions are float32, so
    value * 1000 is exact in float64 and ties can be detected directly.
    """
    scaled = values * 1000.0
    ties = np.abs(scaled - np.trunc(scaled)) == 0.5
    away = np.nextafter(values, np.copysign(np.inf, values))
    return np.where(ties, away, values)


HEADER_TEMPLATE = (
    "ply\n"
    "format ascii 1.0\n"
    "element vertex {count}\n"
    "property float x\n"
    "property float y\n"
    "property float z\n"
    "property uchar red\n"
    "property uchar green\n"
    "property uchar blue\n"
    "end_header\n"
)


class PLYExporter:
    """
    Export a point cloud to an ASCII PLY point file.

    Every point is written in index order; nothing is culled or projected.
    """

    def header(self, count: int) -> str:
        """Build the PLY header for a given vertex count."""
        return HEADER_TEMPLATE.format(count=count)

    def to_string(self, cloud: Any) -> str:
        """
        Serialize a point cloud to PLY text.

        Args:
            cloud: PointCloud or cloud-like object

        Returns:
            Complete PLY document

        Raises:
            MalformedCloudError: if positions and colors are misaligned
        """
        cloud = as_point_cloud(cloud)

        # + 0.0 turns -0.0 into 0.0 so it never prints as "-0.000"
        vertices = _round_ties_away(cloud.positions.astype(np.float64) + 0.0)
        colors = to_uint8(cloud.colors)

        lines = [self.header(len(vertices))]
        for v, c in zip(vertices, colors):
            lines.append(
                f"{v[0]:.3f} {v[1]:.3f} {v[2]:.3f} {c[0]} {c[1]} {c[2]}\n"
            )

        return "".join(lines)

    def to_bytes(self, cloud: Any) -> bytes:
        """Serialize a point cloud to ASCII PLY bytes."""
        return self.to_string(cloud).encode("ascii")

    def export(self, cloud: Any, output_path: Union[str, Path]):
        """
        Write a point cloud to a .ply file.

        Args:
            cloud: PointCloud or cloud-like object
            output_path: Output file path
        """
        output_path = Path(output_path)
        data = self.to_bytes(cloud)

        with open(output_path, "wb") as f:
            f.write(data)

        logger.info(f"Wrote {output_path} ({len(data)} bytes)")


def export_points(cloud: Any) -> bytes:
    """Serialize a point cloud to ASCII PLY bytes."""
    return PLYExporter().to_bytes(cloud)
