"""
SVG Vector Exporter

Renders the particle field as seen from a camera into a flat SVG:
one <circle> per visible particle on a black background, emitted
farthest first so that nearer particles paint over farther ones.
"""

import logging
from pathlib import Path
from typing import Any, Iterable, Union

from ..projection import ProjectionContext, ScreenCircle, project_to_vector

logger = logging.getLogger(__name__)


def _format_size(value: float) -> str:
    """Print whole numbers without a trailing .0 (800, not 800.0)."""
    value = float(value)
    if value.is_integer():
        return str(int(value))
    return repr(value)


class SVGExporter:
    """
    Export a projected point cloud to an SVG document.

    Attributes:
        base_radius: Radius scale for the nearest particles
    """

    def __init__(self, base_radius: float = 3.0):
        """
        Initialize the exporter.

        Args:
            base_radius: Circle radius is max(0.5, base_radius * (1 - ndc.z))
        """
        self.base_radius = base_radius

    def render(
        self,
        circles: Iterable[ScreenCircle],
        width: float,
        height: float
    ) -> str:
        """
        Build an SVG document from already projected circles.

        Circles are written in the order given.
        """
        parts = [
            f'<svg xmlns="http://www.w3.org/2000/svg" '
            f'viewBox="0 0 {_format_size(width)} {_format_size(height)}" '
            f'style="background-color:black;">'
        ]

        for c in circles:
            parts.append(
                f'<circle cx="{c.x:.1f}" cy="{c.y:.1f}" r="{c.radius:.1f}" '
                f'fill="{c.fill}" />'
            )

        parts.append("</svg>")
        return "".join(parts)

    def to_string(self, cloud: Any, context: ProjectionContext) -> str:
        """
        Project a point cloud and render it as SVG.

        Args:
            cloud: PointCloud or cloud-like object
            context: Camera and output size

        Returns:
            SVG document text
        """
        circles = project_to_vector(cloud, context, self.base_radius)
        logger.debug(f"Projected {len(circles)} visible circles")
        return self.render(circles, context.width, context.height)

    def to_bytes(self, cloud: Any, context: ProjectionContext) -> bytes:
        """Project a point cloud and render it as UTF-8 SVG bytes."""
        return self.to_string(cloud, context).encode("utf-8")

    def export(
        self,
        cloud: Any,
        context: ProjectionContext,
        output_path: Union[str, Path]
    ):
        """
        Write the projected point cloud to an .svg file.

        Args:
            cloud: PointCloud or cloud-like object
            context: Camera and output size
            output_path: Output file path
        """
        output_path = Path(output_path)
        data = self.to_bytes(cloud, context)

        with open(output_path, "wb") as f:
            f.write(data)

        logger.info(f"Wrote {output_path} ({len(data)} bytes)")
