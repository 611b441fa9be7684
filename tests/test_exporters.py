"""
Unit tests for the PLY and SVG exporters and the command-line interface.
"""

import sys
import tempfile
from pathlib import Path
import numpy as np
import unittest

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from PIL import Image

from particle_field import (
    MalformedCloudError,
    MatrixCamera,
    PLYExporter,
    PointCloud,
    ProjectionContext,
    SVGExporter,
    export_points,
)
from particle_field.cli import main
from particle_field.cloud import as_point_cloud


PLY_HEADER_LINES = [
    "ply",
    "format ascii 1.0",
    "element vertex {count}",
    "property float x",
    "property float y",
    "property float z",
    "property uchar red",
    "property uchar green",
    "property uchar blue",
    "end_header",
]


class TestPointCloud(unittest.TestCase):
    """Tests for the PointCloud container."""

    def test_misaligned_rejected(self):
        """Positions and colors must have the same length."""
        with self.assertRaises(MalformedCloudError):
            PointCloud(np.zeros((2, 3)), np.zeros((3, 3)))

    def test_bad_shape_rejected(self):
        """Rows must be 3-tuples."""
        with self.assertRaises(MalformedCloudError):
            PointCloud(np.zeros((2, 4)), np.zeros((2, 4)))

    def test_from_flat(self):
        """Flat buffers are reshaped into (N, 3)."""
        cloud = PointCloud.from_flat([1, 2, 3, 4, 5, 6], [0, 0, 0, 1, 1, 1], 10, 20)
        assert len(cloud) == 2
        assert cloud.positions.tolist() == [[1, 2, 3], [4, 5, 6]]
        assert (cloud.width, cloud.height) == (10.0, 20.0)
        assert cloud.flat_positions().tolist() == [1, 2, 3, 4, 5, 6]

    def test_from_flat_not_multiple_of_three(self):
        """Flat buffers must hold whole triples."""
        with self.assertRaises(MalformedCloudError):
            PointCloud.from_flat([1, 2, 3, 4], [0, 0, 0, 1])

    def test_caller_buffer_not_frozen(self):
        """Freezing the cloud leaves the caller's arrays writable."""
        positions = np.zeros((2, 3), dtype=np.float32)
        PointCloud(positions, np.zeros((2, 3), dtype=np.float32))
        positions[0, 0] = 1.0
        assert positions.flags.writeable

    def test_bounds(self):
        """Axis-aligned bounds of the positions."""
        cloud = PointCloud([[1, -2, 3], [-4, 5, 0]], [[0, 0, 0], [0, 0, 0]])
        low, high = cloud.bounds()
        assert low.tolist() == [-4, -2, 0]
        assert high.tolist() == [1, 5, 3]

    def test_as_point_cloud_mapping(self):
        """Viewer-style mappings with flat buffers are accepted."""
        cloud = as_point_cloud({
            "positions": np.array([1, 2, 3], dtype=np.float32),
            "colors": np.array([1, 0, 0], dtype=np.float32),
            "width": 5,
            "height": 6,
        })
        assert len(cloud) == 1
        assert cloud.width == 5.0


class TestPLYExporter(unittest.TestCase):
    """Tests for ASCII PLY export."""

    def test_single_point(self):
        """One red point produces the exact header and body line."""
        cloud = PointCloud([[1.0, 2.0, 3.0]], [[1.0, 0.0, 0.0]])
        text = export_points(cloud).decode("ascii")

        lines = text.split("\n")
        expected_header = [l.format(count=1) for l in PLY_HEADER_LINES]
        assert lines[:10] == expected_header
        assert lines[10] == "1.000 2.000 3.000 255 0 0"
        assert text.endswith("\n")
        assert len(lines) == 12  # trailing newline leaves an empty tail

    def test_order_and_rounding(self):
        """Points keep index order; coordinates use 3 decimals."""
        cloud = PointCloud(
            [[-0.5, 10.12345, -3.0], [0.0, -0.0, 7.9999]],
            [[0.5, 0.25, 1.0], [0.0, 0.0, 0.0]]
        )
        body = PLYExporter().to_string(cloud).split("end_header\n")[1]

        assert body.splitlines() == [
            "-0.500 10.123 -3.000 127 63 255",
            "0.000 0.000 8.000 0 0 0",
        ]

    def test_ties_round_away_from_zero(self):
        """Exact halfway values round away from zero, like the viewer's output."""
        cloud = PointCloud([[0.0625, -0.0625, 2.5625]], [[0.0, 0.0, 0.0]])
        body = PLYExporter().to_string(cloud).split("end_header\n")[1]

        assert body == "0.063 -0.063 2.563 0 0 0\n"

    def test_no_culling(self):
        """Every point is written, wherever it is."""
        positions = np.array([[0, 0, 1e6], [-1e6, 0, 0], [0, 0, 0]], dtype=np.float32)
        cloud = PointCloud(positions, np.zeros((3, 3)))
        text = export_points(cloud).decode("ascii")

        assert "element vertex 3\n" in text
        assert len(text.split("end_header\n")[1].splitlines()) == 3

    def test_empty_cloud(self):
        """An empty cloud exports a header with zero vertices."""
        text = export_points(PointCloud.empty()).decode("ascii")
        assert "element vertex 0\n" in text
        assert text.endswith("end_header\n")

    def test_malformed_cloud(self):
        """Misaligned cloud-like input fails before anything is written."""
        with self.assertRaises(MalformedCloudError):
            export_points({"positions": [1, 2, 3, 4, 5, 6], "colors": [1, 0, 0]})

    def test_export_file(self):
        """export() writes the same bytes as to_bytes()."""
        cloud = PointCloud([[1, 1, 1]], [[0, 1, 0]])
        exporter = PLYExporter()

        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "field.ply"
            exporter.export(cloud, path)
            assert path.read_bytes() == exporter.to_bytes(cloud)


class TestSVGExporter(unittest.TestCase):
    """Tests for SVG export."""

    def setUp(self):
        self.context = ProjectionContext(MatrixCamera(np.eye(4)), 100, 50)

    def test_document_structure(self):
        """Header, circles and footer."""
        cloud = PointCloud([[0.0, 0.0, 0.5]], [[1.0, 0.0, 0.0]])
        svg = SVGExporter().to_string(cloud, self.context)

        assert svg.startswith(
            '<svg xmlns="http://www.w3.org/2000/svg" viewBox="0 0 100 50" '
            'style="background-color:black;">'
        )
        assert '<circle cx="50.0" cy="25.0" r="1.5" fill="rgb(255,0,0)" />' in svg
        assert svg.endswith("</svg>")

    def test_farthest_first_and_culled(self):
        """Circles appear far to near; off-screen points are absent."""
        cloud = PointCloud(
            [[0.0, 0.0, -0.5], [0.0, 0.0, 0.5], [2.0, 0.0, 0.0]],
            [[1, 0, 0], [0, 1, 0], [0, 0, 1]]
        )
        svg = SVGExporter().to_string(cloud, self.context)

        assert svg.count("<circle") == 2
        assert svg.index("rgb(0,255,0)") < svg.index("rgb(255,0,0)")
        assert "rgb(0,0,255)" not in svg

    def test_export_file(self):
        """export() writes UTF-8 SVG to disk."""
        cloud = PointCloud([[0.0, 0.0, 0.0]], [[1.0, 1.0, 1.0]])

        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "view.svg"
            SVGExporter(base_radius=4).export(cloud, self.context, path)
            text = path.read_text(encoding="utf-8")

        assert 'r="4.0"' in text
        assert 'fill="rgb(255,255,255)"' in text


class TestCLI(unittest.TestCase):
    """End-to-end tests for the particle-field command."""

    def test_ply_and_svg(self):
        """Both outputs are written for a simple image."""
        with tempfile.TemporaryDirectory() as tmp:
            image_path = Path(tmp) / "input.png"
            rgba = np.zeros((20, 30, 4), dtype=np.uint8)
            rgba[..., :3] = (120, 200, 40)
            rgba[..., 3] = 255
            Image.fromarray(rgba).save(image_path)

            ply_path = Path(tmp) / "field.ply"
            svg_path = Path(tmp) / "view.svg"

            code = main([
                str(image_path),
                "-o", str(ply_path),
                "--svg", str(svg_path),
                "--density", "5",
                "--seed", "1",
                "--width", "640",
                "--height", "480",
            ])

            assert code == 0
            ply = ply_path.read_text(encoding="ascii")
            assert ply.startswith("ply\nformat ascii 1.0\nelement vertex 24\n")
            assert svg_path.read_text(encoding="utf-8").count("<circle") == 24

    def test_missing_input(self):
        """Unreadable input exits with status 1."""
        with tempfile.TemporaryDirectory() as tmp:
            code = main(["/nonexistent/input.png", "-o", str(Path(tmp) / "out.ply")])
        assert code == 1

    def test_zero_height_svg(self):
        """An invalid SVG size exits with status 1 and writes nothing."""
        with tempfile.TemporaryDirectory() as tmp:
            image_path = Path(tmp) / "input.png"
            Image.new("RGBA", (8, 8), (255, 255, 255, 255)).save(image_path)
            svg_path = Path(tmp) / "view.svg"

            code = main([str(image_path), "--svg", str(svg_path), "--height", "0"])

            assert code == 1
            assert not svg_path.exists()

    def test_requires_output(self):
        """At least one output must be requested."""
        assert main(["input.png"]) == 1


if __name__ == "__main__":
    unittest.main(verbosity=2)
