"""
Unit tests for camera projection and vector projection.
"""

import sys
from pathlib import Path
import numpy as np
import unittest

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from particle_field import (
    ConfigError,
    MatrixCamera,
    PerspectiveCamera,
    PointCloud,
    ProjectionContext,
    project_to_vector,
)
from particle_field.projection import look_at, project_points, visible_mask


def make_cloud(positions, colors=None):
    """Build a cloud, defaulting every color to white."""
    positions = np.asarray(positions, dtype=np.float32)
    if colors is None:
        colors = np.ones_like(positions)
    return PointCloud(positions, colors)


class TestCamera(unittest.TestCase):
    """Tests for camera matrices."""

    def test_look_at_moves_eye_to_origin(self):
        """The camera position maps to the camera-space origin."""
        view = look_at((10, 20, 30), (0, 0, 0))
        eye = view @ np.array([10, 20, 30, 1.0])
        assert np.allclose(eye[:3], 0)

    def test_target_is_in_front(self):
        """The target lies on the camera's -Z axis."""
        view = look_at((0, 0, 600), (0, 0, 0))
        target = view @ np.array([0, 0, 0, 1.0])
        assert np.allclose(target[:3], [0, 0, -600])

    def test_origin_projects_to_center(self):
        """The look-at target lands at NDC (0, 0)."""
        camera = PerspectiveCamera()
        ndc, w = project_points(np.zeros((1, 3)), camera.view_projection)
        assert w[0] > 0
        assert np.allclose(ndc[0, :2], 0)
        assert -1 < ndc[0, 2] < 1

    def test_orbit_positions(self):
        """Yaw swings toward +X, pitch lifts toward +Y."""
        side = PerspectiveCamera.orbit(distance=600, yaw=90)
        assert np.allclose(side.position, (600, 0, 0), atol=1e-9)

        raised = PerspectiveCamera.orbit(distance=600, pitch=30)
        assert np.isclose(raised.position[1], 300)
        assert np.isclose(np.linalg.norm(raised.position), 600)

    def test_orbit_around_target(self):
        """Orbit distance is measured from the target."""
        camera = PerspectiveCamera.orbit(target=(10, 0, 0), distance=100)
        assert np.allclose(camera.position, (10, 0, 100))
        assert np.allclose(camera.target, (10, 0, 0))

    def test_presets(self):
        """Named views sit on the expected axes."""
        assert np.allclose(PerspectiveCamera.preset("front").position, (0, 0, 600))
        assert np.allclose(PerspectiveCamera.preset("side", 300).position, (300, 0, 0))
        assert np.allclose(PerspectiveCamera.preset("back").position, (0, 0, -600))

        top = PerspectiveCamera.preset("top")
        assert np.allclose(top.position, (0, 600, 0))
        assert top.view_projection.shape == (4, 4)

    def test_invalid_camera(self):
        """Bad camera parameters raise ConfigError."""
        with self.assertRaises(ConfigError):
            PerspectiveCamera.preset("isometric")
        with self.assertRaises(ConfigError):
            PerspectiveCamera(fov=0).view_projection
        with self.assertRaises(ConfigError):
            PerspectiveCamera(near=10, far=1).view_projection
        with self.assertRaises(ConfigError):
            PerspectiveCamera.orbit(pitch=90)
        with self.assertRaises(ConfigError):
            MatrixCamera(np.eye(3))

    def test_for_size_sets_aspect(self):
        """Context aspect follows the output size without touching the input camera."""
        camera = PerspectiveCamera()
        context = ProjectionContext.for_size(800, 400, camera)
        assert context.camera.aspect == 2.0
        assert camera.aspect == 1.0

        with self.assertRaises(ConfigError):
            ProjectionContext(camera, 0, 100)

    def test_for_size_rejects_zero_height(self):
        """A zero-height output is a configuration error, not a division error."""
        with self.assertRaises(ConfigError):
            ProjectionContext.for_size(100, 0)
        with self.assertRaises(ConfigError):
            ProjectionContext.for_size(0, 100, PerspectiveCamera())


class TestVectorProjection(unittest.TestCase):
    """Tests for project_to_vector."""

    def setUp(self):
        # Identity matrix: world coordinates are already NDC
        self.identity = ProjectionContext(MatrixCamera(np.eye(4)), 200, 100)
        self.front = ProjectionContext.for_size(800, 600, PerspectiveCamera())

    def test_pixel_mapping(self):
        """NDC maps to pixels with y flipped."""
        cloud = make_cloud([[0.5, 0.5, 0.0], [-1.0, -1.0, 0.0]])
        circles = project_to_vector(cloud, self.identity)

        by_x = sorted(circles, key=lambda c: c.x)
        assert (by_x[0].x, by_x[0].y) == (0.0, 100.0)
        assert (by_x[1].x, by_x[1].y) == (150.0, 25.0)

    def test_radius(self):
        """Radius is max(0.5, base * (1 - ndc.z))."""
        cloud = make_cloud([[0, 0, 0.5], [0, 0, -1.0], [0, 0, 0.99]])
        radii = sorted(c.radius for c in project_to_vector(cloud, self.identity))
        assert np.allclose(radii, [0.5, 1.5, 6.0])

        bigger = project_to_vector(make_cloud([[0, 0, 0.5]]), self.identity, base_radius=5)
        assert np.isclose(bigger[0].radius, 2.5)

    def test_colors_floored(self):
        """Colors use floor(c * 255)."""
        cloud = make_cloud([[0, 0, 0]], [[1.0, 0.5, 0.0]])
        circle = project_to_vector(cloud, self.identity)[0]
        assert (circle.red, circle.green, circle.blue) == (255, 127, 0)
        assert circle.fill == "rgb(255,127,0)"

    def test_culling_ndc(self):
        """Points outside [-1, 1] on x/y or with ndc.z >= 1 are dropped."""
        cloud = make_cloud([
            [0.0, 0.0, 0.0],
            [1.5, 0.0, 0.0],
            [0.0, -1.01, 0.0],
            [0.0, 0.0, 1.0],
            [1.0, 1.0, -0.5],
        ])
        circles = project_to_vector(cloud, self.identity)
        assert len(circles) == 2

    def test_behind_camera_culled(self):
        """Points behind or far outside the camera never appear."""
        cloud = make_cloud([
            [0, 0, 0],          # in view
            [0, 0, 700],        # behind the camera at z = 600
            [0, 0, 600],        # at the eye
            [10000, 0, 0],      # far off to the side
            [0, 0, -2000],      # beyond the far plane
        ])
        circles = project_to_vector(cloud, self.front)

        assert len(circles) == 1
        assert np.isclose(circles[0].x, 400)
        assert np.isclose(circles[0].y, 300)

    def test_y_up_is_screen_up(self):
        """World +Y lands above the screen center."""
        cloud = make_cloud([[0, 50, 0]])
        circle = project_to_vector(cloud, self.front)[0]
        assert circle.y < 300

    def test_farthest_first(self):
        """Output is sorted by descending depth."""
        positions = [[0, 0, 0], [0, 0, 100], [0, 0, -100], [20, 10, 50]]
        colors = [[0, 0, 0], [1, 0, 0], [0, 1, 0], [0, 0, 1]]
        circles = project_to_vector(make_cloud(positions, colors), self.front)

        depths = [c.depth for c in circles]
        assert depths == sorted(depths, reverse=True)
        # z = -100 is farthest from the camera at z = 600
        assert circles[0].fill == "rgb(0,255,0)"
        assert circles[-1].fill == "rgb(255,0,0)"

    def test_nearer_points_are_larger(self):
        """Radius grows as NDC depth decreases."""
        cloud = make_cloud([[0, 0, 0.5], [0, 0, -0.5]])
        circles = project_to_vector(cloud, self.identity)

        assert [c.depth for c in circles] == [0.5, -0.5]
        assert np.isclose(circles[0].radius, 1.5)
        assert np.isclose(circles[-1].radius, 4.5)

    def test_random_cloud_invariants(self):
        """Every survivor is on screen and ordering holds for a random cloud."""
        rng = np.random.default_rng(5)
        positions = rng.uniform(-800, 800, size=(500, 3))
        cloud = make_cloud(positions, rng.uniform(0, 1, size=(500, 3)))

        circles = project_to_vector(cloud, self.front)
        ndc, w = project_points(cloud.positions, self.front.camera.view_projection)
        assert len(circles) == int(visible_mask(ndc, w).sum())

        for c in circles:
            assert 0 <= c.x <= 800
            assert 0 <= c.y <= 600
            assert c.radius >= 0.5
        depths = [c.depth for c in circles]
        assert depths == sorted(depths, reverse=True)

    def test_empty_cloud(self):
        """Nothing in, nothing out."""
        assert project_to_vector(PointCloud.empty(), self.front) == []

    def test_cloud_unchanged(self):
        """Projection does not modify the cloud."""
        cloud = make_cloud([[1, 2, 3], [4, 5, 6]])
        before = cloud.positions.copy()
        project_to_vector(cloud, self.front)
        np.testing.assert_array_equal(cloud.positions, before)


if __name__ == "__main__":
    unittest.main(verbosity=2)
