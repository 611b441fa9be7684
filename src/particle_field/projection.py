"""
Camera Projection for Vector Export

This module maps world-space particles to screen-space circles:
- Perspective camera compatible with the viewer's (three.js style) camera
- World -> clip -> normalized device coordinates (NDC)
- Frustum culling and painter's-algorithm depth sorting

Coordinate Systems:
- World: Right-handed, Y-up (+X Right, +Y Up, +Z toward the default camera)
- NDC: x, y in [-1, 1] for visible content, z in [-1, 1] near to far
- Screen: pixels, origin top-left, y grows downward
"""

from dataclasses import dataclass, field, replace
from typing import List, NamedTuple, Optional, Sequence
import math
import numpy as np
from scipy.spatial.transform import Rotation

from .cloud import PointCloud, as_point_cloud
from .color import to_uint8
from .errors import ConfigError


# Named views offered by the viewer, as unit directions from the target
VIEW_PRESETS = {
    "front": (0.0, 0.0, 1.0),
    "side": (1.0, 0.0, 0.0),
    "top": (0.0, 1.0, 0.0),
    "back": (0.0, 0.0, -1.0),
}


def _normalize(v: np.ndarray) -> np.ndarray:
    norm = np.linalg.norm(v)
    if norm == 0:
        raise ConfigError("Cannot normalize a zero-length vector")
    return v / norm


def look_at(
    position: Sequence[float],
    target: Sequence[float],
    up: Sequence[float] = (0.0, 1.0, 0.0)
) -> np.ndarray:
    """
    Build a 4x4 view matrix (world -> camera space).

    The camera looks down its local -Z axis, as in OpenGL.

    Args:
        position: Camera position
        target: Point the camera looks at
        up: Approximate up direction

    Returns:
        4x4 float64 view matrix
    """
    eye = np.asarray(position, dtype=np.float64)
    z_axis = _normalize(eye - np.asarray(target, dtype=np.float64))
    x_axis = np.cross(np.asarray(up, dtype=np.float64), z_axis)
    if np.linalg.norm(x_axis) < 1e-12:
        raise ConfigError("Camera up vector is parallel to the view direction")
    x_axis = _normalize(x_axis)
    y_axis = np.cross(z_axis, x_axis)

    rotation = np.stack([x_axis, y_axis, z_axis])  # rows = camera axes
    view = np.eye(4, dtype=np.float64)
    view[:3, :3] = rotation
    view[:3, 3] = -rotation @ eye
    return view


def perspective(fov: float, aspect: float, near: float, far: float) -> np.ndarray:
    """
    Build a 4x4 OpenGL-style perspective projection matrix.

    Args:
        fov: Vertical field of view in degrees
        aspect: Width / height
        near, far: Clip plane distances (0 < near < far)

    Returns:
        4x4 float64 projection matrix
    """
    if not 0 < fov < 180:
        raise ConfigError(f"fov must be in (0, 180) degrees, got {fov!r}")
    if aspect <= 0:
        raise ConfigError(f"aspect must be positive, got {aspect!r}")
    if not 0 < near < far:
        raise ConfigError(f"Need 0 < near < far, got near={near!r}, far={far!r}")

    f = 1.0 / math.tan(math.radians(fov) / 2.0)
    return np.array([
        [f / aspect, 0, 0, 0],
        [0, f, 0, 0],
        [0, 0, (far + near) / (near - far), 2 * far * near / (near - far)],
        [0, 0, -1, 0]
    ], dtype=np.float64)


@dataclass
class PerspectiveCamera:
    """
    Pinhole camera matching the viewer's default perspective camera.

    Attributes:
        fov: Vertical field of view in degrees
        aspect: Viewport width / height
        near, far: Clip plane distances
        position: Camera position in world space
        target: Point the camera looks at
        up: Up direction used to orient the camera
    """

    fov: float = 50.0
    aspect: float = 1.0
    near: float = 0.1
    far: float = 2000.0
    position: Sequence[float] = (0.0, 0.0, 600.0)
    target: Sequence[float] = (0.0, 0.0, 0.0)
    up: Sequence[float] = (0.0, 1.0, 0.0)

    @property
    def view_matrix(self) -> np.ndarray:
        """World -> camera space."""
        return look_at(self.position, self.target, self.up)

    @property
    def projection_matrix(self) -> np.ndarray:
        """Camera -> clip space."""
        return perspective(self.fov, self.aspect, self.near, self.far)

    @property
    def view_projection(self) -> np.ndarray:
        """World -> clip space."""
        return self.projection_matrix @ self.view_matrix

    @classmethod
    def orbit(
        cls,
        target: Sequence[float] = (0.0, 0.0, 0.0),
        distance: float = 600.0,
        yaw: float = 0.0,
        pitch: float = 0.0,
        **kwargs
    ) -> "PerspectiveCamera":
        """
        Place the camera on a sphere around a target.

        yaw = pitch = 0 is the front view on +Z. Positive yaw swings the
        camera toward +X, positive pitch lifts it toward +Y.

        Args:
            target: Orbit center
            distance: Distance from the target
            yaw: Rotation about the world Y axis, in degrees
            pitch: Elevation above the XZ plane, in degrees (|pitch| < 90)
            **kwargs: Other PerspectiveCamera fields (fov, aspect, near, far)
        """
        if distance <= 0:
            raise ConfigError(f"distance must be positive, got {distance!r}")
        if abs(pitch) >= 90:
            raise ConfigError(f"|pitch| must be below 90 degrees, got {pitch!r}")

        # Extrinsic: tilt about X first, then swing about Y
        rotation = Rotation.from_euler("xy", [-pitch, yaw], degrees=True)
        offset = rotation.apply([0.0, 0.0, distance])
        center = np.asarray(target, dtype=np.float64)

        return cls(
            position=tuple(center + offset),
            target=tuple(center),
            **kwargs
        )

    @classmethod
    def preset(
        cls,
        name: str,
        distance: float = 600.0,
        target: Sequence[float] = (0.0, 0.0, 0.0),
        **kwargs
    ) -> "PerspectiveCamera":
        """
        Camera for one of the viewer's named views (front, side, top, back).
        """
        if name not in VIEW_PRESETS:
            raise ConfigError(
                f"Unknown view '{name}'. Available: {', '.join(VIEW_PRESETS)}"
            )

        center = np.asarray(target, dtype=np.float64)
        direction = np.asarray(VIEW_PRESETS[name], dtype=np.float64)
        # Looking straight down Y needs a different up vector
        up = (0.0, 0.0, -1.0) if name == "top" else (0.0, 1.0, 0.0)

        return cls(
            position=tuple(center + direction * distance),
            target=tuple(center),
            up=up,
            **kwargs
        )


@dataclass(eq=False)
class MatrixCamera:
    """
    Camera defined by an externally supplied 4x4 view-projection matrix.

    The matrix uses the column-vector convention: clip = M @ [x, y, z, 1].
    For a three.js camera this is projectionMatrix * matrixWorldInverse.
    """

    matrix: np.ndarray = field(default_factory=lambda: np.eye(4))

    def __post_init__(self):
        self.matrix = np.asarray(self.matrix, dtype=np.float64)
        if self.matrix.shape != (4, 4):
            raise ConfigError(f"View-projection matrix must be 4x4, got {self.matrix.shape}")

    @property
    def view_projection(self) -> np.ndarray:
        return self.matrix


@dataclass(frozen=True)
class ProjectionContext:
    """
    Camera plus output raster size for one export call.

    Attributes:
        camera: Any object with a 4x4 view_projection matrix
        width: Output width in pixels
        height: Output height in pixels
    """

    camera: object
    width: float
    height: float

    def __post_init__(self):
        if self.width <= 0 or self.height <= 0:
            raise ConfigError(
                f"Output size must be positive, got {self.width}x{self.height}"
            )

    @classmethod
    def for_size(
        cls,
        width: float,
        height: float,
        camera: Optional[PerspectiveCamera] = None
    ) -> "ProjectionContext":
        """
        Build a context whose perspective camera aspect matches the output.

        Args:
            width, height: Output size in pixels
            camera: Camera to adapt (default: viewer's front camera)
        """
        if width <= 0 or height <= 0:
            raise ConfigError(f"Output size must be positive, got {width}x{height}")

        camera = replace(camera or PerspectiveCamera(), aspect=width / height)
        return cls(camera, width, height)


class ScreenCircle(NamedTuple):
    """One projected particle, ready to draw."""

    x: float
    y: float
    depth: float
    radius: float
    red: int
    green: int
    blue: int

    @property
    def fill(self) -> str:
        """CSS color string, e.g. rgb(255,0,0)."""
        return f"rgb({self.red},{self.green},{self.blue})"


def project_points(points: np.ndarray, view_projection: np.ndarray):
    """
    Project world points to normalized device coordinates.

    Args:
        points: Array of shape (N, 3)
        view_projection: 4x4 world -> clip matrix

    Returns:
        (ndc, w): ndc of shape (N, 3) and clip-space w of shape (N,).
        Rows with w <= 0 lie behind the camera and their ndc is undefined.
    """
    points = np.asarray(points, dtype=np.float64).reshape(-1, 3)
    homogeneous = np.hstack([points, np.ones((len(points), 1))])
    clip = homogeneous @ np.asarray(view_projection, dtype=np.float64).T

    w = clip[:, 3]
    with np.errstate(divide="ignore", invalid="ignore"):
        ndc = clip[:, :3] / w[:, np.newaxis]

    return ndc, w


def visible_mask(ndc: np.ndarray, w: np.ndarray) -> np.ndarray:
    """
    Frustum test: in front of the camera, ndc.z < 1 and x, y in [-1, 1].
    """
    with np.errstate(invalid="ignore"):
        return (
            (w > 0)
            & (ndc[:, 2] < 1)
            & (np.abs(ndc[:, 0]) <= 1)
            & (np.abs(ndc[:, 1]) <= 1)
        )


def project_to_vector(
    cloud: PointCloud,
    context: ProjectionContext,
    base_radius: float = 3.0
) -> List[ScreenCircle]:
    """
    Project a point cloud into screen-space circles.

    Points outside the view frustum are dropped. Radius grows as points
    get nearer: max(0.5, base_radius * (1 - ndc.z)). The result is sorted
    farthest first so renderers without a depth buffer can draw it in order.

    Args:
        cloud: Point cloud (or cloud-like object)
        context: Camera and output size
        base_radius: Radius scale for the nearest points

    Returns:
        List of ScreenCircle, farthest first
    """
    cloud = as_point_cloud(cloud)
    if len(cloud) == 0:
        return []

    ndc, w = project_points(cloud.positions, context.camera.view_projection)
    mask = visible_mask(ndc, w)

    ndc = ndc[mask]
    colors = to_uint8(cloud.colors[mask])

    half_w = context.width / 2.0
    half_h = context.height / 2.0
    xs = ndc[:, 0] * half_w + half_w
    ys = -ndc[:, 1] * half_h + half_h
    depths = ndc[:, 2]
    radii = np.maximum(0.5, base_radius * (1.0 - depths))

    # Painter's algorithm: far to near, stable for equal depth
    order = np.argsort(-depths, kind="stable")

    return [
        ScreenCircle(
            float(xs[i]), float(ys[i]), float(depths[i]), float(radii[i]),
            int(colors[i, 0]), int(colors[i, 1]), int(colors[i, 2])
        )
        for i in order
    ]
