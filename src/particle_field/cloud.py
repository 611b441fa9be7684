"""
Point Cloud Container

The exchange type between the synthesizer and its consumers (exporters,
external renderers). Positions and colors are index-aligned (N, 3) float32
arrays; both are frozen (read-only) once the cloud is built.
"""

from dataclasses import dataclass
from typing import Any, Tuple
import numpy as np

from .errors import MalformedCloudError


def _as_points(name: str, values: Any) -> np.ndarray:
    """Coerce values to a contiguous (N, 3) float32 array."""
    try:
        array = np.asarray(values, dtype=np.float32)
    except (TypeError, ValueError) as e:
        raise MalformedCloudError(f"{name} is not numeric: {e}") from e

    if array.size == 0:
        return np.zeros((0, 3), dtype=np.float32)

    if array.ndim != 2 or array.shape[1] != 3:
        raise MalformedCloudError(
            f"{name} must have shape (N, 3), got {array.shape}"
        )

    return np.ascontiguousarray(array)


@dataclass(frozen=True, eq=False)
class PointCloud:
    """
    Colored 3D point set with no connectivity.

    Attributes:
        positions: float32 array of shape (N, 3) with x, y, z
        colors: float32 array of shape (N, 3) with r, g, b in [0, 1]
        width: Overall layout width (image widths plus gaps)
        height: Overall layout height (tallest image)
    """

    positions: np.ndarray
    colors: np.ndarray
    width: float = 0.0
    height: float = 0.0

    def __post_init__(self):
        positions = _as_points("positions", self.positions)
        colors = _as_points("colors", self.colors)

        if len(positions) != len(colors):
            raise MalformedCloudError(
                f"positions ({len(positions)}) and colors ({len(colors)}) "
                f"are not index-aligned"
            )

        # Own copies so freezing never touches caller buffers
        if positions is self.positions:
            positions = positions.copy()
        if colors is self.colors:
            colors = colors.copy()
        positions.flags.writeable = False
        colors.flags.writeable = False

        object.__setattr__(self, "positions", positions)
        object.__setattr__(self, "colors", colors)
        object.__setattr__(self, "width", float(self.width))
        object.__setattr__(self, "height", float(self.height))

    def __len__(self) -> int:
        return len(self.positions)

    @classmethod
    def empty(cls, width: float = 0.0, height: float = 0.0) -> "PointCloud":
        """Create a cloud with zero points."""
        return cls(
            np.zeros((0, 3), dtype=np.float32),
            np.zeros((0, 3), dtype=np.float32),
            width,
            height
        )

    @classmethod
    def from_flat(
        cls,
        positions: Any,
        colors: Any,
        width: float = 0.0,
        height: float = 0.0
    ) -> "PointCloud":
        """
        Build a cloud from flat [x0, y0, z0, x1, ...] buffers.

        Args:
            positions: Flat sequence of 3N position components
            colors: Flat sequence of 3N color components
            width, height: Layout footprint

        Returns:
            New PointCloud
        """
        flat_positions = np.asarray(positions, dtype=np.float32).ravel()
        flat_colors = np.asarray(colors, dtype=np.float32).ravel()

        for name, flat in (("positions", flat_positions), ("colors", flat_colors)):
            if flat.size % 3 != 0:
                raise MalformedCloudError(
                    f"flat {name} length {flat.size} is not a multiple of 3"
                )

        return cls(
            flat_positions.reshape(-1, 3),
            flat_colors.reshape(-1, 3),
            width,
            height
        )

    def flat_positions(self) -> np.ndarray:
        """Get positions as a flat array of length 3N."""
        return self.positions.ravel()

    def flat_colors(self) -> np.ndarray:
        """Get colors as a flat array of length 3N."""
        return self.colors.ravel()

    def bounds(self) -> Tuple[np.ndarray, np.ndarray]:
        """
        Get the axis-aligned bounding box of all positions.

        Returns:
            (min_xyz, max_xyz); both zero for an empty cloud
        """
        if len(self) == 0:
            zero = np.zeros(3, dtype=np.float32)
            return zero, zero.copy()
        return self.positions.min(axis=0), self.positions.max(axis=0)

    @staticmethod
    def concatenate(
        parts: list,
        width: float = 0.0,
        height: float = 0.0
    ) -> "PointCloud":
        """
        Join (positions, colors) chunks in order into one cloud.

        Args:
            parts: List of (positions, colors) array pairs
            width, height: Footprint of the combined layout
        """
        if not parts:
            return PointCloud.empty(width, height)

        positions = np.concatenate([p for p, _ in parts], axis=0)
        colors = np.concatenate([c for _, c in parts], axis=0)
        return PointCloud(positions, colors, width, height)


def as_point_cloud(data: Any) -> PointCloud:
    """
    Coerce a cloud-like object into a PointCloud.

    Accepts a PointCloud, a mapping, or any object with positions and
    colors attributes (flat or (N, 3)).

    Raises:
        MalformedCloudError: if the data is missing fields or misaligned
    """
    if isinstance(data, PointCloud):
        return data

    if isinstance(data, dict):
        getter = data.get
    else:
        def getter(name, default=None):
            return getattr(data, name, default)

    positions = getter("positions")
    colors = getter("colors")
    if positions is None or colors is None:
        raise MalformedCloudError("Point cloud requires positions and colors")

    width = getter("width", 0.0) or 0.0
    height = getter("height", 0.0) or 0.0

    if np.ndim(positions) == 1 or np.ndim(colors) == 1:
        return PointCloud.from_flat(positions, colors, width, height)
    return PointCloud(positions, colors, width, height)
