"""
Sampling Configuration

Numeric knobs for the image -> particle conversion:
- Pixel stride (density control)
- Brightness-to-depth scale
- Saturation boost around luminance
- Alpha cutoff for transparent background removal
- Layout constants (downscale cap, inter-image gap) and depth jitter

The viewer hands over a loose option record (size, density, depth,
saturation, threshold). `SamplingConfig.from_options` maps it onto the
fields used by the synthesizer.
"""

import math
from dataclasses import dataclass, fields, replace as dataclass_replace
from typing import Any, Mapping

from .errors import ConfigError


# Option record defaults used by the interactive viewer
VIEWER_DEFAULTS = {
    "size": 1.5,
    "density": 3,
    "depth": 150.0,
    "saturation": 1.2,
    "threshold": 10,
}

# Viewer option name -> SamplingConfig field
OPTION_FIELDS = {
    "density": "step",
    "depth": "depth_multiplier",
    "saturation": "saturation",
    "threshold": "alpha_threshold",
    "max_dimension": "max_dimension",
    "gap": "gap",
    "jitter": "depth_jitter",
}


def _as_int(name: str, value: Any) -> int:
    """Coerce an integral option, rejecting fractions and non-numbers."""
    if isinstance(value, bool):
        raise ConfigError(f"{name} must be an integer, got {value!r}")
    try:
        as_int = int(value)
    except (TypeError, ValueError, OverflowError) as e:
        raise ConfigError(f"{name} must be an integer, got {value!r}") from e
    if as_int != value:
        raise ConfigError(f"{name} must be an integer, got {value!r}")
    return as_int


def _as_float(name: str, value: Any) -> float:
    """Coerce a finite real option."""
    try:
        as_float = float(value)
    except (TypeError, ValueError) as e:
        raise ConfigError(f"{name} must be a number, got {value!r}") from e
    if not math.isfinite(as_float):
        raise ConfigError(f"{name} must be finite, got {value!r}")
    return as_float


@dataclass(frozen=True)
class SamplingConfig:
    """
    Immutable configuration for one synthesis call.

    Attributes:
        step: Pixel stride; only pixels at multiples of step are sampled
        depth_multiplier: Scales luminance (centered on 0.5) into Z displacement
        saturation: Color extrapolation factor away from luminance
        alpha_threshold: Pixels with alpha below this value (0-255) are skipped
        max_dimension: Longer image side is downscaled to this when exceeded
        gap: Horizontal world-space spacing between adjacent images
        depth_jitter: Half-range of the uniform noise added to every z
    """

    step: int = 4
    depth_multiplier: float = 50.0
    saturation: float = 1.0
    alpha_threshold: int = 10
    max_dimension: int = 600
    gap: float = 60.0
    depth_jitter: float = 2.5

    def __post_init__(self):
        step = _as_int("step", self.step)
        alpha_threshold = _as_int("alpha_threshold", self.alpha_threshold)
        max_dimension = _as_int("max_dimension", self.max_dimension)
        gap = _as_float("gap", self.gap)
        depth_jitter = _as_float("depth_jitter", self.depth_jitter)

        if step < 1:
            raise ConfigError(f"step must be a positive integer, got {self.step!r}")
        if not 0 <= alpha_threshold <= 255:
            raise ConfigError(
                f"alpha_threshold must be in [0, 255], got {self.alpha_threshold!r}"
            )
        if max_dimension < 1:
            raise ConfigError(
                f"max_dimension must be a positive integer, got {self.max_dimension!r}"
            )
        if gap < 0:
            raise ConfigError(f"gap must be >= 0, got {self.gap!r}")
        if depth_jitter < 0:
            raise ConfigError(f"depth_jitter must be >= 0, got {self.depth_jitter!r}")

        # Normalize numeric types (frozen, so go through object.__setattr__)
        object.__setattr__(self, "step", step)
        object.__setattr__(self, "alpha_threshold", alpha_threshold)
        object.__setattr__(self, "max_dimension", max_dimension)
        object.__setattr__(
            self, "depth_multiplier", _as_float("depth_multiplier", self.depth_multiplier)
        )
        object.__setattr__(self, "saturation", _as_float("saturation", self.saturation))
        object.__setattr__(self, "gap", gap)
        object.__setattr__(self, "depth_jitter", depth_jitter)

    @classmethod
    def from_options(cls, options: Mapping[str, Any]) -> "SamplingConfig":
        """
        Build a configuration from a viewer option record.

        Rendering-only options (size, opacity, shape, focus, aperture) and
        unknown keys are ignored.

        Args:
            options: Mapping with any of density, depth, saturation, threshold,
                max_dimension, gap, jitter

        Returns:
            New SamplingConfig
        """
        kwargs = {}
        for key, value in options.items():
            name = OPTION_FIELDS.get(key)
            if name is not None and value is not None:
                kwargs[name] = value

        config = cls(**kwargs)
        if config.saturation < 0:
            raise ConfigError(f"saturation must be >= 0, got {config.saturation!r}")

        return config

    @classmethod
    def viewer_defaults(cls) -> "SamplingConfig":
        """Configuration matching the viewer's initial option record."""
        return cls.from_options(VIEWER_DEFAULTS)

    def replace(self, **changes) -> "SamplingConfig":
        """Return a copy with the given fields changed."""
        return dataclass_replace(self, **changes)

    def to_dict(self) -> dict:
        """Get the configuration as a plain dictionary."""
        return {f.name: getattr(self, f.name) for f in fields(self)}
