"""
Color Processing Module

Handles:
- Perceptual luminance (ITU-R BT.601 weights)
- Saturation boost by extrapolating channels away from luminance
- Conversion of normalized float colors to 8-bit channel values

Luminance drives both the depth of each particle and the pivot of the
saturation adjustment, so the weights must stay exactly 0.299 / 0.587 / 0.114.
"""

import numpy as np
from numba import njit, prange


def luminance(rgb: np.ndarray) -> np.ndarray:
    """
    Compute BT.601 luminance.

    Args:
        rgb: Array of shape (N, 3) with normalized [0, 1] colors

    Returns:
        float64 array of shape (N,)
    """
    rgb = np.asarray(rgb, dtype=np.float64)
    return 0.299 * rgb[:, 0] + 0.587 * rgb[:, 1] + 0.114 * rgb[:, 2]


@njit(cache=True, parallel=True)
def _boost_saturation(
    rgb: np.ndarray,
    lum: np.ndarray,
    saturation: float
) -> np.ndarray:
    n = rgb.shape[0]
    result = np.empty((n, 3), dtype=np.float32)

    for i in prange(n):
        for c in range(3):
            value = lum[i] + (rgb[i, c] - lum[i]) * saturation
            result[i, c] = max(0.0, min(1.0, value))

    return result


def boost_saturation(
    rgb: np.ndarray,
    lum: np.ndarray,
    saturation: float
) -> np.ndarray:
    """
    Push each channel away from (or toward) the pixel's luminance.

    channel' = L + (channel - L) * saturation, clamped to [0, 1].
    saturation = 1 is the identity, 0 collapses to grayscale.

    Args:
        rgb: Array of shape (N, 3) with normalized colors
        lum: Array of shape (N,) with the luminance of each color
        saturation: Extrapolation factor (any real value)

    Returns:
        float32 array of shape (N, 3)
    """
    rgb = np.ascontiguousarray(rgb, dtype=np.float64)
    lum = np.ascontiguousarray(lum, dtype=np.float64)

    if rgb.shape[0] == 0:
        return np.zeros((0, 3), dtype=np.float32)

    return _boost_saturation(rgb, lum, float(saturation))


def to_uint8(colors: np.ndarray) -> np.ndarray:
    """
    Convert normalized colors to 0-255 channel values.

    Uses floor(c * 255), so only an exact 1.0 maps to 255.

    Args:
        colors: Array with values in [0, 1]

    Returns:
        uint8 array of the same shape
    """
    scaled = np.floor(np.asarray(colors, dtype=np.float64) * 255.0)
    return np.clip(scaled, 0, 255).astype(np.uint8)
