"""
Exception types raised by the particle field pipeline.

Every error is terminal for the call that raised it. Nothing is retried
internally; the caller decides whether to try again with different input.
"""

from typing import Any


class ParticleFieldError(Exception):
    """Base class for all particle field errors."""


class ConfigError(ParticleFieldError, ValueError):
    """A sampling or projection option is out of range."""


class EmptyInputError(ParticleFieldError, ValueError):
    """No image sources were supplied."""

    def __init__(self, message: str = "No images provided"):
        super().__init__(message)


class ImageLoadError(ParticleFieldError):
    """
    An image source could not be resolved or decoded.

    Attributes:
        source: Short printable description of the offending source
    """

    def __init__(self, source: Any, reason: str = ""):
        self.source = describe_source(source)
        message = f"Failed to load image: {self.source}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)


class MalformedCloudError(ParticleFieldError, ValueError):
    """Point cloud positions and colors are not index-aligned (N, 3) arrays."""


def describe_source(source: Any, limit: int = 64) -> str:
    """
    Build a short description of an image source for error messages.

    Data URIs and raw buffers can be megabytes long, so they are truncated.
    """
    if isinstance(source, (bytes, bytearray, memoryview)):
        return f"<{len(source)} bytes>"

    shape = getattr(source, "shape", None)
    if shape is not None:
        return f"<array {tuple(shape)}>"

    size = getattr(source, "size", None)
    mode = getattr(source, "mode", None)
    if mode is not None and size is not None:
        return f"<image {mode} {size[0]}x{size[1]}>"

    text = str(source)
    if len(text) > limit:
        text = text[:limit] + "..."
    return text
