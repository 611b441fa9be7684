"""
Image Source Ingestion

This module handles:
- Resolving image sources (paths, URLs, data URIs, raw bytes, PIL images,
  numpy arrays) into RGBA Pillow images
- Concurrent loading of a batch with fail-fast semantics
- Resampling to display size and reading back RGBA pixels
"""

import base64
import binascii
import io
import logging
from concurrent.futures import FIRST_EXCEPTION, ThreadPoolExecutor, wait
from pathlib import Path
from typing import Any, List, Optional, Sequence, Tuple
from urllib.parse import unquote_to_bytes

import numpy as np
import requests
from PIL import Image, UnidentifiedImageError

from .errors import EmptyInputError, ImageLoadError

logger = logging.getLogger(__name__)

HTTP_TIMEOUT = 30.0


def _decode_bytes(data: bytes) -> Image.Image:
    """Decode an encoded image buffer with Pillow."""
    img = Image.open(io.BytesIO(data))
    img.load()
    return img


def _decode_data_uri(uri: str) -> bytes:
    """
    Extract the payload of a data: URI.

    Supports both base64 and percent-encoded payloads.
    """
    header, sep, payload = uri.partition(",")
    if not sep:
        raise ValueError("data URI has no payload")

    if header.endswith(";base64"):
        return base64.b64decode(payload, validate=False)
    return unquote_to_bytes(payload)


def _from_array(array: np.ndarray) -> Image.Image:
    """Wrap a uint8 numpy array of shape (H, W), (H, W, 3) or (H, W, 4)."""
    if array.ndim == 2 or (array.ndim == 3 and array.shape[2] in (3, 4)):
        # Pillow infers L / RGB / RGBA from the uint8 array shape
        return Image.fromarray(np.ascontiguousarray(array, dtype=np.uint8))

    raise ValueError(f"Image array must have shape (H, W[, 3|4]), got {array.shape}")


def open_source(source: Any) -> Image.Image:
    """
    Resolve one image source to an RGBA Pillow image.

    Args:
        source: File path, http(s) URL, data URI, encoded bytes,
            PIL image or numpy array

    Returns:
        Decoded image in RGBA mode

    Raises:
        ImageLoadError: if the source cannot be fetched or decoded
    """
    try:
        if isinstance(source, Image.Image):
            img = source
        elif isinstance(source, np.ndarray):
            img = _from_array(source)
        elif isinstance(source, (bytes, bytearray, memoryview)):
            img = _decode_bytes(bytes(source))
        elif isinstance(source, Path):
            img = Image.open(source)
            img.load()
        elif isinstance(source, str):
            lowered = source[:16].lower()
            if lowered.startswith(("http://", "https://")):
                response = requests.get(source, timeout=HTTP_TIMEOUT)
                response.raise_for_status()
                img = _decode_bytes(response.content)
            elif lowered.startswith("data:"):
                img = _decode_bytes(_decode_data_uri(source))
            else:
                img = Image.open(source)
                img.load()
        else:
            raise TypeError(f"Unsupported image source type: {type(source).__name__}")

        if img.mode != "RGBA":
            img = img.convert("RGBA")

    except (
        OSError,
        ValueError,
        TypeError,
        binascii.Error,
        UnidentifiedImageError,
        Image.DecompressionBombError,
        requests.RequestException,
    ) as e:
        # OSError covers missing files and truncated/corrupt image data
        raise ImageLoadError(source, str(e)) from e

    return img


def load_images(
    sources: Sequence[Any],
    max_workers: Optional[int] = None
) -> List[Image.Image]:
    """
    Load all sources concurrently and wait for every one of them.

    The first failure cancels loads that have not started yet and is
    re-raised; no partial result is returned.

    Args:
        sources: Image sources, in order
        max_workers: Thread pool size (default: one per source, capped at 8)

    Returns:
        RGBA images in source order

    Raises:
        EmptyInputError: if sources is empty
        ImageLoadError: for the first source that fails to load
    """
    sources = list(sources)
    if not sources:
        raise EmptyInputError()

    if max_workers is None:
        max_workers = min(8, len(sources))

    logger.debug(f"Loading {len(sources)} image(s) with {max_workers} worker(s)")

    pool = ThreadPoolExecutor(max_workers=max_workers)
    try:
        futures = [pool.submit(open_source, source) for source in sources]
        done, _ = wait(futures, return_when=FIRST_EXCEPTION)

        # Surface failures in source order among the settled loads
        for future in futures:
            if future in done and future.exception() is not None:
                raise future.exception()

        return [future.result() for future in futures]
    finally:
        # Does not block on loads still in flight after a failure
        pool.shutdown(wait=False, cancel_futures=True)


def resample(img: Image.Image, size: Tuple[int, int]) -> np.ndarray:
    """
    Resample an image to its display size and read back RGBA pixels.

    Args:
        img: RGBA image
        size: Target (width, height)

    Returns:
        uint8 array of shape (height, width, 4)
    """
    if img.size != tuple(size):
        img = img.resize(tuple(size), Image.Resampling.BILINEAR)

    if img.mode != "RGBA":
        img = img.convert("RGBA")

    return np.array(img, dtype=np.uint8)
