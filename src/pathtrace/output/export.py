"""Gamma correction, 8-bit quantization and image files.

The renderer produces averaged linear colors in [0, 1]. Before display they
are gamma corrected with exponent 1/2 (a square root per channel) and then
quantized by scaling with COLOR_SCALE and truncating. With a scale of 256 a
channel of exactly 1.0 would land on 256, one past the 8-bit range, so every
quantized value is clamped to [0, 255].

Files are written through Pillow, so the format follows the file extension
(PNG, PPM, BMP, ...).

Example:
    >>> from pathtrace.output.export import PixelSink, quantize
    >>> sink = PixelSink(2, 1)
    >>> sink.set_pixel(0, 0, *quantize((0.25, 0.5, 1.0)))
    >>> sink.save("tiny.ppm")
"""

from __future__ import annotations

import logging
import math
from pathlib import Path

import numpy as np
import numpy.typing as npt
from PIL import Image as PILImage

logger = logging.getLogger(__name__)

# Multiplier applied to a gamma-corrected channel before truncation
COLOR_SCALE = 256.0
MAX_CHANNEL_VALUE = 255


def gamma_correct(image: npt.NDArray[np.float32]) -> npt.NDArray[np.float32]:
    """Apply gamma 2 (square root) to every channel of a linear image.

    Negative values are clamped to zero first.
    """
    return np.sqrt(np.clip(image, 0.0, None)).astype(np.float32)


def quantize_channel(value: float) -> int:
    """Convert one gamma-corrected channel in [0, 1] to an 8-bit value.

    Args:
        value: The gamma-corrected channel.

    Returns:
        floor(value * COLOR_SCALE) clamped to [0, 255].
    """
    scaled = math.floor(value * COLOR_SCALE)
    return int(min(max(scaled, 0), MAX_CHANNEL_VALUE))


def quantize(color: tuple[float, float, float]) -> tuple[int, int, int]:
    """Gamma correct and quantize one averaged linear color.

    Args:
        color: Linear (R, G, B) in [0, 1].

    Returns:
        The (R, G, B) 8-bit channel values.
    """
    r, g, b = (quantize_channel(math.sqrt(max(c, 0.0))) for c in color)
    return r, g, b


def image_to_uint8(image: npt.NDArray[np.float32]) -> npt.NDArray[np.uint8]:
    """Quantize a gamma-corrected float image to 8 bits per channel.

    Vectorized form of quantize_channel.

    Args:
        image: Gamma-corrected image of shape (H, W, 3).

    Returns:
        Image of shape (H, W, 3) with dtype uint8.
    """
    scaled = np.floor(image.astype(np.float64) * COLOR_SCALE)
    return np.clip(scaled, 0, MAX_CHANNEL_VALUE).astype(np.uint8)


class PixelSink:
    """An 8-bit RGB image that accepts pixels one at a time.

    Coordinates follow image convention: (0, 0) is the top-left pixel.

    Attributes:
        width: Image width in pixels.
        height: Image height in pixels.
    """

    def __init__(self, width: int, height: int) -> None:
        if width <= 0 or height <= 0:
            raise ValueError(f"Image dimensions must be positive, got {width}x{height}")
        self.width = width
        self.height = height
        self._image = PILImage.new("RGB", (width, height))

    @classmethod
    def from_array(cls, pixels: npt.NDArray[np.uint8]) -> PixelSink:
        """Create a sink pre-filled from an (H, W, 3) uint8 array."""
        height, width = pixels.shape[:2]
        sink = cls(width, height)
        sink._image = PILImage.fromarray(np.ascontiguousarray(pixels, dtype=np.uint8))
        return sink

    def set_pixel(self, x: int, y: int, r: int, g: int, b: int) -> None:
        """Set one pixel.

        Raises:
            IndexError: If (x, y) lies outside the image.
            ValueError: If a channel is outside [0, 255].
        """
        if not (0 <= x < self.width and 0 <= y < self.height):
            raise IndexError(f"Pixel ({x}, {y}) outside {self.width}x{self.height} image")
        for channel in (r, g, b):
            if not 0 <= channel <= MAX_CHANNEL_VALUE:
                raise ValueError(f"Channel value {channel} outside [0, {MAX_CHANNEL_VALUE}]")
        self._image.putpixel((x, y), (r, g, b))

    def get_pixel(self, x: int, y: int) -> tuple[int, int, int]:
        """Read back one pixel."""
        r, g, b = self._image.getpixel((x, y))
        return r, g, b

    def to_array(self) -> npt.NDArray[np.uint8]:
        """Get the pixels as an (H, W, 3) uint8 array."""
        return np.asarray(self._image, dtype=np.uint8)

    def save(self, filepath: str | Path) -> Path:
        """Write the image; the format follows the file extension.

        Returns:
            The path written.
        """
        path = Path(filepath)
        self._image.save(path)
        logger.info("Saved %dx%d image to %s", self.width, self.height, path)
        return path


def write_image(image: npt.NDArray[np.float32], filepath: str | Path) -> Path:
    """Quantize a gamma-corrected float image and save it.

    Args:
        image: Gamma-corrected image of shape (H, W, 3), row 0 at the top.
        filepath: Output path.

    Returns:
        The path written.
    """
    return PixelSink.from_array(image_to_uint8(image)).save(filepath)
