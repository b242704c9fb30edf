"""Sample-by-sample accumulation on top of the integrator.

Wraps the integrator's render target with:
- Batch rendering (several samples per pixel per call)
- Progress callbacks and a generator form for UI or logging
- Gamma-corrected float and 8-bit image access
- Reset and resize

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from pathtrace.core.progressive import ProgressiveRenderer
    >>> from pathtrace.scene.random_scene import create_random_scene
    >>> from pathtrace.camera.thin_lens import setup_camera
    >>>
    >>> scene, camera = create_random_scene()
    >>> setup_camera(camera)
    >>>
    >>> renderer = ProgressiveRenderer(400, 225)
    >>> renderer.render(100, batch_size=10)
    >>> renderer.save_image("random_spheres.png")
"""

import logging
from collections.abc import Callable, Generator

import numpy as np
import numpy.typing as npt

from pathtrace.core.integrator import (
    MAX_DEPTH,
    clear_render_target,
    get_image_numpy,
    get_total_samples,
    render_image,
    setup_render_target,
)
from pathtrace.output.export import gamma_correct, image_to_uint8, write_image

logger = logging.getLogger(__name__)

# Called as callback(samples_so_far, samples_wanted)
ProgressCallback = Callable[[int, int], None]


class ProgressiveRenderer:
    """Adds samples to the shared render target in batches.

    The renderer keeps its own width, height and depth budget and delegates
    to the integrator's render target, which is shared Taichi state.

    Attributes:
        width: Image width in pixels.
        height: Image height in pixels.
        max_depth: Maximum number of surface interactions per path.
    """

    def __init__(self, width: int, height: int, max_depth: int = MAX_DEPTH) -> None:
        """Set up the render target for a new image.

        Args:
            width: Image width in pixels, at most MAX_IMAGE_WIDTH.
            height: Image height in pixels, at most MAX_IMAGE_HEIGHT.
            max_depth: Maximum number of surface interactions per path.

        Raises:
            ValueError: If dimensions are invalid or max_depth is negative.
        """
        if max_depth < 0:
            raise ValueError(f"max_depth must be non-negative, got {max_depth}")
        self._width = width
        self._height = height
        self._max_depth = max_depth
        setup_render_target(width, height)

    @property
    def width(self) -> int:
        """Image width in pixels."""
        return self._width

    @property
    def height(self) -> int:
        """Image height in pixels."""
        return self._height

    @property
    def max_depth(self) -> int:
        """Maximum surface interactions per path."""
        return self._max_depth

    @property
    def sample_count(self) -> int:
        """Samples averaged into every pixel so far."""
        return get_total_samples()

    def reset(self) -> None:
        """Clear accumulated samples without changing the image size."""
        clear_render_target()

    def resize(self, width: int, height: int) -> None:
        """Resize the render target and reset the accumulator.

        Raises:
            ValueError: If dimensions are invalid.
        """
        setup_render_target(width, height)
        self._width = width
        self._height = height

    def render(
        self,
        num_samples: int = 1,
        batch_size: int = 1,
        callback: ProgressCallback | None = None,
    ) -> None:
        """Add samples, reporting progress through an optional callback.

        Args:
            num_samples: How many samples per pixel to add.
            batch_size: Samples per kernel batch between callbacks.
            callback: Optional callback called after each batch with
                (current_total_samples, target_total_samples).
        """
        for current, target in self.render_progressive(num_samples, batch_size):
            if callback is not None:
                callback(current, target)

    def render_progressive(
        self,
        num_samples: int = 1,
        batch_size: int = 1,
    ) -> Generator[tuple[int, int], None, None]:
        """Generator form of render: yields once per finished batch.

        Args:
            num_samples: How many samples per pixel to add.
            batch_size: Samples per batch between yields.

        Yields:
            (samples_so_far, samples_wanted) after each batch.

        Raises:
            ValueError: If batch_size is not positive.
        """
        if num_samples <= 0:
            return
        if batch_size <= 0:
            raise ValueError(f"batch_size must be positive, got {batch_size}")

        target_samples = self.sample_count + num_samples
        logger.debug(
            "Rendering %d samples at %dx%d, depth %d",
            num_samples,
            self._width,
            self._height,
            self._max_depth,
        )

        remaining = num_samples
        while remaining > 0:
            batch = min(batch_size, remaining)
            render_image(batch, self._max_depth)
            remaining -= batch
            yield (self.sample_count, target_samples)

    def get_image_numpy(self, gamma_corrected: bool = True) -> npt.NDArray[np.float32]:
        """Get the averaged image as a NumPy array.

        Args:
            gamma_corrected: Apply the square-root gamma. Default True.

        Returns:
            Array of shape (height, width, 3), float32, in [0, 1], row 0 at top.
        """
        image = get_image_numpy()
        if gamma_corrected:
            image = gamma_correct(image)
        return image

    def get_image_uint8(self) -> npt.NDArray[np.uint8]:
        """Get the gamma-corrected image quantized to 8 bits per channel."""
        return image_to_uint8(self.get_image_numpy(gamma_corrected=True))

    def save_image(self, filepath: str) -> None:
        """Save the gamma-corrected image; the format follows the extension."""
        write_image(self.get_image_numpy(gamma_corrected=True), filepath)

    def __repr__(self) -> str:
        return (
            f"ProgressiveRenderer(width={self.width}, height={self.height}, "
            f"max_depth={self.max_depth}, samples={self.sample_count})"
        )
