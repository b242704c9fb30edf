"""Path tracing kernel and render target.

A camera ray is traced through the scene; at each hit the surface material
either absorbs it (black) or scatters it into a new ray whose color is
multiplied by the material's attenuation. Rays that escape pick up the sky
gradient. A depth budget bounds every path: once it is spent, the path
contributes black.

The recursive definition

    ray_color(r, 0) = black
    ray_color(r, d) = attenuation * ray_color(scattered, d - 1)

is evaluated as a loop that carries the running attenuation product, since
Taichi functions cannot recurse.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from pathtrace.core.integrator import render_image, setup_render_target
    >>> from pathtrace.scene.random_scene import create_random_scene
    >>> from pathtrace.camera.thin_lens import setup_camera
    >>>
    >>> scene, camera = create_random_scene()
    >>> setup_camera(camera)
    >>> setup_render_target(400, 225)
    >>> render_image(num_samples=10, max_depth=50)
"""

import numpy as np
import numpy.typing as npt
import taichi as ti
import taichi.math as tm

from pathtrace.camera.thin_lens import get_ray_jittered
from pathtrace.core.ray import Ray, make_ray
from pathtrace.core.vector import component_mul, unit_vector
from pathtrace.materials.base import scattered_ray
from pathtrace.materials.dispatch import scatter
from pathtrace.scene.world import intersect_scene

vec3 = tm.vec3

# =============================================================================
# Rendering Constants
# =============================================================================

# Default maximum path length
MAX_DEPTH = 50

# Hits closer than this are floating-point self-intersections of a new ray
T_MIN = 0.001
T_MAX = tm.inf

# Sky gradient
HORIZON_COLOR = vec3(1.0, 1.0, 1.0)
ZENITH_COLOR = vec3(0.5, 0.7, 1.0)

# =============================================================================
# Render Target (Image Buffer)
# =============================================================================

# Preallocated to avoid kernel recompilation when the image size changes
MAX_IMAGE_WIDTH = 2048
MAX_IMAGE_HEIGHT = 2048

_image_width = ti.field(dtype=ti.i32, shape=())
_image_height = ti.field(dtype=ti.i32, shape=())

# Running mean of the samples taken so far, indexed (x, y) with y = 0 at the bottom
_color_buffer = ti.Vector.field(3, dtype=ti.f32, shape=(MAX_IMAGE_WIDTH, MAX_IMAGE_HEIGHT))
_sample_count = ti.field(dtype=ti.i32, shape=(MAX_IMAGE_WIDTH, MAX_IMAGE_HEIGHT))

_render_target_initialized = ti.field(dtype=ti.i32, shape=())


def setup_render_target(width: int, height: int) -> None:
    """Set the active image size and clear the buffers.

    Args:
        width: Image width in pixels (max MAX_IMAGE_WIDTH).
        height: Image height in pixels (max MAX_IMAGE_HEIGHT).

    Raises:
        ValueError: If a dimension is not positive or exceeds the maximum.
    """
    if width <= 0 or height <= 0:
        raise ValueError(f"Image dimensions must be positive, got {width}x{height}")
    if width > MAX_IMAGE_WIDTH or height > MAX_IMAGE_HEIGHT:
        raise ValueError(
            f"Image dimensions ({width}x{height}) exceed maximum supported "
            f"({MAX_IMAGE_WIDTH}x{MAX_IMAGE_HEIGHT})"
        )

    _image_width[None] = width
    _image_height[None] = height
    _render_target_initialized[None] = 1

    clear_render_target()


def clear_render_target() -> None:
    """Clear the render target buffers to zero."""
    _color_buffer.fill(0.0)
    _sample_count.fill(0)


def get_image_dimensions() -> tuple[int, int]:
    """Get the current render target dimensions as (width, height)."""
    return int(_image_width[None]), int(_image_height[None])


def _check_depth(max_depth: int) -> None:
    if max_depth < 0:
        raise ValueError(f"max_depth must be non-negative, got {max_depth}")


def _check_render_target_initialized() -> None:
    if _render_target_initialized[None] == 0:
        raise RuntimeError("Render target not set up. Call setup_render_target() first.")


# =============================================================================
# Path Tracing Core
# =============================================================================


@ti.func
def background_color(ray: Ray) -> vec3:
    """Sky gradient: white at the horizon blending to blue at the zenith.

    The blend factor maps the unit direction's y-component from [-1, 1]
    to [0, 1].
    """
    unit_direction = unit_vector(ray.direction)
    t = 0.5 * (unit_direction.y + 1.0)
    return (1.0 - t) * HORIZON_COLOR + t * ZENITH_COLOR


@ti.func
def ray_color(ray: Ray, depth: ti.i32) -> vec3:
    """Estimate the color seen along a ray.

    Args:
        ray: The ray to trace.
        depth: Number of surface interactions allowed. 0 always yields black.

    Returns:
        One Monte Carlo sample of the color arriving along the ray.
    """
    color = vec3(0.0, 0.0, 0.0)
    attenuation = vec3(1.0, 1.0, 1.0)
    current = ray

    # Taichi funcs have no early exit from loops, so a flag ends the path
    active = 1
    for _ in range(depth):
        if active == 1:
            hit = intersect_scene(current, T_MIN, T_MAX)

            if hit.hit == 0:
                color = component_mul(attenuation, background_color(current))
                active = 0
            else:
                rec = scatter(current, hit)
                if rec.scattered == 0:
                    active = 0
                else:
                    attenuation = component_mul(attenuation, rec.attenuation)
                    current = scattered_ray(rec)

    return color


@ti.func
def _sanitize(color: vec3) -> vec3:
    """Replace NaN/Inf channels (degenerate geometry) with zero."""
    result = color
    for c in ti.static(range(3)):
        if tm.isnan(result[c]) or tm.isinf(result[c]):
            result[c] = 0.0
    return result


# =============================================================================
# Rendering Kernels
# =============================================================================


@ti.kernel
def _render_one_spp(width: ti.i32, height: ti.i32, max_depth: ti.i32):
    """Trace one jittered sample through every pixel and fold it into the mean."""
    for i, j in ti.ndrange(width, height):
        ray = get_ray_jittered(i, j, width, height)
        color = _sanitize(ray_color(ray, max_depth))

        _sample_count[i, j] += 1
        n = _sample_count[i, j]

        # Running average: avg_n = avg_{n-1} + (x_n - avg_{n-1}) / n
        _color_buffer[i, j] += (color - _color_buffer[i, j]) / ti.cast(n, ti.f32)


# Output slot for the single-ray kernels below
_single_result = ti.Vector.field(3, dtype=ti.f32, shape=())


@ti.kernel
def _render_single_pixel(
    pixel_i: ti.i32, pixel_j: ti.i32, width: ti.i32, height: ti.i32, max_depth: ti.i32
):
    # Single-iteration outer loop keeps the loops inside ray_color serial
    for _ in range(1):
        ray = get_ray_jittered(pixel_i, pixel_j, width, height)
        _single_result[None] = ray_color(ray, max_depth)


@ti.kernel
def _trace_ray(
    ox: ti.f32,
    oy: ti.f32,
    oz: ti.f32,
    dx: ti.f32,
    dy: ti.f32,
    dz: ti.f32,
    depth: ti.i32,
):
    for _ in range(1):
        ray = make_ray(vec3(ox, oy, oz), vec3(dx, dy, dz))
        _single_result[None] = ray_color(ray, depth)


# =============================================================================
# Public Rendering API
# =============================================================================


def trace_ray(
    origin: tuple[float, float, float],
    direction: tuple[float, float, float],
    depth: int = MAX_DEPTH,
) -> tuple[float, float, float]:
    """Evaluate ray_color for one ray against the current scene.

    Args:
        origin: Ray origin.
        direction: Ray direction (need not be unit length).
        depth: Maximum number of surface interactions.

    Returns:
        Tuple of (R, G, B) linear color values.

    Raises:
        ValueError: If depth is negative.
    """
    _check_depth(depth)
    _trace_ray(
        origin[0], origin[1], origin[2], direction[0], direction[1], direction[2], depth
    )
    color = _single_result[None]
    return (float(color[0]), float(color[1]), float(color[2]))


def render_sample(pixel_i: int, pixel_j: int, max_depth: int = MAX_DEPTH) -> tuple[float, float, float]:
    """Render a single jittered sample for a specific pixel.

    Args:
        pixel_i: Pixel x-coordinate (0 = left).
        pixel_j: Pixel y-coordinate (0 = bottom).
        max_depth: Maximum number of surface interactions.

    Returns:
        Tuple of (R, G, B) linear color values.

    Raises:
        ValueError: If max_depth is negative.
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()
    _check_depth(max_depth)

    width, height = get_image_dimensions()
    _render_single_pixel(pixel_i, pixel_j, width, height, max_depth)
    color = _single_result[None]
    return (float(color[0]), float(color[1]), float(color[2]))


def render_image(num_samples: int = 1, max_depth: int = MAX_DEPTH) -> None:
    """Add samples to every pixel of the render target.

    Each pass launches one kernel over all pixels in parallel. Can be called
    repeatedly; samples keep accumulating until the target is cleared.

    Args:
        num_samples: Number of samples to add per pixel.
        max_depth: Maximum number of surface interactions per path.

    Raises:
        ValueError: If max_depth is negative.
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()
    _check_depth(max_depth)

    width, height = get_image_dimensions()

    for _ in range(num_samples):
        _render_one_spp(width, height, max_depth)


def get_total_samples() -> int:
    """Get the number of samples accumulated per pixel.

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()

    return int(_sample_count[0, 0])


def get_image_numpy() -> npt.NDArray[np.float32]:
    """Get the averaged linear image.

    Returns:
        Array of shape (height, width, 3), float32, clamped to [0, 1], with
        row 0 at the top of the image.

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()

    width, height = get_image_dimensions()

    full_image = _color_buffer.to_numpy()
    image = full_image[:width, :height, :]

    # (width, height, 3) -> (height, width, 3)
    image = np.transpose(image, (1, 0, 2))

    # The kernel indexes rows bottom-up; images store the top row first
    image = np.flipud(image)

    image = np.clip(image, 0.0, 1.0)

    return np.ascontiguousarray(image, dtype=np.float32)
