"""Random sampling utilities for Monte Carlo integration.

Every sampler draws from ``ti.random``, Taichi's per-thread generator. Each
parallel worker owns its own stream, and ``ti.init(random_seed=...)`` fixes
all of them at once, so a render is reproducible for a given seed and
backend.

The rejection loops below run until a sample is accepted. The expected
number of iterations is small (about 1.9 for the sphere, 1.3 for the disc)
and they terminate with probability 1.
"""

import taichi as ti
import taichi.math as tm

from pathtrace.core.vector import length_squared, unit_vector

vec3 = tm.vec3


@ti.func
def uniform() -> ti.f32:
    """Return a real value uniformly distributed in [0, 1)."""
    return ti.random(ti.f32)


@ti.func
def uniform_range(lo: ti.f32, hi: ti.f32) -> ti.f32:
    """Return a real value uniformly distributed in [lo, hi)."""
    return lo + (hi - lo) * uniform()


@ti.func
def random_color() -> vec3:
    """Return a color with three independent channels in [0, 1)."""
    return vec3(uniform(), uniform(), uniform())


@ti.func
def random_color_range(lo: ti.f32, hi: ti.f32) -> vec3:
    """Return a color with three independent channels in [lo, hi)."""
    return vec3(uniform_range(lo, hi), uniform_range(lo, hi), uniform_range(lo, hi))


@ti.func
def _random_in_cube() -> vec3:
    return vec3(
        uniform() * 2.0 - 1.0,
        uniform() * 2.0 - 1.0,
        uniform() * 2.0 - 1.0,
    )


@ti.func
def random_in_unit_sphere() -> vec3:
    """Generate a random point strictly inside the unit ball.

    Rejection-samples the cube [-1, 1]^3 until the point's squared length
    is below 1.

    Returns:
        A random point with length < 1.
    """
    p = vec3(0.0, 0.0, 0.0)
    while True:
        p = _random_in_cube()
        if length_squared(p) < 1.0:
            break
    return p


@ti.func
def random_on_unit_sphere() -> vec3:
    """Generate a random unit direction.

    The cube sample is normalized without first rejecting points outside
    the ball, so directions cluster slightly toward the cube's corners and
    edges. Diffuse scattering relies on this exact distribution.

    Returns:
        A unit vector.
    """
    return unit_vector(_random_in_cube())


@ti.func
def random_in_unit_disc() -> vec3:
    """Generate a random point inside the unit disc in the xy-plane.

    Used to pick a point on the camera aperture.

    Returns:
        A random point (x, y, 0) with x^2 + y^2 < 1.
    """
    p = vec3(0.0, 0.0, 0.0)
    while True:
        p = vec3(uniform() * 2.0 - 1.0, uniform() * 2.0 - 1.0, 0.0)
        if length_squared(p) < 1.0:
            break
    return p
