"""Core rendering module.

Components:
    vector: Vector algebra (dot, cross, reflect, refract, Schlick)
    sampling: Random scalars, colors and points in spheres and discs
    ray: Ray data structure
    integrator: Path tracing kernel and render target
    progressive: Batch rendering driver with progress reporting

All per-ray work runs in Taichi functions composed into kernels.
"""

from .ray import Ray, make_ray, ray_at
from .sampling import (
    random_color,
    random_color_range,
    random_in_unit_disc,
    random_in_unit_sphere,
    random_on_unit_sphere,
    uniform,
    uniform_range,
)
from .vector import (
    NEAR_ZERO_EPSILON,
    component_mul,
    cross,
    dot,
    length,
    length_squared,
    near_zero,
    reflect,
    refract,
    schlick_reflectance,
    unit_vector,
    vec3,
)

# integrator and progressive import the scene and materials, which import
# this package, so they are not re-exported here.

__all__ = [
    "Ray",
    "ray_at",
    "make_ray",
    "vec3",
    "NEAR_ZERO_EPSILON",
    "dot",
    "cross",
    "length",
    "length_squared",
    "unit_vector",
    "component_mul",
    "near_zero",
    "reflect",
    "refract",
    "schlick_reflectance",
    "uniform",
    "uniform_range",
    "random_color",
    "random_color_range",
    "random_in_unit_sphere",
    "random_on_unit_sphere",
    "random_in_unit_disc",
]
