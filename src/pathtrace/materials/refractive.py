"""Refractive (dielectric) material for glass-like surfaces.

Key physics:
    - Snell's law for refraction: n1 * sin(theta1) = n2 * sin(theta2)
    - Schlick's approximation for Fresnel reflectance
    - Total internal reflection when ratio * sin(theta) > 1

Each interaction picks either reflection or refraction at random, with the
reflection probability given by the Schlick reflectance. Averaged over many
samples this reproduces the Fresnel split without tracing two rays.
Refractive surfaces never tint or absorb: attenuation is always white.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from pathtrace.materials.refractive import add_refractive_material
    >>> glass = add_refractive_material(1.5)
"""

import math

import taichi as ti
import taichi.math as tm

from pathtrace.core.ray import Ray
from pathtrace.core.sampling import uniform
from pathtrace.core.vector import reflect, refract, schlick_reflectance, unit_vector
from pathtrace.geometry.hit import HitRecord
from pathtrace.materials.base import ScatterRecord, make_scatter

vec3 = tm.vec3


@ti.func
def refraction_ratio(ir: ti.f32, front_face: ti.i32) -> ti.f32:
    """Ratio of refractive indices for a ray crossing the surface.

    A front-face hit enters the medium (1 / ir); a back-face hit leaves it (ir).
    """
    ratio = ir
    if front_face == 1:
        ratio = 1.0 / ir
    return ratio


@ti.func
def cannot_refract(ir: ti.f32, ray: Ray, hit: HitRecord) -> ti.i32:
    """Check whether the ray is totally internally reflected."""
    ratio = refraction_ratio(ir, hit.front_face)
    cos_theta = tm.min(tm.dot(-unit_vector(ray.direction), hit.normal), 1.0)
    sin_theta = ti.sqrt(1.0 - cos_theta * cos_theta)
    result = 0
    if ratio * sin_theta > 1.0:
        result = 1
    return result


@ti.func
def scatter_refractive(ir: ti.f32, ray: Ray, hit: HitRecord) -> ScatterRecord:
    """Scatter a ray off a refractive surface.

    Args:
        ir: Index of refraction of the material.
        ray: The incoming ray.
        hit: The intersection being shaded. front_face selects the
            refraction ratio.

    Returns:
        A ScatterRecord that always continues, with white attenuation and
        either the reflected or the refracted direction.
    """
    ratio = refraction_ratio(ir, hit.front_face)
    unit_direction = unit_vector(ray.direction)

    cos_theta = tm.min(tm.dot(-unit_direction, hit.normal), 1.0)

    must_reflect = cannot_refract(ir, ray, hit)
    if schlick_reflectance(cos_theta, ratio) > uniform():
        must_reflect = 1

    direction = vec3(0.0, 0.0, 0.0)
    if must_reflect:
        direction = reflect(unit_direction, hit.normal)
    else:
        direction = refract(unit_direction, hit.normal, ratio)

    return make_scatter(vec3(1.0, 1.0, 1.0), hit.point, direction)


# =============================================================================
# Material Field Storage
# =============================================================================

MAX_REFRACTIVE_MATERIALS = 1024

refractive_irs = ti.field(dtype=ti.f32, shape=MAX_REFRACTIVE_MATERIALS)
num_refractive_materials = ti.field(dtype=ti.i32, shape=())


def clear_refractive_materials() -> None:
    """Clear all refractive materials."""
    num_refractive_materials[None] = 0


def add_refractive_material(ir: float = 1.5) -> int:
    """Add a refractive material to the registry.

    Args:
        ir: Index of refraction. Default is 1.5 (typical glass). Must be
            positive; values below 1 model a medium less dense than its
            surroundings, such as an air bubble inside glass.

    Returns:
        The type-local index of the added material.

    Raises:
        ValueError: If the index of refraction is not positive and finite.
        RuntimeError: If the maximum number of materials is exceeded.
    """
    if not (math.isfinite(ir) and ir > 0.0):
        raise ValueError(f"Index of refraction must be positive and finite, got {ir}")

    idx = num_refractive_materials[None]
    if idx >= MAX_REFRACTIVE_MATERIALS:
        raise RuntimeError(
            f"Maximum number of refractive materials ({MAX_REFRACTIVE_MATERIALS}) exceeded"
        )

    refractive_irs[idx] = ir
    num_refractive_materials[None] = idx + 1
    return idx


def get_refractive_material_count() -> int:
    """Get the number of refractive materials in the registry."""
    return int(num_refractive_materials[None])


@ti.func
def get_refractive_ir(material_idx: ti.i32) -> ti.f32:
    """Get the index of refraction at a type-local index."""
    return refractive_irs[material_idx]


@ti.func
def scatter_refractive_by_index(material_idx: ti.i32, ray: Ray, hit: HitRecord) -> ScatterRecord:
    """Look up a registered refractive material and scatter off it."""
    return scatter_refractive(get_refractive_ir(material_idx), ray, hit)
