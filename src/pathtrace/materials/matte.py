"""Matte (Lambertian-like diffuse) material.

A matte surface scatters every incoming ray. The outgoing direction is the
surface normal plus a random unit vector, which concentrates scattered rays
around the normal. When the two nearly cancel, the normal itself is used so
the new ray never has a degenerate direction.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from pathtrace.materials.matte import add_matte_material
    >>> idx = add_matte_material((0.5, 0.5, 0.5))
    >>> # scatter_matte(albedo, hit) within a Taichi kernel
"""

import taichi as ti
import taichi.math as tm

from pathtrace.core.sampling import random_on_unit_sphere
from pathtrace.core.vector import near_zero
from pathtrace.geometry.hit import HitRecord
from pathtrace.materials.base import ScatterRecord, make_scatter, validate_color

vec3 = tm.vec3


@ti.func
def scatter_matte(albedo: vec3, hit: HitRecord) -> ScatterRecord:
    """Scatter a ray off a matte surface.

    Args:
        albedo: The diffuse reflectance color.
        hit: The intersection being shaded.

    Returns:
        A ScatterRecord that always continues, attenuated by the albedo.
    """
    scatter_direction = hit.normal + random_on_unit_sphere()

    if near_zero(scatter_direction):
        scatter_direction = hit.normal

    return make_scatter(albedo, hit.point, scatter_direction)


# =============================================================================
# Material Field Storage
# =============================================================================

MAX_MATTE_MATERIALS = 1024

matte_albedos = ti.Vector.field(3, dtype=ti.f32, shape=MAX_MATTE_MATERIALS)
num_matte_materials = ti.field(dtype=ti.i32, shape=())


def clear_matte_materials() -> None:
    """Clear all matte materials."""
    num_matte_materials[None] = 0


def add_matte_material(albedo: tuple[float, float, float]) -> int:
    """Add a matte material to the registry.

    Args:
        albedo: The diffuse reflectance color as (R, G, B) tuple.

    Returns:
        The type-local index of the added material.

    Raises:
        ValueError: If any albedo component is outside [0, 1].
        RuntimeError: If the maximum number of materials is exceeded.
    """
    validate_color("Albedo", albedo)

    idx = num_matte_materials[None]
    if idx >= MAX_MATTE_MATERIALS:
        raise RuntimeError(
            f"Maximum number of matte materials ({MAX_MATTE_MATERIALS}) exceeded"
        )

    matte_albedos[idx] = [albedo[0], albedo[1], albedo[2]]
    num_matte_materials[None] = idx + 1
    return idx


def get_matte_material_count() -> int:
    """Get the number of matte materials in the registry."""
    return int(num_matte_materials[None])


@ti.func
def get_matte_albedo(material_idx: ti.i32) -> vec3:
    """Get the albedo of the matte material at a type-local index."""
    return matte_albedos[material_idx]


@ti.func
def scatter_matte_by_index(material_idx: ti.i32, hit: HitRecord) -> ScatterRecord:
    """Look up a registered matte material and scatter off it."""
    return scatter_matte(get_matte_albedo(material_idx), hit)
