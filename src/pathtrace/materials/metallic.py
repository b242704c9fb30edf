"""Metallic (specular reflective) material.

The incoming direction is mirrored about the surface normal, then nudged by
a random point in a sphere of radius ``fuzz``. A fuzz of 0 is a perfect
mirror. The perturbed ray is kept even when it dips below the surface; such
rays simply hit the same object again on the next bounce.

The reflection formula is:
    R = I - 2(I . N)N
"""

import taichi as ti
import taichi.math as tm

from pathtrace.core.ray import Ray
from pathtrace.core.sampling import random_in_unit_sphere
from pathtrace.core.vector import reflect, unit_vector
from pathtrace.geometry.hit import HitRecord
from pathtrace.materials.base import ScatterRecord, make_scatter, validate_color

vec3 = tm.vec3


@ti.func
def scatter_metallic(albedo: vec3, fuzz: ti.f32, ray: Ray, hit: HitRecord) -> ScatterRecord:
    """Scatter a ray off a metallic surface.

    Args:
        albedo: The reflective color.
        fuzz: The perturbation radius. 0 gives a perfect mirror.
        ray: The incoming ray.
        hit: The intersection being shaded.

    Returns:
        A ScatterRecord that always continues, attenuated by the albedo.
    """
    reflected = reflect(unit_vector(ray.direction), hit.normal)
    direction = reflected + fuzz * random_in_unit_sphere()
    return make_scatter(albedo, hit.point, direction)


# =============================================================================
# Material Field Storage
# =============================================================================

MAX_METALLIC_MATERIALS = 1024

metallic_albedos = ti.Vector.field(3, dtype=ti.f32, shape=MAX_METALLIC_MATERIALS)
metallic_fuzz = ti.field(dtype=ti.f32, shape=MAX_METALLIC_MATERIALS)
num_metallic_materials = ti.field(dtype=ti.i32, shape=())


def clear_metallic_materials() -> None:
    """Clear all metallic materials."""
    num_metallic_materials[None] = 0


def add_metallic_material(
    albedo: tuple[float, float, float],
    fuzz: float = 0.0,
) -> int:
    """Add a metallic material to the registry.

    Args:
        albedo: The reflective color as (R, G, B) tuple.
        fuzz: The reflection perturbation radius in [0, 1]. Default is 0
            (perfect mirror).

    Returns:
        The type-local index of the added material.

    Raises:
        ValueError: If any albedo component or the fuzz is outside [0, 1].
        RuntimeError: If the maximum number of materials is exceeded.
    """
    validate_color("Albedo", albedo)

    if not 0.0 <= fuzz <= 1.0:
        raise ValueError(
            f"Fuzz = {fuzz} is outside [0, 1]. "
            "Fuzz must be between 0 (perfect mirror) and 1 (maximum fuzz)."
        )

    idx = num_metallic_materials[None]
    if idx >= MAX_METALLIC_MATERIALS:
        raise RuntimeError(
            f"Maximum number of metallic materials ({MAX_METALLIC_MATERIALS}) exceeded"
        )

    metallic_albedos[idx] = [albedo[0], albedo[1], albedo[2]]
    metallic_fuzz[idx] = fuzz
    num_metallic_materials[None] = idx + 1
    return idx


def get_metallic_material_count() -> int:
    """Get the number of metallic materials in the registry."""
    return int(num_metallic_materials[None])


@ti.func
def get_metallic_albedo(material_idx: ti.i32) -> vec3:
    """Get the albedo of the metallic material at a type-local index."""
    return metallic_albedos[material_idx]


@ti.func
def get_metallic_fuzz(material_idx: ti.i32) -> ti.f32:
    """Get the fuzz of the metallic material at a type-local index."""
    return metallic_fuzz[material_idx]


@ti.func
def scatter_metallic_by_index(material_idx: ti.i32, ray: Ray, hit: HitRecord) -> ScatterRecord:
    """Look up a registered metallic material and scatter off it."""
    return scatter_metallic(
        get_metallic_albedo(material_idx),
        get_metallic_fuzz(material_idx),
        ray,
        hit,
    )
