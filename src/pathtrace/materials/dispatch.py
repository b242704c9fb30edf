"""Unified material IDs and scatter dispatch.

Each material type keeps its own registry (an arena addressed by a
type-local index). This module maps a single unified material ID, the value
stored on geometry and in hit records, to a (type, type-local index) pair,
and dispatches ``scatter`` to the matching implementation. Materials never
refer back to geometry, so any number of spheres can share one ID.
"""

from enum import IntEnum

import taichi as ti

from pathtrace.core.ray import Ray
from pathtrace.geometry.hit import HitRecord
from pathtrace.materials.base import ScatterRecord, absorbed
from pathtrace.materials.matte import scatter_matte_by_index
from pathtrace.materials.metallic import scatter_metallic_by_index
from pathtrace.materials.refractive import scatter_refractive_by_index


class MaterialType(IntEnum):
    """Enumeration of supported material types."""

    MATTE = 0
    METALLIC = 1
    REFRACTIVE = 2


MAX_MATERIALS = 3072

# material_types[i] stores the MaterialType for material_id i
material_types = ti.field(dtype=ti.i32, shape=MAX_MATERIALS)
# material_type_indices[i] stores the type-local index for material_id i
material_type_indices = ti.field(dtype=ti.i32, shape=MAX_MATERIALS)
num_materials = ti.field(dtype=ti.i32, shape=())


def clear_material_ids() -> None:
    """Forget all unified material IDs."""
    num_materials[None] = 0


def register_material(material_type: MaterialType, type_index: int) -> int:
    """Assign a unified material ID to a registered material.

    Args:
        material_type: The material's type.
        type_index: The index returned by the type's add_* function.

    Returns:
        The new unified material ID.

    Raises:
        RuntimeError: If the maximum number of materials is exceeded.
    """
    material_id = num_materials[None]
    if material_id >= MAX_MATERIALS:
        raise RuntimeError(f"Maximum number of materials ({MAX_MATERIALS}) exceeded")

    material_types[material_id] = int(material_type)
    material_type_indices[material_id] = type_index
    num_materials[None] = material_id + 1
    return material_id


def get_material_count() -> int:
    """Get the number of unified material IDs in use."""
    return int(num_materials[None])


@ti.func
def get_material_type(material_id: ti.i32) -> ti.i32:
    """Get the material type for a material ID, or -1 if the ID is invalid."""
    result = -1
    if 0 <= material_id < num_materials[None]:
        result = material_types[material_id]
    return result


@ti.func
def get_material_type_index(material_id: ti.i32) -> ti.i32:
    """Get the type-local index for a material ID, or -1 if the ID is invalid."""
    result = -1
    if 0 <= material_id < num_materials[None]:
        result = material_type_indices[material_id]
    return result


@ti.func
def scatter(ray: Ray, hit: HitRecord) -> ScatterRecord:
    """Scatter a ray off the material recorded in a hit.

    Args:
        ray: The incoming ray.
        hit: The intersection being shaded.

    Returns:
        The material's ScatterRecord. Unknown material IDs absorb the ray.
    """
    mat_type = get_material_type(hit.material_id)
    type_index = get_material_type_index(hit.material_id)

    result = absorbed()

    if mat_type == int(MaterialType.MATTE):
        result = scatter_matte_by_index(type_index, hit)
    elif mat_type == int(MaterialType.METALLIC):
        result = scatter_metallic_by_index(type_index, ray, hit)
    elif mat_type == int(MaterialType.REFRACTIVE):
        result = scatter_refractive_by_index(type_index, ray, hit)

    return result
