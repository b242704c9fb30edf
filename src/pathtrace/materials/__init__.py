"""Surface materials.

Components:
    matte: Diffuse scattering around the surface normal
    metallic: Mirror reflection with optional fuzz
    refractive: Glass-like refraction with Schlick-weighted reflection
    dispatch: Unified material IDs and the polymorphic ``scatter`` entry point

Every material answers ``scatter(ray, hit)`` with a ScatterRecord: either
absorbed, or an attenuation color plus the outgoing ray. Scatter functions
are Taichi functions and run inside the render kernel.
"""

from .base import ScatterRecord, absorbed, make_scatter, scattered_ray
from .dispatch import (
    MAX_MATERIALS,
    MaterialType,
    clear_material_ids,
    get_material_count,
    get_material_type,
    get_material_type_index,
    register_material,
    scatter,
)
from .matte import (
    add_matte_material,
    clear_matte_materials,
    get_matte_material_count,
    scatter_matte,
)
from .metallic import (
    add_metallic_material,
    clear_metallic_materials,
    get_metallic_material_count,
    scatter_metallic,
)
from .refractive import (
    add_refractive_material,
    cannot_refract,
    clear_refractive_materials,
    get_refractive_material_count,
    refraction_ratio,
    scatter_refractive,
)

__all__ = [
    "ScatterRecord",
    "absorbed",
    "make_scatter",
    "scattered_ray",
    # Dispatch
    "MaterialType",
    "MAX_MATERIALS",
    "register_material",
    "clear_material_ids",
    "get_material_count",
    "get_material_type",
    "get_material_type_index",
    "scatter",
    # Matte
    "add_matte_material",
    "clear_matte_materials",
    "get_matte_material_count",
    "scatter_matte",
    # Metallic
    "add_metallic_material",
    "clear_metallic_materials",
    "get_metallic_material_count",
    "scatter_metallic",
    # Refractive
    "add_refractive_material",
    "clear_refractive_materials",
    "get_refractive_material_count",
    "refraction_ratio",
    "cannot_refract",
    "scatter_refractive",
]
