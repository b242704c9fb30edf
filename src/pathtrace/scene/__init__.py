"""Scene module: sphere storage, scene building and demo scenes.

Components:
    world: Sphere storage in Taichi fields and closest-hit queries
    manager: Scene manager with a unified material ID space and serialization
    random_scene: The random spheres cover scene and a simple test scene
"""

from .manager import MaterialInfo, SceneConfig, SceneManager, SphereInfo
from .random_scene import create_random_scene, create_simple_scene
from .world import (
    MAX_SPHERES,
    add_sphere,
    clear_scene,
    get_sphere_count,
    intersect_scene,
)

__all__ = [
    "MAX_SPHERES",
    "add_sphere",
    "clear_scene",
    "get_sphere_count",
    "intersect_scene",
    "MaterialInfo",
    "SphereInfo",
    "SceneConfig",
    "SceneManager",
    "create_random_scene",
    "create_simple_scene",
]
