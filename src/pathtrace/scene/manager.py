"""Scene manager coordinating spheres and materials.

This module provides a high-level scene building API on top of the Taichi
storage in ``scene.world`` and the material registries. It tracks which
material type (Matte, Metallic, Refractive) each unified material ID refers
to, and keeps a Python-side record of everything added so a scene can be
serialized to a dictionary or a JSON file and rebuilt later.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from pathtrace.scene.manager import SceneManager
    >>> scene = SceneManager()
    >>> ground = scene.add_matte_material(albedo=(0.5, 0.5, 0.5))
    >>> scene.add_sphere(center=(0, -1000, 0), radius=1000, material_id=ground)
    >>> scene.add_refractive_sphere(center=(0, 1, 0), radius=1.0, ir=1.5)
    >>> scene.save_json("scene.json")
"""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from pathtrace.materials.dispatch import (
    MAX_MATERIALS,
    MaterialType,
    clear_material_ids,
    get_material_count,
    register_material,
)
from pathtrace.materials.matte import add_matte_material, clear_matte_materials
from pathtrace.materials.metallic import add_metallic_material, clear_metallic_materials
from pathtrace.materials.refractive import add_refractive_material, clear_refractive_materials
from pathtrace.scene.world import MAX_SPHERES, add_sphere, clear_scene, get_sphere_count

logger = logging.getLogger(__name__)


@dataclass
class MaterialInfo:
    """Information about a registered material.

    Attributes:
        material_id: The unified material ID.
        material_type: The type of material.
        type_index: The index within the type-specific material registry.
        params: The material parameters as provided during creation.
    """

    material_id: int
    material_type: MaterialType
    type_index: int
    params: dict[str, Any]


@dataclass
class SphereInfo:
    """Information about a sphere in the scene.

    Attributes:
        sphere_index: The index in the sphere storage fields.
        center: The center of the sphere.
        radius: The radius of the sphere.
        material_id: The material ID assigned to the sphere.
    """

    sphere_index: int
    center: tuple[float, float, float]
    radius: float
    material_id: int


@dataclass
class SceneConfig:
    """Serializable description of a scene.

    Attributes:
        materials: List of material configurations, in material ID order.
        spheres: List of sphere configurations.
    """

    materials: list[dict[str, Any]] = field(default_factory=list)
    spheres: list[dict[str, Any]] = field(default_factory=list)


def _as_triple(values: Any, name: str) -> tuple[float, float, float]:
    try:
        count = len(values)
    except TypeError as e:
        raise ValueError(f"{name} must be a sequence of 3 numbers, got {values!r}") from e
    if count != 3:
        raise ValueError(f"{name} must have 3 components, got {count}")
    return (
        _as_number(values[0], name),
        _as_number(values[1], name),
        _as_number(values[2], name),
    )


def _as_number(value: Any, name: str) -> float:
    if isinstance(value, bool):
        raise ValueError(f"{name} must be a number, got {value!r}")
    try:
        return float(value)
    except (TypeError, ValueError) as e:
        raise ValueError(f"{name} must be a number, got {value!r}") from e


def _as_entries(items: Any, name: str) -> list[dict[str, Any]]:
    if not isinstance(items, list):
        raise ValueError(f"{name} must be a list, got {type(items).__name__}")
    for i, entry in enumerate(items):
        if not isinstance(entry, dict):
            raise ValueError(f"{name}[{i}] must be an object, got {type(entry).__name__}")
    return items


class SceneManager:
    """Scene builder with a unified material ID space.

    Every add_*_material call stores the material in its type's registry and
    assigns it the next unified material ID. Spheres reference materials by
    that ID, so one material can be shared by any number of spheres.

    The underlying storage is module-level Taichi state: creating a manager
    (or calling clear) empties the scene and all material registries.

    Attributes:
        materials: List of MaterialInfo for all registered materials.
        spheres: List of SphereInfo for all spheres in the scene.

    Example:
        >>> scene = SceneManager()
        >>> red = scene.add_matte_material(albedo=(0.8, 0.1, 0.1))
        >>> gold = scene.add_metallic_material(albedo=(0.8, 0.6, 0.2), fuzz=0.3)
        >>> glass = scene.add_refractive_material(ir=1.5)
        >>> scene.add_sphere((0, 0, -1), 0.5, red)
        >>> scene.add_sphere((1, 0, -1), 0.5, gold)
        >>> scene.add_sphere((-1, 0, -1), 0.5, glass)
    """

    def __init__(self) -> None:
        """Initialize an empty scene."""
        self.materials: list[MaterialInfo] = []
        self.spheres: list[SphereInfo] = []
        self._clear_all()

    def _clear_all(self) -> None:
        clear_scene()
        clear_matte_materials()
        clear_metallic_materials()
        clear_refractive_materials()
        clear_material_ids()
        self.materials.clear()
        self.spheres.clear()

    def clear(self) -> None:
        """Clear the entire scene (spheres and materials)."""
        self._clear_all()

    # =========================================================================
    # Material Management
    # =========================================================================

    def _register(self, material_type: MaterialType, type_index: int, params: dict[str, Any]) -> int:
        material_id = register_material(material_type, type_index)
        self.materials.append(
            MaterialInfo(
                material_id=material_id,
                material_type=material_type,
                type_index=type_index,
                params=params,
            )
        )
        return material_id

    def add_matte_material(self, albedo: tuple[float, float, float]) -> int:
        """Add a matte (diffuse) material.

        Args:
            albedo: The diffuse reflectance as (R, G, B), each in [0, 1].

        Returns:
            The unified material ID.

        Raises:
            ValueError: If any albedo component is outside [0, 1].
            RuntimeError: If a material capacity is exceeded.
        """
        type_index = add_matte_material(albedo)
        return self._register(MaterialType.MATTE, type_index, {"albedo": tuple(albedo)})

    def add_metallic_material(
        self,
        albedo: tuple[float, float, float],
        fuzz: float = 0.0,
    ) -> int:
        """Add a metallic (mirror-like) material.

        Args:
            albedo: The reflective color as (R, G, B), each in [0, 1].
            fuzz: Perturbation radius of the reflected ray in [0, 1].
                0 is a perfect mirror.

        Returns:
            The unified material ID.

        Raises:
            ValueError: If albedo or fuzz is out of range.
            RuntimeError: If a material capacity is exceeded.
        """
        type_index = add_metallic_material(albedo, fuzz)
        return self._register(
            MaterialType.METALLIC, type_index, {"albedo": tuple(albedo), "fuzz": fuzz}
        )

    def add_refractive_material(self, ir: float = 1.5) -> int:
        """Add a refractive (glass-like) material.

        Args:
            ir: Index of refraction relative to the surrounding medium.
                Common values: water 1.33, glass 1.5, diamond 2.4.

        Returns:
            The unified material ID.

        Raises:
            ValueError: If ir is not positive.
            RuntimeError: If a material capacity is exceeded.
        """
        type_index = add_refractive_material(ir)
        return self._register(MaterialType.REFRACTIVE, type_index, {"ir": ir})

    def get_material_count(self) -> int:
        """Get the total number of materials in the scene."""
        return get_material_count()

    def get_material_info(self, material_id: int) -> MaterialInfo | None:
        """Get information about a material by ID, or None if unknown."""
        if 0 <= material_id < len(self.materials):
            return self.materials[material_id]
        return None

    # =========================================================================
    # Sphere Management
    # =========================================================================

    def add_sphere(
        self,
        center: tuple[float, float, float],
        radius: float,
        material_id: int,
    ) -> int:
        """Add a sphere using an existing material.

        Args:
            center: The center point as (x, y, z).
            radius: The radius. Must be positive.
            material_id: A unified material ID from an add_*_material call.

        Returns:
            The index of the added sphere.

        Raises:
            ValueError: If material_id is unknown or the radius is not positive.
            RuntimeError: If the maximum number of spheres is exceeded.
        """
        if material_id < 0 or material_id >= get_material_count():
            raise ValueError(f"Invalid material_id: {material_id}")

        center = _as_triple(center, "center")
        sphere_index = add_sphere(center, radius, material_id)
        self.spheres.append(
            SphereInfo(
                sphere_index=sphere_index,
                center=center,
                radius=radius,
                material_id=material_id,
            )
        )
        return sphere_index

    def add_matte_sphere(
        self,
        center: tuple[float, float, float],
        radius: float,
        albedo: tuple[float, float, float],
    ) -> tuple[int, int]:
        """Add a sphere with a new matte material.

        Returns:
            Tuple of (sphere_index, material_id).
        """
        material_id = self.add_matte_material(albedo)
        return self.add_sphere(center, radius, material_id), material_id

    def add_metallic_sphere(
        self,
        center: tuple[float, float, float],
        radius: float,
        albedo: tuple[float, float, float],
        fuzz: float = 0.0,
    ) -> tuple[int, int]:
        """Add a sphere with a new metallic material.

        Returns:
            Tuple of (sphere_index, material_id).
        """
        material_id = self.add_metallic_material(albedo, fuzz)
        return self.add_sphere(center, radius, material_id), material_id

    def add_refractive_sphere(
        self,
        center: tuple[float, float, float],
        radius: float,
        ir: float = 1.5,
    ) -> tuple[int, int]:
        """Add a sphere with a new refractive material.

        Returns:
            Tuple of (sphere_index, material_id).
        """
        material_id = self.add_refractive_material(ir)
        return self.add_sphere(center, radius, material_id), material_id

    def get_sphere_count(self) -> int:
        """Get the number of spheres in the scene."""
        return get_sphere_count()

    # =========================================================================
    # Scene Serialization
    # =========================================================================

    def to_config(self) -> SceneConfig:
        """Export the scene to a configuration object."""
        config = SceneConfig()

        for mat in self.materials:
            mat_config: dict[str, Any] = {"type": mat.material_type.name.lower()}
            for key, value in mat.params.items():
                mat_config[key] = list(value) if isinstance(value, tuple) else value
            config.materials.append(mat_config)

        for sphere in self.spheres:
            config.spheres.append(
                {
                    "center": list(sphere.center),
                    "radius": sphere.radius,
                    "material_id": sphere.material_id,
                }
            )

        return config

    def from_config(self, config: SceneConfig) -> None:
        """Replace the current scene with a configuration.

        Materials are registered in list order, so the material IDs that
        spheres refer to are the indices into ``config.materials``.

        Raises:
            ValueError: If the configuration is malformed, contains an
                unknown material type or has invalid parameters.
        """
        materials = _as_entries(config.materials, "materials")
        spheres = _as_entries(config.spheres, "spheres")
        self.clear()

        for mat_config in materials:
            mat_type = str(mat_config.get("type", "")).lower()
            if mat_type == "matte":
                albedo = _as_triple(mat_config.get("albedo", [0.5, 0.5, 0.5]), "albedo")
                self.add_matte_material(albedo)
            elif mat_type == "metallic":
                albedo = _as_triple(mat_config.get("albedo", [0.8, 0.8, 0.8]), "albedo")
                self.add_metallic_material(albedo, _as_number(mat_config.get("fuzz", 0.0), "fuzz"))
            elif mat_type == "refractive":
                self.add_refractive_material(_as_number(mat_config.get("ir", 1.5), "ir"))
            else:
                raise ValueError(f"Unknown material type: {mat_type!r}")

        for sphere_config in spheres:
            material_id = sphere_config.get("material_id", 0)
            if not isinstance(material_id, int) or isinstance(material_id, bool):
                raise ValueError(f"material_id must be an integer, got {material_id!r}")
            self.add_sphere(
                _as_triple(sphere_config.get("center", [0.0, 0.0, 0.0]), "center"),
                _as_number(sphere_config.get("radius", 1.0), "radius"),
                material_id,
            )

        logger.debug(
            "Loaded scene with %d materials and %d spheres",
            len(self.materials),
            len(self.spheres),
        )

    def to_dict(self) -> dict[str, Any]:
        """Export the scene to a dictionary (for JSON serialization)."""
        config = self.to_config()
        return {"materials": config.materials, "spheres": config.spheres}

    def from_dict(self, data: dict[str, Any]) -> None:
        """Load a scene from a dictionary with 'materials' and 'spheres' keys."""
        if not isinstance(data, dict):
            raise ValueError(f"Scene data must be a dictionary, got {type(data).__name__}")
        config = SceneConfig(
            materials=data.get("materials", []),
            spheres=data.get("spheres", []),
        )
        self.from_config(config)

    def save_json(self, filepath: str | Path) -> Path:
        """Write the scene to a JSON file.

        Returns:
            The path written.
        """
        path = Path(filepath)
        path.write_text(json.dumps(self.to_dict(), indent=2))
        logger.info("Saved scene (%d spheres) to %s", len(self.spheres), path)
        return path

    def load_json(self, filepath: str | Path) -> None:
        """Replace the current scene with the contents of a JSON file.

        Raises:
            OSError: If the file cannot be read.
            ValueError: If the file is not valid JSON or describes an invalid scene.
        """
        path = Path(filepath)
        try:
            data = json.loads(path.read_text())
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid scene file {path}: {e}") from e
        if not isinstance(data, dict):
            raise ValueError(f"Invalid scene file {path}: expected a JSON object")
        self.from_dict(data)
        logger.info("Loaded scene from %s", path)

    # =========================================================================
    # Capacity Information
    # =========================================================================

    @staticmethod
    def get_max_spheres() -> int:
        """Get the maximum number of spheres supported."""
        return MAX_SPHERES

    @staticmethod
    def get_max_materials() -> int:
        """Get the maximum number of materials supported."""
        return MAX_MATERIALS
