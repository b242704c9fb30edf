"""Demo scenes.

``create_random_scene`` builds the "random spheres" cover scene: a huge matte
ground sphere, a grid of small spheres with randomly chosen materials, and
three large feature spheres (glass, matte and polished metal) viewed from a
low angle with a shallow depth of field.

``create_simple_scene`` is a single matte sphere resting on a ground sphere,
useful for quick checks.

Python-side randomness (sphere placement and materials) comes from a seeded
NumPy generator, so a given seed always builds the same scene.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from pathtrace.camera.thin_lens import setup_camera
    >>> from pathtrace.scene.random_scene import create_random_scene
    >>> scene, camera = create_random_scene(seed=7)
    >>> setup_camera(camera)
"""

import logging
import math

import numpy as np

from pathtrace.camera.thin_lens import ThinLensCamera
from pathtrace.scene.manager import SceneManager

logger = logging.getLogger(__name__)

DEFAULT_ASPECT_RATIO = 16.0 / 9.0

# Grid extent: small spheres are placed for a, b in [-GRID_SIZE, GRID_SIZE)
GRID_SIZE = 11
SMALL_RADIUS = 0.2

GLASS_IR = 1.5

# Small spheres too close to the large metal sphere would intersect it
_CLEARANCE_POINT = np.array([4.0, 0.2, 0.0])
_CLEARANCE = 0.9


def _random_scene_camera(aspect_ratio: float) -> ThinLensCamera:
    return ThinLensCamera(
        lookfrom=(13.0, 2.0, 3.0),
        lookat=(0.0, 0.0, 0.0),
        vup=(0.0, 1.0, 0.0),
        vfov=math.radians(20.0),
        aspect_ratio=aspect_ratio,
        aperture=0.1,
    )


def create_random_scene(
    seed: int = 42,
    grid: int = GRID_SIZE,
    aspect_ratio: float = DEFAULT_ASPECT_RATIO,
) -> tuple[SceneManager, ThinLensCamera]:
    """Build the random spheres scene.

    Args:
        seed: Seed for sphere placement and material choice.
        grid: Half-width of the small-sphere grid. 0 gives only the ground and
            the three feature spheres.
        aspect_ratio: Image width divided by height, passed to the camera.

    Returns:
        Tuple of (scene, camera).

    Raises:
        ValueError: If grid is negative.
    """
    if grid < 0:
        raise ValueError(f"grid must be non-negative, got {grid}")

    rng = np.random.default_rng(seed)
    scene = SceneManager()

    scene.add_matte_sphere((0.0, -1000.0, 0.0), 1000.0, albedo=(0.5, 0.5, 0.5))

    for a in range(-grid, grid):
        for b in range(-grid, grid):
            choose_mat = rng.random()
            center = np.array([a + 0.9 * rng.random(), SMALL_RADIUS, b + 0.9 * rng.random()])

            if np.linalg.norm(center - _CLEARANCE_POINT) <= _CLEARANCE:
                continue

            position = (float(center[0]), float(center[1]), float(center[2]))
            if choose_mat < 0.8:
                albedo = rng.random(3) * rng.random(3)
                scene.add_matte_sphere(position, SMALL_RADIUS, albedo=tuple(float(c) for c in albedo))
            elif choose_mat < 0.95:
                albedo = rng.uniform(0.5, 1.0, 3)
                fuzz = float(rng.uniform(0.0, 0.5))
                scene.add_metallic_sphere(
                    position, SMALL_RADIUS, albedo=tuple(float(c) for c in albedo), fuzz=fuzz
                )
            else:
                scene.add_refractive_sphere(position, SMALL_RADIUS, ir=GLASS_IR)

    scene.add_refractive_sphere((0.0, 1.0, 0.0), 1.0, ir=GLASS_IR)
    scene.add_matte_sphere((-4.0, 1.0, 0.0), 1.0, albedo=(0.4, 0.2, 0.1))
    scene.add_metallic_sphere((4.0, 1.0, 0.0), 1.0, albedo=(0.7, 0.6, 0.5), fuzz=0.0)

    logger.info(
        "Built random scene (seed=%d): %d spheres, %d materials",
        seed,
        scene.get_sphere_count(),
        scene.get_material_count(),
    )
    return scene, _random_scene_camera(aspect_ratio)


def create_simple_scene(
    aspect_ratio: float = DEFAULT_ASPECT_RATIO,
) -> tuple[SceneManager, ThinLensCamera]:
    """Build a single matte sphere on a ground sphere.

    The camera sits at the origin looking down -z with a 90 degree vertical
    field of view and no defocus blur.

    Returns:
        Tuple of (scene, camera).
    """
    scene = SceneManager()
    scene.add_matte_sphere((0.0, -100.5, -1.0), 100.0, albedo=(0.8, 0.8, 0.0))
    scene.add_matte_sphere((0.0, 0.0, -1.0), 0.5, albedo=(0.7, 0.3, 0.3))

    camera = ThinLensCamera(
        lookfrom=(0.0, 0.0, 0.0),
        lookat=(0.0, 0.0, -1.0),
        vup=(0.0, 1.0, 0.0),
        vfov=math.radians(90.0),
        aspect_ratio=aspect_ratio,
        aperture=0.0,
    )
    logger.debug("Built simple scene")
    return scene, camera
