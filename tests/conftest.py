"""Pytest configuration for pathtrace tests.

This module provides shared fixtures for all test modules, including
Taichi initialization which must happen once per session.
"""

import pytest
import taichi as ti


@pytest.fixture(scope="session", autouse=True)
def init_taichi_session():
    """Initialize Taichi once for the entire test session.

    ti.init discards every field allocated before it, so it must run before
    any pathtrace module is imported and must not run again.
    """
    ti.init(arch=ti.cpu, random_seed=42)
    yield


@pytest.fixture(autouse=True)
def clear_all_scene_data():
    """Clear spheres, materials and the render target around each test."""
    # Import here so the fields are allocated after ti.init
    from pathtrace.core.integrator import clear_render_target
    from pathtrace.materials.dispatch import clear_material_ids
    from pathtrace.materials.matte import clear_matte_materials
    from pathtrace.materials.metallic import clear_metallic_materials
    from pathtrace.materials.refractive import clear_refractive_materials
    from pathtrace.scene.world import clear_scene

    def _clear_all():
        clear_scene()
        clear_matte_materials()
        clear_metallic_materials()
        clear_refractive_materials()
        clear_material_ids()
        clear_render_target()

    _clear_all()

    yield

    _clear_all()
