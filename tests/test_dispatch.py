"""Tests for unified material IDs and scatter dispatch."""

import pytest
import taichi as ti


def _scatter_at_floor(material_id):
    """Scatter a straight-down ray off a floor with the given material ID.

    Returns:
        Tuple of (scattered, attenuation) as Python values.
    """
    from pathtrace.core.ray import make_ray, vec3
    from pathtrace.geometry.hit import make_hit
    from pathtrace.materials.dispatch import scatter

    scattered = ti.field(dtype=ti.i32, shape=())
    attenuation = ti.Vector.field(3, dtype=ti.f32, shape=())

    @ti.kernel
    def test_kernel(mat: ti.i32):
        for _ in range(1):
            ray = make_ray(vec3(0.0, 1.0, 0.0), vec3(0.0, -1.0, 0.0))
            hit = make_hit(vec3(0.0, 0.0, 0.0), 1.0, ray, vec3(0.0, 1.0, 0.0), mat)
            rec = scatter(ray, hit)
            scattered[None] = rec.scattered
            attenuation[None] = rec.attenuation

    test_kernel(material_id)
    a = attenuation[None]
    return scattered[None], (a[0], a[1], a[2])


class TestMaterialIds:
    """Tests for register_material and the type lookups."""

    def test_register_assigns_sequential_ids(self):
        """Test that IDs count up across material types."""
        from pathtrace.materials.dispatch import (
            MaterialType,
            get_material_count,
            register_material,
        )

        assert register_material(MaterialType.MATTE, 0) == 0
        assert register_material(MaterialType.REFRACTIVE, 0) == 1
        assert register_material(MaterialType.MATTE, 1) == 2
        assert get_material_count() == 3

    def test_type_lookup(self):
        """Test the kernel-side type and type-index lookups."""
        from pathtrace.materials.dispatch import (
            MaterialType,
            get_material_type,
            get_material_type_index,
            register_material,
        )

        register_material(MaterialType.MATTE, 0)
        register_material(MaterialType.METALLIC, 4)

        types = ti.field(dtype=ti.i32, shape=3)
        indices = ti.field(dtype=ti.i32, shape=3)

        @ti.kernel
        def test_kernel():
            for i in range(3):
                types[i] = get_material_type(i)
                indices[i] = get_material_type_index(i)

        test_kernel()
        assert types[0] == int(MaterialType.MATTE)
        assert types[1] == int(MaterialType.METALLIC)
        assert indices[1] == 4
        # ID 2 was never registered
        assert types[2] == -1
        assert indices[2] == -1

    def test_clear_material_ids(self):
        """Test that clearing forgets all IDs."""
        from pathtrace.materials.dispatch import (
            MaterialType,
            clear_material_ids,
            get_material_count,
            register_material,
        )

        register_material(MaterialType.MATTE, 0)
        clear_material_ids()
        assert get_material_count() == 0


class TestScatterDispatch:
    """Tests for scatter(ray, hit)."""

    def test_dispatch_to_each_type(self):
        """Test that each material ID reaches its own scatter function."""
        from pathtrace.materials.dispatch import MaterialType, register_material
        from pathtrace.materials.matte import add_matte_material
        from pathtrace.materials.metallic import add_metallic_material
        from pathtrace.materials.refractive import add_refractive_material

        matte = register_material(MaterialType.MATTE, add_matte_material((0.1, 0.2, 0.3)))
        metal = register_material(MaterialType.METALLIC, add_metallic_material((0.7, 0.6, 0.5)))
        glass = register_material(MaterialType.REFRACTIVE, add_refractive_material(1.5))

        scattered, attenuation = _scatter_at_floor(matte)
        assert scattered == 1
        assert attenuation == pytest.approx((0.1, 0.2, 0.3), abs=1e-6)

        scattered, attenuation = _scatter_at_floor(metal)
        assert scattered == 1
        assert attenuation == pytest.approx((0.7, 0.6, 0.5), abs=1e-6)

        scattered, attenuation = _scatter_at_floor(glass)
        assert scattered == 1
        assert attenuation == (1.0, 1.0, 1.0)

    @pytest.mark.parametrize("material_id", [-1, 0, 99])
    def test_unknown_material_absorbs(self, material_id):
        """Test that IDs with no registered material absorb the ray."""
        scattered, attenuation = _scatter_at_floor(material_id)
        assert scattered == 0
        assert attenuation == (0.0, 0.0, 0.0)

    def test_overflow_raises(self):
        """Test that exceeding MAX_MATERIALS raises RuntimeError."""
        from pathtrace.materials import dispatch

        dispatch.num_materials[None] = dispatch.MAX_MATERIALS
        with pytest.raises(RuntimeError, match="Maximum number of materials"):
            dispatch.register_material(dispatch.MaterialType.MATTE, 0)
