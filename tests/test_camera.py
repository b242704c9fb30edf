"""Tests for the thin-lens camera.

Tests cover:
- Camera parameter validation
- Derived basis and viewport
- Ray generation with and without an aperture
"""

import math

import numpy as np
import pytest
import taichi as ti

N_RAYS = 1024


def _default_camera(**overrides):
    from pathtrace.camera.thin_lens import ThinLensCamera

    params = {
        "lookfrom": (0.0, 0.0, 0.0),
        "lookat": (0.0, 0.0, -1.0),
        "vup": (0.0, 1.0, 0.0),
        "vfov": math.radians(90.0),
        "aspect_ratio": 2.0,
        "aperture": 0.0,
    }
    params.update(overrides)
    return ThinLensCamera(**params)


class TestCameraValidation:
    """Tests for ThinLensCamera.validate."""

    @pytest.mark.parametrize(
        "overrides,match",
        [
            ({"lookat": (0.0, 0.0, 0.0)}, "distinct"),
            ({"vup": (0.0, 0.0, 1.0)}, "parallel"),
            ({"vfov": 0.0}, "vfov"),
            ({"vfov": math.pi}, "vfov"),
            ({"aspect_ratio": 0.0}, "aspect_ratio"),
            ({"aspect_ratio": math.inf}, "aspect_ratio"),
            ({"aperture": -0.1}, "aperture"),
            ({"aperture": math.nan}, "aperture"),
            ({"aperture": math.inf}, "aperture"),
        ],
    )
    def test_rejects_degenerate_camera(self, overrides, match):
        """Test that degenerate configurations raise ValueError."""
        from pathtrace.camera.thin_lens import setup_camera

        with pytest.raises(ValueError, match=match):
            setup_camera(_default_camera(**overrides))


class TestCameraSetup:
    """Tests for the derived camera state."""

    def test_basis_for_default_view(self):
        """Test the basis and viewport of a camera looking down -z."""
        from pathtrace.camera.thin_lens import get_camera_info, setup_camera

        setup_camera(_default_camera())
        info = get_camera_info()

        np.testing.assert_allclose(info["w"], (0.0, 0.0, 1.0), atol=1e-6)
        np.testing.assert_allclose(info["u"], (1.0, 0.0, 0.0), atol=1e-6)
        np.testing.assert_allclose(info["v"], (0.0, 1.0, 0.0), atol=1e-6)
        # 90 degree vfov at focus distance 1: viewport 2 high, 4 wide
        np.testing.assert_allclose(info["horizontal"], (4.0, 0.0, 0.0), atol=1e-5)
        np.testing.assert_allclose(info["vertical"], (0.0, 2.0, 0.0), atol=1e-5)
        np.testing.assert_allclose(info["lower_left"], (-2.0, -1.0, -1.0), atol=1e-5)
        assert info["lens_radius"] == 0.0

    def test_viewport_scales_with_focus_distance(self):
        """Test that the image plane sits at the look-at distance."""
        from pathtrace.camera.thin_lens import get_camera_info, setup_camera

        setup_camera(_default_camera(lookat=(0.0, 0.0, -10.0), aperture=2.0))
        info = get_camera_info()

        np.testing.assert_allclose(info["vertical"], (0.0, 20.0, 0.0), atol=1e-4)
        assert abs(info["lower_left"][2] + 10.0) < 1e-5
        assert abs(info["lens_radius"] - 1.0) < 1e-6


class TestRayGeneration:
    """Tests for get_ray and get_ray_jittered."""

    def test_center_ray_points_at_lookat(self):
        """Test that the ray through (0.5, 0.5) aims at the look-at point."""
        from pathtrace.camera.thin_lens import get_ray, setup_camera

        setup_camera(_default_camera(lookfrom=(13.0, 2.0, 3.0), lookat=(0.0, 0.0, 0.0)))
        direction = ti.Vector.field(3, dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel():
            for _ in range(1):
                direction[None] = get_ray(0.5, 0.5).direction

        test_kernel()
        np.testing.assert_allclose(direction[None].to_numpy(), (-13.0, -2.0, -3.0), atol=1e-4)

    def test_zero_aperture_rays_share_camera_origin(self):
        """Test that a pinhole camera never jitters the ray origin."""
        from pathtrace.camera.thin_lens import get_ray, setup_camera

        lookfrom = (1.0, 2.0, 3.0)
        setup_camera(_default_camera(lookfrom=lookfrom, lookat=(0.0, 0.0, 0.0), aperture=0.0))
        origins = ti.Vector.field(3, dtype=ti.f32, shape=N_RAYS)

        @ti.kernel
        def test_kernel():
            for i in range(N_RAYS):
                s = ti.cast(i % 32, ti.f32) / 31.0
                t = ti.cast(i // 32, ti.f32) / 31.0
                origins[i] = get_ray(s, t).origin

        test_kernel()
        np.testing.assert_allclose(origins.to_numpy(), [lookfrom] * N_RAYS, atol=1e-6)

    def test_aperture_spreads_origins_on_lens(self):
        """Test that ray origins lie on the lens disc and still meet at the focus plane."""
        from pathtrace.camera.thin_lens import get_ray, setup_camera

        setup_camera(_default_camera(lookat=(0.0, 0.0, -5.0), aperture=1.0))
        origins = ti.Vector.field(3, dtype=ti.f32, shape=N_RAYS)
        targets = ti.Vector.field(3, dtype=ti.f32, shape=N_RAYS)

        @ti.kernel
        def test_kernel():
            for i in range(N_RAYS):
                ray = get_ray(0.5, 0.5)
                origins[i] = ray.origin
                targets[i] = ray.origin + ray.direction

        test_kernel()
        o = origins.to_numpy()
        radii = np.linalg.norm(o[:, :2], axis=1)
        assert np.all(radii < 0.5 + 1e-6)
        assert radii.max() > 0.1
        np.testing.assert_allclose(o[:, 2], 0.0, atol=1e-6)
        # Every ray passes through the in-focus look-at point
        np.testing.assert_allclose(targets.to_numpy(), [(0.0, 0.0, -5.0)] * N_RAYS, atol=1e-4)

    def test_jittered_ray_stays_inside_pixel(self):
        """Test that jittered rays hit the image plane inside their pixel."""
        from pathtrace.camera.thin_lens import get_ray_jittered, setup_camera

        setup_camera(_default_camera())
        targets = ti.Vector.field(3, dtype=ti.f32, shape=N_RAYS)
        width, height = 8, 4

        @ti.kernel
        def test_kernel(w: ti.i32, h: ti.i32):
            for i in range(N_RAYS):
                ray = get_ray_jittered(3, 1, w, h)
                targets[i] = ray.origin + ray.direction

        test_kernel(width, height)
        t = targets.to_numpy()
        # Image plane spans x in [-2, 2], y in [-1, 1]; pixel (3, 1) covers
        # x in [-0.5, 0], y in [-0.5, 0]
        assert np.all((t[:, 0] >= -0.5 - 1e-5) & (t[:, 0] <= 0.0 + 1e-5))
        assert np.all((t[:, 1] >= -0.5 - 1e-5) & (t[:, 1] <= 0.0 + 1e-5))
