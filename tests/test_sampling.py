"""Tests for random sampling utilities.

Each test draws many samples in parallel and checks the range and rough
statistics of the results. Taichi's per-thread generators are seeded by
ti.init in conftest.py.
"""

import numpy as np
import taichi as ti

N_SAMPLES = 4096


class TestScalars:
    """Tests for uniform and uniform_range."""

    def test_uniform_in_unit_interval(self):
        """Test that uniform() lies in [0, 1) with mean near 0.5."""
        from pathtrace.core.sampling import uniform

        samples = ti.field(dtype=ti.f32, shape=N_SAMPLES)

        @ti.kernel
        def test_kernel():
            for i in range(N_SAMPLES):
                samples[i] = uniform()

        test_kernel()
        values = samples.to_numpy()
        assert values.min() >= 0.0
        assert values.max() < 1.0
        assert abs(values.mean() - 0.5) < 0.03

    def test_uniform_range(self):
        """Test that uniform_range(lo, hi) lies in [lo, hi)."""
        from pathtrace.core.sampling import uniform_range

        samples = ti.field(dtype=ti.f32, shape=N_SAMPLES)

        @ti.kernel
        def test_kernel():
            for i in range(N_SAMPLES):
                samples[i] = uniform_range(-2.0, 3.0)

        test_kernel()
        values = samples.to_numpy()
        assert values.min() >= -2.0
        assert values.max() < 3.0
        assert abs(values.mean() - 0.5) < 0.15

    def test_random_color_range(self):
        """Test that every channel of random_color_range is in range."""
        from pathtrace.core.sampling import random_color, random_color_range

        ranged = ti.Vector.field(3, dtype=ti.f32, shape=N_SAMPLES)
        unit = ti.Vector.field(3, dtype=ti.f32, shape=N_SAMPLES)

        @ti.kernel
        def test_kernel():
            for i in range(N_SAMPLES):
                ranged[i] = random_color_range(0.5, 1.0)
                unit[i] = random_color()

        test_kernel()
        ranged_values = ranged.to_numpy()
        unit_values = unit.to_numpy()
        assert ranged_values.min() >= 0.5
        assert ranged_values.max() < 1.0
        assert unit_values.min() >= 0.0
        assert unit_values.max() < 1.0


class TestPoints:
    """Tests for points in and on the unit sphere and disc."""

    def test_random_in_unit_sphere_inside(self):
        """Test that every point lies strictly inside the unit ball."""
        from pathtrace.core.sampling import random_in_unit_sphere

        samples = ti.Vector.field(3, dtype=ti.f32, shape=N_SAMPLES)

        @ti.kernel
        def test_kernel():
            for i in range(N_SAMPLES):
                samples[i] = random_in_unit_sphere()

        test_kernel()
        points = samples.to_numpy()
        lengths_sq = np.sum(points**2, axis=1)
        assert np.all(lengths_sq < 1.0)
        # Centered on the origin
        assert np.all(np.abs(points.mean(axis=0)) < 0.05)

    def test_random_on_unit_sphere_has_unit_length(self):
        """Test that every direction has length 1."""
        from pathtrace.core.sampling import random_on_unit_sphere

        samples = ti.Vector.field(3, dtype=ti.f32, shape=N_SAMPLES)

        @ti.kernel
        def test_kernel():
            for i in range(N_SAMPLES):
                samples[i] = random_on_unit_sphere()

        test_kernel()
        lengths = np.linalg.norm(samples.to_numpy(), axis=1)
        np.testing.assert_allclose(lengths, 1.0, atol=1e-5)

    def test_random_on_unit_sphere_covers_all_octants(self):
        """Test that directions point into every octant."""
        from pathtrace.core.sampling import random_on_unit_sphere

        samples = ti.Vector.field(3, dtype=ti.f32, shape=N_SAMPLES)

        @ti.kernel
        def test_kernel():
            for i in range(N_SAMPLES):
                samples[i] = random_on_unit_sphere()

        test_kernel()
        signs = samples.to_numpy() > 0.0
        octants = {tuple(row) for row in signs}
        assert len(octants) == 8

    def test_random_in_unit_disc(self):
        """Test that disc points lie in the xy-plane inside the unit circle."""
        from pathtrace.core.sampling import random_in_unit_disc

        samples = ti.Vector.field(3, dtype=ti.f32, shape=N_SAMPLES)

        @ti.kernel
        def test_kernel():
            for i in range(N_SAMPLES):
                samples[i] = random_in_unit_disc()

        test_kernel()
        points = samples.to_numpy()
        assert np.all(points[:, 2] == 0.0)
        assert np.all(points[:, 0] ** 2 + points[:, 1] ** 2 < 1.0)
        # The whole disc is used, not only a small core
        assert np.max(points[:, 0] ** 2 + points[:, 1] ** 2) > 0.9
