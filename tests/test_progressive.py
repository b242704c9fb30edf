"""Tests for the progressive renderer.

This module tests the ProgressiveRenderer class including:
- Initialization and setup
- Progressive sample accumulation
- Progress callbacks and generators
- Reset and resize
- Image output in float and 8-bit form

Note: Imports are done inside test methods to avoid Taichi initialization issues.
The conftest.py fixture initializes Taichi before tests run.
"""

import math

import numpy as np
import pytest


def _setup_simple_scene():
    from pathtrace.camera.thin_lens import ThinLensCamera, setup_camera
    from pathtrace.scene.manager import SceneManager

    scene = SceneManager()
    scene.add_matte_sphere((0.0, 0.0, -2.0), 1.0, albedo=(0.5, 0.5, 0.5))
    setup_camera(
        ThinLensCamera(
            lookfrom=(0.0, 0.0, 0.0),
            lookat=(0.0, 0.0, -1.0),
            vup=(0.0, 1.0, 0.0),
            vfov=math.radians(90.0),
            aspect_ratio=1.0,
        )
    )
    return scene


class TestProgressiveRendererInit:
    """Test ProgressiveRenderer initialization."""

    def test_init_creates_render_target(self):
        """Test that initialization creates a render target with correct dimensions."""
        from pathtrace.core.progressive import ProgressiveRenderer

        renderer = ProgressiveRenderer(128, 96, max_depth=10)

        assert renderer.width == 128
        assert renderer.height == 96
        assert renderer.max_depth == 10
        assert renderer.sample_count == 0

    def test_init_rejects_oversized_dimensions(self):
        """Test that initialization rejects dimensions exceeding max size."""
        from pathtrace.core.progressive import ProgressiveRenderer

        with pytest.raises(ValueError, match="exceed maximum"):
            ProgressiveRenderer(4096, 100)

    def test_init_rejects_negative_depth(self):
        """Test that a negative depth budget is refused."""
        from pathtrace.core.progressive import ProgressiveRenderer

        with pytest.raises(ValueError, match="max_depth"):
            ProgressiveRenderer(16, 16, max_depth=-1)


class TestProgressiveRendering:
    """Test sample accumulation and progress reporting."""

    def test_render_accumulates_samples(self):
        """Test that repeated renders add up."""
        from pathtrace.core.progressive import ProgressiveRenderer

        _setup_simple_scene()
        renderer = ProgressiveRenderer(16, 16)
        renderer.render(3)
        renderer.render(2)
        assert renderer.sample_count == 5

    @pytest.mark.parametrize("num_samples", [0, -3])
    def test_render_with_no_samples_does_nothing(self, num_samples):
        """Test that non-positive sample counts are a no-op."""
        from pathtrace.core.progressive import ProgressiveRenderer

        _setup_simple_scene()
        renderer = ProgressiveRenderer(16, 16)
        renderer.render(num_samples)
        assert renderer.sample_count == 0

    def test_callback_receives_progress(self):
        """Test that the callback sees every batch, ending at the target."""
        from pathtrace.core.progressive import ProgressiveRenderer

        _setup_simple_scene()
        renderer = ProgressiveRenderer(16, 16)
        progress = []
        renderer.render(10, batch_size=4, callback=lambda cur, tgt: progress.append((cur, tgt)))

        assert progress == [(4, 10), (8, 10), (10, 10)]

    def test_callback_with_existing_samples(self):
        """Test that the target includes samples already accumulated."""
        from pathtrace.core.progressive import ProgressiveRenderer

        _setup_simple_scene()
        renderer = ProgressiveRenderer(16, 16)
        renderer.render(2)
        progress = []
        renderer.render(3, batch_size=3, callback=lambda cur, tgt: progress.append((cur, tgt)))

        assert progress == [(5, 5)]

    def test_render_progressive_is_interruptible(self):
        """Test that stopping the generator early stops rendering."""
        from pathtrace.core.progressive import ProgressiveRenderer

        _setup_simple_scene()
        renderer = ProgressiveRenderer(16, 16)
        for current, _ in renderer.render_progressive(100, batch_size=2):
            if current >= 4:
                break

        assert renderer.sample_count == 4

    def test_invalid_batch_size_raises(self):
        """Test that a non-positive batch size raises ValueError."""
        from pathtrace.core.progressive import ProgressiveRenderer

        renderer = ProgressiveRenderer(16, 16)
        with pytest.raises(ValueError, match="batch_size"):
            renderer.render(4, batch_size=0)


class TestProgressiveRendererState:
    """Test reset and resize."""

    def test_reset_clears_sample_count(self):
        """Test that reset clears the sample count and the image."""
        from pathtrace.core.progressive import ProgressiveRenderer

        _setup_simple_scene()
        renderer = ProgressiveRenderer(16, 16)
        renderer.render(3)
        renderer.reset()

        assert renderer.sample_count == 0
        assert np.all(renderer.get_image_numpy(gamma_corrected=False) == 0.0)

    def test_resize_changes_dimensions_and_resets(self):
        """Test that resize applies the new size and clears samples."""
        from pathtrace.core.progressive import ProgressiveRenderer

        _setup_simple_scene()
        renderer = ProgressiveRenderer(16, 16)
        renderer.render(2)
        renderer.resize(32, 8)

        assert (renderer.width, renderer.height) == (32, 8)
        assert renderer.sample_count == 0
        assert renderer.get_image_numpy().shape == (8, 32, 3)

    def test_repr_shows_state(self):
        """Test that repr reports size, depth and samples."""
        from pathtrace.core.progressive import ProgressiveRenderer

        renderer = ProgressiveRenderer(20, 10, max_depth=7)
        text = repr(renderer)
        assert "width=20" in text
        assert "height=10" in text
        assert "max_depth=7" in text
        assert "samples=0" in text


class TestProgressiveRendererOutput:
    """Test image access and saving."""

    def test_gamma_corrected_image_is_sqrt_of_linear(self):
        """Test that the default image is the square root of the linear one."""
        from pathtrace.core.progressive import ProgressiveRenderer

        _setup_simple_scene()
        renderer = ProgressiveRenderer(16, 16)
        renderer.render(4)

        linear = renderer.get_image_numpy(gamma_corrected=False)
        corrected = renderer.get_image_numpy()
        np.testing.assert_allclose(corrected, np.sqrt(linear), atol=1e-6)

    def test_get_image_uint8(self):
        """Test the 8-bit image type, shape and range."""
        from pathtrace.core.progressive import ProgressiveRenderer

        _setup_simple_scene()
        renderer = ProgressiveRenderer(16, 12)
        renderer.render(2)

        image = renderer.get_image_uint8()
        assert image.dtype == np.uint8
        assert image.shape == (12, 16, 3)
        # The sky is bright and the sphere is darker, so both ends are used
        assert image.max() > 200
        assert image.min() < image.max()

    def test_save_image(self, tmp_path):
        """Test that save_image writes a readable file of the right size."""
        from PIL import Image

        from pathtrace.core.progressive import ProgressiveRenderer

        _setup_simple_scene()
        renderer = ProgressiveRenderer(16, 12)
        renderer.render(2)

        path = tmp_path / "render.png"
        renderer.save_image(str(path))

        assert path.exists()
        with Image.open(path) as img:
            assert img.size == (16, 12)
            assert np.array_equal(np.asarray(img), renderer.get_image_uint8())
