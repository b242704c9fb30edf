"""Render configuration and Taichi initialization.

RenderConfig collects everything a render run needs apart from the scene.
init_taichi must run before any pathtrace module that allocates Taichi
fields is imported, since ti.init discards previously allocated fields.
"""

from dataclasses import dataclass

import taichi as ti

# Backend names accepted on the command line
ARCHS = {
    "cpu": ti.cpu,
    "gpu": ti.gpu,
}

# Keep in sync with pathtrace.core.integrator.MAX_IMAGE_WIDTH / MAX_IMAGE_HEIGHT
MAX_IMAGE_SIZE = 2048


@dataclass
class RenderConfig:
    """Settings for one render run.

    Attributes:
        width: Image width in pixels.
        height: Image height in pixels.
        samples_per_pixel: Number of jittered samples averaged per pixel.
        max_depth: Maximum number of surface interactions per path.
        seed: Seed for the per-thread random streams (and the demo scene).
        arch: Taichi backend, "cpu" or "gpu".
        batch_size: Samples rendered between progress reports.
        output: Output image path; the format follows the extension.
    """

    width: int = 400
    height: int = 225
    samples_per_pixel: int = 50
    max_depth: int = 50
    seed: int = 42
    arch: str = "cpu"
    batch_size: int = 10
    output: str = "render.png"

    @property
    def aspect_ratio(self) -> float:
        return self.width / self.height

    def validate(self) -> None:
        """Check the settings.

        Raises:
            ValueError: If any setting is out of range.
        """
        if not (0 < self.width <= MAX_IMAGE_SIZE and 0 < self.height <= MAX_IMAGE_SIZE):
            raise ValueError(
                f"Image dimensions must be in 1..{MAX_IMAGE_SIZE}, got {self.width}x{self.height}"
            )
        if self.samples_per_pixel <= 0:
            raise ValueError(f"samples_per_pixel must be positive, got {self.samples_per_pixel}")
        if self.max_depth < 0:
            raise ValueError(f"max_depth must be non-negative, got {self.max_depth}")
        if self.batch_size <= 0:
            raise ValueError(f"batch_size must be positive, got {self.batch_size}")
        if self.arch not in ARCHS:
            raise ValueError(f"Unknown arch {self.arch!r}, expected one of {sorted(ARCHS)}")
        if not self.output:
            raise ValueError("output path must not be empty")


def init_taichi(config: RenderConfig) -> None:
    """Initialize Taichi for the configured backend and seed."""
    ti.init(arch=ARCHS[config.arch], random_seed=config.seed)
