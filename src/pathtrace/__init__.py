"""Taichi-based Monte Carlo path tracer.

Renders scenes of spheres with matte, metallic and refractive materials
through a thin-lens camera, averaging many randomly sampled light paths per
pixel.

Subpackages:
    core: Vector algebra, sampling, rays, the path tracing kernel and the
        progressive render driver
    geometry: Hit records and ray-sphere intersection
    materials: Scattering models and material dispatch
    scene: Sphere storage, the scene manager and demo scenes
    camera: Thin-lens camera with ray generation
    output: Gamma correction, quantization and image export
"""

__version__ = "0.1.0"
