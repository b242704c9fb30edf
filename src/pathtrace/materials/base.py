"""Shared material types and parameter validation.

A material's scatter function answers one question per intersection: is the
incoming ray absorbed, or does it continue as a new ray with some color
attenuation? ScatterRecord carries that answer out of the Taichi function.
"""

import taichi as ti
import taichi.math as tm

from pathtrace.core.ray import Ray

vec3 = tm.vec3


@ti.dataclass
class ScatterRecord:
    """Result of scattering a ray at a surface.

    Attributes:
        scattered: 1 if the ray continues, 0 if it was absorbed.
        attenuation: Color factor applied to light returning along the
            scattered ray. Only meaningful if scattered == 1.
        origin: Origin of the outgoing ray (the hit point).
        direction: Direction of the outgoing ray. Not necessarily unit length.
    """

    scattered: ti.i32
    attenuation: vec3
    origin: vec3
    direction: vec3


@ti.func
def make_scatter(attenuation: vec3, origin: vec3, direction: vec3) -> ScatterRecord:
    """Create a record for a ray that continues."""
    return ScatterRecord(
        scattered=1,
        attenuation=attenuation,
        origin=origin,
        direction=direction,
    )


@ti.func
def absorbed() -> ScatterRecord:
    """Create a record for a ray that was absorbed."""
    return ScatterRecord(
        scattered=0,
        attenuation=vec3(0.0, 0.0, 0.0),
        origin=vec3(0.0, 0.0, 0.0),
        direction=vec3(0.0, 0.0, 0.0),
    )


@ti.func
def scattered_ray(rec: ScatterRecord) -> Ray:
    """The outgoing ray described by a scatter record."""
    return Ray(origin=rec.origin, direction=rec.direction)


def validate_color(name: str, color: tuple[float, float, float]) -> None:
    """Check that a reflectance color has three channels in [0, 1].

    Raises:
        ValueError: If the color has the wrong arity or a channel is out of range.
    """
    if len(color) != 3:
        raise ValueError(f"{name} must have 3 components, got {len(color)}")
    for i, component in enumerate(color):
        if not 0.0 <= component <= 1.0:
            raise ValueError(
                f"{name} component {i} = {component} is outside [0, 1]. "
                "This would violate energy conservation."
            )
