"""Intersection records produced when a ray strikes a surface."""

import taichi as ti
import taichi.math as tm

from pathtrace.core.ray import Ray

vec3 = tm.vec3


@ti.dataclass
class HitRecord:
    """Record of a ray-surface intersection.

    Attributes:
        hit: Whether the ray intersected anything (1 if hit, 0 if miss).
        t: The parameter value along the ray where intersection occurred.
            Only valid if hit == 1.
        point: The 3D point where the ray intersected the surface.
            Only valid if hit == 1.
        normal: The unit surface normal at the intersection point, always
            oriented against the incoming ray. Only valid if hit == 1.
        front_face: 1 if the ray approached from outside the surface (the
            side the outward normal points to), 0 otherwise.
        material_id: The unified material ID of the surface. -1 on a miss.
    """

    hit: ti.i32
    t: ti.f32
    point: vec3
    normal: vec3
    front_face: ti.i32
    material_id: ti.i32


@ti.func
def make_hit(
    point: vec3,
    t: ti.f32,
    ray: Ray,
    outward_normal: vec3,
    material_id: ti.i32,
) -> HitRecord:
    """Build a hit record, orienting the normal against the incoming ray.

    Args:
        point: The intersection point.
        t: The ray parameter at the intersection.
        ray: The incoming ray.
        outward_normal: The unit normal pointing out of the surface.
        material_id: The material of the surface that was hit.

    Returns:
        A HitRecord with hit == 1.
    """
    front_face = 0
    normal = -outward_normal
    if tm.dot(ray.direction, outward_normal) < 0.0:
        front_face = 1
        normal = outward_normal

    return HitRecord(
        hit=1,
        t=t,
        point=point,
        normal=normal,
        front_face=front_face,
        material_id=material_id,
    )


@ti.func
def miss_record() -> HitRecord:
    """Create a HitRecord indicating no intersection."""
    return HitRecord(
        hit=0,
        t=0.0,
        point=vec3(0.0, 0.0, 0.0),
        normal=vec3(0.0, 0.0, 0.0),
        front_face=0,
        material_id=-1,
    )
