"""Sphere primitive and ray-sphere intersection.

The ray-sphere intersection solves

    |O + t D - C|^2 = r^2

which, with oc = O - C, expands to the quadratic a t^2 + 2 h t + c = 0 where

    a = D . D
    h = oc . D          (half of the usual 'b')
    c = oc . oc - r^2

The nearer root is preferred; the farther root is only used when the nearer
one falls outside the (t_min, t_max] window. The scene relies on this to
shrink its search window as closer hits are found.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from pathtrace.geometry.sphere import Sphere, hit_sphere
    >>> sphere = Sphere(center=ti.math.vec3(0, 0, -1), radius=0.5, material_id=0)
    >>> # Use hit_sphere within a Taichi kernel
"""

import taichi as ti
import taichi.math as tm

from pathtrace.core.ray import Ray, ray_at
from pathtrace.geometry.hit import HitRecord, make_hit, miss_record

vec3 = tm.vec3


@ti.dataclass
class Sphere:
    """A sphere defined by center point and radius.

    Attributes:
        center: The center point of the sphere (vec3).
        radius: The radius of the sphere (positive float).
        material_id: The unified material ID shared with other geometry.
    """

    center: vec3
    radius: ti.f32
    material_id: ti.i32


@ti.func
def _in_window(t: ti.f32, t_min: ti.f32, t_max: ti.f32) -> ti.i32:
    result = 0
    if t > t_min and t <= t_max:
        result = 1
    return result


@ti.func
def hit_sphere(ray: Ray, sphere: Sphere, t_min: ti.f32, t_max: ti.f32) -> HitRecord:
    """Test a ray against a sphere.

    Args:
        ray: The ray to test.
        sphere: The sphere to test against.
        t_min: Hits at or below this parameter are ignored.
        t_max: Hits above this parameter are ignored.

    Returns:
        A HitRecord for the closest root inside (t_min, t_max], or a miss
        record if neither root is in the window.
    """
    oc = ray.origin - sphere.center
    a = tm.dot(ray.direction, ray.direction)
    half_b = tm.dot(oc, ray.direction)
    c = tm.dot(oc, oc) - sphere.radius * sphere.radius
    discriminant = half_b * half_b - a * c

    result = miss_record()

    if discriminant >= 0.0:
        sqrt_d = ti.sqrt(discriminant)

        t = (-half_b - sqrt_d) / a
        valid = _in_window(t, t_min, t_max)
        if valid == 0:
            t = (-half_b + sqrt_d) / a
            valid = _in_window(t, t_min, t_max)

        if valid == 1:
            point = ray_at(ray, t)
            outward_normal = (point - sphere.center) / sphere.radius
            result = make_hit(point, t, ray, outward_normal, sphere.material_id)

    return result


@ti.func
def make_sphere(center: vec3, radius: ti.f32, material_id: ti.i32) -> Sphere:
    """Create a sphere inside a Taichi kernel."""
    return Sphere(center=center, radius=radius, material_id=material_id)
