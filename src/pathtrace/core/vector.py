"""Vector algebra for the path tracer.

All per-ray math runs inside Taichi kernels, so every operation here is a
``@ti.func`` over ``taichi.math.vec3``. The same type stands in for points
and RGB colors. Addition, subtraction and scaling come from the vector
operators themselves; this module adds the named operations the scattering
code needs.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from pathtrace.core.vector import reflect, unit_vector, vec3
    >>> @ti.kernel
    ... def mirror() -> vec3:
    ...     return reflect(unit_vector(vec3(1.0, -1.0, 0.0)), vec3(0.0, 1.0, 0.0))
"""

import taichi as ti
import taichi.math as tm

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3

# Components below this magnitude count as zero
NEAR_ZERO_EPSILON = 1e-8


@ti.func
def dot(a: vec3, b: vec3) -> ti.f32:
    """Compute the dot product a . b."""
    return tm.dot(a, b)


@ti.func
def cross(a: vec3, b: vec3) -> vec3:
    """Compute the cross product a x b."""
    return tm.cross(a, b)


@ti.func
def length_squared(v: vec3) -> ti.f32:
    """Compute the squared length of a vector.

    Cheaper than length() when only comparing magnitudes.
    """
    return tm.dot(v, v)


@ti.func
def length(v: vec3) -> ti.f32:
    """Compute the Euclidean length of a vector."""
    return ti.sqrt(length_squared(v))


@ti.func
def unit_vector(v: vec3) -> vec3:
    """Scale a vector to unit length.

    The input must have nonzero length. A zero vector produces NaN
    components; callers are responsible for never passing one.

    Args:
        v: The input vector.

    Returns:
        v divided by its length.
    """
    return v / length(v)


@ti.func
def component_mul(a: vec3, b: vec3) -> vec3:
    """Element-wise product, used to compound color attenuation."""
    return vec3(a.x * b.x, a.y * b.y, a.z * b.z)


@ti.func
def near_zero(v: vec3) -> ti.i32:
    """Check if a vector is near zero in all components.

    Args:
        v: The vector to check.

    Returns:
        1 if every component is below NEAR_ZERO_EPSILON in magnitude, 0 otherwise.
    """
    s = NEAR_ZERO_EPSILON
    result = 0
    if ti.abs(v.x) < s and ti.abs(v.y) < s and ti.abs(v.z) < s:
        result = 1
    return result


@ti.func
def reflect(v: vec3, n: vec3) -> vec3:
    """Reflect v about the plane whose normal is n.

    Computes v - 2 (v . n) n. The normal should be unit length.
    """
    return v - 2.0 * tm.dot(v, n) * n


@ti.func
def refract(v: vec3, n: vec3, ratio: ti.f32) -> vec3:
    """Refract a unit direction through a surface.

    Splits the outgoing direction into a part perpendicular to the normal,
    ratio * (v + cos_theta * n), and a part parallel to it,
    -n * sqrt(|1 - |perp|^2|). The absolute value keeps the square root
    real when the caller refracts past the critical angle anyway.

    Args:
        v: The incoming direction (unit length).
        n: The surface normal facing against v (unit length).
        ratio: Ratio of refractive indices, incident over transmitted.

    Returns:
        The refracted direction.
    """
    cos_theta = tm.min(tm.dot(-v, n), 1.0)
    r_out_perp = ratio * (v + cos_theta * n)
    r_out_parallel = -ti.sqrt(ti.abs(1.0 - length_squared(r_out_perp))) * n
    return r_out_perp + r_out_parallel


@ti.func
def schlick_reflectance(cosine: ti.f32, ratio: ti.f32) -> ti.f32:
    """Schlick's approximation of Fresnel reflectance.

    Args:
        cosine: Cosine of the angle between the incoming ray and the normal.
        ratio: Ratio of refractive indices.

    Returns:
        r0 + (1 - r0)(1 - cosine)^5 with r0 = ((1 - ratio) / (1 + ratio))^2.
    """
    r0 = (1.0 - ratio) / (1.0 + ratio)
    r0 = r0 * r0
    return r0 + (1.0 - r0) * ((1.0 - cosine) ** 5)
