"""Geometry module: hit records and ray-sphere intersection.

Intersection routines are Taichi functions (@ti.func) called from the render
kernel. A query takes an accepted window (t_min, t_max] and returns a
HitRecord whose ``hit`` flag is 0 on a miss.
"""

from .hit import HitRecord, make_hit, miss_record
from .sphere import Sphere, hit_sphere, make_sphere

__all__ = [
    "HitRecord",
    "make_hit",
    "miss_record",
    "Sphere",
    "hit_sphere",
    "make_sphere",
]
