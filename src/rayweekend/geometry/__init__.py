"""Geometry module for shape primitives.

Components:
    sphere: Sphere primitive with closed-form ray-sphere intersection

Intersection routines are Taichi functions (@ti.func) and follow the pattern:
    record = hit_shape(ray_origin, ray_direction, shape, t_min, t_max)

A miss is reported through record.hit == 0, never through an exception.
"""

from .sphere import HitRecord, Sphere, hit_sphere, make_sphere

__all__ = [
    "Sphere",
    "HitRecord",
    "hit_sphere",
    "make_sphere",
]
