"""Geometry module for shape primitives.

This module provides geometric primitives and intersection algorithms:

Components:
    sphere: Standard sphere plus the HitRecord shared by all primitives
    moon: Sphere variant with outward normals and strict root acceptance
    triangle: Triangle primitive (intersection not implemented, always misses)

All intersection routines are Taichi functions (@ti.func) with the same
contract:
    record = hit_shape(ray_origin, ray_direction, shape, t_min, t_max)
where record.hit tells whether a root inside (t_min, t_max) was found.
"""

from .moon import MoonSphere, hit_moon_sphere, make_moon_sphere
from .sphere import HitRecord, Sphere, hit_sphere, make_miss_hit_record, make_sphere
from .triangle import Triangle, hit_triangle, make_triangle

__all__ = [
    "HitRecord",
    "make_miss_hit_record",
    "Sphere",
    "hit_sphere",
    "make_sphere",
    "MoonSphere",
    "hit_moon_sphere",
    "make_moon_sphere",
    "Triangle",
    "hit_triangle",
    "make_triangle",
]
