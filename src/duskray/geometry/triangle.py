"""Triangle primitive (intersection not implemented).

A triangle is defined by its three vertices p0, p1, p2. The dataclass, the
scene storage and the intersection entry point exist so triangles can be
placed in a scene, but hit_triangle() always reports a miss: vertex winding,
the inside test and the culling policy are still undecided.

Triangles added to a scene are therefore invisible. No error is raised and
nothing in the rendered image hints at the missing geometry.

TODO: implement Moller-Trumbore intersection once the winding and culling
conventions are fixed.
"""

import taichi as ti
import taichi.math as tm

from .sphere import HitRecord, make_miss_hit_record

vec3 = tm.vec3


@ti.dataclass
class Triangle:
    """A triangle defined by three vertices.

    Attributes:
        p0: First vertex (vec3).
        p1: Second vertex (vec3).
        p2: Third vertex (vec3).
    """

    p0: vec3
    p1: vec3
    p2: vec3


@ti.func
def hit_triangle(
    ray_origin: vec3,
    ray_direction: vec3,
    triangle: Triangle,
    t_min: ti.f32,
    t_max: ti.f32,
) -> HitRecord:
    """Ray-triangle intersection stub.

    Returns:
        Always a miss record, whatever the inputs.
    """
    return make_miss_hit_record()


@ti.func
def make_triangle(p0: vec3, p1: vec3, p2: vec3) -> Triangle:
    """Create a triangle from three vertices inside a Taichi kernel."""
    return Triangle(p0=p0, p1=p1, p2=p2)
