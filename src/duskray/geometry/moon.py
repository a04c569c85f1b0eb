"""Moon sphere: the sphere variant used for the moon of the night scene.

Geometrically this is a plain sphere, but its intersection routine follows a
stricter and simpler policy than hit_sphere():

- a ray with a non-positive discriminant misses, so tangent rays are
  rejected;
- the roots are computed with the textbook formula
  (-half_b -/+ sqrt(discriminant)) / a;
- the near root is checked against the open window (t_min, t_max) first and
  the far root is checked against the same window only when the near root
  was rejected;
- the normal is always the outward normal (p - C) / r. It is never flipped
  toward the ray, and front_face is always reported as 1.

A ray starting inside the sphere therefore gets the far root with an
outward normal, which is what gives the moon its hollow look when a
dielectric or metal ray ends up inside it.
"""

import taichi as ti
import taichi.math as tm

from .sphere import HitRecord, make_miss_hit_record, nearest_root, sphere_discriminant

vec3 = tm.vec3


@ti.dataclass
class MoonSphere:
    """A moon sphere defined by center point and radius.

    Attributes:
        center: The center point (vec3).
        radius: The radius (positive float).
    """

    center: vec3
    radius: ti.f32


@ti.func
def hit_moon_sphere(
    ray_origin: vec3,
    ray_direction: vec3,
    moon: MoonSphere,
    t_min: ti.f32,
    t_max: ti.f32,
) -> HitRecord:
    """Test for ray intersection with a moon sphere.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The direction vector of the ray (need not be normalized).
        moon: The moon sphere to test against.
        t_min: Lower bound (exclusive) of the accepted t interval.
        t_max: Upper bound (exclusive) of the accepted t interval.

    Returns:
        A HitRecord for the smallest accepted root, or a miss record.
    """
    a, half_b, discriminant = sphere_discriminant(ray_origin, ray_direction, moon.center, moon.radius)
    result = make_miss_hit_record()

    if discriminant > 0.0:
        found, t = nearest_root(a, half_b, discriminant, t_min, t_max)
        if found:
            hit_point = ray_origin + t * ray_direction
            result = HitRecord(
                hit=1,
                t=t,
                point=hit_point,
                normal=(hit_point - moon.center) / moon.radius,
                front_face=1,
            )

    return result


@ti.func
def make_moon_sphere(center: vec3, radius: ti.f32) -> MoonSphere:
    """Create a moon sphere from center and radius inside a Taichi kernel."""
    return MoonSphere(center=center, radius=radius)
