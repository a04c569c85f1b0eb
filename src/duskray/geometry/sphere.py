"""Sphere primitive and the quadratic shared by every sphere-like shape.

Substituting the ray O + t D into |P - C|^2 = r^2 gives

    a t^2 + 2 half_b t + c = 0
    a = D . D,  half_b = D . (O - C),  c = |O - C|^2 - r^2

with discriminant half_b^2 - a c and roots (-half_b -/+ sqrt(disc)) / a.
The near root is tried before the far one, so the closest surface inside
(t_min, t_max) wins. Spheres and moon spheres differ only in how they treat
a zero discriminant and how they orient the reported normal.
"""

import taichi as ti
import taichi.math as tm

vec3 = tm.vec3


@ti.dataclass
class Sphere:
    """A sphere defined by center point and radius."""

    center: vec3
    radius: ti.f32


@ti.dataclass
class HitRecord:
    """Record of a ray-primitive intersection.

    Attributes:
        hit: 1 if the ray intersected the primitive, 0 otherwise. The other
            fields are only meaningful when hit == 1.
        t: Ray parameter of the intersection.
        point: origin + t * direction.
        normal: Unit surface normal reported by the primitive.
        front_face: 1 if the ray arrived from outside the surface.
    """

    hit: ti.i32
    t: ti.f32
    point: vec3
    normal: vec3
    front_face: ti.i32


@ti.func
def make_miss_hit_record() -> HitRecord:
    return HitRecord(
        hit=0,
        t=0.0,
        point=vec3(0.0, 0.0, 0.0),
        normal=vec3(0.0, 0.0, 0.0),
        front_face=0,
    )


@ti.func
def sphere_discriminant(ray_origin: vec3, ray_direction: vec3, center: vec3, radius: ti.f32):
    """Return (a, half_b, discriminant) of the ray-sphere quadratic."""
    oc = ray_origin - center
    a = tm.dot(ray_direction, ray_direction)
    half_b = tm.dot(oc, ray_direction)
    c = tm.dot(oc, oc) - radius * radius
    return a, half_b, half_b * half_b - a * c


@ti.func
def nearest_root(a: ti.f32, half_b: ti.f32, discriminant: ti.f32, t_min: ti.f32, t_max: ti.f32):
    """Pick the smaller root inside the open window (t_min, t_max).

    The discriminant must be non-negative.

    Returns:
        Tuple of (found, t). found is 0 when neither root lies in the window.
    """
    root = ti.sqrt(discriminant)
    found = 0
    t = (-half_b - root) / a
    if t > t_min and t < t_max:
        found = 1
    else:
        t = (-half_b + root) / a
        if t > t_min and t < t_max:
            found = 1
    return found, t


@ti.func
def hit_sphere(
    ray_origin: vec3,
    ray_direction: vec3,
    sphere: Sphere,
    t_min: ti.f32,
    t_max: ti.f32,
) -> HitRecord:
    """Test for ray-sphere intersection.

    A tangent ray (zero discriminant) counts as a hit. The normal is flipped
    to face the incoming ray and front_face records which side was hit.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The direction vector of the ray (need not be normalized).
        sphere: The sphere to test intersection against.
        t_min: Lower bound (exclusive) of the accepted t interval.
        t_max: Upper bound (exclusive) of the accepted t interval.

    Returns:
        A HitRecord; check its hit field.
    """
    a, half_b, discriminant = sphere_discriminant(ray_origin, ray_direction, sphere.center, sphere.radius)
    result = make_miss_hit_record()

    if discriminant >= 0.0:
        found, t = nearest_root(a, half_b, discriminant, t_min, t_max)
        if found:
            hit_point = ray_origin + t * ray_direction
            outward_normal = (hit_point - sphere.center) / sphere.radius
            front_face = 1
            hit_normal = outward_normal
            if tm.dot(ray_direction, outward_normal) > 0.0:
                front_face = 0
                hit_normal = -outward_normal
            result = HitRecord(
                hit=1,
                t=t,
                point=hit_point,
                normal=hit_normal,
                front_face=front_face,
            )

    return result


@ti.func
def make_sphere(center: vec3, radius: ti.f32) -> Sphere:
    return Sphere(center=center, radius=radius)
