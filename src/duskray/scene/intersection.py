"""Scene-level primitive intersection testing.

This module is the scene aggregate: it stores every primitive of the scene
(spheres, moon spheres, triangles) in Taichi fields together with the id of
the material each primitive uses, and answers "what is the nearest hit along
this ray" for the integrator.

Materials are referenced by id, so any number of primitives can share one
material. Nothing here is written while a kernel is running.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from duskray.scene.intersection import (
    ...     add_sphere, add_moon_sphere, intersect_scene, clear_scene
    ... )
    >>> clear_scene()
    >>> add_sphere(vec3(0, 0, -1), 0.5, material_id=0)
    >>> add_moon_sphere(vec3(0, 10, 0), 3.0, material_id=1)
    >>> # Use intersect_scene within a Taichi kernel
"""

import taichi as ti
import taichi.math as tm

from duskray.geometry.moon import MoonSphere, hit_moon_sphere
from duskray.geometry.sphere import HitRecord, Sphere, hit_sphere
from duskray.geometry.triangle import Triangle, hit_triangle

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3


@ti.dataclass
class SceneHitRecord:
    """Record of a ray-scene intersection with material information.

    Extends the basic HitRecord with material_id for scene-level queries.

    Attributes:
        hit: Whether the ray intersected any primitive (1 if hit, 0 if miss).
        t: The parameter value along the ray where intersection occurred.
        point: The 3D point where the ray intersected the surface.
        normal: The unit surface normal at the intersection point.
        front_face: Whether the ray hit the front face (1) or back face (0).
        material_id: The material ID of the hit primitive, -1 on a miss.
    """

    hit: ti.i32
    t: ti.f32
    point: vec3
    normal: vec3
    front_face: ti.i32
    material_id: ti.i32


# Maximum number of primitives supported in the scene
MAX_SPHERES = 2048
MAX_MOON_SPHERES = 64
MAX_TRIANGLES = 1024

# Sphere storage: Structure of Arrays layout
sphere_centers = ti.Vector.field(3, dtype=ti.f32, shape=MAX_SPHERES)
sphere_radii = ti.field(dtype=ti.f32, shape=MAX_SPHERES)
sphere_material_ids = ti.field(dtype=ti.i32, shape=MAX_SPHERES)
num_spheres = ti.field(dtype=ti.i32, shape=())

# Moon sphere storage
moon_centers = ti.Vector.field(3, dtype=ti.f32, shape=MAX_MOON_SPHERES)
moon_radii = ti.field(dtype=ti.f32, shape=MAX_MOON_SPHERES)
moon_material_ids = ti.field(dtype=ti.i32, shape=MAX_MOON_SPHERES)
num_moon_spheres = ti.field(dtype=ti.i32, shape=())

# Triangle storage (stored and iterated, never hit)
triangle_p0 = ti.Vector.field(3, dtype=ti.f32, shape=MAX_TRIANGLES)
triangle_p1 = ti.Vector.field(3, dtype=ti.f32, shape=MAX_TRIANGLES)
triangle_p2 = ti.Vector.field(3, dtype=ti.f32, shape=MAX_TRIANGLES)
triangle_material_ids = ti.field(dtype=ti.i32, shape=MAX_TRIANGLES)
num_triangles = ti.field(dtype=ti.i32, shape=())


def clear_scene() -> None:
    """Clear all primitives from the scene.

    Resets the primitive counts to zero. The actual field data is not
    cleared but will be overwritten when new primitives are added.
    """
    num_spheres[None] = 0
    num_moon_spheres[None] = 0
    num_triangles[None] = 0


def add_sphere(center: vec3, radius: float, material_id: int = 0) -> int:
    """Add a sphere to the scene.

    Args:
        center: The center point of the sphere.
        radius: The radius of the sphere (should be positive).
        material_id: The material ID to associate with this sphere.

    Returns:
        The index of the added sphere.

    Raises:
        RuntimeError: If the maximum number of spheres is exceeded.
    """
    idx = num_spheres[None]
    if idx >= MAX_SPHERES:
        raise RuntimeError(f"Maximum number of spheres ({MAX_SPHERES}) exceeded")
    sphere_centers[idx] = center
    sphere_radii[idx] = radius
    sphere_material_ids[idx] = material_id
    num_spheres[None] = idx + 1
    return idx


def add_moon_sphere(center: vec3, radius: float, material_id: int = 0) -> int:
    """Add a moon sphere to the scene.

    Raises:
        RuntimeError: If the maximum number of moon spheres is exceeded.
    """
    idx = num_moon_spheres[None]
    if idx >= MAX_MOON_SPHERES:
        raise RuntimeError(f"Maximum number of moon spheres ({MAX_MOON_SPHERES}) exceeded")
    moon_centers[idx] = center
    moon_radii[idx] = radius
    moon_material_ids[idx] = material_id
    num_moon_spheres[None] = idx + 1
    return idx


def add_triangle(p0: vec3, p1: vec3, p2: vec3, material_id: int = 0) -> int:
    """Add a triangle to the scene.

    Triangles are stored but never reported as hit (see geometry.triangle).

    Raises:
        RuntimeError: If the maximum number of triangles is exceeded.
    """
    idx = num_triangles[None]
    if idx >= MAX_TRIANGLES:
        raise RuntimeError(f"Maximum number of triangles ({MAX_TRIANGLES}) exceeded")
    triangle_p0[idx] = p0
    triangle_p1[idx] = p1
    triangle_p2[idx] = p2
    triangle_material_ids[idx] = material_id
    num_triangles[None] = idx + 1
    return idx


def get_sphere_count() -> int:
    """Get the number of spheres in the scene."""
    return int(num_spheres[None])


def get_moon_sphere_count() -> int:
    """Get the number of moon spheres in the scene."""
    return int(num_moon_spheres[None])


def get_triangle_count() -> int:
    """Get the number of triangles in the scene."""
    return int(num_triangles[None])


@ti.func
def _hit_record_to_scene_hit_record(rec: HitRecord, material_id: ti.i32) -> SceneHitRecord:
    """Convert a HitRecord to a SceneHitRecord with material ID."""
    return SceneHitRecord(
        hit=rec.hit,
        t=rec.t,
        point=rec.point,
        normal=rec.normal,
        front_face=rec.front_face,
        material_id=material_id,
    )


@ti.func
def _make_miss_record() -> SceneHitRecord:
    """Create a SceneHitRecord indicating no intersection."""
    return SceneHitRecord(
        hit=0,
        t=0.0,
        point=vec3(0.0, 0.0, 0.0),
        normal=vec3(0.0, 0.0, 0.0),
        front_face=0,
        material_id=-1,
    )


@ti.func
def intersect_scene(
    ray_origin: vec3,
    ray_direction: vec3,
    t_min: ti.f32,
    t_max: ti.f32,
) -> SceneHitRecord:
    """Find the nearest intersection of a ray with the scene.

    Every primitive is tested with the current closest t as its upper bound,
    so a later primitive only replaces the result when it is strictly nearer.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The direction vector of the ray.
        t_min: Lower bound (exclusive) of the accepted t interval.
        t_max: Upper bound (exclusive) of the accepted t interval.

    Returns:
        A SceneHitRecord for the closest intersection, or a miss record.
    """
    closest_t = t_max
    result = _make_miss_record()

    for i in range(num_spheres[None]):
        sphere = Sphere(center=sphere_centers[i], radius=sphere_radii[i])
        rec = hit_sphere(ray_origin, ray_direction, sphere, t_min, closest_t)
        if rec.hit == 1:
            closest_t = rec.t
            result = _hit_record_to_scene_hit_record(rec, sphere_material_ids[i])

    for i in range(num_moon_spheres[None]):
        moon = MoonSphere(center=moon_centers[i], radius=moon_radii[i])
        rec = hit_moon_sphere(ray_origin, ray_direction, moon, t_min, closest_t)
        if rec.hit == 1:
            closest_t = rec.t
            result = _hit_record_to_scene_hit_record(rec, moon_material_ids[i])

    for i in range(num_triangles[None]):
        triangle = Triangle(p0=triangle_p0[i], p1=triangle_p1[i], p2=triangle_p2[i])
        rec = hit_triangle(ray_origin, ray_direction, triangle, t_min, closest_t)
        if rec.hit == 1:
            closest_t = rec.t
            result = _hit_record_to_scene_hit_record(rec, triangle_material_ids[i])

    return result
