"""Ray data structure and vector utilities for the path tracer.

This module provides the Ray dataclass together with the small vector and
sampling toolkit every other module builds on. All functions are Taichi
functions (@ti.func) so they can be called from kernels; randomness comes
from ti.random, which Taichi keeps per thread.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> origin = ti.math.vec3(0.0, 0.0, 0.0)
    >>> direction = ti.math.vec3(0.0, 0.0, -1.0)
    >>> ray = Ray(origin=origin, direction=direction)
    >>> point = ray_at(ray, 5.0)  # Point 5 units along the ray
"""

import taichi as ti
import taichi.math as tm

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3

# Components below this magnitude count as zero in near_zero()
NEAR_ZERO_EPSILON = 1e-8


@ti.dataclass
class Ray:
    """A ray with an origin point and direction vector.

    Attributes:
        origin: The starting point of the ray (vec3).
        direction: The direction vector of the ray (vec3). It is not required
            to be unit length; consumers normalize where they need to.
    """

    origin: vec3
    direction: vec3


@ti.func
def ray_at(ray: Ray, t: ti.f32) -> vec3:
    """Compute the point along the ray at parameter t.

    Args:
        ray: The ray to evaluate.
        t: The parameter value. Positive values are in front of the origin.

    Returns:
        The point ray.origin + t * ray.direction.
    """
    return ray.origin + t * ray.direction


@ti.func
def make_ray(origin: vec3, direction: vec3) -> Ray:
    """Create a ray from origin and direction inside a Taichi kernel."""
    return Ray(origin=origin, direction=direction)


# =============================================================================
# Vector Utility Functions
# =============================================================================


@ti.func
def length(v: vec3) -> ti.f32:
    """Euclidean length of a vector."""
    return tm.length(v)


@ti.func
def length_squared(v: vec3) -> ti.f32:
    """Squared length of a vector (no square root)."""
    return tm.dot(v, v)


@ti.func
def normalize(v: vec3) -> vec3:
    """Normalize a vector to unit length.

    A zero-length input yields NaN components; callers guard against that
    where it matters (see near_zero()).
    """
    return tm.normalize(v)


@ti.func
def dot(a: vec3, b: vec3) -> ti.f32:
    return tm.dot(a, b)


@ti.func
def cross(a: vec3, b: vec3) -> vec3:
    return tm.cross(a, b)


@ti.func
def reflect(incident: vec3, normal: vec3) -> vec3:
    """Reflect an incident vector about a normal.

    Implements the mirror law R = I - 2 (I . N) N. The normal should be unit
    length for the result to preserve the length of the incident vector.

    Args:
        incident: The incoming direction vector (pointing toward the surface).
        normal: The surface normal (should be normalized).

    Returns:
        The reflected direction vector.
    """
    return incident - 2.0 * tm.dot(incident, normal) * normal


@ti.func
def refract(uv: vec3, normal: vec3, etai_over_etat: ti.f32) -> vec3:
    """Refract a unit vector through a surface using Snell's law.

    The refracted ray is split into the components perpendicular and
    parallel to the normal:
        r_perp = eta * (uv + cos_theta * n)
        r_par  = -sqrt(|1 - |r_perp|^2|) * n

    Callers are expected to have ruled out total internal reflection first
    (see scatter_dielectric()).

    Args:
        uv: The incoming direction (unit length).
        normal: The surface normal facing the incoming ray (unit length).
        etai_over_etat: Ratio of refractive indices n_incident / n_transmitted.

    Returns:
        The refracted direction.
    """
    cos_theta = tm.min(tm.dot(-uv, normal), 1.0)
    r_out_perp = etai_over_etat * (uv + cos_theta * normal)
    r_out_parallel = -ti.sqrt(ti.abs(1.0 - length_squared(r_out_perp))) * normal
    return r_out_perp + r_out_parallel


@ti.func
def schlick_reflectance(cosine: ti.f32, ref_idx: ti.f32) -> ti.f32:
    """Fresnel reflectance by Schlick's approximation.

    R(cos) = r0 + (1 - r0) * (1 - cos)^5 with r0 = ((1 - n) / (1 + n))^2.
    At normal incidence (cos = 1) the result is exactly r0.

    Args:
        cosine: Cosine of the angle between incident direction and normal.
        ref_idx: Ratio of refractive indices.

    Returns:
        The approximate reflectance in [0, 1].
    """
    r0 = (1.0 - ref_idx) / (1.0 + ref_idx)
    r0 = r0 * r0
    return r0 + (1.0 - r0) * ((1.0 - cosine) ** 5)


@ti.func
def near_zero(v: vec3) -> ti.i32:
    """Check if a vector is near zero in all components.

    Args:
        v: The vector to check.

    Returns:
        1 if every component is within NEAR_ZERO_EPSILON of zero, 0 otherwise.
    """
    s = NEAR_ZERO_EPSILON
    return ti.abs(v.x) < s and ti.abs(v.y) < s and ti.abs(v.z) < s


# =============================================================================
# Random Sampling Utilities for Monte Carlo
# =============================================================================


@ti.func
def random_double() -> ti.f32:
    """Uniform random number in [0, 1)."""
    return ti.random(ti.f32)


@ti.func
def random_double_range(lo: ti.f32, hi: ti.f32) -> ti.f32:
    """Uniform random number in [lo, hi)."""
    return lo + (hi - lo) * ti.random(ti.f32)


@ti.func
def random_unit_vector() -> vec3:
    """Generate a random unit vector uniformly distributed on the sphere.

    Samples z uniformly in [-1, 1] and the azimuth uniformly in [0, 2 pi);
    by Archimedes' hat-box theorem this is uniform over the sphere surface
    and never produces a zero-length vector.

    Returns:
        A random unit vector.
    """
    z = 1.0 - 2.0 * ti.random(ti.f32)
    phi = 2.0 * tm.pi * ti.random(ti.f32)
    r = ti.sqrt(tm.max(0.0, 1.0 - z * z))
    return vec3(r * ti.cos(phi), r * ti.sin(phi), z)


@ti.func
def random_in_unit_disk() -> vec3:
    """Generate a random point inside the unit disk in the xy-plane.

    Used for thin-lens depth-of-field sampling in the camera.

    Returns:
        A random point (x, y, 0) with x^2 + y^2 < 1.
    """
    p = vec3(0.0, 0.0, 0.0)
    found = False
    # Rejection sampling loop
    for _ in range(100):  # Max iterations to avoid infinite loops
        if not found:
            p = vec3(
                ti.random(ti.f32) * 2.0 - 1.0,
                ti.random(ti.f32) * 2.0 - 1.0,
                0.0,
            )
            if p.x * p.x + p.y * p.y < 1.0:
                found = True
    return p
