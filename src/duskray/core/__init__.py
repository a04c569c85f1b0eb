"""Core rendering module.

Components:
    ray: Ray data structure, vector helpers and random sampling
    integrator: Radiance estimator, render target and accumulation kernels
    progressive: ProgressiveRenderer wrapper with batching and callbacks

All compute-intensive operations use Taichi kernels.
"""

from .ray import (
    NEAR_ZERO_EPSILON,
    Ray,
    cross,
    dot,
    length,
    length_squared,
    make_ray,
    near_zero,
    normalize,
    random_double,
    random_double_range,
    random_in_unit_disk,
    random_unit_vector,
    ray_at,
    reflect,
    refract,
    schlick_reflectance,
    vec3,
)

# Note: integrator and progressive are NOT imported here to avoid circular imports.
# Import directly from duskray.core.integrator or duskray.core.progressive when needed.

__all__ = [
    "Ray",
    "ray_at",
    "make_ray",
    "vec3",
    "NEAR_ZERO_EPSILON",
    "length",
    "length_squared",
    "normalize",
    "dot",
    "cross",
    "reflect",
    "refract",
    "schlick_reflectance",
    "near_zero",
    "random_double",
    "random_double_range",
    "random_unit_vector",
    "random_in_unit_disk",
]
