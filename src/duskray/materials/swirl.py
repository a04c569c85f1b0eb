"""Swirl material: a procedural, non-physical scattering effect.

Instead of reorienting the ray at the hit point, a swirl surface relocates
it. With f the swirl frequency and p the hit point:

    scale        = sin(f p.x) * sin(f p.y) * sin(f p.z)
    new_position = p * scale
    origin       = new_position
    direction    = normalize(new_position - p)

The attenuation is the albedo and the ray always scatters. Because the new
origin is not on the surface, the continuation ray can start anywhere on the
segment between the world origin and p, which produces the banded swirl
patterns. When scale is exactly 1 the direction is a normalized zero vector
(NaN); the accumulation step zeroes such samples.
"""

import taichi as ti
import taichi.math as tm

from duskray.core.ray import normalize

vec3 = tm.vec3


@ti.dataclass
class SwirlMaterial:
    """Swirl material properties.

    Attributes:
        albedo: The color (RGB) applied to every swirl bounce.
        frequency: Spatial frequency of the sine pattern.
    """

    albedo: vec3
    frequency: ti.f32


@ti.func
def swirl_scale(frequency: ti.f32, point: vec3) -> ti.f32:
    """The scalar sin(f x) * sin(f y) * sin(f z) for a point."""
    p = frequency * point
    return ti.sin(p.x) * ti.sin(p.y) * ti.sin(p.z)


@ti.func
def scatter_swirl(
    albedo: vec3,
    frequency: ti.f32,
    hit_point: vec3,
):
    """Relocate a ray according to the swirl pattern.

    Args:
        albedo: The swirl color (RGB).
        frequency: Spatial frequency of the pattern.
        hit_point: The intersection point.

    Returns:
        A tuple of (scattered_origin, scattered_direction, attenuation,
        did_scatter) with did_scatter always 1.
    """
    scale = swirl_scale(frequency, hit_point)
    new_position = vec3(hit_point.x * scale, hit_point.y * scale, hit_point.z * scale)
    new_direction = normalize(new_position - hit_point)
    return new_position, new_direction, albedo, 1


# =============================================================================
# Material Field Storage (for scene-level material management)
# =============================================================================

MAX_SWIRL_MATERIALS = 256

swirl_albedos = ti.Vector.field(3, dtype=ti.f32, shape=MAX_SWIRL_MATERIALS)
swirl_frequencies = ti.field(dtype=ti.f32, shape=MAX_SWIRL_MATERIALS)
num_swirl_materials = ti.field(dtype=ti.i32, shape=())


def clear_swirl_materials() -> None:
    """Clear all swirl materials."""
    num_swirl_materials[None] = 0


def add_swirl_material(
    albedo: tuple[float, float, float],
    frequency: float,
) -> int:
    """Add a swirl material to the material registry.

    Args:
        albedo: The color as (R, G, B) tuple. Components must be non-negative.
        frequency: Spatial frequency of the pattern. Must be non-negative.

    Returns:
        The index of the added material.

    Raises:
        RuntimeError: If the maximum number of materials is exceeded.
        ValueError: If any albedo component or the frequency is negative.
    """
    for i, component in enumerate(albedo):
        if component < 0.0:
            raise ValueError(f"Albedo component {i} = {component} is negative.")
    if frequency < 0.0:
        raise ValueError(f"Swirl frequency = {frequency} is negative.")

    idx = num_swirl_materials[None]
    if idx >= MAX_SWIRL_MATERIALS:
        raise RuntimeError(
            f"Maximum number of swirl materials ({MAX_SWIRL_MATERIALS}) exceeded"
        )

    swirl_albedos[idx] = vec3(albedo[0], albedo[1], albedo[2])
    swirl_frequencies[idx] = frequency
    num_swirl_materials[None] = idx + 1
    return idx


def get_swirl_material_count() -> int:
    """Get the number of swirl materials in the registry."""
    return int(num_swirl_materials[None])


@ti.func
def get_swirl_albedo(material_idx: ti.i32) -> vec3:
    return swirl_albedos[material_idx]


@ti.func
def get_swirl_frequency(material_idx: ti.i32) -> ti.f32:
    return swirl_frequencies[material_idx]


@ti.func
def scatter_swirl_by_id(material_idx: ti.i32, hit_point: vec3):
    """Relocate a ray at a registered swirl material.

    Returns:
        A tuple of (scattered_origin, scattered_direction, attenuation, did_scatter).
    """
    albedo = get_swirl_albedo(material_idx)
    frequency = get_swirl_frequency(material_idx)
    return scatter_swirl(albedo, frequency, hit_point)
