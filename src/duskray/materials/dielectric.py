"""Dielectric (glass/water) material implementation.

This module implements transparent materials that either reflect or refract
every incoming ray and never absorb it.

Key physics:
    - Snell's law for refraction: n1 * sin(theta1) = n2 * sin(theta2)
    - Schlick's approximation for Fresnel reflectance
    - Total internal reflection when ratio * sin(theta) > 1

When refraction is possible the choice between reflection and refraction is
made stochastically: one uniform random number is drawn and the ray reflects
if it falls below the Schlick reflectance.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from duskray.materials.dielectric import scatter_dielectric
    >>> # Use within a Taichi kernel:
    >>> # origin, direction, attenuation, did_scatter = scatter_dielectric(
    >>> #     ior, incident_dir, hit_point, normal, front_face
    >>> # )
"""

import taichi as ti
import taichi.math as tm

from duskray.core.ray import (
    normalize,
    random_double,
    reflect,
    refract,
    schlick_reflectance,
)

# Type alias for 3D vectors
vec3 = tm.vec3


@ti.dataclass
class DielectricMaterial:
    """Dielectric (glass/water) material properties.

    Attributes:
        ior: Index of refraction. Common values:
            - Air: 1.0
            - Water: 1.33
            - Glass: 1.5
            - Diamond: 2.4
    """

    ior: ti.f32


@ti.func
def refraction_ratio_for(ior: ti.f32, front_face: ti.i32) -> ti.f32:
    """Ratio n_incident / n_transmitted for a hit on the given face.

    Entering the medium (front face) gives 1 / ior, leaving it gives ior.
    """
    ratio = 1.0 / ior
    if front_face == 0:
        ratio = ior
    return ratio


@ti.func
def cannot_refract(
    ior: ti.f32,
    incident_direction: vec3,
    normal: vec3,
    front_face: ti.i32,
) -> ti.i32:
    """Check whether total internal reflection forces a reflection.

    Returns:
        1 if ratio * sin(theta) > 1, 0 otherwise.
    """
    ratio = refraction_ratio_for(ior, front_face)
    unit_direction = normalize(incident_direction)
    cos_theta = tm.min(tm.dot(-unit_direction, normal), 1.0)
    sin_theta = ti.sqrt(1.0 - cos_theta * cos_theta)
    return ratio * sin_theta > 1.0


@ti.func
def scatter_dielectric(
    ior: ti.f32,
    incident_direction: vec3,
    hit_point: vec3,
    normal: vec3,
    front_face: ti.i32,
):
    """Reflect or refract a ray at a dielectric surface.

    Args:
        ior: Index of refraction of the material.
        incident_direction: The incoming ray direction (any length).
        hit_point: The intersection point.
        normal: The unit surface normal facing the incoming ray.
        front_face: 1 if the ray enters the material, 0 if it leaves it.

    Returns:
        A tuple of (scattered_origin, scattered_direction, attenuation,
        did_scatter). The attenuation is white and did_scatter is always 1.
    """
    attenuation = vec3(1.0, 1.0, 1.0)
    ratio = refraction_ratio_for(ior, front_face)

    unit_direction = normalize(incident_direction)
    cos_theta = tm.min(tm.dot(-unit_direction, normal), 1.0)
    sin_theta = ti.sqrt(1.0 - cos_theta * cos_theta)

    total_internal = ratio * sin_theta > 1.0

    direction = vec3(0.0, 0.0, 0.0)
    if total_internal or random_double() < schlick_reflectance(cos_theta, ratio):
        direction = reflect(unit_direction, normal)
    else:
        direction = refract(unit_direction, normal, ratio)

    return hit_point, direction, attenuation, 1


@ti.func
def fresnel_reflectance(
    ior: ti.f32,
    incident_direction: vec3,
    normal: vec3,
    front_face: ti.i32,
) -> ti.f32:
    """Schlick reflectance for the given incidence.

    Returns:
        The probability in [0, 1] that scatter_dielectric() reflects when
        refraction is possible.
    """
    ratio = refraction_ratio_for(ior, front_face)
    unit_direction = normalize(incident_direction)
    cos_theta = tm.min(tm.dot(-unit_direction, normal), 1.0)
    return schlick_reflectance(cos_theta, ratio)


# =============================================================================
# Material Field Storage (for scene-level material management)
# =============================================================================

# Maximum number of dielectric materials in the scene
MAX_DIELECTRIC_MATERIALS = 256

# Storage for dielectric material properties
dielectric_iors = ti.field(dtype=ti.f32, shape=MAX_DIELECTRIC_MATERIALS)
num_dielectric_materials = ti.field(dtype=ti.i32, shape=())


def clear_dielectric_materials() -> None:
    """Clear all dielectric materials.

    Resets the material count to zero. Existing data in the field will be
    overwritten when new materials are added.
    """
    num_dielectric_materials[None] = 0


def add_dielectric_material(ior: float = 1.5) -> int:
    """Add a dielectric material to the material registry.

    Args:
        ior: Index of refraction. Default is 1.5 (typical glass).
            Must be positive.

    Returns:
        The index of the added material.

    Raises:
        RuntimeError: If the maximum number of materials is exceeded.
        ValueError: If IOR is not positive.
    """
    if ior <= 0.0:
        raise ValueError(f"Index of refraction = {ior} must be positive.")

    idx = num_dielectric_materials[None]
    if idx >= MAX_DIELECTRIC_MATERIALS:
        raise RuntimeError(
            f"Maximum number of dielectric materials ({MAX_DIELECTRIC_MATERIALS}) exceeded"
        )

    dielectric_iors[idx] = ior
    num_dielectric_materials[None] = idx + 1
    return idx


def get_dielectric_material_count() -> int:
    """Get the number of dielectric materials in the registry."""
    return int(num_dielectric_materials[None])


@ti.func
def get_dielectric_ior(material_idx: ti.i32) -> ti.f32:
    """Get the IOR for a dielectric material by index."""
    return dielectric_iors[material_idx]


@ti.func
def scatter_dielectric_by_id(
    material_idx: ti.i32,
    incident_direction: vec3,
    hit_point: vec3,
    normal: vec3,
    front_face: ti.i32,
):
    """Reflect or refract at a registered dielectric material.

    Returns:
        A tuple of (scattered_origin, scattered_direction, attenuation, did_scatter).
    """
    ior = get_dielectric_ior(material_idx)
    return scatter_dielectric(ior, incident_direction, hit_point, normal, front_face)
