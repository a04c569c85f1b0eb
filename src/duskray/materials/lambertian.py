"""Lambertian (ideal diffuse) material implementation.

A Lambertian surface scatters every incoming ray. The outgoing direction is
the surface normal plus a random unit vector, which distributes scattered
rays proportionally to cos(theta) around the normal without any explicit
pdf bookkeeping. The attenuation is the albedo.

If the random unit vector happens to cancel the normal, the scatter
direction is replaced by the normal itself so no zero-length direction is
ever handed to the next bounce.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from duskray.materials.lambertian import scatter_lambertian
    >>> # Use within a Taichi kernel:
    >>> # origin, direction, attenuation, did_scatter = scatter_lambertian(
    >>> #     albedo, hit_point, normal
    >>> # )
"""

import taichi as ti
import taichi.math as tm

from duskray.core.ray import near_zero, random_unit_vector

# Type alias for 3D vectors
vec3 = tm.vec3


@ti.dataclass
class LambertianMaterial:
    """Lambertian (ideal diffuse) material properties.

    Attributes:
        albedo: The diffuse reflectance color (RGB). Components above 1 are
            allowed and make the surface amplify light.
    """

    albedo: vec3


@ti.func
def lambertian_direction(normal: vec3, offset: vec3) -> vec3:
    """Return normal + offset, or the normal itself if the sum is near zero."""
    scatter_direction = normal + offset
    if near_zero(scatter_direction):
        scatter_direction = normal
    return scatter_direction


@ti.func
def scatter_lambertian(
    albedo: vec3,
    hit_point: vec3,
    normal: vec3,
):
    """Scatter a ray off a Lambertian surface.

    Args:
        albedo: The diffuse reflectance color (RGB).
        hit_point: The intersection point.
        normal: The unit surface normal at the hit point.

    Returns:
        A tuple of (scattered_origin, scattered_direction, attenuation,
        did_scatter). The direction is normal + random_unit_vector() and is
        not normalized; did_scatter is always 1.
    """
    return hit_point, lambertian_direction(normal, random_unit_vector()), albedo, 1


# =============================================================================
# Material Field Storage (for scene-level material management)
# =============================================================================

# Maximum number of Lambertian materials in the scene
MAX_LAMBERTIAN_MATERIALS = 2048

# Storage for Lambertian material properties
lambertian_albedos = ti.Vector.field(3, dtype=ti.f32, shape=MAX_LAMBERTIAN_MATERIALS)
num_lambertian_materials = ti.field(dtype=ti.i32, shape=())


def clear_lambertian_materials() -> None:
    """Clear all Lambertian materials.

    Resets the material count to zero. Existing data in the field will be
    overwritten when new materials are added.
    """
    num_lambertian_materials[None] = 0


def add_lambertian_material(albedo: tuple[float, float, float]) -> int:
    """Add a Lambertian material to the material registry.

    Args:
        albedo: The diffuse reflectance color as (R, G, B) tuple.
            Components must be non-negative; values above 1 are accepted.

    Returns:
        The index of the added material.

    Raises:
        RuntimeError: If the maximum number of materials is exceeded.
        ValueError: If any albedo component is negative.
    """
    for i, component in enumerate(albedo):
        if component < 0.0:
            raise ValueError(f"Albedo component {i} = {component} is negative.")

    idx = num_lambertian_materials[None]
    if idx >= MAX_LAMBERTIAN_MATERIALS:
        raise RuntimeError(
            f"Maximum number of Lambertian materials ({MAX_LAMBERTIAN_MATERIALS}) exceeded"
        )

    lambertian_albedos[idx] = vec3(albedo[0], albedo[1], albedo[2])
    num_lambertian_materials[None] = idx + 1
    return idx


def get_lambertian_material_count() -> int:
    """Get the number of Lambertian materials in the registry."""
    return int(num_lambertian_materials[None])


@ti.func
def get_lambertian_albedo(material_idx: ti.i32) -> vec3:
    """Get the albedo for a Lambertian material by index."""
    return lambertian_albedos[material_idx]


@ti.func
def scatter_lambertian_by_id(
    material_idx: ti.i32,
    hit_point: vec3,
    normal: vec3,
):
    """Scatter off a registered Lambertian material.

    Looks up the albedo from the registry and calls scatter_lambertian().

    Returns:
        A tuple of (scattered_origin, scattered_direction, attenuation, did_scatter).
    """
    albedo = get_lambertian_albedo(material_idx)
    return scatter_lambertian(albedo, hit_point, normal)
