"""Metal (specular reflective) material implementation.

Metals reflect the normalized incident direction about the surface normal:

    R = I - 2(I . N)N

A ray whose reflection does not leave the surface (dot(R, N) <= 0) is
absorbed and carries no light further.

Each metal also stores a fuzz value, clamped to at most 1 when the material
is registered. Fuzz is kept for scene descriptions but is not yet used to
perturb the reflected direction, so every metal currently renders as a
perfect mirror.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from duskray.materials.metal import scatter_metal
    >>> # Use within a Taichi kernel:
    >>> # origin, direction, attenuation, did_scatter = scatter_metal(
    >>> #     albedo, fuzz, incident_dir, hit_point, normal
    >>> # )
"""

import taichi as ti
import taichi.math as tm

from duskray.core.ray import normalize, reflect

# Type alias for 3D vectors
vec3 = tm.vec3


@ti.dataclass
class MetalMaterial:
    """Metal (specular reflective) material properties.

    Attributes:
        albedo: The reflective color (RGB).
        fuzz: Stored fuzziness, at most 1. Not applied to the reflection.
    """

    albedo: vec3
    fuzz: ti.f32


def clamp_fuzz(fuzz: float) -> float:
    """Clamp a fuzz value to at most 1, without raising."""
    return fuzz if fuzz < 1.0 else 1.0


@ti.func
def scatter_metal(
    albedo: vec3,
    fuzz: ti.f32,
    incident_direction: vec3,
    hit_point: vec3,
    normal: vec3,
):
    """Reflect a ray off a metal surface.

    Args:
        albedo: The reflective color (RGB).
        fuzz: The stored fuzz value (unused by the reflection).
        incident_direction: The incoming ray direction (any length).
        hit_point: The intersection point.
        normal: The unit surface normal.

    Returns:
        A tuple of (scattered_origin, scattered_direction, attenuation,
        did_scatter) where did_scatter is 1 if the reflected direction leaves
        the surface and 0 if the ray is absorbed.
    """
    reflected = reflect(normalize(incident_direction), normal)

    did_scatter = 0
    if tm.dot(reflected, normal) > 0.0:
        did_scatter = 1

    return hit_point, reflected, albedo, did_scatter


# =============================================================================
# Material Field Storage (for scene-level material management)
# =============================================================================

# Maximum number of metal materials in the scene
MAX_METAL_MATERIALS = 256

# Storage for metal material properties
metal_albedos = ti.Vector.field(3, dtype=ti.f32, shape=MAX_METAL_MATERIALS)
metal_fuzzes = ti.field(dtype=ti.f32, shape=MAX_METAL_MATERIALS)
num_metal_materials = ti.field(dtype=ti.i32, shape=())


def clear_metal_materials() -> None:
    """Clear all metal materials.

    Resets the material count to zero. Existing data in the field will be
    overwritten when new materials are added.
    """
    num_metal_materials[None] = 0


def add_metal_material(
    albedo: tuple[float, float, float],
    fuzz: float = 0.0,
) -> int:
    """Add a metal material to the material registry.

    Args:
        albedo: The reflective color as (R, G, B) tuple. Components must be
            non-negative.
        fuzz: The fuzziness. Values above 1 are silently clamped to 1.

    Returns:
        The index of the added material.

    Raises:
        RuntimeError: If the maximum number of materials is exceeded.
        ValueError: If any albedo component is negative.
    """
    for i, component in enumerate(albedo):
        if component < 0.0:
            raise ValueError(f"Albedo component {i} = {component} is negative.")

    idx = num_metal_materials[None]
    if idx >= MAX_METAL_MATERIALS:
        raise RuntimeError(
            f"Maximum number of metal materials ({MAX_METAL_MATERIALS}) exceeded"
        )

    metal_albedos[idx] = vec3(albedo[0], albedo[1], albedo[2])
    metal_fuzzes[idx] = clamp_fuzz(fuzz)
    num_metal_materials[None] = idx + 1
    return idx


def get_metal_material_count() -> int:
    """Get the number of metal materials in the registry."""
    return int(num_metal_materials[None])


@ti.func
def get_metal_albedo(material_idx: ti.i32) -> vec3:
    """Get the albedo for a metal material by index."""
    return metal_albedos[material_idx]


@ti.func
def get_metal_fuzz(material_idx: ti.i32) -> ti.f32:
    """Get the (clamped) fuzz for a metal material by index."""
    return metal_fuzzes[material_idx]


@ti.func
def scatter_metal_by_id(
    material_idx: ti.i32,
    incident_direction: vec3,
    hit_point: vec3,
    normal: vec3,
):
    """Reflect off a registered metal material.

    Returns:
        A tuple of (scattered_origin, scattered_direction, attenuation, did_scatter).
    """
    albedo = get_metal_albedo(material_idx)
    fuzz = get_metal_fuzz(material_idx)
    return scatter_metal(albedo, fuzz, incident_direction, hit_point, normal)
