"""Materials module for surface scattering models.

This module implements the closed set of surface materials the path tracer
dispatches on:

Components:
    lambertian: Ideal diffuse reflection (normal + random unit vector)
    metal: Mirror reflection with absorption below the surface
    dielectric: Glass-like reflection/refraction with Schlick reflectance
    swirl: Procedural effect that relocates rays along a sine pattern

Every material exposes a Taichi scatter function with the same result shape:
    origin, direction, attenuation, did_scatter = scatter_*(...)
where did_scatter == 0 means the ray was absorbed.

Material parameters are kept in per-type registries (Taichi fields). The
scene manager maps a unified material id onto (material type, type index).
"""

from .dielectric import (
    DielectricMaterial,
    add_dielectric_material,
    cannot_refract,
    clear_dielectric_materials,
    fresnel_reflectance,
    get_dielectric_ior,
    get_dielectric_material_count,
    scatter_dielectric,
    scatter_dielectric_by_id,
)
from .lambertian import (
    LambertianMaterial,
    add_lambertian_material,
    clear_lambertian_materials,
    get_lambertian_albedo,
    get_lambertian_material_count,
    scatter_lambertian,
    scatter_lambertian_by_id,
)
from .metal import (
    MetalMaterial,
    add_metal_material,
    clamp_fuzz,
    clear_metal_materials,
    get_metal_albedo,
    get_metal_fuzz,
    get_metal_material_count,
    scatter_metal,
    scatter_metal_by_id,
)
from .swirl import (
    SwirlMaterial,
    add_swirl_material,
    clear_swirl_materials,
    get_swirl_albedo,
    get_swirl_frequency,
    get_swirl_material_count,
    scatter_swirl,
    scatter_swirl_by_id,
    swirl_scale,
)

__all__ = [
    # Lambertian
    "LambertianMaterial",
    "scatter_lambertian",
    "scatter_lambertian_by_id",
    "add_lambertian_material",
    "clear_lambertian_materials",
    "get_lambertian_material_count",
    "get_lambertian_albedo",
    # Metal
    "MetalMaterial",
    "clamp_fuzz",
    "scatter_metal",
    "scatter_metal_by_id",
    "add_metal_material",
    "clear_metal_materials",
    "get_metal_material_count",
    "get_metal_albedo",
    "get_metal_fuzz",
    # Dielectric
    "DielectricMaterial",
    "scatter_dielectric",
    "scatter_dielectric_by_id",
    "add_dielectric_material",
    "clear_dielectric_materials",
    "get_dielectric_material_count",
    "get_dielectric_ior",
    "fresnel_reflectance",
    "cannot_refract",
    # Swirl
    "SwirlMaterial",
    "swirl_scale",
    "scatter_swirl",
    "scatter_swirl_by_id",
    "add_swirl_material",
    "clear_swirl_materials",
    "get_swirl_material_count",
    "get_swirl_albedo",
    "get_swirl_frequency",
]
