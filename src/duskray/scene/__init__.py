"""Scene module for scene management and ray-scene queries.

Components:
    intersection: Primitive storage in Taichi fields and nearest-hit queries
    manager: Unified scene manager coordinating primitives and materials
    night_scene: Factory for the night meadow scene

Scene data is organized for efficient GPU access:
    - Structure-of-Arrays layout for geometric data
    - Contiguous material ID arrays
"""

from .intersection import (
    MAX_MOON_SPHERES,
    MAX_SPHERES,
    MAX_TRIANGLES,
    SceneHitRecord,
    add_moon_sphere,
    add_sphere,
    add_triangle,
    clear_scene,
    get_moon_sphere_count,
    get_sphere_count,
    get_triangle_count,
    intersect_scene,
)
from .manager import (
    MAX_MATERIALS,
    MaterialInfo,
    MaterialType,
    MoonInfo,
    SceneConfig,
    SceneManager,
    SphereInfo,
    TriangleInfo,
    get_material_type,
    get_material_type_index,
    material_type_indices,
    material_types,
    num_materials,
)
from .night_scene import (
    NightSceneParams,
    create_night_camera,
    create_night_scene,
)

__all__ = [
    # Intersection module
    "SceneHitRecord",
    "add_sphere",
    "add_moon_sphere",
    "add_triangle",
    "clear_scene",
    "get_sphere_count",
    "get_moon_sphere_count",
    "get_triangle_count",
    "intersect_scene",
    "MAX_SPHERES",
    "MAX_MOON_SPHERES",
    "MAX_TRIANGLES",
    # Manager module
    "SceneManager",
    "MaterialType",
    "MaterialInfo",
    "SphereInfo",
    "MoonInfo",
    "TriangleInfo",
    "SceneConfig",
    "MAX_MATERIALS",
    "get_material_type",
    "get_material_type_index",
    "material_types",
    "material_type_indices",
    "num_materials",
    # Night scene module
    "NightSceneParams",
    "create_night_camera",
    "create_night_scene",
]
