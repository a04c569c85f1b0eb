"""Unified scene manager for coordinating primitives and materials.

This module provides a high-level scene management API that coordinates
primitive storage (spheres, moon spheres, triangles) with material
assignment. It tracks which material type (Lambertian, Metal, Dielectric,
Swirl) each material ID corresponds to, enabling material dispatch in the
path tracer.

The SceneManager maintains:
- A unified material_id space across all material types
- Mapping from material_id to (material_type, type_local_index)
- High-level methods for adding objects with materials in one call
- Scene serialization (dict / JSON) support

A material ID can be assigned to any number of primitives; the material
data itself is written once and never changed during rendering.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from duskray.scene.manager import SceneManager
    >>> scene = SceneManager()
    >>> mat_id = scene.add_lambertian_material(albedo=(0.8, 0.3, 0.3))
    >>> scene.add_sphere(center=(0, 0, -1), radius=0.5, material_id=mat_id)
"""

import json
import logging
from dataclasses import dataclass, field
from enum import IntEnum
from pathlib import Path
from typing import Any

import taichi as ti
import taichi.math as tm

from duskray.materials.dielectric import (
    add_dielectric_material,
    clear_dielectric_materials,
)
from duskray.materials.lambertian import (
    add_lambertian_material,
    clear_lambertian_materials,
)
from duskray.materials.metal import (
    add_metal_material,
    clamp_fuzz,
    clear_metal_materials,
)
from duskray.materials.swirl import (
    add_swirl_material,
    clear_swirl_materials,
)
from duskray.scene.intersection import (
    MAX_MOON_SPHERES,
    MAX_SPHERES,
    MAX_TRIANGLES,
    add_moon_sphere,
    add_sphere,
    add_triangle,
    clear_scene,
    get_moon_sphere_count,
    get_sphere_count,
    get_triangle_count,
)

logger = logging.getLogger(__name__)

# Type alias for 3D vectors
vec3 = tm.vec3

Vec3Tuple = tuple[float, float, float]


class MaterialType(IntEnum):
    """Enumeration of supported material types.

    Used for material dispatch in the path tracer to determine which
    scattering function to call.
    """

    LAMBERTIAN = 0
    METAL = 1
    DIELECTRIC = 2
    SWIRL = 3


# Maximum number of materials across all types
MAX_MATERIALS = 4096

# Taichi fields for kernel-side material type lookup
# material_types[i] stores the MaterialType for material_id i
material_types = ti.field(dtype=ti.i32, shape=MAX_MATERIALS)
# material_type_indices[i] stores the type-local index for material_id i
# (e.g., if material_id 5 is the 2nd metal material, material_type_indices[5] = 1)
material_type_indices = ti.field(dtype=ti.i32, shape=MAX_MATERIALS)
num_materials = ti.field(dtype=ti.i32, shape=())


def _clear_material_tracking() -> None:
    """Clear the material tracking fields."""
    num_materials[None] = 0


@ti.func
def get_material_type(material_id: ti.i32) -> ti.i32:
    """Get the material type for a given material ID.

    Returns:
        The material type as an integer (see MaterialType), or -1 for
        invalid material IDs.
    """
    result = -1
    if 0 <= material_id < num_materials[None]:
        result = material_types[material_id]
    return result


@ti.func
def get_material_type_index(material_id: ti.i32) -> ti.i32:
    """Get the type-local index for a given material ID.

    This is used to look up material properties in the type-specific
    material arrays (e.g., lambertian_albedos[type_index]).

    Returns:
        The index into the type-specific material array, or -1 for invalid
        material IDs.
    """
    result = -1
    if 0 <= material_id < num_materials[None]:
        result = material_type_indices[material_id]
    return result


def _as_vec3_tuple(values: Any, default: Vec3Tuple) -> Vec3Tuple:
    if values is None:
        return default
    return (float(values[0]), float(values[1]), float(values[2]))


@dataclass
class MaterialInfo:
    """Information about a registered material.

    Attributes:
        material_id: The unified material ID.
        material_type: The type of material.
        type_index: The index within the type-specific material array.
        params: The material parameters as stored.
    """

    material_id: int
    material_type: MaterialType
    type_index: int
    params: dict[str, Any]


@dataclass
class SphereInfo:
    """Information about a sphere in the scene."""

    sphere_index: int
    center: Vec3Tuple
    radius: float
    material_id: int


@dataclass
class MoonInfo:
    """Information about a moon sphere in the scene."""

    moon_index: int
    center: Vec3Tuple
    radius: float
    material_id: int


@dataclass
class TriangleInfo:
    """Information about a triangle in the scene."""

    triangle_index: int
    p0: Vec3Tuple
    p1: Vec3Tuple
    p2: Vec3Tuple
    material_id: int


@dataclass
class SceneConfig:
    """Configuration for scene serialization.

    Attributes:
        materials: List of material configurations.
        spheres: List of sphere configurations.
        moons: List of moon sphere configurations.
        triangles: List of triangle configurations.
    """

    materials: list[dict[str, Any]] = field(default_factory=list)
    spheres: list[dict[str, Any]] = field(default_factory=list)
    moons: list[dict[str, Any]] = field(default_factory=list)
    triangles: list[dict[str, Any]] = field(default_factory=list)


class SceneManager:
    """Unified scene manager coordinating primitives and materials.

    The SceneManager provides a high-level API for building scenes with
    automatic material tracking. It maintains a unified material_id space
    that maps to type-specific material registries, enabling the path tracer
    to dispatch to the correct scattering function.

    Attributes:
        materials: List of MaterialInfo for all registered materials.
        spheres: List of SphereInfo for all spheres in the scene.
        moons: List of MoonInfo for all moon spheres in the scene.
        triangles: List of TriangleInfo for all triangles in the scene.

    Example:
        >>> scene = SceneManager()
        >>> ground = scene.add_lambertian_material(albedo=(0.1, 0.8, 0.3))
        >>> mirror = scene.add_metal_material(albedo=(0.7, 0.6, 0.5))
        >>> glass = scene.add_dielectric_material(ior=1.5)
        >>> scene.add_sphere((0, -1000, 0), 1000, ground)
        >>> scene.add_sphere((1.5, 0.5, 0), 1.0, mirror)
        >>> scene.add_sphere((0, 1, 0), 1.0, glass)
    """

    def __init__(self) -> None:
        """Initialize an empty scene."""
        self.materials: list[MaterialInfo] = []
        self.spheres: list[SphereInfo] = []
        self.moons: list[MoonInfo] = []
        self.triangles: list[TriangleInfo] = []
        self._clear_all()

    def _clear_all(self) -> None:
        """Clear all scene data including Taichi fields."""
        clear_scene()
        clear_lambertian_materials()
        clear_metal_materials()
        clear_dielectric_materials()
        clear_swirl_materials()
        _clear_material_tracking()
        self.materials.clear()
        self.spheres.clear()
        self.moons.clear()
        self.triangles.clear()

    def clear(self) -> None:
        """Clear the entire scene (primitives and materials)."""
        self._clear_all()

    # =========================================================================
    # Material Management
    # =========================================================================

    def _register_material(
        self,
        material_type: MaterialType,
        type_index: int,
        params: dict[str, Any],
    ) -> int:
        """Assign a unified material ID to a type-local material."""
        material_id = num_materials[None]
        if material_id >= MAX_MATERIALS:
            raise RuntimeError(f"Maximum number of materials ({MAX_MATERIALS}) exceeded")

        material_types[material_id] = int(material_type)
        material_type_indices[material_id] = type_index
        num_materials[None] = material_id + 1

        self.materials.append(
            MaterialInfo(
                material_id=material_id,
                material_type=material_type,
                type_index=type_index,
                params=params,
            )
        )
        logger.debug(
            "Registered %s material %d (type index %d)",
            material_type.name.lower(),
            material_id,
            type_index,
        )
        return material_id

    def add_lambertian_material(self, albedo: Vec3Tuple) -> int:
        """Add a Lambertian (diffuse) material to the scene.

        Args:
            albedo: The diffuse reflectance color as (R, G, B) tuple.

        Returns:
            The unified material ID for this material.

        Raises:
            RuntimeError: If the maximum number of materials is exceeded.
            ValueError: If any albedo component is negative.
        """
        type_index = add_lambertian_material(albedo)
        return self._register_material(
            MaterialType.LAMBERTIAN, type_index, {"albedo": albedo}
        )

    def add_metal_material(self, albedo: Vec3Tuple, fuzz: float = 0.0) -> int:
        """Add a metal (mirror) material to the scene.

        Args:
            albedo: The reflective color as (R, G, B) tuple.
            fuzz: Stored fuzziness; values above 1 are clamped to 1.

        Returns:
            The unified material ID for this material.

        Raises:
            RuntimeError: If the maximum number of materials is exceeded.
            ValueError: If any albedo component is negative.
        """
        type_index = add_metal_material(albedo, fuzz)
        return self._register_material(
            MaterialType.METAL, type_index, {"albedo": albedo, "fuzz": clamp_fuzz(fuzz)}
        )

    def add_dielectric_material(self, ior: float = 1.5) -> int:
        """Add a dielectric (glass/water) material to the scene.

        Args:
            ior: Index of refraction. Default is 1.5 (typical glass).

        Returns:
            The unified material ID for this material.

        Raises:
            RuntimeError: If the maximum number of materials is exceeded.
            ValueError: If IOR is not positive.
        """
        type_index = add_dielectric_material(ior)
        return self._register_material(MaterialType.DIELECTRIC, type_index, {"ior": ior})

    def add_swirl_material(self, albedo: Vec3Tuple, frequency: float) -> int:
        """Add a swirl (procedural) material to the scene.

        Args:
            albedo: The color as (R, G, B) tuple.
            frequency: Spatial frequency of the swirl pattern.

        Returns:
            The unified material ID for this material.

        Raises:
            RuntimeError: If the maximum number of materials is exceeded.
            ValueError: If any albedo component or the frequency is negative.
        """
        type_index = add_swirl_material(albedo, frequency)
        return self._register_material(
            MaterialType.SWIRL, type_index, {"albedo": albedo, "frequency": frequency}
        )

    def get_material_count(self) -> int:
        """Get the total number of materials in the scene."""
        return int(num_materials[None])

    def get_material_info(self, material_id: int) -> MaterialInfo | None:
        """Get information about a material by ID, or None if not found."""
        if 0 <= material_id < len(self.materials):
            return self.materials[material_id]
        return None

    def get_material_type_python(self, material_id: int) -> MaterialType | None:
        """Get the material type for a given material ID (Python side).

        For kernel-side lookup, use the get_material_type() Taichi function.
        """
        if 0 <= material_id < len(self.materials):
            return self.materials[material_id].material_type
        return None

    def _check_material_id(self, material_id: int) -> None:
        if material_id < 0 or material_id >= num_materials[None]:
            raise ValueError(f"Invalid material_id: {material_id}")

    # =========================================================================
    # Primitive Management
    # =========================================================================

    def add_sphere(self, center: Vec3Tuple, radius: float, material_id: int) -> int:
        """Add a sphere to the scene.

        Args:
            center: The center point of the sphere as (x, y, z).
            radius: The radius of the sphere (should be positive).
            material_id: The unified material ID to assign to the sphere.

        Returns:
            The index of the added sphere.

        Raises:
            RuntimeError: If the maximum number of spheres is exceeded.
            ValueError: If material_id is invalid.
        """
        self._check_material_id(material_id)
        sphere_index = add_sphere(vec3(center[0], center[1], center[2]), radius, material_id)
        self.spheres.append(
            SphereInfo(
                sphere_index=sphere_index,
                center=center,
                radius=radius,
                material_id=material_id,
            )
        )
        return sphere_index

    def add_moon_sphere(self, center: Vec3Tuple, radius: float, material_id: int) -> int:
        """Add a moon sphere (outward normals, strict root policy) to the scene.

        Raises:
            RuntimeError: If the maximum number of moon spheres is exceeded.
            ValueError: If material_id is invalid.
        """
        self._check_material_id(material_id)
        moon_index = add_moon_sphere(vec3(center[0], center[1], center[2]), radius, material_id)
        self.moons.append(
            MoonInfo(
                moon_index=moon_index,
                center=center,
                radius=radius,
                material_id=material_id,
            )
        )
        return moon_index

    def add_triangle(
        self,
        p0: Vec3Tuple,
        p1: Vec3Tuple,
        p2: Vec3Tuple,
        material_id: int,
    ) -> int:
        """Add a triangle to the scene.

        Triangle intersection is not implemented: the triangle is stored and
        serialized but never appears in a render.

        Raises:
            RuntimeError: If the maximum number of triangles is exceeded.
            ValueError: If material_id is invalid.
        """
        self._check_material_id(material_id)
        triangle_index = add_triangle(
            vec3(p0[0], p0[1], p0[2]),
            vec3(p1[0], p1[1], p1[2]),
            vec3(p2[0], p2[1], p2[2]),
            material_id,
        )
        self.triangles.append(
            TriangleInfo(
                triangle_index=triangle_index,
                p0=p0,
                p1=p1,
                p2=p2,
                material_id=material_id,
            )
        )
        return triangle_index

    # =========================================================================
    # Convenience Methods (add object with material in one call)
    # =========================================================================

    def add_lambertian_sphere(
        self,
        center: Vec3Tuple,
        radius: float,
        albedo: Vec3Tuple,
    ) -> tuple[int, int]:
        """Add a sphere with a new Lambertian material.

        Returns:
            Tuple of (sphere_index, material_id).
        """
        material_id = self.add_lambertian_material(albedo)
        return self.add_sphere(center, radius, material_id), material_id

    def add_metal_sphere(
        self,
        center: Vec3Tuple,
        radius: float,
        albedo: Vec3Tuple,
        fuzz: float = 0.0,
    ) -> tuple[int, int]:
        """Add a sphere with a new metal material.

        Returns:
            Tuple of (sphere_index, material_id).
        """
        material_id = self.add_metal_material(albedo, fuzz)
        return self.add_sphere(center, radius, material_id), material_id

    def add_dielectric_sphere(
        self,
        center: Vec3Tuple,
        radius: float,
        ior: float = 1.5,
    ) -> tuple[int, int]:
        """Add a sphere with a new dielectric material.

        Returns:
            Tuple of (sphere_index, material_id).
        """
        material_id = self.add_dielectric_material(ior)
        return self.add_sphere(center, radius, material_id), material_id

    def add_swirl_sphere(
        self,
        center: Vec3Tuple,
        radius: float,
        albedo: Vec3Tuple,
        frequency: float,
    ) -> tuple[int, int]:
        """Add a sphere with a new swirl material.

        Returns:
            Tuple of (sphere_index, material_id).
        """
        material_id = self.add_swirl_material(albedo, frequency)
        return self.add_sphere(center, radius, material_id), material_id

    # =========================================================================
    # Scene Queries
    # =========================================================================

    def get_sphere_count(self) -> int:
        """Get the number of spheres in the scene."""
        return get_sphere_count()

    def get_moon_sphere_count(self) -> int:
        """Get the number of moon spheres in the scene."""
        return get_moon_sphere_count()

    def get_triangle_count(self) -> int:
        """Get the number of triangles in the scene."""
        return get_triangle_count()

    def get_primitive_count(self) -> int:
        """Get the total number of primitives in the scene."""
        return self.get_sphere_count() + self.get_moon_sphere_count() + self.get_triangle_count()

    # =========================================================================
    # Scene Serialization
    # =========================================================================

    def to_config(self) -> SceneConfig:
        """Export the scene to a configuration object."""
        config = SceneConfig()

        for mat in self.materials:
            config.materials.append({"type": mat.material_type.name.lower(), **mat.params})

        for sphere in self.spheres:
            config.spheres.append(
                {
                    "center": list(sphere.center),
                    "radius": sphere.radius,
                    "material_id": sphere.material_id,
                }
            )

        for moon in self.moons:
            config.moons.append(
                {
                    "center": list(moon.center),
                    "radius": moon.radius,
                    "material_id": moon.material_id,
                }
            )

        for triangle in self.triangles:
            config.triangles.append(
                {
                    "p0": list(triangle.p0),
                    "p1": list(triangle.p1),
                    "p2": list(triangle.p2),
                    "material_id": triangle.material_id,
                }
            )

        return config

    def from_config(self, config: SceneConfig) -> None:
        """Load a scene from a configuration object.

        Clears the current scene and loads the configuration. Material IDs in
        the primitive entries refer to positions in config.materials.

        Raises:
            ValueError: If the configuration contains invalid data.
        """
        self.clear()

        # Materials first, primitives refer to them by ID
        for mat_config in config.materials:
            mat_type = str(mat_config.get("type", "")).lower()
            if mat_type == "lambertian":
                albedo = _as_vec3_tuple(mat_config.get("albedo"), (0.5, 0.5, 0.5))
                self.add_lambertian_material(albedo)
            elif mat_type == "metal":
                albedo = _as_vec3_tuple(mat_config.get("albedo"), (0.8, 0.8, 0.8))
                self.add_metal_material(albedo, float(mat_config.get("fuzz", 0.0)))
            elif mat_type == "dielectric":
                self.add_dielectric_material(float(mat_config.get("ior", 1.5)))
            elif mat_type == "swirl":
                albedo = _as_vec3_tuple(mat_config.get("albedo"), (0.5, 0.5, 0.5))
                self.add_swirl_material(albedo, float(mat_config.get("frequency", 1.0)))
            else:
                raise ValueError(f"Unknown material type: {mat_type}")

        for sphere_config in config.spheres:
            self.add_sphere(
                _as_vec3_tuple(sphere_config.get("center"), (0.0, 0.0, 0.0)),
                float(sphere_config.get("radius", 1.0)),
                int(sphere_config.get("material_id", 0)),
            )

        for moon_config in config.moons:
            self.add_moon_sphere(
                _as_vec3_tuple(moon_config.get("center"), (0.0, 0.0, 0.0)),
                float(moon_config.get("radius", 1.0)),
                int(moon_config.get("material_id", 0)),
            )

        for triangle_config in config.triangles:
            self.add_triangle(
                _as_vec3_tuple(triangle_config.get("p0"), (0.0, 0.0, 0.0)),
                _as_vec3_tuple(triangle_config.get("p1"), (1.0, 0.0, 0.0)),
                _as_vec3_tuple(triangle_config.get("p2"), (0.0, 1.0, 0.0)),
                int(triangle_config.get("material_id", 0)),
            )

        logger.info(
            "Loaded scene: %d materials, %d spheres, %d moon spheres, %d triangles",
            len(self.materials),
            len(self.spheres),
            len(self.moons),
            len(self.triangles),
        )

    def to_dict(self) -> dict[str, Any]:
        """Export the scene to a dictionary (for JSON serialization)."""
        config = self.to_config()
        return {
            "materials": config.materials,
            "spheres": config.spheres,
            "moons": config.moons,
            "triangles": config.triangles,
        }

    def from_dict(self, data: dict[str, Any]) -> None:
        """Load a scene from a dictionary.

        Args:
            data: Dictionary with 'materials', 'spheres', 'moons' and
                'triangles' keys (all optional).
        """
        config = SceneConfig(
            materials=data.get("materials", []),
            spheres=data.get("spheres", []),
            moons=data.get("moons", []),
            triangles=data.get("triangles", []),
        )
        self.from_config(config)

    def save_json(self, path: str | Path) -> None:
        """Write the scene description to a JSON file."""
        Path(path).write_text(json.dumps(self.to_dict(), indent=2))

    def load_json(self, path: str | Path) -> None:
        """Replace the scene with the description stored in a JSON file."""
        self.from_dict(json.loads(Path(path).read_text()))

    # =========================================================================
    # Capacity Information
    # =========================================================================

    @staticmethod
    def get_max_spheres() -> int:
        return MAX_SPHERES

    @staticmethod
    def get_max_moon_spheres() -> int:
        return MAX_MOON_SPHERES

    @staticmethod
    def get_max_triangles() -> int:
        return MAX_TRIANGLES

    @staticmethod
    def get_max_materials() -> int:
        return MAX_MATERIALS
