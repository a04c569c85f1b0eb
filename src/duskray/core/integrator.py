"""Radiance estimator and progressive image accumulation.

This module implements the light transport used by the renderer: a path is
traced from the camera, bounced off surfaces according to their materials,
and each scattered bounce contributes a constant ambient term weighted by
the product of all attenuations so far. Rays that miss the scene see a black
background and absorbed rays end the path.

Written recursively the estimate is

    radiance(ray, depth) = 0                                   if depth <= 0
                         = 0                                   on a miss
                         = 0                                   if absorbed
                         = att * (AMBIENT + radiance(scattered, depth - 1))

Taichi functions cannot recurse, so radiance() evaluates the expanded sum
with a loop bounded by depth, carrying the running product of attenuations.

Key features:
    - Material dispatch (Lambertian, Metal, Dielectric, Swirl)
    - Bounded bounce depth, no Russian roulette
    - Progressive sample accumulation with NaN / Inf rejection

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from duskray.core.integrator import render_image, setup_render_target
    >>> from duskray.scene.night_scene import create_night_scene
    >>> from duskray.camera.thin_lens import setup_camera
    >>>
    >>> scene, camera = create_night_scene()
    >>> setup_camera(camera)
    >>> setup_render_target(300, 200)
    >>> render_image(num_samples=4, max_depth=50)
"""

import logging
from dataclasses import dataclass

import numpy as np
import numpy.typing as npt
import taichi as ti
import taichi.math as tm

from duskray.camera.thin_lens import get_ray_jittered
from duskray.materials.dielectric import scatter_dielectric_by_id
from duskray.materials.lambertian import scatter_lambertian_by_id
from duskray.materials.metal import scatter_metal_by_id
from duskray.materials.swirl import scatter_swirl_by_id
from duskray.scene.intersection import intersect_scene
from duskray.scene.manager import (
    MaterialType,
    get_material_type,
    get_material_type_index,
)

logger = logging.getLogger(__name__)

# Type alias for 3D vectors
vec3 = tm.vec3

# =============================================================================
# Rendering Constants
# =============================================================================

# Default maximum ray bounces (path length)
MAX_DEPTH = 50

# t interval accepted by the scene query; T_MIN keeps scattered rays from
# re-hitting the surface they leave
T_MIN = 0.001
T_MAX = 1e10

# Constant light added at every scattered bounce
AMBIENT = vec3(0.1, 0.1, 0.1)

# Color of rays that escape the scene
BACKGROUND_COLOR = vec3(0.0, 0.0, 0.0)


@dataclass
class RenderSettings:
    """Image and sampling parameters for a render.

    Attributes:
        aspect_ratio: Image width divided by height.
        image_width: Image width in pixels.
        samples_per_pixel: Number of jittered samples averaged per pixel.
        max_depth: Maximum number of bounces per path.
    """

    aspect_ratio: float = 3.0 / 2.0
    image_width: int = 1200
    samples_per_pixel: int = 20
    max_depth: int = MAX_DEPTH

    @property
    def image_height(self) -> int:
        return int(self.image_width / self.aspect_ratio)


# =============================================================================
# Render Target (Image Buffer)
# =============================================================================

# Maximum supported image dimensions (preallocated to avoid kernel recompilation)
MAX_IMAGE_WIDTH = 2048
MAX_IMAGE_HEIGHT = 2048

_image_width = ti.field(dtype=ti.i32, shape=())
_image_height = ti.field(dtype=ti.i32, shape=())

# Color accumulation buffer, indexed [i, j] with j = 0 the bottom row
_color_buffer = ti.Vector.field(3, dtype=ti.f32, shape=(MAX_IMAGE_WIDTH, MAX_IMAGE_HEIGHT))
_sample_count = ti.field(dtype=ti.i32, shape=(MAX_IMAGE_WIDTH, MAX_IMAGE_HEIGHT))

_render_target_initialized = ti.field(dtype=ti.i32, shape=())


def setup_render_target(width: int, height: int) -> None:
    """Initialize the render target buffers.

    Sets the active image dimensions and clears the buffers.

    Args:
        width: Image width in pixels (max MAX_IMAGE_WIDTH).
        height: Image height in pixels (max MAX_IMAGE_HEIGHT).

    Raises:
        ValueError: If dimensions are not positive or exceed the maximum
            supported size.
    """
    if width <= 0 or height <= 0:
        raise ValueError(f"Image dimensions ({width}x{height}) must be positive")
    if width > MAX_IMAGE_WIDTH or height > MAX_IMAGE_HEIGHT:
        raise ValueError(
            f"Image dimensions ({width}x{height}) exceed maximum supported "
            f"({MAX_IMAGE_WIDTH}x{MAX_IMAGE_HEIGHT})"
        )

    _image_width[None] = width
    _image_height[None] = height
    _render_target_initialized[None] = 1

    clear_render_target()
    logger.debug("Render target set to %dx%d", width, height)


def clear_render_target() -> None:
    """Clear the render target buffers to zero."""
    _color_buffer.fill(0.0)
    _sample_count.fill(0)


def get_image_dimensions() -> tuple[int, int]:
    """Get the current render target dimensions as (width, height)."""
    return int(_image_width[None]), int(_image_height[None])


def _check_render_target_initialized() -> None:
    if _render_target_initialized[None] == 0:
        raise RuntimeError("Render target not set up. Call setup_render_target() first.")


def get_image() -> "ti.MatrixField":
    """Get the color buffer.

    Note: This returns the full preallocated buffer. Use get_image_dimensions()
    to determine the active region.

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()
    return _color_buffer


def get_sample_count() -> "ti.ScalarField":
    """Get the per-pixel sample count field.

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()
    return _sample_count


# =============================================================================
# Material Dispatch
# =============================================================================


@ti.func
def _scatter_material(
    material_id: ti.i32,
    incident_direction: vec3,
    hit_point: vec3,
    normal: vec3,
    front_face: ti.i32,
):
    """Dispatch to the appropriate material scattering function.

    Args:
        material_id: The unified material ID.
        incident_direction: The incoming ray direction (any length).
        hit_point: The intersection point on the surface.
        normal: The surface normal reported by the hit.
        front_face: 1 if hit front face, 0 if back face.

    Returns:
        A tuple of (scattered_origin, scattered_direction, attenuation,
        did_scatter). Unknown material IDs absorb the ray.
    """
    mat_type = get_material_type(material_id)
    type_index = get_material_type_index(material_id)

    scattered_origin = hit_point
    scattered_direction = vec3(0.0, 0.0, 0.0)
    attenuation = vec3(0.0, 0.0, 0.0)
    did_scatter = 0

    if mat_type == int(MaterialType.LAMBERTIAN):
        scattered_origin, scattered_direction, attenuation, did_scatter = (
            scatter_lambertian_by_id(type_index, hit_point, normal)
        )

    elif mat_type == int(MaterialType.METAL):
        scattered_origin, scattered_direction, attenuation, did_scatter = scatter_metal_by_id(
            type_index, incident_direction, hit_point, normal
        )

    elif mat_type == int(MaterialType.DIELECTRIC):
        scattered_origin, scattered_direction, attenuation, did_scatter = (
            scatter_dielectric_by_id(
                type_index, incident_direction, hit_point, normal, front_face
            )
        )

    elif mat_type == int(MaterialType.SWIRL):
        scattered_origin, scattered_direction, attenuation, did_scatter = scatter_swirl_by_id(
            type_index, hit_point
        )

    return scattered_origin, scattered_direction, attenuation, did_scatter


# =============================================================================
# Radiance Estimation
# =============================================================================


@ti.func
def radiance(origin: vec3, direction: vec3, depth: ti.i32) -> vec3:
    """Estimate the radiance arriving along a ray.

    Each loop iteration consumes one unit of depth, so at most `depth` scene
    queries are made and depth <= 0 returns black without touching the scene.

    Args:
        origin: The ray origin.
        direction: The ray direction (need not be normalized).
        depth: Remaining bounce budget.

    Returns:
        The estimated radiance (RGB).
    """
    color = vec3(0.0, 0.0, 0.0)
    throughput = vec3(1.0, 1.0, 1.0)
    ray_origin = origin
    ray_direction = direction

    # Taichi doesn't support break in ti.func loops
    active = 1

    for _ in range(depth):
        if active == 1:
            hit_record = intersect_scene(ray_origin, ray_direction, T_MIN, T_MAX)

            if hit_record.hit == 0:
                color += throughput * BACKGROUND_COLOR
                active = 0
            else:
                scattered_origin, scattered_direction, attenuation, did_scatter = (
                    _scatter_material(
                        hit_record.material_id,
                        ray_direction,
                        hit_record.point,
                        hit_record.normal,
                        hit_record.front_face,
                    )
                )

                if did_scatter == 0:
                    active = 0
                else:
                    throughput *= attenuation
                    color += throughput * AMBIENT
                    ray_origin = scattered_origin
                    ray_direction = scattered_direction

    return color


@ti.func
def render_sample_impl(
    pixel_i: ti.i32,
    pixel_j: ti.i32,
    width: ti.i32,
    height: ti.i32,
    max_depth: ti.i32,
) -> vec3:
    """Render a single jittered sample for a pixel (j = 0 is the bottom row)."""
    ray = get_ray_jittered(pixel_i, pixel_j, width, height)
    return radiance(ray.origin, ray.direction, max_depth)


# =============================================================================
# Rendering Kernels
# =============================================================================


@ti.kernel
def _render_one_spp(width: ti.i32, height: ti.i32, max_depth: ti.i32):
    """Render one sample per pixel and accumulate."""
    for i, j in ti.ndrange(width, height):
        color = render_sample_impl(i, j, width, height, max_depth)

        # Check for NaN/Inf and replace with zero
        for c in ti.static(range(3)):
            if tm.isnan(color[c]) or tm.isinf(color[c]):
                color[c] = 0.0

        color = tm.max(color, vec3(0.0, 0.0, 0.0))

        # Running average: avg_n = avg_{n-1} + (x_n - avg_{n-1}) / n
        _sample_count[i, j] += 1
        n = _sample_count[i, j]
        _color_buffer[i, j] += (color - _color_buffer[i, j]) / ti.cast(n, ti.f32)


@ti.kernel
def _render_single_pixel(
    pixel_i: ti.i32,
    pixel_j: ti.i32,
    width: ti.i32,
    height: ti.i32,
    max_depth: ti.i32,
) -> vec3:
    return render_sample_impl(pixel_i, pixel_j, width, height, max_depth)


@ti.kernel
def _estimate_radiance_kernel(
    ox: ti.f32,
    oy: ti.f32,
    oz: ti.f32,
    dx: ti.f32,
    dy: ti.f32,
    dz: ti.f32,
    depth: ti.i32,
) -> vec3:
    return radiance(vec3(ox, oy, oz), vec3(dx, dy, dz), depth)


# =============================================================================
# Public Rendering API
# =============================================================================


def estimate_radiance(
    origin: tuple[float, float, float],
    direction: tuple[float, float, float],
    depth: int = MAX_DEPTH,
) -> tuple[float, float, float]:
    """Estimate the radiance along a single ray from Python.

    Useful for tests and debugging; rendering goes through render_image().

    Args:
        origin: The ray origin (x, y, z).
        direction: The ray direction (x, y, z), need not be normalized.
        depth: Bounce budget. Values <= 0 return black.

    Returns:
        Tuple of (R, G, B) radiance.
    """
    color = _estimate_radiance_kernel(
        origin[0],
        origin[1],
        origin[2],
        direction[0],
        direction[1],
        direction[2],
        depth,
    )
    return (float(color[0]), float(color[1]), float(color[2]))


def render_sample(pixel_i: int, pixel_j: int, max_depth: int = MAX_DEPTH) -> tuple[float, float, float]:
    """Render a single sample for a specific pixel without accumulating it.

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()

    width, height = get_image_dimensions()
    color = _render_single_pixel(pixel_i, pixel_j, width, height, max_depth)
    return (float(color[0]), float(color[1]), float(color[2]))


def render_image(num_samples: int = 1, max_depth: int = MAX_DEPTH) -> None:
    """Render the image with the specified number of samples per pixel.

    Progressively accumulates samples into the color buffer. Can be called
    multiple times to add more samples for convergence.

    Args:
        num_samples: Number of samples to render per pixel.
        max_depth: Maximum bounces per path.

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()

    width, height = get_image_dimensions()
    for _ in range(num_samples):
        _render_one_spp(width, height, max_depth)


def get_total_samples() -> int:
    """Get the number of samples per pixel accumulated so far.

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()
    return int(_sample_count[0, 0])


def get_normalized_image_numpy(clamp: bool = True) -> npt.NDArray[np.float32]:
    """Get the rendered image as a NumPy array.

    Args:
        clamp: Clamp values to [0, 1]. Pass False to keep the linear
            averages, which exceed 1 around surfaces with albedo above 1.

    Returns:
        Array of shape (height, width, 3), top row first, dtype float32.

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()

    width, height = get_image_dimensions()
    full_image = _color_buffer.to_numpy()
    image = full_image[:width, :height, :]

    # (width, height, 3) -> (height, width, 3), then flip so row 0 is the top
    image = np.transpose(image, (1, 0, 2))
    image = np.flipud(image)
    if clamp:
        image = np.clip(image, 0.0, 1.0)

    return image.astype(np.float32)
