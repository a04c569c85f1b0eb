"""Thin lens camera model for perspective ray generation with depth of field.

The camera supports:
- Look-at positioning (lookfrom, lookat, vup)
- Vertical field of view in degrees
- Arbitrary aspect ratios
- A circular aperture of configurable size focused at a given distance
- Jittered sampling for anti-aliasing

The camera builds an orthonormal basis (u, v, w) from the view parameters:
- w: points from lookat toward lookfrom (opposite view direction)
- u: points right in the image plane
- v: points up in the image plane

The viewport is placed at focus_dist in front of the camera. Rays start at
a random point on the lens disk and pass through the viewport point, so
geometry at the focus distance stays sharp while everything else blurs.
With aperture 0 the camera degenerates to a pinhole.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from duskray.camera.thin_lens import ThinLensCamera, setup_camera, get_ray
    >>>
    >>> camera = ThinLensCamera(
    ...     lookfrom=(13.0, 2.0, 3.0),
    ...     lookat=(0.0, 0.0, 0.0),
    ...     vup=(0.0, 1.0, 0.0),
    ...     vfov=20.0,
    ...     aspect_ratio=3.0 / 2.0,
    ...     aperture=0.1,
    ...     focus_dist=10.0,
    ... )
    >>> setup_camera(camera)
"""

import logging
import math
from dataclasses import dataclass

import numpy as np
import taichi as ti

from duskray.core.ray import Ray, make_ray, random_in_unit_disk, vec3

logger = logging.getLogger(__name__)

# Below this length the view direction or the right vector is degenerate
_DEGENERATE_EPSILON = 1e-12


# =============================================================================
# Camera Data Structures
# =============================================================================


@dataclass
class ThinLensCamera:
    """Configuration for a thin lens camera.

    Attributes:
        lookfrom: Camera position in world space (x, y, z).
        lookat: Point the camera is looking at in world space (x, y, z).
        vup: Up direction vector for camera orientation (typically (0, 1, 0)).
        vfov: Vertical field of view in degrees.
        aspect_ratio: Width divided by height of the output image.
        aperture: Lens diameter. 0 gives a pinhole camera.
        focus_dist: Distance from the camera to the plane in perfect focus.
    """

    lookfrom: tuple[float, float, float]
    lookat: tuple[float, float, float]
    vup: tuple[float, float, float]
    vfov: float
    aspect_ratio: float
    aperture: float = 0.0
    focus_dist: float = 1.0


# =============================================================================
# Taichi Fields for Camera State
# =============================================================================

_camera_origin = ti.Vector.field(3, dtype=ti.f32, shape=())

# Orthonormal basis vectors
_camera_u = ti.Vector.field(3, dtype=ti.f32, shape=())  # Right
_camera_v = ti.Vector.field(3, dtype=ti.f32, shape=())  # Up
_camera_w = ti.Vector.field(3, dtype=ti.f32, shape=())  # Backward

# Viewport at the focus plane
_viewport_horizontal = ti.Vector.field(3, dtype=ti.f32, shape=())
_viewport_vertical = ti.Vector.field(3, dtype=ti.f32, shape=())
_lower_left_corner = ti.Vector.field(3, dtype=ti.f32, shape=())

_lens_radius = ti.field(dtype=ti.f32, shape=())


# =============================================================================
# Camera Setup (Python-side)
# =============================================================================


def setup_camera(camera: ThinLensCamera) -> None:
    """Initialize camera state from configuration.

    Must be called before rendering, and again whenever the configuration
    changes.

    Raises:
        ValueError: If lookfrom equals lookat, vup is parallel to the view
            direction, or vfov / aspect_ratio / focus_dist / aperture are out
            of range.
    """
    if not 0.0 < camera.vfov < 180.0:
        raise ValueError(f"vfov = {camera.vfov} must be in (0, 180) degrees.")
    if camera.aspect_ratio <= 0.0:
        raise ValueError(f"aspect_ratio = {camera.aspect_ratio} must be positive.")
    if camera.focus_dist <= 0.0:
        raise ValueError(f"focus_dist = {camera.focus_dist} must be positive.")
    if camera.aperture < 0.0:
        raise ValueError(f"aperture = {camera.aperture} is negative.")

    theta = math.radians(camera.vfov)
    h = math.tan(theta / 2.0)
    viewport_height = 2.0 * h
    viewport_width = camera.aspect_ratio * viewport_height

    lookfrom = np.array(camera.lookfrom, dtype=np.float64)
    lookat = np.array(camera.lookat, dtype=np.float64)
    vup = np.array(camera.vup, dtype=np.float64)

    w = lookfrom - lookat
    w_len = np.linalg.norm(w)
    if w_len < _DEGENERATE_EPSILON:
        raise ValueError("lookfrom and lookat must be different points.")
    w = w / w_len

    u = np.cross(vup, w)
    u_len = np.linalg.norm(u)
    if u_len < _DEGENERATE_EPSILON:
        raise ValueError("vup must not be parallel to the view direction.")
    u = u / u_len

    v = np.cross(w, u)

    horizontal = camera.focus_dist * viewport_width * u
    vertical = camera.focus_dist * viewport_height * v
    lower_left = lookfrom - horizontal / 2.0 - vertical / 2.0 - camera.focus_dist * w

    _camera_origin[None] = lookfrom.tolist()
    _camera_u[None] = u.tolist()
    _camera_v[None] = v.tolist()
    _camera_w[None] = w.tolist()
    _viewport_horizontal[None] = horizontal.tolist()
    _viewport_vertical[None] = vertical.tolist()
    _lower_left_corner[None] = lower_left.tolist()
    _lens_radius[None] = camera.aperture / 2.0

    logger.debug(
        "Camera at %s looking at %s (vfov=%.1f, aperture=%.3f, focus=%.2f)",
        camera.lookfrom,
        camera.lookat,
        camera.vfov,
        camera.aperture,
        camera.focus_dist,
    )


# =============================================================================
# Ray Generation (Taichi-side)
# =============================================================================


@ti.func
def get_ray(s: ti.f32, t: ti.f32) -> Ray:
    """Generate a ray through normalized image coordinates (s, t).

    s = 0 is the left edge and t = 0 the bottom edge of the image. The ray
    origin is jittered across the lens disk; the direction is left
    unnormalized.
    """
    rd = _lens_radius[None] * random_in_unit_disk()
    offset = _camera_u[None] * rd.x + _camera_v[None] * rd.y
    origin = _camera_origin[None] + offset
    direction = (
        _lower_left_corner[None]
        + s * _viewport_horizontal[None]
        + t * _viewport_vertical[None]
        - origin
    )
    return make_ray(origin, direction)


@ti.func
def get_ray_jittered(pixel_i: ti.i32, pixel_j: ti.i32, width: ti.i32, height: ti.i32) -> Ray:
    """Generate a jittered ray for anti-aliasing.

    Pixel coordinates plus a uniform offset in [0, 1) are divided by
    (width - 1) and (height - 1), so the centres of the edge pixels map onto
    the viewport edges.

    Args:
        pixel_i: Pixel x-coordinate (0 = left).
        pixel_j: Pixel y-coordinate (0 = bottom).
        width: Image width in pixels.
        height: Image height in pixels.
    """
    u = (ti.cast(pixel_i, ti.f32) + ti.random(ti.f32)) / ti.cast(ti.max(width - 1, 1), ti.f32)
    v = (ti.cast(pixel_j, ti.f32) + ti.random(ti.f32)) / ti.cast(ti.max(height - 1, 1), ti.f32)
    return get_ray(u, v)


# =============================================================================
# Utility Functions
# =============================================================================


def get_lens_radius() -> float:
    return float(_lens_radius[None])


def get_camera_info() -> dict[str, tuple[float, float, float]]:
    """Get current camera state for debugging.

    Returns:
        Dictionary with origin, u, v, w, horizontal, vertical, lower_left.
    """
    fields = {
        "origin": _camera_origin,
        "u": _camera_u,
        "v": _camera_v,
        "w": _camera_w,
        "horizontal": _viewport_horizontal,
        "vertical": _viewport_vertical,
        "lower_left": _lower_left_corner,
    }
    info = {}
    for name, vector_field in fields.items():
        value = vector_field[None]
        info[name] = (float(value[0]), float(value[1]), float(value[2]))
    return info
