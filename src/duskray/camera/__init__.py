"""Camera module for view and ray generation.

This module provides the camera model for generating primary rays:

Components:
    thin_lens: Look-at camera with a finite aperture (depth of field)

Camera responsibilities:
    - Transform (u, v) image coordinates to world-space rays
    - Apply anti-aliasing jitter for sub-pixel sampling
    - Offset ray origins across the lens for defocus blur

Ray generation uses normalized device coordinates:
    u in [0, 1]: left to right across image
    v in [0, 1]: bottom to top across image
"""

from .thin_lens import (
    ThinLensCamera,
    get_camera_info,
    get_lens_radius,
    get_ray,
    get_ray_jittered,
    setup_camera,
)

__all__ = [
    "ThinLensCamera",
    "setup_camera",
    "get_ray",
    "get_ray_jittered",
    "get_camera_info",
    "get_lens_radius",
]
