"""Preview module for output and visualization.

Components:
    display: Tone mapping, gamma correction and Matplotlib preview
    export: PPM and PNG image export

Example:
    >>> from duskray.preview import save_ppm, show_preview
    >>> from duskray.core.progressive import ProgressiveRenderer
    >>>
    >>> renderer = ProgressiveRenderer(300, 200)
    >>> renderer.render(20)
    >>> save_ppm(renderer, "night.ppm")
    >>> show_preview(renderer)
"""

from duskray.preview.display import (
    ToneMapMethod,
    apply_gamma,
    process_image_for_display,
    show_preview,
    tone_map_exposure,
    tone_map_reinhard,
)
from duskray.preview.export import (
    compute_rmse,
    image_to_uint8,
    save_png,
    save_png_from_array,
    save_ppm,
    write_ppm,
)

__all__ = [
    # Display functions
    "show_preview",
    # Tone mapping
    "tone_map_reinhard",
    "tone_map_exposure",
    "apply_gamma",
    "process_image_for_display",
    "ToneMapMethod",
    # Export functions
    "write_ppm",
    "save_ppm",
    "save_png",
    "save_png_from_array",
    "image_to_uint8",
    "compute_rmse",
]
