"""Image export utilities for rendered images.

Supported formats:
    - PPM (plain-text P3, the renderer's native output)
    - PNG (8-bit via Pillow)

Both writers quantize a channel the same way: gamma 2 (square root),
clamp to [0, 0.999], multiply by 256 and truncate. A value of 1.0 therefore
maps to 255 and every 8-bit level covers an equal slice of [0, 1).

PPM layout:

    P3
    <width> <height>
    255
    r g b        <- one line per pixel, top row first, left to right

Example:
    >>> from duskray.preview.export import save_ppm
    >>> from duskray.core.progressive import ProgressiveRenderer
    >>>
    >>> renderer = ProgressiveRenderer(300, 200)
    >>> renderer.render(20)
    >>> save_ppm(renderer, "night.ppm")
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING, TextIO

import numpy as np
import numpy.typing as npt
from PIL import Image as PILImage

from duskray.preview.display import ToneMapMethod, process_image_for_display

if TYPE_CHECKING:
    from duskray.core.progressive import ProgressiveRenderer

logger = logging.getLogger(__name__)

# Largest channel value before scaling by 256
_MAX_CHANNEL = 0.999


def _check_image_shape(image: npt.NDArray[np.floating]) -> None:
    if image.ndim != 3 or image.shape[2] != 3:
        raise ValueError(f"Expected an image of shape (H, W, 3), got {image.shape}")


def _quantize(image: npt.NDArray[np.floating]) -> npt.NDArray[np.uint8]:
    """Map display-space values to 0..255 by clamp-to-0.999 and truncation."""
    clamped = np.clip(np.nan_to_num(image, nan=0.0), 0.0, _MAX_CHANNEL)
    return (256.0 * clamped).astype(np.uint8)


def write_ppm(
    image: npt.NDArray[np.floating],
    stream: TextIO,
    samples_per_pixel: int = 1,
) -> None:
    """Write an image as a plain-text PPM (P3) to a text stream.

    Args:
        image: Linear image of shape (H, W, 3), top row first. Values are
            divided by samples_per_pixel before quantization, so either an
            averaged image (the default) or a per-pixel sum can be passed.
        stream: Writable text stream.
        samples_per_pixel: Number of samples summed into each pixel.

    Raises:
        ValueError: If the image shape or samples_per_pixel is invalid.
    """
    _check_image_shape(image)
    if samples_per_pixel <= 0:
        raise ValueError(f"samples_per_pixel = {samples_per_pixel} must be positive.")

    height, width = image.shape[0], image.shape[1]
    scaled = np.maximum(np.nan_to_num(image.astype(np.float64), nan=0.0), 0.0)
    pixels = _quantize(np.sqrt(scaled / samples_per_pixel))

    stream.write(f"P3\n{width} {height}\n255\n")
    for row in pixels:
        stream.write("".join(f"{r} {g} {b}\n" for r, g, b in row))


def save_ppm(renderer: ProgressiveRenderer, filepath: str | Path) -> None:
    """Save the renderer's accumulated image as a PPM file."""
    image = renderer.get_image_numpy(gamma=1.0)
    with open(filepath, "w", encoding="ascii") as stream:
        write_ppm(image, stream)
    logger.info("Wrote %dx%d PPM to %s", image.shape[1], image.shape[0], filepath)


def image_to_uint8(
    image: npt.NDArray[np.float32],
    *,
    tone_map: ToneMapMethod = "none",
    gamma: float = 2.0,
    exposure: float = 1.0,
) -> npt.NDArray[np.uint8]:
    """Convert a linear float32 image to uint8 for display/export.

    Applies tone mapping and gamma correction, then the PPM quantization.

    Returns:
        8-bit image array of shape (H, W, 3) with dtype uint8.
    """
    processed = process_image_for_display(
        image,
        tone_map=tone_map,
        gamma=gamma,
        exposure=exposure,
    )
    return _quantize(processed)


def save_png_from_array(
    image: npt.NDArray[np.float32],
    filepath: str | Path,
    *,
    tone_map: ToneMapMethod = "none",
    gamma: float = 2.0,
    exposure: float = 1.0,
) -> None:
    """Save a linear NumPy image of shape (H, W, 3) as a PNG file."""
    _check_image_shape(image)
    image_uint8 = image_to_uint8(image, tone_map=tone_map, gamma=gamma, exposure=exposure)
    PILImage.fromarray(image_uint8).save(filepath)
    logger.info("Wrote %dx%d PNG to %s", image.shape[1], image.shape[0], filepath)


def save_png(
    renderer: ProgressiveRenderer,
    filepath: str | Path,
    *,
    tone_map: ToneMapMethod = "none",
    gamma: float = 2.0,
    exposure: float = 1.0,
) -> None:
    """Save the rendered image as a PNG file.

    Args:
        renderer: The ProgressiveRenderer instance to save.
        filepath: Output file path (should end in .png).
        tone_map: Tone mapping method ("none", "reinhard", or "exposure").
        gamma: Gamma correction value (default 2.0, same as the PPM output).
        exposure: Exposure value for exposure tone mapping (default 1.0).
    """
    save_png_from_array(
        renderer.get_image_numpy(gamma=1.0, clamp=False),
        filepath,
        tone_map=tone_map,
        gamma=gamma,
        exposure=exposure,
    )


def compute_rmse(
    image_a: npt.NDArray[np.floating],
    image_b: npt.NDArray[np.floating],
) -> float:
    """Compute root mean squared error between two images.

    Raises:
        ValueError: If image shapes don't match.
    """
    if image_a.shape != image_b.shape:
        raise ValueError(f"Image shapes must match: {image_a.shape} vs {image_b.shape}")

    diff = image_a.astype(np.float64) - image_b.astype(np.float64)
    return float(np.sqrt(np.mean(diff**2)))
