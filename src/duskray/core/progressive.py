"""Progressive renderer for iterative sample accumulation.

This module provides a convenient wrapper around the core integrator that supports:
- Progressive rendering that refines over time
- Batch rendering (multiple SPP in one call)
- Progress callbacks and a generator variant
- Easy reset and re-render functionality

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from duskray.core.progressive import ProgressiveRenderer
    >>> from duskray.scene.night_scene import create_night_scene
    >>> from duskray.camera.thin_lens import setup_camera
    >>>
    >>> scene, camera = create_night_scene()
    >>> setup_camera(camera)
    >>>
    >>> renderer = ProgressiveRenderer(300, 200, max_depth=50)
    >>> renderer.render(20)
    >>> image = renderer.get_image_numpy()
"""

import logging
import time
from collections.abc import Callable, Generator
from pathlib import Path
from typing import Any

import numpy as np
import numpy.typing as npt

from duskray.core.integrator import (
    MAX_DEPTH,
    clear_render_target,
    get_image,
    get_normalized_image_numpy,
    get_total_samples,
    render_image,
    setup_render_target,
)

logger = logging.getLogger(__name__)

# Callback receives (current_samples, total_target_samples)
ProgressCallback = Callable[[int, int], None]


class ProgressiveRenderer:
    """A progressive renderer that accumulates samples over time.

    The renderer keeps width, height and bounce depth, and delegates to the
    global integrator buffers (which are Taichi fields).

    Attributes:
        width: Image width in pixels.
        height: Image height in pixels.
        max_depth: Maximum bounces per path.
    """

    def __init__(self, width: int, height: int, max_depth: int = MAX_DEPTH) -> None:
        """Initialize the progressive renderer.

        Args:
            width: Image width in pixels (max 2048).
            height: Image height in pixels (max 2048).
            max_depth: Maximum bounces per path.

        Raises:
            ValueError: If dimensions are invalid.
        """
        self._width = width
        self._height = height
        self._max_depth = max_depth
        setup_render_target(width, height)

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    @property
    def max_depth(self) -> int:
        return self._max_depth

    @property
    def sample_count(self) -> int:
        """Get the current number of accumulated samples per pixel."""
        return get_total_samples()

    def reset(self) -> None:
        """Clear the accumulator without changing the image dimensions."""
        clear_render_target()

    def resize(self, width: int, height: int) -> None:
        """Resize the render target and reset accumulator.

        Raises:
            ValueError: If dimensions are invalid.
        """
        self._width = width
        self._height = height
        setup_render_target(width, height)

    def render(
        self,
        num_samples: int = 1,
        batch_size: int = 1,
        callback: ProgressCallback | None = None,
    ) -> None:
        """Render samples progressively with optional progress callback.

        Accumulates the specified number of samples into the existing buffer.
        Can be called multiple times to continue refining the image.

        Args:
            num_samples: Total number of samples to add.
            batch_size: Number of samples to render before each callback.
            callback: Optional callback function called after each batch.
                Receives (current_total_samples, target_total_samples).
        """
        for current, target in self.render_progressive(num_samples, batch_size):
            if callback is not None:
                callback(current, target)

    def render_progressive(
        self,
        num_samples: int = 1,
        batch_size: int = 1,
    ) -> Generator[tuple[int, int], None, None]:
        """Render samples progressively, yielding progress after each batch.

        Yields:
            Tuple of (current_total_samples, target_total_samples).
        """
        if num_samples <= 0:
            return
        batch_size = max(1, batch_size)

        start_samples = self.sample_count
        target_samples = start_samples + num_samples
        logger.info(
            "Rendering %dx%d, %d samples per pixel, max depth %d",
            self._width,
            self._height,
            num_samples,
            self._max_depth,
        )
        start = time.perf_counter()

        remaining = num_samples
        while remaining > 0:
            batch = min(batch_size, remaining)
            render_image(batch, self._max_depth)
            remaining -= batch
            current = self.sample_count
            logger.debug("Accumulated %d/%d samples", current, target_samples)
            yield (current, target_samples)

        logger.info("Rendered %d samples in %.2fs", num_samples, time.perf_counter() - start)

    def get_image(self) -> Any:
        """Get the raw Taichi color buffer field (full preallocated buffer)."""
        return get_image()

    def get_image_numpy(self, gamma: float = 1.0, clamp: bool = True) -> npt.NDArray[np.float32]:
        """Get the rendered image as a NumPy array.

        Args:
            gamma: Gamma correction value. Default 1.0 (linear).
                Use 2.0 to match the PPM output.
            clamp: Clamp to [0, 1] before gamma. Pass False to keep HDR
                values for tone mapping.

        Returns:
            NumPy array of shape (height, width, 3) with dtype float32.
        """
        image = get_normalized_image_numpy(clamp=clamp)

        if gamma != 1.0:
            image = np.power(image, 1.0 / gamma)

        return image

    def get_image_uint8(self, gamma: float = 2.0) -> npt.NDArray[np.uint8]:
        """Get the rendered image as an 8-bit NumPy array.

        Uses the same quantization as the PPM writer.
        """
        from duskray.preview.export import image_to_uint8

        return image_to_uint8(self.get_image_numpy(), gamma=gamma)

    def save_image(self, filepath: str | Path, gamma: float = 2.0) -> None:
        """Save the rendered image, choosing PPM or PNG from the extension."""
        from duskray.preview.export import save_png, save_ppm

        if Path(filepath).suffix.lower() == ".ppm":
            save_ppm(self, filepath)
        else:
            save_png(self, filepath, gamma=gamma)

    def __repr__(self) -> str:
        return (
            f"ProgressiveRenderer(width={self.width}, height={self.height}, "
            f"samples={self.sample_count}, max_depth={self.max_depth})"
        )
