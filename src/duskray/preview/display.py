"""Matplotlib-based preview display for rendered images.

The renderer accumulates linear radiance. Star spheres with albedo above 1
can push pixels past 1.0, so the display pipeline offers optional tone
mapping ahead of gamma correction.

Example:
    >>> from duskray.preview.display import show_preview
    >>> from duskray.core.progressive import ProgressiveRenderer
    >>>
    >>> renderer = ProgressiveRenderer(300, 200)
    >>> renderer.render(20)
    >>> show_preview(renderer)
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Literal

import numpy as np
import numpy.typing as npt

if TYPE_CHECKING:
    from duskray.core.progressive import ProgressiveRenderer


ToneMapMethod = Literal["none", "reinhard", "exposure"]


def tone_map_reinhard(
    image: npt.NDArray[np.float32],
) -> npt.NDArray[np.float32]:
    """Apply Reinhard tone mapping: L / (1 + L)."""
    image = np.maximum(image, 0.0)
    result = image / (1.0 + image)
    return result.astype(np.float32)


def tone_map_exposure(
    image: npt.NDArray[np.float32],
    exposure: float = 1.0,
) -> npt.NDArray[np.float32]:
    """Apply exposure-based tone mapping: 1 - exp(-c * exposure).

    Args:
        image: Linear image array of shape (H, W, 3).
        exposure: Exposure value (default 1.0). Higher values brighten the image.
    """
    image = np.maximum(image, 0.0)
    result = 1.0 - np.exp(-image * exposure)
    return result.astype(np.float32)


def apply_gamma(
    image: npt.NDArray[np.float32],
    gamma: float = 2.0,
) -> npt.NDArray[np.float32]:
    """Apply gamma correction: out = in^(1/gamma).

    Values are clamped to [0, 1] first. The default gamma of 2.0 is the
    square root used by the PPM writer.
    """
    if gamma <= 0.0:
        raise ValueError(f"gamma = {gamma} must be positive.")
    if gamma == 1.0:
        return image

    # Clamp first, negative values would give NaN
    image = np.clip(image, 0.0, 1.0)
    result = np.power(image, 1.0 / gamma)
    return result.astype(np.float32)


def process_image_for_display(
    image: npt.NDArray[np.float32],
    tone_map: ToneMapMethod = "none",
    gamma: float = 2.0,
    exposure: float = 1.0,
) -> npt.NDArray[np.float32]:
    """Process an image for display with tone mapping and gamma correction.

    Applies:
    1. Tone mapping (optional)
    2. Gamma correction
    3. Clamping to [0, 1]

    Raises:
        ValueError: If tone_map is not a known method.
    """
    result = image.copy()

    if tone_map == "reinhard":
        result = tone_map_reinhard(result)
    elif tone_map == "exposure":
        result = tone_map_exposure(result, exposure)
    elif tone_map != "none":
        raise ValueError(f"Unknown tone mapping method: {tone_map}")

    result = apply_gamma(result, gamma)
    result = np.clip(result, 0.0, 1.0)

    return result.astype(np.float32)


def show_preview(
    renderer: ProgressiveRenderer,
    *,
    tone_map: ToneMapMethod = "none",
    gamma: float = 2.0,
    exposure: float = 1.0,
    title: str | None = None,
    figsize: tuple[float, float] = (9, 6),
    block: bool = True,
) -> None:
    """Display the current render as a Matplotlib figure.

    The sample count is displayed in the title unless a title is given.

    Args:
        renderer: The ProgressiveRenderer instance to display.
        tone_map: Tone mapping method ("none", "reinhard", or "exposure").
        gamma: Gamma correction value.
        exposure: Exposure value for exposure tone mapping.
        title: Custom title.
        figsize: Figure size in inches (width, height).
        block: Whether to block execution until figure is closed.
    """
    import matplotlib.pyplot as plt

    image = renderer.get_image_numpy(gamma=1.0, clamp=False)
    display_image = process_image_for_display(
        image,
        tone_map=tone_map,
        gamma=gamma,
        exposure=exposure,
    )

    fig, ax = plt.subplots(1, 1, figsize=figsize)
    ax.imshow(display_image)
    ax.axis("off")

    if title is None:
        title = f"Render Preview - {renderer.sample_count} SPP"
        if tone_map != "none":
            title += f" ({tone_map})"
    ax.set_title(title)

    plt.tight_layout()
    plt.show(block=block)
