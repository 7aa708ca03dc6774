"""Image export utilities for rendered frames.

Supported formats:
    - PNG (8-bit sRGB via Pillow)

Example:
    >>> from tinyray.preview.export import save_png
    >>> RayTracer().render(scene, framebuffer)
    >>> save_png(framebuffer, "output.png")
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

import numpy as np
import numpy.typing as npt
from PIL import Image as PILImage

from tinyray.preview.display import process_image_for_display

if TYPE_CHECKING:
    from tinyray.core.framebuffer import Framebuffer

logger = logging.getLogger(__name__)


def image_to_uint8(
    image: npt.NDArray[np.float32],
    *,
    gamma: float = 2.2,
) -> npt.NDArray[np.uint8]:
    """Convert a linear float32 image to uint8 for display/export.

    Args:
        image: Linear image array of shape (H, W, 3).
        gamma: Gamma correction value (default 2.2 for sRGB).

    Returns:
        8-bit image array of shape (H, W, 3) with dtype uint8.
    """
    processed = process_image_for_display(image, gamma=gamma)
    # Round rather than truncate so 1.0 maps to 255 and 0.5 to 128
    return np.rint(processed * 255.0).astype(np.uint8)


def save_png_from_array(
    image: npt.NDArray[np.float32],
    filepath: str | Path,
    *,
    gamma: float = 2.2,
) -> None:
    """Save a NumPy array as an 8-bit sRGB PNG file.

    Args:
        image: Linear image array of shape (H, W, 3), top row first.
        filepath: Output file path (should end in .png).
        gamma: Gamma correction value (default 2.2 for sRGB).

    Raises:
        ValueError: If the array is not (H, W, 3).
    """
    if image.ndim != 3 or image.shape[2] != 3:
        raise ValueError(f"Expected an (H, W, 3) image, got shape {image.shape}")
    image_uint8 = image_to_uint8(image, gamma=gamma)
    PILImage.fromarray(image_uint8).save(filepath)
    logger.info("Saved %dx%d image to %s", image.shape[1], image.shape[0], filepath)


def save_png(
    framebuffer: Framebuffer,
    filepath: str | Path,
    *,
    gamma: float = 2.2,
) -> None:
    """Save a framebuffer as an 8-bit sRGB PNG file.

    Saving an unrendered framebuffer is allowed (it writes whatever the
    framebuffer holds) but is logged as a warning.

    Args:
        framebuffer: The framebuffer to save.
        filepath: Output file path (should end in .png).
        gamma: Gamma correction value (default 2.2 for sRGB).

    Example:
        >>> save_png(framebuffer, "output.png", gamma=1.0)  # linear output
    """
    if not framebuffer.is_rendered:
        logger.warning("Saving a framebuffer that has not been rendered")
    save_png_from_array(framebuffer.to_numpy(), filepath, gamma=gamma)

