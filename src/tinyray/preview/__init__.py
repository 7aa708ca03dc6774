"""Preview module for output and visualization.

Components:
    display: Gamma processing and a Matplotlib preview window
    export: PNG export utilities

Example:
    >>> from tinyray.preview import save_png, show_preview
    >>> RayTracer().render(scene, framebuffer)
    >>> show_preview(framebuffer)
    >>> save_png(framebuffer, "output.png", gamma=2.2)
"""

from tinyray.preview.display import (
    apply_gamma,
    process_image_for_display,
    show_preview,
)
from tinyray.preview.export import (
    image_to_uint8,
    save_png,
    save_png_from_array,
)

__all__ = [
    "show_preview",
    "apply_gamma",
    "process_image_for_display",
    "save_png",
    "save_png_from_array",
    "image_to_uint8",
]
