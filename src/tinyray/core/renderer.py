"""Frame driver: traces one primary ray per pixel into a framebuffer.

The view plane is centred one focal distance in front of the camera and
spans scene_width x scene_height world units. Pixels are laid out from its
corner

    start = centre - (scene_width * right + scene_height * up) / 2

with pixel (row i, column j) centred at

    start + (i + 0.5) * up * dy + (j + 0.5) * right * dx

where dx = scene_width / columns and dy = scene_height / rows. Each primary
ray starts at the camera, is traced with the background colour as its
fallback and the configured depth budget, and lands in framebuffer cell
(column j, row i).

The pixel loop is the outermost loop of a Taichi kernel, so pixels are
traced in parallel; each writes only its own cell.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from tinyray.core.framebuffer import Framebuffer
    >>> from tinyray.core.renderer import RayTracer
    >>> from tinyray.scene.default_scene import create_default_scene
    >>> scene = create_default_scene()
    >>> framebuffer = Framebuffer(320, 240)
    >>> RayTracer().render(scene, framebuffer)
    <RenderOutcome.RENDERED: 'rendered'>
"""

import logging
import time
from enum import Enum
from typing import TYPE_CHECKING

import taichi as ti
import taichi.math as tm

from tinyray.camera.pinhole import (
    get_camera_basis,
    get_camera_position,
    get_scene_extent,
    get_scene_height,
    get_scene_width,
    get_view_plane_start,
    is_camera_ready,
    setup_camera,
)
from tinyray.core.config import ConfigurationError, TracerConfig
from tinyray.core.framebuffer import Framebuffer, RenderState, sanitize_colour
from tinyray.core.ray import normalize
from tinyray.core.tracer import trace
from tinyray.scene.lighting import background_colour

if TYPE_CHECKING:
    from tinyray.scene.manager import SceneManager

logger = logging.getLogger(__name__)

vec3 = tm.vec3

# Relative mismatch between view-plane and framebuffer aspect ratios that
# gets a warning (pixels are no longer square)
ASPECT_TOLERANCE = 0.01


class RenderOutcome(Enum):
    """What a call to RayTracer.render() did."""

    RENDERED = "rendered"
    SKIPPED = "skipped"


@ti.kernel
def _render_frame(
    pixels: ti.template(),
    width: ti.i32,
    height: ti.i32,
    max_depth: ti.i32,
    flags: ti.i32,
    specular_model: ti.i32,
    reflection_model: ti.i32,
    apply_attenuation: ti.i32,
):
    """Trace every pixel of the frame into pixels[column, row]."""
    start = get_view_plane_start()
    right, up, _ = get_camera_basis()
    scene_width, scene_height = get_scene_extent()
    pixel_dx = scene_width / ti.cast(width, ti.f32)
    pixel_dy = scene_height / ti.cast(height, ti.f32)
    camera_position = get_camera_position()
    fallback = background_colour()

    for i, j in ti.ndrange(height, width):
        pixel = (
            start
            + (ti.cast(i, ti.f32) + 0.5) * up * pixel_dy
            + (ti.cast(j, ti.f32) + 0.5) * right * pixel_dx
        )
        direction = normalize(pixel - camera_position)
        colour = trace(
            camera_position,
            direction,
            fallback,
            max_depth,
            0,
            flags,
            specular_model,
            reflection_model,
            apply_attenuation,
        )
        pixels[j, i] = sanitize_colour(colour)


class RayTracer:
    """Renders scenes into framebuffers with a fixed tracer configuration.

    Attributes:
        config: The TracerConfig used for every render.
    """

    def __init__(self, config: TracerConfig | None = None) -> None:
        self.config = config or TracerConfig()

    def _check_configuration(self, scene: "SceneManager | None", framebuffer: Framebuffer) -> None:
        """Fail fast on anything that would make the frame meaningless.

        Raises:
            ConfigurationError: On a resolution mismatch, a missing camera or
                an empty view plane.
        """
        config = self.config
        config.validate()

        if config.width is not None and config.width != framebuffer.width:
            raise ConfigurationError(
                f"Framebuffer width {framebuffer.width} does not match configured "
                f"width {config.width}"
            )
        if config.height is not None and config.height != framebuffer.height:
            raise ConfigurationError(
                f"Framebuffer height {framebuffer.height} does not match configured "
                f"height {config.height}"
            )

        camera = getattr(scene, "camera", None)
        if camera is not None:
            setup_camera(camera)
        if not is_camera_ready():
            raise ConfigurationError("No camera set up; call setup_camera() before rendering")

        scene_width = get_scene_width()
        scene_height = get_scene_height()
        if scene_width <= 0.0 or scene_height <= 0.0:
            raise ConfigurationError(
                f"View plane must have a positive size, got {scene_width}x{scene_height}"
            )

        plane_aspect = scene_width / scene_height
        buffer_aspect = framebuffer.width / framebuffer.height
        if abs(plane_aspect - buffer_aspect) > ASPECT_TOLERANCE * buffer_aspect:
            logger.warning(
                "View plane aspect %.3f differs from framebuffer aspect %.3f; "
                "pixels will not be square",
                plane_aspect,
                buffer_aspect,
            )

    def render(self, scene: "SceneManager | None", framebuffer: Framebuffer) -> RenderOutcome:
        """Trace the current scene into a framebuffer.

        A framebuffer is rendered at most once: if it is already RENDERED
        nothing is traced and SKIPPED is returned. Call framebuffer.reset()
        to render into it again.

        Args:
            scene: The scene being rendered. If it carries a camera, that
                camera is set up before tracing; None renders whatever is in
                the global scene storage.
            framebuffer: Destination framebuffer.

        Returns:
            RenderOutcome.RENDERED if the frame was traced, SKIPPED otherwise.

        Raises:
            ConfigurationError: If the framebuffer, camera or tracer
                configuration is invalid. Raised before any pixel is traced.
        """
        if framebuffer.state is RenderState.RENDERED:
            logger.info(
                "Framebuffer %dx%d already rendered; skipping",
                framebuffer.width,
                framebuffer.height,
            )
            return RenderOutcome.SKIPPED

        try:
            self._check_configuration(scene, framebuffer)
        except ConfigurationError as e:
            logger.error("Render aborted: %s", e)
            raise

        flags, specular_model, reflection_model, apply_attenuation = self.config.kernel_args()
        logger.info(
            "Trace start: %dx%d, max depth %d, flags %s",
            framebuffer.width,
            framebuffer.height,
            self.config.max_depth,
            self.config.trace_flags,
        )
        start_time = time.perf_counter()

        _render_frame(
            framebuffer.pixels,
            framebuffer.width,
            framebuffer.height,
            self.config.max_depth,
            flags,
            specular_model,
            reflection_model,
            apply_attenuation,
        )
        ti.sync()

        framebuffer.state = RenderState.RENDERED
        logger.info("Trace done in %.3fs", time.perf_counter() - start_time)
        return RenderOutcome.RENDERED


def render(
    scene: "SceneManager | None",
    framebuffer: Framebuffer,
    config: TracerConfig | None = None,
) -> RenderOutcome:
    """Render a scene with a one-off RayTracer. See RayTracer.render()."""
    return RayTracer(config).render(scene, framebuffer)
