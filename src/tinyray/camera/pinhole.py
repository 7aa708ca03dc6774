"""Pinhole camera providing the view-plane geometry for primary rays.

The camera is described with look-at parameters (lookfrom, lookat, vup)
plus a vertical field of view and an aspect ratio. setup_camera() derives
what the frame driver consumes:

- right, up and view unit vectors (an orthonormal basis),
- the view centre, the point one focal distance in front of the camera,
- the scene width and height, the world-space extent of the view plane.

Everything lives in global Taichi fields so kernels can read it.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from tinyray.camera.pinhole import PinholeCamera, setup_camera
    >>> camera = PinholeCamera(
    ...     lookfrom=(0.0, 2.0, 8.0),
    ...     lookat=(0.0, 0.0, 0.0),
    ...     vup=(0.0, 1.0, 0.0),
    ...     vfov=60.0,
    ...     aspect_ratio=4.0 / 3.0,
    ... )
    >>> setup_camera(camera)
"""

import math
from dataclasses import dataclass

import numpy as np
import taichi as ti
import taichi.math as tm

from tinyray.core.config import ConfigurationError

vec3 = tm.vec3


@dataclass
class PinholeCamera:
    """Configuration for a pinhole (perspective) camera.

    Attributes:
        lookfrom: Camera position in world space.
        lookat: Point the camera looks at.
        vup: Approximate up direction; must not be parallel to the view.
        vfov: Vertical field of view in degrees, in (0, 180).
        aspect_ratio: View-plane width divided by height.
        focal_distance: Distance from the camera to the view plane.
    """

    lookfrom: tuple[float, float, float]
    lookat: tuple[float, float, float]
    vup: tuple[float, float, float] = (0.0, 1.0, 0.0)
    vfov: float = 60.0
    aspect_ratio: float = 1.0
    focal_distance: float = 1.0


# =============================================================================
# Taichi Fields for Camera State
# =============================================================================

_camera_position = ti.Vector.field(3, dtype=ti.f32, shape=())
_camera_right = ti.Vector.field(3, dtype=ti.f32, shape=())
_camera_up = ti.Vector.field(3, dtype=ti.f32, shape=())
_camera_view = ti.Vector.field(3, dtype=ti.f32, shape=())
_view_centre = ti.Vector.field(3, dtype=ti.f32, shape=())
_scene_width = ti.field(dtype=ti.f32, shape=())
_scene_height = ti.field(dtype=ti.f32, shape=())
_camera_ready = ti.field(dtype=ti.i32, shape=())


def setup_camera(camera: PinholeCamera) -> None:
    """Derive and store the camera basis and view-plane extents.

    Args:
        camera: Camera configuration.

    Raises:
        ConfigurationError: If the field of view, aspect ratio or focal
            distance is out of range, lookfrom equals lookat, or vup is
            parallel to the view direction.
    """
    if not 0.0 < camera.vfov < 180.0:
        raise ConfigurationError(f"vfov must be in (0, 180) degrees, got {camera.vfov}")
    if camera.aspect_ratio <= 0.0:
        raise ConfigurationError(f"aspect_ratio must be positive, got {camera.aspect_ratio}")
    if camera.focal_distance <= 0.0:
        raise ConfigurationError(f"focal_distance must be positive, got {camera.focal_distance}")

    lookfrom = np.array(camera.lookfrom, dtype=np.float64)
    lookat = np.array(camera.lookat, dtype=np.float64)
    vup = np.array(camera.vup, dtype=np.float64)

    view = lookat - lookfrom
    view_len = np.linalg.norm(view)
    if view_len < 1e-8:
        raise ConfigurationError("Camera lookfrom and lookat must differ")
    view = view / view_len

    right = np.cross(view, vup)
    right_len = np.linalg.norm(right)
    if right_len < 1e-8:
        raise ConfigurationError("Camera vup must not be parallel to the view direction")
    right = right / right_len
    up = np.cross(right, view)

    height = 2.0 * camera.focal_distance * math.tan(math.radians(camera.vfov) / 2.0)
    width = camera.aspect_ratio * height
    centre = lookfrom + camera.focal_distance * view

    _camera_position[None] = lookfrom.tolist()
    _camera_right[None] = right.tolist()
    _camera_up[None] = up.tolist()
    _camera_view[None] = view.tolist()
    _view_centre[None] = centre.tolist()
    _scene_width[None] = width
    _scene_height[None] = height
    _camera_ready[None] = 1


def clear_camera() -> None:
    """Forget the current camera; renders fail until a new one is set up."""
    _camera_ready[None] = 0


def is_camera_ready() -> bool:
    """Check whether setup_camera() has been called."""
    return bool(_camera_ready[None])


def get_scene_width() -> float:
    """World-space width of the view plane."""
    return float(_scene_width[None])


def get_scene_height() -> float:
    """World-space height of the view plane."""
    return float(_scene_height[None])


# =============================================================================
# Kernel-side Accessors
# =============================================================================


@ti.func
def get_camera_position() -> vec3:
    """The camera position in world space."""
    return _camera_position[None]


@ti.func
def get_camera_view() -> vec3:
    """The unit view (forward) direction."""
    return _camera_view[None]


@ti.func
def get_camera_basis():
    """Return the (right, up, view) unit vectors."""
    return _camera_right[None], _camera_up[None], _camera_view[None]


@ti.func
def get_view_plane_start() -> vec3:
    """Corner of the view plane from which pixel rows and columns are laid out.

    start = centre - (width * right + height * up) / 2
    """
    return _view_centre[None] - (
        _scene_width[None] * _camera_right[None] + _scene_height[None] * _camera_up[None]
    ) / 2.0


@ti.func
def get_scene_extent():
    """Return the (width, height) of the view plane."""
    return _scene_width[None], _scene_height[None]


def get_camera_info() -> dict[str, tuple[float, float, float]]:
    """Get the current camera state for debugging and validation.

    Returns:
        Dictionary with position, right, up, view and centre vectors.
    """

    def _triple(field) -> tuple[float, float, float]:
        value = field[None]
        return (float(value[0]), float(value[1]), float(value[2]))

    return {
        "position": _triple(_camera_position),
        "right": _triple(_camera_right),
        "up": _triple(_camera_up),
        "view": _triple(_camera_view),
        "centre": _triple(_view_centre),
    }
