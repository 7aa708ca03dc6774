"""Camera module for view-plane geometry.

Components:
    pinhole: Look-at pinhole camera producing the right/up/view basis, the
        view centre and the view-plane extent used to build primary rays

The frame driver lays pixels out on the view plane starting from
get_view_plane_start(); row i moves along the up vector and column j along
the right vector.
"""

from .pinhole import (
    PinholeCamera,
    clear_camera,
    get_camera_basis,
    get_camera_info,
    get_camera_position,
    get_camera_view,
    get_scene_extent,
    get_scene_height,
    get_scene_width,
    get_view_plane_start,
    is_camera_ready,
    setup_camera,
)

__all__ = [
    "PinholeCamera",
    "setup_camera",
    "clear_camera",
    "is_camera_ready",
    "get_camera_info",
    "get_camera_position",
    "get_camera_view",
    "get_camera_basis",
    "get_view_plane_start",
    "get_scene_extent",
    "get_scene_width",
    "get_scene_height",
]
