"""Scene module.

Components:
    intersection: Primitive storage and closest-hit / any-hit queries
    lighting: Point lights and the background colour
    manager: SceneManager builder over the global scene storage
    default_scene: The stock demo scene

Scene storage is global: there is one live scene per Taichi runtime.
"""

from .intersection import (
    MAX_PLANES,
    MAX_QUADS,
    MAX_SPHERES,
    PrimitiveType,
    SceneHitRecord,
    add_plane,
    add_quad,
    add_sphere,
    clear_scene,
    get_plane_count,
    get_quad_count,
    get_sphere_count,
    intersect_scene,
)
from .lighting import (
    MAX_LIGHTS,
    add_light,
    clear_lights,
    get_background_colour,
    get_light,
    get_light_count,
    set_background_colour,
)
from .manager import SceneConfig, SceneManager

__all__ = [
    "PrimitiveType",
    "SceneHitRecord",
    "MAX_SPHERES",
    "MAX_QUADS",
    "MAX_PLANES",
    "MAX_LIGHTS",
    "clear_scene",
    "add_sphere",
    "add_quad",
    "add_plane",
    "get_sphere_count",
    "get_quad_count",
    "get_plane_count",
    "intersect_scene",
    "clear_lights",
    "add_light",
    "get_light",
    "get_light_count",
    "set_background_colour",
    "get_background_colour",
    "SceneManager",
    "SceneConfig",
]
