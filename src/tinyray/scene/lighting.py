"""Point lights and the scene background colour.

Lights are stored in insertion order in global Taichi fields; shading and
shadow loops iterate them in that order. The background colour is the
fallback colour of every primary ray that escapes the scene.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from tinyray.scene.lighting import add_light, set_background_colour
    >>> add_light(position=(0.0, 10.0, 5.0), colour=(1.0, 1.0, 1.0))
    >>> set_background_colour((0.0, 0.0, 0.2))
"""

from collections.abc import Sequence

import taichi as ti
import taichi.math as tm

vec3 = tm.vec3

MAX_LIGHTS = 64

DEFAULT_BACKGROUND_COLOUR = (0.0, 0.0, 0.0)

light_positions = ti.Vector.field(3, dtype=ti.f32, shape=MAX_LIGHTS)
light_colours = ti.Vector.field(3, dtype=ti.f32, shape=MAX_LIGHTS)
num_lights = ti.field(dtype=ti.i32, shape=())

_background_colour = ti.Vector.field(3, dtype=ti.f32, shape=())


def clear_lights() -> None:
    """Remove all lights and reset the background colour."""
    num_lights[None] = 0
    _background_colour[None] = DEFAULT_BACKGROUND_COLOUR


def add_light(position: Sequence[float], colour: Sequence[float] = (1.0, 1.0, 1.0)) -> int:
    """Add a point light.

    Args:
        position: World-space position of the light.
        colour: Light colour/intensity (R, G, B), components >= 0.

    Returns:
        The index of the added light.

    Raises:
        ValueError: If a colour component is negative.
        RuntimeError: If the maximum number of lights is exceeded.
    """
    if any(c < 0.0 for c in colour):
        raise ValueError(f"Light colour components must be >= 0, got {tuple(colour)}")
    idx = num_lights[None]
    if idx >= MAX_LIGHTS:
        raise RuntimeError(f"Maximum number of lights ({MAX_LIGHTS}) exceeded")
    light_positions[idx] = [float(c) for c in position]
    light_colours[idx] = [float(c) for c in colour]
    num_lights[None] = idx + 1
    return idx


def get_light_count() -> int:
    """Get the number of lights in the scene."""
    return int(num_lights[None])


def get_light(index: int) -> tuple[tuple[float, float, float], tuple[float, float, float]]:
    """Get the (position, colour) of a light.

    Raises:
        IndexError: If index is out of range.
    """
    if not 0 <= index < num_lights[None]:
        raise IndexError(f"Light index {index} out of range")
    p = light_positions[index]
    c = light_colours[index]
    return (float(p[0]), float(p[1]), float(p[2])), (float(c[0]), float(c[1]), float(c[2]))


def set_background_colour(colour: Sequence[float]) -> None:
    """Set the colour returned for primary rays that miss every primitive."""
    _background_colour[None] = [float(c) for c in colour]


def get_background_colour() -> tuple[float, float, float]:
    """Get the background colour."""
    c = _background_colour[None]
    return (float(c[0]), float(c[1]), float(c[2]))


@ti.func
def background_colour() -> vec3:
    """Background colour for use inside kernels."""
    return _background_colour[None]
