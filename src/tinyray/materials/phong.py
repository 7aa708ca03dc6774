"""Phong material registry.

A Phong material has an ambient, a diffuse and a specular colour plus a
specular exponent ("shininess"). Materials are immutable once registered
and are shared by id across any number of primitives.

Storage is a set of global Taichi fields (structure-of-arrays) so shading
code can read material properties from inside the render kernel.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from tinyray.materials.phong import add_phong_material
    >>> red = add_phong_material(
    ...     ambient=(0.1, 0.0, 0.0),
    ...     diffuse=(0.8, 0.0, 0.0),
    ...     specular=(1.0, 1.0, 1.0),
    ...     specular_power=32.0,
    ... )
"""

from collections.abc import Sequence
from dataclasses import dataclass

import taichi as ti
import taichi.math as tm

vec3 = tm.vec3


@dataclass(frozen=True)
class PhongMaterial:
    """Host-side description of a Phong material.

    Attributes:
        ambient: Colour returned when no light reaches the surface.
        diffuse: Lambertian reflectance colour.
        specular: Highlight colour.
        specular_power: Highlight exponent (>= 0); larger is tighter.
    """

    ambient: tuple[float, float, float] = (0.0, 0.0, 0.0)
    diffuse: tuple[float, float, float] = (0.0, 0.0, 0.0)
    specular: tuple[float, float, float] = (0.0, 0.0, 0.0)
    specular_power: float = 0.0


# =============================================================================
# Material Field Storage
# =============================================================================

MAX_PHONG_MATERIALS = 1024

material_ambient = ti.Vector.field(3, dtype=ti.f32, shape=MAX_PHONG_MATERIALS)
material_diffuse = ti.Vector.field(3, dtype=ti.f32, shape=MAX_PHONG_MATERIALS)
material_specular = ti.Vector.field(3, dtype=ti.f32, shape=MAX_PHONG_MATERIALS)
material_specular_power = ti.field(dtype=ti.f32, shape=MAX_PHONG_MATERIALS)
num_phong_materials = ti.field(dtype=ti.i32, shape=())


def _validate_colour(name: str, colour: Sequence[float]) -> tuple[float, float, float]:
    if len(colour) != 3:
        raise ValueError(f"{name} colour must have 3 components, got {len(colour)}")
    for i, component in enumerate(colour):
        if component < 0.0:
            raise ValueError(f"{name} colour component {i} = {component} is negative")
    return (float(colour[0]), float(colour[1]), float(colour[2]))


def clear_phong_materials() -> None:
    """Clear all registered materials.

    Resets the count; stale field data is overwritten by later additions.
    """
    num_phong_materials[None] = 0


def add_phong_material(
    ambient: Sequence[float] = (0.0, 0.0, 0.0),
    diffuse: Sequence[float] = (0.0, 0.0, 0.0),
    specular: Sequence[float] = (0.0, 0.0, 0.0),
    specular_power: float = 0.0,
) -> int:
    """Register a Phong material.

    Colours are not limited to [0, 1]; they only have to be non-negative.

    Args:
        ambient: Ambient colour (R, G, B).
        diffuse: Diffuse colour (R, G, B).
        specular: Specular colour (R, G, B).
        specular_power: Specular exponent, must be >= 0.

    Returns:
        The material id.

    Raises:
        ValueError: If a colour is malformed or negative, or the exponent is
            negative.
        RuntimeError: If the maximum number of materials is exceeded.
    """
    ambient = _validate_colour("Ambient", ambient)
    diffuse = _validate_colour("Diffuse", diffuse)
    specular = _validate_colour("Specular", specular)
    if specular_power < 0.0:
        raise ValueError(f"Specular power must be >= 0, got {specular_power}")

    idx = num_phong_materials[None]
    if idx >= MAX_PHONG_MATERIALS:
        raise RuntimeError(f"Maximum number of Phong materials ({MAX_PHONG_MATERIALS}) exceeded")

    material_ambient[idx] = ambient
    material_diffuse[idx] = diffuse
    material_specular[idx] = specular
    material_specular_power[idx] = float(specular_power)
    num_phong_materials[None] = idx + 1
    return idx


def get_phong_material_count() -> int:
    """Get the number of registered materials."""
    return int(num_phong_materials[None])


def get_phong_material(material_id: int) -> PhongMaterial:
    """Read a registered material back from the Taichi fields.

    Raises:
        IndexError: If material_id is not a registered id.
    """
    if not 0 <= material_id < num_phong_materials[None]:
        raise IndexError(f"Material id {material_id} is not registered")

    def _triple(field) -> tuple[float, float, float]:
        value = field[material_id]
        return (float(value[0]), float(value[1]), float(value[2]))

    return PhongMaterial(
        ambient=_triple(material_ambient),
        diffuse=_triple(material_diffuse),
        specular=_triple(material_specular),
        specular_power=float(material_specular_power[material_id]),
    )


# =============================================================================
# Kernel-side Accessors
# =============================================================================


@ti.func
def get_ambient(material_id: ti.i32) -> vec3:
    """Ambient colour of a material."""
    return material_ambient[material_id]


@ti.func
def get_diffuse(material_id: ti.i32) -> vec3:
    """Diffuse colour of a material."""
    return material_diffuse[material_id]


@ti.func
def get_specular(material_id: ti.i32) -> vec3:
    """Specular colour of a material."""
    return material_specular[material_id]


@ti.func
def get_specular_power(material_id: ti.i32) -> ti.f32:
    """Specular exponent of a material."""
    return material_specular_power[material_id]
