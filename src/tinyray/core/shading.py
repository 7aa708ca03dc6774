"""Local shading: ambient, diffuse and specular contributions at a hit.

The shading evaluator turns a SceneHitRecord into the surface colour seen
from the incoming ray, before any shadow or reflection rays are traced:

1. The output starts as the material's ambient colour.
2. Planes are special: they get a 2-unit checkerboard (a dark grey cell
   when any axis of floor(point / 2) is odd, the diffuse colour otherwise)
   and skip every other lighting term.
3. With DIFFUSE_AND_SPEC enabled, each light adds
       diffuse  = light * Kd * max(0, N . L)
       specular = light * Ks * max(0, cos) ** shininess
   where cos depends on the SpecularModel:
       LEGACY: normalize(reflect(light_position, N)) . N
       PHONG:  reflect(-L, N) . V
4. An inverse-square attenuation 1 / (1 + 0*d + 0.002*d^2) is always
   computed and only applied when apply_attenuation is set.

Colours are never clamped here; clamping happens on framebuffer write.
"""

import taichi as ti
import taichi.math as tm

from tinyray.core.config import SpecularModel, TraceFlags
from tinyray.core.ray import normalize, reflect
from tinyray.materials.phong import get_ambient, get_diffuse, get_specular, get_specular_power
from tinyray.scene.intersection import PrimitiveType, SceneHitRecord
from tinyray.scene.lighting import light_colours, light_positions, num_lights

vec3 = tm.vec3

# Colour of the odd cells of the plane checkerboard
CHECKER_DARK = vec3(0.1, 0.1, 0.1)

# Edge length of one checkerboard cell in world units
CHECKER_CELL_SIZE = 2.0

# Attenuation = 1 / (1 + linear * d + quadratic * d^2)
ATTENUATION_LINEAR = 0.0
ATTENUATION_QUADRATIC = 0.002


@ti.func
def checker_is_odd(point: vec3) -> ti.i32:
    """Return 1 if the point falls in a dark checkerboard cell.

    The cell coordinate of each axis is floor(coordinate / 2); the cell is
    dark when any of the three coordinates is odd.
    """
    odd = 0
    cell = ti.floor(point / CHECKER_CELL_SIZE)
    for k in ti.static(range(3)):
        if ti.cast(cell[k], ti.i32) % 2 != 0:
            odd = 1
    return odd


@ti.func
def attenuation_factor(distance: ti.f32) -> ti.f32:
    """Inverse-square light falloff at the given distance."""
    return 1.0 / (1.0 + ATTENUATION_LINEAR * distance + ATTENUATION_QUADRATIC * distance * distance)


@ti.func
def diffuse_term(normal: vec3, light_direction: vec3, light_colour: vec3, diffuse: vec3) -> vec3:
    """Lambertian term with the cosine clamped at zero for back-facing light."""
    cos_theta = ti.max(tm.dot(normal, light_direction), 0.0)
    return light_colour * diffuse * cos_theta


@ti.func
def specular_term(
    normal: vec3,
    light_position: vec3,
    light_direction: vec3,
    view_direction: vec3,
    light_colour: vec3,
    specular: vec3,
    specular_power: ti.f32,
    specular_model: ti.i32,
) -> vec3:
    """Specular highlight for one light.

    Args:
        normal: Unit surface normal.
        light_position: World-space light position.
        light_direction: Unit vector from the hit point to the light.
        view_direction: Unit vector from the hit point toward the viewer.
        light_colour: Light colour.
        specular: Material specular colour.
        specular_power: Material specular exponent.
        specular_model: SpecularModel value.

    Returns:
        The specular contribution.
    """
    cos_alpha = 0.0
    if specular_model == int(SpecularModel.PHONG):
        cos_alpha = tm.dot(reflect(-light_direction, normal), view_direction)
    else:
        cos_alpha = tm.dot(normalize(reflect(light_position, normal)), normal)
    # Negative bases with fractional exponents would give NaN
    coefficient = ti.max(cos_alpha, 0.0) ** specular_power
    return light_colour * specular * coefficient


@ti.func
def shade(
    hit: SceneHitRecord,
    view_direction: vec3,
    flags: ti.i32,
    specular_model: ti.i32,
    apply_attenuation: ti.i32,
) -> vec3:
    """Compute the local colour at a hit point.

    Args:
        hit: A SceneHitRecord with hit == 1.
        view_direction: Unit vector from the hit point toward the viewer
            (the negated incoming ray direction).
        flags: TraceFlags bitmask.
        specular_model: SpecularModel value.
        apply_attenuation: 1 to multiply lighting terms by attenuation.

    Returns:
        The shaded colour (unclamped).
    """
    material_id = hit.material_id
    colour = get_ambient(material_id)

    if hit.primitive_type == int(PrimitiveType.PLANE):
        if checker_is_odd(hit.point) == 1:
            colour = CHECKER_DARK
        else:
            colour = get_diffuse(material_id)

    elif (flags & int(TraceFlags.DIFFUSE_AND_SPEC)) != 0:
        diffuse = get_diffuse(material_id)
        specular = get_specular(material_id)
        specular_power = get_specular_power(material_id)

        for i in range(num_lights[None]):
            light_position = light_positions[i]
            light_colour = light_colours[i]
            to_light = light_position - hit.point
            light_direction = normalize(to_light)

            contribution = diffuse_term(hit.normal, light_direction, light_colour, diffuse)
            contribution += specular_term(
                hit.normal,
                light_position,
                light_direction,
                view_direction,
                light_colour,
                specular,
                specular_power,
                specular_model,
            )

            attenuation = attenuation_factor(tm.length(to_light))
            if apply_attenuation == 1:
                contribution *= attenuation

            colour += contribution

    return colour
