"""Recursive (Whitted-style) ray tracer.

The tracer follows this recursive definition:

    trace(ray, fallback, depth, shadow):
        if depth <= 0:      return fallback
        hit = intersect(ray, shadow)
        if miss:            return fallback
        if shadow:          return fallback * SHADOW_FACTOR
        c = shade(hit)
        if REFLECTION and hit is not a plane:
            c = c * trace(reflection_ray, c, depth - 1, False)
        if SHADOW:
            for light in lights:
                c = trace(shadow_ray(light), c, depth - 1, True)
        return c

Taichi functions cannot recurse, so trace() unrolls the definition into a
loop. A shadow probe either returns its fallback unchanged or scales it by
SHADOW_FACTOR, so every level of the reflection chain multiplies the final
colour by (local colour * SHADOW_FACTOR ** occluded_lights). The loop
carries that product as a throughput and stops at the first level that
does not reflect, misses, or runs out of depth. Both forms give the same
colour and the same number of trace calls.

Every child ray is a fresh value: one per reflection bounce and one per
light for shadow probes.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from tinyray.core.tracer import trace_ray
    >>> result = trace_ray((0, 0, 5), (0, 0, -1), fallback_colour=(0.2, 0.2, 0.2))
    >>> result.calls
    1
"""

from collections.abc import Sequence
from dataclasses import dataclass

import taichi as ti
import taichi.math as tm

from tinyray.camera.pinhole import get_camera_position, get_camera_view, is_camera_ready
from tinyray.core.config import (
    ConfigurationError,
    ReflectionModel,
    TraceFlags,
    TracerConfig,
)
from tinyray.core.ray import near_zero, normalize, offset_ray_origin, reflect
from tinyray.core.shading import shade
from tinyray.scene.intersection import PrimitiveType, intersect_scene
from tinyray.scene.lighting import light_positions, num_lights

vec3 = tm.vec3

# =============================================================================
# Tracing Constants
# =============================================================================

# Colour scale returned by a shadow ray that is blocked
SHADOW_FACTOR = 0.3

# Shadow ray origins are moved this far toward the light
SHADOW_BIAS = 1e-4

# Empirical reflection intensity, scaled by dot(camera position, camera view)
REFLECTION_INTENSITY = -3.5

T_MIN = 1e-4
T_MAX = 1e10


# =============================================================================
# Child Rays
# =============================================================================


@ti.func
def reflection_direction(incident: vec3, normal: vec3, reflection_model: ti.i32) -> vec3:
    """Direction of the reflection ray leaving a hit point.

    MIRROR returns reflect(incident, normal). LEGACY returns
    normalize(cam_pos + reflect(incident, normal) * k) with
    k = REFLECTION_INTENSITY * dot(cam_pos, cam_view), falling back to the
    mirror direction when that vector is degenerate.
    """
    mirror = reflect(incident, normal)
    direction = normalize(mirror)
    if reflection_model == int(ReflectionModel.LEGACY):
        camera_position = get_camera_position()
        intensity = REFLECTION_INTENSITY * tm.dot(camera_position, get_camera_view())
        legacy = camera_position + mirror * intensity
        if near_zero(legacy) == 0:
            direction = normalize(legacy)
    return direction


@ti.func
def _blocked(origin: vec3, direction: vec3, depth: ti.i32, t_max: ti.f32) -> ti.i32:
    """Occlusion test behind every shadow ray.

    Returns 1 if depth > 0 and anything is hit within (T_MIN, t_max).
    A spent depth budget is the base case and never reports a blocker.
    """
    blocked = 0
    if depth > 0:
        hit = intersect_scene(origin, direction, T_MIN, t_max, 1)
        blocked = hit.hit
    return blocked


@ti.func
def shadow_scale(point: vec3, light_position: vec3, depth: ti.i32) -> ti.f32:
    """Trace one shadow ray from a hit point toward a light.

    The probe starts SHADOW_BIAS along the light direction and stops at the
    light, so geometry behind the light does not cast a shadow.

    Returns:
        SHADOW_FACTOR if the light is blocked, 1.0 otherwise.
    """
    to_light = light_position - point
    distance = tm.length(to_light)
    direction = normalize(to_light)
    origin = point + direction * SHADOW_BIAS
    scale = 1.0
    if _blocked(origin, direction, depth, distance - SHADOW_BIAS) == 1:
        scale = SHADOW_FACTOR
    return scale


# =============================================================================
# Tracer Core
# =============================================================================


@ti.func
def trace_with_stats(
    origin: vec3,
    direction: vec3,
    fallback: vec3,
    depth: ti.i32,
    is_shadow_ray: ti.i32,
    flags: ti.i32,
    specular_model: ti.i32,
    reflection_model: ti.i32,
    apply_attenuation: ti.i32,
):
    """Trace a ray and count the trace calls the recursion performs.

    Args:
        origin: Ray origin.
        direction: Ray direction (normalized here).
        fallback: Colour returned when the ray escapes or depth is spent.
        depth: Remaining recursion budget.
        is_shadow_ray: 1 to trace an occlusion probe.
        flags: TraceFlags bitmask. REFRACTION is ignored.
        specular_model: SpecularModel value.
        reflection_model: ReflectionModel value.
        apply_attenuation: 1 to apply light attenuation in shading.

    Returns:
        Tuple of (colour, calls).
    """
    ray_direction = normalize(direction)
    result = fallback
    calls = 0

    if is_shadow_ray == 1:
        calls = 1
        if _blocked(origin, ray_direction, depth, T_MAX) == 1:
            result = fallback * SHADOW_FACTOR
    else:
        ray_origin = origin
        level_fallback = fallback
        level_depth = depth
        throughput = vec3(1.0, 1.0, 1.0)
        active = 1

        while active == 1:
            calls += 1
            if level_depth <= 0:
                result = throughput * level_fallback
                active = 0
            else:
                hit = intersect_scene(ray_origin, ray_direction, T_MIN, T_MAX, 0)
                if hit.hit == 0:
                    result = throughput * level_fallback
                    active = 0
                else:
                    local = shade(hit, -ray_direction, flags, specular_model, apply_attenuation)

                    # Each light's probe rescales the running colour in turn
                    occlusion = 1.0
                    if (flags & int(TraceFlags.SHADOW)) != 0:
                        for i in range(num_lights[None]):
                            calls += 1
                            occlusion *= shadow_scale(hit.point, light_positions[i], level_depth - 1)

                    reflects = 0
                    if (flags & int(TraceFlags.REFLECTION)) != 0:
                        if hit.primitive_type != int(PrimitiveType.PLANE):
                            reflects = 1

                    if reflects == 1:
                        throughput *= local * occlusion
                        level_fallback = local
                        ray_direction = reflection_direction(
                            ray_direction, hit.normal, reflection_model
                        )
                        ray_origin = offset_ray_origin(hit.point, hit.normal, ray_direction)
                        level_depth -= 1
                    else:
                        result = throughput * local * occlusion
                        active = 0

    return result, calls


@ti.func
def trace(
    origin: vec3,
    direction: vec3,
    fallback: vec3,
    depth: ti.i32,
    is_shadow_ray: ti.i32,
    flags: ti.i32,
    specular_model: ti.i32,
    reflection_model: ti.i32,
    apply_attenuation: ti.i32,
) -> vec3:
    """Trace a ray through the scene and return its colour.

    See trace_with_stats() for the arguments.
    """
    colour, _ = trace_with_stats(
        origin,
        direction,
        fallback,
        depth,
        is_shadow_ray,
        flags,
        specular_model,
        reflection_model,
        apply_attenuation,
    )
    return colour


# =============================================================================
# Python Entry Point
# =============================================================================

_single_ray_colour = ti.Vector.field(3, dtype=ti.f32, shape=())
_single_ray_calls = ti.field(dtype=ti.i32, shape=())


@ti.kernel
def _trace_single_ray(
    origin: vec3,
    direction: vec3,
    fallback: vec3,
    depth: ti.i32,
    is_shadow_ray: ti.i32,
    flags: ti.i32,
    specular_model: ti.i32,
    reflection_model: ti.i32,
    apply_attenuation: ti.i32,
):
    # Single-iteration outer loop keeps the scans inside trace serial
    for _ in range(1):
        colour, calls = trace_with_stats(
            origin,
            direction,
            fallback,
            depth,
            is_shadow_ray,
            flags,
            specular_model,
            reflection_model,
            apply_attenuation,
        )
        _single_ray_colour[None] = colour
        _single_ray_calls[None] = calls


@dataclass(frozen=True)
class TraceResult:
    """Outcome of tracing a single ray from Python.

    Attributes:
        colour: The traced colour (unclamped).
        calls: Number of trace invocations, counting the initial one.
    """

    colour: tuple[float, float, float]
    calls: int


def trace_ray(
    origin: Sequence[float],
    direction: Sequence[float],
    fallback_colour: Sequence[float] = (0.0, 0.0, 0.0),
    depth_budget: int | None = None,
    is_shadow_ray: bool = False,
    config: TracerConfig | None = None,
) -> TraceResult:
    """Trace one ray against the current scene.

    This is the Python-callable form of trace(), used for debugging and
    tests. Rendering a frame goes through RayTracer.render().

    Args:
        origin: Ray origin.
        direction: Ray direction; it is normalized before tracing.
        fallback_colour: Colour returned if the ray escapes.
        depth_budget: Recursion budget; defaults to config.max_depth.
        is_shadow_ray: Trace an occlusion probe instead of a view ray.
        config: Tracer configuration; defaults to TracerConfig().

    Returns:
        A TraceResult with the colour and the number of trace calls.

    Raises:
        ConfigurationError: If legacy reflections are enabled but no camera
            has been set up.
    """
    config = config or TracerConfig()
    if depth_budget is None:
        depth_budget = config.max_depth
    if (
        config.has(TraceFlags.REFLECTION)
        and config.reflection_model == ReflectionModel.LEGACY
        and not is_camera_ready()
    ):
        raise ConfigurationError("Legacy reflections need a camera; call setup_camera() first")

    flags, specular_model, reflection_model, apply_attenuation = config.kernel_args()
    _trace_single_ray(
        vec3(*[float(c) for c in origin]),
        vec3(*[float(c) for c in direction]),
        vec3(*[float(c) for c in fallback_colour]),
        int(depth_budget),
        int(is_shadow_ray),
        flags,
        specular_model,
        reflection_model,
        apply_attenuation,
    )
    colour = _single_ray_colour[None]
    return TraceResult(
        colour=(float(colour[0]), float(colour[1]), float(colour[2])),
        calls=int(_single_ray_calls[None]),
    )
