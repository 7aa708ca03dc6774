"""Vector helpers shared by the tracer, shading and frame driver.

Rays are never stored: each one is an origin and a unit direction passed
by value, and every child ray (reflection or shadow probe) gets its origin
from offset_ray_origin so it does not re-hit the surface it leaves.
"""

import taichi as ti
import taichi.math as tm

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3

# Offset applied to secondary ray origins to avoid self-intersection
RAY_EPSILON = 1e-4

# Squared lengths below this are treated as degenerate (zero) vectors
DEGENERATE_LENGTH_SQUARED = 1e-12


@ti.func
def normalize(v: vec3) -> vec3:
    """Normalize a vector to unit length.

    Unlike tm.normalize, a zero-length input gives a zero vector instead
    of NaNs.

    Args:
        v: The input vector.

    Returns:
        A unit vector in the same direction as v, or zero if v is degenerate.
    """
    result = vec3(0.0, 0.0, 0.0)
    len_sq = tm.dot(v, v)
    if len_sq > DEGENERATE_LENGTH_SQUARED:
        result = v / ti.sqrt(len_sq)
    return result


@ti.func
def reflect(incident: vec3, normal: vec3) -> vec3:
    """Reflect a vector about a normal.

    Computes incident - 2 * dot(incident, normal) * normal. The incident
    vector does not need to be a direction; the shading code also reflects
    light position vectors with it.

    Args:
        incident: The vector to reflect.
        normal: The surface normal (should be normalized).

    Returns:
        The reflected vector.
    """
    return incident - 2.0 * tm.dot(incident, normal) * normal


@ti.func
def near_zero(v: vec3) -> ti.i32:
    """Check whether a vector is close to zero in all dimensions.

    Returns:
        1 if every component has magnitude below 1e-8, 0 otherwise.
    """
    s = 1e-8
    return ti.abs(v[0]) < s and ti.abs(v[1]) < s and ti.abs(v[2]) < s


@ti.func
def offset_ray_origin(point: vec3, normal: vec3, direction: vec3) -> vec3:
    """Offset a secondary ray origin to avoid self-intersection.

    Pushes the point along the surface normal toward the side the new ray
    travels into.

    Args:
        point: The intersection point.
        normal: The surface normal at the intersection.
        direction: The direction of the ray that will leave the surface.

    Returns:
        The offset origin point.
    """
    offset_dir = normal
    if tm.dot(direction, normal) < 0.0:
        offset_dir = -normal
    return point + RAY_EPSILON * offset_dir
