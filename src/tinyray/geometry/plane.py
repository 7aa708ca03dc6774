"""Infinite plane primitive.

A plane is stored as a unit normal n and an offset d so that every point P
on it satisfies dot(n, P) = d. Planes are the floor of the demo scene; the
shading code gives them a checkerboard and the tracer never reflects off
them.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from tinyray.geometry.plane import Plane, hit_plane
    >>> floor = Plane(normal=ti.math.vec3(0, 1, 0), offset=0.0)
    >>> # Use hit_plane within a Taichi kernel
"""

import taichi as ti
import taichi.math as tm

from .sphere import HitRecord, face_forward, make_miss_hit_record

vec3 = tm.vec3


@ti.dataclass
class Plane:
    """An infinite plane dot(normal, P) = offset.

    Attributes:
        normal: Unit normal of the plane (vec3).
        offset: Signed distance of the plane from the origin along normal.
    """

    normal: vec3
    offset: ti.f32


@ti.func
def hit_plane(
    ray_origin: vec3,
    ray_direction: vec3,
    plane: Plane,
    t_min: ti.f32,
    t_max: ti.f32,
) -> HitRecord:
    """Test for ray-plane intersection.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The direction vector of the ray.
        plane: The plane to test against.
        t_min: Minimum t value for a valid hit.
        t_max: Maximum t value for a valid hit.

    Returns:
        A HitRecord whose normal faces the incoming ray. front_face is 1
        when the ray approaches from the side the stored normal points to.
    """
    denom = tm.dot(plane.normal, ray_direction)
    record = make_miss_hit_record()

    if ti.abs(denom) > 1e-8:
        t = (plane.offset - tm.dot(plane.normal, ray_origin)) / denom
        if t > t_min and t < t_max:
            record.hit = 1
            record.t = t
            record.point = ray_origin + t * ray_direction
            normal, front = face_forward(ray_direction, plane.normal)
            record.normal = normal
            record.front_face = front

    return record
