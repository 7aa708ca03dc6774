"""Parallelogram faces.

A face is a corner plus two edge vectors; its four corners are corner,
corner + edge_u, corner + edge_v and corner + edge_u + edge_v. Boxes are
six of them.
"""

import taichi as ti
import taichi.math as tm

from .sphere import HitRecord, face_forward, make_miss_hit_record

vec3 = tm.vec3


@ti.dataclass
class Quad:
    """Parallelogram spanned by edge_u and edge_v from corner."""

    corner: vec3
    edge_u: vec3
    edge_v: vec3


@ti.func
def hit_quad(
    ray_origin: vec3,
    ray_direction: vec3,
    quad: Quad,
    t_min: ti.f32,
    t_max: ti.f32,
) -> HitRecord:
    """Intersect a ray with a parallelogram.

    The ray is first cut against the supporting plane. The hit point is
    then written in edge coordinates (s, r), and it lies on the face when
    both are within [0, 1]. With n = edge_u x edge_v, those coordinates
    come from the scalar triple products of the corner offset against the
    edges.

    Args:
        ray_origin: Ray start.
        ray_direction: Ray direction.
        quad: Face to test.
        t_min: Lower bound on t, exclusive.
        t_max: Upper bound on t, exclusive.

    Returns:
        HitRecord, with hit == 0 for misses, parallel rays and faces whose
        edges are collinear.
    """
    record = make_miss_hit_record()

    n = tm.cross(quad.edge_u, quad.edge_v)
    area_sq = tm.dot(n, n)
    facing = tm.dot(n, ray_direction)

    if area_sq > 1e-10 and ti.abs(facing) > 1e-8 * ti.sqrt(area_sq):
        t = tm.dot(n, quad.corner - ray_origin) / facing
        if t > t_min and t < t_max:
            point = ray_origin + t * ray_direction
            offset = point - quad.corner
            s = tm.dot(n, tm.cross(offset, quad.edge_v)) / area_sq
            r = tm.dot(n, tm.cross(quad.edge_u, offset)) / area_sq
            if s >= 0.0 and s <= 1.0 and r >= 0.0 and r <= 1.0:
                record.hit = 1
                record.t = t
                record.point = point
                normal, front = face_forward(ray_direction, n / ti.sqrt(area_sq))
                record.normal = normal
                record.front_face = front

    return record
