"""Spheres, and the HitRecord every primitive test returns.

A primitive test answers one question for one ray: where, if anywhere,
inside the open interval (t_min, t_max) does the ray first touch the
surface. The answer is a HitRecord whose normal always points back
towards the ray, so shading never has to care which side was struck.
"""

import taichi as ti
import taichi.math as tm

vec3 = tm.vec3


@ti.dataclass
class Sphere:
    """Sphere given by its centre and a positive radius."""

    center: vec3
    radius: ti.f32


@ti.dataclass
class HitRecord:
    """Result of intersecting a ray with a single primitive.

    Attributes:
        hit: 1 on a hit, 0 on a miss. The other fields are zero on a miss.
        t: Distance along the ray, in units of the direction's length.
        point: World-space hit position.
        normal: Unit normal oriented against the ray direction.
        front_face: 1 when the outside of the surface was struck.
    """

    hit: ti.i32
    t: ti.f32
    point: vec3
    normal: vec3
    front_face: ti.i32


@ti.func
def make_miss_hit_record() -> HitRecord:
    return HitRecord(hit=0, t=0.0, point=vec3(0.0), normal=vec3(0.0), front_face=0)


@ti.func
def face_forward(ray_direction: vec3, outward: vec3):
    """Return (normal, front_face) with the normal opposing the ray."""
    front = 1
    normal = outward
    if tm.dot(ray_direction, outward) > 0.0:
        front = 0
        normal = -outward
    return normal, front


@ti.func
def _sphere_roots(half_b: ti.f32, a: ti.f32, c: ti.f32, root: ti.f32):
    # Vieta's product c/a gives the second root from the first, so the
    # subtraction of two nearly equal numbers never happens.
    near = 0.0
    far = 0.0
    big = ti.select(half_b >= 0.0, -half_b - root, -half_b + root)
    if ti.abs(big) < 1e-10:
        near = -half_b / a
        far = near
    else:
        near = big / a
        far = c / big
    return ti.min(near, far), ti.max(near, far)


@ti.func
def hit_sphere(
    ray_origin: vec3,
    ray_direction: vec3,
    sphere: Sphere,
    t_min: ti.f32,
    t_max: ti.f32,
) -> HitRecord:
    """Intersect a ray with a sphere.

    The ray is P(t) = origin + t * direction and the surface is
    |P - centre| = radius. Substituting gives a t^2 + 2 half_b t + c = 0.
    The smaller root inside (t_min, t_max) wins; when the origin lies
    inside the sphere that is the exit point.

    Args:
        ray_origin: Ray start.
        ray_direction: Ray direction, not necessarily unit length.
        sphere: Sphere to test.
        t_min: Lower bound on t, exclusive.
        t_max: Upper bound on t, exclusive.

    Returns:
        HitRecord, with hit == 0 when nothing lies in range.
    """
    record = make_miss_hit_record()

    to_origin = ray_origin - sphere.center
    a = tm.dot(ray_direction, ray_direction)
    half_b = tm.dot(to_origin, ray_direction)
    c = tm.dot(to_origin, to_origin) - sphere.radius * sphere.radius
    disc = half_b * half_b - a * c

    if a > 0.0 and disc >= 0.0:
        near, far = _sphere_roots(half_b, a, c, ti.sqrt(disc))
        t = near
        if not (t > t_min and t < t_max):
            t = far
        if t > t_min and t < t_max:
            record.hit = 1
            record.t = t
            record.point = ray_origin + t * ray_direction
            normal, front = face_forward(ray_direction, (record.point - sphere.center) / sphere.radius)
            record.normal = normal
            record.front_face = front

    return record
