"""Scene-level primitive storage and the intersection provider.

Primitives (spheres, quads and infinite planes) live in global Taichi
fields in structure-of-arrays layout. intersect_scene() is the single
intersection entry point used by the tracer: a linear scan over every
primitive returning the closest hit, or for shadow rays the first hit
found.

Each SceneHitRecord carries the material id and a primitive-type
discriminant. The discriminant is what the shading and tracing code use to
single out planes (checkerboard pattern, no reflection).

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from tinyray.scene.intersection import add_plane, add_sphere, clear_scene
    >>> clear_scene()
    >>> add_sphere((0, 1, 0), 1.0, material_id=0)
    >>> add_plane((0, 1, 0), 0.0, material_id=1)
    >>> # Use intersect_scene within a Taichi kernel
"""

from collections.abc import Sequence
from enum import IntEnum

import numpy as np
import taichi as ti
import taichi.math as tm

from tinyray.geometry.plane import Plane, hit_plane
from tinyray.geometry.quad import Quad, hit_quad
from tinyray.geometry.sphere import HitRecord, Sphere, hit_sphere

vec3 = tm.vec3


class PrimitiveType(IntEnum):
    """Discriminant of the primitive a ray struck."""

    SPHERE = 0
    QUAD = 1
    PLANE = 2


@ti.dataclass
class SceneHitRecord:
    """Result of a ray-scene query.

    Attributes:
        hit: 1 if the ray struck any primitive, 0 on a miss.
        t: Ray parameter of the hit. Only valid if hit == 1.
        point: World-space hit point. Only valid if hit == 1.
        normal: Unit normal facing the incoming ray. Only valid if hit == 1.
        front_face: 1 if the outward side was struck. Only valid if hit == 1.
        material_id: Material of the struck primitive, -1 on a miss.
        primitive_type: PrimitiveType value of the struck primitive, -1 on a
            miss.
        primitive_index: Index of the primitive within its type's storage,
            -1 on a miss.
    """

    hit: ti.i32
    t: ti.f32
    point: vec3
    normal: vec3
    front_face: ti.i32
    material_id: ti.i32
    primitive_type: ti.i32
    primitive_index: ti.i32


# Maximum number of primitives supported in the scene
MAX_SPHERES = 1024
MAX_QUADS = 1024
MAX_PLANES = 64

sphere_centers = ti.Vector.field(3, dtype=ti.f32, shape=MAX_SPHERES)
sphere_radii = ti.field(dtype=ti.f32, shape=MAX_SPHERES)
sphere_material_ids = ti.field(dtype=ti.i32, shape=MAX_SPHERES)
num_spheres = ti.field(dtype=ti.i32, shape=())

quad_corners = ti.Vector.field(3, dtype=ti.f32, shape=MAX_QUADS)
quad_edge_u = ti.Vector.field(3, dtype=ti.f32, shape=MAX_QUADS)
quad_edge_v = ti.Vector.field(3, dtype=ti.f32, shape=MAX_QUADS)
quad_material_ids = ti.field(dtype=ti.i32, shape=MAX_QUADS)
num_quads = ti.field(dtype=ti.i32, shape=())

plane_normals = ti.Vector.field(3, dtype=ti.f32, shape=MAX_PLANES)
plane_offsets = ti.field(dtype=ti.f32, shape=MAX_PLANES)
plane_material_ids = ti.field(dtype=ti.i32, shape=MAX_PLANES)
num_planes = ti.field(dtype=ti.i32, shape=())


def clear_scene() -> None:
    """Remove every primitive from the scene."""
    num_spheres[None] = 0
    num_quads[None] = 0
    num_planes[None] = 0


def add_sphere(center: Sequence[float], radius: float, material_id: int = 0) -> int:
    """Add a sphere to the scene.

    Args:
        center: The center point of the sphere.
        radius: The radius of the sphere.
        material_id: The material assigned to the sphere.

    Returns:
        The index of the added sphere.

    Raises:
        ValueError: If the radius is not positive.
        RuntimeError: If the maximum number of spheres is exceeded.
    """
    if radius <= 0.0:
        raise ValueError(f"Sphere radius must be positive, got {radius}")
    idx = num_spheres[None]
    if idx >= MAX_SPHERES:
        raise RuntimeError(f"Maximum number of spheres ({MAX_SPHERES}) exceeded")
    sphere_centers[idx] = [float(c) for c in center]
    sphere_radii[idx] = radius
    sphere_material_ids[idx] = material_id
    num_spheres[None] = idx + 1
    return idx


def add_quad(
    q: Sequence[float], u: Sequence[float], v: Sequence[float], material_id: int = 0
) -> int:
    """Add a quad with vertices Q, Q+u, Q+v, Q+u+v to the scene.

    Returns:
        The index of the added quad.

    Raises:
        RuntimeError: If the maximum number of quads is exceeded.
    """
    idx = num_quads[None]
    if idx >= MAX_QUADS:
        raise RuntimeError(f"Maximum number of quads ({MAX_QUADS}) exceeded")
    quad_corners[idx] = [float(c) for c in q]
    quad_edge_u[idx] = [float(c) for c in u]
    quad_edge_v[idx] = [float(c) for c in v]
    quad_material_ids[idx] = material_id
    num_quads[None] = idx + 1
    return idx


def add_plane(normal: Sequence[float], offset: float, material_id: int = 0) -> int:
    """Add an infinite plane dot(normal, P) = offset to the scene.

    The normal is normalized before storage; offset is interpreted against
    the normalized normal.

    Returns:
        The index of the added plane.

    Raises:
        ValueError: If the normal has zero length.
        RuntimeError: If the maximum number of planes is exceeded.
    """
    n = np.asarray(normal, dtype=np.float64)
    norm = float(np.linalg.norm(n))
    if norm < 1e-8:
        raise ValueError("Plane normal must be non-zero")
    idx = num_planes[None]
    if idx >= MAX_PLANES:
        raise RuntimeError(f"Maximum number of planes ({MAX_PLANES}) exceeded")
    plane_normals[idx] = (n / norm).tolist()
    plane_offsets[idx] = offset
    plane_material_ids[idx] = material_id
    num_planes[None] = idx + 1
    return idx


def get_sphere_count() -> int:
    """Get the number of spheres in the scene."""
    return int(num_spheres[None])


def get_quad_count() -> int:
    """Get the number of quads in the scene."""
    return int(num_quads[None])


def get_plane_count() -> int:
    """Get the number of planes in the scene."""
    return int(num_planes[None])


@ti.func
def _to_scene_hit_record(
    rec: HitRecord, material_id: ti.i32, primitive_type: ti.i32, primitive_index: ti.i32
) -> SceneHitRecord:
    return SceneHitRecord(
        hit=rec.hit,
        t=rec.t,
        point=rec.point,
        normal=rec.normal,
        front_face=rec.front_face,
        material_id=material_id,
        primitive_type=primitive_type,
        primitive_index=primitive_index,
    )


@ti.func
def make_miss_record() -> SceneHitRecord:
    """Create a SceneHitRecord describing a miss."""
    return SceneHitRecord(
        hit=0,
        t=0.0,
        point=vec3(0.0, 0.0, 0.0),
        normal=vec3(0.0, 0.0, 0.0),
        front_face=0,
        material_id=-1,
        primitive_type=-1,
        primitive_index=-1,
    )


@ti.func
def intersect_scene(
    ray_origin: vec3,
    ray_direction: vec3,
    t_min: ti.f32,
    t_max: ti.f32,
    shadow_ray: ti.i32,
) -> SceneHitRecord:
    """Intersect a ray with every primitive in the scene.

    For ordinary rays the closest hit in (t_min, t_max) is returned. For
    shadow rays (shadow_ray == 1) only occlusion matters, so the scan
    stops testing once any primitive is hit and that hit is returned.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The unit direction of the ray.
        t_min: Minimum t value to consider a valid hit.
        t_max: Maximum t value to consider a valid hit.
        shadow_ray: 1 for an any-hit occlusion query, 0 for closest hit.

    Returns:
        The SceneHitRecord of the hit, or a miss record.
    """
    closest_t = t_max
    result = make_miss_record()
    done = 0

    for i in range(num_spheres[None]):
        if done == 0:
            sphere = Sphere(center=sphere_centers[i], radius=sphere_radii[i])
            rec = hit_sphere(ray_origin, ray_direction, sphere, t_min, closest_t)
            if rec.hit == 1:
                closest_t = rec.t
                result = _to_scene_hit_record(
                    rec, sphere_material_ids[i], int(PrimitiveType.SPHERE), i
                )
                if shadow_ray == 1:
                    done = 1

    for i in range(num_quads[None]):
        if done == 0:
            quad = Quad(corner=quad_corners[i], edge_u=quad_edge_u[i], edge_v=quad_edge_v[i])
            rec = hit_quad(ray_origin, ray_direction, quad, t_min, closest_t)
            if rec.hit == 1:
                closest_t = rec.t
                result = _to_scene_hit_record(rec, quad_material_ids[i], int(PrimitiveType.QUAD), i)
                if shadow_ray == 1:
                    done = 1

    for i in range(num_planes[None]):
        if done == 0:
            plane = Plane(normal=plane_normals[i], offset=plane_offsets[i])
            rec = hit_plane(ray_origin, ray_direction, plane, t_min, closest_t)
            if rec.hit == 1:
                closest_t = rec.t
                result = _to_scene_hit_record(
                    rec, plane_material_ids[i], int(PrimitiveType.PLANE), i
                )
                if shadow_ray == 1:
                    done = 1

    return result
