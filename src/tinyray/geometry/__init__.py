"""Geometry module for shape primitives.

This module provides the primitives the scene can hold and their
intersection routines:

Components:
    sphere: Sphere primitive and the shared HitRecord
    quad: Parallelogram primitive (boxes are built from six quads)
    plane: Infinite plane primitive (checkerboard floors)

All intersection routines are Taichi functions (@ti.func) so they can be
called from the per-pixel render kernel. Each returns a HitRecord whose
geometry fields are only meaningful when hit == 1.
"""

from .plane import Plane, hit_plane
from .quad import Quad, hit_quad
from .sphere import HitRecord, Sphere, hit_sphere, make_miss_hit_record

__all__ = [
    "HitRecord",
    "make_miss_hit_record",
    "Sphere",
    "hit_sphere",
    "Quad",
    "hit_quad",
    "Plane",
    "hit_plane",
]
