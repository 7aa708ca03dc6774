"""Core rendering module.

This module contains the building blocks for recursive ray tracing:

Components:
    ray: Vector helpers for rays (normalize, reflect, origin offsetting)
    config: Trace flags, lighting models and TracerConfig
    shading: Ambient, diffuse and specular evaluation at a hit point
    tracer: The recursive tracer (reflections and shadow probes)
    framebuffer: Pixel storage and render state
    renderer: Frame driver tracing one primary ray per pixel

All compute-intensive operations run inside Taichi kernels.
"""

from .config import (
    ALL_TRACE_FLAGS,
    DEFAULT_MAX_DEPTH,
    DEFAULT_TRACE_FLAGS,
    ConfigurationError,
    ReflectionModel,
    SpecularModel,
    TraceFlags,
    TracerConfig,
    parse_trace_flags,
)
from .ray import near_zero, normalize, offset_ray_origin, reflect, vec3

# Note: shading, tracer, framebuffer and renderer are NOT imported here; they
# depend on the scene and camera packages, which import this one.

__all__ = [
    "vec3",
    "normalize",
    "reflect",
    "near_zero",
    "offset_ray_origin",
    "ConfigurationError",
    "TraceFlags",
    "SpecularModel",
    "ReflectionModel",
    "TracerConfig",
    "DEFAULT_MAX_DEPTH",
    "DEFAULT_TRACE_FLAGS",
    "ALL_TRACE_FLAGS",
    "parse_trace_flags",
]
