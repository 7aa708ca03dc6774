"""Taichi-based recursive ray tracer.

This package renders scenes of spheres, quads and checkerboard planes lit
by point lights, with support for:
- Phong shading (ambient, diffuse, specular)
- Hard shadows from shadow probes
- Recursive reflections with a configurable depth budget
- PNG export of the finished frame

Subpackages:
    core: Rays, tracer configuration, shading, tracer, framebuffer and renderer
    geometry: Shape primitives and intersection algorithms
    materials: Phong material registry
    scene: Scene storage, lights, scene manager and the default scene
    camera: Pinhole camera providing the view plane
    preview: Image export utilities
"""

__version__ = "0.1.0"
