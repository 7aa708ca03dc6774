"""Pytest configuration for tinyray tests.

Taichi is initialised once per session on the CPU backend. All scene state
lives in global Taichi fields, so it is cleared around every test.
"""

import pytest
import taichi as ti


@pytest.fixture(scope="session", autouse=True)
def init_taichi_session():
    """Initialize Taichi once for the entire test session.

    Using session scope prevents multiple ti.init() calls which can cause
    segmentation faults due to Taichi runtime conflicts.
    """
    ti.init(arch=ti.cpu, random_seed=42)
    yield


@pytest.fixture(autouse=True)
def clear_all_scene_data():
    """Clear primitives, materials, lights and the camera around each test."""
    # Import here so Taichi is initialized before any field is touched
    from tinyray.camera.pinhole import clear_camera
    from tinyray.materials.phong import clear_phong_materials
    from tinyray.scene.intersection import clear_scene
    from tinyray.scene.lighting import clear_lights

    def _clear_all():
        clear_scene()
        clear_phong_materials()
        clear_lights()
        clear_camera()

    _clear_all()
    yield
    _clear_all()


@pytest.fixture
def grey_material():
    """Register a plain grey material and return its id."""
    from tinyray.materials.phong import add_phong_material

    return add_phong_material(
        ambient=(0.1, 0.1, 0.1),
        diffuse=(0.5, 0.5, 0.5),
        specular=(0.0, 0.0, 0.0),
        specular_power=1.0,
    )
