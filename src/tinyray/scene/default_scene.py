"""Default demo scene.

The default scene is a small still life on an infinite checkerboard floor:

- A checkerboard plane at y = 0 (white cells and dark grey cells)
- Three Phong spheres: red, green and a shiny blue one
- A yellow box built from six quads
- One white point light above and in front of the objects
- A camera slightly above the floor, looking at the objects

Reflections, shadows and specular highlights all show up with the default
trace flags.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from tinyray.scene.default_scene import create_default_scene
    >>> scene = create_default_scene(aspect_ratio=4.0 / 3.0)
    >>> scene.get_sphere_count()
    3
"""

from dataclasses import dataclass

from tinyray.camera.pinhole import PinholeCamera
from tinyray.scene.manager import SceneManager


@dataclass
class DefaultSceneParams:
    """Tunable parts of the default scene.

    Attributes:
        light_position: World-space position of the single point light.
        light_colour: RGB colour of the light.
        background_colour: Colour of rays that escape the scene.
        vfov: Vertical field of view of the camera in degrees.
    """

    light_position: tuple[float, float, float] = (4.0, 10.0, 8.0)
    light_colour: tuple[float, float, float] = (1.0, 1.0, 1.0)
    background_colour: tuple[float, float, float] = (0.05, 0.05, 0.1)
    vfov: float = 50.0


# =============================================================================
# Default Scene Constants
# =============================================================================

CAMERA_LOOKFROM = (0.0, 3.0, 10.0)
CAMERA_LOOKAT = (0.0, 1.0, 0.0)

FLOOR_NORMAL = (0.0, 1.0, 0.0)
FLOOR_OFFSET = 0.0

# (ambient, diffuse, specular, specular_power)
FLOOR_MATERIAL = ((0.1, 0.1, 0.1), (1.0, 1.0, 1.0), (0.0, 0.0, 0.0), 1.0)
RED_MATERIAL = ((0.1, 0.0, 0.0), (0.7, 0.1, 0.1), (0.6, 0.6, 0.6), 32.0)
GREEN_MATERIAL = ((0.0, 0.1, 0.0), (0.1, 0.6, 0.2), (0.4, 0.4, 0.4), 16.0)
BLUE_MATERIAL = ((0.0, 0.0, 0.1), (0.1, 0.2, 0.8), (1.0, 1.0, 1.0), 96.0)
YELLOW_MATERIAL = ((0.1, 0.1, 0.0), (0.8, 0.7, 0.1), (0.3, 0.3, 0.3), 8.0)


def create_default_scene(
    aspect_ratio: float = 4.0 / 3.0,
    params: DefaultSceneParams | None = None,
) -> SceneManager:
    """Build the default scene and set up its camera.

    Any scene already in the global storage is cleared.

    Args:
        aspect_ratio: View-plane width / height; match it to the framebuffer
            to keep pixels square.
        params: Optional DefaultSceneParams for the light and background.

    Returns:
        A SceneManager holding the scene, with its camera set.

    Example:
        >>> scene = create_default_scene()
        >>> scene.get_quad_count(), scene.get_plane_count(), scene.get_light_count()
        (6, 1, 1)
    """
    if params is None:
        params = DefaultSceneParams()

    scene = SceneManager()

    floor_mat = scene.add_material(*FLOOR_MATERIAL)
    red_mat = scene.add_material(*RED_MATERIAL)
    green_mat = scene.add_material(*GREEN_MATERIAL)
    blue_mat = scene.add_material(*BLUE_MATERIAL)
    yellow_mat = scene.add_material(*YELLOW_MATERIAL)

    scene.add_plane(FLOOR_NORMAL, FLOOR_OFFSET, floor_mat)

    scene.add_sphere(center=(-2.5, 1.0, 0.0), radius=1.0, material_id=red_mat)
    scene.add_sphere(center=(0.0, 1.25, -1.5), radius=1.25, material_id=blue_mat)
    scene.add_sphere(center=(2.5, 0.75, 0.5), radius=0.75, material_id=green_mat)

    scene.add_box(minimum=(0.75, 0.0, 2.0), maximum=(2.0, 1.25, 3.25), material_id=yellow_mat)

    scene.add_light(position=params.light_position, colour=params.light_colour)
    scene.set_background_colour(params.background_colour)

    scene.set_camera(
        PinholeCamera(
            lookfrom=CAMERA_LOOKFROM,
            lookat=CAMERA_LOOKAT,
            vup=(0.0, 1.0, 0.0),
            vfov=params.vfov,
            aspect_ratio=aspect_ratio,
        )
    )

    return scene
