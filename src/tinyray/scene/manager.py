"""Scene manager coordinating materials, primitives, lights and the camera.

The low-level registries (materials.phong, scene.intersection,
scene.lighting, camera.pinhole) store everything in global Taichi fields.
SceneManager is the Python-side builder over them: it validates material
references, keeps a record of everything added so a scene can be
serialized, and exposes the scene extent the frame driver needs.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from tinyray.camera.pinhole import PinholeCamera
    >>> from tinyray.scene.manager import SceneManager
    >>> scene = SceneManager()
    >>> red = scene.add_material(
    ...     ambient=(0.1, 0.0, 0.0),
    ...     diffuse=(0.7, 0.1, 0.1),
    ...     specular=(0.5, 0.5, 0.5),
    ...     specular_power=32.0,
    ... )
    >>> scene.add_sphere(center=(0, 1, 0), radius=1.0, material_id=red)
    0
    >>> scene.add_light(position=(5, 10, 5))
    0
    >>> scene.set_camera(PinholeCamera(lookfrom=(0, 2, 8), lookat=(0, 1, 0)))
"""

import logging
from collections.abc import Sequence
from dataclasses import MISSING, asdict, dataclass, field, fields
from typing import Any

from tinyray.camera.pinhole import (
    PinholeCamera,
    clear_camera,
    get_scene_height,
    get_scene_width,
    is_camera_ready,
    setup_camera,
)
from tinyray.materials.phong import (
    PhongMaterial,
    add_phong_material,
    clear_phong_materials,
    get_phong_material_count,
)
from tinyray.scene.intersection import (
    add_plane,
    add_quad,
    add_sphere,
    clear_scene,
    get_plane_count,
    get_quad_count,
    get_sphere_count,
)
from tinyray.scene.lighting import (
    DEFAULT_BACKGROUND_COLOUR,
    add_light,
    clear_lights,
    get_light_count,
    set_background_colour,
)

logger = logging.getLogger(__name__)

Vec3 = tuple[float, float, float]


def _triple(values: Sequence[float]) -> Vec3:
    if len(values) != 3:
        raise ValueError(f"Expected 3 components, got {len(values)}")
    return (float(values[0]), float(values[1]), float(values[2]))


def _camera_from_dict(data: dict[str, Any]) -> PinholeCamera:
    """Build a PinholeCamera from serialized keys, rejecting unknown or missing ones."""
    camera_fields = {f.name: f for f in fields(PinholeCamera)}
    unknown = set(data) - set(camera_fields)
    if unknown:
        raise ValueError(f"Unknown camera keys: {sorted(unknown)}")
    missing = [
        name
        for name, f in camera_fields.items()
        if f.default is MISSING and f.default_factory is MISSING and name not in data
    ]
    if missing:
        raise ValueError(f"Missing camera keys: {missing}")
    return PinholeCamera(**{k: tuple(v) if isinstance(v, list) else v for k, v in data.items()})


@dataclass
class SphereInfo:
    """Information about a sphere in the scene.

    Attributes:
        sphere_index: The index in the sphere storage arrays.
        center: The center of the sphere.
        radius: The radius of the sphere.
        material_id: The material ID assigned to the sphere.
    """

    sphere_index: int
    center: Vec3
    radius: float
    material_id: int


@dataclass
class QuadInfo:
    """Information about a quad in the scene.

    Attributes:
        quad_index: The index in the quad storage arrays.
        corner: The corner point (Q) of the quad.
        edge_u: The first edge vector.
        edge_v: The second edge vector.
        material_id: The material ID assigned to the quad.
    """

    quad_index: int
    corner: Vec3
    edge_u: Vec3
    edge_v: Vec3
    material_id: int


@dataclass
class PlaneInfo:
    """Information about an infinite checkerboard plane.

    Attributes:
        plane_index: The index in the plane storage arrays.
        normal: Unit plane normal.
        offset: Signed distance of the plane from the origin along normal.
        material_id: The material whose diffuse colour fills the even cells.
    """

    plane_index: int
    normal: Vec3
    offset: float
    material_id: int


@dataclass
class LightInfo:
    """A point light: position and colour."""

    light_index: int
    position: Vec3
    colour: Vec3


@dataclass
class SceneConfig:
    """Plain-data description of a scene, suitable for JSON.

    Attributes:
        materials: Material parameter dicts, in material-ID order.
        spheres: Sphere dicts (center, radius, material_id).
        quads: Quad dicts (corner, edge_u, edge_v, material_id).
        planes: Plane dicts (normal, offset, material_id).
        lights: Light dicts (position, colour).
        background_colour: Colour of rays that escape the scene.
        camera: Camera parameters, or None if no camera is set.
    """

    materials: list[dict[str, Any]] = field(default_factory=list)
    spheres: list[dict[str, Any]] = field(default_factory=list)
    quads: list[dict[str, Any]] = field(default_factory=list)
    planes: list[dict[str, Any]] = field(default_factory=list)
    lights: list[dict[str, Any]] = field(default_factory=list)
    background_colour: list[float] = field(
        default_factory=lambda: list(DEFAULT_BACKGROUND_COLOUR)
    )
    camera: dict[str, Any] | None = None


class SceneManager:
    """Builder for everything the tracer reads.

    Creating a SceneManager clears the global scene storage, so at most one
    scene is live at a time.

    Attributes:
        materials: PhongMaterial for every registered material ID.
        spheres: SphereInfo for all spheres in the scene.
        quads: QuadInfo for all quads in the scene.
        planes: PlaneInfo for all planes in the scene.
        lights: LightInfo for all lights in the scene.
    """

    def __init__(self) -> None:
        """Initialize an empty scene."""
        self.materials: list[PhongMaterial] = []
        self.spheres: list[SphereInfo] = []
        self.quads: list[QuadInfo] = []
        self.planes: list[PlaneInfo] = []
        self.lights: list[LightInfo] = []
        self._background_colour: Vec3 = DEFAULT_BACKGROUND_COLOUR
        self._camera: PinholeCamera | None = None
        self._clear_all()

    def _clear_all(self) -> None:
        clear_scene()
        clear_phong_materials()
        clear_lights()
        clear_camera()
        self.materials.clear()
        self.spheres.clear()
        self.quads.clear()
        self.planes.clear()
        self.lights.clear()
        self._background_colour = DEFAULT_BACKGROUND_COLOUR
        self._camera = None

    def clear(self) -> None:
        """Clear the entire scene: materials, primitives, lights and camera."""
        self._clear_all()

    def _check_material(self, material_id: int) -> None:
        if not 0 <= material_id < get_phong_material_count():
            raise ValueError(f"Invalid material_id: {material_id}")

    # =========================================================================
    # Materials
    # =========================================================================

    def add_material(
        self,
        ambient: Sequence[float],
        diffuse: Sequence[float],
        specular: Sequence[float],
        specular_power: float,
    ) -> int:
        """Register a Phong material.

        Args:
            ambient: Ambient colour.
            diffuse: Diffuse colour.
            specular: Specular colour.
            specular_power: Specular exponent; larger is shinier.

        Returns:
            The material ID to pass to add_sphere() and friends.

        Raises:
            ValueError: If a colour is malformed or the exponent is negative.
            RuntimeError: If the material registry is full.
        """
        material_id = add_phong_material(ambient, diffuse, specular, specular_power)
        self.materials.append(
            PhongMaterial(
                ambient=_triple(ambient),
                diffuse=_triple(diffuse),
                specular=_triple(specular),
                specular_power=float(specular_power),
            )
        )
        return material_id

    def get_material_count(self) -> int:
        """Get the number of registered materials."""
        return get_phong_material_count()

    # =========================================================================
    # Primitives
    # =========================================================================

    def add_sphere(self, center: Sequence[float], radius: float, material_id: int) -> int:
        """Add a sphere to the scene.

        Returns:
            The index of the added sphere.

        Raises:
            ValueError: If material_id is invalid or radius is not positive.
            RuntimeError: If the maximum number of spheres is exceeded.
        """
        self._check_material(material_id)
        sphere_index = add_sphere(center, radius, material_id)
        self.spheres.append(
            SphereInfo(
                sphere_index=sphere_index,
                center=_triple(center),
                radius=float(radius),
                material_id=material_id,
            )
        )
        return sphere_index

    def add_quad(
        self,
        corner: Sequence[float],
        edge_u: Sequence[float],
        edge_v: Sequence[float],
        material_id: int,
    ) -> int:
        """Add a quad (parallelogram) to the scene.

        The quad has vertices corner, corner+edge_u, corner+edge_v and
        corner+edge_u+edge_v.

        Returns:
            The index of the added quad.

        Raises:
            ValueError: If material_id is invalid.
            RuntimeError: If the maximum number of quads is exceeded.
        """
        self._check_material(material_id)
        quad_index = add_quad(corner, edge_u, edge_v, material_id)
        self.quads.append(
            QuadInfo(
                quad_index=quad_index,
                corner=_triple(corner),
                edge_u=_triple(edge_u),
                edge_v=_triple(edge_v),
                material_id=material_id,
            )
        )
        return quad_index

    def add_box(
        self,
        minimum: Sequence[float],
        maximum: Sequence[float],
        material_id: int,
    ) -> list[int]:
        """Add an axis-aligned box as six quads.

        Args:
            minimum: Corner with the smallest coordinates.
            maximum: Opposite corner.
            material_id: Material for every face.

        Returns:
            The six quad indices.

        Raises:
            ValueError: If the box is degenerate on any axis.
        """
        lo = _triple(minimum)
        hi = _triple(maximum)
        if any(h <= l for l, h in zip(lo, hi)):
            raise ValueError(f"Box maximum {hi} must exceed minimum {lo} on every axis")

        dx = (hi[0] - lo[0], 0.0, 0.0)
        dy = (0.0, hi[1] - lo[1], 0.0)
        dz = (0.0, 0.0, hi[2] - lo[2])
        neg_dx = (-dx[0], 0.0, 0.0)
        neg_dz = (0.0, 0.0, -dz[2])

        faces = [
            ((lo[0], lo[1], hi[2]), dx, dy),  # front
            ((hi[0], lo[1], hi[2]), neg_dz, dy),  # right
            ((hi[0], lo[1], lo[2]), neg_dx, dy),  # back
            ((lo[0], lo[1], lo[2]), dz, dy),  # left
            ((lo[0], hi[1], hi[2]), dx, neg_dz),  # top
            ((lo[0], lo[1], lo[2]), dx, dz),  # bottom
        ]
        return [self.add_quad(q, u, v, material_id) for q, u, v in faces]

    def add_plane(self, normal: Sequence[float], offset: float, material_id: int) -> int:
        """Add an infinite checkerboard plane {p : dot(normal, p) = offset}.

        Returns:
            The index of the added plane.

        Raises:
            ValueError: If material_id is invalid or the normal is zero.
            RuntimeError: If the maximum number of planes is exceeded.
        """
        self._check_material(material_id)
        plane_index = add_plane(normal, offset, material_id)
        n = _triple(normal)
        length = sum(c * c for c in n) ** 0.5
        self.planes.append(
            PlaneInfo(
                plane_index=plane_index,
                normal=(n[0] / length, n[1] / length, n[2] / length),
                offset=float(offset),
                material_id=material_id,
            )
        )
        return plane_index

    # =========================================================================
    # Lights, Background and Camera
    # =========================================================================

    def add_light(
        self,
        position: Sequence[float],
        colour: Sequence[float] = (1.0, 1.0, 1.0),
    ) -> int:
        """Add a point light.

        Returns:
            The index of the added light.
        """
        light_index = add_light(position, colour)
        self.lights.append(
            LightInfo(light_index=light_index, position=_triple(position), colour=_triple(colour))
        )
        return light_index

    def set_background_colour(self, colour: Sequence[float]) -> None:
        """Set the colour returned by rays that escape the scene."""
        set_background_colour(colour)
        self._background_colour = _triple(colour)

    @property
    def background_colour(self) -> Vec3:
        """Get the background colour."""
        return self._background_colour

    def set_camera(self, camera: PinholeCamera) -> None:
        """Set up the camera used for rendering.

        Raises:
            ConfigurationError: If the camera parameters are invalid.
        """
        setup_camera(camera)
        self._camera = camera
        logger.debug("Camera set: lookfrom=%s lookat=%s", camera.lookfrom, camera.lookat)

    @property
    def camera(self) -> PinholeCamera | None:
        """Get the camera, or None if none has been set."""
        return self._camera

    @property
    def scene_width(self) -> float:
        """Get the world-space width of the view plane (0 without a camera)."""
        return get_scene_width() if is_camera_ready() else 0.0

    @property
    def scene_height(self) -> float:
        """Get the world-space height of the view plane (0 without a camera)."""
        return get_scene_height() if is_camera_ready() else 0.0

    # =========================================================================
    # Scene Queries
    # =========================================================================

    def get_sphere_count(self) -> int:
        """Get the number of spheres in the scene."""
        return get_sphere_count()

    def get_quad_count(self) -> int:
        """Get the number of quads in the scene."""
        return get_quad_count()

    def get_plane_count(self) -> int:
        """Get the number of planes in the scene."""
        return get_plane_count()

    def get_light_count(self) -> int:
        """Get the number of lights in the scene."""
        return get_light_count()

    def get_primitive_count(self) -> int:
        """Get the total number of primitives in the scene."""
        return self.get_sphere_count() + self.get_quad_count() + self.get_plane_count()

    # =========================================================================
    # Scene Serialization
    # =========================================================================

    def to_config(self) -> SceneConfig:
        """Export the scene to a configuration object."""
        config = SceneConfig()
        for material in self.materials:
            config.materials.append(
                {
                    "ambient": list(material.ambient),
                    "diffuse": list(material.diffuse),
                    "specular": list(material.specular),
                    "specular_power": material.specular_power,
                }
            )
        for sphere in self.spheres:
            config.spheres.append(
                {
                    "center": list(sphere.center),
                    "radius": sphere.radius,
                    "material_id": sphere.material_id,
                }
            )
        for quad in self.quads:
            config.quads.append(
                {
                    "corner": list(quad.corner),
                    "edge_u": list(quad.edge_u),
                    "edge_v": list(quad.edge_v),
                    "material_id": quad.material_id,
                }
            )
        for plane in self.planes:
            config.planes.append(
                {
                    "normal": list(plane.normal),
                    "offset": plane.offset,
                    "material_id": plane.material_id,
                }
            )
        for light in self.lights:
            config.lights.append({"position": list(light.position), "colour": list(light.colour)})
        config.background_colour = list(self._background_colour)
        if self._camera is not None:
            camera = asdict(self._camera)
            config.camera = {k: list(v) if isinstance(v, tuple) else v for k, v in camera.items()}
        return config

    def from_config(self, config: SceneConfig) -> None:
        """Load a scene from a configuration object.

        Clears the current scene first. Materials are loaded before
        primitives so material IDs resolve.

        Raises:
            ValueError: If the configuration contains invalid data.
            ConfigurationError: If the camera parameters are invalid.
        """
        camera = None if config.camera is None else _camera_from_dict(config.camera)
        self.clear()

        for material in config.materials:
            self.add_material(
                ambient=material.get("ambient", [0.0, 0.0, 0.0]),
                diffuse=material.get("diffuse", [0.5, 0.5, 0.5]),
                specular=material.get("specular", [0.0, 0.0, 0.0]),
                specular_power=material.get("specular_power", 1.0),
            )
        for sphere in config.spheres:
            self.add_sphere(
                center=sphere.get("center", [0.0, 0.0, 0.0]),
                radius=sphere.get("radius", 1.0),
                material_id=sphere.get("material_id", 0),
            )
        for quad in config.quads:
            self.add_quad(
                corner=quad.get("corner", [0.0, 0.0, 0.0]),
                edge_u=quad.get("edge_u", [1.0, 0.0, 0.0]),
                edge_v=quad.get("edge_v", [0.0, 1.0, 0.0]),
                material_id=quad.get("material_id", 0),
            )
        for plane in config.planes:
            self.add_plane(
                normal=plane.get("normal", [0.0, 1.0, 0.0]),
                offset=plane.get("offset", 0.0),
                material_id=plane.get("material_id", 0),
            )
        for light in config.lights:
            self.add_light(
                position=light.get("position", [0.0, 0.0, 0.0]),
                colour=light.get("colour", [1.0, 1.0, 1.0]),
            )
        self.set_background_colour(config.background_colour)
        if camera is not None:
            self.set_camera(camera)

        logger.info(
            "Loaded scene: %d materials, %d primitives, %d lights",
            self.get_material_count(),
            self.get_primitive_count(),
            self.get_light_count(),
        )

    def to_dict(self) -> dict[str, Any]:
        """Export the scene to a plain dictionary."""
        return asdict(self.to_config())

    def from_dict(self, data: dict[str, Any]) -> None:
        """Load a scene from a dictionary produced by to_dict().

        Raises:
            ValueError: If the dictionary has unknown keys or invalid data.
        """
        known = set(SceneConfig.__dataclass_fields__)
        unknown = set(data) - known
        if unknown:
            raise ValueError(f"Unknown scene keys: {sorted(unknown)}")
        self.from_config(SceneConfig(**data))
