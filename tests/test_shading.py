"""Unit tests for the shading evaluator.

Tests cover:
- Ambient-only shading and the DIFFUSE_AND_SPEC switch
- Diffuse clamping for lights behind the surface
- Legacy and Phong specular models
- Optional attenuation
- Plane checkerboard
"""

import pytest
import taichi as ti


def _shade(
    point,
    normal,
    view_direction,
    material_id,
    flags,
    primitive=0,
    specular_model=0,
    apply_attenuation=0,
):
    """Shade a hand-built hit record and return the colour."""
    from tinyray.core.shading import shade
    from tinyray.scene.intersection import SceneHitRecord, vec3

    result = ti.Vector.field(3, dtype=ti.f32, shape=())

    @ti.kernel
    def test_kernel(p: vec3, n: vec3, v: vec3):
        for _ in range(1):
            hit = SceneHitRecord(
                hit=1,
                t=1.0,
                point=p,
                normal=n,
                front_face=1,
                material_id=material_id,
                primitive_type=primitive,
                primitive_index=0,
            )
            result[None] = shade(hit, v, flags, specular_model, apply_attenuation)

    test_kernel(vec3(*point), vec3(*normal), vec3(*view_direction))
    c = result[None]
    return (c[0], c[1], c[2])


@pytest.fixture
def lit_material():
    """Material with distinct ambient, diffuse and specular colours."""
    from tinyray.materials.phong import add_phong_material

    return add_phong_material(
        ambient=(0.1, 0.1, 0.1),
        diffuse=(0.2, 0.2, 0.2),
        specular=(0.3, 0.3, 0.3),
        specular_power=4.0,
    )


ALL_LIGHTING = 0x1 | 0x2


class TestLocalLighting:
    """Tests for ambient, diffuse and specular terms."""

    def test_ambient_only_without_diffuse_flag(self, lit_material):
        from tinyray.scene.lighting import add_light

        add_light((0.0, -5.0, 0.0))
        colour = _shade((0, -10, 0), (0, 1, 0), (0, 1, 0), lit_material, flags=0x1)
        assert colour == pytest.approx((0.1, 0.1, 0.1))

    def test_zero_lights_is_ambient(self, lit_material):
        colour = _shade((0, 0, 0), (0, 1, 0), (0, 1, 0), lit_material, flags=ALL_LIGHTING)
        assert colour == pytest.approx((0.1, 0.1, 0.1))

    def test_legacy_specular_uses_light_position(self, lit_material):
        """Test the legacy highlight: reflect the light position about the normal."""
        from tinyray.scene.lighting import add_light

        # The light sits straight above the point, so diffuse and specular cosines are 1
        add_light((0.0, -5.0, 0.0))
        colour = _shade((0, -10, 0), (0, 1, 0), (1, 0, 0), lit_material, flags=ALL_LIGHTING)
        assert colour == pytest.approx((0.6, 0.6, 0.6), abs=1e-5)

    def test_phong_specular_depends_on_viewer(self, lit_material):
        from tinyray.core.config import SpecularModel
        from tinyray.scene.lighting import add_light

        add_light((0.0, -5.0, 0.0))
        model = int(SpecularModel.PHONG)
        facing = _shade(
            (0, -10, 0), (0, 1, 0), (0, 1, 0), lit_material, ALL_LIGHTING, specular_model=model
        )
        grazing = _shade(
            (0, -10, 0), (0, 1, 0), (1, 0, 0), lit_material, ALL_LIGHTING, specular_model=model
        )
        assert facing == pytest.approx((0.6, 0.6, 0.6), abs=1e-5)
        assert grazing == pytest.approx((0.3, 0.3, 0.3), abs=1e-5)

    def test_diffuse_clamped_for_light_behind_surface(self):
        from tinyray.materials.phong import add_phong_material
        from tinyray.scene.lighting import add_light

        mat = add_phong_material((0.1, 0.1, 0.1), (0.5, 0.5, 0.5), (0.0, 0.0, 0.0), 1.0)
        add_light((0.0, -10.0, 0.0))
        colour = _shade((0, 0, 0), (0, 1, 0), (0, 1, 0), mat, flags=ALL_LIGHTING)
        assert colour == pytest.approx((0.1, 0.1, 0.1))

    def test_lights_accumulate(self):
        from tinyray.materials.phong import add_phong_material
        from tinyray.scene.lighting import add_light

        mat = add_phong_material((0.0, 0.0, 0.0), (0.25, 0.25, 0.25), (0.0, 0.0, 0.0), 1.0)
        add_light((0.0, 10.0, 0.0), (1.0, 0.0, 0.0))
        add_light((0.0, 10.0, 0.0), (0.0, 1.0, 0.0))
        colour = _shade((0, 0, 0), (0, 1, 0), (0, 1, 0), mat, flags=ALL_LIGHTING)
        assert colour == pytest.approx((0.25, 0.25, 0.0), abs=1e-6)

    def test_attenuation_only_when_enabled(self, lit_material):
        from tinyray.scene.lighting import add_light

        add_light((0.0, -5.0, 0.0))
        plain = _shade((0, -10, 0), (0, 1, 0), (1, 0, 0), lit_material, ALL_LIGHTING)
        attenuated = _shade(
            (0, -10, 0), (0, 1, 0), (1, 0, 0), lit_material, ALL_LIGHTING, apply_attenuation=1
        )
        # Distance 5: 1 / (1 + 0.002 * 25)
        expected = 0.1 + 0.5 / 1.05
        assert plain[0] == pytest.approx(0.6, abs=1e-5)
        assert attenuated[0] == pytest.approx(expected, abs=1e-5)


class TestCheckerboard:
    """Tests for the plane checkerboard."""

    @pytest.mark.parametrize(
        "point, expected",
        [
            ((1.0, 0.0, 0.0), (0.8, 0.6, 0.4)),
            ((3.0, 0.0, 0.0), (0.1, 0.1, 0.1)),
            ((-1.0, 0.0, 1.0), (0.1, 0.1, 0.1)),
            ((4.5, 0.0, 0.5), (0.8, 0.6, 0.4)),
        ],
    )
    def test_checker_cells(self, point, expected):
        from tinyray.materials.phong import add_phong_material
        from tinyray.scene.intersection import PrimitiveType
        from tinyray.scene.lighting import add_light

        mat = add_phong_material((0.05, 0.05, 0.05), (0.8, 0.6, 0.4), (1.0, 1.0, 1.0), 2.0)
        add_light((0.0, 10.0, 0.0))
        colour = _shade(
            point,
            (0, 1, 0),
            (0, 1, 0),
            mat,
            flags=ALL_LIGHTING,
            primitive=int(PrimitiveType.PLANE),
        )
        assert colour == pytest.approx(expected, abs=1e-6)

    def test_checker_ignores_flags(self):
        """Test that planes show the pattern even with lighting switched off."""
        from tinyray.materials.phong import add_phong_material
        from tinyray.scene.intersection import PrimitiveType

        mat = add_phong_material((0.05, 0.05, 0.05), (0.8, 0.6, 0.4), (0.0, 0.0, 0.0), 1.0)
        colour = _shade(
            (1, 0, 0), (0, 1, 0), (0, 1, 0), mat, flags=0, primitive=int(PrimitiveType.PLANE)
        )
        assert colour == pytest.approx((0.8, 0.6, 0.4), abs=1e-6)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
