"""Unit tests for scene storage and the intersection provider.

Tests cover:
- Primitive storage, counts and validation
- Miss records
- Closest hit across spheres, quads and planes
- Primitive-type discriminant and material ids
- Shadow (any-hit) queries and the t_max limit
"""

import pytest
import taichi as ti


def _query(origin, direction, shadow_ray=0, t_max=1000.0):
    """Run intersect_scene for one ray and read the record back as a dict."""
    from tinyray.scene.intersection import intersect_scene, vec3

    out_i = ti.field(dtype=ti.i32, shape=5)
    out_t = ti.field(dtype=ti.f32, shape=())
    out_normal = ti.field(dtype=ti.math.vec3, shape=())

    @ti.kernel
    def test_kernel(o: vec3, d: vec3, shadow: ti.i32, hi: ti.f32):
        for _ in range(1):
            rec = intersect_scene(o, d, 0.001, hi, shadow)
            out_i[0] = rec.hit
            out_i[1] = rec.material_id
            out_i[2] = rec.primitive_type
            out_i[3] = rec.primitive_index
            out_i[4] = rec.front_face
            out_t[None] = rec.t
            out_normal[None] = rec.normal

    test_kernel(vec3(*origin), vec3(*direction), shadow_ray, t_max)
    return {
        "hit": out_i[0],
        "material_id": out_i[1],
        "primitive_type": out_i[2],
        "primitive_index": out_i[3],
        "front_face": out_i[4],
        "t": out_t[None],
        "normal": out_normal[None],
    }


class TestScenePrimitiveStorage:
    """Tests for scene primitive storage and management."""

    def test_add_and_clear(self):
        from tinyray.scene.intersection import (
            add_plane,
            add_quad,
            add_sphere,
            clear_scene,
            get_plane_count,
            get_quad_count,
            get_sphere_count,
        )

        assert add_sphere((0.0, 0.0, 0.0), 1.0, material_id=0) == 0
        assert add_sphere((1.0, 0.0, 0.0), 0.5, material_id=1) == 1
        assert add_quad((0, 0, 0), (1, 0, 0), (0, 1, 0), material_id=2) == 0
        assert add_plane((0, 2, 0), 0.0, material_id=3) == 0
        assert (get_sphere_count(), get_quad_count(), get_plane_count()) == (2, 1, 1)

        clear_scene()
        assert (get_sphere_count(), get_quad_count(), get_plane_count()) == (0, 0, 0)

    def test_non_positive_radius_rejected(self):
        from tinyray.scene.intersection import add_sphere

        with pytest.raises(ValueError, match="radius"):
            add_sphere((0.0, 0.0, 0.0), 0.0)

    def test_zero_plane_normal_rejected(self):
        from tinyray.scene.intersection import add_plane

        with pytest.raises(ValueError, match="normal"):
            add_plane((0.0, 0.0, 0.0), 1.0)

    def test_plane_normal_is_normalized(self):
        from tinyray.scene.intersection import add_plane, plane_normals

        add_plane((0.0, 3.0, 4.0), 1.0)
        n = plane_normals[0]
        assert (n[0], n[1], n[2]) == pytest.approx((0.0, 0.6, 0.8))

    def test_sphere_capacity(self, monkeypatch):
        from tinyray.scene import intersection

        monkeypatch.setattr(intersection, "MAX_SPHERES", 2)
        intersection.add_sphere((0, 0, 0), 1.0)
        intersection.add_sphere((0, 0, 0), 1.0)
        with pytest.raises(RuntimeError, match="Maximum number of spheres"):
            intersection.add_sphere((0, 0, 0), 1.0)


class TestMissRecord:
    """Tests for the miss record."""

    def test_empty_scene_misses(self):
        rec = _query((0, 0, 0), (0, 0, -1))
        assert rec["hit"] == 0
        assert rec["material_id"] == -1
        assert rec["primitive_type"] == -1
        assert rec["primitive_index"] == -1


class TestClosestHit:
    """Tests for closest hit selection."""

    def test_single_sphere(self):
        from tinyray.scene.intersection import PrimitiveType, add_sphere

        add_sphere((0.0, 0.0, -3.0), 1.0, material_id=5)
        rec = _query((0, 0, 0), (0, 0, -1))
        assert rec["hit"] == 1
        assert rec["t"] == pytest.approx(2.0, abs=1e-5)
        assert rec["material_id"] == 5
        assert rec["primitive_type"] == int(PrimitiveType.SPHERE)
        assert rec["primitive_index"] == 0

    @pytest.mark.parametrize("reverse", [False, True])
    def test_closest_of_two_spheres(self, reverse):
        """Test that insertion order does not change which sphere wins."""
        from tinyray.scene.intersection import add_sphere

        spheres = [((0.0, 0.0, -3.0), 1), ((0.0, 0.0, -8.0), 2)]
        if reverse:
            spheres.reverse()
        for center, material_id in spheres:
            add_sphere(center, 1.0, material_id=material_id)

        rec = _query((0, 0, 0), (0, 0, -1))
        assert rec["material_id"] == 1
        assert rec["t"] == pytest.approx(2.0, abs=1e-5)

    def test_quad_in_front_of_sphere(self):
        from tinyray.scene.intersection import PrimitiveType, add_quad, add_sphere

        add_sphere((0.0, 0.0, -6.0), 1.0, material_id=1)
        add_quad((-1.0, -1.0, -2.0), (2.0, 0.0, 0.0), (0.0, 2.0, 0.0), material_id=2)
        rec = _query((0, 0, 0), (0, 0, -1))
        assert rec["material_id"] == 2
        assert rec["primitive_type"] == int(PrimitiveType.QUAD)
        assert rec["t"] == pytest.approx(2.0, abs=1e-5)

    def test_plane_hit_reports_plane_type(self):
        from tinyray.scene.intersection import PrimitiveType, add_plane

        add_plane((0.0, 1.0, 0.0), 0.0, material_id=4)
        rec = _query((0, 5, 0), (0, -1, 0))
        assert rec["hit"] == 1
        assert rec["primitive_type"] == int(PrimitiveType.PLANE)
        assert rec["material_id"] == 4
        assert rec["t"] == pytest.approx(5.0, abs=1e-5)
        assert rec["normal"][1] == pytest.approx(1.0)

    def test_sphere_resting_on_plane_wins(self):
        from tinyray.scene.intersection import PrimitiveType, add_plane, add_sphere

        add_plane((0.0, 1.0, 0.0), 0.0, material_id=0)
        add_sphere((0.0, 1.0, 0.0), 1.0, material_id=1)
        rec = _query((0, 5, 0), (0, -1, 0))
        assert rec["primitive_type"] == int(PrimitiveType.SPHERE)
        assert rec["t"] == pytest.approx(3.0, abs=1e-5)

    def test_t_max_limits_hits(self):
        from tinyray.scene.intersection import add_sphere

        add_sphere((0.0, 0.0, -10.0), 1.0)
        rec = _query((0, 0, 0), (0, 0, -1), t_max=5.0)
        assert rec["hit"] == 0


class TestShadowQueries:
    """Tests for any-hit shadow ray queries."""

    def test_shadow_query_reports_occluder(self):
        from tinyray.scene.intersection import add_sphere

        add_sphere((0.0, 0.0, -3.0), 1.0)
        assert _query((0, 0, 0), (0, 0, -1), shadow_ray=1)["hit"] == 1

    def test_shadow_query_without_occluder(self):
        from tinyray.scene.intersection import add_sphere

        add_sphere((5.0, 0.0, -3.0), 1.0)
        assert _query((0, 0, 0), (0, 0, -1), shadow_ray=1)["hit"] == 0

    def test_shadow_query_stops_at_first_hit(self):
        """Test that the any-hit scan returns the first primitive it finds."""
        from tinyray.scene.intersection import add_sphere

        add_sphere((0.0, 0.0, -10.0), 1.0, material_id=1)
        add_sphere((0.0, 0.0, -3.0), 1.0, material_id=2)
        rec = _query((0, 0, 0), (0, 0, -1), shadow_ray=1)
        assert rec["hit"] == 1
        assert rec["material_id"] == 1

    def test_shadow_query_respects_t_max(self):
        """Test that occluders beyond the light do not count."""
        from tinyray.scene.intersection import add_quad

        add_quad((-1.0, -1.0, -8.0), (2.0, 0.0, 0.0), (0.0, 2.0, 0.0))
        assert _query((0, 0, 0), (0, 0, -1), shadow_ray=1, t_max=5.0)["hit"] == 0


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
