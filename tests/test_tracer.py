"""Unit tests for the recursive tracer.

Tests cover:
- Escaping rays and the depth-zero base case
- Shadow probes and per-light shadow compounding
- Mirror reflections, planes that never reflect, and the call bound
- Camera requirement of legacy reflections
"""

import pytest


AMBIENT = 0x1
SHADOW = 0x4
REFLECTION = 0x8


def _config(flags, **kwargs):
    from tinyray.core.config import TracerConfig

    return TracerConfig(trace_flags=flags, reflection_model="mirror", **kwargs)


@pytest.fixture
def flat_material():
    """Material that is pure ambient 0.5 grey."""
    from tinyray.materials.phong import add_phong_material

    return add_phong_material((0.5, 0.5, 0.5), (0.0, 0.0, 0.0), (0.0, 0.0, 0.0), 1.0)


@pytest.fixture
def unit_sphere(flat_material):
    """Unit sphere at the origin seen from (0, 0, 5)."""
    from tinyray.scene.intersection import add_sphere

    return add_sphere((0.0, 0.0, 0.0), 1.0, flat_material)


class TestBaseCases:
    """Tests for rays that terminate immediately."""

    def test_miss_returns_fallback(self, unit_sphere):
        from tinyray.core.tracer import trace_ray

        result = trace_ray(
            (0.0, 0.0, 5.0), (0.0, 0.0, 1.0), (0.2, 0.3, 0.4), config=_config(AMBIENT)
        )
        assert result.colour == pytest.approx((0.2, 0.3, 0.4))
        assert result.calls == 1

    def test_zero_depth_returns_fallback(self, unit_sphere):
        from tinyray.core.tracer import trace_ray

        result = trace_ray(
            (0.0, 0.0, 5.0),
            (0.0, 0.0, -1.0),
            (0.2, 0.3, 0.4),
            depth_budget=0,
            config=_config(AMBIENT),
        )
        assert result.colour == pytest.approx((0.2, 0.3, 0.4))
        assert result.calls == 1

    def test_hit_returns_local_colour(self, unit_sphere):
        from tinyray.core.tracer import trace_ray

        result = trace_ray((0.0, 0.0, 5.0), (0.0, 0.0, -1.0), config=_config(AMBIENT))
        assert result.colour == pytest.approx((0.5, 0.5, 0.5), abs=1e-6)
        assert result.calls == 1

    def test_direction_is_normalized(self, unit_sphere):
        from tinyray.core.tracer import trace_ray

        result = trace_ray((0.0, 0.0, 5.0), (0.0, 0.0, -40.0), config=_config(AMBIENT))
        assert result.colour == pytest.approx((0.5, 0.5, 0.5), abs=1e-6)


class TestShadows:
    """Tests for shadow probes."""

    def test_blocked_probe_scales_fallback(self, unit_sphere):
        from tinyray.core.tracer import SHADOW_FACTOR, trace_ray

        result = trace_ray(
            (0.0, 0.0, 5.0),
            (0.0, 0.0, -1.0),
            (1.0, 0.5, 0.2),
            is_shadow_ray=True,
            config=_config(AMBIENT),
        )
        assert result.colour == pytest.approx(
            (SHADOW_FACTOR, 0.5 * SHADOW_FACTOR, 0.2 * SHADOW_FACTOR), abs=1e-6
        )
        assert result.calls == 1

    def test_clear_probe_returns_fallback(self, unit_sphere):
        from tinyray.core.tracer import trace_ray

        result = trace_ray(
            (0.0, 0.0, 5.0),
            (0.0, 1.0, 0.0),
            (1.0, 0.5, 0.2),
            is_shadow_ray=True,
            config=_config(AMBIENT),
        )
        assert result.colour == pytest.approx((1.0, 0.5, 0.2))

    def test_spent_probe_is_never_blocked(self, unit_sphere):
        from tinyray.core.tracer import trace_ray

        result = trace_ray(
            (0.0, 0.0, 5.0),
            (0.0, 0.0, -1.0),
            (1.0, 1.0, 1.0),
            depth_budget=0,
            is_shadow_ray=True,
            config=_config(AMBIENT),
        )
        assert result.colour == pytest.approx((1.0, 1.0, 1.0))

    def test_shadow_compounds_per_occluded_light(self, unit_sphere, flat_material):
        """Test that every blocked light multiplies the colour by 0.3."""
        from tinyray.core.tracer import trace_ray
        from tinyray.scene.intersection import add_sphere
        from tinyray.scene.lighting import add_light

        # Blocker between the hit point (0, 0, 1) and the first two lights
        add_sphere((0.0, 4.0, 3.0), 0.5, flat_material)
        add_light((0.0, 10.0, 6.0))
        add_light((0.5, 10.0, 6.0))
        add_light((0.0, 0.0, 10.0))

        result = trace_ray((0.0, 0.0, 5.0), (0.0, 0.0, -1.0), config=_config(AMBIENT | SHADOW))
        assert result.colour == pytest.approx((0.045, 0.045, 0.045), abs=1e-5)
        assert result.calls == 4

    def test_shadow_flag_off_skips_probes(self, unit_sphere, flat_material):
        from tinyray.core.tracer import trace_ray
        from tinyray.scene.intersection import add_sphere
        from tinyray.scene.lighting import add_light

        add_sphere((0.0, 4.0, 3.0), 0.5, flat_material)
        add_light((0.0, 10.0, 6.0))

        result = trace_ray((0.0, 0.0, 5.0), (0.0, 0.0, -1.0), config=_config(AMBIENT))
        assert result.colour == pytest.approx((0.5, 0.5, 0.5), abs=1e-6)
        assert result.calls == 1


class TestReflections:
    """Tests for reflection rays."""

    def test_mirror_reflection_multiplies_escape(self, unit_sphere):
        """Test that an escaping reflection returns the parent's local colour."""
        from tinyray.core.tracer import trace_ray

        result = trace_ray(
            (0.0, 0.0, 5.0), (0.0, 0.0, -1.0), config=_config(AMBIENT | REFLECTION)
        )
        assert result.colour == pytest.approx((0.25, 0.25, 0.25), abs=1e-6)
        assert result.calls == 2

    @pytest.mark.parametrize("depth", [1, 2, 3, 5])
    def test_facing_mirrors_bounce_until_depth(self, flat_material, depth):
        from tinyray.core.tracer import trace_ray
        from tinyray.scene.intersection import add_sphere

        add_sphere((0.0, 0.0, 0.0), 1.0, flat_material)
        add_sphere((0.0, 0.0, 6.0), 1.0, flat_material)

        result = trace_ray(
            (0.0, 0.0, 3.0),
            (0.0, 0.0, -1.0),
            depth_budget=depth,
            config=_config(AMBIENT | REFLECTION),
        )
        expected = 0.5 ** (depth + 1)
        assert result.colour == pytest.approx((expected, expected, expected), rel=1e-4)
        assert result.calls == depth + 1

    def test_call_count_bound(self, flat_material):
        """Test the worst case of depth * (lights + 1) + 1 trace calls."""
        from tinyray.core.tracer import trace_ray
        from tinyray.scene.intersection import add_sphere
        from tinyray.scene.lighting import add_light

        add_sphere((0.0, 0.0, 0.0), 1.0, flat_material)
        add_sphere((0.0, 0.0, 6.0), 1.0, flat_material)
        add_light((5.0, 0.0, 3.0))

        depth = 3
        result = trace_ray(
            (0.0, 0.0, 3.0),
            (0.0, 0.0, -1.0),
            depth_budget=depth,
            config=_config(AMBIENT | SHADOW | REFLECTION),
        )
        assert result.calls == depth * (1 + 1) + 1
        assert result.colour == pytest.approx((0.0625, 0.0625, 0.0625), rel=1e-4)

    def test_plane_is_never_reflected(self):
        from tinyray.core.tracer import trace_ray
        from tinyray.materials.phong import add_phong_material
        from tinyray.scene.intersection import add_plane

        floor = add_phong_material((0.05, 0.05, 0.05), (0.8, 0.6, 0.4), (0.0, 0.0, 0.0), 1.0)
        add_plane((0.0, 1.0, 0.0), 0.0, floor)

        result = trace_ray(
            (1.0, 5.0, 1.0), (0.0, -1.0, 0.0), config=_config(AMBIENT | REFLECTION)
        )
        assert result.colour == pytest.approx((0.8, 0.6, 0.4), abs=1e-6)
        assert result.calls == 1


class TestLegacyReflection:
    """Tests for the camera-dependent reflection model."""

    def test_requires_camera(self, unit_sphere):
        from tinyray.core.config import ConfigurationError, TracerConfig
        from tinyray.core.tracer import trace_ray

        with pytest.raises(ConfigurationError, match="camera"):
            trace_ray((0.0, 0.0, 5.0), (0.0, 0.0, -1.0), config=TracerConfig())

    def test_no_camera_needed_without_reflection(self, unit_sphere):
        from tinyray.core.config import TracerConfig
        from tinyray.core.tracer import trace_ray

        result = trace_ray(
            (0.0, 0.0, 5.0), (0.0, 0.0, -1.0), config=TracerConfig(trace_flags=AMBIENT)
        )
        assert result.calls == 1

    def test_runs_with_camera(self, unit_sphere):
        from tinyray.camera.pinhole import PinholeCamera, setup_camera
        from tinyray.core.config import TracerConfig
        from tinyray.core.tracer import trace_ray

        setup_camera(PinholeCamera(lookfrom=(0.0, 0.0, 5.0), lookat=(0.0, 0.0, 0.0)))
        result = trace_ray(
            (0.0, 0.0, 5.0),
            (0.0, 0.0, -1.0),
            config=TracerConfig(trace_flags=AMBIENT | REFLECTION),
        )
        assert 2 <= result.calls <= 6
        assert all(0.0 <= c <= 0.5 for c in result.colour)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
