"""Unit tests for the Metal material module.

Tests cover:
- Perfect specular reflection (fuzz=0)
- Fuzzy reflection (fuzz>0)
- Ray absorption when the scattered ray points into the surface
- Attenuation equals albedo
- Material registry operations and validation
"""

import math

import pytest
import taichi as ti


def _scatter_once(albedo, fuzz, incident, normal):
    """Run scatter_metal once and return (direction, attenuation, did_scatter)."""
    from rayweekend.core.ray import vec3
    from rayweekend.materials.metal import scatter_metal

    result_dir = ti.Vector.field(3, dtype=ti.f64, shape=())
    result_att = ti.Vector.field(3, dtype=ti.f64, shape=())
    result_scatter = ti.field(dtype=ti.i32, shape=())

    @ti.kernel
    def test_kernel():
        for _ in range(1):
            direction, attenuation, did_scatter = scatter_metal(
                vec3(albedo[0], albedo[1], albedo[2]),
                fuzz,
                vec3(incident[0], incident[1], incident[2]),
                vec3(normal[0], normal[1], normal[2]),
            )
            result_dir[None] = direction
            result_att[None] = attenuation
            result_scatter[None] = did_scatter

    test_kernel()
    return (
        tuple(result_dir[None].to_numpy()),
        tuple(result_att[None].to_numpy()),
        result_scatter[None],
    )


class TestPerfectReflection:
    """Tests for perfect specular reflection (fuzz=0)."""

    def test_perfect_reflection_normal_incidence(self):
        """Test a ray hitting the surface head-on reflects straight back."""
        direction, _, did_scatter = _scatter_once(
            (1.0, 1.0, 1.0), 0.0, (0.0, -1.0, 0.0), (0.0, 1.0, 0.0)
        )
        assert direction == pytest.approx((0.0, 1.0, 0.0))
        assert did_scatter == 1

    def test_perfect_reflection_45_degrees(self):
        """Test reflection at 45 degrees of an unnormalized incident direction."""
        direction, _, did_scatter = _scatter_once(
            (1.0, 1.0, 1.0), 0.0, (2.0, -2.0, 0.0), (0.0, 1.0, 0.0)
        )
        s = 1.0 / math.sqrt(2.0)
        # The incident direction is normalized before reflecting
        assert direction == pytest.approx((s, s, 0.0))
        assert did_scatter == 1


class TestFuzzyReflection:
    """Tests for fuzzy reflection (fuzz>0)."""

    def test_fuzzy_reflection_bounded_by_fuzz(self):
        """Test the perturbation away from the mirror direction is exactly fuzz long."""
        from rayweekend.core.ray import length, vec3
        from rayweekend.materials.metal import scatter_metal

        n = 1000
        fuzz = 0.3
        offsets = ti.field(dtype=ti.f64, shape=n)

        @ti.kernel
        def test_kernel():
            for i in range(n):
                direction, _, did_scatter = scatter_metal(
                    vec3(1.0, 1.0, 1.0), fuzz, vec3(0.0, -1.0, 0.0), vec3(0.0, 1.0, 0.0)
                )
                offsets[i] = length(direction - vec3(0.0, 1.0, 0.0))

        test_kernel()
        assert abs(offsets.to_numpy() - fuzz).max() < 1e-9

    def test_fuzzy_reflection_direction_varies(self):
        """Test fuzzy reflections are not all identical."""
        from rayweekend.core.ray import vec3
        from rayweekend.materials.metal import scatter_metal

        n = 100
        directions = ti.Vector.field(3, dtype=ti.f64, shape=n)

        @ti.kernel
        def test_kernel():
            for i in range(n):
                direction, _, did_scatter = scatter_metal(
                    vec3(1.0, 1.0, 1.0), 0.5, vec3(0.0, -1.0, 0.0), vec3(0.0, 1.0, 0.0)
                )
                directions[i] = direction

        test_kernel()
        assert directions.to_numpy()[:, 0].std() > 0.01

    def test_fuzzy_grazing_angle_may_absorb(self):
        """Test a large fuzz at grazing incidence absorbs part of the rays."""
        from rayweekend.core.ray import vec3
        from rayweekend.materials.metal import scatter_metal

        n = 1000
        scattered = ti.field(dtype=ti.i32, shape=n)

        @ti.kernel
        def test_kernel():
            for i in range(n):
                _, _, did_scatter = scatter_metal(
                    vec3(1.0, 1.0, 1.0), 1.0, vec3(1.0, -0.05, 0.0), vec3(0.0, 1.0, 0.0)
                )
                scattered[i] = did_scatter

        test_kernel()
        flags = scattered.to_numpy()
        assert 0 < flags.sum() < n


class TestRayAbsorption:
    """Tests for absorption of rays scattered below the surface."""

    def test_reflection_into_surface_is_absorbed(self):
        """Test a mirror reflection pointing into the surface is absorbed."""
        # Incident direction leaves along the normal, so the reflection points inward
        _, _, did_scatter = _scatter_once(
            (1.0, 1.0, 1.0), 0.0, (0.0, 1.0, 0.0), (0.0, 1.0, 0.0)
        )
        assert did_scatter == 0

    def test_tangent_reflection_is_absorbed(self):
        """Test a reflection exactly along the surface counts as absorbed."""
        _, _, did_scatter = _scatter_once(
            (1.0, 1.0, 1.0), 0.0, (1.0, 0.0, 0.0), (0.0, 1.0, 0.0)
        )
        assert did_scatter == 0


class TestAttenuation:
    """Tests for metal attenuation."""

    def test_attenuation_equals_albedo(self):
        """Test attenuation is the albedo."""
        _, attenuation, _ = _scatter_once(
            (0.7, 0.6, 0.5), 0.0, (0.0, -1.0, 0.0), (0.0, 1.0, 0.0)
        )
        assert attenuation == pytest.approx((0.7, 0.6, 0.5))


class TestMaterialRegistry:
    """Tests for metal material registry."""

    def test_add_and_get_material(self):
        """Test adding a material and reading albedo and fuzz back."""
        from rayweekend.materials.metal import (
            add_metal_material,
            get_metal_albedo,
            get_metal_fuzz,
        )

        idx = add_metal_material((0.9, 0.8, 0.7), fuzz=0.25)
        assert idx == 0

        albedo = ti.Vector.field(3, dtype=ti.f64, shape=())
        fuzz = ti.field(dtype=ti.f64, shape=())

        @ti.kernel
        def test_kernel(mat_idx: ti.i32):
            albedo[None] = get_metal_albedo(mat_idx)
            fuzz[None] = get_metal_fuzz(mat_idx)

        test_kernel(idx)
        assert tuple(albedo[None].to_numpy()) == pytest.approx((0.9, 0.8, 0.7))
        assert fuzz[None] == pytest.approx(0.25)

    def test_material_count(self):
        """Test the count follows additions."""
        from rayweekend.materials.metal import add_metal_material, get_metal_material_count

        assert get_metal_material_count() == 0
        add_metal_material((0.5, 0.5, 0.5))
        add_metal_material((0.5, 0.5, 0.5), fuzz=1.0)
        assert get_metal_material_count() == 2

    @pytest.mark.parametrize("fuzz", [-0.1, 1.5])
    def test_fuzz_validation(self, fuzz):
        """Test fuzz outside [0, 1] is rejected."""
        from rayweekend.materials.metal import add_metal_material

        with pytest.raises(ValueError, match="Fuzz"):
            add_metal_material((0.5, 0.5, 0.5), fuzz=fuzz)

    def test_albedo_validation(self):
        """Test albedo components outside [0, 1] are rejected."""
        from rayweekend.materials.metal import add_metal_material

        with pytest.raises(ValueError, match="Albedo"):
            add_metal_material((0.5, 0.5, 1.2))

    def test_capacity_exceeded(self):
        """Test adding beyond MAX_METAL_MATERIALS raises RuntimeError."""
        from rayweekend.materials import metal
        from rayweekend.materials.metal import MAX_METAL_MATERIALS, add_metal_material

        metal.num_metal_materials[None] = MAX_METAL_MATERIALS
        with pytest.raises(RuntimeError, match="Maximum number"):
            add_metal_material((0.5, 0.5, 0.5))

    def test_scatter_by_id(self):
        """Test scattering by registry index uses the stored parameters."""
        from rayweekend.core.ray import vec3
        from rayweekend.materials.metal import add_metal_material, scatter_metal_by_id

        idx = add_metal_material((0.2, 0.4, 0.6), fuzz=0.0)

        result_dir = ti.Vector.field(3, dtype=ti.f64, shape=())
        result_att = ti.Vector.field(3, dtype=ti.f64, shape=())
        result_scatter = ti.field(dtype=ti.i32, shape=())

        @ti.kernel
        def test_kernel(mat_idx: ti.i32):
            for i in range(1):
                direction, attenuation, did_scatter = scatter_metal_by_id(
                    mat_idx, vec3(0.0, -1.0, 0.0), vec3(0.0, 1.0, 0.0)
                )
                result_dir[None] = direction
                result_att[None] = attenuation
                result_scatter[None] = did_scatter

        test_kernel(idx)
        assert tuple(result_dir[None].to_numpy()) == pytest.approx((0.0, 1.0, 0.0))
        assert tuple(result_att[None].to_numpy()) == pytest.approx((0.2, 0.4, 0.6))
        assert result_scatter[None] == 1
