"""Unit tests for the metal material module.

Tests cover:
- Mirror reflection law and unit-length output
- Absorption when the reflection does not leave the surface
- Fuzz clamping (fuzz is stored but does not perturb the reflection)
- Material registry operations
"""

import math

import pytest
import taichi as ti


def _scatter(incident, normal, fuzz=0.0, albedo=(0.7, 0.6, 0.5)):
    """Run scatter_metal once and return its results as Python values."""
    from duskray.materials.metal import scatter_metal, vec3

    inputs = ti.Vector.field(3, dtype=ti.f32, shape=3)
    direction = ti.Vector.field(3, dtype=ti.f32, shape=())
    attenuation = ti.Vector.field(3, dtype=ti.f32, shape=())
    did_scatter = ti.field(dtype=ti.i32, shape=())

    inputs[0] = albedo
    inputs[1] = incident
    inputs[2] = normal

    @ti.kernel
    def run(fuzz: ti.f32):
        _, d, att, flag = scatter_metal(inputs[0], fuzz, inputs[1], vec3(0.0, 0.0, 0.0), inputs[2])
        direction[None] = d
        attenuation[None] = att
        did_scatter[None] = flag

    run(fuzz)
    return (
        tuple(float(c) for c in direction[None].to_numpy()),
        tuple(float(c) for c in attenuation[None].to_numpy()),
        did_scatter[None],
    )


class TestMetalReflection:
    def test_normal_incidence_reflects_back(self):
        direction, _, did_scatter = _scatter((0.0, -1.0, 0.0), (0.0, 1.0, 0.0))
        assert did_scatter == 1
        assert direction == pytest.approx((0.0, 1.0, 0.0), abs=1e-6)

    def test_reflection_law_holds(self):
        """angle(reflected, n) equals angle(-incident, n)."""
        incident = (1.0, -2.0, 0.5)
        normal = (0.0, 1.0, 0.0)
        direction, _, did_scatter = _scatter(incident, normal)

        inc_len = math.sqrt(sum(c * c for c in incident))
        cos_in = -incident[1] / inc_len
        cos_out = direction[1]
        assert did_scatter == 1
        assert cos_out == pytest.approx(cos_in, abs=1e-5)
        # Tangential component is preserved
        assert direction[0] == pytest.approx(incident[0] / inc_len, abs=1e-5)
        assert direction[2] == pytest.approx(incident[2] / inc_len, abs=1e-5)

    def test_reflection_is_unit_length_for_unnormalized_input(self):
        direction, _, _ = _scatter((3.0, -4.0, 0.0), (0.0, 1.0, 0.0))
        assert math.sqrt(sum(c * c for c in direction)) == pytest.approx(1.0, abs=1e-5)

    def test_attenuation_is_albedo(self):
        _, attenuation, _ = _scatter((0.0, -1.0, 0.0), (0.0, 1.0, 0.0), albedo=(0.2, 0.4, 0.6))
        assert attenuation == pytest.approx((0.2, 0.4, 0.6))

    def test_ray_leaving_the_surface_is_absorbed(self):
        """A ray travelling along the normal reflects into the surface."""
        _, _, did_scatter = _scatter((0.0, 1.0, 0.0), (0.0, 1.0, 0.0))
        assert did_scatter == 0

    def test_grazing_reflection_is_absorbed(self):
        """dot(reflected, n) == 0 does not count as leaving the surface."""
        _, _, did_scatter = _scatter((1.0, 0.0, 0.0), (0.0, 1.0, 0.0))
        assert did_scatter == 0

    def test_fuzz_does_not_perturb_reflection(self):
        first, _, _ = _scatter((1.0, -1.0, 0.0), (0.0, 1.0, 0.0), fuzz=0.9)
        second, _, _ = _scatter((1.0, -1.0, 0.0), (0.0, 1.0, 0.0), fuzz=0.0)
        assert first == pytest.approx(second, abs=1e-6)


class TestFuzzClamping:
    @pytest.mark.parametrize(
        ("fuzz", "expected"),
        [(0.0, 0.0), (0.3, 0.3), (1.0, 1.0), (2.5, 1.0)],
    )
    def test_clamp_fuzz(self, fuzz, expected):
        from duskray.materials.metal import clamp_fuzz

        assert clamp_fuzz(fuzz) == expected


class TestMetalMaterialRegistry:
    def test_add_and_get_material(self):
        from duskray.materials.metal import (
            add_metal_material,
            get_metal_albedo,
            get_metal_fuzz,
        )

        idx = add_metal_material((0.7, 0.6, 0.5), fuzz=5.0)
        albedo = ti.Vector.field(3, dtype=ti.f32, shape=())
        fuzz = ti.field(dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel(mat_idx: ti.i32):
            albedo[None] = get_metal_albedo(mat_idx)
            fuzz[None] = get_metal_fuzz(mat_idx)

        test_kernel(idx)
        assert tuple(albedo[None].to_numpy()) == pytest.approx((0.7, 0.6, 0.5))
        # Stored fuzz is clamped to 1
        assert fuzz[None] == pytest.approx(1.0)

    def test_material_count(self):
        from duskray.materials.metal import (
            add_metal_material,
            clear_metal_materials,
            get_metal_material_count,
        )

        add_metal_material((0.5, 0.5, 0.5))
        add_metal_material((0.9, 0.9, 0.9), fuzz=0.1)
        assert get_metal_material_count() == 2
        clear_metal_materials()
        assert get_metal_material_count() == 0

    def test_negative_albedo_rejected(self):
        from duskray.materials.metal import add_metal_material

        with pytest.raises(ValueError, match="negative"):
            add_metal_material((-0.5, 0.5, 0.5))

    def test_scatter_by_id(self):
        from duskray.materials.metal import add_metal_material, scatter_metal_by_id, vec3

        idx = add_metal_material((0.8, 0.8, 0.8))
        direction = ti.Vector.field(3, dtype=ti.f32, shape=())
        did_scatter = ti.field(dtype=ti.i32, shape=())

        @ti.kernel
        def test_kernel(mat_idx: ti.i32):
            _, d, _, flag = scatter_metal_by_id(
                mat_idx, vec3(1.0, -1.0, 0.0), vec3(0.0, 0.0, 0.0), vec3(0.0, 1.0, 0.0)
            )
            direction[None] = d
            did_scatter[None] = flag

        test_kernel(idx)
        s = 1.0 / math.sqrt(2.0)
        assert did_scatter[None] == 1
        assert tuple(direction[None].to_numpy()) == pytest.approx((s, s, 0.0), abs=1e-6)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
