"""Unit tests for the ray module.

Tests cover:
- Ray dataclass and ray_at function
- Vector utility functions (normalize, reflect, refract, Schlick)
- Random sampling functions
"""

import math

import numpy as np
import pytest
import taichi as ti

N_SAMPLES = 1000


def _vec(v):
    return tuple(float(c) for c in v.to_numpy())


class TestRayBasics:
    def test_ray_at(self):
        """ray_at returns origin + t * direction for zero, positive and negative t."""
        from duskray.core.ray import Ray, ray_at, vec3

        result = ti.Vector.field(3, dtype=ti.f32, shape=3)

        @ti.kernel
        def test_kernel():
            ray = Ray(origin=vec3(1.0, 2.0, 3.0), direction=vec3(0.0, 0.0, -2.0))
            result[0] = ray_at(ray, 0.0)
            result[1] = ray_at(ray, 2.5)
            result[2] = ray_at(ray, -1.0)

        test_kernel()
        assert _vec(result[0]) == pytest.approx((1.0, 2.0, 3.0))
        assert _vec(result[1]) == pytest.approx((1.0, 2.0, -2.0))
        assert _vec(result[2]) == pytest.approx((1.0, 2.0, 5.0))

    def test_make_ray_keeps_direction_length(self):
        from duskray.core.ray import make_ray, vec3

        result = ti.Vector.field(3, dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel():
            ray = make_ray(vec3(0.0, 0.0, 0.0), vec3(3.0, 0.0, 4.0))
            result[None] = ray.direction

        test_kernel()
        assert _vec(result[None]) == pytest.approx((3.0, 0.0, 4.0))


class TestVectorUtilities:
    def test_length_and_normalize(self):
        from duskray.core.ray import length, length_squared, normalize, vec3

        lengths = ti.field(dtype=ti.f32, shape=2)
        unit = ti.Vector.field(3, dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel():
            v = vec3(3.0, 4.0, 0.0)
            lengths[0] = length(v)
            lengths[1] = length_squared(v)
            unit[None] = normalize(v)

        test_kernel()
        assert lengths[0] == pytest.approx(5.0)
        assert lengths[1] == pytest.approx(25.0)
        assert _vec(unit[None]) == pytest.approx((0.6, 0.8, 0.0))

    def test_dot_and_cross(self):
        from duskray.core.ray import cross, dot, vec3

        d = ti.field(dtype=ti.f32, shape=())
        c = ti.Vector.field(3, dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel():
            d[None] = dot(vec3(1.0, 2.0, 3.0), vec3(4.0, 5.0, 6.0))
            c[None] = cross(vec3(1.0, 0.0, 0.0), vec3(0.0, 1.0, 0.0))

        test_kernel()
        assert d[None] == pytest.approx(32.0)
        assert _vec(c[None]) == pytest.approx((0.0, 0.0, 1.0))

    def test_reflect_mirror_law(self):
        """The reflected ray makes the same angle with the normal as the incident one."""
        from duskray.core.ray import normalize, reflect, vec3

        result = ti.Vector.field(3, dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel():
            result[None] = reflect(normalize(vec3(1.0, -1.0, 0.0)), vec3(0.0, 1.0, 0.0))

        test_kernel()
        s = 1.0 / math.sqrt(2.0)
        assert _vec(result[None]) == pytest.approx((s, s, 0.0), abs=1e-6)

    def test_refract_normal_incidence_passes_straight(self):
        from duskray.core.ray import refract, vec3

        result = ti.Vector.field(3, dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel():
            result[None] = refract(vec3(0.0, -1.0, 0.0), vec3(0.0, 1.0, 0.0), 1.0 / 1.5)

        test_kernel()
        assert _vec(result[None]) == pytest.approx((0.0, -1.0, 0.0), abs=1e-6)

    def test_refract_obeys_snell(self):
        """sin(theta_t) = ratio * sin(theta_i) for a 45 degree incidence."""
        from duskray.core.ray import normalize, refract, vec3

        result = ti.Vector.field(3, dtype=ti.f32, shape=())
        ratio = 1.0 / 1.5

        @ti.kernel
        def test_kernel():
            incident = normalize(vec3(1.0, -1.0, 0.0))
            result[None] = refract(incident, vec3(0.0, 1.0, 0.0), ratio)

        test_kernel()
        r = _vec(result[None])
        sin_t = r[0] / math.sqrt(sum(c * c for c in r))
        assert sin_t == pytest.approx(ratio * math.sin(math.pi / 4), abs=1e-5)
        assert r[1] < 0.0

    def test_schlick_at_normal_incidence_is_r0(self):
        from duskray.core.ray import schlick_reflectance

        values = ti.field(dtype=ti.f32, shape=2)

        @ti.kernel
        def test_kernel():
            values[0] = schlick_reflectance(1.0, 1.5)
            values[1] = schlick_reflectance(0.0, 1.5)

        test_kernel()
        r0 = ((1.0 - 1.5) / (1.0 + 1.5)) ** 2
        assert values[0] == pytest.approx(r0, abs=1e-6)
        # Grazing incidence reflects everything
        assert values[1] == pytest.approx(1.0, abs=1e-6)

    def test_near_zero(self):
        from duskray.core.ray import near_zero, vec3

        flags = ti.field(dtype=ti.i32, shape=2)

        @ti.kernel
        def test_kernel():
            flags[0] = near_zero(vec3(1e-9, -1e-9, 0.0))
            flags[1] = near_zero(vec3(1e-9, 1e-3, 0.0))

        test_kernel()
        assert flags[0] == 1
        assert flags[1] == 0


class TestRandomSampling:
    def test_random_double_range(self):
        from duskray.core.ray import random_double, random_double_range

        values = ti.field(dtype=ti.f32, shape=(N_SAMPLES, 2))

        @ti.kernel
        def test_kernel():
            for i in range(N_SAMPLES):
                values[i, 0] = random_double()
                values[i, 1] = random_double_range(2.0, 5.0)

        test_kernel()
        arr = values.to_numpy()
        assert arr[:, 0].min() >= 0.0 and arr[:, 0].max() < 1.0
        assert arr[:, 1].min() >= 2.0 and arr[:, 1].max() < 5.0

    def test_random_unit_vector_length(self):
        from duskray.core.ray import random_unit_vector

        vectors = ti.Vector.field(3, dtype=ti.f32, shape=N_SAMPLES)

        @ti.kernel
        def test_kernel():
            for i in range(N_SAMPLES):
                vectors[i] = random_unit_vector()

        test_kernel()
        norms = (vectors.to_numpy() ** 2).sum(axis=1) ** 0.5
        assert np.allclose(norms, 1.0, atol=1e-5)

    def test_random_in_unit_disk_bounds(self):
        from duskray.core.ray import random_in_unit_disk

        vectors = ti.Vector.field(3, dtype=ti.f32, shape=N_SAMPLES)

        @ti.kernel
        def test_kernel():
            for i in range(N_SAMPLES):
                vectors[i] = random_in_unit_disk()

        test_kernel()
        arr = vectors.to_numpy()
        assert (arr[:, 0] ** 2 + arr[:, 1] ** 2 < 1.0).all()
        assert (arr[:, 2] == 0.0).all()


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
