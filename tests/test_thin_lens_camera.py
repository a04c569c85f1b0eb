"""Unit tests for the thin lens camera module.

Tests cover:
- Orthonormal basis construction from look-at parameters
- Viewport geometry at the focus distance
- Ray generation through the image centre and corners
- Lens sampling for a finite aperture
- Parameter validation
"""

import math

import numpy as np
import pytest
import taichi as ti

N_SAMPLES = 1000


def _make_camera(**overrides):
    from duskray.camera.thin_lens import ThinLensCamera

    params = {
        "lookfrom": (0.0, 0.0, 0.0),
        "lookat": (0.0, 0.0, -1.0),
        "vup": (0.0, 1.0, 0.0),
        "vfov": 90.0,
        "aspect_ratio": 1.0,
    }
    params.update(overrides)
    return ThinLensCamera(**params)


def _rays_at(s, t, count=1):
    """Generate count rays through (s, t) and return origins and directions."""
    from duskray.camera.thin_lens import get_ray

    origins = ti.Vector.field(3, dtype=ti.f32, shape=count)
    directions = ti.Vector.field(3, dtype=ti.f32, shape=count)

    @ti.kernel
    def run(s: ti.f32, t: ti.f32):
        for i in range(count):
            ray = get_ray(s, t)
            origins[i] = ray.origin
            directions[i] = ray.direction

    run(s, t)
    return origins.to_numpy(), directions.to_numpy()


class TestCameraBasis:
    def test_axis_aligned_basis(self, night_camera):
        from duskray.camera.thin_lens import get_camera_info

        info = get_camera_info()
        assert info["origin"] == pytest.approx((0.0, 0.0, 0.0))
        assert info["u"] == pytest.approx((1.0, 0.0, 0.0))
        assert info["v"] == pytest.approx((0.0, 1.0, 0.0))
        assert info["w"] == pytest.approx((0.0, 0.0, 1.0))

    def test_viewport_for_90_degree_fov(self, night_camera):
        """tan(45) = 1, so the viewport spans 2 x 2 at unit focus distance."""
        from duskray.camera.thin_lens import get_camera_info

        info = get_camera_info()
        assert info["horizontal"] == pytest.approx((2.0, 0.0, 0.0), abs=1e-6)
        assert info["vertical"] == pytest.approx((0.0, 2.0, 0.0), abs=1e-6)
        assert info["lower_left"] == pytest.approx((-1.0, -1.0, -1.0), abs=1e-6)

    def test_night_camera_basis_is_orthonormal(self):
        from duskray.camera.thin_lens import get_camera_info, setup_camera
        from duskray.scene.night_scene import create_night_camera

        setup_camera(create_night_camera())
        info = get_camera_info()
        u, v, w = (np.array(info[k]) for k in ("u", "v", "w"))

        for axis in (u, v, w):
            assert np.linalg.norm(axis) == pytest.approx(1.0, abs=1e-5)
        assert np.dot(u, v) == pytest.approx(0.0, abs=1e-5)
        assert np.dot(u, w) == pytest.approx(0.0, abs=1e-5)
        expected_w = np.array([13.0, 2.0, 3.0]) / math.sqrt(13.0**2 + 2.0**2 + 3.0**2)
        assert np.allclose(w, expected_w, atol=1e-5)

    def test_viewport_scales_with_focus_distance(self):
        from duskray.camera.thin_lens import get_camera_info, setup_camera

        setup_camera(_make_camera(aspect_ratio=2.0, focus_dist=5.0))
        info = get_camera_info()
        assert info["horizontal"] == pytest.approx((20.0, 0.0, 0.0), abs=1e-4)
        assert info["vertical"] == pytest.approx((0.0, 10.0, 0.0), abs=1e-4)
        assert info["lower_left"][2] == pytest.approx(-5.0, abs=1e-5)


class TestRayGeneration:
    def test_center_ray_points_at_lookat(self, night_camera):
        origins, directions = _rays_at(0.5, 0.5)
        assert np.allclose(origins[0], [0.0, 0.0, 0.0], atol=1e-6)
        assert np.allclose(directions[0], [0.0, 0.0, -1.0], atol=1e-6)

    def test_corner_rays(self, night_camera):
        _, lower_left = _rays_at(0.0, 0.0)
        _, upper_right = _rays_at(1.0, 1.0)
        assert np.allclose(lower_left[0], [-1.0, -1.0, -1.0], atol=1e-6)
        assert np.allclose(upper_right[0], [1.0, 1.0, -1.0], atol=1e-6)

    def test_direction_is_not_normalized(self, night_camera):
        _, directions = _rays_at(1.0, 0.0)
        assert np.linalg.norm(directions[0]) == pytest.approx(math.sqrt(3.0), abs=1e-5)

    def test_jittered_rays_stay_inside_pixel(self, night_camera):
        """Pixel (1, 1) of a 3 x 3 image covers s, t in [0.5, 1.0)."""
        from duskray.camera.thin_lens import get_ray_jittered

        directions = ti.Vector.field(3, dtype=ti.f32, shape=N_SAMPLES)

        @ti.kernel
        def run():
            for i in range(N_SAMPLES):
                directions[i] = get_ray_jittered(1, 1, 3, 3).direction

        run()
        d = directions.to_numpy()
        # With the 2 x 2 viewport, x = -1 + 2 s
        assert (d[:, 0] >= 0.0 - 1e-6).all() and (d[:, 0] < 1.0).all()
        assert (d[:, 1] >= 0.0 - 1e-6).all() and (d[:, 1] < 1.0).all()

    def test_single_pixel_image_does_not_divide_by_zero(self, night_camera):
        from duskray.camera.thin_lens import get_ray_jittered

        directions = ti.Vector.field(3, dtype=ti.f32, shape=N_SAMPLES)

        @ti.kernel
        def run():
            for i in range(N_SAMPLES):
                directions[i] = get_ray_jittered(0, 0, 1, 1).direction

        run()
        assert np.isfinite(directions.to_numpy()).all()


class TestLens:
    def test_lens_radius_is_half_aperture(self):
        from duskray.camera.thin_lens import get_lens_radius, setup_camera

        setup_camera(_make_camera(aperture=0.1, focus_dist=10.0))
        assert get_lens_radius() == pytest.approx(0.05)

    def test_pinhole_rays_share_origin(self, night_camera):
        origins, _ = _rays_at(0.3, 0.7, count=N_SAMPLES)
        assert np.allclose(origins, 0.0, atol=1e-7)

    def test_lens_origins_lie_on_disk(self):
        from duskray.camera.thin_lens import setup_camera

        setup_camera(_make_camera(aperture=0.5, focus_dist=4.0))
        origins, directions = _rays_at(0.5, 0.5, count=N_SAMPLES)

        # The lens disk is spanned by u and v, here the x / y plane
        assert np.allclose(origins[:, 2], 0.0, atol=1e-7)
        assert (np.hypot(origins[:, 0], origins[:, 1]) < 0.25 + 1e-6).all()
        assert origins[:, 0].std() > 0.01

        # Every ray passes through the in-focus point
        focus_points = origins + directions
        assert np.allclose(focus_points, [0.0, 0.0, -4.0], atol=1e-4)


class TestValidation:
    @pytest.mark.parametrize(
        ("overrides", "message"),
        [
            ({"vfov": 0.0}, "vfov"),
            ({"vfov": 180.0}, "vfov"),
            ({"aspect_ratio": 0.0}, "aspect_ratio"),
            ({"focus_dist": -1.0}, "focus_dist"),
            ({"aperture": -0.1}, "aperture"),
            ({"lookat": (0.0, 0.0, 0.0)}, "different points"),
            ({"vup": (0.0, 0.0, 2.0)}, "parallel"),
        ],
    )
    def test_invalid_parameters_rejected(self, overrides, message):
        from duskray.camera.thin_lens import setup_camera

        with pytest.raises(ValueError, match=message):
            setup_camera(_make_camera(**overrides))


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
