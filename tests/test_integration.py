"""Integration tests for the end-to-end rendering pipeline.

This module tests the complete pipeline from scene creation through final
image output. Tests are designed to be fast (low resolution, few samples)
while still exercising every stage.

Note: Imports are done inside test methods to avoid Taichi initialization issues.
The conftest.py fixture initializes Taichi before tests run.
"""

from __future__ import annotations

from pathlib import Path

import numpy as np
import pytest


def _render_night(width: int = 30, height: int = 20, samples: int = 2, max_depth: int = 10):
    from duskray.camera.thin_lens import setup_camera
    from duskray.core.progressive import ProgressiveRenderer
    from duskray.scene.night_scene import NightSceneParams, create_night_scene

    params = NightSceneParams(num_grass=40, num_stars=20, num_high_grass=20, seed=5)
    _, camera = create_night_scene(params, aspect_ratio=width / height)
    setup_camera(camera)

    renderer = ProgressiveRenderer(width, height, max_depth=max_depth)
    renderer.render(samples)
    return renderer


class TestNightSceneIntegration:
    def test_output_is_finite_and_in_range(self) -> None:
        renderer = _render_night()
        image = renderer.get_image_numpy()

        assert image.shape == (20, 30, 3)
        assert np.isfinite(image).all()
        assert (image >= 0.0).all() and (image <= 1.0).all()
        assert image.mean() > 0.0

    def test_save_ppm_end_to_end(self, tmp_path: Path) -> None:
        renderer = _render_night(width=12, height=8, samples=1)
        path = tmp_path / "night.ppm"
        renderer.save_image(path)

        lines = path.read_text().splitlines()
        assert lines[:3] == ["P3", "12 8", "255"]
        assert len(lines) == 3 + 12 * 8
        values = np.array([line.split() for line in lines[3:]], dtype=int)
        assert values.min() >= 0 and values.max() <= 255
        # Same quantization as the 8-bit export, up to float32 rounding
        diff = np.abs(values.reshape(8, 12, 3) - renderer.get_image_uint8().astype(int))
        assert diff.max() <= 1

    def test_more_samples_reduce_noise(self) -> None:
        """Two independent 8 spp renders agree better than two 1 spp renders."""
        from duskray.preview.export import compute_rmse

        def rmse_between_runs(samples: int) -> float:
            first = _render_night(samples=samples).get_image_numpy()
            second = _render_night(samples=samples).get_image_numpy()
            return compute_rmse(first, second)

        assert rmse_between_runs(8) < rmse_between_runs(1)


class TestSceneFileIntegration:
    def test_json_scene_renders_like_original(self, tmp_path: Path) -> None:
        """A scene reloaded from JSON gives the same radiance along fixed rays."""
        from duskray.core.integrator import estimate_radiance
        from duskray.scene.manager import SceneManager

        scene = SceneManager()
        scene.add_lambertian_sphere((0.0, 0.0, 0.0), 6.0, (0.5, 0.5, 0.5))
        scene.add_metal_sphere((0.0, 0.0, -3.0), 1.0, (0.9, 0.9, 0.9))
        path = tmp_path / "scene.json"
        scene.save_json(path)

        rays = [
            ((0.0, 0.0, 0.0), (0.0, 0.0, -1.0)),
            ((0.0, 0.0, 0.0), (0.0, 1.0, 0.0)),
            ((0.0, 0.0, 0.0), (1.0, 0.0, 0.0)),
        ]
        # depth 1 sees only the first hit: 0.1 * albedo
        before = [estimate_radiance(origin, direction, depth=1) for origin, direction in rays]

        scene.clear()
        assert estimate_radiance((0.0, 0.0, 0.0), (0.0, 0.0, -1.0), depth=1) == (0.0, 0.0, 0.0)
        scene.load_json(path)
        after = [estimate_radiance(origin, direction, depth=1) for origin, direction in rays]

        assert np.allclose(after, before)
        assert before[0] == pytest.approx((0.09, 0.09, 0.09), abs=1e-6)
        assert before[1] == pytest.approx((0.05, 0.05, 0.05), abs=1e-6)
        assert before[2] == pytest.approx((0.05, 0.05, 0.05), abs=1e-6)

    def test_all_material_types_in_scene(self, night_camera) -> None:
        from duskray.core.progressive import ProgressiveRenderer
        from duskray.scene.manager import SceneManager

        scene = SceneManager()
        scene.add_lambertian_sphere((0.0, 0.0, 0.0), 20.0, (0.5, 0.5, 0.5))
        scene.add_metal_sphere((-1.5, 0.0, -4.0), 0.7, (0.8, 0.8, 0.8))
        scene.add_dielectric_sphere((0.0, 0.0, -4.0), 0.7)
        scene.add_swirl_sphere((1.5, 0.0, -4.0), 0.7, (0.9, 0.5, 0.2), 3.0)
        moon_mat = scene.add_lambertian_material((0.8, 0.8, 0.8))
        scene.add_moon_sphere((0.0, 1.5, -4.0), 0.5, moon_mat)

        renderer = ProgressiveRenderer(16, 16, max_depth=10)
        renderer.render(2)
        image = renderer.get_image_numpy()

        assert np.isfinite(image).all()
        assert image.min() >= 0.0
        assert image.mean() > 0.0


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
