"""Pytest configuration for duskray tests.

This module provides shared fixtures for all test modules, including
Taichi initialization which must happen once per session.
"""

import pytest
import taichi as ti


@pytest.fixture(scope="session", autouse=True)
def init_taichi_session():
    """Initialize Taichi once for the entire test session.

    Using session scope prevents multiple ti.init() calls which can cause
    segmentation faults due to Taichi runtime conflicts.
    """
    ti.init(arch=ti.cpu, random_seed=42)
    yield


@pytest.fixture(autouse=True)
def clear_all_scene_data():
    """Clear scene, material and render-target data around each test."""
    # Imported here so the Taichi fields are created after ti.init()
    from duskray.core.integrator import clear_render_target
    from duskray.materials.dielectric import clear_dielectric_materials
    from duskray.materials.lambertian import clear_lambertian_materials
    from duskray.materials.metal import clear_metal_materials
    from duskray.materials.swirl import clear_swirl_materials
    from duskray.scene.intersection import clear_scene
    from duskray.scene.manager import _clear_material_tracking

    def _clear_all():
        clear_scene()
        clear_lambertian_materials()
        clear_metal_materials()
        clear_dielectric_materials()
        clear_swirl_materials()
        _clear_material_tracking()
        clear_render_target()

    _clear_all()
    yield
    _clear_all()


@pytest.fixture
def night_camera():
    """A thin lens camera with zero aperture looking down -z from the origin."""
    from duskray.camera.thin_lens import ThinLensCamera, setup_camera

    camera = ThinLensCamera(
        lookfrom=(0.0, 0.0, 0.0),
        lookat=(0.0, 0.0, -1.0),
        vup=(0.0, 1.0, 0.0),
        vfov=90.0,
        aspect_ratio=1.0,
    )
    setup_camera(camera)
    return camera
