"""Night meadow scene configuration.

This module provides a factory function for the night scene: a large green
ground sphere scattered with small yellow "grass" spheres, a sky of bright
star spheres, a gray moon and three feature spheres (glass, diffuse brown and
polished metal) in the foreground.

The scene contains no light sources. Everything visible is lit by the
constant ambient term the integrator adds at each bounce; the stars look
bright because their albedo is above 1.

The random layout is drawn from a Python random.Random seeded with
NightSceneParams.seed, so the same seed always produces the same scene.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from duskray.scene.night_scene import create_night_scene
    >>> from duskray.camera.thin_lens import setup_camera
    >>>
    >>> scene, camera = create_night_scene()
    >>> setup_camera(camera)
"""

import logging
import random
from dataclasses import dataclass

from duskray.camera.thin_lens import ThinLensCamera
from duskray.scene.manager import SceneManager

logger = logging.getLogger(__name__)


@dataclass
class NightSceneParams:
    """Parameters for building the night scene.

    Attributes:
        num_grass: Number of grass spheres close to the ground.
        num_stars: Number of star spheres in the sky.
        num_high_grass: Number of grass-coloured spheres scattered high in
            the sky.
        seed: Seed for the layout random generator.
        spread: Half extent of the square in x and z the small spheres are
            scattered over.

    Example:
        >>> params = NightSceneParams(num_grass=50, num_stars=10, seed=7)
    """

    num_grass: int = 500
    num_stars: int = 100
    num_high_grass: int = 500
    seed: int = 0
    spread: float = 15.0


# =============================================================================
# Night Scene Constants
# =============================================================================

GROUND_ALBEDO = (0.1, 0.8, 0.3)
GROUND_CENTER = (0.0, -1000.0, 0.0)
GROUND_RADIUS = 1000.0

GRASS_ALBEDO = (1.0, 1.0, 0.0)
SMALL_SPHERE_RADIUS = 0.05

STAR_MIN_HEIGHT = 5.0
STAR_MAX_HEIGHT = 20.0
STAR_MIN_BRIGHTNESS = 2.0
STAR_MAX_BRIGHTNESS = 5.0

HIGH_GRASS_MIN_HEIGHT = 10.0
HIGH_GRASS_MAX_HEIGHT = 50.0

MOON_ALBEDO = (0.8, 0.8, 0.8)
MOON_CENTER = (0.0, 10.0, 0.0)
MOON_RADIUS = 3.0

GLASS_IOR = 1.5
BROWN_ALBEDO = (0.4, 0.2, 0.1)
METAL_ALBEDO = (0.7, 0.6, 0.5)
METAL_FUZZ = 0.0


def create_night_camera(aspect_ratio: float = 3.0 / 2.0) -> ThinLensCamera:
    """The default view of the night scene."""
    return ThinLensCamera(
        lookfrom=(13.0, 2.0, 3.0),
        lookat=(0.0, 0.0, 0.0),
        vup=(0.0, 1.0, 0.0),
        vfov=20.0,
        aspect_ratio=aspect_ratio,
        aperture=0.1,
        focus_dist=10.0,
    )


def create_night_scene(
    params: NightSceneParams | None = None,
    aspect_ratio: float = 3.0 / 2.0,
) -> tuple[SceneManager, ThinLensCamera]:
    """Create the night scene.

    Builds, in order: the ground, the grass, the stars, the moon, the three
    feature spheres and the high grass. All grass spheres (low and high)
    share a single yellow Lambertian material; every star gets its own
    material because its brightness is random.

    Args:
        params: Optional NightSceneParams. If None, uses NightSceneParams().
        aspect_ratio: Aspect ratio of the returned camera.

    Returns:
        A tuple of (SceneManager, ThinLensCamera).

    Raises:
        ValueError: If any population count is negative.
    """
    if params is None:
        params = NightSceneParams()
    for name in ("num_grass", "num_stars", "num_high_grass"):
        if getattr(params, name) < 0:
            raise ValueError(f"{name} = {getattr(params, name)} is negative.")

    rng = random.Random(params.seed)
    spread = params.spread
    scene = SceneManager()

    ground_mat = scene.add_lambertian_material(albedo=GROUND_ALBEDO)
    scene.add_sphere(GROUND_CENTER, GROUND_RADIUS, ground_mat)

    grass_mat = scene.add_lambertian_material(albedo=GRASS_ALBEDO)
    for _ in range(params.num_grass):
        x = rng.uniform(-spread, spread)
        z = rng.uniform(-spread, spread)
        y = SMALL_SPHERE_RADIUS + 0.1 * rng.random()
        scene.add_sphere((x, y, z), SMALL_SPHERE_RADIUS, grass_mat)

    for _ in range(params.num_stars):
        x = rng.uniform(-spread, spread)
        y = rng.uniform(STAR_MIN_HEIGHT, STAR_MAX_HEIGHT)
        z = rng.uniform(-spread, spread)
        brightness = rng.uniform(STAR_MIN_BRIGHTNESS, STAR_MAX_BRIGHTNESS)
        star_mat = scene.add_lambertian_material(albedo=(brightness, brightness, brightness))
        scene.add_sphere((x, y, z), SMALL_SPHERE_RADIUS, star_mat)

    moon_mat = scene.add_lambertian_material(albedo=MOON_ALBEDO)
    scene.add_moon_sphere(MOON_CENTER, MOON_RADIUS, moon_mat)

    scene.add_dielectric_sphere((0.0, 1.0, 0.0), 1.0, ior=GLASS_IOR)
    scene.add_lambertian_sphere((-1.5, 0.5, 0.0), 1.0, albedo=BROWN_ALBEDO)
    scene.add_metal_sphere((1.5, 0.5, 0.0), 1.0, albedo=METAL_ALBEDO, fuzz=METAL_FUZZ)

    for _ in range(params.num_high_grass):
        x = rng.uniform(-spread, spread)
        z = rng.uniform(-spread, spread)
        y = SMALL_SPHERE_RADIUS + rng.uniform(HIGH_GRASS_MIN_HEIGHT, HIGH_GRASS_MAX_HEIGHT)
        scene.add_sphere((x, y, z), SMALL_SPHERE_RADIUS, grass_mat)

    logger.info(
        "Night scene built: %d spheres, %d moon spheres, %d materials (seed=%d)",
        scene.get_sphere_count(),
        scene.get_moon_sphere_count(),
        scene.get_material_count(),
        params.seed,
    )

    return scene, create_night_camera(aspect_ratio)
