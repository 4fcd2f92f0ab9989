"""Procedural sphere-field scene.

This module provides factory functions for the scenes the renderer ships with.

The random scene consists of:
- A huge diffuse gray sphere acting as the ground
- A 23x23 grid of small spheres with jittered centers and random materials
- Three large feature spheres: glass, diffuse brown, and polished metal

Material choice per small sphere:
- 80% Lambertian, albedo is the product of two random colors
- 15% Metal, albedo in [0.4, 1) per channel, fuzz in [0, 0.5)
- 5% glass with index of refraction 1.5

The structure (one ground sphere, 529 small spheres, three feature spheres) is
fixed; positions and material parameters come from the generator passed in,
so a seeded generator reproduces the same scene.

Example:
    >>> import numpy as np
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from rayweekend.scene.random_scene import create_random_scene
    >>> from rayweekend.camera.thin_lens import setup_camera
    >>>
    >>> scene, camera = create_random_scene(np.random.default_rng(7))
    >>> setup_camera(camera)
"""

import numpy as np

from rayweekend.camera.thin_lens import ThinLensCamera
from rayweekend.scene.manager import SceneManager

# =============================================================================
# Scene Constants
# =============================================================================

GROUND_CENTER = (0.0, -1000.0, 0.0)
GROUND_RADIUS = 1000.0
GROUND_ALBEDO = (0.5, 0.5, 0.5)

# Small spheres are placed for every integer a, b in [-GRID_EXTENT, GRID_EXTENT]
GRID_EXTENT = 11
SMALL_SPHERE_RADIUS = 0.2
SMALL_SPHERE_JITTER = 0.9

# Cumulative material probabilities for the small spheres
DIFFUSE_PROBABILITY = 0.8
METAL_PROBABILITY = 0.95

METAL_ALBEDO_RANGE = (0.4, 1.0)
METAL_FUZZ_RANGE = (0.0, 0.5)
GLASS_IOR = 1.5

FEATURE_SPHERE_RADIUS = 1.0
BROWN_ALBEDO = (0.4, 0.2, 0.1)
BRONZE_ALBEDO = (0.7, 0.6, 0.5)

# Reference view of the scene
LOOKFROM = (13.0, 2.0, 3.0)
LOOKAT = (0.0, 0.0, 0.0)
VUP = (0.0, 1.0, 0.0)
VFOV = 20.0
APERTURE = 0.1
FOCUS_DIST = 10.0
DEFAULT_ASPECT_RATIO = 3.0 / 2.0


def create_reference_camera(aspect_ratio: float = DEFAULT_ASPECT_RATIO) -> ThinLensCamera:
    """Create the camera used to view the procedural scenes."""
    return ThinLensCamera(
        lookfrom=LOOKFROM,
        lookat=LOOKAT,
        vup=VUP,
        vfov=VFOV,
        aspect_ratio=aspect_ratio,
        aperture=APERTURE,
        focus_dist=FOCUS_DIST,
    )


def _random_color(rng: np.random.Generator, low: float = 0.0, high: float = 1.0):
    return tuple(float(c) for c in rng.uniform(low, high, size=3))


# =============================================================================
# Scene Factories
# =============================================================================


def create_random_scene(
    rng: np.random.Generator,
    aspect_ratio: float = DEFAULT_ASPECT_RATIO,
) -> tuple[SceneManager, ThinLensCamera]:
    """Create the random sphere-field scene.

    Clears any existing scene, then populates the world through a fresh
    SceneManager. Every glass sphere, small or large, shares one dielectric
    material handle.

    Args:
        rng: The generator that drives all random choices.
        aspect_ratio: Aspect ratio of the image the camera will render.

    Returns:
        A tuple of (SceneManager, ThinLensCamera).
    """
    scene = SceneManager()

    ground_mat = scene.add_lambertian_material(albedo=GROUND_ALBEDO)
    scene.add_sphere(GROUND_CENTER, GROUND_RADIUS, ground_mat)

    glass_mat = scene.add_dielectric_material(ior=GLASS_IOR)

    for a in range(-GRID_EXTENT, GRID_EXTENT + 1):
        for b in range(-GRID_EXTENT, GRID_EXTENT + 1):
            choose_mat = rng.random()
            center = (
                a + SMALL_SPHERE_JITTER * rng.random(),
                SMALL_SPHERE_RADIUS,
                b + SMALL_SPHERE_JITTER * rng.random(),
            )

            if choose_mat < DIFFUSE_PROBABILITY:
                first = _random_color(rng)
                second = _random_color(rng)
                albedo = tuple(x * y for x, y in zip(first, second))
                material_id = scene.add_lambertian_material(albedo=albedo)
            elif choose_mat < METAL_PROBABILITY:
                albedo = _random_color(rng, *METAL_ALBEDO_RANGE)
                fuzz = float(rng.uniform(*METAL_FUZZ_RANGE))
                material_id = scene.add_metal_material(albedo=albedo, fuzz=fuzz)
            else:
                material_id = glass_mat

            scene.add_sphere(center, SMALL_SPHERE_RADIUS, material_id)

    brown_mat = scene.add_lambertian_material(albedo=BROWN_ALBEDO)
    bronze_mat = scene.add_metal_material(albedo=BRONZE_ALBEDO, fuzz=0.0)

    scene.add_sphere((0.0, 1.0, 0.0), FEATURE_SPHERE_RADIUS, glass_mat)
    scene.add_sphere((-4.0, 1.0, 0.0), FEATURE_SPHERE_RADIUS, brown_mat)
    scene.add_sphere((4.0, 1.0, 0.0), FEATURE_SPHERE_RADIUS, bronze_mat)

    return scene, create_reference_camera(aspect_ratio)


def create_ground_scene(
    aspect_ratio: float = DEFAULT_ASPECT_RATIO,
) -> tuple[SceneManager, ThinLensCamera]:
    """Create a scene holding only the ground sphere.

    Cheap to render and fully deterministic in structure, which makes it
    useful for quick previews and smoke tests.
    """
    scene = SceneManager()
    ground_mat = scene.add_lambertian_material(albedo=GROUND_ALBEDO)
    scene.add_sphere(GROUND_CENTER, GROUND_RADIUS, ground_mat)
    return scene, create_reference_camera(aspect_ratio)

