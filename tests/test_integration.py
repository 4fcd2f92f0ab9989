"""Integration tests for the end-to-end rendering pipeline.

This module tests the complete pipeline from scene creation through the final
PPM file. Tests are designed to be fast (low resolution, few samples) while
still exercising every stage.

Note: Imports are done inside test methods to avoid Taichi initialization issues.
The conftest.py fixture initializes Taichi before tests run.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import numpy as np
import pytest

if TYPE_CHECKING:
    import numpy.typing as npt


def _render_random_scene(
    width: int = 24, samples: int = 2, max_depth: int = 5, seed: int = 7
) -> npt.NDArray[np.uint8]:
    from rayweekend.camera.thin_lens import setup_camera
    from rayweekend.core.renderer import ScanlineRenderer
    from rayweekend.scene.random_scene import create_random_scene
    from rayweekend.settings import RenderSettings

    settings = RenderSettings(
        image_width=width, samples_per_pixel=samples, max_depth=max_depth, random_seed=seed
    )
    _, camera = create_random_scene(settings.create_scene_rng(), settings.aspect_ratio)
    setup_camera(camera)
    return ScanlineRenderer(settings).render()


class TestRandomSceneIntegration:
    """Integration tests for rendering the random sphere field."""

    def test_end_to_end_renders_successfully(self) -> None:
        image = _render_random_scene()

        assert image.shape == (16, 24, 3)
        assert image.dtype == np.uint8

    def test_image_is_not_blank(self) -> None:
        image = _render_random_scene()

        assert image.max() > 0
        assert len(np.unique(image.reshape(-1, 3), axis=0)) > 10

    def test_top_of_image_shows_sky(self) -> None:
        """Test the top row of the reference view is mostly sky blue."""
        image = _render_random_scene()
        assert np.median(image[0, :, 2]) >= 200

    def test_more_bounces_brighten_the_ground(self) -> None:
        """Test a deeper bounce budget lets light reach the lower half."""
        shallow = _render_random_scene(samples=4, max_depth=1)
        deep = _render_random_scene(samples=4, max_depth=10)

        lower = slice(8, 16)
        # With one bounce every surface hit is black
        assert deep[lower].mean() > shallow[lower].mean()

    def test_save_ppm(self, tmp_path: Path) -> None:
        from rayweekend.output.ppm import parse_ppm, save_ppm

        image = _render_random_scene()
        path = tmp_path / "spheres.ppm"
        save_ppm(image, path)

        lines = path.read_text(encoding="ascii").splitlines()
        assert lines[:3] == ["P3", "24 16", "255"]
        assert len(lines) == 3 + 24 * 16
        assert np.array_equal(parse_ppm("\n".join(lines)), image)


class TestIntegrationWithDifferentMaterials:
    """Integration tests for scenes mixing every material type."""

    def test_all_material_types_in_scene(self) -> None:
        from rayweekend.scene.manager import MaterialType
        from rayweekend.scene.random_scene import create_random_scene

        scene, _ = create_random_scene(np.random.default_rng(7))
        counts = scene.count_spheres_by_material_type()

        assert all(counts[material_type] > 0 for material_type in MaterialType)

    def test_handmade_scene_renders(self) -> None:
        """Test a scene built directly through SceneManager renders."""
        from rayweekend.camera.thin_lens import ThinLensCamera, setup_camera
        from rayweekend.core.renderer import ScanlineRenderer
        from rayweekend.scene.manager import SceneManager
        from rayweekend.settings import RenderSettings

        scene = SceneManager()
        ground = scene.add_lambertian_material(albedo=(0.8, 0.8, 0.0))
        scene.add_sphere((0.0, -100.5, -1.0), 100.0, ground)
        scene.add_lambertian_sphere((0.0, 0.0, -1.0), 0.5, albedo=(0.1, 0.2, 0.5))
        scene.add_dielectric_sphere((-1.0, 0.0, -1.0), 0.5, ior=1.5)
        scene.add_metal_sphere((1.0, 0.0, -1.0), 0.5, albedo=(0.8, 0.6, 0.2), fuzz=0.0)

        setup_camera(
            ThinLensCamera(
                lookfrom=(-2.0, 2.0, 1.0),
                lookat=(0.0, 0.0, -1.0),
                vup=(0.0, 1.0, 0.0),
                vfov=20.0,
                aspect_ratio=16.0 / 9.0,
                aperture=2.0,
                focus_dist=3.4,
            )
        )
        settings = RenderSettings(
            image_width=16, aspect_ratio=16.0 / 9.0, samples_per_pixel=2, max_depth=8
        )
        image = ScanlineRenderer(settings).render()

        assert image.shape == (9, 16, 3)
        assert image.max() > 0


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
