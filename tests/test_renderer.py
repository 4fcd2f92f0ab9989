"""Unit tests for the scanline renderer.

Tests cover:
- Rendering a small image of the ground scene
- Scanline order and progress callbacks
- Cancellation between scanlines
- Image access and saving
"""

import numpy as np
import pytest


@pytest.fixture
def ground_settings():
    """Tiny, cheap settings: 20x13 pixels, one sample, one bounce."""
    from rayweekend.settings import RenderSettings

    return RenderSettings(image_width=20, samples_per_pixel=1, max_depth=1, random_seed=3)


@pytest.fixture
def ground_renderer(ground_settings):
    """Renderer for the ground scene seen through the reference camera."""
    from rayweekend.camera.thin_lens import setup_camera
    from rayweekend.core.renderer import ScanlineRenderer
    from rayweekend.scene.random_scene import create_ground_scene

    _, camera = create_ground_scene(ground_settings.aspect_ratio)
    setup_camera(camera)
    return ScanlineRenderer(ground_settings)


class TestRendererSetup:
    """Tests for renderer construction."""

    def test_dimensions(self, ground_renderer):
        assert ground_renderer.width == 20
        assert ground_renderer.height == 13
        assert not ground_renderer.is_complete

    def test_width_over_limit_raises(self):
        from rayweekend.core.integrator import MAX_IMAGE_WIDTH
        from rayweekend.core.renderer import ScanlineRenderer
        from rayweekend.settings import RenderSettings

        with pytest.raises(RuntimeError, match="exceeds maximum supported width"):
            ScanlineRenderer(RenderSettings(image_width=MAX_IMAGE_WIDTH + 1))

    def test_repr(self, ground_renderer):
        assert repr(ground_renderer) == (
            "ScanlineRenderer(width=20, height=13, samples_per_pixel=1, max_depth=1)"
        )


class TestRender:
    """Tests for full renders."""

    def test_image_shape_and_dtype(self, ground_renderer):
        image = ground_renderer.render()

        assert image.shape == (13, 20, 3)
        assert image.dtype == np.uint8
        assert ground_renderer.is_complete

    def test_top_row_is_sky(self, ground_renderer):
        """Test the top of the image looks above the horizon."""
        image = ground_renderer.render()

        assert np.all(image[0, :, 2] == 255)

    def test_top_left_pixel_matches_sky_gradient(self, ground_renderer):
        """Test the top-left pixel equals the sky gradient along its camera ray."""
        from rayweekend.camera.thin_lens import get_camera_info

        image = ground_renderer.render()
        info = get_camera_info()
        origin = np.array(info["origin"])
        lower_left = np.array(info["lower_left"])
        horizontal = np.array(info["horizontal"])
        vertical = np.array(info["vertical"])
        radius = info["lens_radius"]
        offsets = [np.zeros(3)] + [
            sign * radius * np.array(info[axis]) for axis in ("u", "v") for sign in (-1.0, 1.0)
        ]

        # Jitter spans one pixel: u in [0, 1/(W-1)], v in [1, 1 + 1/(H-1)]
        expected = []
        for s in (0.0, 1.0 / 19):
            for t in (1.0, 1.0 + 1.0 / 12):
                for offset in offsets:
                    direction = lower_left + s * horizontal + t * vertical - origin - offset
                    a = 0.5 * (direction[1] / np.linalg.norm(direction) + 1.0)
                    sky = (1.0 - a) * np.ones(3) + a * np.array([0.5, 0.7, 1.0])
                    expected.append((256 * np.clip(np.sqrt(sky), 0.0, 0.999)).astype(int))
        expected = np.array(expected)

        pixel = image[0, 0].astype(int)
        # One level of slack for lens offsets between the sampled extremes
        assert np.all(pixel >= expected.min(axis=0) - 1)
        assert np.all(pixel <= expected.max(axis=0) + 1)
        assert pixel[2] == 255

    def test_bottom_row_is_ground(self, ground_renderer):
        """Test the ground is black when the bounce budget ends on its surface."""
        image = ground_renderer.render()
        assert np.all(image[-1] == 0)

    def test_image_is_a_copy(self, ground_renderer):
        image = ground_renderer.render()
        image[:] = 7
        assert not np.all(ground_renderer.get_image_uint8() == 7)

    def test_rerender_resets_image(self, ground_renderer):
        first = ground_renderer.render()
        second = ground_renderer.render()
        assert second.shape == first.shape
        assert ground_renderer.is_complete


class TestProgress:
    """Tests for progress reporting."""

    def test_callback_counts_down_scanlines(self, ground_renderer):
        calls = []
        ground_renderer.render(callback=lambda remaining, total: calls.append((remaining, total)))

        assert calls == [(j, 13) for j in range(12, -1, -1)]

    def test_render_scanlines_generator(self, ground_renderer):
        progress = list(ground_renderer.render_scanlines())

        assert progress[0] == (12, 13)
        assert progress[-1] == (0, 13)
        assert len(progress) == 13
        assert ground_renderer.is_complete

    def test_generator_closed_early_leaves_render_incomplete(self, ground_renderer):
        scanlines = ground_renderer.render_scanlines()
        next(scanlines)
        next(scanlines)
        scanlines.close()

        assert not ground_renderer.is_complete
        with pytest.raises(RuntimeError, match="No finished image"):
            ground_renderer.get_image_uint8()


class TestCancellation:
    """Tests for cooperative cancellation."""

    def test_cancel_stops_render(self, ground_renderer):
        from rayweekend.core.renderer import RenderCancelled

        calls = []

        def should_cancel():
            calls.append(1)
            return len(calls) == 3

        with pytest.raises(RenderCancelled, match="11 of 13"):
            ground_renderer.render(should_cancel=should_cancel)

        assert len(calls) == 3
        assert not ground_renderer.is_complete

    def test_cancelled_render_has_no_image(self, ground_renderer):
        from rayweekend.core.renderer import RenderCancelled

        with pytest.raises(RenderCancelled):
            ground_renderer.render(should_cancel=lambda: True)

        with pytest.raises(RuntimeError, match="No finished image"):
            ground_renderer.get_image_uint8()

    def test_render_cancelled_is_runtime_error(self):
        from rayweekend.core.renderer import RenderCancelled

        assert issubclass(RenderCancelled, RuntimeError)


class TestImageAccess:
    """Tests for reading and saving the image."""

    def test_image_before_render_raises(self, ground_renderer):
        with pytest.raises(RuntimeError, match="No finished image"):
            ground_renderer.get_image_uint8()

    def test_save_image(self, ground_renderer, tmp_path):
        from rayweekend.output.ppm import parse_ppm

        image = ground_renderer.render()
        path = tmp_path / "out.ppm"
        ground_renderer.save_image(str(path))

        text = path.read_text(encoding="ascii")
        assert text.startswith("P3\n20 13\n255\n")
        assert np.array_equal(parse_ppm(text), image)
