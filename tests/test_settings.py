"""Unit tests for RenderSettings."""

import numpy as np
import pytest

from rayweekend.settings import RenderSettings


class TestDefaults:
    """Tests for the default configuration."""

    def test_defaults(self):
        settings = RenderSettings()

        assert settings.image_width == 1200
        assert settings.aspect_ratio == pytest.approx(1.5)
        assert settings.image_height == 800
        assert settings.samples_per_pixel == 500
        assert settings.max_depth == 50
        assert settings.random_seed is None

    def test_height_is_truncated(self):
        assert RenderSettings(image_width=400, aspect_ratio=16.0 / 9.0).image_height == 225
        assert RenderSettings(image_width=20).image_height == 13


class TestValidation:
    """Tests for configuration errors."""

    @pytest.mark.parametrize(
        "kwargs, match",
        [
            ({"image_width": 0}, "image_width"),
            ({"aspect_ratio": 0.0}, "aspect_ratio"),
            ({"aspect_ratio": -1.5}, "aspect_ratio"),
            ({"samples_per_pixel": 0}, "samples_per_pixel"),
            ({"max_depth": 0}, "max_depth"),
            ({"image_width": 1, "aspect_ratio": 2.0}, "height below 1"),
        ],
    )
    def test_invalid_settings(self, kwargs, match):
        with pytest.raises(ValueError, match=match):
            RenderSettings(**kwargs)


class TestSceneRng:
    """Tests for the scene generator."""

    def test_seeded_rng_is_reproducible(self):
        first = RenderSettings(random_seed=11).create_scene_rng().random(5)
        second = RenderSettings(random_seed=11).create_scene_rng().random(5)
        assert np.array_equal(first, second)

    def test_different_seeds_differ(self):
        first = RenderSettings(random_seed=11).create_scene_rng().random(5)
        second = RenderSettings(random_seed=12).create_scene_rng().random(5)
        assert not np.array_equal(first, second)

    def test_unseeded_rng(self):
        rng = RenderSettings().create_scene_rng()
        assert isinstance(rng, np.random.Generator)
