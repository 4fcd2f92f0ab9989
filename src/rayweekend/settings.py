"""Render settings.

Kept free of Taichi imports so settings can be built and validated before
Taichi is initialized.
"""

from dataclasses import dataclass

import numpy as np


@dataclass
class RenderSettings:
    """Runtime configuration of a render.

    Attributes:
        image_width: Image width in pixels.
        aspect_ratio: Width divided by height.
        samples_per_pixel: Number of jittered rays averaged per pixel.
        max_depth: Bounce budget of each camera ray.
        random_seed: Seed for the scene generator and the kernel RNG.
            None draws a fresh seed, so renders differ between runs.
    """

    image_width: int = 1200
    aspect_ratio: float = 3.0 / 2.0
    samples_per_pixel: int = 500
    max_depth: int = 50
    random_seed: int | None = None

    def __post_init__(self) -> None:
        if self.image_width <= 0:
            raise ValueError(f"image_width must be positive, got {self.image_width}")
        if not self.aspect_ratio > 0.0:
            raise ValueError(f"aspect_ratio must be positive, got {self.aspect_ratio}")
        if self.samples_per_pixel <= 0:
            raise ValueError(
                f"samples_per_pixel must be positive, got {self.samples_per_pixel}"
            )
        if self.max_depth <= 0:
            raise ValueError(f"max_depth must be positive, got {self.max_depth}")
        if self.image_height < 1:
            raise ValueError(
                f"image_width {self.image_width} and aspect_ratio {self.aspect_ratio} "
                "give an image height below 1 pixel"
            )

    @property
    def image_height(self) -> int:
        """Image height in pixels, truncated from width / aspect_ratio."""
        return int(self.image_width / self.aspect_ratio)

    def create_scene_rng(self) -> np.random.Generator:
        """Create the generator that drives scene construction."""
        return np.random.default_rng(self.random_seed)
