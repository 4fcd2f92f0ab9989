"""Scanline render driver.

This module provides a renderer that walks the image one scanline at a time,
top row first, with support for:
- Progress callbacks before every scanline
- Cooperative cancellation between scanlines
- Generator-based iteration for callers that drive the loop themselves
- Conversion of the finished image to an 8-bit NumPy array

The ScanlineRenderer delegates all per-pixel work to the integrator kernels
and copies each finished scanline into a host-side image.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64, random_seed=7)
    >>> from rayweekend.core.renderer import ScanlineRenderer
    >>> from rayweekend.settings import RenderSettings
    >>> from rayweekend.scene.random_scene import create_random_scene
    >>> from rayweekend.camera.thin_lens import setup_camera
    >>>
    >>> settings = RenderSettings(image_width=300, samples_per_pixel=20, random_seed=7)
    >>> scene, camera = create_random_scene(settings.create_scene_rng(), settings.aspect_ratio)
    >>> setup_camera(camera)
    >>>
    >>> renderer = ScanlineRenderer(settings)
    >>> image = renderer.render()
"""

from collections.abc import Callable, Generator

import numpy as np
import numpy.typing as npt

from rayweekend.core.integrator import (
    check_image_width,
    get_scanline_pixels,
    render_scanline,
)
from rayweekend.output.ppm import save_ppm
from rayweekend.settings import RenderSettings

# Type alias for progress callback
# Callback receives (remaining_scanlines, total_scanlines)
ProgressCallback = Callable[[int, int], None]

# Type alias for cancellation check, polled between scanlines
CancelCheck = Callable[[], bool]


class RenderCancelled(RuntimeError):
    """Raised when a render is stopped through its cancellation check."""


class ScanlineRenderer:
    """Renders the current scene one scanline at a time.

    The scene and camera must be set up before rendering; the renderer only
    owns the output image.

    Attributes:
        settings: The render settings.
        width: Image width in pixels.
        height: Image height in pixels.
    """

    def __init__(self, settings: RenderSettings) -> None:
        """Initialize the renderer.

        Raises:
            RuntimeError: If the image is wider than the scanline buffers.
        """
        check_image_width(settings.image_width)
        self.settings = settings
        self._image: npt.NDArray[np.uint8] | None = None
        self._complete = False

    @property
    def width(self) -> int:
        return self.settings.image_width

    @property
    def height(self) -> int:
        return self.settings.image_height

    @property
    def is_complete(self) -> bool:
        """Whether every scanline of the last render finished."""
        return self._complete

    def render_scanlines(self) -> Generator[tuple[int, int], None, None]:
        """Render the image, yielding progress before each scanline.

        Scanlines are rendered from the top row (j = height - 1) down to the
        bottom row (j = 0). Before scanline j is rendered the generator yields
        (j, height), j being the number of scanlines still to go after it.
        Closing the generator early leaves the render incomplete.

        Yields:
            Tuple of (remaining_scanlines, total_scanlines).

        Raises:
            FloatingPointError: If a pixel accumulates a non-finite color.
        """
        width, height = self.width, self.height
        self._image = np.zeros((height, width, 3), dtype=np.uint8)
        self._complete = False

        for j in range(height - 1, -1, -1):
            yield (j, height)
            render_scanline(
                j,
                width,
                height,
                self.settings.samples_per_pixel,
                self.settings.max_depth,
            )
            # Row 0 of the image is the top scanline
            self._image[height - 1 - j] = get_scanline_pixels(width)

        self._complete = True

    def render(
        self,
        callback: ProgressCallback | None = None,
        should_cancel: CancelCheck | None = None,
    ) -> npt.NDArray[np.uint8]:
        """Render the whole image.

        Args:
            callback: Optional callback called before each scanline.
                Receives (remaining_scanlines, total_scanlines).
            should_cancel: Optional check polled before each scanline; when
                it returns True the render stops.

        Returns:
            The image as a (height, width, 3) uint8 array, top row first.

        Raises:
            RenderCancelled: If should_cancel requested a stop.
            FloatingPointError: If a pixel accumulates a non-finite color.

        Example:
            >>> def progress(remaining, total):
            ...     print(f"Scan lines remaining: {remaining}")
            >>> image = renderer.render(callback=progress)
        """
        scanlines = self.render_scanlines()
        try:
            for remaining, total in scanlines:
                if callback is not None:
                    callback(remaining, total)
                if should_cancel is not None and should_cancel():
                    raise RenderCancelled(
                        f"Render cancelled with {remaining + 1} of {total} scanlines left"
                    )
        finally:
            scanlines.close()

        return self.get_image_uint8()

    def get_image_uint8(self) -> npt.NDArray[np.uint8]:
        """Get the finished image as an 8-bit NumPy array.

        Returns:
            NumPy array of shape (height, width, 3) with dtype uint8.

        Raises:
            RuntimeError: If no render has completed.
        """
        if self._image is None or not self._complete:
            raise RuntimeError("No finished image. Call render() first.")
        return self._image.copy()

    def save_image(self, filepath: str) -> None:
        """Save the finished image as a plain-text PPM file."""
        save_ppm(self.get_image_uint8(), filepath)

    def __repr__(self) -> str:
        """Return a string representation of the renderer state."""
        return (
            f"ScanlineRenderer(width={self.width}, height={self.height}, "
            f"samples_per_pixel={self.settings.samples_per_pixel}, "
            f"max_depth={self.settings.max_depth})"
        )
