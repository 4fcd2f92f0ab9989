"""Plain-text PPM (P3) image output.

The format is a header of three lines followed by one line per pixel:

    P3
    <width> <height>
    255
    r g b
    ...

Pixels are listed row by row from the top of the image down, left to right
within a row. Images are (height, width, 3) uint8 NumPy arrays with the top
row first, as returned by ScanlineRenderer.get_image_uint8().

Example:
    >>> import sys
    >>> import numpy as np
    >>> from rayweekend.output.ppm import write_ppm
    >>> write_ppm(np.zeros((1, 2, 3), dtype=np.uint8), sys.stdout)
    P3
    2 1
    255
    0 0 0
    0 0 0
"""

import io
from pathlib import Path
from typing import TextIO

import numpy as np
import numpy.typing as npt

PPM_MAGIC = "P3"
PPM_MAX_VALUE = 255


def _check_image(image: npt.NDArray[np.integer]) -> None:
    if image.ndim != 3 or image.shape[2] != 3:
        raise ValueError(f"Expected an image of shape (height, width, 3), got {image.shape}")
    if image.dtype != np.uint8:
        raise ValueError(f"Expected a uint8 image, got dtype {image.dtype}")


def write_ppm(image: npt.NDArray[np.uint8], stream: TextIO) -> None:
    """Write an image to a text stream in PPM P3 format.

    Args:
        image: Array of shape (height, width, 3) with dtype uint8, top row first.
        stream: Destination text stream.

    Raises:
        ValueError: If the image has the wrong shape or dtype.
    """
    _check_image(image)
    height, width, _ = image.shape

    stream.write(f"{PPM_MAGIC}\n{width} {height}\n{PPM_MAX_VALUE}\n")
    if image.size:
        np.savetxt(stream, image.reshape(-1, 3), fmt="%d", delimiter=" ")


def format_ppm(image: npt.NDArray[np.uint8]) -> str:
    """Format an image as a PPM P3 string."""
    buffer = io.StringIO()
    write_ppm(image, buffer)
    return buffer.getvalue()


def save_ppm(image: npt.NDArray[np.uint8], filepath: str | Path) -> None:
    """Save an image as a PPM P3 file.

    Args:
        image: Array of shape (height, width, 3) with dtype uint8, top row first.
        filepath: Output file path (conventionally ending in .ppm).
    """
    with open(filepath, "w", encoding="ascii", newline="\n") as f:
        write_ppm(image, f)


def parse_ppm(text: str) -> npt.NDArray[np.uint8]:
    """Parse a PPM P3 string back into a (height, width, 3) uint8 array.

    Raises:
        ValueError: If the text is not a well-formed P3 image.
    """
    tokens = text.split()
    if len(tokens) < 4 or tokens[0] != PPM_MAGIC:
        raise ValueError("Not a P3 image")

    width, height, max_value = int(tokens[1]), int(tokens[2]), int(tokens[3])
    if max_value != PPM_MAX_VALUE:
        raise ValueError(f"Unsupported max value {max_value}")

    values = np.array([int(token) for token in tokens[4:]], dtype=np.int64)
    if values.size != width * height * 3:
        raise ValueError(
            f"Expected {width * height * 3} channel values, got {values.size}"
        )
    if values.size and (values.min() < 0 or values.max() > PPM_MAX_VALUE):
        raise ValueError("Channel value outside [0, 255]")

    return values.reshape(height, width, 3).astype(np.uint8)
