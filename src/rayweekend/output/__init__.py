"""Output module for serializing rendered images.

Components:
    ppm: Plain-text PPM (P3) writer and reader

The output module is pure NumPy and can be imported before Taichi is
initialized.
"""

from .ppm import (
    PPM_MAGIC,
    PPM_MAX_VALUE,
    format_ppm,
    parse_ppm,
    save_ppm,
    write_ppm,
)

__all__ = [
    "PPM_MAGIC",
    "PPM_MAX_VALUE",
    "write_ppm",
    "format_ppm",
    "save_ppm",
    "parse_ppm",
]
