"""Image output.

Components:
    ppm: Plain-text PPM (P3) writer
    png: PNG export through Pillow
"""

from .png import image_to_uint8, save_png
from .ppm import (
    MAX_CHANNEL_VALUE,
    PPM_MAGIC,
    color_to_rgb8,
    write_ppm,
    write_ppm_header,
    write_ppm_pixel,
    write_ppm_rows,
)

__all__ = [
    "PPM_MAGIC",
    "MAX_CHANNEL_VALUE",
    "color_to_rgb8",
    "write_ppm_header",
    "write_ppm_pixel",
    "write_ppm_rows",
    "write_ppm",
    "image_to_uint8",
    "save_png",
]
