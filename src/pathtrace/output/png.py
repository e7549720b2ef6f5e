"""PNG export of rendered images through Pillow.

Uses the same 8-bit conversion as the PPM writer, so a PNG and a PPM of
one render hold identical pixel values.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import numpy as np
from PIL import Image as PILImage

from pathtrace.output.ppm import color_to_rgb8

if TYPE_CHECKING:
    import numpy.typing as npt


def image_to_uint8(image: npt.ArrayLike) -> npt.NDArray[np.uint8]:
    """Convert a gamma-corrected float image to uint8.

    Args:
        image: Array of shape (H, W, 3) with values nominally in [0, 1].

    Returns:
        8-bit image array of shape (H, W, 3).
    """
    return color_to_rgb8(image).astype(np.uint8)


def save_png(image: npt.ArrayLike, filepath: str | Path) -> Path:
    """Save a gamma-corrected float image as an 8-bit RGB PNG.

    Args:
        image: Array of shape (height, width, 3), row 0 at the top.
        filepath: Output file path.

    Returns:
        The path written.

    Raises:
        ValueError: If the image does not have shape (H, W, 3).
    """
    pixels = np.asarray(image)
    if pixels.ndim != 3 or pixels.shape[2] != 3:
        raise ValueError(f"Image must have shape (height, width, 3), got {pixels.shape}")

    path = Path(filepath)
    pil_image = PILImage.fromarray(image_to_uint8(pixels))
    pil_image.save(path)
    return path
