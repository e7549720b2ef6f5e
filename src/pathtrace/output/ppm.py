"""Plain-text PPM (P3) image output.

The stream layout is:

    P3
    <width> <height>
    255
    <r> <g> <b>        (one line per pixel, raster order)

Rows run top to bottom and pixels within a row left to right. PPM has no
pixel addressing, so that order must be respected by the writer.

Channel values arrive gamma corrected, nominally in [0, 1]. Each is mapped
to ``floor(value * 256)`` and then saturated into [0, 255], so 1.0 becomes
255 rather than overflowing to 256.

Example:
    >>> import io
    >>> import numpy as np
    >>> from pathtrace.output.ppm import write_ppm
    >>> stream = io.StringIO()
    >>> write_ppm(stream, np.array([[[1.0, 0.0, 0.0], [1.0, 0.0, 0.0]]]))
    >>> stream.getvalue()
    'P3\\n2 1\\n255\\n255 0 0\\n255 0 0\\n'
"""

from __future__ import annotations

from typing import TYPE_CHECKING, TextIO

import numpy as np

if TYPE_CHECKING:
    from collections.abc import Sequence

    import numpy.typing as npt

PPM_MAGIC = "P3"
MAX_CHANNEL_VALUE = 255


def color_to_rgb8(color: npt.ArrayLike) -> npt.NDArray[np.int64]:
    """Convert float channel values to 8-bit integers.

    Works on a single color or on any array whose last axis holds channels.

    Args:
        color: Channel values, nominally in [0, 1].

    Returns:
        Integer array of the same shape with values in [0, 255].
    """
    values = np.nan_to_num(np.asarray(color, dtype=np.float64), nan=0.0)
    scaled = np.floor(values * 256.0)
    return np.clip(scaled, 0, MAX_CHANNEL_VALUE).astype(np.int64)


def write_ppm_header(stream: TextIO, width: int, height: int) -> None:
    """Write the P3 header lines."""
    stream.write(f"{PPM_MAGIC}\n{width} {height}\n{MAX_CHANNEL_VALUE}\n")


def write_ppm_pixel(stream: TextIO, color: Sequence[float] | npt.ArrayLike) -> None:
    """Write one pixel line."""
    r, g, b = color_to_rgb8(color)
    stream.write(f"{r} {g} {b}\n")


def write_ppm_rows(stream: TextIO, rows: npt.ArrayLike) -> None:
    """Write pixel lines for one or more rows without a header.

    Args:
        stream: The output text stream.
        rows: Array of shape (W, 3) for a single row or (H, W, 3).
    """
    rgb = color_to_rgb8(rows).reshape(-1, 3)
    stream.write("".join(f"{r} {g} {b}\n" for r, g, b in rgb))


def write_ppm(stream: TextIO, image: npt.ArrayLike) -> None:
    """Write a complete image.

    Args:
        stream: The output text stream.
        image: Array of shape (height, width, 3), row 0 at the top.

    Raises:
        ValueError: If the image does not have shape (H, W, 3).
    """
    pixels = np.asarray(image)
    if pixels.ndim != 3 or pixels.shape[2] != 3:
        raise ValueError(f"Image must have shape (height, width, 3), got {pixels.shape}")

    height, width = pixels.shape[:2]
    write_ppm_header(stream, width, height)
    write_ppm_rows(stream, pixels)
