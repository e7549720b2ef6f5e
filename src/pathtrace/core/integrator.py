"""Path tracing integrator and render loop.

The color seen along a ray is estimated by following it through the scene:

    - depth exhausted: black (the path carries no more light)
    - hit, material absorbs: black
    - hit, material scatters: attenuation * color(scattered ray, depth - 1)
    - miss: the sky gradient, the only light source in the scene

Taichi functions cannot recurse, so ray_color() unrolls the recursion into
a loop that carries the running product of attenuations.

Rendering proceeds one scanline per kernel launch, top to bottom, and each
scanline is streamed to the PPM output as soon as it is finished. The pixel
loop is serialized so the render is single-threaded.

Example:
    >>> import sys
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from pathtrace.core.integrator import render
    >>> from pathtrace.scene.presets import create_three_spheres_scene
    >>>
    >>> world, camera = create_three_spheres_scene()
    >>> render(camera, world, output=sys.stdout, log=sys.stderr)
"""

import sys
from typing import TYPE_CHECKING, TextIO

import numpy as np
import taichi as ti
import taichi.math as tm

from pathtrace.camera.camera import get_ray, setup_camera
from pathtrace.core.interval import Interval
from pathtrace.core.ray import Ray, make_ray
from pathtrace.core.vec3 import linear_to_gamma, unit_vector, vec3
from pathtrace.materials.material import scatter
from pathtrace.output.ppm import write_ppm_header, write_ppm_rows
from pathtrace.scene.hittable_list import hit_world

if TYPE_CHECKING:
    import numpy.typing as npt

    from pathtrace.camera.camera import Camera
    from pathtrace.scene.manager import HittableList

# =============================================================================
# Rendering Constants
# =============================================================================

# Lower bound of the hit window; keeps scattered rays from re-hitting their
# own origin through floating point error ("shadow acne")
T_MIN = 0.001

# Sky gradient endpoints (R, G, B)
HORIZON_COLOR = (1.0, 1.0, 1.0)
ZENITH_COLOR = (0.5, 0.7, 1.0)

# Maximum supported image width (scanline buffer is preallocated)
MAX_IMAGE_WIDTH = 4096

# Finished scanline, gamma corrected
_scanline = ti.Vector.field(3, dtype=ti.f32, shape=MAX_IMAGE_WIDTH)

# Host-side single ray probe
_probe_origin = ti.Vector.field(3, dtype=ti.f32, shape=())
_probe_direction = ti.Vector.field(3, dtype=ti.f32, shape=())


# =============================================================================
# Path Tracing Core
# =============================================================================


@ti.func
def background(ray: Ray) -> vec3:
    """Sky color for a ray that escapes the scene.

    Blends white at the horizon into sky blue at the zenith based on the
    vertical component of the normalized direction.
    """
    unit_direction = unit_vector(ray.direction)
    a = 0.5 * (unit_direction.y + 1.0)
    horizon = vec3(HORIZON_COLOR[0], HORIZON_COLOR[1], HORIZON_COLOR[2])
    zenith = vec3(ZENITH_COLOR[0], ZENITH_COLOR[1], ZENITH_COLOR[2])
    return (1.0 - a) * horizon + a * zenith


@ti.func
def ray_color(ray: Ray, max_depth: ti.i32) -> vec3:
    """Estimate the light arriving along a ray.

    Args:
        ray: The ray to trace.
        max_depth: Maximum number of bounces; 0 always yields black.

    Returns:
        The estimated color (linear RGB).
    """
    color = vec3(0.0, 0.0, 0.0)
    attenuation = vec3(1.0, 1.0, 1.0)
    current = ray

    # Active flag for path continuation
    active = 1

    for _ in range(max_depth):
        if active == 1:
            rec = hit_world(current, Interval(min=T_MIN, max=tm.inf))

            if rec.hit == 0:
                color = attenuation * background(current)
                active = 0
            else:
                scattered, scatter_attenuation, did_scatter = scatter(current, rec)
                if did_scatter == 0:
                    active = 0
                else:
                    attenuation *= scatter_attenuation
                    current = scattered

    return color


@ti.func
def render_pixel(i: ti.i32, j: ti.i32, samples_per_pixel: ti.i32, max_depth: ti.i32) -> vec3:
    """Average samples_per_pixel jittered samples of pixel (i, j).

    Returns:
        The gamma-corrected pixel color.
    """
    pixel_color = vec3(0.0, 0.0, 0.0)
    for _ in range(samples_per_pixel):
        pixel_color += ray_color(get_ray(i, j), max_depth)
    return linear_to_gamma(pixel_color / ti.cast(samples_per_pixel, ti.f32))


# =============================================================================
# Rendering Kernels
# =============================================================================


@ti.kernel
def _render_scanline(j: ti.i32, width: ti.i32, samples_per_pixel: ti.i32, max_depth: ti.i32):
    """Render row j into the scanline buffer, left to right."""
    ti.loop_config(serialize=True)
    for i in range(width):
        _scanline[i] = render_pixel(i, j, samples_per_pixel, max_depth)


@ti.kernel
def _trace_probe(max_depth: ti.i32) -> vec3:
    """Trace the probe ray and return its color estimate."""
    return ray_color(make_ray(_probe_origin[None], _probe_direction[None]), max_depth)


# =============================================================================
# Public Rendering API
# =============================================================================


def trace_ray(
    origin: tuple[float, float, float],
    direction: tuple[float, float, float],
    max_depth: int,
) -> tuple[float, float, float]:
    """Estimate the color along a single ray against the current scene.

    Args:
        origin: The ray origin.
        direction: The ray direction (need not be normalized).
        max_depth: Maximum number of bounces.

    Returns:
        Tuple of (R, G, B) in linear space (no gamma correction).
    """
    _probe_origin[None] = [origin[0], origin[1], origin[2]]
    _probe_direction[None] = [direction[0], direction[1], direction[2]]
    color = _trace_probe(max_depth)
    return (float(color[0]), float(color[1]), float(color[2]))


def _prepare(camera: "Camera", world: "HittableList") -> tuple[int, int]:
    world.activate()
    setup_camera(camera)
    width, height = camera.image_width, camera.image_height
    if width > MAX_IMAGE_WIDTH:
        raise ValueError(
            f"Image width {width} exceeds maximum supported width ({MAX_IMAGE_WIDTH})"
        )
    return width, height


def _scanlines(camera: "Camera", width: int, height: int):
    """Render each row in turn, yielding (row index, row pixels)."""
    for j in range(height):
        _render_scanline(j, width, camera.samples_per_pixel, camera.max_depth)
        yield j, _scanline.to_numpy()[:width]


def render(
    camera: "Camera",
    world: "HittableList",
    output: TextIO | None = None,
    log: TextIO | None = None,
) -> None:
    """Render the scene and stream it as a PPM image.

    Writes the header, then every scanline top to bottom as soon as it is
    finished. After each scanline a progress line is written to ``log``.
    A failed write aborts the render; the error propagates to the caller.

    Args:
        camera: The camera configuration.
        world: The scene to render; reloaded into the registries if another
            list has replaced it since it was built.
        output: Stream for the PPM image. Defaults to sys.stdout.
        log: Stream for progress messages. Defaults to sys.stderr.

    Raises:
        ValueError: If the camera configuration is invalid.
        OSError: If writing to ``output`` fails.
    """
    output = sys.stdout if output is None else output
    log = sys.stderr if log is None else log

    width, height = _prepare(camera, world)

    write_ppm_header(output, width, height)
    for j, row in _scanlines(camera, width, height):
        write_ppm_rows(output, row)
        print(f"Scanline progress: {j}/{height}", file=log, flush=True)

    output.flush()
    print("Done.", file=log, flush=True)


def render_image(camera: "Camera", world: "HittableList") -> "npt.NDArray[np.float32]":
    """Render the scene into an array.

    Args:
        camera: The camera configuration.
        world: The scene to render; reloaded into the registries if another
            list has replaced it since it was built.

    Returns:
        Gamma-corrected image of shape (height, width, 3), row 0 at the top.

    Raises:
        ValueError: If the camera configuration is invalid.
    """
    width, height = _prepare(camera, world)
    image = np.zeros((height, width, 3), dtype=np.float32)
    for j, row in _scanlines(camera, width, height):
        image[j] = row
    return image
