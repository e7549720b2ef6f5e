"""Thin-lens camera model for primary ray generation.

The camera supports:
- Look-at positioning (look_from, look_at, vup)
- Vertical field of view
- Arbitrary aspect ratios
- Jittered sampling for anti-aliasing
- Depth of field through a defocus disk

The camera builds an orthonormal basis (u, v, w) from the view parameters:
- w: points from look_at toward look_from (opposite view direction)
- u: points right in the image plane
- v: points up in the image plane

The viewport sits on the focus plane, ``focus_distance`` in front of the
camera. Its geometry (pixel deltas, top-left pixel center and defocus disk
basis) is derived once on the host by setup_camera() and stored in Taichi
fields for the ray generation functions.

Pixel (0, 0) is the top-left corner; row j grows downward.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from pathtrace.camera.camera import Camera, setup_camera, get_ray
    >>>
    >>> camera = Camera(
    ...     image_width=400,
    ...     aspect_ratio=16.0 / 9.0,
    ...     look_from=(-2.0, 2.0, 1.0),
    ...     look_at=(0.0, 0.0, -1.0),
    ...     vfov=20.0,
    ...     defocus_angle=10.0,
    ...     focus_distance=3.4,
    ... )
    >>> setup_camera(camera)
    >>>
    >>> @ti.kernel
    ... def render():
    ...     ray = get_ray(0, 0)  # Sample ray through the top-left pixel
"""

import math
from dataclasses import asdict, dataclass
from typing import Any

import numpy as np
import taichi as ti

from pathtrace.core.ray import Ray, make_ray
from pathtrace.core.vec3 import random_float, random_in_unit_disk, vec3

# =============================================================================
# Camera Configuration
# =============================================================================


@dataclass
class Camera:
    """Configuration for the camera and the render it drives.

    Attributes:
        aspect_ratio: Ideal width divided by height of the output image.
        image_width: Output image width in pixels.
        samples_per_pixel: Number of random samples averaged per pixel.
        max_depth: Maximum number of ray bounces per sample.
        vfov: Vertical field of view in degrees.
        look_from: Camera position in world space (x, y, z).
        look_at: Point the camera is looking at in world space (x, y, z).
        vup: Up direction used to orient the camera.
        defocus_angle: Cone angle in degrees of rays through each pixel;
            0 disables depth of field.
        focus_distance: Distance from look_from to the plane of perfect focus.
    """

    aspect_ratio: float = 1.0
    image_width: int = 100
    samples_per_pixel: int = 10
    max_depth: int = 10
    vfov: float = 90.0
    look_from: tuple[float, float, float] = (0.0, 0.0, -1.0)
    look_at: tuple[float, float, float] = (0.0, 0.0, 0.0)
    vup: tuple[float, float, float] = (0.0, 1.0, 0.0)
    defocus_angle: float = 0.0
    focus_distance: float = 10.0

    @property
    def image_height(self) -> int:
        """Output image height in pixels, at least 1."""
        return max(1, int(self.image_width / self.aspect_ratio))

    def validate(self) -> None:
        """Check the configuration for values that cannot be rendered.

        Raises:
            ValueError: If any parameter is out of range or the view is
                degenerate.
        """
        if self.image_width <= 0:
            raise ValueError(f"image_width must be positive, got {self.image_width}")
        if self.aspect_ratio <= 0.0:
            raise ValueError(f"aspect_ratio must be positive, got {self.aspect_ratio}")
        if self.samples_per_pixel <= 0:
            raise ValueError(
                f"samples_per_pixel must be positive, got {self.samples_per_pixel}"
            )
        if self.max_depth < 0:
            raise ValueError(f"max_depth must be non-negative, got {self.max_depth}")
        if not 0.0 < self.vfov < 180.0:
            raise ValueError(f"vfov must be in (0, 180) degrees, got {self.vfov}")
        if self.defocus_angle < 0.0:
            raise ValueError(f"defocus_angle must be non-negative, got {self.defocus_angle}")
        if self.focus_distance <= 0.0:
            raise ValueError(f"focus_distance must be positive, got {self.focus_distance}")

        view = np.subtract(self.look_from, self.look_at)
        if np.linalg.norm(view) == 0.0:
            raise ValueError("look_from and look_at must be different points")
        if np.linalg.norm(np.cross(self.vup, view)) == 0.0:
            raise ValueError("vup must not be parallel to the view direction")

    def to_dict(self) -> dict[str, Any]:
        """Export the configuration to a dictionary (for JSON serialization)."""
        data = asdict(self)
        for key in ("look_from", "look_at", "vup"):
            data[key] = list(data[key])
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Camera":
        """Build a camera from a dictionary, using defaults for missing keys.

        Raises:
            ValueError: If the dictionary contains unknown keys.
        """
        known = set(cls.__dataclass_fields__)
        unknown = set(data) - known
        if unknown:
            raise ValueError(f"Unknown camera settings: {', '.join(sorted(unknown))}")

        kwargs = dict(data)
        for key in ("look_from", "look_at", "vup"):
            if key in kwargs:
                kwargs[key] = tuple(float(c) for c in kwargs[key])
        return cls(**kwargs)


# =============================================================================
# Taichi Fields for Camera State
# =============================================================================

# Camera center (ray origin when depth of field is disabled)
_camera_center = ti.Vector.field(3, dtype=ti.f32, shape=())

# Orthonormal basis vectors
_camera_u = ti.Vector.field(3, dtype=ti.f32, shape=())  # Right
_camera_v = ti.Vector.field(3, dtype=ti.f32, shape=())  # Up
_camera_w = ti.Vector.field(3, dtype=ti.f32, shape=())  # Backward (opposite view)

# Pixel grid on the focus plane
_pixel00_loc = ti.Vector.field(3, dtype=ti.f32, shape=())  # Center of pixel (0, 0)
_pixel_delta_u = ti.Vector.field(3, dtype=ti.f32, shape=())  # Offset to pixel on the right
_pixel_delta_v = ti.Vector.field(3, dtype=ti.f32, shape=())  # Offset to pixel below

# Defocus disk basis (u and v scaled by the disk radius)
_defocus_enabled = ti.field(dtype=ti.i32, shape=())
_defocus_disk_u = ti.Vector.field(3, dtype=ti.f32, shape=())
_defocus_disk_v = ti.Vector.field(3, dtype=ti.f32, shape=())


# =============================================================================
# Camera Setup (Python-side, called once per camera configuration)
# =============================================================================


def setup_camera(camera: Camera) -> None:
    """Derive the camera geometry and store it in Taichi fields.

    Must be called before any ray generation. The derived state is:

        viewport_height = 2 * tan(vfov / 2) * focus_distance
        viewport_width = viewport_height * image_width / image_height
        pixel_delta_u = viewport_width * u / image_width
        pixel_delta_v = -viewport_height * v / image_height
        defocus_radius = focus_distance * tan(defocus_angle / 2)

    Args:
        camera: Camera configuration.

    Raises:
        ValueError: If the configuration is invalid.
    """
    camera.validate()

    image_width = camera.image_width
    image_height = camera.image_height

    theta = math.radians(camera.vfov)
    h = math.tan(theta / 2.0)
    viewport_height = 2.0 * h * camera.focus_distance
    viewport_width = viewport_height * (image_width / image_height)

    look_from = np.array(camera.look_from, dtype=np.float64)
    look_at = np.array(camera.look_at, dtype=np.float64)
    vup = np.array(camera.vup, dtype=np.float64)

    # w points from look_at toward look_from (backward)
    w = look_from - look_at
    w = w / np.linalg.norm(w)

    # u points right (perpendicular to w and vup)
    u = np.cross(vup, w)
    u = u / np.linalg.norm(u)

    # v points up in the camera's frame
    v = np.cross(w, u)

    # Vectors across the horizontal and down the vertical viewport edges
    viewport_u = viewport_width * u
    viewport_v = viewport_height * -v

    pixel_delta_u = viewport_u / image_width
    pixel_delta_v = viewport_v / image_height

    viewport_upper_left = (
        look_from - camera.focus_distance * w - viewport_u / 2.0 - viewport_v / 2.0
    )
    pixel00_loc = viewport_upper_left + 0.5 * (pixel_delta_u + pixel_delta_v)

    defocus_radius = camera.focus_distance * math.tan(math.radians(camera.defocus_angle / 2.0))

    _camera_center[None] = look_from.tolist()
    _camera_u[None] = u.tolist()
    _camera_v[None] = v.tolist()
    _camera_w[None] = w.tolist()
    _pixel00_loc[None] = pixel00_loc.tolist()
    _pixel_delta_u[None] = pixel_delta_u.tolist()
    _pixel_delta_v[None] = pixel_delta_v.tolist()
    _defocus_enabled[None] = 1 if camera.defocus_angle > 0.0 else 0
    _defocus_disk_u[None] = (u * defocus_radius).tolist()
    _defocus_disk_v[None] = (v * defocus_radius).tolist()


# =============================================================================
# Ray Generation (Taichi-compatible)
# =============================================================================


@ti.func
def pixel_sample_square() -> vec3:
    """Random offset within one pixel cell around its center.

    Returns:
        An offset uniform in [-0.5, 0.5) along both pixel delta axes.
    """
    px = -0.5 + random_float()
    py = -0.5 + random_float()
    return px * _pixel_delta_u[None] + py * _pixel_delta_v[None]


@ti.func
def defocus_disk_sample() -> vec3:
    """Random point on the camera's defocus disk."""
    p = random_in_unit_disk()
    return _camera_center[None] + p.x * _defocus_disk_u[None] + p.y * _defocus_disk_v[None]


@ti.func
def get_ray(i: ti.i32, j: ti.i32) -> Ray:
    """Generate a jittered sample ray for pixel (i, j).

    The ray originates at the camera center, or at a random point on the
    defocus disk when depth of field is enabled, and passes through a
    random point within the pixel cell on the focus plane.

    Args:
        i: Pixel column (0 = left).
        j: Pixel row (0 = top).

    Returns:
        The sample ray. Its direction is not normalized.
    """
    pixel_center = (
        _pixel00_loc[None]
        + ti.cast(i, ti.f32) * _pixel_delta_u[None]
        + ti.cast(j, ti.f32) * _pixel_delta_v[None]
    )
    pixel_sample = pixel_center + pixel_sample_square()

    ray_origin = _camera_center[None]
    if _defocus_enabled[None] == 1:
        ray_origin = defocus_disk_sample()

    return make_ray(ray_origin, pixel_sample - ray_origin)


@ti.func
def get_camera_center() -> vec3:
    """Get the camera center (look_from) in world space."""
    return _camera_center[None]


# =============================================================================
# Utility Functions
# =============================================================================


def _field_tuple(f: Any) -> tuple[float, float, float]:
    value = f[None]
    return (float(value[0]), float(value[1]), float(value[2]))


def get_camera_info() -> dict[str, Any]:
    """Get current camera state for debugging.

    Returns:
        Dictionary with center, u, v, w, pixel00, pixel_delta_u,
        pixel_delta_v, defocus_disk_u, defocus_disk_v (as float triples)
        and defocus_enabled (bool).
    """
    return {
        "center": _field_tuple(_camera_center),
        "u": _field_tuple(_camera_u),
        "v": _field_tuple(_camera_v),
        "w": _field_tuple(_camera_w),
        "pixel00": _field_tuple(_pixel00_loc),
        "pixel_delta_u": _field_tuple(_pixel_delta_u),
        "pixel_delta_v": _field_tuple(_pixel_delta_v),
        "defocus_disk_u": _field_tuple(_defocus_disk_u),
        "defocus_disk_v": _field_tuple(_defocus_disk_v),
        "defocus_enabled": bool(_defocus_enabled[None]),
    }
