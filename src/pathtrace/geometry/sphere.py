"""Sphere primitive with analytic ray-sphere intersection.

The intersection solves |O + tD - C|^2 = r^2 for t using the half-b form
of the quadratic:

    oc = O - C
    a = D . D
    half_b = oc . D
    c = oc . oc - r^2
    discriminant = half_b^2 - a*c

The nearer root is tried first, then the farther one; the first root
strictly inside the acceptance interval wins.

A negative radius is valid input. It leaves the surface unchanged but flips
the outward normal inward, which renders the sphere as a hollow shell (used
for the inner wall of a glass bubble).

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from pathtrace.geometry.sphere import Sphere, hit_sphere
    >>> # Use hit_sphere within a Taichi kernel
"""

import taichi as ti

from pathtrace.core.interval import Interval, surrounds
from pathtrace.core.ray import Ray, ray_at
from pathtrace.core.vec3 import dot, vec3
from pathtrace.geometry.hittable import HitRecord, make_hit_record, miss_record


@ti.dataclass
class Sphere:
    """A sphere defined by center point, radius and material.

    Attributes:
        center: The center point of the sphere (vec3).
        radius: The radius. Negative values produce an inward-facing normal.
        material_id: Index into the shared material registry.
    """

    center: vec3
    radius: ti.f32
    material_id: ti.i32


@ti.func
def hit_sphere(ray: Ray, sphere: Sphere, ray_t: Interval) -> HitRecord:
    """Intersect a ray with a sphere.

    Args:
        ray: The ray to test. Its direction need not be normalized.
        sphere: The sphere to test against.
        ray_t: Acceptance window for the hit parameter; only roots strictly
            inside it are reported.

    Returns:
        A HitRecord for the nearest accepted root, or a miss record.
    """
    oc = ray.origin - sphere.center
    a = dot(ray.direction, ray.direction)
    half_b = dot(oc, ray.direction)
    c = dot(oc, oc) - sphere.radius * sphere.radius

    discriminant = half_b * half_b - a * c

    result = miss_record()

    if discriminant >= 0.0:
        sqrtd = ti.sqrt(discriminant)

        root = (-half_b - sqrtd) / a
        valid = surrounds(ray_t, root)
        if not valid:
            root = (-half_b + sqrtd) / a
            valid = surrounds(ray_t, root)

        if valid:
            point = ray_at(ray, root)
            outward_normal = (point - sphere.center) / sphere.radius
            result = make_hit_record(ray, root, point, outward_normal, sphere.material_id)

    return result


@ti.func
def make_sphere(center: vec3, radius: ti.f32, material_id: ti.i32) -> Sphere:
    """Create a sphere from center, radius and material id."""
    return Sphere(center=center, radius=radius, material_id=material_id)
