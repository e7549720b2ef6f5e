"""Scene-level ray intersection over all primitives.

The scene is a flat list of spheres stored structure-of-arrays in Taichi
fields. hit_world() scans every sphere linearly (no acceleration structure)
and returns the closest hit. After each accepted hit the acceptance
interval's upper bound shrinks to that hit's ``t``, so a later sphere only
replaces the current hit if it is strictly closer. The result therefore
does not depend on insertion order.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from pathtrace.scene.hittable_list import add_sphere, clear_scene, hit_world
    >>> clear_scene()
    >>> add_sphere((0.0, 0.0, -1.0), 0.5, material_id=0)
    >>> # Use hit_world within a Taichi kernel
"""

import taichi as ti

from pathtrace.core.interval import Interval, with_max
from pathtrace.core.ray import Ray
from pathtrace.geometry.hittable import HitRecord, miss_record
from pathtrace.geometry.sphere import Sphere, hit_sphere

# Maximum number of spheres supported in the scene
MAX_SPHERES = 1024

# Sphere storage: Structure of Arrays layout
sphere_centers = ti.Vector.field(3, dtype=ti.f32, shape=MAX_SPHERES)
sphere_radii = ti.field(dtype=ti.f32, shape=MAX_SPHERES)
sphere_material_ids = ti.field(dtype=ti.i32, shape=MAX_SPHERES)
num_spheres = ti.field(dtype=ti.i32, shape=())


def clear_scene() -> None:
    """Remove all spheres from the scene.

    Resets the sphere count to zero. The field data is overwritten when new
    spheres are added.
    """
    num_spheres[None] = 0


def add_sphere(center: tuple[float, float, float], radius: float, material_id: int = 0) -> int:
    """Append a sphere to the scene.

    Args:
        center: The center point of the sphere as (x, y, z).
        radius: The radius. Negative values render a hollow shell.
        material_id: The unified material id of the sphere.

    Returns:
        The index of the added sphere.

    Raises:
        RuntimeError: If the maximum number of spheres is exceeded.
    """
    idx = num_spheres[None]
    if idx >= MAX_SPHERES:
        raise RuntimeError(f"Maximum number of spheres ({MAX_SPHERES}) exceeded")
    sphere_centers[idx] = [center[0], center[1], center[2]]
    sphere_radii[idx] = radius
    sphere_material_ids[idx] = material_id
    num_spheres[None] = idx + 1
    return idx


def get_sphere_count() -> int:
    """Get the number of spheres in the scene."""
    return int(num_spheres[None])


@ti.func
def get_sphere(index: ti.i32) -> Sphere:
    """Assemble the sphere stored at ``index``."""
    return Sphere(
        center=sphere_centers[index],
        radius=sphere_radii[index],
        material_id=sphere_material_ids[index],
    )


@ti.func
def hit_world(ray: Ray, ray_t: Interval) -> HitRecord:
    """Find the closest intersection of a ray with the scene.

    Args:
        ray: The ray to test.
        ray_t: Acceptance window for the hit parameter.

    Returns:
        The HitRecord of the nearest surface inside ray_t, or a miss record.
    """
    result = miss_record()
    window = ray_t

    for i in range(num_spheres[None]):
        rec = hit_sphere(ray, get_sphere(i), window)
        if rec.hit == 1:
            window = with_max(window, rec.t)
            result = rec

    return result
