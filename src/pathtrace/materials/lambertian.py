"""Lambertian (ideal diffuse) material implementation.

Diffuse scattering is approximated by offsetting the surface normal with a
uniformly distributed unit vector. The resulting directions follow a
cosine-weighted distribution about the normal, which is exactly the
Lambertian reflectance lobe, so the attenuation is simply the albedo.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from pathtrace.materials.lambertian import scatter_lambertian
    >>> # Use within a Taichi kernel:
    >>> # scattered, attenuation, did_scatter = scatter_lambertian(albedo, rec)
"""

import taichi as ti

from pathtrace.core.ray import make_ray
from pathtrace.core.vec3 import near_zero, random_unit_vector, vec3
from pathtrace.geometry.hittable import HitRecord


@ti.func
def diffuse_direction(normal: vec3, offset: vec3) -> vec3:
    """Offset the normal by a unit vector, falling back to the normal.

    A random vector almost opposite the normal leaves a zero direction.
    """
    direction = normal + offset
    if near_zero(direction):
        direction = normal
    return direction


@ti.func
def scatter_lambertian(albedo: vec3, rec: HitRecord):
    """Scatter a ray off a diffuse surface.

    Args:
        albedo: The diffuse reflectance color (RGB).
        rec: The hit record at the scatter point.

    Returns:
        A tuple of (scattered, attenuation, did_scatter) where:
        - scattered: Ray from the hit point along normal + random unit vector.
        - attenuation: The albedo.
        - did_scatter: Always 1; diffuse surfaces never absorb outright.
    """
    scattered = make_ray(rec.point, diffuse_direction(rec.normal, random_unit_vector()))
    return scattered, albedo, 1


# =============================================================================
# Material Field Storage (for scene-level material management)
# =============================================================================

# Maximum number of Lambertian materials in the scene
MAX_LAMBERTIAN_MATERIALS = 256

# Storage for Lambertian material properties
lambertian_albedos = ti.Vector.field(3, dtype=ti.f32, shape=MAX_LAMBERTIAN_MATERIALS)
num_lambertian_materials = ti.field(dtype=ti.i32, shape=())


def clear_lambertian_materials() -> None:
    """Clear all Lambertian materials.

    Resets the material count to zero. Existing data in the field will be
    overwritten when new materials are added.
    """
    num_lambertian_materials[None] = 0


def add_lambertian_material(albedo: tuple[float, float, float]) -> int:
    """Add a Lambertian material to the material registry.

    Args:
        albedo: The diffuse reflectance color as (R, G, B) tuple.
            Each component must be in [0, 1].

    Returns:
        The index of the added material.

    Raises:
        RuntimeError: If the maximum number of materials is exceeded.
        ValueError: If any albedo component is outside [0, 1].
    """
    for i, component in enumerate(albedo):
        if component < 0.0 or component > 1.0:
            raise ValueError(
                f"Albedo component {i} = {component} is outside [0, 1]. "
                "This would violate energy conservation."
            )

    idx = num_lambertian_materials[None]
    if idx >= MAX_LAMBERTIAN_MATERIALS:
        raise RuntimeError(
            f"Maximum number of Lambertian materials ({MAX_LAMBERTIAN_MATERIALS}) exceeded"
        )

    lambertian_albedos[idx] = vec3(albedo[0], albedo[1], albedo[2])
    num_lambertian_materials[None] = idx + 1
    return idx


def get_lambertian_material_count() -> int:
    """Get the number of Lambertian materials in the registry."""
    return int(num_lambertian_materials[None])


@ti.func
def get_lambertian_albedo(material_idx: ti.i32) -> vec3:
    """Get the albedo for a Lambertian material by registry index."""
    return lambertian_albedos[material_idx]
