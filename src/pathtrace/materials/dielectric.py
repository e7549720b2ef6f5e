"""Dielectric (glass/water) material implementation.

Key physics:
    - Snell's law for refraction: n1 * sin(theta1) = n2 * sin(theta2)
    - Schlick's approximation for Fresnel reflectance
    - Total internal reflection when the refraction ratio times sin(theta)
      exceeds 1

The material randomly chooses between reflection and refraction based on
the Schlick reflectance, which increases at grazing angles. Glass absorbs
nothing, so attenuation is always white.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from pathtrace.materials.dielectric import scatter_dielectric
    >>> # Use within a Taichi kernel:
    >>> # scattered, attenuation, did_scatter = scatter_dielectric(ior, ray_in, rec)
"""

import taichi as ti
import taichi.math as tm

from pathtrace.core.ray import Ray, make_ray
from pathtrace.core.vec3 import dot, random_float, reflect, refract, unit_vector, vec3
from pathtrace.geometry.hittable import HitRecord


@ti.func
def schlick_reflectance(cosine: ti.f32, refraction_ratio: ti.f32) -> ti.f32:
    """Schlick's polynomial approximation of Fresnel reflectance.

    Args:
        cosine: Cosine of the angle between the incoming ray and the normal.
        refraction_ratio: Ratio of refractive indices across the surface.

    Returns:
        r0 + (1 - r0)(1 - cosine)^5 with r0 = ((1 - ratio)/(1 + ratio))^2.
    """
    r0 = (1.0 - refraction_ratio) / (1.0 + refraction_ratio)
    r0 = r0 * r0
    return r0 + (1.0 - r0) * ((1.0 - cosine) ** 5)


@ti.func
def cannot_refract(refraction_ratio: ti.f32, unit_direction: vec3, normal: vec3) -> ti.i32:
    """Return 1 if Snell's law has no solution (total internal reflection)."""
    cos_theta = tm.min(dot(-unit_direction, normal), 1.0)
    sin_theta = ti.sqrt(1.0 - cos_theta * cos_theta)
    return refraction_ratio * sin_theta > 1.0


@ti.func
def scatter_dielectric(ior: ti.f32, ray_in: Ray, rec: HitRecord):
    """Scatter a ray through a dielectric surface.

    Args:
        ior: Index of refraction of the material.
        ray_in: The incoming ray.
        rec: The hit record at the scatter point. ``front_face`` selects the
            refraction ratio: 1/ior entering the material, ior leaving it.

    Returns:
        A tuple of (scattered, attenuation, did_scatter) where:
        - scattered: Reflected or refracted ray from the hit point.
        - attenuation: White (1, 1, 1).
        - did_scatter: Always 1.
    """
    attenuation = vec3(1.0, 1.0, 1.0)

    refraction_ratio = ior
    if rec.front_face == 1:
        refraction_ratio = 1.0 / ior

    unit_direction = unit_vector(ray_in.direction)
    cos_theta = tm.min(dot(-unit_direction, rec.normal), 1.0)

    direction = vec3(0.0, 0.0, 0.0)
    if cannot_refract(refraction_ratio, unit_direction, rec.normal) or (
        schlick_reflectance(cos_theta, refraction_ratio) > random_float()
    ):
        direction = reflect(unit_direction, rec.normal)
    else:
        direction = refract(unit_direction, rec.normal, refraction_ratio)

    scattered = make_ray(rec.point, direction)
    return scattered, attenuation, 1


# =============================================================================
# Material Field Storage (for scene-level material management)
# =============================================================================

# Maximum number of dielectric materials in the scene
MAX_DIELECTRIC_MATERIALS = 256

# Storage for dielectric material properties
dielectric_iors = ti.field(dtype=ti.f32, shape=MAX_DIELECTRIC_MATERIALS)
num_dielectric_materials = ti.field(dtype=ti.i32, shape=())


def clear_dielectric_materials() -> None:
    """Clear all dielectric materials."""
    num_dielectric_materials[None] = 0


def add_dielectric_material(ior: float = 1.5) -> int:
    """Add a dielectric material to the material registry.

    Ratios below 1.0 are accepted; they model a medium less dense than its
    surroundings, such as an air bubble in water.

    Args:
        ior: Index of refraction. Default is 1.5 (typical glass).
            Must be positive.

    Returns:
        The index of the added material.

    Raises:
        RuntimeError: If the maximum number of materials is exceeded.
        ValueError: If IOR is not positive.
    """
    if ior <= 0.0:
        raise ValueError(f"Index of refraction = {ior} must be positive.")

    idx = num_dielectric_materials[None]
    if idx >= MAX_DIELECTRIC_MATERIALS:
        raise RuntimeError(
            f"Maximum number of dielectric materials ({MAX_DIELECTRIC_MATERIALS}) exceeded"
        )

    dielectric_iors[idx] = ior
    num_dielectric_materials[None] = idx + 1
    return idx


def get_dielectric_material_count() -> int:
    """Get the number of dielectric materials in the registry."""
    return int(num_dielectric_materials[None])


@ti.func
def get_dielectric_ior(material_idx: ti.i32) -> ti.f32:
    """Get the IOR for a dielectric material by registry index."""
    return dielectric_iors[material_idx]
