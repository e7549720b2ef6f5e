"""Material registry and scatter dispatch.

Materials are shared by reference: every sphere stores a unified
``material_id`` and many spheres may point at the same id. The id maps to a
(material type, type-local index) pair, and the type-local index selects
the parameters in that type's registry (lambertian_albedos, metal_fuzz, ...).

scatter() is the polymorphic entry point used by the integrator. Given the
incoming ray and the hit record it returns either a scattered ray with its
attenuation or reports absorption.
"""

from enum import IntEnum

import taichi as ti

from pathtrace.core.ray import Ray, make_ray
from pathtrace.core.vec3 import vec3
from pathtrace.geometry.hittable import HitRecord
from pathtrace.materials.dielectric import get_dielectric_ior, scatter_dielectric
from pathtrace.materials.lambertian import get_lambertian_albedo, scatter_lambertian
from pathtrace.materials.metal import get_metal_albedo, get_metal_fuzz, scatter_metal


class MaterialType(IntEnum):
    """Enumeration of supported material types.

    Used for material dispatch in the integrator to determine which
    scattering function to call.
    """

    LAMBERTIAN = 0
    METAL = 1
    DIELECTRIC = 2


# Maximum number of materials across all types
MAX_MATERIALS = 768  # 256 per type * 3 types

# material_types[i] stores the MaterialType for material_id i
material_types = ti.field(dtype=ti.i32, shape=MAX_MATERIALS)
# material_type_indices[i] stores the type-local index for material_id i
# (e.g., if material_id 5 is the 2nd metal material, material_type_indices[5] = 1)
material_type_indices = ti.field(dtype=ti.i32, shape=MAX_MATERIALS)
num_materials = ti.field(dtype=ti.i32, shape=())


def clear_material_tracking() -> None:
    """Clear the unified material id tables."""
    num_materials[None] = 0


def get_material_count() -> int:
    """Get the number of registered materials across all types."""
    return int(num_materials[None])


def register_material(material_type: MaterialType, type_index: int) -> int:
    """Assign a unified material id to a type-local registry entry.

    Args:
        material_type: The type of the material.
        type_index: The index returned by the type's add_*_material().

    Returns:
        The unified material id.

    Raises:
        RuntimeError: If the maximum number of materials is exceeded.
    """
    material_id = num_materials[None]
    if material_id >= MAX_MATERIALS:
        raise RuntimeError(f"Maximum number of materials ({MAX_MATERIALS}) exceeded")

    material_types[material_id] = int(material_type)
    material_type_indices[material_id] = type_index
    num_materials[None] = material_id + 1
    return material_id


@ti.func
def get_material_type(material_id: ti.i32) -> ti.i32:
    """Get the material type for a given material id.

    Returns:
        The material type as an integer (see MaterialType), or -1 for
        invalid ids.
    """
    result = -1
    if 0 <= material_id < num_materials[None]:
        result = material_types[material_id]
    return result


@ti.func
def get_material_type_index(material_id: ti.i32) -> ti.i32:
    """Get the type-local registry index for a given material id.

    Returns:
        The index into the type-specific registry, or -1 for invalid ids.
    """
    result = -1
    if 0 <= material_id < num_materials[None]:
        result = material_type_indices[material_id]
    return result


@ti.func
def scatter(ray_in: Ray, rec: HitRecord):
    """Scatter a ray according to the material at the hit point.

    Args:
        ray_in: The incoming ray.
        rec: The hit record; its material_id selects the material.

    Returns:
        A tuple of (scattered, attenuation, did_scatter). When did_scatter
        is 0 the ray was absorbed and the other values are meaningless.
    """
    mat_type = get_material_type(rec.material_id)
    type_index = get_material_type_index(rec.material_id)

    scattered = make_ray(rec.point, rec.normal)
    attenuation = vec3(0.0, 0.0, 0.0)
    did_scatter = 0

    if mat_type == int(MaterialType.LAMBERTIAN):
        albedo = get_lambertian_albedo(type_index)
        scattered, attenuation, did_scatter = scatter_lambertian(albedo, rec)

    elif mat_type == int(MaterialType.METAL):
        albedo = get_metal_albedo(type_index)
        fuzz = get_metal_fuzz(type_index)
        scattered, attenuation, did_scatter = scatter_metal(albedo, fuzz, ray_in, rec)

    elif mat_type == int(MaterialType.DIELECTRIC):
        ior = get_dielectric_ior(type_index)
        scattered, attenuation, did_scatter = scatter_dielectric(ior, ray_in, rec)

    return scattered, attenuation, did_scatter
