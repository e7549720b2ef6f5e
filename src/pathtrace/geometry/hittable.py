"""Hit records produced by ray-surface intersection.

Every hittable (a single sphere or the whole scene) answers a query with a
HitRecord. The ``hit`` flag stands in for "no intersection"; the other
fields are only meaningful when it is 1.

The stored normal always opposes the incoming ray. ``front_face`` records
whether the geometric (outward) normal already did, i.e. whether the ray
arrived from outside the surface.
"""

import taichi as ti

from pathtrace.core.ray import Ray
from pathtrace.core.vec3 import dot, vec3


@ti.dataclass
class HitRecord:
    """Record of a ray-surface intersection.

    Attributes:
        hit: 1 if the ray intersected a surface, 0 on a miss.
        t: The ray parameter of the intersection.
        point: The world-space intersection point.
        normal: The unit surface normal, oriented against the ray.
        front_face: 1 if the ray hit the outside of the surface, 0 if it
            hit from within.
        material_id: Index into the shared material registry, -1 on a miss.
    """

    hit: ti.i32
    t: ti.f32
    point: vec3
    normal: vec3
    front_face: ti.i32
    material_id: ti.i32


@ti.func
def make_hit_record(
    ray: Ray,
    t: ti.f32,
    point: vec3,
    outward_normal: vec3,
    material_id: ti.i32,
) -> HitRecord:
    """Build a hit record, orienting the normal against the ray.

    Args:
        ray: The incoming ray.
        t: The ray parameter of the intersection.
        point: The intersection point.
        outward_normal: The geometric normal (unit length), pointing out of
            the surface.
        material_id: The material of the surface that was hit.

    Returns:
        A HitRecord with hit=1.
    """
    front_face = 1
    normal = outward_normal
    if dot(ray.direction, outward_normal) >= 0.0:
        front_face = 0
        normal = -outward_normal

    return HitRecord(
        hit=1,
        t=t,
        point=point,
        normal=normal,
        front_face=front_face,
        material_id=material_id,
    )


@ti.func
def miss_record() -> HitRecord:
    """Create a HitRecord indicating no intersection."""
    return HitRecord(
        hit=0,
        t=0.0,
        point=vec3(0.0, 0.0, 0.0),
        normal=vec3(0.0, 0.0, 0.0),
        front_face=0,
        material_id=-1,
    )
