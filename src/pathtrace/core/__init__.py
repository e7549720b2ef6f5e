"""Core rendering module.

Components:
    vec3: Vector helpers, reflection/refraction and random sampling
    ray: Ray data structure
    interval: Closed real intervals used as hit acceptance windows
    integrator: Color estimation and the scanline render loop

The integrator is NOT imported here since it owns Taichi fields. Import it
directly after ti.init():

    from pathtrace.core.integrator import render
"""

from .interval import (
    Interval,
    clamp,
    contains,
    contains_some,
    empty,
    make_interval,
    non_negative,
    size,
    surrounds,
    surrounds_some,
    universe,
    with_max,
)
from .ray import Ray, make_ray, ray_at
from .vec3 import (
    Color,
    Point3,
    Vec3,
    cross,
    dot,
    length,
    length_squared,
    linear_to_gamma,
    near_zero,
    random_float,
    random_in_unit_disk,
    random_in_unit_sphere,
    random_on_hemisphere,
    random_range,
    random_unit_vector,
    random_vec3,
    random_vec3_range,
    reflect,
    refract,
    unit_vector,
    vec3,
)

__all__ = [
    # Vectors
    "vec3",
    "Vec3",
    "Point3",
    "Color",
    "dot",
    "cross",
    "length",
    "length_squared",
    "unit_vector",
    "near_zero",
    "reflect",
    "refract",
    "linear_to_gamma",
    "random_float",
    "random_range",
    "random_vec3",
    "random_vec3_range",
    "random_in_unit_sphere",
    "random_in_unit_disk",
    "random_unit_vector",
    "random_on_hemisphere",
    # Rays
    "Ray",
    "ray_at",
    "make_ray",
    # Intervals
    "Interval",
    "make_interval",
    "empty",
    "universe",
    "non_negative",
    "size",
    "contains",
    "surrounds",
    "contains_some",
    "surrounds_some",
    "clamp",
    "with_max",
]
