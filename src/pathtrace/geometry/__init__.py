"""Geometry module for hittable primitives.

Components:
    hittable: HitRecord and front-face normal orientation
    sphere: Sphere primitive with ray-sphere intersection

Intersection routines are Taichi functions returning a HitRecord whose
``hit`` flag tells whether the ray struck the surface inside the window.
"""

from .hittable import HitRecord, make_hit_record, miss_record
from .sphere import Sphere, hit_sphere, make_sphere

__all__ = [
    "HitRecord",
    "make_hit_record",
    "miss_record",
    "Sphere",
    "hit_sphere",
    "make_sphere",
]
