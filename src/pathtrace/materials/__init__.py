"""Materials module for light scattering.

Components:
    lambertian: Ideal diffuse reflection
    metal: Mirror reflection with optional fuzz
    dielectric: Glass-like refraction with Schlick reflectance
    material: Unified material ids and scatter dispatch

Each material keeps its parameters in a Taichi field registry and exposes a
scatter function returning (scattered ray, attenuation, did_scatter).

The registries are Taichi fields, so the modules are imported directly
after ti.init() rather than re-exported here.
"""
