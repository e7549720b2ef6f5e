"""CPU path tracer built on Taichi.

Renders scenes of spheres with diffuse, metal and glass materials under a
sky gradient, streaming the result as a plain-text PPM image.

Subpackages:
    core: Vectors, rays, intervals and the path tracing integrator
    geometry: Hit records and the sphere primitive
    materials: Lambertian, metal and dielectric scattering
    scene: The hittable list, scene files and preset scenes
    camera: Thin-lens camera with defocus blur
    output: PPM and PNG image writers

Modules that own Taichi fields (materials, scene, camera and the
integrator) must be imported after ti.init().
"""

__version__ = "0.1.0"
