"""Scene module.

Components:
    hittable_list: Sphere storage and nearest-hit queries on the device
    manager: HittableList host API and JSON scene files
    presets: Ready-made scenes

The sphere storage lives in Taichi fields, so the modules are imported
directly after ti.init():

    from pathtrace.scene.manager import HittableList
"""
