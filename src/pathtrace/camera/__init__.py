"""Camera module for primary ray generation.

Components:
    camera: Camera configuration, setup_camera() and get_ray()

The camera state lives in Taichi fields, so the module is imported
directly after ti.init():

    from pathtrace.camera.camera import Camera, setup_camera
"""
