"""Ready-made scenes.

The three spheres scene is the classic test image: a large yellow ground
sphere, a blue diffuse sphere in the middle, a hollow glass sphere on the
left and a polished gold sphere on the right, under a sky gradient.
"""

from pathtrace.camera.camera import Camera
from pathtrace.scene.manager import HittableList

# Materials
GROUND_ALBEDO = (0.8, 0.8, 0.0)
CENTER_ALBEDO = (0.1, 0.2, 0.5)
RIGHT_ALBEDO = (0.8, 0.6, 0.2)
GLASS_IOR = 1.5


def create_three_spheres_scene(defocus: bool = False) -> tuple[HittableList, Camera]:
    """Build the three spheres scene and its camera.

    The left sphere has a negative radius, so its normals point inward and
    it renders as a hollow glass bubble.

    Args:
        defocus: If True, view the scene from above and to the side with a
            narrow field of view and a strong depth of field.

    Returns:
        Tuple of (world, camera).
    """
    world = HittableList()

    ground = world.add_lambertian(GROUND_ALBEDO)
    center = world.add_lambertian(CENTER_ALBEDO)
    left = world.add_dielectric(GLASS_IOR)
    right = world.add_metal(RIGHT_ALBEDO, fuzz=0.0)

    world.add_sphere((0.0, -100.5, -1.0), 100.0, ground)
    world.add_sphere((-1.0, 0.0, -1.0), -0.5, left)
    world.add_sphere((0.0, 0.0, -1.0), 0.5, center)
    world.add_sphere((1.0, 0.0, -1.0), 0.5, right)

    camera = Camera(
        aspect_ratio=16.0 / 9.0,
        image_width=400,
        samples_per_pixel=100,
        max_depth=50,
        vfov=90.0,
        look_from=(0.0, 0.0, 0.0),
        look_at=(0.0, 0.0, -1.0),
        vup=(0.0, 1.0, 0.0),
    )

    if defocus:
        camera.look_from = (-2.0, 2.0, 1.0)
        camera.vfov = 20.0
        camera.defocus_angle = 10.0
        camera.focus_distance = 3.4

    return world, camera
