"""Host-side scene API: the HittableList.

HittableList owns the scene held in the global Taichi registries. It
coordinates primitive storage with material registration so that scene
construction reads like ordinary object code:

- Materials are registered once and referenced by their unified id, so
  many spheres can share one material instance.
- Spheres are appended in order and are owned exclusively by the list.
- The list can be exported to and rebuilt from a plain dictionary or a
  JSON scene file.

Only one scene lives in the registries at a time. Constructing a
HittableList clears them and makes the new list active; rendering or
querying a list that is no longer active writes its own materials and
spheres back first (see HittableList.activate).

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from pathtrace.scene.manager import HittableList
    >>> world = HittableList()
    >>> ground = world.add_lambertian(albedo=(0.8, 0.8, 0.0))
    >>> world.add_sphere(center=(0.0, -100.5, -1.0), radius=100.0, material_id=ground)
    >>> world.add_metal_sphere((1.0, 0.0, -1.0), 0.5, albedo=(0.8, 0.6, 0.2), fuzz=0.0)
"""

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import taichi as ti

from pathtrace.core.interval import Interval
from pathtrace.core.ray import make_ray
from pathtrace.materials.dielectric import add_dielectric_material, clear_dielectric_materials
from pathtrace.materials.lambertian import add_lambertian_material, clear_lambertian_materials
from pathtrace.materials.material import (
    MAX_MATERIALS,
    MaterialType,
    clear_material_tracking,
    get_material_count,
    register_material,
)
from pathtrace.materials.metal import add_metal_material, clear_metal_materials
from pathtrace.scene.hittable_list import (
    MAX_SPHERES,
    add_sphere,
    clear_scene,
    get_sphere_count,
    hit_world,
)


@dataclass
class MaterialInfo:
    """Information about a registered material.

    Attributes:
        material_id: The unified material ID.
        material_type: The type of material (Lambertian, Metal, Dielectric).
        type_index: The index within the type-specific material array.
        params: The material parameters as provided during creation.
    """

    material_id: int
    material_type: MaterialType
    type_index: int
    params: dict[str, Any]


@dataclass
class SphereInfo:
    """Information about a sphere in the scene.

    Attributes:
        sphere_index: The index in the sphere storage arrays.
        center: The center of the sphere.
        radius: The radius of the sphere.
        material_id: The material ID assigned to the sphere.
    """

    sphere_index: int
    center: tuple[float, float, float]
    radius: float
    material_id: int


@dataclass
class HitInfo:
    """Result of a host-side scene query.

    Attributes:
        t: The ray parameter of the closest hit.
        point: The hit point.
        normal: The unit normal, oriented against the ray.
        front_face: True if the ray hit the outside of the surface.
        material_id: The material of the surface that was hit.
    """

    t: float
    point: tuple[float, float, float]
    normal: tuple[float, float, float]
    front_face: bool
    material_id: int


@dataclass
class SceneConfig:
    """Configuration for scene serialization.

    Attributes:
        materials: List of material configurations.
        spheres: List of sphere configurations.
    """

    materials: list[dict[str, Any]] = field(default_factory=list)
    spheres: list[dict[str, Any]] = field(default_factory=list)


# Probe ray for host-side queries
_probe_origin = ti.Vector.field(3, dtype=ti.f32, shape=())
_probe_direction = ti.Vector.field(3, dtype=ti.f32, shape=())
_probe_hit = ti.field(dtype=ti.i32, shape=())
_probe_t = ti.field(dtype=ti.f32, shape=())
_probe_point = ti.Vector.field(3, dtype=ti.f32, shape=())
_probe_normal = ti.Vector.field(3, dtype=ti.f32, shape=())
_probe_front_face = ti.field(dtype=ti.i32, shape=())
_probe_material_id = ti.field(dtype=ti.i32, shape=())


@ti.kernel
def _probe_world(t_min: ti.f32, t_max: ti.f32):
    """Run hit_world() for the probe ray and store the record."""
    ray = make_ray(_probe_origin[None], _probe_direction[None])
    rec = hit_world(ray, Interval(min=t_min, max=t_max))
    _probe_hit[None] = rec.hit
    _probe_t[None] = rec.t
    _probe_point[None] = rec.point
    _probe_normal[None] = rec.normal
    _probe_front_face[None] = rec.front_face
    _probe_material_id[None] = rec.material_id


def _clear_registries() -> None:
    """Reset the sphere and material fields to empty."""
    clear_scene()
    clear_lambertian_materials()
    clear_metal_materials()
    clear_dielectric_materials()
    clear_material_tracking()


def _as_triple(values: Any, name: str) -> tuple[float, float, float]:
    """Convert a 3-element sequence to a float triple."""
    if len(values) != 3:
        raise ValueError(f"{name} must have 3 components, got {len(values)}")
    return (float(values[0]), float(values[1]), float(values[2]))


class HittableList:
    """Composite scene owning an ordered list of spheres and their materials.

    Attributes:
        materials: MaterialInfo for all registered materials, indexed by id.
        spheres: SphereInfo for all spheres in insertion order.

    Example:
        >>> world = HittableList()
        >>> glass = world.add_dielectric(ior=1.5)
        >>> # Outer surface and inner (negative radius) surface share the glass
        >>> world.add_sphere((-1.0, 0.0, -1.0), 0.5, glass)
        >>> world.add_sphere((-1.0, 0.0, -1.0), -0.4, glass)
    """

    # The list whose contents the Taichi registries currently hold
    _active: "HittableList | None" = None

    def __init__(self) -> None:
        """Initialize an empty scene."""
        self.materials: list[MaterialInfo] = []
        self.spheres: list[SphereInfo] = []
        self._clear_all()

    def _clear_all(self) -> None:
        """Clear all scene data including Taichi fields."""
        _clear_registries()
        self.materials.clear()
        self.spheres.clear()
        HittableList._active = self

    def is_active(self) -> bool:
        """Check whether the registries currently hold this list."""
        return HittableList._active is self

    def activate(self) -> None:
        """Load this list into the Taichi registries if another one is there.

        Materials are re-registered in their original order, so every
        material id and sphere index keeps its value.
        """
        if self.is_active():
            return

        _clear_registries()
        for mat in self.materials:
            if mat.material_type == MaterialType.LAMBERTIAN:
                type_index = add_lambertian_material(mat.params["albedo"])
            elif mat.material_type == MaterialType.METAL:
                type_index = add_metal_material(mat.params["albedo"], mat.params["fuzz"])
            else:
                type_index = add_dielectric_material(mat.params["ior"])
            register_material(mat.material_type, type_index)

        for sphere in self.spheres:
            add_sphere(sphere.center, sphere.radius, sphere.material_id)

        HittableList._active = self

    def clear(self) -> None:
        """Remove every sphere and material."""
        self._clear_all()

    def __len__(self) -> int:
        return len(self.spheres)

    # =========================================================================
    # Material Management
    # =========================================================================

    def _track_material(
        self, material_type: MaterialType, type_index: int, params: dict[str, Any]
    ) -> int:
        material_id = register_material(material_type, type_index)
        self.materials.append(
            MaterialInfo(
                material_id=material_id,
                material_type=material_type,
                type_index=type_index,
                params=params,
            )
        )
        return material_id

    def add_lambertian(self, albedo: tuple[float, float, float]) -> int:
        """Register a Lambertian (diffuse) material.

        Args:
            albedo: The diffuse reflectance color as (R, G, B), each in [0, 1].

        Returns:
            The unified material ID for this material.

        Raises:
            RuntimeError: If the maximum number of materials is exceeded.
            ValueError: If any albedo component is outside [0, 1].
        """
        self.activate()
        type_index = add_lambertian_material(albedo)
        return self._track_material(MaterialType.LAMBERTIAN, type_index, {"albedo": albedo})

    def add_metal(self, albedo: tuple[float, float, float], fuzz: float = 0.0) -> int:
        """Register a metal (specular reflective) material.

        Args:
            albedo: The reflective color as (R, G, B), each in [0, 1].
            fuzz: Reflection blur radius in [0, 1]. Default is 0 (perfect mirror).

        Returns:
            The unified material ID for this material.

        Raises:
            RuntimeError: If the maximum number of materials is exceeded.
            ValueError: If albedo or fuzz is outside [0, 1].
        """
        self.activate()
        type_index = add_metal_material(albedo, fuzz)
        return self._track_material(
            MaterialType.METAL, type_index, {"albedo": albedo, "fuzz": fuzz}
        )

    def add_dielectric(self, ior: float = 1.5) -> int:
        """Register a dielectric (glass/water) material.

        Args:
            ior: Index of refraction. Default is 1.5 (glass).

        Returns:
            The unified material ID for this material.

        Raises:
            RuntimeError: If the maximum number of materials is exceeded.
            ValueError: If IOR is not positive.
        """
        self.activate()
        type_index = add_dielectric_material(ior)
        return self._track_material(MaterialType.DIELECTRIC, type_index, {"ior": ior})

    def get_material_count(self) -> int:
        """Get the total number of materials in the scene."""
        self.activate()
        return get_material_count()

    def get_material_info(self, material_id: int) -> MaterialInfo | None:
        """Get information about a material by ID, or None if unknown."""
        if 0 <= material_id < len(self.materials):
            return self.materials[material_id]
        return None

    # =========================================================================
    # Primitive Management
    # =========================================================================

    def add_sphere(
        self,
        center: tuple[float, float, float],
        radius: float,
        material_id: int,
    ) -> int:
        """Append a sphere to the scene.

        Args:
            center: The center point of the sphere as (x, y, z).
            radius: The radius. Negative values render a hollow shell; zero
                is rejected.
            material_id: The unified material ID from add_*().

        Returns:
            The index of the added sphere.

        Raises:
            RuntimeError: If the maximum number of spheres is exceeded.
            ValueError: If material_id is invalid or radius is zero.
        """
        self.activate()
        if material_id < 0 or material_id >= get_material_count():
            raise ValueError(f"Invalid material_id: {material_id}")
        if radius == 0.0:
            raise ValueError("Sphere radius must be non-zero")

        sphere_index = add_sphere(center, radius, material_id)
        self.spheres.append(
            SphereInfo(
                sphere_index=sphere_index,
                center=center,
                radius=radius,
                material_id=material_id,
            )
        )
        return sphere_index

    def add_lambertian_sphere(
        self,
        center: tuple[float, float, float],
        radius: float,
        albedo: tuple[float, float, float],
    ) -> tuple[int, int]:
        """Add a sphere with a new Lambertian material.

        Returns:
            Tuple of (sphere_index, material_id).
        """
        material_id = self.add_lambertian(albedo)
        return self.add_sphere(center, radius, material_id), material_id

    def add_metal_sphere(
        self,
        center: tuple[float, float, float],
        radius: float,
        albedo: tuple[float, float, float],
        fuzz: float = 0.0,
    ) -> tuple[int, int]:
        """Add a sphere with a new metal material.

        Returns:
            Tuple of (sphere_index, material_id).
        """
        material_id = self.add_metal(albedo, fuzz)
        return self.add_sphere(center, radius, material_id), material_id

    def add_dielectric_sphere(
        self,
        center: tuple[float, float, float],
        radius: float,
        ior: float = 1.5,
    ) -> tuple[int, int]:
        """Add a sphere with a new dielectric material.

        Returns:
            Tuple of (sphere_index, material_id).
        """
        material_id = self.add_dielectric(ior)
        return self.add_sphere(center, radius, material_id), material_id

    def add_list(self, other: "HittableList") -> None:
        """Append every sphere of another list, along with its materials.

        The nearest hit against the combined spheres is the nearest hit of
        either list, so the result behaves as a list holding ``other``.
        Materials are copied with new ids; ``other`` is left unchanged.

        Raises:
            ValueError: If ``other`` is this list.
            RuntimeError: If the sphere or material capacity is exceeded.
        """
        if other is self:
            raise ValueError("A HittableList cannot be added to itself")

        id_map: dict[int, int] = {}
        for mat in other.materials:
            if mat.material_type == MaterialType.LAMBERTIAN:
                new_id = self.add_lambertian(mat.params["albedo"])
            elif mat.material_type == MaterialType.METAL:
                new_id = self.add_metal(mat.params["albedo"], mat.params["fuzz"])
            else:
                new_id = self.add_dielectric(mat.params["ior"])
            id_map[mat.material_id] = new_id

        for sphere in other.spheres:
            self.add_sphere(sphere.center, sphere.radius, id_map[sphere.material_id])

    def get_sphere_count(self) -> int:
        """Get the number of spheres in the scene."""
        self.activate()
        return get_sphere_count()

    # =========================================================================
    # Scene Queries
    # =========================================================================

    def hit(
        self,
        origin: tuple[float, float, float],
        direction: tuple[float, float, float],
        t_min: float = 0.001,
        t_max: float = float("inf"),
    ) -> HitInfo | None:
        """Find the closest surface along a ray.

        Args:
            origin: The ray origin.
            direction: The ray direction (need not be normalized).
            t_min: Lower bound of the acceptance window.
            t_max: Upper bound of the acceptance window.

        Returns:
            HitInfo for the nearest hit strictly inside (t_min, t_max), or
            None if the ray misses everything.
        """
        self.activate()
        _probe_origin[None] = [origin[0], origin[1], origin[2]]
        _probe_direction[None] = [direction[0], direction[1], direction[2]]
        _probe_world(t_min, t_max)

        if _probe_hit[None] == 0:
            return None

        point = _probe_point[None]
        normal = _probe_normal[None]
        return HitInfo(
            t=float(_probe_t[None]),
            point=(float(point[0]), float(point[1]), float(point[2])),
            normal=(float(normal[0]), float(normal[1]), float(normal[2])),
            front_face=bool(_probe_front_face[None]),
            material_id=int(_probe_material_id[None]),
        )

    # =========================================================================
    # Scene Serialization
    # =========================================================================

    def to_config(self) -> SceneConfig:
        """Export the scene to a configuration object."""
        config = SceneConfig()

        for mat in self.materials:
            mat_config: dict[str, Any] = {"type": mat.material_type.name.lower()}
            for key, value in mat.params.items():
                mat_config[key] = list(value) if isinstance(value, tuple) else value
            config.materials.append(mat_config)

        for sphere in self.spheres:
            config.spheres.append(
                {
                    "center": list(sphere.center),
                    "radius": sphere.radius,
                    "material_id": sphere.material_id,
                }
            )

        return config

    def from_config(self, config: SceneConfig) -> None:
        """Load a scene from a configuration object.

        Clears the current scene first. Materials are loaded before spheres
        so that sphere material ids refer to positions in the material list.

        Raises:
            ValueError: If the configuration contains invalid data.
        """
        self.clear()

        for mat_config in config.materials:
            mat_type = str(mat_config.get("type", "")).lower()
            if mat_type == "lambertian":
                albedo = _as_triple(mat_config.get("albedo", [0.5, 0.5, 0.5]), "albedo")
                self.add_lambertian(albedo)
            elif mat_type == "metal":
                albedo = _as_triple(mat_config.get("albedo", [0.8, 0.8, 0.8]), "albedo")
                self.add_metal(albedo, float(mat_config.get("fuzz", 0.0)))
            elif mat_type == "dielectric":
                self.add_dielectric(float(mat_config.get("ior", 1.5)))
            else:
                raise ValueError(f"Unknown material type: {mat_type}")

        for sphere_config in config.spheres:
            center = _as_triple(sphere_config.get("center", [0.0, 0.0, 0.0]), "center")
            radius = float(sphere_config.get("radius", 1.0))
            material_id = int(sphere_config.get("material_id", 0))
            self.add_sphere(center, radius, material_id)

    def to_dict(self) -> dict[str, Any]:
        """Export the scene to a dictionary (for JSON serialization)."""
        config = self.to_config()
        return {"materials": config.materials, "spheres": config.spheres}

    def from_dict(self, data: dict[str, Any]) -> None:
        """Load a scene from a dictionary with 'materials' and 'spheres' keys."""
        config = SceneConfig(
            materials=data.get("materials", []),
            spheres=data.get("spheres", []),
        )
        self.from_config(config)

    # =========================================================================
    # Capacity Information
    # =========================================================================

    @staticmethod
    def get_max_spheres() -> int:
        """Get the maximum number of spheres supported."""
        return MAX_SPHERES

    @staticmethod
    def get_max_materials() -> int:
        """Get the maximum number of materials supported."""
        return MAX_MATERIALS


def load_scene_file(path: str | Path) -> dict[str, Any]:
    """Read a JSON scene description.

    The file holds a "materials" list, a "spheres" list and optionally a
    "camera" object (see Camera.from_dict).

    Raises:
        ValueError: If the file is not valid JSON or not a JSON object.
        OSError: If the file cannot be read.
    """
    text = Path(path).read_text(encoding="utf-8")
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid scene file {path}: {e}") from e
    if not isinstance(data, dict):
        raise ValueError(f"Scene file {path} must contain a JSON object")
    return data
