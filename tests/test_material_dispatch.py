"""Unit tests for unified material ids and scatter dispatch.

Tests cover:
- Unified id assignment across material types
- Type and type-local index lookup on the device
- scatter() dispatching to the right material
- Unknown material ids absorbing the ray
"""

import pytest
import taichi as ti


def _dispatch(material_id):
    """Scatter a head-on ray hitting a +Y surface with the given material.

    Returns:
        Tuple of (direction, attenuation, did_scatter).
    """
    from pathtrace.core.ray import make_ray
    from pathtrace.core.vec3 import vec3
    from pathtrace.geometry.hittable import make_hit_record
    from pathtrace.materials.material import scatter

    direction = ti.Vector.field(3, dtype=ti.f32, shape=())
    attenuation = ti.Vector.field(3, dtype=ti.f32, shape=())
    did_scatter = ti.field(dtype=ti.i32, shape=())

    @ti.kernel
    def test_kernel(mat_id: ti.i32):
        ray_in = make_ray(vec3(0.0, 1.0, 0.0), vec3(0.0, -1.0, 0.0))
        rec = make_hit_record(ray_in, 1.0, vec3(0.0, 0.0, 0.0), vec3(0.0, 1.0, 0.0), mat_id)
        scattered, att, flag = scatter(ray_in, rec)
        direction[None] = scattered.direction
        attenuation[None] = att
        did_scatter[None] = flag

    test_kernel(material_id)
    return direction[None], attenuation[None], did_scatter[None]


class TestMaterialTracking:
    """Tests for the unified material id tables."""

    def test_ids_are_sequential_across_types(self):
        """Test register_material hands out ids in registration order."""
        from pathtrace.materials.lambertian import add_lambertian_material
        from pathtrace.materials.material import (
            MaterialType,
            get_material_count,
            register_material,
        )
        from pathtrace.materials.metal import add_metal_material

        lam_a = add_lambertian_material((0.5, 0.5, 0.5))
        metal = add_metal_material((0.8, 0.8, 0.8))
        lam_b = add_lambertian_material((0.1, 0.1, 0.1))

        assert register_material(MaterialType.LAMBERTIAN, lam_a) == 0
        assert register_material(MaterialType.METAL, metal) == 1
        assert register_material(MaterialType.LAMBERTIAN, lam_b) == 2
        assert get_material_count() == 3

    def test_device_lookup(self):
        """Test type and type-local index lookup, including invalid ids."""
        from pathtrace.materials.material import (
            MaterialType,
            get_material_type,
            get_material_type_index,
            register_material,
        )

        register_material(MaterialType.DIELECTRIC, 4)

        results = ti.field(dtype=ti.i32, shape=4)

        @ti.kernel
        def test_kernel():
            results[0] = get_material_type(0)
            results[1] = get_material_type_index(0)
            results[2] = get_material_type(1)
            results[3] = get_material_type_index(-1)

        test_kernel()
        assert list(results.to_numpy()) == [int(MaterialType.DIELECTRIC), 4, -1, -1]

    def test_capacity_exceeded(self):
        """Test that exceeding MAX_MATERIALS raises RuntimeError."""
        from pathtrace.materials.material import (
            MAX_MATERIALS,
            MaterialType,
            num_materials,
            register_material,
        )

        num_materials[None] = MAX_MATERIALS
        with pytest.raises(RuntimeError, match="Maximum number of materials"):
            register_material(MaterialType.LAMBERTIAN, 0)


class TestScatterDispatch:
    """Tests for scatter()."""

    def test_metal_dispatch(self):
        """Test a metal id mirrors the ray with its albedo."""
        from pathtrace.materials.material import MaterialType, register_material
        from pathtrace.materials.metal import add_metal_material

        mat_id = register_material(MaterialType.METAL, add_metal_material((0.8, 0.6, 0.2)))

        direction, attenuation, did_scatter = _dispatch(mat_id)
        assert did_scatter == 1
        assert abs(direction[1] - 1.0) < 1e-5
        assert abs(attenuation[0] - 0.8) < 1e-6
        assert abs(attenuation[2] - 0.2) < 1e-6

    def test_lambertian_dispatch(self):
        """Test a Lambertian id returns its albedo and an upward direction."""
        from pathtrace.materials.lambertian import add_lambertian_material
        from pathtrace.materials.material import MaterialType, register_material

        register_material(MaterialType.LAMBERTIAN, add_lambertian_material((0.9, 0.9, 0.9)))
        mat_id = register_material(
            MaterialType.LAMBERTIAN, add_lambertian_material((0.1, 0.2, 0.5))
        )

        direction, attenuation, did_scatter = _dispatch(mat_id)
        assert did_scatter == 1
        assert direction[1] >= 0.0
        assert abs(attenuation[2] - 0.5) < 1e-6

    def test_dielectric_dispatch(self):
        """Test a dielectric id attenuates by white."""
        from pathtrace.materials.dielectric import add_dielectric_material
        from pathtrace.materials.material import MaterialType, register_material

        mat_id = register_material(MaterialType.DIELECTRIC, add_dielectric_material(1.5))

        _, attenuation, did_scatter = _dispatch(mat_id)
        assert did_scatter == 1
        assert all(abs(attenuation[k] - 1.0) < 1e-6 for k in range(3))

    def test_unknown_material_absorbs(self):
        """Test an unregistered material id absorbs the ray."""
        _, _, did_scatter = _dispatch(5)
        assert did_scatter == 0
