"""Tests for the path tracing integrator and render loop.

Tests cover:
- Sky gradient for escaping rays
- Depth limit (depth 0 is black)
- Absorption by unknown materials
- Attenuation through a mirror bounce
- PPM streaming: header, raster order, progress lines
- Error propagation from the output stream
"""

import io

import pytest


class FailingStream(io.StringIO):
    """Text stream whose writes fail after the header."""

    def __init__(self, fail_after: int = 1):
        super().__init__()
        self.writes = 0
        self.fail_after = fail_after

    def write(self, s):
        self.writes += 1
        if self.writes > self.fail_after:
            raise OSError("disk full")
        return super().write(s)


def _small_camera(**overrides):
    from pathtrace.camera.camera import Camera

    settings = dict(
        image_width=4,
        aspect_ratio=2.0,
        samples_per_pixel=2,
        max_depth=5,
        look_from=(0.0, 0.0, 0.0),
        look_at=(0.0, 0.0, -1.0),
    )
    settings.update(overrides)
    return Camera(**settings)


class TestRayColor:
    """Tests for the color estimate along single rays."""

    def test_depth_zero_is_black(self):
        """Test that no bounces left yields black, even toward the sky."""
        from pathtrace.core.integrator import trace_ray

        assert trace_ray((0.0, 0.0, 0.0), (0.0, 1.0, 0.0), 0) == (0.0, 0.0, 0.0)

    def test_straight_up_is_sky_blue(self):
        """Test a ray escaping straight up sees (0.5, 0.7, 1.0)."""
        from pathtrace.core.integrator import trace_ray

        color = trace_ray((0.0, 0.0, 0.0), (0.0, 1.0, 0.0), 1)
        assert color == pytest.approx((0.5, 0.7, 1.0), abs=1e-6)

    def test_straight_down_is_white(self):
        """Test a ray escaping straight down sees white."""
        from pathtrace.core.integrator import trace_ray

        color = trace_ray((0.0, 0.0, 0.0), (0.0, -5.0, 0.0), 1)
        assert color == pytest.approx((1.0, 1.0, 1.0), abs=1e-6)

    def test_horizontal_is_halfway(self):
        """Test a horizontal ray sees the midpoint of the gradient."""
        from pathtrace.core.integrator import trace_ray

        color = trace_ray((0.0, 0.0, 0.0), (0.0, 0.0, -1.0), 3)
        assert color == pytest.approx((0.75, 0.85, 1.0), abs=1e-6)

    def test_unknown_material_absorbs(self):
        """Test a sphere with an unregistered material renders black."""
        from pathtrace.core.integrator import trace_ray
        from pathtrace.scene.hittable_list import add_sphere

        add_sphere((0.0, 0.0, -1.0), 0.5, material_id=42)

        assert trace_ray((0.0, 0.0, 0.0), (0.0, 0.0, -1.0), 10) == (0.0, 0.0, 0.0)

    def test_mirror_bounce_attenuates_background(self):
        """Test a head-on mirror reflection multiplies the sky by the albedo."""
        from pathtrace.core.integrator import trace_ray
        from pathtrace.scene.manager import HittableList

        world = HittableList()
        world.add_metal_sphere((0.0, 0.0, -1.0), 0.5, albedo=(0.8, 0.6, 0.2), fuzz=0.0)

        # Reflected straight back along +Z: the horizontal sky (0.75, 0.85, 1.0)
        color = trace_ray((0.0, 0.0, 0.0), (0.0, 0.0, -1.0), 2)
        assert color == pytest.approx((0.6, 0.51, 0.2), abs=1e-5)

    def test_bounce_limit_reached_is_black(self):
        """Test the mirror bounce needs a second step to reach the sky."""
        from pathtrace.core.integrator import trace_ray
        from pathtrace.scene.manager import HittableList

        world = HittableList()
        world.add_metal_sphere((0.0, 0.0, -1.0), 0.5, albedo=(0.8, 0.6, 0.2))

        assert trace_ray((0.0, 0.0, 0.0), (0.0, 0.0, -1.0), 1) == (0.0, 0.0, 0.0)


class TestRenderStream:
    """Tests for render()."""

    def test_stream_layout_and_progress(self):
        """Test header, one line per pixel and one progress line per row."""
        from pathtrace.core.integrator import render
        from pathtrace.scene.manager import HittableList

        world = HittableList()
        out, log = io.StringIO(), io.StringIO()

        render(_small_camera(), world, output=out, log=log)

        lines = out.getvalue().splitlines()
        assert lines[:3] == ["P3", "4 2", "255"]
        assert len(lines) == 3 + 4 * 2
        for line in lines[3:]:
            values = [int(x) for x in line.split()]
            assert len(values) == 3
            assert all(0 <= x <= 255 for x in values)

        assert log.getvalue().splitlines() == [
            "Scanline progress: 0/2",
            "Scanline progress: 1/2",
            "Done.",
        ]

    def test_sky_rows_top_to_bottom(self):
        """Test the top row is bluer than the bottom row (raster order)."""
        from pathtrace.core.integrator import render
        from pathtrace.scene.manager import HittableList

        world = HittableList()
        out = io.StringIO()

        render(_small_camera(image_width=8, aspect_ratio=1.0), world, output=out, log=io.StringIO())

        pixels = [[int(x) for x in line.split()] for line in out.getvalue().splitlines()[3:]]
        top_red = pixels[0][0]
        bottom_red = pixels[-1][0]
        # Blue stays at 255 across the gradient; red rises toward the horizon
        assert top_red < bottom_red
        assert all(p[2] == 255 for p in pixels)

    def test_zero_depth_renders_black(self):
        """Test every pixel is black when no bounces are allowed."""
        from pathtrace.core.integrator import render
        from pathtrace.scene.manager import HittableList

        world = HittableList()
        out = io.StringIO()

        render(_small_camera(max_depth=0), world, output=out, log=io.StringIO())

        assert out.getvalue().splitlines()[3:] == ["0 0 0"] * 8

    def test_renders_the_given_world_after_another_is_built(self):
        """Test an earlier list still renders its own spheres, not the newest list's."""
        from pathtrace.core.integrator import render
        from pathtrace.scene.manager import HittableList

        # A black sphere enclosing the camera absorbs every path
        enclosed = HittableList()
        enclosed.add_lambertian_sphere((0.0, 0.0, 0.0), 50.0, albedo=(0.0, 0.0, 0.0))
        open_sky = HittableList()
        camera = _small_camera(image_width=2, aspect_ratio=2.0, samples_per_pixel=1)

        out = io.StringIO()
        render(camera, enclosed, output=out, log=io.StringIO())
        assert out.getvalue() == "P3\n2 1\n255\n0 0 0\n0 0 0\n"

        out = io.StringIO()
        render(camera, open_sky, output=out, log=io.StringIO())
        assert "0 0 0" not in out.getvalue().splitlines()[3:]

    def test_write_error_propagates(self):
        """Test a failing output stream aborts the render without 'Done.'."""
        from pathtrace.core.integrator import render
        from pathtrace.scene.manager import HittableList

        world = HittableList()
        log = io.StringIO()

        with pytest.raises(OSError, match="disk full"):
            render(_small_camera(), world, output=FailingStream(), log=log)

        assert "Done." not in log.getvalue()

    def test_invalid_camera_rejected(self):
        """Test an invalid camera raises before anything is written."""
        from pathtrace.core.integrator import render
        from pathtrace.scene.manager import HittableList

        world = HittableList()
        out = io.StringIO()

        with pytest.raises(ValueError):
            render(_small_camera(samples_per_pixel=0), world, output=out, log=io.StringIO())
        assert out.getvalue() == ""

    def test_image_too_wide(self):
        """Test widths beyond the scanline buffer are rejected."""
        from pathtrace.core.integrator import MAX_IMAGE_WIDTH, render
        from pathtrace.scene.manager import HittableList

        world = HittableList()
        with pytest.raises(ValueError, match="exceeds maximum"):
            render(
                _small_camera(image_width=MAX_IMAGE_WIDTH + 1, aspect_ratio=MAX_IMAGE_WIDTH + 1),
                world,
                output=io.StringIO(),
                log=io.StringIO(),
            )


class TestRenderImage:
    """Tests for render_image()."""

    def test_shape_and_range(self):
        """Test the array shape and that values are gamma-corrected colors."""
        from pathtrace.core.integrator import render_image
        from pathtrace.scene.manager import HittableList

        world = HittableList()
        world.add_lambertian_sphere((0.0, 0.0, -1.0), 0.5, albedo=(0.5, 0.5, 0.5))

        image = render_image(_small_camera(image_width=6, aspect_ratio=1.5), world)

        assert image.shape == (4, 6, 3)
        assert image.min() >= 0.0
        assert image.max() <= 1.0 + 1e-6

    def test_uses_the_given_world(self):
        """Test render_image reloads a list replaced by a newer one."""
        from pathtrace.core.integrator import render_image
        from pathtrace.scene.manager import HittableList

        enclosed = HittableList()
        enclosed.add_lambertian_sphere((0.0, 0.0, 0.0), 50.0, albedo=(0.0, 0.0, 0.0))
        HittableList()

        image = render_image(_small_camera(image_width=2, aspect_ratio=2.0), enclosed)

        assert image.max() == 0.0
