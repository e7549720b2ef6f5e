"""Unit tests for the interval module.

Tests cover:
- contains / surrounds at and inside the bounds
- The "or-none" variants returning (ok, value)
- Empty, universe and non-negative intervals
- clamp and with_max
"""

import taichi as ti


class TestMembership:
    """Tests for contains() and surrounds()."""

    def test_bounds_are_closed_for_contains_open_for_surrounds(self):
        """Test [0, 1]: contains includes 0 and 1, surrounds excludes them."""
        from pathtrace.core.interval import Interval, contains, surrounds

        results = ti.field(dtype=ti.i32, shape=6)

        @ti.kernel
        def test_kernel():
            unit = Interval(min=0.0, max=1.0)
            results[0] = contains(unit, 0.0)
            results[1] = contains(unit, 1.0)
            results[2] = contains(unit, 0.5)
            results[3] = surrounds(unit, 0.0)
            results[4] = surrounds(unit, 1.0)
            results[5] = surrounds(unit, 0.5)

        test_kernel()
        assert list(results.to_numpy()) == [1, 1, 1, 0, 0, 1]

    def test_outside_values(self):
        """Test values outside the interval fail both tests."""
        from pathtrace.core.interval import Interval, contains, surrounds

        results = ti.field(dtype=ti.i32, shape=2)

        @ti.kernel
        def test_kernel():
            unit = Interval(min=0.0, max=1.0)
            results[0] = contains(unit, 1.5)
            results[1] = surrounds(unit, -0.5)

        test_kernel()
        assert list(results.to_numpy()) == [0, 0]

    def test_or_none_variants(self):
        """Test contains_some and surrounds_some return the tested value."""
        from pathtrace.core.interval import Interval, contains_some, surrounds_some

        oks = ti.field(dtype=ti.i32, shape=2)
        values = ti.field(dtype=ti.f32, shape=2)

        @ti.kernel
        def test_kernel():
            unit = Interval(min=0.0, max=1.0)
            ok0, x0 = contains_some(unit, 1.0)
            ok1, x1 = surrounds_some(unit, 1.0)
            oks[0] = ok0
            oks[1] = ok1
            values[0] = x0
            values[1] = x1

        test_kernel()
        assert list(oks.to_numpy()) == [1, 0]
        assert list(values.to_numpy()) == [1.0, 1.0]


class TestSpecialIntervals:
    """Tests for empty, universe and non_negative."""

    def test_empty_contains_nothing(self):
        """Test the empty interval rejects every value and has negative size."""
        from pathtrace.core.interval import contains, empty, size

        inside = ti.field(dtype=ti.i32, shape=())
        width = ti.field(dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel():
            inside[None] = contains(empty(), 0.0)
            width[None] = ti.select(size(empty()) < 0.0, -1.0, 1.0)

        test_kernel()
        assert inside[None] == 0
        assert width[None] == -1.0

    def test_universe_and_non_negative(self):
        """Test universe contains every finite value; non_negative starts at 0."""
        from pathtrace.core.interval import contains, non_negative, universe

        results = ti.field(dtype=ti.i32, shape=4)

        @ti.kernel
        def test_kernel():
            results[0] = contains(universe(), -1.0e30)
            results[1] = contains(universe(), 1.0e30)
            results[2] = contains(non_negative(), 0.0)
            results[3] = contains(non_negative(), -1.0e-6)

        test_kernel()
        assert list(results.to_numpy()) == [1, 1, 1, 0]


class TestIntervalHelpers:
    """Tests for size, clamp and with_max."""

    def test_size_and_clamp(self):
        """Test width and saturation."""
        from pathtrace.core.interval import clamp, make_interval, size

        results = ti.field(dtype=ti.f32, shape=4)

        @ti.kernel
        def test_kernel():
            i = make_interval(-1.0, 3.0)
            results[0] = size(i)
            results[1] = clamp(i, -5.0)
            results[2] = clamp(i, 5.0)
            results[3] = clamp(i, 0.5)

        test_kernel()
        assert list(results.to_numpy()) == [4.0, -1.0, 3.0, 0.5]

    def test_with_max_keeps_min(self):
        """Test with_max replaces only the upper bound."""
        from pathtrace.core.interval import Interval, with_max

        lo = ti.field(dtype=ti.f32, shape=())
        hi = ti.field(dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel():
            shrunk = with_max(Interval(min=0.001, max=ti.math.inf), 2.0)
            lo[None] = shrunk.min
            hi[None] = shrunk.max

        test_kernel()
        assert abs(lo[None] - 0.001) < 1e-7
        assert hi[None] == 2.0
