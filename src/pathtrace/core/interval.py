"""Closed scalar interval used to bound valid ray parameters.

During a scene query the interval is the acceptance window for the hit
parameter ``t``: its lower bound stays fixed while the upper bound shrinks
to the closest hit found so far.

Taichi has no optional type, so the "or-none" helpers return a pair
``(ok, value)`` where ``ok`` is 1 when the test holds.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from pathtrace.core.interval import Interval, surrounds, with_max
    >>> @ti.kernel
    ... def probe() -> ti.i32:
    ...     ray_t = with_max(Interval(min=0.001, max=ti.math.inf), 5.0)
    ...     return surrounds(ray_t, 4.0)
"""

import taichi as ti
import taichi.math as tm


@ti.dataclass
class Interval:
    """A closed range [min, max] over f32 values.

    Attributes:
        min: Lower bound.
        max: Upper bound.
    """

    min: ti.f32
    max: ti.f32


@ti.func
def make_interval(lo: ti.f32, hi: ti.f32) -> Interval:
    """Create an interval [lo, hi]."""
    return Interval(min=lo, max=hi)


@ti.func
def empty() -> Interval:
    """The empty interval (+inf, -inf); contains nothing."""
    return Interval(min=tm.inf, max=-tm.inf)


@ti.func
def universe() -> Interval:
    """The interval (-inf, +inf); contains every finite value."""
    return Interval(min=-tm.inf, max=tm.inf)


@ti.func
def non_negative() -> Interval:
    """The interval [0, +inf)."""
    return Interval(min=0.0, max=tm.inf)


@ti.func
def size(interval: Interval) -> ti.f32:
    """Width of the interval (negative for the empty interval)."""
    return interval.max - interval.min


@ti.func
def contains(interval: Interval, x: ti.f32) -> ti.i32:
    """Return 1 if min <= x <= max."""
    return interval.min <= x and x <= interval.max


@ti.func
def surrounds(interval: Interval, x: ti.f32) -> ti.i32:
    """Return 1 if min < x < max (open-interval test)."""
    return interval.min < x and x < interval.max


@ti.func
def contains_some(interval: Interval, x: ti.f32):
    """Pair the containment test with the tested value.

    Returns:
        A tuple ``(ok, x)`` where ``ok`` is contains(interval, x).
    """
    return contains(interval, x), x


@ti.func
def surrounds_some(interval: Interval, x: ti.f32):
    """Pair the strict containment test with the tested value.

    Returns:
        A tuple ``(ok, x)`` where ``ok`` is surrounds(interval, x).
    """
    return surrounds(interval, x), x


@ti.func
def clamp(interval: Interval, x: ti.f32) -> ti.f32:
    """Saturate x into [min, max]."""
    return tm.min(tm.max(x, interval.min), interval.max)


@ti.func
def with_max(interval: Interval, new_max: ti.f32) -> Interval:
    """Copy of the interval with a new upper bound."""
    return Interval(min=interval.min, max=new_max)
