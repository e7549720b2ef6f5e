"""Vector algebra and random sampling for the path tracer.

Points, directions and RGB colors all share one type, Taichi's ``vec3``
(three f32 components). Arithmetic (componentwise add, sub, mul, div,
negation and scalar multiplication on either side) is native to
``ti.math`` vectors; this module adds the geometric operations and the
Monte Carlo sampling helpers used by materials and the camera.

All functions are Taichi functions (``@ti.func``) and must be called from
within a Taichi kernel.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from pathtrace.core.vec3 import reflect, vec3
    >>> @ti.kernel
    ... def mirror() -> vec3:
    ...     return reflect(vec3(1.0, -1.0, 0.0), vec3(0.0, 1.0, 0.0))
"""

import taichi as ti
import taichi.math as tm

# A single 3-component type serves as vector, point and color
vec3 = tm.vec3
Vec3 = vec3
Point3 = vec3
Color = vec3

# Components below this magnitude are treated as zero
NEAR_ZERO_EPSILON = 1e-8


# =============================================================================
# Geometric Operations
# =============================================================================


@ti.func
def dot(a: vec3, b: vec3) -> ti.f32:
    """Compute the dot product of two vectors."""
    return a.x * b.x + a.y * b.y + a.z * b.z


@ti.func
def cross(a: vec3, b: vec3) -> vec3:
    """Compute the cross product a x b."""
    return vec3(
        a.y * b.z - a.z * b.y,
        a.z * b.x - a.x * b.z,
        a.x * b.y - a.y * b.x,
    )


@ti.func
def length_squared(v: vec3) -> ti.f32:
    """Compute the squared length of a vector."""
    return dot(v, v)


@ti.func
def length(v: vec3) -> ti.f32:
    """Compute the Euclidean length of a vector."""
    return ti.sqrt(length_squared(v))


@ti.func
def unit_vector(v: vec3) -> vec3:
    """Scale a vector to unit length.

    Zero-length input is not special-cased and yields non-finite
    components.

    Args:
        v: The input vector.

    Returns:
        ``v / length(v)``.
    """
    return v / length(v)


@ti.func
def near_zero(v: vec3) -> ti.i32:
    """Return 1 if every component is within NEAR_ZERO_EPSILON of zero.

    Used by materials to detect degenerate scatter directions.
    """
    s = NEAR_ZERO_EPSILON
    return ti.abs(v.x) < s and ti.abs(v.y) < s and ti.abs(v.z) < s


@ti.func
def reflect(v: vec3, n: vec3) -> vec3:
    """Reflect a vector about a normal.

    Args:
        v: The incoming direction (pointing toward the surface).
        n: The surface normal (unit length).

    Returns:
        ``v - 2 * dot(v, n) * n``.
    """
    return v - 2.0 * dot(v, n) * n


@ti.func
def refract(uv: vec3, n: vec3, etai_over_etat: ti.f32) -> vec3:
    """Refract a unit vector through a surface using Snell's law.

    The refracted ray is split into the components perpendicular and
    parallel to the normal. The caller is responsible for detecting total
    internal reflection beforehand.

    Args:
        uv: The incoming direction (unit length).
        n: The surface normal facing against ``uv`` (unit length).
        etai_over_etat: Ratio of the refractive indices, incident over
            transmitted.

    Returns:
        The refracted direction (unit length when ``uv`` and ``n`` are).
    """
    cos_theta = tm.min(dot(-uv, n), 1.0)
    r_out_perp = etai_over_etat * (uv + cos_theta * n)
    r_out_parallel = -ti.sqrt(ti.abs(1.0 - length_squared(r_out_perp))) * n
    return r_out_perp + r_out_parallel


@ti.func
def linear_to_gamma(color: vec3) -> vec3:
    """Apply gamma 2 correction (per-channel square root).

    Non-positive channels map to zero.
    """
    result = vec3(0.0, 0.0, 0.0)
    for c in ti.static(range(3)):
        if color[c] > 0.0:
            result[c] = ti.sqrt(color[c])
    return result


# =============================================================================
# Random Sampling
# =============================================================================


@ti.func
def random_float() -> ti.f32:
    """Uniform random number in [0, 1)."""
    return ti.random(ti.f32)


@ti.func
def random_range(lo: ti.f32, hi: ti.f32) -> ti.f32:
    """Uniform random number in [lo, hi)."""
    return lo + (hi - lo) * ti.random(ti.f32)


@ti.func
def random_vec3() -> vec3:
    """Vector with each component uniform in [0, 1)."""
    return vec3(ti.random(ti.f32), ti.random(ti.f32), ti.random(ti.f32))


@ti.func
def random_vec3_range(lo: ti.f32, hi: ti.f32) -> vec3:
    """Vector with each component uniform in [lo, hi)."""
    return vec3(random_range(lo, hi), random_range(lo, hi), random_range(lo, hi))


@ti.func
def random_in_unit_sphere() -> vec3:
    """Random point strictly inside the unit ball.

    Rejection sampling over the cube [-1, 1)^3. The loop has no iteration
    bound; it terminates with probability one (acceptance rate ~52%).
    """
    p = random_vec3_range(-1.0, 1.0)
    while length_squared(p) >= 1.0:
        p = random_vec3_range(-1.0, 1.0)
    return p


@ti.func
def random_in_unit_disk() -> vec3:
    """Random point strictly inside the unit disk in the z = 0 plane.

    Rejection sampling over the square [-1, 1)^2, unbounded like
    random_in_unit_sphere().
    """
    p = vec3(random_range(-1.0, 1.0), random_range(-1.0, 1.0), 0.0)
    while length_squared(p) >= 1.0:
        p = vec3(random_range(-1.0, 1.0), random_range(-1.0, 1.0), 0.0)
    return p


@ti.func
def random_unit_vector() -> vec3:
    """Random unit vector, uniform over the sphere."""
    return unit_vector(random_in_unit_sphere())


@ti.func
def random_on_hemisphere(normal: vec3) -> vec3:
    """Random unit vector in the hemisphere around ``normal``.

    Args:
        normal: The normal defining the hemisphere orientation.

    Returns:
        A unit vector with ``dot(result, normal) >= 0``.
    """
    on_unit_sphere = random_unit_vector()
    result = on_unit_sphere
    if dot(on_unit_sphere, normal) < 0.0:
        result = -on_unit_sphere
    return result
