"""Ray data structure and vector utilities for the sphere ray tracer.

This module provides the fundamental Ray dataclass and the vector library the
rest of the renderer is built on. A single 3-component double-precision vector
type serves as point, direction and RGB color; the role is decided only by the
call site.

All functions are Taichi functions (``@ti.func``) and must be called from
within Taichi kernels.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> origin = vec3(0.0, 0.0, 0.0)
    >>> direction = vec3(0.0, 0.0, -1.0)
    >>> ray = Ray(origin=origin, direction=direction)
    >>> point = ray_at(ray, 5.0)  # Point 5 units along the ray
"""

import taichi as ti
import taichi.math as tm

# Scalar type used for all geometry and color math
real = ti.f64

# 3D vector type (point, direction or color)
vec3 = ti.types.vector(3, real)

# Integer RGB triple produced by format_color
ivec3 = ti.types.vector(3, ti.i32)

# Components below this magnitude count as zero in near_zero()
NEAR_ZERO_EPSILON = 1e-8


@ti.dataclass
class Ray:
    """A ray with an origin point and direction vector.

    Attributes:
        origin: The starting point of the ray (vec3).
        direction: The direction vector of the ray (vec3). It need not be unit
            length; a zero direction is representable and is the caller's
            responsibility to avoid.
    """

    origin: vec3
    direction: vec3


@ti.func
def ray_at(ray: Ray, t: real) -> vec3:
    """Compute the point along the ray at parameter t.

    Args:
        ray: The ray to evaluate.
        t: The parameter value. Positive values are in front of the origin.

    Returns:
        The point ray.origin + t * ray.direction.
    """
    return ray.origin + t * ray.direction


@ti.func
def make_ray(origin: vec3, direction: vec3) -> Ray:
    """Create a ray from origin and direction."""
    return Ray(origin=origin, direction=direction)


# =============================================================================
# Vector Utility Functions
# =============================================================================


@ti.func
def length(v: vec3) -> real:
    """Compute the Euclidean length of a vector."""
    return ti.sqrt(tm.dot(v, v))


@ti.func
def length_squared(v: vec3) -> real:
    """Compute the squared length of a vector.

    Cheaper than length() when only comparing magnitudes.
    """
    return tm.dot(v, v)


@ti.func
def normalize(v: vec3) -> vec3:
    """Normalize a vector to unit length.

    Args:
        v: The input vector.

    Returns:
        v / length(v). A zero-length input is returned unchanged (the zero
        vector) rather than producing NaN components.
    """
    result = v
    len_sq = tm.dot(v, v)
    if len_sq > 0.0:
        result = v / ti.sqrt(len_sq)
    return result


@ti.func
def dot(a: vec3, b: vec3) -> real:
    """Compute the dot product a . b."""
    return tm.dot(a, b)


@ti.func
def cross(a: vec3, b: vec3) -> vec3:
    """Compute the cross product a x b."""
    return tm.cross(a, b)


@ti.func
def near_zero(v: vec3) -> ti.i32:
    """Check if a vector is near zero in all components.

    Used to detect degenerate scatter directions (a random unit vector that
    almost exactly cancels the surface normal).

    Args:
        v: The vector to check.

    Returns:
        1 if every component is below NEAR_ZERO_EPSILON in magnitude, 0 otherwise.
    """
    s = NEAR_ZERO_EPSILON
    return ti.abs(v.x) < s and ti.abs(v.y) < s and ti.abs(v.z) < s


@ti.func
def reflect(incident: vec3, normal: vec3) -> vec3:
    """Reflect an incident vector about a normal.

    Computes incident - 2 (incident . normal) normal. The normal should be unit
    length for correct results.

    Args:
        incident: The incoming direction vector (pointing toward the surface).
        normal: The surface normal (should be normalized).

    Returns:
        The reflected direction vector.
    """
    return incident - 2.0 * tm.dot(incident, normal) * normal


@ti.func
def refract(unit_direction: vec3, normal: vec3, refraction_ratio: real) -> vec3:
    """Refract a unit direction through a surface using Snell's law.

    The refracted ray is split into a part perpendicular to the normal,
    ratio * (uv + cos_theta * n), and a parallel part of whatever length makes
    the result unit length.

    Args:
        unit_direction: The incoming direction (unit length).
        normal: The surface normal, oriented against the incoming ray.
        refraction_ratio: Ratio of refractive indices (n_incident / n_transmitted).

    Returns:
        The refracted direction. Callers must have ruled out total internal
        reflection beforehand.
    """
    cos_theta = tm.min(-tm.dot(unit_direction, normal), 1.0)
    r_out_perp = refraction_ratio * (unit_direction + cos_theta * normal)
    r_out_parallel = -ti.sqrt(ti.abs(1.0 - tm.dot(r_out_perp, r_out_perp))) * normal
    return r_out_perp + r_out_parallel


@ti.func
def schlick_reflectance(cosine: real, refraction_ratio: real) -> real:
    """Compute dielectric reflectance using Schlick's approximation.

    Args:
        cosine: Cosine of the angle between incident direction and normal.
        refraction_ratio: Ratio of refractive indices.

    Returns:
        r0 + (1 - r0) * (1 - cosine)^5 with r0 = ((1 - ratio) / (1 + ratio))^2.
    """
    r0 = (1.0 - refraction_ratio) / (1.0 + refraction_ratio)
    r0 = r0 * r0
    return r0 + (1.0 - r0) * ((1.0 - cosine) ** 5)


# =============================================================================
# Random Sampling Utilities for Monte Carlo
# =============================================================================

# Rejection sampling gives up after this many draws (acceptance is ~52% per
# draw for the sphere and ~79% for the disk, so the cap is never reached in
# practice)
MAX_REJECTION_TRIES = 64


@ti.func
def random_in_range(low: real, high: real) -> real:
    """Draw a uniform random number in [low, high)."""
    return low + (high - low) * ti.random(real)


@ti.func
def random_in_unit_sphere() -> vec3:
    """Generate a random point inside the unit ball.

    Draws uniformly in [-1, 1]^3 and rejects points outside the ball.

    Returns:
        A random point with length < 1.
    """
    p = vec3(0.0, 0.0, 0.0)
    found = False
    for _ in range(MAX_REJECTION_TRIES):
        if not found:
            p = vec3(
                random_in_range(-1.0, 1.0),
                random_in_range(-1.0, 1.0),
                random_in_range(-1.0, 1.0),
            )
            if length_squared(p) < 1.0:
                found = True
    return p


@ti.func
def random_unit_vector() -> vec3:
    """Generate a random unit vector uniformly distributed on the sphere."""
    return normalize(random_in_unit_sphere())


@ti.func
def random_in_unit_disk() -> vec3:
    """Generate a random point inside the unit disk in the z = 0 plane.

    Used for lens sampling in the depth-of-field camera.

    Returns:
        A random point (x, y, 0) with x^2 + y^2 < 1.
    """
    p = vec3(0.0, 0.0, 0.0)
    found = False
    for _ in range(MAX_REJECTION_TRIES):
        if not found:
            p = vec3(random_in_range(-1.0, 1.0), random_in_range(-1.0, 1.0), 0.0)
            if p.x * p.x + p.y * p.y < 1.0:
                found = True
    return p


# =============================================================================
# Color Output
# =============================================================================


@ti.func
def format_color(color_sum: vec3, samples: ti.i32) -> ivec3:
    """Convert an accumulated color into 8-bit channel values.

    Divides the summed color by the sample count, applies gamma-2 correction
    (square root), clamps to [0, 0.999] and scales by 256 so every channel
    lands in [0, 255].

    Args:
        color_sum: Sum of all sample colors for one pixel.
        samples: Number of samples that were summed.

    Returns:
        The (r, g, b) channel values as integers in [0, 255].
    """
    scale = 1.0 / ti.cast(samples, real)
    result = ivec3(0, 0, 0)
    for c in ti.static(range(3)):
        value = ti.sqrt(tm.max(color_sum[c] * scale, 0.0))
        result[c] = ti.cast(256.0 * tm.clamp(value, 0.0, 0.999), ti.i32)
    return result
