"""Sphere primitive with closed-form ray-sphere intersection.

Substituting the ray equation into the sphere equation gives the quadratic

    a*t^2 + 2*h*t + c = 0

with oc = origin - center, a = dir . dir, h = oc . dir and
c = oc . oc - radius^2. The half-b form keeps the discriminant as h^2 - a*c,
avoiding the factor-of-four expansion of the textbook formula.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from rayweekend.geometry.sphere import Sphere, HitRecord, hit_sphere
    >>> # Use hit_sphere within a Taichi kernel
"""

import taichi as ti
import taichi.math as tm

from rayweekend.core.ray import real, vec3


@ti.dataclass
class Sphere:
    """A sphere defined by center point and radius.

    Attributes:
        center: The center point of the sphere (vec3).
        radius: The radius of the sphere (positive).
    """

    center: vec3
    radius: real


@ti.dataclass
class HitRecord:
    """Record of a ray-sphere intersection.

    Attributes:
        hit: 1 if the ray intersected the sphere, 0 if it missed.
        t: The ray parameter of the intersection. Only valid if hit == 1.
        point: The intersection point. Only valid if hit == 1.
        normal: Unit surface normal, always oriented against the incoming ray.
            Only valid if hit == 1.
        front_face: 1 if the ray approached from outside the sphere, 0 if it
            hit the inside surface. Only valid if hit == 1.
    """

    hit: ti.i32
    t: real
    point: vec3
    normal: vec3
    front_face: ti.i32


@ti.func
def hit_sphere(
    ray_origin: vec3,
    ray_direction: vec3,
    sphere: Sphere,
    t_min: real,
    t_max: real,
) -> HitRecord:
    """Test for ray-sphere intersection.

    A negative discriminant means no hit. Otherwise the nearer root
    (-h - sqrt(d)) / a is tried first and the farther root only if the nearer
    one falls outside [t_min, t_max].

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The direction vector of the ray (need not be normalized).
        sphere: The sphere to test intersection against.
        t_min: Minimum accepted t (avoids self-intersection).
        t_max: Maximum accepted t (the nearest hit found so far).

    Returns:
        A HitRecord; check its hit field to determine if an intersection
        occurred.
    """
    oc = ray_origin - sphere.center
    a = tm.dot(ray_direction, ray_direction)
    h = tm.dot(oc, ray_direction)
    c = tm.dot(oc, oc) - sphere.radius * sphere.radius
    discriminant = h * h - a * c

    # Taichi requires outer-scope declaration of the result fields
    did_hit = 0
    hit_t = ti.cast(0.0, real)
    hit_point = vec3(0.0, 0.0, 0.0)
    hit_normal = vec3(0.0, 0.0, 0.0)
    is_front_face = 0

    if discriminant >= 0.0:
        sqrt_d = ti.sqrt(discriminant)

        t = (-h - sqrt_d) / a
        valid = t_min <= t <= t_max
        if not valid:
            t = (-h + sqrt_d) / a
            valid = t_min <= t <= t_max

        if valid:
            did_hit = 1
            hit_t = t
            hit_point = ray_origin + t * ray_direction

            outward_normal = (hit_point - sphere.center) / sphere.radius

            if tm.dot(ray_direction, outward_normal) < 0.0:
                is_front_face = 1
                hit_normal = outward_normal
            else:
                # Ray is inside the sphere, hitting the back face
                is_front_face = 0
                hit_normal = -outward_normal

    return HitRecord(
        hit=did_hit,
        t=hit_t,
        point=hit_point,
        normal=hit_normal,
        front_face=is_front_face,
    )


@ti.func
def make_sphere(center: vec3, radius: real) -> Sphere:
    """Create a sphere from center and radius."""
    return Sphere(center=center, radius=radius)
