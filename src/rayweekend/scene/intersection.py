"""World storage and nearest-hit ray queries.

The world is an ordered collection of spheres stored in Taichi fields. It is
filled once before rendering and only read by kernels afterwards. Each sphere
carries the handle of its material for shading.

Queries are brute force: every sphere is tested once per ray, with the upper
search bound shrinking to the nearest hit found so far. The order of spheres
affects running time but never the result.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from rayweekend.scene.intersection import add_sphere, clear_scene
    >>> clear_scene()
    >>> add_sphere((0.0, 0.0, -1.0), 0.5, material_id=0)
    >>> # Use intersect_scene within a Taichi kernel
"""

from collections.abc import Sequence

import taichi as ti

from rayweekend.core.ray import real, vec3
from rayweekend.geometry.sphere import HitRecord, hit_sphere, make_sphere


@ti.dataclass
class SceneHitRecord:
    """Record of a ray-world intersection with material information.

    Attributes:
        hit: 1 if the ray intersected any sphere, 0 on a miss.
        t: The ray parameter of the nearest intersection.
        point: The intersection point.
        normal: Unit surface normal, oriented against the incoming ray.
        front_face: 1 if the ray hit the outside of the surface, 0 otherwise.
        material_id: Handle of the struck sphere's material, -1 on a miss.
    """

    hit: ti.i32
    t: real
    point: vec3
    normal: vec3
    front_face: ti.i32
    material_id: ti.i32


# Maximum number of spheres supported in the world
MAX_SPHERES = 1024

# Sphere storage: Structure of Arrays layout
sphere_centers = ti.Vector.field(3, dtype=real, shape=MAX_SPHERES)
sphere_radii = ti.field(dtype=real, shape=MAX_SPHERES)
sphere_material_ids = ti.field(dtype=ti.i32, shape=MAX_SPHERES)
num_spheres = ti.field(dtype=ti.i32, shape=())


def clear_scene() -> None:
    """Remove all spheres from the world.

    Resets the sphere count to zero. The field data is overwritten when new
    spheres are added.
    """
    num_spheres[None] = 0


def add_sphere(center: Sequence[float], radius: float, material_id: int = 0) -> int:
    """Add a sphere to the world.

    Args:
        center: The center point of the sphere as (x, y, z).
        radius: The radius of the sphere. Must be positive.
        material_id: The material handle to associate with this sphere.

    Returns:
        The index of the added sphere.

    Raises:
        ValueError: If the radius is not positive.
        RuntimeError: If the maximum number of spheres is exceeded.
    """
    if not radius > 0.0:
        raise ValueError(f"Sphere radius must be positive, got {radius}")

    idx = num_spheres[None]
    if idx >= MAX_SPHERES:
        raise RuntimeError(f"Maximum number of spheres ({MAX_SPHERES}) exceeded")
    sphere_centers[idx] = [center[0], center[1], center[2]]
    sphere_radii[idx] = radius
    sphere_material_ids[idx] = material_id
    num_spheres[None] = idx + 1
    return idx


def get_sphere_count() -> int:
    """Get the number of spheres in the world."""
    return int(num_spheres[None])


@ti.func
def _hit_record_to_scene_hit_record(rec: HitRecord, material_id: ti.i32) -> SceneHitRecord:
    """Attach a material handle to a sphere hit record."""
    return SceneHitRecord(
        hit=rec.hit,
        t=rec.t,
        point=rec.point,
        normal=rec.normal,
        front_face=rec.front_face,
        material_id=material_id,
    )


@ti.func
def _make_miss_record() -> SceneHitRecord:
    """Create a SceneHitRecord indicating no intersection."""
    return SceneHitRecord(
        hit=0,
        t=0.0,
        point=vec3(0.0, 0.0, 0.0),
        normal=vec3(0.0, 0.0, 0.0),
        front_face=0,
        material_id=-1,
    )


@ti.func
def intersect_scene(
    ray_origin: vec3,
    ray_direction: vec3,
    t_min: real,
    t_max: real,
) -> SceneHitRecord:
    """Find the nearest intersection of a ray with the world.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The direction vector of the ray.
        t_min: Minimum accepted t.
        t_max: Maximum accepted t.

    Returns:
        A SceneHitRecord for the nearest intersection in [t_min, t_max], or a
        miss record (hit == 0) if no sphere qualifies.
    """
    closest_t = t_max
    result = _make_miss_record()

    for i in range(num_spheres[None]):
        sphere = make_sphere(sphere_centers[i], sphere_radii[i])
        rec = hit_sphere(ray_origin, ray_direction, sphere, t_min, closest_t)
        if rec.hit == 1:
            closest_t = rec.t
            result = _hit_record_to_scene_hit_record(rec, sphere_material_ids[i])

    return result
