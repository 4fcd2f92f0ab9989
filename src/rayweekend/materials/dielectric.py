"""Dielectric (glass/water) material implementation.

This module implements transparent materials that both reflect and refract.

Key physics:
    - Snell's law for refraction: n1 * sin(theta1) = n2 * sin(theta2)
    - Schlick's approximation for the angle-dependent reflectance
    - Total internal reflection when ratio * sin(theta) > 1

The material randomly chooses between reflection and refraction based on the
Schlick reflectance, which increases at grazing angles. Glass never tints the
light passing through it.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from rayweekend.materials.dielectric import scatter_dielectric
    >>> # Use within a Taichi kernel:
    >>> # direction, attenuation, did_scatter = scatter_dielectric(
    >>> #     ior, incident_dir, normal, front_face
    >>> # )
"""

import taichi as ti
import taichi.math as tm

from rayweekend.core.ray import (
    normalize,
    real,
    reflect,
    refract,
    schlick_reflectance,
    vec3,
)


@ti.func
def _refraction_ratio(ior: real, front_face: ti.i32) -> real:
    """Ratio n_incident / n_transmitted for the side of the surface hit.

    Entering the medium (front face) the ratio is 1/ior; leaving it, ior.
    """
    ratio = 1.0 / ior
    if front_face == 0:
        ratio = ior
    return ratio


@ti.func
def scatter_dielectric(
    ior: real,
    incident_direction: vec3,
    normal: vec3,
    front_face: ti.i32,
):
    """Compute the scattered ray direction for a dielectric material.

    Args:
        ior: Index of refraction of the material.
        incident_direction: The incoming ray direction (any length).
        normal: The surface normal, oriented against the incoming ray.
        front_face: 1 if the ray hits the outside of the surface,
            0 if it travels inside the material.

    Returns:
        A tuple of (scattered_direction, attenuation, did_scatter) where:
        - scattered_direction: The reflected or refracted direction.
        - attenuation: White; glass imparts no tint.
        - did_scatter: Always 1 for dielectrics.
    """
    attenuation = vec3(1.0, 1.0, 1.0)
    refraction_ratio = _refraction_ratio(ior, front_face)

    unit_direction = normalize(incident_direction)
    cos_theta = tm.min(-tm.dot(unit_direction, normal), 1.0)
    sin_theta = ti.sqrt(tm.max(1.0 - cos_theta * cos_theta, 0.0))

    cannot_refract = refraction_ratio * sin_theta > 1.0

    scattered_direction = vec3(0.0, 0.0, 0.0)
    if cannot_refract:
        scattered_direction = reflect(unit_direction, normal)
    elif ti.random(real) < schlick_reflectance(cos_theta, refraction_ratio):
        scattered_direction = reflect(unit_direction, normal)
    else:
        scattered_direction = refract(unit_direction, normal, refraction_ratio)

    return scattered_direction, attenuation, 1


@ti.func
def cannot_refract(
    ior: real,
    incident_direction: vec3,
    normal: vec3,
    front_face: ti.i32,
) -> ti.i32:
    """Determine if the ray is totally internally reflected.

    Args:
        ior: Index of refraction of the material.
        incident_direction: The incoming ray direction.
        normal: The surface normal, oriented against the incoming ray.
        front_face: 1 if hitting the outside of the surface, 0 otherwise.

    Returns:
        1 if total internal reflection will occur, 0 otherwise.
    """
    refraction_ratio = _refraction_ratio(ior, front_face)
    unit_direction = normalize(incident_direction)
    cos_theta = tm.min(-tm.dot(unit_direction, normal), 1.0)
    sin_theta = ti.sqrt(tm.max(1.0 - cos_theta * cos_theta, 0.0))
    return 1 if refraction_ratio * sin_theta > 1.0 else 0


@ti.func
def fresnel_reflectance(
    ior: real,
    incident_direction: vec3,
    normal: vec3,
    front_face: ti.i32,
) -> real:
    """Compute the Schlick reflectance for a ray hitting the surface.

    Args:
        ior: Index of refraction of the material.
        incident_direction: The incoming ray direction.
        normal: The surface normal, oriented against the incoming ray.
        front_face: 1 if hitting the outside of the surface, 0 otherwise.

    Returns:
        The reflectance in [0, 1].
    """
    refraction_ratio = _refraction_ratio(ior, front_face)
    cos_theta = tm.min(-tm.dot(normalize(incident_direction), normal), 1.0)
    return schlick_reflectance(cos_theta, refraction_ratio)


# =============================================================================
# Material Field Storage (for scene-level material management)
# =============================================================================

# Maximum number of dielectric materials in the scene
MAX_DIELECTRIC_MATERIALS = 1024

# Storage for dielectric material properties
dielectric_iors = ti.field(dtype=real, shape=MAX_DIELECTRIC_MATERIALS)
num_dielectric_materials = ti.field(dtype=ti.i32, shape=())


def clear_dielectric_materials() -> None:
    """Clear all dielectric materials.

    Resets the material count to zero. Existing data in the field will be
    overwritten when new materials are added.
    """
    num_dielectric_materials[None] = 0


def add_dielectric_material(ior: float = 1.5) -> int:
    """Add a dielectric material to the material registry.

    Args:
        ior: Index of refraction. Default is 1.5 (typical glass).
            Must be positive.

    Returns:
        The index of the added material.

    Raises:
        RuntimeError: If the maximum number of materials is exceeded.
        ValueError: If the index of refraction is not positive.
    """
    if not ior > 0.0:
        raise ValueError(
            f"Index of refraction = {ior} is not positive. "
            "A dielectric needs a refractive index greater than 0."
        )

    idx = num_dielectric_materials[None]
    if idx >= MAX_DIELECTRIC_MATERIALS:
        raise RuntimeError(
            f"Maximum number of dielectric materials ({MAX_DIELECTRIC_MATERIALS}) exceeded"
        )

    dielectric_iors[idx] = ior
    num_dielectric_materials[None] = idx + 1
    return idx


def get_dielectric_material_count() -> int:
    """Get the number of dielectric materials in the registry."""
    return int(num_dielectric_materials[None])


@ti.func
def get_dielectric_ior(material_idx: ti.i32) -> real:
    """Get the index of refraction for a dielectric material by index."""
    return dielectric_iors[material_idx]


@ti.func
def scatter_dielectric_by_id(
    material_idx: ti.i32,
    incident_direction: vec3,
    normal: vec3,
    front_face: ti.i32,
):
    """Scatter off a registered dielectric material.

    Args:
        material_idx: The index of the material in the registry.
        incident_direction: The incoming ray direction.
        normal: The surface normal at the hit point (unit length).
        front_face: 1 if hitting the outside of the surface, 0 otherwise.

    Returns:
        A tuple of (scattered_direction, attenuation, did_scatter).
    """
    ior = get_dielectric_ior(material_idx)
    return scatter_dielectric(ior, incident_direction, normal, front_face)
