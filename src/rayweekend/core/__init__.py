"""Core rendering module.

This module contains the fundamental building blocks for ray tracing:

Components:
    ray: Ray data structure, vector math and random sampling utilities
    integrator: Bounded light transport (ray_color) and scanline kernels
    renderer: Scanline render driver with progress and cancellation

The core module implements Monte Carlo ray tracing with a hard bounce budget,
per-pixel supersampling for anti-aliasing and gamma-2 output formatting.

All compute-intensive operations use Taichi kernels.
"""

from .ray import (
    Ray,
    cross,
    dot,
    format_color,
    ivec3,
    length,
    length_squared,
    make_ray,
    near_zero,
    normalize,
    random_in_range,
    random_in_unit_disk,
    random_in_unit_sphere,
    random_unit_vector,
    ray_at,
    real,
    reflect,
    refract,
    schlick_reflectance,
    vec3,
)

# Note: integrator and renderer are NOT imported here because they declare
# Taichi fields at import time. Import them directly once Taichi is initialized:
#   from rayweekend.core.renderer import ScanlineRenderer

__all__ = [
    "Ray",
    "ray_at",
    "make_ray",
    "real",
    "vec3",
    "ivec3",
    "length",
    "length_squared",
    "normalize",
    "dot",
    "cross",
    "reflect",
    "refract",
    "schlick_reflectance",
    "near_zero",
    "random_in_range",
    "random_in_unit_sphere",
    "random_unit_vector",
    "random_in_unit_disk",
    "format_color",
]
