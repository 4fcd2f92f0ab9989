"""Ray color integrator and scanline sampling kernels.

This module implements the light transport for the sphere world: a camera ray
bounces from surface to surface, each material scattering it and attenuating
its color, until it escapes to the sky, gets absorbed, or runs out of bounces.

The recursion of the classic formulation is expressed as a bounded loop over
an explicit bounce budget. The budget is a kernel argument, so the limit is
a first-class parameter rather than a compile-time constant:

    depth == 0          -> black
    hit, absorbed       -> black
    hit, scattered      -> attenuation * ray_color(scattered, depth - 1)
    miss                -> sky gradient

Rendering happens one scanline at a time. Each kernel launch samples every
pixel of one row in parallel, sums `samples` jittered rays per pixel and
quantizes the sum into 8-bit channels.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from rayweekend.core.integrator import render_scanline, get_scanline_pixels
    >>> from rayweekend.scene.random_scene import create_ground_scene
    >>> from rayweekend.camera.thin_lens import setup_camera
    >>>
    >>> scene, camera = create_ground_scene()
    >>> setup_camera(camera)
    >>> render_scanline(row=99, width=150, height=100, samples=10, max_depth=50)
    >>> pixels = get_scanline_pixels(150)
"""

import math

import numpy as np
import taichi as ti
import taichi.math as tm

from rayweekend.camera.thin_lens import get_ray, get_ray_jittered
from rayweekend.core.ray import format_color, ivec3, normalize, real, vec3
from rayweekend.materials.dielectric import scatter_dielectric_by_id
from rayweekend.materials.lambertian import scatter_lambertian_by_id
from rayweekend.materials.metal import scatter_metal_by_id
from rayweekend.scene.intersection import intersect_scene
from rayweekend.scene.manager import (
    MaterialType,
    get_material_type,
    get_material_type_index,
)

# =============================================================================
# Rendering Constants
# =============================================================================

# Intersection interval; the lower bound keeps scattered rays from
# re-hitting the surface they leave
T_MIN = 0.001
T_MAX = math.inf

# Sky gradient endpoints (bottom to top)
SKY_HORIZON_COLOR = vec3(1.0, 1.0, 1.0)
SKY_ZENITH_COLOR = vec3(0.5, 0.7, 1.0)

# =============================================================================
# Scanline Buffers
# =============================================================================

# Maximum supported image width (preallocated to avoid kernel recompilation)
MAX_IMAGE_WIDTH = 8192

# Summed sample colors of the current scanline
_scanline_colors = ti.Vector.field(3, dtype=real, shape=MAX_IMAGE_WIDTH)

# Quantized 8-bit channels of the current scanline
_scanline_pixels = ti.Vector.field(3, dtype=ti.i32, shape=MAX_IMAGE_WIDTH)

# Number of pixels in the current scanline whose color sum is NaN or infinite
_nonfinite_count = ti.field(dtype=ti.i32, shape=())


def check_image_width(width: int) -> None:
    """Raise RuntimeError if a scanline of `width` pixels does not fit the buffers."""
    if width > MAX_IMAGE_WIDTH:
        raise RuntimeError(
            f"Image width {width} exceeds maximum supported width ({MAX_IMAGE_WIDTH})"
        )


# =============================================================================
# Sky and Material Dispatch
# =============================================================================


@ti.func
def sky_color(direction: vec3) -> vec3:
    """Background color seen by a ray that escapes the world.

    Blends white at the horizon into light blue overhead, using the height
    of the unit direction.
    """
    unit_direction = normalize(direction)
    t = 0.5 * (unit_direction.y + 1.0)
    return (1.0 - t) * SKY_HORIZON_COLOR + t * SKY_ZENITH_COLOR


@ti.func
def _scatter_material(
    material_id: ti.i32,
    incident_direction: vec3,
    normal: vec3,
    front_face: ti.i32,
):
    """Dispatch to the appropriate material scattering function.

    Args:
        material_id: The unified material ID.
        incident_direction: The incoming ray direction.
        normal: The surface normal, oriented against the incoming ray.
        front_face: 1 if hit front face, 0 if back face.

    Returns:
        A tuple of (scattered_direction, attenuation, did_scatter). Unknown
        material IDs absorb the ray.
    """
    mat_type = get_material_type(material_id)
    type_index = get_material_type_index(material_id)

    scattered_direction = vec3(0.0, 0.0, 0.0)
    attenuation = vec3(0.0, 0.0, 0.0)
    did_scatter = 0

    if mat_type == int(MaterialType.LAMBERTIAN):
        scattered_direction, attenuation, did_scatter = scatter_lambertian_by_id(
            type_index, normal
        )
    elif mat_type == int(MaterialType.METAL):
        scattered_direction, attenuation, did_scatter = scatter_metal_by_id(
            type_index, incident_direction, normal
        )
    elif mat_type == int(MaterialType.DIELECTRIC):
        scattered_direction, attenuation, did_scatter = scatter_dielectric_by_id(
            type_index, incident_direction, normal, front_face
        )

    return scattered_direction, attenuation, did_scatter


# =============================================================================
# Light Transport
# =============================================================================


@ti.func
def ray_color(origin: vec3, direction: vec3, depth: ti.i32) -> vec3:
    """Compute the color carried back along a ray.

    Args:
        origin: The ray origin.
        direction: The ray direction (any non-zero length).
        depth: Remaining bounce budget. 0 yields black.

    Returns:
        The color for this ray sample.
    """
    color = vec3(0.0, 0.0, 0.0)
    throughput = vec3(1.0, 1.0, 1.0)
    ray_origin = origin
    ray_direction = direction

    # Taichi has no break inside ti.func loops, so a flag ends the path
    active = 1

    for _ in range(depth):
        if active == 1:
            rec = intersect_scene(ray_origin, ray_direction, T_MIN, T_MAX)

            if rec.hit == 0:
                color = throughput * sky_color(ray_direction)
                active = 0
            else:
                scattered_direction, attenuation, did_scatter = _scatter_material(
                    rec.material_id, ray_direction, rec.normal, rec.front_face
                )
                if did_scatter == 0:
                    active = 0
                else:
                    throughput *= attenuation
                    ray_origin = rec.point
                    ray_direction = scattered_direction

    return color


@ti.func
def sample_pixel(pixel_i: ti.i32, pixel_j: ti.i32, width: ti.i32, height: ti.i32,
                 samples: ti.i32, max_depth: ti.i32) -> vec3:
    """Sum `samples` jittered ray colors for pixel (i, j), j = 0 being the bottom row."""
    color_sum = vec3(0.0, 0.0, 0.0)
    for _ in range(samples):
        ray = get_ray_jittered(pixel_i, pixel_j, width, height)
        color_sum += ray_color(ray.origin, ray.direction, max_depth)
    return color_sum


# =============================================================================
# Rendering Kernels
# =============================================================================


@ti.kernel
def _render_scanline(row: ti.i32, width: ti.i32, height: ti.i32,
                     samples: ti.i32, max_depth: ti.i32):
    """Sample and quantize every pixel of one scanline.

    The loop over columns is the outermost loop, so Taichi runs it in
    parallel.
    """
    _nonfinite_count[None] = 0
    for i in range(width):
        color_sum = sample_pixel(i, row, width, height, samples, max_depth)
        _scanline_colors[i] = color_sum

        finite = 1
        for c in ti.static(range(3)):
            if tm.isnan(color_sum[c]) or tm.isinf(color_sum[c]):
                finite = 0
        if finite == 0:
            ti.atomic_add(_nonfinite_count[None], 1)

        _scanline_pixels[i] = format_color(color_sum, samples)


@ti.kernel
def _trace_ray(origin: vec3, direction: vec3, depth: ti.i32) -> vec3:
    result = vec3(0.0, 0.0, 0.0)
    # Single-iteration loop keeps the bounce loop out of the parallel outer scope
    for _ in range(1):
        result = ray_color(origin, direction, depth)
    return result


@ti.kernel
def _camera_ray_color(s: real, t: real, depth: ti.i32) -> vec3:
    result = vec3(0.0, 0.0, 0.0)
    for _ in range(1):
        ray = get_ray(s, t)
        result = ray_color(ray.origin, ray.direction, depth)
    return result


@ti.kernel
def _sky_color(direction: vec3) -> vec3:
    return sky_color(direction)


@ti.kernel
def _format_color(color_sum: vec3, samples: ti.i32) -> ivec3:
    return format_color(color_sum, samples)


# =============================================================================
# Public Rendering API
# =============================================================================


def render_scanline(row: int, width: int, height: int, samples: int, max_depth: int) -> None:
    """Render scanline `row` (0 = bottom) of a width x height image.

    The result stays in the scanline buffers until the next call; read it
    with get_scanline_pixels() or get_scanline_colors().

    Raises:
        RuntimeError: If the width exceeds MAX_IMAGE_WIDTH.
        FloatingPointError: If any pixel's accumulated color is not finite.
    """
    check_image_width(width)
    _render_scanline(row, width, height, samples, max_depth)

    bad_pixels = int(_nonfinite_count[None])
    if bad_pixels > 0:
        raise FloatingPointError(
            f"Non-finite color accumulated in {bad_pixels} pixel(s) of scanline {row}"
        )


def get_scanline_pixels(width: int) -> np.ndarray:
    """Get the quantized pixels of the last rendered scanline.

    Returns:
        A (width, 3) uint8 array, left to right.
    """
    return _scanline_pixels.to_numpy()[:width].astype(np.uint8)


def get_scanline_colors(width: int) -> np.ndarray:
    """Get the summed sample colors of the last rendered scanline as a (width, 3) array."""
    return _scanline_colors.to_numpy()[:width]


def trace_ray(
    origin: tuple[float, float, float],
    direction: tuple[float, float, float],
    depth: int,
) -> tuple[float, float, float]:
    """Compute ray_color for a single ray from Python.

    Useful for testing and debugging; production rendering goes through
    render_scanline().
    """
    color = _trace_ray(ti.Vector(origin), ti.Vector(direction), depth)
    return (float(color[0]), float(color[1]), float(color[2]))


def trace_camera_ray(s: float, t: float, depth: int) -> tuple[float, float, float]:
    """Compute ray_color for the camera ray through image coordinates (s, t)."""
    color = _camera_ray_color(s, t, depth)
    return (float(color[0]), float(color[1]), float(color[2]))


def get_sky_color(direction: tuple[float, float, float]) -> tuple[float, float, float]:
    """Evaluate the sky gradient for a direction from Python."""
    color = _sky_color(ti.Vector(direction))
    return (float(color[0]), float(color[1]), float(color[2]))


def quantize_color(color_sum: tuple[float, float, float], samples: int) -> tuple[int, int, int]:
    """Apply format_color to a summed color from Python."""
    rgb = _format_color(ti.Vector(color_sum), samples)
    return (int(rgb[0]), int(rgb[1]), int(rgb[2]))
