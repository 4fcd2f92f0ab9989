"""Taichi-based sphere ray tracer.

Renders a procedurally generated field of spheres by recursively tracing light
rays, with support for:
- Diffuse (Lambertian), metal and glass (dielectric) materials
- A thin-lens camera with depth of field
- Monte Carlo anti-aliasing via jittered supersampling
- Gamma-corrected plain-text (PPM P3) output

Subpackages:
    core: Vector math, ray utilities, the light transport kernel and the render driver
    geometry: Sphere primitive and ray-sphere intersection
    materials: Lambertian, metal and dielectric scattering models
    scene: World storage, material registry and scene builders
    camera: Thin-lens camera with ray generation
    output: Plain-text pixel stream serialization
"""

__version__ = "0.1.0"
