"""Taichi-based path tracer for small sphere scenes lit by ambient light.

This package provides GPU-accelerated ray tracing using Taichi, with support for:
- A bounded-depth radiance estimator with a constant ambient term
- Lambertian, metal, dielectric and procedural swirl materials
- Spheres, moon spheres and a triangle primitive
- A thin lens camera with depth of field
- Progressive rendering with PPM and PNG output

Subpackages:
    core: Ray utilities, radiance estimator and rendering loop
    geometry: Shape primitives and intersection algorithms
    materials: Surface scattering models
    scene: Scene storage, scene manager and the night scene
    camera: Thin lens camera with ray generation
    preview: Image output and preview utilities
"""

__version__ = "0.1.0"
