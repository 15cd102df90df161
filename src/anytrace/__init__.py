"""Progressive (anytime) Monte-Carlo path tracer.

The renderer refines an image one pixel at a time in a shuffled order, so a
usable preview exists after the first pass and keeps improving for as long as
the caller keeps asking for work. Pixels whose color stops changing are
frozen and skipped.

Subpackages:
    core: Vector math, light transport, pixel cache, scheduler and renderer
    geometry: Shape abstraction and spheres
    materials: Lambertian, metal, dielectric and texture materials
    scene: Scene container, ray-scene intersection and demo scenes
    camera: Look-at pinhole camera
    preview: Frame buffer, PNG export, Matplotlib and Taichi GGUI hosts
"""

__version__ = "0.1.0"
