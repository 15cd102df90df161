"""Materials module.

Every material answers two questions at a hit point:
    - scatter(): the local color contributed to the path
    - bounce(): the continuation ray, or None to end the path

Components:
    material: Material base class and the fixed ambient light
    lambertian: Ideal diffuse reflection
    metal: Mirror reflection with optional fuzz
    dielectric: Glass-like refraction with Schlick reflectance
    texture: Image mapped onto the shape, ends the path
"""

from .dielectric import Dielectric
from .lambertian import Lambertian
from .material import LIGHT_COLOR, LIGHT_INTENSITY, Material
from .metal import Metal
from .texture import Texture

__all__ = [
    "Material",
    "LIGHT_COLOR",
    "LIGHT_INTENSITY",
    "Lambertian",
    "Metal",
    "Dielectric",
    "Texture",
]
