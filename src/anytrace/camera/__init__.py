"""Camera module.

Components:
    pinhole: Look-at pinhole camera with move and rotate helpers
"""

from .pinhole import Camera

__all__ = ["Camera"]
