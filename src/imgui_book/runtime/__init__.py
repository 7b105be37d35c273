"""Support code imported by generated harness modules."""

from __future__ import annotations

from .context import FONT_TEXTURE_ID, HeadlessContext
from .raster import SoftwareRenderer, Triangle, Vertex, iter_triangles


__all__ = [
    "FONT_TEXTURE_ID",
    "HeadlessContext",
    "SoftwareRenderer",
    "Triangle",
    "Vertex",
    "iter_triangles",
]
