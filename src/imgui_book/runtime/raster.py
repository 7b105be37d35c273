"""Software rasterizer turning imgui draw data into Pillow images.

Triangles are drawn one at a time: a polygon mask restricts a tile that is
either a flat colour (solid fills, whose UVs all point at the atlas' white
pixel) or an affine-mapped region of the texture tinted by the vertex colour
(glyphs). Tiles are alpha-composited onto the canvas in draw order.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping, Sequence
import ctypes
from dataclasses import dataclass
import math
import struct
from typing import Any

from PIL import Image, ImageChops, ImageDraw


Color = tuple[int, int, int, int]
ClipRect = tuple[float, float, float, float]


@dataclass(frozen=True, slots=True)
class Vertex:
    x: float
    y: float
    u: float
    v: float
    color: Color


@dataclass(frozen=True, slots=True)
class Triangle:
    vertices: tuple[Vertex, Vertex, Vertex]
    clip: ClipRect
    texture_id: int | None = None


def _read_vertices(address: int, count: int) -> list[Vertex]:
    import imgui

    stride = imgui.VERTEX_SIZE
    raw = ctypes.string_at(address, count * stride)
    vertices: list[Vertex] = []
    for index in range(count):
        base = index * stride
        x, y = struct.unpack_from("<2f", raw, base + imgui.VERTEX_BUFFER_POS_OFFSET)
        u, v = struct.unpack_from("<2f", raw, base + imgui.VERTEX_BUFFER_UV_OFFSET)
        color = struct.unpack_from("<4B", raw, base + imgui.VERTEX_BUFFER_COL_OFFSET)
        vertices.append(Vertex(x, y, u, v, color))
    return vertices


def _read_indices(address: int, count: int) -> Sequence[int]:
    import imgui

    code = "H" if imgui.INDEX_SIZE == 2 else "I"
    raw = ctypes.string_at(address, count * imgui.INDEX_SIZE)
    return struct.unpack(f"<{count}{code}", raw)


def iter_triangles(draw_data: Any) -> Iterator[Triangle]:
    """Yield the triangles of an ``imgui`` draw data object in draw order."""
    for commands in draw_data.commands_lists:
        vertices = _read_vertices(commands.vtx_buffer_data, commands.vtx_buffer_size)
        indices = _read_indices(commands.idx_buffer_data, commands.idx_buffer_size)
        offset = 0
        for command in commands.commands:
            clip = tuple(command.clip_rect)
            for index in range(offset, offset + command.elem_count - 2, 3):
                yield Triangle(
                    (
                        vertices[indices[index]],
                        vertices[indices[index + 1]],
                        vertices[indices[index + 2]],
                    ),
                    clip,  # type: ignore[arg-type]
                    command.texture_id,
                )
            offset += command.elem_count


def _average_color(vertices: Sequence[Vertex]) -> Color:
    channels = zip(*(vertex.color for vertex in vertices))
    return tuple(round(sum(values) / len(vertices)) for values in channels)  # type: ignore[return-value]


def _modulate(texel: Sequence[int], color: Color) -> Color:
    return tuple(t * c // 255 for t, c in zip(texel, color))  # type: ignore[return-value]


def _uniform_uv(vertices: Sequence[Vertex]) -> bool:
    first = vertices[0]
    return all(vertex.u == first.u and vertex.v == first.v for vertex in vertices[1:])


def _sample(texture: Image.Image, u: float, v: float) -> Color:
    width, height = texture.size
    x = min(max(int(u * width), 0), width - 1)
    y = min(max(int(v * height), 0), height - 1)
    return texture.getpixel((x, y))  # type: ignore[return-value]


def affine_coefficients(
    points: Sequence[tuple[float, float]], targets: Sequence[tuple[float, float]]
) -> tuple[float, float, float, float, float, float] | None:
    """Return Pillow ``AFFINE`` data mapping ``points`` onto ``targets``.

    ``None`` is returned for degenerate (zero area) triangles.
    """
    (x0, y0), (x1, y1), (x2, y2) = points
    dx1, dy1, dx2, dy2 = x1 - x0, y1 - y0, x2 - x0, y2 - y0
    det = dx1 * dy2 - dx2 * dy1
    if abs(det) < 1e-9:
        return None

    coefficients: list[float] = []
    for axis in (0, 1):
        t0, t1, t2 = (target[axis] for target in targets)
        a = ((t1 - t0) * dy2 - (t2 - t0) * dy1) / det
        b = (dx1 * (t2 - t0) - dx2 * (t1 - t0)) / det
        coefficients.extend((a, b, t0 - a * x0 - b * y0))
    return tuple(coefficients)  # type: ignore[return-value]


class SoftwareRenderer:
    """Rasterize triangles onto an RGBA canvas."""

    def __init__(self, textures: Mapping[int, Image.Image] | None = None) -> None:
        self.textures = dict(textures or {})

    def render(self, canvas: Image.Image, triangles: Iterable[Triangle]) -> Image.Image:
        for triangle in triangles:
            self.draw_triangle(canvas, triangle)
        return canvas

    def draw_triangle(self, canvas: Image.Image, triangle: Triangle) -> None:
        vertices = triangle.vertices
        xs = [vertex.x for vertex in vertices]
        ys = [vertex.y for vertex in vertices]
        clip_left, clip_top, clip_right, clip_bottom = triangle.clip
        left = max(math.floor(min(xs)), math.floor(clip_left), 0)
        top = max(math.floor(min(ys)), math.floor(clip_top), 0)
        right = min(math.ceil(max(xs)), math.ceil(clip_right), canvas.width)
        bottom = min(math.ceil(max(ys)), math.ceil(clip_bottom), canvas.height)
        if right <= left or bottom <= top:
            return

        size = (right - left, bottom - top)
        local = [(vertex.x - left, vertex.y - top) for vertex in vertices]
        mask = Image.new("L", size, 0)
        ImageDraw.Draw(mask).polygon(local, fill=255)

        color = _average_color(vertices)
        texture = self.textures.get(triangle.texture_id) if triangle.texture_id else None
        if texture is None:
            tile = Image.new("RGBA", size, color)
        elif _uniform_uv(vertices):
            texel = _sample(texture, vertices[0].u, vertices[0].v)
            tile = Image.new("RGBA", size, _modulate(texel, color))
        else:
            width, height = texture.size
            targets = [(vertex.u * width, vertex.v * height) for vertex in vertices]
            coefficients = affine_coefficients(local, targets)
            if coefficients is None:
                return
            tile = texture.transform(
                size,
                Image.Transform.AFFINE,
                coefficients,
                resample=Image.Resampling.NEAREST,
            )
            tile = ImageChops.multiply(tile, Image.new("RGBA", size, color))

        tile.putalpha(ImageChops.multiply(tile.getchannel("A"), mask))
        canvas.alpha_composite(tile, dest=(left, top))


__all__ = [
    "SoftwareRenderer",
    "Triangle",
    "Vertex",
    "affine_coefficients",
    "iter_triangles",
]
