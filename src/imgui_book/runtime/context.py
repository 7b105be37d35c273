"""Minimal headless imgui context used by generated harnesses."""

from __future__ import annotations

import logging
from pathlib import Path
from types import TracebackType
from typing import Any

from PIL import Image

from imgui_book.core.exceptions import ArtifactError

from .raster import SoftwareRenderer, iter_triangles


FONT_TEXTURE_ID = 1
_log = logging.getLogger(__name__)


class HeadlessContext:
    """Own an imgui context without any window or GPU backend.

    Entering the context creates it, disables ini persistence, places a
    synthetic cursor and builds the default font atlas once. Leaving destroys
    it, including when the example raised.
    """

    def __init__(
        self,
        width: int = 500,
        height: int = 500,
        *,
        cursor: tuple[float, float] = (200.0, 50.0),
        background: tuple[int, int, int, int] = (89, 89, 89, 255),
    ) -> None:
        self.width = width
        self.height = height
        self.cursor = cursor
        self.background = background
        self.font_texture: Image.Image | None = None
        self.imgui: Any = None
        self._context: Any = None
        self._renderer = SoftwareRenderer()

    def __enter__(self) -> HeadlessContext:
        import imgui

        self._context = imgui.create_context()
        imgui.set_current_context(self._context)

        io = imgui.get_io()
        io.ini_file_name = ""
        io.mouse_draw_cursor = True
        io.mouse_pos = self.cursor
        io.display_size = (self.width, self.height)
        io.display_fb_scale = (1.0, 1.0)

        style = imgui.get_style()
        style.anti_aliased_lines = False
        style.anti_aliased_fill = False

        io.fonts.add_font_default()
        tex_width, tex_height, pixels = io.fonts.get_tex_data_as_rgba32()
        self.font_texture = Image.frombytes("RGBA", (tex_width, tex_height), pixels)
        io.fonts.texture_id = FONT_TEXTURE_ID
        self._renderer = SoftwareRenderer({FONT_TEXTURE_ID: self.font_texture})
        self.imgui = imgui
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        if self._context is not None:
            self.imgui.destroy_context(self._context)
            self._context = None

    def new_frame(self, delta: float) -> None:
        self.imgui.get_io().delta_time = delta
        self.imgui.new_frame()

    def render(self) -> Any:
        self.imgui.render()
        return self.imgui.get_draw_data()

    def rasterize(self, draw_data: Any) -> Image.Image:
        canvas = Image.new("RGBA", (self.width, self.height), self.background)
        return self._renderer.render(canvas, iter_triangles(draw_data))

    def save(self, draw_data: Any, path: Path) -> Path:
        """Rasterize ``draw_data`` and write it as a PNG file at ``path``."""
        if not path.parent.is_dir():
            raise ArtifactError("output directory does not exist", path.parent)
        image = self.rasterize(draw_data)
        try:
            image.save(path, format="PNG")
        except OSError as exc:
            raise ArtifactError("unable to write artifact", path) from exc
        _log.debug("Saved %s", path)
        return path


__all__ = ["FONT_TEXTURE_ID", "HeadlessContext"]
