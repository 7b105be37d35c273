"""Configuration models read from the ``[preprocessor.imgui-examples]`` table.

CanvasConfig

`width`, `height` (`int`)
: Size of the headless canvas every example is rendered onto.

`frames` (`int`)
: Number of simulated frames; the last one is rasterized.

`frame_delta` (`float`)
: Simulated time in seconds advanced before each frame.

`cursor` (`tuple[float, float]`)
: Synthetic mouse position, drawn with the software cursor.

`background` (`tuple[int, int, int, int]`)
: RGBA colour the pixel buffer is filled with before rendering.

ExamplesConfig

`harness` (`Path`)
: Location of the generated harness module, relative to the book root.

`registry` (`Path | None`)
: Optional sidecar registry file. When omitted the registry embedded in the
  harness module is used.

`image_dir` (`str`)
: Directory inside the book source where artifacts are written.

`code_language` (`str`)
: Info string of the code blocks echoed back into chapters.

`hidden_line_marker` (`str`)
: Line prefix stripped from example code before it is run and displayed.
"""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .exceptions import ConfigError


PREPROCESSOR_NAME = "imgui-examples"


class CanvasConfig(BaseModel):
    """Headless rendering parameters shared by every generated harness."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    width: int = Field(default=500, gt=0)
    height: int = Field(default=500, gt=0)
    frames: int = Field(default=2, ge=1)
    frame_delta: float = Field(default=0.02, gt=0)
    cursor: tuple[float, float] = (200.0, 50.0)
    background: tuple[int, int, int, int] = (89, 89, 89, 255)

    @field_validator("background")
    @classmethod
    def _check_channels(cls, value: tuple[int, int, int, int]) -> tuple[int, int, int, int]:
        if any(channel < 0 or channel > 255 for channel in value):
            raise ValueError("background channels must be within 0..255")
        return value


class ExamplesConfig(BaseModel):
    """Preprocessor table taken from ``book.toml``."""

    model_config = ConfigDict(extra="forbid")

    harness: Path = Path("target/imgui_examples.py")
    registry: Path | None = None
    image_dir: str = "_generated"
    code_language: str = "python"
    hidden_line_marker: str = "#"
    canvas: CanvasConfig = Field(default_factory=CanvasConfig)

    # Keys interpreted by mdBook itself.
    command: str | None = None
    renderers: list[str] | None = None
    before: list[str] | None = None
    after: list[str] | None = None
    optional: bool | None = None

    def resolve(self, root: Path, value: Path) -> Path:
        """Resolve a configured path against the book root."""
        return value if value.is_absolute() else root / value


def examples_config_from_book(book_config: Mapping[str, Any] | None) -> ExamplesConfig:
    """Extract and validate the preprocessor table from a parsed book configuration."""
    table: Any = {}
    if book_config:
        preprocessors = book_config.get("preprocessor") or {}
        if isinstance(preprocessors, Mapping):
            table = preprocessors.get(PREPROCESSOR_NAME) or {}
    if not isinstance(table, Mapping):
        raise ConfigError(f"[preprocessor.{PREPROCESSOR_NAME}] must be a table")
    try:
        return ExamplesConfig.model_validate(dict(table))
    except ValidationError as exc:
        raise ConfigError(f"invalid [preprocessor.{PREPROCESSOR_NAME}] table: {exc}") from exc


__all__ = [
    "PREPROCESSOR_NAME",
    "CanvasConfig",
    "ExamplesConfig",
    "examples_config_from_book",
]
