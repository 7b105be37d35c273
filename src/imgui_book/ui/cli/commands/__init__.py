"""CLI command implementations exposed via `imgui_book.ui.cli`."""

from __future__ import annotations

from .generate import generate
from .list import list_examples
from .run import run


__all__ = ["generate", "list_examples", "run"]
