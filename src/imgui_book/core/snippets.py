"""Snippet records discovered in book chapters."""

from __future__ import annotations

from dataclasses import dataclass

from .tags import ExampleTags


HIDDEN_LINE_MARKER = "#"


def clean_code(code: str, marker: str = HIDDEN_LINE_MARKER) -> str:
    """Strip the hidden-line marker and normalise line endings.

    Lines starting with ``marker`` lose the marker and the whitespace that
    follows it; every line ends with a newline.
    """
    lines: list[str] = []
    for line in code.splitlines():
        if marker and line.startswith(marker):
            line = line[len(marker) :].lstrip()
        lines.append(f"{line}\n")
    return "".join(lines)


@dataclass(frozen=True, slots=True)
class Snippet:
    """One example region, immutable once scanned."""

    identifier: str
    code: str
    tags: ExampleTags

    @property
    def function_name(self) -> str:
        return f"imgui_example_{self.identifier}"

    @property
    def output_filename(self) -> str:
        return f"{self.identifier}.png"


__all__ = ["HIDDEN_LINE_MARKER", "Snippet", "clean_code"]
