"""List the examples found in a book."""

from __future__ import annotations

from pathlib import Path

import typer

from imgui_book.adapters.mdbook import collect_registry, load_book_layout
from imgui_book.core.exceptions import ExampleBookError
from imgui_book.core.tags import ExampleTags

from .._options import BookRootOption
from ..state import emit_error, get_cli_state


_FLAGS = ("ignore", "no_run", "should_panic", "hide_code", "hide_output")


def _format_flags(tags: ExampleTags) -> str:
    flags = [flag for flag in _FLAGS if getattr(tags, flag)]
    return ", ".join(flags) if flags else "-"


def list_examples(book: BookRootOption = Path(".")) -> None:
    """Print a table of every example block in traversal order."""
    from rich import box
    from rich.table import Table

    try:
        registry = collect_registry(load_book_layout(book))
    except ExampleBookError as exc:
        emit_error(str(exc), exception=exc)
        raise typer.Exit(code=1) from exc

    table = Table(
        title="Examples",
        box=box.SQUARE,
        show_edge=True,
        header_style="bold cyan",
    )
    table.add_column("Identifier", style="magenta")
    table.add_column("Name", style="green")
    table.add_column("Tags")
    table.add_column("Lines", justify="right")

    if not len(registry):
        table.add_row("-", "-", "-", "No examples found")
    for snippet in registry:
        table.add_row(
            snippet.identifier,
            snippet.tags.name or "-",
            _format_flags(snippet.tags),
            str(snippet.code.count("\n")),
        )
    get_cli_state().console.print(table)


__all__ = ["list_examples"]
