"""Generation phase: scan the book and write the harness module."""

from __future__ import annotations

from pathlib import Path

import typer

from imgui_book.adapters.mdbook import collect_registry, load_book_layout
from imgui_book.core.exceptions import ExampleBookError
from imgui_book.core.harness import write_harness
from imgui_book.core.registry import SnippetRegistry

from .._options import BookRootOption, HarnessOption, RegistryOption
from ..state import emit_error, get_cli_state


def _print_summary(registry: SnippetRegistry, harness_path: Path) -> None:
    from rich import box
    from rich.table import Table

    table = Table(box=box.SIMPLE, header_style="bold cyan", show_edge=False)
    table.add_column("Examples", justify="right")
    table.add_column("Harnesses", justify="right")
    table.add_column("Ignored", justify="right")
    table.add_column("Module")
    runnable = len(registry.runnable)
    table.add_row(str(len(registry)), str(runnable), str(len(registry) - runnable), str(harness_path))
    get_cli_state().console.print(table)


def generate(
    book: BookRootOption = Path("."),
    harness: HarnessOption = None,
    registry_path: RegistryOption = None,
) -> None:
    """Scan every chapter of the book and write the example harness module."""
    try:
        layout = load_book_layout(book)
        registry = collect_registry(layout)
        target = harness or layout.harness_path
        write_harness(
            registry,
            target,
            canvas=layout.config.canvas,
            registry_path=registry_path or layout.registry_path,
        )
    except ExampleBookError as exc:
        emit_error(str(exc), exception=exc)
        raise typer.Exit(code=1) from exc

    _print_summary(registry, target)


__all__ = ["generate"]
