"""Run generated harnesses without building the book."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer

from imgui_book.adapters.mdbook import load_book_layout, load_registry
from imgui_book.core.exceptions import ArtifactError, ExampleBookError, UnknownSnippetError
from imgui_book.core.harness import load_harness
from imgui_book.core.weaver import run_snippet

from .._options import OUTPUT_PANEL, BookRootOption, HarnessOption
from ..diagnostics import CliEmitter
from ..state import get_cli_state


ExampleOption = Annotated[
    list[str] | None,
    typer.Option(
        "--example",
        "-e",
        help="Identifier of an example to render. Repeat to select several.",
    ),
]

OutputOption = Annotated[
    Path | None,
    typer.Option(
        "--output",
        "-o",
        help="Directory receiving the PNG artifacts. Defaults to the book's image directory.",
        file_okay=False,
        resolve_path=True,
        rich_help_panel=OUTPUT_PANEL,
    ),
]


def run(
    book: BookRootOption = Path("."),
    harness: HarnessOption = None,
    example: ExampleOption = None,
    output: OutputOption = None,
) -> None:
    """Render examples through the generated harness module."""
    state = get_cli_state()
    emitter = CliEmitter(state)
    try:
        layout = load_book_layout(book)
        module = load_harness(harness or layout.harness_path)
        registry = load_registry(layout, module)

        if example:
            selected = []
            for identifier in example:
                snippet = registry.get(identifier)
                if snippet is None:
                    raise UnknownSnippetError(identifier)
                selected.append(snippet)
        else:
            selected = registry.runnable

        directory = output or layout.image_dir
        try:
            directory.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise ArtifactError("unable to create output directory", directory) from exc

        for snippet in selected:
            run_snippet(snippet, module.invoke, directory, emitter=emitter)
    except ExampleBookError as exc:
        emitter.error(str(exc), exc)
        raise typer.Exit(code=1) from exc

    rendered = state.consume_events("snippet_invoked")
    state.console.print(f"Rendered {len(rendered)} example(s) into {directory}")


__all__ = ["run"]
