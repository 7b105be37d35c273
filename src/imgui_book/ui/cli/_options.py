"""Shared Typer option definitions for CLI commands."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer


BOOK_PANEL = "Book"
OUTPUT_PANEL = "Output"

BookRootOption = Annotated[
    Path,
    typer.Option(
        "--book",
        "-b",
        help="Root directory of the mdBook (the one holding book.toml).",
        exists=True,
        file_okay=False,
        dir_okay=True,
        resolve_path=True,
        rich_help_panel=BOOK_PANEL,
    ),
]

HarnessOption = Annotated[
    Path | None,
    typer.Option(
        "--harness",
        help="Harness module path. Defaults to the value configured in book.toml.",
        dir_okay=False,
        resolve_path=True,
        rich_help_panel=OUTPUT_PANEL,
    ),
]

RegistryOption = Annotated[
    Path | None,
    typer.Option(
        "--registry",
        help="Also write the snippet registry as a JSON sidecar at this path.",
        dir_okay=False,
        resolve_path=True,
        rich_help_panel=OUTPUT_PANEL,
    ),
]


__all__ = [
    "BOOK_PANEL",
    "OUTPUT_PANEL",
    "BookRootOption",
    "HarnessOption",
    "RegistryOption",
]
