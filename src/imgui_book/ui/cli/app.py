"""Typer application wiring for the imgui-book CLI."""

from __future__ import annotations

from typing import Annotated

import typer

from imgui_book.version import get_version

from .commands import generate, list_examples, run
from .state import configure_logging, debug_enabled, emit_error, get_cli_state, set_cli_state


app = typer.Typer(
    help="Render imgui examples embedded in an mdBook.",
    context_settings={"help_option_names": ["--help"]},
    no_args_is_help=True,
)


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(get_version())
        raise typer.Exit()


@app.callback()
def _main(
    ctx: typer.Context,
    verbose: Annotated[
        int,
        typer.Option(
            "--verbose",
            "-v",
            count=True,
            help="Increase diagnostic verbosity (repeat for more detail).",
        ),
    ] = 0,
    debug: Annotated[
        bool,
        typer.Option("--debug", help="Show full tracebacks on failure."),
    ] = False,
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            callback=_version_callback,
            is_eager=True,
            help="Print the imgui-book version and exit.",
        ),
    ] = False,
) -> None:
    state = set_cli_state(ctx=ctx, verbosity=verbose, debug=debug)
    configure_logging(state)


app.command("generate")(generate)
app.command("list")(list_examples)
app.command("run")(run)


def main() -> None:
    """Entry point compatible with console scripts."""
    try:
        app()
    except typer.Exit:
        raise
    except KeyboardInterrupt as exc:
        if debug_enabled():
            raise
        emit_error("Operation cancelled by user.", exception=exc)
        raise typer.Exit(code=1) from exc
    except SystemExit:
        raise
    except Exception as exc:
        state = get_cli_state()
        if state.show_tracebacks:
            from rich.traceback import Traceback

            tb = Traceback.from_exception(
                type(exc),
                exc,
                exc.__traceback__,
                show_locals=state.verbosity >= 2,
            )
            state.err_console.print(tb)
        else:
            emit_error(str(exc), exception=exc)
        raise typer.Exit(code=1) from exc


__all__ = ["app", "main"]
