"""Route pipeline diagnostics to the terminal of the preprocessor or the CLI."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from imgui_book.core.diagnostics import format_event_message

from .state import CLIState, emit_error, emit_warning, get_cli_state, render_message


class CliEmitter:
    """Diagnostic emitter writing to stderr through the shared CLI state.

    Events are recorded on the state so that ``--verbose`` runs can summarise
    what the weaver did; only events with a human readable form are printed.
    """

    def __init__(self, state: CLIState | None = None) -> None:
        self.state = state if state is not None else get_cli_state()

    @property
    def debug_enabled(self) -> bool:
        return self.state.show_tracebacks

    def warning(self, message: str, exc: BaseException | None = None) -> None:
        emit_warning(message, exception=exc, state=self.state)

    def error(self, message: str, exc: BaseException | None = None) -> None:
        emit_error(message, exception=exc, state=self.state)

    def event(self, name: str, payload: Mapping[str, Any]) -> None:
        data = dict(payload)
        self.state.record_event(name, data)
        text = format_event_message(name, data)
        if text is not None:
            render_message("info", text, state=self.state)


__all__ = ["CliEmitter"]
