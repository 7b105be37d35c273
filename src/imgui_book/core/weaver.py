"""Rewrite chapters so example blocks point at their rendered artifacts."""

from __future__ import annotations

from collections.abc import Iterator
import logging
from pathlib import Path, PurePath, PurePosixPath

from imgui_book.adapters.markdown import parse_events, render_events

from .capture import capture_stdout
from .diagnostics import DiagnosticEmitter, NullEmitter
from .events import FENCE, IMAGE, LINK_DEFINITION, PARAGRAPH, Event
from .exceptions import ArtifactError, HarnessExecutionError, UnknownSnippetError
from .harness import Dispatcher
from .registry import SnippetRegistry
from .scanner import DocumentScanner, ScannedBlock
from .snippets import HIDDEN_LINE_MARKER, Snippet


_log = logging.getLogger(__name__)


def artifact_url(rel_image_path: str, snippet: Snippet) -> str:
    """Return the chapter-relative URL of the artifact rendered for ``snippet``."""
    return str(PurePosixPath(rel_image_path) / snippet.output_filename)


def run_snippet(
    snippet: Snippet,
    invoke: Dispatcher,
    image_dir: Path,
    *,
    emitter: DiagnosticEmitter | None = None,
) -> None:
    """Execute the harness of ``snippet`` with stdout suppressed."""
    emitter = emitter or NullEmitter()
    identifier = snippet.identifier
    if snippet.tags.no_run:
        emitter.event("snippet_skipped", {"identifier": identifier, "reason": "no_run"})
        return

    try:
        with capture_stdout():
            invoke(identifier, image_dir)
    except (UnknownSnippetError, ArtifactError):
        raise
    except Exception as exc:
        if not snippet.tags.should_panic:
            raise HarnessExecutionError(identifier, f"Example '{identifier}' failed: {exc}") from exc
        emitter.event("snippet_panicked", {"identifier": identifier, "error": str(exc)})
        return

    if snippet.tags.should_panic:
        emitter.warning(f"Example '{identifier}' is tagged should_panic but ran successfully")
    emitter.event(
        "snippet_invoked",
        {"identifier": identifier, "path": str(image_dir / snippet.output_filename)},
    )


def replacement_events(
    snippet: Snippet, url: str, *, code_language: str = "python", prefix: str = ""
) -> list[Event]:
    """Return the events substituted for a matched example block."""
    events: list[Event] = []
    if not snippet.tags.hide_code:
        events.append(Event.start(FENCE, info=code_language, prefix=prefix))
        events.append(Event.content(FENCE, snippet.code, prefix=prefix))
        events.append(Event.end(FENCE, prefix=prefix))

    events.append(
        Event.other(LINK_DEFINITION, text=f"[{snippet.identifier}]: {url}", prefix=prefix)
    )

    if not snippet.tags.hide_output:
        events.append(Event.start(PARAGRAPH, prefix=prefix))
        events.append(Event.other(IMAGE, info=url, text=snippet.tags.name or "", prefix=prefix))
        events.append(Event.end(PARAGRAPH, prefix=prefix))
    return events


class DocumentWeaver:
    """Weave one book against a loaded registry and harness dispatcher."""

    def __init__(
        self,
        registry: SnippetRegistry,
        invoke: Dispatcher,
        image_dir: Path,
        *,
        code_language: str = "python",
        hidden_marker: str = HIDDEN_LINE_MARKER,
        emitter: DiagnosticEmitter | None = None,
    ) -> None:
        self.registry = registry
        self.invoke = invoke
        self.image_dir = image_dir
        self.code_language = code_language
        self.hidden_marker = hidden_marker
        self.emitter = emitter or NullEmitter()

    def weave_events(
        self, events: list[Event], doc_path: str | PurePath, rel_image_path: str
    ) -> Iterator[Event]:
        scanner = DocumentScanner(doc_path, hidden_marker=self.hidden_marker)
        for item in scanner.scan(events):
            if isinstance(item, ScannedBlock):
                yield from self._substitute(item, rel_image_path)
            else:
                yield item

    def weave(self, source: str, doc_path: str | PurePath, rel_image_path: str) -> str:
        """Return ``source`` with every example block replaced."""
        events = parse_events(source)
        woven = list(self.weave_events(events, doc_path, rel_image_path))
        return render_events(source, woven)

    def _substitute(self, block: ScannedBlock, rel_image_path: str) -> list[Event]:
        identifier = block.snippet.identifier
        snippet = self.registry.get(identifier)
        if snippet is None:
            _log.debug("No registry entry for %s, dropping block", identifier)
            self.emitter.event("snippet_dropped", {"identifier": identifier, "reason": "unmatched"})
            return []
        if snippet.tags.ignore:
            self.emitter.event("snippet_dropped", {"identifier": identifier, "reason": "ignore"})
            return []

        run_snippet(snippet, self.invoke, self.image_dir, emitter=self.emitter)
        return replacement_events(
            snippet,
            artifact_url(rel_image_path, snippet),
            code_language=self.code_language,
            prefix=block.start.prefix,
        )


def weave_document(
    source: str,
    doc_path: str | PurePath,
    registry: SnippetRegistry,
    invoke: Dispatcher,
    image_dir: Path,
    rel_image_path: str,
    *,
    code_language: str = "python",
    hidden_marker: str = HIDDEN_LINE_MARKER,
    emitter: DiagnosticEmitter | None = None,
) -> str:
    """Weave a single chapter; see :class:`DocumentWeaver`."""
    weaver = DocumentWeaver(
        registry,
        invoke,
        image_dir,
        code_language=code_language,
        hidden_marker=hidden_marker,
        emitter=emitter,
    )
    return weaver.weave(source, doc_path, rel_image_path)


__all__ = [
    "DocumentWeaver",
    "artifact_url",
    "replacement_events",
    "run_snippet",
    "weave_document",
]
