"""Single-pass state machine locating example blocks in a chapter.

The same scanner drives both phases. Generation only keeps the snippets it
yields; weaving also consumes the pass-through events and the events held for
each example block.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from enum import Enum, auto
from pathlib import PurePath

from imgui_book.adapters.markdown import parse_events

from .events import Event, EventKind, is_fence_end, is_fence_start
from .exceptions import ScannerInvariantError
from .fingerprint import fingerprint
from .snippets import HIDDEN_LINE_MARKER, Snippet, clean_code
from .tags import ExampleTags, parse_tags


class ScanState(Enum):
    OUTSIDE = auto()
    IN_BLOCK = auto()


@dataclass(frozen=True, slots=True)
class ScannedBlock:
    """A completed example block together with the events it replaced."""

    snippet: Snippet
    events: tuple[Event, ...]

    @property
    def start(self) -> Event:
        return self.events[0]


@dataclass(slots=True)
class _OpenBlock:
    tags: ExampleTags
    start: Event
    text: str | None = None
    held: list[Event] = field(default_factory=list)


class DocumentScanner:
    """Walk a chapter event stream and yield example blocks in order."""

    def __init__(
        self, doc_path: str | PurePath, *, hidden_marker: str = HIDDEN_LINE_MARKER
    ) -> None:
        self.doc_path = doc_path
        self.hidden_marker = hidden_marker
        self.state = ScanState.OUTSIDE
        self._block: _OpenBlock | None = None

    def scan(self, events: Iterable[Event]) -> Iterator[Event | ScannedBlock]:
        """Yield pass-through events and completed example blocks."""
        for event in events:
            if self.state is ScanState.OUTSIDE:
                tags = parse_tags(event.info or "") if is_fence_start(event) else None
                if tags is None:
                    yield event
                    continue
                self._block = _OpenBlock(tags=tags, start=event, held=[event])
                self.state = ScanState.IN_BLOCK
                continue

            block = self._block
            assert block is not None
            block.held.append(event)
            if event.kind is EventKind.TEXT:
                if block.text is not None:
                    raise ScannerInvariantError(
                        f"more than one text event inside a code block in {self.doc_path}"
                    )
                block.text = event.text or ""
            elif is_fence_end(event):
                yield self._close(block, event)

        if self.state is ScanState.IN_BLOCK:
            raise ScannerInvariantError(f"unterminated code block in {self.doc_path}")

    def _close(self, block: _OpenBlock, end: Event) -> ScannedBlock:
        if block.start.span is None or end.span is None:
            raise ScannerInvariantError("example blocks must come from a parsed document")
        snippet = Snippet(
            identifier=fingerprint(self.doc_path, block.start.span.start, end.span.end),
            code=clean_code(block.text or "", self.hidden_marker),
            tags=block.tags,
        )
        self._block = None
        self.state = ScanState.OUTSIDE
        return ScannedBlock(snippet=snippet, events=tuple(block.held))


def scan_snippets(
    source: str,
    doc_path: str | PurePath,
    *,
    hidden_marker: str = HIDDEN_LINE_MARKER,
) -> list[Snippet]:
    """Return the snippets of one chapter, in document order."""
    scanner = DocumentScanner(doc_path, hidden_marker=hidden_marker)
    return [
        item.snippet
        for item in scanner.scan(parse_events(source))
        if isinstance(item, ScannedBlock)
    ]


__all__ = ["DocumentScanner", "ScanState", "ScannedBlock", "scan_snippets"]
