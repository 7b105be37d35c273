"""Markdown document model built on markdown-it-py.

Chapters are turned into a flat event stream whose spans tile the source text:
fenced code blocks become ``START``/``TEXT``/``END`` triples and everything in
between is carried by ``OTHER`` events. Serializing an unmodified stream
therefore reproduces the source byte for byte, while synthesized events are
rendered back to Markdown.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from itertools import takewhile
import re

from markdown_it import MarkdownIt

from imgui_book.core.events import (
    FENCE,
    IMAGE,
    LINK_DEFINITION,
    MARKDOWN,
    PARAGRAPH,
    Event,
    EventKind,
    Span,
)


_PREFIX_FILL = re.compile(r"[^>\s]")
_BACKTICK_RUN = re.compile(r"`+")
_NEWLINE = re.compile(r"\n")
_LINE_BREAK = re.compile(r"\r?\n")


def _create_parser() -> MarkdownIt:
    return MarkdownIt("commonmark").enable("table")


def _line_offsets(source: str) -> list[int]:
    return [0, *(match.end() for match in _NEWLINE.finditer(source))]


def _line_start(source: str, offsets: Sequence[int], index: int) -> int:
    return offsets[index] if index < len(offsets) else len(source)


def _line_content_end(source: str, offsets: Sequence[int], index: int) -> int:
    """Return the offset of the end of line ``index`` without its line break."""
    start = _line_start(source, offsets, index)
    end = _line_start(source, offsets, index + 1)
    return start + len(source[start:end].rstrip("\r\n"))


def continuation_prefix(leading: str) -> str:
    """Return the prefix that keeps follow-up lines inside the same container."""
    return _PREFIX_FILL.sub(" ", leading)


def parse_events(source: str) -> list[Event]:
    """Parse ``source`` into a tiling event stream."""
    tokens = _create_parser().parse(source)
    offsets = _line_offsets(source)
    events: list[Event] = []
    cursor = 0

    for token in tokens:
        if token.type != "fence" or token.map is None:
            continue
        first, last = token.map
        line_start = offsets[first]
        line_end = _line_content_end(source, offsets, first)
        column = source[line_start:line_end].find(token.markup)
        open_start = line_start + max(column, 0)
        text_start = _line_start(source, offsets, first + 1)

        content_lines = token.content.count("\n")
        if last - first > content_lines + 1:
            close_line = last - 1
            close_start = _line_start(source, offsets, close_line)
            close_end = _line_content_end(source, offsets, close_line)
        else:
            close_start = close_end = _line_start(source, offsets, last)

        if cursor < open_start:
            events.append(Event(EventKind.OTHER, MARKDOWN, Span(cursor, open_start)))
        prefix = continuation_prefix(source[line_start:open_start])
        events.append(
            Event(
                EventKind.START,
                FENCE,
                Span(open_start, text_start),
                info=token.info.strip(),
                prefix=prefix,
            )
        )
        events.append(
            Event(EventKind.TEXT, FENCE, Span(text_start, close_start), text=token.content)
        )
        events.append(Event(EventKind.END, FENCE, Span(close_start, close_end)))
        cursor = close_end

    if cursor < len(source):
        events.append(Event(EventKind.OTHER, MARKDOWN, Span(cursor, len(source))))
    return events


def _fence_for(code: str) -> str:
    longest = max((len(run) for run in _BACKTICK_RUN.findall(code)), default=0)
    return "`" * max(3, longest + 1)


class _SyntheticRun:
    """Accumulate consecutive synthesized events into Markdown blocks."""

    def __init__(self) -> None:
        self.blocks: list[str] = []
        self.prefix = ""
        self._buffer: list[str] = []
        self._depth = 0
        self._fence = "```"

    def __bool__(self) -> bool:
        return bool(self.blocks or self._buffer)

    def feed(self, event: Event) -> None:
        if not self and not self._depth:
            self.prefix = event.prefix

        if event.kind is EventKind.START:
            if event.block == FENCE:
                self._fence = "```"
                self._buffer.append(f"{self._fence}{event.info or ''}\n")
            self._depth += 1
        elif event.kind is EventKind.TEXT:
            text = event.text or ""
            if event.block == FENCE:
                fence = _fence_for(text)
                if fence != self._fence and self._buffer:
                    self._buffer[-1] = fence + self._buffer[-1][len(self._fence) :]
                    self._fence = fence
                if text and not text.endswith("\n"):
                    text += "\n"
            self._buffer.append(text)
        elif event.kind is EventKind.END:
            if event.block == FENCE:
                self._buffer.append(self._fence)
            self._depth = max(0, self._depth - 1)
        else:
            self._buffer.append(_render_inline(event))

        if self._depth == 0:
            self.blocks.append("".join(self._buffer))
            self._buffer = []

    def render(self, newline: str = "\n") -> str:
        if self._buffer:
            self.blocks.append("".join(self._buffer))
            self._buffer = []
        lines = "\n\n".join(self.blocks).split("\n")
        padded = [lines[0]]
        for line in lines[1:]:
            padded.append(f"{self.prefix}{line}" if line else self.prefix.rstrip())
        return newline.join(padded)


def _render_inline(event: Event) -> str:
    if event.block == IMAGE:
        return f"![{event.text or ''}]({event.info or ''})"
    if event.block in {LINK_DEFINITION, MARKDOWN}:
        return event.text or ""
    if event.block == PARAGRAPH:
        return ""
    raise ValueError(f"cannot render synthetic '{event.block}' event")


def _has_content(line: str) -> bool:
    """Return whether ``line`` holds more than container markup."""
    return _PREFIX_FILL.search(line) is not None


def _needs_blank_before(preceding: str) -> bool:
    head, newline, fragment = preceding.rpartition("\n")
    # A list marker on the current line opens a new container.
    if not newline or _has_content(fragment):
        return False
    return _has_content(head.rpartition("\n")[2])


def _needs_blank_after(following: str) -> bool:
    match = _LINE_BREAK.match(following)
    if match is None:
        return False
    next_line = following[match.end() :].split("\n", 1)[0]
    return _has_content(next_line)


def render_events(source: str, events: Iterable[Event]) -> str:
    """Serialize ``events`` back to Markdown.

    Events parsed from ``source`` are copied verbatim from their span;
    consecutive synthesized events form blocks separated by blank lines. A run
    of synthesized blocks is also kept apart from the surrounding source text
    by blank lines so it never continues a neighbouring paragraph.
    """
    segments: list[str | _SyntheticRun] = []
    run = _SyntheticRun()
    for event in events:
        if event.span is None:
            run.feed(event)
            continue
        if run:
            segments.append(run)
            run = _SyntheticRun()
        segments.append(source[event.span.start : event.span.end])
    if run:
        segments.append(run)

    newline = "\r\n" if "\r\n" in source else "\n"
    parts: list[str] = []
    for index, segment in enumerate(segments):
        if isinstance(segment, str):
            parts.append(segment)
            continue
        following = "".join(
            takewhile(lambda item: isinstance(item, str), segments[index + 1 :])  # type: ignore[arg-type]
        )
        text = segment.render(newline)
        if _needs_blank_before("".join(parts)):
            text = f"{newline}{segment.prefix}{text}"
        if _needs_blank_after(following):
            text = f"{text}{newline}{segment.prefix.rstrip()}"
        parts.append(text)
    return "".join(parts)


__all__ = ["continuation_prefix", "parse_events", "render_events"]
