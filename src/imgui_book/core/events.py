"""Structural events shared by the scanner, the weaver and the markdown adapter."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class EventKind(Enum):
    """Variants of the document event stream."""

    START = "start"
    TEXT = "text"
    END = "end"
    OTHER = "other"


@dataclass(frozen=True, slots=True)
class Span:
    """Half-open character range inside a chapter source."""

    start: int
    end: int

    def __post_init__(self) -> None:
        if self.start < 0 or self.end < self.start:
            raise ValueError(f"invalid span {self.start}..{self.end}")


@dataclass(frozen=True, slots=True)
class Event:
    """One event of a document stream.

    Events read from a source carry a ``span``; events created while weaving
    carry ``span=None`` and are rendered from ``info`` and ``text``.
    """

    kind: EventKind
    block: str
    span: Span | None = None
    info: str | None = None
    text: str | None = None
    prefix: str = ""

    @property
    def synthetic(self) -> bool:
        return self.span is None

    @classmethod
    def start(cls, block: str, *, info: str | None = None, prefix: str = "") -> Event:
        return cls(EventKind.START, block, info=info, prefix=prefix)

    @classmethod
    def end(cls, block: str, *, prefix: str = "") -> Event:
        return cls(EventKind.END, block, prefix=prefix)

    @classmethod
    def content(cls, block: str, text: str, *, prefix: str = "") -> Event:
        return cls(EventKind.TEXT, block, text=text, prefix=prefix)

    @classmethod
    def other(
        cls, block: str, *, text: str | None = None, info: str | None = None, prefix: str = ""
    ) -> Event:
        return cls(EventKind.OTHER, block, info=info, text=text, prefix=prefix)


FENCE = "fence"
MARKDOWN = "markdown"
PARAGRAPH = "paragraph"
IMAGE = "image"
LINK_DEFINITION = "link_definition"


def is_fence_start(event: Event) -> bool:
    return event.kind is EventKind.START and event.block == FENCE


def is_fence_end(event: Event) -> bool:
    return event.kind is EventKind.END and event.block == FENCE


__all__ = [
    "FENCE",
    "IMAGE",
    "LINK_DEFINITION",
    "MARKDOWN",
    "PARAGRAPH",
    "Event",
    "EventKind",
    "Span",
    "is_fence_end",
    "is_fence_start",
]
