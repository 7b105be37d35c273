"""Stable identifiers joining the generation and weaving phases."""

from __future__ import annotations

from pathlib import PurePath


FILLER = "_"
SEPARATOR = "_"


def sanitize_path(doc_path: str | PurePath) -> str:
    """Replace every non-alphabetic character so the path forms a valid name."""
    text = PurePath(doc_path).as_posix() if isinstance(doc_path, PurePath) else doc_path
    text = text.replace("\\", "/")
    return "".join(char if char.isalpha() else FILLER for char in text)


def fingerprint(doc_path: str | PurePath, start: int, end: int) -> str:
    """Return the identifier of the region ``[start, end)`` of ``doc_path``."""
    return SEPARATOR.join((sanitize_path(doc_path), str(start), str(end)))


__all__ = ["fingerprint", "sanitize_path"]
