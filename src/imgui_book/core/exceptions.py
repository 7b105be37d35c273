"""Exception hierarchy for the example extraction and weaving pipeline."""

from __future__ import annotations

from pathlib import Path


class ExampleBookError(RuntimeError):
    """Base exception for example pipeline failures."""


class ConfigError(ExampleBookError):
    """Raised when the preprocessor configuration table is invalid."""


class TagParseError(ExampleBookError):
    """Raised when a code block info string carries an unknown tag."""


class ScannerInvariantError(ExampleBookError):
    """Raised when the document event stream breaks a structural assumption."""


class RegistryFormatError(ExampleBookError):
    """Raised when a serialized snippet registry cannot be decoded."""


class FingerprintCollisionError(ExampleBookError):
    """Raised when two chapters produce the same example identifier."""

    def __init__(self, identifier: str, first: object, second: object) -> None:
        super().__init__(
            f"example identifier '{identifier}' is produced by both '{first}' and '{second}'"
        )
        self.identifier = identifier


class UnknownSnippetError(ExampleBookError):
    """Raised when the dispatcher is asked for an identifier it does not know."""

    def __init__(self, identifier: str) -> None:
        super().__init__(f"invoke of unknown identifier '{identifier}'")
        self.identifier = identifier


class HarnessExecutionError(ExampleBookError):
    """Raised when a generated harness fails while rendering its example."""

    def __init__(self, identifier: str, message: str | None = None) -> None:
        super().__init__(message or f"Example '{identifier}' failed to run")
        self.identifier = identifier


class ArtifactError(ExampleBookError):
    """Raised when an artifact cannot be written to its destination."""

    def __init__(self, message: str, path: Path | str) -> None:
        super().__init__(f"{message}: {path}")
        self.path = Path(path)


def exception_messages(exc: BaseException) -> list[str]:
    """Return the collected message chain for an exception and its causes."""
    messages: list[str] = []
    visited: set[int] = set()
    current: BaseException | None = exc
    while current is not None and id(current) not in visited:
        visited.add(id(current))
        text = str(current).strip()
        if text:
            first_line = text.splitlines()[0].strip()
            if first_line:
                messages.append(first_line)
        current = current.__cause__ or current.__context__
    return messages


def exception_hint(exc: BaseException) -> str | None:
    """Return the most specific message available for an exception chain."""
    messages = exception_messages(exc)
    return messages[-1] if messages else None


__all__ = [
    "ArtifactError",
    "ConfigError",
    "ExampleBookError",
    "FingerprintCollisionError",
    "HarnessExecutionError",
    "RegistryFormatError",
    "ScannerInvariantError",
    "TagParseError",
    "UnknownSnippetError",
    "exception_hint",
    "exception_messages",
]
