"""Ordered snippet registry and its transport format.

The registry is written by the generation phase and read back by the
preprocessor in a separate process, so the serialized form is a versioned JSON
document with fixed field names. Changing the shape of ``Snippet`` or
``ExampleTags`` requires bumping ``REGISTRY_FORMAT_VERSION``.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field
import json
import logging
from typing import Any

from .exceptions import RegistryFormatError
from .snippets import Snippet
from .tags import ExampleTags


REGISTRY_FORMAT_VERSION = 1
_TAG_FIELDS = ("ignore", "no_run", "should_panic", "hide_code", "hide_output")
_log = logging.getLogger(__name__)


@dataclass(slots=True)
class SnippetRegistry:
    """Snippets discovered in one generation pass, in traversal order."""

    _snippets: list[Snippet] = field(default_factory=list)
    _index: dict[str, Snippet] = field(default_factory=dict, repr=False)

    def __post_init__(self) -> None:
        snippets = list(self._snippets)
        self._snippets = []
        self._index = {}
        self.extend(snippets)

    def add(self, snippet: Snippet) -> None:
        """Append a snippet, rejecting identifiers that are already recorded."""
        if snippet.identifier in self._index:
            raise RegistryFormatError(f"duplicate snippet identifier '{snippet.identifier}'")
        self._snippets.append(snippet)
        self._index[snippet.identifier] = snippet

    def extend(self, snippets: Iterable[Snippet]) -> None:
        for snippet in snippets:
            self.add(snippet)

    def get(self, identifier: str) -> Snippet | None:
        return self._index.get(identifier)

    def __contains__(self, identifier: object) -> bool:
        return identifier in self._index

    def __iter__(self) -> Iterator[Snippet]:
        return iter(self._snippets)

    def __len__(self) -> int:
        return len(self._snippets)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SnippetRegistry):
            return NotImplemented
        return self._snippets == other._snippets

    @property
    def runnable(self) -> list[Snippet]:
        """Snippets that receive a generated harness."""
        return [snippet for snippet in self._snippets if not snippet.tags.ignore]


def _snippet_payload(snippet: Snippet) -> dict[str, Any]:
    return {
        "identifier": snippet.identifier,
        "code": snippet.code,
        "tags": snippet.tags.to_dict(),
    }


def save(registry: SnippetRegistry) -> bytes:
    """Serialize ``registry`` into its JSON transport form."""
    payload = {
        "version": REGISTRY_FORMAT_VERSION,
        "snippets": [_snippet_payload(snippet) for snippet in registry],
    }
    return json.dumps(payload, indent=2, ensure_ascii=False).encode("utf-8")


def _load_tags(raw: Any) -> ExampleTags:
    if not isinstance(raw, Mapping):
        raise RegistryFormatError("snippet tags must be an object")
    values: dict[str, Any] = {}
    for key in _TAG_FIELDS:
        value = raw.get(key)
        if not isinstance(value, bool):
            raise RegistryFormatError(f"tag '{key}' must be a boolean")
        values[key] = value
    name = raw.get("name")
    if name is not None and not isinstance(name, str):
        raise RegistryFormatError("tag 'name' must be a string or null")
    return ExampleTags(name=name, **values)


def _load_snippet(raw: Any) -> Snippet:
    if not isinstance(raw, Mapping):
        raise RegistryFormatError("snippet entries must be objects")
    identifier = raw.get("identifier")
    code = raw.get("code")
    if not isinstance(identifier, str) or not identifier:
        raise RegistryFormatError("snippet entry is missing its identifier")
    if not isinstance(code, str):
        raise RegistryFormatError(f"snippet '{identifier}' is missing its code")
    return Snippet(identifier=identifier, code=code, tags=_load_tags(raw.get("tags")))


def load(data: bytes | str) -> SnippetRegistry:
    """Rebuild a registry from the bytes produced by :func:`save`."""
    try:
        payload = json.loads(data)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise RegistryFormatError(f"registry is not valid JSON: {exc}") from exc

    if not isinstance(payload, Mapping):
        raise RegistryFormatError("registry payload must be an object")
    version = payload.get("version")
    if version != REGISTRY_FORMAT_VERSION:
        raise RegistryFormatError(
            f"unsupported registry version {version!r} "
            f"(expected {REGISTRY_FORMAT_VERSION}); regenerate the harness"
        )
    entries = payload.get("snippets")
    if not isinstance(entries, list):
        raise RegistryFormatError("registry payload has no snippet list")

    registry = SnippetRegistry([_load_snippet(entry) for entry in entries])
    _log.debug("Loaded %d snippet(s) from registry", len(registry))
    return registry


__all__ = ["REGISTRY_FORMAT_VERSION", "SnippetRegistry", "load", "save"]
