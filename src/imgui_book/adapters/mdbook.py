"""mdBook integration: book discovery and the JSON preprocessor protocol.

The generation phase reads the book straight from disk (``book.toml`` and
``SUMMARY.md``). The weaving phase runs as an mdBook preprocessor: mdBook
writes ``[context, book]`` as JSON on stdin and expects the processed book on
stdout. Any command line argument is a capability query (``supports
<renderer>``) and is answered by exiting successfully.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping, MutableMapping, Sequence
from dataclasses import dataclass
import json
import logging
from pathlib import Path, PurePosixPath
import posixpath
import sys
import tomllib
from typing import Any, TextIO

from markdown_it import MarkdownIt
import mdurl
from packaging.specifiers import SpecifierSet
from packaging.version import InvalidVersion, Version

from imgui_book.core.config import ExamplesConfig, examples_config_from_book
from imgui_book.core.diagnostics import DiagnosticEmitter, LoggingEmitter
from imgui_book.core.exceptions import (
    ArtifactError,
    ConfigError,
    ExampleBookError,
    FingerprintCollisionError,
)
from imgui_book.core.harness import Dispatcher, load_harness
from imgui_book.core.registry import SnippetRegistry, load
from imgui_book.core.scanner import scan_snippets
from imgui_book.core.weaver import DocumentWeaver


MDBOOK_VERSION_REQUIREMENT = SpecifierSet(">=0.4.0,<0.5.0")
BOOK_TOML = "book.toml"
SUMMARY_MD = "SUMMARY.md"
_log = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class BookLayout:
    """Resolved locations of a book on disk."""

    root: Path
    src: Path
    config: ExamplesConfig

    @property
    def harness_path(self) -> Path:
        return self.config.resolve(self.root, self.config.harness)

    @property
    def registry_path(self) -> Path | None:
        if self.config.registry is None:
            return None
        return self.config.resolve(self.root, self.config.registry)

    @property
    def image_dir(self) -> Path:
        return self.src / self.config.image_dir


def _layout_from_config(root: Path, book_config: Mapping[str, Any]) -> BookLayout:
    book_table = book_config.get("book") or {}
    src_name = book_table.get("src", "src") if isinstance(book_table, Mapping) else "src"
    return BookLayout(
        root=root,
        src=root / str(src_name),
        config=examples_config_from_book(book_config),
    )


def load_book_config(root: Path) -> dict[str, Any]:
    """Read ``book.toml`` from the book root; a missing file means defaults."""
    path = root / BOOK_TOML
    try:
        raw = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return {}
    except OSError as exc:
        raise ConfigError(f"unable to read {path}: {exc}") from exc
    try:
        return tomllib.loads(raw)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"invalid {path}: {exc}") from exc


def load_book_layout(root: Path) -> BookLayout:
    return _layout_from_config(root, load_book_config(root))


def iter_summary_chapters(src: Path) -> list[PurePosixPath]:
    """Return chapter paths in ``SUMMARY.md`` order, skipping draft chapters."""
    summary = src / SUMMARY_MD
    try:
        text = summary.read_text(encoding="utf-8")
    except OSError as exc:
        raise ArtifactError("unable to read book summary", summary) from exc

    chapters: list[PurePosixPath] = []
    seen: set[PurePosixPath] = set()
    for token in MarkdownIt("commonmark").parse(text):
        for child in token.children or ():
            if child.type != "link_open":
                continue
            href = str(child.attrs.get("href") or "").strip()
            if not href or "://" in href:
                continue
            path = PurePosixPath(mdurl.decode(href.split("#", 1)[0]))
            if path not in seen:
                seen.add(path)
                chapters.append(path)
    return chapters


def collect_registry(layout: BookLayout) -> SnippetRegistry:
    """Scan every chapter of the book (generation phase)."""
    registry = SnippetRegistry()
    owners: dict[str, PurePosixPath] = {}
    for chapter in iter_summary_chapters(layout.src):
        path = layout.src / chapter
        try:
            # mdBook hands chapters over with their original line endings.
            source = path.read_bytes().decode("utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise ArtifactError("unable to read chapter", path) from exc
        snippets = scan_snippets(
            source, chapter, hidden_marker=layout.config.hidden_line_marker
        )
        _log.debug("%s: %d example(s)", chapter, len(snippets))
        for snippet in snippets:
            owner = owners.setdefault(snippet.identifier, chapter)
            if owner != chapter:
                raise FingerprintCollisionError(snippet.identifier, owner, chapter)
        registry.extend(snippets)
    return registry


def relative_image_url(chapter_path: str | PurePosixPath, image_dir: str) -> str:
    """Return the URL of ``image_dir`` (inside the book source) seen from a chapter."""
    parent = PurePosixPath(chapter_path).parent.as_posix()
    return posixpath.relpath(PurePosixPath(image_dir).as_posix(), parent)


def check_mdbook_version(version: str | None, emitter: DiagnosticEmitter) -> bool:
    """Warn when the calling mdBook is outside the supported range."""
    if not version:
        emitter.warning("mdBook did not report its version; continuing")
        return False
    try:
        parsed = Version(version)
    except InvalidVersion:
        emitter.warning(f"Unable to parse mdBook version '{version}'; continuing")
        return False
    if parsed in MDBOOK_VERSION_REQUIREMENT:
        return True
    emitter.warning(
        f"This preprocessor supports mdBook {MDBOOK_VERSION_REQUIREMENT}, "
        f"but is being called from version {version}"
    )
    return False


def iter_chapters(items: Sequence[Any]) -> Iterator[MutableMapping[str, Any]]:
    """Yield every chapter of an mdBook section list, depth first."""
    for item in items:
        if not isinstance(item, Mapping):
            continue
        chapter = item.get("Chapter")
        if isinstance(chapter, MutableMapping):
            yield chapter
            yield from iter_chapters(chapter.get("sub_items") or [])


def load_registry(layout: BookLayout, harness: Any) -> SnippetRegistry:
    """Load the registry from the sidecar file or the harness module."""
    registry_path = layout.registry_path
    if registry_path is None:
        return load(harness.get_metadata())
    try:
        data = registry_path.read_bytes()
    except OSError as exc:
        raise ArtifactError("unable to read snippet registry", registry_path) from exc
    return load(data)


def process_book(
    context: Mapping[str, Any],
    book: MutableMapping[str, Any],
    *,
    emitter: DiagnosticEmitter | None = None,
    dispatcher: Dispatcher | None = None,
    registry: SnippetRegistry | None = None,
) -> MutableMapping[str, Any]:
    """Weave every chapter of ``book`` in place and return it."""
    emitter = emitter or LoggingEmitter()
    root = Path(str(context.get("root") or "."))
    layout = _layout_from_config(root, context.get("config") or {})

    if dispatcher is None or registry is None:
        harness = load_harness(layout.harness_path)
        if dispatcher is None:
            dispatcher = harness.invoke
        if registry is None:
            registry = load_registry(layout, harness)

    image_dir = layout.image_dir
    try:
        image_dir.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise ArtifactError("unable to create image directory", image_dir) from exc

    weaver = DocumentWeaver(
        registry,
        dispatcher,
        image_dir,
        code_language=layout.config.code_language,
        hidden_marker=layout.config.hidden_line_marker,
        emitter=emitter,
    )
    for chapter in iter_chapters(book.get("sections") or []):
        path = chapter.get("path")
        if not path:
            continue
        rel_image_path = relative_image_url(path, layout.config.image_dir)
        chapter["content"] = weaver.weave(chapter.get("content") or "", path, rel_image_path)
        _log.debug("Woven chapter %s:\n%s", path, chapter["content"])
    return book


def run_preprocessor(
    stdin: TextIO,
    stdout: TextIO,
    *,
    emitter: DiagnosticEmitter | None = None,
) -> None:
    """Read ``[context, book]`` from ``stdin`` and write the processed book."""
    emitter = emitter or LoggingEmitter()
    try:
        context, book = json.load(stdin)
    except (json.JSONDecodeError, ValueError, TypeError) as exc:
        raise ExampleBookError(f"invalid preprocessor input: {exc}") from exc

    check_mdbook_version(context.get("mdbook_version"), emitter)
    processed = process_book(context, book, emitter=emitter)
    json.dump(processed, stdout)


def main(argv: Sequence[str] | None = None) -> int:
    """Console entry point for ``mdbook-imgui-examples``."""
    args = list(sys.argv[1:] if argv is None else argv)
    if args:
        return 0

    from imgui_book.ui.cli.diagnostics import CliEmitter
    from imgui_book.ui.cli.state import configure_logging, get_cli_state

    state = get_cli_state()
    configure_logging(state)
    emitter = CliEmitter(state)
    try:
        run_preprocessor(sys.stdin, sys.stdout, emitter=emitter)
    except ExampleBookError as exc:
        emitter.error(str(exc), exc)
        return 1
    return 0


__all__ = [
    "MDBOOK_VERSION_REQUIREMENT",
    "BookLayout",
    "check_mdbook_version",
    "collect_registry",
    "iter_chapters",
    "iter_summary_chapters",
    "load_book_config",
    "load_book_layout",
    "load_registry",
    "main",
    "process_book",
    "relative_image_url",
    "run_preprocessor",
]


if __name__ == "__main__":  # pragma: no cover - manual invocation
    sys.exit(main())
