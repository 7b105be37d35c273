"""Primary public API for imgui-book."""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version as _pkg_version

from imgui_book.adapters.mdbook import (
    BookLayout,
    collect_registry,
    load_book_layout,
    process_book,
    run_preprocessor,
)
from imgui_book.core.config import CanvasConfig, ExamplesConfig
from imgui_book.core.exceptions import (
    ArtifactError,
    ConfigError,
    ExampleBookError,
    FingerprintCollisionError,
    HarnessExecutionError,
    RegistryFormatError,
    ScannerInvariantError,
    TagParseError,
    UnknownSnippetError,
)
from imgui_book.core.fingerprint import fingerprint
from imgui_book.core.harness import HarnessGenerator, load_harness, write_harness
from imgui_book.core.registry import SnippetRegistry
from imgui_book.core.scanner import scan_snippets
from imgui_book.core.snippets import Snippet, clean_code
from imgui_book.core.tags import EXAMPLE_MARKER, ExampleTags, parse_tags
from imgui_book.core.weaver import DocumentWeaver, weave_document


try:
    __version__ = _pkg_version("imgui-book")
except PackageNotFoundError:
    __version__ = "0.0.0"


__all__ = [
    "EXAMPLE_MARKER",
    "ArtifactError",
    "BookLayout",
    "CanvasConfig",
    "ConfigError",
    "DocumentWeaver",
    "ExampleBookError",
    "ExampleTags",
    "ExamplesConfig",
    "FingerprintCollisionError",
    "HarnessExecutionError",
    "HarnessGenerator",
    "RegistryFormatError",
    "ScannerInvariantError",
    "Snippet",
    "SnippetRegistry",
    "TagParseError",
    "UnknownSnippetError",
    "__version__",
    "clean_code",
    "collect_registry",
    "fingerprint",
    "load_book_layout",
    "load_harness",
    "parse_tags",
    "process_book",
    "run_preprocessor",
    "scan_snippets",
    "weave_document",
    "write_harness",
]
