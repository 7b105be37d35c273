"""Generate and load the harness module that renders every example."""

from __future__ import annotations

import hashlib
import importlib.util
import logging
from pathlib import Path
import sys
from types import ModuleType
from typing import Protocol

from jinja2 import Environment, FileSystemLoader, StrictUndefined

from .config import CanvasConfig
from .exceptions import ArtifactError, ExampleBookError
from .registry import SnippetRegistry, save


TEMPLATE_DIR = Path(__file__).resolve().parent / "templates"
HARNESS_TEMPLATE = "harness.py.jinja"
_log = logging.getLogger(__name__)


class Dispatcher(Protocol):
    """Callable running the harness registered for an identifier."""

    def __call__(self, identifier: str, directory: Path) -> None: ...


class HarnessGenerator:
    """Render harness module sources with Jinja2."""

    def __init__(
        self, canvas: CanvasConfig | None = None, template_dir: Path = TEMPLATE_DIR
    ) -> None:
        self.canvas = canvas or CanvasConfig()
        # Python source, not markup: no escaping, fail on undefined variables.
        self.env = Environment(
            loader=FileSystemLoader(template_dir),
            autoescape=False,
            undefined=StrictUndefined,
            keep_trailing_newline=True,
            trim_blocks=True,
            lstrip_blocks=True,
        )
        self.env.filters.setdefault("pyrepr", repr)

    def render(self, registry: SnippetRegistry) -> str:
        """Return the source of a harness module for ``registry``."""
        snippets = registry.runnable
        template = self.env.get_template(HARNESS_TEMPLATE)
        return template.render(
            canvas=self.canvas,
            snippets=snippets,
            no_run=sorted(s.identifier for s in snippets if s.tags.no_run),
            metadata=save(registry),
        )


def write_harness(
    registry: SnippetRegistry,
    path: Path,
    *,
    canvas: CanvasConfig | None = None,
    registry_path: Path | None = None,
) -> Path:
    """Write the harness module (and optionally the registry sidecar) to disk."""
    source = HarnessGenerator(canvas).render(registry)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(source, encoding="utf-8")
        if registry_path is not None:
            registry_path.parent.mkdir(parents=True, exist_ok=True)
            registry_path.write_bytes(save(registry))
    except OSError as exc:
        raise ArtifactError("unable to write harness", exc.filename or path) from exc
    _log.info("Wrote %d harness(es) to %s", len(registry.runnable), path)
    return path


def load_harness(path: Path) -> ModuleType:
    """Import a generated harness module from ``path``."""
    if not path.is_file():
        raise ArtifactError("harness module not found, run 'imgui-book generate' first", path)
    digest = hashlib.sha1(str(path.resolve()).encode("utf-8")).hexdigest()[:12]
    module_name = f"imgui_book_harness_{digest}"
    spec = importlib.util.spec_from_file_location(module_name, path)
    if spec is None or spec.loader is None:
        raise ExampleBookError(f"unable to import harness module {path}")
    module = importlib.util.module_from_spec(spec)
    sys.modules[module_name] = module
    try:
        spec.loader.exec_module(module)
    except Exception:
        sys.modules.pop(module_name, None)
        raise
    for attribute in ("invoke", "invoke_all", "get_metadata", "HARNESSES"):
        if not hasattr(module, attribute):
            raise ExampleBookError(f"{path} is not a generated harness module (no {attribute})")
    return module


__all__ = [
    "HARNESS_TEMPLATE",
    "Dispatcher",
    "HarnessGenerator",
    "load_harness",
    "write_harness",
]
