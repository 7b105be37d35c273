from __future__ import annotations

from pathlib import Path
from types import ModuleType

import pytest

from imgui_book.core.config import CanvasConfig
from imgui_book.core.exceptions import ArtifactError, ExampleBookError, UnknownSnippetError
from imgui_book.core.harness import HarnessGenerator, load_harness, write_harness
from imgui_book.core.registry import SnippetRegistry, load
from imgui_book.core.snippets import Snippet
from imgui_book.core.tags import ExampleTags


def _registry() -> SnippetRegistry:
    return SnippetRegistry(
        [
            Snippet("a_md_0_10", 'imgui.text("a")\n\nif imgui.button("b"):\n    pass\n', ExampleTags()),
            Snippet("a_md_20_40", "this is not python\n", ExampleTags(ignore=True)),
            Snippet("b_md_0_12", "imgui.text('skip')\n", ExampleTags(no_run=True)),
        ]
    )


@pytest.fixture
def harness(tmp_path: Path) -> ModuleType:
    path = write_harness(_registry(), tmp_path / "target" / "harness.py")
    return load_harness(path)


def test_generated_source_compiles() -> None:
    source = HarnessGenerator(CanvasConfig(width=320, height=200)).render(_registry())

    compile(source, "harness.py", "exec")
    assert "WIDTH = 320" in source
    assert "HEIGHT = 200" in source
    assert "def imgui_example_a_md_0_10(directory: Path) -> None:" in source
    assert "imgui_example_a_md_20_40" not in source


def test_empty_registry_generates_a_valid_module() -> None:
    compile(HarnessGenerator().render(SnippetRegistry()), "harness.py", "exec")


def test_dispatch_table_covers_runnable_snippets(harness: ModuleType) -> None:
    assert list(harness.HARNESSES) == ["a_md_0_10", "b_md_0_12"]
    assert harness.NO_RUN == frozenset({"b_md_0_12"})


def test_embedded_metadata_round_trips(harness: ModuleType) -> None:
    assert load(harness.get_metadata()) == _registry()


def test_invoke_dispatches_by_identifier(
    harness: ModuleType, monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    calls: list[tuple[str, Path]] = []
    monkeypatch.setitem(harness.HARNESSES, "a_md_0_10", lambda d: calls.append(("a", d)))

    harness.invoke("a_md_0_10", str(tmp_path))

    assert calls == [("a", tmp_path)]


def test_invoke_unknown_identifier(harness: ModuleType, tmp_path: Path) -> None:
    with pytest.raises(UnknownSnippetError, match="invoke of unknown identifier 'nope'"):
        harness.invoke("nope", tmp_path)


def test_invoke_all_skips_no_run(
    harness: ModuleType, monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    calls: list[str] = []
    monkeypatch.setitem(harness.HARNESSES, "a_md_0_10", lambda d: calls.append("a"))
    monkeypatch.setitem(harness.HARNESSES, "b_md_0_12", lambda d: calls.append("b"))

    harness.invoke_all(tmp_path)

    assert calls == ["a"]


def test_registry_sidecar_is_written(tmp_path: Path) -> None:
    sidecar = tmp_path / "meta" / "registry.json"

    write_harness(_registry(), tmp_path / "h.py", registry_path=sidecar)

    assert load(sidecar.read_bytes()) == _registry()


def test_missing_harness_module(tmp_path: Path) -> None:
    with pytest.raises(ArtifactError, match="imgui-book generate"):
        load_harness(tmp_path / "missing.py")


def test_foreign_module_is_rejected(tmp_path: Path) -> None:
    path = tmp_path / "other.py"
    path.write_text("VALUE = 1\n", encoding="utf-8")

    with pytest.raises(ExampleBookError, match="not a generated harness"):
        load_harness(path)
