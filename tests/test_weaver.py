from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import Any

from markdown_it import MarkdownIt
import pytest

from imgui_book.core.exceptions import HarnessExecutionError, UnknownSnippetError
from imgui_book.core.registry import SnippetRegistry
from imgui_book.core.scanner import scan_snippets
from imgui_book.core.weaver import DocumentWeaver, artifact_url, run_snippet, weave_document


SIMPLE = "Intro\n\n```{info}\ncode\n```\n\nOutro\n"
IDENTIFIER = "ch_md_7_{end}"


class RecordingEmitter:
    debug_enabled = False

    def __init__(self) -> None:
        self.warnings: list[str] = []
        self.errors: list[str] = []
        self.events: list[tuple[str, dict[str, Any]]] = []

    def warning(self, message: str, exc: BaseException | None = None) -> None:
        self.warnings.append(message)

    def error(self, message: str, exc: BaseException | None = None) -> None:
        self.errors.append(message)

    def event(self, name: str, payload: Mapping[str, Any]) -> None:
        self.events.append((name, dict(payload)))


class FakeDispatcher:
    def __init__(self, error: Exception | None = None) -> None:
        self.calls: list[tuple[str, Path]] = []
        self.error = error

    def __call__(self, identifier: str, directory: Path) -> None:
        self.calls.append((identifier, directory))
        print(f"Frame 0 of {identifier}")
        if self.error is not None:
            raise self.error


def _weave(
    info: str,
    dispatcher: FakeDispatcher,
    tmp_path: Path,
    emitter: RecordingEmitter | None = None,
    registry: SnippetRegistry | None = None,
) -> tuple[str, str]:
    source = SIMPLE.format(info=info)
    if registry is None:
        registry = SnippetRegistry(scan_snippets(source, "ch.md"))
    identifier = source.index("```", 10) + 3
    woven = weave_document(
        source, "ch.md", registry, dispatcher, tmp_path, "img", emitter=emitter
    )
    return woven, IDENTIFIER.format(end=identifier)


def test_example_is_replaced_by_code_and_image(tmp_path: Path) -> None:
    dispatcher = FakeDispatcher()

    woven, identifier = _weave("imgui-example", dispatcher, tmp_path)

    assert identifier == "ch_md_7_32"
    assert woven == (
        "Intro\n\n"
        "```python\ncode\n```\n\n"
        "[ch_md_7_32]: img/ch_md_7_32.png\n\n"
        "![](img/ch_md_7_32.png)\n\n"
        "Outro\n"
    )
    assert dispatcher.calls == [("ch_md_7_32", tmp_path)]


def test_name_becomes_alt_text(tmp_path: Path) -> None:
    woven, identifier = _weave("imgui-example,name=Buttons", FakeDispatcher(), tmp_path)

    assert f"![Buttons](img/{identifier}.png)" in woven


def test_hide_code(tmp_path: Path) -> None:
    woven, identifier = _weave("imgui-example,hide_code", FakeDispatcher(), tmp_path)

    assert "```" not in woven
    assert woven.startswith(f"Intro\n\n[{identifier}]: img/{identifier}.png\n\n![](")


def test_hide_output(tmp_path: Path) -> None:
    woven, identifier = _weave("imgui-example,hide_output", FakeDispatcher(), tmp_path)

    assert "![" not in woven
    assert woven.endswith(f"```\n\n[{identifier}]: img/{identifier}.png\n\nOutro\n")


def test_hide_keeps_only_the_link_definition(tmp_path: Path) -> None:
    dispatcher = FakeDispatcher()

    woven, identifier = _weave("imgui-example,hide", dispatcher, tmp_path)

    assert woven == f"Intro\n\n[{identifier}]: img/{identifier}.png\n\nOutro\n"
    assert dispatcher.calls


def test_ignored_block_is_dropped_without_running(tmp_path: Path) -> None:
    dispatcher = FakeDispatcher()
    emitter = RecordingEmitter()

    woven, identifier = _weave("imgui-example,ignore", dispatcher, tmp_path, emitter)

    assert woven == "Intro\n\n\n\nOutro\n"
    assert dispatcher.calls == []
    assert emitter.events == [("snippet_dropped", {"identifier": identifier, "reason": "ignore"})]


def test_unmatched_block_is_dropped(tmp_path: Path) -> None:
    dispatcher = FakeDispatcher()
    emitter = RecordingEmitter()

    woven, _ = _weave("imgui-example", dispatcher, tmp_path, emitter, SnippetRegistry())

    assert woven == "Intro\n\n\n\nOutro\n"
    assert dispatcher.calls == []
    assert emitter.events[0][1]["reason"] == "unmatched"


def test_no_run_is_rendered_but_not_invoked(tmp_path: Path) -> None:
    dispatcher = FakeDispatcher()
    emitter = RecordingEmitter()

    woven, identifier = _weave("imgui-example,no_run", dispatcher, tmp_path, emitter)

    assert f"[{identifier}]: img/{identifier}.png" in woven
    assert dispatcher.calls == []
    assert emitter.events == [("snippet_skipped", {"identifier": identifier, "reason": "no_run"})]


def test_should_panic_failure_is_expected(tmp_path: Path) -> None:
    emitter = RecordingEmitter()
    dispatcher = FakeDispatcher(RuntimeError("boom"))

    woven, identifier = _weave("imgui-example,should_panic", dispatcher, tmp_path, emitter)

    assert "```python\ncode\n```" in woven
    assert emitter.events == [("snippet_panicked", {"identifier": identifier, "error": "boom"})]


def test_should_panic_success_warns(tmp_path: Path) -> None:
    emitter = RecordingEmitter()

    _weave("imgui-example,should_panic", FakeDispatcher(), tmp_path, emitter)

    assert emitter.warnings and "should_panic" in emitter.warnings[0]


def test_failing_example_aborts(tmp_path: Path) -> None:
    dispatcher = FakeDispatcher(ValueError("bad widget"))

    with pytest.raises(HarnessExecutionError, match="bad widget") as excinfo:
        _weave("imgui-example", dispatcher, tmp_path)

    assert excinfo.value.identifier == "ch_md_7_32"
    assert isinstance(excinfo.value.__cause__, ValueError)


def test_unknown_identifier_always_propagates(tmp_path: Path) -> None:
    dispatcher = FakeDispatcher(UnknownSnippetError("ch_md_7_32"))

    with pytest.raises(UnknownSnippetError):
        _weave("imgui-example,should_panic", dispatcher, tmp_path)


def test_example_output_is_suppressed(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    _weave("imgui-example", FakeDispatcher(), tmp_path)

    assert capsys.readouterr().out == ""


def test_blockquoted_example_keeps_its_container(tmp_path: Path) -> None:
    source = "> ```imgui-example\n> code\n> ```\n"
    registry = SnippetRegistry(scan_snippets(source, "ch.md"))
    (snippet,) = registry

    woven = weave_document(source, "ch.md", registry, FakeDispatcher(), tmp_path, "img")

    url = f"img/{snippet.identifier}.png"
    assert woven == f"> ```python\n> code\n> ```\n>\n> [{snippet.identifier}]: {url}\n>\n> ![]({url})\n"


def test_link_definition_is_separated_from_paragraph(tmp_path: Path) -> None:
    source = "Intro text\n```imgui-example,hide_code\ncode\n```\n"
    registry = SnippetRegistry(scan_snippets(source, "ch.md"))
    (snippet,) = registry

    woven = weave_document(source, "ch.md", registry, FakeDispatcher(), tmp_path, "img")

    assert snippet.identifier == "ch_md_11_46"
    assert woven == (
        "Intro text\n\n"
        "[ch_md_11_46]: img/ch_md_11_46.png\n\n"
        "![](img/ch_md_11_46.png)\n"
    )
    env: dict[str, Any] = {}
    MarkdownIt("commonmark").parse(woven, env)
    assert "CH_MD_11_46" in env["references"]


def test_following_paragraph_is_kept_apart(tmp_path: Path) -> None:
    source = "```imgui-example,hide\ncode\n```\nOutro\n"
    registry = SnippetRegistry(scan_snippets(source, "ch.md"))
    (snippet,) = registry

    woven = weave_document(source, "ch.md", registry, FakeDispatcher(), tmp_path, "img")

    assert woven == f"[{snippet.identifier}]: img/{snippet.identifier}.png\n\nOutro\n"
    env: dict[str, Any] = {}
    tokens = MarkdownIt("commonmark").parse(woven, env)
    assert [token.type for token in tokens] == ["paragraph_open", "inline", "paragraph_close"]
    assert tokens[1].content == "Outro"


def test_blockquoted_paragraph_is_kept_apart(tmp_path: Path) -> None:
    source = "> Intro\n> ```imgui-example,hide\n> code\n> ```\n"
    registry = SnippetRegistry(scan_snippets(source, "ch.md"))
    (snippet,) = registry

    woven = weave_document(source, "ch.md", registry, FakeDispatcher(), tmp_path, "img")

    assert woven == f"> Intro\n> \n> [{snippet.identifier}]: img/{snippet.identifier}.png\n"


def test_crlf_documents_keep_their_line_endings(tmp_path: Path) -> None:
    source = "Intro\r\n\r\n```imgui-example,hide\r\ncode\r\n```\r\n\r\nOutro\r\n"
    registry = SnippetRegistry(scan_snippets(source, "ch.md"))
    (snippet,) = registry

    woven = weave_document(source, "ch.md", registry, FakeDispatcher(), tmp_path, "img")

    url = f"img/{snippet.identifier}.png"
    assert woven == f"Intro\r\n\r\n[{snippet.identifier}]: {url}\r\n\r\nOutro\r\n"


def test_only_example_blocks_change(tmp_path: Path) -> None:
    source = (
        "# Title\n\n"
        "```imgui-example,name=Hello\n"
        'imgui.text("hi")\n'
        "```\n\n"
        "Some *text* with [a link](other.md).\n\n"
        "```python\n"
        'print("plain")\n'
        "```\n\n"
        "```imgui-example,ignore\n"
        'imgui.text("ignored")\n'
        "```\n\n"
        "| a | b |\n|---|---|\n| 1 | 2 |\n\n"
        "```imgui-example,no_run\n"
        'imgui.text("skip")\n'
        "```\n"
    )
    registry = SnippetRegistry(scan_snippets(source, "ch.md"))
    first, ignored, skipped = registry
    dispatcher = FakeDispatcher()
    weaver = DocumentWeaver(registry, dispatcher, tmp_path, code_language="py")

    woven = weaver.weave(source, "ch.md", "../_generated")

    assert dispatcher.calls == [(first.identifier, tmp_path)]
    assert woven.startswith('# Title\n\n```py\nimgui.text("hi")\n```\n\n')
    assert f"![Hello](../_generated/{first.identifier}.png)" in woven
    assert (
        "\n\nSome *text* with [a link](other.md).\n\n"
        '```python\nprint("plain")\n```\n\n'
        "\n\n| a | b |\n|---|---|\n| 1 | 2 |\n\n"
    ) in woven
    assert "ignored" not in woven
    assert ignored.identifier not in woven
    assert woven.endswith(
        f'```py\nimgui.text("skip")\n```\n\n'
        f"[{skipped.identifier}]: ../_generated/{skipped.identifier}.png\n\n"
        f"![](../_generated/{skipped.identifier}.png)\n"
    )


def test_run_snippet_reports_artifact_path(tmp_path: Path) -> None:
    (snippet,) = scan_snippets(SIMPLE.format(info="imgui-example"), "ch.md")
    emitter = RecordingEmitter()

    run_snippet(snippet, FakeDispatcher(), tmp_path, emitter=emitter)

    assert emitter.events == [
        (
            "snippet_invoked",
            {"identifier": snippet.identifier, "path": str(tmp_path / snippet.output_filename)},
        )
    ]
    assert artifact_url("../img", snippet) == f"../img/{snippet.identifier}.png"
