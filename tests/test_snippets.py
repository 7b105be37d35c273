from __future__ import annotations

from imgui_book.core.snippets import Snippet, clean_code
from imgui_book.core.tags import ExampleTags


def test_clean_code_strips_hidden_marker() -> None:
    code = "# import imgui\n#    value = 3\nimgui.text('hi')\n"

    assert clean_code(code) == "import imgui\nvalue = 3\nimgui.text('hi')\n"


def test_clean_code_terminates_every_line() -> None:
    assert clean_code("a\r\nb") == "a\nb\n"
    assert clean_code("") == ""


def test_clean_code_custom_marker() -> None:
    assert clean_code("## setup()\n# comment\n", marker="##") == "setup()\n# comment\n"


def test_clean_code_empty_marker_keeps_lines() -> None:
    assert clean_code("# comment\n", marker="") == "# comment\n"


def test_snippet_derived_names() -> None:
    snippet = Snippet("intro_md_7_32", "pass\n", ExampleTags())

    assert snippet.function_name == "imgui_example_intro_md_7_32"
    assert snippet.output_filename == "intro_md_7_32.png"
