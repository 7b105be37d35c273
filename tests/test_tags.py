from __future__ import annotations

import pytest

from imgui_book.core.exceptions import TagParseError
from imgui_book.core.tags import EXAMPLE_MARKER, ExampleTags, parse_tags


@pytest.mark.parametrize("info", ["", "python", "rust,no_run", "python,imgui-example"])
def test_parse_tags_ignores_ordinary_blocks(info: str) -> None:
    assert parse_tags(info) is None


def test_parse_tags_marker_only() -> None:
    assert parse_tags(EXAMPLE_MARKER) == ExampleTags()


def test_parse_tags_reads_flags_and_name() -> None:
    tags = parse_tags("imgui-example, no_run ,should_panic,name=Buttons")

    assert tags == ExampleTags(no_run=True, should_panic=True, name="Buttons")


def test_hide_sets_both_visibility_flags() -> None:
    tags = parse_tags("imgui-example,hide")

    assert tags is not None
    assert tags.hide_code and tags.hide_output
    assert not tags.ignore


def test_empty_tokens_are_skipped() -> None:
    assert parse_tags("imgui-example,,ignore,") == ExampleTags(ignore=True)


def test_unknown_tag_is_rejected() -> None:
    with pytest.raises(TagParseError, match="unknown tag 'no-run'"):
        parse_tags("imgui-example,no-run")


def test_to_dict_lists_every_field() -> None:
    assert ExampleTags(hide_code=True).to_dict() == {
        "ignore": False,
        "no_run": False,
        "should_panic": False,
        "hide_code": True,
        "hide_output": False,
        "name": None,
    }
