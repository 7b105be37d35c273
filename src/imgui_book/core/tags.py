"""Info-string grammar for executable imgui examples.

A fenced block takes part in the pipeline when its info string starts with the
marker token, optionally followed by comma separated flags::

    ```imgui-example,no_run,hide,name=Buttons
    imgui.button("OK")
    ```

`hide` is shorthand for `hide_code` plus `hide_output`. Any other token is
rejected so typos surface at build time instead of silently changing output.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields

from .exceptions import TagParseError


EXAMPLE_MARKER = "imgui-example"
_NAME_PREFIX = "name="
_FLAGS = frozenset({"ignore", "no_run", "should_panic", "hide_code", "hide_output"})


@dataclass(frozen=True, slots=True)
class ExampleTags:
    """Flags attached to one example code block."""

    # Block is recorded but never compiled into a harness
    ignore: bool = False
    # Harness is generated but not executed
    no_run: bool = False
    # Harness is expected to raise
    should_panic: bool = False
    hide_code: bool = False
    hide_output: bool = False
    # Display label, does not take part in the fingerprint
    name: str | None = field(default=None)

    def to_dict(self) -> dict[str, object]:
        return {item.name: getattr(self, item.name) for item in fields(self)}


def parse_tags(raw: str) -> ExampleTags | None:
    """Parse a fenced block info string.

    Returns ``None`` when the marker token is missing, which means the block is
    ordinary code and must be left alone.
    """
    tokens = [token.strip() for token in raw.split(",")]
    if not tokens or tokens[0] != EXAMPLE_MARKER:
        return None

    values: dict[str, object] = {}
    for token in tokens[1:]:
        if not token:
            continue
        if token in _FLAGS:
            values[token] = True
        elif token == "hide":
            values["hide_code"] = True
            values["hide_output"] = True
        elif token.startswith(_NAME_PREFIX):
            values["name"] = token[len(_NAME_PREFIX) :]
        else:
            raise TagParseError(f"unknown tag '{token}' in '{raw}'")
    return ExampleTags(**values)  # type: ignore[arg-type]


__all__ = ["EXAMPLE_MARKER", "ExampleTags", "parse_tags"]
