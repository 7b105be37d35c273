from __future__ import annotations

import logging
import sys

import pytest

from imgui_book.core.capture import capture_stdout


def test_output_is_suppressed(capsys: pytest.CaptureFixture[str]) -> None:
    with capture_stdout() as original:
        print("Frame 0")
        assert sys.stdout is not original

    print("visible")
    assert capsys.readouterr().out == "visible\n"


def test_stdout_restored_after_exception() -> None:
    before = sys.stdout

    with pytest.raises(RuntimeError):
        with capture_stdout():
            raise RuntimeError("boom")

    assert sys.stdout is before


def test_captured_output_is_logged(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.DEBUG, logger="imgui_book.core.capture"):
        with capture_stdout():
            print("hidden text")

    assert "hidden text" in caplog.text


def test_file_descriptor_is_restored(capfd: pytest.CaptureFixture[str]) -> None:
    with capture_stdout():
        sys.stdout.write("python level\n")

    print("after")
    assert capfd.readouterr().out == "after\n"
