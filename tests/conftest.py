from __future__ import annotations

from collections.abc import Iterator
import logging

import pytest

import imgui_book.ui.cli.state as cli_state


@pytest.fixture(autouse=True)
def _isolate_cli_state() -> Iterator[None]:
    """Undo the logging handlers and CLI state installed by entry points."""
    logger = logging.getLogger("imgui_book")
    handlers = list(logger.handlers)
    level = logger.level
    token = cli_state._STATE_VAR.set(None)
    yield
    cli_state._STATE_VAR.reset(token)
    logger.handlers[:] = handlers
    logger.setLevel(level)
