"""Scoped suppression of standard output around harness execution.

The preprocessor speaks JSON on stdout, so anything an example prints (from
Python or from the native GUI library) has to be diverted while it runs.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager, redirect_stdout
import io
import logging
import os
import sys
from typing import TextIO


_log = logging.getLogger(__name__)


def _stdout_fileno(stream: TextIO) -> int | None:
    try:
        return stream.fileno()
    except (AttributeError, OSError, ValueError, io.UnsupportedOperation):
        return None


@contextmanager
def capture_stdout() -> Iterator[TextIO]:
    """Divert stdout for the duration of the block.

    Both ``sys.stdout`` and, when it is backed by a real file descriptor, the
    descriptor itself are redirected. The original stream is handed to the
    caller and is restored on every exit path. Captured Python-level output is
    logged at debug level.
    """
    original = sys.stdout
    buffer = io.StringIO()
    fileno = _stdout_fileno(original)
    saved_fd: int | None = None
    devnull_fd: int | None = None

    original.flush()
    if fileno is not None:
        saved_fd = os.dup(fileno)
        devnull_fd = os.open(os.devnull, os.O_WRONLY)
        os.dup2(devnull_fd, fileno)
    try:
        with redirect_stdout(buffer):
            yield original
    finally:
        if fileno is not None and saved_fd is not None:
            os.dup2(saved_fd, fileno)
            os.close(saved_fd)
        if devnull_fd is not None:
            os.close(devnull_fd)
        captured = buffer.getvalue()
        if captured:
            _log.debug("suppressed example output:\n%s", captured.rstrip())


__all__ = ["capture_stdout"]
