"""Ephemeral working directory that brackets a whole orchestrator run.

The directory is removed on every exit path. ``SIGTERM`` is converted to
``SystemExit`` while a workspace is active so that the ``finally`` clause
still runs; ``KeyboardInterrupt`` unwinds through it natively.
"""

from __future__ import annotations

import os
import shutil
import signal
import tempfile
import threading
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from pathlib import Path
from types import FrameType
from typing import TypeVar

T = TypeVar("T")

WORKSPACE_PREFIX = "chainbuild-"


def _terminate(signum: int, frame: FrameType | None) -> None:
    raise SystemExit(128 + signum)


@contextmanager
def _sigterm_as_exit() -> Iterator[None]:
    if threading.current_thread() is not threading.main_thread():
        yield
        return
    previous = signal.signal(signal.SIGTERM, _terminate)
    try:
        yield
    finally:
        signal.signal(signal.SIGTERM, previous)


@contextmanager
def workspace(*, prefix: str = WORKSPACE_PREFIX, parent: str | Path | None = None) -> Iterator[Path]:
    """Create a unique temporary directory, enter it, and always remove it."""
    root = Path(tempfile.mkdtemp(prefix=prefix, dir=str(parent) if parent else None)).resolve()
    previous_cwd = os.getcwd()
    try:
        with _sigterm_as_exit():
            os.chdir(root)
            yield root
    finally:
        os.chdir(previous_cwd)
        shutil.rmtree(root, ignore_errors=True)


def with_workspace(
    fn: Callable[[Path], T],
    *,
    prefix: str = WORKSPACE_PREFIX,
    parent: str | Path | None = None,
) -> T:
    with workspace(prefix=prefix, parent=parent) as root:
        return fn(root)
