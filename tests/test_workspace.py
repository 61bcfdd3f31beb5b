import os
import signal
import time
from pathlib import Path

import pytest

from chainbuild.workspace import with_workspace, workspace


def test_workspace_is_entered_and_removed_on_success(tmp_path: Path) -> None:
    before = Path.cwd()

    with workspace(parent=tmp_path) as root:
        assert Path.cwd() == root
        assert root.parent == tmp_path.resolve()
        (root / "scratch.txt").write_text("data", encoding="utf-8")
        (root / "nested" / "dir").mkdir(parents=True)

    assert not root.exists()
    assert Path.cwd() == before


def test_workspaces_are_uniquely_named(tmp_path: Path) -> None:
    with workspace(parent=tmp_path) as first, workspace(parent=tmp_path) as second:
        assert first != second
        assert first.name.startswith("chainbuild-")


def test_workspace_is_removed_when_the_body_raises(tmp_path: Path) -> None:
    before = Path.cwd()
    captured: list[Path] = []

    with pytest.raises(RuntimeError):
        with workspace(parent=tmp_path) as root:
            captured.append(root)
            raise RuntimeError("boom")

    assert not captured[0].exists()
    assert Path.cwd() == before


def test_workspace_is_removed_on_keyboard_interrupt(tmp_path: Path) -> None:
    captured: list[Path] = []

    with pytest.raises(KeyboardInterrupt):
        with workspace(parent=tmp_path) as root:
            captured.append(root)
            raise KeyboardInterrupt

    assert not captured[0].exists()


def test_workspace_is_removed_on_sigterm(tmp_path: Path) -> None:
    captured: list[Path] = []
    previous = signal.getsignal(signal.SIGTERM)

    with pytest.raises(SystemExit) as excinfo:
        with workspace(parent=tmp_path) as root:
            captured.append(root)
            os.kill(os.getpid(), signal.SIGTERM)
            time.sleep(5)

    assert excinfo.value.code == 128 + signal.SIGTERM
    assert not captured[0].exists()
    assert signal.getsignal(signal.SIGTERM) == previous


def test_with_workspace_returns_the_callback_result(tmp_path: Path) -> None:
    seen: list[Path] = []

    def body(root: Path) -> str:
        seen.append(root)
        return "done"

    assert with_workspace(body, parent=tmp_path) == "done"
    assert not seen[0].exists()
