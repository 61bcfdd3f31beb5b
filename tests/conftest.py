"""Shared test fixtures."""

from __future__ import annotations

import os
import stat
import subprocess
from collections.abc import Callable
from pathlib import Path

import pytest

from chainbuild.config import Settings
from chainbuild.models import ToolchainEnvironment

FAKE_EMCC = """\
#!/bin/sh
if [ "$1" = "--generate-config" ]; then
  printf "import os\\nLLVM_ROOT = '/usr/bin'\\nCACHE = '/opt/emsdk/cache'\\n" > "$EM_CONFIG"
fi
exit 0
"""


def write_executable(path: Path, content: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return path


@pytest.fixture
def fake_bin(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """A directory holding a fake ``emcc``; it is the only entry on PATH."""
    bin_dir = tmp_path / "bin"
    write_executable(bin_dir / "emcc", FAKE_EMCC)
    monkeypatch.setenv("PATH", str(bin_dir))
    monkeypatch.delenv("EM_CONFIG", raising=False)
    monkeypatch.delenv("EM_CACHE", raising=False)
    return bin_dir


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    root = tmp_path / "root"
    root.mkdir()
    return Settings(root=root, prefix=root / "install", emsdk=tmp_path / "emsdk", jobs=3)


@pytest.fixture
def toolchain(tmp_path: Path) -> ToolchainEnvironment:
    upstream = tmp_path / "emsdk" / "upstream"
    return ToolchainEnvironment(
        compiler=upstream / "emscripten" / "emcc",
        cache_dir=tmp_path / "cache",
        config_path=tmp_path / ".emscripten",
        emscripten_root=upstream / "emscripten",
        llvm_root=upstream / "bin",
        binaryen_root=upstream,
    )


@pytest.fixture
def make_executable() -> Callable[[Path, str], Path]:
    return write_executable


GitRepoFactory = Callable[[Path, tuple[str, ...]], Path]


@pytest.fixture
def git_repo() -> GitRepoFactory:
    """Create a repository with one commit per tag, tagged in order."""

    def create(path: Path, tags: tuple[str, ...]) -> Path:
        path.mkdir(parents=True, exist_ok=True)
        _run_git(["init", "--quiet"], cwd=path)
        _run_git(["config", "user.email", "chainbuild@example.com"], cwd=path)
        _run_git(["config", "user.name", "Chainbuild Test"], cwd=path)
        for tag in tags:
            (path / "VERSION").write_text(f"{tag}\n", encoding="utf-8")
            _run_git(["add", "VERSION"], cwd=path)
            _run_git(["commit", "--quiet", "-m", f"release {tag}"], cwd=path)
            _run_git(["tag", tag], cwd=path)
        return path

    return create


def _run_git(argv: list[str], *, cwd: Path) -> str:
    completed = subprocess.run(
        ["git", *argv],
        cwd=cwd,
        check=False,
        text=True,
        capture_output=True,
        env={**os.environ, "GIT_CONFIG_NOSYSTEM": "1"},
    )
    if completed.returncode != 0:
        raise RuntimeError(f"git {' '.join(argv)} failed: {completed.stderr.strip()}")
    return completed.stdout.strip()
