"""Subprocess boundary for every delegated tool invocation.

This is the only place the resolved toolchain is exported into process
environment variables. ``subprocess.run`` kills the child before
re-raising, so an interrupt never leaves an orphaned native build behind.
"""

from __future__ import annotations

import subprocess
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Protocol

from chainbuild.errors import CommandError
from chainbuild.models import ToolchainEnvironment

STDERR_LIMIT = 2000


class CommandRunner(Protocol):
    def __call__(
        self,
        argv: Sequence[str],
        *,
        cwd: Path | None = None,
        toolchain: ToolchainEnvironment | None = None,
        env: Mapping[str, str] | None = None,
    ) -> str:
        """Run *argv* to completion and return its stdout."""


def run_command(
    argv: Sequence[str],
    *,
    cwd: Path | None = None,
    toolchain: ToolchainEnvironment | None = None,
    env: Mapping[str, str] | None = None,
) -> str:
    command = [str(arg) for arg in argv]
    process_env = toolchain.subprocess_env(env) if toolchain is not None else None
    if process_env is None and env is not None:
        process_env = dict(env)
    try:
        completed = subprocess.run(
            command,
            cwd=str(cwd) if cwd is not None else None,
            env=process_env,
            check=False,
            text=True,
            capture_output=True,
        )
    except OSError as exc:
        raise CommandError(
            f"Unable to start `{command[0]}`.",
            hint="Ensure the tool is installed and on PATH.",
            context={"command": " ".join(command), "error": str(exc)},
        ) from exc
    if completed.returncode != 0:
        stderr = (completed.stderr or "").strip()
        stdout = (completed.stdout or "").strip()
        raise CommandError(
            f"`{command[0]}` exited with status {completed.returncode}.",
            hint="Inspect the command output for details.",
            context={
                "command": " ".join(command),
                "cwd": str(cwd) if cwd is not None else "",
                "returncode": str(completed.returncode),
                "stderr": stderr[-STDERR_LIMIT:],
                "stdout": stdout[-STDERR_LIMIT:],
            },
        )
    return completed.stdout
