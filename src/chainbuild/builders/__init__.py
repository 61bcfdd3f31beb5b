"""Native build-system adapters."""

from __future__ import annotations

from chainbuild.errors import ValidationError
from chainbuild.runner import CommandRunner, run_command

from .autotools import AutotoolsBuilder
from .base import NO_PTHREADS, Builder, StepContext
from .cmake import CMakeBuilder


def builder_for(build_system: str, *, runner: CommandRunner = run_command) -> Builder:
    if build_system == "autotools":
        return AutotoolsBuilder(runner=runner)
    if build_system == "cmake":
        return CMakeBuilder(runner=runner)
    raise ValidationError(
        f"Unsupported build system `{build_system}`.",
        hint="Use `autotools` or `cmake`.",
        context={"build_system": build_system},
    )


__all__ = [
    "NO_PTHREADS",
    "AutotoolsBuilder",
    "Builder",
    "CMakeBuilder",
    "StepContext",
    "builder_for",
]
