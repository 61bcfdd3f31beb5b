"""Typed interfaces for native build-system adapters."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Protocol

from chainbuild.models import PackageSpec, ToolchainEnvironment

# The cross target has no thread support.
NO_PTHREADS = "-s USE_PTHREADS=0"


@dataclass(frozen=True, slots=True)
class StepContext:
    """Everything one package's stages need, passed explicitly."""

    spec: PackageSpec
    source_dir: Path
    prefix: Path
    toolchain: ToolchainEnvironment
    jobs: int
    dependency_paths: Mapping[str, Path] = field(default_factory=dict)


class Builder(Protocol):
    name: str

    def configure(self, ctx: StepContext) -> None:
        """Run the native configure/generate step with injected parameters."""

    def patch(self, ctx: StepContext) -> None:
        """Edit generated build descriptions the native system cannot be told about."""

    def build(self, ctx: StepContext) -> None:
        """Run the native parallel build."""

    def install(self, ctx: StepContext) -> None:
        """Install into the shared prefix."""
