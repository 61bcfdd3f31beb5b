"""Core typed dataclasses for packages, toolchain state and build outcomes."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Literal

from chainbuild.errors import ChainbuildError

BuildSystem = Literal["autotools", "cmake"]
Stage = Literal["fetch", "configure", "build", "install"]


@dataclass(frozen=True, slots=True)
class PackageSpec:
    name: str
    version: str
    repository: str
    ordinal: int
    build_system: BuildSystem = "cmake"
    depends_on: tuple[str, ...] = ()
    options: tuple[str, ...] = ()
    exports: Mapping[str, str] = field(default_factory=dict)
    tag_template: str = "v{version}"

    @property
    def ref(self) -> str:
        return self.tag_template.format(version=self.version)

    @property
    def source_dirname(self) -> str:
        return f"{self.name.lower()}-src"


@dataclass(frozen=True, slots=True)
class ToolchainEnvironment:
    """Resolved toolchain state, passed explicitly to every subprocess call."""

    compiler: Path
    cache_dir: Path
    config_path: Path
    emscripten_root: Path
    llvm_root: Path
    binaryen_root: Path
    node_js: Path | None = None
    requested_cache_dir: Path | None = None
    cache_substituted: bool = False

    def tool(self, name: str) -> str:
        """Return the wrapper tool that ships next to the compiler entry point."""
        candidate = self.compiler.parent / name
        if candidate.exists():
            return str(candidate)
        return name

    def subprocess_env(self, base: Mapping[str, str] | None = None) -> dict[str, str]:
        env = dict(os.environ if base is None else base)
        env["EM_CONFIG"] = str(self.config_path)
        env["EM_CACHE"] = str(self.cache_dir)
        return env


@dataclass(frozen=True, slots=True)
class BuildResult:
    package: str
    version: str
    ok: bool
    stage: Stage | None = None
    diagnostic: str = ""
    artifacts: tuple[str, ...] = ()
    exports: Mapping[str, Path] = field(default_factory=dict)
    error: ChainbuildError | None = None

    @classmethod
    def succeeded(
        cls,
        spec: PackageSpec,
        *,
        artifacts: tuple[str, ...] = (),
        exports: Mapping[str, Path] | None = None,
    ) -> BuildResult:
        return cls(
            package=spec.name,
            version=spec.version,
            ok=True,
            artifacts=artifacts,
            exports=dict(exports or {}),
        )

    @classmethod
    def failed(cls, spec: PackageSpec, *, stage: Stage, error: ChainbuildError) -> BuildResult:
        return cls(
            package=spec.name,
            version=spec.version,
            ok=False,
            stage=stage,
            diagnostic=error.one_line(),
            error=error,
        )


@dataclass(frozen=True, slots=True)
class PipelineReport:
    prefix: Path
    results: tuple[BuildResult, ...] = ()

    @property
    def ok(self) -> bool:
        return all(result.ok for result in self.results)

    @property
    def failure(self) -> BuildResult | None:
        for result in self.results:
            if not result.ok:
                return result
        return None

    def result_for(self, package: str) -> BuildResult | None:
        """Inspection helper: the result recorded for *package*, if it ran."""
        for result in self.results:
            if result.package == package:
                return result
        return None

    def raise_for_failure(self) -> None:
        failure = self.failure
        if failure is not None and failure.error is not None:
            raise failure.error
