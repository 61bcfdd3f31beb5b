"""Per-package configure -> patch -> build -> install execution."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import cast

from chainbuild.builders import Builder, StepContext, builder_for
from chainbuild.config import DEFAULT_JOBS
from chainbuild.errors import (
    SUBJECT_KEYS,
    BuildFailed,
    ChainbuildError,
    ConfigureFailed,
    InstallFailed,
    StageError,
)
from chainbuild.models import BuildResult, PackageSpec, Stage, ToolchainEnvironment
from chainbuild.observability import StructuredLogger

BuilderFactory = Callable[[PackageSpec], Builder]

STAGE_ERRORS: dict[str, type[StageError]] = {
    "configure": ConfigureFailed,
    "build": BuildFailed,
    "install": InstallFailed,
}


def default_builder_factory(spec: PackageSpec) -> Builder:
    return builder_for(spec.build_system)


def snapshot_prefix(prefix: Path) -> dict[str, tuple[int, int]]:
    """Map prefix-relative file paths to (mtime_ns, size)."""
    if not prefix.exists():
        return {}
    state: dict[str, tuple[int, int]] = {}
    for path in prefix.rglob("*"):
        if path.is_file():
            stat = path.stat()
            state[path.relative_to(prefix).as_posix()] = (stat.st_mtime_ns, stat.st_size)
    return state


@dataclass(slots=True)
class PackageBuildStep:
    toolchain: ToolchainEnvironment
    jobs: int = DEFAULT_JOBS
    builder_factory: BuilderFactory = default_builder_factory
    logger: StructuredLogger = field(default_factory=StructuredLogger)

    def build(
        self,
        spec: PackageSpec,
        prefix: Path,
        prior: Mapping[str, BuildResult],
        *,
        source_dir: Path,
    ) -> BuildResult:
        before = snapshot_prefix(prefix)
        try:
            ctx = StepContext(
                spec=spec,
                source_dir=source_dir,
                prefix=prefix,
                toolchain=self.toolchain,
                jobs=self.jobs,
                dependency_paths=self.dependency_paths(spec, prior),
            )
            builder = self._builder(spec)
            self._run_stage(spec, "configure", "configure", builder.configure, ctx)
            self._run_stage(spec, "configure", "patch", builder.patch, ctx)
            self._run_stage(spec, "build", "build", builder.build, ctx)
            self._run_stage(spec, "install", "install", builder.install, ctx)
            exports = self.verify_exports(spec, prefix)
        except StageError as exc:
            self.logger.log(
                operation="build",
                package=spec.name,
                stage=exc.stage,
                level="error",
                message=exc.one_line(),
            )
            self._log_output(spec, exc)
            return BuildResult.failed(spec, stage=cast(Stage, exc.stage), error=exc)

        after = snapshot_prefix(prefix)
        artifacts = tuple(sorted(path for path, sig in after.items() if before.get(path) != sig))
        self.logger.log(
            operation="build",
            package=spec.name,
            stage="install",
            message=f"Installed {spec.name} {spec.version} ({len(artifacts)} files)",
        )
        return BuildResult.succeeded(spec, artifacts=artifacts, exports=exports)

    def dependency_paths(
        self, spec: PackageSpec, prior: Mapping[str, BuildResult]
    ) -> dict[str, Path]:
        """Collect exported paths of every dependency, checking they are installed."""
        paths: dict[str, Path] = {}
        for dependency in spec.depends_on:
            result = prior.get(dependency)
            if result is None or not result.ok:
                raise ConfigureFailed(
                    spec.name,
                    spec.version,
                    f"dependency {dependency} has not been installed.",
                    hint="Dependencies must precede the package in the build chain.",
                    context={"dependency": dependency},
                )
            for key, path in result.exports.items():
                if not path.exists():
                    raise ConfigureFailed(
                        spec.name,
                        spec.version,
                        f"artifact {path} of dependency {dependency} is missing.",
                        hint="Inspect the shared prefix for a partial install.",
                        context={"dependency": dependency, "variable": key},
                    )
                paths[key] = path
        return paths

    def verify_exports(self, spec: PackageSpec, prefix: Path) -> dict[str, Path]:
        exports: dict[str, Path] = {}
        for key, relative in spec.exports.items():
            path = prefix / relative
            if not path.exists():
                raise InstallFailed(
                    spec.name,
                    spec.version,
                    f"install did not produce {relative}.",
                    hint="Check the install target of the package.",
                    context={"variable": key, "path": str(path)},
                )
            exports[key] = path
        return exports

    def _log_output(self, spec: PackageSpec, exc: StageError) -> None:
        """Surface the failing tool's captured output tail as a detail record."""
        output = exc.context.get("stderr") or exc.context.get("stdout")
        if not output:
            return
        self.logger.log(
            operation="build",
            package=spec.name,
            stage=exc.stage,
            level="detail",
            message=output,
            extra={"command": exc.context.get("command", "")},
        )

    def _builder(self, spec: PackageSpec) -> Builder:
        try:
            return self.builder_factory(spec)
        except ChainbuildError as exc:
            raise ConfigureFailed(
                spec.name,
                spec.version,
                exc.message,
                hint=exc.hint,
                context=_detail(exc.context),
            ) from exc

    def _run_stage(
        self,
        spec: PackageSpec,
        stage: str,
        step: str,
        action: Callable[[StepContext], None],
        ctx: StepContext,
    ) -> None:
        self.logger.log(
            operation="build",
            package=spec.name,
            stage=stage,
            message=f"{step.capitalize()} {spec.name} {spec.version}",
        )
        try:
            action(ctx)
        except StageError:
            raise
        except ChainbuildError as exc:
            raise STAGE_ERRORS[stage](
                spec.name,
                spec.version,
                f"{step} failed: {exc.message}",
                hint=exc.hint,
                context={"step": step, **_detail(exc.context)},
            ) from exc
        except OSError as exc:
            raise STAGE_ERRORS[stage](
                spec.name,
                spec.version,
                f"{step} failed: {exc}",
                context={"step": step},
            ) from exc


def _detail(context: Mapping[str, str]) -> dict[str, str]:
    return {k: v for k, v in context.items() if k not in SUBJECT_KEYS}

