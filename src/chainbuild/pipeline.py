"""Strictly sequential execution of a fixed package chain."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from pathlib import Path

from chainbuild.errors import SourceUnavailable, ValidationError
from chainbuild.fetch import GitSourceFetcher, SourceFetcher
from chainbuild.models import BuildResult, PackageSpec, PipelineReport
from chainbuild.observability import StructuredLogger
from chainbuild.step import PackageBuildStep


def validate_chain(chain: Sequence[PackageSpec]) -> None:
    """Reject chains that are not a linear, dependency-respecting order."""
    if not chain:
        raise ValidationError("The build chain is empty.")
    seen: set[str] = set()
    previous_ordinal: int | None = None
    for spec in chain:
        if spec.name in seen:
            raise ValidationError(
                f"Package `{spec.name}` appears more than once in the chain.",
                context={"package": spec.name},
            )
        if previous_ordinal is not None and spec.ordinal <= previous_ordinal:
            raise ValidationError(
                f"Package `{spec.name}` is out of order.",
                hint="Chain ordinals must be strictly increasing.",
                context={"package": spec.name, "ordinal": str(spec.ordinal)},
            )
        for dependency in spec.depends_on:
            if dependency not in seen:
                raise ValidationError(
                    f"Package `{spec.name}` depends on `{dependency}`, which is not built before it.",
                    hint="Move the dependency earlier in the chain.",
                    context={"package": spec.name, "dependency": dependency},
                )
        seen.add(spec.name)
        previous_ordinal = spec.ordinal


@dataclass(slots=True)
class Pipeline:
    prefix: Path
    step: PackageBuildStep
    fetcher: SourceFetcher = field(default_factory=GitSourceFetcher)
    logger: StructuredLogger = field(default_factory=StructuredLogger)

    def run(self, chain: Sequence[PackageSpec], *, workdir: Path) -> PipelineReport:
        """Fetch every pinned source, then build packages one after another.

        Stops at the first failure; packages already installed stay in the
        prefix.
        """
        validate_chain(chain)
        self.prefix.mkdir(parents=True, exist_ok=True)
        self.logger.log(operation="pipeline", message=f"Using WRAPPER_INSTALL={self.prefix}")

        sources: dict[str, Path] = {}
        self.logger.log(operation="pipeline", message="Fetching sources (git)...")
        for spec in chain:
            try:
                sources[spec.name] = self.fetcher.fetch(spec, workdir / spec.source_dirname)
            except SourceUnavailable as exc:
                self.logger.log(
                    operation="fetch",
                    package=spec.name,
                    stage="fetch",
                    level="error",
                    message=exc.one_line(),
                )
                return PipelineReport(
                    prefix=self.prefix,
                    results=(BuildResult.failed(spec, stage="fetch", error=exc),),
                )

        results: list[BuildResult] = []
        completed: dict[str, BuildResult] = {}
        for spec in chain:
            result = self.step.build(spec, self.prefix, completed, source_dir=sources[spec.name])
            results.append(result)
            if not result.ok:
                break
            completed[spec.name] = result
        return PipelineReport(prefix=self.prefix, results=tuple(results))
