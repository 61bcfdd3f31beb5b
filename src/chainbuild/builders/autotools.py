"""Builder for packages with a hand-written ``./configure`` + Makefile (zlib)."""

from __future__ import annotations

from dataclasses import dataclass

from chainbuild.buildfile import BuildDescription
from chainbuild.builders.base import StepContext
from chainbuild.runner import CommandRunner, run_command


@dataclass(slots=True)
class AutotoolsBuilder:
    name: str = "autotools"
    makefile: str = "Makefile"
    archiver: str = "emar"
    archiver_flags: str = "r"
    optimization: str = "-O3"
    runner: CommandRunner = run_command

    def configure(self, ctx: StepContext) -> None:
        command = (
            ctx.toolchain.tool("emconfigure"),
            "./configure",
            "--static",
            "--prefix",
            str(ctx.prefix),
            *ctx.spec.options,
        )
        self.runner(command, cwd=ctx.source_dir, toolchain=ctx.toolchain)

    def patch(self, ctx: StepContext) -> None:
        path = ctx.source_dir / self.makefile
        description = BuildDescription.load(path)
        changed = description.set("AR", self.archiver)
        changed = description.set("ARFLAGS", self.archiver_flags) or changed
        changed = description.ensure_flag("CFLAGS", self.optimization) or changed
        if changed:
            description.save(path)

    def build(self, ctx: StepContext) -> None:
        self.runner(
            (ctx.toolchain.tool("emmake"), "make", f"-j{ctx.jobs}"),
            cwd=ctx.source_dir,
            toolchain=ctx.toolchain,
        )

    def install(self, ctx: StepContext) -> None:
        self.runner(
            (ctx.toolchain.tool("emmake"), "make", "install"),
            cwd=ctx.source_dir,
            toolchain=ctx.toolchain,
        )
