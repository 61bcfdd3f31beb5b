"""CMake builder (Imath, OpenEXR)."""

from __future__ import annotations

from dataclasses import dataclass

from chainbuild.builders.base import NO_PTHREADS, StepContext
from chainbuild.runner import CommandRunner, run_command

BASE_DEFINITIONS: tuple[tuple[str, str], ...] = (
    ("CMAKE_BUILD_TYPE", "Release"),
    ("BUILD_SHARED_LIBS", "OFF"),
    ("BUILD_TESTING", "OFF"),
    ("CMAKE_DISABLE_FIND_PACKAGE_Threads", "ON"),
    ("CMAKE_C_STANDARD", "11"),
    ("CMAKE_CXX_STANDARD", "14"),
    ("CMAKE_C_FLAGS", NO_PTHREADS),
    ("CMAKE_CXX_FLAGS", NO_PTHREADS),
    ("CMAKE_EXE_LINKER_FLAGS", NO_PTHREADS),
)


@dataclass(slots=True)
class CMakeBuilder:
    name: str = "cmake"
    build_dirname: str = "build"
    runner: CommandRunner = run_command

    def configure_command(self, ctx: StepContext) -> tuple[str, ...]:
        definitions = [f"-DCMAKE_INSTALL_PREFIX={ctx.prefix}"]
        definitions.extend(f"-D{key}={value}" for key, value in BASE_DEFINITIONS)
        definitions.extend(ctx.spec.options)
        if ctx.dependency_paths:
            definitions.append(f"-DCMAKE_PREFIX_PATH={ctx.prefix}")
            definitions.extend(
                f"-D{key}={path}" for key, path in sorted(ctx.dependency_paths.items())
            )
        return (ctx.toolchain.tool("emcmake"), "cmake", "..", *definitions)

    def configure(self, ctx: StepContext) -> None:
        build_dir = ctx.source_dir / self.build_dirname
        build_dir.mkdir(parents=True, exist_ok=True)
        self.runner(self.configure_command(ctx), cwd=build_dir, toolchain=ctx.toolchain)

    def patch(self, ctx: StepContext) -> None:
        # the toolchain file emcmake injects already selects emar/emcc
        return None

    def build(self, ctx: StepContext) -> None:
        self.runner(
            (ctx.toolchain.tool("emmake"), "make", f"-j{ctx.jobs}"),
            cwd=ctx.source_dir / self.build_dirname,
            toolchain=ctx.toolchain,
        )

    def install(self, ctx: StepContext) -> None:
        self.runner(
            (ctx.toolchain.tool("emmake"), "make", "install"),
            cwd=ctx.source_dir / self.build_dirname,
            toolchain=ctx.toolchain,
        )
