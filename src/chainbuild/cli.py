"""Single entry point: resolve the toolchain and build the default chain."""

from __future__ import annotations

import argparse
import sys
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any

from chainbuild.catalog import default_chain
from chainbuild.config import Settings
from chainbuild.errors import ChainbuildError
from chainbuild.fetch import GitSourceFetcher
from chainbuild.models import PipelineReport
from chainbuild.observability import StructuredLogger
from chainbuild.pipeline import Pipeline
from chainbuild.step import PackageBuildStep
from chainbuild.toolchain import ToolchainResolver
from chainbuild.workspace import with_workspace

ENVIRONMENT_HELP = """\
environment variables:
  CHAINBUILD_ROOT    root for the local cache and config (default: cwd)
  WRAPPER_INSTALL    shared install prefix (default: <root>/install)
  EM_CACHE           toolchain cache (default: <root>/.emscripten_cache)
  EMSDK              emscripten SDK root (default: /opt/emsdk)
  ZLIB_VERSION       zlib tag v<version> (default: 1.3.1)
  IMATH_VERSION      Imath tag v<version> (default: 3.1.11)
  OPENEXR_VERSION    OpenEXR tag v<version> (default: 3.2.4)
  BUILD_JOBS         make parallelism (default: CPU count, else 2)
  CHAINBUILD_REPORT  write JSON-lines log records to this path
"""


def _echo(record: dict[str, Any]) -> None:
    # failures are reported once, on stderr, by main()
    if record["level"] != "error":
        print(record["message"], flush=True)


def build_dependencies(settings: Settings, logger: StructuredLogger) -> PipelineReport:
    toolchain = ToolchainResolver(settings, logger=logger).resolve()
    pipeline = Pipeline(
        prefix=settings.prefix,
        step=PackageBuildStep(toolchain, jobs=settings.jobs, logger=logger),
        fetcher=GitSourceFetcher(logger=logger),
        logger=logger,
    )
    chain = default_chain(settings.versions)
    return with_workspace(lambda workdir: pipeline.run(chain, workdir=workdir))


def main(
    argv: Sequence[str] | None = None,
    *,
    environ: Mapping[str, str] | None = None,
    cwd: Path | None = None,
) -> int:
    parser = argparse.ArgumentParser(
        prog="chainbuild",
        description="Build zlib, Imath and OpenEXR with emscripten into a shared prefix.",
        epilog=ENVIRONMENT_HELP,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.parse_args(argv)

    logger = StructuredLogger(sink=_echo)
    settings: Settings | None = None
    try:
        settings = Settings.from_environ(environ, cwd=cwd)
        report = build_dependencies(settings, logger)
        report.raise_for_failure()
    except ChainbuildError as exc:
        print(f"chainbuild: {exc.one_line()}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print("chainbuild: interrupted", file=sys.stderr)
        return 130
    finally:
        if settings is not None and settings.report_path is not None:
            logger.to_json_lines(settings.report_path)

    print(f"\nAll dependencies built and installed to: {settings.prefix}")
    print("Now build the wrapper:")
    print(f'  cd "{settings.root / "wrap"}" && make')
    return 0
