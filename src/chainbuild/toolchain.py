"""Emscripten toolchain discovery, cache probing and config repair.

Resolution never touches the shared emsdk config: it materializes a
run-owned config file under the orchestrator root and upserts the keys the
toolchain needs, so repeated runs converge on the same file.
"""

from __future__ import annotations

import shutil
import uuid
from dataclasses import dataclass, field
from pathlib import Path

from chainbuild.config import Settings
from chainbuild.emconfig import PersistentConfig
from chainbuild.errors import CacheUnwritable, CommandError, ToolchainUnavailable
from chainbuild.models import ToolchainEnvironment
from chainbuild.observability import StructuredLogger
from chainbuild.runner import CommandRunner, run_command

COMPILER = "emcc"
NODE = "node"
WRITE_MARKER = ".write_test"
CACHE_KEYS = ("EM_CACHE", "CACHE")


@dataclass(slots=True)
class ToolchainResolver:
    settings: Settings
    runner: CommandRunner = run_command
    logger: StructuredLogger = field(default_factory=StructuredLogger)

    def resolve(self) -> ToolchainEnvironment:
        compiler = self.locate_compiler()
        requested = self.settings.cache_override or self.settings.default_cache_dir
        cache_dir, substituted = self.resolve_cache_dir(requested)
        self.logger.log(operation="resolve", message=f"Using EM_CACHE={cache_dir}")

        upstream = self.settings.emsdk / "upstream"
        node = shutil.which(NODE)
        env = ToolchainEnvironment(
            compiler=compiler,
            cache_dir=cache_dir,
            config_path=self.settings.config_path,
            emscripten_root=upstream / "emscripten",
            llvm_root=upstream / "bin",
            binaryen_root=upstream,
            node_js=Path(node) if node else None,
            requested_cache_dir=requested,
            cache_substituted=substituted,
        )
        self.write_config(env)
        return env

    def locate_compiler(self) -> Path:
        found = shutil.which(COMPILER)
        if found:
            return Path(found)
        candidate = self.settings.emsdk / "upstream" / "emscripten" / COMPILER
        if candidate.is_file() and shutil.which(str(candidate)):
            return candidate
        raise ToolchainUnavailable(
            f"{COMPILER} not found.",
            hint="Ensure the emscripten SDK is activated (source /opt/emsdk/emsdk_env.sh).",
            context={"operation": "resolve", "emsdk": str(self.settings.emsdk)},
        )

    def resolve_cache_dir(self, requested: Path) -> tuple[Path, bool]:
        """Return a writable cache directory and whether it was substituted."""
        try:
            probe_writable(requested)
        except CacheUnwritable:
            fallback = self.settings.default_cache_dir
            if fallback == requested:
                raise
            self.logger.warning(
                operation="resolve",
                message=f"EM_CACHE at {requested} is not writable; switching to {fallback}",
                extra={"requested": str(requested), "fallback": str(fallback)},
            )
            probe_writable(fallback)
            return fallback, True
        return requested, False

    def write_config(self, env: ToolchainEnvironment) -> PersistentConfig:
        path = env.config_path
        if not path.exists():
            self.logger.log(
                operation="resolve", message=f"Generating local Emscripten config at {path}"
            )
            try:
                self.runner([str(env.compiler), "--generate-config"], toolchain=env)
            except CommandError as exc:
                self.logger.warning(
                    operation="resolve",
                    message="emcc --generate-config failed; writing config from scratch",
                    extra={"error": exc.message},
                )

        config = PersistentConfig.load(path)
        cache_updated = [config.replace(key, str(env.cache_dir)) for key in CACHE_KEYS]
        if not any(cache_updated):
            config.upsert("CACHE", str(env.cache_dir))
        config.upsert("EMSCRIPTEN_ROOT", str(env.emscripten_root))
        config.upsert("LLVM_ROOT", str(env.llvm_root))
        config.upsert("BINARYEN_ROOT", str(env.binaryen_root))
        if env.node_js is not None:
            config.upsert("NODE_JS", str(env.node_js))
        config.save(path)
        return config


def probe_writable(directory: Path) -> None:
    """Create then delete a marker file in *directory*, or raise ``CacheUnwritable``."""
    marker = directory / f"{WRITE_MARKER}-{uuid.uuid4().hex[:8]}"
    try:
        directory.mkdir(parents=True, exist_ok=True)
        marker.touch()
        marker.unlink()
    except OSError as exc:
        raise CacheUnwritable(
            "Cache directory is not writable.",
            hint="Point EM_CACHE at a writable directory.",
            context={"path": str(directory), "error": str(exc)},
        ) from exc
