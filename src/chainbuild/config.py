"""Environment-variable settings with documented names and defaults.

- ``CHAINBUILD_ROOT``: root holding the local cache and config
  (default: current directory).
- ``WRAPPER_INSTALL``: shared install prefix (default: ``<root>/install``).
- ``EM_CACHE``: toolchain cache override (default: ``<root>/.emscripten_cache``).
- ``EMSDK``: toolchain root (default: ``/opt/emsdk``).
- ``ZLIB_VERSION`` / ``IMATH_VERSION`` / ``OPENEXR_VERSION``: package pins
  (defaults: ``1.3.1`` / ``3.1.11`` / ``3.2.4``).
- ``BUILD_JOBS``: native build parallelism (default: CPU count, else 2).
- ``CHAINBUILD_REPORT``: write JSON-lines log records to this path.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from chainbuild.errors import ValidationError

DEFAULT_EMSDK = "/opt/emsdk"
DEFAULT_JOBS = 2
CACHE_DIRNAME = ".emscripten_cache"
CONFIG_FILENAME = ".emscripten"

DEFAULT_VERSIONS: dict[str, str] = {
    "zlib": "1.3.1",
    "Imath": "3.1.11",
    "OpenEXR": "3.2.4",
}


def version_variable(package: str) -> str:
    """Name of the environment variable that pins *package*."""
    return f"{package.upper()}_VERSION"


def default_jobs() -> int:
    count = os.cpu_count()
    return count if count else DEFAULT_JOBS


@dataclass(frozen=True, slots=True)
class Settings:
    root: Path
    prefix: Path
    emsdk: Path
    cache_override: Path | None = None
    versions: Mapping[str, str] = field(default_factory=lambda: dict(DEFAULT_VERSIONS))
    jobs: int = DEFAULT_JOBS
    report_path: Path | None = None

    @property
    def default_cache_dir(self) -> Path:
        return self.root / CACHE_DIRNAME

    @property
    def config_path(self) -> Path:
        return self.root / CONFIG_FILENAME

    def version_for(self, package: str) -> str:
        try:
            return self.versions[package]
        except KeyError as exc:
            raise ValidationError(
                f"No pinned version for package `{package}`.",
                hint=f"Set {version_variable(package)}.",
                context={"package": package},
            ) from exc

    @classmethod
    def from_environ(
        cls,
        environ: Mapping[str, str] | None = None,
        *,
        cwd: Path | None = None,
    ) -> Settings:
        env = os.environ if environ is None else environ
        base = Path(cwd) if cwd is not None else Path.cwd()
        root = _absolute(env.get("CHAINBUILD_ROOT") or base, base)
        prefix = _absolute(env.get("WRAPPER_INSTALL") or root / "install", base)
        cache = env.get("EM_CACHE")
        report = env.get("CHAINBUILD_REPORT")

        versions: dict[str, str] = {}
        for package, default in DEFAULT_VERSIONS.items():
            variable = version_variable(package)
            value = env.get(variable, default).strip()
            if not value:
                raise ValidationError(
                    f"{variable} must not be empty.",
                    hint=f"Unset {variable} to build {package} {default}.",
                    context={"variable": variable},
                )
            versions[package] = value

        return cls(
            root=root,
            prefix=prefix,
            emsdk=_absolute(env.get("EMSDK") or DEFAULT_EMSDK, base),
            cache_override=_absolute(cache, base) if cache else None,
            versions=versions,
            jobs=_parse_jobs(env.get("BUILD_JOBS")),
            report_path=_absolute(report, base) if report else None,
        )


def _absolute(value: str | Path, base: Path) -> Path:
    # relative values are anchored at the launch directory
    path = Path(value)
    if not path.is_absolute():
        path = base / path
    return path.resolve()


def _parse_jobs(raw: str | None) -> int:
    if raw is None or not raw.strip():
        return default_jobs()
    try:
        jobs = int(raw)
    except ValueError as exc:
        raise ValidationError(
            "BUILD_JOBS must be an integer.",
            hint="Unset BUILD_JOBS to use the host CPU count.",
            context={"variable": "BUILD_JOBS", "value": raw},
        ) from exc
    if jobs < 1:
        raise ValidationError(
            "BUILD_JOBS must be at least 1.",
            context={"variable": "BUILD_JOBS", "value": raw},
        )
    return jobs
