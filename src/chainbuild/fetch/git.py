"""Shallow git fetch of exactly one pinned tag.

Network failures, authentication failures and missing tags are reported as
one coarse ``SourceUnavailable`` category; a different revision is never
substituted.
"""

from __future__ import annotations

import shutil
import subprocess
from dataclasses import dataclass, field
from pathlib import Path

from chainbuild.config import version_variable
from chainbuild.errors import SourceUnavailable
from chainbuild.models import PackageSpec
from chainbuild.observability import StructuredLogger

STDERR_LIMIT = 2000


@dataclass(slots=True)
class GitSourceFetcher:
    git: str = "git"
    depth: int = 1
    logger: StructuredLogger = field(default_factory=StructuredLogger)

    def fetch(self, spec: PackageSpec, dest_dir: Path) -> Path:
        """Clone ``spec.ref`` of ``spec.repository`` into *dest_dir*."""
        if dest_dir.exists():
            shutil.rmtree(dest_dir)
        self.logger.log(
            operation="fetch",
            package=spec.name,
            stage="fetch",
            message=f"Cloning {spec.name} {spec.ref} from {spec.repository}",
        )
        command = [
            self.git,
            "clone",
            "--quiet",
            "--depth",
            str(self.depth),
            "--branch",
            spec.ref,
            spec.repository,
            str(dest_dir),
        ]
        try:
            completed = subprocess.run(
                command,
                check=False,
                text=True,
                capture_output=True,
            )
        except OSError as exc:
            _discard(dest_dir)
            raise SourceUnavailable(
                spec.name,
                spec.version,
                hint="Ensure git is installed and on PATH.",
                context={"repository": spec.repository, "ref": spec.ref, "error": str(exc)},
            ) from exc
        if completed.returncode != 0:
            _discard(dest_dir)
            raise SourceUnavailable(
                spec.name,
                spec.version,
                hint=f"Check that tag {spec.ref} exists or correct {version_variable(spec.name)}.",
                context={
                    "repository": spec.repository,
                    "ref": spec.ref,
                    "command": " ".join(command),
                    "stderr": (completed.stderr or "").strip()[-STDERR_LIMIT:],
                },
            )
        return dest_dir


def _discard(path: Path) -> None:
    if path.exists():
        shutil.rmtree(path, ignore_errors=True)
