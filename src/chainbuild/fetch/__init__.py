"""Pinned source retrieval."""

from __future__ import annotations

from pathlib import Path
from typing import Protocol

from chainbuild.models import PackageSpec

from .git import GitSourceFetcher


class SourceFetcher(Protocol):
    def fetch(self, spec: PackageSpec, dest_dir: Path) -> Path:
        """Retrieve exactly the pinned revision of *spec* into *dest_dir*."""


__all__ = ["GitSourceFetcher", "SourceFetcher"]
