"""Sequenced cross-compilation of pinned dependency chains into a shared prefix."""

from .builders import AutotoolsBuilder, CMakeBuilder, builder_for
from .buildfile import BuildDescription
from .catalog import default_chain
from .config import Settings
from .emconfig import PersistentConfig
from .errors import (
    BuildFailed,
    CacheUnwritable,
    ChainbuildError,
    CommandError,
    ConfigureFailed,
    ErrorCode,
    InstallFailed,
    SourceUnavailable,
    StageError,
    ToolchainUnavailable,
    ValidationError,
)
from .fetch import GitSourceFetcher
from .models import BuildResult, PackageSpec, PipelineReport, ToolchainEnvironment
from .pipeline import Pipeline, validate_chain
from .step import PackageBuildStep
from .toolchain import ToolchainResolver
from .workspace import with_workspace, workspace

__all__ = [
    "AutotoolsBuilder",
    "BuildDescription",
    "BuildFailed",
    "BuildResult",
    "CMakeBuilder",
    "CacheUnwritable",
    "ChainbuildError",
    "CommandError",
    "ConfigureFailed",
    "ErrorCode",
    "GitSourceFetcher",
    "InstallFailed",
    "PackageBuildStep",
    "PackageSpec",
    "PersistentConfig",
    "Pipeline",
    "PipelineReport",
    "Settings",
    "SourceUnavailable",
    "StageError",
    "ToolchainEnvironment",
    "ToolchainResolver",
    "ToolchainUnavailable",
    "ValidationError",
    "builder_for",
    "default_chain",
    "validate_chain",
    "with_workspace",
    "workspace",
]
