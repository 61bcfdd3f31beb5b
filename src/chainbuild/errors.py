"""Typed orchestrator error model with stable, machine-readable error codes."""

from __future__ import annotations

from collections.abc import Mapping
from enum import StrEnum


class ErrorCode(StrEnum):
    """Stable error identifiers used in diagnostics and reports."""

    VALIDATION = "E_VALIDATION"
    TOOLCHAIN_UNAVAILABLE = "E_TOOLCHAIN_UNAVAILABLE"
    CACHE_UNWRITABLE = "E_CACHE_UNWRITABLE"
    SOURCE_UNAVAILABLE = "E_SOURCE_UNAVAILABLE"
    COMMAND = "E_COMMAND"
    CONFIGURE_FAILED = "E_CONFIGURE_FAILED"
    BUILD_FAILED = "E_BUILD_FAILED"
    INSTALL_FAILED = "E_INSTALL_FAILED"


# context keys that identify the failing unit rather than describe the failure
SUBJECT_KEYS = ("package", "version", "stage")


class ChainbuildError(Exception):
    """Base error; subclasses pick their code through ``error_code``."""

    error_code: ErrorCode = ErrorCode.VALIDATION

    def __init__(
        self,
        message: str,
        *,
        hint: str | None = None,
        context: Mapping[str, str] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = self.error_code.value
        self.hint = hint
        self.context = dict(context or {})

    @property
    def subject(self) -> str:
        """``package version stage`` of the failing unit, or empty."""
        return " ".join(self.context[key] for key in SUBJECT_KEYS if self.context.get(key))

    def __str__(self) -> str:
        lines = [self.message]
        if self.hint:
            lines.append(f"Hint: {self.hint}")
        lines.extend(f"  {key}: {value}" for key, value in self.context.items() if value)
        return "\n".join(lines)

    def one_line(self) -> str:
        """Render a single-line diagnostic suitable for the error stream."""
        head = f"[{self.code}] {self.subject}:" if self.subject else f"[{self.code}]"
        tail = f" ({self.hint})" if self.hint else ""
        return " ".join(f"{head} {self.message}{tail}".split())

    def to_dict(self) -> dict[str, object]:
        payload: dict[str, object] = {
            "code": self.code,
            "message": self.message,
            "context": dict(self.context),
        }
        if self.hint is not None:
            payload["hint"] = self.hint
        return payload


class ValidationError(ChainbuildError):
    error_code = ErrorCode.VALIDATION


class ToolchainUnavailable(ChainbuildError):
    error_code = ErrorCode.TOOLCHAIN_UNAVAILABLE


class CacheUnwritable(ChainbuildError):
    error_code = ErrorCode.CACHE_UNWRITABLE


class CommandError(ChainbuildError):
    """A delegated tool could not be started or exited non-zero."""

    error_code = ErrorCode.COMMAND


class SourceUnavailable(ChainbuildError):
    """A pinned revision could not be retrieved from its repository."""

    error_code = ErrorCode.SOURCE_UNAVAILABLE

    def __init__(
        self,
        package: str,
        version: str,
        *,
        hint: str | None = None,
        context: Mapping[str, str] | None = None,
    ) -> None:
        super().__init__(
            f"Unable to fetch {package} {version}.",
            hint=hint,
            context={"package": package, "version": version, "stage": "fetch", **(context or {})},
        )
        self.package = package
        self.version = version


class StageError(ChainbuildError):
    """A configure, build or install stage failed for one package."""

    stage: str = ""
    error_code = ErrorCode.COMMAND

    def __init__(
        self,
        package: str,
        version: str,
        message: str,
        *,
        hint: str | None = None,
        context: Mapping[str, str] | None = None,
    ) -> None:
        super().__init__(
            message,
            hint=hint,
            context={"package": package, "version": version, "stage": self.stage, **(context or {})},
        )
        self.package = package
        self.version = version


class ConfigureFailed(StageError):
    stage = "configure"
    error_code = ErrorCode.CONFIGURE_FAILED


class BuildFailed(StageError):
    stage = "build"
    error_code = ErrorCode.BUILD_FAILED


class InstallFailed(StageError):
    stage = "install"
    error_code = ErrorCode.INSTALL_FAILED


__all__ = [
    "SUBJECT_KEYS",
    "BuildFailed",
    "CacheUnwritable",
    "ChainbuildError",
    "CommandError",
    "ConfigureFailed",
    "ErrorCode",
    "InstallFailed",
    "SourceUnavailable",
    "StageError",
    "ToolchainUnavailable",
    "ValidationError",
]
