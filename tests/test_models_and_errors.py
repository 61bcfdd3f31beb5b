from pathlib import Path

import pytest
from fakes import stub_spec

from chainbuild.errors import (
    BuildFailed,
    CacheUnwritable,
    CommandError,
    ConfigureFailed,
    ErrorCode,
    InstallFailed,
    SourceUnavailable,
    ToolchainUnavailable,
    ValidationError,
)
from chainbuild.models import BuildResult, PipelineReport, ToolchainEnvironment


def test_error_codes_are_stable_and_machine_readable() -> None:
    errors = [
        ValidationError("bad input"),
        ToolchainUnavailable("emcc not found."),
        CacheUnwritable("read-only"),
        SourceUnavailable("zlib", "9.9.9"),
        CommandError("exited with status 1."),
        ConfigureFailed("zlib", "1.3.1", "configure failed"),
        BuildFailed("zlib", "1.3.1", "build failed"),
        InstallFailed("zlib", "1.3.1", "install failed"),
    ]
    assert [error.code for error in errors] == [
        ErrorCode.VALIDATION.value,
        ErrorCode.TOOLCHAIN_UNAVAILABLE.value,
        ErrorCode.CACHE_UNWRITABLE.value,
        ErrorCode.SOURCE_UNAVAILABLE.value,
        ErrorCode.COMMAND.value,
        ErrorCode.CONFIGURE_FAILED.value,
        ErrorCode.BUILD_FAILED.value,
        ErrorCode.INSTALL_FAILED.value,
    ]


def test_stage_errors_identify_package_version_and_stage() -> None:
    error = BuildFailed(
        "OpenEXR",
        "3.2.4",
        "build failed:\n  `emmake` exited with status 2.",
        hint="Inspect the compiler output.",
        context={"step": "build"},
    )

    assert error.context["package"] == "OpenEXR"
    assert error.context["stage"] == "build"
    assert error.one_line() == (
        "[E_BUILD_FAILED] OpenEXR 3.2.4 build: build failed: `emmake` exited with status 2. "
        "(Inspect the compiler output.)"
    )
    payload = error.to_dict()
    assert payload["code"] == "E_BUILD_FAILED"
    assert payload["message"] == "build failed:\n  `emmake` exited with status 2."
    assert payload["hint"] == "Inspect the compiler output."
    assert payload["context"] == {
        "package": "OpenEXR",
        "version": "3.2.4",
        "stage": "build",
        "step": "build",
    }


def test_fetch_error_names_the_missing_revision() -> None:
    error = SourceUnavailable("zlib", "9.9.9", context={"ref": "v9.9.9"})

    assert error.one_line().startswith("[E_SOURCE_UNAVAILABLE] zlib 9.9.9 fetch:")
    assert "ref: v9.9.9" in str(error)


def test_errors_without_package_render_plain_line() -> None:
    error = ToolchainUnavailable("emcc not found.", hint="Activate the SDK.")

    assert error.one_line() == "[E_TOOLCHAIN_UNAVAILABLE] emcc not found. (Activate the SDK.)"
    assert "hint" not in ValidationError("bad").to_dict()


def test_pipeline_report_exposes_first_failure() -> None:
    error = ConfigureFailed("B", "2.0", "configure failed")
    report = PipelineReport(
        prefix=Path("/prefix"),
        results=(
            BuildResult.succeeded(stub_spec("A", 0), artifacts=("lib/libA.a",)),
            BuildResult.failed(stub_spec("B", 1), stage="configure", error=error),
        ),
    )

    assert not report.ok
    assert report.failure is not None
    assert report.failure.package == "B"
    assert report.failure.diagnostic == error.one_line()
    assert report.result_for("A") is not None
    assert report.result_for("C") is None
    with pytest.raises(ConfigureFailed):
        report.raise_for_failure()


def test_empty_report_is_successful() -> None:
    report = PipelineReport(prefix=Path("/prefix"))

    assert report.ok
    report.raise_for_failure()


def test_subprocess_env_exports_config_and_cache(toolchain: ToolchainEnvironment) -> None:
    env = toolchain.subprocess_env({"PATH": "/usr/bin", "EM_CACHE": "/elsewhere"})

    assert env == {
        "PATH": "/usr/bin",
        "EM_CONFIG": str(toolchain.config_path),
        "EM_CACHE": str(toolchain.cache_dir),
    }
