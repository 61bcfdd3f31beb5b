"""The default zlib -> Imath -> OpenEXR chain."""

from __future__ import annotations

from collections.abc import Mapping

from chainbuild.config import DEFAULT_VERSIONS
from chainbuild.models import PackageSpec

ZLIB_REPOSITORY = "https://github.com/madler/zlib.git"
IMATH_REPOSITORY = "https://github.com/AcademySoftwareFoundation/Imath.git"
OPENEXR_REPOSITORY = "https://github.com/AcademySoftwareFoundation/openexr.git"


def default_chain(versions: Mapping[str, str] | None = None) -> tuple[PackageSpec, ...]:
    pinned = {**DEFAULT_VERSIONS, **(versions or {})}
    zlib = PackageSpec(
        name="zlib",
        version=pinned["zlib"],
        repository=ZLIB_REPOSITORY,
        ordinal=0,
        build_system="autotools",
        exports={
            "ZLIB_INCLUDE_DIR": "include",
            "ZLIB_LIBRARY": "lib/libz.a",
        },
    )
    imath = PackageSpec(
        name="Imath",
        version=pinned["Imath"],
        repository=IMATH_REPOSITORY,
        ordinal=1,
        build_system="cmake",
        depends_on=("zlib",),
        exports={"Imath_DIR": "lib/cmake/Imath"},
    )
    openexr = PackageSpec(
        name="OpenEXR",
        version=pinned["OpenEXR"],
        repository=OPENEXR_REPOSITORY,
        ordinal=2,
        build_system="cmake",
        depends_on=("zlib", "Imath"),
        options=(
            "-DOPENEXR_BUILD_TOOLS=OFF",
            "-DOPENEXR_BUILD_TESTS=OFF",
            "-DOPENEXR_BUILD_EXAMPLES=OFF",
            "-DOPENEXR_ENABLE_THREADING=OFF",
        ),
        exports={"OpenEXR_DIR": "lib/cmake/OpenEXR"},
    )
    return (zlib, imath, openexr)
