from pathlib import Path

import pytest

from chainbuild.buildfile import BuildDescription
from chainbuild.errors import ValidationError

ZLIB_MAKEFILE = """\
# Makefile for zlib
CC=emcc

CFLAGS=-O2 -D_LARGEFILE64_SOURCE=1 -DHAVE_HIDDEN
SFLAGS=-O2 -fPIC
LDFLAGS=
AR=ar
ARFLAGS=rc
OBJS = adler32.o crc32.o \\
\tdeflate.o inflate.o

static: example$(EXE) minigzip$(EXE)

libz.a: $(OBJS)
\t$(AR) $(ARFLAGS) $@ $(OBJS)
"""


def test_ensure_flag_twice_leaves_one_occurrence(tmp_path: Path) -> None:
    path = tmp_path / "Makefile"
    path.write_text(ZLIB_MAKEFILE, encoding="utf-8")

    for _ in range(2):
        description = BuildDescription.load(path)
        description.ensure_flag("CFLAGS", "-O3")
        description.save(path)

    patched = BuildDescription.load(path)
    assert patched.flag_count("CFLAGS", "-O3") == 1
    assert patched.get("CFLAGS") == "-O2 -D_LARGEFILE64_SOURCE=1 -DHAVE_HIDDEN -O3"


def test_ensure_flag_reports_no_change_when_present() -> None:
    description = BuildDescription.parse("CFLAGS = -O3 -g\n")

    assert description.ensure_flag("CFLAGS", "-O3") is False
    assert description.serialize() == "CFLAGS = -O3 -g\n"


def test_ensure_flag_removes_duplicates() -> None:
    description = BuildDescription.parse("CFLAGS = -O3 -g -O3\n")

    assert description.ensure_flag("CFLAGS", "-O3") is True
    assert description.get("CFLAGS") == "-O3 -g"


def test_set_substitutes_cross_archiver() -> None:
    description = BuildDescription.parse(ZLIB_MAKEFILE)

    assert description.set("AR", "emar") is True
    assert description.set("ARFLAGS", "r") is True
    assert description.set("AR", "emar") is False

    rendered = description.serialize()
    assert "\nAR=emar\n" in rendered
    assert "\nARFLAGS=r\n" in rendered
    assert "\t$(AR) $(ARFLAGS) $@ $(OBJS)\n" in rendered


def test_set_appends_missing_variable() -> None:
    description = BuildDescription.parse("CC=emcc\n")

    description.set("RANLIB", "emranlib")

    assert description.serialize() == "CC=emcc\nRANLIB=emranlib\n"


def test_untouched_content_round_trips() -> None:
    assert BuildDescription.parse(ZLIB_MAKEFILE).serialize() == ZLIB_MAKEFILE


def test_continuation_lines_fold_into_one_value() -> None:
    description = BuildDescription.parse(ZLIB_MAKEFILE)

    assert description.get("OBJS") == "adler32.o crc32.o deflate.o inflate.o"
    description.ensure_flag("OBJS", "zutil.o")
    assert "OBJS = adler32.o crc32.o deflate.o inflate.o zutil.o\n" in description.serialize()


def test_recipe_and_rule_lines_are_not_assignments() -> None:
    description = BuildDescription.parse(ZLIB_MAKEFILE)

    assert description.assignments("static") == []
    assert description.assignments("libz.a") == []


def test_load_missing_description_raises(tmp_path: Path) -> None:
    with pytest.raises(ValidationError) as excinfo:
        BuildDescription.load(tmp_path / "Makefile")

    assert "configure" in str(excinfo.value)
