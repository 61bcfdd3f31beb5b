"""Structured editing of generated build descriptions (Makefiles).

Native configure scripts do not know about the cross toolchain, so a few
variables in their generated Makefile are steered after generation. The
file is parsed into variable assignments and opaque lines; edits go
through idempotent primitives and untouched lines are written back
exactly as read.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import Path

from chainbuild.errors import ValidationError

ASSIGNMENT = re.compile(
    r"^(?P<name>[A-Za-z_][A-Za-z0-9_.]*)(?P<before>[ \t]*)(?P<op>[:+?]?=)(?P<after>[ \t]*)(?P<value>.*)$"
)


@dataclass(slots=True)
class Assignment:
    name: str
    op: str
    value: str
    before: str = ""
    after: str = ""
    original: str | None = None

    def render(self) -> str:
        if self.original is not None:
            return self.original
        return f"{self.name}{self.before}{self.op}{self.after}{self.value}"


@dataclass(slots=True)
class BuildDescription:
    entries: list[Assignment | str] = field(default_factory=list)

    @classmethod
    def parse(cls, raw: str) -> BuildDescription:
        entries: list[Assignment | str] = []
        lines = raw.splitlines()
        index = 0
        while index < len(lines):
            line = lines[index]
            match = ASSIGNMENT.match(line)
            if match is None:
                entries.append(line)
                index += 1
                continue
            block = [line]
            while block[-1].endswith("\\") and index + 1 < len(lines):
                index += 1
                block.append(lines[index])
            # continuation lines fold into one logical value
            parts = (part.rstrip("\\").strip() for part in [match.group("value"), *block[1:]])
            value = " ".join(part for part in parts if part)
            entries.append(
                Assignment(
                    name=match.group("name"),
                    op=match.group("op"),
                    value=value,
                    before=match.group("before"),
                    after=match.group("after"),
                    original="\n".join(block),
                )
            )
            index += 1
        return cls(entries=entries)

    @classmethod
    def load(cls, path: str | Path) -> BuildDescription:
        description_path = Path(path)
        try:
            raw = description_path.read_text(encoding="utf-8")
        except FileNotFoundError as exc:
            raise ValidationError(
                "Generated build description does not exist.",
                hint="The configure step must run before patching.",
                context={"path": str(description_path)},
            ) from exc
        return cls.parse(raw)

    def serialize(self) -> str:
        rendered = [entry.render() if isinstance(entry, Assignment) else entry for entry in self.entries]
        return "\n".join(rendered) + "\n" if rendered else ""

    def save(self, path: str | Path) -> Path:
        description_path = Path(path)
        description_path.write_text(self.serialize(), encoding="utf-8")
        return description_path

    def assignments(self, name: str) -> list[Assignment]:
        return [
            entry for entry in self.entries if isinstance(entry, Assignment) and entry.name == name
        ]

    def get(self, name: str) -> str | None:
        found = self.assignments(name)
        return found[0].value if found else None

    def set(self, name: str, value: str) -> bool:
        """Set every plain assignment of *name* to *value*; append if absent.

        Returns whether the description changed.
        """
        found = [entry for entry in self.assignments(name) if entry.op in ("=", ":=")]
        if not found:
            self.entries.append(Assignment(name=name, op="=", value=value))
            return True
        changed = False
        for entry in found:
            if entry.value != value:
                entry.value = value
                entry.original = None
                changed = True
        return changed

    def ensure_flag(self, name: str, flag: str) -> bool:
        """Make *flag* appear exactly once in every assignment of *name*.

        Returns whether the description changed.
        """
        found = [entry for entry in self.assignments(name) if entry.op in ("=", ":=")]
        if not found:
            self.entries.append(Assignment(name=name, op="=", value=flag))
            return True
        changed = False
        for entry in found:
            tokens = entry.value.split()
            count = tokens.count(flag)
            if count == 1:
                continue
            if count == 0:
                tokens.append(flag)
            else:
                first = tokens.index(flag)
                tokens = [t for i, t in enumerate(tokens) if t != flag or i == first]
            entry.value = " ".join(tokens)
            entry.original = None
            changed = True
        return changed

    def flag_count(self, name: str, flag: str) -> int:
        """Inspection helper: total occurrences of *flag* across *name*."""
        return sum(entry.value.split().count(flag) for entry in self.assignments(name))
