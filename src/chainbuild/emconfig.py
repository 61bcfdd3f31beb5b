"""Run-owned toolchain config file (``KEY = 'value'`` lines).

The file generated by ``emcc --generate-config`` is a small Python module.
Only top-level assignments are modelled; every other line is kept verbatim
so a load/save cycle leaves untouched content byte-for-byte identical.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import Path

from chainbuild.errors import ValidationError

KEY_PATTERN = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


def _assignment_pattern(key: str) -> re.Pattern[str]:
    return re.compile(rf"^{re.escape(key)}\s*=")


def _quote(value: str) -> str:
    if "'" in value or "\n" in value:
        raise ValidationError(
            "Config values must not contain single quotes or newlines.",
            context={"value": value},
        )
    return f"'{value}'"


@dataclass(slots=True)
class PersistentConfig:
    lines: list[str] = field(default_factory=list)

    @classmethod
    def parse(cls, raw: str) -> PersistentConfig:
        return cls(lines=raw.splitlines())

    @classmethod
    def load(cls, path: str | Path) -> PersistentConfig:
        config_path = Path(path)
        if not config_path.exists():
            return cls()
        return cls.parse(config_path.read_text(encoding="utf-8"))

    def serialize(self) -> str:
        if not self.lines:
            return ""
        return "\n".join(self.lines) + "\n"

    def save(self, path: str | Path) -> Path:
        config_path = Path(path)
        config_path.parent.mkdir(parents=True, exist_ok=True)
        config_path.write_text(self.serialize(), encoding="utf-8")
        return config_path

    def keys(self) -> list[str]:
        """Inspection helper: top-level keys in file order."""
        found: list[str] = []
        for line in self.lines:
            name, sep, _ = line.partition("=")
            name = name.strip()
            if sep and KEY_PATTERN.match(name) and not line[:1].isspace() and name not in found:
                found.append(name)
        return found

    def occurrences(self, key: str) -> int:
        """Inspection helper: how many lines assign *key*."""
        pattern = _assignment_pattern(key)
        return sum(1 for line in self.lines if pattern.match(line))

    def get(self, key: str) -> str | None:
        pattern = _assignment_pattern(key)
        for line in self.lines:
            if pattern.match(line):
                value = line.split("=", 1)[1].strip()
                if len(value) >= 2 and value[0] == value[-1] and value[0] in "'\"":
                    return value[1:-1]
                return value
        return None

    def replace(self, key: str, value: str) -> bool:
        """Update *key* in place if present; return whether it was present."""
        _check_key(key)
        pattern = _assignment_pattern(key)
        rendered = f"{key} = {_quote(value)}"
        found = False
        kept: list[str] = []
        for line in self.lines:
            if pattern.match(line):
                if found:
                    continue
                found = True
                kept.append(rendered)
            else:
                kept.append(line)
        self.lines = kept
        return found

    def upsert(self, key: str, value: str) -> None:
        """Replace *key* in place, or append it when missing."""
        if not self.replace(key, value):
            self.lines.append(f"{key} = {_quote(value)}")


def _check_key(key: str) -> None:
    if not KEY_PATTERN.match(key):
        raise ValidationError(
            f"Invalid config key `{key}`.",
            hint="Config keys must be identifiers.",
            context={"key": key},
        )
