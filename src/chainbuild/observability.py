"""Structured run records.

Every record carries ``level``, ``operation``, ``package``, ``stage`` and
``message``. Levels are ``info``, ``warning``, ``error`` and ``detail``;
``detail`` records hold captured tool output for a failure.
"""

from __future__ import annotations

import json
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

Sink = Callable[[dict[str, Any]], None]


@dataclass(slots=True)
class StructuredLogger:
    records: list[dict[str, Any]] = field(default_factory=list)
    sink: Sink | None = None

    def log(
        self,
        *,
        operation: str,
        message: str,
        package: str | None = None,
        stage: str | None = None,
        level: str = "info",
        extra: dict[str, Any] | None = None,
    ) -> None:
        record: dict[str, Any] = dict(
            level=level, operation=operation, package=package, stage=stage, message=message
        )
        if extra:
            record["extra"] = extra
        self.records.append(record)
        if self.sink is not None:
            self.sink(record)

    def warning(self, *, operation: str, message: str, **kwargs: Any) -> None:
        self.log(operation=operation, message=message, level="warning", **kwargs)

    def records_for_package(self, package: str) -> list[dict[str, Any]]:
        """Inspection helper: the records one package produced, in order."""
        return [record for record in self.records if record["package"] == package]

    def to_json_lines(self, path: str | Path) -> Path:
        """Write one JSON object per record to *path*."""
        output_path = Path(path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        with output_path.open("w", encoding="utf-8") as handle:
            for record in self.records:
                handle.write(json.dumps(record, sort_keys=True))
                handle.write("\n")
        return output_path
