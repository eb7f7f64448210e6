"""Structured logging and observability helpers."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any


@dataclass(slots=True)
class StructuredLogger:
    records: list[dict[str, Any]] = field(default_factory=list)

    def log(
        self,
        *,
        operation: str,
        message: str,
        toolchain: str | None = None,
        library: str | None = None,
        level: str = "info",
        extra: dict[str, Any] | None = None,
    ) -> None:
        record: dict[str, Any] = {
            "level": level,
            "operation": operation,
            "toolchain": toolchain,
            "library": library,
            "message": message,
        }
        if extra is not None:
            record["extra"] = extra
        self.records.append(record)

    def records_for_toolchain(self, toolchain: str) -> list[dict[str, Any]]:
        return [record for record in self.records if record.get("toolchain") == toolchain]

    def records_for_library(self, library: str) -> list[dict[str, Any]]:
        return [record for record in self.records if record.get("library") == library]

    def records_at(self, level: str) -> list[dict[str, Any]]:
        return [record for record in self.records if record.get("level") == level]

    def to_json_lines(self, path: str | Path) -> Path:
        output_path = Path(path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        lines = [json.dumps(record, sort_keys=True) for record in self.records]
        output_path.write_text("\n".join(lines) + "\n", encoding="utf-8")
        return output_path
