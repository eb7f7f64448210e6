"""Manifest of a repository plan, exportable as JSON and canonical CBOR."""

from __future__ import annotations

import hashlib
import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import cbor2

from nixcc.models import ToolchainAvailable
from nixcc.repository import RepositoryPlan


@dataclass(frozen=True, slots=True)
class ResolutionManifest:
    default_toolchain: str
    toolchains: dict[str, str] = field(default_factory=dict)
    repositories: dict[str, dict[str, Any]] = field(default_factory=dict)
    marker: str | None = None
    schema_version: int = 1

    @classmethod
    def from_plan(cls, plan: RepositoryPlan) -> ResolutionManifest:
        toolchains = {
            name: "available" if isinstance(resolution, ToolchainAvailable) else "stub"
            for name, resolution in plan.toolchains.items()
        }
        repositories: dict[str, dict[str, Any]] = {}
        for name, repository in sorted(plan.repositories.items()):
            repositories[name] = {
                "kind": repository.kind,
                "files": {
                    path: _sha256(content.encode("utf-8"))
                    for path, content in sorted(repository.files.items())
                },
                "links": {path: str(target) for path, target in sorted(repository.links.items())},
            }
        return cls(
            default_toolchain=plan.default_toolchain,
            toolchains=toolchains,
            repositories=repositories,
            marker=plan.marker,
        )

    @property
    def digest(self) -> str:
        canonical = json.dumps(self._payload(), sort_keys=True, separators=(",", ":"))
        return _sha256(canonical.encode("utf-8"))

    def to_json(self, path: str | Path | None = None) -> str:
        payload = {**self._payload(), "digest": self.digest}
        encoded = json.dumps(payload, indent=2, sort_keys=True) + "\n"
        if path is not None:
            Path(path).write_text(encoded, encoding="utf-8")
        return encoded

    def to_cbor(self, path: str | Path | None = None) -> bytes:
        payload = {**self._payload(), "digest": self.digest}
        encoded = cbor2.dumps(payload, canonical=True)
        if path is not None:
            Path(path).write_bytes(encoded)
        return encoded

    def _payload(self) -> dict[str, object]:
        return {
            "schema_version": self.schema_version,
            "default_toolchain": self.default_toolchain,
            "toolchains": dict(sorted(self.toolchains.items())),
            "repositories": dict(sorted(self.repositories.items())),
            "marker": self.marker,
        }


def _sha256(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()
