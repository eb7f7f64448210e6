"""Read-only view of a deps root.

The deps root holds one directory per toolchain and one or more artifact
directories per library::

    <deps-root>/
      .toolchain-marker
      toolchains/<name>/cc/
      toolchains/<name>/deps/
      libs/<name>
      libs/<name>_<toolchain>

Entries are usually symlinks into an immutable store, so every check follows
links. A directory that must be listed but is absent raises
:class:`CatalogError`; an empty directory lists as an empty set.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from nixcc.errors import CatalogError
from nixcc.models import MARKER_FILE


@dataclass(frozen=True, slots=True)
class PathCatalog:
    root: Path

    @classmethod
    def open(cls, root: str | Path) -> PathCatalog:
        catalog = cls(root=Path(root))
        if not catalog.root.is_dir():
            raise CatalogError(
                f"Nix dependencies not found at {catalog.root}.",
                hint="Run 'nix develop' first to create the deps tree.",
                context={"operation": "open_catalog", "path": str(catalog.root)},
            )
        return catalog

    @property
    def toolchains_dir(self) -> Path:
        return self.root / "toolchains"

    @property
    def libs_dir(self) -> Path:
        return self.root / "libs"

    def list_entries(self, path: Path) -> frozenset[str]:
        if not path.is_dir():
            raise CatalogError(
                f"Directory to list does not exist: {path}",
                hint="Regenerate the deps tree.",
                context={"operation": "list_entries", "path": str(path)},
            )
        return frozenset(entry.name for entry in path.iterdir())

    def toolchain_names(self) -> frozenset[str]:
        return self.list_entries(self.toolchains_dir)

    def library_names(self) -> frozenset[str]:
        return self.list_entries(self.libs_dir)

    def cc_dir(self, toolchain: str) -> Path:
        return self.toolchains_dir / toolchain / "cc"

    def deps_dir(self, toolchain: str) -> Path:
        return self.toolchains_dir / toolchain / "deps"

    def has_toolchain(self, toolchain: str) -> bool:
        return self.cc_dir(toolchain).is_dir()

    def has_deps(self, toolchain: str) -> bool:
        return self.deps_dir(toolchain).is_dir()

    def library_dir(self, library: str, toolchain: str | None = None) -> Path:
        name = library if toolchain is None else f"{library}_{toolchain}"
        return self.libs_dir / name

    def marker(self) -> str | None:
        """Return the marker listing available toolchains, if present."""
        marker_path = self.root / MARKER_FILE
        if not marker_path.is_file():
            return None
        return marker_path.read_text(encoding="utf-8")
