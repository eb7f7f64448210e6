"""Locate the prebuilt artifact directory for a (library, toolchain) pair."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from nixcc.catalog import PathCatalog
from nixcc.errors import LibraryNotFoundError, MissingDescriptorFileError
from nixcc.models import BUILD_FILE, MODULE_FILE, ArtifactDirectory, RepositorySpec

# Optional entries linked into a library repository when present
OPTIONAL_ENTRIES = (MODULE_FILE, "include", "lib")


@dataclass(frozen=True, slots=True)
class LibraryRepoResolver:
    catalog: PathCatalog

    def resolve(self, library: str, toolchain: str) -> ArtifactDirectory:
        suffixed = self.catalog.library_dir(library, toolchain)
        if suffixed.is_dir():
            return self._inspect(library, toolchain, suffixed, suffixed=True)
        shared = self.catalog.library_dir(library)
        if shared.is_dir():
            return self._inspect(library, toolchain, shared, suffixed=False)
        raise LibraryNotFoundError(
            library=library,
            toolchain=toolchain,
            libs_dir=str(self.catalog.libs_dir),
        )

    def repository(self, artifact: ArtifactDirectory) -> RepositorySpec:
        links: dict[str, Path] = {BUILD_FILE: artifact.path / BUILD_FILE}
        present = {
            MODULE_FILE: artifact.has_module_file,
            "include": artifact.has_include,
            "lib": artifact.has_lib,
        }
        for entry in OPTIONAL_ENTRIES:
            if present[entry]:
                links[entry] = artifact.path / entry
        return RepositorySpec(name=artifact.repo_name, links=links, kind="library")

    def _inspect(
        self,
        library: str,
        toolchain: str,
        path: Path,
        *,
        suffixed: bool,
    ) -> ArtifactDirectory:
        build_file = path / BUILD_FILE
        if not build_file.exists():
            raise MissingDescriptorFileError(path=str(build_file), operation="resolve_library")
        return ArtifactDirectory(
            library=library,
            toolchain=toolchain,
            path=path,
            suffixed=suffixed,
            has_module_file=(path / MODULE_FILE).exists(),
            has_include=(path / "include").exists(),
            has_lib=(path / "lib").exists(),
        )
