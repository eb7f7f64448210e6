"""Build library artifact directories from installed package prefixes.

A dynamic artifact links the package's ``lib`` directory and exposes the
shared objects. A static artifact copies the package's archives together with
the archives of its transitive library dependencies, so the resulting
``cc_library`` links without further lookups.
"""

from __future__ import annotations

import re
import shutil
from dataclasses import dataclass, field
from pathlib import Path

from nixcc.compiler.emit_library import LibraryBuild, synthesize_library_build
from nixcc.models import BUILD_FILE, MODULE_FILE
from nixcc.observability import StructuredLogger

VERSIONED_DIR = re.compile(r".*-[0-9]+\.")

# Packages that ship a lib/ directory without being link dependencies
NON_LIBRARY_PACKAGES = frozenset({"bash"})


@dataclass(frozen=True, slots=True)
class PackageSource:
    name: str
    out: Path
    dev: Path | None = None
    pname: str | None = None
    propagated: tuple[PackageSource, ...] = field(default_factory=tuple)

    @property
    def include_root(self) -> Path:
        return (self.dev or self.out) / "include"

    @property
    def lib_dir(self) -> Path:
        return self.out / "lib"

    @property
    def package_name(self) -> str:
        return self.pname or self.name


def transitive_deps(source: PackageSource) -> tuple[PackageSource, ...]:
    """Depth-first closure of propagated dependencies, without duplicates."""
    ordered: list[PackageSource] = []
    seen: set[Path] = set()

    def visit(package: PackageSource) -> None:
        for dep in package.propagated:
            if not dep.package_name or dep.out in seen:
                continue
            seen.add(dep.out)
            ordered.append(dep)
            visit(dep)

    visit(source)
    return tuple(ordered)


def is_library(source: PackageSource) -> bool:
    name = source.package_name
    return source.lib_dir.is_dir() and bool(name) and name not in NON_LIBRARY_PACKAGES


def versioned_include_dirs(include_root: Path) -> tuple[Path, ...]:
    """Subdirectories like ``openjpeg-2.5`` whose contents get flattened."""
    if not include_root.is_dir():
        return ()
    return tuple(
        entry
        for entry in sorted(include_root.iterdir())
        if entry.is_dir() and VERSIONED_DIR.match(entry.name)
    )


def build_library_repo(
    source: PackageSource,
    destination: Path,
    *,
    static: bool,
    logger: StructuredLogger | None = None,
) -> LibraryBuild:
    destination.mkdir(parents=True, exist_ok=True)
    include_dir = destination / "include"
    include_dir.mkdir(exist_ok=True)
    if source.include_root.is_dir():
        shutil.copytree(source.include_root, include_dir, dirs_exist_ok=True)
        for versioned in versioned_include_dirs(source.include_root):
            shutil.copytree(versioned, include_dir, dirs_exist_ok=True)

    archives: tuple[str, ...] = ()
    if static:
        archives = _copy_archives(source, destination / "lib")
    else:
        _link_shared_libs(source, destination / "lib")

    build = synthesize_library_build(
        source.name,
        pname=source.package_name,
        archives=archives,
        static=static,
    )
    (destination / MODULE_FILE).write_text(build.module_file, encoding="utf-8")
    (destination / BUILD_FILE).write_text(build.build_file, encoding="utf-8")
    if logger is not None:
        logger.log(
            operation="build_library_repo",
            library=source.name,
            message="Library artifact directory written.",
            extra={
                "static": static,
                "archives": list(build.archives),
                "main_archive": build.main_archive,
            },
        )
    return build


def _copy_archives(source: PackageSource, lib_dir: Path) -> tuple[str, ...]:
    lib_dir.mkdir(parents=True, exist_ok=True)
    packages = [source, *(dep for dep in transitive_deps(source) if is_library(dep))]
    copied: list[str] = []
    for package in packages:
        if not package.lib_dir.is_dir():
            continue
        for archive in sorted(package.lib_dir.glob("*.a")):
            if not archive.is_file():
                continue
            shutil.copy2(archive, lib_dir / archive.name, follow_symlinks=True)
            if archive.name not in copied:
                copied.append(archive.name)
    return tuple(copied)


def _link_shared_libs(source: PackageSource, lib_link: Path) -> None:
    if source.lib_dir.is_dir():
        lib_link.symlink_to(source.lib_dir, target_is_directory=True)
    else:
        lib_link.mkdir(parents=True, exist_ok=True)
