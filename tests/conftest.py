"""Shared test fixtures."""

from __future__ import annotations

from collections.abc import Callable, Iterable
from pathlib import Path

import pytest

from nixcc.models import ToolchainInstall

GCC_VERSION = "14.2.0"


@pytest.fixture
def install() -> ToolchainInstall:
    """Store-style install paths; nothing on disk is needed for rendering."""
    return ToolchainInstall(
        gcc="/nix/store/aaaa-gcc-wrapper-14.2.0",
        gcc_cc="/nix/store/bbbb-gcc-14.2.0",
        binutils="/nix/store/cccc-binutils-2.43",
        gcc_version=GCC_VERSION,
        libc="/nix/store/dddd-glibc-2.40",
        libc_dev="/nix/store/eeee-glibc-2.40-dev",
        fortify_headers="/nix/store/ffff-fortify-headers-1.1",
    )


DepsTreeFactory = Callable[..., Path]


@pytest.fixture
def make_deps_tree(tmp_path: Path) -> DepsTreeFactory:
    """Create a deps root with toolchain and library artifact directories.

    ``libraries`` maps a library name to the directory names to create under
    ``libs/``; ``None`` in that list stands for the unsuffixed directory.
    """

    def factory(
        *,
        toolchains: Iterable[str] = ("default",),
        without_deps: Iterable[str] = (),
        libraries: dict[str, list[str | None]] | None = None,
        marker: str | None = None,
    ) -> Path:
        root = tmp_path / ".nix-bazel-deps"
        (root / "toolchains").mkdir(parents=True, exist_ok=True)
        (root / "libs").mkdir(parents=True, exist_ok=True)
        skip_deps = set(without_deps)
        for name in toolchains:
            cc_dir = root / "toolchains" / name / "cc"
            (cc_dir / "bin").mkdir(parents=True)
            (cc_dir / "BUILD.bazel").write_text(f"# cc {name}\n", encoding="utf-8")
            (cc_dir / "cc_toolchain_config.bzl").write_text(f"# config {name}\n", encoding="utf-8")
            if name in skip_deps:
                continue
            deps_dir = root / "toolchains" / name / "deps"
            (deps_dir / "gcc").mkdir(parents=True)
            (deps_dir / "binutils").mkdir()
            (deps_dir / "BUILD.bazel").write_text("# deps\n", encoding="utf-8")
        for library, suffixes in (libraries or {}).items():
            for suffix in suffixes:
                dirname = library if suffix is None else f"{library}_{suffix}"
                artifact = root / "libs" / dirname
                (artifact / "include").mkdir(parents=True)
                (artifact / "BUILD.bazel").write_text(f"# {dirname}\n", encoding="utf-8")
                (artifact / "MODULE.bazel").write_text(
                    f'module(name = "{library}")\n', encoding="utf-8"
                )
        if marker is not None:
            (root / ".toolchain-marker").write_text(marker, encoding="utf-8")
        return root

    return factory
