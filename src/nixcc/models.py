"""Core typed dataclasses for target specs, resolved toolchains and repositories."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field, fields
from enum import Enum
from pathlib import Path
from typing import Final, Literal

from nixcc.errors import ToolchainUnavailableError

Cpu = Literal["x86_64", "mips64", "aarch64", "arm", "riscv64"]
Os = Literal["linux", "none", "macos"]
LinkMode = Literal["bare_metal", "static", "dynamic"]

DEFAULT_TOOLCHAIN = "default"
DEFAULT_SWITCH_HINT = "nix develop .#multi"
DEPS_DIR_NAME = ".nix-bazel-deps"
MARKER_FILE = ".toolchain-marker"
BUILD_FILE = "BUILD.bazel"
MODULE_FILE = "MODULE.bazel"
CONFIG_FILE = "cc_toolchain_config.bzl"

# Entries of a toolchain's deps directory, in link order
DEPS_ENTRIES = ("gcc", "gcc-lib", "libc", "libc-dev", "binutils")


class _Unset(Enum):
    TOKEN = "UNSET"

    def __repr__(self) -> str:
        return "UNSET"


UNSET: Final = _Unset.TOKEN


@dataclass(frozen=True, slots=True)
class TargetSpec:
    """Partial target description; fields left as ``UNSET`` keep the baseline."""

    triple: str | _Unset = UNSET
    cpu: str | _Unset = UNSET
    os: str | _Unset = UNSET
    libc: str | None | _Unset = UNSET
    libc_name: str | _Unset = UNSET
    link_flags: tuple[str, ...] | _Unset = UNSET
    fortify_headers: str | None | _Unset = UNSET

    def explicit_fields(self) -> dict[str, object]:
        """Return the fields the caller set, in declaration order."""
        return {
            item.name: getattr(self, item.name)
            for item in fields(self)
            if getattr(self, item.name) is not UNSET
        }

    @property
    def declares_bare_metal(self) -> bool:
        return self.libc is None


@dataclass(frozen=True, slots=True)
class ToolchainInstall:
    """Absolute locations of a compiler installation and its runtime deps."""

    gcc: str
    gcc_cc: str
    binutils: str
    gcc_version: str
    libc: str | None = None
    libc_dev: str | None = None
    fortify_headers: str | None = None
    wrapper_include_dirs: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class EffectiveTarget:
    toolchain: str
    triple: str
    cpu: str
    os: str
    libc: str | None
    libc_name: str
    libc_dev: str | None
    fortify_headers: str | None
    is_bare_metal: bool
    is_static: bool
    install: ToolchainInstall
    link_flags_override: tuple[str, ...] | None = None
    c_standard: str = "c17"
    cxx_standard: str = "c++23"

    @property
    def libc_present(self) -> bool:
        return self.libc is not None

    @property
    def needs_dynamic_linker(self) -> bool:
        return not self.is_static and not self.is_bare_metal and self.os == "linux"

    @property
    def link_mode(self) -> LinkMode:
        if self.is_bare_metal:
            return "bare_metal"
        if self.is_static:
            return "static"
        return "dynamic"

    @property
    def deps_repo(self) -> str:
        return deps_repo_name(self.toolchain)


@dataclass(frozen=True, slots=True)
class ExecPlatform:
    cpu: str = "x86_64"
    os: str = "linux"


@dataclass(frozen=True, slots=True)
class ToolchainConfig:
    name: str
    static: bool = False
    target: TargetSpec = field(default_factory=TargetSpec)
    install: ToolchainInstall | None = None
    c_standard: str = "c17"
    cxx_standard: str = "c++23"
    exec_platform: ExecPlatform = field(default_factory=ExecPlatform)


@dataclass(frozen=True, slots=True)
class ArtifactDirectory:
    library: str
    toolchain: str
    path: Path
    suffixed: bool
    has_module_file: bool = False
    has_include: bool = False
    has_lib: bool = False

    @property
    def repo_name(self) -> str:
        return f"{self.library}_{self.toolchain}"


@dataclass(frozen=True, slots=True)
class AliasBranch:
    condition: str
    actual: str


@dataclass(frozen=True, slots=True)
class AliasDescriptor:
    library: str
    branches: tuple[AliasBranch, ...]
    default: AliasBranch

    @property
    def all_branches(self) -> tuple[AliasBranch, ...]:
        return (*self.branches, self.default)


@dataclass(frozen=True, slots=True)
class RepositorySpec:
    """A repository to materialize: generated files plus symlinks."""

    name: str
    files: Mapping[str, str] = field(default_factory=dict)
    links: Mapping[str, Path] = field(default_factory=dict)
    kind: str = "generic"


@dataclass(frozen=True, slots=True)
class ToolchainAvailable:
    name: str
    cc_dir: Path
    deps_dir: Path | None = None


@dataclass(frozen=True, slots=True)
class ToolchainUnavailable:
    name: str
    switch_hint: str = DEFAULT_SWITCH_HINT

    def require(self) -> None:
        raise ToolchainUnavailableError(toolchain=self.name, switch_hint=self.switch_hint)


ToolchainResolution = ToolchainAvailable | ToolchainUnavailable


def cc_repo_name(toolchain: str) -> str:
    return f"local_config_cc_{toolchain}"


def deps_repo_name(toolchain: str) -> str:
    return f"local_config_cc_{toolchain}_deps"
