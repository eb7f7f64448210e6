"""Toolchain descriptor emission.

Renders the two files Bazel loads for a toolchain repository:

- ``BUILD.bazel`` with the filegroups, ``cc_toolchain``, ``toolchain`` and
  ``platform`` rules
- ``cc_toolchain_config.bzl`` with the builtin include directories, tool paths
  and one feature per action class

Rendering is a pure function of its inputs so repeated emission yields
byte-identical text.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Protocol

from nixcc.compiler.templates import (
    CC_TOOLCHAIN_BUILD,
    CC_TOOLCHAIN_CONFIG,
    DEPS_BUILD,
    render,
    starlark_lines,
    starlark_list,
    starlark_string,
)
from nixcc.flags import ToolchainFlags
from nixcc.models import BUILD_FILE, CONFIG_FILE, EffectiveTarget, ExecPlatform, deps_repo_name
from nixcc.platforms import target_constraints

TOOL_NAMES: tuple[str, ...] = (
    "gcc",
    "g++",
    "cpp",
    "ar",
    "nm",
    "objdump",
    "objcopy",
    "strip",
    "ld",
    "gcov",
    "dwp",
    "llvm-profdata",
)

_INCLUDE_INDENT = " " * 12


@dataclass(frozen=True, slots=True)
class ToolchainDescriptor:
    toolchain: str
    files: dict[str, str] = field(default_factory=dict)

    @property
    def build_file(self) -> str:
        return self.files[BUILD_FILE]

    @property
    def config_file(self) -> str:
        return self.files[CONFIG_FILE]


class DescriptorEmitter(Protocol):
    def emit(
        self,
        target: EffectiveTarget,
        include_paths: tuple[str, ...],
        flags: ToolchainFlags,
        toolchain: str,
    ) -> ToolchainDescriptor:
        """Render the descriptor files for one toolchain."""


@dataclass(frozen=True, slots=True)
class ToolchainDescriptorEmitter:
    exec_platform: ExecPlatform = field(default_factory=ExecPlatform)

    def emit(
        self,
        target: EffectiveTarget,
        include_paths: tuple[str, ...],
        flags: ToolchainFlags,
        toolchain: str,
    ) -> ToolchainDescriptor:
        files = {
            BUILD_FILE: self.render_build(target, toolchain),
            CONFIG_FILE: self.render_config(target, include_paths, flags),
        }
        return ToolchainDescriptor(toolchain=toolchain, files=files)

    def render_build(self, target: EffectiveTarget, toolchain: str) -> str:
        exec_constraints = target_constraints(self.exec_platform.cpu, self.exec_platform.os)
        return render(
            CC_TOOLCHAIN_BUILD,
            deps_repo=deps_repo_name(toolchain),
            exec_constraints=starlark_list(exec_constraints),
            target_constraints=starlark_list(target_constraints(target.cpu, target.os)),
        )

    def render_config(
        self,
        target: EffectiveTarget,
        include_paths: tuple[str, ...],
        flags: ToolchainFlags,
    ) -> str:
        return render(
            CC_TOOLCHAIN_CONFIG,
            toolchain_identifier=f"local_{target.triple}",
            triple=target.triple,
            cpu=target.cpu,
            libc_name=target.libc_name,
            include_directories=starlark_lines(include_paths, indent=_INCLUDE_INDENT),
            tool_paths=_tool_paths(),
            compile_flags=starlark_list(flags.compile),
            cxx_flags=starlark_list(flags.cxx),
            c_flags=starlark_list(flags.c),
            link_flags=starlark_list(flags.link),
            opt_flags=starlark_list(flags.opt),
            dbg_flags=starlark_list(flags.dbg),
        )


def render_deps_build() -> str:
    return render(DEPS_BUILD)


def _tool_paths() -> str:
    return "".join(
        f"{_INCLUDE_INDENT}tool_path(name = {starlark_string(tool)}, "
        f"path = {starlark_string('bin/' + tool)}),\n"
        for tool in TOOL_NAMES
    )
