"""Producer side: resolve declared toolchains and write the deps tree.

For every declared toolchain this runs resolution, flag assembly and
descriptor emission, then writes::

    toolchains/<name>/cc/     BUILD.bazel, cc_toolchain_config.bzl, bin/*
    toolchains/<name>/deps/   BUILD.bazel, gcc, gcc-lib, libc, libc-dev, binutils
    libs/<lib>, libs/<lib>_<name>

Each toolchain is rendered completely in memory before anything is written,
and each directory is written to a temporary sibling then renamed into place.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from pathlib import Path

from nixcc.compiler.emit_toolchain import (
    ToolchainDescriptor,
    ToolchainDescriptorEmitter,
    render_deps_build,
)
from nixcc.errors import NixccError, ResolutionError, ValidationError
from nixcc.flags import FlagAssembler, ToolchainFlags
from nixcc.install import binary_links
from nixcc.materialize import remove_path, replace_directory
from nixcc.models import (
    BUILD_FILE,
    MARKER_FILE,
    EffectiveTarget,
    ToolchainConfig,
    ToolchainInstall,
)
from nixcc.observability import StructuredLogger
from nixcc.resolver import resolve_config


@dataclass(frozen=True, slots=True)
class ToolchainBuild:
    name: str
    target: EffectiveTarget
    flags: ToolchainFlags
    descriptor: ToolchainDescriptor
    binaries: dict[str, Path] = field(default_factory=dict)
    deps_build: str = ""
    deps_links: dict[str, Path] = field(default_factory=dict)


def deps_links(target: EffectiveTarget) -> dict[str, Path]:
    install = target.install
    links = {
        "gcc": Path(install.gcc),
        "gcc-lib": Path(install.gcc_cc),
    }
    if target.libc is not None:
        links["libc"] = Path(target.libc)
    if target.libc_dev is not None:
        links["libc-dev"] = Path(target.libc_dev)
    links["binutils"] = Path(install.binutils)
    return links


def build_toolchain(
    config: ToolchainConfig,
    install: ToolchainInstall | None = None,
    *,
    false_binary: str | Path = "/bin/false",
) -> ToolchainBuild:
    install = install or config.install
    if install is None:
        raise ValidationError(
            "Toolchain has no compiler install.",
            hint="Declare an install block for the toolchain.",
            context={"operation": "build_toolchain", "toolchain": config.name},
        )
    target = resolve_config(config, install)
    assembler = FlagAssembler()
    flags = assembler.assemble(target)
    emitter = ToolchainDescriptorEmitter(exec_platform=config.exec_platform)
    descriptor = emitter.emit(target, assembler.include_paths(target), flags, config.name)
    return ToolchainBuild(
        name=config.name,
        target=target,
        flags=flags,
        descriptor=descriptor,
        binaries=binary_links(install, target.triple, false_binary=false_binary),
        deps_build=render_deps_build(),
        deps_links=deps_links(target),
    )


def build_toolchains(
    configs: Sequence[ToolchainConfig],
    *,
    logger: StructuredLogger | None = None,
) -> tuple[ToolchainBuild, ...]:
    """Build every toolchain; failures are collected and raised together.

    The raised :class:`ResolutionError` carries the successful builds as
    ``partial``.
    """
    builds: list[ToolchainBuild] = []
    failures: dict[str, NixccError] = {}
    for config in configs:
        try:
            build = build_toolchain(config)
        except NixccError as exc:
            failures[config.name] = exc
            if logger is not None:
                logger.log(
                    operation="build_toolchain",
                    toolchain=config.name,
                    level="error",
                    message=str(exc),
                    extra={"code": exc.code},
                )
            continue
        builds.append(build)
        if logger is not None:
            logger.log(
                operation="build_toolchain",
                toolchain=config.name,
                message="Toolchain resolved.",
                extra={"triple": build.target.triple, "link_mode": build.target.link_mode},
            )
    if failures:
        raise ResolutionError(failures, operation="build_toolchains", partial=tuple(builds))
    return tuple(builds)


def write_toolchain(deps_root: Path, build: ToolchainBuild) -> Path:
    toolchain_dir = deps_root / "toolchains" / build.name
    toolchain_dir.mkdir(parents=True, exist_ok=True)
    replace_directory(
        toolchain_dir / "cc",
        files=build.descriptor.files,
        links={f"bin/{tool}": target for tool, target in build.binaries.items()},
    )
    replace_directory(
        toolchain_dir / "deps",
        files={BUILD_FILE: build.deps_build},
        links=build.deps_links,
    )
    return toolchain_dir


def write_deps_tree(
    deps_root: str | Path,
    builds: Sequence[ToolchainBuild],
    *,
    libraries: Mapping[str, Mapping[str, Path]] | None = None,
    logger: StructuredLogger | None = None,
) -> Path:
    """Write toolchains, library links and the marker file under ``deps_root``.

    ``libraries`` maps a library name to its artifact directory per toolchain
    name. The first toolchain's artifact also backs the unsuffixed link.
    """
    root = Path(deps_root)
    (root / "libs").mkdir(parents=True, exist_ok=True)
    for build in builds:
        write_toolchain(root, build)
        if logger is not None:
            logger.log(
                operation="write_deps_tree",
                toolchain=build.name,
                message="Toolchain directories written.",
            )

    for library, per_toolchain in sorted((libraries or {}).items()):
        for index, (toolchain, artifact) in enumerate(per_toolchain.items()):
            _relink(root / "libs" / f"{library}_{toolchain}", artifact)
            if index == 0:
                _relink(root / "libs" / library, artifact)
        if logger is not None:
            logger.log(
                operation="write_deps_tree",
                library=library,
                message="Library links written.",
                extra={"toolchains": list(per_toolchain)},
            )

    marker = "".join(f"{name}\n" for name in sorted(build.name for build in builds))
    (root / MARKER_FILE).write_text(marker, encoding="utf-8")
    return root


def _relink(link: Path, target: Path) -> None:
    remove_path(link)
    link.symlink_to(target, target_is_directory=True)
