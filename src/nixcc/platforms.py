"""Mapping of target cpu/os names onto Bazel platform constraints."""

from __future__ import annotations

from nixcc.errors import UnsupportedTargetError

CPU_CONSTRAINTS: dict[str, str] = {
    "x86_64": "@platforms//cpu:x86_64",
    "mips64": "@platforms//cpu:mips64",
    "aarch64": "@platforms//cpu:aarch64",
    "arm": "@platforms//cpu:arm",
    "riscv64": "@platforms//cpu:riscv64",
}

OS_CONSTRAINTS: dict[str, str] = {
    "linux": "@platforms//os:linux",
    "none": "@platforms//os:none",
    "macos": "@platforms//os:macos",
}

# Toolchain names that select a library variant by cpu. The default toolchain
# is matched through //conditions:default instead.
TOOLCHAIN_CONSTRAINTS: dict[str, str | None] = {
    "default": None,
    "aarch64": CPU_CONSTRAINTS["aarch64"],
    "mips64": CPU_CONSTRAINTS["mips64"],
    "arm": CPU_CONSTRAINTS["arm"],
    "riscv64": CPU_CONSTRAINTS["riscv64"],
}

# glibc runtime loaders, relative to <libc>/lib
DYNAMIC_LOADERS: dict[str, str] = {
    "x86_64": "ld-linux-x86-64.so.2",
    "aarch64": "ld-linux-aarch64.so.1",
    "arm": "ld-linux-armhf.so.3",
    "riscv64": "ld-linux-riscv64-lp64d.so.1",
    "mips64": "ld.so.1",
}

CONDITIONS_DEFAULT = "//conditions:default"


def cpu_constraint(cpu: str) -> str:
    try:
        return CPU_CONSTRAINTS[cpu]
    except KeyError:
        raise UnsupportedTargetError(
            field="cpu", value=cpu, supported=tuple(CPU_CONSTRAINTS)
        ) from None


def os_constraint(os: str) -> str:
    try:
        return OS_CONSTRAINTS[os]
    except KeyError:
        raise UnsupportedTargetError(
            field="os", value=os, supported=tuple(OS_CONSTRAINTS)
        ) from None


def target_constraints(cpu: str, os: str) -> tuple[str, str]:
    return cpu_constraint(cpu), os_constraint(os)


def toolchain_constraint(toolchain: str) -> str | None:
    """Return the cpu constraint used to select a toolchain's library variant."""
    return TOOLCHAIN_CONSTRAINTS.get(toolchain)


def dynamic_loader(cpu: str) -> str:
    try:
        return DYNAMIC_LOADERS[cpu]
    except KeyError:
        raise UnsupportedTargetError(
            field="cpu", value=cpu, supported=tuple(DYNAMIC_LOADERS)
        ) from None
