"""Compiler installation probing and tool binary link plans."""

from __future__ import annotations

from pathlib import Path

from nixcc.errors import ValidationError
from nixcc.models import ToolchainInstall

STORE_PREFIX = "/nix/store/"
LIBC_CFLAGS = Path("nix-support") / "libc-cflags"

COMPILER_TOOLS = ("gcc", "g++", "cpp")
BINUTILS_TOOLS = ("ar", "nm", "objdump", "objcopy", "strip", "ld")


def wrapper_include_dirs(gcc: str | Path) -> tuple[str, ...]:
    """Store paths the gcc wrapper injects through ``nix-support/libc-cflags``."""
    cflags_path = Path(gcc) / LIBC_CFLAGS
    if not cflags_path.is_file():
        return ()
    tokens = cflags_path.read_text(encoding="utf-8").split()
    return tuple(token for token in tokens if token.startswith(STORE_PREFIX))


def detect_gcc_version(gcc_cc: str | Path, triple: str) -> str:
    versions_dir = Path(gcc_cc) / "lib" / "gcc" / triple
    versions = sorted(entry.name for entry in versions_dir.iterdir()) if versions_dir.is_dir() else []
    if len(versions) != 1:
        raise ValidationError(
            "Could not determine the gcc version from the compiler install.",
            hint="Set install.gcc_version explicitly.",
            context={
                "operation": "detect_gcc_version",
                "path": str(versions_dir),
                "found": ", ".join(versions),
            },
        )
    return versions[0]


def discover_install(
    *,
    gcc: str | Path,
    gcc_cc: str | Path,
    binutils: str | Path,
    triple: str,
    libc: str | Path | None = None,
    libc_dev: str | Path | None = None,
    fortify_headers: str | Path | None = None,
    gcc_version: str | None = None,
) -> ToolchainInstall:
    return ToolchainInstall(
        gcc=str(gcc),
        gcc_cc=str(gcc_cc),
        binutils=str(binutils),
        gcc_version=gcc_version or detect_gcc_version(gcc_cc, triple),
        libc=None if libc is None else str(libc),
        libc_dev=None if libc_dev is None else str(libc_dev),
        fortify_headers=None if fortify_headers is None else str(fortify_headers),
        wrapper_include_dirs=wrapper_include_dirs(gcc),
    )


def binary_links(
    install: ToolchainInstall,
    triple: str,
    *,
    false_binary: str | Path = "/bin/false",
) -> dict[str, Path]:
    """Map ``bin/<tool>`` names onto the binaries they should link to.

    Cross compilers ship ``<triple>-<tool>`` names; native ones ship plain
    names. Optional tools that are missing link to ``false_binary`` so the
    descriptor's tool paths always resolve.
    """
    links: dict[str, Path] = {}
    links.update(_tool_links(Path(install.gcc) / "bin", triple, COMPILER_TOOLS, "gcov", false_binary))
    links.update(
        _tool_links(Path(install.binutils) / "bin", triple, BINUTILS_TOOLS, "dwp", false_binary)
    )
    links["llvm-profdata"] = Path(false_binary)
    return links


def _tool_links(
    bin_dir: Path,
    triple: str,
    required: tuple[str, ...],
    optional: str,
    false_binary: str | Path,
) -> dict[str, Path]:
    prefix = f"{triple}-" if (bin_dir / f"{triple}-{required[0]}").exists() else ""
    links = {tool: bin_dir / f"{prefix}{tool}" for tool in required}
    optional_path = bin_dir / f"{prefix}{optional}"
    links[optional] = optional_path if optional_path.exists() else Path(false_binary)
    return links
