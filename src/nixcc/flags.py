"""Include-path and flag assembly for resolved targets.

Link flags come from one of three fixed templates, chosen in the order
bare-metal, static, dynamic. Every flag that points into the toolchain's deps
repository embeds the toolchain name so that several toolchains can coexist
in one workspace. Linkers are order sensitive: search paths come first, then
``-B`` program paths, then ``-l`` libraries.
"""

from __future__ import annotations

from dataclasses import dataclass

from nixcc.models import EffectiveTarget
from nixcc.platforms import dynamic_loader

OPT_FLAGS = ("-O2", "-DNDEBUG")
DBG_FLAGS = ("-g", "-O0")


@dataclass(frozen=True, slots=True)
class ToolchainFlags:
    compile: tuple[str, ...]
    cxx: tuple[str, ...]
    c: tuple[str, ...]
    link: tuple[str, ...]
    opt: tuple[str, ...] = OPT_FLAGS
    dbg: tuple[str, ...] = DBG_FLAGS


class FlagAssembler:
    def include_paths(self, target: EffectiveTarget) -> tuple[str, ...]:
        """Builtin include directories, in the order the compiler searches them."""
        cc = target.install.gcc_cc
        version = target.install.gcc_version
        triple = target.triple
        paths = [
            f"{cc}/include/c++/{version}",
            f"{cc}/include/c++/{version}/{triple}",
            f"{cc}/lib/gcc/{triple}/{version}/include",
            f"{cc}/lib/gcc/{triple}/{version}/include-fixed",
            f"{cc}/{triple}/sys-include",
            f"{cc}/{triple}/include",
        ]
        if target.libc_dev is not None:
            paths.append(f"{target.libc_dev}/include")
        if target.fortify_headers is not None:
            paths.append(f"{target.fortify_headers}/include")
        paths.extend(target.install.wrapper_include_dirs)
        return tuple(paths)

    def compile_flags(self, target: EffectiveTarget) -> tuple[str, ...]:
        deps = _external(target)
        version = target.install.gcc_version
        triple = target.triple
        flags = [
            "-isystem", f"{deps}/gcc-lib/include/c++/{version}",
            "-isystem", f"{deps}/gcc-lib/include/c++/{version}/{triple}",
            "-isystem", f"{deps}/gcc-lib/lib/gcc/{triple}/{version}/include",
            "-isystem", f"{deps}/gcc-lib/lib/gcc/{triple}/{version}/include-fixed",
        ]  # fmt: skip
        if target.libc_dev is not None:
            flags.extend(["-isystem", f"{deps}/libc-dev/include"])
        flags.extend(["-no-canonical-prefixes", "-fno-canonical-system-headers"])
        return tuple(flags)

    def cxx_flags(self, target: EffectiveTarget) -> tuple[str, ...]:
        return (f"-std={target.cxx_standard}",)

    def c_flags(self, target: EffectiveTarget) -> tuple[str, ...]:
        return (f"-std={target.c_standard}",)

    def link_flags(self, target: EffectiveTarget) -> tuple[str, ...]:
        if target.link_flags_override is not None:
            return target.link_flags_override
        if target.is_bare_metal:
            return self._bare_metal_link_flags(target)
        if target.is_static:
            return self._static_link_flags(target)
        return self._dynamic_link_flags(target)

    def assemble(self, target: EffectiveTarget) -> ToolchainFlags:
        return ToolchainFlags(
            compile=self.compile_flags(target),
            cxx=self.cxx_flags(target),
            c=self.c_flags(target),
            link=self.link_flags(target),
        )

    def _bare_metal_link_flags(self, target: EffectiveTarget) -> tuple[str, ...]:
        deps = _external(target)
        return (
            "-nostdlib",
            "-static",
            f"-L{deps}/gcc-lib/lib/gcc/{target.triple}/{target.install.gcc_version}",
            f"-B{deps}/binutils/bin",
            "-lgcc",
            "-no-canonical-prefixes",
        )

    def _static_link_flags(self, target: EffectiveTarget) -> tuple[str, ...]:
        deps = _external(target)
        return (
            "-static",
            f"-L{deps}/gcc-lib/lib/gcc/{target.triple}/{target.install.gcc_version}",
            f"-L{deps}/gcc-lib/lib",
            f"-L{deps}/libc/lib",
            f"-B{deps}/binutils/bin",
            "-lstdc++",
            "-no-canonical-prefixes",
        )

    def _dynamic_link_flags(self, target: EffectiveTarget) -> tuple[str, ...]:
        deps = _external(target)
        libc = target.libc if target.libc is not None else f"{deps}/libc"
        flags = [
            f"-L{deps}/gcc/lib/gcc/{target.triple}/{target.install.gcc_version}",
            f"-L{deps}/gcc-lib/lib",
            f"-L{deps}/libc/lib",
            f"-Wl,-rpath,{target.install.gcc_cc}/lib",
            f"-Wl,-rpath,{libc}/lib",
        ]
        if target.needs_dynamic_linker:
            flags.append(f"-Wl,--dynamic-linker={libc}/lib/{dynamic_loader(target.cpu)}")
        flags.extend(
            [
                f"-B{deps}/binutils/bin",
                "-lstdc++",
                "-lm",
                "-no-canonical-prefixes",
            ]
        )
        return tuple(flags)


def _external(target: EffectiveTarget) -> str:
    return f"external/{target.deps_repo}"
