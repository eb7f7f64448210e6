"""Merge a partial target spec onto a baseline profile.

The baseline depends on the linking mode: a musl-like static profile or a
glibc-like dynamic profile, both targeting x86_64 Linux. Every field the
caller set in :class:`TargetSpec` is applied on top of the baseline; unset
fields keep the baseline value. A target that sets ``libc`` to ``None`` is
bare-metal and always links statically.
"""

from __future__ import annotations

from dataclasses import dataclass, replace

from nixcc.models import (
    DEFAULT_TOOLCHAIN,
    EffectiveTarget,
    TargetSpec,
    ToolchainConfig,
    ToolchainInstall,
)
from nixcc.platforms import target_constraints

STATIC_TRIPLE = "x86_64-unknown-linux-musl"
DYNAMIC_TRIPLE = "x86_64-unknown-linux-gnu"


@dataclass(frozen=True, slots=True)
class ToolchainResolver:
    install: ToolchainInstall
    toolchain: str = DEFAULT_TOOLCHAIN
    c_standard: str = "c17"
    cxx_standard: str = "c++23"

    def baseline(self, *, static: bool) -> EffectiveTarget:
        if static:
            return EffectiveTarget(
                toolchain=self.toolchain,
                triple=STATIC_TRIPLE,
                cpu="x86_64",
                os="linux",
                libc=self.install.libc,
                libc_name="musl",
                libc_dev=self.install.libc_dev,
                fortify_headers=self.install.fortify_headers,
                is_bare_metal=False,
                is_static=True,
                install=self.install,
                c_standard=self.c_standard,
                cxx_standard=self.cxx_standard,
            )
        return EffectiveTarget(
            toolchain=self.toolchain,
            triple=DYNAMIC_TRIPLE,
            cpu="x86_64",
            os="linux",
            libc=self.install.libc,
            libc_name="glibc",
            libc_dev=self.install.libc_dev,
            fortify_headers=None,
            is_bare_metal=False,
            is_static=False,
            install=self.install,
            c_standard=self.c_standard,
            cxx_standard=self.cxx_standard,
        )

    def resolve(self, user_target: TargetSpec, static: bool = False) -> EffectiveTarget:
        is_bare_metal = user_target.declares_bare_metal
        is_static = static or is_bare_metal
        resolved = replace(
            self.baseline(static=is_static),
            is_bare_metal=is_bare_metal,
            is_static=is_static,
            **_overrides(user_target, self.install),
        )
        target_constraints(resolved.cpu, resolved.os)
        return resolved


def resolve_config(config: ToolchainConfig, install: ToolchainInstall) -> EffectiveTarget:
    resolver = ToolchainResolver(
        install=install,
        toolchain=config.name,
        c_standard=config.c_standard,
        cxx_standard=config.cxx_standard,
    )
    return resolver.resolve(config.target, config.static)


def _overrides(user_target: TargetSpec, install: ToolchainInstall) -> dict[str, object]:
    explicit = user_target.explicit_fields()
    overrides: dict[str, object] = {}
    for name, value in explicit.items():
        if name == "link_flags":
            overrides["link_flags_override"] = tuple(value)  # type: ignore[arg-type]
        else:
            overrides[name] = value
    # libc_dev holds the headers of the install's own libc only
    libc = explicit.get("libc", install.libc)
    if libc is None or libc != install.libc:
        overrides["libc_dev"] = None
    return overrides
