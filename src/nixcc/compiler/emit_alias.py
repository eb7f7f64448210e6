"""Alias repositories that pick a library variant by target platform."""

from __future__ import annotations

from collections.abc import Sequence

from nixcc.compiler.templates import ALIAS_BUILD, MODULE_DECL, render, starlark_string
from nixcc.models import BUILD_FILE, MODULE_FILE, AliasBranch, AliasDescriptor, RepositorySpec
from nixcc.platforms import CONDITIONS_DEFAULT, toolchain_constraint


def variant_label(library: str, toolchain: str) -> str:
    return f"@{library}_{toolchain}//:{library}"


class AliasSelectorGenerator:
    def generate(
        self,
        library: str,
        toolchains: Sequence[str],
        default_toolchain: str,
    ) -> AliasDescriptor:
        branches: list[AliasBranch] = []
        seen: set[str] = set()
        for toolchain in toolchains:
            if toolchain == default_toolchain or toolchain in seen:
                continue
            seen.add(toolchain)
            constraint = toolchain_constraint(toolchain)
            if constraint is None:
                continue
            branches.append(
                AliasBranch(condition=constraint, actual=variant_label(library, toolchain))
            )
        default = AliasBranch(
            condition=CONDITIONS_DEFAULT,
            actual=variant_label(library, default_toolchain),
        )
        return AliasDescriptor(library=library, branches=tuple(branches), default=default)

    def render(self, alias: AliasDescriptor) -> RepositorySpec:
        cases = "\n".join(
            f"        {starlark_string(branch.condition)}: {starlark_string(branch.actual)},"
            for branch in alias.all_branches
        )
        return RepositorySpec(
            name=alias.library,
            files={
                BUILD_FILE: render(ALIAS_BUILD, library=alias.library, cases=cases),
                MODULE_FILE: render(MODULE_DECL, name=alias.library),
            },
            kind="alias",
        )
