"""Plan the Bazel repositories for requested toolchains and libraries.

Each requested toolchain is either available (its ``cc`` directory exists in
the deps root) or unavailable, in which case stub repositories stand in for it.
Each requested library gets one repository per requested toolchain plus an
alias repository that selects among them by platform.

Units are independent: :meth:`ResolutionPass.resolve_toolchain`,
:meth:`ResolutionPass.toolchain_repositories` and
:meth:`ResolutionPass.library_repositories` read only the deps root and may run
concurrently. :meth:`ResolutionPass.run` evaluates every unit, then raises a
single :class:`ResolutionError` if any toolchain failed; its ``partial`` is the
plan of the healthy units. A missing library aborts the pass immediately, and a
missing ``toolchains/`` or ``libs/`` directory raises :class:`CatalogError`.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from pathlib import Path

from nixcc.catalog import PathCatalog
from nixcc.compiler.emit_alias import AliasSelectorGenerator
from nixcc.compiler.emit_stub import StubProvider
from nixcc.errors import MissingDescriptorFileError, NixccError, ResolutionError
from nixcc.libraries import LibraryRepoResolver
from nixcc.models import (
    BUILD_FILE,
    CONFIG_FILE,
    DEFAULT_SWITCH_HINT,
    DEFAULT_TOOLCHAIN,
    DEPS_ENTRIES,
    AliasDescriptor,
    RepositorySpec,
    ToolchainAvailable,
    ToolchainResolution,
    ToolchainUnavailable,
    cc_repo_name,
    deps_repo_name,
)
from nixcc.observability import StructuredLogger


def default_toolchain(toolchains: Sequence[str]) -> str:
    """``"default"`` when requested, else the first requested toolchain."""
    if DEFAULT_TOOLCHAIN in toolchains:
        return DEFAULT_TOOLCHAIN
    return toolchains[0] if toolchains else DEFAULT_TOOLCHAIN


@dataclass(frozen=True, slots=True)
class RepositoryPlan:
    default_toolchain: str
    toolchains: dict[str, ToolchainResolution] = field(default_factory=dict)
    repositories: dict[str, RepositorySpec] = field(default_factory=dict)
    aliases: dict[str, AliasDescriptor] = field(default_factory=dict)
    marker: str | None = None

    @property
    def available_toolchains(self) -> tuple[str, ...]:
        return tuple(
            name
            for name, resolution in self.toolchains.items()
            if isinstance(resolution, ToolchainAvailable)
        )

    @property
    def stub_toolchains(self) -> tuple[str, ...]:
        return tuple(
            name
            for name, resolution in self.toolchains.items()
            if isinstance(resolution, ToolchainUnavailable)
        )


class ResolutionPass:
    def __init__(
        self,
        catalog: PathCatalog,
        *,
        toolchains: Sequence[str],
        packages: Sequence[str] = (),
        switch_hint: str = DEFAULT_SWITCH_HINT,
        logger: StructuredLogger | None = None,
    ) -> None:
        self.catalog = catalog
        self.toolchains = tuple(toolchains)
        self.packages = tuple(packages)
        self.default_toolchain = default_toolchain(self.toolchains)
        self.stubs = StubProvider(switch_hint=switch_hint)
        self.libraries = LibraryRepoResolver(catalog)
        self.aliases = AliasSelectorGenerator()
        self.logger = logger if logger is not None else StructuredLogger()

    def resolve_toolchain(
        self,
        name: str,
        present: frozenset[str] | None = None,
    ) -> ToolchainResolution:
        """Classify one toolchain; ``present`` is the listing of ``toolchains/``."""
        if present is None:
            present = self.catalog.toolchain_names()
        if name not in present or not self.catalog.has_toolchain(name):
            self.logger.log(
                operation="resolve_toolchain",
                toolchain=name,
                level="warning",
                message="Toolchain not present in deps root; using stub repositories.",
            )
            return ToolchainUnavailable(name=name, switch_hint=self.stubs.switch_hint)
        deps_dir = self.catalog.deps_dir(name) if self.catalog.has_deps(name) else None
        self.logger.log(
            operation="resolve_toolchain",
            toolchain=name,
            message="Toolchain available.",
            extra={"has_deps": deps_dir is not None},
        )
        return ToolchainAvailable(name=name, cc_dir=self.catalog.cc_dir(name), deps_dir=deps_dir)

    def toolchain_repositories(
        self, resolution: ToolchainResolution
    ) -> tuple[RepositorySpec, RepositorySpec]:
        if isinstance(resolution, ToolchainUnavailable):
            return (
                self.stubs.cc_repository(resolution.name),
                self.stubs.deps_repository(resolution.name),
            )

        cc_dir = resolution.cc_dir
        links: dict[str, Path] = {}
        for required in (BUILD_FILE, CONFIG_FILE):
            path = cc_dir / required
            if not path.exists():
                raise MissingDescriptorFileError(path=str(path), operation="toolchain_repositories")
            links[required] = path
        if (cc_dir / "bin").exists():
            links["bin"] = cc_dir / "bin"
        cc_repo = RepositorySpec(name=cc_repo_name(resolution.name), links=links, kind="cc")

        if resolution.deps_dir is None:
            self.logger.log(
                operation="toolchain_repositories",
                toolchain=resolution.name,
                level="warning",
                message="Toolchain deps directory missing; using stub deps repository.",
            )
            return cc_repo, self.stubs.deps_repository(resolution.name)

        deps_dir = resolution.deps_dir
        deps_build = deps_dir / BUILD_FILE
        if not deps_build.exists():
            raise MissingDescriptorFileError(
                path=str(deps_build), operation="toolchain_repositories"
            )
        deps_links = {BUILD_FILE: deps_build}
        for entry in DEPS_ENTRIES:
            if (deps_dir / entry).exists():
                deps_links[entry] = deps_dir / entry
        deps_repo = RepositorySpec(name=deps_repo_name(resolution.name), links=deps_links, kind="deps")
        return cc_repo, deps_repo

    def library_repositories(
        self, library: str
    ) -> tuple[tuple[RepositorySpec, ...], AliasDescriptor, RepositorySpec]:
        variants: list[RepositorySpec] = []
        for toolchain in self.toolchains:
            artifact = self.libraries.resolve(library, toolchain)
            self.logger.log(
                operation="resolve_library",
                toolchain=toolchain,
                library=library,
                message=(
                    "Using per-toolchain artifact directory."
                    if artifact.suffixed
                    else "Falling back to shared artifact directory."
                ),
                extra={"path": str(artifact.path)},
            )
            variants.append(self.libraries.repository(artifact))
        alias = self.aliases.generate(library, self.toolchains, self.default_toolchain)
        return tuple(variants), alias, self.aliases.render(alias)

    def run(self) -> RepositoryPlan:
        plan = RepositoryPlan(
            default_toolchain=self.default_toolchain,
            marker=self.catalog.marker(),
        )
        failures: dict[str, NixccError] = {}
        present = self.catalog.toolchain_names()

        for name in self.toolchains:
            try:
                resolution = self.resolve_toolchain(name, present)
                repositories = self.toolchain_repositories(resolution)
            except NixccError as exc:
                self.logger.log(
                    operation="run",
                    toolchain=name,
                    level="error",
                    message=str(exc),
                    extra={"code": exc.code},
                )
                failures[name] = exc
                continue
            plan.toolchains[name] = resolution
            for repository in repositories:
                plan.repositories[repository.name] = repository

        if self.packages:
            # A missing libs/ directory is a catalog error, not a missing library
            self.catalog.library_names()
        for library in self.packages:
            variants, alias, alias_repo = self.library_repositories(library)
            for repository in variants:
                plan.repositories[repository.name] = repository
            plan.aliases[library] = alias
            plan.repositories[alias_repo.name] = alias_repo

        if failures:
            raise ResolutionError(failures, operation="resolve_repositories", partial=plan)
        return plan


def plan_repositories(
    catalog: PathCatalog,
    *,
    toolchains: Sequence[str],
    packages: Sequence[str] = (),
    switch_hint: str = DEFAULT_SWITCH_HINT,
    logger: StructuredLogger | None = None,
) -> RepositoryPlan:
    resolution_pass = ResolutionPass(
        catalog,
        toolchains=toolchains,
        packages=packages,
        switch_hint=switch_hint,
        logger=logger,
    )
    return resolution_pass.run()
